"""CLI entry point for feed relay."""

import asyncio
from pathlib import Path
from typing import Optional

import typer
from loguru import logger

from feed_relay.adapters.llm import ModelClient
from feed_relay.adapters.notifications import MatrixNotifier, TelegramNotifier
from feed_relay.adapters.sources import MinifluxSource
from feed_relay.config import Settings, get_settings, parse_mode
from feed_relay.core import ChatSink, ConfigError, RelayError, RelayMode
from feed_relay.logging_config import setup_logging
from feed_relay.use_cases import DeliveryStrategy, DigestDelivery, DirectDelivery, RelayService


app = typer.Typer(help="Relay unread Miniflux entries to Matrix and Telegram.")


def build_sinks(settings: Settings) -> list[ChatSink]:
    """Create one notifier per configured destination."""
    sinks: list[ChatSink] = []
    if settings.matrix.enabled:
        sinks.append(MatrixNotifier(settings.matrix.url, settings.matrix.token, settings.matrix.room))
    if settings.telegram.enabled:
        sinks.append(
            TelegramNotifier(
                token=settings.telegram.token,
                chat_id=settings.telegram.chat_id,
                thread_id=settings.telegram.thread_id,
                base_url=settings.telegram.base_url,
            )
        )
    return sinks


def build_service(settings: Settings) -> RelayService:
    """Construct adapters once and wire them into the pipeline."""
    source = MinifluxSource(settings.miniflux.url, settings.miniflux.token)
    sinks = build_sinks(settings)

    strategy: DeliveryStrategy
    if settings.mode == RelayMode.DIGEST:
        strategy = DigestDelivery(
            feed_source=source,
            sinks=sinks,
            summarizer=ModelClient(settings.model),
            no_news_message=settings.relay.no_news_message,
        )
    else:
        strategy = DirectDelivery(feed_source=source, sinks=sinks)

    return RelayService(
        feed_source=source,
        strategy=strategy,
        interval=settings.interval,
        limit=settings.relay.limit,
        category_id=settings.relay.category_id,
    )


def _load(config: Path, log_level: Optional[str]) -> Settings:
    try:
        settings = get_settings(config)
    except ConfigError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(code=1)

    if log_level:
        settings.logging.level = log_level
    setup_logging(settings.logging)
    return settings


@app.command()
def run(
    config: Path = typer.Option(Path("config.yaml"), "--config", "-c", help="YAML configuration file"),
    once: bool = typer.Option(False, "--once", help="Run a single cycle and exit"),
    mode: Optional[str] = typer.Option(None, "--mode", help="Override relay mode: direct or digest"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Override log level"),
) -> None:
    """Poll unread entries and deliver them until stopped."""
    settings = _load(config, log_level)

    try:
        if mode:
            settings.relay.mode = parse_mode(mode)
        settings.validate()
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        raise typer.Exit(code=1)

    service = build_service(settings)
    logger.info(
        f"Starting relay in {settings.mode.value} mode, "
        f"{len(service.strategy.sinks)} destination(s), interval {settings.interval}s"
    )

    try:
        asyncio.run(service.run_forever(max_cycles=1 if once else None))
    except KeyboardInterrupt:
        logger.info("Stopped")


@app.command()
def categories(
    config: Path = typer.Option(Path("config.yaml"), "--config", "-c", help="YAML configuration file"),
) -> None:
    """List Miniflux categories to pick a MINIFLUX_CATEGORY."""
    settings = _load(config, None)
    if not settings.miniflux.url or not settings.miniflux.token:
        logger.error("Configuration error: MINIFLUX_URL and MINIFLUX_TOKEN are mandatory")
        raise typer.Exit(code=1)

    source = MinifluxSource(settings.miniflux.url, settings.miniflux.token)
    try:
        found = asyncio.run(source.list_categories())
    except RelayError as e:
        logger.error(f"Listing categories failed: {e}")
        raise typer.Exit(code=1)

    for category in found:
        typer.echo(f"{category.id}\t{category.title}")


if __name__ == "__main__":
    app()
