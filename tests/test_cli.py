"""Tests for the command line interface."""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from typer.testing import CliRunner

from feed_relay.adapters.llm import ModelClient
from feed_relay.adapters.notifications import MatrixNotifier, TelegramNotifier
from feed_relay.cli import app, build_service
from feed_relay.config import Settings
from feed_relay.core import Category, FeedSourceError, RelayMode
from feed_relay.use_cases import DigestDelivery, DirectDelivery


runner = CliRunner()

BASE_ENV = {
    "MINIFLUX_URL": "rss.example.com",
    "MINIFLUX_TOKEN": "mf-token",
    "MATRIX_URL": "matrix.example.com",
    "MATRIX_TOKEN": "mx-token",
    "MATRIX_ROOM": "!room",
}


@pytest.fixture
def settings() -> Settings:
    settings = Settings()
    settings.miniflux.url = "rss.example.com"
    settings.miniflux.token = "mf-token"
    settings.matrix.url = "matrix.example.com"
    settings.matrix.token = "mx-token"
    settings.matrix.room = "!room"
    settings.telegram.token = "tg-token"
    settings.telegram.chat_id = "123"
    return settings


def test_build_service_direct(settings: Settings) -> None:
    """Test direct mode wiring with both destinations."""
    settings.relay.limit = 5
    service = build_service(settings)

    assert isinstance(service.strategy, DirectDelivery)
    assert [type(s) for s in service.strategy.sinks] == [MatrixNotifier, TelegramNotifier]
    assert service.limit == 5
    assert service.interval == 1800


def test_build_service_digest(settings: Settings) -> None:
    """Test digest mode wiring uses the model client."""
    settings.relay.mode = RelayMode.DIGEST
    settings.relay.no_news_message = "Nada"
    service = build_service(settings)

    assert isinstance(service.strategy, DigestDelivery)
    assert isinstance(service.strategy.summarizer, ModelClient)
    assert service.strategy.no_news_message == "Nada"


def test_run_once(tmp_path: Path) -> None:
    """Test --once runs a single cycle."""
    service = MagicMock()
    service.run_forever = AsyncMock()

    with patch("feed_relay.cli.setup_logging"), patch("feed_relay.cli.build_service", return_value=service) as mock_build:
        result = runner.invoke(
            app, ["run", "--once", "--config", str(tmp_path / "none.yaml")], env=BASE_ENV
        )

    assert result.exit_code == 0, result.output
    service.run_forever.assert_awaited_once_with(max_cycles=1)
    assert mock_build.call_args.args[0].mode == RelayMode.DIRECT


def test_run_mode_override(tmp_path: Path) -> None:
    """Test --mode digest requires model settings."""
    with patch("feed_relay.cli.setup_logging"), patch("feed_relay.cli.build_service") as mock_build:
        result = runner.invoke(
            app,
            ["run", "--once", "--mode", "digest", "--config", str(tmp_path / "none.yaml")],
            env=BASE_ENV,
        )

    assert result.exit_code == 1
    mock_build.assert_not_called()


def test_run_missing_configuration(tmp_path: Path) -> None:
    """Test missing mandatory settings exit with status 1."""
    env = {name: "" for name in BASE_ENV}

    with patch("feed_relay.cli.setup_logging"), patch("feed_relay.cli.build_service") as mock_build:
        result = runner.invoke(app, ["run", "--config", str(tmp_path / "none.yaml")], env=env)

    assert result.exit_code == 1
    mock_build.assert_not_called()


def test_categories(tmp_path: Path) -> None:
    """Test categories are printed one per line."""
    found = [Category(id=1, title="Tech"), Category(id=2, title="News")]

    with patch("feed_relay.cli.setup_logging"), patch(
        "feed_relay.cli.MinifluxSource.list_categories", new=AsyncMock(return_value=found)
    ):
        result = runner.invoke(app, ["categories", "--config", str(tmp_path / "none.yaml")], env=BASE_ENV)

    assert result.exit_code == 0, result.output
    assert "1\tTech" in result.output
    assert "2\tNews" in result.output


def test_categories_error(tmp_path: Path) -> None:
    """Test a failing API call exits with status 1."""
    with patch("feed_relay.cli.setup_logging"), patch(
        "feed_relay.cli.MinifluxSource.list_categories",
        new=AsyncMock(side_effect=FeedSourceError("down", status_code=500)),
    ):
        result = runner.invoke(app, ["categories", "--config", str(tmp_path / "none.yaml")], env=BASE_ENV)

    assert result.exit_code == 1
