"""Logging setup."""

import sys

from loguru import logger

from feed_relay.config import LoggingConfig


LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} | {message}"


def setup_logging(config: LoggingConfig) -> None:
    """Configure loguru sinks: stderr always, a rotating file when configured."""
    logger.remove()
    logger.add(sys.stderr, level=config.level.upper(), format=LOG_FORMAT)

    if config.file:
        config.file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            config.file,
            rotation=config.rotation,
            retention=config.retention,
            compression="zip",
            encoding="utf-8",
            level=config.level.upper(),
            format=LOG_FORMAT,
            enqueue=True,
        )

    logger.debug(f"Logging configured at level {config.level.upper()}")
