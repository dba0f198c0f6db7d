"""Configuration management."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from feed_relay.core.entities import RelayMode
from feed_relay.core.errors import ConfigError


DEFAULT_INTERVAL = 1800


@dataclass
class MinifluxConfig:
    """Feed source settings."""
    url: str = ""
    token: str = ""


@dataclass
class MatrixConfig:
    """Matrix room destination."""
    url: str = ""
    token: str = ""
    room: str = ""

    @property
    def enabled(self) -> bool:
        return bool(self.url or self.token or self.room)


@dataclass
class TelegramConfig:
    """Telegram chat destination."""
    token: str = ""
    chat_id: str = ""
    thread_id: str = "0"
    base_url: str = "https://api.telegram.org"

    @property
    def enabled(self) -> bool:
        return bool(self.token or self.chat_id)


@dataclass
class ModelConfig:
    """Language model settings, used in digest mode only."""
    url: str = ""
    api_key: str = ""
    name: str = ""
    version: str = ""
    description: str = ""
    prompt: str = ""
    max_tokens: int = 0


@dataclass
class RelayConfig:
    """Pipeline settings."""
    mode: RelayMode = RelayMode.DIRECT
    interval: int = DEFAULT_INTERVAL
    limit: Optional[int] = None
    category_id: Optional[int] = None
    no_news_message: str = "No new items"


@dataclass
class LoggingConfig:
    """Logging settings."""
    level: str = "INFO"
    file: Optional[Path] = None
    rotation: str = "00:00"
    retention: str = "30 days"


@dataclass
class Settings:
    """Application settings."""

    miniflux: MinifluxConfig = field(default_factory=MinifluxConfig)
    matrix: MatrixConfig = field(default_factory=MatrixConfig)
    telegram: TelegramConfig = field(default_factory=TelegramConfig)
    model: ModelConfig = field(default_factory=ModelConfig)
    relay: RelayConfig = field(default_factory=RelayConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def mode(self) -> RelayMode:
        return self.relay.mode

    @property
    def interval(self) -> int:
        return self.relay.interval

    def validate(self) -> None:
        """Check mandatory values, reporting every missing one at once.

        Raises:
            ConfigError: If anything mandatory is missing.
        """
        missing: list[str] = []

        if not self.miniflux.url:
            missing.append("MINIFLUX_URL")
        if not self.miniflux.token:
            missing.append("MINIFLUX_TOKEN")

        if self.matrix.enabled:
            for name, value in (
                ("MATRIX_URL", self.matrix.url),
                ("MATRIX_TOKEN", self.matrix.token),
                ("MATRIX_ROOM", self.matrix.room),
            ):
                if not value:
                    missing.append(name)

        if self.telegram.enabled:
            for name, value in (
                ("TELEGRAM_TOKEN", self.telegram.token),
                ("TELEGRAM_CHAT_ID", self.telegram.chat_id),
            ):
                if not value:
                    missing.append(name)

        if not self.matrix.enabled and not self.telegram.enabled:
            missing.append("MATRIX_URL/MATRIX_TOKEN/MATRIX_ROOM or TELEGRAM_TOKEN/TELEGRAM_CHAT_ID")

        if self.relay.mode == RelayMode.DIGEST:
            for name, value in (
                ("MODEL_URL", self.model.url),
                ("MODEL_API_KEY", self.model.api_key),
                ("MODEL_NAME", self.model.name),
                ("MODEL_VERSION", self.model.version),
                ("MODEL_DESCRIPTION", self.model.description),
                ("MODEL_PROMPT", self.model.prompt),
            ):
                if not value:
                    missing.append(name)
            if self.model.max_tokens <= 0:
                missing.append("MAX_TOKENS")

        if missing:
            raise ConfigError(f"Missing mandatory configuration: {', '.join(missing)}")

        if self.relay.interval <= 0:
            raise ConfigError(f"Polling interval must be positive, got {self.relay.interval}")


def load_config(config_path: Path = Path("config.yaml")) -> dict:
    """Load configuration from YAML file."""
    if not config_path.exists():
        return {}

    with open(config_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ConfigError(f"{config_path} must contain a mapping at the top level")
    return data


def parse_mode(value: Any) -> RelayMode:
    """Parse a relay mode name."""
    try:
        return RelayMode(str(value).strip().lower())
    except ValueError as e:
        choices = ", ".join(m.value for m in RelayMode)
        raise ConfigError(f"Unknown relay mode {value!r}, expected one of: {choices}") from e


def _parse_int(name: str, value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{name} must be an integer, got {value!r}") from e


def _parse_interval(value: Any) -> int:
    # Unparseable or non-positive intervals fall back to the default
    try:
        interval = int(value)
    except (TypeError, ValueError):
        return DEFAULT_INTERVAL
    return interval if interval > 0 else DEFAULT_INTERVAL


def _apply_section(section: object, values: Any) -> None:
    if not isinstance(values, dict):
        return
    for key, value in values.items():
        if hasattr(section, key):
            setattr(section, key, value)


def get_settings(config_path: Path = Path("config.yaml")) -> Settings:
    """Get application settings from YAML config and environment."""
    config = load_config(config_path)
    settings = Settings()

    # Apply YAML config
    _apply_section(settings.miniflux, config.get("miniflux"))
    _apply_section(settings.matrix, config.get("matrix"))
    _apply_section(settings.telegram, config.get("telegram"))
    _apply_section(settings.model, config.get("model"))
    _apply_section(settings.relay, config.get("relay"))
    _apply_section(settings.logging, config.get("logging"))

    # Environment overrides
    env_strings = {
        "MINIFLUX_URL": (settings.miniflux, "url"),
        "MINIFLUX_TOKEN": (settings.miniflux, "token"),
        "MATRIX_URL": (settings.matrix, "url"),
        "MATRIX_TOKEN": (settings.matrix, "token"),
        "MATRIX_ROOM": (settings.matrix, "room"),
        "TELEGRAM_TOKEN": (settings.telegram, "token"),
        "TELEGRAM_CHAT_ID": (settings.telegram, "chat_id"),
        "TELEGRAM_THREAD_ID": (settings.telegram, "thread_id"),
        "MODEL_URL": (settings.model, "url"),
        "MODEL_API_KEY": (settings.model, "api_key"),
        "MODEL_NAME": (settings.model, "name"),
        "MODEL_VERSION": (settings.model, "version"),
        "MODEL_DESCRIPTION": (settings.model, "description"),
        "MODEL_PROMPT": (settings.model, "prompt"),
        "LOG_LEVEL": (settings.logging, "level"),
    }
    for env_name, (section, attr) in env_strings.items():
        value = os.getenv(env_name)
        if value:
            setattr(section, attr, value)

    if os.getenv("MAX_TOKENS"):
        settings.model.max_tokens = os.environ["MAX_TOKENS"]
    if os.getenv("SLEEP_TIME"):
        settings.relay.interval = os.environ["SLEEP_TIME"]
    if os.getenv("RELAY_MODE"):
        settings.relay.mode = os.environ["RELAY_MODE"]
    if os.getenv("ENTRIES_LIMIT"):
        settings.relay.limit = os.environ["ENTRIES_LIMIT"]
    if os.getenv("MINIFLUX_CATEGORY"):
        settings.relay.category_id = os.environ["MINIFLUX_CATEGORY"]
    if os.getenv("LOG_FILE"):
        settings.logging.file = os.environ["LOG_FILE"]

    # Normalize types coming from YAML or the environment
    settings.relay.mode = parse_mode(settings.relay.mode)
    settings.relay.interval = _parse_interval(settings.relay.interval)
    settings.model.max_tokens = _parse_int("MAX_TOKENS", settings.model.max_tokens or 0)
    if settings.relay.limit is not None:
        settings.relay.limit = _parse_int("ENTRIES_LIMIT", settings.relay.limit)
    if settings.relay.category_id is not None:
        settings.relay.category_id = _parse_int("MINIFLUX_CATEGORY", settings.relay.category_id)
    if settings.logging.file is not None:
        settings.logging.file = Path(settings.logging.file)
    settings.telegram.thread_id = str(settings.telegram.thread_id or "0")
    settings.telegram.chat_id = str(settings.telegram.chat_id or "")

    return settings
