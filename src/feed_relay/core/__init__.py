"""Core domain layer."""

from feed_relay.core.digest_parser import parse_digest
from feed_relay.core.entities import Category, CycleReport, DigestItem, Entry, RelayMode
from feed_relay.core.errors import (
    ConfigError,
    DeliveryError,
    DigestParseError,
    FeedSourceError,
    RelayError,
    SummarizerError,
)
from feed_relay.core.interfaces import ChatSink, EntryFormatter, FeedSource, Summarizer

__all__ = [
    "Entry",
    "DigestItem",
    "Category",
    "CycleReport",
    "RelayMode",
    "RelayError",
    "ConfigError",
    "FeedSourceError",
    "DeliveryError",
    "SummarizerError",
    "DigestParseError",
    "FeedSource",
    "ChatSink",
    "EntryFormatter",
    "Summarizer",
    "parse_digest",
]
