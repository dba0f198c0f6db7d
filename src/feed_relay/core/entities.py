"""Core domain entities."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


NO_TITLE = "No title"
NO_URL = "No URL"
NO_CONTENT = "No content"
NO_AUTHOR = "No author"
NO_FEED_TITLE = "No feed title"
NO_PUBLISHED_AT = "No published_at"


class RelayMode(str, Enum):
    """How unread entries are turned into messages."""

    DIRECT = "direct"
    DIGEST = "digest"


def _text(value: Any, placeholder: str) -> str:
    if isinstance(value, str) and value.strip():
        return value
    return placeholder


@dataclass(frozen=True)
class Entry:
    """Unread feed entry as returned by the feed source."""

    id: int
    title: str = NO_TITLE
    url: str = NO_URL
    content: str = NO_CONTENT
    author: str = NO_AUTHOR
    feed_title: str = NO_FEED_TITLE
    published_at: str = NO_PUBLISHED_AT

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Entry":
        """Build an entry from a raw API record.

        Missing or blank text fields degrade to fixed placeholders. The id is
        the only required field.

        Raises:
            ValueError: If the record has no integer id.
        """
        entry_id = data.get("id")
        if isinstance(entry_id, bool) or not isinstance(entry_id, int):
            raise ValueError(f"Entry has no integer id: {entry_id!r}")

        feed = data.get("feed")
        feed_title = feed.get("title") if isinstance(feed, dict) else None

        return cls(
            id=entry_id,
            title=_text(data.get("title"), NO_TITLE),
            url=_text(data.get("url"), NO_URL),
            content=_text(data.get("content"), NO_CONTENT),
            author=_text(data.get("author"), NO_AUTHOR),
            feed_title=_text(feed_title, NO_FEED_TITLE),
            published_at=_text(data.get("published_at"), NO_PUBLISHED_AT),
        )


@dataclass(frozen=True)
class DigestItem:
    """One summarized item of a digest."""

    url: str = ""
    title: str = ""
    summary: str = ""


@dataclass(frozen=True)
class Category:
    """Feed source category."""

    id: int
    title: str


@dataclass
class CycleReport:
    """Entry ids touched by one pipeline cycle."""

    fetched: list[int] = field(default_factory=list)
    delivered: list[int] = field(default_factory=list)
    acknowledged: list[int] = field(default_factory=list)
    failed: list[int] = field(default_factory=list)
    skipped: bool = False
