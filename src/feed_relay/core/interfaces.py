"""Core interfaces for adapters."""

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from feed_relay.core.entities import Category, DigestItem, Entry


class FeedSource(ABC):
    """Interface for the feed aggregator holding the unread queue."""

    @abstractmethod
    async def refresh_feeds(self) -> None:
        """Ask the aggregator to refresh all feeds."""
        pass

    @abstractmethod
    async def list_unread(
        self, limit: Optional[int] = None, category_id: Optional[int] = None
    ) -> list[Entry]:
        """List unread entries in the order the aggregator returns them."""
        pass

    @abstractmethod
    async def fetch_full_content(self, entry_id: int) -> str:
        """Fetch the rendered full content of an entry."""
        pass

    @abstractmethod
    async def mark_read(self, entry_ids: Sequence[int]) -> None:
        """Mark the given entries as read."""
        pass

    @abstractmethod
    async def list_categories(self) -> list[Category]:
        """List feed categories."""
        pass


class EntryFormatter(ABC):
    """Interface for rendering entries into destination markup."""

    @abstractmethod
    def format_entry(self, entry: Entry, full_content: str) -> str:
        """Render one self-contained message for a single entry."""
        pass

    @abstractmethod
    def format_digest(self, items: Sequence[DigestItem]) -> str:
        """Render one combined message for all digest items."""
        pass

    @abstractmethod
    def format_notice(self, text: str) -> str:
        """Render a fixed plain-text notice."""
        pass


class ChatSink(ABC):
    """Interface for a chat destination."""

    name: str = "chat"

    @property
    @abstractmethod
    def formatter(self) -> EntryFormatter:
        """Formatter producing this destination's markup."""
        pass

    @abstractmethod
    async def deliver(self, message: str) -> str:
        """Deliver a formatted message.

        Returns:
            Raw response body, for diagnostics only.

        Raises:
            DeliveryError: If the destination did not accept the message.
        """
        pass


class Summarizer(ABC):
    """Interface for the language model producing digests."""

    @abstractmethod
    async def summarize(self, entries: Sequence[Entry]) -> str:
        """Return the model's free-form text for a batch of entries."""
        pass
