"""HTML formatter for room-based chat."""

from html import escape
from typing import Sequence

from feed_relay.adapters.formatting.text import html_to_text, truncate
from feed_relay.core import DigestItem, Entry, EntryFormatter


class HtmlFormatter(EntryFormatter):
    """Render entries and digests as HTML fragments."""

    def __init__(self, summary_length: int = 500) -> None:
        self.summary_length = summary_length

    def format_entry(self, entry: Entry, full_content: str) -> str:
        """Format a single entry with metadata and an expandable full content section."""
        summary = truncate(html_to_text(entry.content), self.summary_length)
        message = (
            f"{self._heading(entry.url, entry.title)}"
            f"<p><em>{escape(entry.feed_title, quote=False)}</em>"
            f" · {escape(entry.author, quote=False)}"
            f" · {escape(entry.published_at, quote=False)}</p>"
            f"<p>{escape(summary, quote=False)}</p>"
        )
        if full_content:
            message += f"<details><summary>Full content</summary>{full_content}</details>"
        return message

    def format_digest(self, items: Sequence[DigestItem]) -> str:
        """Concatenate all digest items into one message."""
        return "".join(
            f"{self._heading(item.url, item.title)}<p>{escape(item.summary, quote=False)}</p><br>"
            for item in items
        )

    def format_notice(self, text: str) -> str:
        return escape(text, quote=False)

    def _heading(self, url: str, title: str) -> str:
        return f'<h3><a href="{escape(url)}">{escape(title, quote=False)}</a></h3>'
