"""Telegram MarkdownV2 formatter."""

import re
from typing import Sequence

from feed_relay.adapters.formatting.text import html_to_text, truncate
from feed_relay.core import DigestItem, Entry, EntryFormatter


TELEGRAM_MESSAGE_LIMIT = 4096

TITLE_LENGTH = 200
META_LENGTH = 100
LINK_URL_LENGTH = 1000

_SPECIAL_CHARS = re.compile(r'([_*\[\]()~`>#+\-=|{}.!\\])')
_URL_SPECIAL_CHARS = re.compile(r'([)\\])')
_PARAGRAPH_END = re.compile(r'(?<=\n\n)')


def escape_markdown(text: str) -> str:
    """Escape text for Telegram MarkdownV2."""
    return _SPECIAL_CHARS.sub(r'\\\1', text)


def escape_markdown_url(url: str) -> str:
    """Escape the URL part of a MarkdownV2 inline link."""
    return _URL_SPECIAL_CHARS.sub(r'\\\1', url)


def split_message(text: str, limit: int = TELEGRAM_MESSAGE_LIMIT) -> list[str]:
    """Split a MarkdownV2 message into parts Telegram accepts.

    Parts break after blank lines, so digest items stay whole. A single
    paragraph longer than ``limit`` is cut without separating an escape
    backslash from the character it escapes.
    """
    if len(text) <= limit:
        return [text]

    parts: list[str] = []
    current = ""
    for block in _PARAGRAPH_END.split(text):
        if len(current) + len(block) <= limit:
            current += block
            continue
        if current:
            parts.append(current)
        while len(block) > limit:
            cut = limit
            piece = block[:cut]
            if (len(piece) - len(piece.rstrip("\\"))) % 2:
                cut -= 1
            parts.append(block[:cut])
            block = block[cut:]
        current = block
    if current:
        parts.append(current)
    return parts


class MarkdownV2Formatter(EntryFormatter):
    """Render entries and digests as Telegram MarkdownV2."""

    def __init__(self, summary_length: int = 500) -> None:
        self.summary_length = summary_length

    def format_entry(self, entry: Entry, full_content: str) -> str:
        """Format a single entry; full content goes in an expandable blockquote."""
        summary = truncate(html_to_text(entry.content), self.summary_length)
        head = (
            f"{self._heading(entry.url, entry.title)}\n"
            f"_{escape_markdown(truncate(entry.feed_title, META_LENGTH))}_"
            f" · {escape_markdown(truncate(entry.author, META_LENGTH))}"
            f" · {escape_markdown(truncate(entry.published_at, META_LENGTH))}\n"
            f"{escape_markdown(summary)}"
        )

        text = html_to_text(full_content)
        if not text:
            return head

        # Escaping and quoting at most double each character
        budget = (TELEGRAM_MESSAGE_LIMIT - len(head) - len("\n\n**>||")) // 2
        if budget <= 0:
            return head
        quoted = "\n>".join(escape_markdown(line) for line in truncate(text, budget).splitlines())
        return f"{head}\n\n**>{quoted}||"

    def format_digest(self, items: Sequence[DigestItem]) -> str:
        """Concatenate all digest items; each item alone fits one Telegram message."""
        parts = []
        for item in items:
            heading = self._heading(item.url, item.title)
            budget = max((TELEGRAM_MESSAGE_LIMIT - len(heading) - len("\n\n\n")) // 2, 0)
            parts.append(f"{heading}\n{escape_markdown(truncate(item.summary, budget))}\n\n")
        return "".join(parts)

    def format_notice(self, text: str) -> str:
        return escape_markdown(text)

    def _heading(self, url: str, title: str) -> str:
        title = escape_markdown(truncate(title, TITLE_LENGTH))
        if not url or len(url) > LINK_URL_LENGTH:
            return f"*{title}*"
        return f"*[{title}]({escape_markdown_url(url)})*"
