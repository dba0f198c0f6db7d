"""Formatters turning entries and digests into chat markup."""

from feed_relay.adapters.formatting.html_formatter import HtmlFormatter
from feed_relay.adapters.formatting.markdown_formatter import MarkdownV2Formatter

__all__ = ["HtmlFormatter", "MarkdownV2Formatter"]
