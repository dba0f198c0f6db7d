"""Plain-text helpers shared by formatters and adapters."""

import re

from bs4 import BeautifulSoup


_BLANK_LINES = re.compile(r"\n{3,}")
_BLOCK_TAGS = [
    "p", "div", "br", "li", "tr", "pre", "blockquote", "section", "article",
    "h1", "h2", "h3", "h4", "h5", "h6",
]


def html_to_text(html: str) -> str:
    """Reduce an HTML fragment to readable plain text, one line per block."""
    if not html:
        return ""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style"]):
        tag.decompose()
    for tag in soup.find_all(_BLOCK_TAGS):
        tag.insert_after("\n")
    lines = [" ".join(line.split()) for line in soup.get_text().splitlines()]
    return _BLANK_LINES.sub("\n\n", "\n".join(lines)).strip()


def truncate(text: str, limit: int) -> str:
    """Cut text to ``limit`` characters, marking the cut with an ellipsis."""
    if len(text) <= limit:
        return text
    return text[: max(limit - 1, 0)].rstrip() + "…"
