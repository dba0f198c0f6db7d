"""Parsing of model output into digest items."""

import json
import re
from typing import Any

from feed_relay.core.entities import DigestItem
from feed_relay.core.errors import DigestParseError


def fix_json(text: str) -> str:
    """Try to fix common JSON issues."""
    # Remove trailing commas before } or ]
    return re.sub(r',(\s*[}\]])', r'\1', text)


def extract_json(text: str) -> str:
    """Extract JSON from markdown code block or raw text."""
    # Strategy 1: JSON inside a markdown code block
    code_block_match = re.search(r'```(?:json)?\s*\n(.*?)\n```', text, re.DOTALL)
    if code_block_match:
        return fix_json(code_block_match.group(1).strip())

    stripped = text.strip()

    # Strategy 2: the whole payload is JSON
    candidate = fix_json(stripped)
    try:
        json.loads(candidate)
        return candidate
    except json.JSONDecodeError:
        pass

    # Strategy 3: outermost object surrounded by prose
    start = stripped.find("{")
    end = stripped.rfind("}")
    if start != -1 and end > start:
        candidate = fix_json(stripped[start:end + 1])
        try:
            json.loads(candidate)
            return candidate
        except json.JSONDecodeError:
            pass

    # Strategy 4: return as is (last resort)
    return fix_json(stripped)


def parse_digest(text: str) -> list[DigestItem]:
    """Parse model output shaped like ``{"news": [{url, title, summary}, ...]}``.

    An empty ``news`` list is a valid digest with nothing in it.

    Raises:
        DigestParseError: If the text is not JSON, is not an object, or has
            no ``news`` list.
    """
    json_text = extract_json(text)

    try:
        payload: Any = json.loads(json_text)
    except json.JSONDecodeError as e:
        raise DigestParseError(f"Model output is not valid JSON: {e}") from e

    if not isinstance(payload, dict):
        raise DigestParseError(f"Model output is {type(payload).__name__}, expected object")

    if "news" not in payload:
        raise DigestParseError("Model output has no 'news' key")

    news = payload["news"]
    if not isinstance(news, list):
        raise DigestParseError(f"'news' is {type(news).__name__}, expected list")

    items: list[DigestItem] = []
    for raw in news:
        if not isinstance(raw, dict):
            continue
        items.append(DigestItem(
            url=str(raw.get("url") or ""),
            title=str(raw.get("title") or ""),
            summary=str(raw.get("summary") or ""),
        ))
    return items
