"""Language model client producing digests."""

import json
from typing import Any, Sequence

import httpx
from loguru import logger

from feed_relay.adapters.formatting.text import html_to_text, truncate
from feed_relay.config import ModelConfig
from feed_relay.core import Entry, Summarizer, SummarizerError


class ModelClient(Summarizer):
    """Messages-API client that turns a batch of entries into a digest."""

    def __init__(self, config: ModelConfig, resume_length: int = 4000, timeout: float = 120.0) -> None:
        self.url = config.url
        self.api_key = config.api_key
        self.model = config.name
        self.version = config.version
        self.description = config.description
        self.prompt = config.prompt
        self.max_tokens = config.max_tokens
        self.resume_length = resume_length
        self.timeout = timeout

    def build_batch(self, entries: Sequence[Entry]) -> list[dict[str, str]]:
        """Serialize entries into the records the model reads."""
        return [
            {
                "url": entry.url,
                "title": entry.title,
                "feed_title": entry.feed_title,
                "published_at": entry.published_at,
                "author": entry.author,
                "resume": truncate(html_to_text(entry.content), self.resume_length),
            }
            for entry in entries
        ]

    def build_request(self, entries: Sequence[Entry]) -> dict[str, Any]:
        """Build the request body for a batch."""
        batch = json.dumps(self.build_batch(entries), ensure_ascii=False, indent=2)
        return {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "system": self.prompt,
            "messages": [
                {"role": "user", "content": f"{self.description}\n\n{batch}"}
            ],
        }

    async def summarize(self, entries: Sequence[Entry]) -> str:
        """Ask the model for a digest of the batch and return its text.

        Raises:
            SummarizerError: On transport failure, non-2xx status or a response
                without text content.
        """
        logger.info(f"Summarizing {len(entries)} entries with {self.model}")

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.post(
                    self.url,
                    headers={
                        "x-api-key": self.api_key,
                        "anthropic-version": self.version,
                        "content-type": "application/json",
                    },
                    json=self.build_request(entries),
                )
            except httpx.RequestError as e:
                raise SummarizerError(f"Model request failed: {e}") from e

        if not 200 <= response.status_code < 300:
            raise SummarizerError(
                "Model API error",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            data = response.json()
            text = data["content"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise SummarizerError(
                "Model response has no text content",
                status_code=response.status_code,
                body=response.text,
            ) from e

        if not isinstance(text, str):
            raise SummarizerError("Model text content is not a string", body=str(text)[:500])

        logger.debug(f"Model response: {text[:500]}")
        return text
