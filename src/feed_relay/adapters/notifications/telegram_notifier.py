"""Telegram notification adapter."""

import httpx
from loguru import logger

from feed_relay.adapters.formatting import MarkdownV2Formatter
from feed_relay.adapters.formatting.markdown_formatter import split_message
from feed_relay.core import ChatSink, DeliveryError, EntryFormatter


class TelegramNotifier(ChatSink):
    """Send MarkdownV2 messages to a Telegram chat via the Bot API."""

    name = "Telegram"

    def __init__(
        self,
        token: str,
        chat_id: str,
        thread_id: str = "0",
        base_url: str = "https://api.telegram.org",
        timeout: float = 30.0,
    ) -> None:
        self.token = token
        self.chat_id = chat_id
        self.thread_id = thread_id or "0"
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._formatter = MarkdownV2Formatter()

    @property
    def formatter(self) -> EntryFormatter:
        return self._formatter

    async def deliver(self, message: str) -> str:
        """Send a MarkdownV2 message.

        Messages over the Telegram length limit are sent as several parts;
        delivery fails if any part is rejected.

        Returns:
            Raw response body of the last part.

        Raises:
            DeliveryError: On transport failure or non-2xx status.
        """
        parts = split_message(message)
        if len(parts) > 1:
            logger.info(f"Telegram message is {len(message)} characters, sending {len(parts)} parts")

        body = ""
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            for part in parts:
                body = await self._send(client, part)

        logger.debug("Telegram message sent successfully")
        return body

    async def _send(self, client: httpx.AsyncClient, text: str) -> str:
        url = f"{self.base_url}/bot{self.token}/sendMessage"
        payload = {
            "chat_id": self.chat_id,
            "message_thread_id": self.thread_id,
            "text": text,
            "parse_mode": "MarkdownV2",
        }
        logger.debug(f"Sending Telegram message: {text[:200]}")

        try:
            response = await client.post(url, json=payload)
        except httpx.RequestError as e:
            raise DeliveryError(f"Telegram request failed: {e}") from e

        if not 200 <= response.status_code < 300:
            raise DeliveryError(
                "Telegram API error",
                status_code=response.status_code,
                body=response.text,
            )
        return response.text
