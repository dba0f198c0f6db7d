"""Matrix room notification adapter."""

import time
from urllib.parse import quote, urlparse

import httpx
from loguru import logger

from feed_relay.adapters.formatting import HtmlFormatter
from feed_relay.adapters.formatting.text import html_to_text
from feed_relay.core import ChatSink, DeliveryError, EntryFormatter


class MatrixNotifier(ChatSink):
    """Send HTML messages to a Matrix room."""

    name = "Matrix"

    def __init__(self, server: str, token: str, room: str, timeout: float = 30.0) -> None:
        """Initialize Matrix notifier.

        Args:
            server: Homeserver host or base URL.
            token: Access token.
            room: Room id. The homeserver name is appended unless it already has one.
            timeout: Request timeout in seconds.
        """
        if "://" not in server:
            server = f"https://{server}"
        self.base_url = server.rstrip("/")
        self.server_name = urlparse(self.base_url).netloc
        self.token = token
        self.room = room if ":" in room else f"{room}:{self.server_name}"
        self.timeout = timeout
        self._formatter = HtmlFormatter()

    @property
    def formatter(self) -> EntryFormatter:
        return self._formatter

    def message_url(self, txn_id: str) -> str:
        """Build the room-scoped send URL for a transaction."""
        return (
            f"{self.base_url}/_matrix/client/v3/rooms/{quote(self.room, safe='')}"
            f"/send/m.room.message/{txn_id}"
        )

    async def deliver(self, message: str) -> str:
        """Send an HTML message to the room.

        Returns:
            Raw response body.

        Raises:
            DeliveryError: On transport failure or non-2xx status.
        """
        url = self.message_url(str(time.time_ns()))
        payload = {
            "msgtype": "m.text",
            "format": "org.matrix.custom.html",
            "body": html_to_text(message) or message,
            "formatted_body": message,
        }
        logger.debug(f"Posting to Matrix room {self.room}: {message[:200]}")

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.put(
                    url,
                    headers={"Authorization": f"Bearer {self.token}"},
                    json=payload,
                )
            except httpx.RequestError as e:
                raise DeliveryError(f"Matrix request failed: {e}") from e

        if not 200 <= response.status_code < 300:
            raise DeliveryError(
                "Matrix rejected message",
                status_code=response.status_code,
                body=response.text,
            )

        logger.debug(f"Matrix response: {response.text}")
        return response.text
