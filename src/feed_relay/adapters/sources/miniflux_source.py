"""Miniflux feed source."""

from typing import Any, Optional, Sequence

import httpx
from loguru import logger

from feed_relay.core import Category, Entry, FeedSource, FeedSourceError


class MinifluxSource(FeedSource):
    """Unread queue backed by the Miniflux v1 API."""

    name = "Miniflux"

    def __init__(self, url: str, token: str, timeout: float = 30.0) -> None:
        """Initialize Miniflux source.

        Args:
            url: Miniflux host or base URL. ``https://`` is assumed without a scheme.
            token: API token sent as ``X-Auth-Token``.
            timeout: Per-request timeout in seconds.
        """
        if "://" not in url:
            url = f"https://{url}"
        self.base_url = url.rstrip("/")
        self.token = token
        self.timeout = timeout

    async def refresh_feeds(self) -> None:
        """Trigger a refresh of every feed."""
        await self._request("PUT", "/v1/feeds/refresh")
        logger.debug("All feeds refreshed")

    async def list_unread(
        self, limit: Optional[int] = None, category_id: Optional[int] = None
    ) -> list[Entry]:
        """List unread entries, optionally capped and scoped to a category."""
        params: dict[str, Any] = {"status": "unread"}
        if limit is not None:
            params["limit"] = limit

        path = "/v1/entries" if category_id is None else f"/v1/categories/{category_id}/entries"
        data = await self._request("GET", path, params=params)

        raw_entries = data.get("entries") if isinstance(data, dict) else None
        if not isinstance(raw_entries, list):
            raise FeedSourceError("Miniflux response has no 'entries' list", body=str(data)[:500])

        entries: list[Entry] = []
        for raw in raw_entries:
            if not isinstance(raw, dict):
                logger.warning(f"Skipping non-object entry record: {raw!r}")
                continue
            try:
                entries.append(Entry.from_api(raw))
            except ValueError as e:
                logger.warning(f"Skipping entry that can never be marked read: {e}")

        logger.debug(f"Fetched {len(entries)} unread entries")
        return entries

    async def fetch_full_content(self, entry_id: int) -> str:
        """Fetch the rendered full content of an entry."""
        data = await self._request("GET", f"/v1/entries/{entry_id}/fetch-content")
        content = data.get("content") if isinstance(data, dict) else None
        return content if isinstance(content, str) else ""

    async def mark_read(self, entry_ids: Sequence[int]) -> None:
        """Mark entries as read. Duplicates are collapsed, an empty set is a no-op."""
        ids = list(dict.fromkeys(entry_ids))
        if not ids:
            return

        logger.debug(f"Marking entries as read: {ids}")
        await self._request("PUT", "/v1/entries", json={"entry_ids": ids, "status": "read"})

    async def list_categories(self) -> list[Category]:
        """List feed categories."""
        data = await self._request("GET", "/v1/categories")
        if not isinstance(data, list):
            raise FeedSourceError("Miniflux categories response is not a list", body=str(data)[:500])

        return [
            Category(id=raw["id"], title=str(raw.get("title") or ""))
            for raw in data
            if isinstance(raw, dict) and isinstance(raw.get("id"), int)
        ]

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        """Send a request and decode the JSON body.

        Raises:
            FeedSourceError: On transport failure, non-2xx status or undecodable JSON.
        """
        url = f"{self.base_url}{path}"

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.request(
                    method, url, headers={"X-Auth-Token": self.token}, **kwargs
                )
            except httpx.RequestError as e:
                raise FeedSourceError(f"Miniflux request {method} {path} failed: {e}") from e

        if not 200 <= response.status_code < 300:
            logger.debug(f"Miniflux API error ({method} {path}) - Status: {response.status_code}, Body: {response.text}")
            raise FeedSourceError(
                f"Miniflux API error on {method} {path}",
                status_code=response.status_code,
                body=response.text,
            )

        if response.status_code == 204 or not response.content:
            return None

        try:
            return response.json()
        except ValueError as e:
            raise FeedSourceError(
                f"Miniflux returned invalid JSON on {method} {path}",
                status_code=response.status_code,
                body=response.text,
            ) from e
