"""Tests for the Miniflux feed source."""

from typing import Any, Optional
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from feed_relay.adapters.sources import MinifluxSource
from feed_relay.core import Category, FeedSourceError


def make_response(status_code: int = 200, payload: Optional[Any] = None, text: str = "") -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    response.content = b"{}" if payload is not None else b""
    response.json.return_value = payload
    return response


@pytest.fixture
def source() -> MinifluxSource:
    return MinifluxSource("rss.example.com", "test_token")


def mock_http(mock_client_class: MagicMock, *responses: MagicMock) -> AsyncMock:
    mock_client = AsyncMock()
    mock_client.__aenter__.return_value = mock_client
    mock_client.request.side_effect = list(responses)
    mock_client_class.return_value = mock_client
    return mock_client


def test_bare_host_gets_https() -> None:
    """Test a bare host is turned into an https base URL."""
    assert MinifluxSource("rss.example.com", "t").base_url == "https://rss.example.com"
    assert MinifluxSource("http://localhost:8080/", "t").base_url == "http://localhost:8080"


@pytest.mark.asyncio
async def test_list_unread(source: MinifluxSource) -> None:
    """Test unread entries are requested and parsed into entities."""
    payload = {
        "total": 2,
        "entries": [
            {
                "id": 1,
                "title": "Test Entry",
                "url": "https://example.com/1",
                "content": "<p>Hello</p>",
                "author": "Ann",
                "feed": {"title": "Example"},
                "published_at": "2025-01-01T10:00:00Z",
            },
            {"id": 2},
        ],
    }

    with patch("httpx.AsyncClient") as mock_client_class:
        mock_client = mock_http(mock_client_class, make_response(200, payload))

        entries = await source.list_unread(limit=10)

        method, url = mock_client.request.call_args.args
        kwargs = mock_client.request.call_args.kwargs
        assert method == "GET"
        assert url == "https://rss.example.com/v1/entries"
        assert kwargs["params"] == {"status": "unread", "limit": 10}
        assert kwargs["headers"] == {"X-Auth-Token": "test_token"}

    assert [e.id for e in entries] == [1, 2]
    assert entries[0].feed_title == "Example"
    assert entries[1].title == "No title"
    assert entries[1].url == "No URL"


@pytest.mark.asyncio
async def test_list_unread_without_limit_uses_category(source: MinifluxSource) -> None:
    """Test the category endpoint is used when a category is given."""
    with patch("httpx.AsyncClient") as mock_client_class:
        mock_client = mock_http(mock_client_class, make_response(200, {"entries": []}))

        entries = await source.list_unread(category_id=4)

        method, url = mock_client.request.call_args.args
        assert url == "https://rss.example.com/v1/categories/4/entries"
        assert mock_client.request.call_args.kwargs["params"] == {"status": "unread"}

    assert entries == []


@pytest.mark.asyncio
async def test_list_unread_skips_records_without_id(source: MinifluxSource) -> None:
    """Test records without an integer id are dropped."""
    payload = {"entries": [{"title": "no id"}, {"id": "7"}, {"id": 8, "title": "ok"}]}

    with patch("httpx.AsyncClient") as mock_client_class:
        mock_http(mock_client_class, make_response(200, payload))
        entries = await source.list_unread()

    assert [e.id for e in entries] == [8]


@pytest.mark.asyncio
async def test_list_unread_unauthorized(source: MinifluxSource) -> None:
    """Test a non-2xx response surfaces as an error with its body."""
    with patch("httpx.AsyncClient") as mock_client_class:
        mock_http(
            mock_client_class,
            make_response(401, {"error_message": "access unauthorized"}, text='{"error_message":"access unauthorized"}'),
        )

        with pytest.raises(FeedSourceError) as exc_info:
            await source.list_unread(limit=10)

    assert exc_info.value.status_code == 401
    assert "access unauthorized" in exc_info.value.body
    assert "Miniflux API error" in str(exc_info.value)


@pytest.mark.asyncio
async def test_network_error(source: MinifluxSource) -> None:
    """Test transport errors are wrapped."""
    with patch("httpx.AsyncClient") as mock_client_class:
        mock_client = mock_http(mock_client_class)
        mock_client.request.side_effect = httpx.ConnectError("connection refused")

        with pytest.raises(FeedSourceError) as exc_info:
            await source.refresh_feeds()

    assert exc_info.value.status_code is None


@pytest.mark.asyncio
async def test_refresh_feeds(source: MinifluxSource) -> None:
    """Test refresh uses PUT on the refresh endpoint."""
    with patch("httpx.AsyncClient") as mock_client_class:
        mock_client = mock_http(mock_client_class, make_response(204))

        await source.refresh_feeds()

        method, url = mock_client.request.call_args.args
        assert method == "PUT"
        assert url == "https://rss.example.com/v1/feeds/refresh"


@pytest.mark.asyncio
async def test_fetch_full_content(source: MinifluxSource) -> None:
    """Test full content is read from the fetch-content endpoint."""
    with patch("httpx.AsyncClient") as mock_client_class:
        mock_client = mock_http(mock_client_class, make_response(200, {"content": "<p>Full</p>"}))

        content = await source.fetch_full_content(42)

        method, url = mock_client.request.call_args.args
        assert url == "https://rss.example.com/v1/entries/42/fetch-content"

    assert content == "<p>Full</p>"


@pytest.mark.asyncio
async def test_mark_read(source: MinifluxSource) -> None:
    """Test mark read sends the exact id set with status read."""
    with patch("httpx.AsyncClient") as mock_client_class:
        mock_client = mock_http(mock_client_class, make_response(204))

        await source.mark_read([123, 124, 123])

        method, url = mock_client.request.call_args.args
        assert method == "PUT"
        assert url == "https://rss.example.com/v1/entries"
        assert mock_client.request.call_args.kwargs["json"] == {
            "entry_ids": [123, 124],
            "status": "read",
        }


@pytest.mark.asyncio
async def test_mark_read_empty_is_noop(source: MinifluxSource) -> None:
    """Test nothing is sent for an empty id set."""
    with patch("httpx.AsyncClient") as mock_client_class:
        await source.mark_read([])

    mock_client_class.assert_not_called()


@pytest.mark.asyncio
async def test_list_categories(source: MinifluxSource) -> None:
    """Test categories are parsed."""
    payload = [{"id": 1, "title": "Tech"}, {"id": 2, "title": "News"}]

    with patch("httpx.AsyncClient") as mock_client_class:
        mock_http(mock_client_class, make_response(200, payload))
        found = await source.list_categories()

    assert found == [Category(id=1, title="Tech"), Category(id=2, title="News")]
