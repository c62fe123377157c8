"""Unit tests for HackerNews source connector.

Tests use mocked HTTP responses to avoid external API calls.
"""

from datetime import UTC, datetime
from unittest.mock import MagicMock

import httpx
import pytest

from intake.config.sources import HackerNewsConfig
from intake.core.exceptions import SourceFetchError, ValidationError
from intake.infrastructure.http_client import HTTPClient
from intake.services.collector.base import ProjectDetails, RawBatch
from intake.services.collector.sources.hackernews import HackerNewsSource


@pytest.fixture
def hn_source(mock_http_client: HTTPClient) -> HackerNewsSource:
    """Create HackerNews source with test config."""
    config = HackerNewsConfig(limit=10, min_points=20, query="ai")
    return HackerNewsSource(config=config, http_client=mock_http_client)


@pytest.fixture
def mock_hit() -> dict:
    """Create a mock Algolia hit for a Show HN post."""
    return {
        "objectID": "40001",
        "title": "Show HN: Ledgerly - open source bookkeeping for DAOs",
        "url": "https://ledgerly.dev",
        "author": "mira",
        "points": 120,
        "num_comments": 45,
        "created_at_i": 1767225600,  # 2026-01-01T00:00:00Z
        "story_text": "We built a ledger for on-chain organizations.",
        "_tags": ["story", "show_hn", "author_mira", "story_40001"],
    }


class TestHackerNewsFetch:
    """Tests for HackerNewsSource.fetch."""

    @pytest.mark.asyncio
    async def test_fetch_sends_filters(
        self, hn_source, mock_http_client, create_mock_response, mock_hit
    ):
        """The request carries tags, page size, points filter and query."""
        mock_http_client.get.return_value = create_mock_response({"hits": [mock_hit]})

        batch = await hn_source.fetch()

        assert batch.source == "hackernews"
        assert batch.payload == [mock_hit]
        url = mock_http_client.get.call_args.args[0]
        params = mock_http_client.get.call_args.kwargs["params"]
        assert url.endswith("/search_by_date")
        assert params == {
            "tags": "show_hn",
            "hitsPerPage": 10,
            "numericFilters": "points>=20",
            "query": "ai",
        }

    @pytest.mark.asyncio
    async def test_query_omitted_when_empty(
        self, mock_http_client, create_mock_response
    ):
        """No query parameter is sent without a configured query."""
        source = HackerNewsSource(HackerNewsConfig(), http_client=mock_http_client)
        mock_http_client.get.return_value = create_mock_response({"hits": []})

        await source.fetch()

        assert "query" not in mock_http_client.get.call_args.kwargs["params"]

    @pytest.mark.asyncio
    async def test_http_error(self, hn_source, mock_http_client, create_mock_response):
        """HTTP errors become SourceFetchError."""
        mock_http_client.get.return_value = create_mock_response(status_code=503)

        with pytest.raises(SourceFetchError, match="hackernews: HTTP 503"):
            await hn_source.fetch()

    @pytest.mark.asyncio
    async def test_invalid_json(self, hn_source, mock_http_client, create_mock_response):
        """Unparseable bodies become SourceFetchError."""
        mock_http_client.get.return_value = create_mock_response(
            json_error=ValueError("Expecting value")
        )

        with pytest.raises(SourceFetchError, match="invalid JSON"):
            await hn_source.fetch()

    @pytest.mark.asyncio
    async def test_missing_hits(self, hn_source, mock_http_client, create_mock_response):
        """A body without a hits list is rejected."""
        mock_http_client.get.return_value = create_mock_response({"message": "busy"})

        with pytest.raises(SourceFetchError, match="hits"):
            await hn_source.fetch()

    @pytest.mark.asyncio
    async def test_transport_error_propagates(self, hn_source, mock_http_client):
        """Transport errors propagate so the dispatcher can retry them."""
        mock_http_client.get.side_effect = httpx.ConnectError("refused")

        with pytest.raises(httpx.ConnectError):
            await hn_source.fetch()


class TestHackerNewsTransform:
    """Tests for HackerNewsSource.transform."""

    def test_transform_hit(self, hn_source, mock_hit):
        """A Show HN hit becomes a project item."""
        (item,) = hn_source.transform(RawBatch(source="hackernews", payload=[mock_hit]))

        assert item.title == "Ledgerly - open source bookkeeping for DAOs"
        assert item.url == "https://ledgerly.dev"
        assert item.source == "hackernews"
        assert item.published_at == datetime(2026, 1, 1, tzinfo=UTC)
        assert item.tags == frozenset({"story", "show_hn"})
        assert isinstance(item.details, ProjectDetails)
        assert item.details.founders == ("mira",)
        assert item.details.metrics == {"points": 120, "comments": 45}
        assert item.details.launch_date == item.published_at

    def test_missing_url_falls_back_to_discussion(self, hn_source, mock_hit):
        """Posts without a URL link to the HN discussion."""
        mock_hit["url"] = None

        (item,) = hn_source.transform(RawBatch(source="hackernews", payload=[mock_hit]))

        assert item.url == "https://news.ycombinator.com/item?id=40001"

    def test_untitled_hits_skipped(self, hn_source, mock_hit):
        """Hits without a title are dropped."""
        mock_hit["title"] = ""

        assert hn_source.transform(RawBatch(source="hackernews", payload=[mock_hit])) == []

    def test_missing_object_id(self, hn_source, mock_hit):
        """Hits without objectID fail validation."""
        del mock_hit["objectID"]

        with pytest.raises(ValidationError):
            hn_source.transform(RawBatch(source="hackernews", payload=[mock_hit]))

    def test_iso_created_at(self, hn_source, mock_hit):
        """created_at is used when the epoch field is absent."""
        del mock_hit["created_at_i"]
        mock_hit["created_at"] = "2026-02-01T08:00:00Z"

        (item,) = hn_source.transform(RawBatch(source="hackernews", payload=[mock_hit]))

        assert item.published_at == datetime(2026, 2, 1, 8, tzinfo=UTC)


class TestHackerNewsHealthCheck:
    """Tests for HackerNewsSource.health_check."""

    @pytest.mark.asyncio
    async def test_healthy(self, hn_source, mock_http_client):
        """A 200 response means healthy."""
        mock_http_client.get.return_value = MagicMock(status_code=200)

        assert await hn_source.health_check() is True

    @pytest.mark.asyncio
    async def test_unreachable(self, hn_source, mock_http_client):
        """Transport errors mean unhealthy."""
        mock_http_client.get.side_effect = httpx.ConnectError("refused")

        assert await hn_source.health_check() is False
