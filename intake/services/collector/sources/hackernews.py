"""Hacker News source connector.

Searches launch posts through the Algolia HN Search API.
https://hn.algolia.com/api
"""

from typing import Any

import httpx

from intake.config.sources import HackerNewsConfig
from intake.core.exceptions import SourceFetchError, ValidationError
from intake.core.logging import get_logger
from intake.services.collector.base import (
    BaseSource,
    ContentItem,
    ProjectDetails,
    RawBatch,
    parse_datetime,
)

logger = get_logger(__name__)

HN_ITEM_URL = "https://news.ycombinator.com/item?id={id}"
_TITLE_PREFIXES = ("show hn:", "launch hn:")


class HackerNewsSource(BaseSource[HackerNewsConfig]):
    """Hacker News connector producing projects from Show HN posts.

    Config options:
        tags: Algolia tag filter (default: show_hn)
        limit: Maximum hits to fetch (default: 20)
        min_points: Minimum story points (default: 5)
    """

    name = "hackernews"

    @classmethod
    def build_config(cls, overrides: dict[str, Any]) -> HackerNewsConfig:
        """Build HackerNewsConfig from overrides.

        Args:
            overrides: Any HackerNewsConfig field

        Returns:
            HackerNewsConfig instance
        """
        return HackerNewsConfig(**overrides)

    async def fetch(self) -> RawBatch:
        """Fetch matching stories from Algolia.

        Returns:
            Raw batch of Algolia hits

        Raises:
            SourceFetchError: On HTTP errors or malformed responses
        """
        cfg = self._config
        params: dict[str, Any] = {
            "tags": cfg.tags,
            "hitsPerPage": cfg.limit,
            "numericFilters": f"points>={cfg.min_points}",
        }
        if cfg.query:
            params["query"] = cfg.query

        logger.info("Fetching from Hacker News", tags=cfg.tags, limit=cfg.limit)
        try:
            response = await self._http_client.get(
                f"{cfg.base_url}/search_by_date", params=params, timeout=cfg.request_timeout
            )
            response.raise_for_status()
            hits = response.json().get("hits")
        except httpx.HTTPStatusError as e:
            raise SourceFetchError(self.name, f"HTTP {e.response.status_code}") from e
        except ValueError as e:
            raise SourceFetchError(self.name, f"invalid JSON: {e}") from e

        if not isinstance(hits, list):
            raise SourceFetchError(self.name, "response has no 'hits' list")
        return RawBatch(source=self.name, payload=hits)

    def transform(self, batch: RawBatch) -> list[ContentItem]:
        """Convert Algolia hits into project items.

        Args:
            batch: Batch from fetch()

        Returns:
            Project items; hits without a title are skipped
        """
        items = []
        for hit in batch.payload:
            item = self._to_item(hit)
            if item is not None:
                items.append(item)
        logger.info("Hacker News transform complete", hits=len(batch.payload), items=len(items))
        return items

    def _to_item(self, hit: dict[str, Any]) -> ContentItem | None:
        if "objectID" not in hit:
            raise ValidationError("objectID", "Algolia hit without objectID")

        title = (hit.get("title") or "").strip()
        if not title:
            logger.debug("Skipping HN hit without title", object_id=hit["objectID"])
            return None
        for prefix in _TITLE_PREFIXES:
            if title.lower().startswith(prefix):
                title = title[len(prefix) :].strip()
                break

        created = parse_datetime(hit.get("created_at_i") or hit.get("created_at"))
        author = hit.get("author")

        return ContentItem(
            title=title,
            description=hit.get("story_text") or "",
            url=hit.get("url") or HN_ITEM_URL.format(id=hit["objectID"]),
            source=self.name,
            published_at=created,
            tags=[t for t in hit.get("_tags", []) if not t.startswith(("author_", "story_"))],
            details=ProjectDetails(
                launch_date=created,
                founders=(author,) if author else (),
                metrics={
                    "points": int(hit.get("points") or 0),
                    "comments": int(hit.get("num_comments") or 0),
                },
            ),
        )

    async def health_check(self) -> bool:
        """Check if the Algolia API is reachable.

        Returns:
            True if API responds successfully
        """
        try:
            response = await self._http_client.get(
                f"{self._config.base_url}/search", params={"hitsPerPage": 1}
            )
            return response.status_code == 200
        except httpx.HTTPError as e:
            logger.warning("HN health check failed", error=str(e))
            return False


__all__ = ["HackerNewsSource"]
