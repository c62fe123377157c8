"""Dev.to source connector.

Fetches recent articles per tag through the Forem API.
https://developers.forem.com/api
"""

from typing import Any

import httpx

from intake.config.sources import DevToConfig
from intake.core.exceptions import SourceFetchError, ValidationError
from intake.core.logging import get_logger
from intake.services.collector.base import (
    BaseSource,
    ContentItem,
    RawBatch,
    ResourceDetails,
    parse_datetime,
)

logger = get_logger(__name__)


class DevToSource(BaseSource[DevToConfig]):
    """Dev.to connector producing article resources."""

    name = "devto"

    @classmethod
    def build_config(cls, overrides: dict[str, Any]) -> DevToConfig:
        """Build DevToConfig from overrides.

        Args:
            overrides: Any DevToConfig field

        Returns:
            DevToConfig instance
        """
        return DevToConfig(**overrides)

    async def fetch(self) -> RawBatch:
        """Fetch articles for every configured tag.

        Returns:
            Raw batch of article objects, all tags concatenated

        Raises:
            SourceFetchError: On HTTP errors or malformed responses
        """
        cfg = self._config
        articles: list[dict[str, Any]] = []

        for tag in cfg.tags:
            try:
                response = await self._http_client.get(
                    f"{cfg.base_url}/articles",
                    params={"tag": tag, "per_page": cfg.limit, "top": 7},
                    timeout=cfg.request_timeout,
                )
                response.raise_for_status()
                page = response.json()
            except httpx.HTTPStatusError as e:
                raise SourceFetchError(
                    self.name, f"HTTP {e.response.status_code} for tag '{tag}'"
                ) from e
            except ValueError as e:
                raise SourceFetchError(self.name, f"invalid JSON: {e}") from e

            if not isinstance(page, list):
                raise SourceFetchError(self.name, f"unexpected response for tag '{tag}'")
            articles.extend(page)

        logger.info("Fetched from Dev.to", tags=cfg.tags, articles=len(articles))
        return RawBatch(source=self.name, payload=articles)

    def transform(self, batch: RawBatch) -> list[ContentItem]:
        """Convert articles into resource items.

        The same article can appear under several tags; it is emitted once.

        Args:
            batch: Batch from fetch()

        Returns:
            Resource items
        """
        seen: set[Any] = set()
        items = []
        for article in batch.payload:
            if "id" not in article:
                raise ValidationError("id", "Dev.to article without id")
            if article["id"] in seen:
                continue
            seen.add(article["id"])
            items.append(self._to_item(article))
        logger.info("Dev.to transform complete", items=len(items))
        return items

    def _to_item(self, article: dict[str, Any]) -> ContentItem:
        user = article.get("user") or {}
        tags = article.get("tag_list") or []
        if isinstance(tags, str):
            tags = [t.strip() for t in tags.split(",")]

        return ContentItem(
            title=article.get("title") or "",
            description=article.get("description") or "",
            url=article.get("canonical_url") or article.get("url"),
            source=self.name,
            published_at=parse_datetime(article.get("published_at")),
            tags=tags,
            details=ResourceDetails(
                resource_type="article",
                author=user.get("name") or user.get("username"),
                metrics={
                    "reactions": int(article.get("public_reactions_count") or 0),
                    "comments": int(article.get("comments_count") or 0),
                    "reading_time": int(article.get("reading_time_minutes") or 0),
                },
            ),
        )

    async def health_check(self) -> bool:
        """Check if the Dev.to API is reachable.

        Returns:
            True if API responds successfully
        """
        try:
            response = await self._http_client.get(
                f"{self._config.base_url}/articles", params={"per_page": 1}
            )
            return response.status_code == 200
        except httpx.HTTPError as e:
            logger.warning("Dev.to health check failed", error=str(e))
            return False


__all__ = ["DevToSource"]
