"""GitHub source connector.

Searches recently created repositories through the GitHub REST API.
https://docs.github.com/en/rest/search
"""

from datetime import UTC, datetime, timedelta
from typing import Any

import httpx

from intake.config.sources import GitHubConfig
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


class GitHubSource(BaseSource[GitHubConfig]):
    """GitHub connector producing projects from repository search."""

    name = "github"

    @classmethod
    def build_config(cls, overrides: dict[str, Any]) -> GitHubConfig:
        """Build GitHubConfig from overrides.

        Args:
            overrides: Any GitHubConfig field

        Returns:
            GitHubConfig instance
        """
        return GitHubConfig(**overrides)

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/vnd.github+json"}
        if self._config.token:
            headers["Authorization"] = f"Bearer {self._config.token}"
        return headers

    async def fetch(self) -> RawBatch:
        """Fetch repositories created within the configured window.

        Returns:
            Raw batch of repository objects

        Raises:
            SourceFetchError: On HTTP errors (including rate limiting)
        """
        cfg = self._config
        since = (datetime.now(UTC) - timedelta(days=cfg.created_within_days)).date()
        params = {
            "q": f"{cfg.query} created:>{since.isoformat()}",
            "sort": cfg.sort,
            "order": "desc",
            "per_page": cfg.limit,
        }

        logger.info("Fetching from GitHub", query=params["q"], limit=cfg.limit)
        try:
            response = await self._http_client.get(
                f"{cfg.base_url}/search/repositories",
                params=params,
                headers=self._headers(),
                timeout=cfg.request_timeout,
            )
            response.raise_for_status()
            repos = response.json().get("items")
        except httpx.HTTPStatusError as e:
            raise SourceFetchError(self.name, f"HTTP {e.response.status_code}") from e
        except ValueError as e:
            raise SourceFetchError(self.name, f"invalid JSON: {e}") from e

        if not isinstance(repos, list):
            raise SourceFetchError(self.name, "response has no 'items' list")
        return RawBatch(source=self.name, payload=repos)

    def transform(self, batch: RawBatch) -> list[ContentItem]:
        """Convert repository objects into project items.

        Args:
            batch: Batch from fetch()

        Returns:
            Project items
        """
        items = [self._to_item(repo) for repo in batch.payload]
        logger.info("GitHub transform complete", items=len(items))
        return items

    def _to_item(self, repo: dict[str, Any]) -> ContentItem:
        if not repo.get("html_url") or not repo.get("name"):
            raise ValidationError("html_url", "GitHub repository without name or html_url")

        created = parse_datetime(repo.get("created_at"))
        owner = (repo.get("owner") or {}).get("login")
        language = repo.get("language")

        return ContentItem(
            title=repo["name"],
            description=repo.get("description") or "",
            url=repo["html_url"],
            source=self.name,
            published_at=created,
            tags=[*(repo.get("topics") or []), "github", "open source"],
            details=ProjectDetails(
                launch_date=created,
                founders=(owner,) if owner else (),
                tech_stack=(language,) if language else (),
                metrics={
                    "stars": int(repo.get("stargazers_count") or 0),
                    "forks": int(repo.get("forks_count") or 0),
                    "open_issues": int(repo.get("open_issues_count") or 0),
                },
            ),
        )

    async def health_check(self) -> bool:
        """Check if the GitHub API is reachable.

        Returns:
            True if API responds successfully
        """
        try:
            response = await self._http_client.get(
                f"{self._config.base_url}/rate_limit", headers=self._headers()
            )
            return response.status_code == 200
        except httpx.HTTPError as e:
            logger.warning("GitHub health check failed", error=str(e))
            return False


__all__ = ["GitHubSource"]
