"""Source connector configuration models.

Defines default settings for each source type.
"""

from pydantic import BaseModel, Field


class HackerNewsConfig(BaseModel):
    """HackerNews (Algolia search) source configuration.

    Attributes:
        tags: Algolia story tag filter
        query: Optional search query
        limit: Maximum number of hits to fetch
        min_points: Minimum story points
        request_timeout: HTTP request timeout in seconds
    """

    base_url: str = Field(default="https://hn.algolia.com/api/v1")
    tags: str = Field(default="show_hn")
    query: str = Field(default="")
    limit: int = Field(default=20, ge=1, le=100)
    min_points: int = Field(default=5, ge=0)
    request_timeout: float = Field(default=10.0, ge=1.0, le=60.0)


class GitHubConfig(BaseModel):
    """GitHub repository search source configuration.

    Attributes:
        query: Search qualifier string
        created_within_days: Only repositories created within this window
        sort: Sort key (stars, updated)
        limit: Maximum repositories to fetch
        token: Optional API token
        request_timeout: HTTP request timeout in seconds
    """

    base_url: str = Field(default="https://api.github.com")
    query: str = Field(default="web3 OR blockchain OR defi OR ai")
    created_within_days: int = Field(default=365, ge=1)
    sort: str = Field(default="stars", pattern="^(stars|updated|forks)$")
    limit: int = Field(default=20, ge=1, le=100)
    token: str | None = Field(default=None)
    request_timeout: float = Field(default=10.0, ge=1.0, le=60.0)


class DevToConfig(BaseModel):
    """Dev.to articles source configuration.

    Attributes:
        tags: Article tags to query
        limit: Maximum articles per tag
        request_timeout: HTTP request timeout in seconds
    """

    base_url: str = Field(default="https://dev.to/api")
    tags: list[str] = Field(default_factory=lambda: ["web3", "startup", "opensource"])
    limit: int = Field(default=30, ge=1, le=100)
    request_timeout: float = Field(default=10.0, ge=1.0, le=60.0)


__all__ = [
    "DevToConfig",
    "GitHubConfig",
    "HackerNewsConfig",
]
