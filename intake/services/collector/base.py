"""Base interfaces and DTOs for content ingestion.

This module defines the data structures passed between connectors, the
scorer, the eligibility filter and the deduplicator, plus the abstract
connector interface.
"""

from abc import ABC, abstractmethod
from datetime import UTC, datetime
from enum import Enum
from typing import Annotated, Any, Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

from intake.infrastructure.http_client import HTTPClient
from intake.models.base import ContentCategory

# =============================================================================
# Category details (tagged union on `kind`)
# =============================================================================


class ProjectDetails(BaseModel):
    """Attributes specific to early-stage projects.

    Attributes:
        team_size: Number of team members
        funding_raised: Total funding raised so far (USD)
        launch_date: When the project launched
        founders: Founder names or handles
        tech_stack: Languages and frameworks
        project_needs: What the team is looking for (funding, co-founder, ...)
        metrics: Source metrics (stars, points, comments)
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["project"] = "project"
    team_size: int | None = Field(default=None, ge=0)
    funding_raised: float | None = Field(default=None, ge=0)
    launch_date: datetime | None = None
    founders: tuple[str, ...] = ()
    tech_stack: tuple[str, ...] = ()
    project_needs: tuple[str, ...] = ()
    metrics: dict[str, int] = Field(default_factory=dict)


class FundingDetails(BaseModel):
    """Attributes specific to funding programs.

    Attributes:
        organization: Organization running the program
        funding_type: grant, accelerator, fund, ...
        min_amount: Smallest award
        max_amount: Largest award
        currency: ISO currency code
        application_deadline: Closing date for applications
        is_active: Whether the program currently accepts applications
        eligibility_criteria: Free-text eligibility requirements
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["funding"] = "funding"
    organization: str | None = None
    funding_type: str | None = None
    min_amount: float | None = Field(default=None, ge=0)
    max_amount: float | None = Field(default=None, ge=0)
    currency: str = "USD"
    application_deadline: datetime | None = None
    is_active: bool = True
    eligibility_criteria: tuple[str, ...] = ()


class ResourceDetails(BaseModel):
    """Attributes specific to builder resources.

    Attributes:
        resource_type: article, tool, course, ...
        author: Author name or handle
        price_type: free, freemium, paid
        metrics: Source metrics (reactions, comments, reading time)
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["resource"] = "resource"
    resource_type: str = "article"
    author: str | None = None
    price_type: str = "free"
    metrics: dict[str, int] = Field(default_factory=dict)


ContentDetails = Annotated[
    ProjectDetails | FundingDetails | ResourceDetails,
    Field(discriminator="kind"),
]


# =============================================================================
# Items
# =============================================================================


class ContentItem(BaseModel):
    """Normalized content unit produced by a connector.

    Immutable once produced.

    Attributes:
        title: Item title
        description: Item description
        url: Canonical URL (None when the source has none)
        source: Connector name
        published_at: Publication time at the source
        tags: Lower-cased tags
        details: Category-specific attributes
    """

    model_config = ConfigDict(frozen=True)

    title: str = ""
    description: str = ""
    url: str | None = None
    source: str
    published_at: datetime | None = None
    tags: frozenset[str] = frozenset()
    details: ContentDetails = Field(default_factory=ProjectDetails)

    @field_validator("title", "description", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> str:
        """Coerce missing text to an empty string and strip whitespace."""
        return "" if v is None else str(v).strip()

    @field_validator("published_at")
    @classmethod
    def ensure_aware(cls, v: datetime | None) -> datetime | None:
        """Treat naive timestamps as UTC."""
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=UTC)
        return v

    @field_validator("tags", mode="before")
    @classmethod
    def normalize_tags(cls, v: Any) -> frozenset[str]:
        """Lowercase tags and drop empty entries."""
        if not v:
            return frozenset()
        return frozenset(t.strip().lower() for t in v if isinstance(t, str) and t.strip())

    @property
    def category(self) -> ContentCategory:
        """Category derived from the details variant."""
        return ContentCategory(self.details.kind)


class Recommendation(str, Enum):
    """Scorer recommendation tier."""

    REJECT = "reject"
    REVIEW = "review"
    APPROVE = "approve"
    FEATURE = "feature"


class ScoreFactors(BaseModel):
    """Per-factor breakdown of a rule-based score.

    Attributes:
        quality: Title/description presence and length (0-30)
        relevance: Domain vocabulary matches (0-30)
        freshness: Age step function (0-20)
        completeness: URL, date, team/author and funding/metrics presence (0-20)
    """

    model_config = ConfigDict(frozen=True)

    quality: int = Field(ge=0, le=30)
    relevance: int = Field(ge=0, le=30)
    freshness: int = Field(ge=0, le=20)
    completeness: int = Field(ge=0, le=20)

    @property
    def total(self) -> int:
        """Sum of all factors (0-100)."""
        return self.quality + self.relevance + self.freshness + self.completeness


class EligibilityResult(BaseModel):
    """Outcome of a category eligibility check.

    Attributes:
        eligible: True when no rule was violated
        reasons: Human-readable rule violations
        score: Eligibility score (0-100), floored when ineligible
    """

    model_config = ConfigDict(frozen=True)

    eligible: bool
    reasons: tuple[str, ...] = ()
    score: int = Field(ge=0, le=100)


class ScoredItem(ContentItem):
    """Content item with scoring information.

    Run-scoped; never persisted as-is.

    Attributes:
        score: Final score (0-100) including any oracle boost
        confidence: Fraction of the confidence checklist satisfied (0-1)
        factors: Rule-based factor breakdown
        recommendation: Recommendation tier
        oracle_boost: Points added from the oracle (0-20)
        eligibility: Eligibility outcome, once checked
    """

    score: int = Field(ge=0, le=100)
    confidence: float = Field(ge=0.0, le=1.0)
    factors: ScoreFactors
    recommendation: Recommendation
    oracle_boost: int = Field(default=0, ge=0, le=20)
    eligibility: EligibilityResult | None = None

    @classmethod
    def from_item(cls, item: ContentItem, **scoring: Any) -> "ScoredItem":
        """Build a scored item from a content item and scoring fields."""
        return cls(**dict(item), **scoring)


def parse_datetime(value: Any) -> datetime | None:
    """Parse an ISO-8601 string or Unix timestamp into an aware datetime.

    Args:
        value: ISO string, epoch seconds, datetime or None

    Returns:
        Aware datetime, or None when the value cannot be parsed
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=UTC)
    if isinstance(value, int | float):
        return datetime.fromtimestamp(value, tz=UTC)
    try:
        parsed = datetime.fromisoformat(str(value))
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


# =============================================================================
# Connector contract
# =============================================================================


class RawBatch(BaseModel):
    """Raw payload returned by a connector's fetch step.

    Attributes:
        source: Connector name
        payload: Decoded response bodies, in source-specific shape
        fetched_at: Time the fetch completed
    """

    source: str
    payload: list[dict[str, Any]] = Field(default_factory=list)
    fetched_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


ConfigT = TypeVar("ConfigT", bound=BaseModel)


class BaseSource(ABC, Generic[ConfigT]):
    """Abstract base class for all source connectors.

    `fetch` performs all I/O; `transform` must be a pure function of the
    batch so it can be tested without the network.

    Attributes:
        name: Registry name of the connector
    """

    name: str = "source"

    def __init__(self, config: ConfigT, http_client: HTTPClient | None = None):
        """Initialize source connector.

        Args:
            config: Typed source configuration
            http_client: Shared HTTP client for connection reuse
        """
        self._config = config
        self._http_client = http_client or HTTPClient()

    @classmethod
    @abstractmethod
    def build_config(cls, overrides: dict[str, Any]) -> ConfigT:
        """Build the typed config from plain overrides."""

    @abstractmethod
    async def fetch(self) -> RawBatch:
        """Fetch raw data from the source.

        Returns:
            Raw batch

        Raises:
            SourceFetchError: If the source cannot be reached or answers badly
        """

    @abstractmethod
    def transform(self, batch: RawBatch) -> list[ContentItem]:
        """Convert a raw batch into content items.

        Args:
            batch: Batch returned by fetch()

        Returns:
            Normalized content items

        Raises:
            ValidationError: If the payload does not have the expected shape
        """

    async def health_check(self) -> bool:
        """Check if the source is reachable.

        Returns:
            True if source is healthy, False otherwise
        """
        return True


__all__ = [
    "BaseSource",
    "ContentDetails",
    "ContentItem",
    "EligibilityResult",
    "FundingDetails",
    "ProjectDetails",
    "RawBatch",
    "Recommendation",
    "ResourceDetails",
    "ScoreFactors",
    "ScoredItem",
    "parse_datetime",
]
