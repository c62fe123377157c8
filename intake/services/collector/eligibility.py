"""Category eligibility rules.

Eligibility runs after scoring. A failed check is a warning: the item keeps
flowing so a reviewer can still see it, its eligibility score is floored
instead of zeroed, and its recommendation is capped at `review`.
"""

from datetime import UTC, datetime
from urllib.parse import urlparse

from intake.config.scoring import EligibilityConfig
from intake.core.logging import get_logger
from intake.models.base import ContentCategory
from intake.services.collector.base import (
    ContentItem,
    EligibilityResult,
    FundingDetails,
    ProjectDetails,
    Recommendation,
    ResourceDetails,
    ScoredItem,
)

logger = get_logger(__name__)

_CAPPED_RECOMMENDATIONS = {Recommendation.APPROVE, Recommendation.FEATURE}


def is_valid_url(url: str | None) -> bool:
    """Check that a URL is absolute http(s) with a host."""
    if not url:
        return False
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


class EligibilityFilter:
    """Applies required-field and range rules per content category.

    Attributes:
        config: Eligibility configuration
    """

    def __init__(self, config: EligibilityConfig | None = None):
        """Initialize eligibility filter.

        Args:
            config: Eligibility configuration (uses defaults if not provided)
        """
        self.config = config or EligibilityConfig()

    def check(
        self,
        item: ContentItem,
        category: ContentCategory | None = None,
        now: datetime | None = None,
    ) -> EligibilityResult:
        """Check an item against the rules of its category.

        Args:
            item: Item to check
            category: Category whose rules apply (defaults to the item's own)
            now: Clock for date windows

        Returns:
            EligibilityResult; ineligible results keep a floored score
        """
        category = category or item.category
        now = now or datetime.now(UTC)

        reasons = self._common_reasons(item)
        details = item.details
        if details.kind != category.value:
            reasons.append(f"Details describe a {details.kind}, expected {category.value}")
        elif isinstance(details, ProjectDetails):
            reasons.extend(self._project_reasons(item, details, now))
        elif isinstance(details, FundingDetails):
            reasons.extend(self._funding_reasons(details, now))
        elif isinstance(details, ResourceDetails):
            reasons.extend(self._resource_reasons(item, now))

        if not reasons:
            return EligibilityResult(eligible=True, score=100)

        score = max(
            self.config.warning_score_floor,
            100 - self.config.penalty_per_reason * len(reasons),
        )
        return EligibilityResult(eligible=False, reasons=tuple(reasons), score=score)

    def apply(self, item: ScoredItem, now: datetime | None = None) -> ScoredItem:
        """Attach the eligibility outcome to a scored item.

        Ineligible items are logged and have their recommendation capped at
        `review`; they are never dropped here.

        Args:
            item: Scored item
            now: Clock for date windows

        Returns:
            Scored item carrying its eligibility result
        """
        result = self.check(item, now=now)
        update: dict[str, object] = {"eligibility": result}

        if not result.eligible:
            logger.info(
                "Eligibility warning",
                title=item.title[:50],
                source=item.source,
                category=item.category.value,
                reasons=list(result.reasons),
                eligibility_score=result.score,
            )
            if item.recommendation in _CAPPED_RECOMMENDATIONS:
                update["recommendation"] = Recommendation.REVIEW

        return item.model_copy(update=update)

    def _common_reasons(self, item: ContentItem) -> list[str]:
        reasons = []
        if not item.title:
            reasons.append("Missing title")
        if not is_valid_url(item.url):
            reasons.append("Invalid or missing URL")
        if len(item.description) < self.config.min_description_length:
            reasons.append(
                f"Description too short ({len(item.description)} < "
                f"{self.config.min_description_length} chars)"
            )
        return reasons

    def _project_reasons(
        self, item: ContentItem, details: ProjectDetails, now: datetime
    ) -> list[str]:
        cfg = self.config
        reasons = []

        if details.team_size is not None:
            if details.team_size > cfg.max_team_size:
                reasons.append(f"Team size {details.team_size} exceeds {cfg.max_team_size}")
            elif details.team_size < cfg.min_team_size:
                reasons.append("No team members")

        if details.funding_raised is not None and details.funding_raised > cfg.max_funding_raised:
            reasons.append(
                f"Funding raised ${details.funding_raised:,.0f} exceeds "
                f"${cfg.max_funding_raised:,.0f}"
            )

        launched = details.launch_date or item.published_at
        if launched is None:
            reasons.append("No launch date available")
        else:
            if launched.tzinfo is None:
                launched = launched.replace(tzinfo=UTC)
            if (now - launched).days > cfg.launch_window_days:
                reasons.append(f"Launched more than {cfg.launch_window_days} days ago")

        return reasons

    def _funding_reasons(self, details: FundingDetails, now: datetime) -> list[str]:
        reasons = []
        if not details.organization:
            reasons.append("Missing funding organization")
        if not details.is_active:
            reasons.append("Program is not active")
        if details.application_deadline is not None:
            deadline = details.application_deadline
            if deadline.tzinfo is None:
                deadline = deadline.replace(tzinfo=UTC)
            if deadline < now:
                reasons.append("Application deadline has passed")
        if details.max_amount is not None and details.max_amount > self.config.max_program_amount:
            reasons.append("Funding amount too large for early-stage")
        if (
            details.min_amount is not None
            and details.max_amount is not None
            and details.min_amount > details.max_amount
        ):
            reasons.append("Minimum amount exceeds maximum amount")
        return reasons

    def _resource_reasons(self, item: ContentItem, now: datetime) -> list[str]:
        if item.published_at is None:
            return []
        age_days = (now - item.published_at).days
        if age_days > self.config.resource_max_age_days:
            return [f"Content is over {self.config.resource_max_age_days} days old"]
        return []


__all__ = [
    "EligibilityFilter",
    "is_valid_url",
]
