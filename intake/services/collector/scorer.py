"""Content scoring service.

Calculates a deterministic, explainable score for content items from four
independently capped factors:
- Quality (0-30): title/description presence and description length
- Relevance (0-30): matches against the domain vocabulary
- Freshness (0-20): step function of item age
- Completeness (0-20): URL, date, team/author, funding/metrics presence

An optional scoring oracle can add a bounded boost to items that already
clear a minimum rule-based score.
"""

import re
from datetime import UTC, datetime

from intake.config.scoring import ScoringConfig
from intake.core.logging import get_logger
from intake.services.collector.base import (
    ContentItem,
    FundingDetails,
    ProjectDetails,
    Recommendation,
    ResourceDetails,
    ScoredItem,
    ScoreFactors,
)
from intake.services.collector.oracle import ScoringOracle

logger = get_logger(__name__)

QUALITY_CAP = 30
RELEVANCE_CAP = 30
FRESHNESS_CAP = 20
COMPLETENESS_CAP = 20
COMPLETENESS_STEP = COMPLETENESS_CAP // 4

# Age used when an item carries no usable date
UNKNOWN_AGE_DAYS = 999


class ContentScorer:
    """Calculates scores and recommendations for content items.

    `score()` is a pure function of the item, the reject floor and the
    clock. `score_with_oracle()` adds the optional oracle blend and never
    fails because of the oracle.
    """

    def __init__(
        self,
        config: ScoringConfig | None = None,
        oracle: ScoringOracle | None = None,
    ):
        """Initialize scorer.

        Args:
            config: Scoring configuration (uses defaults if not provided)
            oracle: Optional scoring oracle used by score_with_oracle()
        """
        self.config = config or ScoringConfig()
        self.oracle = oracle
        self._patterns = [
            re.compile(rf"(?<![a-z0-9]){re.escape(term)}(?![a-z0-9])")
            for term in self.config.vocabulary
        ]

    def score(
        self,
        item: ContentItem,
        reject_floor: int,
        now: datetime | None = None,
    ) -> ScoredItem:
        """Calculate the rule-based score for an item.

        Args:
            item: Content item to score
            reject_floor: Scores below this are recommended for rejection
            now: Clock used for freshness (defaults to current UTC time)

        Returns:
            ScoredItem with factors, confidence and recommendation
        """
        factors = self._calculate_factors(item, now or datetime.now(UTC))
        confidence = self._calc_confidence(item)
        total = factors.total

        scored = ScoredItem.from_item(
            item,
            score=total,
            confidence=confidence,
            factors=factors,
            recommendation=self.recommend(total, confidence, reject_floor),
        )

        logger.debug(
            "Item scored",
            title=item.title[:50],
            source=item.source,
            total=total,
            quality=factors.quality,
            relevance=factors.relevance,
            freshness=factors.freshness,
            completeness=factors.completeness,
            confidence=confidence,
        )
        return scored

    async def score_with_oracle(
        self,
        item: ContentItem,
        reject_floor: int,
        now: datetime | None = None,
    ) -> ScoredItem:
        """Score an item and blend in the oracle's rating when eligible.

        The oracle is consulted only when the rule-based score reaches
        `oracle_min_score`. Oracle failures fall back to the rule-based score.

        Args:
            item: Content item to score
            reject_floor: Scores below this are recommended for rejection
            now: Clock used for freshness

        Returns:
            ScoredItem, boosted when the oracle answered
        """
        scored = self.score(item, reject_floor, now)
        if self.oracle is None or scored.score < self.config.oracle_min_score:
            return scored

        try:
            rating = await self.oracle.score_content(item)
        except Exception as e:
            logger.warning(
                "Oracle scoring failed, using rule-based score",
                title=item.title[:50],
                error=str(e),
            )
            return scored

        if rating is None:
            return scored

        boost = self.oracle_boost(rating.overall)
        total = min(100, scored.score + boost)
        logger.debug("Oracle boost applied", title=item.title[:50], boost=boost, total=total)

        return scored.model_copy(
            update={
                "score": total,
                "oracle_boost": boost,
                "recommendation": self.recommend(total, scored.confidence, reject_floor),
            }
        )

    def oracle_boost(self, overall: float) -> int:
        """Convert an oracle rating (0-1) into additive points.

        Args:
            overall: Oracle overall rating

        Returns:
            Boost between 0 and oracle_max_boost
        """
        overall = max(0.0, min(1.0, overall))
        return min(self.config.oracle_max_boost, round(overall * self.config.oracle_max_boost))

    def recommend(self, score: int, confidence: float, reject_floor: int) -> Recommendation:
        """Map a score and confidence to a recommendation tier.

        Args:
            score: Total score (0-100)
            confidence: Confidence (0-1)
            reject_floor: Scores below this are rejected

        Returns:
            Recommendation tier
        """
        if score < reject_floor or confidence < self.config.min_confidence:
            return Recommendation.REJECT
        if score < self.config.review_below:
            return Recommendation.REVIEW
        if score < self.config.approve_below:
            return Recommendation.APPROVE
        return Recommendation.FEATURE

    def _calculate_factors(self, item: ContentItem, now: datetime) -> ScoreFactors:
        return ScoreFactors(
            quality=self._calc_quality(item),
            relevance=self._calc_relevance(item),
            freshness=self._calc_freshness(self._reference_date(item), now),
            completeness=self._calc_completeness(item),
        )

    def _calc_quality(self, item: ContentItem) -> int:
        """Calculate quality from text presence and description length.

        Args:
            item: Item to inspect

        Returns:
            Quality points (0-30)
        """
        cfg = self.config
        points = 0
        if item.title:
            points += cfg.title_points
        if item.description:
            points += cfg.description_points
        length = len(item.description)
        if length > cfg.long_description_length:
            points += cfg.long_description_points
        if length > cfg.extended_description_length:
            points += cfg.extended_description_points
        return min(QUALITY_CAP, points)

    def _calc_relevance(self, item: ContentItem) -> int:
        """Calculate relevance from vocabulary matches.

        Each vocabulary term counts once, wherever it appears in the title,
        description or tags.

        Args:
            item: Item to inspect

        Returns:
            Relevance points (0-30)
        """
        text = " ".join([item.title, item.description, *sorted(item.tags)]).lower()
        matches = sum(1 for pattern in self._patterns if pattern.search(text))
        return min(RELEVANCE_CAP, matches * self.config.points_per_keyword)

    def _calc_freshness(self, reference: datetime | None, now: datetime) -> int:
        """Calculate freshness from item age.

        Args:
            reference: Date the item is aged from
            now: Current time

        Returns:
            Freshness points (0-20)
        """
        age_days = UNKNOWN_AGE_DAYS
        if reference is not None:
            if reference.tzinfo is None:
                reference = reference.replace(tzinfo=UTC)
            age_days = max(0, (now - reference).days)

        for band in self.config.freshness_bands:
            if age_days <= band.max_age_days:
                return min(FRESHNESS_CAP, band.points)
        return 0

    def _calc_completeness(self, item: ContentItem) -> int:
        """Calculate completeness from four equally weighted presence checks.

        Args:
            item: Item to inspect

        Returns:
            Completeness points (0-20)
        """
        checks = [
            bool(item.url),
            self._reference_date(item) is not None,
            self._has_people(item),
            self._has_money_or_metrics(item),
        ]
        return COMPLETENESS_STEP * sum(checks)

    def _calc_confidence(self, item: ContentItem) -> float:
        """Calculate confidence as the satisfied fraction of a fixed checklist.

        Args:
            item: Item to inspect

        Returns:
            Confidence rounded to two decimals
        """
        checks = [
            bool(item.title),
            bool(item.description),
            len(item.description) > self.config.confidence_description_length,
            bool(item.url),
            self._reference_date(item) is not None,
        ]
        return round(sum(checks) / len(checks), 2)

    @staticmethod
    def _reference_date(item: ContentItem) -> datetime | None:
        if item.published_at is not None:
            return item.published_at
        if isinstance(item.details, ProjectDetails):
            return item.details.launch_date
        return None

    @staticmethod
    def _has_people(item: ContentItem) -> bool:
        details = item.details
        if isinstance(details, ProjectDetails):
            return bool(details.team_size) or bool(details.founders)
        if isinstance(details, FundingDetails):
            return bool(details.organization)
        if isinstance(details, ResourceDetails):
            return bool(details.author)
        return False

    @staticmethod
    def _has_money_or_metrics(item: ContentItem) -> bool:
        details = item.details
        if isinstance(details, ProjectDetails):
            return details.funding_raised is not None or bool(details.metrics)
        if isinstance(details, FundingDetails):
            return details.min_amount is not None or details.max_amount is not None
        if isinstance(details, ResourceDetails):
            return bool(details.metrics)
        return False


__all__ = [
    "ContentScorer",
    "UNKNOWN_AGE_DAYS",
]
