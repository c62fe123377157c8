"""Unit tests for ContentScorer.

Tests cover:
- Individual factor calculations
- Confidence checklist
- Recommendation tiers and the reject floor
- Oracle blend and fallback
"""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from intake.config.scoring import ScoringConfig
from intake.services.collector.base import (
    ContentItem,
    FundingDetails,
    ProjectDetails,
    Recommendation,
    ResourceDetails,
)
from intake.services.collector.oracle import OracleScore
from intake.services.collector.scorer import ContentScorer

NOW = datetime(2026, 6, 1, tzinfo=UTC)

LONG_DESCRIPTION = (
    "A decentralized platform that combines machine intelligence with on-chain "
    "settlement so small teams can launch products without building their own "
    "infrastructure. The team ships weekly, publishes every release as open "
    "source and works closely with early customers to shape the roadmap. It "
    "already serves several hundred developers across three continents."
)


@pytest.fixture
def scorer() -> ContentScorer:
    """Create a ContentScorer with default config."""
    return ContentScorer()


def item(**kwargs) -> ContentItem:
    """Create a test ContentItem."""
    kwargs.setdefault("source", "test")
    return ContentItem(**kwargs)


class TestScenarios:
    """End-to-end scoring scenarios."""

    def test_complete_fresh_project_scores_high(self, scorer: ContentScorer):
        """A complete, fresh, on-topic project scores above 60 and is not rejected."""
        assert len(LONG_DESCRIPTION) > 300
        candidate = item(
            title="AI Blockchain Platform",
            description=LONG_DESCRIPTION,
            url="https://x.io",
            published_at=NOW,
            details=ProjectDetails(team_size=5, funding_raised=2_000_000),
        )

        scored = scorer.score(candidate, reject_floor=30, now=NOW)

        assert scored.score > 60
        assert scored.recommendation != Recommendation.REJECT

    def test_sparse_item_scores_low_and_is_rejected(self, scorer: ContentScorer):
        """A bare title and short description scores below 30 and is rejected."""
        scored = scorer.score(item(title="Test", description="Short desc"), 30, now=NOW)

        assert scored.score < 30
        assert scored.recommendation == Recommendation.REJECT


class TestQuality:
    """Tests for quality factor."""

    def test_title_and_description_presence(self, scorer: ContentScorer):
        """Title and description each earn base points."""
        assert scorer._calc_quality(item(title="x", description="")) == 5
        assert scorer._calc_quality(item(title="x", description="y")) == 10

    def test_length_bonuses(self, scorer: ContentScorer):
        """Descriptions over 100 and 300 characters earn bonuses."""
        assert scorer._calc_quality(item(title="x", description="a" * 101)) == 20
        assert scorer._calc_quality(item(title="x", description="a" * 301)) == 30

    def test_boundary_is_exclusive(self, scorer: ContentScorer):
        """Exactly 100 characters earns no length bonus."""
        assert scorer._calc_quality(item(title="x", description="a" * 100)) == 10


class TestRelevance:
    """Tests for relevance factor."""

    def test_counts_distinct_terms(self, scorer: ContentScorer):
        """Each vocabulary term counts once."""
        candidate = item(title="AI AI AI", description="blockchain and more blockchain")
        assert scorer._calc_relevance(candidate) == 6

    def test_whole_words_only(self, scorer: ContentScorer):
        """Terms embedded in other words do not match."""
        assert scorer._calc_relevance(item(title="Said the mailman")) == 0

    def test_tags_are_searched(self, scorer: ContentScorer):
        """Tags contribute to relevance."""
        assert scorer._calc_relevance(item(title="Something", tags=["defi"])) == 3

    def test_capped(self):
        """Relevance never exceeds 30."""
        scorer = ContentScorer(ScoringConfig(points_per_keyword=10))
        candidate = item(title="ai blockchain web3 defi nft dao startup")
        assert scorer._calc_relevance(candidate) == 30


class TestFreshness:
    """Tests for freshness step function."""

    @pytest.mark.parametrize(
        ("age_days", "expected"),
        [(0, 20), (7, 20), (8, 15), (30, 15), (90, 10), (180, 5), (365, 2), (366, 0)],
    )
    def test_bands(self, scorer: ContentScorer, age_days: int, expected: int):
        """Age maps to the configured bands."""
        assert scorer._calc_freshness(NOW - timedelta(days=age_days), NOW) == expected

    def test_missing_date_scores_zero(self, scorer: ContentScorer):
        """Items without a date score no freshness."""
        assert scorer._calc_freshness(None, NOW) == 0

    def test_project_launch_date_used_when_unpublished(self, scorer: ContentScorer):
        """A project's launch date stands in for a missing publication date."""
        candidate = item(title="x", details=ProjectDetails(launch_date=NOW - timedelta(days=3)))
        assert scorer.score(candidate, 0, now=NOW).factors.freshness == 20


class TestCompleteness:
    """Tests for completeness factor."""

    def test_all_checks(self, scorer: ContentScorer):
        """URL, date, people and money each add five points."""
        candidate = item(
            title="x",
            url="https://example.com",
            published_at=NOW,
            details=ProjectDetails(founders=("ada",), metrics={"stars": 3}),
        )
        assert scorer._calc_completeness(candidate) == 20

    def test_funding_details(self, scorer: ContentScorer):
        """Funding programs use organization and amounts."""
        candidate = item(
            title="x", details=FundingDetails(organization="Foundation", max_amount=50_000)
        )
        assert scorer._calc_completeness(candidate) == 10

    def test_resource_details(self, scorer: ContentScorer):
        """Resources use author and metrics."""
        candidate = item(title="x", details=ResourceDetails(author="sam"))
        assert scorer._calc_completeness(candidate) == 5


class TestConfidence:
    """Tests for confidence checklist."""

    def test_full_checklist(self, scorer: ContentScorer):
        """All five checks give confidence 1.0."""
        candidate = item(
            title="x", description="d" * 51, url="https://example.com", published_at=NOW
        )
        assert scorer._calc_confidence(candidate) == 1.0

    def test_partial_checklist(self, scorer: ContentScorer):
        """Two of five checks give 0.4."""
        assert scorer._calc_confidence(item(title="x", description="short")) == 0.4


class TestRecommendation:
    """Tests for recommendation tiers."""

    @pytest.mark.parametrize(
        ("score", "expected"),
        [
            (29, Recommendation.REJECT),
            (30, Recommendation.REVIEW),
            (49, Recommendation.REVIEW),
            (50, Recommendation.APPROVE),
            (74, Recommendation.APPROVE),
            (75, Recommendation.FEATURE),
        ],
    )
    def test_tiers(self, scorer: ContentScorer, score: int, expected: Recommendation):
        """Score maps to tiers with the run's reject floor."""
        assert scorer.recommend(score, 1.0, reject_floor=30) == expected

    def test_low_confidence_rejects(self, scorer: ContentScorer):
        """Confidence below 0.4 rejects regardless of score."""
        assert scorer.recommend(95, 0.39, reject_floor=0) == Recommendation.REJECT

    def test_reject_floor_is_policy(self, scorer: ContentScorer):
        """The reject boundary follows the supplied floor."""
        assert scorer.recommend(45, 1.0, reject_floor=50) == Recommendation.REJECT
        assert scorer.recommend(45, 1.0, reject_floor=40) == Recommendation.REVIEW


class TestOracleBlend:
    """Tests for the optional oracle boost."""

    @pytest.fixture
    def strong_item(self) -> ContentItem:
        """Item scoring above the oracle threshold."""
        return item(
            title="AI Blockchain Platform",
            description=LONG_DESCRIPTION,
            url="https://x.io",
            published_at=NOW,
            details=ProjectDetails(team_size=2),
        )

    def test_boost_conversion(self, scorer: ContentScorer):
        """Overall rating converts to at most 20 points."""
        assert scorer.oracle_boost(0.0) == 0
        assert scorer.oracle_boost(0.5) == 10
        assert scorer.oracle_boost(1.0) == 20
        assert scorer.oracle_boost(3.0) == 20

    @pytest.mark.asyncio
    async def test_boost_applied(self, strong_item: ContentItem):
        """Oracle rating is added and capped at 100."""
        oracle = AsyncMock()
        oracle.score_content.return_value = OracleScore(overall=1.0)
        scorer = ContentScorer(oracle=oracle)

        base = scorer.score(strong_item, 30, now=NOW)
        boosted = await scorer.score_with_oracle(strong_item, 30, now=NOW)

        assert boosted.oracle_boost == 20
        assert boosted.score == min(100, base.score + 20)
        assert boosted.recommendation == Recommendation.FEATURE

    @pytest.mark.asyncio
    async def test_oracle_skipped_below_threshold(self):
        """Items under 40 never reach the oracle."""
        oracle = AsyncMock()
        scorer = ContentScorer(oracle=oracle)

        scored = await scorer.score_with_oracle(item(title="Test", description="x"), 30, now=NOW)

        oracle.score_content.assert_not_called()
        assert scored.oracle_boost == 0

    @pytest.mark.asyncio
    async def test_oracle_failure_falls_back(self, strong_item: ContentItem):
        """Oracle errors leave the rule-based score untouched."""
        oracle = AsyncMock()
        oracle.score_content.side_effect = RuntimeError("provider down")
        scorer = ContentScorer(oracle=oracle)

        scored = await scorer.score_with_oracle(strong_item, 30, now=NOW)

        assert scored.score == scorer.score(strong_item, 30, now=NOW).score
        assert scored.oracle_boost == 0

    @pytest.mark.asyncio
    async def test_oracle_none_falls_back(self, strong_item: ContentItem):
        """A None rating means no boost."""
        oracle = AsyncMock()
        oracle.score_content.return_value = None
        scorer = ContentScorer(oracle=oracle)

        scored = await scorer.score_with_oracle(strong_item, 30, now=NOW)

        assert scored.oracle_boost == 0
