"""Content collection services.

This package implements the ingestion pipeline:
1. Source connectors fetch and transform raw items
2. Scorer calculates rule-based scores (optionally oracle-boosted)
3. Eligibility filter attaches category rule warnings
4. Deduplicator drops items already seen in the run or the store
5. Fetch orchestrator (pipeline module) ties the stages together
"""

from intake.services.collector.base import (
    BaseSource,
    ContentItem,
    EligibilityResult,
    FundingDetails,
    ProjectDetails,
    RawBatch,
    Recommendation,
    ResourceDetails,
    ScoredItem,
    ScoreFactors,
)
from intake.services.collector.deduplicator import (
    ContentDeduplicator,
    DedupPartition,
    DedupReason,
    DuplicateOutcome,
)
from intake.services.collector.dispatch import DispatchOutcome, dispatch_all
from intake.services.collector.eligibility import EligibilityFilter
from intake.services.collector.oracle import LLMScoringOracle, OracleScore, ScoringOracle
from intake.services.collector.scorer import ContentScorer

__all__ = [
    # DTOs
    "BaseSource",
    "ContentItem",
    "EligibilityResult",
    "FundingDetails",
    "ProjectDetails",
    "RawBatch",
    "Recommendation",
    "ResourceDetails",
    "ScoreFactors",
    "ScoredItem",
    # Stages
    "ContentDeduplicator",
    "ContentScorer",
    "DedupPartition",
    "DedupReason",
    "DispatchOutcome",
    "DuplicateOutcome",
    "EligibilityFilter",
    "LLMScoringOracle",
    "OracleScore",
    "ScoringOracle",
    "dispatch_all",
]
