"""Typed configuration models for the intake pipeline."""

from intake.config.content import ApprovalConfig, DedupConfig, StagingConfig
from intake.config.pipeline import OrchestratorConfig, RetryPolicy, RunConfig
from intake.config.scoring import EligibilityConfig, FreshnessBand, ScoringConfig
from intake.config.sources import DevToConfig, GitHubConfig, HackerNewsConfig

__all__ = [
    "ApprovalConfig",
    "DedupConfig",
    "DevToConfig",
    "EligibilityConfig",
    "FreshnessBand",
    "GitHubConfig",
    "HackerNewsConfig",
    "OrchestratorConfig",
    "RetryPolicy",
    "RunConfig",
    "ScoringConfig",
    "StagingConfig",
]
