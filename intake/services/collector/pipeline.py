"""Fetch orchestration service.

This module runs one ingestion pass end to end. Used by both Celery
workers and the CLI script.

The pipeline:
1. Fetch from every connector concurrently (timeout + retry per connector)
2. Cap the candidate set at batch_size * evaluation_multiplier
3. Score (rule-based, optionally boosted by the oracle)
4. Eligibility check (warning only)
5. Deduplicate (in-run seen set + store identity keys)
6. Stage the accepted items into the review queues

Usage:
    orchestrator = FetchOrchestrator(sources, scorer, eligibility, deduplicator, staging)
    result = await orchestrator.run(RunConfig(batch_size=50, score_threshold=30))
"""

import asyncio
import time
from collections.abc import Sequence
from typing import Any

from pydantic import BaseModel, Field

from intake.config.pipeline import OrchestratorConfig, RunConfig
from intake.core.exceptions import SourceFetchError, StorageError
from intake.core.logging import get_logger, new_run_id, run_context
from intake.services.collector.base import BaseSource, ContentItem, Recommendation, ScoredItem
from intake.services.collector.deduplicator import ContentDeduplicator
from intake.services.collector.dispatch import dispatch_all
from intake.services.collector.eligibility import EligibilityFilter
from intake.services.collector.scorer import ContentScorer
from intake.services.review.staging import StagingWriter

logger = get_logger(__name__)


def source_labels(sources: Sequence[BaseSource[Any]]) -> list[str]:
    """Label each connector by name, suffixing repeats as `name#2`, `name#3`, ...

    Args:
        sources: Registered connectors

    Returns:
        One unique label per connector, in order
    """
    counts: dict[str, int] = {}
    labels = []
    for source in sources:
        counts[source.name] = counts.get(source.name, 0) + 1
        n = counts[source.name]
        labels.append(source.name if n == 1 else f"{source.name}#{n}")
    return labels


class SourceStatus(BaseModel):
    """Per-connector outcome of one run.

    Attributes:
        items: Items the connector returned
        attempts: Fetch attempts made
        duration: Wall time across attempts (seconds)
        error: Failure message when the connector gave up
    """

    items: int = 0
    attempts: int = 0
    duration: float = 0.0
    error: str | None = None


class RunResult(BaseModel):
    """Statistics from one ingestion run.

    Attributes:
        run_id: Id bound to every log event of the run
        fetched: Items returned by all connectors
        scored: Items that went through the scorer
        stored: Items inserted into a review queue
        rejected: Items dropped by scoring, dedup or the staging gate
        duplicates: Subset of rejected that were duplicates
        stored_by_category: Inserted items per category
        sources: Per-connector status keyed by label (`name`, or `name#2` for repeats)
        errors: Human-readable errors (bounded)
        duration: Run wall time (seconds)
        success: True when the run finished without errors
    """

    run_id: str = ""
    fetched: int = 0
    scored: int = 0
    stored: int = 0
    rejected: int = 0
    duplicates: int = 0
    stored_by_category: dict[str, int] = Field(default_factory=dict)
    sources: dict[str, SourceStatus] = Field(default_factory=dict)
    errors: list[str] = Field(default_factory=list)
    duration: float = 0.0
    success: bool = True


class FetchOrchestrator:
    """Runs connectors and feeds their items through the ingestion stages.

    The orchestrator holds no per-run state; every `run()` receives its own
    RunConfig, so one instance can serve concurrent callers.
    """

    def __init__(
        self,
        sources: Sequence[BaseSource[Any]],
        scorer: ContentScorer,
        eligibility: EligibilityFilter,
        deduplicator: ContentDeduplicator,
        staging: StagingWriter,
        config: OrchestratorConfig | None = None,
    ):
        """Initialize orchestrator.

        Args:
            sources: Connectors invoked on every run
            scorer: Content scorer
            eligibility: Eligibility filter
            deduplicator: Content deduplicator
            staging: Staging writer
            config: Orchestrator settings (uses defaults if not provided)
        """
        self.sources = list(sources)
        self.scorer = scorer
        self.eligibility = eligibility
        self.deduplicator = deduplicator
        self.staging = staging
        self.config = config or OrchestratorConfig()

    async def run(self, config: RunConfig) -> RunResult:
        """Run one ingestion pass.

        Never raises for source, item or storage failures; they are reported
        in RunResult.errors.

        Args:
            config: Per-run policy

        Returns:
            RunResult with counts and errors
        """
        started = time.monotonic()
        result = RunResult(run_id=new_run_id())
        with run_context(result.run_id):
            await self._run(config, result)

        result.duration = round(time.monotonic() - started, 3)
        result.success = not result.errors
        logger.info(
            "Ingestion run complete",
            run_id=result.run_id,
            fetched=result.fetched,
            scored=result.scored,
            stored=result.stored,
            rejected=result.rejected,
            duplicates=result.duplicates,
            errors=len(result.errors),
            duration=result.duration,
        )
        return result

    async def _run(self, config: RunConfig, result: RunResult) -> None:
        logger.info(
            "Starting ingestion run",
            sources=[s.name for s in self.sources],
            batch_size=config.batch_size,
            score_threshold=config.score_threshold,
        )

        candidates = await self._fetch_all(result)
        result.fetched = len(candidates)

        cap = config.batch_size * self.config.evaluation_multiplier
        if len(candidates) > cap:
            logger.info("Candidate set capped", available=len(candidates), cap=cap)
            candidates = candidates[:cap]

        accepted = await self._evaluate(candidates, config, result)

        if accepted:
            staged = await self.staging.stage(accepted, config.score_threshold)
            result.stored = staged.stored
            result.stored_by_category = {c.value: n for c, n in staged.inserted.items()}
            result.rejected += staged.rejected + staged.skipped
            for error in staged.errors:
                self._add_error(result, error)

    async def _fetch_all(self, result: RunResult) -> list[ContentItem]:
        """Fetch and transform every connector, settling all of them."""
        tasks = {
            label: self._collector(source)
            for label, source in zip(source_labels(self.sources), self.sources, strict=True)
        }
        outcomes = await dispatch_all(tasks, self.config.retry, self.config.max_concurrency)

        candidates: list[ContentItem] = []
        for outcome in outcomes:
            status = SourceStatus(attempts=outcome.attempts, duration=round(outcome.duration, 3))
            if outcome.ok and outcome.value is not None:
                status.items = len(outcome.value)
                candidates.extend(outcome.value)
            else:
                error = outcome.exception
                if not isinstance(error, SourceFetchError):
                    error = SourceFetchError(
                        outcome.name, outcome.error or "unknown error", attempts=outcome.attempts
                    )
                status.error = str(error)
                self._add_error(result, str(error))
            result.sources[outcome.name] = status
        return candidates

    @staticmethod
    def _collector(source: BaseSource[Any]):
        async def collect() -> list[ContentItem]:
            batch = await source.fetch()
            return source.transform(batch)

        return collect

    async def _evaluate(
        self,
        candidates: list[ContentItem],
        config: RunConfig,
        result: RunResult,
    ) -> list[ScoredItem]:
        """Score, check and deduplicate candidates until the soft cap is reached.

        Candidates are consumed in chunks no larger than the remaining
        capacity, so the accepted set never exceeds batch_size.
        """
        accepted: list[ScoredItem] = []
        seen: set[str] = set()
        cursor = 0

        while cursor < len(candidates) and len(accepted) < config.batch_size:
            chunk = candidates[cursor : cursor + config.batch_size - len(accepted)]
            cursor += len(chunk)

            scored = await asyncio.gather(*(self._score(item, config) for item in chunk))
            result.scored += len(scored)

            survivors = []
            for item in scored:
                if item.recommendation is Recommendation.REJECT:
                    result.rejected += 1
                    continue
                survivors.append(self.eligibility.apply(item))

            try:
                partition = await self.deduplicator.filter_duplicates(survivors, seen)
            except StorageError as e:
                logger.error("Duplicate lookup failed, stopping evaluation", error=str(e))
                self._add_error(result, f"dedup: {e}")
                result.rejected += len(survivors)
                break

            result.duplicates += len(partition.duplicates)
            result.rejected += len(partition.duplicates)
            accepted.extend(partition.unique)

        if cursor < len(candidates):
            logger.info(
                "Batch cap reached",
                accepted=len(accepted),
                unevaluated=len(candidates) - cursor,
            )
        return accepted

    async def _score(self, item: ContentItem, config: RunConfig) -> ScoredItem:
        if self.config.use_oracle:
            return await self.scorer.score_with_oracle(item, config.score_threshold)
        return self.scorer.score(item, config.score_threshold)

    def _add_error(self, result: RunResult, error: str) -> None:
        if len(result.errors) < self.config.max_reported_errors:
            result.errors.append(error)
        else:
            logger.debug("Error list full, dropping error", error=error)
        result.success = False


__all__ = [
    "FetchOrchestrator",
    "RunResult",
    "SourceStatus",
    "source_labels",
]
