"""Unit tests for ingestion tasks.

Tests the Celery tasks and their async bodies:
- Container lifecycle around each run
- Config defaults for task arguments
- Beat schedule construction
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from celery.schedules import crontab

from intake.config.pipeline import RunConfig
from intake.core.config import Config
from intake.services.collector.pipeline import RunResult
from intake.services.review.approval import BulkApprovalResult, ReconcileResult
from intake.workers.celery_app import build_beat_schedule
from intake.workers.ingest import (
    _auto_approve_async,
    _reconcile_async,
    _run_ingestion_async,
    auto_approve,
    run_ingestion,
)


@pytest.fixture
def mock_container() -> MagicMock:
    """Container whose services are mocks and whose clients can be closed."""
    container = MagicMock()
    container.infrastructure.http_client.return_value.close = AsyncMock()
    orchestrator = MagicMock()
    orchestrator.run = AsyncMock(return_value=RunResult(fetched=3, stored=2, rejected=1))
    container.services.fetch_orchestrator.return_value = orchestrator
    approval = MagicMock()
    approval.auto_approve = AsyncMock(return_value=BulkApprovalResult(successful=2))
    approval.reconcile = AsyncMock(return_value=ReconcileResult(checked=4, reconciled=1))
    container.services.approval_service.return_value = approval
    return container


class TestAsyncBodies:
    """Tests for the async task bodies."""

    @pytest.mark.asyncio
    async def test_run_ingestion_async(self, mock_container):
        """The orchestrator runs with the given config and resources are released."""
        with (
            patch("intake.workers.ingest.get_container", return_value=mock_container),
            patch("intake.workers.ingest.close_db", new=AsyncMock()) as close_db,
        ):
            result = await _run_ingestion_async(RunConfig(batch_size=5))

        assert result["stored"] == 2
        orchestrator = mock_container.services.fetch_orchestrator.return_value
        orchestrator.run.assert_awaited_once_with(RunConfig(batch_size=5))
        mock_container.infrastructure.http_client.return_value.close.assert_awaited_once()
        close_db.assert_awaited_once()
        mock_container.reset_singletons.assert_called_once()

    @pytest.mark.asyncio
    async def test_resources_released_on_failure(self, mock_container):
        """Clients are closed even when the run raises."""
        mock_container.services.fetch_orchestrator.return_value.run.side_effect = RuntimeError(
            "boom"
        )

        with (
            patch("intake.workers.ingest.get_container", return_value=mock_container),
            patch("intake.workers.ingest.close_db", new=AsyncMock()),
            pytest.raises(RuntimeError),
        ):
            await _run_ingestion_async(RunConfig())

        mock_container.reset_singletons.assert_called_once()

    @pytest.mark.asyncio
    async def test_auto_approve_async(self, mock_container):
        """Auto-approval passes the minimum score through."""
        with (
            patch("intake.workers.ingest.get_container", return_value=mock_container),
            patch("intake.workers.ingest.close_db", new=AsyncMock()),
        ):
            result = await _auto_approve_async(80)

        assert result["successful"] == 2
        approval = mock_container.services.approval_service.return_value
        approval.auto_approve.assert_awaited_once_with(80)

    @pytest.mark.asyncio
    async def test_reconcile_async(self, mock_container):
        """Reconcile returns its counts."""
        with (
            patch("intake.workers.ingest.get_container", return_value=mock_container),
            patch("intake.workers.ingest.close_db", new=AsyncMock()),
        ):
            result = await _reconcile_async(None)

        assert result == {"checked": 4, "reconciled": 1, "errors": []}


class TestTasks:
    """Tests for the Celery task wrappers."""

    def test_run_ingestion_defaults_from_config(self, mock_container):
        """Missing arguments fall back to Config values."""
        mock_container.config.return_value = Config(
            _env_file=None, ingest_batch_size=15, ingest_score_threshold=45
        )
        body = AsyncMock(return_value=RunResult().model_dump())

        with (
            patch("intake.workers.ingest.get_container", return_value=mock_container),
            patch("intake.workers.ingest._run_ingestion_async", new=body),
        ):
            result = run_ingestion()

        body.assert_awaited_once_with(RunConfig(batch_size=15, score_threshold=45))
        assert result["success"] is True

    def test_run_ingestion_explicit_arguments(self, mock_container):
        """Explicit arguments win over Config values."""
        mock_container.config.return_value = Config(_env_file=None)
        body = AsyncMock(return_value=RunResult().model_dump())

        with (
            patch("intake.workers.ingest.get_container", return_value=mock_container),
            patch("intake.workers.ingest._run_ingestion_async", new=body),
        ):
            run_ingestion(batch_size=7, score_threshold=0)

        body.assert_awaited_once_with(RunConfig(batch_size=7, score_threshold=0))

    def test_failure_raises_when_called_directly(self, mock_container):
        """Outside a worker, retry re-raises the original error."""
        mock_container.config.return_value = Config(_env_file=None)

        with (
            patch("intake.workers.ingest.get_container", return_value=mock_container),
            patch(
                "intake.workers.ingest._run_ingestion_async",
                new=AsyncMock(side_effect=ConnectionError("db down")),
            ),
            pytest.raises(ConnectionError),
        ):
            run_ingestion()

    def test_auto_approve_default_score(self, mock_container):
        """The minimum score defaults to Config.auto_approve_min_score."""
        mock_container.config.return_value = Config(_env_file=None, auto_approve_min_score=90)
        body = AsyncMock(return_value=BulkApprovalResult().model_dump())

        with (
            patch("intake.workers.ingest.get_container", return_value=mock_container),
            patch("intake.workers.ingest._auto_approve_async", new=body),
        ):
            auto_approve()

        body.assert_awaited_once_with(90)


class TestBeatSchedule:
    """Tests for build_beat_schedule."""

    def test_default_schedule(self):
        """Ingestion and reconciliation are always scheduled."""
        schedule = build_beat_schedule(Config(_env_file=None, ingest_interval_minutes=60))

        assert set(schedule) == {"ingest-run", "ingest-reconcile"}
        assert schedule["ingest-run"]["schedule"].total_seconds() == 3600
        assert schedule["ingest-reconcile"]["schedule"] == crontab(minute=30)

    def test_auto_approve_scheduled_when_enabled(self):
        """Auto-approval is scheduled only when enabled."""
        schedule = build_beat_schedule(
            Config(_env_file=None, auto_approve_enabled=True, auto_approve_min_score=88)
        )

        entry = schedule["ingest-auto-approve"]
        assert entry["task"] == "intake.ingest.auto_approve"
        assert entry["kwargs"] == {"min_score": 88}
