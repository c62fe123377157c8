"""Ingestion Celery tasks.

Tasks:
- run_ingestion: one fetch -> score -> dedup -> stage pass
- auto_approve: approve pending records above a score
- reconcile: close the approval partial-success window

Each task builds its services from the DI container inside `asyncio.run`
and releases the event-loop-bound singletons (HTTP client, DB engine)
before returning.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from celery import shared_task

from intake.config.pipeline import RunConfig
from intake.core.container import ApplicationContainer, get_container
from intake.core.database import close_db
from intake.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


async def _in_container(fn: Callable[[ApplicationContainer], Awaitable[T]]) -> T:
    container = get_container()
    try:
        return await fn(container)
    finally:
        await container.infrastructure.http_client().close()
        await close_db(container.infrastructure.db_engine())
        container.reset_singletons()


async def _run_ingestion_async(run_config: RunConfig) -> dict[str, Any]:
    async def run(container: ApplicationContainer) -> dict[str, Any]:
        result = await container.services.fetch_orchestrator().run(run_config)
        return result.model_dump()

    return await _in_container(run)


async def _auto_approve_async(min_score: int) -> dict[str, Any]:
    async def run(container: ApplicationContainer) -> dict[str, Any]:
        result = await container.services.approval_service().auto_approve(min_score)
        return result.model_dump()

    return await _in_container(run)


async def _reconcile_async(limit: int | None) -> dict[str, Any]:
    async def run(container: ApplicationContainer) -> dict[str, Any]:
        result = await container.services.approval_service().reconcile(limit)
        return result.model_dump()

    return await _in_container(run)


# =============================================================================
# Celery Tasks
# =============================================================================


@shared_task(
    bind=True,
    name="intake.ingest.run",
    max_retries=2,
    default_retry_delay=300,
)
def run_ingestion(
    self,
    batch_size: int | None = None,
    score_threshold: int | None = None,
) -> dict[str, Any]:
    """Run one ingestion pass.

    Args:
        self: Celery task instance
        batch_size: Accepted-item cap (defaults to Config.ingest_batch_size)
        score_threshold: Minimum score to stage (defaults to Config.ingest_score_threshold)

    Returns:
        RunResult as dict
    """
    config = get_container().config()
    run_config = RunConfig(
        batch_size=batch_size if batch_size is not None else config.ingest_batch_size,
        score_threshold=(
            score_threshold if score_threshold is not None else config.ingest_score_threshold
        ),
    )
    logger.info("Ingestion task started", **run_config.model_dump())

    try:
        result = asyncio.run(_run_ingestion_async(run_config))
    except Exception as exc:
        logger.error("Ingestion task failed", error=str(exc), exc_info=True)
        raise self.retry(exc=exc) from exc

    logger.info(
        "Ingestion task complete",
        run_id=result["run_id"],
        stored=result["stored"],
        rejected=result["rejected"],
        errors=len(result["errors"]),
    )
    return result


@shared_task(
    bind=True,
    name="intake.ingest.auto_approve",
    max_retries=2,
    default_retry_delay=60,
)
def auto_approve(self, min_score: int | None = None) -> dict[str, Any]:
    """Approve pending records scoring at least `min_score`.

    Args:
        self: Celery task instance
        min_score: Minimum score (defaults to Config.auto_approve_min_score)

    Returns:
        BulkApprovalResult as dict
    """
    if min_score is None:
        min_score = get_container().config().auto_approve_min_score

    try:
        result = asyncio.run(_auto_approve_async(min_score))
    except Exception as exc:
        logger.error("Auto-approval task failed", error=str(exc), exc_info=True)
        raise self.retry(exc=exc) from exc

    logger.info(
        "Auto-approval task complete",
        min_score=min_score,
        successful=result["successful"],
        failed=result["failed"],
    )
    return result


@shared_task(
    bind=True,
    name="intake.ingest.reconcile",
    max_retries=2,
    default_retry_delay=60,
)
def reconcile(self, limit: int | None = None) -> dict[str, Any]:
    """Mark pending records approved when production already holds them.

    Args:
        self: Celery task instance
        limit: Pending records to inspect

    Returns:
        ReconcileResult as dict
    """
    try:
        result = asyncio.run(_reconcile_async(limit))
    except Exception as exc:
        logger.error("Reconcile task failed", error=str(exc), exc_info=True)
        raise self.retry(exc=exc) from exc

    logger.info("Reconcile task complete", **{k: result[k] for k in ("checked", "reconciled")})
    return result


__all__ = [
    "auto_approve",
    "reconcile",
    "run_ingestion",
]
