"""Approval service.

Moves queue records through pending_review -> approved | rejected and
promotes approved records into the production tables.

Queue and production writes are separate operations. When the production
write succeeds and the queue status update fails, the record stays pending
with its production row in place; `reconcile()` closes that window.
"""

import uuid
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from intake.config.content import ApprovalConfig
from intake.core.exceptions import NotFoundError, StorageConflictError, StorageError
from intake.core.logging import get_logger
from intake.core.state_machine import InvalidTransitionError, create_queue_state_machine
from intake.models.queue import QueueStatus
from intake.services.review.transforms import production_values
from intake.services.store.base import ContentStore, ProductionRecord, QueueRecord

logger = get_logger(__name__)


class ApprovalAction(str, Enum):
    """Reviewer decision."""

    APPROVE = "approve"
    REJECT = "reject"


class ApprovalResponse(BaseModel):
    """Result of one approval operation.

    Attributes:
        success: Whether the operation completed
        message: Human-readable summary
        data: Operation details (ids, category, whether production was created)
        error: Failure description when success is False
    """

    success: bool
    message: str
    data: dict[str, Any] | None = None
    error: str | None = None


class BulkApprovalResult(BaseModel):
    """Aggregated result of a bulk approval.

    Attributes:
        successful: Records approved
        failed: Records that could not be approved
        results: Per-record responses keyed by record id
        error: Set when the batch could not be selected at all
    """

    successful: int = 0
    failed: int = 0
    results: dict[str, ApprovalResponse] = Field(default_factory=dict)
    error: str | None = None


class ReconcileResult(BaseModel):
    """Result of a reconciliation sweep.

    Attributes:
        checked: Pending records inspected
        reconciled: Records marked approved
        errors: Per-record failures
    """

    checked: int = 0
    reconciled: int = 0
    errors: list[str] = Field(default_factory=list)


class QueueStats(BaseModel):
    """Queue record counts.

    Attributes:
        counts: category -> status -> count
        error: Set when the counts could not be read
    """

    counts: dict[str, dict[str, int]] = Field(default_factory=dict)
    error: str | None = None


def _failure(message: str, error: Exception | str, **data: Any) -> ApprovalResponse:
    return ApprovalResponse(success=False, message=message, data=data or None, error=str(error))


class ApprovalService:
    """Approves and rejects queue records.

    Every public method returns a structured response; storage failures
    never escape as exceptions.
    """

    def __init__(self, store: ContentStore, config: ApprovalConfig | None = None):
        """Initialize approval service.

        Args:
            store: Persistent store
            config: Approval configuration (uses defaults if not provided)
        """
        self.store = store
        self.config = config or ApprovalConfig()

    async def process_approval(
        self,
        record_id: uuid.UUID | str,
        action: ApprovalAction | str,
        reviewer: str = "system",
        notes: str | None = None,
    ) -> ApprovalResponse:
        """Apply a reviewer decision to a queue record.

        Args:
            record_id: Queue record id
            action: approve or reject
            reviewer: Reviewer id
            notes: Reviewer notes (rejection reason for reject)

        Returns:
            ApprovalResponse
        """
        try:
            action = ApprovalAction(action)
        except ValueError as e:
            return _failure(f"Unknown action: {action}", e)

        if action is ApprovalAction.APPROVE:
            return await self.approve(record_id, reviewer=reviewer, notes=notes)
        return await self.reject(record_id, reviewer=reviewer, reason=notes)

    async def approve(
        self,
        record_id: uuid.UUID | str,
        reviewer: str = "system",
        notes: str | None = None,
    ) -> ApprovalResponse:
        """Promote a queue record into its production table.

        A URL already present in production is updated in place. Approving
        an already approved record re-applies the production upsert.

        Args:
            record_id: Queue record id
            reviewer: Reviewer id
            notes: Reviewer notes

        Returns:
            ApprovalResponse; data carries production_id and created
        """
        loaded = await self._load(record_id)
        if isinstance(loaded, ApprovalResponse):
            return loaded
        record = loaded

        if record.status is not QueueStatus.APPROVED:
            machine = create_queue_state_machine(record.status.value)
            if not machine.can_transition(QueueStatus.APPROVED):
                error = InvalidTransitionError(
                    record.status, QueueStatus.APPROVED, machine.allowed_transitions
                )
                return _failure("Record cannot be approved", error, record_id=str(record.id))

        now = datetime.now(UTC)
        values = production_values(record, approved_by=reviewer, approved_at=now)

        try:
            production, created = await self._upsert_production(record, values)
        except StorageError as e:
            logger.error(
                "Production write failed",
                record_id=str(record.id),
                category=record.category.value,
                error=str(e),
                exc_info=True,
            )
            return _failure("Production write failed", e, record_id=str(record.id))

        data = {
            "record_id": str(record.id),
            "production_id": str(production.id),
            "category": record.category.value,
            "created": created,
        }

        if record.status is not QueueStatus.APPROVED:
            try:
                await self.store.update_queue_status(
                    record.id,
                    QueueStatus.APPROVED,
                    reviewed_by=reviewer,
                    reviewed_at=now,
                    reviewer_notes=notes,
                )
            except StorageError as e:
                logger.error(
                    "Production written but queue status update failed",
                    record_id=str(record.id),
                    production_id=str(production.id),
                    error=str(e),
                    exc_info=True,
                )
                return _failure("Approved in production, queue status not updated", e, **data)

        logger.info(
            "Record approved",
            record_id=str(record.id),
            category=record.category.value,
            reviewer=reviewer,
            created=created,
        )
        verb = "Created" if created else "Updated"
        return ApprovalResponse(success=True, message=f"{verb} production record", data=data)

    async def reject(
        self,
        record_id: uuid.UUID | str,
        reviewer: str = "system",
        reason: str | None = None,
    ) -> ApprovalResponse:
        """Reject a queue record.

        Rejecting an already rejected record is a no-op success.

        Args:
            record_id: Queue record id
            reviewer: Reviewer id
            reason: Rejection reason

        Returns:
            ApprovalResponse
        """
        loaded = await self._load(record_id)
        if isinstance(loaded, ApprovalResponse):
            return loaded
        record = loaded
        data = {"record_id": str(record.id), "category": record.category.value}

        if record.status is QueueStatus.REJECTED:
            return ApprovalResponse(success=True, message="Record already rejected", data=data)

        machine = create_queue_state_machine(record.status.value)
        try:
            machine.transition(QueueStatus.REJECTED)
        except InvalidTransitionError as e:
            return _failure("Record cannot be rejected", e, **data)

        try:
            await self.store.update_queue_status(
                record.id,
                QueueStatus.REJECTED,
                reviewed_by=reviewer,
                reviewed_at=datetime.now(UTC),
                rejection_reason=reason,
            )
        except StorageError as e:
            logger.error("Reject failed", record_id=str(record.id), error=str(e), exc_info=True)
            return _failure("Reject failed", e, **data)

        logger.info("Record rejected", record_id=str(record.id), reviewer=reviewer)
        return ApprovalResponse(success=True, message="Record rejected", data=data)

    async def bulk_approve(
        self,
        record_ids: list[uuid.UUID | str],
        reviewer: str = "system",
    ) -> BulkApprovalResult:
        """Approve records one by one; failures do not stop the batch.

        Args:
            record_ids: Queue record ids
            reviewer: Reviewer id

        Returns:
            BulkApprovalResult
        """
        result = BulkApprovalResult()
        for record_id in record_ids:
            response = await self.approve(record_id, reviewer=reviewer)
            result.results[str(record_id)] = response
            if response.success:
                result.successful += 1
            else:
                result.failed += 1

        logger.info(
            "Bulk approval complete",
            total=len(record_ids),
            successful=result.successful,
            failed=result.failed,
        )
        return result

    async def auto_approve(self, min_score: int) -> BulkApprovalResult:
        """Approve pending records scoring at least `min_score`.

        At most `auto_approve_page_size` records are approved per call,
        highest score first.

        Args:
            min_score: Minimum score (inclusive)

        Returns:
            BulkApprovalResult
        """
        try:
            records = await self.store.list_queue_records(
                QueueStatus.PENDING_REVIEW,
                min_score=min_score,
                limit=self.config.auto_approve_page_size,
            )
        except StorageError as e:
            logger.error("Auto-approval selection failed", error=str(e), exc_info=True)
            return BulkApprovalResult(error=str(e))

        logger.info("Auto-approving records", min_score=min_score, selected=len(records))
        return await self.bulk_approve([r.id for r in records], reviewer=self.config.auto_reviewer)

    async def reconcile(self, limit: int | None = None) -> ReconcileResult:
        """Mark pending records approved when their production row already exists.

        Only production rows whose `queue_record_id` points back at the
        record are matched. Safe to run repeatedly.

        Args:
            limit: Pending records to inspect (defaults to reconcile_page_size)

        Returns:
            ReconcileResult
        """
        result = ReconcileResult()
        try:
            records = await self.store.list_queue_records(
                QueueStatus.PENDING_REVIEW,
                limit=limit or self.config.reconcile_page_size,
            )
        except StorageError as e:
            result.errors.append(str(e))
            return result

        for record in records:
            result.checked += 1
            try:
                production = await self.store.find_production_by_url(record.category, record.url)
                if production is None or production.queue_record_id != record.id:
                    continue
                await self.store.update_queue_status(
                    record.id,
                    QueueStatus.APPROVED,
                    reviewed_by=production.values.get("approved_by") or self.config.auto_reviewer,
                    reviewed_at=production.values.get("approved_at") or datetime.now(UTC),
                )
            except StorageError as e:
                result.errors.append(f"{record.id}: {e}")
                continue
            result.reconciled += 1
            logger.info("Reconciled approved record", record_id=str(record.id))

        return result

    async def queue_stats(self) -> QueueStats:
        """Count queue records per category and status.

        Returns:
            QueueStats; `error` is set and `counts` empty when the store fails
        """
        try:
            counts = await self.store.count_queue_records()
        except StorageError as e:
            logger.error("Queue stats lookup failed", error=str(e), exc_info=True)
            return QueueStats(error=str(e))

        return QueueStats(
            counts={
                category.value: {status.value: n for status, n in per_status.items()}
                for category, per_status in counts.items()
            }
        )

    async def _load(self, record_id: uuid.UUID | str) -> QueueRecord | ApprovalResponse:
        try:
            record_uuid = (
                record_id if isinstance(record_id, uuid.UUID) else uuid.UUID(str(record_id))
            )
        except ValueError as e:
            return _failure("Invalid record id", e, record_id=str(record_id))

        try:
            record = await self.store.get_queue_record(record_uuid)
        except StorageError as e:
            return _failure("Queue lookup failed", e, record_id=str(record_id))

        if record is None:
            return _failure(
                "Queue record not found",
                NotFoundError("QueueRecord", str(record_uuid)),
                record_id=str(record_uuid),
            )
        return record

    async def _upsert_production(
        self, record: QueueRecord, values: dict[str, Any]
    ) -> tuple[ProductionRecord, bool]:
        try:
            return await self.store.insert_production(record.category, values), True
        except StorageConflictError:
            logger.info(
                "Production URL exists, updating",
                record_id=str(record.id),
                url=record.url,
            )
            updated = await self.store.update_production_by_url(record.category, record.url, values)
            return updated, False


__all__ = [
    "ApprovalAction",
    "ApprovalResponse",
    "ApprovalService",
    "BulkApprovalResult",
    "QueueStats",
    "ReconcileResult",
]
