"""Payload transforms between pipeline items, queue rows and production rows.

Queue values are built exhaustively per details variant; production values
are a renaming/defaulting of the queue row, not a re-validation.
"""

from datetime import UTC, datetime
from typing import Any

from intake.models.base import ContentCategory
from intake.models.queue import QueueStatus
from intake.services.collector.base import (
    FundingDetails,
    ProjectDetails,
    ResourceDetails,
    ScoredItem,
)
from intake.services.collector.deduplicator import ItemIdentity
from intake.services.store.base import QueueRecord

DEFAULT_FUNDING_TYPE = "grant"
DEFAULT_MIN_AMOUNT = 10_000.0
DEFAULT_MAX_AMOUNT = 500_000.0


def queue_values(item: ScoredItem, identity: ItemIdentity) -> dict[str, Any]:
    """Build the column values of a queue row for a scored item.

    Args:
        item: Scored item that passed the staging gate
        identity: Identity keys computed by the deduplicator

    Returns:
        Column name -> value for the item's queue table
    """
    values: dict[str, Any] = {
        "title": item.title,
        "description": item.description,
        "url": item.url,
        "url_key": identity.url_key,
        "fingerprint": identity.fingerprint,
        "source": item.source,
        "tags": sorted(item.tags),
        "score": item.score,
        "confidence": item.confidence,
        "factors": {**item.factors.model_dump(), "oracle_boost": item.oracle_boost},
        "recommendation": item.recommendation.value,
        "eligibility_warnings": list(item.eligibility.reasons) if item.eligibility else [],
        "status": QueueStatus.PENDING_REVIEW,
        "published_at": item.published_at,
    }

    details = item.details
    if isinstance(details, ProjectDetails):
        values.update(
            team_size=details.team_size,
            funding_raised=details.funding_raised,
            launch_date=details.launch_date,
            founders=list(details.founders),
            tech_stack=list(details.tech_stack),
            project_needs=list(details.project_needs),
            metrics=dict(details.metrics),
        )
    elif isinstance(details, FundingDetails):
        values.update(
            organization=details.organization,
            funding_type=details.funding_type,
            min_amount=details.min_amount,
            max_amount=details.max_amount,
            currency=details.currency,
            application_deadline=details.application_deadline,
            is_active=details.is_active,
            eligibility_criteria=list(details.eligibility_criteria),
        )
    elif isinstance(details, ResourceDetails):
        values.update(
            resource_type=details.resource_type,
            author=details.author,
            price_type=details.price_type,
            metrics=dict(details.metrics),
        )
    return values


def production_values(
    record: QueueRecord,
    approved_by: str,
    approved_at: datetime | None = None,
) -> dict[str, Any]:
    """Build the column values of a production row from a queue record.

    Args:
        record: Queue record being approved
        approved_by: Reviewer id
        approved_at: Approval time (defaults to now)

    Returns:
        Column name -> value for the category's production table
    """
    payload = record.payload
    values: dict[str, Any] = {
        "description": record.description,
        "url": record.url,
        "url_key": record.url_key,
        "source": record.source,
        "tags": list(record.tags),
        "score": record.score,
        "queue_record_id": record.id,
        "approved_by": approved_by,
        "approved_at": approved_at or datetime.now(UTC),
    }

    if record.category is ContentCategory.PROJECT:
        values.update(
            name=record.title,
            team_size=payload.get("team_size"),
            funding_raised=payload.get("funding_raised"),
            launch_date=payload.get("launch_date"),
            founders=payload.get("founders") or [],
            tech_stack=payload.get("tech_stack") or [],
            project_needs=payload.get("project_needs") or [],
            metrics=payload.get("metrics") or {},
        )
    elif record.category is ContentCategory.FUNDING:
        values.update(
            name=record.title,
            organization=payload.get("organization") or record.source,
            funding_type=payload.get("funding_type") or DEFAULT_FUNDING_TYPE,
            min_amount=_amount(payload.get("min_amount"), DEFAULT_MIN_AMOUNT),
            max_amount=_amount(payload.get("max_amount"), DEFAULT_MAX_AMOUNT),
            currency=payload.get("currency") or "USD",
            application_deadline=payload.get("application_deadline"),
            is_active=payload.get("is_active", True),
            eligibility_criteria=payload.get("eligibility_criteria") or [],
        )
    elif record.category is ContentCategory.RESOURCE:
        values.update(
            title=record.title,
            resource_type=payload.get("resource_type") or "article",
            author=payload.get("author"),
            price_type=payload.get("price_type") or "free",
            metrics=payload.get("metrics") or {},
        )
    return values


def _amount(value: Any, default: float) -> float:
    return float(value) if value is not None else default


__all__ = [
    "DEFAULT_FUNDING_TYPE",
    "DEFAULT_MAX_AMOUNT",
    "DEFAULT_MIN_AMOUNT",
    "production_values",
    "queue_values",
]
