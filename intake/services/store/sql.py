"""SQLAlchemy implementation of the content store.

Each operation opens its own session and commits on success; there is no
transaction spanning several operations. Unique-constraint violations are
reported as StorageConflictError so callers can apply their skip/update
policy, everything else as StorageError.
"""

import uuid
from collections.abc import Callable, Collection
from datetime import datetime
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from intake.core.exceptions import NotFoundError, StorageConflictError, StorageError
from intake.core.logging import get_logger
from intake.models.base import ContentCategory
from intake.models.production import PRODUCTION_MODELS, ProductionModel
from intake.models.queue import QUEUE_MODELS, QueueModel, QueueStatus
from intake.services.store.base import ProductionRecord, QueueRecord

logger = get_logger(__name__)

SessionFactory = Callable[[], AsyncSession]

# Postgres SQLSTATE for unique_violation
UNIQUE_VIOLATION = "23505"

_RECORD_FIELDS = set(QueueRecord.model_fields) - {"category", "payload"}
_HIDDEN_COLUMNS = {"updated_at"}
_PRODUCTION_META = {"id", "created_at", "updated_at"}


def is_unique_violation(exc: IntegrityError) -> bool:
    """Check whether an IntegrityError was caused by a unique constraint.

    Args:
        exc: Error raised by the driver

    Returns:
        True for unique violations (Postgres 23505, SQLite UNIQUE failures)
    """
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code == UNIQUE_VIOLATION:
        return True
    message = str(orig).lower()
    return "unique" in message or "duplicate key" in message


def _to_queue_record(category: ContentCategory, row: QueueModel) -> QueueRecord:
    columns = {c.key: getattr(row, c.key) for c in row.__table__.columns}
    payload = {
        k: v for k, v in columns.items() if k not in _RECORD_FIELDS and k not in _HIDDEN_COLUMNS
    }
    return QueueRecord(
        category=category,
        payload=payload,
        **{k: v for k, v in columns.items() if k in _RECORD_FIELDS},
    )


def _to_production_record(category: ContentCategory, row: ProductionModel) -> ProductionRecord:
    values = {
        c.key: getattr(row, c.key) for c in row.__table__.columns if c.key not in _PRODUCTION_META
    }
    return ProductionRecord(
        id=row.id,
        category=category,
        url=row.url,
        queue_record_id=row.queue_record_id,
        values=values,
    )


class SqlContentStore:
    """Content store backed by SQLAlchemy async sessions.

    Attributes:
        db_session_factory: Factory producing AsyncSession instances
    """

    def __init__(self, db_session_factory: SessionFactory):
        """Initialize store.

        Args:
            db_session_factory: Session factory from the DI container
        """
        self.db_session_factory = db_session_factory

    # ------------------------------------------------------------------
    # Identity lookups
    # ------------------------------------------------------------------

    async def existing_identities(
        self,
        url_keys: Collection[str],
        fingerprints: Collection[str],
    ) -> tuple[set[str], set[str]]:
        """Return the URL keys and fingerprints already present in any table."""
        found_urls: set[str] = set()
        found_fingerprints: set[str] = set()
        if not url_keys and not fingerprints:
            return found_urls, found_fingerprints

        try:
            async with self.db_session_factory() as session:
                for queue_model in QUEUE_MODELS.values():
                    if url_keys:
                        result = await session.execute(
                            select(queue_model.url_key).where(queue_model.url_key.in_(url_keys))
                        )
                        found_urls.update(result.scalars().all())
                    if fingerprints:
                        result = await session.execute(
                            select(queue_model.fingerprint).where(
                                queue_model.fingerprint.in_(fingerprints)
                            )
                        )
                        found_fingerprints.update(result.scalars().all())
                if url_keys:
                    for production_model in PRODUCTION_MODELS.values():
                        result = await session.execute(
                            select(production_model.url_key).where(
                                production_model.url_key.in_(url_keys)
                            )
                        )
                        found_urls.update(result.scalars().all())
        except SQLAlchemyError as e:
            raise StorageError(f"Identity lookup failed: {e}", operation="select") from e

        return found_urls, found_fingerprints

    # ------------------------------------------------------------------
    # Queue
    # ------------------------------------------------------------------

    async def insert_queue_record(
        self, category: ContentCategory, values: dict[str, Any]
    ) -> QueueRecord:
        """Insert a queue row.

        Raises:
            StorageConflictError: If (url, source) is already queued
            StorageError: For any other failure
        """
        model = QUEUE_MODELS[category]
        row = model(**values)
        async with self.db_session_factory() as session:
            try:
                session.add(row)
                await session.commit()
                await session.refresh(row)
            except IntegrityError as e:
                await session.rollback()
                if is_unique_violation(e):
                    raise StorageConflictError(
                        model.__tablename__,
                        "url,source",
                        f"{values.get('url')},{values.get('source')}",
                    ) from e
                raise StorageError(f"Queue insert failed: {e.orig}", operation="insert") from e
            except SQLAlchemyError as e:
                await session.rollback()
                raise StorageError(f"Queue insert failed: {e}", operation="insert") from e
            return _to_queue_record(category, row)

    async def get_queue_record(self, record_id: uuid.UUID) -> QueueRecord | None:
        """Fetch a queue row from any category by id."""
        try:
            async with self.db_session_factory() as session:
                for category, model in QUEUE_MODELS.items():
                    row = await session.get(model, record_id)
                    if row is not None:
                        return _to_queue_record(category, row)
        except SQLAlchemyError as e:
            raise StorageError(f"Queue lookup failed: {e}", operation="select") from e
        return None

    async def update_queue_status(
        self,
        record_id: uuid.UUID,
        status: QueueStatus,
        *,
        reviewed_by: str,
        reviewed_at: datetime,
        rejection_reason: str | None = None,
        reviewer_notes: str | None = None,
    ) -> QueueRecord:
        """Set the review status of a queue row.

        Raises:
            NotFoundError: If no queue row has this id
            StorageError: For any other failure
        """
        async with self.db_session_factory() as session:
            try:
                for category, model in QUEUE_MODELS.items():
                    row = await session.get(model, record_id)
                    if row is None:
                        continue
                    row.status = status
                    row.reviewed_by = reviewed_by
                    row.reviewed_at = reviewed_at
                    if rejection_reason is not None:
                        row.rejection_reason = rejection_reason
                    if reviewer_notes is not None:
                        row.reviewer_notes = reviewer_notes
                    await session.commit()
                    await session.refresh(row)
                    return _to_queue_record(category, row)
            except SQLAlchemyError as e:
                await session.rollback()
                raise StorageError(f"Queue status update failed: {e}", operation="update") from e
        raise NotFoundError("QueueRecord", str(record_id))

    async def list_queue_records(
        self,
        status: QueueStatus,
        *,
        min_score: int | None = None,
        category: ContentCategory | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[QueueRecord]:
        """Select queue rows by status and score, highest score first."""
        categories = [category] if category else list(QUEUE_MODELS)
        records: list[QueueRecord] = []
        try:
            async with self.db_session_factory() as session:
                for cat in categories:
                    model = QUEUE_MODELS[cat]
                    query = select(model).where(model.status == status)
                    if min_score is not None:
                        query = query.where(model.score >= min_score)
                    query = query.order_by(model.score.desc(), model.created_at).limit(
                        offset + limit
                    )
                    result = await session.execute(query)
                    records.extend(_to_queue_record(cat, row) for row in result.scalars().all())
        except SQLAlchemyError as e:
            raise StorageError(f"Queue listing failed: {e}", operation="select") from e

        records.sort(key=lambda r: -r.score)
        return records[offset : offset + limit]

    async def count_queue_records(self) -> dict[ContentCategory, dict[QueueStatus, int]]:
        """Count queue rows per category and status."""
        counts: dict[ContentCategory, dict[QueueStatus, int]] = {}
        try:
            async with self.db_session_factory() as session:
                for category, model in QUEUE_MODELS.items():
                    result = await session.execute(
                        select(model.status, func.count()).group_by(model.status)
                    )
                    per_status = {status: 0 for status in QueueStatus}
                    for status, count in result.all():
                        per_status[QueueStatus(status)] = count
                    counts[category] = per_status
        except SQLAlchemyError as e:
            raise StorageError(f"Queue stats failed: {e}", operation="select") from e
        return counts

    # ------------------------------------------------------------------
    # Production
    # ------------------------------------------------------------------

    async def insert_production(
        self, category: ContentCategory, values: dict[str, Any]
    ) -> ProductionRecord:
        """Insert a production row.

        Raises:
            StorageConflictError: If a row with this url exists
            StorageError: For any other failure
        """
        model = PRODUCTION_MODELS[category]
        row = model(**values)
        async with self.db_session_factory() as session:
            try:
                session.add(row)
                await session.commit()
                await session.refresh(row)
            except IntegrityError as e:
                await session.rollback()
                if is_unique_violation(e):
                    raise StorageConflictError(
                        model.__tablename__, "url", str(values.get("url"))
                    ) from e
                raise StorageError(f"Production insert failed: {e.orig}", operation="insert") from e
            except SQLAlchemyError as e:
                await session.rollback()
                raise StorageError(f"Production insert failed: {e}", operation="insert") from e
            return _to_production_record(category, row)

    async def update_production_by_url(
        self, category: ContentCategory, url: str, values: dict[str, Any]
    ) -> ProductionRecord:
        """Update the production row with the given url.

        Raises:
            NotFoundError: If no row has this url
            StorageError: For any other failure
        """
        model = PRODUCTION_MODELS[category]
        async with self.db_session_factory() as session:
            try:
                result = await session.execute(select(model).where(model.url == url))
                row = result.scalar_one_or_none()
                if row is None:
                    raise NotFoundError(model.__tablename__, url)
                for key, value in values.items():
                    if key != "url":
                        setattr(row, key, value)
                await session.commit()
                await session.refresh(row)
            except SQLAlchemyError as e:
                await session.rollback()
                raise StorageError(f"Production update failed: {e}", operation="update") from e
            return _to_production_record(category, row)

    async def find_production_by_url(
        self, category: ContentCategory, url: str
    ) -> ProductionRecord | None:
        """Fetch the production row with the given url."""
        model = PRODUCTION_MODELS[category]
        try:
            async with self.db_session_factory() as session:
                result = await session.execute(select(model).where(model.url == url))
                row = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise StorageError(f"Production lookup failed: {e}", operation="select") from e
        return _to_production_record(category, row) if row is not None else None


__all__ = [
    "SqlContentStore",
    "UNIQUE_VIOLATION",
    "is_unique_violation",
]
