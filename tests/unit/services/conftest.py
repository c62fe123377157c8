"""Shared fixtures for service tests.

Provides an in-memory ContentStore double and item factories.
"""

import uuid
from collections.abc import Callable, Collection
from datetime import UTC, datetime
from typing import Any

import pytest

from intake.core.exceptions import NotFoundError, StorageConflictError
from intake.models.base import ContentCategory
from intake.models.queue import QueueStatus
from intake.services.collector.base import (
    ContentItem,
    ProjectDetails,
    Recommendation,
    ScoredItem,
    ScoreFactors,
)
from intake.services.store.base import ProductionRecord, QueueRecord

_RECORD_FIELDS = set(QueueRecord.model_fields) - {"id", "category", "payload", "created_at"}


class InMemoryContentStore:
    """ContentStore double honoring the same unique constraints as the SQL store.

    Set `failures[method_name] = exc` to make a method raise.
    """

    def __init__(self) -> None:
        self.queue: dict[uuid.UUID, QueueRecord] = {}
        self.production: dict[ContentCategory, dict[str, ProductionRecord]] = {
            category: {} for category in ContentCategory
        }
        self.failures: dict[str, Exception] = {}
        self.calls: list[str] = []

    def _enter(self, name: str) -> None:
        self.calls.append(name)
        if name in self.failures:
            raise self.failures[name]

    async def existing_identities(
        self, url_keys: Collection[str], fingerprints: Collection[str]
    ) -> tuple[set[str], set[str]]:
        self._enter("existing_identities")
        stored_urls = {r.url_key for r in self.queue.values()}
        stored_urls |= {
            p.values.get("url_key") for rows in self.production.values() for p in rows.values()
        }
        stored_fps = {r.payload.get("fingerprint") for r in self.queue.values()}
        return set(url_keys) & stored_urls, set(fingerprints) & stored_fps

    async def insert_queue_record(
        self, category: ContentCategory, values: dict[str, Any]
    ) -> QueueRecord:
        self._enter("insert_queue_record")
        for record in self.queue.values():
            if (
                record.category is category
                and record.url == values["url"]
                and record.source == values["source"]
            ):
                raise StorageConflictError(f"queue_{category.value}", "url,source", values["url"])
        record = QueueRecord(
            id=uuid.uuid4(),
            category=category,
            created_at=datetime.now(UTC),
            payload={k: v for k, v in values.items() if k not in _RECORD_FIELDS},
            **{k: v for k, v in values.items() if k in _RECORD_FIELDS},
        )
        self.queue[record.id] = record
        return record

    async def get_queue_record(self, record_id: uuid.UUID) -> QueueRecord | None:
        self._enter("get_queue_record")
        return self.queue.get(record_id)

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
        self._enter("update_queue_status")
        record = self.queue.get(record_id)
        if record is None:
            raise NotFoundError("QueueRecord", str(record_id))
        update: dict[str, Any] = {
            "status": status,
            "reviewed_by": reviewed_by,
            "reviewed_at": reviewed_at,
        }
        if rejection_reason is not None:
            update["rejection_reason"] = rejection_reason
        if reviewer_notes is not None:
            update["reviewer_notes"] = reviewer_notes
        self.queue[record_id] = record.model_copy(update=update)
        return self.queue[record_id]

    async def list_queue_records(
        self,
        status: QueueStatus,
        *,
        min_score: int | None = None,
        category: ContentCategory | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[QueueRecord]:
        self._enter("list_queue_records")
        records = [
            r
            for r in self.queue.values()
            if r.status is status
            and (min_score is None or r.score >= min_score)
            and (category is None or r.category is category)
        ]
        records.sort(key=lambda r: -r.score)
        return records[offset : offset + limit]

    async def count_queue_records(self) -> dict[ContentCategory, dict[QueueStatus, int]]:
        self._enter("count_queue_records")
        counts = {c: {s: 0 for s in QueueStatus} for c in ContentCategory}
        for record in self.queue.values():
            counts[record.category][record.status] += 1
        return counts

    async def insert_production(
        self, category: ContentCategory, values: dict[str, Any]
    ) -> ProductionRecord:
        self._enter("insert_production")
        rows = self.production[category]
        if values["url"] in rows:
            raise StorageConflictError(category.value, "url", values["url"])
        record = ProductionRecord(
            id=uuid.uuid4(),
            category=category,
            url=values["url"],
            queue_record_id=values.get("queue_record_id"),
            values=dict(values),
        )
        rows[record.url] = record
        return record

    async def update_production_by_url(
        self, category: ContentCategory, url: str, values: dict[str, Any]
    ) -> ProductionRecord:
        self._enter("update_production_by_url")
        rows = self.production[category]
        if url not in rows:
            raise NotFoundError(category.value, url)
        existing = rows[url]
        merged = {**existing.values, **{k: v for k, v in values.items() if k != "url"}}
        rows[url] = existing.model_copy(
            update={"values": merged, "queue_record_id": merged.get("queue_record_id")}
        )
        return rows[url]

    async def find_production_by_url(
        self, category: ContentCategory, url: str
    ) -> ProductionRecord | None:
        self._enter("find_production_by_url")
        return self.production[category].get(url)


@pytest.fixture
def store() -> InMemoryContentStore:
    """Create an empty in-memory content store."""
    return InMemoryContentStore()


@pytest.fixture
def make_item() -> Callable[..., ContentItem]:
    """Factory for ContentItem with sensible defaults."""

    def _make(
        title: str = "Open source AI platform for builders",
        description: str = "A developer framework that helps founders ship blockchain apps faster.",
        url: str | None = "https://example.com/project",
        source: str = "test",
        published_at: datetime | None = None,
        **kwargs: Any,
    ) -> ContentItem:
        kwargs.setdefault("details", ProjectDetails(team_size=3, metrics={"stars": 10}))
        return ContentItem(
            title=title,
            description=description,
            url=url,
            source=source,
            published_at=published_at or datetime.now(UTC),
            **kwargs,
        )

    return _make


@pytest.fixture
def make_scored_item(make_item: Callable[..., ContentItem]) -> Callable[..., ScoredItem]:
    """Factory for ScoredItem with a fixed score."""

    def _make(
        score: int = 60,
        confidence: float = 1.0,
        recommendation: Recommendation = Recommendation.APPROVE,
        **kwargs: Any,
    ) -> ScoredItem:
        return ScoredItem.from_item(
            make_item(**kwargs),
            score=score,
            confidence=confidence,
            factors=ScoreFactors(quality=20, relevance=20, freshness=10, completeness=10),
            recommendation=recommendation,
        )

    return _make


@pytest.fixture
def add_queue_record(store: InMemoryContentStore) -> Callable[..., Any]:
    """Insert a pending queue record directly into the store."""

    async def _add(
        score: int = 60,
        url: str = "https://example.com/queued",
        category: ContentCategory = ContentCategory.PROJECT,
        **values: Any,
    ) -> QueueRecord:
        return await store.insert_queue_record(
            category,
            {
                "title": values.pop("title", f"Queued {url}"),
                "description": "Queued item description long enough",
                "url": url,
                "url_key": url.removeprefix("https://"),
                "fingerprint": uuid.uuid4().hex,
                "source": values.pop("source", "test"),
                "score": score,
                "status": values.pop("status", QueueStatus.PENDING_REVIEW),
                **values,
            },
        )

    return _add
