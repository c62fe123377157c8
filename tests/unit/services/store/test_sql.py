"""Unit tests for SqlContentStore on in-memory SQLite."""

import uuid
from datetime import UTC, datetime
from typing import Any
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import IntegrityError

from intake.core.exceptions import NotFoundError, StorageConflictError
from intake.models.base import ContentCategory
from intake.models.queue import QueueStatus
from intake.services.review.approval import ApprovalService
from intake.services.store.sql import SqlContentStore, is_unique_violation


@pytest.fixture
def sql_store(session_factory) -> SqlContentStore:
    """Create a store bound to the SQLite session factory."""
    return SqlContentStore(session_factory)


def _queue(url: str = "https://a.io/x", source: str = "hn", score: int = 60, **extra: Any):
    return {
        "title": f"Item {url}",
        "description": "Description long enough",
        "url": url,
        "url_key": url.removeprefix("https://"),
        "fingerprint": uuid.uuid4().hex,
        "source": source,
        "score": score,
        "tags": ["ai"],
        "status": QueueStatus.PENDING_REVIEW,
        **extra,
    }


def _project(url: str = "https://a.io/x", **extra: Any) -> dict[str, Any]:
    return {
        "name": "Project",
        "url": url,
        "url_key": url.removeprefix("https://"),
        "source": "hn",
        **extra,
    }


class TestUniqueViolation:
    """Tests for is_unique_violation."""

    def test_postgres_sqlstate(self):
        """asyncpg errors carry SQLSTATE 23505."""
        orig = MagicMock(sqlstate="23505")
        assert is_unique_violation(IntegrityError("insert", {}, orig)) is True

    def test_sqlite_message(self):
        """SQLite reports UNIQUE in the message."""
        orig = Exception("UNIQUE constraint failed: projects.url")
        assert is_unique_violation(IntegrityError("insert", {}, orig)) is True

    def test_other_integrity_error(self):
        """NOT NULL violations are not conflicts."""
        orig = Exception("NOT NULL constraint failed: projects.name")
        assert is_unique_violation(IntegrityError("insert", {}, orig)) is False


class TestQueue:
    """Queue table operations."""

    @pytest.mark.asyncio
    async def test_insert_and_get(self, sql_store):
        """Inserted rows round-trip through get_queue_record."""
        inserted = await sql_store.insert_queue_record(
            ContentCategory.PROJECT, _queue(team_size=4)
        )

        fetched = await sql_store.get_queue_record(inserted.id)

        assert fetched is not None
        assert fetched.category is ContentCategory.PROJECT
        assert fetched.status is QueueStatus.PENDING_REVIEW
        assert fetched.url_key == "a.io/x"
        assert fetched.payload["team_size"] == 4
        assert "updated_at" not in fetched.payload

    @pytest.mark.asyncio
    async def test_get_missing(self, sql_store):
        """Unknown ids return None."""
        assert await sql_store.get_queue_record(uuid.uuid4()) is None

    @pytest.mark.asyncio
    async def test_url_source_conflict(self, sql_store):
        """(url, source) is unique per queue table."""
        await sql_store.insert_queue_record(ContentCategory.PROJECT, _queue())

        with pytest.raises(StorageConflictError):
            await sql_store.insert_queue_record(ContentCategory.PROJECT, _queue())

        # Another source may queue the same URL
        await sql_store.insert_queue_record(ContentCategory.PROJECT, _queue(source="github"))

    @pytest.mark.asyncio
    async def test_update_status(self, sql_store):
        """Status updates persist reviewer fields."""
        record = await sql_store.insert_queue_record(ContentCategory.FUNDING, _queue())
        now = datetime.now(UTC)

        updated = await sql_store.update_queue_status(
            record.id,
            QueueStatus.REJECTED,
            reviewed_by="ana",
            reviewed_at=now,
            rejection_reason="expired",
        )

        assert updated.status is QueueStatus.REJECTED
        assert updated.reviewed_by == "ana"
        assert updated.rejection_reason == "expired"

    @pytest.mark.asyncio
    async def test_update_missing(self, sql_store):
        """Updating an unknown id raises NotFoundError."""
        with pytest.raises(NotFoundError):
            await sql_store.update_queue_status(
                uuid.uuid4(),
                QueueStatus.APPROVED,
                reviewed_by="ana",
                reviewed_at=datetime.now(UTC),
            )

    @pytest.mark.asyncio
    async def test_list_across_categories(self, sql_store):
        """Listing merges categories, filters by score and orders highest first."""
        await sql_store.insert_queue_record(
            ContentCategory.PROJECT, _queue("https://a.io/1", score=50)
        )
        await sql_store.insert_queue_record(
            ContentCategory.FUNDING, _queue("https://a.io/2", score=90)
        )
        await sql_store.insert_queue_record(
            ContentCategory.RESOURCE, _queue("https://a.io/3", score=72)
        )

        records = await sql_store.list_queue_records(QueueStatus.PENDING_REVIEW, min_score=70)

        assert [r.score for r in records] == [90, 72]

    @pytest.mark.asyncio
    async def test_list_limit_and_category(self, sql_store):
        """Limit and category filters apply."""
        for i in range(3):
            await sql_store.insert_queue_record(
                ContentCategory.PROJECT, _queue(f"https://a.io/{i}", score=60 + i)
            )
        await sql_store.insert_queue_record(ContentCategory.FUNDING, _queue(score=99))

        records = await sql_store.list_queue_records(
            QueueStatus.PENDING_REVIEW, category=ContentCategory.PROJECT, limit=2
        )

        assert [r.score for r in records] == [62, 61]

    @pytest.mark.asyncio
    async def test_counts(self, sql_store):
        """Counts include zero entries for every status."""
        await sql_store.insert_queue_record(ContentCategory.PROJECT, _queue())

        counts = await sql_store.count_queue_records()

        assert counts[ContentCategory.PROJECT][QueueStatus.PENDING_REVIEW] == 1
        assert counts[ContentCategory.PROJECT][QueueStatus.APPROVED] == 0
        assert counts[ContentCategory.RESOURCE][QueueStatus.PENDING_REVIEW] == 0


class TestIdentities:
    """Tests for existing_identities."""

    @pytest.mark.asyncio
    async def test_queue_and_production_keys(self, sql_store):
        """URL keys are found in queue and production tables; fingerprints in queue."""
        queued = _queue("https://a.io/queued")
        await sql_store.insert_queue_record(ContentCategory.RESOURCE, queued)
        await sql_store.insert_production(ContentCategory.PROJECT, _project("https://a.io/live"))

        urls, fingerprints = await sql_store.existing_identities(
            {"a.io/queued", "a.io/live", "a.io/new"}, {queued["fingerprint"], "unknown"}
        )

        assert urls == {"a.io/queued", "a.io/live"}
        assert fingerprints == {queued["fingerprint"]}

    @pytest.mark.asyncio
    async def test_empty_lookup(self, sql_store):
        """Empty inputs short-circuit."""
        assert await sql_store.existing_identities(set(), set()) == (set(), set())


class TestProduction:
    """Production table operations."""

    @pytest.mark.asyncio
    async def test_url_conflict(self, sql_store):
        """url is unique per production table."""
        await sql_store.insert_production(ContentCategory.PROJECT, _project())

        with pytest.raises(StorageConflictError):
            await sql_store.insert_production(ContentCategory.PROJECT, _project())

    @pytest.mark.asyncio
    async def test_update_by_url(self, sql_store):
        """Updates apply in place and keep the row id."""
        inserted = await sql_store.insert_production(ContentCategory.PROJECT, _project(score=10))

        updated = await sql_store.update_production_by_url(
            ContentCategory.PROJECT, "https://a.io/x", {"score": 80, "url": "ignored"}
        )

        assert updated.id == inserted.id
        assert updated.url == "https://a.io/x"
        assert updated.values["score"] == 80

    @pytest.mark.asyncio
    async def test_update_missing(self, sql_store):
        """Updating an unknown url raises NotFoundError."""
        with pytest.raises(NotFoundError):
            await sql_store.update_production_by_url(
                ContentCategory.PROJECT, "https://nowhere.io", {"score": 1}
            )

    @pytest.mark.asyncio
    async def test_find_by_url(self, sql_store):
        """Rows are found by url within their category only."""
        await sql_store.insert_production(ContentCategory.PROJECT, _project())

        assert await sql_store.find_production_by_url(ContentCategory.PROJECT, "https://a.io/x")
        assert (
            await sql_store.find_production_by_url(ContentCategory.FUNDING, "https://a.io/x")
            is None
        )


class TestApprovalOnSql:
    """Approval against the SQL store."""

    @pytest.mark.asyncio
    async def test_existing_url_updated_not_duplicated(self, sql_store, session_factory):
        """Approving over an existing production URL keeps one row."""
        await sql_store.insert_production(ContentCategory.PROJECT, _project(name="Old"))
        record = await sql_store.insert_queue_record(ContentCategory.PROJECT, _queue())

        response = await ApprovalService(sql_store).approve(record.id, reviewer="ana")

        assert response.success is True
        assert response.data["created"] is False
        production = await sql_store.find_production_by_url(
            ContentCategory.PROJECT, "https://a.io/x"
        )
        assert production.values["name"] == "Item https://a.io/x"
        assert production.queue_record_id == record.id
        refreshed = await sql_store.get_queue_record(record.id)
        assert refreshed.status is QueueStatus.APPROVED
