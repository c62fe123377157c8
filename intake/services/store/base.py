"""Persistent store contract.

The staging writer, the approval service and the deduplicator depend only
on these protocols, so tests can substitute an in-memory store.

Write operations raise StorageConflictError on unique-constraint violations
and StorageError on any other persistence failure.
"""

import uuid
from collections.abc import Collection
from datetime import datetime
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, Field

from intake.models.base import ContentCategory
from intake.models.queue import QueueStatus


class QueueRecord(BaseModel):
    """Store-independent view of a queue row.

    Attributes:
        id: Record id
        category: Queue the record lives in
        status: Review status
        title: Item title
        description: Item description
        url: Item URL
        source: Connector name
        score: Final score
        tags: Item tags
        payload: Category-specific columns
        reviewed_by: Reviewer id
        reviewed_at: Decision time
        rejection_reason: Reason given on rejection
        reviewer_notes: Notes given on approval
        created_at: Staging time
    """

    model_config = ConfigDict(frozen=True)

    id: uuid.UUID
    category: ContentCategory
    status: QueueStatus
    title: str
    description: str = ""
    url: str
    url_key: str = ""
    source: str
    score: int = 0
    tags: list[str] = Field(default_factory=list)
    payload: dict[str, Any] = Field(default_factory=dict)
    reviewed_by: str | None = None
    reviewed_at: datetime | None = None
    rejection_reason: str | None = None
    reviewer_notes: str | None = None
    created_at: datetime | None = None


class ProductionRecord(BaseModel):
    """Store-independent view of a production row.

    Attributes:
        id: Record id
        category: Production table the row lives in
        url: Natural key
        queue_record_id: Queue record the row was promoted from
        values: Column values as written
    """

    model_config = ConfigDict(frozen=True)

    id: uuid.UUID
    category: ContentCategory
    url: str
    queue_record_id: uuid.UUID | None = None
    values: dict[str, Any] = Field(default_factory=dict)


class IdentityIndex(Protocol):
    """Lookup of identity keys already known to the store."""

    async def existing_identities(
        self,
        url_keys: Collection[str],
        fingerprints: Collection[str],
    ) -> tuple[set[str], set[str]]:
        """Return the subsets of the given URL keys and fingerprints already stored.

        Both queue and production tables of every category are consulted.
        """
        ...


class ContentStore(IdentityIndex, Protocol):
    """Queue and production persistence."""

    async def insert_queue_record(
        self, category: ContentCategory, values: dict[str, Any]
    ) -> QueueRecord:
        """Insert a queue row; unique on (url, source) per category."""
        ...

    async def get_queue_record(self, record_id: uuid.UUID) -> QueueRecord | None:
        """Fetch a queue row from any category by id."""
        ...

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
        """Set the review status of a queue row; NotFoundError if absent."""
        ...

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
        ...

    async def count_queue_records(self) -> dict[ContentCategory, dict[QueueStatus, int]]:
        """Count queue rows per category and status."""
        ...

    async def insert_production(
        self, category: ContentCategory, values: dict[str, Any]
    ) -> ProductionRecord:
        """Insert a production row; unique on url."""
        ...

    async def update_production_by_url(
        self, category: ContentCategory, url: str, values: dict[str, Any]
    ) -> ProductionRecord:
        """Update the production row with the given url; NotFoundError if absent."""
        ...

    async def find_production_by_url(
        self, category: ContentCategory, url: str
    ) -> ProductionRecord | None:
        """Fetch the production row with the given url."""
        ...


__all__ = [
    "ContentStore",
    "IdentityIndex",
    "ProductionRecord",
    "QueueRecord",
]
