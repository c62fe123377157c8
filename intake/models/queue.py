"""Review queue ORM models.

One queue table per content category. Every row starts in
`pending_review` and is moved to a terminal status only by the approval
service.
"""

import enum
from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Enum,
    Float,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, declared_attr, mapped_column

from intake.models.base import Base, ContentCategory, TimestampMixin, UUIDMixin


class QueueStatus(str, enum.Enum):
    """Queue record review status."""

    PENDING_REVIEW = "pending_review"  # Staged, awaiting a decision
    APPROVED = "approved"  # Promoted to production
    REJECTED = "rejected"  # Declined by a reviewer


queue_status_enum = Enum(
    QueueStatus,
    name="queue_status",
    values_callable=lambda members: [m.value for m in members],
)


class QueueRecordMixin:
    """Columns shared by every category queue table.

    Attributes:
        title: Item title
        description: Item description
        url: Canonical item URL as fetched
        url_key: Normalized URL used for identity lookups
        fingerprint: Hash of normalized title + source
        source: Connector name
        tags: Item tags
        score: Final score (0-100)
        confidence: Score confidence (0-1)
        factors: Score breakdown
        recommendation: Scorer recommendation tier
        eligibility_warnings: Eligibility reasons recorded at staging time
        status: Review status
        reviewed_by: Reviewer id
        reviewed_at: Decision time
        rejection_reason: Reviewer's reason for rejection
        reviewer_notes: Free-form notes attached on approval
        published_at: Publication time at the source
    """

    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    url: Mapped[str] = mapped_column(String(1000), nullable=False)
    url_key: Mapped[str] = mapped_column(String(1000), nullable=False, index=True)
    fingerprint: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    source: Mapped[str] = mapped_column(String(100), nullable=False)
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    confidence: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    factors: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    recommendation: Mapped[str] = mapped_column(String(16), nullable=False, default="review")
    eligibility_warnings: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    status: Mapped[QueueStatus] = mapped_column(
        queue_status_enum,
        nullable=False,
        default=QueueStatus.PENDING_REVIEW,
    )
    reviewed_by: Mapped[str | None] = mapped_column(String(255))
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    rejection_reason: Mapped[str | None] = mapped_column(Text)
    reviewer_notes: Mapped[str | None] = mapped_column(Text)

    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    @declared_attr.directive
    @classmethod
    def __table_args__(cls) -> tuple[Any, ...]:
        table = cls.__tablename__  # type: ignore[attr-defined]
        return (
            UniqueConstraint("url", "source", name=f"uq_{table}_url_source"),
            Index(f"idx_{table}_status_score", "status", "score"),
        )


class QueueProject(Base, UUIDMixin, TimestampMixin, QueueRecordMixin):
    """Staged project awaiting review."""

    __tablename__ = "queue_projects"

    team_size: Mapped[int | None] = mapped_column(Integer)
    funding_raised: Mapped[float | None] = mapped_column(Float)
    launch_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    founders: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    tech_stack: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    project_needs: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    metrics: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    def __repr__(self) -> str:
        return f"<QueueProject(id={self.id}, title={self.title[:50]}, status={self.status})>"


class QueueFunding(Base, UUIDMixin, TimestampMixin, QueueRecordMixin):
    """Staged funding program awaiting review."""

    __tablename__ = "queue_funding"

    organization: Mapped[str | None] = mapped_column(String(255))
    funding_type: Mapped[str | None] = mapped_column(String(50))
    min_amount: Mapped[float | None] = mapped_column(Float)
    max_amount: Mapped[float | None] = mapped_column(Float)
    currency: Mapped[str] = mapped_column(String(8), nullable=False, default="USD")
    application_deadline: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    eligibility_criteria: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    def __repr__(self) -> str:
        return f"<QueueFunding(id={self.id}, title={self.title[:50]}, status={self.status})>"


class QueueResource(Base, UUIDMixin, TimestampMixin, QueueRecordMixin):
    """Staged resource awaiting review."""

    __tablename__ = "queue_resources"

    resource_type: Mapped[str | None] = mapped_column(String(50))
    author: Mapped[str | None] = mapped_column(String(255))
    price_type: Mapped[str | None] = mapped_column(String(20))
    metrics: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    def __repr__(self) -> str:
        return f"<QueueResource(id={self.id}, title={self.title[:50]}, status={self.status})>"


QueueModel = QueueProject | QueueFunding | QueueResource

QUEUE_MODELS: dict[ContentCategory, type[QueueModel]] = {
    ContentCategory.PROJECT: QueueProject,
    ContentCategory.FUNDING: QueueFunding,
    ContentCategory.RESOURCE: QueueResource,
}


__all__ = [
    "QUEUE_MODELS",
    "QueueFunding",
    "QueueModel",
    "QueueProject",
    "QueueRecordMixin",
    "QueueResource",
    "QueueStatus",
]
