"""Production ORM models.

Rows here are created only by approving a queue record. `url` is the
natural key: re-approving the same URL updates the existing row.
"""

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from intake.models.base import Base, ContentCategory, TimestampMixin, UUIDMixin


class ProductionRecordMixin:
    """Columns shared by every production table.

    Attributes:
        description: Item description
        url: Natural key
        url_key: Normalized URL used for identity lookups
        source: Connector the item came from
        tags: Item tags
        score: Score at approval time
        queue_record_id: Queue record this row was promoted from
        approved_by: Reviewer id
        approved_at: Approval time
    """

    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    url: Mapped[str] = mapped_column(String(1000), nullable=False, unique=True)
    url_key: Mapped[str] = mapped_column(String(1000), nullable=False, index=True)
    source: Mapped[str] = mapped_column(String(100), nullable=False)
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    queue_record_id: Mapped[uuid.UUID | None] = mapped_column(index=True)
    approved_by: Mapped[str | None] = mapped_column(String(255))
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))


class Project(Base, UUIDMixin, TimestampMixin, ProductionRecordMixin):
    """Approved early-stage project."""

    __tablename__ = "projects"

    name: Mapped[str] = mapped_column(Text, nullable=False)
    team_size: Mapped[int | None] = mapped_column(Integer)
    funding_raised: Mapped[float | None] = mapped_column(Float)
    launch_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    founders: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    tech_stack: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    project_needs: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    metrics: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    def __repr__(self) -> str:
        return f"<Project(id={self.id}, name={self.name[:50]}, url={self.url})>"


class FundingProgram(Base, UUIDMixin, TimestampMixin, ProductionRecordMixin):
    """Approved funding program (grant, accelerator, fund)."""

    __tablename__ = "funding_programs"

    name: Mapped[str] = mapped_column(Text, nullable=False)
    organization: Mapped[str] = mapped_column(String(255), nullable=False)
    funding_type: Mapped[str] = mapped_column(String(50), nullable=False, default="grant")
    min_amount: Mapped[float] = mapped_column(Float, nullable=False, default=10_000)
    max_amount: Mapped[float] = mapped_column(Float, nullable=False, default=500_000)
    currency: Mapped[str] = mapped_column(String(8), nullable=False, default="USD")
    application_deadline: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    eligibility_criteria: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    def __repr__(self) -> str:
        return f"<FundingProgram(id={self.id}, name={self.name[:50]}, url={self.url})>"


class Resource(Base, UUIDMixin, TimestampMixin, ProductionRecordMixin):
    """Approved builder resource (article, tool, course)."""

    __tablename__ = "resources"

    title: Mapped[str] = mapped_column(Text, nullable=False)
    resource_type: Mapped[str] = mapped_column(String(50), nullable=False, default="article")
    author: Mapped[str | None] = mapped_column(String(255))
    price_type: Mapped[str] = mapped_column(String(20), nullable=False, default="free")
    metrics: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    def __repr__(self) -> str:
        return f"<Resource(id={self.id}, title={self.title[:50]}, url={self.url})>"


ProductionModel = Project | FundingProgram | Resource

PRODUCTION_MODELS: dict[ContentCategory, type[ProductionModel]] = {
    ContentCategory.PROJECT: Project,
    ContentCategory.FUNDING: FundingProgram,
    ContentCategory.RESOURCE: Resource,
}


__all__ = [
    "PRODUCTION_MODELS",
    "FundingProgram",
    "ProductionModel",
    "ProductionRecordMixin",
    "Project",
    "Resource",
]
