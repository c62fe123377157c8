"""Base model mixins and shared enums.

- UUIDMixin: UUID primary key
- TimestampMixin: created_at and updated_at fields
- ContentCategory: the three content categories every table is keyed by
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import DateTime, func
from sqlalchemy.orm import Mapped, declared_attr, mapped_column

from intake.core.database import Base


class ContentCategory(str, enum.Enum):
    """Content category; selects queue and production tables."""

    PROJECT = "project"
    FUNDING = "funding"
    RESOURCE = "resource"


class UUIDMixin:
    """Mixin for UUID primary key.

    Example:
        >>> class QueueProject(Base, UUIDMixin, TimestampMixin):
        ...     __tablename__ = "queue_projects"
        ...     title: Mapped[str]
    """

    @declared_attr
    @classmethod
    def id(cls) -> Mapped[uuid.UUID]:
        """UUID primary key.

        Returns:
            UUID column mapped to primary key
        """
        return mapped_column(
            primary_key=True,
            default=uuid.uuid4,
            index=True,
        )


class TimestampMixin:
    """Mixin for created_at and updated_at timestamps."""

    @declared_attr
    @classmethod
    def created_at(cls) -> Mapped[datetime]:
        """Timestamp when record was created.

        Returns:
            DateTime column with default as current time
        """
        return mapped_column(
            DateTime(timezone=True),
            nullable=False,
            server_default=func.now(),
        )

    @declared_attr
    @classmethod
    def updated_at(cls) -> Mapped[datetime]:
        """Timestamp when record was last updated.

        Returns:
            DateTime column that updates automatically
        """
        return mapped_column(
            DateTime(timezone=True),
            nullable=False,
            server_default=func.now(),
            onupdate=func.now(),
        )


__all__ = [
    "Base",
    "ContentCategory",
    "UUIDMixin",
    "TimestampMixin",
]
