"""SQLAlchemy ORM models.

- Queue tables: staged items awaiting review (one per category)
- Production tables: approved, permanent records (one per category)
"""

from intake.models.base import Base, ContentCategory, TimestampMixin, UUIDMixin
from intake.models.production import (
    PRODUCTION_MODELS,
    FundingProgram,
    ProductionModel,
    Project,
    Resource,
)
from intake.models.queue import (
    QUEUE_MODELS,
    QueueFunding,
    QueueModel,
    QueueProject,
    QueueResource,
    QueueStatus,
)

__all__ = [
    "Base",
    "UUIDMixin",
    "TimestampMixin",
    "ContentCategory",
    # Queue
    "QUEUE_MODELS",
    "QueueFunding",
    "QueueModel",
    "QueueProject",
    "QueueResource",
    "QueueStatus",
    # Production
    "PRODUCTION_MODELS",
    "FundingProgram",
    "ProductionModel",
    "Project",
    "Resource",
]
