"""Persistent store for queue and production records."""

from intake.services.store.base import ContentStore, IdentityIndex, ProductionRecord, QueueRecord
from intake.services.store.sql import SqlContentStore

__all__ = [
    "ContentStore",
    "IdentityIndex",
    "ProductionRecord",
    "QueueRecord",
    "SqlContentStore",
]
