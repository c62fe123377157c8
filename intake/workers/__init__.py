"""Celery workers for Intake.

Modules:
- celery_app: Celery application configuration and beat schedule
- ingest: Ingestion, auto-approval and reconciliation tasks
"""

from intake.workers.celery_app import celery_app

__all__ = [
    "celery_app",
]
