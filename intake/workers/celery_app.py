"""Celery application configuration.

This module configures the Celery application for Intake background tasks.
Uses Redis as both broker and result backend.
"""

from datetime import timedelta
from typing import Any

from celery import Celery
from celery.schedules import crontab

from intake.core.config import Config, get_config


def build_beat_schedule(config: Config) -> dict[str, Any]:
    """Build the periodic task schedule.

    Args:
        config: Application configuration

    Returns:
        Celery beat_schedule mapping
    """
    schedule: dict[str, Any] = {
        "ingest-run": {
            "task": "intake.ingest.run",
            "schedule": timedelta(minutes=config.ingest_interval_minutes),
            "options": {"queue": "ingest"},
        },
        # Sweep pending records whose production row already exists
        "ingest-reconcile": {
            "task": "intake.ingest.reconcile",
            "schedule": crontab(minute=30),
            "options": {"queue": "ingest"},
        },
    }
    if config.auto_approve_enabled:
        schedule["ingest-auto-approve"] = {
            "task": "intake.ingest.auto_approve",
            "schedule": timedelta(minutes=config.ingest_interval_minutes),
            "kwargs": {"min_score": config.auto_approve_min_score},
            "options": {"queue": "ingest"},
        }
    return schedule


_config = get_config()

celery_app = Celery(
    "intake",
    broker=str(_config.celery_broker_url),
    backend=str(_config.celery_result_backend),
)

celery_app.conf.update(
    # Task settings
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    # Task execution settings
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_time_limit=900,  # 15 minutes hard limit
    task_soft_time_limit=840,
    # Worker settings
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=100,
    # Result settings
    result_expires=86400,  # 24 hours
    result_extended=True,
    # Beat scheduler settings
    beat_scheduler="celery.beat:PersistentScheduler",
    beat_schedule_filename="celerybeat-schedule",
    beat_schedule=build_beat_schedule(_config),
    # Task routes
    task_routes={
        "intake.ingest.*": {"queue": "ingest"},
    },
    task_default_queue="default",
)

celery_app.autodiscover_tasks(["intake.workers"], related_name="ingest")

__all__ = ["build_beat_schedule", "celery_app"]
