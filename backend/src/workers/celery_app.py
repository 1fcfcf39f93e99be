"""Celery application and beat schedule for the Laraflow maintenance jobs.

Start a worker with beat:
    celery -A workers.celery_app worker --beat --loglevel=INFO
"""

from celery import Celery
from celery.schedules import crontab
from celery.signals import setup_logging

from config import get_settings
from observability.logging_config import configure_logging

settings = get_settings()

celery_app = Celery(
    "laraflow",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["retention.tasks", "notifications.tasks"],
)

celery_app.conf.update(
    timezone="UTC",
    enable_utc=True,
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
)

celery_app.conf.beat_schedule = {
    'trash-cleanup-daily': {
        'task': 'trash.cleanup',
        'schedule': crontab(hour=2, minute=0),  # 02:00 UTC
        'options': {
            'expires': 3600,  # Task expires after 1 hour if not picked up
        },
    },
    'task-due-soon-hourly': {
        'task': 'notifications.task_due_soon',
        'schedule': crontab(minute=0),
        'options': {'expires': 3000},
    },
    'task-overdue-hourly': {
        'task': 'notifications.task_overdue',
        'schedule': crontab(minute=0),
        'options': {'expires': 3000},
    },
}


@setup_logging.connect
def configure_worker_logging(**kwargs):
    """Use the application's JSON logging instead of Celery's default."""
    configure_logging(settings.LOG_LEVEL, json_format=settings.LOG_JSON)
