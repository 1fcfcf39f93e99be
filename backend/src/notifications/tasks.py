"""Celery tasks for deadline notifications.

Tasks:
- task_due_soon_task: Hourly reminders for tasks due soon
- task_overdue_task: Hourly notices for overdue tasks
"""

import logging
from typing import Any, Dict, Optional

from celery import shared_task

from config import get_settings
from database import SessionLocal
from observability.job_context import job_context
from .notifier import DeadlineNotifier
from .schemas import DeadlineKind
from .service import build_notification_service

logger = logging.getLogger(__name__)


def run_deadline_notifier(kind: DeadlineKind, hours: Optional[int] = None) -> Dict[str, Any]:
    """Run one notifier pass with a fresh session and settings from the environment.

    Returns:
        Dict with the number of notifications sent per offset, or status
        'failed' with the error when the settings are invalid or the
        data store could not be used at all
    """
    with job_context():
        logger.info(f"{kind.value} notifier started", extra={"kind": kind.value})

        db = None
        try:
            settings = get_settings()
            offsets = settings.deadline_settings().offsets_for(kind)
            db = SessionLocal()
            notifier = DeadlineNotifier(
                db,
                kind,
                offsets,
                build_notification_service(db, settings),
            )
            report = notifier.run(hours=hours)
            return {
                'status': 'completed',
                'kind': kind.value,
                'offsets': [
                    {
                        'offset_hours': r.offset_hours,
                        'window_start': r.window.start.isoformat(),
                        'window_end': r.window.end.isoformat(),
                        'matched': r.matched,
                        'sent': r.sent,
                        'skipped_duplicates': r.skipped_duplicates,
                        'failed': r.failed,
                    }
                    for r in report.offsets
                ],
                'total_sent': report.total_sent,
                'total_failed': report.total_failed,
            }

        except Exception as e:
            logger.error(
                f"{kind.value} notifier failed",
                exc_info=True,
                extra={"kind": kind.value, "error": str(e)},
            )
            return {
                'status': 'failed',
                'kind': kind.value,
                'error': str(e),
                'total_sent': 0,
            }

        finally:
            if db is not None:
                db.close()


@shared_task(name="notifications.task_due_soon", bind=True)
def task_due_soon_task(self, hours: Optional[int] = None) -> Dict[str, Any]:
    """Send reminders for tasks that are due soon.

    Args:
        hours: Only check this offset instead of NOTIFICATION_TASK_DUE_HOURS
    """
    return run_deadline_notifier(DeadlineKind.DUE_SOON, hours)


@shared_task(name="notifications.task_overdue", bind=True)
def task_overdue_task(self, hours: Optional[int] = None) -> Dict[str, Any]:
    """Send notices for tasks that are overdue.

    Args:
        hours: Only check this offset instead of NOTIFICATION_TASK_OVERDUE_HOURS
    """
    return run_deadline_notifier(DeadlineKind.OVERDUE, hours)
