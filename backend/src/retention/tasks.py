"""Celery tasks for trash retention cleanup.

Tasks:
- retention_cleanup_task: Daily job running at 02:00 UTC
"""

import logging
from typing import Any, Dict, Optional

from celery import shared_task

from config import get_settings
from database import SessionLocal
from observability.job_context import job_context
from .sweeper import RetentionSweeper
from .schemas import SweepReport

logger = logging.getLogger(__name__)


def report_to_result(report: SweepReport) -> Dict[str, Any]:
    """Convert a sweep report into a JSON-serializable task result."""
    return {
        'status': 'completed',
        'job_started_at': report.started_at.isoformat(),
        'job_completed_at': report.completed_at.isoformat() if report.completed_at else None,
        'cutoff': report.cutoff.isoformat(),
        'retention_days': report.retention_days,
        'dry_run': report.dry_run,
        'results': [r.model_dump(mode='json') for r in report.results],
        'total_deleted': report.total_deleted,
        'total_matched': report.total_matched,
        'failed_types': report.failed_types,
        'has_errors': report.has_errors,
    }


@shared_task(name="trash.cleanup", bind=True)
def retention_cleanup_task(
    self,
    retention_days: Optional[int] = None,
    dry_run: bool = False,
) -> Dict[str, Any]:
    """Permanently erase items that have been in the trash too long.

    Scheduled daily at 02:00 UTC via Celery Beat (see workers.celery_app).
    Idempotent: running twice in succession finds nothing new to erase.

    Args:
        retention_days: Override for TRASH_RETENTION_DAYS
        dry_run: Count eligible records without erasing

    Returns:
        Dict with sweep statistics, or status 'failed' with the error when
        the settings are invalid or the data store could not be used at all
    """
    with job_context():
        logger.info("Trash cleanup task started")

        db = None
        try:
            settings = get_settings().trash_retention(retention_days)
            db = SessionLocal()
            report = RetentionSweeper(db, settings).sweep(dry_run=dry_run)
            result = report_to_result(report)

            logger.info(
                "Trash cleanup task completed",
                extra={"deleted": result['total_deleted'], "dry_run": dry_run},
            )
            return result

        except Exception as e:
            logger.error(
                "Trash cleanup task failed",
                exc_info=True,
                extra={"error": str(e)},
            )

            # Return error status but don't raise (allow task to complete)
            return {
                'status': 'failed',
                'error': str(e),
                'total_deleted': 0,
            }

        finally:
            if db is not None:
                db.close()
