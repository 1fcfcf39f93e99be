"""Send notifications for tasks that are due soon or overdue.

Usage:
    laraflow-task-due-soon [--hours 24]
    laraflow-task-overdue [--hours 1]

Environment Variables:
    DATABASE_URL: PostgreSQL connection string
    NOTIFICATION_TASK_DUE_HOURS: Reminder offsets before due (default "24")
    NOTIFICATION_TASK_OVERDUE_HOURS: Notice offsets after due (default "1,24")
    MAIL_ENABLED: Also deliver notifications by mail (default False)
"""

import argparse
import logging
import sys
from typing import Callable, List, Optional

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from config import get_settings
from notifications.notifier import DeadlineNotifier
from notifications.schemas import DeadlineKind, NotifierReport
from notifications.service import build_notification_service
from observability.job_context import job_context
from observability.logging_config import configure_logging
from ._common import non_negative_int

logger = logging.getLogger(__name__)

_DESCRIPTIONS = {
    DeadlineKind.DUE_SOON: (
        'laraflow-task-due-soon',
        'Send notifications for tasks that are due soon',
        'Specific hours before due date to check (overrides config, 0 uses config)',
    ),
    DeadlineKind.OVERDUE: (
        'laraflow-task-overdue',
        'Send notifications for tasks that are overdue',
        'Specific hours after due date to check (overrides config, 0 uses config)',
    ),
}


def build_parser(kind: DeadlineKind) -> argparse.ArgumentParser:
    prog, description, hours_help = _DESCRIPTIONS[kind]
    parser = argparse.ArgumentParser(
        prog=prog,
        description=description,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.add_argument('--hours', type=non_negative_int, help=hours_help)
    return parser


def print_report(report: NotifierReport) -> None:
    verb = "due in" if report.kind.before_due else "overdue by"
    for result in report.offsets:
        for notice in result.notices:
            print(
                f"  -> Sent {report.kind.label} notification to {notice.recipient_name} "
                f"for task: {notice.task_title} ({verb} {notice.offset_text})"
            )
    if report.total_failed:
        print(f"  {report.total_failed} notifications failed, see logs")
    print(f"Sent {report.total_sent} {report.kind.label} notifications.")


def run(
    kind: DeadlineKind,
    argv: Optional[List[str]] = None,
    session_factory: Optional[Callable[[], Session]] = None,
) -> int:
    """Run one deadline notifier pass.

    Returns:
        0 on completion (also when single deliveries failed),
        1 when the configuration is invalid or the data store is unusable
    """
    args = build_parser(kind).parse_args(argv)
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL, json_format=settings.LOG_JSON)

    try:
        offsets = settings.deadline_settings().offsets_for(kind)
    except ValidationError as e:
        print(f"ERROR: invalid notification settings: {e}", file=sys.stderr)
        return 1

    if session_factory is None:
        from database import SessionLocal
        session_factory = SessionLocal

    with job_context():
        db = session_factory()
        try:
            notifier = DeadlineNotifier(db, kind, offsets, build_notification_service(db, settings))
            report = notifier.run(hours=args.hours or None)
        except SQLAlchemyError as e:
            logger.error(
                f"{kind.value} notifier aborted",
                exc_info=True,
                extra={"kind": kind.value, "error": str(e)},
            )
            print(f"ERROR: {kind.label} notifications aborted: {e}", file=sys.stderr)
            return 1
        finally:
            db.close()

    print_report(report)
    return 0


def due_soon_main(argv: Optional[List[str]] = None) -> int:
    return run(DeadlineKind.DUE_SOON, argv)


def overdue_main(argv: Optional[List[str]] = None) -> int:
    return run(DeadlineKind.OVERDUE, argv)
