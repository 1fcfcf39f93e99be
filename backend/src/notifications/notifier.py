"""Deadline notifier: due-soon reminders and overdue notices for tasks.

For each configured offset the notifier computes a one-hour window anchored
at ``now +/- offset``, selects the live, assigned, uncompleted tasks whose
due instant falls inside it, and notifies each assignee unless this exact
(recipient, kind, task, offset) notice was already recorded.

Each pass is stateless: re-running within the same hour sends nothing new.
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional, Sequence

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from database import ping
from models import Task
from observability.metrics import (
    deadline_notifications_failed_total,
    deadline_notifications_sent_total,
)
from .channels import DeliveryError
from .schemas import DeadlineKind, DueWindow, NotifierReport, OffsetResult, SentNotice
from .service import NotificationService
from .windows import END_OF_DAY, window_for_offset

logger = logging.getLogger(__name__)


class DeadlineNotifier:
    """Send at most one deadline notice per (task, offset)."""

    def __init__(
        self,
        db: Session,
        kind: DeadlineKind,
        offsets: Sequence[int],
        service: NotificationService,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize deadline notifier.

        Args:
            db: Database session
            kind: Due-soon reminders or overdue notices
            offsets: Configured hour offsets (see DeadlineSettings)
            service: Notification service used for dedup checks and delivery
            clock: Returns the current UTC time (defaults to datetime.utcnow)
        """
        self.db = db
        self.kind = kind
        self.offsets: List[int] = [int(h) for h in offsets]
        self.service = service
        self.clock = clock or datetime.utcnow

    def run(self, hours: Optional[int] = None) -> NotifierReport:
        """Notify for every configured offset, or only ``hours`` if given.

        Raises:
            sqlalchemy.exc.OperationalError: If the data store is unreachable
        """
        ping(self.db)

        offsets = [int(hours)] if hours is not None else self.offsets
        report = NotifierReport(kind=self.kind)

        for offset in offsets:
            report.offsets.append(self.notify_for_offset(offset))

        logger.info(
            f"Sent {report.total_sent} {self.kind.label} notifications.",
            extra={"kind": self.kind.value, "count": report.total_sent},
        )
        return report

    def notify_for_offset(self, offset_hours: int) -> OffsetResult:
        # "now" is read per offset rather than once per run
        window = window_for_offset(self.clock(), offset_hours, self.kind)
        tasks = self.find_tasks(window)

        result = OffsetResult(offset_hours=offset_hours, window=window, matched=len(tasks))

        for task in tasks:
            task_id = task.id
            try:
                if self.service.already_sent(task.assigned_to, self.kind, task_id, offset_hours):
                    result.skipped_duplicates += 1
                    continue

                notice = self.service.send(task, self.kind, offset_hours)
                self.db.commit()
            except (DeliveryError, SQLAlchemyError) as e:
                self.db.rollback()
                result.failed += 1
                deadline_notifications_failed_total.labels(kind=self.kind.value).inc()
                logger.error(
                    f"Failed to send {self.kind.value} notification for task {task_id}",
                    exc_info=True,
                    extra={
                        "task_id": task_id,
                        "offset_hours": offset_hours,
                        "error": str(e),
                    },
                )
                continue

            result.sent += 1
            result.notices.append(
                SentNotice(
                    user_id=notice.recipient.id,
                    recipient_name=notice.recipient.name,
                    task_id=notice.task.id,
                    task_title=notice.task.title,
                    offset_text=notice.offset_text,
                )
            )
            deadline_notifications_sent_total.labels(
                kind=self.kind.value, offset_hours=str(offset_hours)
            ).inc()
            logger.info(
                f"Sent {self.kind.value} notification to {notice.recipient.name} "
                f"for task: {notice.task.title} ({notice.message})",
                extra={
                    "task_id": notice.task.id,
                    "user_id": notice.recipient.id,
                    "offset_hours": offset_hours,
                },
            )

        return result

    def find_tasks(self, window: DueWindow) -> List[Task]:
        """Live, assigned, uncompleted tasks whose due instant is in ``window``.

        A window never spans midnight, so the date is matched exactly and
        the time against the window's clock hour. Tasks without a due time
        count as due at 23:59:59 and only match the last hour of the day.
        """
        start_time, end_time = window.start.time(), window.end.time()

        time_matches = Task.due_time.between(start_time, end_time)
        if start_time <= END_OF_DAY <= end_time:
            time_matches = or_(time_matches, Task.due_time.is_(None))

        return (
            self.db.query(Task)
            .options(joinedload(Task.assignee), joinedload(Task.project))
            .filter(
                Task.not_trashed(),
                Task.completed_at.is_(None),
                Task.assigned_to.is_not(None),
                Task.due_date.is_not(None),
                Task.due_date == window.start.date(),
                time_matches,
            )
            .order_by(Task.id)
            .all()
        )
