"""Notification service: idempotency checks and delivery of deadline notices."""

import logging
from typing import List, Optional, Sequence

from sqlalchemy.orm import Session

from config import Settings
from models import Notification, Task
from .channels import DatabaseChannel, DeadlineNotice, MailChannel, NotificationChannel
from .schemas import DeadlineKind
from .windows import format_hours

logger = logging.getLogger(__name__)


class NotificationService:
    """Checks the idempotency key and sends deadline notices.

    The idempotency key is (recipient, kind, task, offset_hours): the same
    task can receive one notice per configured offset.
    """

    def __init__(self, db: Session, channels: Sequence[NotificationChannel]):
        self.db = db
        self.channels: List[NotificationChannel] = list(channels)

    def already_sent(
        self,
        user_id: int,
        kind: DeadlineKind,
        task_id: int,
        offset_hours: int,
    ) -> bool:
        """Whether this exact notice was already recorded."""
        return (
            self.db.query(Notification.id)
            .filter(
                Notification.user_id == user_id,
                Notification.type == kind.value,
                Notification.task_id == task_id,
                Notification.offset_hours == offset_hours,
            )
            .first()
            is not None
        )

    def build_notice(self, task: Task, kind: DeadlineKind, offset_hours: int) -> DeadlineNotice:
        offset_text = format_hours(offset_hours)
        data = {
            "task_id": task.id,
            "task_title": task.title,
            "project_id": task.project_id,
            "project_name": task.project.name,
            "due_date": task.due_date.isoformat() if task.due_date else None,
            "due_time": task.due_time.strftime("%H:%M:%S") if task.due_time else None,
            kind.phrase_key: offset_text,
            kind.hours_key: offset_hours,
            "message": kind.describe(task.title, offset_text),
        }
        return DeadlineNotice(
            kind=kind,
            recipient=task.assignee,
            task=task,
            offset_hours=offset_hours,
            offset_text=offset_text,
            data=data,
        )

    def send(self, task: Task, kind: DeadlineKind, offset_hours: int) -> DeadlineNotice:
        """Deliver a notice through every channel.

        The caller commits on success and rolls back on DeliveryError, so a
        notice that failed on any channel is not recorded and is retried on
        the next run within the same window.

        Raises:
            DeliveryError: If any channel failed
        """
        notice = self.build_notice(task, kind, offset_hours)
        for channel in self.channels:
            channel.deliver(notice)
        return notice


def build_notification_service(db: Session, settings: Optional[Settings] = None) -> NotificationService:
    """Create a notification service with the channels enabled in settings."""
    channels: List[NotificationChannel] = [DatabaseChannel(db)]

    if settings is not None and settings.MAIL_ENABLED:
        channels.append(
            MailChannel(
                host=settings.MAIL_HOST,
                port=settings.MAIL_PORT,
                sender=settings.MAIL_FROM,
                app_url=settings.APP_URL,
                timeout=settings.MAIL_TIMEOUT,
            )
        )

    return NotificationService(db, channels)
