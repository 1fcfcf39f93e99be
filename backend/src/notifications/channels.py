"""Notification delivery channels.

A deadline notice is delivered through every configured channel in order.
The database channel stores the in-app notification, which is also the
record the notifier checks to avoid sending the same notice twice, so it
always comes first.

Channel failures are raised as DeliveryError.
"""

import logging
import smtplib
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from email.message import EmailMessage
from typing import Any, Dict

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models import Notification, Task, User
from .schemas import DeadlineKind

logger = logging.getLogger(__name__)


class DeliveryError(Exception):
    """Raised when a notification could not be delivered through a channel."""


@dataclass
class DeadlineNotice:
    """A deadline notification addressed to a task's assignee.

    Attributes:
        kind: Due-soon reminder or overdue notice
        recipient: The assignee being notified
        task: The task the notice is about
        offset_hours: Offset that triggered the notice (part of the dedup key)
        offset_text: Human readable offset, e.g. "1 day"
        data: Payload stored with the in-app notification
    """
    kind: DeadlineKind
    recipient: User
    task: Task
    offset_hours: int
    offset_text: str
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def message(self) -> str:
        return self.kind.describe(self.task.title, self.offset_text)


class NotificationChannel(ABC):
    """Port interface for notification delivery."""

    name: str = "channel"

    @abstractmethod
    def deliver(self, notice: DeadlineNotice) -> None:
        """Deliver one notice.

        Raises:
            DeliveryError: If delivery failed
        """


class DatabaseChannel(NotificationChannel):
    """Stores the notice as an in-app notification row.

    The row is flushed, not committed: the caller commits once every
    channel has delivered.
    """

    name = "database"

    def __init__(self, db: Session):
        self.db = db

    def deliver(self, notice: DeadlineNotice) -> None:
        notification = Notification(
            user_id=notice.recipient.id,
            type=notice.kind.value,
            task_id=notice.task.id,
            offset_hours=notice.offset_hours,
            data=notice.data,
        )
        try:
            self.db.add(notification)
            self.db.flush()
        except SQLAlchemyError as e:
            raise DeliveryError(
                f"Could not store {notice.kind.value} notification for task {notice.task.id}: {e}"
            ) from e


class MailChannel(NotificationChannel):
    """Sends the notice as a plain-text email over SMTP."""

    name = "mail"

    def __init__(
        self,
        host: str,
        port: int,
        sender: str,
        app_url: str,
        timeout: float = 10.0,
    ):
        self.host = host
        self.port = port
        self.sender = sender
        self.app_url = app_url.rstrip("/")
        self.timeout = timeout

    def build_message(self, notice: DeadlineNotice) -> EmailMessage:
        task = notice.task
        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = notice.recipient.email

        if notice.kind.before_due:
            msg["Subject"] = f"Task due soon: {task.title}"
            closing = "Don't forget to complete it on time!"
            body_line = f"Your task \"{task.title}\" is due in {notice.offset_text}."
        else:
            msg["Subject"] = f"Task overdue: {task.title}"
            closing = "Please complete this task as soon as possible."
            body_line = f"Your task \"{task.title}\" is overdue by {notice.offset_text}."

        msg.set_content(
            "\n\n".join([
                f"Hello {notice.recipient.name}!",
                body_line,
                f"Project: {task.project.name}",
                f"View Task: {self.app_url}/projects/{task.project_id}",
                closing,
            ])
        )
        return msg

    def deliver(self, notice: DeadlineNotice) -> None:
        msg = self.build_message(notice)
        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
                smtp.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            raise DeliveryError(
                f"Could not mail {notice.kind.value} notice to {notice.recipient.email}: {e}"
            ) from e

        logger.debug(
            f"Mailed {notice.kind.value} notice to {notice.recipient.email}",
            extra={"task_id": notice.task.id, "user_id": notice.recipient.id},
        )
