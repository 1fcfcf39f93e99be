"""Deadline notification module.

Sends due-soon reminders and overdue notices to task assignees, at most once
per (recipient, kind, task, offset).
"""

from .schemas import (
    DeadlineKind,
    DeadlineSettings,
    DueWindow,
    SentNotice,
    OffsetResult,
    NotifierReport,
)
from .windows import due_instant, hour_window, window_for_offset, format_hours
from .channels import (
    DeliveryError,
    DeadlineNotice,
    NotificationChannel,
    DatabaseChannel,
    MailChannel,
)

__all__ = [
    "DeadlineKind",
    "DeadlineSettings",
    "DueWindow",
    "SentNotice",
    "OffsetResult",
    "NotifierReport",
    "due_instant",
    "hour_window",
    "window_for_offset",
    "format_hours",
    "DeliveryError",
    "DeadlineNotice",
    "NotificationChannel",
    "DatabaseChannel",
    "MailChannel",
]
