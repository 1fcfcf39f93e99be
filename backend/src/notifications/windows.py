"""Time window helpers for deadline notifications.

Windows are aligned to the clock hour containing ``now +/- offset`` so that
an hourly scheduler tick covers each due instant exactly once, whatever the
minute the tick fires at.
"""

from datetime import date, datetime, time, timedelta
from typing import Optional

from models.task import END_OF_DAY, compute_due_instant
from .schemas import DeadlineKind, DueWindow

__all__ = [
    "END_OF_DAY",
    "due_instant",
    "hour_window",
    "window_for_offset",
    "format_hours",
]


def due_instant(due_date: Optional[date], due_time: Optional[time] = None) -> Optional[datetime]:
    """Due date plus due time, or end of day when no time is set."""
    return compute_due_instant(due_date, due_time)


def hour_window(anchor: datetime) -> DueWindow:
    """Window from hh:00:00 to hh:59:59 of the hour containing ``anchor``."""
    start = anchor.replace(minute=0, second=0, microsecond=0)
    return DueWindow(start=start, end=start + timedelta(minutes=59, seconds=59))


def window_for_offset(now: datetime, hours: int, kind: DeadlineKind) -> DueWindow:
    """Window of due instants that are ``hours`` away from ``now``.

    Due-soon reminders look ahead (now + hours), overdue notices look back
    (now - hours).
    """
    offset = timedelta(hours=hours)
    anchor = now + offset if kind.before_due else now - offset
    return hour_window(anchor)


def format_hours(hours: int) -> str:
    """Human readable duration, e.g. "1 hour", "2 days", "1 day and 6 hours"."""
    if hours < 1:
        return "less than an hour"

    if hours == 1:
        return "1 hour"

    if hours < 24:
        return f"{hours} hours"

    days, remaining = divmod(hours, 24)

    if remaining == 0:
        return "1 day" if days == 1 else f"{days} days"

    return (
        f"{days} day{'s' if days > 1 else ''}"
        f" and {remaining} hour{'s' if remaining > 1 else ''}"
    )
