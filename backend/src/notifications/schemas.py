"""Pydantic schemas for deadline notifications.

This module defines:
- DeadlineKind: The two deadline notices (due soon, overdue)
- DeadlineSettings: Hour offsets passed to the deadline notifier
- DueWindow: The clock hour a task's due instant must fall into
- OffsetResult / NotifierReport: Outcome of a notifier run
"""

from datetime import datetime
from enum import Enum
from typing import List

from pydantic import BaseModel, Field, field_validator


class DeadlineKind(str, Enum):
    """Kind of deadline notice; the value is the stored notification type."""

    DUE_SOON = "task.due_soon"
    OVERDUE = "task.overdue"

    @property
    def before_due(self) -> bool:
        """Due-soon windows lie ahead of now, overdue windows behind it."""
        return self is DeadlineKind.DUE_SOON

    @property
    def hours_key(self) -> str:
        """Payload key holding the offset in hours."""
        return "reminder_hours" if self.before_due else "overdue_hours"

    @property
    def phrase_key(self) -> str:
        """Payload key holding the human readable offset."""
        return "time_until_due" if self.before_due else "overdue_by"

    @property
    def label(self) -> str:
        return "task due soon" if self.before_due else "task overdue"

    def describe(self, task_title: str, offset_text: str) -> str:
        if self.before_due:
            return f"\"{task_title}\" is due in {offset_text}"
        return f"\"{task_title}\" is overdue by {offset_text}"


class DeadlineSettings(BaseModel):
    """Hour offsets for deadline notices.

    - due_soon_hours: [24] = one reminder 24 hours before the due instant
    - overdue_hours: [1, 24] = notices 1 hour and 24 hours after it
    """

    due_soon_hours: List[int] = Field(default_factory=lambda: [24])
    overdue_hours: List[int] = Field(default_factory=lambda: [1, 24])

    @field_validator('due_soon_hours', 'overdue_hours')
    @classmethod
    def validate_non_negative(cls, v: List[int]) -> List[int]:
        for hours in v:
            if hours < 0:
                raise ValueError("Notification offsets must be zero or more hours")
        return v

    def offsets_for(self, kind: DeadlineKind) -> List[int]:
        return list(self.due_soon_hours if kind.before_due else self.overdue_hours)


class DueWindow(BaseModel):
    """Inclusive window covering one clock hour."""

    start: datetime
    end: datetime

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant <= self.end


class SentNotice(BaseModel):
    """One notification that was delivered during a run."""

    user_id: int
    recipient_name: str
    task_id: int
    task_title: str
    offset_text: str


class OffsetResult(BaseModel):
    """Outcome of processing a single offset."""

    offset_hours: int
    window: DueWindow
    matched: int = Field(default=0, ge=0, description="Tasks due inside the window")
    sent: int = Field(default=0, ge=0)
    skipped_duplicates: int = Field(default=0, ge=0, description="Already notified for this offset")
    failed: int = Field(default=0, ge=0, description="Delivery or database errors")
    notices: List[SentNotice] = Field(default_factory=list)


class NotifierReport(BaseModel):
    """Statistics from one deadline notifier run."""

    kind: DeadlineKind
    offsets: List[OffsetResult] = Field(default_factory=list)

    @property
    def total_sent(self) -> int:
        return sum(r.sent for r in self.offsets)

    @property
    def total_failed(self) -> int:
        return sum(r.failed for r in self.offsets)

    @property
    def total_matched(self) -> int:
        return sum(r.matched for r in self.offsets)

    @property
    def has_errors(self) -> bool:
        return self.total_failed > 0
