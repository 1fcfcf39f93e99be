"""Task SQLAlchemy model"""

from datetime import date, datetime, time
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Text,
    Time,
)
from sqlalchemy.orm import relationship

from .base import Base
from .soft_deletes import SoftDeletes

# Tasks without a due time are due at the end of their due date
END_OF_DAY = time(23, 59, 59)


def compute_due_instant(due_date: Optional[date], due_time: Optional[time]) -> Optional[datetime]:
    """Combine a due date and optional due time into one instant.

    Returns:
        The due instant, or None when there is no due date
    """
    if due_date is None:
        return None
    return datetime.combine(due_date, due_time or END_OF_DAY)


class Task(SoftDeletes, Base):
    """A card on a Kanban list.

    A task is overdue iff its due instant has passed and it has not been
    completed.
    """
    __tablename__ = "tasks"
    __table_args__ = (
        CheckConstraint(
            "priority IN ('low', 'medium', 'high', 'urgent')",
            name='ck_tasks_priority'
        ),
        Index("ix_tasks_due_date_due_time", "due_date", "due_time"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    list_id = Column(Integer, ForeignKey("lists.id", ondelete="CASCADE"), nullable=False)
    assigned_to = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    position = Column(Integer, nullable=False, default=0)
    priority = Column(Text, nullable=False, default="medium")
    due_date = Column(Date, nullable=True)
    due_time = Column(Time, nullable=True)
    started_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    # Relationships
    project = relationship("Project", back_populates="tasks")
    task_list = relationship("TaskList", back_populates="tasks")
    assignee = relationship("User", back_populates="assigned_tasks")

    @property
    def due_instant(self) -> Optional[datetime]:
        return compute_due_instant(self.due_date, self.due_time)

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

    def is_overdue(self, now: datetime) -> bool:
        due = self.due_instant
        return due is not None and due < now and not self.is_completed

    def __repr__(self):
        return f"<Task(id={self.id}, title='{self.title}')>"
