"""SQLAlchemy Models for Laraflow"""

from .base import Base
from .soft_deletes import SoftDeletes
from .user import User
from .project import Project
from .task_list import TaskList
from .task import Task, END_OF_DAY, compute_due_instant
from .notification import Notification

__all__ = [
    "Base",
    "SoftDeletes",
    "User",
    "Project",
    "TaskList",
    "Task",
    "END_OF_DAY",
    "compute_due_instant",
    "Notification",
]
