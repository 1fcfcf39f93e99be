"""Trash service for the soft-delete lifecycle of projects, lists and tasks.

Implements the trash rules of the application:
- Deleting a parent stamps every live child with the same ``deleted_at``
- Restoring a parent brings back only the children trashed together with it
- A task cannot be restored while its list or project is still trashed
- Permanent erasure cascades to children through the ORM relationships

Records stay in the trash for ``retention_days`` before the retention
sweeper erases them (see ``retention.sweeper``).
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional

from sqlalchemy.orm import Session

from models import Project, SoftDeletes, Task, TaskList
from .schemas import TrashItem

logger = logging.getLogger(__name__)


class TrashError(Exception):
    """Base class for invalid trash operations."""


class AlreadyTrashedError(TrashError):
    """Raised when deleting a record that is already in the trash."""


class NotTrashedError(TrashError):
    """Raised when restoring or erasing a record that is not in the trash."""


class RestoreBlockedError(TrashError):
    """Raised when a record cannot be restored because its parent is trashed."""


def _entity_name(record: SoftDeletes) -> str:
    return type(record).__tablename__


class TrashService:
    """Service for moving records in and out of the trash.

    All operations commit on success so that each call matches one user
    action.
    """

    def __init__(
        self,
        db: Session,
        retention_days: int = 7,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize trash service.

        Args:
            db: Database session
            retention_days: Days a trashed record is kept (for expiry dates)
            clock: Returns the current UTC time (defaults to datetime.utcnow)
        """
        self.db = db
        self.retention_days = retention_days
        self.clock = clock or datetime.utcnow

    # ------------------------------------------------------------------
    # Soft delete
    # ------------------------------------------------------------------

    def delete_project(self, project: Project) -> datetime:
        """Move a project and all its live lists and tasks to the trash."""
        self._ensure_live(project)
        now = self.clock()

        project.mark_trashed(now)
        for task_list in project.lists:
            if not task_list.is_trashed:
                task_list.mark_trashed(now)
        for task in project.tasks:
            if not task.is_trashed:
                task.mark_trashed(now)

        self.db.commit()
        logger.info(
            f"Project {project.id} moved to trash",
            extra={"entity_type": "projects", "entity_id": project.id},
        )
        return now

    def delete_list(self, task_list: TaskList) -> datetime:
        """Move a list and its live tasks to the trash."""
        self._ensure_live(task_list)
        now = self.clock()

        task_list.mark_trashed(now)
        for task in task_list.tasks:
            if not task.is_trashed:
                task.mark_trashed(now)

        self.db.commit()
        logger.info(
            f"List {task_list.id} moved to trash",
            extra={"entity_type": "lists", "entity_id": task_list.id},
        )
        return now

    def delete_task(self, task: Task) -> datetime:
        """Move a single task to the trash."""
        self._ensure_live(task)
        now = self.clock()
        task.mark_trashed(now)
        self.db.commit()
        return now

    # ------------------------------------------------------------------
    # Restore
    # ------------------------------------------------------------------

    def restore_project(self, project: Project) -> None:
        """Restore a project and the children trashed together with it.

        Lists and tasks that were trashed on their own before the project
        keep their own ``deleted_at`` and stay in the trash.
        """
        self._ensure_trashed(project)
        stamp = project.mark_restored()

        for task_list in project.lists:
            if task_list.deleted_at == stamp:
                task_list.mark_restored()
        for task in project.tasks:
            if task.deleted_at == stamp:
                task.mark_restored()

        self.db.commit()

    def restore_list(self, task_list: TaskList) -> None:
        """Restore a list and the tasks trashed together with it.

        Raises:
            RestoreBlockedError: If the list's project is still trashed
        """
        self._ensure_trashed(task_list)
        if task_list.project.is_trashed:
            raise RestoreBlockedError(
                "Cannot restore list: the project it belongs to has been deleted."
            )

        stamp = task_list.mark_restored()
        for task in task_list.tasks:
            if task.deleted_at == stamp:
                task.mark_restored()

        self.db.commit()

    def restore_task(self, task: Task) -> None:
        """Restore a single task.

        Raises:
            RestoreBlockedError: If the task's list or project is still trashed
        """
        self._ensure_trashed(task)
        if task.task_list.is_trashed:
            raise RestoreBlockedError(
                "Cannot restore task: the list it belongs to has been deleted."
            )
        if task.project.is_trashed:
            raise RestoreBlockedError(
                "Cannot restore task: the project it belongs to has been deleted."
            )

        task.mark_restored()
        self.db.commit()

    # ------------------------------------------------------------------
    # Permanent erasure
    # ------------------------------------------------------------------

    def force_delete(self, record: SoftDeletes) -> None:
        """Permanently erase one trashed record and its children."""
        self._ensure_trashed(record)
        entity_id = record.id

        self.db.delete(record)
        self.db.commit()

        logger.info(
            f"Permanently deleted {_entity_name(record)} {entity_id}",
            extra={"entity_type": _entity_name(record), "entity_id": entity_id},
        )

    def empty_trash(self, owner_id: int) -> Dict[str, int]:
        """Permanently erase everything in a user's trash.

        Args:
            owner_id: Owner of the projects whose trash is emptied

        Returns:
            Counts of erased records per entity type
        """
        tasks = (
            self.db.query(Task)
            .join(Project, Task.project_id == Project.id)
            .filter(Project.user_id == owner_id, Task.trashed())
            .all()
        )
        for task in tasks:
            self.db.delete(task)
        self.db.flush()

        lists = (
            self.db.query(TaskList)
            .join(Project, TaskList.project_id == Project.id)
            .filter(Project.user_id == owner_id, TaskList.trashed())
            .all()
        )
        for task_list in lists:
            self.db.delete(task_list)
        self.db.flush()

        projects = (
            self.db.query(Project)
            .filter(Project.user_id == owner_id, Project.trashed())
            .all()
        )
        for project in projects:
            self.db.delete(project)

        self.db.commit()

        counts = {"tasks": len(tasks), "lists": len(lists), "projects": len(projects)}
        logger.info(
            f"Emptied trash for user {owner_id}",
            extra={"user_id": owner_id, "counts": counts},
        )
        return counts

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    def expires_at(self, record: SoftDeletes) -> datetime:
        """When a trashed record becomes eligible for permanent erasure."""
        self._ensure_trashed(record)
        return record.deleted_at + timedelta(days=self.retention_days)

    def list_trash(self, owner_id: int) -> List[TrashItem]:
        """List a user's trash, newest first.

        Lists are only shown while their project is live, and tasks only
        while both their list and project are live: anything else comes back
        together with its parent.
        """
        projects = (
            self.db.query(Project)
            .filter(Project.user_id == owner_id, Project.trashed())
            .all()
        )
        lists = (
            self.db.query(TaskList)
            .join(Project, TaskList.project_id == Project.id)
            .filter(
                Project.user_id == owner_id,
                Project.not_trashed(),
                TaskList.trashed(),
            )
            .all()
        )
        tasks = (
            self.db.query(Task)
            .join(Project, Task.project_id == Project.id)
            .join(TaskList, Task.list_id == TaskList.id)
            .filter(
                Project.user_id == owner_id,
                Project.not_trashed(),
                TaskList.not_trashed(),
                Task.trashed(),
            )
            .all()
        )

        items = [
            TrashItem(
                type="project",
                id=p.id,
                name=p.name,
                deleted_at=p.deleted_at,
                expires_at=self.expires_at(p),
            )
            for p in projects
        ]
        items += [
            TrashItem(
                type="list",
                id=l.id,
                name=l.name,
                project_id=l.project_id,
                deleted_at=l.deleted_at,
                expires_at=self.expires_at(l),
            )
            for l in lists
        ]
        items += [
            TrashItem(
                type="task",
                id=t.id,
                name=t.title,
                project_id=t.project_id,
                deleted_at=t.deleted_at,
                expires_at=self.expires_at(t),
            )
            for t in tasks
        ]

        items.sort(key=lambda item: item.deleted_at, reverse=True)
        return items

    @staticmethod
    def _ensure_live(record: SoftDeletes) -> None:
        if record.is_trashed:
            raise AlreadyTrashedError(f"{_entity_name(record)} {record.id} is already in the trash")

    @staticmethod
    def _ensure_trashed(record: SoftDeletes) -> None:
        if not record.is_trashed:
            raise NotTrashedError(f"{_entity_name(record)} {record.id} is not in the trash")
