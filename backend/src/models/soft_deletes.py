"""Soft-delete column and predicates shared by trashable models.

There is no implicit query scoping: every query that cares about the trash
states its predicate explicitly, e.g. ``Task.not_trashed()``.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Column, DateTime
from sqlalchemy.sql.elements import ColumnElement


class SoftDeletes:
    """Mixin adding a nullable ``deleted_at`` timestamp.

    A non-null ``deleted_at`` means the record is logically gone but still
    physically stored until the retention sweep erases it.
    """

    deleted_at = Column(DateTime, nullable=True, index=True)

    @property
    def is_trashed(self) -> bool:
        return self.deleted_at is not None

    @classmethod
    def trashed(cls) -> ColumnElement:
        return cls.deleted_at.is_not(None)

    @classmethod
    def not_trashed(cls) -> ColumnElement:
        return cls.deleted_at.is_(None)

    @classmethod
    def trashed_before(cls, cutoff: datetime) -> ColumnElement:
        """Trashed strictly before ``cutoff``."""
        return cls.deleted_at < cutoff

    def mark_trashed(self, when: datetime) -> None:
        self.deleted_at = when

    def mark_restored(self) -> Optional[datetime]:
        """Clear the deletion timestamp, returning the previous value."""
        previous = self.deleted_at
        self.deleted_at = None
        return previous
