"""Trash retention module.

This module provides:
- The soft-delete lifecycle of projects, lists and tasks (TrashService)
- Permanent erasure of records trashed longer than the retention window
  (RetentionSweeper), run daily by Celery and by the trash cleanup command
"""

from .schemas import (
    TrashRetentionSettings,
    SweepStatus,
    EntitySweepResult,
    SweepReport,
    TrashItem,
)
from .registry import (
    ConfigurationError,
    UnknownEntityTypeError,
    NotSoftDeletableError,
    MODEL_REGISTRY,
    resolve_soft_deletable,
)

# Service, sweeper and tasks are imported lazily to avoid importing the
# database engine with the schemas.
# Use: from retention.service import TrashService
# Use: from retention.sweeper import RetentionSweeper

__all__ = [
    "TrashRetentionSettings",
    "SweepStatus",
    "EntitySweepResult",
    "SweepReport",
    "TrashItem",
    "ConfigurationError",
    "UnknownEntityTypeError",
    "NotSoftDeletableError",
    "MODEL_REGISTRY",
    "resolve_soft_deletable",
]
