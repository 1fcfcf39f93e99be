"""Pydantic schemas for trash retention settings and sweep reports.

This module defines retention-related schemas:
- TrashRetentionSettings: Configuration passed to the retention sweeper
- EntitySweepResult: Outcome of sweeping one entity type
- SweepReport: Aggregated outcome of one sweeper run
- TrashItem: One entry of a user's trash listing
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class TrashRetentionSettings(BaseModel):
    """Retention sweeper configuration.

    Entity types are swept in the given order; list children before parents
    so that dependent rows are gone before their owners.
    """

    retention_days: int = Field(
        default=7,
        ge=0,
        description="Days a trashed record is kept before permanent erasure"
    )

    entity_types: List[str] = Field(
        default_factory=lambda: ["task", "task_list", "project"],
        description="Entity types to sweep, children before parents"
    )

    batch_size: int = Field(
        default=100,
        ge=1,
        le=10_000,
        description="Records erased per batch (one commit per batch)"
    )

    @field_validator('entity_types')
    @classmethod
    def strip_names(cls, v: List[str]) -> List[str]:
        return [name.strip() for name in v if name and name.strip()]


class SweepStatus(str, Enum):
    """Outcome of sweeping a single entity type."""

    DELETED = "deleted"
    DRY_RUN = "dry_run"
    NOTHING_TO_DELETE = "nothing_to_delete"
    SKIPPED = "skipped"
    FAILED = "failed"


class EntitySweepResult(BaseModel):
    """Result for one entity type within a sweep."""

    entity_type: str
    status: SweepStatus
    matched: int = Field(default=0, ge=0, description="Trashed records older than the cutoff")
    deleted: int = Field(default=0, ge=0, description="Records permanently erased")
    error: Optional[str] = None


class SweepReport(BaseModel):
    """Statistics from a retention sweep execution.

    Used for CLI output, Celery task results and alerting on failures.
    """

    started_at: datetime
    completed_at: Optional[datetime] = None
    cutoff: datetime
    retention_days: int = Field(ge=0)
    dry_run: bool = False
    results: List[EntitySweepResult] = Field(default_factory=list)

    @property
    def total_deleted(self) -> int:
        """Total records erased across all entity types."""
        return sum(r.deleted for r in self.results)

    @property
    def total_matched(self) -> int:
        """Total records eligible for erasure (what a dry run reports)."""
        return sum(r.matched for r in self.results)

    @property
    def failed_types(self) -> List[str]:
        return [r.entity_type for r in self.results if r.status == SweepStatus.FAILED]

    @property
    def has_errors(self) -> bool:
        """Whether any entity type failed during execution."""
        return bool(self.failed_types)

    def result_for(self, entity_type: str) -> Optional[EntitySweepResult]:
        for result in self.results:
            if result.entity_type == entity_type:
                return result
        return None


class TrashItem(BaseModel):
    """A trashed record as shown in a user's trash listing."""

    type: str = Field(description="project | list | task")
    id: int
    name: str
    project_id: Optional[int] = None
    deleted_at: datetime
    expires_at: datetime
