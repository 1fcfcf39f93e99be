"""Retention sweeper: permanent erasure of records trashed too long ago.

For each configured entity type the sweeper selects the records whose
``deleted_at`` lies before ``now - retention_days`` and erases them in
id-ordered batches, committing once per batch to bound memory use and
lock duration.

Error handling:
- Unknown or non-soft-deletable entity types are logged and skipped
- A database error on one entity type is logged, rolled back and reported
  as FAILED together with the records already erased by committed
  batches; the remaining types are still swept
- An unreachable data store (initial ping) propagates to the caller

A second run right after a successful one finds nothing to erase.
"""

import logging
import time
from datetime import datetime, timedelta
from typing import Callable, Optional, Type

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database import ping
from models import SoftDeletes
from observability.metrics import (
    trash_records_erased_total,
    trash_sweep_duration_seconds,
    trash_sweep_failures_total,
)
from .registry import ConfigurationError, resolve_soft_deletable
from .schemas import EntitySweepResult, SweepReport, SweepStatus, TrashRetentionSettings

logger = logging.getLogger(__name__)


class PartialEraseError(Exception):
    """Raised when erasure stops after some batches were already committed.

    Attributes:
        deleted: Records erased by the committed batches
        error: The underlying database error
    """

    def __init__(self, deleted: int, error: SQLAlchemyError):
        super().__init__(str(error))
        self.deleted = deleted
        self.error = error


class RetentionSweeper:
    """Erase trashed records older than the retention window."""

    def __init__(
        self,
        db: Session,
        settings: TrashRetentionSettings,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize retention sweeper.

        Args:
            db: Database session
            settings: Retention days, entity types and batch size
            clock: Returns the current UTC time (defaults to datetime.utcnow)
        """
        self.db = db
        self.settings = settings
        self.clock = clock or datetime.utcnow

    def cutoff(self, now: datetime) -> datetime:
        """Records trashed before this instant are eligible for erasure."""
        return now - timedelta(days=self.settings.retention_days)

    def sweep(self, dry_run: bool = False) -> SweepReport:
        """Run one sweep over all configured entity types.

        Args:
            dry_run: Count eligible records without erasing anything

        Returns:
            SweepReport with one result per configured entity type

        Raises:
            sqlalchemy.exc.OperationalError: If the data store is unreachable
        """
        started = time.monotonic()
        ping(self.db)

        now = self.clock()
        report = SweepReport(
            started_at=now,
            cutoff=self.cutoff(now),
            retention_days=self.settings.retention_days,
            dry_run=dry_run,
        )

        logger.info(
            f"Cleaning up items deleted before {report.cutoff.isoformat(sep=' ', timespec='seconds')}",
            extra={"cutoff": report.cutoff.isoformat(), "dry_run": dry_run},
        )

        for entity_type in self.settings.entity_types:
            report.results.append(
                self._sweep_entity(entity_type, report.cutoff, dry_run)
            )

        report.completed_at = self.clock()
        trash_sweep_duration_seconds.labels(dry_run=str(dry_run).lower()).observe(
            time.monotonic() - started
        )

        logger.info(
            "Retention sweep completed",
            extra={
                "deleted": report.total_deleted,
                "count": report.total_matched,
                "dry_run": dry_run,
            },
        )

        if report.has_errors:
            logger.error(
                f"Retention sweep completed with errors: {', '.join(report.failed_types)}",
                extra={"error": report.failed_types},
            )

        return report

    def _sweep_entity(
        self,
        entity_type: str,
        cutoff: datetime,
        dry_run: bool,
    ) -> EntitySweepResult:
        try:
            model = resolve_soft_deletable(entity_type)
        except ConfigurationError as e:
            logger.warning(
                f"{e}, skipping",
                extra={"entity_type": entity_type},
            )
            return EntitySweepResult(
                entity_type=entity_type,
                status=SweepStatus.SKIPPED,
                error=str(e),
            )

        matched = 0
        try:
            matched = self.count_expired(model, cutoff)

            if matched == 0:
                logger.info(
                    f"{entity_type}: No items to delete",
                    extra={"entity_type": entity_type},
                )
                return EntitySweepResult(
                    entity_type=entity_type,
                    status=SweepStatus.NOTHING_TO_DELETE,
                )

            if dry_run:
                logger.info(
                    f"{entity_type}: Would delete {matched} items",
                    extra={"entity_type": entity_type, "count": matched},
                )
                return EntitySweepResult(
                    entity_type=entity_type,
                    status=SweepStatus.DRY_RUN,
                    matched=matched,
                )

            deleted = self.erase_expired(model, cutoff)

        except PartialEraseError as e:
            return self._failed(entity_type, e, matched=matched, deleted=e.deleted)

        except SQLAlchemyError as e:
            return self._failed(entity_type, e, matched=matched)

        trash_records_erased_total.labels(entity_type=entity_type).inc(deleted)
        logger.info(
            f"{entity_type}: Deleted {deleted} items",
            extra={"entity_type": entity_type, "deleted": deleted},
        )
        return EntitySweepResult(
            entity_type=entity_type,
            status=SweepStatus.DELETED,
            matched=matched,
            deleted=deleted,
        )

    def _failed(
        self,
        entity_type: str,
        error: Exception,
        matched: int = 0,
        deleted: int = 0,
    ) -> EntitySweepResult:
        """Roll back the open batch and report the type as FAILED.

        ``deleted`` counts batches committed before the failure; those
        records are gone and are reported as such.
        """
        self.db.rollback()
        trash_sweep_failures_total.labels(entity_type=entity_type).inc()
        if deleted:
            trash_records_erased_total.labels(entity_type=entity_type).inc(deleted)

        logger.error(
            f"{entity_type}: retention sweep failed after deleting {deleted} items",
            exc_info=True,
            extra={"entity_type": entity_type, "deleted": deleted, "error": str(error)},
        )
        return EntitySweepResult(
            entity_type=entity_type,
            status=SweepStatus.FAILED,
            matched=matched,
            deleted=deleted,
            error=str(error),
        )

    def count_expired(self, model: Type[SoftDeletes], cutoff: datetime) -> int:
        """Count records trashed before ``cutoff``."""
        return (
            self.db.query(func.count(model.id))
            .filter(model.trashed(), model.trashed_before(cutoff))
            .scalar()
        )

    def erase_expired(self, model: Type[SoftDeletes], cutoff: datetime) -> int:
        """Permanently erase records trashed before ``cutoff`` in batches.

        Batches are selected by ascending id above the last processed id, so
        rows erased by a cascade from an earlier batch are never revisited.

        Returns:
            Number of records erased

        Raises:
            PartialEraseError: If a batch fails; carries the number of
                records erased by the batches committed before it
        """
        batch_size = self.settings.batch_size
        deleted = 0
        last_id = 0

        try:
            while True:
                batch = (
                    self.db.query(model)
                    .filter(
                        model.trashed(),
                        model.trashed_before(cutoff),
                        model.id > last_id,
                    )
                    .order_by(model.id)
                    .limit(batch_size)
                    .all()
                )
                if not batch:
                    break

                last_id = batch[-1].id
                for record in batch:
                    self.db.delete(record)
                self.db.commit()

                deleted += len(batch)

                logger.debug(
                    f"Erased batch of {len(batch)} {model.__tablename__}",
                    extra={"entity_type": model.__tablename__, "count": len(batch)},
                )
        except SQLAlchemyError as e:
            raise PartialEraseError(deleted, e) from e

        return deleted
