"""Permanently delete items that have been in trash longer than the retention period.

Usage:
    laraflow-trash-cleanup
    laraflow-trash-cleanup --days 30
    laraflow-trash-cleanup --dry-run

Environment Variables:
    DATABASE_URL: PostgreSQL connection string
    TRASH_RETENTION_DAYS: Retention period in days (default 7)
    TRASH_MODELS: Entity types to sweep (default task,task_list,project)
    TRASH_BATCH_SIZE: Records erased per batch (default 100)
"""

import argparse
import logging
import sys
from typing import Callable, List, Optional

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from config import get_settings
from observability.job_context import job_context
from observability.logging_config import configure_logging
from retention.schemas import SweepReport, SweepStatus
from retention.sweeper import RetentionSweeper
from ._common import non_negative_int

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='laraflow-trash-cleanup',
        description='Permanently delete items that have been in trash longer than the retention period',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.add_argument(
        '--days',
        type=non_negative_int,
        help='Override the retention period in days'
    )
    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Show what would be deleted without actually deleting'
    )
    return parser


def print_report(report: SweepReport) -> None:
    """Print one line per entity type and a summary."""
    print(f"Cleaning up items deleted before {report.cutoff.strftime('%Y-%m-%d %H:%M:%S')}")

    if report.dry_run:
        print("DRY RUN - No items will actually be deleted")

    for result in report.results:
        if result.status == SweepStatus.SKIPPED:
            print(f"  {result.entity_type}: {result.error}, skipping...")
        elif result.status == SweepStatus.NOTHING_TO_DELETE:
            print(f"  {result.entity_type}: No items to delete")
        elif result.status == SweepStatus.DRY_RUN:
            print(f"  {result.entity_type}: Would delete {result.matched} items")
        elif result.status == SweepStatus.FAILED and result.deleted:
            print(f"  {result.entity_type}: FAILED after deleting {result.deleted} items ({result.error})")
        elif result.status == SweepStatus.FAILED:
            print(f"  {result.entity_type}: FAILED ({result.error})")
        else:
            print(f"  {result.entity_type}: Deleted {result.deleted} items")

    print()

    if report.dry_run:
        print("Dry run complete. Run without --dry-run to actually delete items.")
    else:
        print(f"Cleanup complete. Total items permanently deleted: {report.total_deleted}")


def main(
    argv: Optional[List[str]] = None,
    session_factory: Optional[Callable[[], Session]] = None,
) -> int:
    """Run the retention sweep.

    Returns:
        0 on completion (also when some entity types failed or were skipped),
        1 when the configuration is invalid or the data store is unusable
    """
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL, json_format=settings.LOG_JSON)

    try:
        retention = settings.trash_retention(args.days)
    except ValidationError as e:
        print(f"ERROR: invalid trash retention settings: {e}", file=sys.stderr)
        return 1

    if session_factory is None:
        from database import SessionLocal
        session_factory = SessionLocal

    with job_context():
        db = session_factory()
        try:
            report = RetentionSweeper(db, retention).sweep(dry_run=args.dry_run)
        except SQLAlchemyError as e:
            logger.error("Trash cleanup aborted", exc_info=True, extra={"error": str(e)})
            print(f"ERROR: trash cleanup aborted: {e}", file=sys.stderr)
            return 1
        finally:
            db.close()

    print_report(report)
    return 0


if __name__ == '__main__':
    sys.exit(main())
