"""Unit tests for the command line entry points.

Commands run against the test session; their own clock is the wall clock,
so trash stamped in 2024 is always past retention.
"""

from datetime import date, datetime, time
from functools import partial

import pytest
from sqlalchemy.exc import OperationalError

from commands import cleanup_trash, deadline_notifications
from models import Task
from notifications.notifier import DeadlineNotifier
from notifications.schemas import DeadlineKind


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    """Keep commands from replacing pytest's log handlers."""
    monkeypatch.setattr(cleanup_trash, "configure_logging", lambda *a, **kw: None)
    monkeypatch.setattr(deadline_notifications, "configure_logging", lambda *a, **kw: None)


def refuse_ping(db):
    raise OperationalError("SELECT 1", {}, Exception("connection refused"))


class TestCleanupTrash:
    """laraflow-trash-cleanup"""

    def test_erases_expired_trash(self, db_session, make_task, capsys):
        old = make_task(deleted_at=datetime(2024, 1, 1))
        old_id = old.id

        code = cleanup_trash.main([], session_factory=lambda: db_session)

        out = capsys.readouterr().out
        assert code == 0
        assert "Cleaning up items deleted before" in out
        assert "  task: Deleted 1 items" in out
        assert "  project: No items to delete" in out
        assert "Cleanup complete. Total items permanently deleted: 1" in out
        assert db_session.get(Task, old_id) is None

    def test_dry_run(self, db_session, make_task, capsys):
        old = make_task(deleted_at=datetime(2024, 1, 1))

        code = cleanup_trash.main(["--dry-run"], session_factory=lambda: db_session)

        out = capsys.readouterr().out
        assert code == 0
        assert "DRY RUN - No items will actually be deleted" in out
        assert "  task: Would delete 1 items" in out
        assert "Dry run complete." in out
        assert db_session.get(Task, old.id) is not None

    def test_unreachable_store_exits_nonzero(self, db_session, monkeypatch, capsys):
        monkeypatch.setattr("retention.sweeper.ping", refuse_ping)

        code = cleanup_trash.main([], session_factory=lambda: db_session)

        assert code == 1
        assert "trash cleanup aborted" in capsys.readouterr().err

    def test_negative_days_rejected(self):
        with pytest.raises(SystemExit):
            cleanup_trash.main(["--days", "-3"])


class TestDeadlineCommands:
    """laraflow-task-due-soon and laraflow-task-overdue"""

    @pytest.fixture
    def fixed_notifier(self, monkeypatch, clock):
        monkeypatch.setattr(
            deadline_notifications, "DeadlineNotifier", partial(DeadlineNotifier, clock=clock)
        )
        return clock

    def test_due_soon_prints_sent_notices(self, db_session, make_task, fixed_notifier, capsys):
        make_task(title="Launch page", due_date=date(2024, 1, 10), due_time=time(10, 0))
        fixed_notifier.set(datetime(2024, 1, 9, 10, 30))

        code = deadline_notifications.run(
            DeadlineKind.DUE_SOON, [], session_factory=lambda: db_session
        )

        out = capsys.readouterr().out
        assert code == 0
        assert (
            "  -> Sent task due soon notification to Avery Assignee "
            "for task: Launch page (due in 1 day)"
        ) in out
        assert "Sent 1 task due soon notifications." in out

    def test_overdue_hours_option(self, db_session, make_task, fixed_notifier, capsys):
        make_task(title="Invoice", due_date=date(2024, 1, 9), due_time=time(7, 45))
        fixed_notifier.set(datetime(2024, 1, 9, 10, 30))

        code = deadline_notifications.run(
            DeadlineKind.OVERDUE, ["--hours", "3"], session_factory=lambda: db_session
        )

        out = capsys.readouterr().out
        assert code == 0
        assert "for task: Invoice (overdue by 3 hours)" in out
        assert "Sent 1 task overdue notifications." in out

    def test_zero_hours_uses_configured_offsets(
        self, db_session, make_task, fixed_notifier, capsys
    ):
        make_task(title="Launch page", due_date=date(2024, 1, 10), due_time=time(10, 0))
        fixed_notifier.set(datetime(2024, 1, 9, 10, 30))

        code = deadline_notifications.run(
            DeadlineKind.DUE_SOON, ["--hours", "0"], session_factory=lambda: db_session
        )

        out = capsys.readouterr().out
        assert code == 0
        assert "for task: Launch page (due in 1 day)" in out
        assert "Sent 1 task due soon notifications." in out

    def test_nothing_due(self, db_session, fixed_notifier, capsys):
        code = deadline_notifications.run(
            DeadlineKind.DUE_SOON, [], session_factory=lambda: db_session
        )

        assert code == 0
        assert "Sent 0 task due soon notifications." in capsys.readouterr().out

    def test_unreachable_store_exits_nonzero(self, db_session, monkeypatch, capsys):
        monkeypatch.setattr("notifications.notifier.ping", refuse_ping)

        code = deadline_notifications.run(
            DeadlineKind.OVERDUE, [], session_factory=lambda: db_session
        )

        assert code == 1
        assert "task overdue notifications aborted" in capsys.readouterr().err
