"""Unit tests for the scheduled Celery tasks and the beat schedule."""

from datetime import datetime

from celery.schedules import crontab
from sqlalchemy.exc import OperationalError

from config import Settings
from models import Task
from notifications import tasks as notification_tasks
from retention import tasks as retention_tasks
from workers.celery_app import celery_app


def refuse_ping(db):
    raise OperationalError("SELECT 1", {}, Exception("connection refused"))


class TestRetentionCleanupTask:
    """trash.cleanup"""

    def test_returns_sweep_statistics(self, db_session, make_task, monkeypatch):
        old = make_task(deleted_at=datetime(2024, 1, 1))
        old_id = old.id
        monkeypatch.setattr(retention_tasks, "SessionLocal", lambda: db_session)

        result = retention_tasks.retention_cleanup_task()

        assert result["status"] == "completed"
        assert result["total_deleted"] == 1
        assert result["retention_days"] == 7
        assert result["dry_run"] is False
        assert [r["entity_type"] for r in result["results"]] == ["task", "task_list", "project"]
        assert db_session.get(Task, old_id) is None

    def test_dry_run_and_days_override(self, db_session, make_task, monkeypatch):
        make_task(deleted_at=datetime(2024, 1, 1))
        monkeypatch.setattr(retention_tasks, "SessionLocal", lambda: db_session)

        result = retention_tasks.retention_cleanup_task(retention_days=30, dry_run=True)

        assert result["retention_days"] == 30
        assert result["total_deleted"] == 0
        assert result["total_matched"] == 1

    def test_unreachable_store_reports_failure(self, db_session, monkeypatch):
        monkeypatch.setattr(retention_tasks, "SessionLocal", lambda: db_session)
        monkeypatch.setattr("retention.sweeper.ping", refuse_ping)

        result = retention_tasks.retention_cleanup_task()

        assert result["status"] == "failed"
        assert "connection refused" in result["error"]

    def test_invalid_settings_reported_not_raised(self, monkeypatch):
        monkeypatch.setenv("TRASH_RETENTION_DAYS", "-1")
        monkeypatch.setattr(retention_tasks, "get_settings", lambda: Settings(_env_file=None))

        result = retention_tasks.retention_cleanup_task()

        assert result["status"] == "failed"
        assert "retention_days" in result["error"]
        assert result["total_deleted"] == 0


class TestDeadlineTasks:
    """notifications.task_due_soon and notifications.task_overdue"""

    def test_due_soon_reports_per_offset(self, db_session, monkeypatch):
        monkeypatch.setattr(notification_tasks, "SessionLocal", lambda: db_session)

        result = notification_tasks.task_due_soon_task(hours=6)

        assert result["status"] == "completed"
        assert result["kind"] == "task.due_soon"
        assert [o["offset_hours"] for o in result["offsets"]] == [6]
        assert result["total_sent"] == 0

    def test_overdue_failure_is_reported(self, db_session, monkeypatch):
        monkeypatch.setattr(notification_tasks, "SessionLocal", lambda: db_session)
        monkeypatch.setattr("notifications.notifier.ping", refuse_ping)

        result = notification_tasks.task_overdue_task()

        assert result["status"] == "failed"
        assert result["kind"] == "task.overdue"

    def test_invalid_offsets_reported_not_raised(self, monkeypatch):
        monkeypatch.setenv("NOTIFICATION_TASK_OVERDUE_HOURS", "1,abc")
        monkeypatch.setattr(notification_tasks, "get_settings", lambda: Settings(_env_file=None))

        result = notification_tasks.task_overdue_task()

        assert result["status"] == "failed"
        assert result["kind"] == "task.overdue"
        assert "overdue_hours" in result["error"]


class TestBeatSchedule:
    """Jobs are scheduled daily (trash) and hourly (deadlines)."""

    def test_schedule(self):
        schedule = celery_app.conf.beat_schedule

        assert schedule["trash-cleanup-daily"]["task"] == "trash.cleanup"
        assert schedule["trash-cleanup-daily"]["schedule"] == crontab(hour=2, minute=0)
        assert schedule["task-due-soon-hourly"]["task"] == "notifications.task_due_soon"
        assert schedule["task-overdue-hourly"]["task"] == "notifications.task_overdue"
        assert schedule["task-overdue-hourly"]["schedule"] == crontab(minute=0)
