"""Unit tests for settings and the job configuration built from them."""

import pytest
from pydantic import ValidationError

from config import Settings, parse_csv


def test_parse_csv_drops_blanks():
    assert parse_csv(" task, ,project ,") == ["task", "project"]


class TestTrashRetention:
    """TRASH_* settings become TrashRetentionSettings."""

    def test_defaults(self):
        retention = Settings(_env_file=None).trash_retention()

        assert retention.retention_days == 7
        assert retention.entity_types == ["task", "task_list", "project"]
        assert retention.batch_size == 100

    def test_days_override(self):
        settings = Settings(_env_file=None, TRASH_RETENTION_DAYS=14)

        assert settings.trash_retention().retention_days == 14
        assert settings.trash_retention(30).retention_days == 30
        assert settings.trash_retention(0).retention_days == 0

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("TRASH_MODELS", "task, project")
        monkeypatch.setenv("TRASH_BATCH_SIZE", "500")

        retention = Settings(_env_file=None).trash_retention()

        assert retention.entity_types == ["task", "project"]
        assert retention.batch_size == 500

    @pytest.mark.parametrize("overrides", [
        {"TRASH_RETENTION_DAYS": -1},
        {"TRASH_BATCH_SIZE": 0},
    ])
    def test_invalid_values_rejected(self, overrides):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, **overrides).trash_retention()


class TestDeadlineSettings:
    """NOTIFICATION_* settings become DeadlineSettings."""

    def test_defaults(self):
        deadlines = Settings(_env_file=None).deadline_settings()

        assert deadlines.due_soon_hours == [24]
        assert deadlines.overdue_hours == [1, 24]

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("NOTIFICATION_TASK_DUE_HOURS", "48, 2")
        monkeypatch.setenv("NOTIFICATION_TASK_OVERDUE_HOURS", "6")

        deadlines = Settings(_env_file=None).deadline_settings()

        assert deadlines.due_soon_hours == [48, 2]
        assert deadlines.overdue_hours == [6]

    @pytest.mark.parametrize("value", ["soon", "1,-2"])
    def test_invalid_offsets_rejected(self, value):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, NOTIFICATION_TASK_DUE_HOURS=value).deadline_settings()
