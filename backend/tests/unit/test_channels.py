"""Unit tests for notification channels and channel selection."""

import smtplib
from datetime import date, time
from unittest.mock import patch

import pytest

from config import Settings
from notifications.channels import DatabaseChannel, DeliveryError, MailChannel
from notifications.schemas import DeadlineKind
from notifications.service import NotificationService, build_notification_service


@pytest.fixture
def mail_channel():
    return MailChannel(
        host="smtp.test",
        port=2525,
        sender="no-reply@laraflow.test",
        app_url="https://laraflow.test/",
    )


@pytest.fixture
def notice(db_session, make_task):
    task = make_task(title="Launch page", due_date=date(2024, 1, 10), due_time=time(10, 0))
    service = NotificationService(db_session, [])
    return service.build_notice(task, DeadlineKind.DUE_SOON, 24)


class TestMailChannel:
    """Mail delivery over SMTP."""

    def test_due_soon_message(self, mail_channel, notice, project):
        msg = mail_channel.build_message(notice)

        assert msg["Subject"] == "Task due soon: Launch page"
        assert msg["To"] == "assignee@test.com"
        assert msg["From"] == "no-reply@laraflow.test"
        body = msg.get_content()
        assert "Hello Avery Assignee!" in body
        assert "is due in 1 day" in body
        assert f"https://laraflow.test/projects/{project.id}" in body

    def test_overdue_message(self, db_session, make_task, mail_channel):
        task = make_task(title="Invoice", due_date=date(2024, 1, 9))
        overdue = NotificationService(db_session, []).build_notice(task, DeadlineKind.OVERDUE, 1)

        msg = mail_channel.build_message(overdue)

        assert msg["Subject"] == "Task overdue: Invoice"
        assert "is overdue by 1 hour" in msg.get_content()

    def test_deliver_sends_message(self, mail_channel, notice):
        with patch("notifications.channels.smtplib.SMTP") as smtp_cls:
            mail_channel.deliver(notice)

        smtp_cls.assert_called_once_with("smtp.test", 2525, timeout=10.0)
        smtp = smtp_cls.return_value.__enter__.return_value
        smtp.send_message.assert_called_once()

    @pytest.mark.parametrize("error", [
        ConnectionRefusedError("connection refused"),
        smtplib.SMTPServerDisconnected("gone"),
    ])
    def test_smtp_errors_become_delivery_errors(self, mail_channel, notice, error):
        with patch("notifications.channels.smtplib.SMTP", side_effect=error):
            with pytest.raises(DeliveryError, match="assignee@test.com"):
                mail_channel.deliver(notice)


class TestChannelSelection:
    """Channels follow the mail settings."""

    def test_database_only_by_default(self, db_session):
        service = build_notification_service(db_session, Settings(MAIL_ENABLED=False))

        assert [c.name for c in service.channels] == ["database"]
        assert isinstance(service.channels[0], DatabaseChannel)

    def test_mail_enabled_adds_mail_channel(self, db_session):
        settings = Settings(MAIL_ENABLED=True, MAIL_HOST="smtp.test", MAIL_PORT=2525)

        service = build_notification_service(db_session, settings)

        assert [c.name for c in service.channels] == ["database", "mail"]
        assert service.channels[1].host == "smtp.test"
