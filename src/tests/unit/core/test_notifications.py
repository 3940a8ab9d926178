import pytest
import requests

from core.services.notifications import NotificationEvent, NotificationService
from core.utils.constants import NotificationType

WEBHOOK_URL = "https://hooks.example.test/services/T000/B000"


@pytest.fixture
def status_event():
    return NotificationEvent(
        type=NotificationType.STATUS_CHANGE,
        ticket_id=17,
        subject="Printer is on fire",
        recipient="customer@example.com",
        metadata={"old_status": "open", "new_status": "resolved"},
    )


class _FakeResponse:
    def raise_for_status(self):
        return None


@pytest.mark.django_db
def test_emit_without_recipient_is_skipped(status_event, mailoutbox):
    event = NotificationEvent(
        type=status_event.type,
        ticket_id=status_event.ticket_id,
        subject=status_event.subject,
        recipient="  ",
    )

    assert NotificationService.emit(event) is None
    assert mailoutbox == []


@pytest.mark.django_db
def test_emit_respects_disabled_setting(
    status_event, settings, mailoutbox, django_capture_on_commit_callbacks
):
    settings.NOTIFICATIONS_ENABLED = False

    with django_capture_on_commit_callbacks(execute=True) as callbacks:
        assert NotificationService.emit(status_event) is None

    assert callbacks == []
    assert mailoutbox == []


@pytest.mark.django_db
def test_emit_defers_dispatch_until_commit(
    status_event, mailoutbox, django_capture_on_commit_callbacks
):
    with django_capture_on_commit_callbacks(execute=True) as callbacks:
        assert NotificationService.emit(status_event) == status_event
        assert mailoutbox == []

    assert len(callbacks) == 1
    assert mailoutbox[0].subject == "Ticket status updated: Printer is on fire"
    assert "new_status: resolved" in mailoutbox[0].body


def test_chat_failure_does_not_block_email(status_event, settings, mailoutbox, monkeypatch):
    settings.SLACK_WEBHOOK_URL = WEBHOOK_URL

    def _unreachable(*args, **kwargs):
        raise requests.ConnectionError("webhook unreachable")

    monkeypatch.setattr("core.services.notifications.requests.post", _unreachable)

    NotificationService.dispatch(status_event)

    assert len(mailoutbox) == 1


def test_email_failure_does_not_block_chat(status_event, settings, monkeypatch):
    settings.SLACK_WEBHOOK_URL = WEBHOOK_URL
    posted = []

    def _broken_mail(event):
        raise OSError("smtp down")

    def _post(url, json, timeout):
        posted.append((url, json))
        return _FakeResponse()

    monkeypatch.setattr(NotificationService, "_send_email", _broken_mail)
    monkeypatch.setattr("core.services.notifications.requests.post", _post)

    NotificationService.dispatch(status_event)

    assert len(posted) == 1
    assert posted[0][0] == WEBHOOK_URL
    assert "Ticket: #17" in posted[0][1]["text"]


def test_chat_is_skipped_without_webhook(status_event, settings, monkeypatch):
    settings.SLACK_WEBHOOK_URL = ""
    monkeypatch.setattr(
        "core.services.notifications.requests.post",
        lambda *args, **kwargs: pytest.fail("webhook should not be called"),
    )

    NotificationService.dispatch(status_event)
