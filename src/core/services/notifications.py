from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field

import requests
from django.conf import settings
from django.core.mail import send_mail
from django.db import transaction

from core.utils.constants import NotificationType

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class NotificationEvent:
    type: str
    ticket_id: int | None
    subject: str
    recipient: str
    metadata: dict = field(default_factory=dict)

    def as_dict(self) -> dict[str, object]:
        return asdict(self)


class NotificationService:
    """Best-effort email/chat notifications for domain events."""

    SUBJECT_PREFIXES = {
        NotificationType.TICKET_SUBMITTED: "Ticket received",
        NotificationType.STAFF_REPLY: "New reply on your ticket",
        NotificationType.STATUS_CHANGE: "Ticket status updated",
        NotificationType.ACHIEVEMENT_UNLOCKED: "Achievement unlocked",
    }

    @classmethod
    def notify_ticket_submitted(cls, *, ticket) -> NotificationEvent | None:
        return cls.emit(
            NotificationEvent(
                type=NotificationType.TICKET_SUBMITTED,
                ticket_id=ticket.id,
                subject=ticket.subject,
                recipient=cls._email_of(ticket.customer),
                metadata={
                    "priority": ticket.priority,
                    "status": ticket.status,
                },
            )
        )

    @classmethod
    def notify_staff_reply(cls, *, ticket, message) -> NotificationEvent | None:
        return cls.emit(
            NotificationEvent(
                type=NotificationType.STAFF_REPLY,
                ticket_id=ticket.id,
                subject=ticket.subject,
                recipient=cls._email_of(ticket.customer),
                metadata={
                    "message_id": message.id,
                    "staff_id": message.author_id,
                    "staff_name": cls._display_name(message.author),
                },
            )
        )

    @classmethod
    def notify_status_change(
        cls, *, ticket, old_status: str, actor_user_id: int | None
    ) -> NotificationEvent | None:
        return cls.emit(
            NotificationEvent(
                type=NotificationType.STATUS_CHANGE,
                ticket_id=ticket.id,
                subject=ticket.subject,
                recipient=cls._email_of(ticket.customer),
                metadata={
                    "old_status": old_status,
                    "new_status": ticket.status,
                    "actor_user_id": actor_user_id,
                },
            )
        )

    @classmethod
    def notify_achievement_unlocked(
        cls, *, staff, achievement, points: int
    ) -> NotificationEvent | None:
        return cls.emit(
            NotificationEvent(
                type=NotificationType.ACHIEVEMENT_UNLOCKED,
                ticket_id=None,
                subject=achievement.name,
                recipient=cls._email_of(staff),
                metadata={
                    "staff_id": staff.id,
                    "achievement_code": achievement.code,
                    "points_reward": achievement.points_reward,
                    "total_points": points,
                },
            )
        )

    @classmethod
    def emit(cls, event: NotificationEvent) -> NotificationEvent | None:
        if not event.recipient:
            logger.info(
                "Skip %s notification: no recipient. ticket_id=%s",
                event.type,
                event.ticket_id,
            )
            return None

        if not getattr(settings, "NOTIFICATIONS_ENABLED", True):
            return None

        transaction.on_commit(lambda: cls.dispatch(event))
        return event

    @classmethod
    def dispatch(cls, event: NotificationEvent) -> None:
        # At-most-once: every channel gets a single attempt, failures stay here.
        try:
            cls._send_email(event)
        except Exception:
            logger.exception(
                "Failed to email %s notification. ticket_id=%s",
                event.type,
                event.ticket_id,
            )

        try:
            cls._post_chat_message(event)
        except Exception:
            logger.exception(
                "Failed to post %s notification to chat. ticket_id=%s",
                event.type,
                event.ticket_id,
            )

    @classmethod
    def _send_email(cls, event: NotificationEvent) -> None:
        send_mail(
            subject=f"{cls.SUBJECT_PREFIXES.get(event.type, 'Update')}: {event.subject}",
            message=cls._render_text(event),
            from_email=getattr(settings, "DEFAULT_FROM_EMAIL", None),
            recipient_list=[event.recipient],
            fail_silently=False,
        )

    @classmethod
    def _post_chat_message(cls, event: NotificationEvent) -> None:
        webhook_url = str(getattr(settings, "SLACK_WEBHOOK_URL", "")).strip()
        if not webhook_url:
            return

        response = requests.post(
            webhook_url,
            json={"text": cls._render_text(event)},
            timeout=5,
        )
        response.raise_for_status()

    @staticmethod
    def _render_text(event: NotificationEvent) -> str:
        lines = [f"Event: {event.type}"]
        if event.ticket_id is not None:
            lines.append(f"Ticket: #{event.ticket_id}")
        lines.append(f"Subject: {event.subject}")
        for key, value in sorted(event.metadata.items()):
            lines.append(f"{key}: {value}")
        return "\n".join(lines)

    @staticmethod
    def _email_of(user) -> str:
        return str(getattr(user, "email", "") or "").strip()

    @staticmethod
    def _display_name(user) -> str:
        if user is None:
            return "Unknown user"
        full_name = " ".join(
            part for part in [user.first_name, user.last_name] if part
        ).strip()
        return full_name or user.username
