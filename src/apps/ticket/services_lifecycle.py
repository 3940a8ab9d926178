import logging

from django.db import transaction
from django.utils import timezone

from core.exceptions import InvalidTransitionError, TicketNotFoundError
from core.services.notifications import NotificationService
from core.utils.constants import (
    ACTIVE_TICKET_STATUSES,
    TERMINAL_TICKET_STATUSES,
    TicketPriority,
    TicketStatus,
    TicketTransitionAction,
)
from ticket.events import TicketEvent, TicketEventDispatcher
from ticket.models import Ticket, TicketTransition

logger = logging.getLogger(__name__)


class TicketLifecycleService:
    """Canonical ticket state machine with audit logging and enrichment events."""

    @staticmethod
    def classify(*, from_status: str, to_status: str) -> str:
        if to_status in TERMINAL_TICKET_STATUSES and from_status not in TERMINAL_TICKET_STATUSES:
            return TicketTransitionAction.RESOLVED
        if to_status in ACTIVE_TICKET_STATUSES and from_status in TERMINAL_TICKET_STATUSES:
            return TicketTransitionAction.REOPENED
        return TicketTransitionAction.STATUS_CHANGED

    @staticmethod
    def _validate_status(requested_status) -> str:
        if requested_status not in TicketStatus.values:
            raise InvalidTransitionError(
                f"Unknown ticket status: {requested_status!r}. "
                f"Allowed: {', '.join(TicketStatus.values)}."
            )
        return str(requested_status)

    @staticmethod
    def _lock_ticket(ticket_id: int) -> Ticket:
        ticket = Ticket.domain.select_for_update().filter(pk=ticket_id).first()
        if ticket is None:
            raise TicketNotFoundError(f"Ticket #{ticket_id} was not found.")
        return ticket

    @classmethod
    @transaction.atomic
    def apply_status_change(
        cls,
        ticket: Ticket,
        requested_status: str,
        acting_staff_id: int | None = None,
        *,
        changed_at=None,
    ) -> tuple[Ticket, TicketEvent | None]:
        requested_status = cls._validate_status(requested_status)
        locked = cls._lock_ticket(ticket.pk)
        event = cls._transition_locked(
            ticket=locked,
            requested_status=requested_status,
            acting_staff_id=acting_staff_id,
            changed_at=changed_at,
        )
        cls._sync_instance(target=ticket, source=locked)
        return ticket, event

    @classmethod
    @transaction.atomic
    def update_ticket(
        cls,
        ticket: Ticket,
        *,
        actor_user_id: int | None = None,
        status: str | None = None,
        priority: str | None = None,
        assigned_staff_id: int | None = None,
        changed_at=None,
    ) -> tuple[Ticket, TicketEvent | None]:
        if status is not None:
            status = cls._validate_status(status)
        if priority is not None and priority not in TicketPriority.values:
            raise InvalidTransitionError(f"Unknown ticket priority: {priority!r}.")

        locked = cls._lock_ticket(ticket.pk)
        update_fields = []
        if priority is not None and priority != locked.priority:
            locked.priority = priority
            update_fields.append("priority")
        if assigned_staff_id is not None and assigned_staff_id != locked.assigned_staff_id:
            locked.assigned_staff_id = assigned_staff_id
            update_fields.append("assigned_staff")
        if update_fields:
            locked.save(update_fields=[*update_fields, "updated_at"])
            logger.info(
                "Ticket updated: ticket_id=%s fields=%s actor_user_id=%s",
                locked.id,
                ",".join(update_fields),
                actor_user_id,
            )

        event = None
        if status is not None:
            event = cls._transition_locked(
                ticket=locked,
                requested_status=status,
                acting_staff_id=actor_user_id,
                changed_at=changed_at,
            )
        cls._sync_instance(target=ticket, source=locked)
        return ticket, event

    @classmethod
    def _transition_locked(
        cls,
        *,
        ticket: Ticket,
        requested_status: str,
        acting_staff_id: int | None,
        changed_at=None,
    ) -> TicketEvent | None:
        from_status = ticket.status
        if requested_status == from_status:
            return None

        now_dt = changed_at or timezone.now()
        action = cls.classify(from_status=from_status, to_status=requested_status)
        metadata: dict[str, object] = {"staff_id": ticket.assigned_staff_id}

        if action == TicketTransitionAction.RESOLVED:
            metadata["resolution_time_hours"] = ticket.mark_resolved(resolved_at=now_dt)
        elif action == TicketTransitionAction.REOPENED:
            # Deductions go to whoever the last resolution credited.
            metadata["staff_id"] = cls._credited_staff_id(ticket)
            metadata["assigned_staff_id"] = ticket.assigned_staff_id
            metadata["prior_resolution_time_hours"] = ticket.clear_resolution()

        ticket.status = requested_status
        ticket.save(
            update_fields=[
                "status",
                "resolved_at",
                "resolution_time_hours",
                "updated_at",
            ]
        )
        transition = cls.log_ticket_transition(
            ticket=ticket,
            from_status=from_status,
            to_status=requested_status,
            action=action,
            actor_user_id=acting_staff_id,
            metadata=metadata,
        )

        event = cls._event_for(transition=transition)
        TicketEventDispatcher.dispatch_on_commit(event)
        NotificationService.notify_status_change(
            ticket=ticket,
            old_status=from_status,
            actor_user_id=acting_staff_id,
        )
        return event

    @staticmethod
    def _credited_staff_id(ticket: Ticket) -> int | None:
        resolution = TicketTransition.domain.latest_enrichment_event(ticket_id=ticket.id)
        if resolution is None or resolution.action != TicketTransitionAction.RESOLVED:
            return ticket.assigned_staff_id
        return resolution.metadata.get("staff_id")

    @staticmethod
    def _event_for(*, transition: TicketTransition) -> TicketEvent | None:
        if transition.action not in (
            TicketTransitionAction.RESOLVED,
            TicketTransitionAction.REOPENED,
        ):
            return None
        return TicketEventDispatcher.event_from_transition(transition)

    @staticmethod
    def log_ticket_transition(
        ticket: Ticket,
        action: str,
        to_status: str,
        from_status: str | None = None,
        actor_user_id: int | None = None,
        note: str | None = None,
        metadata: dict | None = None,
    ) -> TicketTransition:
        transition = ticket.add_transition(
            from_status=from_status,
            to_status=to_status,
            action=action,
            actor_user_id=actor_user_id,
            note=note,
            metadata=metadata,
        )
        logger.info(
            (
                "Ticket transition logged: ticket_id=%s transition_id=%s action=%s "
                "from_status=%s to_status=%s actor_user_id=%s metadata=%s"
            ),
            ticket.id,
            transition.id,
            action,
            from_status,
            to_status,
            actor_user_id,
            transition.metadata,
        )
        return transition

    @staticmethod
    def _sync_instance(*, target: Ticket, source: Ticket) -> None:
        if target is source:
            return
        for field_name in (
            "status",
            "priority",
            "assigned_staff_id",
            "resolved_at",
            "resolution_time_hours",
            "updated_at",
        ):
            setattr(target, field_name, getattr(source, field_name))
