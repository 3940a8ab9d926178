from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from django.db import transaction

from core.exceptions import DomainValidationError
from core.utils.constants import TicketTransitionAction

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TicketResolved:
    ticket_id: int
    staff_id: int | None
    transition_id: int
    resolution_time_hours: float


@dataclass(frozen=True, slots=True)
class TicketReopened:
    ticket_id: int
    staff_id: int | None
    transition_id: int
    prior_resolution_time_hours: float | None
    assigned_staff_id: int | None = None


TicketEvent = TicketResolved | TicketReopened
TicketEventHandler = Callable[[TicketEvent], object]


class TicketEventDispatcher:
    """
    Ordered registry of enrichment handlers for resolution and reopen events.

    Handlers run after the status change commits, each inside its own
    transaction. Every handler must be idempotent on `event.transition_id`,
    so a failed step can be replayed without double-applying the others.
    """

    _handlers: dict[type, list[tuple[str, TicketEventHandler]]] = {}

    @classmethod
    def register(
        cls, event_type: type, handler: TicketEventHandler, *, name: str | None = None
    ) -> None:
        handler_name = name or getattr(handler, "__qualname__", repr(handler))
        registered = cls._handlers.setdefault(event_type, [])
        if any(existing_name == handler_name for existing_name, _ in registered):
            return
        registered.append((handler_name, handler))

    @classmethod
    def handlers_for(cls, event_type: type) -> list[tuple[str, TicketEventHandler]]:
        return list(cls._handlers.get(event_type, []))

    @classmethod
    def dispatch_on_commit(cls, event: TicketEvent | None) -> None:
        if event is None:
            return
        transaction.on_commit(lambda: cls.dispatch(event))

    @classmethod
    def dispatch(cls, event: TicketEvent) -> dict[str, object]:
        summary: dict[str, object] = {
            "event": type(event).__name__,
            "ticket_id": event.ticket_id,
            "transition_id": event.transition_id,
            "staff_id": event.staff_id,
            "handlers": [],
        }
        if event.staff_id is None:
            logger.info(
                "Skip %s enrichment: ticket has no assigned staff. ticket_id=%s",
                type(event).__name__,
                event.ticket_id,
            )
            summary["skipped"] = True
            return summary

        for handler_name, handler in cls.handlers_for(type(event)):
            try:
                with transaction.atomic():
                    handler(event)
            except Exception:
                logger.exception(
                    "Ticket event handler failed: handler=%s event=%s transition_id=%s",
                    handler_name,
                    type(event).__name__,
                    event.transition_id,
                    extra={"staff_id": event.staff_id, "ticket_id": event.ticket_id},
                )
                summary["handlers"].append({"handler": handler_name, "ok": False})
                continue
            summary["handlers"].append({"handler": handler_name, "ok": True})

        summary["skipped"] = False
        return summary

    @staticmethod
    def event_from_transition(transition) -> TicketEvent:
        metadata = transition.metadata or {}
        staff_id = metadata.get("staff_id")
        if transition.action == TicketTransitionAction.RESOLVED:
            return TicketResolved(
                ticket_id=transition.ticket_id,
                staff_id=staff_id,
                transition_id=transition.id,
                resolution_time_hours=float(metadata["resolution_time_hours"]),
            )
        if transition.action == TicketTransitionAction.REOPENED:
            prior_hours = metadata.get("prior_resolution_time_hours")
            return TicketReopened(
                ticket_id=transition.ticket_id,
                staff_id=staff_id,
                transition_id=transition.id,
                prior_resolution_time_hours=(
                    float(prior_hours) if prior_hours is not None else None
                ),
                assigned_staff_id=metadata.get("assigned_staff_id"),
            )
        raise DomainValidationError(
            f"Transition #{transition.id} ({transition.action}) carries no ticket event."
        )

    @classmethod
    def replay(cls, *, transition_id: int) -> dict[str, object]:
        from ticket.models import TicketTransition

        transition = TicketTransition.objects.filter(pk=transition_id).first()
        if transition is None:
            raise DomainValidationError(f"Transition #{transition_id} was not found.")
        return cls.dispatch(cls.event_from_transition(transition))
