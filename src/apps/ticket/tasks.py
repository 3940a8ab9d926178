from __future__ import annotations

import logging

from celery import shared_task

from ticket.events import TicketEventDispatcher

logger = logging.getLogger(__name__)


@shared_task(name="ticket.tasks.replay_ticket_event")
def replay_ticket_event(*, transition_id: int) -> dict[str, object]:
    summary = TicketEventDispatcher.replay(transition_id=transition_id)
    failed = [row["handler"] for row in summary.get("handlers", []) if not row["ok"]]
    if failed:
        logger.warning(
            "Ticket event replay finished with failures. transition_id=%s handlers=%s",
            transition_id,
            ",".join(failed),
        )
    return summary
