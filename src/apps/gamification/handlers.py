"""Ticket event handlers, registered in dispatch order by GamificationConfig.ready()."""

from core.utils.constants import PointsEntryType
from gamification.services import LedgerBalance, PointsLedgerService
from gamification.services_achievements import AchievementService
from gamification.services_stats import StaffStatsService
from ticket.events import TicketEventDispatcher, TicketReopened, TicketResolved


def award_resolution_points(event: TicketResolved) -> LedgerBalance:
    return PointsLedgerService.award(
        staff_id=event.staff_id,
        resolution_time_hours=event.resolution_time_hours,
        reference=PointsLedgerService.reference_for(
            PointsEntryType.TICKET_RESOLVED, event.ticket_id, event.transition_id
        ),
        payload={"ticket_id": event.ticket_id, "transition_id": event.transition_id},
    )


def deduct_reopen_points(event: TicketReopened) -> LedgerBalance:
    return PointsLedgerService.deduct(
        staff_id=event.staff_id,
        prior_resolution_time_hours=event.prior_resolution_time_hours,
        reference=PointsLedgerService.reference_for(
            PointsEntryType.TICKET_REOPENED, event.ticket_id, event.transition_id
        ),
        payload={"ticket_id": event.ticket_id, "transition_id": event.transition_id},
    )


def recalculate_staff_stats(event: TicketResolved | TicketReopened) -> list[dict]:
    staff_ids = [event.staff_id]
    reassigned_id = getattr(event, "assigned_staff_id", None)
    if reassigned_id is not None and reassigned_id != event.staff_id:
        staff_ids.append(reassigned_id)
    return [StaffStatsService.recalculate(staff_id) for staff_id in staff_ids]


def evaluate_achievements(event: TicketResolved) -> list:
    return AchievementService.evaluate(event.staff_id)


def register_ticket_event_handlers() -> None:
    TicketEventDispatcher.register(
        TicketResolved, award_resolution_points, name="award_resolution_points"
    )
    TicketEventDispatcher.register(
        TicketResolved, recalculate_staff_stats, name="recalculate_staff_stats"
    )
    TicketEventDispatcher.register(
        TicketResolved, evaluate_achievements, name="evaluate_achievements"
    )
    TicketEventDispatcher.register(
        TicketReopened, deduct_reopen_points, name="deduct_reopen_points"
    )
    TicketEventDispatcher.register(
        TicketReopened, recalculate_staff_stats, name="recalculate_staff_stats"
    )
