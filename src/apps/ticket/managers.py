from __future__ import annotations

from django.db import models
from django.db.models import Avg

from core.models import AppendOnlyManager, AppendOnlyQuerySet
from core.utils.constants import TERMINAL_TICKET_STATUSES, TicketTransitionAction


class TicketQuerySet(models.QuerySet):
    def terminal(self):
        return self.filter(status__in=TERMINAL_TICKET_STATUSES)

    def for_staff(self, *, staff_id: int):
        return self.filter(assigned_staff_id=staff_id)

    def resolved_with_duration(self):
        return self.terminal().filter(resolution_time_hours__isnull=False)


class TicketDomainManager(models.Manager.from_queryset(TicketQuerySet)):
    def get_queryset(self):
        return super().get_queryset().filter(deleted_at__isnull=True)

    def resolution_aggregates_for_staff(self, *, staff_id: int) -> dict:
        resolved = self.get_queryset().for_staff(staff_id=staff_id).resolved_with_duration()
        return resolved.aggregate(
            avg_hours=Avg("resolution_time_hours"),
            avg_rating=Avg(
                "customer_rating",
                filter=models.Q(customer_rating__isnull=False),
            ),
        )

    def first_response_times_for_staff(self, *, staff_id: int) -> list[tuple]:
        return list(
            self.get_queryset()
            .for_staff(staff_id=staff_id)
            .filter(first_response_at__isnull=False)
            .values_list("created_at", "first_response_at")
        )


class TicketTransitionQuerySet(AppendOnlyQuerySet):
    def for_ticket(self, *, ticket_id: int):
        return self.filter(ticket_id=ticket_id)

    def enrichment_events(self):
        return self.filter(
            action__in=(
                TicketTransitionAction.RESOLVED,
                TicketTransitionAction.REOPENED,
            )
        )


class TicketTransitionDomainManager(
    AppendOnlyManager.from_queryset(TicketTransitionQuerySet)
):
    def history_for_ticket(self, *, ticket_id: int):
        return self.get_queryset().for_ticket(ticket_id=ticket_id).order_by(
            "created_at", "id"
        )

    def latest_enrichment_event(self, *, ticket_id: int):
        return (
            self.get_queryset()
            .for_ticket(ticket_id=ticket_id)
            .enrichment_events()
            .order_by("-created_at", "-id")
            .first()
        )


class TicketMessageDomainManager(models.Manager):
    def get_queryset(self):
        return super().get_queryset().filter(deleted_at__isnull=True)
