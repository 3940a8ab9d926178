from datetime import timedelta
from io import StringIO

import pytest
from django.core.management import call_command

from account.models import User
from core.exceptions import StaffNotFoundError
from core.utils.constants import TicketStatus
from gamification.services_stats import StaffStatsService
from gamification.tasks import recalculate_staff_stats

pytestmark = pytest.mark.django_db


@pytest.fixture
def stats_context(staff_factory, ticket_factory, base_time):
    staff = staff_factory(username="stats_staff", email="stats@example.com")

    def _resolved(hours, *, rating=None, status=TicketStatus.RESOLVED, response_minutes=None):
        return ticket_factory(
            assigned_staff=staff,
            status=status,
            resolved_at=base_time + timedelta(hours=hours),
            resolution_time_hours=hours,
            customer_rating=rating,
            first_response_at=(
                base_time + timedelta(minutes=response_minutes)
                if response_minutes is not None
                else None
            ),
            created_at=base_time,
        )

    return {"staff": staff, "resolved": _resolved, "base_time": base_time}


def test_averages_over_resolved_and_closed_tickets(stats_context, ticket_factory):
    staff = stats_context["staff"]
    stats_context["resolved"](2.0, rating=5, response_minutes=4)
    stats_context["resolved"](6.0, rating=4, status=TicketStatus.CLOSED, response_minutes=8)
    stats_context["resolved"](1.0)
    ticket_factory(assigned_staff=staff, status=TicketStatus.IN_PROGRESS)

    summary = StaffStatsService.recalculate(staff.id)

    staff.refresh_from_db()
    assert summary["staff_id"] == staff.id
    assert staff.average_resolution_time_hours == pytest.approx(3.0)
    assert staff.customer_satisfaction_rating == pytest.approx(4.5)
    assert staff.average_response_time_minutes == pytest.approx(6.0)


def test_empty_sets_keep_rating_and_reset_hours(stats_context):
    staff = stats_context["staff"]
    User.objects.filter(pk=staff.pk).update(
        average_resolution_time_hours=7.5,
        customer_satisfaction_rating=4.2,
        average_response_time_minutes=11.0,
    )

    StaffStatsService.recalculate(staff.id)

    staff.refresh_from_db()
    assert staff.average_resolution_time_hours == 0.0
    assert staff.customer_satisfaction_rating == pytest.approx(4.2)
    assert staff.average_response_time_minutes == pytest.approx(11.0)


def test_recalculate_does_not_touch_ledger_fields(stats_context):
    staff = stats_context["staff"]
    User.objects.filter(pk=staff.pk).update(points=700, level=2, tickets_resolved=9)
    stats_context["resolved"](2.0, rating=3)

    StaffStatsService.recalculate(staff.id)

    staff.refresh_from_db()
    assert (staff.points, staff.level, staff.tickets_resolved) == (700, 2, 9)


def test_recalculate_unknown_staff():
    with pytest.raises(StaffNotFoundError):
        StaffStatsService.recalculate(987654)


def test_recalculate_all_task_and_command(stats_context, staff_factory):
    stats_context["resolved"](4.0, rating=5)
    staff_factory(username="idle_staff", email="idle@example.com")

    result = recalculate_staff_stats.apply().get()

    assert result == {"staff_total": 2, "recalculated": 2, "failed": []}
    stats_context["staff"].refresh_from_db()
    assert stats_context["staff"].customer_satisfaction_rating == pytest.approx(5.0)

    out = StringIO()
    call_command(
        "recalculate_staff_stats", "--staff-id", str(stats_context["staff"].id), stdout=out
    )
    assert "recalculated=1" in out.getvalue()
