from datetime import timedelta
from io import StringIO

import pytest
from django.core.management import CommandError, call_command

from core.utils.constants import TicketStatus, TicketTransitionAction
from ticket.models import TicketTransition
from ticket.services_lifecycle import TicketLifecycleService
from ticket.tasks import replay_ticket_event

pytestmark = pytest.mark.django_db


def _run(*args) -> str:
    out = StringIO()
    call_command(*args, stdout=out)
    return out.getvalue()


@pytest.fixture
def resolved_without_enrichment(staff_factory, ticket_factory, base_time, no_achievements):
    staff = staff_factory(username="replay_staff", email="replay@example.com")
    ticket = ticket_factory(assigned_staff=staff, created_at=base_time)
    # on_commit callbacks never fire inside the test transaction.
    TicketLifecycleService.apply_status_change(
        ticket,
        TicketStatus.RESOLVED,
        staff.id,
        changed_at=base_time + timedelta(hours=2),
    )
    transition = TicketTransition.domain.latest_enrichment_event(ticket_id=ticket.id)
    return staff, ticket, transition


def test_replay_command_applies_missing_enrichment_once(resolved_without_enrichment):
    staff, _, transition = resolved_without_enrichment
    staff.refresh_from_db()
    assert staff.points == 0

    first = _run("replay_ticket_event", "--transition-id", str(transition.id))
    second = _run("replay_ticket_event", "--transition-id", str(transition.id))

    assert "award_resolution_points=ok" in first
    assert "recalculate_staff_stats=ok" in second
    staff.refresh_from_db()
    assert staff.points == 40
    assert staff.tickets_resolved == 1
    assert staff.average_resolution_time_hours == pytest.approx(2.0)


def test_replay_task_returns_handler_summary(resolved_without_enrichment):
    staff, ticket, transition = resolved_without_enrichment

    summary = replay_ticket_event.apply(kwargs={"transition_id": transition.id}).get()

    assert summary["event"] == "TicketResolved"
    assert summary["ticket_id"] == ticket.id
    assert summary["skipped"] is False
    assert all(row["ok"] for row in summary["handlers"])


def test_replay_command_rejects_unknown_or_plain_transitions(resolved_without_enrichment):
    _, ticket, _ = resolved_without_enrichment
    TicketLifecycleService.apply_status_change(ticket, TicketStatus.CLOSED)
    plain = TicketTransition.domain.history_for_ticket(ticket_id=ticket.id).last()
    assert plain.action == TicketTransitionAction.STATUS_CHANGED

    with pytest.raises(CommandError):
        _run("replay_ticket_event", "--transition-id", "999999")
    with pytest.raises(CommandError):
        _run("replay_ticket_event", "--transition-id", str(plain.id))


def test_award_points_command(staff_factory):
    staff = staff_factory(username="bonus_staff", email="bonus@example.com")

    output = _run(
        "award_points", "--staff-id", str(staff.id), "--points", "600", "--reason", "Launch"
    )

    assert "points=600 level=2" in output
    with pytest.raises(CommandError):
        _run("award_points", "--staff-id", str(staff.id), "--points", "0")


def test_leaderboard_command(staff_factory):
    staff_factory(username="first", email="first@example.com", first_name="Ada", points=800)
    staff_factory(username="second", email="second@example.com", first_name="Bob", points=100)

    output = _run("leaderboard", "--limit", "1")

    assert "total_staff=2" in output
    assert "1. Ada" in output
    assert "Bob" not in output
    with pytest.raises(CommandError):
        call_command("leaderboard", limit=-1, stdout=StringIO())


def test_seed_achievements_command():
    output = _run("seed_achievements")

    assert "created=0 updated=4" in output
