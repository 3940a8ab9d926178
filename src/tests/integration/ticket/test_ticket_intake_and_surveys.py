from datetime import timedelta
from decimal import Decimal

import pytest

from core.exceptions import DomainValidationError, TicketNotFoundError
from core.utils.constants import TicketStatus, TicketTransitionAction
from ticket.models import Ticket, TicketMessage, TicketTransition
from ticket.services import TicketService
from ticket.services_survey import SurveyService

pytestmark = pytest.mark.django_db

ALL_FIVES = {
    "overall_rating": 5,
    "response_time_rating": 5,
    "helpfulness_rating": 5,
    "professionalism_rating": 5,
    "resolution_quality_rating": 5,
}


@pytest.fixture
def intake_context(customer_factory, staff_factory):
    customer = customer_factory(username="intake_customer", email="customer@example.com")
    staff = staff_factory(username="intake_staff", email="staff@example.com")
    return {"customer": customer, "staff": staff}


def test_create_ticket_always_starts_open(
    intake_context, django_capture_on_commit_callbacks, mailoutbox
):
    with django_capture_on_commit_callbacks(execute=True):
        ticket = TicketService.create_ticket(
            customer_id=intake_context["customer"].id,
            subject="  VPN keeps dropping ",
            description="Every 10 minutes.",
            priority="high",
        )

    assert ticket.status == TicketStatus.OPEN
    assert ticket.subject == "VPN keeps dropping"
    assert ticket.resolved_at is None
    assert ticket.resolution_time_hours is None
    transition = TicketTransition.objects.get(ticket=ticket)
    assert transition.action == TicketTransitionAction.CREATED
    assert transition.to_status == TicketStatus.OPEN
    assert len(mailoutbox) == 1
    assert mailoutbox[0].to == ["customer@example.com"]
    assert "VPN keeps dropping" in mailoutbox[0].subject


def test_create_ticket_requires_subject(intake_context):
    with pytest.raises(DomainValidationError):
        TicketService.create_ticket(customer_id=intake_context["customer"].id, subject=" ")

    assert not Ticket.domain.exists()


def test_get_ticket_raises_for_unknown_id():
    with pytest.raises(TicketNotFoundError):
        TicketService.get_ticket(999_999)


def test_first_staff_reply_sets_first_response_and_updates_average(
    intake_context, ticket_factory, base_time, django_capture_on_commit_callbacks
):
    staff = intake_context["staff"]
    ticket = ticket_factory(
        customer=intake_context["customer"], assigned_staff=staff, created_at=base_time
    )

    with django_capture_on_commit_callbacks(execute=True):
        message = TicketService.add_message(ticket=ticket, author=staff, body="On it.")

    ticket.refresh_from_db()
    assert ticket.first_response_at == message.created_at
    staff.refresh_from_db()
    expected_minutes = (message.created_at - base_time).total_seconds() / 60
    assert staff.average_response_time_minutes == pytest.approx(expected_minutes)

    TicketService.add_message(ticket=ticket, author=staff, body="Still on it.")
    ticket.refresh_from_db()
    assert ticket.first_response_at == message.created_at


def test_customer_and_internal_messages_do_not_count_as_response(
    intake_context, ticket_factory, mailoutbox, django_capture_on_commit_callbacks
):
    customer = intake_context["customer"]
    staff = intake_context["staff"]
    ticket = ticket_factory(customer=customer, assigned_staff=staff)

    with django_capture_on_commit_callbacks(execute=True):
        TicketService.add_message(ticket=ticket, author=customer, body="Any news?")
        TicketService.add_message(
            ticket=ticket, author=staff, body="Escalating to L2.", is_internal=True
        )

    ticket.refresh_from_db()
    assert ticket.first_response_at is None
    assert TicketMessage.domain.filter(ticket=ticket).count() == 2
    assert mailoutbox == []


def test_survey_sets_customer_rating_and_recalculates_staff(
    intake_context, ticket_factory, base_time, django_capture_on_commit_callbacks
):
    staff = intake_context["staff"]
    ticket = ticket_factory(
        customer=intake_context["customer"],
        assigned_staff=staff,
        status=TicketStatus.RESOLVED,
        resolved_at=base_time + timedelta(hours=3),
        resolution_time_hours=3.0,
        created_at=base_time,
    )
    ratings = {**ALL_FIVES, "overall_rating": 4, "helpfulness_rating": 3}

    with django_capture_on_commit_callbacks(execute=True):
        survey = SurveyService.submit(
            ticket_id=ticket.id,
            customer_id=intake_context["customer"].id,
            ratings=ratings,
            feedback="Quick and polite.",
        )

    assert survey.average_rating == Decimal("4.4")
    ticket.refresh_from_db()
    assert ticket.customer_rating == 4
    staff.refresh_from_db()
    assert staff.customer_satisfaction_rating == pytest.approx(4.0)
    assert staff.average_resolution_time_hours == pytest.approx(3.0)


def test_survey_is_accepted_once_per_ticket(intake_context, ticket_factory, base_time):
    ticket = ticket_factory(
        customer=intake_context["customer"],
        status=TicketStatus.CLOSED,
        resolved_at=base_time,
        resolution_time_hours=1.0,
    )
    SurveyService.submit(
        ticket_id=ticket.id, customer_id=intake_context["customer"].id, ratings=ALL_FIVES
    )

    with pytest.raises(DomainValidationError):
        SurveyService.submit(
            ticket_id=ticket.id,
            customer_id=intake_context["customer"].id,
            ratings=ALL_FIVES,
        )


@pytest.mark.parametrize(
    "ratings",
    [
        {**ALL_FIVES, "overall_rating": 6},
        {**ALL_FIVES, "professionalism_rating": 0},
        {key: value for key, value in ALL_FIVES.items() if key != "helpfulness_rating"},
    ],
)
def test_survey_rejects_out_of_range_ratings(
    intake_context, ticket_factory, base_time, ratings
):
    ticket = ticket_factory(
        customer=intake_context["customer"],
        status=TicketStatus.RESOLVED,
        resolved_at=base_time,
        resolution_time_hours=1.0,
    )

    with pytest.raises(DomainValidationError):
        SurveyService.submit(
            ticket_id=ticket.id,
            customer_id=intake_context["customer"].id,
            ratings=ratings,
        )

    ticket.refresh_from_db()
    assert ticket.customer_rating is None


def test_survey_requires_resolved_ticket_and_owner(
    intake_context, ticket_factory, customer_factory
):
    ticket = ticket_factory(customer=intake_context["customer"])

    with pytest.raises(DomainValidationError):
        SurveyService.submit(
            ticket_id=ticket.id,
            customer_id=intake_context["customer"].id,
            ratings=ALL_FIVES,
        )

    stranger = customer_factory()
    with pytest.raises(DomainValidationError):
        SurveyService.submit(ticket_id=ticket.id, customer_id=stranger.id, ratings=ALL_FIVES)
