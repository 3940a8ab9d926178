import pytest
from django.core.exceptions import ValidationError

from core.utils.constants import PointsEntryType, TicketStatus, TicketTransitionAction
from gamification.models import PointsTransaction
from gamification.services import PointsLedgerService
from marketplace.models import Purchase
from ticket.models import TicketTransition

pytestmark = pytest.mark.django_db


@pytest.fixture
def journal_entry(staff_factory):
    staff = staff_factory(username="journal_staff", email="journal@example.com")
    PointsLedgerService.grant(
        staff_id=staff.id, amount=25, entry_type=PointsEntryType.MANUAL_AWARD
    )
    return PointsTransaction.objects.get(user=staff)


def test_points_transactions_cannot_change(journal_entry):
    journal_entry.amount = 1000

    with pytest.raises(ValidationError):
        journal_entry.save()
    with pytest.raises(ValidationError):
        journal_entry.delete()
    with pytest.raises(ValidationError):
        PointsTransaction.objects.filter(pk=journal_entry.pk).update(amount=1000)
    with pytest.raises(ValidationError):
        PointsTransaction.objects.filter(pk=journal_entry.pk).delete()

    journal_entry.refresh_from_db()
    assert journal_entry.amount == 25


def test_ticket_transitions_cannot_change(ticket_factory):
    ticket = ticket_factory()
    transition = ticket.add_transition(
        from_status=None,
        to_status=TicketStatus.OPEN,
        action=TicketTransitionAction.CREATED,
        actor_user_id=None,
    )

    with pytest.raises(ValidationError):
        TicketTransition.domain.filter(pk=transition.pk).update(note="edited")
    with pytest.raises(ValidationError):
        transition.delete()


def test_purchases_cannot_be_deleted(staff_factory):
    staff = staff_factory(username="purchase_staff", email="purchase@example.com")
    purchase = Purchase.objects.create(
        user=staff,
        item_id="1",
        item_name="Apple AirPods Pro (2nd Gen)",
        points_cost=2500,
        reference="marketplace_purchase:test",
        balance_after=0,
    )

    with pytest.raises(ValidationError):
        Purchase.objects.filter(pk=purchase.pk).delete()
    assert Purchase.objects.filter(pk=purchase.pk).exists()
