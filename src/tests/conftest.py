import itertools
from collections.abc import Callable
from datetime import datetime, timedelta

import pytest
from django.utils import timezone

from account.models import Role, User
from core.utils.constants import RoleSlug, TicketPriority, TicketStatus
from gamification.models import Achievement
from ticket.models import Ticket

ROLE_NAMES = {
    RoleSlug.CUSTOMER: "Customer",
    RoleSlug.STAFF: "Staff",
    RoleSlug.ADMIN: "Admin",
}


@pytest.fixture
def user_factory(db) -> Callable[..., User]:
    seq = itertools.count(1)

    def _create_user(**overrides) -> User:
        idx = next(seq)
        payload = {
            "username": f"user_{idx}",
            "password": "pass1234",
            "first_name": "User",
            "email": f"user_{idx}@example.com",
        }
        payload.update(overrides)
        return User.objects.create_user(**payload)

    return _create_user


@pytest.fixture
def role_factory(db) -> Callable[..., Role]:
    def _create_role(slug: str, *, name: str | None = None) -> Role:
        role, _ = Role.objects.update_or_create(
            slug=slug,
            defaults={"name": name or ROLE_NAMES.get(slug, str(slug))},
        )
        return role

    return _create_role


@pytest.fixture
def assign_roles(role_factory) -> Callable[..., User]:
    def _assign(user: User, *slugs: str) -> User:
        for slug in slugs:
            user.roles.add(role_factory(slug))
        return user

    return _assign


@pytest.fixture
def staff_factory(user_factory, assign_roles) -> Callable[..., User]:
    def _create_staff(*, role: str = RoleSlug.STAFF, **overrides) -> User:
        overrides.setdefault("first_name", "Staff")
        return assign_roles(user_factory(**overrides), role)

    return _create_staff


@pytest.fixture
def customer_factory(user_factory, assign_roles) -> Callable[..., User]:
    def _create_customer(**overrides) -> User:
        overrides.setdefault("first_name", "Customer")
        return assign_roles(user_factory(**overrides), RoleSlug.CUSTOMER)

    return _create_customer


@pytest.fixture
def base_time() -> datetime:
    return timezone.now().replace(microsecond=0) - timedelta(days=3)


@pytest.fixture
def ticket_factory(db, customer_factory) -> Callable[..., Ticket]:
    def _create_ticket(*, created_at: datetime | None = None, **overrides) -> Ticket:
        payload = {
            "customer": overrides.pop("customer", None) or customer_factory(),
            "subject": overrides.pop("subject", "Printer is on fire"),
            "priority": overrides.pop("priority", TicketPriority.MEDIUM),
            "status": overrides.pop("status", TicketStatus.OPEN),
        }
        payload.update(overrides)
        ticket = Ticket.domain.create(**payload)
        if created_at is not None:
            Ticket.all_objects.filter(pk=ticket.pk).update(created_at=created_at)
            ticket.refresh_from_db()
        return ticket

    return _create_ticket


@pytest.fixture
def no_achievements(db) -> None:
    Achievement.objects.update(is_active=False)
