import logging
from collections.abc import Callable
from typing import NamedTuple
from uuid import uuid4

from django.db import IntegrityError, transaction
from django.utils import timezone

from account.models import User
from core.exceptions import (
    ConcurrentModificationError,
    DomainValidationError,
    InsufficientPointsError,
    StaffNotFoundError,
)
from core.utils.constants import PointsEntryType
from gamification.models import PointsTransaction

logger = logging.getLogger(__name__)


class LedgerBalance(NamedTuple):
    points: int
    level: int


class PointsLedgerService:
    """
    Single writer of staff `points`, `level`, `tickets_resolved` and
    `total_tickets_handled`.

    Every mutation locks the staff row, re-checks `points_version`, recomputes
    the level from the new total and appends a PointsTransaction whose unique
    reference makes the mutation idempotent.
    """

    BASE_RESOLUTION_POINTS = 20
    # (max hours inclusive, bonus points), checked in order.
    SPEED_BONUS_TIERS = ((1, 30), (4, 20), (24, 10))
    POINTS_PER_LEVEL = 500
    MAX_WRITE_ATTEMPTS = 3

    @classmethod
    def level_for_points(cls, points: int) -> int:
        return max(1, int(points) // cls.POINTS_PER_LEVEL + 1)

    @classmethod
    def speed_bonus(cls, resolution_time_hours: float | None) -> int:
        if resolution_time_hours is None:
            return 0
        for max_hours, bonus in cls.SPEED_BONUS_TIERS:
            if resolution_time_hours <= max_hours:
                return bonus
        return 0

    @classmethod
    def points_for_resolution(cls, resolution_time_hours: float | None) -> int:
        return cls.BASE_RESOLUTION_POINTS + cls.speed_bonus(resolution_time_hours)

    @staticmethod
    def reference_for(entry_type: str, *parts) -> str:
        tokens = [str(part) for part in parts] or [uuid4().hex]
        return ":".join([str(entry_type), *tokens])

    @staticmethod
    def balance_of(staff_id: int) -> LedgerBalance:
        row = User.objects.filter(pk=staff_id).values("points", "level").first()
        if row is None:
            raise StaffNotFoundError(f"Staff member #{staff_id} was not found.")
        return LedgerBalance(points=row["points"], level=row["level"])

    @classmethod
    def award(
        cls,
        *,
        staff_id: int,
        resolution_time_hours: float,
        reference: str | None = None,
        payload: dict | None = None,
    ) -> LedgerBalance:
        amount = cls.points_for_resolution(resolution_time_hours)

        def mutate(staff: User) -> int:
            staff.points += amount
            staff.tickets_resolved += 1
            staff.total_tickets_handled += 1
            return amount

        return cls._apply(
            staff_id=staff_id,
            entry_type=PointsEntryType.TICKET_RESOLVED,
            reference=reference or cls.reference_for(PointsEntryType.TICKET_RESOLVED),
            mutate=mutate,
            description="Ticket resolution points",
            payload={
                "resolution_time_hours": resolution_time_hours,
                "speed_bonus": cls.speed_bonus(resolution_time_hours),
                **(payload or {}),
            },
        )

    @classmethod
    def deduct(
        cls,
        *,
        staff_id: int,
        prior_resolution_time_hours: float | None,
        reference: str | None = None,
        payload: dict | None = None,
    ) -> LedgerBalance:
        amount = cls.points_for_resolution(prior_resolution_time_hours)

        def mutate(staff: User) -> int:
            applied = min(amount, staff.points)
            staff.points -= applied
            staff.tickets_resolved = max(staff.tickets_resolved - 1, 0)
            return -applied

        return cls._apply(
            staff_id=staff_id,
            entry_type=PointsEntryType.TICKET_REOPENED,
            reference=reference or cls.reference_for(PointsEntryType.TICKET_REOPENED),
            mutate=mutate,
            description="Ticket reopened deduction",
            payload={
                "prior_resolution_time_hours": prior_resolution_time_hours,
                "requested_amount": amount,
                **(payload or {}),
            },
        )

    @classmethod
    def spend(
        cls,
        *,
        staff_id: int,
        cost: int,
        reference: str | None = None,
        description: str | None = None,
        payload: dict | None = None,
    ) -> LedgerBalance:
        cost = int(cost)
        if cost <= 0:
            raise DomainValidationError("cost must be a positive number of points.")

        def mutate(staff: User) -> int:
            if cost > staff.points:
                raise InsufficientPointsError(required=cost, available=staff.points)
            staff.points -= cost
            return -cost

        return cls._apply(
            staff_id=staff_id,
            entry_type=PointsEntryType.MARKETPLACE_PURCHASE,
            reference=reference
            or cls.reference_for(PointsEntryType.MARKETPLACE_PURCHASE),
            mutate=mutate,
            description=description or "Marketplace purchase",
            payload=payload,
        )

    @classmethod
    def grant(
        cls,
        *,
        staff_id: int,
        amount: int,
        entry_type: str,
        reference: str | None = None,
        description: str | None = None,
        payload: dict | None = None,
    ) -> LedgerBalance:
        amount = int(amount)
        if amount < 0:
            raise DomainValidationError("amount must not be negative.")

        def mutate(staff: User) -> int:
            staff.points += amount
            return amount

        return cls._apply(
            staff_id=staff_id,
            entry_type=entry_type,
            reference=reference or cls.reference_for(entry_type),
            mutate=mutate,
            description=description,
            payload=payload,
        )

    @classmethod
    @transaction.atomic
    def award_manual_points(
        cls,
        *,
        staff_id: int,
        points: int,
        reason: str = "",
        actor_user_id: int | None = None,
    ) -> LedgerBalance:
        normalized_points = int(points)
        if normalized_points <= 0:
            raise DomainValidationError("points must be greater than 0.")

        normalized_reason = str(reason or "").strip() or "Manual award"
        return cls.grant(
            staff_id=staff_id,
            amount=normalized_points,
            entry_type=PointsEntryType.MANUAL_AWARD,
            reference=cls.reference_for(
                PointsEntryType.MANUAL_AWARD, staff_id, uuid4().hex
            ),
            description=normalized_reason,
            payload={"actor_user_id": actor_user_id},
        )

    @staticmethod
    def _lock_staff(staff_id: int) -> User:
        staff = (
            User.objects.select_for_update()
            .filter(pk=staff_id, is_active=True, deleted_at__isnull=True)
            .first()
        )
        if staff is None or not staff.is_support_staff:
            raise StaffNotFoundError(f"Staff member #{staff_id} was not found.")
        return staff

    @classmethod
    def _apply(
        cls,
        *,
        staff_id: int,
        entry_type: str,
        reference: str,
        mutate: Callable[[User], int],
        description: str | None = None,
        payload: dict | None = None,
    ) -> LedgerBalance:
        for attempt in range(1, cls.MAX_WRITE_ATTEMPTS + 1):
            try:
                with transaction.atomic():
                    staff = cls._lock_staff(staff_id)
                    if PointsTransaction.objects.has_reference(reference):
                        logger.info(
                            "Ledger entry already applied: reference=%s staff_id=%s",
                            reference,
                            staff_id,
                        )
                        return LedgerBalance(points=staff.points, level=staff.level)

                    version = staff.points_version
                    applied = mutate(staff)
                    staff.level = cls.level_for_points(staff.points)

                    updated = User.objects.filter(
                        pk=staff_id, points_version=version
                    ).update(
                        points=staff.points,
                        level=staff.level,
                        tickets_resolved=staff.tickets_resolved,
                        total_tickets_handled=staff.total_tickets_handled,
                        points_version=version + 1,
                        updated_at=timezone.now(),
                    )
                    if updated:
                        PointsTransaction.objects.create(
                            user_id=staff_id,
                            amount=applied,
                            entry_type=entry_type,
                            reference=reference,
                            balance_after=staff.points,
                            description=description,
                            payload=payload or {},
                        )
                        logger.info(
                            "Ledger entry applied: staff_id=%s entry_type=%s amount=%s "
                            "points=%s level=%s reference=%s",
                            staff_id,
                            entry_type,
                            applied,
                            staff.points,
                            staff.level,
                            reference,
                        )
                        return LedgerBalance(points=staff.points, level=staff.level)
            except IntegrityError:
                if not PointsTransaction.objects.has_reference(reference):
                    raise
                # Another writer recorded the same reference first.
                logger.info(
                    "Ledger reference collision: reference=%s staff_id=%s",
                    reference,
                    staff_id,
                )
                return cls.balance_of(staff_id)

            logger.warning(
                "Ledger version conflict: staff_id=%s attempt=%s/%s",
                staff_id,
                attempt,
                cls.MAX_WRITE_ATTEMPTS,
            )

        raise ConcurrentModificationError(
            f"Could not update points for staff #{staff_id} after "
            f"{cls.MAX_WRITE_ATTEMPTS} attempts."
        )
