import logging

from django.db import transaction
from django.utils import timezone

from account.models import User
from core.exceptions import StaffNotFoundError
from ticket.models import Ticket

logger = logging.getLogger(__name__)


class StaffStatsService:
    """Recomputes derived staff averages from the ticket store."""

    @staticmethod
    def _mean(values: list[float]) -> float | None:
        if not values:
            return None
        return sum(values) / len(values)

    @classmethod
    @transaction.atomic
    def recalculate(cls, staff_id: int) -> dict[str, object]:
        staff = (
            User.objects.select_for_update()
            .filter(pk=staff_id, deleted_at__isnull=True)
            .first()
        )
        if staff is None:
            raise StaffNotFoundError(f"Staff member #{staff_id} was not found.")

        aggregates = Ticket.domain.resolution_aggregates_for_staff(staff_id=staff_id)
        updates: dict[str, object] = {
            "average_resolution_time_hours": float(aggregates["avg_hours"] or 0.0),
        }
        if aggregates["avg_rating"] is not None:
            updates["customer_satisfaction_rating"] = float(aggregates["avg_rating"])

        response_minutes = [
            (first_response_at - created_at).total_seconds() / 60
            for created_at, first_response_at in Ticket.domain.first_response_times_for_staff(
                staff_id=staff_id
            )
        ]
        average_response = cls._mean(response_minutes)
        if average_response is not None:
            updates["average_response_time_minutes"] = average_response

        User.objects.filter(pk=staff_id).update(**updates, updated_at=timezone.now())
        logger.info(
            "Staff aggregates recalculated: staff_id=%s values=%s", staff_id, updates
        )
        return {"staff_id": staff_id, **updates}

    @classmethod
    def recalculate_safely(cls, *, staff_id: int) -> dict[str, object] | None:
        try:
            return cls.recalculate(staff_id)
        except Exception:
            logger.exception(
                "Staff aggregate recalculation failed. staff_id=%s",
                staff_id,
                extra={"staff_id": staff_id},
            )
            return None

    @classmethod
    def recalculate_all(cls, *, staff_id: int | None = None) -> dict[str, object]:
        staff_ids = (
            [staff_id] if staff_id is not None else User.objects.support_staff_ids()
        )
        recalculated = 0
        failed: list[int] = []
        for current_id in staff_ids:
            if cls.recalculate_safely(staff_id=current_id) is None:
                failed.append(current_id)
                continue
            recalculated += 1
        return {
            "staff_total": len(staff_ids),
            "recalculated": recalculated,
            "failed": failed,
        }
