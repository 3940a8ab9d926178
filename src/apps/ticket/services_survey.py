import logging
from decimal import ROUND_HALF_UP, Decimal

from django.db import IntegrityError, transaction

from core.exceptions import DomainValidationError, TicketNotFoundError
from core.utils.constants import TERMINAL_TICKET_STATUSES
from gamification.services_stats import StaffStatsService
from ticket.models import CustomerSatisfactionSurvey, Ticket

logger = logging.getLogger(__name__)


class SurveyService:
    @staticmethod
    def _normalize_rating(field_name: str, value) -> int:
        try:
            rating = int(value)
        except (TypeError, ValueError) as exc:
            raise DomainValidationError(f"{field_name} must be an integer.") from exc
        if rating < 1 or rating > 5:
            raise DomainValidationError(f"{field_name} must be between 1 and 5.")
        return rating

    @classmethod
    @transaction.atomic
    def submit(
        cls,
        *,
        ticket_id: int,
        customer_id: int,
        ratings: dict[str, int],
        feedback: str = "",
        improvements: str = "",
    ) -> CustomerSatisfactionSurvey:
        ticket = Ticket.domain.select_for_update().filter(pk=ticket_id).first()
        if ticket is None:
            raise TicketNotFoundError(f"Ticket #{ticket_id} was not found.")
        if ticket.customer_id != customer_id:
            raise DomainValidationError("Only the ticket customer can submit a survey.")
        if ticket.status not in TERMINAL_TICKET_STATUSES:
            raise DomainValidationError("Survey is accepted for resolved tickets only.")

        normalized = {
            field_name: cls._normalize_rating(field_name, ratings.get(field_name))
            for field_name in CustomerSatisfactionSurvey.RATING_FIELDS
        }
        average = (Decimal(sum(normalized.values())) / len(normalized)).quantize(
            Decimal("0.1"), rounding=ROUND_HALF_UP
        )

        try:
            with transaction.atomic():
                survey = CustomerSatisfactionSurvey.objects.create(
                    ticket=ticket,
                    customer_id=customer_id,
                    average_rating=average,
                    feedback=str(feedback or "").strip(),
                    improvements=str(improvements or "").strip(),
                    **normalized,
                )
        except IntegrityError as exc:
            raise DomainValidationError(
                "A survey was already submitted for this ticket."
            ) from exc

        ticket.customer_rating = normalized["overall_rating"]
        ticket.save(update_fields=["customer_rating", "updated_at"])
        logger.info(
            "Survey recorded: ticket_id=%s overall=%s average=%s",
            ticket.id,
            ticket.customer_rating,
            average,
        )

        staff_id = ticket.assigned_staff_id
        if staff_id is not None:
            transaction.on_commit(
                lambda: StaffStatsService.recalculate_safely(staff_id=staff_id)
            )
        return survey
