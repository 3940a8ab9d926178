import logging

from django.db import transaction
from django.utils import timezone

from core.exceptions import DomainValidationError, TicketNotFoundError
from core.services.notifications import NotificationService
from core.utils.constants import TicketPriority, TicketStatus, TicketTransitionAction
from gamification.services_stats import StaffStatsService
from ticket.models import Ticket, TicketMessage
from ticket.services_lifecycle import TicketLifecycleService

logger = logging.getLogger(__name__)


class TicketService:
    """Ticket intake and conversation writes."""

    @staticmethod
    def get_ticket(ticket_id: int) -> Ticket:
        ticket = Ticket.domain.filter(pk=ticket_id).first()
        if ticket is None:
            raise TicketNotFoundError(f"Ticket #{ticket_id} was not found.")
        return ticket

    @classmethod
    @transaction.atomic
    def create_ticket(
        cls,
        *,
        customer_id: int,
        subject: str,
        description: str = "",
        priority: str = TicketPriority.MEDIUM,
        assigned_staff_id: int | None = None,
    ) -> Ticket:
        normalized_subject = str(subject or "").strip()
        if not normalized_subject:
            raise DomainValidationError("subject is required.")
        if priority not in TicketPriority.values:
            raise DomainValidationError(f"Unknown ticket priority: {priority!r}.")

        ticket = Ticket.domain.create(
            customer_id=customer_id,
            subject=normalized_subject,
            description=str(description or "").strip(),
            priority=priority,
            status=TicketStatus.OPEN,
            assigned_staff_id=assigned_staff_id,
        )
        TicketLifecycleService.log_ticket_transition(
            ticket=ticket,
            from_status=None,
            to_status=ticket.status,
            action=TicketTransitionAction.CREATED,
            actor_user_id=customer_id,
            metadata={"priority": priority, "staff_id": assigned_staff_id},
        )
        NotificationService.notify_ticket_submitted(ticket=ticket)
        return ticket

    @classmethod
    @transaction.atomic
    def add_message(
        cls,
        *,
        ticket: Ticket,
        author,
        body: str,
        is_internal: bool = False,
    ) -> TicketMessage:
        normalized_body = str(body or "").strip()
        if not normalized_body:
            raise DomainValidationError("Message body is required.")

        message = TicketMessage.domain.create(
            ticket=ticket,
            author=author,
            body=normalized_body,
            is_internal=is_internal,
        )
        if is_internal or author.id == ticket.customer_id or not author.is_support_staff:
            return message

        if ticket.first_response_at is None:
            ticket.first_response_at = message.created_at or timezone.now()
            Ticket.domain.filter(
                pk=ticket.pk, first_response_at__isnull=True
            ).update(first_response_at=ticket.first_response_at)
            logger.info(
                "First staff response recorded: ticket_id=%s staff_id=%s",
                ticket.id,
                author.id,
            )
            staff_id = ticket.assigned_staff_id
            if staff_id is not None:
                transaction.on_commit(
                    lambda: StaffStatsService.recalculate_safely(staff_id=staff_id)
                )

        NotificationService.notify_staff_reply(ticket=ticket, message=message)
        return message
