from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from core.models import AppendOnlyModel, SoftDeleteModel, TimestampedModel
from core.utils.constants import TicketPriority, TicketStatus, TicketTransitionAction
from ticket.managers import (
    TicketDomainManager,
    TicketMessageDomainManager,
    TicketTransitionDomainManager,
)

RATING_VALIDATORS = [MinValueValidator(1), MaxValueValidator(5)]


class Ticket(TimestampedModel, SoftDeleteModel):
    domain = TicketDomainManager()

    customer = models.ForeignKey(
        "account.User", on_delete=models.PROTECT, related_name="submitted_tickets"
    )
    assigned_staff = models.ForeignKey(
        "account.User",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="assigned_tickets",
    )
    subject = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    priority = models.CharField(
        max_length=20,
        choices=TicketPriority,
        default=TicketPriority.MEDIUM,
        db_index=True,
    )
    status = models.CharField(
        max_length=20,
        choices=TicketStatus,
        default=TicketStatus.OPEN,
        db_index=True,
    )
    resolved_at = models.DateTimeField(null=True, blank=True)
    resolution_time_hours = models.FloatField(null=True, blank=True)
    customer_rating = models.PositiveSmallIntegerField(
        null=True, blank=True, validators=RATING_VALIDATORS
    )
    first_response_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        indexes = [
            models.Index(
                fields=["status", "created_at"], name="ticket_tick_status_3b9f0e_idx"
            ),
            models.Index(
                fields=["assigned_staff", "status"], name="ticket_tick_assigne_7c1d2a_idx"
            ),
        ]
        constraints = [
            models.CheckConstraint(
                condition=(
                    models.Q(resolved_at__isnull=True, resolution_time_hours__isnull=True)
                    | models.Q(
                        resolved_at__isnull=False, resolution_time_hours__isnull=False
                    )
                ),
                name="ticket_resolution_fields_paired",
            ),
            models.CheckConstraint(
                condition=(
                    models.Q(customer_rating__isnull=True)
                    | models.Q(customer_rating__gte=1, customer_rating__lte=5)
                ),
                name="ticket_customer_rating_range",
            ),
        ]

    def mark_resolved(self, *, resolved_at) -> float:
        elapsed = resolved_at - self.created_at
        self.resolved_at = resolved_at
        self.resolution_time_hours = elapsed.total_seconds() / 3600
        return self.resolution_time_hours

    def clear_resolution(self) -> float | None:
        prior_hours = self.resolution_time_hours
        self.resolved_at = None
        self.resolution_time_hours = None
        return prior_hours

    def add_transition(
        self,
        *,
        from_status: str | None,
        to_status: str,
        action: str,
        actor_user_id: int | None,
        note: str | None = None,
        metadata: dict | None = None,
    ):
        return TicketTransition.objects.create(
            ticket=self,
            from_status=from_status,
            to_status=to_status,
            action=action,
            actor_id=actor_user_id,
            note=note,
            metadata=metadata or {},
        )

    def __str__(self) -> str:
        return f"Ticket #{self.pk} [{self.status}] {self.subject}"


class TicketTransition(AppendOnlyModel):
    domain = TicketTransitionDomainManager()

    ticket = models.ForeignKey(
        Ticket, on_delete=models.CASCADE, related_name="transitions"
    )
    from_status = models.CharField(
        max_length=20, choices=TicketStatus, null=True, blank=True
    )
    to_status = models.CharField(max_length=20, choices=TicketStatus)
    action = models.CharField(
        max_length=30, choices=TicketTransitionAction, db_index=True
    )
    actor = models.ForeignKey(
        "account.User",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    note = models.TextField(blank=True, null=True)
    metadata = models.JSONField(default=dict, blank=True)

    class Meta:
        indexes = [
            models.Index(
                fields=["ticket", "created_at"], name="ticket_tick_ticket__5e2c4b_idx"
            ),
            models.Index(
                fields=["action", "created_at"], name="ticket_tick_action_8a4f1d_idx"
            ),
        ]

    def __str__(self) -> str:
        return f"TicketTransition #{self.pk} {self.from_status}>{self.to_status} ({self.action})"


class TicketMessage(TimestampedModel, SoftDeleteModel):
    domain = TicketMessageDomainManager()

    ticket = models.ForeignKey(
        Ticket, on_delete=models.CASCADE, related_name="messages"
    )
    author = models.ForeignKey(
        "account.User", on_delete=models.PROTECT, related_name="ticket_messages"
    )
    body = models.TextField()
    is_internal = models.BooleanField(default=False)

    class Meta:
        indexes = [
            models.Index(
                fields=["ticket", "created_at"], name="ticket_tick_ticket__9d3e6f_idx"
            )
        ]

    def __str__(self) -> str:
        return f"TicketMessage #{self.pk} ticket={self.ticket_id} author={self.author_id}"


class CustomerSatisfactionSurvey(TimestampedModel):
    ticket = models.OneToOneField(
        Ticket, on_delete=models.CASCADE, related_name="satisfaction_survey"
    )
    customer = models.ForeignKey(
        "account.User", on_delete=models.PROTECT, related_name="surveys"
    )
    overall_rating = models.PositiveSmallIntegerField(validators=RATING_VALIDATORS)
    response_time_rating = models.PositiveSmallIntegerField(
        validators=RATING_VALIDATORS
    )
    helpfulness_rating = models.PositiveSmallIntegerField(validators=RATING_VALIDATORS)
    professionalism_rating = models.PositiveSmallIntegerField(
        validators=RATING_VALIDATORS
    )
    resolution_quality_rating = models.PositiveSmallIntegerField(
        validators=RATING_VALIDATORS
    )
    average_rating = models.DecimalField(max_digits=2, decimal_places=1)
    feedback = models.TextField(blank=True, default="")
    improvements = models.TextField(blank=True, default="")

    RATING_FIELDS = (
        "overall_rating",
        "response_time_rating",
        "helpfulness_rating",
        "professionalism_rating",
        "resolution_quality_rating",
    )

    def __str__(self) -> str:
        return f"Survey ticket={self.ticket_id} overall={self.overall_rating}"
