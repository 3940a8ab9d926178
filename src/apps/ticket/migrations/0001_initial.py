import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

RATING_VALIDATORS = [
    django.core.validators.MinValueValidator(1),
    django.core.validators.MaxValueValidator(5),
]
STATUS_CHOICES = [
    ("open", "Open"),
    ("in_progress", "In Progress"),
    ("resolved", "Resolved"),
    ("closed", "Closed"),
]


def _id_field():
    return models.BigAutoField(
        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
    )


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Ticket",
            fields=[
                ("id", _id_field()),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "deleted_at",
                    models.DateTimeField(blank=True, db_index=True, null=True),
                ),
                ("subject", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True, default="")),
                (
                    "priority",
                    models.CharField(
                        choices=[
                            ("low", "Low"),
                            ("medium", "Medium"),
                            ("high", "High"),
                            ("urgent", "Urgent"),
                        ],
                        db_index=True,
                        default="medium",
                        max_length=20,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=STATUS_CHOICES,
                        db_index=True,
                        default="open",
                        max_length=20,
                    ),
                ),
                ("resolved_at", models.DateTimeField(blank=True, null=True)),
                ("resolution_time_hours", models.FloatField(blank=True, null=True)),
                (
                    "customer_rating",
                    models.PositiveSmallIntegerField(
                        blank=True, null=True, validators=RATING_VALIDATORS
                    ),
                ),
                ("first_response_at", models.DateTimeField(blank=True, null=True)),
                (
                    "assigned_staff",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="assigned_tickets",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "customer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="submitted_tickets",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "indexes": [
                    models.Index(
                        fields=["status", "created_at"],
                        name="ticket_tick_status_3b9f0e_idx",
                    ),
                    models.Index(
                        fields=["assigned_staff", "status"],
                        name="ticket_tick_assigne_7c1d2a_idx",
                    ),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(
                                ("resolved_at__isnull", True),
                                ("resolution_time_hours__isnull", True),
                            ),
                            models.Q(
                                ("resolved_at__isnull", False),
                                ("resolution_time_hours__isnull", False),
                            ),
                            _connector="OR",
                        ),
                        name="ticket_resolution_fields_paired",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            ("customer_rating__isnull", True),
                            models.Q(
                                ("customer_rating__gte", 1),
                                ("customer_rating__lte", 5),
                            ),
                            _connector="OR",
                        ),
                        name="ticket_customer_rating_range",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="TicketTransition",
            fields=[
                ("id", _id_field()),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "from_status",
                    models.CharField(
                        blank=True, choices=STATUS_CHOICES, max_length=20, null=True
                    ),
                ),
                (
                    "to_status",
                    models.CharField(choices=STATUS_CHOICES, max_length=20),
                ),
                (
                    "action",
                    models.CharField(
                        choices=[
                            ("created", "Created"),
                            ("status_changed", "Status Changed"),
                            ("resolved", "Resolved"),
                            ("reopened", "Reopened"),
                        ],
                        db_index=True,
                        max_length=30,
                    ),
                ),
                ("note", models.TextField(blank=True, null=True)),
                ("metadata", models.JSONField(blank=True, default=dict)),
                (
                    "actor",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "ticket",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="transitions",
                        to="ticket.ticket",
                    ),
                ),
            ],
            options={
                "indexes": [
                    models.Index(
                        fields=["ticket", "created_at"],
                        name="ticket_tick_ticket__5e2c4b_idx",
                    ),
                    models.Index(
                        fields=["action", "created_at"],
                        name="ticket_tick_action_8a4f1d_idx",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="TicketMessage",
            fields=[
                ("id", _id_field()),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "deleted_at",
                    models.DateTimeField(blank=True, db_index=True, null=True),
                ),
                ("body", models.TextField()),
                ("is_internal", models.BooleanField(default=False)),
                (
                    "author",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="ticket_messages",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "ticket",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="messages",
                        to="ticket.ticket",
                    ),
                ),
            ],
            options={
                "indexes": [
                    models.Index(
                        fields=["ticket", "created_at"],
                        name="ticket_tick_ticket__9d3e6f_idx",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="CustomerSatisfactionSurvey",
            fields=[
                ("id", _id_field()),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "overall_rating",
                    models.PositiveSmallIntegerField(validators=RATING_VALIDATORS),
                ),
                (
                    "response_time_rating",
                    models.PositiveSmallIntegerField(validators=RATING_VALIDATORS),
                ),
                (
                    "helpfulness_rating",
                    models.PositiveSmallIntegerField(validators=RATING_VALIDATORS),
                ),
                (
                    "professionalism_rating",
                    models.PositiveSmallIntegerField(validators=RATING_VALIDATORS),
                ),
                (
                    "resolution_quality_rating",
                    models.PositiveSmallIntegerField(validators=RATING_VALIDATORS),
                ),
                (
                    "average_rating",
                    models.DecimalField(decimal_places=1, max_digits=2),
                ),
                ("feedback", models.TextField(blank=True, default="")),
                ("improvements", models.TextField(blank=True, default="")),
                (
                    "customer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="surveys",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "ticket",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="satisfaction_survey",
                        to="ticket.ticket",
                    ),
                ),
            ],
            options={"abstract": False},
        ),
    ]
