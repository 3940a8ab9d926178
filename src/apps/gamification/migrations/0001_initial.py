import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


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
            name="Achievement",
            fields=[
                ("id", _id_field()),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "code",
                    models.CharField(
                        choices=[
                            ("first_resolution", "First Resolution"),
                            ("resolution_master", "Resolution Master"),
                            ("customer_champion", "Customer Champion"),
                            ("lightning_fast", "Lightning Fast"),
                        ],
                        max_length=40,
                        unique=True,
                    ),
                ),
                ("name", models.CharField(max_length=100, unique=True)),
                (
                    "description",
                    models.CharField(blank=True, default="", max_length=255),
                ),
                ("icon", models.CharField(blank=True, default="", max_length=50)),
                ("color", models.CharField(blank=True, default="", max_length=20)),
                ("points_reward", models.PositiveIntegerField(default=0)),
                ("is_active", models.BooleanField(db_index=True, default=True)),
            ],
            options={"abstract": False},
        ),
        migrations.CreateModel(
            name="PointsTransaction",
            fields=[
                ("id", _id_field()),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("amount", models.IntegerField()),
                (
                    "entry_type",
                    models.CharField(
                        choices=[
                            ("ticket_resolved", "Ticket Resolved"),
                            ("ticket_reopened", "Ticket Reopened"),
                            ("achievement_reward", "Achievement Reward"),
                            ("marketplace_purchase", "Marketplace Purchase"),
                            ("manual_award", "Manual Award"),
                        ],
                        db_index=True,
                        max_length=50,
                    ),
                ),
                (
                    "reference",
                    models.CharField(db_index=True, max_length=120, unique=True),
                ),
                ("balance_after", models.PositiveIntegerField()),
                (
                    "description",
                    models.CharField(blank=True, max_length=255, null=True),
                ),
                ("payload", models.JSONField(blank=True, default=dict)),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="points_transactions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "indexes": [
                    models.Index(
                        fields=["user", "created_at"],
                        name="gamif_ptx_user_created_idx",
                    ),
                    models.Index(
                        fields=["entry_type", "created_at"],
                        name="gamif_ptx_type_created_idx",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="UserAchievement",
            fields=[
                ("id", _id_field()),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("unlocked_at", models.DateTimeField()),
                (
                    "achievement",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="unlocks",
                        to="gamification.achievement",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="user_achievements",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "indexes": [
                    models.Index(
                        fields=["user", "unlocked_at"],
                        name="gamif_unlock_user_time_idx",
                    )
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("user", "achievement"),
                        name="unique_achievement_unlock_per_user",
                    )
                ],
            },
        ),
    ]
