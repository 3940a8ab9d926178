import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Role",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "deleted_at",
                    models.DateTimeField(blank=True, db_index=True, null=True),
                ),
                ("name", models.CharField(max_length=80)),
                (
                    "slug",
                    models.CharField(
                        choices=[
                            ("customer", "Customer"),
                            ("staff", "Staff"),
                            ("admin", "Admin"),
                        ],
                        max_length=50,
                        unique=True,
                    ),
                ),
            ],
            options={"abstract": False},
        ),
        migrations.CreateModel(
            name="User",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("password", models.CharField(max_length=128, verbose_name="password")),
                (
                    "last_login",
                    models.DateTimeField(
                        blank=True, null=True, verbose_name="last login"
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "deleted_at",
                    models.DateTimeField(blank=True, db_index=True, null=True),
                ),
                ("first_name", models.CharField(max_length=30)),
                (
                    "last_name",
                    models.CharField(blank=True, max_length=30, null=True),
                ),
                ("username", models.CharField(max_length=150, unique=True)),
                (
                    "phone",
                    models.CharField(blank=True, max_length=20, null=True, unique=True),
                ),
                ("email", models.EmailField(max_length=254, unique=True)),
                (
                    "department",
                    models.CharField(blank=True, default="", max_length=80),
                ),
                (
                    "points",
                    models.PositiveIntegerField(db_index=True, default=0),
                ),
                ("level", models.PositiveIntegerField(default=1)),
                ("points_version", models.PositiveIntegerField(default=0)),
                ("tickets_resolved", models.PositiveIntegerField(default=0)),
                ("total_tickets_handled", models.PositiveIntegerField(default=0)),
                ("average_resolution_time_hours", models.FloatField(default=0.0)),
                (
                    "customer_satisfaction_rating",
                    models.FloatField(blank=True, null=True),
                ),
                (
                    "average_response_time_minutes",
                    models.FloatField(blank=True, null=True),
                ),
                ("current_streak", models.PositiveIntegerField(default=0)),
                ("monthly_growth", models.FloatField(default=0.0)),
                (
                    "special_recognition",
                    models.CharField(blank=True, max_length=80, null=True),
                ),
                ("is_active", models.BooleanField(default=True)),
            ],
            options={
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("level__gte", 1)),
                        name="user_level_at_least_one",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="UserRole",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "deleted_at",
                    models.DateTimeField(blank=True, db_index=True, null=True),
                ),
                (
                    "role",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="user_roles",
                        to="account.role",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="user_roles",
                        to="account.user",
                    ),
                ),
            ],
            options={"unique_together": {("user", "role")}},
        ),
        migrations.AddField(
            model_name="user",
            name="roles",
            field=models.ManyToManyField(
                blank=True,
                related_name="users",
                through="account.UserRole",
                to="account.role",
            ),
        ),
    ]
