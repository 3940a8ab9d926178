import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Purchase",
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
                ("item_id", models.CharField(db_index=True, max_length=40)),
                ("item_name", models.CharField(max_length=255)),
                ("category", models.CharField(blank=True, default="", max_length=80)),
                ("vendor", models.CharField(blank=True, default="", max_length=80)),
                ("points_cost", models.PositiveIntegerField()),
                (
                    "reference",
                    models.CharField(db_index=True, max_length=120, unique=True),
                ),
                ("balance_after", models.PositiveIntegerField()),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="purchases",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "indexes": [
                    models.Index(
                        fields=["user", "created_at"],
                        name="market_purchase_user_idx",
                    )
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("points_cost__gt", 0)),
                        name="purchase_points_cost_positive",
                    )
                ],
            },
        ),
    ]
