from django.db import models

from core.models import AppendOnlyManager, AppendOnlyModel


class PurchaseManager(AppendOnlyManager):
    def history_for(self, *, user_id: int):
        return self.filter(user_id=user_id).order_by("-created_at", "-id")


class Purchase(AppendOnlyModel):
    objects = PurchaseManager()

    user = models.ForeignKey(
        "account.User", on_delete=models.PROTECT, related_name="purchases"
    )
    item_id = models.CharField(max_length=40, db_index=True)
    item_name = models.CharField(max_length=255)
    category = models.CharField(max_length=80, blank=True, default="")
    vendor = models.CharField(max_length=80, blank=True, default="")
    points_cost = models.PositiveIntegerField()
    reference = models.CharField(max_length=120, unique=True, db_index=True)
    balance_after = models.PositiveIntegerField()

    class Meta:
        indexes = [
            models.Index(fields=["user", "created_at"], name="market_purchase_user_idx")
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(points_cost__gt=0),
                name="purchase_points_cost_positive",
            )
        ]

    def __str__(self) -> str:
        return f"Purchase#{self.pk} user={self.user_id} item={self.item_id} cost={self.points_cost}"
