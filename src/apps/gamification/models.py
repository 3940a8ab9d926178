from django.db import models

from core.models import AppendOnlyManager, AppendOnlyModel, TimestampedModel
from core.utils.constants import AchievementCode, PointsEntryType


class PointsTransactionManager(AppendOnlyManager):
    def has_reference(self, reference: str) -> bool:
        return self.filter(reference=reference).exists()

    def for_user(self, *, user_id: int):
        return self.filter(user_id=user_id).order_by("-created_at", "-id")


class PointsTransaction(AppendOnlyModel):
    objects = PointsTransactionManager()

    user = models.ForeignKey(
        "account.User", on_delete=models.PROTECT, related_name="points_transactions"
    )
    amount = models.IntegerField()
    entry_type = models.CharField(
        max_length=50, choices=PointsEntryType, db_index=True
    )
    reference = models.CharField(max_length=120, unique=True, db_index=True)
    balance_after = models.PositiveIntegerField()
    description = models.CharField(max_length=255, blank=True, null=True)
    payload = models.JSONField(default=dict, blank=True)

    class Meta:
        indexes = [
            models.Index(fields=["user", "created_at"], name="gamif_ptx_user_created_idx"),
            models.Index(
                fields=["entry_type", "created_at"], name="gamif_ptx_type_created_idx"
            ),
        ]

    def __str__(self) -> str:
        return (
            f"PointsTransaction#{self.pk} user={self.user_id} "
            f"amount={self.amount} ({self.entry_type})"
        )


class Achievement(TimestampedModel):
    code = models.CharField(max_length=40, unique=True, choices=AchievementCode)
    name = models.CharField(max_length=100, unique=True)
    description = models.CharField(max_length=255, blank=True, default="")
    icon = models.CharField(max_length=50, blank=True, default="")
    color = models.CharField(max_length=20, blank=True, default="")
    points_reward = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True, db_index=True)

    def __str__(self) -> str:
        return f"{self.name} (+{self.points_reward})"


class UserAchievement(TimestampedModel):
    user = models.ForeignKey(
        "account.User", on_delete=models.CASCADE, related_name="user_achievements"
    )
    achievement = models.ForeignKey(
        Achievement, on_delete=models.PROTECT, related_name="unlocks"
    )
    unlocked_at = models.DateTimeField()

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["user", "achievement"],
                name="unique_achievement_unlock_per_user",
            )
        ]
        indexes = [
            models.Index(fields=["user", "unlocked_at"], name="gamif_unlock_user_time_idx")
        ]

    def __str__(self) -> str:
        return f"UserAchievement user={self.user_id} achievement={self.achievement_id}"
