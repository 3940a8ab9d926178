from django.contrib.auth.base_user import AbstractBaseUser
from django.db import models

from account import managers
from core.models import SoftDeleteModel, TimestampedModel
from core.utils.constants import STAFF_ROLE_SLUGS, RoleSlug


class Role(TimestampedModel, SoftDeleteModel):
    name = models.CharField(max_length=80)
    slug = models.CharField(max_length=50, unique=True, choices=RoleSlug.choices)

    def __str__(self) -> str:
        return f"{self.name} ({self.slug})"


class User(AbstractBaseUser, TimestampedModel, SoftDeleteModel):
    first_name = models.CharField(max_length=30)
    last_name = models.CharField(max_length=30, blank=True, null=True)

    username = models.CharField(max_length=150, unique=True)
    phone = models.CharField(max_length=20, unique=True, null=True, blank=True)
    email = models.EmailField(unique=True)
    department = models.CharField(max_length=80, blank=True, default="")

    # Written only by gamification.services.PointsLedgerService.
    points = models.PositiveIntegerField(default=0, db_index=True)
    level = models.PositiveIntegerField(default=1)
    points_version = models.PositiveIntegerField(default=0)
    tickets_resolved = models.PositiveIntegerField(default=0)
    total_tickets_handled = models.PositiveIntegerField(default=0)

    # Written only by gamification.services_stats.StaffStatsService.
    average_resolution_time_hours = models.FloatField(default=0.0)
    customer_satisfaction_rating = models.FloatField(null=True, blank=True)
    average_response_time_minutes = models.FloatField(null=True, blank=True)

    current_streak = models.PositiveIntegerField(default=0)
    monthly_growth = models.FloatField(default=0.0)
    special_recognition = models.CharField(max_length=80, blank=True, null=True)

    roles = models.ManyToManyField(
        Role, through="UserRole", related_name="users", blank=True
    )

    is_active = models.BooleanField(default=True)

    USERNAME_FIELD = "username"
    REQUIRED_FIELDS = ["first_name", "email"]

    objects = managers.UserManager()

    class Meta:
        constraints = [
            models.CheckConstraint(
                condition=models.Q(level__gte=1),
                name="user_level_at_least_one",
            )
        ]

    def __str__(self):
        return f"{self.first_name} (@{self.get_username()})"

    @property
    def display_name(self) -> str:
        full_name = " ".join(
            part for part in [self.first_name, self.last_name] if part
        ).strip()
        return full_name or self.username

    def role_slugs(self) -> set[str]:
        return set(
            self.user_roles.filter(
                deleted_at__isnull=True, role__deleted_at__isnull=True
            ).values_list("role__slug", flat=True)
        )

    def has_any_role(self, *slugs: str) -> bool:
        return bool(self.role_slugs() & {str(slug) for slug in slugs})

    @property
    def is_support_staff(self) -> bool:
        return self.has_any_role(*STAFF_ROLE_SLUGS)

    def save(self, *args, **kwargs):
        from django.contrib.auth.hashers import make_password

        if self.password and not self.password.startswith("pbkdf2_sha256$"):
            self.password = make_password(self.password)

        return super().save(*args, **kwargs)


class UserRole(TimestampedModel, SoftDeleteModel):
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="user_roles")
    role = models.ForeignKey(Role, on_delete=models.CASCADE, related_name="user_roles")

    class Meta:
        unique_together = ("user", "role")

    def __str__(self) -> str:
        return f"{self.user} -> {self.role}"
