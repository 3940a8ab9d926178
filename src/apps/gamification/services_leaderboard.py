from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import asdict, dataclass, field
from datetime import datetime

from django.db.models import Prefetch

from account.models import User
from account.services import StaffDirectoryService
from core.exceptions import DomainValidationError, StaffNotFoundError
from core.utils.constants import (
    STAFF_OF_THE_MONTH,
    LeaderboardMetric,
    LeaderboardTimeframe,
)
from gamification.models import Achievement, UserAchievement

logger = logging.getLogger(__name__)

DEFAULT_SATISFACTION = 4.0
DEFAULT_DEPARTMENT = "General"


@dataclass(frozen=True, slots=True)
class AchievementBadge:
    code: str
    name: str
    description: str
    icon: str
    color: str
    points_reward: int
    unlocked_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class StaffSnapshot:
    staff_id: int
    name: str
    department: str
    points: int
    level: int
    tickets_resolved: int
    total_tickets_handled: int
    average_resolution_time_hours: float
    customer_satisfaction: float
    response_time_minutes: float
    current_streak: int
    monthly_growth: float
    special_recognition: str | None
    achievements: tuple[AchievementBadge, ...] = field(default_factory=tuple)

    @classmethod
    def from_user(cls, user: User) -> StaffSnapshot:
        unlocks = getattr(user, "prefetched_unlocks", None)
        if unlocks is None:
            unlocks = _unlocks_for(user)
        return cls(
            staff_id=user.id,
            name=user.display_name,
            department=user.department or DEFAULT_DEPARTMENT,
            points=user.points,
            level=user.level,
            tickets_resolved=user.tickets_resolved,
            total_tickets_handled=user.total_tickets_handled,
            average_resolution_time_hours=user.average_resolution_time_hours or 0.0,
            customer_satisfaction=(
                user.customer_satisfaction_rating
                if user.customer_satisfaction_rating is not None
                else DEFAULT_SATISFACTION
            ),
            response_time_minutes=user.average_response_time_minutes or 0.0,
            current_streak=user.current_streak,
            monthly_growth=user.monthly_growth or 0.0,
            special_recognition=user.special_recognition,
            achievements=tuple(_badge(unlock) for unlock in unlocks),
        )

    def as_dict(self) -> dict[str, object]:
        return asdict(self)


def _unlocks_for(user: User):
    return (
        UserAchievement.objects.filter(user=user)
        .select_related("achievement")
        .order_by("-unlocked_at")
    )


def _badge(unlock: UserAchievement) -> AchievementBadge:
    achievement = unlock.achievement
    return AchievementBadge(
        code=achievement.code,
        name=achievement.name,
        description=achievement.description,
        icon=achievement.icon,
        color=achievement.color,
        points_reward=achievement.points_reward,
        unlocked_at=unlock.unlocked_at,
    )


class LeaderboardService:
    """Pure ranking over staff snapshots plus the read models built on it."""

    METRIC_KEYS = {
        LeaderboardMetric.POINTS: lambda snapshot: snapshot.points,
        LeaderboardMetric.RESOLVED: lambda snapshot: snapshot.tickets_resolved,
        LeaderboardMetric.SATISFACTION: lambda snapshot: snapshot.customer_satisfaction,
        LeaderboardMetric.GROWTH: lambda snapshot: snapshot.monthly_growth,
    }
    DEFAULT_LIMIT = 50

    @classmethod
    def validate_metric(cls, metric: str) -> str:
        if metric not in LeaderboardMetric.values:
            raise DomainValidationError(
                f"metric must be one of: {', '.join(LeaderboardMetric.values)}."
            )
        return str(metric)

    @staticmethod
    def validate_timeframe(timeframe: str) -> str:
        if timeframe not in LeaderboardTimeframe.values:
            raise DomainValidationError(
                f"timeframe must be one of: {', '.join(LeaderboardTimeframe.values)}."
            )
        return str(timeframe)

    @staticmethod
    def validate_limit(limit) -> int:
        try:
            normalized = int(limit)
        except (TypeError, ValueError) as exc:
            raise DomainValidationError("limit must be an integer.") from exc
        if normalized < 0:
            raise DomainValidationError("limit must not be negative.")
        return normalized

    @classmethod
    def rank(
        cls,
        staff: Iterable[StaffSnapshot],
        metric: str = LeaderboardMetric.POINTS,
        limit: int | None = None,
    ) -> list[StaffSnapshot]:
        key = cls.METRIC_KEYS[cls.validate_metric(metric)]
        # sorted() is stable, so ties keep the incoming points-desc, id order.
        ordered = sorted(staff, key=key, reverse=True)
        if limit is None:
            return ordered
        return ordered[: cls.validate_limit(limit)]

    @staticmethod
    def staff_queryset():
        return User.objects.filter(
            pk__in=User.objects.support_staff().values("pk")
        ).order_by("-points", "id")

    @classmethod
    def staff_snapshots(cls) -> list[StaffSnapshot]:
        users = cls.staff_queryset().prefetch_related(
            Prefetch(
                "user_achievements",
                queryset=UserAchievement.objects.select_related("achievement").order_by(
                    "-unlocked_at"
                ),
                to_attr="prefetched_unlocks",
            )
        )
        return [StaffSnapshot.from_user(user) for user in users]

    @classmethod
    def rank_of(cls, staff_id: int) -> int:
        points = User.objects.filter(pk=staff_id).values_list("points", flat=True).first()
        if points is None:
            raise StaffNotFoundError(f"Staff member #{staff_id} was not found.")
        return cls.staff_queryset().filter(points__gt=points).count() + 1

    @classmethod
    def build_leaderboard(
        cls,
        *,
        metric: str = LeaderboardMetric.POINTS,
        limit: int = DEFAULT_LIMIT,
        timeframe: str = LeaderboardTimeframe.MONTH,
    ) -> dict[str, object]:
        metric = cls.validate_metric(metric)
        timeframe = cls.validate_timeframe(timeframe)
        limit = cls.validate_limit(limit)

        snapshots = cls.staff_snapshots()
        ordered = cls.rank(snapshots, metric=metric)
        top_performer = next(
            (
                snapshot
                for snapshot in ordered
                if snapshot.special_recognition == STAFF_OF_THE_MONTH
            ),
            None,
        )
        logger.info(
            "Leaderboard built: metric=%s timeframe=%s staff=%s",
            metric,
            timeframe,
            len(snapshots),
        )
        return {
            "leaderboard": ordered[:limit],
            "top_performer": top_performer,
            "metric": metric,
            "timeframe": timeframe,
            "total_staff": len(snapshots),
        }

    @classmethod
    def staff_stats(cls, staff_id: int) -> dict[str, object]:
        user = StaffDirectoryService.get_staff(staff_id)
        snapshot = StaffSnapshot.from_user(user)
        return {
            **snapshot.as_dict(),
            "customer_satisfaction": user.customer_satisfaction_rating,
            "rank": cls.rank_of(staff_id),
        }

    @staticmethod
    def active_achievements() -> list[Achievement]:
        return list(
            Achievement.objects.filter(is_active=True).order_by("-points_reward", "id")
        )
