import logging
from collections.abc import Callable

from django.db import IntegrityError, transaction
from django.utils import timezone

from account.models import User
from core.exceptions import StaffNotFoundError
from core.services.notifications import NotificationService
from core.utils.constants import AchievementCode, PointsEntryType
from gamification.models import Achievement, UserAchievement
from gamification.services import PointsLedgerService

logger = logging.getLogger(__name__)

AchievementPredicate = Callable[[User], bool]


DEFAULT_ACHIEVEMENTS = (
    {
        "code": AchievementCode.FIRST_RESOLUTION,
        "name": "First Resolution",
        "description": "Resolved your first ticket",
        "icon": "star",
        "color": "bronze",
        "points_reward": 50,
    },
    {
        "code": AchievementCode.RESOLUTION_MASTER,
        "name": "Resolution Master",
        "description": "Resolved 100 tickets",
        "icon": "trophy",
        "color": "gold",
        "points_reward": 1000,
    },
    {
        "code": AchievementCode.CUSTOMER_CHAMPION,
        "name": "Customer Champion",
        "description": "Maintained a 4.8 customer satisfaction rating",
        "icon": "crown",
        "color": "purple",
        "points_reward": 500,
    },
    {
        "code": AchievementCode.LIGHTNING_FAST,
        "name": "Lightning Fast",
        "description": "Average first response within 5 minutes",
        "icon": "zap",
        "color": "blue",
        "points_reward": 300,
    },
)


class AchievementService:
    """Unlocks achievements whose predicate holds on the staff profile."""

    PREDICATES: dict[str, AchievementPredicate] = {
        AchievementCode.FIRST_RESOLUTION: lambda staff: staff.tickets_resolved >= 1,
        AchievementCode.RESOLUTION_MASTER: lambda staff: staff.tickets_resolved >= 100,
        AchievementCode.CUSTOMER_CHAMPION: lambda staff: (
            staff.customer_satisfaction_rating is not None
            and staff.customer_satisfaction_rating >= 4.8
        ),
        AchievementCode.LIGHTNING_FAST: lambda staff: (
            staff.average_response_time_minutes is not None
            and staff.average_response_time_minutes <= 5
        ),
    }

    @classmethod
    def is_earned(cls, *, code: str, staff: User) -> bool:
        predicate = cls.PREDICATES.get(code)
        if predicate is None:
            return False
        return bool(predicate(staff))

    @staticmethod
    def reward_reference(*, staff_id: int, achievement_id: int) -> str:
        return PointsLedgerService.reference_for(
            PointsEntryType.ACHIEVEMENT_REWARD, staff_id, achievement_id
        )

    @classmethod
    def evaluate(cls, staff_id: int) -> list[UserAchievement]:
        staff = User.objects.filter(pk=staff_id, deleted_at__isnull=True).first()
        if staff is None:
            raise StaffNotFoundError(f"Staff member #{staff_id} was not found.")

        candidates = (
            Achievement.objects.filter(is_active=True)
            .exclude(unlocks__user_id=staff_id)
            .order_by("id")
        )
        unlocked: list[UserAchievement] = []
        for achievement in candidates:
            if not cls.is_earned(code=achievement.code, staff=staff):
                continue
            unlock = cls._unlock(staff=staff, achievement=achievement)
            if unlock is not None:
                unlocked.append(unlock)
        return unlocked

    @classmethod
    def _unlock(cls, *, staff: User, achievement: Achievement) -> UserAchievement | None:
        try:
            with transaction.atomic():
                unlock = UserAchievement.objects.create(
                    user=staff,
                    achievement=achievement,
                    unlocked_at=timezone.now(),
                )
        except IntegrityError:
            logger.info(
                "Achievement already unlocked: staff_id=%s code=%s",
                staff.id,
                achievement.code,
            )
            return None

        balance = PointsLedgerService.balance_of(staff.id)
        if achievement.points_reward > 0:
            balance = PointsLedgerService.grant(
                staff_id=staff.id,
                amount=achievement.points_reward,
                entry_type=PointsEntryType.ACHIEVEMENT_REWARD,
                reference=cls.reward_reference(
                    staff_id=staff.id, achievement_id=achievement.id
                ),
                description=f"Achievement reward: {achievement.name}",
                payload={"achievement_code": achievement.code},
            )

        logger.info(
            "Achievement unlocked: staff_id=%s code=%s reward=%s points=%s",
            staff.id,
            achievement.code,
            achievement.points_reward,
            balance.points,
        )
        NotificationService.notify_achievement_unlocked(
            staff=staff,
            achievement=achievement,
            points=balance.points,
        )
        return unlock

    @staticmethod
    @transaction.atomic
    def ensure_default_catalog() -> dict[str, int]:
        created = 0
        updated = 0
        for definition in DEFAULT_ACHIEVEMENTS:
            values = {key: value for key, value in definition.items() if key != "code"}
            _, was_created = Achievement.objects.update_or_create(
                code=definition["code"], defaults=values
            )
            if was_created:
                created += 1
            else:
                updated += 1
        return {"created": created, "updated": updated}
