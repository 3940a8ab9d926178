import pytest

from core.exceptions import DomainValidationError, StaffNotFoundError
from core.utils.constants import STAFF_OF_THE_MONTH, AchievementCode, RoleSlug
from gamification.services_achievements import AchievementService
from gamification.services_leaderboard import LeaderboardService

pytestmark = pytest.mark.django_db


@pytest.fixture
def board_context(staff_factory, customer_factory):
    staff = {
        "A": staff_factory(username="a", email="a@example.com", first_name="A", points=900),
        "B": staff_factory(username="b", email="b@example.com", first_name="B", points=1200),
        "C": staff_factory(
            username="c",
            email="c@example.com",
            first_name="C",
            points=1200,
            role=RoleSlug.ADMIN,
        ),
        "D": staff_factory(username="d", email="d@example.com", first_name="D", points=300),
    }
    customer_factory(username="rich_customer", points=99_999)
    return staff


def _names(rows):
    return [row.name for row in rows]


def test_points_leaderboard_is_stable_and_truncated(board_context):
    board = LeaderboardService.build_leaderboard(metric="points", limit=2, timeframe="month")

    assert _names(board["leaderboard"]) == ["B", "C"]
    assert board["total_staff"] == 4
    assert board["metric"] == "points"
    assert board["timeframe"] == "month"
    assert board["top_performer"] is None


def test_top_performer_is_independent_of_limit(board_context):
    board_context["D"].special_recognition = STAFF_OF_THE_MONTH
    board_context["D"].save(update_fields=["special_recognition"])

    board = LeaderboardService.build_leaderboard(limit=1)

    assert _names(board["leaderboard"]) == ["B"]
    assert board["top_performer"].name == "D"


def test_satisfaction_defaults_to_four(board_context):
    board_context["A"].customer_satisfaction_rating = 4.5
    board_context["A"].save(update_fields=["customer_satisfaction_rating"])
    board_context["D"].customer_satisfaction_rating = 3.2
    board_context["D"].save(update_fields=["customer_satisfaction_rating"])

    board = LeaderboardService.build_leaderboard(metric="satisfaction")

    assert _names(board["leaderboard"]) == ["A", "B", "C", "D"]
    assert [row.customer_satisfaction for row in board["leaderboard"]] == [4.5, 4.0, 4.0, 3.2]


def test_resolved_and_growth_metrics(board_context):
    for key, resolved, growth in [("A", 30, 12.5), ("B", 10, 3.0), ("C", 30, 20.0), ("D", 5, 0.0)]:
        board_context[key].tickets_resolved = resolved
        board_context[key].monthly_growth = growth
        board_context[key].save(update_fields=["tickets_resolved", "monthly_growth"])

    resolved = LeaderboardService.build_leaderboard(metric="resolved")
    growth = LeaderboardService.build_leaderboard(metric="growth")

    assert _names(resolved["leaderboard"]) == ["C", "A", "B", "D"]
    assert _names(growth["leaderboard"]) == ["C", "A", "B", "D"]


@pytest.mark.parametrize(
    "kwargs",
    [{"metric": "karma"}, {"timeframe": "decade"}, {"limit": -1}, {"limit": "ten"}],
)
def test_invalid_leaderboard_arguments(board_context, kwargs):
    with pytest.raises(DomainValidationError):
        LeaderboardService.build_leaderboard(**kwargs)


def test_rank_of_counts_strictly_greater_points(board_context):
    assert LeaderboardService.rank_of(board_context["B"].id) == 1
    assert LeaderboardService.rank_of(board_context["C"].id) == 1
    assert LeaderboardService.rank_of(board_context["A"].id) == 3
    assert LeaderboardService.rank_of(board_context["D"].id) == 4


def test_staff_stats_include_rank_and_achievements(board_context):
    staff = board_context["A"]
    staff.tickets_resolved = 1
    staff.save(update_fields=["tickets_resolved"])
    AchievementService.evaluate(staff.id)

    stats = LeaderboardService.staff_stats(staff.id)

    assert stats["staff_id"] == staff.id
    assert stats["points"] == 950
    assert stats["rank"] == 3
    assert stats["customer_satisfaction"] is None
    assert [badge["code"] for badge in stats["achievements"]] == [
        AchievementCode.FIRST_RESOLUTION
    ]


def test_staff_stats_for_unknown_user():
    with pytest.raises(StaffNotFoundError):
        LeaderboardService.staff_stats(424242)


def test_active_achievements_sorted_by_reward():
    rewards = [a.points_reward for a in LeaderboardService.active_achievements()]

    assert rewards == [1000, 500, 300, 50]
