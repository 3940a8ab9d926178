import pytest

from core.exceptions import DomainValidationError
from core.utils.constants import PointsEntryType
from gamification.services import PointsLedgerService
from gamification.services_leaderboard import LeaderboardService, StaffSnapshot


def _snapshot(staff_id, name, *, points=0, resolved=0, satisfaction=4.0, growth=0.0):
    return StaffSnapshot(
        staff_id=staff_id,
        name=name,
        department="General",
        points=points,
        level=PointsLedgerService.level_for_points(points),
        tickets_resolved=resolved,
        total_tickets_handled=resolved,
        average_resolution_time_hours=0.0,
        customer_satisfaction=satisfaction,
        response_time_minutes=0.0,
        current_streak=0,
        monthly_growth=growth,
        special_recognition=None,
    )


@pytest.mark.parametrize(
    ("hours", "bonus"),
    [(0.0, 30), (1.0, 30), (1.01, 20), (4.0, 20), (4.5, 10), (24.0, 10), (24.01, 0), (None, 0)],
)
def test_speed_bonus_tiers_are_inclusive(hours, bonus):
    assert PointsLedgerService.speed_bonus(hours) == bonus
    assert PointsLedgerService.points_for_resolution(hours) == 20 + bonus


@pytest.mark.parametrize(
    ("points", "level"),
    [(0, 1), (499, 1), (500, 2), (999, 2), (1000, 3), (1200, 3), (-40, 1)],
)
def test_level_for_points(points, level):
    assert PointsLedgerService.level_for_points(points) == level


def test_reference_for_joins_parts_or_generates_unique_token():
    assert (
        PointsLedgerService.reference_for(PointsEntryType.TICKET_RESOLVED, 7, 31)
        == "ticket_resolved:7:31"
    )
    first = PointsLedgerService.reference_for(PointsEntryType.MARKETPLACE_PURCHASE)
    second = PointsLedgerService.reference_for(PointsEntryType.MARKETPLACE_PURCHASE)
    assert first.startswith("marketplace_purchase:")
    assert first != second


def test_rank_keeps_input_order_for_ties_and_truncates():
    staff = [
        _snapshot(2, "B", points=1200, resolved=4),
        _snapshot(3, "C", points=1200, resolved=9),
        _snapshot(1, "A", points=900, resolved=9),
    ]

    assert [row.name for row in LeaderboardService.rank(staff)] == ["B", "C", "A"]
    assert [row.name for row in LeaderboardService.rank(staff, "resolved", 2)] == ["C", "A"]
    assert LeaderboardService.rank(staff, limit=0) == []


def test_rank_rejects_unknown_metric():
    with pytest.raises(DomainValidationError):
        LeaderboardService.rank([], "karma")


def test_snapshot_as_dict_is_plain_data():
    payload = _snapshot(5, "E", points=40).as_dict()

    assert payload["staff_id"] == 5
    assert payload["level"] == 1
    assert payload["achievements"] == ()
