from __future__ import annotations

from celery import shared_task

from gamification.services_stats import StaffStatsService


@shared_task(name="gamification.tasks.recalculate_staff_stats")
def recalculate_staff_stats(staff_id: int | None = None) -> dict[str, object]:
    return StaffStatsService.recalculate_all(staff_id=staff_id)
