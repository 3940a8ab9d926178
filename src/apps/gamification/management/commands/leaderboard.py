from django.core.management import BaseCommand, CommandError

from core.exceptions import DomainValidationError
from core.utils.constants import LeaderboardMetric, LeaderboardTimeframe
from gamification.services_leaderboard import LeaderboardService


class Command(BaseCommand):
    help = "Print the staff leaderboard."

    def add_arguments(self, parser):
        parser.add_argument(
            "--metric",
            type=str,
            default=LeaderboardMetric.POINTS,
            choices=LeaderboardMetric.values,
        )
        parser.add_argument("--limit", type=int, default=LeaderboardService.DEFAULT_LIMIT)
        parser.add_argument(
            "--timeframe",
            type=str,
            default=LeaderboardTimeframe.MONTH,
            choices=LeaderboardTimeframe.values,
        )

    def handle(self, *args, **options):
        try:
            board = LeaderboardService.build_leaderboard(
                metric=options["metric"],
                limit=options["limit"],
                timeframe=options["timeframe"],
            )
        except DomainValidationError as exc:
            raise CommandError(str(exc)) from exc

        self.stdout.write(
            f"Leaderboard metric={board['metric']} timeframe={board['timeframe']} "
            f"total_staff={board['total_staff']}"
        )
        for position, snapshot in enumerate(board["leaderboard"], start=1):
            self.stdout.write(
                f"{position:>3}. {snapshot.name} ({snapshot.department}) "
                f"points={snapshot.points} level={snapshot.level} "
                f"resolved={snapshot.tickets_resolved} "
                f"satisfaction={snapshot.customer_satisfaction:.1f} "
                f"growth={snapshot.monthly_growth}"
            )

        top_performer = board["top_performer"]
        if top_performer is not None:
            self.stdout.write(
                self.style.SUCCESS(f"Top performer: {top_performer.name}")
            )
