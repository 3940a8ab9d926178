from django.core.management import BaseCommand

from gamification.services_stats import StaffStatsService


class Command(BaseCommand):
    help = "Recompute staff resolution, rating and response-time averages."

    def add_arguments(self, parser):
        parser.add_argument(
            "--staff-id",
            type=int,
            required=False,
            help="Limit recalculation to one staff member. Defaults to all staff.",
        )

    def handle(self, *args, **options):
        summary = StaffStatsService.recalculate_all(staff_id=options.get("staff_id"))

        self.stdout.write(
            self.style.SUCCESS(
                "Recalculated staff aggregates: "
                f"staff={summary['staff_total']} "
                f"recalculated={summary['recalculated']} "
                f"failed={len(summary['failed'])}"
            )
        )
        if summary["failed"]:
            self.stdout.write(
                self.style.WARNING(
                    "Failed staff ids: " + ", ".join(map(str, summary["failed"]))
                )
            )
