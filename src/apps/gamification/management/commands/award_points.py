from django.core.management import BaseCommand, CommandError

from core.exceptions import DomainValidationError
from gamification.services import PointsLedgerService


class Command(BaseCommand):
    help = "Grant bonus points to a staff member."

    def add_arguments(self, parser):
        parser.add_argument("--staff-id", type=int, required=True)
        parser.add_argument("--points", type=int, required=True)
        parser.add_argument("--reason", type=str, default="")
        parser.add_argument(
            "--actor-id",
            type=int,
            required=False,
            help="Optional admin user id for audit attribution.",
        )

    def handle(self, *args, **options):
        try:
            balance = PointsLedgerService.award_manual_points(
                staff_id=options["staff_id"],
                points=options["points"],
                reason=options["reason"],
                actor_user_id=options.get("actor_id"),
            )
        except DomainValidationError as exc:
            raise CommandError(str(exc)) from exc

        self.stdout.write(
            self.style.SUCCESS(
                f"Awarded {options['points']} points to staff #{options['staff_id']}: "
                f"points={balance.points} level={balance.level}"
            )
        )
