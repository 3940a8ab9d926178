from django.core.management import BaseCommand, CommandError

from core.exceptions import DomainValidationError
from marketplace.services import MarketplaceService


class Command(BaseCommand):
    help = "Buy a marketplace item with a staff member's points."

    def add_arguments(self, parser):
        parser.add_argument("--staff-id", type=int, required=True)
        parser.add_argument("--item-id", type=str, required=True)
        parser.add_argument(
            "--cost",
            type=int,
            required=True,
            help="Expected points cost; must match the catalog price.",
        )

    def handle(self, *args, **options):
        try:
            result = MarketplaceService.purchase(
                staff_id=options["staff_id"],
                item_id=options["item_id"],
                expected_cost=options["cost"],
            )
        except DomainValidationError as exc:
            raise CommandError(str(exc)) from exc

        self.stdout.write(
            self.style.SUCCESS(
                f"Purchased {result.purchase.item_name} for {result.points_deducted} "
                f"points: points={result.points} level={result.level}"
            )
        )
