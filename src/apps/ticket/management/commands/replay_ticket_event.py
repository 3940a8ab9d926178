from django.core.management import BaseCommand, CommandError

from core.exceptions import DomainValidationError
from ticket.events import TicketEventDispatcher


class Command(BaseCommand):
    help = "Re-run the enrichment handlers for a resolution or reopen transition."

    def add_arguments(self, parser):
        parser.add_argument(
            "--transition-id",
            type=int,
            required=True,
            help="TicketTransition id whose event should be replayed.",
        )

    def handle(self, *args, **options):
        transition_id = options["transition_id"]
        try:
            summary = TicketEventDispatcher.replay(transition_id=transition_id)
        except DomainValidationError as exc:
            raise CommandError(str(exc)) from exc

        if summary.get("skipped"):
            self.stdout.write(
                self.style.WARNING(
                    f"Skipped transition #{transition_id}: ticket has no assigned staff."
                )
            )
            return

        results = ", ".join(
            f"{row['handler']}={'ok' if row['ok'] else 'failed'}"
            for row in summary["handlers"]
        )
        self.stdout.write(
            self.style.SUCCESS(
                f"Replayed {summary['event']} for transition #{transition_id}: {results}"
            )
        )
