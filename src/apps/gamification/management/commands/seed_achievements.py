from django.core.management import BaseCommand

from gamification.services_achievements import AchievementService


class Command(BaseCommand):
    help = "Create or refresh the default achievement catalog."

    def handle(self, *args, **options):
        summary = AchievementService.ensure_default_catalog()
        self.stdout.write(
            self.style.SUCCESS(
                f"Achievements seeded: created={summary['created']} "
                f"updated={summary['updated']}"
            )
        )
