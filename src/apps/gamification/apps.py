from django.apps import AppConfig


class GamificationConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "gamification"

    def ready(self):
        from gamification.handlers import register_ticket_event_handlers

        register_ticket_event_handlers()
