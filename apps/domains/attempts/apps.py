from django.apps import AppConfig


class AttemptsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.domains.attempts"
    label = "attempts"
    verbose_name = "Exam attempts"
