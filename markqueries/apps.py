from django.apps import AppConfig


class MarkqueriesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "markqueries"
