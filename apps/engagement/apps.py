# apps/engagement/apps.py
from django.apps import AppConfig


class EngagementConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.engagement'
    verbose_name = 'Likes & Subscriptions'

    def ready(self):
        """Import signals when app is ready."""
        import apps.engagement.signals  # noqa: F401
