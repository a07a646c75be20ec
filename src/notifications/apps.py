"""Notifications app configuration."""

from django.apps import AppConfig


class NotificationsConfig(AppConfig):
    """Configuration for the notifications app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "notifications"
    verbose_name = "Notifications"

    def ready(self) -> None:
        """Import signal handlers and register templates when app is ready."""
        import notifications.service.signal_handlers  # noqa: F401
        import notifications.service.templates.registration_templates  # noqa: F401
