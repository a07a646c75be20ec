"""Template registry for notifications."""

from notifications.enums import NotificationType
from notifications.service.templates.base import NotificationTemplate


class TemplateRegistry:
    """Registry for notification templates."""

    def __init__(self) -> None:
        """Initialize template registry."""
        self._templates: dict[NotificationType, NotificationTemplate] = {}

    def register(self, notification_type: NotificationType, template: NotificationTemplate) -> None:
        self._templates[notification_type] = template

    def get(self, notification_type: NotificationType | str) -> NotificationTemplate:
        """Get template for notification type.

        Raises:
            ValueError: If no template is registered
        """
        if isinstance(notification_type, str):
            notification_type = NotificationType(notification_type)

        template = self._templates.get(notification_type)
        if not template:
            raise ValueError(f"No template registered for {notification_type}")
        return template

    def is_registered(self, notification_type: NotificationType | str) -> bool:
        if isinstance(notification_type, str):
            notification_type = NotificationType(notification_type)
        return notification_type in self._templates


# Global registry instance
_registry = TemplateRegistry()


def register_template(notification_type: NotificationType, template: NotificationTemplate) -> None:
    """Register a template in the global registry."""
    _registry.register(notification_type, template)


def get_template(notification_type: NotificationType | str) -> NotificationTemplate:
    """Get notification template from global registry."""
    return _registry.get(notification_type)


def is_template_registered(notification_type: NotificationType | str) -> bool:
    return _registry.is_registered(notification_type)
