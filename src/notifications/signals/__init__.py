"""Notification signals.

Domain services never call the notification machinery directly: they send
``notification_requested`` and the handler in ``notifications.service.signal_handlers``
takes it from there.
"""

from django.dispatch import Signal

# Signal for requesting notification dispatch
# Expected kwargs:
#   - notification_type: NotificationType enum value
#   - user: FelicityUser instance
#   - context: dict matching the notification type's context schema
notification_requested = Signal()

__all__ = ["notification_requested"]
