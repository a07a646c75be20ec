"""Base template interface for notifications."""

import typing as t
from abc import ABC, abstractmethod
from datetime import datetime

from django.conf import settings
from django.template.loader import render_to_string

from notifications.models import Notification


class NotificationTemplate(ABC):
    """Base class for notification templates.

    Each notification type renders for two channels:
    - Email: Subject + text body + HTML body (+ attachments)
    - Webhook: a short plain text message

    The base class renders Django templates from the standard structure:
    - notifications/email/{notification_type}.{txt,html}
    - notifications/webhook/{notification_type}.txt
    """

    @abstractmethod
    def get_title(self, notification: Notification) -> str:
        """Short title, stored on the notification."""
        pass

    # ==================== Email Channel ====================

    def get_email_subject(self, notification: Notification) -> str:
        return self.get_title(notification)

    def get_email_text_body(self, notification: Notification) -> str:
        template_name = f"notifications/email/{notification.notification_type}.txt"
        return render_to_string(template_name, self._get_template_context(notification))

    def get_email_html_body(self, notification: Notification) -> str | None:
        template_name = f"notifications/email/{notification.notification_type}.html"
        return render_to_string(template_name, self._get_template_context(notification))

    def get_email_attachments(self, notification: Notification) -> dict[str, t.Any]:
        """Get email attachments.

        Returns:
            Dict of {filename: {content_base64: str, mimetype: str}}
        """
        return {}

    # ==================== Webhook Channel ====================

    def get_webhook_message(self, notification: Notification) -> str:
        template_name = f"notifications/webhook/{notification.notification_type}.txt"
        return render_to_string(template_name, self._get_template_context(notification)).strip()

    # ==================== Helper Methods ====================

    def _get_template_context(self, notification: Notification) -> dict[str, t.Any]:
        """Build context for template rendering.

        Adds the parsed event start and the site name to the stored context.
        """
        context = dict(notification.context)
        if event_start := context.get("event_start"):
            context["event_start"] = datetime.fromisoformat(event_start)
        return {
            "user": notification.user,
            "context": context,
            "site_name": settings.SITE_NAME,
            "frontend_url": settings.FRONTEND_BASE_URL,
        }
