# src/events/admin/base.py
"""Base admin components: link mixins and inlines."""

import typing as t

from django.urls import reverse
from django.utils.html import format_html
from unfold.admin import TabularInline

from events import models


# --- Helper Mixins for Reusable Link Fields ---
class ParticipantLinkMixin:
    """Mixin to add a link to the registration's participant."""

    def participant_link(self, obj: t.Any) -> str:
        user = getattr(obj, "participant", None)
        if user is None:
            return models.DELETED_PARTICIPANT_NAME
        url = reverse("admin:accounts_felicityuser_change", args=[user.id])
        return format_html('<a href="{}">{}</a>', url, user.username)

    participant_link.short_description = "Participant"  # type: ignore[attr-defined]


class EventLinkMixin:
    """Mixin to add a link to an event."""

    def event_link(self, obj: t.Any) -> str | None:
        if not hasattr(obj, "event") or not obj.event:
            return None
        url = reverse("admin:events_event_change", args=[obj.event.id])
        return format_html('<a href="{}">{}</a>', url, obj.event.name)

    event_link.short_description = "Event"  # type: ignore[attr-defined]


class RegistrationLinkMixin:
    """Mixin to add a link to a registration."""

    def registration_link(self, obj: t.Any) -> str:
        url = reverse("admin:events_registration_change", args=[obj.registration_id])
        return format_html('<a href="{}">{}</a>', url, obj.registration.ticket_id)

    registration_link.short_description = "Registration"  # type: ignore[attr-defined]


# --- Inlines ---
class RegistrationInline(TabularInline):  # type: ignore[misc]
    model = models.Registration
    extra = 0
    fields = ["ticket_id", "participant", "registration_status", "payment_approval_status", "quantity", "attended"]
    readonly_fields = fields
    can_delete = False
    show_change_link = True

    def has_add_permission(self, request: t.Any, obj: t.Any = None) -> bool:
        return False


class AttendanceOverrideInline(TabularInline):  # type: ignore[misc]
    model = models.AttendanceOverride
    extra = 0
    fields = ["created_at", "marked_attended", "reason", "overridden_by"]
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request: t.Any, obj: t.Any = None) -> bool:
        return False
