# src/events/admin/registration.py
"""Admin classes for Registration and AttendanceOverride.

Status and counter fields are read-only here: changing them by hand would bypass
the guarded updates of the lifecycle services.
"""

import typing as t

from django.contrib import admin
from django.utils.html import format_html
from django.utils.safestring import mark_safe
from unfold.admin import ModelAdmin

from events import models
from events.admin.base import (
    AttendanceOverrideInline,
    EventLinkMixin,
    ParticipantLinkMixin,
    RegistrationLinkMixin,
)


@admin.register(models.Registration)
class RegistrationAdmin(ModelAdmin, ParticipantLinkMixin, EventLinkMixin):  # type: ignore[misc]
    list_display = [
        "ticket_id",
        "event_link",
        "participant_link",
        "registration_status",
        "payment_status",
        "payment_approval_status",
        "quantity",
        "attended",
        "created_at",
    ]
    list_filter = ["registration_status", "payment_status", "payment_approval_status", "attended", "scan_method"]
    search_fields = ["ticket_id", "event__name", "participant__username", "participant__email"]
    autocomplete_fields = ["event", "participant"]
    date_hierarchy = "created_at"
    inlines = [AttendanceOverrideInline]
    readonly_fields = [
        "ticket_id",
        "registration_status",
        "payment_status",
        "payment_approval_status",
        "qr_preview",
        "ticket_issued_at",
        "payment_proof",
        "payment_proof_uploaded_at",
        "reviewed_by",
        "reviewed_at",
        "attended",
        "attended_at",
        "scanned_by",
        "scan_method",
        "override_is_overridden",
        "override_reason",
        "overridden_by",
        "overridden_at",
        "cancellation_reason",
        "cancelled_at",
        "cancelled_by",
        "created_at",
        "updated_at",
    ]
    exclude = ["qr_code"]

    @admin.display(description="QR code")
    def qr_preview(self, obj: models.Registration) -> str:
        if not obj.qr_code:
            return "—"
        return format_html('<img src="{}" width="160" height="160" alt="{}"/>', obj.qr_code, obj.ticket_id)

    def has_delete_permission(self, request: t.Any, obj: t.Any = None) -> bool:
        return False


@admin.register(models.AttendanceOverride)
class AttendanceOverrideAdmin(ModelAdmin, RegistrationLinkMixin):  # type: ignore[misc]
    """Read-only view of the override audit trail."""

    list_display = ["created_at", "registration_link", "attended_badge", "overridden_by", "short_reason"]
    list_filter = ["marked_attended"]
    search_fields = ["registration__ticket_id", "reason"]
    date_hierarchy = "created_at"

    @admin.display(description="Attended")
    def attended_badge(self, obj: models.AttendanceOverride) -> str:
        color = "green" if obj.marked_attended else "red"
        label = "Present" if obj.marked_attended else "Absent"
        return mark_safe(f'<span style="color: {color}; font-weight: bold;">{label}</span>')

    @admin.display(description="Reason")
    def short_reason(self, obj: models.AttendanceOverride) -> str:
        return obj.reason[:100]

    def has_add_permission(self, request: t.Any) -> bool:
        return False

    def has_change_permission(self, request: t.Any, obj: t.Any = None) -> bool:
        return False

    def has_delete_permission(self, request: t.Any, obj: t.Any = None) -> bool:
        return False
