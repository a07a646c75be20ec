# src/events/admin/event.py
"""Admin class for Event."""

from django.contrib import admin
from unfold.admin import ModelAdmin

from events import models
from events.admin.base import RegistrationInline


@admin.register(models.Event)
class EventAdmin(ModelAdmin):  # type: ignore[misc]
    """Admin model for Events."""

    list_display = [
        "name",
        "organizer",
        "event_type",
        "status",
        "start",
        "price",
        "capacity",
        "available_stock",
    ]
    list_filter = ["event_type", "status", "registration_open", "start"]
    search_fields = ["name", "organizer__username", "organizer__email"]
    autocomplete_fields = ["organizer"]
    readonly_fields = ["current_registrations", "created_at", "updated_at"]
    date_hierarchy = "start"
    inlines = [RegistrationInline]

    fieldsets = [
        ("Details", {"fields": ("organizer", "name", "description", "venue", ("event_type", "status"))}),
        ("Schedule", {"fields": (("start", "end"), ("registration_open", "registration_deadline"))}),
        ("Capacity", {"fields": ("price", ("max_participants", "current_registrations"))}),
        (
            "Merchandise",
            {"fields": ("available_stock", "sizes", "colors", "purchase_limit_per_participant")},
        ),
        ("Timestamps", {"fields": ("created_at", "updated_at"), "classes": ("collapse",)}),
    ]

    @admin.display(description="Registrations")
    def capacity(self, obj: models.Event) -> str:
        if obj.max_participants is None:
            return str(obj.current_registrations)
        return f"{obj.current_registrations}/{obj.max_participants}"
