"""Admin interface for accounts app."""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin
from unfold.admin import ModelAdmin

from accounts.models import FelicityUser


@admin.register(FelicityUser)
class FelicityUserAdmin(UserAdmin, ModelAdmin):  # type: ignore[type-arg,misc]
    """Admin for FelicityUser with role management."""

    list_display = ["username", "email", "display_name", "role", "is_staff", "is_active", "date_joined"]
    list_filter = ["role", "is_staff", "is_superuser", "is_active", "date_joined"]
    search_fields = ["username", "first_name", "last_name", "email", "preferred_name", "organizer_name"]
    ordering = ["-date_joined"]
    readonly_fields = ["id", "date_joined", "last_login"]

    fieldsets = (
        *UserAdmin.fieldsets,  # type: ignore[misc]
        ("Felicity", {"fields": ("role", "preferred_name", "organizer_name", "discord_webhook_url")}),
    )
