"""Django admin for notification models."""

from django.contrib import admin
from django.utils.html import format_html
from unfold.admin import ModelAdmin, TabularInline

from notifications.enums import DeliveryStatus
from notifications.models import Notification, NotificationDelivery


class NotificationDeliveryInline(TabularInline):  # type: ignore[misc]
    model = NotificationDelivery
    extra = 0
    fields = ["channel", "status", "retry_count", "attempted_at", "delivered_at", "error_message"]
    readonly_fields = fields
    can_delete = False


@admin.register(Notification)
class NotificationAdmin(ModelAdmin):  # type: ignore[misc]
    """Admin for Notification model."""

    list_display = ["id", "notification_type", "user_email", "title_short", "created_at"]
    list_filter = ["notification_type", "created_at"]
    search_fields = ["user__email", "user__username", "title", "body"]
    readonly_fields = ["id", "created_at", "updated_at", "notification_type", "user", "context", "title", "body"]
    date_hierarchy = "created_at"
    ordering = ["-created_at"]
    inlines = [NotificationDeliveryInline]

    @admin.display(description="User", ordering="user__email")
    def user_email(self, obj: Notification) -> str:
        return obj.user.email

    @admin.display(description="Title")
    def title_short(self, obj: Notification) -> str:
        return obj.title[:50] + "..." if len(obj.title) > 50 else obj.title


@admin.register(NotificationDelivery)
class NotificationDeliveryAdmin(ModelAdmin):  # type: ignore[misc]
    """Admin for NotificationDelivery model."""

    list_display = ["id", "notification_type", "channel", "status_badge", "retry_count", "delivered_at"]
    list_filter = ["channel", "status", "created_at"]
    search_fields = ["notification__user__email", "error_message"]
    readonly_fields = ["id", "created_at", "updated_at", "notification", "channel", "metadata"]
    date_hierarchy = "created_at"

    @admin.display(description="Type")
    def notification_type(self, obj: NotificationDelivery) -> str:
        return obj.notification.notification_type

    @admin.display(description="Status")
    def status_badge(self, obj: NotificationDelivery) -> str:
        colors = {
            DeliveryStatus.PENDING: "orange",
            DeliveryStatus.SENT: "green",
            DeliveryStatus.FAILED: "red",
            DeliveryStatus.SKIPPED: "gray",
        }
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            colors.get(obj.status, "black"),
            obj.get_status_display(),
        )
