import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Notification",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True, db_index=True)),
                (
                    "notification_type",
                    models.CharField(
                        choices=[
                            ("registration_confirmed", "Registration Confirmed"),
                            ("registration_cancelled", "Registration Cancelled"),
                            ("payment_proof_submitted", "Payment Proof Submitted"),
                            ("payment_approved", "Payment Approved"),
                            ("payment_rejected", "Payment Rejected"),
                        ],
                        db_index=True,
                        max_length=50,
                    ),
                ),
                (
                    "title",
                    models.CharField(blank=True, default="", help_text="Rendered notification title", max_length=255),
                ),
                ("body", models.TextField(blank=True, default="", help_text="Rendered plain text body")),
                (
                    "context",
                    models.JSONField(default=dict, help_text="Structured context data (validated TypedDict)"),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="notifications",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Notification",
                "verbose_name_plural": "Notifications",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["user", "notification_type", "created_at"], name="notif_user_type_created_idx"
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="NotificationDelivery",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True, db_index=True)),
                (
                    "channel",
                    models.CharField(
                        choices=[("email", "Email"), ("webhook", "Webhook")], db_index=True, max_length=20
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("sent", "Sent"),
                            ("failed", "Failed"),
                            ("skipped", "Skipped"),
                        ],
                        db_index=True,
                        default="pending",
                        max_length=20,
                    ),
                ),
                (
                    "attempted_at",
                    models.DateTimeField(blank=True, help_text="When delivery was last attempted", null=True),
                ),
                ("delivered_at", models.DateTimeField(blank=True, help_text="When delivery succeeded", null=True)),
                ("error_message", models.TextField(blank=True, help_text="Error message if delivery failed")),
                ("retry_count", models.PositiveIntegerField(default=0, help_text="Number of delivery attempts")),
                (
                    "metadata",
                    models.JSONField(
                        blank=True, default=dict, help_text="Channel-specific data (webhook status, etc.)"
                    ),
                ),
                (
                    "notification",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="deliveries",
                        to="notifications.notification",
                    ),
                ),
            ],
            options={
                "verbose_name": "Notification Delivery",
                "verbose_name_plural": "Notification Deliveries",
                "indexes": [models.Index(fields=["status", "created_at"], name="notif_delivery_status_idx")],
                "constraints": [
                    models.UniqueConstraint(fields=("notification", "channel"), name="unique_notification_channel")
                ],
            },
        ),
    ]
