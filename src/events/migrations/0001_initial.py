import decimal
import uuid

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import events.models.registration


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Event",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True, db_index=True)),
                ("name", models.CharField(db_index=True, max_length=255)),
                ("description", models.TextField(blank=True)),
                ("venue", models.CharField(blank=True, max_length=255)),
                (
                    "event_type",
                    models.CharField(
                        choices=[("normal", "Normal"), ("merchandise", "Merchandise")],
                        db_index=True,
                        default="normal",
                        max_length=20,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("draft", "Draft"),
                            ("published", "Published"),
                            ("ongoing", "Ongoing"),
                            ("completed", "Completed"),
                            ("closed", "Closed"),
                        ],
                        db_index=True,
                        default="draft",
                        max_length=20,
                    ),
                ),
                ("start", models.DateTimeField(db_index=True)),
                ("end", models.DateTimeField(blank=True, null=True)),
                ("registration_open", models.BooleanField(default=True)),
                ("registration_deadline", models.DateTimeField(blank=True, null=True)),
                (
                    "price",
                    models.DecimalField(
                        decimal_places=2,
                        default=decimal.Decimal("0"),
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(0)],
                    ),
                ),
                (
                    "max_participants",
                    models.PositiveIntegerField(blank=True, help_text="Leave empty for no limit.", null=True),
                ),
                ("current_registrations", models.PositiveIntegerField(default=0, editable=False)),
                (
                    "available_stock",
                    models.PositiveIntegerField(
                        blank=True, help_text="Merchandise only. Leave empty for untracked stock.", null=True
                    ),
                ),
                ("sizes", models.JSONField(blank=True, default=list, help_text="Allowed sizes. Empty means any.")),
                ("colors", models.JSONField(blank=True, default=list, help_text="Allowed colors. Empty means any.")),
                ("purchase_limit_per_participant", models.PositiveIntegerField(blank=True, null=True)),
                (
                    "organizer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="organized_events",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["start"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("max_participants__isnull", True))
                        | models.Q(("current_registrations__lte", models.F("max_participants"))),
                        name="event_registrations_within_capacity",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("available_stock__isnull", True))
                        | models.Q(("available_stock__gte", 0)),
                        name="event_stock_not_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Registration",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True, db_index=True)),
                (
                    "ticket_id",
                    models.CharField(
                        default=events.models.registration.generate_ticket_id,
                        editable=False,
                        max_length=40,
                        unique=True,
                    ),
                ),
                (
                    "registration_status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("pending_approval", "Pending approval"),
                            ("confirmed", "Confirmed"),
                            ("cancelled", "Cancelled"),
                            ("rejected", "Rejected"),
                        ],
                        db_index=True,
                        default="pending",
                        max_length=20,
                    ),
                ),
                (
                    "payment_status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("completed", "Completed"),
                            ("failed", "Failed"),
                            ("refunded", "Refunded"),
                        ],
                        default="pending",
                        max_length=20,
                    ),
                ),
                (
                    "payment_method",
                    models.CharField(
                        choices=[
                            ("free", "Free"),
                            ("pending", "Pending"),
                            ("cash", "Cash"),
                            ("card", "Card"),
                            ("upi", "UPI"),
                            ("net_banking", "Net banking"),
                        ],
                        default="pending",
                        max_length=20,
                    ),
                ),
                (
                    "amount_paid",
                    models.DecimalField(
                        decimal_places=2,
                        default=decimal.Decimal("0"),
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(0)],
                    ),
                ),
                (
                    "quantity",
                    models.PositiveIntegerField(
                        default=1, validators=[django.core.validators.MinValueValidator(1)]
                    ),
                ),
                (
                    "merchandise_size",
                    models.CharField(
                        blank=True,
                        choices=[("XS", "Xs"), ("S", "S"), ("M", "M"), ("L", "L"), ("XL", "Xl"), ("XXL", "Xxl")],
                        max_length=5,
                    ),
                ),
                ("merchandise_color", models.CharField(blank=True, max_length=50)),
                (
                    "qr_code",
                    models.TextField(blank=True, help_text="PNG data URL encoding the ticket id", null=True),
                ),
                ("ticket_issued_at", models.DateTimeField(blank=True, null=True)),
                (
                    "payment_proof",
                    models.CharField(blank=True, help_text="Storage path of the latest proof", max_length=500),
                ),
                ("payment_proof_uploaded_at", models.DateTimeField(blank=True, null=True)),
                (
                    "payment_approval_status",
                    models.CharField(
                        blank=True,
                        choices=[("pending", "Pending"), ("approved", "Approved"), ("rejected", "Rejected")],
                        db_index=True,
                        max_length=20,
                        null=True,
                    ),
                ),
                ("reviewed_at", models.DateTimeField(blank=True, null=True)),
                ("admin_notes", models.TextField(blank=True)),
                ("attended", models.BooleanField(db_index=True, default=False)),
                ("attended_at", models.DateTimeField(blank=True, null=True)),
                (
                    "scan_method",
                    models.CharField(
                        blank=True,
                        choices=[("camera", "Camera"), ("file_upload", "File upload"), ("manual", "Manual")],
                        max_length=20,
                    ),
                ),
                ("override_is_overridden", models.BooleanField(default=False)),
                ("override_reason", models.TextField(blank=True)),
                ("overridden_at", models.DateTimeField(blank=True, null=True)),
                ("cancellation_reason", models.TextField(blank=True)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                (
                    "cancelled_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="registrations",
                        to="events.event",
                    ),
                ),
                (
                    "overridden_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "participant",
                    models.ForeignKey(
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="registrations",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "reviewed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "scanned_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["event", "registration_status"], name="events_regi_event_i_5d3c1e_idx"),
                    models.Index(fields=["participant", "event"], name="events_regi_partici_8a7f2b_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("quantity__gte", 1)), name="registration_quantity_positive"
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("qr_code__isnull", True), ("registration_status", "confirmed"), _connector="OR"),
                        name="registration_qr_only_when_confirmed",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(("attended", True), ("registration_status", "cancelled")), _negated=True
                        ),
                        name="registration_attended_not_cancelled",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="AttendanceOverride",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True, db_index=True)),
                ("marked_attended", models.BooleanField()),
                ("reason", models.TextField()),
                (
                    "overridden_by",
                    models.ForeignKey(
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "registration",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="attendance_overrides",
                        to="events.registration",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
    ]
