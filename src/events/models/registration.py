import secrets
import time
import typing as t
from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q

from common.models import TimeStampedModel

from .event import Event

if t.TYPE_CHECKING:
    from accounts.models import FelicityUser

DELETED_PARTICIPANT_NAME = "Deleted participant"

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _to_base36(value: int) -> str:
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits)) or "0"


def generate_ticket_id() -> str:
    """Return a new ticket identifier, e.g. ``TKT-LXKQ3Z1A-9F2C4B7E1D0A``.

    Uniqueness is ultimately enforced by the database.
    """
    timestamp = _to_base36(time.time_ns() // 1_000_000).upper()
    return f"TKT-{timestamp}-{secrets.token_hex(6).upper()}"


class RegistrationQuerySet(models.QuerySet["Registration"]):
    def active(self) -> t.Self:
        """Registrations that hold, or may come to hold, a place at the event."""
        return self.filter(registration_status__in=Registration.ACTIVE_STATUSES)

    def confirmed(self) -> t.Self:
        return self.filter(registration_status=Registration.RegistrationStatus.CONFIRMED)

    def awaiting_payment_review(self) -> t.Self:
        return self.filter(
            registration_status=Registration.RegistrationStatus.PENDING_APPROVAL,
            payment_approval_status=Registration.ApprovalStatus.PENDING,
        )

    def missing_ticket(self) -> t.Self:
        """Confirmed registrations whose ticket could not be issued yet."""
        return self.confirmed().filter(qr_code__isnull=True)

    def with_relations(self) -> t.Self:
        return self.select_related(
            "event", "event__organizer", "participant", "reviewed_by", "scanned_by", "overridden_by", "cancelled_by"
        )

    def for_user(self, user: "FelicityUser") -> t.Self:
        """Registrations visible to a user: their own, or all of the events they manage."""
        if user.is_admin:
            return self
        return self.filter(Q(participant=user) | Q(event__organizer=user))


class RegistrationManager(models.Manager["Registration"]):
    def get_queryset(self) -> RegistrationQuerySet:
        return RegistrationQuerySet(self.model, using=self._db)

    def active(self) -> RegistrationQuerySet:
        return self.get_queryset().active()

    def confirmed(self) -> RegistrationQuerySet:
        return self.get_queryset().confirmed()

    def awaiting_payment_review(self) -> RegistrationQuerySet:
        return self.get_queryset().awaiting_payment_review()

    def missing_ticket(self) -> RegistrationQuerySet:
        return self.get_queryset().missing_ticket()

    def with_relations(self) -> RegistrationQuerySet:
        return self.get_queryset().with_relations()

    def for_user(self, user: "FelicityUser") -> RegistrationQuerySet:
        return self.get_queryset().for_user(user)


class Registration(TimeStampedModel):
    class RegistrationStatus(models.TextChoices):
        PENDING = "pending", "Pending"
        PENDING_APPROVAL = "pending_approval", "Pending approval"
        CONFIRMED = "confirmed", "Confirmed"
        CANCELLED = "cancelled", "Cancelled"
        REJECTED = "rejected", "Rejected"

    class PaymentStatus(models.TextChoices):
        PENDING = "pending", "Pending"
        COMPLETED = "completed", "Completed"
        FAILED = "failed", "Failed"
        REFUNDED = "refunded", "Refunded"

    class PaymentMethod(models.TextChoices):
        FREE = "free", "Free"
        PENDING = "pending", "Pending"
        CASH = "cash", "Cash"
        CARD = "card", "Card"
        UPI = "upi", "UPI"
        NET_BANKING = "net_banking", "Net banking"

    class ApprovalStatus(models.TextChoices):
        PENDING = "pending", "Pending"
        APPROVED = "approved", "Approved"
        REJECTED = "rejected", "Rejected"

    class ScanMethod(models.TextChoices):
        CAMERA = "camera", "Camera"
        FILE_UPLOAD = "file_upload", "File upload"
        MANUAL = "manual", "Manual"

    class Size(models.TextChoices):
        XS = "XS"
        S = "S"
        M = "M"
        L = "L"
        XL = "XL"
        XXL = "XXL"

    ACTIVE_STATUSES = (
        RegistrationStatus.PENDING,
        RegistrationStatus.PENDING_APPROVAL,
        RegistrationStatus.CONFIRMED,
    )
    MAX_ORDER_QUANTITY = 100
    TERMINAL_STATUSES = (RegistrationStatus.CANCELLED, RegistrationStatus.REJECTED)

    # Nullable so that deleting an account keeps its registrations for audit and stats.
    participant = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, related_name="registrations"
    )
    event = models.ForeignKey(Event, on_delete=models.PROTECT, related_name="registrations")
    ticket_id = models.CharField(max_length=40, unique=True, default=generate_ticket_id, editable=False)

    registration_status = models.CharField(
        max_length=20, choices=RegistrationStatus.choices, default=RegistrationStatus.PENDING, db_index=True
    )
    payment_status = models.CharField(max_length=20, choices=PaymentStatus.choices, default=PaymentStatus.PENDING)
    payment_method = models.CharField(max_length=20, choices=PaymentMethod.choices, default=PaymentMethod.PENDING)
    amount_paid = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal("0"), validators=[MinValueValidator(0)]
    )

    # Merchandise details
    quantity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    merchandise_size = models.CharField(max_length=5, choices=Size.choices, blank=True)
    merchandise_color = models.CharField(max_length=50, blank=True)

    # Ticket
    qr_code = models.TextField(null=True, blank=True, help_text="PNG data URL encoding the ticket id")
    ticket_issued_at = models.DateTimeField(null=True, blank=True)

    # Payment approval
    payment_proof = models.CharField(max_length=500, blank=True, help_text="Storage path of the latest proof")
    payment_proof_uploaded_at = models.DateTimeField(null=True, blank=True)
    payment_approval_status = models.CharField(
        max_length=20, choices=ApprovalStatus.choices, null=True, blank=True, db_index=True
    )
    reviewed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    reviewed_at = models.DateTimeField(null=True, blank=True)
    admin_notes = models.TextField(blank=True)

    # Attendance
    attended = models.BooleanField(default=False, db_index=True)
    attended_at = models.DateTimeField(null=True, blank=True)
    scanned_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    scan_method = models.CharField(max_length=20, choices=ScanMethod.choices, blank=True)

    # Latest manual attendance override; the full history lives in AttendanceOverride.
    override_is_overridden = models.BooleanField(default=False)
    override_reason = models.TextField(blank=True)
    overridden_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    overridden_at = models.DateTimeField(null=True, blank=True)

    # Cancellation
    cancellation_reason = models.TextField(blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancelled_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )

    objects = RegistrationManager()

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(condition=Q(quantity__gte=1), name="registration_quantity_positive"),
            models.CheckConstraint(
                condition=Q(qr_code__isnull=True) | Q(registration_status="confirmed"),
                name="registration_qr_only_when_confirmed",
            ),
            models.CheckConstraint(
                condition=~(Q(attended=True) & Q(registration_status="cancelled")),
                name="registration_attended_not_cancelled",
            ),
        ]
        indexes = [
            models.Index(fields=["event", "registration_status"], name="events_regi_event_i_5d3c1e_idx"),
            models.Index(fields=["participant", "event"], name="events_regi_partici_8a7f2b_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.ticket_id} ({self.registration_status})"

    @property
    def participant_name(self) -> str:
        if self.participant is None:
            return DELETED_PARTICIPANT_NAME
        return self.participant.get_display_name()

    @property
    def participant_email(self) -> str | None:
        return self.participant.email if self.participant else None

    @property
    def ticket_pending(self) -> bool:
        """Confirmed, but the ticket has not been issued yet."""
        return self.registration_status == self.RegistrationStatus.CONFIRMED and self.qr_code is None


class AttendanceOverride(TimeStampedModel):
    """Append-only record of manual attendance interventions."""

    registration = models.ForeignKey(Registration, on_delete=models.CASCADE, related_name="attendance_overrides")
    marked_attended = models.BooleanField()
    reason = models.TextField()
    overridden_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, related_name="+"
    )

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.registration.ticket_id}: {'attended' if self.marked_attended else 'absent'}"
