import typing as t
from decimal import Decimal
from uuid import UUID

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import F, Q
from django.db.models.functions import Greatest
from django.utils import timezone

from common.models import TimeStampedModel

if t.TYPE_CHECKING:
    from accounts.models import FelicityUser


class EventQuerySet(models.QuerySet["Event"]):
    """Event queries, including the atomic counter contract.

    ``current_registrations`` and ``available_stock`` are only ever changed through
    ``reserve`` and ``release``. Both are a single conditional UPDATE evaluated by the
    database, so concurrent callers never overshoot ``max_participants`` and never
    drive ``available_stock`` below zero.
    """

    def published(self) -> t.Self:
        return self.filter(status=Event.EventStatus.PUBLISHED)

    def managed_by(self, user: "FelicityUser") -> t.Self:
        if user.is_admin:
            return self
        return self.filter(organizer=user)

    def reserve(self, event_id: UUID, quantity: int, *, consume_stock: bool) -> bool:
        """Take ``quantity`` seats (and units of stock) if, and only if, they are available.

        Returns:
            True if the counters were updated, False if a ceiling or floor would be crossed.
        """
        has_seats = Q(max_participants__isnull=True) | Q(max_participants__gte=F("current_registrations") + quantity)
        updates: dict[str, t.Any] = {
            "current_registrations": F("current_registrations") + quantity,
            "updated_at": timezone.now(),
        }
        condition = Q(pk=event_id) & has_seats
        if consume_stock:
            condition &= Q(available_stock__isnull=True) | Q(available_stock__gte=quantity)
            # NULL - n stays NULL, so untracked stock remains untracked.
            updates["available_stock"] = F("available_stock") - quantity
        return self.filter(condition).update(**updates) == 1

    def release(self, event_id: UUID, quantity: int, *, restore_stock: bool) -> bool:
        """Give back ``quantity`` seats (and optionally stock), never going below zero."""
        updates: dict[str, t.Any] = {
            "current_registrations": Greatest(F("current_registrations") - quantity, 0),
            "updated_at": timezone.now(),
        }
        if restore_stock:
            updates["available_stock"] = F("available_stock") + quantity
        return self.filter(pk=event_id).update(**updates) == 1


class EventManager(models.Manager["Event"]):
    def get_queryset(self) -> EventQuerySet:
        return EventQuerySet(self.model, using=self._db)

    def published(self) -> EventQuerySet:
        return self.get_queryset().published()

    def managed_by(self, user: "FelicityUser") -> EventQuerySet:
        return self.get_queryset().managed_by(user)

    def reserve(self, event_id: UUID, quantity: int, *, consume_stock: bool) -> bool:
        return self.get_queryset().reserve(event_id, quantity, consume_stock=consume_stock)

    def release(self, event_id: UUID, quantity: int, *, restore_stock: bool) -> bool:
        return self.get_queryset().release(event_id, quantity, restore_stock=restore_stock)


class Event(TimeStampedModel):
    class EventType(models.TextChoices):
        NORMAL = "normal", "Normal"
        MERCHANDISE = "merchandise", "Merchandise"

    class EventStatus(models.TextChoices):
        DRAFT = "draft", "Draft"
        PUBLISHED = "published", "Published"
        ONGOING = "ongoing", "Ongoing"
        COMPLETED = "completed", "Completed"
        CLOSED = "closed", "Closed"

    organizer = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="organized_events")
    name = models.CharField(max_length=255, db_index=True)
    description = models.TextField(blank=True)
    venue = models.CharField(max_length=255, blank=True)
    event_type = models.CharField(max_length=20, choices=EventType.choices, default=EventType.NORMAL, db_index=True)
    status = models.CharField(max_length=20, choices=EventStatus.choices, default=EventStatus.DRAFT, db_index=True)

    start = models.DateTimeField(db_index=True)
    end = models.DateTimeField(null=True, blank=True)
    registration_open = models.BooleanField(default=True)
    registration_deadline = models.DateTimeField(null=True, blank=True)

    price = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0"), validators=[MinValueValidator(0)])
    max_participants = models.PositiveIntegerField(null=True, blank=True, help_text="Leave empty for no limit.")
    current_registrations = models.PositiveIntegerField(default=0, editable=False)
    available_stock = models.PositiveIntegerField(
        null=True, blank=True, help_text="Merchandise only. Leave empty for untracked stock."
    )

    sizes = models.JSONField(default=list, blank=True, help_text="Allowed sizes. Empty means any.")
    colors = models.JSONField(default=list, blank=True, help_text="Allowed colors. Empty means any.")
    purchase_limit_per_participant = models.PositiveIntegerField(null=True, blank=True)

    objects = EventManager()

    class Meta:
        ordering = ["start"]
        constraints = [
            models.CheckConstraint(
                condition=Q(max_participants__isnull=True) | Q(current_registrations__lte=F("max_participants")),
                name="event_registrations_within_capacity",
            ),
            models.CheckConstraint(
                condition=Q(available_stock__isnull=True) | Q(available_stock__gte=0),
                name="event_stock_not_negative",
            ),
        ]

    def __str__(self) -> str:
        return self.name

    def clean(self) -> None:
        """Validate date ordering and merchandise-only fields."""
        if self.end and self.start and self.end < self.start:
            raise DjangoValidationError({"end": "The event cannot end before it starts."})
        if self.registration_deadline and self.start and self.registration_deadline > self.start:
            raise DjangoValidationError({"registration_deadline": "The deadline must not be after the start."})
        if self.event_type == self.EventType.NORMAL and (self.sizes or self.colors):
            raise DjangoValidationError("Sizes and colors only apply to merchandise.")

    @property
    def is_merchandise(self) -> bool:
        return self.event_type == self.EventType.MERCHANDISE

    @property
    def is_free(self) -> bool:
        return self.price == 0

    @property
    def requires_payment_approval(self) -> bool:
        """Paid merchandise is confirmed by an organizer after checking the payment proof."""
        return self.is_merchandise and not self.is_free

    @property
    def has_started(self) -> bool:
        return self.start <= timezone.now()

    def is_managed_by(self, user: "FelicityUser") -> bool:
        """The event's own organizer, or any admin."""
        return user.is_admin or self.organizer_id == user.id
