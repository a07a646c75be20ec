"""Registration lifecycle: creation, cancellation and lookups."""

import typing as t
from uuid import UUID

import structlog
from django.conf import settings
from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from accounts.models import FelicityUser
from events.exceptions import (
    CapacityExceededError,
    ForbiddenError,
    InvalidStateError,
    LifecycleError,
    LifecycleValidationError,
    NotFoundError,
    StockExceededError,
)
from events.models import Event, Registration
from events.models.registration import RegistrationQuerySet
from events.service import registration_notification_service as notifications
from events.service.ticket_issuer import store_issued_ticket
from events.service.transitions import compare_and_set, ensure_transition

logger = structlog.get_logger(__name__)

Status = Registration.RegistrationStatus


def get_event(event_id: UUID) -> Event:
    try:
        return Event.objects.select_related("organizer").get(pk=event_id)
    except Event.DoesNotExist as e:
        raise NotFoundError("Event not found.") from e


def get_managed_event(event_id: UUID, user: FelicityUser) -> Event:
    """Return the event if ``user`` organizes it or is an admin."""
    event = get_event(event_id)
    if not event.is_managed_by(user):
        raise ForbiddenError("Only the event's organizer can do this.")
    return event


def get_registration_for_update(registration_id: UUID) -> Registration:
    """Load a registration with its event, without visibility checks."""
    try:
        return Registration.objects.with_relations().get(pk=registration_id)
    except Registration.DoesNotExist as e:
        raise NotFoundError("Registration not found.") from e


class RegistrationService:
    """Registers a participant for an event.

    Free and normal events are confirmed on the spot: the seat (and, for free
    merchandise, the stock) is taken with one conditional update, then the ticket
    is issued. Paid merchandise becomes an order awaiting payment approval and
    takes nothing until an organizer approves it.
    """

    def __init__(self, *, event: Event, user: FelicityUser) -> None:
        """Initialize the registration service."""
        self.event = event
        self.user = user

    def register(self, *, quantity: int = 1, size: str = "", color: str = "") -> Registration:
        self._check_event_accepts_registrations()
        self._check_order(quantity=quantity, size=size, color=color)
        if self.event.requires_payment_approval:
            return self._place_order(quantity=quantity, size=size, color=color)
        return self._confirm(quantity=quantity, size=size, color=color)

    def _check_event_accepts_registrations(self) -> None:
        event = self.event
        if event.status != Event.EventStatus.PUBLISHED:
            raise InvalidStateError("This event is not open for registration.")
        if not event.registration_open:
            raise InvalidStateError("Registration is closed for this event.")
        if event.registration_deadline and timezone.now() > event.registration_deadline:
            raise InvalidStateError("The registration deadline has passed.")

    def _check_order(self, *, quantity: int, size: str, color: str) -> None:
        """Fail fast on orders that cannot succeed.

        The capacity and stock checks here only spare the participant a doomed
        request. The authoritative checks are the conditional updates in
        ``EventQuerySet.reserve``.
        """
        event = self.event
        if not 1 <= quantity <= Registration.MAX_ORDER_QUANTITY:
            raise LifecycleValidationError(f"Quantity must be between 1 and {Registration.MAX_ORDER_QUANTITY}.")

        if not event.is_merchandise:
            if quantity != 1 or size or color:
                raise LifecycleValidationError("Quantity, size and color only apply to merchandise.")
            if Registration.objects.active().filter(event=event, participant=self.user).exists():
                raise InvalidStateError("You have already registered for this event.")
            if event.max_participants is not None and event.current_registrations >= event.max_participants:
                raise CapacityExceededError()
            return

        if event.sizes and size not in event.sizes:
            raise LifecycleValidationError(f"Size must be one of: {', '.join(event.sizes)}.")
        if event.colors and color not in event.colors:
            raise LifecycleValidationError(f"Color must be one of: {', '.join(event.colors)}.")
        if event.purchase_limit_per_participant is not None:
            already_ordered = (
                Registration.objects.active()
                .filter(event=event, participant=self.user)
                .aggregate(total=Sum("quantity"))["total"]
                or 0
            )
            if already_ordered + quantity > event.purchase_limit_per_participant:
                raise LifecycleValidationError(
                    f"The purchase limit is {event.purchase_limit_per_participant} per participant."
                )
        if event.available_stock is not None and event.available_stock < quantity:
            raise StockExceededError(f"Only {event.available_stock} items left in stock.")

    def _new_registration(self, *, status: str, quantity: int, size: str, color: str, **fields: t.Any) -> Registration:
        ensure_transition(Status.PENDING, status)
        return Registration.objects.create(
            event=self.event,
            participant=self.user,
            registration_status=status,
            quantity=quantity,
            merchandise_size=size,
            merchandise_color=color,
            amount_paid=self.event.price * quantity,
            **fields,
        )

    def _confirm(self, *, quantity: int, size: str, color: str) -> Registration:
        free = self.event.is_free
        with transaction.atomic():
            if not Event.objects.reserve(self.event.pk, quantity, consume_stock=self.event.is_merchandise):
                raise exhausted_error(self.event.pk, quantity)
            registration = self._new_registration(
                status=Status.CONFIRMED,
                quantity=quantity,
                size=size,
                color=color,
                payment_status=(
                    Registration.PaymentStatus.COMPLETED if free else Registration.PaymentStatus.PENDING
                ),
                payment_method=Registration.PaymentMethod.FREE if free else Registration.PaymentMethod.PENDING,
            )

        logger.info(
            "registration_confirmed",
            registration_id=str(registration.id),
            event_id=str(self.event.id),
            user_id=str(self.user.id),
            quantity=quantity,
        )
        store_issued_ticket(registration)
        notifications.notify_registration_confirmed(registration)
        return registration

    def _place_order(self, *, quantity: int, size: str, color: str) -> Registration:
        registration = self._new_registration(
            status=Status.PENDING_APPROVAL,
            quantity=quantity,
            size=size,
            color=color,
            payment_status=Registration.PaymentStatus.PENDING,
            payment_method=Registration.PaymentMethod.PENDING,
            payment_approval_status=Registration.ApprovalStatus.PENDING,
        )
        logger.info(
            "registration_awaiting_payment",
            registration_id=str(registration.id),
            event_id=str(self.event.id),
            user_id=str(self.user.id),
            quantity=quantity,
        )
        return registration


def exhausted_error(event_id: UUID, quantity: int) -> LifecycleError:
    """Explain why ``EventQuerySet.reserve`` refused ``quantity``, reading the counters it lost on."""
    event = Event.objects.get(pk=event_id)
    if event.is_merchandise and event.available_stock is not None and event.available_stock < quantity:
        return StockExceededError(f"Only {event.available_stock} items left in stock.")
    return CapacityExceededError()


def cancel_registration(registration_id: UUID, actor: FelicityUser, reason: str = "") -> Registration:
    """Cancel a registration.

    Participants may cancel their own pending or confirmed registration until the
    event starts. The event's organizer, or an admin, may cancel any registration
    that is not yet terminal. Attended registrations cannot be cancelled.
    """
    registration = get_registration_for_update(registration_id)
    event = registration.event
    is_manager = event.is_managed_by(actor)
    if not is_manager and registration.participant_id != actor.id:
        raise ForbiddenError("You cannot cancel this registration.")

    if registration.attended:
        raise InvalidStateError("Attended registrations cannot be cancelled.")

    current = registration.registration_status
    if is_manager:
        allowed = Registration.ACTIVE_STATUSES
    else:
        allowed = (Status.PENDING, Status.CONFIRMED)
        if event.has_started:
            raise InvalidStateError("The event has already started.")
    if current not in allowed:
        raise InvalidStateError(f"A {current} registration cannot be cancelled.")

    now = timezone.now()
    reason = reason or ("Cancelled by organizer" if is_manager else "Cancelled by participant")
    with transaction.atomic():
        compare_and_set(
            registration.pk,
            current,
            Status.CANCELLED,
            where={"attended": False},
            cancellation_reason=reason,
            cancelled_at=now,
            cancelled_by=actor,
            qr_code=None,
        )
        if current == Status.CONFIRMED:
            Event.objects.release(
                event.pk,
                registration.quantity,
                restore_stock=event.is_merchandise and settings.FELICITY_RESTORE_STOCK_ON_CANCEL,
            )

    registration.refresh_from_db()
    logger.info(
        "registration_cancelled",
        registration_id=str(registration.id),
        previous_status=current,
        cancelled_by=str(actor.id),
    )
    notifications.notify_registration_cancelled(registration)
    return registration


def retry_ticket_issuance(registration_id: UUID, actor: FelicityUser) -> Registration:
    """Issue the ticket of a confirmed registration whose QR code is missing."""
    registration = get_registration_for_update(registration_id)
    if not registration.event.is_managed_by(actor):
        raise ForbiddenError("Only the event's organizer can issue tickets.")
    if registration.registration_status != Status.CONFIRMED:
        raise InvalidStateError("Only confirmed registrations have tickets.")
    if registration.qr_code is None:
        store_issued_ticket(registration)
    return registration


def get_registration(registration_id: UUID, user: FelicityUser) -> Registration:
    registration = get_registration_for_update(registration_id)
    if registration.participant_id != user.id and not registration.event.is_managed_by(user):
        raise ForbiddenError("You cannot view this registration.")
    return registration


def list_participant_registrations(user: FelicityUser) -> RegistrationQuerySet:
    return Registration.objects.with_relations().filter(participant=user)


def list_event_registrations(event_id: UUID, user: FelicityUser) -> RegistrationQuerySet:
    event = get_managed_event(event_id, user)
    return Registration.objects.with_relations().filter(event=event)
