"""Context schemas for notifications using TypedDict for type safety.

Each notification type has a context schema listing the keys its templates rely
on. Required keys are checked at runtime when the notification is created.
"""

import typing as t

from notifications.enums import NotificationType


class RegistrationContext(t.TypedDict, total=False):
    """Keys shared by every registration lifecycle notification."""

    registration_id: t.Required[str]
    ticket_id: t.Required[str]
    event_id: t.Required[str]
    event_name: t.Required[str]
    event_type: t.Required[str]
    event_start: t.Required[str]  # ISO format
    venue: str
    participant_name: t.Required[str]
    quantity: t.Required[int]
    amount_paid: t.Required[str]
    registration_status: t.Required[str]
    merchandise_size: str
    merchandise_color: str


class RegistrationConfirmedContext(RegistrationContext):
    """Context for REGISTRATION_CONFIRMED notification."""


class RegistrationCancelledContext(RegistrationContext):
    """Context for REGISTRATION_CANCELLED notification."""

    cancellation_reason: t.Required[str]


class PaymentProofSubmittedContext(RegistrationContext):
    """Context for PAYMENT_PROOF_SUBMITTED notification, sent to the organizer."""

    payment_proof: t.Required[str]


class PaymentApprovedContext(RegistrationContext):
    """Context for PAYMENT_APPROVED notification."""

    admin_notes: str


class PaymentRejectedContext(RegistrationContext):
    """Context for PAYMENT_REJECTED notification."""

    admin_notes: str


NOTIFICATION_CONTEXT_SCHEMAS: dict[NotificationType, type[RegistrationContext]] = {
    NotificationType.REGISTRATION_CONFIRMED: RegistrationConfirmedContext,
    NotificationType.REGISTRATION_CANCELLED: RegistrationCancelledContext,
    NotificationType.PAYMENT_PROOF_SUBMITTED: PaymentProofSubmittedContext,
    NotificationType.PAYMENT_APPROVED: PaymentApprovedContext,
    NotificationType.PAYMENT_REJECTED: PaymentRejectedContext,
}


def validate_notification_context(notification_type: NotificationType, context: dict[str, t.Any]) -> None:
    """Validate that context matches expected schema for notification type.

    Raises:
        ValueError: If context is invalid or notification type has no schema
    """
    schema = NOTIFICATION_CONTEXT_SCHEMAS.get(notification_type)
    if schema is None:
        raise ValueError(f"No schema defined for notification type: {notification_type}")

    # TypedDict validation happens at type-check time with mypy.
    # At runtime, we only check that the required keys are present.
    required_keys: frozenset[str] = getattr(schema, "__required_keys__", frozenset())
    missing_keys = required_keys - context.keys()

    if missing_keys:
        raise ValueError(f"Missing required context keys for {notification_type}: {sorted(missing_keys)}")
