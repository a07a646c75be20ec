"""Legal registration status transitions.

Every status write in the lifecycle goes through ``compare_and_set``: an UPDATE
guarded by the status the caller observed. If another request moved the
registration first, no row matches and the loser gets ``InvalidStateError``.
"""

import typing as t
from uuid import UUID

from django.utils import timezone

from events.exceptions import InvalidStateError
from events.models import Registration

Status = Registration.RegistrationStatus
Approval = Registration.ApprovalStatus

TRANSITIONS: dict[str, frozenset[str]] = {
    Status.PENDING: frozenset({Status.PENDING_APPROVAL, Status.CONFIRMED, Status.REJECTED, Status.CANCELLED}),
    Status.PENDING_APPROVAL: frozenset({Status.CONFIRMED, Status.REJECTED, Status.CANCELLED}),
    Status.CONFIRMED: frozenset({Status.CANCELLED}),
    Status.CANCELLED: frozenset(),
    Status.REJECTED: frozenset(),
}

APPROVAL_TRANSITIONS: dict[str | None, frozenset[str]] = {
    None: frozenset({Approval.PENDING}),
    Approval.PENDING: frozenset({Approval.PENDING, Approval.APPROVED, Approval.REJECTED}),
    Approval.APPROVED: frozenset(),
    Approval.REJECTED: frozenset(),
}


def can_transition(current: str, target: str) -> bool:
    return target in TRANSITIONS.get(current, frozenset())


def ensure_transition(current: str, target: str) -> None:
    """Raise InvalidStateError unless ``current -> target`` is a legal transition."""
    if not can_transition(current, target):
        raise InvalidStateError(f"Cannot move a registration from {current} to {target}.")


def ensure_approval_transition(current: str | None, target: str) -> None:
    if target not in APPROVAL_TRANSITIONS.get(current, frozenset()):
        raise InvalidStateError(f"Cannot move a payment approval from {current} to {target}.")


def compare_and_set(
    registration_id: UUID,
    expected: str,
    target: str,
    *,
    where: dict[str, t.Any] | None = None,
    **fields: t.Any,
) -> None:
    """Atomically move a registration from ``expected`` to ``target``, writing ``fields`` too.

    ``where`` adds further guards to the UPDATE, e.g. ``{"attended": False}``.

    Raises:
        InvalidStateError: If the transition is illegal, or the registration is no longer in ``expected``.
    """
    ensure_transition(expected, target)
    updated = Registration.objects.filter(pk=registration_id, registration_status=expected, **(where or {})).update(
        registration_status=target, updated_at=timezone.now(), **fields
    )
    if updated != 1:
        raise InvalidStateError("The registration was changed by another request. Reload and try again.")
