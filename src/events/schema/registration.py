"""Registration, ticket and payment approval schemas."""

import typing as t
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from ninja import ModelSchema, Schema
from pydantic import Field

from accounts.schema import MinimalFelicityUserSchema
from common.schema import NotesString, StrippedString
from events.models import Registration

from .event import MinimalEventSchema


class MerchandiseDetailsSchema(Schema):
    size: str | None = None
    color: str | None = None
    quantity: int


class PaymentApprovalRecordSchema(Schema):
    status: Registration.ApprovalStatus
    reviewed_by: MinimalFelicityUserSchema | None = None
    reviewed_at: datetime | None = None
    admin_notes: str = ""
    payment_proof: str | None = None
    payment_proof_uploaded_at: datetime | None = None


class ManualOverrideRecordSchema(Schema):
    is_overridden: bool
    reason: str | None = None
    overridden_by: MinimalFelicityUserSchema | None = None
    overridden_at: datetime | None = None


class RegistrationSchema(ModelSchema):
    id: UUID
    event: MinimalEventSchema
    participant: MinimalFelicityUserSchema | None = None
    participant_name: str
    registration_status: Registration.RegistrationStatus
    payment_status: Registration.PaymentStatus
    payment_method: Registration.PaymentMethod
    amount_paid: Decimal
    merchandise_details: MerchandiseDetailsSchema | None = None
    payment_approval: PaymentApprovalRecordSchema | None = None
    ticket_pending: bool
    scanned_by: MinimalFelicityUserSchema | None = None
    scan_method: Registration.ScanMethod | None = None
    manual_override: ManualOverrideRecordSchema

    class Meta:
        model = Registration
        fields = [
            "id",
            "ticket_id",
            "qr_code",
            "ticket_issued_at",
            "attended",
            "attended_at",
            "cancellation_reason",
            "cancelled_at",
            "created_at",
        ]

    @staticmethod
    def resolve_merchandise_details(obj: Registration) -> dict[str, t.Any] | None:
        if not obj.event.is_merchandise:
            return None
        return {
            "size": obj.merchandise_size or None,
            "color": obj.merchandise_color or None,
            "quantity": obj.quantity,
        }

    @staticmethod
    def resolve_payment_approval(obj: Registration) -> dict[str, t.Any] | None:
        if obj.payment_approval_status is None:
            return None
        return {
            "status": obj.payment_approval_status,
            "reviewed_by": obj.reviewed_by,
            "reviewed_at": obj.reviewed_at,
            "admin_notes": obj.admin_notes,
            "payment_proof": obj.payment_proof or None,
            "payment_proof_uploaded_at": obj.payment_proof_uploaded_at,
        }

    @staticmethod
    def resolve_scan_method(obj: Registration) -> str | None:
        return obj.scan_method or None

    @staticmethod
    def resolve_manual_override(obj: Registration) -> dict[str, t.Any]:
        return {
            "is_overridden": obj.override_is_overridden,
            "reason": obj.override_reason or None,
            "overridden_by": obj.overridden_by,
            "overridden_at": obj.overridden_at,
        }


class RegistrationCreateSchema(Schema):
    event_id: UUID
    quantity: int = Field(default=1, ge=1, le=Registration.MAX_ORDER_QUANTITY)
    size: StrippedString = ""
    color: StrippedString = ""


class CancelRegistrationSchema(Schema):
    reason: NotesString = ""


class PaymentReviewSchema(Schema):
    notes: NotesString = ""
