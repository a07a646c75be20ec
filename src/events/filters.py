import typing as t

from ninja import Field, FilterSchema, Schema

from events.models import Registration


class RegistrationFilterSchema(FilterSchema):
    status: Registration.RegistrationStatus | None = Field(None, q="registration_status")  # type: ignore[call-overload]
    attended: bool | None = None


class PaymentApprovalFilterSchema(Schema):
    status: t.Literal["pending", "approved", "rejected", "all"] = "pending"
