from uuid import UUID

from ninja import File, Query
from ninja.files import UploadedFile
from ninja_extra import api_controller, route

from common.auth_base import BaseJWTAuth
from common.controllers import UserAwareController
from common.schema import Envelope, ErrorResponse
from common.throttling import UploadThrottle, UserDefaultThrottle
from events import filters, schema
from events.service import payment_service

from .permissions import ORGANIZER_ROLES

ERRORS = {frozenset({400, 403, 404, 409, 503}): ErrorResponse}


@api_controller(
    "/payments",
    auth=BaseJWTAuth(roles=ORGANIZER_ROLES),
    tags=["Payments"],
    throttle=UserDefaultThrottle(),
)
class PaymentController(UserAwareController):
    @route.post(
        "/{registration_id}/proof",
        url_name="upload_payment_proof",
        response={200: Envelope[schema.RegistrationSchema], **ERRORS},
        auth=BaseJWTAuth(),
        throttle=UploadThrottle(),
    )
    def upload_proof(self, registration_id: UUID, proof: File[UploadedFile]) -> dict[str, object]:
        """Upload a payment proof image for your merchandise order.

        Accepts JPEG, PNG, GIF or WebP up to 5 MB. Uploading again replaces the previous proof.
        """
        return {"data": payment_service.upload_proof(registration_id, self.user(), proof)}

    @route.get(
        "/events/{event_id}",
        url_name="list_payment_approvals",
        response={200: Envelope[list[schema.RegistrationSchema]], **ERRORS},
    )
    def list_payment_approvals(
        self,
        event_id: UUID,
        params: filters.PaymentApprovalFilterSchema = Query(...),  # type: ignore[type-arg]
    ) -> dict[str, object]:
        """List merchandise orders of an event by approval status (pending by default, or all)."""
        return {"data": list(payment_service.list_payment_approvals(event_id, self.user(), params.status))}

    @route.post(
        "/{registration_id}/approve",
        url_name="approve_payment",
        response={200: Envelope[schema.RegistrationSchema], **ERRORS},
    )
    def approve_payment(self, registration_id: UUID, payload: schema.PaymentReviewSchema) -> dict[str, object]:
        """Approve a payment: confirms the order, takes the stock and issues the ticket."""
        return {"data": payment_service.approve_payment(registration_id, self.user(), payload.notes)}

    @route.post(
        "/{registration_id}/reject",
        url_name="reject_payment",
        response={200: Envelope[schema.RegistrationSchema], **ERRORS},
    )
    def reject_payment(self, registration_id: UUID, payload: schema.PaymentReviewSchema) -> dict[str, object]:
        """Reject a payment. No stock is touched."""
        return {"data": payment_service.reject_payment(registration_id, self.user(), payload.notes)}
