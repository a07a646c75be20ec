from uuid import UUID

from ninja import Query
from ninja_extra import api_controller, route

from common.auth_base import BaseJWTAuth
from common.controllers import UserAwareController
from common.schema import Envelope, ErrorResponse
from common.throttling import UserDefaultThrottle, WriteThrottle
from events import filters, schema
from events.service import registration_service
from events.service.registration_service import RegistrationService

from .permissions import ORGANIZER_ROLES

ERRORS = {frozenset({400, 403, 404, 409, 503}): ErrorResponse}


@api_controller("/registrations", auth=BaseJWTAuth(), tags=["Registrations"], throttle=WriteThrottle())
class RegistrationController(UserAwareController):
    @route.post(
        "",
        url_name="create_registration",
        response={201: Envelope[schema.RegistrationSchema], **ERRORS},
    )
    def create_registration(self, payload: schema.RegistrationCreateSchema) -> tuple[int, dict[str, object]]:
        """Register for an event.

        Free and normal events are confirmed immediately and get a ticket.
        Paid merchandise orders wait for the organizer to approve a payment proof.
        """
        event = registration_service.get_event(payload.event_id)
        registration = RegistrationService(event=event, user=self.user()).register(
            quantity=payload.quantity, size=payload.size, color=payload.color
        )
        return 201, {"data": registration}

    @route.get(
        "/mine",
        url_name="my_registrations",
        response={200: Envelope[list[schema.RegistrationSchema]]},
        throttle=UserDefaultThrottle(),
    )
    def my_registrations(
        self,
        params: filters.RegistrationFilterSchema = Query(...),  # type: ignore[type-arg]
    ) -> dict[str, object]:
        """List the current user's registrations."""
        qs = registration_service.list_participant_registrations(self.user())
        return {"data": list(params.filter(qs))}

    @route.get(
        "/events/{event_id}",
        url_name="event_registrations",
        response={200: Envelope[list[schema.RegistrationSchema]], **ERRORS},
        auth=BaseJWTAuth(roles=ORGANIZER_ROLES),
        throttle=UserDefaultThrottle(),
    )
    def event_registrations(
        self,
        event_id: UUID,
        params: filters.RegistrationFilterSchema = Query(...),  # type: ignore[type-arg]
    ) -> dict[str, object]:
        """List the registrations of an event you organize."""
        qs = registration_service.list_event_registrations(event_id, self.user())
        return {"data": list(params.filter(qs))}

    @route.get(
        "/{registration_id}",
        url_name="get_registration",
        response={200: Envelope[schema.RegistrationSchema], **ERRORS},
        throttle=UserDefaultThrottle(),
    )
    def get_registration(self, registration_id: UUID) -> dict[str, object]:
        """Get one of your registrations, or one for an event you organize."""
        return {"data": registration_service.get_registration(registration_id, self.user())}

    @route.post(
        "/{registration_id}/cancel",
        url_name="cancel_registration",
        response={200: Envelope[schema.RegistrationSchema], **ERRORS},
    )
    def cancel_registration(
        self, registration_id: UUID, payload: schema.CancelRegistrationSchema
    ) -> dict[str, object]:
        """Cancel a registration.

        Participants can cancel their own pending or confirmed registration before the
        event starts. Organizers can cancel any registration that is not final yet.
        """
        registration = registration_service.cancel_registration(registration_id, self.user(), payload.reason)
        return {"data": registration}

    @route.post(
        "/{registration_id}/issue-ticket",
        url_name="issue_ticket",
        response={200: Envelope[schema.RegistrationSchema], **ERRORS},
        auth=BaseJWTAuth(roles=ORGANIZER_ROLES),
    )
    def issue_ticket(self, registration_id: UUID) -> dict[str, object]:
        """Retry ticket issuance for a confirmed registration that has no QR code yet."""
        return {"data": registration_service.retry_ticket_issuance(registration_id, self.user())}
