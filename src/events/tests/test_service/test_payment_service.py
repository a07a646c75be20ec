"""Tests for payment proof uploads and the organizer's approval decisions."""

import typing as t
from decimal import Decimal

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile

from accounts.models import FelicityUser
from conftest import FelicityUserFactory, make_png_upload
from events.exceptions import (
    ForbiddenError,
    InvalidStateError,
    LifecycleValidationError,
    StockExceededError,
)
from events.models import Event, Registration
from events.service import payment_service
from events.service.registration_service import RegistrationService, cancel_registration

pytestmark = pytest.mark.django_db

Status = Registration.RegistrationStatus
Approval = Registration.ApprovalStatus


@pytest.fixture
def order(merch_event: Event, participant: FelicityUser) -> Registration:
    """A paid merchandise order waiting for payment approval."""
    return RegistrationService(event=merch_event, user=participant).register(size="M", color="black")


class TestUploadProof:
    def test_upload_attaches_proof(
        self, order: Registration, participant: FelicityUser, png_proof: SimpleUploadedFile
    ) -> None:
        updated = payment_service.upload_proof(order.id, participant, png_proof)

        assert updated.payment_proof
        assert updated.payment_proof.endswith("proof.png")
        assert updated.payment_proof_uploaded_at is not None
        assert updated.payment_approval_status == Approval.PENDING
        assert updated.registration_status == Status.PENDING_APPROVAL

    def test_latest_upload_wins(self, order: Registration, participant: FelicityUser) -> None:
        payment_service.upload_proof(order.id, participant, make_png_upload("first.png"))
        updated = payment_service.upload_proof(order.id, participant, make_png_upload("second.png"))

        assert updated.payment_proof.endswith("second.png")

    def test_only_the_owner_can_upload(
        self, order: Registration, other_participant: FelicityUser, png_proof: SimpleUploadedFile
    ) -> None:
        with pytest.raises(ForbiddenError):
            payment_service.upload_proof(order.id, other_participant, png_proof)

    def test_wrong_content_type(self, order: Registration, participant: FelicityUser) -> None:
        pdf = SimpleUploadedFile("proof.pdf", b"%PDF-1.4", content_type="application/pdf")
        with pytest.raises(LifecycleValidationError):
            payment_service.upload_proof(order.id, participant, pdf)

    def test_not_an_image(self, order: Registration, participant: FelicityUser) -> None:
        fake = SimpleUploadedFile("proof.png", b"definitely not a png", content_type="image/png")
        with pytest.raises(LifecycleValidationError):
            payment_service.upload_proof(order.id, participant, fake)

    def test_too_large(
        self, order: Registration, participant: FelicityUser, png_proof: SimpleUploadedFile, settings: t.Any
    ) -> None:
        settings.PAYMENT_PROOF_MAX_SIZE_BYTES = 10
        with pytest.raises(LifecycleValidationError):
            payment_service.upload_proof(order.id, participant, png_proof)

    def test_confirmed_registration_takes_no_proof(
        self, event: Event, participant: FelicityUser, png_proof: SimpleUploadedFile
    ) -> None:
        registration = RegistrationService(event=event, user=participant).register()
        with pytest.raises(InvalidStateError):
            payment_service.upload_proof(registration.id, participant, png_proof)


class TestApprovePayment:
    def test_approve_confirms_and_takes_stock(self, order: Registration, organizer: FelicityUser) -> None:
        approved = payment_service.approve_payment(order.id, organizer, "Transfer received")

        assert approved.registration_status == Status.CONFIRMED
        assert approved.payment_status == Registration.PaymentStatus.COMPLETED
        assert approved.payment_approval_status == Approval.APPROVED
        assert approved.reviewed_by == organizer
        assert approved.reviewed_at is not None
        assert approved.admin_notes == "Transfer received"
        assert approved.qr_code is not None
        event = Event.objects.get(pk=order.event_id)
        assert event.available_stock == 0
        assert event.current_registrations == 1

    def test_approve_twice(self, order: Registration, organizer: FelicityUser) -> None:
        payment_service.approve_payment(order.id, organizer)
        with pytest.raises(InvalidStateError):
            payment_service.approve_payment(order.id, organizer)

        event = Event.objects.get(pk=order.event_id)
        assert event.available_stock == 0
        assert event.current_registrations == 1

    def test_other_organizer_cannot_approve(self, order: Registration, other_organizer: FelicityUser) -> None:
        with pytest.raises(ForbiddenError):
            payment_service.approve_payment(order.id, other_organizer)

    def test_admin_can_approve(self, order: Registration, admin_user: FelicityUser) -> None:
        approved = payment_service.approve_payment(order.id, admin_user)
        assert approved.registration_status == Status.CONFIRMED

    def test_last_units_go_to_the_first_approvals(
        self,
        merch_event: Event,
        organizer: FelicityUser,
        felicity_user_factory: FelicityUserFactory,
    ) -> None:
        """Three orders for two units: the third approval fails and the order stays pending."""
        Event.objects.filter(pk=merch_event.pk).update(available_stock=2)
        merch_event.refresh_from_db()
        orders = [
            RegistrationService(event=merch_event, user=felicity_user_factory()).register(size="S", color="white")
            for _ in range(3)
        ]

        payment_service.approve_payment(orders[0].id, organizer)
        payment_service.approve_payment(orders[1].id, organizer)
        with pytest.raises(StockExceededError):
            payment_service.approve_payment(orders[2].id, organizer)

        orders[2].refresh_from_db()
        assert orders[2].registration_status == Status.PENDING_APPROVAL
        assert orders[2].payment_approval_status == Approval.PENDING
        assert orders[2].reviewed_by is None
        merch_event.refresh_from_db()
        assert merch_event.available_stock == 0
        assert merch_event.current_registrations == 2


class TestRejectPayment:
    def test_reject_leaves_stock_alone(self, order: Registration, organizer: FelicityUser) -> None:
        rejected = payment_service.reject_payment(order.id, organizer, "Amount does not match")

        assert rejected.registration_status == Status.REJECTED
        assert rejected.payment_status == Registration.PaymentStatus.FAILED
        assert rejected.payment_approval_status == Approval.REJECTED
        assert rejected.admin_notes == "Amount does not match"
        assert rejected.qr_code is None
        event = Event.objects.get(pk=order.event_id)
        assert event.available_stock == 1
        assert event.current_registrations == 0

    def test_rejected_order_cannot_be_approved(self, order: Registration, organizer: FelicityUser) -> None:
        payment_service.reject_payment(order.id, organizer)
        with pytest.raises(InvalidStateError):
            payment_service.approve_payment(order.id, organizer)

    def test_rejected_order_takes_no_proof(
        self, order: Registration, organizer: FelicityUser, participant: FelicityUser, png_proof: SimpleUploadedFile
    ) -> None:
        payment_service.reject_payment(order.id, organizer)
        with pytest.raises(InvalidStateError):
            payment_service.upload_proof(order.id, participant, png_proof)


class TestListPaymentApprovals:
    def test_filters_by_status(
        self,
        merch_event: Event,
        organizer: FelicityUser,
        felicity_user_factory: FelicityUserFactory,
    ) -> None:
        Event.objects.filter(pk=merch_event.pk).update(available_stock=5)
        merch_event.refresh_from_db()
        pending, approved, rejected = (
            RegistrationService(event=merch_event, user=felicity_user_factory()).register(size="L", color="black")
            for _ in range(3)
        )
        payment_service.approve_payment(approved.id, organizer)
        payment_service.reject_payment(rejected.id, organizer)

        def ids(status: payment_service.ApprovalFilter) -> set[t.Any]:
            return set(
                payment_service.list_payment_approvals(merch_event.id, organizer, status).values_list("id", flat=True)
            )

        assert ids("pending") == {pending.id}
        assert ids("approved") == {approved.id}
        assert ids("rejected") == {rejected.id}
        assert ids("all") == {pending.id, approved.id, rejected.id}

    def test_cancelled_order_leaves_the_pending_list(self, order: Registration, organizer: FelicityUser) -> None:
        cancel_registration(order.id, organizer, "duplicate order")

        assert not payment_service.list_payment_approvals(order.event_id, organizer, "pending").exists()
        listed = payment_service.list_payment_approvals(order.event_id, organizer, "all").get()
        assert listed.registration_status == Status.CANCELLED

    def test_free_registrations_are_not_listed(
        self, event: Event, participant: FelicityUser, admin_user: FelicityUser
    ) -> None:
        RegistrationService(event=event, user=participant).register()
        assert not payment_service.list_payment_approvals(event.id, admin_user, "all").exists()

    def test_other_organizer_is_forbidden(self, merch_event: Event, other_organizer: FelicityUser) -> None:
        with pytest.raises(ForbiddenError):
            payment_service.list_payment_approvals(merch_event.id, other_organizer)

    def test_amount_reflects_quantity(self, merch_event: Event, participant: FelicityUser) -> None:
        Event.objects.filter(pk=merch_event.pk).update(available_stock=5)
        merch_event.refresh_from_db()
        registration = RegistrationService(event=merch_event, user=participant).register(
            quantity=2, size="M", color="white"
        )
        assert registration.amount_paid == Decimal("60.00")
