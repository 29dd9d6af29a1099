"""API tests for Stripe checkout, verification and webhooks."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal
from types import SimpleNamespace
from unittest import mock

import stripe
from django.core import mail
from django.test import override_settings
from django.urls import reverse_lazy
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.models import Booking
from apps.properties.models import Property
from apps.users.models import User


def paid_session(booking_id, payment_status="paid", session_id="cs_test_123"):
    return {
        "id": session_id,
        "payment_status": payment_status,
        "payment_intent": "pi_test_456",
        "metadata": {"booking_id": str(booking_id), "user_id": "1"},
    }


class PaymentTestMixin:
    def setUp(self) -> None:
        self.host = User.objects.create_user(email="host@example.com", password="Str0ngPass!23")
        self.guest = User.objects.create_user(email="guest@example.com", password="Str0ngPass!23")
        self.other = User.objects.create_user(email="other@example.com", password="Str0ngPass!23")
        self.property = Property.objects.create(
            host=self.host,
            title="Dune Villa",
            property_type=Property.PropertyType.VILLA,
            location="Essaouira",
            price_per_night=Decimal("150.00"),
            max_guests=4,
        )
        today = timezone.localdate()
        self.booking = Booking.objects.create(
            property=self.property,
            guest=self.guest,
            check_in_date=today + timedelta(days=20),
            check_out_date=today + timedelta(days=22),
            total_guests=2,
            total_cost=Decimal("330.00"),
        )


class CreatePaymentAPITests(PaymentTestMixin, APITestCase):
    url = reverse_lazy("create-payment")

    @mock.patch("stripe.checkout.Session.create")
    @mock.patch("stripe.Customer.list")
    def test_creates_checkout_session(self, customer_list, session_create) -> None:
        customer_list.return_value = SimpleNamespace(data=[])
        session_create.return_value = SimpleNamespace(id="cs_test_123", url="https://checkout.stripe.test/cs_test_123")

        self.client.force_authenticate(self.guest)
        response = self.client.post(
            self.url,
            {"booking_id": self.booking.id},
            format="json",
            HTTP_ORIGIN="https://app.example.com",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data, {"url": "https://checkout.stripe.test/cs_test_123"})

        params = session_create.call_args.kwargs
        line_item = params["line_items"][0]
        self.assertEqual(line_item["price_data"]["unit_amount"], 33000)
        self.assertEqual(line_item["price_data"]["product_data"]["name"], "Booking: Dune Villa")
        self.assertEqual(params["mode"], "payment")
        self.assertEqual(params["customer_email"], "guest@example.com")
        self.assertEqual(params["metadata"]["booking_id"], str(self.booking.id))
        self.assertEqual(
            params["success_url"],
            "https://app.example.com/payment-success?session_id={CHECKOUT_SESSION_ID}"
            f"&booking_id={self.booking.id}",
        )
        self.assertEqual(
            params["cancel_url"],
            f"https://app.example.com/payment-canceled?booking_id={self.booking.id}",
        )

        self.booking.refresh_from_db()
        self.assertEqual(self.booking.payment_session_id, "cs_test_123")

    @mock.patch("stripe.checkout.Session.create")
    @mock.patch("stripe.Customer.list")
    def test_reuses_existing_customer_and_frontend_url(self, customer_list, session_create) -> None:
        customer_list.return_value = SimpleNamespace(data=[SimpleNamespace(id="cus_789")])
        session_create.return_value = SimpleNamespace(id="cs_test_1", url="https://checkout.stripe.test/cs_test_1")

        self.client.force_authenticate(self.guest)
        response = self.client.post(self.url, {"booking_id": self.booking.id}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        params = session_create.call_args.kwargs
        self.assertEqual(params["customer"], "cus_789")
        self.assertNotIn("customer_email", params)
        self.assertTrue(params["success_url"].startswith("http://testserver.local/payment-success"))

    def test_foreign_booking_is_not_found(self) -> None:
        self.client.force_authenticate(self.other)
        response = self.client.post(self.url, {"booking_id": self.booking.id}, format="json")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_only_pending_bookings_can_be_paid(self) -> None:
        self.booking.status = Booking.Status.CONFIRMED
        self.booking.save()
        self.client.force_authenticate(self.guest)
        response = self.client.post(self.url, {"booking_id": self.booking.id}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    @override_settings(STRIPE_SECRET_KEY="")
    def test_missing_configuration(self) -> None:
        self.client.force_authenticate(self.guest)
        response = self.client.post(self.url, {"booking_id": self.booking.id}, format="json")
        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)

    @mock.patch("stripe.Customer.list")
    def test_processor_failure(self, customer_list) -> None:
        customer_list.side_effect = stripe.StripeError("boom")
        self.client.force_authenticate(self.guest)
        response = self.client.post(self.url, {"booking_id": self.booking.id}, format="json")
        self.assertEqual(response.status_code, status.HTTP_502_BAD_GATEWAY)

    def test_requires_authentication(self) -> None:
        response = self.client.post(self.url, {"booking_id": self.booking.id}, format="json")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


@mock.patch("stripe.checkout.Session.retrieve")
class VerifyPaymentAPITests(PaymentTestMixin, APITestCase):
    url = reverse_lazy("verify-payment")

    def _verify(self, user=None, booking_id=None):
        self.client.force_authenticate(user or self.guest)
        return self.client.post(
            self.url,
            {"session_id": "cs_test_123", "booking_id": booking_id or self.booking.id},
            format="json",
        )

    def test_paid_session_confirms_booking(self, session_retrieve) -> None:
        session_retrieve.return_value = paid_session(self.booking.id)

        with self.captureOnCommitCallbacks(execute=True):
            response = self._verify()

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(
            response.data,
            {
                "success": True,
                "booking_status": "confirmed",
                "payment_status": "paid",
                "session_id": "cs_test_123",
            },
        )
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, Booking.Status.CONFIRMED)
        self.assertEqual(self.booking.payment_status, Booking.PaymentStatus.PAID)
        self.assertEqual(self.booking.payment_intent_id, "pi_test_456")
        self.assertEqual(mail.outbox[0].to, ["guest@example.com"])

    def test_second_verification_is_harmless(self, session_retrieve) -> None:
        session_retrieve.return_value = paid_session(self.booking.id)
        self._verify()
        response = self._verify()
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["booking_status"], "confirmed")

    def test_unpaid_session_cancels_pending_booking(self, session_retrieve) -> None:
        session_retrieve.return_value = paid_session(self.booking.id, payment_status="unpaid")
        response = self._verify()
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["booking_status"], "cancelled")
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.payment_status, Booking.PaymentStatus.UNPAID)

    def test_session_for_another_booking_is_rejected(self, session_retrieve) -> None:
        session_retrieve.return_value = paid_session(self.booking.id + 100)
        response = self._verify()
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, Booking.Status.PENDING)

    def test_foreign_booking_is_not_found(self, session_retrieve) -> None:
        session_retrieve.return_value = paid_session(self.booking.id)
        response = self._verify(user=self.other)
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_paid_session_on_cancelled_booking_conflicts(self, session_retrieve) -> None:
        self.booking.status = Booking.Status.CANCELLED
        self.booking.save()
        session_retrieve.return_value = paid_session(self.booking.id)
        response = self._verify()
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_unknown_session(self, session_retrieve) -> None:
        session_retrieve.side_effect = stripe.InvalidRequestError("No such checkout.session", "id")
        response = self._verify()
        self.assertEqual(response.status_code, status.HTTP_502_BAD_GATEWAY)


class StripeWebhookTests(PaymentTestMixin, APITestCase):
    url = reverse_lazy("stripe-webhook")

    def _post(self, signature="t=1,v1=abc"):
        return self.client.post(
            self.url,
            data=b'{"id": "evt_1"}',
            content_type="application/json",
            HTTP_STRIPE_SIGNATURE=signature,
        )

    @mock.patch("stripe.Webhook.construct_event")
    def test_completed_event_confirms_booking(self, construct_event) -> None:
        construct_event.return_value = {
            "type": "checkout.session.completed",
            "data": {"object": paid_session(self.booking.id)},
        }
        response = self._post()
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"received": True})
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, Booking.Status.CONFIRMED)
        self.assertEqual(construct_event.call_args.args[2], "whsec_test_dummy")

    @mock.patch("stripe.Webhook.construct_event")
    def test_expired_event_cancels_pending_booking(self, construct_event) -> None:
        construct_event.return_value = {
            "type": "checkout.session.expired",
            "data": {"object": paid_session(self.booking.id, payment_status="unpaid")},
        }
        response = self._post()
        self.assertEqual(response.status_code, 200)
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, Booking.Status.CANCELLED)

    @mock.patch("stripe.Webhook.construct_event")
    def test_other_events_are_acknowledged(self, construct_event) -> None:
        construct_event.return_value = {"type": "customer.created", "data": {"object": {}}}
        response = self._post()
        self.assertEqual(response.status_code, 200)
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, Booking.Status.PENDING)

    @mock.patch("stripe.Webhook.construct_event")
    def test_bad_signature_rejected(self, construct_event) -> None:
        construct_event.side_effect = stripe.SignatureVerificationError("bad signature", "t=1,v1=abc")
        response = self._post()
        self.assertEqual(response.status_code, 400)

    @override_settings(STRIPE_WEBHOOK_SECRET="")
    def test_missing_webhook_secret(self) -> None:
        response = self._post()
        self.assertEqual(response.status_code, 503)

    def test_get_not_allowed(self) -> None:
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, 405)
