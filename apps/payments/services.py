"""Checkout workflow: starting a payment and applying its outcome to the booking."""

from __future__ import annotations

import logging

from django.conf import settings  # type: ignore

from apps.bookings.domain.transitions import Actor, InvalidTransitionError
from apps.bookings.models import Booking
from apps.bookings.services import apply_status

from . import stripe_service

logger = logging.getLogger(__name__)

SESSION_PAID = "paid"
SESSION_UNPAID = "unpaid"


class BookingPaymentError(Exception):
    """The booking cannot be paid for or verified in its current state."""


class BookingNotFoundError(BookingPaymentError):
    """No booking with that id belongs to the caller."""


def _session_value(obj, key: str):
    try:
        return obj[key]
    except (KeyError, TypeError):
        return None


def session_booking_id(session) -> str | None:
    metadata = _session_value(session, "metadata")
    if not metadata:
        return None
    return _session_value(metadata, "booking_id")


def resolve_origin(request) -> str:
    origin = request.headers.get("Origin")
    return (origin or getattr(settings, "FRONTEND_URL", "")).rstrip("/")


def start_checkout(booking: Booking, *, user, origin: str) -> str:
    """Open a Checkout Session for a pending booking and return its URL."""

    if booking.guest_id != user.pk:
        raise BookingNotFoundError("Booking not found.")
    if booking.status != Booking.Status.PENDING:
        raise BookingPaymentError(f"Booking is {booking.status} and cannot be paid for.")

    session = stripe_service.create_checkout_session(
        booking_id=booking.pk,
        user_id=user.pk,
        email=user.email,
        title=booking.property.title,
        amount=booking.total_cost,
        success_url=(
            f"{origin}/payment-success?session_id={{CHECKOUT_SESSION_ID}}&booking_id={booking.pk}"
        ),
        cancel_url=f"{origin}/payment-canceled?booking_id={booking.pk}",
    )

    booking.payment_session_id = session.id
    booking.save(update_fields=["payment_session_id", "updated_at"])
    return session.url


def apply_session_to_booking(booking: Booking, session) -> Booking:
    """
    Move the booking according to the session's payment status.

    ``paid`` confirms the booking and records the payment intent; ``unpaid``
    cancels a booking that is still pending. A booking already in the target
    status is left as is, and any other session status changes nothing.
    """

    payment_status = _session_value(session, "payment_status")

    if payment_status == SESSION_PAID:
        payment_intent = _session_value(session, "payment_intent") or ""
        if not isinstance(payment_intent, str):
            payment_intent = _session_value(payment_intent, "id") or ""
        if booking.status == Booking.Status.CONFIRMED:
            if booking.payment_status != Booking.PaymentStatus.PAID:
                booking.payment_status = Booking.PaymentStatus.PAID
                booking.payment_intent_id = payment_intent
                booking.save(update_fields=["payment_status", "payment_intent_id", "updated_at"])
            return booking
        return apply_status(
            booking,
            Booking.Status.CONFIRMED,
            actor=Actor.SYSTEM,
            payment_status=Booking.PaymentStatus.PAID,
            payment_intent_id=payment_intent,
        )

    if payment_status == SESSION_UNPAID and booking.status == Booking.Status.PENDING:
        return apply_status(booking, Booking.Status.CANCELLED, actor=Actor.SYSTEM)

    logger.info(f"Session status {payment_status} leaves booking {booking.pk} as {booking.status}")
    return booking


def verify_checkout(session_id: str, booking_id: int, *, user) -> dict:
    session = stripe_service.retrieve_checkout_session(session_id)

    try:
        booking = Booking.objects.select_related("property").get(pk=booking_id, guest=user)
    except Booking.DoesNotExist:
        raise BookingNotFoundError("Booking not found.")

    metadata_booking = session_booking_id(session)
    if metadata_booking is not None and str(metadata_booking) != str(booking.pk):
        logger.warning(f"Session {session_id} belongs to booking {metadata_booking}, not {booking.pk}")
        raise BookingPaymentError("Payment session does not belong to this booking.")

    booking = apply_session_to_booking(booking, session)
    return {
        "success": True,
        "booking_status": booking.status,
        "payment_status": _session_value(session, "payment_status"),
        "session_id": session_id,
    }


def handle_webhook_event(event) -> Booking | None:
    """Apply checkout.session.completed/expired events to their booking."""

    event_type = _session_value(event, "type")
    if event_type not in ("checkout.session.completed", "checkout.session.expired"):
        logger.info(f"Ignoring Stripe event {event_type}")
        return None

    session = event["data"]["object"]
    booking_id = session_booking_id(session)
    if not booking_id:
        logger.warning(f"Stripe event {event_type} has no booking metadata")
        return None

    try:
        booking = Booking.objects.select_related("property").get(pk=int(booking_id))
    except (Booking.DoesNotExist, ValueError):
        logger.error(f"Stripe event {event_type} names unknown booking {booking_id}")
        return None

    try:
        return apply_session_to_booking(booking, session)
    except InvalidTransitionError as e:
        logger.error(f"Stripe event {event_type} could not update booking {booking.pk}: {e}")
        return booking
