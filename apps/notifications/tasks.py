"""Celery tasks that deliver e-mail notifications outside the request cycle."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore

from . import services

logger = logging.getLogger(__name__)


def _load_booking(booking_id: int):
    from apps.bookings.models import Booking  # Local import to prevent circular dependency

    try:
        return Booking.objects.select_related("property", "property__host", "guest").get(pk=booking_id)
    except Booking.DoesNotExist:
        logger.error(f"Booking {booking_id} not found for notification")
        return None


@shared_task(name="notifications.send_password_reset_code")
def send_password_reset_code(email: str, code: str) -> bool:
    return services.send_password_reset_email(email, code)


@shared_task(name="notifications.notify_host_new_booking")
def notify_host_new_booking(booking_id: int) -> bool:
    booking = _load_booking(booking_id)
    if booking is None:
        return False
    return services.send_new_booking_request_email(booking)


@shared_task(name="notifications.notify_guest_booking_status")
def notify_guest_booking_status(booking_id: int) -> bool:
    """E-mail the guest when their booking is confirmed or cancelled."""

    from apps.bookings.models import Booking

    booking = _load_booking(booking_id)
    if booking is None:
        return False
    if booking.status == Booking.Status.CONFIRMED:
        return services.send_booking_confirmation_email(booking)
    if booking.status == Booking.Status.CANCELLED:
        return services.send_booking_cancellation_email(booking)
    logger.info(f"No guest notification for booking {booking_id} in status {booking.status}")
    return False
