"""Domain services for booking workflows."""

from __future__ import annotations

import logging
from datetime import date

from django.db import transaction  # type: ignore
from django.utils import timezone  # type: ignore

from apps.notifications.tasks import notify_guest_booking_status, notify_host_new_booking
from apps.properties.models import Property
from apps.properties.services import check_availability, quote_stay

from .domain.transitions import Actor, InvalidTransitionError, ensure_transition
from .models import Booking

logger = logging.getLogger(__name__)

__all__ = [
    "BookingConflictError",
    "BookingRuleError",
    "InvalidTransitionError",
    "actor_for",
    "create_booking",
    "update_status",
    "apply_status",
    "complete_finished_bookings",
    "cancel_stale_pending_bookings",
]


class BookingConflictError(Exception):
    """Raised when a property is busy for requested dates."""


class BookingRuleError(Exception):
    """Raised when a booking request breaks a listing rule (dates, guests, inactive listing)."""


def ensure_booking_rules(property_obj: Property, check_in: date, check_out: date, total_guests: int) -> None:
    if not property_obj.is_active:
        raise BookingRuleError("This property is not available for booking.")
    if check_in >= check_out:
        raise BookingRuleError("Check-out date must be after check-in date.")
    if check_in < timezone.localdate():
        raise BookingRuleError("Check-in date cannot be in the past.")
    if total_guests < 1:
        raise BookingRuleError("At least one guest is required.")
    if total_guests > property_obj.max_guests:
        raise BookingRuleError(f"This property accepts at most {property_obj.max_guests} guests.")


def create_booking(
    *,
    guest,
    property_obj: Property,
    check_in: date,
    check_out: date,
    total_guests: int,
) -> Booking:
    """Create a pending booking at the server-side quoted price."""

    ensure_booking_rules(property_obj, check_in, check_out, total_guests)

    with transaction.atomic():
        # Lock the listing row so concurrent requests for it are serialized
        Property.objects.select_for_update().filter(pk=property_obj.pk).first()

        if not check_availability(property_obj, check_in, check_out):
            raise BookingConflictError("The property is not available for the selected dates.")

        quote = quote_stay(property_obj, check_in, check_out)
        booking = Booking.objects.create(
            guest=guest,
            property=property_obj,
            check_in_date=check_in,
            check_out_date=check_out,
            total_guests=total_guests,
            total_cost=quote.total,
        )
        transaction.on_commit(lambda: notify_host_new_booking.delay(booking.pk))

    logger.info(
        f"Booking {booking.pk} created by guest {guest.pk} for property {property_obj.pk} "
        f"({check_in}..{check_out}, total {booking.total_cost})"
    )
    return booking


def actor_for(booking: Booking, user) -> Actor | None:
    """Role of ``user`` towards ``booking``; hosts booking their own listing act as host."""

    if booking.property.host_id == user.pk:
        return Actor.HOST
    if booking.guest_id == user.pk:
        return Actor.GUEST
    return None


def apply_status(booking: Booking, new_status: str, *, actor: Actor, **extra_fields) -> Booking:
    """Validate and persist a status change, then notify the guest when relevant."""

    with transaction.atomic():
        locked = Booking.objects.select_for_update().select_related("property").get(pk=booking.pk)
        ensure_transition(
            locked.status,
            new_status,
            actor=actor,
            check_out=locked.check_out_date,
            today=timezone.localdate(),
        )
        previous = locked.status
        locked.status = new_status
        for field_name, value in extra_fields.items():
            setattr(locked, field_name, value)
        locked.save(update_fields=["status", "updated_at", *extra_fields.keys()])

        if new_status in (Booking.Status.CONFIRMED, Booking.Status.CANCELLED):
            transaction.on_commit(lambda: notify_guest_booking_status.delay(locked.pk))

    logger.info(f"Booking {locked.pk} moved from {previous} to {new_status} by {actor.value}")
    return locked


def update_status(booking: Booking, new_status: str, *, user) -> Booking:
    actor = actor_for(booking, user)
    if actor is None:
        raise InvalidTransitionError("You are not allowed to change this booking.")
    return apply_status(booking, new_status, actor=actor)


def complete_finished_bookings(today: date | None = None) -> int:
    today = today or timezone.localdate()
    completed = 0
    finished = Booking.objects.filter(status=Booking.Status.CONFIRMED, check_out_date__lte=today)
    for booking in finished:
        try:
            apply_status(booking, Booking.Status.COMPLETED, actor=Actor.SYSTEM)
        except InvalidTransitionError as e:
            logger.error(f"Error completing booking {booking.pk}: {e}")
            continue
        completed += 1
    return completed


def cancel_stale_pending_bookings(today: date | None = None) -> int:
    today = today or timezone.localdate()
    cancelled = 0
    stale = Booking.objects.filter(status=Booking.Status.PENDING, check_in_date__lt=today)
    for booking in stale:
        try:
            apply_status(booking, Booking.Status.CANCELLED, actor=Actor.SYSTEM)
        except InvalidTransitionError as e:
            logger.error(f"Error cancelling booking {booking.pk}: {e}")
            continue
        cancelled += 1
    return cancelled
