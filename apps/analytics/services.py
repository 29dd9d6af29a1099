"""Aggregations behind the guest and host dashboards."""

from __future__ import annotations

from decimal import Decimal

from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore

from apps.bookings.models import Booking
from apps.properties.models import Property
from apps.reviews.models import Review


def guest_dashboard(user) -> dict:
    today = timezone.localdate()
    bookings = Booking.objects.filter(guest=user)
    counts = bookings.aggregate(
        total=models.Count("id"),
        pending=models.Count("id", filter=models.Q(status=Booking.Status.PENDING)),
        confirmed=models.Count("id", filter=models.Q(status=Booking.Status.CONFIRMED)),
        upcoming=models.Count(
            "id",
            filter=models.Q(status=Booking.Status.CONFIRMED, check_in_date__gt=today),
        ),
    )
    return {
        "total_bookings": counts["total"],
        "pending_bookings": counts["pending"],
        "confirmed_bookings": counts["confirmed"],
        "upcoming_stays": counts["upcoming"],
    }


def host_dashboard(user) -> dict:
    """Listing, booking, revenue and rating figures for everything ``user`` hosts."""

    today = timezone.localdate()
    properties = Property.objects.filter(host=user)
    bookings = Booking.objects.filter(property__host=user)

    property_counts = properties.aggregate(
        total=models.Count("id"),
        active=models.Count("id", filter=models.Q(is_active=True)),
    )
    booking_counts = bookings.aggregate(
        pending=models.Count("id", filter=models.Q(status=Booking.Status.PENDING)),
        confirmed=models.Count("id", filter=models.Q(status=Booking.Status.CONFIRMED)),
        current=models.Count(
            "id",
            filter=models.Q(
                status=Booking.Status.CONFIRMED,
                check_in_date__lte=today,
                check_out_date__gte=today,
            ),
        ),
        revenue=models.Sum(
            "total_cost",
            filter=models.Q(status__in=[Booking.Status.CONFIRMED, Booking.Status.COMPLETED]),
        ),
    )
    avg_rating = Review.objects.filter(property__host=user).aggregate(avg=models.Avg("rating"))["avg"]

    return {
        "total_properties": property_counts["total"],
        "active_properties": property_counts["active"],
        "pending_bookings": booking_counts["pending"],
        "confirmed_bookings": booking_counts["confirmed"],
        "current_guests": booking_counts["current"],
        "total_revenue": booking_counts["revenue"] or Decimal("0.00"),
        "average_rating": round(float(avg_rating), 1) if avg_rating is not None else None,
    }
