"""Availability and pricing services for listings."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterator

from django.conf import settings  # type: ignore
from django.db import transaction  # type: ignore
from django.db.models import Q  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore

from .models import Property, PropertyAvailability

CENT = Decimal("0.01")


def _lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection().in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


def iter_nights(check_in: date, check_out: date) -> Iterator[date]:
    """Yield every night of a stay; the check-out date itself is not a night."""
    current = check_in
    while current < check_out:
        yield current
        current += timedelta(days=1)


def blocking_bookings(property_obj: Property, check_in: date, check_out: date, *, exclude_booking_id=None):
    """Pending or confirmed bookings of the property that overlap [check_in, check_out)."""

    from apps.bookings.models import Booking  # Local import to prevent circular dependency

    qs = Booking.objects.filter(
        property=property_obj,
        status__in=Booking.BLOCKING_STATUSES,
    ).filter(Q(check_in_date__lt=check_out) & Q(check_out_date__gt=check_in))
    if exclude_booking_id is not None:
        qs = qs.exclude(pk=exclude_booking_id)
    return qs


def blocked_dates(property_obj: Property, check_in: date, check_out: date):
    return PropertyAvailability.objects.filter(
        property=property_obj,
        is_available=False,
        date__gte=check_in,
        date__lt=check_out,
    )


def check_availability(
    property_obj: Property,
    check_in: date,
    check_out: date,
    *,
    exclude_booking_id=None,
) -> bool:
    """Whether the property can be booked for [check_in, check_out).

    Rows are locked with ``select_for_update`` when called inside an atomic
    block on a backend that supports it, so the caller can create the
    booking in the same transaction without a competing writer slipping in.
    """

    if check_in >= check_out:
        return False

    bookings_qs = _lock_queryset_if_possible(
        blocking_bookings(property_obj, check_in, check_out, exclude_booking_id=exclude_booking_id)
    )
    if bookings_qs.exists():
        return False

    availability_qs = _lock_queryset_if_possible(blocked_dates(property_obj, check_in, check_out))
    return not availability_qs.exists()


def unavailable_property_ids(check_in: date, check_out: date) -> set[int]:
    """Ids of properties that cannot host a stay over [check_in, check_out)."""

    from apps.bookings.models import Booking

    booked = Booking.objects.filter(
        status__in=Booking.BLOCKING_STATUSES,
        check_in_date__lt=check_out,
        check_out_date__gt=check_in,
    ).values_list("property_id", flat=True)
    blocked = PropertyAvailability.objects.filter(
        is_available=False,
        date__gte=check_in,
        date__lt=check_out,
    ).values_list("property_id", flat=True)
    return set(booked) | set(blocked)


def service_fee_rate() -> Decimal:
    return Decimal(str(getattr(settings, "BOOKING_SERVICE_FEE_RATE", "0.10")))


@dataclass
class NightPrice:
    date: date
    price: Decimal


@dataclass
class StayQuote:
    check_in: date
    check_out: date
    nights: list[NightPrice] = field(default_factory=list)
    subtotal: Decimal = Decimal("0.00")
    service_fee: Decimal = Decimal("0.00")
    total: Decimal = Decimal("0.00")

    @property
    def night_count(self) -> int:
        return len(self.nights)

    def as_dict(self) -> dict:
        return {
            "check_in": self.check_in,
            "check_out": self.check_out,
            "nights": self.night_count,
            "nightly_prices": [{"date": n.date, "price": n.price} for n in self.nights],
            "subtotal": self.subtotal,
            "service_fee": self.service_fee,
            "total": self.total,
        }


def quote_stay(property_obj: Property, check_in: date, check_out: date) -> StayQuote:
    """Price a stay night by night; a price override replaces the nightly rate."""

    overrides = dict(
        PropertyAvailability.objects.filter(
            property=property_obj,
            date__gte=check_in,
            date__lt=check_out,
            price_override__isnull=False,
        ).values_list("date", "price_override")
    )

    quote = StayQuote(check_in=check_in, check_out=check_out)
    for night in iter_nights(check_in, check_out):
        price = overrides.get(night, property_obj.price_per_night)
        quote.nights.append(NightPrice(date=night, price=Decimal(price).quantize(CENT)))

    quote.subtotal = sum((n.price for n in quote.nights), Decimal("0.00")).quantize(CENT)
    quote.service_fee = (quote.subtotal * service_fee_rate()).quantize(CENT, rounding=ROUND_HALF_UP)
    quote.total = (quote.subtotal + quote.service_fee).quantize(CENT)
    return quote
