from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.test import TestCase

from apps.bookings.models import Booking
from apps.properties.models import Property
from apps.users.models import User


class BookingModelTests(TestCase):
    def test_nights_and_property_relation(self) -> None:
        host = User.objects.create_user(email="host@example.com", password="Str0ngPass!23")
        guest = User.objects.create_user(email="guest@example.com", password="Str0ngPass!23")
        listing = Property.objects.create(
            host=host,
            title="Garden Flat",
            property_type=Property.PropertyType.APARTMENT,
            location="Lisbon",
            price_per_night=Decimal("90.00"),
        )
        booking = Booking.objects.create(
            property=listing,
            guest=guest,
            check_in_date=date(2030, 3, 28),
            check_out_date=date(2030, 4, 2),
            total_guests=1,
        )

        booking.refresh_from_db()
        self.assertEqual(booking.nights, 5)
        self.assertEqual(booking.property, listing)
        self.assertEqual(str(booking), f"Booking #{booking.pk} for property {listing.pk}")
