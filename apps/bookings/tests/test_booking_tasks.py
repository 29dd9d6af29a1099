"""Tests for the scheduled booking maintenance tasks."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from django.core import mail
from django.test import TestCase
from django.utils import timezone

from apps.bookings import tasks
from apps.bookings.models import Booking
from apps.properties.models import Property
from apps.users.models import User


class BookingMaintenanceTaskTests(TestCase):
    def setUp(self) -> None:
        host = User.objects.create_user(email="host@example.com", password="Str0ngPass!23")
        self.guest = User.objects.create_user(email="guest@example.com", password="Str0ngPass!23")
        self.property = Property.objects.create(
            host=host,
            title="Orchard Cottage",
            property_type=Property.PropertyType.GUESTHOUSE,
            location="Kent",
            price_per_night=Decimal("90.00"),
            max_guests=4,
        )
        self.today = timezone.localdate()

    def _booking(self, state, check_in_offset: int, check_out_offset: int) -> Booking:
        return Booking.objects.create(
            property=self.property,
            guest=self.guest,
            check_in_date=self.today + timedelta(days=check_in_offset),
            check_out_date=self.today + timedelta(days=check_out_offset),
            total_guests=1,
            status=state,
        )

    def test_completes_confirmed_stays_after_check_out(self) -> None:
        finished = self._booking(Booking.Status.CONFIRMED, -5, -1)
        leaving_today = self._booking(Booking.Status.CONFIRMED, -3, 0)
        ongoing = self._booking(Booking.Status.CONFIRMED, -1, 2)
        cancelled = self._booking(Booking.Status.CANCELLED, -9, -7)

        result = tasks.complete_finished_bookings.delay().get()

        self.assertEqual(result, {"completed": 2})
        for booking in (finished, leaving_today, ongoing, cancelled):
            booking.refresh_from_db()
        self.assertEqual(finished.status, Booking.Status.COMPLETED)
        self.assertEqual(leaving_today.status, Booking.Status.COMPLETED)
        self.assertEqual(ongoing.status, Booking.Status.CONFIRMED)
        self.assertEqual(cancelled.status, Booking.Status.CANCELLED)

    def test_cancels_pending_requests_past_check_in(self) -> None:
        stale = self._booking(Booking.Status.PENDING, -1, 3)
        starting_today = self._booking(Booking.Status.PENDING, 0, 2)
        upcoming = self._booking(Booking.Status.PENDING, 5, 7)

        with self.captureOnCommitCallbacks(execute=True):
            result = tasks.cancel_stale_pending_bookings.delay().get()

        self.assertEqual(result, {"cancelled": 1})
        stale.refresh_from_db()
        starting_today.refresh_from_db()
        upcoming.refresh_from_db()
        self.assertEqual(stale.status, Booking.Status.CANCELLED)
        self.assertEqual(starting_today.status, Booking.Status.PENDING)
        self.assertEqual(upcoming.status, Booking.Status.PENDING)
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ["guest@example.com"])
