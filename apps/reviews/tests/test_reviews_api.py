"""API tests for guest reviews and host replies."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.models import Booking
from apps.properties.models import Property
from apps.reviews.models import Review
from apps.users.models import User


class ReviewAPITests(APITestCase):
    def setUp(self) -> None:
        self.host = User.objects.create_user(email="host@example.com", password="Str0ngPass!23")
        self.guest = User.objects.create_user(
            email="guest@example.com",
            password="Str0ngPass!23",
            full_name="Rita Reviewer",
        )
        self.other = User.objects.create_user(email="other@example.com", password="Str0ngPass!23")
        self.property = Property.objects.create(
            host=self.host,
            title="Vineyard House",
            property_type=Property.PropertyType.VILLA,
            location="Tuscany",
            price_per_night=Decimal("180.00"),
        )
        today = timezone.localdate()
        self.booking = Booking.objects.create(
            property=self.property,
            guest=self.guest,
            check_in_date=today - timedelta(days=6),
            check_out_date=today - timedelta(days=2),
            total_guests=2,
            status=Booking.Status.COMPLETED,
        )

    def _review_payload(self, **overrides) -> dict:
        payload = {"booking": self.booking.id, "rating": 5, "comment": "Wonderful stay"}
        payload.update(overrides)
        return payload

    def test_guest_reviews_completed_stay(self) -> None:
        self.client.force_authenticate(self.guest)
        response = self.client.post(reverse("review-list"), self._review_payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["property"], self.property.id)
        self.assertEqual(response.data["reviewer"]["name"], "Rita Reviewer")

        detail = self.client.get(reverse("property-detail", args=[self.property.id]))
        self.assertEqual(detail.data["average_rating"], 5.0)
        self.assertEqual(detail.data["review_count"], 1)

    def test_only_one_review_per_booking(self) -> None:
        self.client.force_authenticate(self.guest)
        self.client.post(reverse("review-list"), self._review_payload(), format="json")
        response = self.client.post(reverse("review-list"), self._review_payload(rating=3), format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Review.objects.count(), 1)

    def test_unfinished_stay_cannot_be_reviewed(self) -> None:
        self.booking.status = Booking.Status.CONFIRMED
        self.booking.save()
        self.client.force_authenticate(self.guest)
        response = self.client.post(reverse("review-list"), self._review_payload(), format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("booking", response.data)

    def test_someone_elses_booking_cannot_be_reviewed(self) -> None:
        self.client.force_authenticate(self.other)
        response = self.client.post(reverse("review-list"), self._review_payload(), format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_rating_out_of_range(self) -> None:
        self.client.force_authenticate(self.guest)
        response = self.client.post(reverse("review-list"), self._review_payload(rating=6), format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("rating", response.data)

    def test_reviews_are_public_and_filterable(self) -> None:
        Review.objects.create(
            booking=self.booking,
            property=self.property,
            reviewer=self.guest,
            rating=4,
        )
        response = self.client.get(reverse("review-list"), {"property": self.property.id})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 1)

        response = self.client.get(reverse("review-list"), {"rating": 5})
        self.assertEqual(response.data["count"], 0)

    def test_host_replies(self) -> None:
        review = Review.objects.create(
            booking=self.booking,
            property=self.property,
            reviewer=self.guest,
            rating=4,
        )
        url = reverse("review-reply", args=[review.id])

        self.client.force_authenticate(self.other)
        response = self.client.post(url, {"host_reply": "Thanks!"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.host)
        response = self.client.post(url, {"host_reply": "  Thanks for staying!  "}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        review.refresh_from_db()
        self.assertEqual(review.host_reply, "Thanks for staying!")
        self.assertIsNotNone(review.host_reply_at)
