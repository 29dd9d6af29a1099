"""Tests for the current-user profile endpoint."""

from __future__ import annotations

from decimal import Decimal

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.properties.models import Property
from apps.users.models import User


class ProfileAPITests(APITestCase):
    def setUp(self) -> None:
        self.user = User.objects.create_user(
            email="profile@example.com",
            password="Str0ngPass!23",
            full_name="Profile Owner",
        )

    def test_requires_authentication(self) -> None:
        response = self.client.get(reverse("user-me"))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_update_profile_keeps_email(self) -> None:
        self.client.force_authenticate(self.user)
        response = self.client.patch(
            reverse("user-me"),
            {"full_name": "New Name", "email": "other@example.com", "phone": "+1 555 000 3333"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.user.refresh_from_db()
        self.assertEqual(self.user.full_name, "New Name")
        self.assertEqual(self.user.email, "profile@example.com")
        self.assertEqual(self.user.phone, "+15550003333")

    def test_duplicate_phone_rejected(self) -> None:
        User.objects.create_user(email="other@example.com", password="Str0ngPass!23", phone="+15550004444")
        self.client.force_authenticate(self.user)
        response = self.client.patch(reverse("user-me"), {"phone": "+15550004444"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_is_host_after_listing_a_property(self) -> None:
        Property.objects.create(
            host=self.user,
            title="Garden Studio",
            property_type=Property.PropertyType.APARTMENT,
            location="Lisbon",
            price_per_night=Decimal("80.00"),
        )
        self.client.force_authenticate(self.user)
        response = self.client.get(reverse("user-me"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["is_host"])
