"""API tests for authentication endpoints."""

from __future__ import annotations

from datetime import timedelta

from django.core import mail
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.users.models import PasswordResetToken, User


class AuthAPITests(APITestCase):
    def test_register_returns_tokens(self) -> None:
        payload = {
            "email": "guest@example.com",
            "phone": "+15550001111",
            "full_name": "Guest User",
            "password": "Str0ngPass!23",
            "password_confirm": "Str0ngPass!23",
        }

        response = self.client.post(reverse("auth:register"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertIn("access", response.data["tokens"])
        self.assertIn("refresh", response.data["tokens"])
        self.assertEqual(response.data["user"]["email"], payload["email"])
        self.assertFalse(response.data["user"]["is_host"])
        self.assertTrue(User.objects.filter(email=payload["email"]).exists())

    def test_register_rejects_mismatched_passwords(self) -> None:
        payload = {
            "email": "mismatch@example.com",
            "password": "Str0ngPass!23",
            "password_confirm": "Str0ngPass!24",
        }
        response = self.client.post(reverse("auth:register"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("password_confirm", response.data)

    def test_register_rejects_duplicate_email(self) -> None:
        User.objects.create_user(email="taken@example.com", password="Str0ngPass!23")
        payload = {
            "email": "TAKEN@example.com",
            "password": "Str0ngPass!23",
            "password_confirm": "Str0ngPass!23",
        }
        response = self.client.post(reverse("auth:register"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("email", response.data)

    def test_login_with_phone(self) -> None:
        User.objects.create_user(email="phone@example.com", phone="+15550002222", password="Str0ngPass!23")
        response = self.client.post(
            reverse("auth:login"),
            {"login": "+1 555-000-2222", "password": "Str0ngPass!23"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["user"]["email"], "phone@example.com")

    def test_login_limited_attempts(self) -> None:
        user = User.objects.create_user(
            email="lock@example.com",
            password="CorrectPassw0rd!",
        )

        url = reverse("auth:login")
        wrong_payload = {"login": user.email, "password": "wrong"}
        for _ in range(5):
            response = self.client.post(url, wrong_payload, format="json")

        user.refresh_from_db()
        self.assertTrue(user.is_locked)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        # Correct password is refused while locked
        response = self.client.post(url, {"login": user.email, "password": "CorrectPassw0rd!"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        # After lock expires user can login again
        user.locked_until = timezone.now() - timedelta(minutes=1)
        user.save(update_fields=["locked_until"])
        response = self.client.post(url, {"login": user.email, "password": "CorrectPassw0rd!"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)

    def test_token_refresh(self) -> None:
        User.objects.create_user(email="refresh@example.com", password="Str0ngPass!23")
        login = self.client.post(
            reverse("auth:login"),
            {"login": "refresh@example.com", "password": "Str0ngPass!23"},
            format="json",
        )
        response = self.client.post(
            reverse("auth:token_refresh"),
            {"refresh": login.data["tokens"]["refresh"]},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertIn("access", response.data)

    def test_password_reset_flow(self) -> None:
        user = User.objects.create_user(
            email="reset@example.com",
            password="OldPassw0rd!",
        )
        with self.captureOnCommitCallbacks(execute=True):
            request_resp = self.client.post(
                reverse("auth:password-reset-request"),
                {"identifier": user.email},
                format="json",
            )
        self.assertEqual(request_resp.status_code, status.HTTP_202_ACCEPTED, request_resp.data)

        token = PasswordResetToken.objects.get(user=user)
        self.assertEqual(len(mail.outbox), 1)
        self.assertIn(token.code, mail.outbox[0].body)

        confirm_payload = {
            "identifier": user.email,
            "code": token.code,
            "new_password": "NewPassw0rd!",
            "new_password_confirm": "NewPassw0rd!",
        }
        confirm_resp = self.client.post(
            reverse("auth:password-reset-confirm"),
            confirm_payload,
            format="json",
        )
        self.assertEqual(confirm_resp.status_code, status.HTTP_200_OK, confirm_resp.data)
        user.refresh_from_db()
        self.assertTrue(user.check_password("NewPassw0rd!"))

    def test_password_reset_unknown_account_is_silent(self) -> None:
        response = self.client.post(
            reverse("auth:password-reset-request"),
            {"identifier": "nobody@example.com"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_202_ACCEPTED)
        self.assertEqual(len(mail.outbox), 0)

    def test_password_reset_wrong_code_uses_attempts(self) -> None:
        user = User.objects.create_user(email="attempts@example.com", password="OldPassw0rd!")
        token = PasswordResetToken.objects.create(
            user=user,
            code="123456",
            expires_at=timezone.now() + timedelta(minutes=15),
        )
        payload = {
            "identifier": user.email,
            "code": "000000",
            "new_password": "NewPassw0rd!",
            "new_password_confirm": "NewPassw0rd!",
        }
        for _ in range(3):
            response = self.client.post(reverse("auth:password-reset-confirm"), payload, format="json")
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        token.refresh_from_db()
        self.assertEqual(token.attempts_left, 0)

        payload["code"] = "123456"
        response = self.client.post(reverse("auth:password-reset-confirm"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        user.refresh_from_db()
        self.assertTrue(user.check_password("OldPassw0rd!"))

    def test_password_reset_expired_code(self) -> None:
        user = User.objects.create_user(email="expired@example.com", password="OldPassw0rd!")
        PasswordResetToken.objects.create(
            user=user,
            code="654321",
            expires_at=timezone.now() - timedelta(minutes=1),
        )
        response = self.client.post(
            reverse("auth:password-reset-confirm"),
            {
                "identifier": user.email,
                "code": "654321",
                "new_password": "NewPassw0rd!",
                "new_password_confirm": "NewPassw0rd!",
            },
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("code", response.data)
