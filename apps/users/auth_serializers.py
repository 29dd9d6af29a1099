"""Serializers for authentication flows (register, login, password reset)."""

from __future__ import annotations

import logging
import secrets
from datetime import timedelta
from typing import Any

from django.contrib.auth import get_user_model  # type: ignore
from django.contrib.auth.password_validation import validate_password  # type: ignore
from django.core.exceptions import ValidationError as DjangoValidationError  # type: ignore
from django.db import transaction  # type: ignore
from django.utils import timezone  # type: ignore
from rest_framework import serializers  # type: ignore

from apps.notifications.tasks import send_password_reset_code
from .models import PHONE_VALIDATOR, PasswordResetToken

logger = logging.getLogger(__name__)

User = get_user_model()

LOGIN_ATTEMPTS_THRESHOLD = 5
RESET_CODE_TTL = timedelta(minutes=15)


def _find_user(identifier: str):
    """Look a user up by email or phone."""
    if "@" in identifier:
        return User.objects.get(email__iexact=identifier)
    return User.objects.get(phone=User.objects.normalize_phone(identifier))


class RegisterSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(min_length=8, write_only=True)
    password_confirm = serializers.CharField(min_length=8, write_only=True)
    full_name = serializers.CharField(required=False, allow_blank=True, max_length=255)
    phone = serializers.CharField(required=False, allow_blank=True, max_length=32)

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:  # type: ignore
        if attrs.get("password") != attrs.get("password_confirm"):
            raise serializers.ValidationError({"password_confirm": "Passwords do not match."})
        validate_password(attrs["password"])
        if User.objects.filter(email__iexact=attrs["email"]).exists():
            raise serializers.ValidationError({"email": "A user with this email already exists."})
        phone = attrs.get("phone")
        if phone:
            phone = User.objects.normalize_phone(phone)
            try:
                PHONE_VALIDATOR(phone)
            except DjangoValidationError as exc:
                raise serializers.ValidationError({"phone": exc.messages})
            if User.objects.filter(phone=phone).exists():
                raise serializers.ValidationError({"phone": "A user with this phone already exists."})
            attrs["phone"] = phone
        else:
            attrs.pop("phone", None)
        return attrs

    @transaction.atomic
    def create(self, validated_data: dict[str, Any]):  # type: ignore
        password = validated_data.pop("password")
        validated_data.pop("password_confirm", None)
        user = User.objects.create_user(password=password, **validated_data)
        logger.info(f"User {user.pk} registered")
        return user


class LoginSerializer(serializers.Serializer):
    login = serializers.CharField()
    password = serializers.CharField(write_only=True)

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:  # type: ignore
        login = attrs.get("login", "")
        password = attrs.get("password", "")

        try:
            user = _find_user(login)
        except User.DoesNotExist:
            raise serializers.ValidationError({"login": "Invalid login or password."})

        if user.is_locked:
            raise serializers.ValidationError(
                {"non_field_errors": ["Account is temporarily locked. Try again later."]}
            )

        if not user.is_active or not user.check_password(password):
            user.register_failed_attempt(threshold=LOGIN_ATTEMPTS_THRESHOLD)
            if user.is_locked:
                logger.warning(f"User {user.pk} locked after repeated failed logins")
            raise serializers.ValidationError({"login": "Invalid login or password."})

        if user.failed_login_attempts or user.locked_until:
            user.unlock()

        attrs["user"] = user
        return attrs


class PasswordResetRequestSerializer(serializers.Serializer):
    identifier = serializers.CharField()

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:  # type: ignore
        try:
            attrs["user"] = _find_user(attrs.get("identifier", ""))
        except User.DoesNotExist:
            attrs["user"] = None
        return attrs

    @transaction.atomic
    def create(self, validated_data: dict[str, Any]):  # type: ignore
        user = validated_data["user"]
        PasswordResetToken.objects.filter(user=user, is_used=False).update(is_used=True)

        code = f"{secrets.randbelow(1_000_000):06d}"
        token = PasswordResetToken.objects.create(
            user=user,
            code=code,
            expires_at=timezone.now() + RESET_CODE_TTL,
            attempts_left=3,
        )
        transaction.on_commit(lambda: send_password_reset_code.delay(user.email, code))
        return token


class PasswordResetConfirmSerializer(serializers.Serializer):
    identifier = serializers.CharField()
    code = serializers.CharField()
    new_password = serializers.CharField(min_length=8)
    new_password_confirm = serializers.CharField(min_length=8)

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:  # type: ignore
        if attrs.get("new_password") != attrs.get("new_password_confirm"):
            raise serializers.ValidationError({"new_password_confirm": "Passwords do not match."})
        try:
            attrs["user"] = _find_user(attrs.get("identifier", ""))
        except User.DoesNotExist:
            raise serializers.ValidationError({"identifier": "User not found."})
        validate_password(attrs["new_password"], user=attrs["user"])
        return attrs

    def create(self, validated_data: dict[str, Any]):  # type: ignore
        user = validated_data["user"]
        code = validated_data["code"]

        try:
            token = PasswordResetToken.objects.filter(
                user=user,
                is_used=False,
            ).latest("created_at")
        except PasswordResetToken.DoesNotExist:
            raise serializers.ValidationError({"code": "Code not found. Request a new one."})

        if token.is_expired:
            token.mark_used()
            raise serializers.ValidationError({"code": "The code has expired."})

        if token.attempts_left == 0:
            token.mark_used()
            raise serializers.ValidationError({"code": "Too many attempts. Request a new code."})

        if not secrets.compare_digest(token.code, code):
            token.decrement_attempt()
            raise serializers.ValidationError({"code": "Invalid code."})

        with transaction.atomic():
            user.set_password(validated_data["new_password"])
            user.save(update_fields=["password"])
            token.mark_used()
        logger.info(f"Password reset completed for user {user.pk}")
        return user
