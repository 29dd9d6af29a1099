"""Serializers for user-related API endpoints."""

from __future__ import annotations

from django.contrib.auth import get_user_model  # type: ignore
from django.core.exceptions import ValidationError as DjangoValidationError  # type: ignore
from rest_framework import serializers  # type: ignore

from .models import PHONE_VALIDATOR

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    """Profile of the authenticated user."""

    is_host = serializers.ReadOnlyField()
    phone = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=32)

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "full_name",
            "phone",
            "avatar",
            "date_of_birth",
            "preferred_language",
            "is_host",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "email",
            "is_host",
            "created_at",
            "updated_at",
        ]

    def validate_phone(self, value):  # type: ignore
        if not value:
            return None
        value = User.objects.normalize_phone(value)
        try:
            PHONE_VALIDATOR(value)
        except DjangoValidationError as exc:
            raise serializers.ValidationError(exc.messages)
        qs = User.objects.filter(phone=value)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError("A user with this phone already exists.")
        return value


class PublicUserSerializer(serializers.ModelSerializer):
    """Minimal host/guest card shown on listings, bookings and reviews."""

    name = serializers.ReadOnlyField(source="display_name")

    class Meta:
        model = User
        fields = ["id", "name", "avatar"]
