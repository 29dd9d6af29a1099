"""Request serializers for the payment endpoints."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore


class CreatePaymentSerializer(serializers.Serializer):
    booking_id = serializers.IntegerField()


class VerifyPaymentSerializer(serializers.Serializer):
    session_id = serializers.CharField(max_length=255)
    booking_id = serializers.IntegerField()
