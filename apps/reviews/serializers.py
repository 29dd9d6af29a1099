"""Serializers for the reviews domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.bookings.models import Booking
from apps.users.serializers import PublicUserSerializer

from .models import Review


class ReviewSerializer(serializers.ModelSerializer):
    reviewer = PublicUserSerializer(read_only=True)

    class Meta:
        model = Review
        fields = [
            "id",
            "booking",
            "property",
            "reviewer",
            "rating",
            "comment",
            "host_reply",
            "host_reply_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ReviewCreateSerializer(serializers.ModelSerializer):
    booking = serializers.PrimaryKeyRelatedField(queryset=Booking.objects.select_related("property"))

    class Meta:
        model = Review
        fields = ["booking", "rating", "comment"]
        extra_kwargs = {"comment": {"required": False, "allow_blank": True}}

    def validate_rating(self, value: int) -> int:  # type: ignore
        if not 1 <= value <= 5:
            raise serializers.ValidationError("Rating must be between 1 and 5.")
        return value

    def validate_booking(self, booking: Booking) -> Booking:  # type: ignore
        user = self.context["request"].user
        if booking.guest_id != user.id:
            raise serializers.ValidationError("You can only review your own bookings.")
        if booking.status != Booking.Status.COMPLETED:
            raise serializers.ValidationError("Only completed stays can be reviewed.")
        if Review.objects.filter(booking=booking).exists():
            raise serializers.ValidationError("This booking has already been reviewed.")
        return booking

    def create(self, validated_data):  # type: ignore
        booking = validated_data["booking"]
        return Review.objects.create(
            property=booking.property,
            reviewer=self.context["request"].user,
            **validated_data,
        )

    def to_representation(self, instance):  # type: ignore
        return ReviewSerializer(instance, context=self.context).data


class HostReplySerializer(serializers.Serializer):
    host_reply = serializers.CharField(max_length=2000)

    def validate_host_reply(self, value: str) -> str:  # type: ignore
        if not value.strip():
            raise serializers.ValidationError("Reply cannot be blank.")
        return value.strip()
