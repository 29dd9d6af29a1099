"""Serializers for the booking domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.properties.models import Property
from apps.properties.serializers import PropertySummarySerializer
from apps.users.serializers import PublicUserSerializer

from .models import Booking
from .services import BookingConflictError, BookingRuleError, create_booking


class BookingCreateSerializer(serializers.Serializer):
    """Booking request made by a guest; the price is computed on the server."""

    property = serializers.PrimaryKeyRelatedField(queryset=Property.objects.all())
    check_in_date = serializers.DateField()
    check_out_date = serializers.DateField()
    total_guests = serializers.IntegerField(min_value=1, default=1)

    def validate(self, attrs):  # type: ignore
        if attrs["check_in_date"] >= attrs["check_out_date"]:
            raise serializers.ValidationError({"check_out_date": "Check-out date must be after check-in date."})
        return attrs

    def create(self, validated_data):  # type: ignore
        try:
            return create_booking(
                guest=self.context["request"].user,
                property_obj=validated_data["property"],
                check_in=validated_data["check_in_date"],
                check_out=validated_data["check_out_date"],
                total_guests=validated_data["total_guests"],
            )
        except (BookingConflictError, BookingRuleError) as exc:
            raise serializers.ValidationError({"non_field_errors": [str(exc)]})


class BookingSerializer(serializers.ModelSerializer):
    """Booking with a property summary, as listed to guests and hosts."""

    property = PropertySummarySerializer(read_only=True)
    guest = PublicUserSerializer(read_only=True)
    nights = serializers.ReadOnlyField()

    class Meta:
        model = Booking
        fields = [
            "id",
            "property",
            "guest",
            "check_in_date",
            "check_out_date",
            "nights",
            "total_guests",
            "total_cost",
            "status",
            "payment_status",
            "payment_session_id",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class BookingStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Booking.Status.choices)
