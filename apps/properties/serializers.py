"""Serializers for the properties domain."""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.core.exceptions import ValidationError as DjangoValidationError  # type: ignore
from django.utils import timezone  # type: ignore
from rest_framework import serializers  # type: ignore

from apps.users.serializers import PublicUserSerializer

from .models import Property, PropertyAvailability, PropertyCategory, PropertyImage
from .storage import validate_property_image


class PropertyCategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = PropertyCategory
        fields = ["id", "name", "description", "icon", "color"]


class PropertyImageSerializer(serializers.ModelSerializer):
    class Meta:
        model = PropertyImage
        fields = ["id", "image", "order", "uploaded_at"]
        read_only_fields = ["uploaded_at"]


class PropertyImageUploadSerializer(serializers.Serializer):
    """Accepts one or more files under ``images`` (multipart)."""

    images = serializers.ListField(child=serializers.ImageField(), allow_empty=False)

    def validate_images(self, files):  # type: ignore
        for file_obj in files:
            try:
                validate_property_image(file_obj)
            except DjangoValidationError as exc:
                raise serializers.ValidationError(exc.messages)

        property_obj: Property = self.context["property"]
        max_count = getattr(settings, "PROPERTY_IMAGE_MAX_COUNT", 10)
        if property_obj.images.count() + len(files) > max_count:
            raise serializers.ValidationError(f"A property can have at most {max_count} images.")
        return files

    def create(self, validated_data):  # type: ignore
        property_obj: Property = self.context["property"]
        last = property_obj.images.order_by("-order").first()
        next_order = last.order + 1 if last else 0
        created = []
        for offset, file_obj in enumerate(validated_data["images"]):
            created.append(
                PropertyImage.objects.create(property=property_obj, image=file_obj, order=next_order + offset)
            )
        return created


class PropertySerializer(serializers.ModelSerializer):
    """Read serializer with nested images and rating summary."""

    host = PublicUserSerializer(read_only=True)
    images = PropertyImageSerializer(many=True, read_only=True)
    average_rating = serializers.SerializerMethodField()
    review_count = serializers.SerializerMethodField()

    class Meta:
        model = Property
        fields = [
            "id",
            "host",
            "title",
            "description",
            "property_type",
            "location",
            "address",
            "latitude",
            "longitude",
            "price_per_night",
            "max_guests",
            "bedrooms",
            "bathrooms",
            "amenities",
            "images",
            "is_active",
            "average_rating",
            "review_count",
            "created_at",
            "updated_at",
        ]

    def get_average_rating(self, obj: Property):  # type: ignore
        value = getattr(obj, "average_rating", None)
        return round(float(value), 1) if value is not None else None

    def get_review_count(self, obj: Property) -> int:
        return getattr(obj, "review_count", 0) or 0


class PropertySummarySerializer(serializers.ModelSerializer):
    """Compact listing data embedded in bookings."""

    image = serializers.SerializerMethodField()

    class Meta:
        model = Property
        fields = ["id", "title", "location", "property_type", "image"]

    def get_image(self, obj: Property):  # type: ignore
        first = next(iter(obj.images.all()), None)
        if first is None:
            return None
        request = self.context.get("request")
        url = first.image.url
        return request.build_absolute_uri(url) if request and url.startswith("/") else url


class PropertyWriteSerializer(serializers.ModelSerializer):
    class Meta:
        model = Property
        fields = [
            "title",
            "description",
            "property_type",
            "location",
            "address",
            "latitude",
            "longitude",
            "price_per_night",
            "max_guests",
            "bedrooms",
            "bathrooms",
            "amenities",
            "is_active",
        ]

    def validate_amenities(self, value):  # type: ignore
        if not isinstance(value, list):
            raise serializers.ValidationError("Expected a list of amenity names.")
        cleaned: list[str] = []
        for item in value:
            if not isinstance(item, str) or not item.strip():
                raise serializers.ValidationError("Amenity names must be non-empty strings.")
            name = item.strip()
            if name.lower() not in {c.lower() for c in cleaned}:
                cleaned.append(name)
        return cleaned

    def validate_title(self, value: str) -> str:
        if not value.strip():
            raise serializers.ValidationError("Title cannot be blank.")
        return value.strip()

    def create(self, validated_data):  # type: ignore
        validated_data["host"] = self.context["request"].user
        return super().create(validated_data)

    def to_representation(self, instance):  # type: ignore
        return PropertySerializer(instance, context=self.context).data


class PropertyAvailabilitySerializer(serializers.ModelSerializer):
    class Meta:
        model = PropertyAvailability
        fields = ["id", "date", "is_available", "price_override", "created_at"]
        read_only_fields = ["created_at"]


class PropertyAvailabilityWriteSerializer(serializers.Serializer):
    date = serializers.DateField()
    is_available = serializers.BooleanField(default=True)
    price_override = serializers.DecimalField(
        max_digits=10,
        decimal_places=2,
        min_value=0,
        required=False,
        allow_null=True,
    )

    def validate_date(self, value):  # type: ignore
        if value < timezone.localdate():
            raise serializers.ValidationError("Cannot change availability for past dates.")
        return value

    def create(self, validated_data):  # type: ignore
        entry, _ = PropertyAvailability.objects.update_or_create(
            property=self.context["property"],
            date=validated_data["date"],
            defaults={
                "is_available": validated_data.get("is_available", True),
                "price_override": validated_data.get("price_override"),
            },
        )
        return entry

    def to_representation(self, instance):  # type: ignore
        return PropertyAvailabilitySerializer(instance).data


class StayRangeSerializer(serializers.Serializer):
    """Query parameters for availability and quote lookups."""

    check_in = serializers.DateField()
    check_out = serializers.DateField()

    def validate(self, attrs):  # type: ignore
        if attrs["check_in"] >= attrs["check_out"]:
            raise serializers.ValidationError({"check_out": "Check-out must be after check-in."})
        return attrs


class NightPriceSerializer(serializers.Serializer):
    date = serializers.DateField()
    price = serializers.DecimalField(max_digits=10, decimal_places=2)


class StayQuoteSerializer(serializers.Serializer):
    check_in = serializers.DateField()
    check_out = serializers.DateField()
    nights = serializers.IntegerField()
    nightly_prices = NightPriceSerializer(many=True)
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2)
    service_fee = serializers.DecimalField(max_digits=12, decimal_places=2)
    total = serializers.DecimalField(max_digits=12, decimal_places=2)
    available = serializers.BooleanField()
