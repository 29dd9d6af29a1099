"""Property domain models for StayBook.

Covers the listing itself, its photo gallery, the landing-page category
catalogue and the per-date availability calendar that hosts use to block
nights or override the nightly price.
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.validators import MaxValueValidator, MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from .storage import select_image_storage


class PropertyCategory(models.Model):
    """Category card shown on the landing page (Villas, Hotels, ...)."""

    name = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True)
    icon = models.CharField(
        max_length=100,
        blank=True,
        help_text=_("Icon identifier used by the frontend."),
    )
    color = models.CharField(max_length=32, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Property category")
        verbose_name_plural = _("Property categories")
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class Property(models.Model):
    """A place listed for nightly rental by its host."""

    class PropertyType(models.TextChoices):
        HOTEL = "hotel", _("Hotel")
        VILLA = "villa", _("Villa")
        BUNGALOW = "bungalow", _("Bungalow")
        ATTRACTION = "attraction", _("Attraction")
        APARTMENT = "apartment", _("Apartment")
        GUESTHOUSE = "guesthouse", _("Guesthouse")

    host = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="properties",
    )
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    property_type = models.CharField(max_length=20, choices=PropertyType.choices)
    location = models.CharField(max_length=255, help_text=_("City, region or area shown in search."))
    address = models.CharField(max_length=255, blank=True)
    latitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    longitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    price_per_night = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    max_guests = models.PositiveSmallIntegerField(default=1, validators=[MinValueValidator(1)])
    bedrooms = models.PositiveSmallIntegerField(default=1)
    bathrooms = models.PositiveSmallIntegerField(default=1)
    amenities = models.JSONField(default=list, blank=True, help_text=_("List of amenity names."))
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Property")
        verbose_name_plural = _("Properties")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["is_active", "-created_at"], name="property_active_created_idx"),
            models.Index(fields=["host", "is_active"], name="property_host_active_idx"),
        ]

    def __str__(self) -> str:
        return self.title

    def activate(self) -> None:
        if not self.is_active:
            self.is_active = True
            self.save(update_fields=["is_active", "updated_at"])

    def deactivate(self) -> None:
        if self.is_active:
            self.is_active = False
            self.save(update_fields=["is_active", "updated_at"])


class PropertyImage(models.Model):
    """Photo attached to a listing, stored in the property images bucket."""

    property = models.ForeignKey(Property, on_delete=models.CASCADE, related_name="images")
    image = models.ImageField(upload_to="property-images/", storage=select_image_storage)
    order = models.PositiveIntegerField(default=0)
    uploaded_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Property image")
        verbose_name_plural = _("Property images")
        ordering = ["order", "id"]

    def __str__(self) -> str:
        return f"{self.property.title} [{self.order}]"


class PropertyAvailability(models.Model):
    """Host override for a single night: blocked, or priced differently."""

    property = models.ForeignKey(
        Property,
        on_delete=models.CASCADE,
        related_name="availability",
    )
    date = models.DateField()
    is_available = models.BooleanField(default=True)
    price_override = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0.00")), MaxValueValidator(Decimal("99999999.99"))],
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Availability entry")
        verbose_name_plural = _("Availability entries")
        ordering = ["date"]
        constraints = [
            models.UniqueConstraint(fields=["property", "date"], name="availability_unique_property_date"),
        ]

    def __str__(self) -> str:
        state = "available" if self.is_available else "blocked"
        return f"{self.property.title}: {self.date} ({state})"
