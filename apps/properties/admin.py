"""Admin registrations for properties domain."""

from __future__ import annotations

from django.contrib import admin  # type: ignore

from .models import Property, PropertyAvailability, PropertyCategory, PropertyImage


class PropertyImageInline(admin.TabularInline):
    model = PropertyImage
    extra = 0
    fields = ("image", "order")


class PropertyAvailabilityInline(admin.TabularInline):
    model = PropertyAvailability
    extra = 0
    fields = ("date", "is_available", "price_override")


@admin.register(Property)
class PropertyAdmin(admin.ModelAdmin):
    list_display = (
        "title",
        "location",
        "property_type",
        "price_per_night",
        "max_guests",
        "is_active",
        "host",
    )
    list_filter = ("is_active", "property_type")
    search_fields = ("title", "location", "host__email")
    inlines = (PropertyImageInline, PropertyAvailabilityInline)
    readonly_fields = ("created_at", "updated_at")


@admin.register(PropertyCategory)
class PropertyCategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "icon", "color")
    search_fields = ("name",)


@admin.register(PropertyAvailability)
class PropertyAvailabilityAdmin(admin.ModelAdmin):
    list_display = ("property", "date", "is_available", "price_override")
    list_filter = ("is_available",)
    search_fields = ("property__title",)
