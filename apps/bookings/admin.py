"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin  # type: ignore

from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "property",
        "guest",
        "status",
        "payment_status",
        "check_in_date",
        "check_out_date",
        "total_cost",
        "created_at",
    )
    list_filter = ("status", "payment_status", "check_in_date")
    search_fields = ("property__title", "guest__email", "payment_session_id")
    readonly_fields = (
        "total_cost",
        "payment_session_id",
        "payment_intent_id",
        "created_at",
        "updated_at",
    )
