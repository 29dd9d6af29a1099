"""Admin registration for reviews."""

from __future__ import annotations

from django.contrib import admin  # type: ignore

from .models import Review


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ("property", "reviewer", "rating", "created_at", "host_reply_at")
    list_filter = ("rating",)
    search_fields = ("property__title", "reviewer__email", "comment")
    readonly_fields = ("created_at", "updated_at", "host_reply_at")
