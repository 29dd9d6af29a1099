"""Admin registrations for the users domain."""

from __future__ import annotations

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.db.models import Count
from django.utils.translation import gettext_lazy as _

from .models import CustomUser, PasswordResetToken


@admin.register(CustomUser)
class CustomUserAdmin(BaseUserAdmin):
    fieldsets = (
        (None, {"fields": ("email", "password")}),
        (
            _("Profile"),
            {
                "fields": (
                    "full_name",
                    "username",
                    "phone",
                    "avatar",
                    "date_of_birth",
                    "preferred_language",
                )
            },
        ),
        (
            _("Security"),
            {"fields": ("failed_login_attempts", "locked_until")},
        ),
        (
            _("Permissions"),
            {"fields": ("is_active", "is_staff", "is_superuser", "groups", "user_permissions")},
        ),
        (_("Important dates"), {"fields": ("last_login", "date_joined", "created_at", "updated_at")}),
    )
    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": (
                    "email",
                    "password1",
                    "password2",
                    "full_name",
                    "phone",
                    "is_staff",
                    "is_superuser",
                ),
            },
        ),
    )
    list_display = (
        "email",
        "full_name",
        "phone",
        "is_active",
        "is_staff",
        "is_locked",
        "listing_count",
    )
    list_filter = ("is_active", "is_staff")
    search_fields = ("email", "phone", "full_name")
    ordering = ("email",)
    readonly_fields = ("created_at", "updated_at", "date_joined")

    def get_queryset(self, request):
        return super().get_queryset(request).annotate(listing_count=Count("properties"))

    @admin.display(description=_("Listings"), ordering="listing_count")
    def listing_count(self, obj):
        return obj.listing_count

    @admin.display(boolean=True, description=_("Locked"))
    def is_locked(self, obj):
        return obj.is_locked


@admin.register(PasswordResetToken)
class PasswordResetTokenAdmin(admin.ModelAdmin):
    list_display = ("user", "expires_at", "attempts_left", "is_used", "created_at")
    list_filter = ("is_used", "expires_at")
    search_fields = ("user__email", "user__phone")
