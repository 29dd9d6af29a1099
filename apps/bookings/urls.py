"""URL routing for bookings: guest bookings, host requests and status changes."""

from __future__ import annotations

from rest_framework.routers import DefaultRouter  # type: ignore

from .views import BookingViewSet

router = DefaultRouter()
router.register(r"", BookingViewSet, basename="booking")

urlpatterns = router.urls
