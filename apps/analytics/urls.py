"""URL routing for analytics endpoints."""

from django.urls import path  # type: ignore

from .views import GuestDashboardView, HostDashboardView


urlpatterns = [
    # Do not prefix with 'analytics/' here; the prefix is defined in config.urls
    path('guest/', GuestDashboardView.as_view(), name='analytics-guest'),
    path('host/', HostDashboardView.as_view(), name='analytics-host'),
]
