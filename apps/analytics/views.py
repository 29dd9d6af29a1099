"""API views for the guest and host dashboards."""

from __future__ import annotations

from rest_framework.permissions import IsAuthenticated  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from .services import guest_dashboard, host_dashboard


class GuestDashboardView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, format=None):  # type: ignore
        return Response(guest_dashboard(request.user))


class HostDashboardView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, format=None):  # type: ignore
        data = host_dashboard(request.user)
        data["total_revenue"] = str(data["total_revenue"])
        return Response(data)
