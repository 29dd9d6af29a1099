"""API views for the booking domain."""

from __future__ import annotations

from rest_framework import mixins, permissions, serializers, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.exceptions import PermissionDenied  # type: ignore
from rest_framework.response import Response  # type: ignore

from .models import Booking
from .serializers import BookingCreateSerializer, BookingSerializer, BookingStatusSerializer
from .services import InvalidTransitionError, actor_for, update_status


class IsBookingStakeholder(permissions.BasePermission):
    """Only the guest and the host of the booked property see a booking."""

    def has_object_permission(self, request, view, obj: Booking):  # type: ignore
        user = request.user
        if not user.is_authenticated:
            return False
        if getattr(user, "is_staff", False):
            return True
        return obj.guest_id == user.id or obj.property.host_id == user.id


class BookingViewSet(
    mixins.CreateModelMixin,
    mixins.RetrieveModelMixin,
    mixins.ListModelMixin,
    viewsets.GenericViewSet,
):
    """Guests create and list their bookings; hosts review requests on their listings."""

    queryset = Booking.objects.select_related("property", "property__host", "guest").prefetch_related(
        "property__images"
    )
    permission_classes = [permissions.IsAuthenticated, IsBookingStakeholder]
    filterset_fields = ["status"]

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return BookingCreateSerializer
        if self.action == "set_status":
            return BookingStatusSerializer
        return BookingSerializer

    def get_queryset(self):  # type: ignore
        user = self.request.user
        qs = super().get_queryset().order_by("-created_at")
        if self.action == "list":
            return qs.filter(guest=user)
        if self.action == "hosting":
            return qs.filter(property__host=user)
        return qs

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = serializer.save()
        read_serializer = BookingSerializer(booking, context=self.get_serializer_context())
        headers = self.get_success_headers(read_serializer.data)
        return Response(read_serializer.data, status=status.HTTP_201_CREATED, headers=headers)

    @action(detail=False, methods=["get"], filterset_fields=["status", "property"])
    def hosting(self, request):  # type: ignore
        qs = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(BookingSerializer(page, many=True, context=self.get_serializer_context()).data)
        return Response(BookingSerializer(qs, many=True, context=self.get_serializer_context()).data)

    @action(detail=True, methods=["post"], url_path="status")
    def set_status(self, request, pk=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        if actor_for(booking, request.user) is None:
            raise PermissionDenied("You are not allowed to change this booking.")

        try:
            booking = update_status(booking, serializer.validated_data["status"], user=request.user)
        except InvalidTransitionError as exc:
            raise serializers.ValidationError({"non_field_errors": [str(exc)]})
        return Response(BookingSerializer(booking, context=self.get_serializer_context()).data)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        try:
            booking = update_status(booking, Booking.Status.CANCELLED, user=request.user)
        except InvalidTransitionError as exc:
            raise serializers.ValidationError({"non_field_errors": [str(exc)]})
        return Response(BookingSerializer(booking, context=self.get_serializer_context()).data)
