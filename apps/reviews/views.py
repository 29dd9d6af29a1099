"""API views for managing reviews."""

from __future__ import annotations

import logging

from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.exceptions import PermissionDenied  # type: ignore
from rest_framework.response import Response  # type: ignore

from .models import Review
from .serializers import HostReplySerializer, ReviewCreateSerializer, ReviewSerializer

logger = logging.getLogger(__name__)


class ReviewViewSet(
    mixins.CreateModelMixin,
    mixins.RetrieveModelMixin,
    mixins.ListModelMixin,
    viewsets.GenericViewSet,
):
    """Public review listing; guests write reviews and hosts reply to them."""

    queryset = Review.objects.select_related("property", "reviewer", "booking").order_by("-created_at")
    permission_classes = [permissions.IsAuthenticatedOrReadOnly]
    filterset_fields = ["property", "rating"]

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return ReviewCreateSerializer
        if self.action == "reply":
            return HostReplySerializer
        return ReviewSerializer

    def perform_create(self, serializer):  # type: ignore
        review = serializer.save()
        logger.info(f"Review {review.pk} created for booking {review.booking_id}")

    @action(detail=True, methods=["post"], permission_classes=[permissions.IsAuthenticated])
    def reply(self, request, pk=None):  # type: ignore
        review: Review = self.get_object()
        if review.property.host_id != request.user.id:
            raise PermissionDenied("Only the host of this property can reply to reviews.")

        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        review.reply(serializer.validated_data["host_reply"])
        return Response(ReviewSerializer(review, context=self.get_serializer_context()).data, status=status.HTTP_200_OK)
