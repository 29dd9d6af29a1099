"""Property API views."""

from __future__ import annotations

import logging

from django.db.models import Avg, Count, Q  # type: ignore
from django.shortcuts import get_object_or_404  # type: ignore
from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import generics, permissions, serializers, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser  # type: ignore
from rest_framework.response import Response  # type: ignore

from .filters import PropertyFilterSet
from .models import Property, PropertyAvailability, PropertyCategory
from .serializers import (
    PropertyAvailabilitySerializer,
    PropertyAvailabilityWriteSerializer,
    PropertyCategorySerializer,
    PropertyImageSerializer,
    PropertyImageUploadSerializer,
    PropertySerializer,
    PropertyWriteSerializer,
    StayQuoteSerializer,
    StayRangeSerializer,
)
from .services import check_availability, quote_stay, unavailable_property_ids

logger = logging.getLogger(__name__)


def property_queryset():
    return (
        Property.objects.select_related("host")
        .prefetch_related("images")
        .annotate(
            average_rating=Avg("reviews__rating"),
            review_count=Count("reviews", distinct=True),
        )
        .order_by("-created_at")
    )


class IsPropertyHost(permissions.BasePermission):
    """Only the host of a listing may change it."""

    def has_object_permission(self, request, view, obj: Property):  # type: ignore
        if request.method in permissions.SAFE_METHODS and view.action in {"retrieve", "check_availability", "quote"}:
            return True
        user = request.user
        if not user.is_authenticated:
            return False
        return obj.host_id == user.id or getattr(user, "is_staff", False)


class PropertyViewSet(viewsets.ModelViewSet):
    """Public listings plus host management of their own properties."""

    permission_classes = [permissions.IsAuthenticatedOrReadOnly, IsPropertyHost]
    filter_backends = [DjangoFilterBackend]
    filterset_class = PropertyFilterSet
    parser_classes = [JSONParser, MultiPartParser, FormParser]

    def get_permissions(self):  # type: ignore
        if self.action in {"list", "retrieve", "check_availability", "quote"}:
            return [permissions.AllowAny(), IsPropertyHost()]
        if self.action == "mine":
            return [permissions.IsAuthenticated()]
        return super().get_permissions()

    def get_queryset(self):  # type: ignore
        qs = property_queryset()
        user = self.request.user
        if self.action == "list":
            return qs.filter(is_active=True)
        if self.action in {"retrieve", "check_availability", "quote"}:
            if user.is_authenticated:
                return qs.filter(Q(is_active=True) | Q(host=user))
            return qs.filter(is_active=True)
        return qs

    def get_serializer_class(self):  # type: ignore
        if self.action in {"create", "update", "partial_update"}:
            return PropertyWriteSerializer
        return PropertySerializer

    def perform_create(self, serializer):  # type: ignore
        instance = serializer.save()
        logger.info(f"Property {instance.pk} created by host {instance.host_id}")

    def perform_destroy(self, instance):  # type: ignore
        for image in instance.images.all():
            image.image.delete(save=False)
        logger.info(f"Property {instance.pk} deleted by host {instance.host_id}")
        instance.delete()

    @action(detail=False, methods=["get"])
    def mine(self, request):  # type: ignore
        qs = property_queryset().filter(host=request.user)
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(PropertySerializer(page, many=True, context=self.get_serializer_context()).data)
        return Response(PropertySerializer(qs, many=True, context=self.get_serializer_context()).data)

    @action(detail=True, methods=["post"])
    def activate(self, request, pk=None):  # type: ignore
        property_obj = self.get_object()
        property_obj.activate()
        return Response(PropertySerializer(property_obj, context=self.get_serializer_context()).data)

    @action(detail=True, methods=["post"])
    def deactivate(self, request, pk=None):  # type: ignore
        property_obj = self.get_object()
        property_obj.deactivate()
        return Response(PropertySerializer(property_obj, context=self.get_serializer_context()).data)

    @action(detail=True, methods=["post"], url_path="images")
    def upload_images(self, request, pk=None):  # type: ignore
        property_obj = self.get_object()
        serializer = PropertyImageUploadSerializer(
            data={"images": request.FILES.getlist("images")},
            context={"property": property_obj, "request": request},
        )
        serializer.is_valid(raise_exception=True)
        created = serializer.save()
        logger.info(f"Uploaded {len(created)} image(s) to property {property_obj.pk}")
        data = PropertyImageSerializer(created, many=True, context=self.get_serializer_context()).data
        return Response(data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["delete"], url_path=r"images/(?P<image_id>\d+)")
    def delete_image(self, request, pk=None, image_id=None):  # type: ignore
        property_obj = self.get_object()
        image = get_object_or_404(property_obj.images, pk=image_id)
        image.image.delete(save=False)
        image.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["get", "post"], url_path="availability")
    def availability(self, request, pk=None):  # type: ignore
        property_obj = self.get_object()
        if request.method == "POST":
            serializer = PropertyAvailabilityWriteSerializer(data=request.data, context={"property": property_obj})
            serializer.is_valid(raise_exception=True)
            serializer.save()
            return Response(serializer.data, status=status.HTTP_200_OK)

        qs = property_obj.availability.all()
        start = request.query_params.get("start")
        end = request.query_params.get("end")
        if start:
            qs = qs.filter(date__gte=start)
        if end:
            qs = qs.filter(date__lt=end)
        return Response(PropertyAvailabilitySerializer(qs, many=True).data)

    @action(
        detail=True,
        methods=["delete"],
        url_path=r"availability/(?P<date>\d{4}-\d{2}-\d{2})",
    )
    def delete_availability(self, request, pk=None, date=None):  # type: ignore
        property_obj = self.get_object()
        entry = get_object_or_404(PropertyAvailability, property=property_obj, date=date)
        entry.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["get"], url_path="check-availability")
    def check_availability(self, request, pk=None):  # type: ignore
        property_obj = self.get_object()
        params = StayRangeSerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        available = check_availability(
            property_obj,
            params.validated_data["check_in"],
            params.validated_data["check_out"],
        )
        return Response({"available": available})

    @action(detail=True, methods=["get"])
    def quote(self, request, pk=None):  # type: ignore
        property_obj = self.get_object()
        params = StayRangeSerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        check_in = params.validated_data["check_in"]
        check_out = params.validated_data["check_out"]
        data = quote_stay(property_obj, check_in, check_out).as_dict()
        data["available"] = check_availability(property_obj, check_in, check_out)
        return Response(StayQuoteSerializer(data).data)


class SearchPropertiesView(generics.ListAPIView):
    """Search endpoint with filters and an optional availability window."""

    serializer_class = PropertySerializer
    permission_classes = [permissions.AllowAny]
    filter_backends = [DjangoFilterBackend]
    filterset_class = PropertyFilterSet

    def get_queryset(self):  # type: ignore
        qs = property_queryset().filter(is_active=True)

        check_in = self.request.query_params.get("check_in")
        check_out = self.request.query_params.get("check_out")
        if check_in and check_out:
            window = StayRangeSerializer(data={"check_in": check_in, "check_out": check_out})
            if not window.is_valid():
                raise serializers.ValidationError(window.errors)
            qs = qs.exclude(
                id__in=unavailable_property_ids(
                    window.validated_data["check_in"],
                    window.validated_data["check_out"],
                )
            )
        return qs


class PropertyCategoryListView(generics.ListAPIView):
    queryset = PropertyCategory.objects.all()
    serializer_class = PropertyCategorySerializer
    permission_classes = [permissions.AllowAny]
    pagination_class = None
