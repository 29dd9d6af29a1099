"""FilterSet definitions for properties search and listing."""

from __future__ import annotations

import django_filters  # type: ignore
from django.db.models import Q  # type: ignore

from .models import Property


def parse_amenities(value) -> list[str]:
    return [item.strip().lower() for item in str(value).split(",") if item.strip()]


class PropertyFilterSet(django_filters.FilterSet):
    """FilterSet for Property with the filters used by list and search."""

    q = django_filters.CharFilter(method="filter_q")
    location = django_filters.CharFilter(field_name="location", lookup_expr="icontains")
    property_type = django_filters.ChoiceFilter(choices=Property.PropertyType.choices)
    min_price = django_filters.NumberFilter(field_name="price_per_night", lookup_expr="gte")
    max_price = django_filters.NumberFilter(field_name="price_per_night", lookup_expr="lte")
    guests = django_filters.NumberFilter(field_name="max_guests", lookup_expr="gte")

    # CSV of amenity names, requires all selected amenities
    amenities = django_filters.CharFilter(method="filter_amenities")

    class Meta:
        model = Property
        fields = ["location", "property_type"]

    def filter_q(self, queryset, name, value):  # type: ignore
        value = value.strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(title__icontains=value) | Q(description__icontains=value) | Q(location__icontains=value)
        )

    def filter_amenities(self, queryset, name, value):  # type: ignore
        wanted = set(parse_amenities(value))
        if not wanted:
            return queryset
        # JSON containment lookups are not portable across backends
        matching_ids = [
            pk
            for pk, amenities in queryset.values_list("pk", "amenities")
            if wanted <= {str(a).strip().lower() for a in (amenities or [])}
        ]
        return queryset.filter(pk__in=matching_ids)
