"""URL routing for the properties domain."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import PropertyCategoryListView, PropertyViewSet, SearchPropertiesView

router = DefaultRouter()
router.register(r"", PropertyViewSet, basename="property")

urlpatterns = [
    # Explicit paths go first so the router's detail route does not shadow them
    path("search/", SearchPropertiesView.as_view(), name="property-search"),
    path("categories/", PropertyCategoryListView.as_view(), name="property-category-list"),
    path("", include(router.urls)),
]
