"""User API views."""

from __future__ import annotations

from rest_framework import generics, permissions  # type: ignore

from .serializers import UserSerializer


class MeView(generics.RetrieveUpdateAPIView):
    """Read and update the profile of the current user."""

    serializer_class = UserSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_object(self):  # type: ignore
        return self.request.user
