"""Anonymous endpoints that issue JWT pairs or drive the password reset."""

from __future__ import annotations

import logging

from django.utils.decorators import method_decorator  # type: ignore
from django_ratelimit.decorators import ratelimit  # type: ignore
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken  # type: ignore

from .auth_serializers import (
    LoginSerializer,
    PasswordResetConfirmSerializer,
    PasswordResetRequestSerializer,
    RegisterSerializer,
)
from .serializers import UserSerializer

logger = logging.getLogger(__name__)


class PublicAuthView(APIView):
    """Base for endpoints reachable without credentials."""

    permission_classes = [AllowAny]
    authentication_classes: list = []
    serializer_class = None

    def get_valid_serializer(self, request):  # type: ignore
        serializer = self.serializer_class(data=request.data)
        serializer.is_valid(raise_exception=True)
        return serializer

    @staticmethod
    def session_payload(user) -> dict:
        refresh = RefreshToken.for_user(user)
        return {
            "user": UserSerializer(user).data,
            "tokens": {"refresh": str(refresh), "access": str(refresh.access_token)},
        }


class RegisterView(PublicAuthView):
    serializer_class = RegisterSerializer

    def post(self, request):  # type: ignore
        user = self.get_valid_serializer(request).save()
        return Response(self.session_payload(user), status=status.HTTP_201_CREATED)


@method_decorator(ratelimit(key="ip", rate="20/m", method="POST"), name="post")
class LoginView(PublicAuthView):
    serializer_class = LoginSerializer

    def post(self, request):  # type: ignore
        user = self.get_valid_serializer(request).validated_data["user"]
        logger.info(f"User {user.pk} logged in")
        return Response(self.session_payload(user), status=status.HTTP_200_OK)


@method_decorator(ratelimit(key="ip", rate="5/m", method="POST"), name="post")
class PasswordResetRequestView(PublicAuthView):
    serializer_class = PasswordResetRequestSerializer

    def post(self, request):  # type: ignore
        serializer = self.get_valid_serializer(request)
        # Unknown identifiers get the same answer so accounts cannot be probed
        if serializer.validated_data["user"] is not None:
            serializer.save()
        return Response(
            {"detail": "If the account exists, a reset code has been sent."},
            status=status.HTTP_202_ACCEPTED,
        )


@method_decorator(ratelimit(key="ip", rate="10/m", method="POST"), name="post")
class PasswordResetConfirmView(PublicAuthView):
    serializer_class = PasswordResetConfirmSerializer

    def post(self, request):  # type: ignore
        self.get_valid_serializer(request).save()
        return Response({"detail": "Password updated."}, status=status.HTTP_200_OK)
