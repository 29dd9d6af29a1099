"""Payment endpoints: create a checkout session, verify it, receive Stripe webhooks."""

from __future__ import annotations

import logging

from django.http import JsonResponse  # type: ignore
from django.views.decorators.csrf import csrf_exempt  # type: ignore
from django.views.decorators.http import require_POST  # type: ignore
from django_ratelimit.decorators import ratelimit  # type: ignore
from rest_framework import status  # type: ignore
from rest_framework.permissions import IsAuthenticated  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from apps.bookings.domain.transitions import InvalidTransitionError
from apps.bookings.models import Booking

from .serializers import CreatePaymentSerializer, VerifyPaymentSerializer
from .services import (
    BookingNotFoundError,
    BookingPaymentError,
    handle_webhook_event,
    resolve_origin,
    start_checkout,
    verify_checkout,
)
from .stripe_service import PaymentConfigurationError, PaymentError, construct_event

logger = logging.getLogger(__name__)


def _error(message: str, code: int) -> Response:
    return Response({"detail": message}, status=code)


class CreatePaymentView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, *args, **kwargs):  # type: ignore
        serializer = CreatePaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking_id = serializer.validated_data["booking_id"]

        try:
            booking = Booking.objects.select_related("property").get(pk=booking_id, guest=request.user)
        except Booking.DoesNotExist:
            return _error("Booking not found.", status.HTTP_404_NOT_FOUND)

        try:
            url = start_checkout(booking, user=request.user, origin=resolve_origin(request))
        except BookingPaymentError as e:
            return _error(str(e), status.HTTP_400_BAD_REQUEST)
        except PaymentConfigurationError as e:
            logger.error(f"Payment configuration error for booking {booking.pk}: {e}")
            return _error("Payments are not configured.", status.HTTP_503_SERVICE_UNAVAILABLE)
        except PaymentError as e:
            return _error(f"Payment processor error: {e}", status.HTTP_502_BAD_GATEWAY)

        return Response({"url": url}, status=status.HTTP_200_OK)


class VerifyPaymentView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, *args, **kwargs):  # type: ignore
        serializer = VerifyPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            result = verify_checkout(
                serializer.validated_data["session_id"],
                serializer.validated_data["booking_id"],
                user=request.user,
            )
        except BookingNotFoundError as e:
            return _error(str(e), status.HTTP_404_NOT_FOUND)
        except BookingPaymentError as e:
            return _error(str(e), status.HTTP_400_BAD_REQUEST)
        except InvalidTransitionError as e:
            return _error(str(e), status.HTTP_409_CONFLICT)
        except PaymentConfigurationError as e:
            logger.error(f"Payment configuration error while verifying: {e}")
            return _error("Payments are not configured.", status.HTTP_503_SERVICE_UNAVAILABLE)
        except PaymentError as e:
            return _error(f"Payment processor error: {e}", status.HTTP_502_BAD_GATEWAY)

        return Response(result, status=status.HTTP_200_OK)


@csrf_exempt
@require_POST
@ratelimit(key="ip", rate="120/m", method="POST", block=True)
def stripe_webhook(request):
    """Receive Stripe checkout events; the signature header is mandatory."""

    signature = request.headers.get("Stripe-Signature", "")
    try:
        event = construct_event(request.body, signature)
    except PaymentConfigurationError as e:
        logger.error(f"Stripe webhook received but not configured: {e}")
        return JsonResponse({"detail": "Webhook is not configured."}, status=503)
    except PaymentError as e:
        return JsonResponse({"detail": str(e)}, status=400)

    booking = handle_webhook_event(event)
    if booking is not None:
        logger.info(f"Stripe webhook applied to booking {booking.pk}: {booking.status}")
    return JsonResponse({"received": True})
