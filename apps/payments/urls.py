"""URL routing for checkout payments."""

from __future__ import annotations

from django.urls import path  # type: ignore

from .views import CreatePaymentView, VerifyPaymentView, stripe_webhook

urlpatterns = [
    path("create-payment/", CreatePaymentView.as_view(), name="create-payment"),
    path("verify-payment/", VerifyPaymentView.as_view(), name="verify-payment"),
    path("webhook/", stripe_webhook, name="stripe-webhook"),
]
