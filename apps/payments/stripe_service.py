# apps/payments/stripe_service.py
"""
Stripe Checkout integration.

Thin wrapper over the Stripe SDK: every processor failure is logged and
re-raised as PaymentError so callers deal with one exception type.
"""

import logging

import stripe  # type: ignore
from django.conf import settings  # type: ignore

logger = logging.getLogger(__name__)


class PaymentError(Exception):
    """The payment processor rejected or failed a request."""


class PaymentConfigurationError(PaymentError):
    """Stripe keys are missing from the settings."""


def _configure() -> None:
    secret_key = getattr(settings, "STRIPE_SECRET_KEY", "")
    if not secret_key:
        raise PaymentConfigurationError("Stripe secret key is not configured.")
    stripe.api_key = secret_key
    api_version = getattr(settings, "STRIPE_API_VERSION", "")
    if api_version:
        stripe.api_version = api_version


def find_customer_id(email: str) -> str | None:
    """Id of an existing Stripe customer with this e-mail, if any."""
    _configure()
    try:
        customers = stripe.Customer.list(email=email, limit=1)
    except stripe.StripeError as e:
        logger.error(f"Stripe customer lookup failed for {email}: {e}")
        raise PaymentError(str(e)) from e
    if customers.data:
        return customers.data[0].id
    return None


def create_checkout_session(
    *,
    booking_id: int,
    user_id: int,
    email: str,
    title: str,
    amount,
    success_url: str,
    cancel_url: str,
    currency: str | None = None,
):
    """
    Create a one-off payment Checkout Session for a booking.

    Args:
        amount: Booking total in major units; Stripe receives it in cents
        currency: Defaults to STRIPE_CURRENCY

    Returns:
        The Stripe Session; ``url`` is where the guest is redirected
    """
    currency = (currency or getattr(settings, "STRIPE_CURRENCY", "usd")).lower()
    customer_id = find_customer_id(email)

    logger.info(f"Creating Stripe checkout session for booking {booking_id}, amount {amount} {currency}")

    params = {
        "line_items": [
            {
                "price_data": {
                    "currency": currency,
                    "product_data": {
                        "name": f"Booking: {title}",
                        "description": f"Booking reservation for {title}",
                    },
                    "unit_amount": int(round(float(amount) * 100)),
                },
                "quantity": 1,
            }
        ],
        "mode": "payment",
        "success_url": success_url,
        "cancel_url": cancel_url,
        "metadata": {"booking_id": str(booking_id), "user_id": str(user_id)},
    }
    if customer_id:
        params["customer"] = customer_id
    else:
        params["customer_email"] = email

    try:
        session = stripe.checkout.Session.create(**params)
    except stripe.StripeError as e:
        logger.error(f"Stripe checkout session creation failed for booking {booking_id}: {e}")
        raise PaymentError(str(e)) from e

    logger.info(f"Stripe checkout session {session.id} created for booking {booking_id}")
    return session


def retrieve_checkout_session(session_id: str):
    _configure()
    try:
        return stripe.checkout.Session.retrieve(session_id)
    except stripe.StripeError as e:
        logger.error(f"Stripe checkout session {session_id} could not be retrieved: {e}")
        raise PaymentError(str(e)) from e


def construct_event(payload: bytes, signature: str):
    """Verify a webhook signature and parse the event."""
    secret = getattr(settings, "STRIPE_WEBHOOK_SECRET", "")
    if not secret:
        raise PaymentConfigurationError("Stripe webhook secret is not configured.")
    try:
        return stripe.Webhook.construct_event(payload, signature, secret)
    except (ValueError, stripe.SignatureVerificationError) as e:
        logger.error(f"Stripe webhook rejected: {e}")
        raise PaymentError("Invalid webhook payload or signature.") from e
