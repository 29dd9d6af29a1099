"""Stripe Checkout payments for bookings.

No models of its own: the session and payment intent ids are stored on the
booking.
"""
