"""Notification services for sending e-mails."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.conf import settings  # type: ignore
from django.core.mail import send_mail  # type: ignore
from django.template.loader import render_to_string  # type: ignore
from django.utils.html import strip_tags  # type: ignore

if TYPE_CHECKING:  # pragma: no cover
    from apps.bookings.models import Booking

logger = logging.getLogger(__name__)


# ============================================================================
# EMAIL NOTIFICATIONS
# ============================================================================

def send_email_notification(
    recipient_email: str,
    subject: str,
    template_name: str | None = None,
    context: dict | None = None,
    *,
    html_message: str | None = None,
) -> bool:
    """
    Send a single e-mail through Django's mail backend.

    Args:
        recipient_email: Recipient address
        subject: Subject line
        template_name: Django template to render as the HTML body (optional)
        context: Template context; ``message`` is used as the plain body
            when neither a template nor ``html_message`` is given
        html_message: Ready HTML body (optional)

    Returns:
        bool: True if the backend accepted the message
    """
    context = context or {}
    try:
        if html_message:
            text_message = strip_tags(html_message)
        elif template_name:
            html_message = render_to_string(template_name, context)
            text_message = strip_tags(html_message)
        else:
            text_message = context.get("message", "")
            html_message = None

        send_mail(
            subject=subject,
            message=text_message,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[recipient_email],
            html_message=html_message,
            fail_silently=False,
        )

        logger.info(f"Email sent successfully to {recipient_email}: {subject}")
        return True

    except Exception as e:
        logger.error(f"Failed to send email to {recipient_email}: {e}", exc_info=True)
        return False


def _booking_details(booking: "Booking") -> str:
    return f"""
        <ul>
            <li><strong>Property:</strong> {booking.property.title}</li>
            <li><strong>Location:</strong> {booking.property.location}</li>
            <li><strong>Check-in:</strong> {booking.check_in_date:%b %d, %Y}</li>
            <li><strong>Check-out:</strong> {booking.check_out_date:%b %d, %Y}</li>
            <li><strong>Guests:</strong> {booking.total_guests}</li>
            <li><strong>Total:</strong> {booking.total_cost}</li>
        </ul>
    """


def send_new_booking_request_email(booking: "Booking") -> bool:
    """Tell the host that a guest asked to book one of their listings."""
    host = booking.property.host
    html_message = f"""
    <html>
    <body>
        <h2>Hello, {host.display_name}!</h2>
        <p>{booking.guest.display_name} requested booking #{booking.pk}.</p>
        {_booking_details(booking)}
        <p>Accept or decline the request from your host dashboard.</p>
    </body>
    </html>
    """
    return send_email_notification(
        recipient_email=host.email,
        subject=f"New booking request for {booking.property.title}",
        html_message=html_message,
    )


def send_booking_confirmation_email(booking: "Booking") -> bool:
    html_message = f"""
    <html>
    <body>
        <h2>Hello, {booking.guest.display_name}!</h2>
        <p>Your booking #{booking.pk} is confirmed.</p>
        {_booking_details(booking)}
        <p>See you soon!</p>
    </body>
    </html>
    """
    return send_email_notification(
        recipient_email=booking.guest.email,
        subject=f"Booking #{booking.pk} confirmed",
        html_message=html_message,
    )


def send_booking_cancellation_email(booking: "Booking") -> bool:
    html_message = f"""
    <html>
    <body>
        <h2>Hello, {booking.guest.display_name}!</h2>
        <p>Your booking #{booking.pk} has been cancelled.</p>
        {_booking_details(booking)}
    </body>
    </html>
    """
    return send_email_notification(
        recipient_email=booking.guest.email,
        subject=f"Booking #{booking.pk} cancelled",
        html_message=html_message,
    )


def send_password_reset_email(email: str, code: str) -> bool:
    return send_email_notification(
        recipient_email=email,
        subject="Your StayBook password reset code",
        context={
            "message": (
                f"Your password reset code is {code}. "
                "It is valid for 15 minutes. If you did not ask for it, ignore this e-mail."
            )
        },
    )
