"""Notification services for booking e-mails."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.conf import settings  # type: ignore
from django.core.mail import send_mail  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.html import escape, strip_tags  # type: ignore

if TYPE_CHECKING:  # pragma: no cover
    from apps.bookings.models import Booking

logger = logging.getLogger(__name__)

DATE_FORMAT = "%d/%m/%Y at %H:%M"


# ============================================================================
# EMAIL NOTIFICATIONS
# ============================================================================

def send_email_notification(
    recipient_email: str,
    subject: str,
    context: dict,
    *,
    html_message: str | None = None,
) -> bool:
    """
    Send one e-mail and report whether it went out.

    Delivery errors are logged and swallowed: a notification never changes
    the outcome of the booking decision that triggered it.
    """
    if not recipient_email:
        logger.warning(f"No recipient e-mail - skipping notification: {subject}")
        return False

    try:
        if html_message:
            text_message = strip_tags(html_message)
        else:
            text_message = context.get("message", "")

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


def _html_safe(context: dict) -> dict:
    return {key: escape(value) for key, value in context.items()}


def _booking_context(booking: "Booking") -> dict:
    return {
        "client_name": booking.guest_name or booking.client.name,
        "service_name": booking.service.name,
        "start_time": timezone.localtime(booking.start_time).strftime(DATE_FORMAT),
        "studio_name": settings.STUDIO_NAME,
    }


def notify_booking_confirmed(booking: "Booking") -> bool:
    """Booking confirmation to the client."""
    context = _booking_context(booking)
    subject = f"Booking Confirmed - {context['studio_name']}"
    safe = _html_safe(context)

    html_message = f"""
    <html>
    <body>
        <p>Hello {safe['client_name']},</p>
        <p>Your booking has been confirmed!</p>
        <ul>
            <li><strong>Service:</strong> {safe['service_name']}</li>
            <li><strong>Date &amp; Time:</strong> {safe['start_time']}</li>
        </ul>
        <p>Please remember:</p>
        <ul>
            <li>You can cancel up to 12 hours before your appointment</li>
            <li>Arrive 5 minutes early</li>
        </ul>
        <p>See you soon!<br>The {safe['studio_name']} Team</p>
    </body>
    </html>
    """

    return send_email_notification(
        recipient_email=booking.client.email,
        subject=subject,
        context=context,
        html_message=html_message,
    )


def notify_booking_canceled(booking: "Booking") -> bool:
    """Cancellation notice to the client."""
    context = _booking_context(booking)
    context["reason"] = booking.cancellation_reason
    subject = f"Booking Cancelled - {context['studio_name']}"
    safe = _html_safe(context)

    reason_line = f"<p><strong>Reason:</strong> {safe['reason']}</p>" if context["reason"] else ""
    html_message = f"""
    <html>
    <body>
        <p>Hello {safe['client_name']},</p>
        <p>Your booking has been cancelled.</p>
        <ul>
            <li><strong>Service:</strong> {safe['service_name']}</li>
            <li><strong>Date &amp; Time:</strong> {safe['start_time']}</li>
        </ul>
        {reason_line}
        <p>Feel free to book a new appointment anytime.</p>
        <p>The {safe['studio_name']} Team</p>
    </body>
    </html>
    """

    return send_email_notification(
        recipient_email=booking.client.email,
        subject=subject,
        context=context,
        html_message=html_message,
    )
