"""Celery tasks delivering booking notifications."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore

from apps.bookings.models import Booking

from . import services

logger = logging.getLogger(__name__)


@shared_task(name="notifications.notify_booking_confirmed")
def notify_booking_confirmed(booking_id: int) -> bool:
    """Confirmation e-mail to the client."""
    try:
        booking = Booking.objects.select_related("client", "service").get(id=booking_id)
    except Booking.DoesNotExist:
        logger.error(f"Booking {booking_id} not found for confirmation notification")
        return False

    sent = services.notify_booking_confirmed(booking)
    logger.info(f"[NOTIFICATION] Booking confirmed notification processed: {booking_id} (sent={sent})")
    return sent


@shared_task(name="notifications.notify_booking_canceled")
def notify_booking_canceled(booking_id: int) -> bool:
    """Cancellation e-mail to the client."""
    try:
        booking = Booking.objects.select_related("client", "service").get(id=booking_id)
    except Booking.DoesNotExist:
        logger.error(f"Booking {booking_id} not found for cancellation notification")
        return False

    sent = services.notify_booking_canceled(booking)
    logger.info(f"[NOTIFICATION] Booking canceled notification processed: {booking_id} (sent={sent})")
    return sent
