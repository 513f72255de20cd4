"""Message bus handlers turning booking events into notification tasks."""

from __future__ import annotations

import logging

from shared.application.message_bus import MessageBus, message_bus
from apps.bookings.domain.events import BookingCanceled, BookingConfirmed

from . import tasks

logger = logging.getLogger(__name__)


def on_booking_confirmed(event: BookingConfirmed) -> None:
    tasks.notify_booking_confirmed.delay(event.booking_id)


def on_booking_canceled(event: BookingCanceled) -> None:
    tasks.notify_booking_canceled.delay(event.booking_id)


def register_handlers(bus: MessageBus = message_bus) -> MessageBus:
    bus.register_event_handler(BookingConfirmed, on_booking_confirmed)
    bus.register_event_handler(BookingCanceled, on_booking_canceled)
    logger.debug("Notification handlers registered")
    return bus
