"""Wires booking command handlers into the message bus."""

from __future__ import annotations

import structlog

from shared.application.message_bus import MessageBus, message_bus
from shared.domain.base import DomainEvent
from apps.scheduling.policy import BookingPolicy, CalendarPolicy
from apps.scheduling.services import SlotGridManager

from .application.command_handlers import (
    AdmitBookingCommand,
    AdmitBookingHandler,
    CancelBookingCommand,
    CancelBookingHandler,
    UpdateBookingStatusCommand,
    UpdateBookingStatusHandler,
)
from .domain.events import BookingCompleted, BookingMarkedNoShow

logger = structlog.get_logger(__name__)


def log_booking_event(event: DomainEvent) -> None:
    logger.info("booking_event", **event.to_dict())


def bootstrap(policy: BookingPolicy | None = None, bus: MessageBus = message_bus) -> MessageBus:
    """
    Register the booking handlers, all sharing one policy and slot grid.

    Safe to call again; tests do so to inject a different policy.
    """
    policy = policy or BookingPolicy.from_settings()
    calendar = CalendarPolicy()
    slots = SlotGridManager(calendar, policy)

    bus.register_command_handler(
        AdmitBookingCommand, AdmitBookingHandler(policy, calendar, slots).handle, replace=True
    )
    bus.register_command_handler(
        CancelBookingCommand, CancelBookingHandler(policy, slots).handle, replace=True
    )
    bus.register_command_handler(
        UpdateBookingStatusCommand, UpdateBookingStatusHandler(slots).handle, replace=True
    )

    for event_type in (BookingCompleted, BookingMarkedNoShow):
        bus.register_event_handler(event_type, log_booking_event)

    return bus
