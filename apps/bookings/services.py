"""Public booking API.

Entry points for callers such as an HTTP layer or a bot. Writes go
through the message bus; every rejection is a
``shared.domain.exceptions.BookingError`` subclass raised synchronously.
"""

from __future__ import annotations

from datetime import date, datetime

from shared.application.message_bus import message_bus
from shared.domain.exceptions import BookingNotFound, ClientNotFound
from apps.clients.models import Client
from apps.scheduling.services import DayAvailability, SlotGridManager

from .application.command_handlers import (
    AdmitBookingCommand,
    CancelBookingCommand,
    UpdateBookingStatusCommand,
)
from .models import Booking


def admit(
    client_id,
    service_id,
    requested_start: datetime,
    guest_name: str | None = None,
    guest_phone: str | None = None,
    *,
    now: datetime | None = None,
) -> Booking:
    return message_bus.handle_command(AdmitBookingCommand(
        client_id=client_id,
        service_id=service_id,
        requested_start=requested_start,
        guest_name=guest_name,
        guest_phone=guest_phone,
        now=now,
    ))


def cancel(
    booking_id,
    actor_client_id,
    is_admin: bool = False,
    reason: str | None = None,
    *,
    now: datetime | None = None,
) -> Booking:
    return message_bus.handle_command(CancelBookingCommand(
        booking_id=booking_id,
        actor_client_id=actor_client_id,
        is_admin=is_admin,
        reason=reason,
        now=now,
    ))


def update_status(booking_id, new_status: str) -> Booking:
    return message_bus.handle_command(UpdateBookingStatusCommand(
        booking_id=booking_id,
        new_status=new_status,
    ))


def get_booking(booking_id) -> Booking:
    try:
        return Booking.objects.select_related("client", "service").get(pk=booking_id)
    except (Booking.DoesNotExist, ValueError, TypeError):
        raise BookingNotFound(booking_id)


def get_available_slots(day: date) -> list[datetime]:
    return SlotGridManager().list_available(day)


def get_availability_range(start_date: date, end_date: date) -> list[DayAvailability]:
    return SlotGridManager().availability_range(start_date, end_date)


def _bookings_with_status(status=None):
    queryset = Booking.objects.select_related("client", "service").order_by("start_time", "pk")
    if status:
        queryset = queryset.filter(status=Booking.parse_status(status))
    return queryset


def list_bookings(status: str | None = None):
    """All bookings in start order, optionally only one status.

    Raises ValueError for an unknown status.
    """
    return _bookings_with_status(status)


def list_client_bookings(client_id, status: str | None = None):
    """
    A client's bookings in start order.

    Each item answers ``can_be_canceled_by_client()`` for the client-facing
    cancel action.
    """
    try:
        known = Client.objects.filter(pk=client_id).exists()
    except (ValueError, TypeError):
        known = False
    if not known:
        raise ClientNotFound(client_id)
    return _bookings_with_status(status).filter(client_id=client_id)
