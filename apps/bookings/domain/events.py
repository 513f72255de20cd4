"""
Booking Domain Events

Published after the transaction that produced them commits.
"""

from dataclasses import dataclass
from datetime import datetime

from shared.domain.base import DomainEvent


@dataclass
class BookingConfirmed(DomainEvent):
    """
    Event: An admission succeeded and the interval is now occupied

    Triggers:
    - Send booking confirmation to the client
    """
    booking_id: int
    client_id: int
    service_id: int
    start_time: datetime
    end_time: datetime


@dataclass
class BookingCanceled(DomainEvent):
    """
    Event: Booking was canceled by the client or an admin

    Triggers:
    - Notify the client
    """
    booking_id: int
    client_id: int
    start_time: datetime
    source: str
    reason: str = ''


@dataclass
class BookingCompleted(DomainEvent):
    """Event: The appointment took place"""
    booking_id: int


@dataclass
class BookingMarkedNoShow(DomainEvent):
    """Event: The client did not show up"""
    booking_id: int
