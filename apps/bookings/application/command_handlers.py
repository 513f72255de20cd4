"""
Booking Command Handlers

These are the use cases for the booking domain.
They orchestrate domain operations within transactions.

Commands:
- AdmitBookingCommand: Turn a (service, start) request into a booking
- CancelBookingCommand: Cancel a booking as its client or as an admin
- UpdateBookingStatusCommand: Complete, mark no-show or cancel as admin
"""

from dataclasses import dataclass
from datetime import datetime
import logging

from django.db import IntegrityError, transaction
from django.utils import timezone

from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import (
    BookingNotFound,
    ClosedDay,
    InvalidStateTransition,
    NotBookingOwner,
    Overlap,
    SlotUnavailable,
    TooFarAhead,
    TooSoon,
)
from shared.domain.value_objects import TimeRange
from shared.infrastructure.locking import lock_queryset_if_possible
from apps.bookings.domain.events import BookingConfirmed
from apps.bookings.models import Booking
from apps.catalog.services import get_service_duration_and_cleanup
from apps.clients.services import resolve_client
from apps.scheduling.policy import BookingPolicy, CalendarPolicy, local_date
from apps.scheduling.services import SlotGridManager

logger = logging.getLogger(__name__)

ADMIN_STATUS_CANCEL_REASON = "Cancelled by admin"


# ===== Commands =====

@dataclass
class AdmitBookingCommand:
    """
    Command to book a service at a requested start time

    Either client_id or guest_phone must identify the client.
    """
    client_id: int | None
    service_id: int
    requested_start: datetime
    guest_name: str | None = None
    guest_phone: str | None = None
    now: datetime | None = None


@dataclass
class CancelBookingCommand:
    """Command to cancel a booking"""
    booking_id: int
    actor_client_id: int | None
    is_admin: bool = False
    reason: str | None = None
    now: datetime | None = None


@dataclass
class UpdateBookingStatusCommand:
    """Command to move a booking out of BOOKED"""
    booking_id: int
    new_status: str
    now: datetime | None = None


# ===== Helpers =====

def _aware(moment: datetime) -> datetime:
    """Naive datetimes are interpreted in the studio's timezone."""
    if timezone.is_naive(moment):
        return timezone.make_aware(moment)
    return moment


def _get_booking(booking_id, *, for_update: bool = False) -> Booking:
    queryset = Booking.objects.filter(pk=booking_id)
    if for_update:
        queryset = lock_queryset_if_possible(queryset)
    try:
        return queryset.get()
    except (Booking.DoesNotExist, ValueError, TypeError):
        raise BookingNotFound(booking_id)


def _lock_booking(booking_id, slots: SlotGridManager) -> Booking:
    """
    Lock a booking the same way admissions do: grid cells first, then the row.

    Every writer takes the interval's slot rows before any booking row.
    """
    snapshot = _get_booking(booking_id)
    slots.lock_interval(snapshot.start_time, snapshot.end_time)
    return _get_booking(booking_id, for_update=True)


# ===== Command Handlers =====

class AdmitBookingHandler:
    """
    Handler for AdmitBooking command

    Each step short-circuits with a rejection:
    1. Lead time (at least 2h ahead)
    2. Horizon (at most 90 days ahead)
    3. Working day
    4. Active service; end = start + duration + cleanup
    5. Slot grid pre-check on the exact start (fast path)
    6. Transaction: resolve client, lock the interval's grid cells,
       SELECT FOR UPDATE overlapping BOOKED bookings
    7. Insert booking and occupy the slot; a uniqueness violation here
       means a concurrent admission won and is reported as Overlap
    8. BookingConfirmed is published after commit
    """

    def __init__(
        self,
        policy: BookingPolicy | None = None,
        calendar: CalendarPolicy | None = None,
        slots: SlotGridManager | None = None,
    ):
        self.policy = policy or BookingPolicy.from_settings()
        self.calendar = calendar or CalendarPolicy()
        self.slots = slots or SlotGridManager(self.calendar, self.policy)

    def handle(self, command: AdmitBookingCommand) -> Booking:
        now = command.now or timezone.now()
        start = _aware(command.requested_start)

        logger.info(
            f"Admitting booking for client {command.client_id}, "
            f"service {command.service_id}, start {start.isoformat()}"
        )

        self._validate_booking_rules(start, now)

        day = local_date(start)
        if not self.calendar.is_open(day):
            raise ClosedDay(f"The studio is closed on {day:%A %d.%m.%Y}.")

        duration, cleanup = get_service_duration_and_cleanup(command.service_id)
        occupancy = TimeRange.from_duration(start, duration + cleanup)

        self.slots.ensure_materialized(day)
        if not self.slots.is_occupiable(start):
            raise SlotUnavailable()

        with DjangoUnitOfWork() as uow:
            client = resolve_client(command.client_id, command.guest_name, command.guest_phone)

            self.slots.lock_interval(occupancy.start, occupancy.end)
            self._ensure_interval_is_free(occupancy)

            try:
                with transaction.atomic():
                    booking = Booking.objects.create(
                        client=client,
                        service_id=command.service_id,
                        start_time=occupancy.start,
                        end_time=occupancy.end,
                        guest_name=(command.guest_name or "").strip(),
                        guest_phone=(command.guest_phone or "").strip(),
                    )
                    self.slots.occupy(start)
            except IntegrityError as exc:
                logger.warning(f"Concurrent admission detected for {occupancy}: {exc}")
                raise Overlap(
                    "Time slot was just booked by another client. Please select a different time."
                ) from exc

            booking.add_event(BookingConfirmed(
                aggregate_id=booking.pk,
                booking_id=booking.pk,
                client_id=client.pk,
                service_id=booking.service_id,
                start_time=booking.start_time,
                end_time=booking.end_time,
            ))
            uow.collect_events(booking)

        logger.info(f"Booking created successfully with id: {booking.pk} ({occupancy})")
        return booking

    def _validate_booking_rules(self, start: datetime, now: datetime) -> None:
        until = start - now
        if until < self.policy.min_lead_time:
            hours = self.policy.min_lead_time.total_seconds() / 3600
            raise TooSoon(f"Must book at least {hours:g} hours in advance.")
        if until > self.policy.max_advance:
            raise TooFarAhead(f"Cannot book more than {self.policy.max_advance.days} days in advance.")

    def _ensure_interval_is_free(self, occupancy: TimeRange) -> None:
        """Authoritative overlap check against BOOKED booking intervals."""
        overlapping = Booking.objects.filter(
            status=Booking.Status.BOOKED,
            start_time__lt=occupancy.end,
            end_time__gt=occupancy.start,
        )
        conflicts = list(lock_queryset_if_possible(overlapping))
        if conflicts:
            raise Overlap(
                f"Time slot already booked: {occupancy} overlaps "
                f"{len(conflicts)} existing booking(s)."
            )


class CancelBookingHandler:
    """Handler for cancelling a booking and releasing its slot"""

    def __init__(self, policy: BookingPolicy | None = None, slots: SlotGridManager | None = None):
        self.policy = policy or BookingPolicy.from_settings()
        self.slots = slots or SlotGridManager(policy=self.policy)

    def handle(self, command: CancelBookingCommand) -> Booking:
        logger.info(f"Canceling booking {command.booking_id}, admin: {command.is_admin}")
        now = command.now or timezone.now()

        with DjangoUnitOfWork() as uow:
            booking = _lock_booking(command.booking_id, self.slots)

            if not command.is_admin and booking.client_id != command.actor_client_id:
                raise NotBookingOwner()

            if command.is_admin:
                booking.cancel_by_admin(command.reason, now=now)
            else:
                booking.cancel_by_client(
                    command.reason,
                    now=now,
                    window=self.policy.client_cancellation_window,
                )

            booking.save(update_fields=[
                "status",
                "cancellation_source",
                "cancellation_reason",
                "cancelled_at",
                "updated_at",
            ])
            self.slots.release(booking.start_time)
            uow.collect_events(booking)

        logger.info(f"Booking canceled: {booking.pk} ({booking.cancellation_source})")
        return booking


class UpdateBookingStatusHandler:
    """Handler for admin status changes (COMPLETED, NO_SHOW, CANCELED)"""

    def __init__(self, slots: SlotGridManager | None = None):
        self.slots = slots or SlotGridManager()

    def handle(self, command: UpdateBookingStatusCommand) -> Booking:
        logger.info(f"Updating booking {command.booking_id} status to {command.new_status}")

        try:
            target = Booking.parse_status(command.new_status)
        except ValueError as exc:
            raise InvalidStateTransition(str(exc))

        with DjangoUnitOfWork() as uow:
            booking = _lock_booking(command.booking_id, self.slots)

            if target == Booking.Status.COMPLETED:
                booking.complete()
            elif target == Booking.Status.NO_SHOW:
                booking.mark_no_show()
            elif target == Booking.Status.CANCELED:
                booking.cancel_by_admin(ADMIN_STATUS_CANCEL_REASON, now=command.now)
            else:
                raise InvalidStateTransition(f"Cannot move booking back to {target}.")

            booking.save()
            if target == Booking.Status.CANCELED:
                self.slots.release(booking.start_time)
            uow.collect_events(booking)

        logger.info(f"Booking {booking.pk} is now {booking.status}")
        return booking
