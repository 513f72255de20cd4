"""Slot grid services.

The slot grid is a coordination aid: admissions consult it as a fast
pre-check and lock its rows to serialize overlapping requests, but the
authoritative overlap check runs against booking intervals.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from django.db import transaction  # type: ignore
from django.utils import timezone  # type: ignore

from shared.domain.exceptions import SlotNotFound, SlotUnavailable
from shared.infrastructure.locking import lock_queryset_if_possible

from .models import TimeSlot
from .policy import BookingPolicy, CalendarPolicy, local_date, local_datetime

logger = logging.getLogger(__name__)


@dataclass
class DayAvailability:
    date: date
    is_working_day: bool
    available_slots: list[datetime] = field(default_factory=list)


def _format(moment: datetime) -> str:
    return timezone.localtime(moment).strftime("%d.%m.%Y %H:%M")


class SlotGridManager:
    """Materializes grid cells and performs slot state transitions."""

    def __init__(self, calendar: CalendarPolicy | None = None, policy: BookingPolicy | None = None):
        self.calendar = calendar or CalendarPolicy()
        self.policy = policy or BookingPolicy.from_settings()

    # ------------------------------------------------------------------
    # Grid geometry
    # ------------------------------------------------------------------

    def grid_ticks(self, day: date) -> list[datetime]:
        """Every tick in [open_time, close_time) for an open day."""
        window = self.calendar.operating_window(day)
        if window is None:
            return []
        open_time, close_time = window
        current = local_datetime(day, open_time)
        closing = local_datetime(day, close_time)
        ticks = []
        while current < closing:
            ticks.append(current)
            current += self.policy.slot_length
        return ticks

    def grid_floor(self, moment: datetime) -> datetime:
        """The latest grid tick at or before ``moment`` (``moment`` itself off-grid)."""
        earlier = [tick for tick in self.grid_ticks(local_date(moment)) if tick <= moment]
        return earlier[-1] if earlier else moment

    @staticmethod
    def _slot_for(moment: datetime) -> TimeSlot:
        local = timezone.localtime(moment)
        return TimeSlot(slot_date=local.date(), slot_time=local.time(), slot_datetime=moment)

    # ------------------------------------------------------------------
    # Materialization
    # ------------------------------------------------------------------

    def materialize_slots(self, day: date) -> int:
        """
        Create the missing grid cells for ``day`` in one batch.

        Cells that already exist are skipped by the database uniqueness
        constraint (ignore_conflicts), so concurrent or repeated calls
        converge on the same slot set. Returns the number of slots the day
        has afterwards.
        """
        ticks = self.grid_ticks(day)
        if not ticks:
            logger.debug("Skipping slot generation for closed day %s", day)
            return 0

        TimeSlot.objects.bulk_create(
            [self._slot_for(tick) for tick in ticks],
            ignore_conflicts=True,
        )
        total = TimeSlot.objects.filter(slot_date=day).count()
        logger.info("Generated slots for date %s (%d total)", day, total)
        return total

    def ensure_materialized(self, day: date) -> None:
        # On-demand slots (off-grid starts, early blocks) do not count as a materialized day
        ticks = self.grid_ticks(day)
        if ticks and TimeSlot.objects.filter(slot_datetime__in=ticks).count() < len(ticks):
            self.materialize_slots(day)

    def materialize_horizon(self, start: date | None = None, days: int | None = None) -> int:
        """Pre-generate slots for every open date of the rolling horizon."""
        start = start or timezone.localdate()
        days = self.policy.pregenerate_days if days is None else days
        processed = 0
        for offset in range(days + 1):
            day = start + timedelta(days=offset)
            if self.calendar.is_open(day):
                self.materialize_slots(day)
                processed += 1
        logger.info("Slot horizon generated from %s for %d days (%d open dates)", start, days, processed)
        return processed

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_available(self, day: date) -> list[datetime]:
        """Free, unblocked slot datetimes of ``day``; empty for closed days."""
        if not self.calendar.is_open(day):
            return []
        self.ensure_materialized(day)
        return list(
            TimeSlot.objects.filter(slot_date=day, is_available=True, is_blocked=False)
            .order_by("slot_datetime")
            .values_list("slot_datetime", flat=True)
        )

    def availability_range(self, start_date: date, end_date: date) -> list[DayAvailability]:
        if start_date > end_date:
            raise ValueError("Start date must not be after end date")

        availability = []
        current = start_date
        while current <= end_date:
            is_working = self.calendar.is_open(current)
            availability.append(
                DayAvailability(
                    date=current,
                    is_working_day=is_working,
                    available_slots=self.list_available(current) if is_working else [],
                )
            )
            current += timedelta(days=1)
        return availability

    def is_occupiable(self, moment: datetime) -> bool:
        """
        Fast availability check for an exact start.

        Closed days and starts outside the operating window are never
        occupiable. A slot that has not been materialized yet counts as free,
        it is created on demand when occupied.
        """
        if not self.calendar.within_hours(moment):
            return False
        slot = TimeSlot.objects.filter(slot_datetime=moment).first()
        return slot is None or slot.is_occupiable

    # ------------------------------------------------------------------
    # Locking and state transitions
    # ------------------------------------------------------------------

    def lock_interval(self, start: datetime, end: datetime) -> list[TimeSlot]:
        """
        Row-lock the grid cells from the tick at or before ``start`` up to ``end``.

        Two overlapping intervals always share the cell at the floor of the
        later start, so overlapping admissions queue on that row while
        disjoint ones proceed in parallel. Rows are locked in time order.
        """
        queryset = TimeSlot.objects.filter(
            slot_datetime__gte=self.grid_floor(start),
            slot_datetime__lt=end,
        ).order_by("slot_datetime")
        return list(lock_queryset_if_possible(queryset))

    def _get_locked(self, moment: datetime) -> TimeSlot | None:
        return lock_queryset_if_possible(TimeSlot.objects.filter(slot_datetime=moment)).first()

    @transaction.atomic
    def occupy(self, moment: datetime) -> TimeSlot:
        """
        Mark the slot at ``moment`` as booked, creating it if needed.

        Raises SlotUnavailable for a booked or blocked slot. Creating a slot
        that a concurrent transaction just inserted raises IntegrityError.
        """
        slot = self._get_locked(moment) or self._slot_for(moment)
        if not slot.is_occupiable:
            raise SlotUnavailable(f"Time slot {_format(moment)} is not available.")

        slot.book()
        slot.save()
        logger.info("Booked time slot: %s", moment.isoformat())
        return slot

    @transaction.atomic
    def release(self, moment: datetime) -> TimeSlot:
        slot = self._get_locked(moment)
        if slot is None:
            raise SlotNotFound(message=f"Time slot not found: {_format(moment)}")

        slot.release()
        slot.save(update_fields=["is_available", "updated_at"])
        logger.info("Released time slot: %s (available=%s)", moment.isoformat(), slot.is_available)
        return slot

    @transaction.atomic
    def block(self, moment: datetime, reason: str = "") -> TimeSlot:
        slot = self._get_locked(moment) or self._slot_for(moment)
        slot.block(reason)
        slot.save()
        logger.info("Blocked time slot: %s - Reason: %s", moment.isoformat(), reason)
        return slot

    @transaction.atomic
    def unblock(self, moment: datetime) -> TimeSlot:
        slot = self._get_locked(moment)
        if slot is None:
            raise SlotNotFound(message=f"Time slot not found: {_format(moment)}")

        slot.unblock()
        slot.save(update_fields=["is_available", "is_blocked", "block_reason", "updated_at"])
        logger.info("Unblocked time slot: %s", moment.isoformat())
        return slot
