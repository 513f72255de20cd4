"""Calendar policy and booking rules.

``BookingPolicy`` holds the temporal business rules as an immutable object
built from the ``BOOKING_POLICY`` setting, so handlers receive their rules
explicitly instead of reading module globals. ``CalendarPolicy`` answers
"is the studio open on this date, and when".
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from django.conf import settings  # type: ignore
from django.utils import timezone  # type: ignore

from .models import WorkingDay


@dataclass(frozen=True)
class BookingPolicy:
    min_lead_time: timedelta = timedelta(hours=2)
    max_advance: timedelta = timedelta(days=90)
    client_cancellation_window: timedelta = timedelta(hours=12)
    slot_length: timedelta = timedelta(minutes=30)
    pregenerate_days: int = 90

    def __post_init__(self):
        if self.slot_length <= timedelta(0):
            raise ValueError("Slot length must be positive")
        if self.min_lead_time > self.max_advance:
            raise ValueError("Minimum lead time cannot exceed the booking horizon")

    @classmethod
    def from_settings(cls) -> "BookingPolicy":
        conf = getattr(settings, "BOOKING_POLICY", {})
        defaults = cls()
        return cls(
            min_lead_time=timedelta(
                hours=conf.get("MIN_LEAD_TIME_HOURS", defaults.min_lead_time / timedelta(hours=1))
            ),
            max_advance=timedelta(
                days=conf.get("MAX_ADVANCE_DAYS", defaults.max_advance.days)
            ),
            client_cancellation_window=timedelta(
                hours=conf.get(
                    "CLIENT_CANCELLATION_HOURS",
                    defaults.client_cancellation_window / timedelta(hours=1),
                )
            ),
            slot_length=timedelta(
                minutes=conf.get("SLOT_MINUTES", defaults.slot_length / timedelta(minutes=1))
            ),
            pregenerate_days=conf.get("PREGENERATE_DAYS", defaults.pregenerate_days),
        )


class CalendarPolicy:
    """Reads WorkingDay rows. A weekday without a row is closed."""

    def working_day(self, day: date) -> WorkingDay | None:
        return WorkingDay.objects.filter(day_of_week=day.isoweekday()).first()

    def is_open(self, day: date) -> bool:
        working_day = self.working_day(day)
        return bool(working_day and working_day.is_active)

    def operating_window(self, day: date) -> tuple[time, time] | None:
        working_day = self.working_day(day)
        if working_day is None or not working_day.is_active:
            return None
        return working_day.open_time, working_day.close_time

    def within_hours(self, moment: datetime) -> bool:
        """True if ``moment`` starts inside the day's operating window."""
        local = timezone.localtime(moment) if timezone.is_aware(moment) else moment
        window = self.operating_window(local.date())
        if window is None:
            return False
        open_time, close_time = window
        return open_time <= local.time() < close_time


def local_datetime(day: date, at: time) -> datetime:
    """Combine a studio-local date and time into an aware datetime."""
    return timezone.make_aware(datetime.combine(day, at))


def local_date(moment: datetime) -> date:
    return timezone.localtime(moment).date() if timezone.is_aware(moment) else moment.date()
