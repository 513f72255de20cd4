"""Booking model and its status state machine."""

from __future__ import annotations

from datetime import datetime, timedelta

from django.core.exceptions import ValidationError  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.base import EventRecorderMixin
from shared.domain.exceptions import InvalidStateTransition, ReasonRequired, WithinCancellationWindow
from shared.domain.value_objects import TimeRange

DEFAULT_CANCELLATION_WINDOW = timedelta(hours=12)


class Booking(EventRecorderMixin, models.Model):
    """
    An appointment occupying [start_time, end_time) for one client.

    end_time includes the service's cleanup buffer. Only BOOKED bookings
    occupy their interval; every other status is terminal.

    State transitions:
    - BOOKED -> CANCELED (client, at least 12h ahead; admin, any time with a reason)
    - BOOKED -> COMPLETED
    - BOOKED -> NO_SHOW
    """

    class Status(models.TextChoices):
        BOOKED = "booked", _("Booked")
        CANCELED = "canceled", _("Canceled")
        COMPLETED = "completed", _("Completed")
        NO_SHOW = "no_show", _("No show")

    class CancellationSource(models.TextChoices):
        CLIENT = "client", _("Client")
        ADMIN = "admin", _("Admin")

    client = models.ForeignKey(
        "clients.Client",
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    service = models.ForeignKey(
        "catalog.MassageService",
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    start_time = models.DateTimeField()
    end_time = models.DateTimeField(
        help_text=_("Start plus service duration plus cleanup time."),
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.BOOKED,
    )
    guest_name = models.CharField(max_length=100, blank=True)
    guest_phone = models.CharField(max_length=20, blank=True)
    cancellation_source = models.CharField(
        max_length=20,
        choices=CancellationSource.choices,
        blank=True,
    )
    cancellation_reason = models.CharField(max_length=255, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["start_time"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_time__gt=models.F("start_time")),
                name="booking_valid_interval",
            ),
            models.UniqueConstraint(
                fields=["start_time"],
                condition=models.Q(status="booked"),
                name="booking_unique_booked_start",
            ),
        ]
        indexes = [
            models.Index(fields=["status", "start_time", "end_time"], name="booking_status_interval_idx"),
            models.Index(fields=["client", "status"], name="booking_client_status_idx"),
        ]

    def __str__(self) -> str:
        return f"Booking #{self.pk} {self.start_time:%Y-%m-%d %H:%M} ({self.status})"

    def clean(self) -> None:
        if self.start_time and self.end_time and self.end_time <= self.start_time:
            raise ValidationError(_("End time must be after start time."))

    @property
    def interval(self) -> TimeRange:
        return TimeRange(self.start_time, self.end_time)

    @property
    def is_active(self) -> bool:
        return self.status == self.Status.BOOKED

    @classmethod
    def parse_status(cls, value) -> "Booking.Status":
        """Accept a stored value ("no_show") or a member name ("NO_SHOW")."""
        try:
            return cls.Status(value)
        except ValueError:
            pass
        try:
            return cls.Status[str(value).strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown booking status: {value}")

    def can_be_canceled_by_client(
        self,
        now: datetime | None = None,
        window: timedelta = DEFAULT_CANCELLATION_WINDOW,
    ) -> bool:
        now = now or timezone.now()
        return self.is_active and self.start_time - now >= window

    # ----- transitions -----

    def _ensure_booked(self, action: str) -> None:
        if self.status != self.Status.BOOKED:
            raise InvalidStateTransition(
                f"Cannot {action} booking with status {self.status}. Booking must be {self.Status.BOOKED}."
            )

    def cancel_by_client(
        self,
        reason: str | None = None,
        *,
        now: datetime | None = None,
        window: timedelta = DEFAULT_CANCELLATION_WINDOW,
    ) -> None:
        self._ensure_booked("cancel")
        now = now or timezone.now()
        if self.start_time - now < window:
            hours = window / timedelta(hours=1)
            raise WithinCancellationWindow(f"Cannot cancel within {hours:g} hours of appointment.")
        self._cancel(self.CancellationSource.CLIENT, (reason or "").strip(), now)

    def cancel_by_admin(self, reason: str | None, *, now: datetime | None = None) -> None:
        self._ensure_booked("cancel")
        if not reason or not reason.strip():
            raise ReasonRequired("Cancellation reason required for admin.")
        self._cancel(self.CancellationSource.ADMIN, reason.strip(), now or timezone.now())

    def _cancel(self, source: str, reason: str, now: datetime) -> None:
        from .domain.events import BookingCanceled

        self.status = self.Status.CANCELED
        self.cancellation_source = source
        self.cancellation_reason = reason
        self.cancelled_at = now

        self.add_event(BookingCanceled(
            aggregate_id=self.pk,
            booking_id=self.pk,
            client_id=self.client_id,
            start_time=self.start_time,
            source=source,
            reason=reason,
        ))

    def complete(self) -> None:
        from .domain.events import BookingCompleted

        self._ensure_booked("complete")
        self.status = self.Status.COMPLETED
        self.add_event(BookingCompleted(aggregate_id=self.pk, booking_id=self.pk))

    def mark_no_show(self) -> None:
        from .domain.events import BookingMarkedNoShow

        self._ensure_booked("mark as no-show")
        self.status = self.Status.NO_SHOW
        self.add_event(BookingMarkedNoShow(aggregate_id=self.pk, booking_id=self.pk))
