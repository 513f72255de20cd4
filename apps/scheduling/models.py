"""Calendar and slot grid models."""

from __future__ import annotations

from django.core.validators import MaxValueValidator, MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class WorkingDay(models.Model):
    """Opening configuration for one ISO weekday (1=Monday, 7=Sunday)."""

    day_of_week = models.PositiveSmallIntegerField(
        unique=True,
        validators=[MinValueValidator(1), MaxValueValidator(7)],
    )
    is_active = models.BooleanField(default=True)
    open_time = models.TimeField()
    close_time = models.TimeField()

    class Meta:
        verbose_name = _("Working day")
        verbose_name_plural = _("Working days")
        ordering = ["day_of_week"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(day_of_week__gte=1) & models.Q(day_of_week__lte=7),
                name="working_day_valid_weekday",
            ),
            models.CheckConstraint(
                condition=models.Q(close_time__gt=models.F("open_time")),
                name="working_day_valid_hours",
            ),
        ]

    def __str__(self) -> str:
        state = "open" if self.is_active else "closed"
        return f"Day {self.day_of_week} ({state} {self.open_time:%H:%M}-{self.close_time:%H:%M})"


class TimeSlot(models.Model):
    """A bookable grid cell."""

    slot_date = models.DateField(db_index=True)
    slot_time = models.TimeField()
    slot_datetime = models.DateTimeField(unique=True)
    is_available = models.BooleanField(default=True)
    is_blocked = models.BooleanField(default=False)
    block_reason = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Time slot")
        verbose_name_plural = _("Time slots")
        ordering = ["slot_datetime"]
        indexes = [
            models.Index(fields=["is_available", "is_blocked"], name="slot_availability_idx"),
        ]

    def __str__(self) -> str:
        return f"Slot {self.slot_datetime.isoformat()}"

    @property
    def is_occupiable(self) -> bool:
        return self.is_available and not self.is_blocked

    def book(self) -> None:
        self.is_available = False

    def release(self) -> None:
        # A blocked slot stays closed until it is explicitly unblocked
        if not self.is_blocked:
            self.is_available = True

    def block(self, reason: str = "") -> None:
        self.is_blocked = True
        self.is_available = False
        self.block_reason = reason or ""

    def unblock(self) -> None:
        self.is_blocked = False
        self.is_available = True
        self.block_reason = ""
