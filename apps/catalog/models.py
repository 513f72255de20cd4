"""Service catalog models."""

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

MAX_DURATION_MINUTES = 300


class MassageService(models.Model):
    """A bookable treatment."""

    class Category(models.TextChoices):
        DEEP_TISSUE = "deep_tissue", _("Deep tissue")
        RELAXING = "relaxing", _("Relaxing")
        SPECIALIZED = "specialized", _("Specialized")

    name = models.CharField(max_length=100, unique=True)
    category = models.CharField(max_length=20, choices=Category.choices)
    duration_minutes = models.PositiveSmallIntegerField()
    cleanup_minutes = models.PositiveSmallIntegerField(
        default=10,
        help_text=_("Room preparation time after each appointment, hidden from clients."),
    )
    price = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    description = models.CharField(max_length=500, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Service")
        verbose_name_plural = _("Services")
        ordering = ["name"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(duration_minutes__gt=0)
                & models.Q(duration_minutes__lte=MAX_DURATION_MINUTES),
                name="service_valid_duration",
            ),
        ]

    def __str__(self) -> str:
        return self.name

    def clean(self) -> None:
        if not self.duration_minutes or self.duration_minutes <= 0:
            raise ValidationError(_("Duration must be greater than 0."))
        if self.duration_minutes > MAX_DURATION_MINUTES:
            raise ValidationError(_("Duration cannot exceed 300 minutes."))
        if self.price is not None and self.price < 0:
            raise ValidationError(_("Price must be zero or greater."))

    @property
    def total_minutes(self) -> int:
        return self.duration_minutes + self.cleanup_minutes
