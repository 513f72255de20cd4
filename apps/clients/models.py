"""Client profile model."""

from __future__ import annotations

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Client(models.Model):
    """A person appointments are booked for, registered or walk-in."""

    name = models.CharField(max_length=100)
    phone = models.CharField(max_length=20, unique=True)
    email = models.EmailField(blank=True)
    is_walk_in = models.BooleanField(
        default=False,
        help_text=_("Created automatically from guest details on a booking."),
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Client")
        verbose_name_plural = _("Clients")
        ordering = ["name"]

    def __str__(self) -> str:
        return f"{self.name} ({self.phone})"
