"""Celery tasks for the slot grid."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore

from .services import SlotGridManager

logger = logging.getLogger(__name__)


@shared_task(name="scheduling.generate_upcoming_slots")
def generate_upcoming_slots(days: int | None = None) -> dict[str, int]:
    """
    Pre-generate time slots for the rolling booking horizon.

    Runs daily through Celery Beat so the horizon keeps moving forward;
    already existing slots are left untouched.

    Returns:
        dict: {"dates": number of open dates processed}
    """
    processed = SlotGridManager().materialize_horizon(days=days)
    logger.info(f"Slot pre-generation finished: {processed} open dates")
    return {"dates": processed}
