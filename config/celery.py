import os

from celery import Celery
from celery.schedules import crontab  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("massage_booking")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


# ============================================================================
# CELERY BEAT SCHEDULE (Periodic Tasks)
# ============================================================================

app.conf.beat_schedule = {
    # Keep the slot grid materialized for the whole booking horizon
    "generate-upcoming-slots": {
        "task": "scheduling.generate_upcoming_slots",
        "schedule": crontab(hour=3, minute=0),  # every day at 03:00
    },
}
