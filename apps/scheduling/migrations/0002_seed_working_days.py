"""Seed the studio week: open Thursday to Sunday, 09:00-20:00."""

import datetime

from django.db import migrations

OPEN_TIME = datetime.time(9, 0)
CLOSE_TIME = datetime.time(20, 0)
OPEN_WEEKDAYS = {4, 5, 6, 7}


def seed_working_days(apps, schema_editor):
    WorkingDay = apps.get_model("scheduling", "WorkingDay")
    for day_of_week in range(1, 8):
        WorkingDay.objects.update_or_create(
            day_of_week=day_of_week,
            defaults={
                "is_active": day_of_week in OPEN_WEEKDAYS,
                "open_time": OPEN_TIME,
                "close_time": CLOSE_TIME,
            },
        )


def remove_working_days(apps, schema_editor):
    WorkingDay = apps.get_model("scheduling", "WorkingDay")
    WorkingDay.objects.all().delete()


class Migration(migrations.Migration):

    dependencies = [
        ("scheduling", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(seed_working_days, remove_working_days),
    ]
