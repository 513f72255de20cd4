import django.core.validators
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="WorkingDay",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "day_of_week",
                    models.PositiveSmallIntegerField(
                        unique=True,
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(7),
                        ],
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("open_time", models.TimeField()),
                ("close_time", models.TimeField()),
            ],
            options={
                "verbose_name": "Working day",
                "verbose_name_plural": "Working days",
                "ordering": ["day_of_week"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("day_of_week__gte", 1), ("day_of_week__lte", 7)),
                        name="working_day_valid_weekday",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("close_time__gt", models.F("open_time"))),
                        name="working_day_valid_hours",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="TimeSlot",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("slot_date", models.DateField(db_index=True)),
                ("slot_time", models.TimeField()),
                ("slot_datetime", models.DateTimeField(unique=True)),
                ("is_available", models.BooleanField(default=True)),
                ("is_blocked", models.BooleanField(default=False)),
                ("block_reason", models.CharField(blank=True, max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Time slot",
                "verbose_name_plural": "Time slots",
                "ordering": ["slot_datetime"],
                "indexes": [
                    models.Index(fields=["is_available", "is_blocked"], name="slot_availability_idx"),
                ],
            },
        ),
    ]
