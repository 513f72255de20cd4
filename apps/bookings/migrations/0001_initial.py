import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("catalog", "0001_initial"),
        ("clients", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Booking",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("start_time", models.DateTimeField()),
                (
                    "end_time",
                    models.DateTimeField(help_text="Start plus service duration plus cleanup time."),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("booked", "Booked"),
                            ("canceled", "Canceled"),
                            ("completed", "Completed"),
                            ("no_show", "No show"),
                        ],
                        default="booked",
                        max_length=20,
                    ),
                ),
                ("guest_name", models.CharField(blank=True, max_length=100)),
                ("guest_phone", models.CharField(blank=True, max_length=20)),
                (
                    "cancellation_source",
                    models.CharField(
                        blank=True,
                        choices=[("client", "Client"), ("admin", "Admin")],
                        max_length=20,
                    ),
                ),
                ("cancellation_reason", models.CharField(blank=True, max_length=255)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "client",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="bookings",
                        to="clients.client",
                    ),
                ),
                (
                    "service",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="bookings",
                        to="catalog.massageservice",
                    ),
                ),
            ],
            options={
                "verbose_name": "Booking",
                "verbose_name_plural": "Bookings",
                "ordering": ["start_time"],
                "indexes": [
                    models.Index(fields=["status", "start_time", "end_time"], name="booking_status_interval_idx"),
                    models.Index(fields=["client", "status"], name="booking_client_status_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("end_time__gt", models.F("start_time"))),
                        name="booking_valid_interval",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(("status", "booked")),
                        fields=("start_time",),
                        name="booking_unique_booked_start",
                    ),
                ],
            },
        ),
    ]
