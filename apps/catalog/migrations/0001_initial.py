from decimal import Decimal

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="MassageService",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100, unique=True)),
                (
                    "category",
                    models.CharField(
                        choices=[
                            ("deep_tissue", "Deep tissue"),
                            ("relaxing", "Relaxing"),
                            ("specialized", "Specialized"),
                        ],
                        max_length=20,
                    ),
                ),
                ("duration_minutes", models.PositiveSmallIntegerField()),
                (
                    "cleanup_minutes",
                    models.PositiveSmallIntegerField(
                        default=10,
                        help_text="Room preparation time after each appointment, hidden from clients.",
                    ),
                ),
                ("price", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=10)),
                ("description", models.CharField(blank=True, max_length=500)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Service",
                "verbose_name_plural": "Services",
                "ordering": ["name"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("duration_minutes__gt", 0), ("duration_minutes__lte", 300)),
                        name="service_valid_duration",
                    ),
                ],
            },
        ),
    ]
