"""Seed the studio's service menu."""

from decimal import Decimal

from django.db import migrations

SERVICES = [
    ("Toque Profundo 60", "deep_tissue", 60, 10, Decimal("65.00"), "Deep tissue massage 60 minutes"),
    ("Toque Profundo 90", "deep_tissue", 90, 10, Decimal("85.00"), "Deep tissue massage 90 minutes"),
    ("Relax Premium", "relaxing", 75, 10, Decimal("70.00"), "Premium relaxation massage"),
    ("Siesta Express", "relaxing", 40, 10, Decimal("43.00"), "Quick relaxation session"),
    ("Happy Feet", "specialized", 30, 10, Decimal("25.00"), "Foot reflexology massage"),
    ("Libera Mi Espalda", "specialized", 45, 10, Decimal("50.00"), "Back pain relief massage"),
]


def seed_services(apps, schema_editor):
    MassageService = apps.get_model("catalog", "MassageService")
    if MassageService.objects.exists():
        return
    MassageService.objects.bulk_create(
        [
            MassageService(
                name=name,
                category=category,
                duration_minutes=duration,
                cleanup_minutes=cleanup,
                price=price,
                description=description,
            )
            for name, category, duration, cleanup, price, description in SERVICES
        ]
    )


def remove_services(apps, schema_editor):
    MassageService = apps.get_model("catalog", "MassageService")
    MassageService.objects.filter(name__in=[row[0] for row in SERVICES]).delete()


class Migration(migrations.Migration):

    dependencies = [
        ("catalog", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(seed_services, remove_services),
    ]
