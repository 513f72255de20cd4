from datetime import date

from django.core.management.base import BaseCommand, CommandError

from apps.scheduling.services import SlotGridManager


class Command(BaseCommand):
    help = "Pre-generate bookable time slots for the upcoming horizon"

    def add_arguments(self, parser):
        parser.add_argument(
            "--days", type=int, default=None, help="Horizon length in days (default: BOOKING_POLICY)"
        )
        parser.add_argument("--start", type=str, help="First date, YYYY-MM-DD (default: today)")

    def handle(self, *args, **options):
        start = None
        if options.get("start"):
            try:
                start = date.fromisoformat(options["start"])
            except ValueError as exc:
                raise CommandError(f"Invalid --start date: {options['start']}") from exc

        days = options["days"]
        if days is not None and days < 0:
            raise CommandError("--days must not be negative")

        processed = SlotGridManager().materialize_horizon(start=start, days=days)
        self.stdout.write(self.style.SUCCESS(f"Time slots generated for {processed} open dates"))
