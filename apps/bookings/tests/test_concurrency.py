"""Parallel admissions against a real row-locking database.

Skipped on SQLite. CI runs them against PostgreSQL:

    pytest --ds=config.settings.test_postgres apps/bookings/tests/test_concurrency.py
"""

from __future__ import annotations

import threading
from datetime import time
from decimal import Decimal

from django.db import OperationalError, connection
from django.test import TransactionTestCase, skipUnlessDBFeature

from apps.bookings import services
from apps.bookings.models import Booking
from apps.catalog.models import MassageService
from apps.clients.models import Client
from apps.scheduling.models import TimeSlot, WorkingDay
from shared.domain.exceptions import BookingConflictError, BookingError

from .base import THURSDAY, at

PARALLEL_REQUESTS = 6


class RaceFixturesMixin:
    def setUp(self) -> None:
        WorkingDay.objects.update_or_create(
            day_of_week=THURSDAY.isoweekday(),
            defaults={"is_active": True, "open_time": time(9, 0), "close_time": time(20, 0)},
        )
        self.service = MassageService.objects.create(
            name="Race Relax",
            category=MassageService.Category.RELAXING,
            duration_minutes=60,
            cleanup_minutes=10,
            price=Decimal("50.00"),
        )
        self.clients = [
            Client.objects.create(name=f"Client {index}", phone=f"+5690000000{index}")
            for index in range(PARALLEL_REQUESTS)
        ]
        self.now = at(THURSDAY, 8)


@skipUnlessDBFeature("has_select_for_update")
class ParallelAdmissionTests(RaceFixturesMixin, TransactionTestCase):
    """N clients racing for one interval yield exactly one booking."""

    def _race(self, starts) -> tuple[list, list]:
        barrier = threading.Barrier(len(starts))
        successes, failures = [], []
        lock = threading.Lock()

        def attempt(client, start):
            try:
                barrier.wait()
                booking = services.admit(client.pk, self.service.pk, start, now=self.now)
                with lock:
                    successes.append(booking)
            except BookingConflictError as exc:
                with lock:
                    failures.append(exc)
            finally:
                connection.close()

        threads = [
            threading.Thread(target=attempt, args=(client, start))
            for client, start in zip(self.clients, starts)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=30)
        return successes, failures

    def test_same_start_admits_exactly_one(self) -> None:
        successes, failures = self._race([at(THURSDAY, 14)] * PARALLEL_REQUESTS)

        self.assertEqual(len(successes), 1)
        self.assertEqual(len(failures), PARALLEL_REQUESTS - 1)
        self.assertEqual(Booking.objects.filter(status=Booking.Status.BOOKED).count(), 1)
        self.assertFalse(TimeSlot.objects.get(slot_datetime=at(THURSDAY, 14)).is_available)

    def test_overlapping_starts_never_double_book(self) -> None:
        starts = [at(THURSDAY, 14, minute) for minute in (0, 5, 10, 20, 30, 45)]

        successes, failures = self._race(starts)

        self.assertGreaterEqual(len(successes), 1)
        self.assertEqual(len(successes) + len(failures), PARALLEL_REQUESTS)
        booked = list(Booking.objects.filter(status=Booking.Status.BOOKED).order_by("start_time"))
        for earlier, later in zip(booked, booked[1:]):
            self.assertLessEqual(earlier.end_time, later.start_time)


@skipUnlessDBFeature("has_select_for_update")
class CancelWhileAdmittingTests(RaceFixturesMixin, TransactionTestCase):
    """Cancellations and admissions over the same cells take locks in one order."""

    ROUNDS = 5

    def test_cancel_racing_overlapping_admission_never_deadlocks(self) -> None:
        for round_number in range(self.ROUNDS):
            Booking.objects.all().delete()
            TimeSlot.objects.update(is_available=True)
            existing = services.admit(self.clients[0].pk, self.service.pk, at(THURSDAY, 14), now=self.now)
            barrier = threading.Barrier(2)
            outcomes, errors = [], []

            def cancel():
                try:
                    barrier.wait()
                    services.cancel(existing.pk, None, is_admin=True, reason="Therapist sick", now=self.now)
                    outcomes.append("canceled")
                except BookingError as exc:
                    outcomes.append(exc)
                except OperationalError as exc:
                    errors.append(exc)
                finally:
                    connection.close()

            def admit():
                try:
                    barrier.wait()
                    services.admit(self.clients[1].pk, self.service.pk, at(THURSDAY, 13, 30), now=self.now)
                    outcomes.append("admitted")
                except BookingError as exc:
                    outcomes.append(exc)
                except OperationalError as exc:
                    errors.append(exc)
                finally:
                    connection.close()

            threads = [threading.Thread(target=cancel), threading.Thread(target=admit)]
            for thread in threads:
                thread.start()
            for thread in threads:
                thread.join(timeout=30)

            with self.subTest(round=round_number):
                self.assertEqual(errors, [])
                self.assertIn("canceled", outcomes)
                self.assertEqual(len(outcomes), 2)
                booked = list(Booking.objects.filter(status=Booking.Status.BOOKED).order_by("start_time"))
                for earlier, later in zip(booked, booked[1:]):
                    self.assertLessEqual(earlier.end_time, later.start_time)
