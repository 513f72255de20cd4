"""Tests for cancellation and admin status changes."""

from __future__ import annotations

from datetime import timedelta
from unittest import mock

from apps.bookings import services
from apps.bookings.application import command_handlers
from apps.bookings.models import Booking
from apps.scheduling.services import SlotGridManager
from shared.domain.exceptions import (
    BookingNotFound,
    ClientNotFound,
    InvalidStateTransition,
    NotBookingOwner,
    ReasonRequired,
    WithinCancellationWindow,
)

from .base import THURSDAY, BookingTestCase, at


class CancelBookingTests(BookingTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.start = at(THURSDAY, 14)
        self.booking = services.admit(self.client_record.pk, self.service.pk, self.start, now=self.now)

    def test_client_can_cancel_exactly_at_window_boundary(self) -> None:
        booking = services.cancel(
            self.booking.pk,
            self.client_record.pk,
            reason="Change of plans",
            now=self.start - timedelta(hours=12),
        )

        self.assertEqual(booking.status, Booking.Status.CANCELED)
        self.assertEqual(booking.cancellation_source, Booking.CancellationSource.CLIENT)
        self.assertEqual(booking.cancellation_reason, "Change of plans")
        self.assertEqual(booking.cancelled_at, self.start - timedelta(hours=12))

    def test_client_cannot_cancel_inside_window(self) -> None:
        with self.assertRaises(WithinCancellationWindow):
            services.cancel(
                self.booking.pk,
                self.client_record.pk,
                now=self.start - timedelta(hours=11, minutes=59),
            )

        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, Booking.Status.BOOKED)

    def test_other_client_cannot_cancel(self) -> None:
        with self.assertRaises(NotBookingOwner):
            services.cancel(self.booking.pk, self.other_client.pk, now=self.now)

    def test_admin_needs_reason(self) -> None:
        with self.assertRaises(ReasonRequired):
            services.cancel(self.booking.pk, None, is_admin=True, reason="  ", now=self.now)

        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, Booking.Status.BOOKED)

    def test_admin_can_cancel_inside_window(self) -> None:
        booking = services.cancel(
            self.booking.pk,
            None,
            is_admin=True,
            reason="Therapist sick",
            now=self.start - timedelta(hours=1),
        )

        self.assertEqual(booking.status, Booking.Status.CANCELED)
        self.assertEqual(booking.cancellation_source, Booking.CancellationSource.ADMIN)

    def test_cancel_frees_interval_and_slot(self) -> None:
        services.cancel(self.booking.pk, self.client_record.pk, now=self.now)

        self.assertIn(self.start, services.get_available_slots(THURSDAY))
        rebooked = services.admit(self.other_client.pk, self.service.pk, at(THURSDAY, 14, 30), now=self.now)
        self.assertEqual(rebooked.status, Booking.Status.BOOKED)

    def test_blocked_slot_stays_hidden_after_cancel(self) -> None:
        SlotGridManager().block(self.start, "Renovation")

        services.cancel(self.booking.pk, self.client_record.pk, now=self.now)

        self.assertNotIn(self.start, services.get_available_slots(THURSDAY))

    def test_canceled_booking_cannot_be_canceled_again(self) -> None:
        services.cancel(self.booking.pk, self.client_record.pk, now=self.now)

        with self.assertRaises(InvalidStateTransition):
            services.cancel(self.booking.pk, self.client_record.pk, now=self.now)
        with self.assertRaises(InvalidStateTransition):
            services.cancel(self.booking.pk, None, is_admin=True, reason="Again", now=self.now)

    def test_unknown_booking(self) -> None:
        with self.assertRaises(BookingNotFound):
            services.cancel(999_999, self.client_record.pk, now=self.now)
        with self.assertRaises(BookingNotFound):
            services.get_booking(999_999)

    def test_can_be_canceled_by_client(self) -> None:
        self.assertTrue(self.booking.can_be_canceled_by_client(self.start - timedelta(hours=12)))
        self.assertFalse(self.booking.can_be_canceled_by_client(self.start - timedelta(hours=11)))


class UpdateBookingStatusTests(BookingTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.start = at(THURSDAY, 11)
        self.booking = services.admit(self.client_record.pk, self.service.pk, self.start, now=self.now)

    def test_complete(self) -> None:
        booking = services.update_status(self.booking.pk, Booking.Status.COMPLETED)

        self.assertEqual(booking.status, Booking.Status.COMPLETED)
        self.assertEqual(services.get_booking(self.booking.pk).status, Booking.Status.COMPLETED)

    def test_no_show_keeps_slot_occupied(self) -> None:
        services.update_status(self.booking.pk, "no_show")

        self.assertNotIn(self.start, services.get_available_slots(THURSDAY))

    def test_finished_booking_no_longer_blocks_interval(self) -> None:
        services.update_status(self.booking.pk, Booking.Status.COMPLETED)

        other = services.admit(self.other_client.pk, self.service.pk, at(THURSDAY, 11, 30), now=self.now)
        self.assertEqual(other.status, Booking.Status.BOOKED)

    def test_admin_cancel_via_status_releases_slot(self) -> None:
        booking = services.update_status(self.booking.pk, Booking.Status.CANCELED)

        self.assertEqual(booking.cancellation_source, Booking.CancellationSource.ADMIN)
        self.assertEqual(booking.cancellation_reason, "Cancelled by admin")
        self.assertIn(self.start, services.get_available_slots(THURSDAY))

    def test_terminal_status_cannot_change(self) -> None:
        services.cancel(self.booking.pk, self.client_record.pk, now=self.now)

        with self.assertRaises(InvalidStateTransition):
            services.update_status(self.booking.pk, Booking.Status.COMPLETED)
        with self.assertRaises(InvalidStateTransition):
            services.update_status(self.booking.pk, Booking.Status.NO_SHOW)

    def test_status_accepts_member_names(self) -> None:
        booking = services.update_status(self.booking.pk, "COMPLETED")

        self.assertEqual(booking.status, Booking.Status.COMPLETED)

    def test_no_show_by_member_name(self) -> None:
        booking = services.update_status(self.booking.pk, "No_Show")

        self.assertEqual(booking.status, Booking.Status.NO_SHOW)

    def test_parse_status(self) -> None:
        self.assertEqual(Booking.parse_status("no_show"), Booking.Status.NO_SHOW)
        self.assertEqual(Booking.parse_status("NO_SHOW"), Booking.Status.NO_SHOW)
        self.assertEqual(Booking.parse_status(Booking.Status.CANCELED), Booking.Status.CANCELED)
        with self.assertRaises(ValueError):
            Booking.parse_status("archived")

    def test_booked_and_unknown_targets_are_rejected(self) -> None:
        with self.assertRaises(InvalidStateTransition):
            services.update_status(self.booking.pk, Booking.Status.BOOKED)
        with self.assertRaises(InvalidStateTransition):
            services.update_status(self.booking.pk, "archived")

    def test_unknown_booking(self) -> None:
        with self.assertRaises(BookingNotFound):
            services.update_status(999_999, Booking.Status.COMPLETED)


class LockOrderTests(BookingTestCase):
    """Cancellations lock grid cells before the booking row, like admissions."""

    def setUp(self) -> None:
        super().setUp()
        self.start = at(THURSDAY, 14)
        self.booking = services.admit(self.client_record.pk, self.service.pk, self.start, now=self.now)
        self.order = []

        original_lock = SlotGridManager.lock_interval
        original_get = command_handlers._get_booking

        def record_lock(grid, start, end):
            self.order.append(("slots", start, end))
            return original_lock(grid, start, end)

        def record_get(booking_id, *, for_update=False):
            if for_update:
                self.order.append(("booking", booking_id))
            return original_get(booking_id, for_update=for_update)

        patchers = [
            mock.patch.object(SlotGridManager, "lock_interval", record_lock),
            mock.patch.object(command_handlers, "_get_booking", record_get),
        ]
        for patcher in patchers:
            patcher.start()
            self.addCleanup(patcher.stop)

    def expected_order(self):
        return [("slots", self.start, self.booking.end_time), ("booking", self.booking.pk)]

    def test_cancel_locks_interval_before_booking(self) -> None:
        services.cancel(self.booking.pk, self.client_record.pk, now=self.now)

        self.assertEqual(self.order, self.expected_order())

    def test_status_change_locks_interval_before_booking(self) -> None:
        services.update_status(self.booking.pk, Booking.Status.CANCELED)

        self.assertEqual(self.order, self.expected_order())

    def test_status_is_rechecked_after_locking(self) -> None:
        Booking.objects.filter(pk=self.booking.pk).update(status=Booking.Status.COMPLETED)

        with self.assertRaises(InvalidStateTransition):
            services.cancel(self.booking.pk, self.client_record.pk, now=self.now)


class BookingQueryTests(BookingTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.late = services.admit(self.client_record.pk, self.service.pk, at(THURSDAY, 16), now=self.now)
        self.early = services.admit(self.client_record.pk, self.service.pk, at(THURSDAY, 10), now=self.now)
        self.other = services.admit(self.other_client.pk, self.service.pk, at(THURSDAY, 12), now=self.now)
        services.cancel(self.late.pk, self.client_record.pk, now=self.now)

    def test_list_bookings_in_start_order(self) -> None:
        self.assertEqual(
            [booking.pk for booking in services.list_bookings()],
            [self.early.pk, self.other.pk, self.late.pk],
        )

    def test_list_bookings_by_status(self) -> None:
        self.assertEqual([booking.pk for booking in services.list_bookings("canceled")], [self.late.pk])
        self.assertEqual(
            [booking.pk for booking in services.list_bookings("BOOKED")],
            [self.early.pk, self.other.pk],
        )

    def test_unknown_status_filter(self) -> None:
        with self.assertRaises(ValueError):
            services.list_bookings("archived")

    def test_list_client_bookings(self) -> None:
        bookings = list(services.list_client_bookings(self.client_record.pk))

        self.assertEqual([booking.pk for booking in bookings], [self.early.pk, self.late.pk])
        self.assertEqual(bookings[0].service.name, "Test Deep Tissue")
        self.assertEqual(
            [booking.can_be_canceled_by_client(self.now) for booking in bookings],
            [True, False],
        )

    def test_list_client_bookings_by_status(self) -> None:
        bookings = services.list_client_bookings(self.client_record.pk, Booking.Status.BOOKED)

        self.assertEqual([booking.pk for booking in bookings], [self.early.pk])

    def test_unknown_client(self) -> None:
        with self.assertRaises(ClientNotFound):
            services.list_client_bookings(999_999)
