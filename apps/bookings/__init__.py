"""Bookings app package.

This app encapsulates the booking domain: admission of booking requests,
the booking status state machine and cancellation. Double bookings are
prevented by three independent barriers: a slot grid pre-check, a locked
interval overlap query, and database uniqueness constraints on slot and
booking start times.
"""
