"""Scheduling app package.

Owns the studio calendar: which weekdays are open and their operating
window, and the grid of 30-minute time slots that admissions occupy and
cancellations release. Slot datetimes are unique at the database level,
which is the last barrier against two admissions claiming the same start.
"""
