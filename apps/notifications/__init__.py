"""Notifications app package.

Delivers booking e-mails to clients. Delivery runs in Celery tasks that
are enqueued by event handlers once the booking transaction commits, so
a failing mail server never affects a booking decision.
"""
