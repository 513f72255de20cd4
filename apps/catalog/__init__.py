"""Service catalog app package.

Holds the studio's massage services. The booking engine only needs one
thing from it: a service's duration and the cleanup time that must follow
each appointment before the room can be booked again.
"""
