"""Row locking helpers."""

from __future__ import annotations

from django.db import connections, transaction  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore


def lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""

    db = queryset.db
    if not transaction.get_connection(db).in_atomic_block:
        return queryset

    if not connections[db].features.has_select_for_update:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset
