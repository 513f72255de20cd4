"""Client identity resolution for bookings."""

from __future__ import annotations

import logging
import re

from shared.domain.exceptions import ClientNotFound

from .models import Client

logger = logging.getLogger(__name__)

_PHONE_NOISE = re.compile(r"[\s\-()]")


def normalize_phone(phone: str) -> str:
    return _PHONE_NOISE.sub("", phone or "")


def resolve_client(client_id=None, guest_name: str | None = None, guest_phone: str | None = None) -> Client:
    """
    Resolve the client a booking belongs to.

    A known ``client_id`` wins. Without one, the guest phone identifies a
    walk-in client, created on first visit. With neither, the booking has
    no owner and is rejected.
    """
    if client_id is not None:
        try:
            return Client.objects.get(pk=client_id)
        except (Client.DoesNotExist, ValueError, TypeError):
            raise ClientNotFound(client_id)

    phone = normalize_phone(guest_phone or "")
    if not phone:
        raise ClientNotFound()

    client, created = Client.objects.get_or_create(
        phone=phone,
        defaults={"name": (guest_name or "").strip() or phone, "is_walk_in": True},
    )
    if created:
        logger.info("Created walk-in client %s for phone %s", client.pk, phone)
    return client
