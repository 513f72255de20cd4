"""Catalog lookups used by the booking engine."""

from __future__ import annotations

from shared.domain.exceptions import ServiceNotFound

from .models import MassageService


def get_active_service(service_id) -> MassageService:
    """Return an active service or raise ServiceNotFound."""
    try:
        return MassageService.objects.get(pk=service_id, is_active=True)
    except (MassageService.DoesNotExist, ValueError, TypeError):
        raise ServiceNotFound(service_id)


def get_service_duration_and_cleanup(service_id) -> tuple[int, int]:
    """(duration_minutes, cleanup_minutes) of an active service."""
    service = get_active_service(service_id)
    return service.duration_minutes, service.cleanup_minutes
