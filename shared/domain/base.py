"""
Base Domain Classes

Building blocks shared by every bounded context:
- ValueObject: Immutable objects compared by value
- DomainEvent: Events that represent something that happened
- EventRecorderMixin: Lets an aggregate (a Django model here) record events
  that the unit of work publishes after a successful commit
"""

from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime
from typing import List
from uuid import UUID, uuid4

from django.utils import timezone  # type: ignore


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for value objects

    Value objects are immutable and have no identity.
    Two value objects are equal if all their attributes are equal.
    """
    pass


@dataclass
class DomainEvent:
    """
    Base class for domain events

    Domain events represent something that happened in the domain.
    They are published only after the transaction that produced them commits.
    """
    event_id: UUID = field(default_factory=uuid4, kw_only=True)
    occurred_at: datetime = field(default_factory=timezone.now, kw_only=True)
    aggregate_id: int | None = field(default=None, kw_only=True)

    def to_dict(self) -> dict:
        """Convert event to dictionary for serialization"""
        return {
            'event_id': str(self.event_id),
            'event_type': self.__class__.__name__,
            'occurred_at': self.occurred_at.isoformat(),
            'aggregate_id': self.aggregate_id,
        }


class EventRecorderMixin:
    """
    Collects domain events on an aggregate root

    Mixed into Django models; the pending list lives on the instance only and
    is never persisted.
    """

    def _pending_events(self) -> List[DomainEvent]:
        if not hasattr(self, '_recorded_events'):
            self._recorded_events: List[DomainEvent] = []
        return self._recorded_events

    def add_event(self, event: DomainEvent):
        """Add a domain event to be published"""
        self._pending_events().append(event)

    def clear_events(self):
        """Clear all collected events (called after collection)"""
        self._pending_events().clear()

    @property
    def events(self) -> List[DomainEvent]:
        """Get copy of collected events"""
        return list(self._pending_events())
