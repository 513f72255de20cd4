from dataclasses import dataclass
from unittest import mock

import pytest

from shared.application.message_bus import MessageBus
from shared.domain.base import DomainEvent, EventRecorderMixin
from shared.domain.exceptions import BookingError, Overlap


@dataclass
class SomethingHappened(DomainEvent):
    value: int


@dataclass
class DoSomething:
    value: int


def test_event_reaches_every_handler_once():
    bus = MessageBus()
    received = []

    def handler(event):
        received.append(event.value)

    bus.register_event_handler(SomethingHappened, handler)
    bus.register_event_handler(SomethingHappened, handler)
    bus.publish_events([SomethingHappened(value=1)])

    assert received == [1]


def test_failing_event_handler_does_not_stop_others():
    bus = MessageBus()
    received = []

    def broken(event):
        raise RuntimeError("boom")

    def working(event):
        received.append(event.value)

    bus.register_event_handler(SomethingHappened, broken)
    bus.register_event_handler(SomethingHappened, working)
    with mock.patch("shared.application.message_bus.logger") as log:
        bus.publish_events([SomethingHappened(value=7)])

    assert received == [7]
    log.error.assert_called_once()


def test_command_has_single_handler_unless_replaced():
    bus = MessageBus()
    bus.register_command_handler(DoSomething, lambda command: command.value)

    with pytest.raises(ValueError):
        bus.register_command_handler(DoSomething, lambda command: 0)

    bus.register_command_handler(DoSomething, lambda command: command.value * 2, replace=True)
    assert bus.handle_command(DoSomething(value=3)) == 6
    assert bus.has_command_handler(DoSomething)


def test_command_rejection_propagates():
    bus = MessageBus()

    def reject(command):
        raise Overlap()

    bus.register_command_handler(DoSomething, reject)

    with pytest.raises(BookingError) as exc_info:
        bus.handle_command(DoSomething(value=1))
    assert exc_info.value.code == "overlap"


def test_unregistered_command():
    with pytest.raises(ValueError):
        MessageBus().handle_command(DoSomething(value=1))


def test_event_recorder_collects_and_clears():
    class Aggregate(EventRecorderMixin):
        pass

    aggregate = Aggregate()
    aggregate.add_event(SomethingHappened(value=1, aggregate_id=5))

    assert [event.value for event in aggregate.events] == [1]
    assert aggregate.events[0].to_dict()["event_type"] == "SomethingHappened"
    aggregate.clear_events()
    assert aggregate.events == []
