"""Tests for the EventBus domain event dispatch."""

from pond.entities.frog import FrogSnapshot, Gender, Position
from pond.events import EventBus, FrogCreatedEvent, FrogRemovedEvent, PondStatsEvent


def _removed(frog_id: str = "a") -> FrogRemovedEvent:
    return FrogRemovedEvent(frog_id=frog_id, age=100, reason="old_age", tick=7)


class TestEventBus:
    """Test suite for EventBus functionality."""

    def test_emit_reaches_subscriber(self) -> None:
        bus = EventBus()
        received: list = []
        bus.subscribe(FrogRemovedEvent, received.append)

        event = _removed()
        bus.emit(event)

        assert received == [event]

    def test_dispatch_is_by_exact_type(self) -> None:
        bus = EventBus()
        received: list = []
        bus.subscribe(PondStatsEvent, received.append)

        bus.emit(_removed())

        assert received == []

    def test_handlers_called_in_registration_order(self) -> None:
        bus = EventBus()
        calls: list = []
        bus.subscribe(FrogRemovedEvent, lambda e: calls.append(("h1", e.frog_id)))
        bus.subscribe(FrogRemovedEvent, lambda e: calls.append(("h2", e.frog_id)))

        bus.emit(_removed("x"))

        assert calls == [("h1", "x"), ("h2", "x")]

    def test_subscribe_many_and_unsubscribe_all(self) -> None:
        bus = EventBus()
        received: list = []
        bus.subscribe_many((FrogRemovedEvent, FrogCreatedEvent), received.append)
        snapshot = FrogSnapshot("a", Gender.MALE, False, 100, 0, Position())

        bus.emit(FrogCreatedEvent(frog=snapshot, parent_ids=(), tick=0))
        assert bus.unsubscribe_all(received.append) == 2
        bus.emit(_removed())

        assert len(received) == 1
        assert bus.subscriber_count(FrogRemovedEvent) == 0

    def test_handler_may_unsubscribe_during_emit(self) -> None:
        bus = EventBus()
        calls: list = []

        def once(event: FrogRemovedEvent) -> None:
            calls.append(event.frog_id)
            bus.unsubscribe(FrogRemovedEvent, once)

        bus.subscribe(FrogRemovedEvent, once)
        bus.subscribe(FrogRemovedEvent, lambda e: calls.append("after"))

        bus.emit(_removed("a"))
        bus.emit(_removed("b"))

        assert calls == ["a", "after", "after"]

    def test_unsubscribe_unknown_handler(self) -> None:
        bus = EventBus()

        assert bus.unsubscribe(FrogRemovedEvent, print) is False
