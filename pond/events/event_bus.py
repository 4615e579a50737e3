"""Synchronous event bus for domain event dispatch.

The engine emits every event of a tick through one bus; sync channels and
tests subscribe to the event types they care about. Dispatch is in-line
and in registration order, so event order is exactly emission order.
The bus itself is not thread-safe: the engine only touches it while
holding its own lock.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable, Iterable
from typing import Any, TypeVar

T = TypeVar("T")

Handler = Callable[[Any], None]


class EventBus:
    """Type-keyed publish/subscribe dispatcher.

    Example:
        bus = EventBus()
        bus.subscribe(FrogRemovedEvent, on_removed)
        bus.emit(FrogRemovedEvent(frog_id="ab12", age=100, reason="old_age", tick=7))
    """

    def __init__(self) -> None:
        self._handlers: dict[type, list[Handler]] = defaultdict(list)

    def emit(self, event: object) -> None:
        """Deliver ``event`` to every handler registered for its exact type."""
        handlers = self._handlers.get(type(event))
        if handlers:
            for handler in list(handlers):
                handler(event)

    def subscribe(self, event_type: type[T], handler: Callable[[T], None]) -> None:
        self._handlers[event_type].append(handler)

    def subscribe_many(self, event_types: Iterable[type], handler: Handler) -> None:
        """Register one handler for several event types."""
        for event_type in event_types:
            self._handlers[event_type].append(handler)

    def unsubscribe(self, event_type: type[T], handler: Callable[[T], None]) -> bool:
        """Remove a handler for one event type.

        Returns:
            True if the handler was registered and has been removed
        """
        handlers = self._handlers.get(event_type)
        if handlers and handler in handlers:
            handlers.remove(handler)
            return True
        return False

    def unsubscribe_all(self, handler: Handler) -> int:
        """Remove ``handler`` from every event type it is registered for.

        Returns:
            Number of registrations removed
        """
        removed = 0
        for handlers in self._handlers.values():
            while handler in handlers:
                handlers.remove(handler)
                removed += 1
        return removed

    def clear_subscribers(self) -> None:
        self._handlers.clear()

    def subscriber_count(self, event_type: type) -> int:
        return len(self._handlers.get(event_type, []))
