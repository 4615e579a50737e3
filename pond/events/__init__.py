"""Domain events and the synchronous bus that dispatches them."""

from pond.events.domain_events import (
    POND_EVENT_TYPES,
    FrogCreatedEvent,
    FrogRemovedEvent,
    FrogUpdatedEvent,
    PondStatsEvent,
)
from pond.events.event_bus import EventBus

__all__ = [
    "POND_EVENT_TYPES",
    "EventBus",
    "FrogCreatedEvent",
    "FrogRemovedEvent",
    "FrogUpdatedEvent",
    "PondStatsEvent",
]
