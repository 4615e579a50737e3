"""Domain events emitted by the simulation engine once per tick.

Events are frozen dataclasses carrying everything a subscriber needs, so
handlers never call back into the engine to interpret them.
"""

from __future__ import annotations

from dataclasses import dataclass

from pond.entities.frog import FrogSnapshot


@dataclass(frozen=True)
class FrogCreatedEvent:
    """A frog joined the pond (initial population or offspring).

    Attributes:
        frog: Snapshot of the new frog
        parent_ids: IDs of both parents, empty for the initial population
        tick: Engine tick when this occurred
    """

    frog: FrogSnapshot
    parent_ids: tuple[str, ...]
    tick: int


@dataclass(frozen=True)
class FrogUpdatedEvent:
    """A living frog's state changed during a tick."""

    frog: FrogSnapshot
    tick: int


@dataclass(frozen=True)
class FrogRemovedEvent:
    """A frog left the pond.

    Attributes:
        frog_id: ID of the removed frog
        age: Age at removal
        reason: Why it was removed ("old_age")
        tick: Engine tick when this occurred
    """

    frog_id: str
    age: int
    reason: str
    tick: int


@dataclass(frozen=True)
class PondStatsEvent:
    """Aggregate pond levels, emitted last in every tick."""

    population: int
    algae: int
    oxygen: int
    nitrogen: int
    tick: int


POND_EVENT_TYPES: tuple[type, ...] = (
    FrogCreatedEvent,
    FrogUpdatedEvent,
    FrogRemovedEvent,
    PondStatsEvent,
)
