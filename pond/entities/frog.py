"""Frog entity: identity, lifecycle counters, eligibility and position.

A frog moves through four life stages purely as a function of its age:

    GROWING   age <= 20% of max age
    FERTILE   20% < age < 80%
    SENESCENT 80% <= age < max age
    DEAD      age >= max age (terminal, the engine removes the frog)

``can_mate`` is derived state. It is recomputed every time age or the
mating cooldown changes and always equals "fertile and not cooling down".
"""

from __future__ import annotations

import random
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pond.config.simulation_config import LifecycleConfig


class Gender(Enum):
    """Frog gender. Values are the wire codes renderers expect."""

    MALE = "m"
    FEMALE = "f"

    @classmethod
    def random(cls, rng: random.Random) -> "Gender":
        return cls.MALE if rng.randint(0, 1) else cls.FEMALE


class LifeStage(Enum):
    """Life stages of a frog."""

    GROWING = "growing"
    FERTILE = "fertile"
    SENESCENT = "senescent"
    DEAD = "dead"


@dataclass(frozen=True)
class Position:
    """Normalized pond coordinates in [0, 1] x [0, 1]."""

    x: float = 0.0
    y: float = 0.0

    @classmethod
    def clamped(cls, x: float, y: float) -> "Position":
        return cls(min(max(float(x), 0.0), 1.0), min(max(float(y), 0.0), 1.0))

    @classmethod
    def random(cls, rng: random.Random) -> "Position":
        return cls(rng.random(), rng.random())


@dataclass(frozen=True)
class FrogSnapshot:
    """Immutable copy of a frog's state at one point in time."""

    id: str
    gender: Gender
    can_mate: bool
    max_age: int
    age: int
    position: Position


def new_frog_id(rng: random.Random) -> str:
    """Generate an opaque frog identifier from ``rng`` (seedable)."""
    return uuid.UUID(int=rng.getrandbits(128), version=4).hex


class Frog:
    """One frog in the pond (pure logic, no rendering).

    Attributes:
        id: Opaque unique identifier.
        gender: MALE or FEMALE.
        age: Ticks lived.
        max_age: Age at which the frog dies.
        can_mate: Whether the frog may currently mate.
        position: Last known normalized position.
        mating_cooldown_until: Tick at which the mating cooldown expires,
            or None when the frog is not cooling down.
    """

    __slots__ = (
        "id",
        "gender",
        "age",
        "max_age",
        "can_mate",
        "position",
        "mating_cooldown_until",
        "_fertile_min",
        "_fertile_max",
    )

    def __init__(
        self,
        frog_id: str,
        gender: Gender,
        position: Optional[Position] = None,
        *,
        age: int = 0,
        max_age: Optional[int] = None,
        lifecycle: Optional[LifecycleConfig] = None,
    ) -> None:
        lifecycle = lifecycle or LifecycleConfig()
        if max_age is None:
            max_age = lifecycle.max_age
        if max_age <= 0:
            raise ValueError(f"max_age must be positive, got {max_age}")
        if age < 0:
            raise ValueError(f"age must be non-negative, got {age}")

        self.id = frog_id
        self.gender = gender
        self.age = age
        self.max_age = max_age
        self.position = position or Position()
        self.mating_cooldown_until: Optional[int] = None
        self._fertile_min = lifecycle.fertile_min_fraction * max_age
        self._fertile_max = lifecycle.fertile_max_fraction * max_age
        self.can_mate = False
        self.refresh_eligibility(0)

    @classmethod
    def spawn(
        cls,
        rng: random.Random,
        position: Optional[Position] = None,
        lifecycle: Optional[LifecycleConfig] = None,
    ) -> "Frog":
        """Create a newborn frog with random gender and identifier."""
        return cls(
            new_frog_id(rng),
            Gender.random(rng),
            position if position is not None else Position.random(rng),
            lifecycle=lifecycle,
        )

    @property
    def is_fertile_age(self) -> bool:
        return self._fertile_min < self.age < self._fertile_max

    @property
    def is_dead(self) -> bool:
        return self.age >= self.max_age

    @property
    def life_stage(self) -> LifeStage:
        if self.is_dead:
            return LifeStage.DEAD
        if self.age <= self._fertile_min:
            return LifeStage.GROWING
        if self.age < self._fertile_max:
            return LifeStage.FERTILE
        return LifeStage.SENESCENT

    def in_cooldown(self, tick: int) -> bool:
        return self.mating_cooldown_until is not None and tick < self.mating_cooldown_until

    def refresh_eligibility(self, tick: int) -> bool:
        """Recompute ``can_mate`` for the given tick.

        Returns:
            True if the value changed.
        """
        previous = self.can_mate
        self.can_mate = self.is_fertile_age and not self.in_cooldown(tick)
        return previous != self.can_mate

    def grow_older(self, tick: int) -> LifeStage:
        """Advance one tick of age and recompute eligibility."""
        self.age += 1
        self.refresh_eligibility(tick)
        return self.life_stage

    def begin_cooldown(self, until_tick: int) -> None:
        """Make the frog ineligible until ``until_tick``."""
        self.mating_cooldown_until = until_tick
        self.can_mate = False

    def end_cooldown(self, tick: int) -> None:
        """Clear an expired cooldown and recompute eligibility."""
        self.mating_cooldown_until = None
        self.refresh_eligibility(tick)

    def snapshot(self) -> FrogSnapshot:
        return FrogSnapshot(
            id=self.id,
            gender=self.gender,
            can_mate=self.can_mate,
            max_age=self.max_age,
            age=self.age,
            position=self.position,
        )

    def __repr__(self) -> str:
        return (
            f"Frog(id={self.id[:8]}, gender={self.gender.value}, age={self.age}/"
            f"{self.max_age}, can_mate={self.can_mate})"
        )
