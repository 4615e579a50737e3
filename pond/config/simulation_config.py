"""Lightweight simulation configuration helpers."""

from dataclasses import dataclass, field

from pond.config.display import (
    ARRIVAL_DISTANCE,
    FROG_GROWTH_RATE,
    FROG_INITIAL_SIZE,
    FROG_MAX_SIZE,
    HIT_TEST_INTERVAL_FRAMES,
    MOVE_FRACTION,
    VIEWPORT_HEIGHT,
    VIEWPORT_WIDTH,
)
from pond.config.ecosystem import (
    ALGAE_GROWTH_MAX,
    ALGAE_GROWTH_MIN,
    ALGAE_PER_FROG,
    DEATH_NITROGEN_CREDIT,
    DEFAULT_MAX_AGE,
    FERTILE_MAX_FRACTION,
    FERTILE_MIN_FRACTION,
    INITIAL_ALGAE,
    INITIAL_NITROGEN,
    INITIAL_OXYGEN,
    INITIAL_POPULATION,
    MATING_COOLDOWN_SECONDS,
    STATUS_LOG_INTERVAL_TICKS,
)
from pond.config.server import DEFAULT_TICK_PERIOD


@dataclass
class ResourceConfig:
    """Initial levels and growth clamp for the algae/nitrogen/oxygen pool."""

    initial_algae: int = INITIAL_ALGAE
    initial_nitrogen: int = INITIAL_NITROGEN
    initial_oxygen: int = INITIAL_OXYGEN
    growth_min: float = ALGAE_GROWTH_MIN
    growth_max: float = ALGAE_GROWTH_MAX


@dataclass
class LifecycleConfig:
    """Frog lifespan, feeding and mating parameters."""

    max_age: int = DEFAULT_MAX_AGE
    fertile_min_fraction: float = FERTILE_MIN_FRACTION
    fertile_max_fraction: float = FERTILE_MAX_FRACTION
    algae_per_frog: int = ALGAE_PER_FROG
    death_nitrogen_credit: int = DEATH_NITROGEN_CREDIT
    mating_cooldown_seconds: float = MATING_COOLDOWN_SECONDS


@dataclass
class PondConfig:
    """Configuration for one simulation engine.

    Attributes:
        initial_population: Frogs seeded when the engine starts empty.
        tick_period: Default seconds between ticks (``start`` may override).
        status_log_interval: Ticks between INFO status lines.
    """

    initial_population: int = INITIAL_POPULATION
    tick_period: float = DEFAULT_TICK_PERIOD
    status_log_interval: int = STATUS_LOG_INTERVAL_TICKS
    resources: ResourceConfig = field(default_factory=ResourceConfig)
    lifecycle: LifecycleConfig = field(default_factory=LifecycleConfig)


@dataclass
class ViewConfig:
    """Renderer-side movement, proximity and sizing parameters."""

    width: float = VIEWPORT_WIDTH
    height: float = VIEWPORT_HEIGHT
    move_fraction: float = MOVE_FRACTION
    arrival_distance: float = ARRIVAL_DISTANCE
    hit_test_interval: int = HIT_TEST_INTERVAL_FRAMES
    initial_size: float = FROG_INITIAL_SIZE
    max_size: float = FROG_MAX_SIZE
    growth_rate: float = FROG_GROWTH_RATE
