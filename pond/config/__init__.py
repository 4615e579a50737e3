"""Configuration constants and dataclass configs for the pond simulation."""

from pond.config.simulation_config import (
    LifecycleConfig,
    PondConfig,
    ResourceConfig,
    ViewConfig,
)

__all__ = [
    "LifecycleConfig",
    "PondConfig",
    "ResourceConfig",
    "ViewConfig",
]
