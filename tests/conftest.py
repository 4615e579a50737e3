"""Pytest configuration and fixtures for pond tests."""

import random

import pytest

from pond.config.simulation_config import PondConfig
from pond.engine import SimulationEngine


@pytest.fixture
def seeded_rng():
    """Provide a deterministic RNG for tests."""
    return random.Random(42)


@pytest.fixture
def engine(seeded_rng):
    """An empty engine with a one-second period that is never started."""
    engine = SimulationEngine(PondConfig(initial_population=0), rng=seeded_rng)
    yield engine
    engine.stop()


@pytest.fixture
def recorded_events(engine):
    """Every event the engine emits after the fixture is requested, in order."""
    events: list = []
    engine.attach(events.append)
    return events
