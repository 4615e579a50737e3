"""Pond exception hierarchy.

Centralised base classes so callers can catch narrowly and failures
are easier to diagnose.
"""


class PondError(Exception):
    """Root of all pond domain exceptions."""


class SimulationError(PondError):
    """Errors during simulation execution (engine, resources, frogs)."""


class StaleReferenceError(SimulationError):
    """An operation addressed a frog that is no longer in the pond.

    Raised when a renderer still believes a frog exists after the engine
    has removed it. Callers recover by destroying their local view.
    """

    def __init__(self, frog_id: str):
        super().__init__(f"Frog {frog_id} is not in the pond")
        self.frog_id = frog_id


class ProtocolError(PondError):
    """A wire message could not be decoded or validated."""


class ConfigurationError(PondError):
    """Invalid or missing configuration."""
