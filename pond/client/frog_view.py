"""Renderer-side mirror of a single frog."""

from __future__ import annotations

import logging
import random
from typing import Any, Optional

from pond.client.geometry import Canvas, Rect
from pond.config.display import (
    DEFAULT_STROKE,
    ELIGIBLE_STROKE,
    FEMALE_FILL,
    MALE_FILL,
)
from pond.config.simulation_config import ViewConfig
from pond.entities.frog import Gender, Position
from pond.math_utils import Vector2

logger = logging.getLogger(__name__)


class FrogView:
    """Non-authoritative copy of one frog, animated on the render clock.

    The view mirrors identity, gender, age and eligibility from server
    messages, but owns its own render-space position: it wanders toward a
    random destination every frame and reports where it is back to the
    server. Eligibility shown here may lag the server by one message.

    Attributes:
        id: Frog identifier shared with the server.
        shape: Canvas shape drawing this frog.
        destination: Render-space point the frog is moving toward.
    """

    def __init__(
        self,
        data: dict[str, Any],
        canvas: Canvas,
        config: Optional[ViewConfig] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.config = config or ViewConfig()
        self._canvas = canvas
        self._rng = rng or random.Random()

        self.id: str = str(data["id"])
        self.gender = Gender.MALE
        self.can_mate = False
        self.age = 0
        self.max_age = 1

        self.shape = canvas.create_shape(self._initial_position(data), self.config.initial_size)
        self.destination = self.random_point()
        self.update(data)

    def _initial_position(self, data: dict[str, Any]) -> Vector2:
        # Frogs without a known spot start somewhere random in the viewport
        width, height = self._canvas.size
        raw = data.get("position") or {}
        x, y = raw.get("x"), raw.get("y")
        if not x:
            x = self._rng.randint(0, int(width)) / width
        if not y:
            y = self._rng.randint(0, int(height)) / height
        return Vector2.from_normalized(x, y, width, height)

    @property
    def position(self) -> Vector2:
        return self._canvas.bounds_of(self.shape).center

    @property
    def bounds(self) -> Rect:
        return self._canvas.bounds_of(self.shape)

    def random_point(self) -> Vector2:
        width, height = self._canvas.size
        return Vector2(self._rng.random() * width, self._rng.random() * height)

    def update(self, data: dict[str, Any]) -> None:
        """Apply a server snapshot and restyle the shape."""
        self.gender = Gender(data.get("gender", self.gender.value))
        self.can_mate = bool(data.get("canMate", self.can_mate))
        self.max_age = int(data.get("maxAge", self.max_age))
        self.age = int(data.get("age", self.age))

        # Fade from opaque towards translucent as the frog ages
        alpha = max(0.2, 1.0 - 0.8 * self.age / self.max_age) if self.max_age > 0 else 1.0
        fill = MALE_FILL if self.gender is Gender.MALE else FEMALE_FILL
        self._canvas.set_fill_style(self.shape, fill, alpha)
        self._canvas.set_stroke_style(self.shape, ELIGIBLE_STROKE if self.can_mate else DEFAULT_STROKE)

        width = self.bounds.width
        if width < self.config.max_size:
            factor = self.config.growth_rate ** self.age
            self._canvas.scale(self.shape, min(factor, self.config.max_size / width))

    def animate(self) -> None:
        """Move a fixed fraction of the way to the destination."""
        position = self.position
        self._canvas.translate_to(self.shape, position.toward(self.destination, self.config.move_fraction))

        if (self.destination - position).length() < self.config.arrival_distance:
            self.new_destination()

    def new_destination(self) -> None:
        self.destination = self.random_point()

    def hit_test(self, other: "FrogView", tolerance: Optional[float] = None) -> bool:
        """True if ``other``'s centre lies within this frog's bounds plus tolerance.

        Tolerance defaults to this frog's own width.
        """
        if tolerance is None:
            tolerance = self.bounds.width
        return self._canvas.hit_test(self.shape, other.position, tolerance)

    def is_compatible(self, other: "FrogView") -> bool:
        """Opposite genders and both currently showing as eligible."""
        return self.gender is not other.gender and self.can_mate and other.can_mate

    def normalized_position(self) -> Position:
        return Position.clamped(*self.position.normalized(*self._canvas.size))

    def reference(self) -> dict[str, Any]:
        """Snapshot sent with outbound messages (the server only reads ``id``)."""
        return {
            "id": self.id,
            "gender": self.gender.value,
            "canMate": self.can_mate,
            "maxAge": self.max_age,
            "age": self.age,
        }

    def destroy(self) -> None:
        self._canvas.remove(self.shape)

    def __repr__(self) -> str:
        return f"FrogView(id={self.id[:8]}, gender={self.gender.value}, can_mate={self.can_mate})"
