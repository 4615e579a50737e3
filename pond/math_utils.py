"""Render-space vector math for frog movement."""

from __future__ import annotations

import math

_EPSILON = 1e-9


class Vector2:
    """A point or displacement in render-space pixels."""

    __slots__ = ("x", "y")

    def __init__(self, x: float = 0.0, y: float = 0.0) -> None:
        self.x = float(x)
        self.y = float(y)

    @classmethod
    def from_normalized(cls, x: float, y: float, width: float, height: float) -> "Vector2":
        """Map a [0, 1] pond coordinate onto a viewport, rounding to whole pixels."""
        return cls(round(x * width), round(y * height))

    def normalized(self, width: float, height: float) -> tuple[float, float]:
        """Inverse of ``from_normalized`` (without rounding or clamping)."""
        return (self.x / width, self.y / height)

    def __add__(self, other: "Vector2") -> "Vector2":
        return Vector2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Vector2") -> "Vector2":
        return Vector2(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> "Vector2":
        return Vector2(self.x * scalar, self.y * scalar)

    def length(self) -> float:
        return math.hypot(self.x, self.y)

    def toward(self, target: "Vector2", fraction: float) -> "Vector2":
        """Point ``fraction`` of the way from here to ``target``."""
        return self + (target - self) * fraction

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vector2):
            return NotImplemented
        return abs(self.x - other.x) < _EPSILON and abs(self.y - other.y) < _EPSILON

    def __repr__(self) -> str:
        return f"Vector2({self.x:g}, {self.y:g})"
