"""Minimal drawing/geometry capability used by renderer-side views.

``Canvas`` is what a view needs from a vector-graphics backend: create a
shape, style it, move and scale it, read its bounds, test whether a point
lies within it (with tolerance), remove it, and drive a per-frame
callback. ``BoxCanvas`` implements it with axis-aligned rectangles and no
actual drawing, which is all proximity tests need.
"""

from __future__ import annotations

import itertools
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol

from pond.config.simulation_config import ViewConfig
from pond.math_utils import Vector2

FrameHandler = Callable[[int], None]


class Rect:
    """Axis-aligned rectangle in render-space pixels."""

    __slots__ = ("x", "y", "width", "height")

    def __init__(self, x: float = 0, y: float = 0, width: float = 1, height: float = 1):
        self.x = x
        self.y = y
        self.width = width
        self.height = height

    @property
    def center(self) -> Vector2:
        return Vector2(self.x + self.width / 2, self.y + self.height / 2)

    @center.setter
    def center(self, value: Vector2) -> None:
        self.x = value.x - self.width / 2
        self.y = value.y - self.height / 2

    def expanded(self, margin: float) -> "Rect":
        return Rect(
            self.x - margin,
            self.y - margin,
            self.width + 2 * margin,
            self.height + 2 * margin,
        )

    def contains(self, point: Vector2) -> bool:
        return (
            self.x <= point.x <= self.x + self.width
            and self.y <= point.y <= self.y + self.height
        )

    def __repr__(self) -> str:
        return f"Rect({self.x}, {self.y}, {self.width}, {self.height})"


@dataclass
class Shape:
    """A drawable rectangle and its visual attributes."""

    id: int
    bounds: Rect
    fill: Any = None
    fill_alpha: float = 1.0
    stroke: Any = None
    removed: bool = False

    @property
    def position(self) -> Vector2:
        return self.bounds.center


class Canvas(Protocol):
    """Drawing capability required by ``FrogView`` and ``PondView``."""

    @property
    def size(self) -> tuple[float, float]: ...

    def create_shape(self, position: Vector2, size: float) -> Shape: ...

    def set_fill_style(self, shape: Shape, color: Any, alpha: float = 1.0) -> None: ...

    def set_stroke_style(self, shape: Shape, color: Any) -> None: ...

    def translate_to(self, shape: Shape, position: Vector2) -> None: ...

    def scale(self, shape: Shape, factor: float) -> None: ...

    def bounds_of(self, shape: Shape) -> Rect: ...

    def hit_test(self, shape: Shape, point: Vector2, tolerance: float) -> bool: ...

    def remove(self, shape: Shape) -> None: ...

    def on_frame(self, handler: FrameHandler) -> None: ...


@dataclass
class BoxCanvas:
    """Headless ``Canvas`` built from bounding boxes.

    Frames do not run on their own; call ``advance`` to fire the
    registered frame handlers.
    """

    width: float
    height: float
    shapes: dict[int, Shape] = field(default_factory=dict)
    frame_count: int = 0
    _handlers: list[FrameHandler] = field(default_factory=list)
    _ids: Any = field(default_factory=lambda: itertools.count(1))

    @classmethod
    def from_config(cls, config: Optional[ViewConfig] = None) -> "BoxCanvas":
        """A canvas sized to the configured viewport."""
        config = config or ViewConfig()
        return cls(width=config.width, height=config.height)

    @property
    def size(self) -> tuple[float, float]:
        return (self.width, self.height)

    def create_shape(self, position: Vector2, size: float) -> Shape:
        shape = Shape(id=next(self._ids), bounds=Rect(position.x, position.y, size, size))
        self.shapes[shape.id] = shape
        return shape

    def set_fill_style(self, shape: Shape, color: Any, alpha: float = 1.0) -> None:
        shape.fill = color
        shape.fill_alpha = alpha

    def set_stroke_style(self, shape: Shape, color: Any) -> None:
        shape.stroke = color

    def translate_to(self, shape: Shape, position: Vector2) -> None:
        shape.bounds.center = position

    def scale(self, shape: Shape, factor: float) -> None:
        """Scale about the shape's centre."""
        center = shape.bounds.center
        shape.bounds.width *= factor
        shape.bounds.height *= factor
        shape.bounds.center = center

    def bounds_of(self, shape: Shape) -> Rect:
        b = shape.bounds
        return Rect(b.x, b.y, b.width, b.height)

    def hit_test(self, shape: Shape, point: Vector2, tolerance: float) -> bool:
        """True if ``point`` lies inside the shape's bounds grown by ``tolerance``."""
        if shape.removed:
            return False
        return shape.bounds.expanded(tolerance).contains(point)

    def remove(self, shape: Shape) -> None:
        shape.removed = True
        self.shapes.pop(shape.id, None)

    def on_frame(self, handler: FrameHandler) -> None:
        self._handlers.append(handler)

    def advance(self, frames: int = 1) -> None:
        """Fire ``frames`` frames, numbered from the running frame count."""
        for _ in range(frames):
            for handler in list(self._handlers):
                handler(self.frame_count)
            self.frame_count += 1
