"""Renderer-side mirror of the pond.

Renderers keep a non-authoritative view of every frog, animate it on
their own frame clock and report positions and mate intents back to the
server. Drawing goes through the small ``Canvas`` capability so the
movement and proximity logic runs without a graphics stack.
"""

from pond.client.frog_view import FrogView
from pond.client.geometry import BoxCanvas, Canvas, Rect, Shape
from pond.client.pond_view import PondView

__all__ = ["BoxCanvas", "Canvas", "FrogView", "PondView", "Rect", "Shape"]
