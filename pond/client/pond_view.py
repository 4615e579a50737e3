"""Renderer-side pond: applies server messages and runs the frame loop."""

from __future__ import annotations

import logging
import random
from collections.abc import Callable
from typing import Any, Optional

from pond import protocol
from pond.client.frog_view import FrogView
from pond.client.geometry import Canvas, Shape
from pond.config.display import ALGAE_FILL, ALGAE_PATCH_SIZE
from pond.config.simulation_config import ViewConfig
from pond.math_utils import Vector2

logger = logging.getLogger(__name__)


class PondView:
    """Mirror of the server pond for one renderer.

    Server messages create, update and destroy ``FrogView`` objects. On
    every frame each frog moves toward its destination; every
    ``hit_test_interval`` frames compatible frogs that touch ask the
    server to mate and head off in new directions, and every frog reports
    its normalized position. Eligibility is only a local hint here: the
    server decides whether a mating actually happens.

    Args:
        canvas: Drawing capability; ``on_frame`` is registered on it
        send: Callable that delivers an outbound message dict
        config: View parameters (defaults from ``pond.config.display``)
        rng: Random source for destinations and fallback positions
    """

    def __init__(
        self,
        canvas: Canvas,
        send: Callable[[protocol.Message], None],
        config: Optional[ViewConfig] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.canvas = canvas
        self.config = config or ViewConfig()
        self._send = send
        self._rng = rng or random.Random()

        self.frogs: dict[str, FrogView] = {}
        self.algae: list[Shape] = []
        self.stats: dict[str, int] = {}

        self._handlers: dict[str, Callable[..., None]] = {
            protocol.FROG_CREATE: self._on_create,
            protocol.FROG_UPDATE: self._on_update,
            protocol.FROG_DESTROY: self._on_destroy,
            protocol.ALGAE_STATS: self._on_algae_stats,
            protocol.DISCONNECT: self.handle_disconnect,
        }
        canvas.on_frame(self.on_frame)

    def handle_message(self, msg: protocol.Message) -> None:
        event = msg.get("event")
        args = msg.get("args") or []
        if event in protocol.STATS_EVENTS:
            self.stats[event] = int(args[0]["num"])
        handler = self._handlers.get(event)
        if handler is not None:
            handler(*args)
        elif event not in protocol.STATS_EVENTS:
            logger.debug("Ignoring unknown message %s", event)

    def handle_disconnect(self, *_: Any) -> None:
        """The server went away: drop every local frog."""
        for view in self.frogs.values():
            view.destroy()
        self.frogs.clear()

    def _on_create(self, data: dict[str, Any]) -> None:
        frog_id = str(data["id"])
        existing = self.frogs.get(frog_id)
        if existing is not None:
            existing.update(data)
            return
        self.frogs[frog_id] = FrogView(data, self.canvas, self.config, self._rng)

    def _on_update(self, data: dict[str, Any]) -> None:
        view = self.frogs.get(str(data["id"]))
        if view is not None:
            view.update(data)

    def _on_destroy(self, frog_id: Any) -> None:
        view = self.frogs.pop(str(frog_id), None)
        if view is not None:
            view.destroy()

    def _on_algae_stats(self, data: dict[str, Any]) -> None:
        # One patch per unit of algae
        target = int(data["num"])
        width, height = self.canvas.size
        while len(self.algae) < target:
            position = Vector2(self._rng.randint(0, int(width)), self._rng.randint(0, int(height)))
            patch = self.canvas.create_shape(position, ALGAE_PATCH_SIZE)
            self.canvas.set_fill_style(patch, ALGAE_FILL)
            self.algae.append(patch)
        while len(self.algae) > target:
            self.canvas.remove(self.algae.pop(0))

    def on_frame(self, count: int) -> None:
        """Animate every frog; on hit-test frames, look for mates and report."""
        views = list(self.frogs.values())
        check = count % self.config.hit_test_interval == 0
        for view in views:
            view.animate()
            if not check:
                continue

            for other in views:
                if other is view or not view.is_compatible(other):
                    continue
                if view.hit_test(other):
                    self._send(protocol.message(protocol.FROG_MATE, view.reference(), other.reference()))
                    view.new_destination()
                    other.new_destination()

            position = view.normalized_position()
            self._send(
                protocol.message(
                    protocol.FROG_POSITION,
                    view.reference(),
                    {"x": position.x, "y": position.y},
                )
            )
