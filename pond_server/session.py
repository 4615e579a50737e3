"""Pond session: one engine shared by every connected renderer.

The session starts ticking when its first channel connects and resets the
pond (``SimulationEngine.stop``) when its last channel disconnects.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

from pond.engine import SimulationEngine
from pond.exceptions import SimulationError
from pond_server.sync_channel import Deliver, SyncChannel

logger = logging.getLogger(__name__)


class PondSession:
    """Owns the authoritative engine and its set of sync channels."""

    def __init__(self, engine: Optional[SimulationEngine] = None, tick_period: Optional[float] = None):
        self.engine = engine or SimulationEngine()
        self.tick_period = tick_period if tick_period is not None else self.engine.config.tick_period
        self._channels: set[SyncChannel] = set()
        self._lock = threading.Lock()

    @property
    def channel_count(self) -> int:
        with self._lock:
            return len(self._channels)

    def connect(self, deliver: Deliver) -> SyncChannel:
        """Open a channel for a new renderer and make sure the pond runs."""
        with self._lock:
            channel = SyncChannel(self.engine, deliver)
            channel.open()
            self._channels.add(channel)
            try:
                started = self.engine.start(self.tick_period)
            except SimulationError:
                channel.close()
                self._channels.discard(channel)
                raise
            if started:
                logger.info("Session started by channel %s", channel.channel_id)
            logger.info("Channel %s connected. Total channels: %d", channel.channel_id, len(self._channels))
            return channel

    def disconnect(self, channel: SyncChannel) -> None:
        """Close a channel; the last one out resets the pond."""
        with self._lock:
            channel.close()
            self._channels.discard(channel)
            remaining = len(self._channels)
            logger.info("Channel %s disconnected. Total channels: %d", channel.channel_id, remaining)
            if remaining == 0:
                self.engine.stop()
                logger.info("Last channel left, session reset")

    def shutdown(self) -> None:
        """Close every channel and stop the engine (server shutdown)."""
        with self._lock:
            for channel in list(self._channels):
                channel.close()
            self._channels.clear()
            self.engine.stop()
