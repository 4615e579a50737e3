"""Per-renderer synchronization channel.

A channel sits between the single authoritative engine and one connected
renderer. Outbound, it turns engine events into wire messages; inbound,
it turns renderer intents into engine calls. It knows nothing about the
transport: whatever carries the messages supplies a ``deliver`` callable.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from typing import Optional

from pond import protocol
from pond.engine import SimulationEngine
from pond.exceptions import StaleReferenceError

logger = logging.getLogger(__name__)

Deliver = Callable[[protocol.Message], None]


class SyncChannel:
    """Relays engine events to one renderer and its intents back.

    ``deliver`` may be called from the engine's tick thread, so it must
    be thread-safe (the WebSocket router hands it to the event loop with
    ``call_soon_threadsafe``).
    """

    def __init__(
        self,
        engine: SimulationEngine,
        deliver: Deliver,
        channel_id: Optional[str] = None,
    ) -> None:
        self.engine = engine
        self.channel_id = channel_id or uuid.uuid4().hex[:8]
        self._deliver = deliver
        self._open = False

    @property
    def is_open(self) -> bool:
        return self._open

    def open(self) -> int:
        """Seed the renderer with every live frog, then follow live events.

        Returns:
            Number of frogs replayed
        """
        self._open = True
        replayed = self.engine.attach(self._on_event)
        if not self._open:
            # Delivery failed during the replay
            self.engine.detach(self._on_event)
            return replayed
        logger.info("Channel %s opened, replayed %d frogs", self.channel_id, replayed)
        return replayed

    def close(self) -> None:
        if not self._open:
            return
        self._open = False
        self.engine.detach(self._on_event)
        logger.info("Channel %s closed", self.channel_id)

    def _on_event(self, event: object) -> None:
        if not self._open:
            return
        try:
            for msg in protocol.event_to_messages(event):
                self._deliver(msg)
        except RuntimeError as e:
            # The transport's event loop is gone; stop listening
            logger.warning("Channel %s could not deliver, closing: %s", self.channel_id, e)
            self.close()

    def receive(self, msg: protocol.Message) -> None:
        """Apply a message from the renderer.

        Raises:
            ProtocolError: if the message is malformed or unknown
        """
        intent = protocol.parse_inbound(msg)

        if isinstance(intent, protocol.MateRequest):
            queued = self.engine.submit_mate_request(intent.first.id, intent.second.id)
            logger.debug(
                "Channel %s mate request %s+%s (%s)",
                self.channel_id,
                intent.first.id[:8],
                intent.second.id[:8],
                "queued" if queued else "duplicate",
            )
            return

        try:
            self.engine.report_position(intent.frog.id, intent.position.to_position())
        except StaleReferenceError as e:
            # The renderer is behind: tell it to drop its copy
            logger.debug("Channel %s stale frog %s", self.channel_id, e.frog_id[:8])
            self._deliver(protocol.destroy_message(e.frog_id))
