"""WebSocket endpoint relaying the pond to renderers."""

from __future__ import annotations

import asyncio
import logging
from contextlib import suppress
from typing import Any, Optional

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

from pond import protocol
from pond.config.server import OUTBOX_MAXSIZE
from pond.exceptions import ProtocolError
from pond_server.security import WebSocketLimiter, client_ip_from_headers
from pond_server.session import PondSession

logger = logging.getLogger(__name__)


class Outbox:
    """Bounded queue of messages waiting to be written to one socket.

    ``deliver`` is handed to the sync channel and may be called from the
    engine's tick thread; it only schedules the put on the event loop.
    Once the queue overflows the renderer counts as gone: ``overflowed``
    is set and further ``deliver`` calls raise ``RuntimeError``, which
    makes the channel close itself.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop, maxsize: int = OUTBOX_MAXSIZE) -> None:
        self._loop = loop
        self.queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue(maxsize=maxsize)
        self.overflowed = asyncio.Event()

    def deliver(self, msg: protocol.Message) -> None:
        if self.overflowed.is_set():
            raise RuntimeError("Renderer is not reading its socket")
        self._loop.call_soon_threadsafe(self.put, msg)

    def put(self, msg: dict[str, Any]) -> None:
        """Enqueue from the event loop thread."""
        if self.overflowed.is_set():
            return
        try:
            self.queue.put_nowait(msg)
        except asyncio.QueueFull:
            logger.warning("Outbox full (%d messages), dropping renderer", self.queue.maxsize)
            self.overflowed.set()


async def _send_loop(websocket: WebSocket, outbox: Outbox) -> None:
    """Single writer for the socket: drain the outbox in order."""
    while True:
        msg = await outbox.queue.get()
        await websocket.send_bytes(protocol.encode(msg))


async def _next_message(websocket: WebSocket, outbox: Outbox) -> Optional[dict[str, Any]]:
    """Wait for the next ASGI message, or None once the outbox has overflowed."""
    receive = asyncio.ensure_future(websocket.receive())
    overflow = asyncio.ensure_future(outbox.overflowed.wait())
    done, pending = await asyncio.wait({receive, overflow}, return_when=asyncio.FIRST_COMPLETED)
    for task in pending:
        task.cancel()
    if receive in done:
        return receive.result()
    return None


async def _handle_websocket(
    websocket: WebSocket,
    session: PondSession,
    limiter: WebSocketLimiter,
    outbox_maxsize: int = OUTBOX_MAXSIZE,
) -> None:
    client_ip = client_ip_from_headers(websocket.headers, websocket.client)
    loop = asyncio.get_running_loop()
    outbox = Outbox(loop, outbox_maxsize)
    limiter_connected = False
    channel = None
    sender = None

    try:
        await websocket.accept()

        if not limiter.connect(client_ip):
            await websocket.send_json(
                {"success": False, "error": "Too many WebSocket connections from this IP."}
            )
            await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
            return
        limiter_connected = True

        sender = asyncio.create_task(_send_loop(websocket, outbox), name=f"pond-send-{client_ip}")
        # Engine and session locks may be held by a tick; keep the loop free
        channel = await loop.run_in_executor(None, session.connect, outbox.deliver)

        while True:
            try:
                message = await _next_message(websocket, outbox)
            except WebSocketDisconnect:
                break

            if message is None:
                with suppress(Exception):
                    await websocket.close(code=status.WS_1013_TRY_AGAIN_LATER)
                break
            if message["type"] == "websocket.disconnect":
                break
            if message["type"] != "websocket.receive":
                continue

            raw = message.get("text")
            if raw is None:
                raw = message.get("bytes")
            if not raw:
                continue

            try:
                msg = protocol.decode(raw)
                if msg["event"] == protocol.DISCONNECT:
                    break
                await loop.run_in_executor(None, channel.receive, msg)
            except ProtocolError as e:
                logger.warning("Rejected message from %s: %s", client_ip, e)
                outbox.put({"success": False, "error": str(e)})
    except Exception:
        logger.exception("WebSocket error for client %s", client_ip)
    finally:
        if channel is not None:
            # Stopping the engine joins its tick thread
            await loop.run_in_executor(None, session.disconnect, channel)
        if sender is not None:
            sender.cancel()
            with suppress(asyncio.CancelledError, Exception):
                await sender
        if limiter_connected:
            limiter.disconnect(client_ip)


def setup_router(
    session: PondSession,
    limiter: WebSocketLimiter,
    outbox_maxsize: int = OUTBOX_MAXSIZE,
) -> APIRouter:
    """Create the websocket router bound to a session."""
    router = APIRouter()

    @router.websocket("/ws")
    async def websocket_pond(websocket: WebSocket) -> None:
        await _handle_websocket(websocket, session, limiter, outbox_maxsize)

    return router
