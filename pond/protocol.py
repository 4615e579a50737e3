"""Wire protocol shared by the server sync channels and renderers.

Every message is a JSON object ``{"event": <name>, "args": [...]}``. The
argument list mirrors an event emitter's positional arguments, so
``frog.mate`` carries two frog snapshots and ``frog.position`` a frog
reference followed by a normalized ``{x, y}`` point. Field names are kept
camelCase for compatibility with existing renderers.
"""

from __future__ import annotations

from typing import Any, Union

import orjson
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from pond.entities.frog import FrogSnapshot, Position
from pond.events import FrogCreatedEvent, FrogRemovedEvent, FrogUpdatedEvent, PondStatsEvent
from pond.exceptions import ProtocolError

# Server -> client
FROG_CREATE = "frog.create"
FROG_UPDATE = "frog.update"
FROG_DESTROY = "frog.destroy"
FROGS_STATS = "frogs.stats"
ALGAE_STATS = "algae.stats"
OXYGEN_STATS = "oxygen.stats"
NITROGEN_STATS = "nitrogen.stats"

# Client -> server
FROG_MATE = "frog.mate"
FROG_POSITION = "frog.position"

# Both directions (transport level)
DISCONNECT = "disconnect"

STATS_EVENTS = (FROGS_STATS, ALGAE_STATS, OXYGEN_STATS, NITROGEN_STATS)

Message = dict[str, Any]


def message(event: str, *args: Any) -> Message:
    return {"event": event, "args": list(args)}


def frog_payload(frog: FrogSnapshot) -> dict[str, Any]:
    """Serialize a frog snapshot the way renderers expect it."""
    return {
        "id": frog.id,
        "gender": frog.gender.value,
        "canMate": frog.can_mate,
        "maxAge": frog.max_age,
        "age": frog.age,
        "position": {"x": frog.position.x, "y": frog.position.y},
    }


def create_message(frog: FrogSnapshot) -> Message:
    return message(FROG_CREATE, frog_payload(frog))


def update_message(frog: FrogSnapshot) -> Message:
    return message(FROG_UPDATE, frog_payload(frog))


def destroy_message(frog_id: str) -> Message:
    return message(FROG_DESTROY, frog_id)


def stats_messages(stats: PondStatsEvent) -> list[Message]:
    return [
        message(FROGS_STATS, {"num": stats.population}),
        message(ALGAE_STATS, {"num": stats.algae}),
        message(OXYGEN_STATS, {"num": stats.oxygen}),
        message(NITROGEN_STATS, {"num": stats.nitrogen}),
    ]


def event_to_messages(event: object) -> list[Message]:
    """Translate an engine domain event into outbound wire messages."""
    if isinstance(event, FrogCreatedEvent):
        return [create_message(event.frog)]
    if isinstance(event, FrogUpdatedEvent):
        return [update_message(event.frog)]
    if isinstance(event, FrogRemovedEvent):
        return [destroy_message(event.frog_id)]
    if isinstance(event, PondStatsEvent):
        return stats_messages(event)
    raise ProtocolError(f"No wire form for event {type(event).__name__}")


def encode(msg: Message) -> bytes:
    return orjson.dumps(msg)


def decode(raw: Union[str, bytes]) -> Message:
    """Parse a raw frame into a message dict.

    Raises:
        ProtocolError: if the frame is not a JSON object with an event name
    """
    try:
        data = orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        raise ProtocolError("Invalid JSON payload.") from e
    if not isinstance(data, dict) or not isinstance(data.get("event"), str):
        raise ProtocolError("Message must be an object with an 'event' name.")
    args = data.get("args", [])
    if not isinstance(args, list):
        args = [args]
    return {"event": data["event"], "args": args}


# ----------------------------------------------------------------------
# Inbound validation
# ----------------------------------------------------------------------


class FrogRef(BaseModel):
    """A renderer's reference to a frog: a full snapshot or a bare id.

    Only the id is trusted; the engine re-resolves everything else.
    """

    model_config = ConfigDict(extra="ignore")

    id: str

    @model_validator(mode="before")
    @classmethod
    def _coerce(cls, value: Any) -> Any:
        if isinstance(value, (str, int)):
            return {"id": str(value)}
        if isinstance(value, dict) and isinstance(value.get("id"), int):
            return {**value, "id": str(value["id"])}
        return value


class PointModel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    x: float
    y: float

    def to_position(self) -> Position:
        return Position.clamped(self.x, self.y)


class MateRequest(BaseModel):
    """``frog.mate``: two frogs a renderer saw touching."""

    first: FrogRef
    second: FrogRef


class PositionReport(BaseModel):
    """``frog.position``: where a renderer last drew a frog."""

    frog: FrogRef
    position: PointModel = Field(description="Normalized coordinates")


def parse_inbound(msg: Message) -> Union[MateRequest, PositionReport]:
    """Validate a client-originated message.

    Raises:
        ProtocolError: for unknown events or malformed arguments
    """
    event = msg.get("event")
    args = msg.get("args") or []
    try:
        if event == FROG_MATE:
            if len(args) < 2:
                raise ProtocolError("frog.mate expects two frogs.")
            return MateRequest(first=args[0], second=args[1])
        if event == FROG_POSITION:
            if len(args) < 2:
                raise ProtocolError("frog.position expects a frog and a position.")
            return PositionReport(frog=args[0], position=args[1])
    except ValidationError as e:
        raise ProtocolError(f"Invalid {event} payload: {e.error_count()} error(s)") from e
    raise ProtocolError(f"Unknown event: {event}")
