"""
Wire messages for the placement session protocol.

Every frame is a UTF-8 JSON object ``{"type": "domain:action", "message": {...}}``.
Outbound messages are typed events; OUTBOUND_TYPES is the single table that
maps each event class to its wire type.
"""

import json
from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from typing import Any, Dict, Tuple, Type, Union


class MalformedMessage(ValueError):
    """Frame is not a JSON object with a string ``type`` field."""


class MessageType(str, Enum):
    """Every message type the protocol knows about."""

    # inbound
    CONFIGURE_OBJECT_TYPES = "configure:object_types"
    CONFIGURE_OBJECTS = "configure:objects"
    CONFIGURE_SIZING = "configure:sizing"
    CALIBRATION_LISTEN_TO_START = "calibration:listen_to_start"
    WORK_INIT = "work:init"

    # outbound
    RECONFIGURED_OBJECT_TYPES = "reconfigured:object_types"
    RECONFIGURED_OBJECTS = "reconfigured:objects"
    RECONFIGURED_SIZING = "reconfigured:sizing"
    CALIBRATION_START = "calibration:start"
    CALIBRATION_NEXT_MARKER = "calibration:next_marker"
    CALIBRATION_DONE = "calibration:done"
    WORK_START = "work:start"
    OBJECT_CREATE = "object:create"
    OBJECT_MOVE = "object:move"
    OBJECT_REMOVE = "object:remove"


@dataclass
class Envelope:
    """The ``{type, message}`` unit exchanged over the connection."""
    type: str
    message: Dict[str, Any] = field(default_factory=dict)


def decode(frame: Union[str, bytes]) -> Envelope:
    """
    Parse a wire frame into an Envelope.

    Raises:
        MalformedMessage: If the frame is not a JSON object with a string type,
            or carries a non-object message
    """
    if isinstance(frame, (bytes, bytearray)):
        try:
            frame = frame.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedMessage(f"Frame is not valid UTF-8: {e}") from e

    try:
        data = json.loads(frame)
    except (TypeError, json.JSONDecodeError) as e:
        raise MalformedMessage(f"Invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise MalformedMessage(f"Expected a JSON object, got {type(data).__name__}")

    msg_type = data.get("type")
    if not isinstance(msg_type, str) or not msg_type:
        raise MalformedMessage("Missing 'type' field")

    message = data.get("message")
    if message is None:
        message = {}
    elif not isinstance(message, dict):
        raise MalformedMessage(f"'message' must be an object, got {type(message).__name__}")

    return Envelope(type=msg_type, message=message)


def encode(envelope: Envelope) -> str:
    """
    Serialize an Envelope into a wire frame.

    Raises:
        MalformedMessage: If the envelope has no type, so decode() would refuse it
    """
    if not isinstance(envelope.type, str) or not envelope.type:
        raise MalformedMessage("Cannot encode an envelope without a type")
    return json.dumps({"type": envelope.type, "message": envelope.message})


# --- Outbound events ---

@dataclass(frozen=True)
class ReconfiguredObjectTypes:
    pass


@dataclass(frozen=True)
class ReconfiguredObjects:
    pass


@dataclass(frozen=True)
class ReconfiguredSizing:
    pass


@dataclass(frozen=True)
class CalibrationStart:
    markers: Tuple[str, ...]


@dataclass(frozen=True)
class CalibrationNextMarker:
    marker: str


@dataclass(frozen=True)
class CalibrationDone:
    pass


@dataclass(frozen=True)
class WorkStart:
    pass


@dataclass(frozen=True)
class ObjectCreate:
    name: str
    type: str
    top: int
    left: int


@dataclass(frozen=True)
class ObjectMove:
    name: str
    top: int
    left: int


@dataclass(frozen=True)
class ObjectRemove:
    name: str


Event = Union[
    ReconfiguredObjectTypes, ReconfiguredObjects, ReconfiguredSizing,
    CalibrationStart, CalibrationNextMarker, CalibrationDone,
    WorkStart, ObjectCreate, ObjectMove, ObjectRemove,
]

OUTBOUND_TYPES: Dict[Type, MessageType] = {
    ReconfiguredObjectTypes: MessageType.RECONFIGURED_OBJECT_TYPES,
    ReconfiguredObjects: MessageType.RECONFIGURED_OBJECTS,
    ReconfiguredSizing: MessageType.RECONFIGURED_SIZING,
    CalibrationStart: MessageType.CALIBRATION_START,
    CalibrationNextMarker: MessageType.CALIBRATION_NEXT_MARKER,
    CalibrationDone: MessageType.CALIBRATION_DONE,
    WorkStart: MessageType.WORK_START,
    ObjectCreate: MessageType.OBJECT_CREATE,
    ObjectMove: MessageType.OBJECT_MOVE,
    ObjectRemove: MessageType.OBJECT_REMOVE,
}

_EVENTS_BY_TYPE: Dict[str, Type] = {t.value: cls for cls, t in OUTBOUND_TYPES.items()}


def to_envelope(event: Event) -> Envelope:
    """Convert a typed outbound event into its wire envelope."""
    msg_type = OUTBOUND_TYPES.get(type(event))
    if msg_type is None:
        raise TypeError(f"Not an outbound event: {event!r}")
    message = asdict(event)
    if isinstance(event, CalibrationStart):
        message["markers"] = list(event.markers)
    return Envelope(type=msg_type.value, message=message)


def event_from_envelope(envelope: Envelope) -> Event:
    """
    Convert a received outbound envelope back into its typed event.

    Raises:
        MalformedMessage: If the type is not an outbound type or fields are missing
    """
    cls = _EVENTS_BY_TYPE.get(envelope.type)
    if cls is None:
        raise MalformedMessage(f"Unknown outbound type: {envelope.type}")

    kwargs = {}
    for f in fields(cls):
        if f.name not in envelope.message:
            raise MalformedMessage(f"'{envelope.type}' is missing '{f.name}'")
        kwargs[f.name] = envelope.message[f.name]
    if cls is CalibrationStart:
        kwargs["markers"] = tuple(kwargs["markers"])
    return cls(**kwargs)
