"""
Session configuration for the placement mock.

One SessionConfig is built at startup (from YAML or defaults) and shared
read-only by every session.
"""

import numbers
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Optional, Tuple


DEFAULT_MARKERS = (
    "top left",
    "top",
    "top right",
    "bottom right",
    "bottom",
    "bottom left",
)

DELAY_FIELDS = (
    "configure_delay",
    "welcome_delay",
    "marker_delay",
    "move_delay",
    "remove_delay",
)


class ConfigError(ValueError):
    """Raised when configuration values are missing or out of range."""


@dataclass(frozen=True)
class DemoObject:
    """A placed object shown once the session reaches the working phase."""
    name: str
    type: str = "small-photo"
    top: int = 0
    left: int = 0

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "type": self.type,
            "top": self.top,
            "left": self.left,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "DemoObject":
        if not isinstance(data, dict) or not data.get("name"):
            raise ConfigError(f"Object entry needs a name: {data!r}")
        for key in ("top", "left"):
            value = data.get(key, 0)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigError(f"{data['name']}: {key} must be an integer, got {value!r}")
        return cls(
            name=str(data["name"]),
            type=str(data.get("type", "small-photo")),
            top=data.get("top", 0),
            left=data.get("left", 0),
        )


DEFAULT_DEMO_OBJECTS = (
    DemoObject("lion", "small-photo", top=200, left=200),
    DemoObject("simba", "small-photo", top=200, left=500),
)
DEFAULT_MOVED_OBJECT = DemoObject("simba", "small-photo", top=400, left=700)
DEFAULT_REMOVED_OBJECT = "lion"


@dataclass(frozen=True)
class SessionConfig:
    """
    Timing and content of the scripted session.

    All delays are in seconds. ``markers`` is order-significant: the first
    entry is the start marker and is never re-sent as a next marker.
    """
    configure_delay: float = 2
    welcome_delay: float = 5
    marker_delay: float = 2
    move_delay: float = 2
    remove_delay: float = 6
    skip_calibration: bool = False
    markers: Tuple[str, ...] = DEFAULT_MARKERS
    demo_objects: Tuple[DemoObject, ...] = DEFAULT_DEMO_OBJECTS
    moved_object: DemoObject = DEFAULT_MOVED_OBJECT
    removed_object: str = DEFAULT_REMOVED_OBJECT

    def __post_init__(self):
        for name in DELAY_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, numbers.Real):
                raise ConfigError(f"{name} must be a number, got {value!r}")
            if value < 0:
                raise ConfigError(f"{name} must be non-negative, got {value}")

        if isinstance(self.markers, str):
            raise ConfigError("markers must be a list of marker names")
        markers = tuple(self.markers)
        if not markers:
            raise ConfigError("markers must not be empty")
        # frozen: bypass __setattr__ to normalize lists into tuples
        object.__setattr__(self, "markers", markers)
        object.__setattr__(self, "demo_objects", tuple(self.demo_objects))

    @property
    def marker_count(self) -> int:
        return len(self.markers)

    @property
    def calibration_duration(self) -> float:
        """Time from calibration:start to calibration:done."""
        return self.marker_delay * (self.marker_count - 1)

    def replace(self, **changes) -> "SessionConfig":
        """Return a copy with some fields changed (validated again)."""
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        values.update(changes)
        return SessionConfig(**values)

    def to_dict(self) -> dict:
        return {
            "configure_delay": self.configure_delay,
            "welcome_delay": self.welcome_delay,
            "marker_delay": self.marker_delay,
            "move_delay": self.move_delay,
            "remove_delay": self.remove_delay,
            "skip_calibration": self.skip_calibration,
            "markers": list(self.markers),
            "demo_objects": [obj.to_dict() for obj in self.demo_objects],
            "moved_object": self.moved_object.to_dict(),
            "removed_object": self.removed_object,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "SessionConfig":
        """
        Build a config from a plain dict (e.g. the ``session`` YAML section).

        Missing keys fall back to defaults; unknown keys are ignored.

        Raises:
            ConfigError: On invalid values
        """
        data = data or {}
        if not isinstance(data, dict):
            raise ConfigError(f"session config must be a mapping, got {type(data).__name__}")

        kwargs: Dict[str, Any] = {}
        for name in DELAY_FIELDS:
            if name in data:
                kwargs[name] = data[name]

        if "skip_calibration" in data:
            skip = data["skip_calibration"]
            if not isinstance(skip, bool):
                raise ConfigError(f"skip_calibration must be true or false, got {skip!r}")
            kwargs["skip_calibration"] = skip

        if "markers" in data:
            markers = data["markers"]
            if not isinstance(markers, (list, tuple)):
                raise ConfigError("markers must be a list of marker names")
            kwargs["markers"] = tuple(str(m) for m in markers)

        if "demo_objects" in data:
            objects = data["demo_objects"]
            if not isinstance(objects, (list, tuple)):
                raise ConfigError("demo_objects must be a list of objects")
            kwargs["demo_objects"] = tuple(DemoObject.from_dict(o) for o in objects)
        if "moved_object" in data:
            kwargs["moved_object"] = DemoObject.from_dict(data["moved_object"])
        if "removed_object" in data:
            kwargs["removed_object"] = str(data["removed_object"])

        return cls(**kwargs)


@dataclass
class ServerSettings:
    """Network settings for the WebSocket endpoint."""
    host: str = "0.0.0.0"
    port: int = 8080
    session: SessionConfig = field(default_factory=SessionConfig)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ServerSettings":
        """
        Build settings from the whole YAML document.

        Raises:
            ConfigError: If a section is not a mapping or a value is invalid
        """
        data = data or {}
        if not isinstance(data, dict):
            raise ConfigError(f"config must be a mapping, got {type(data).__name__}")

        server_config = data.get("server") or {}
        if not isinstance(server_config, dict):
            raise ConfigError(f"server config must be a mapping, got {type(server_config).__name__}")

        host = server_config.get("host", cls.host)
        if not isinstance(host, str) or not host:
            raise ConfigError(f"host must be a non-empty string, got {host!r}")

        port = server_config.get("port", cls.port)
        if isinstance(port, bool):
            raise ConfigError(f"port must be an integer, got {port!r}")
        try:
            port = int(port)
        except (TypeError, ValueError):
            raise ConfigError(f"port must be an integer, got {port!r}") from None
        if not 0 <= port <= 65535:
            raise ConfigError(f"port out of range: {port}")

        return cls(
            host=host,
            port=port,
            session=SessionConfig.from_dict(data.get("session")),
        )
