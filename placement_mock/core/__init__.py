"""Core components for the placement mock."""

from placement_mock.core.config import ConfigError, DemoObject, SessionConfig, ServerSettings
from placement_mock.core.messages import (
    Envelope,
    MalformedMessage,
    MessageType,
    decode,
    encode,
)
from placement_mock.core.scheduler import (
    ManualScheduler,
    Scheduler,
    ThreadedScheduler,
    TimerHandle,
)
from placement_mock.core.session import Phase, Session

__all__ = [
    "ConfigError",
    "DemoObject",
    "SessionConfig",
    "ServerSettings",
    "Envelope",
    "MalformedMessage",
    "MessageType",
    "decode",
    "encode",
    "ManualScheduler",
    "Scheduler",
    "ThreadedScheduler",
    "TimerHandle",
    "Phase",
    "Session",
]
