"""
Placement Mock - scripted calibration and object placement session server.

This package provides a WebSocket server that plays back a deterministic
session where:
- Configuration requests are acknowledged (some after a delay)
- Calibration presents a sequence of markers on a fixed schedule
- The work phase creates, moves and removes demo objects
- Every connection gets its own isolated session and timers
"""

from placement_mock.core.config import SessionConfig, ServerSettings, DemoObject
from placement_mock.core.messages import Envelope, MalformedMessage, MessageType
from placement_mock.core.session import Session, Phase
from placement_mock.client import SessionClient

__version__ = "1.0.0"
__all__ = [
    "SessionConfig",
    "ServerSettings",
    "DemoObject",
    "Envelope",
    "MalformedMessage",
    "MessageType",
    "Session",
    "Phase",
    "SessionClient",
]
