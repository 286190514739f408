"""
Session state for one client connection.

A Session owns its phase, its calibration working copy and its scheduler.
It knows nothing about the transport: outbound envelopes go to an injected
``emit`` callable. Inbound handling and timer callbacks are serialized by a
per-session lock, and nothing is emitted once the session is closed.
"""

import itertools
import logging
import threading
from enum import Enum
from typing import Callable, List, Union

from placement_mock.core.config import SessionConfig
from placement_mock.core.messages import Envelope, Event, decode, to_envelope
from placement_mock.core.scheduler import Scheduler, TimerHandle

logger = logging.getLogger(__name__)

_session_ids = itertools.count(1)


class Phase(Enum):
    """Position in the configure → calibrate → work workflow."""
    IDLE = "idle"
    AWAITING_SIZING = "awaiting_sizing"
    CALIBRATING = "calibrating"
    WORKING = "working"


class Session:
    """
    Scripted placement session.

    Architecture:
        Session (one per connection)
        ├── SessionConfig   (shared, read-only)
        ├── Scheduler       (owned, closed with the session)
        └── emit()          (injected transport writer)
    """

    def __init__(self, config: SessionConfig,
                 emit: Callable[[Envelope], None],
                 scheduler: Scheduler,
                 registry=None):
        """
        Args:
            config: Shared session configuration
            emit: Called with every outbound Envelope
            scheduler: Timer queue owned by this session
            registry: Handler registry (defaults to the global one)
        """
        if registry is None:
            from placement_mock.handlers import get_registry
            registry = get_registry()

        self.id = next(_session_ids)
        self.config = config
        self.scheduler = scheduler
        self._emit = emit
        self._registry = registry
        self._lock = threading.RLock()
        self._closed = False

        self.phase = Phase.IDLE
        self.markers_remaining: List[str] = list(config.markers)
        self.sizing_pending = 0

    @property
    def closed(self) -> bool:
        return self._closed

    def receive(self, frame: Union[str, bytes]) -> bool:
        """
        Decode a wire frame and handle it.

        Raises:
            MalformedMessage: If the frame cannot be decoded
        """
        return self.handle(decode(frame))

    def handle(self, envelope: Envelope) -> bool:
        """
        Dispatch an inbound envelope to its handler.

        Returns:
            True if the type was recognized
        """
        with self._lock:
            if self._closed:
                return False
            logger.info(f"[session {self.id}] received: [{envelope.type}] {envelope.message}")
            handled = self._registry.dispatch(self, envelope)
            if not handled:
                logger.debug(f"[session {self.id}] ignoring unknown type '{envelope.type}'")
            return handled

    def emit(self, event: Event) -> bool:
        """Send an outbound event now. Returns False if the session is closed."""
        with self._lock:
            if self._closed:
                return False
            envelope = to_envelope(event)
            logger.info(f"[session {self.id}] send: [{envelope.type}] {envelope.message}")
            self._emit(envelope)
            return True

    def after(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """Run callback after delay seconds, under the session lock, unless closed by then."""
        def fire():
            with self._lock:
                if self._closed:
                    return
                callback()

        return self.scheduler.schedule(delay, fire)

    def emit_after(self, delay: float, event: Event) -> TimerHandle:
        return self.after(delay, lambda: self.emit(event))

    def close(self, wait: bool = True) -> None:
        """
        Stop the session. Pending timers are dropped and never fire.

        Args:
            wait: Wait for the timer thread to exit. Pass False when
                closing from inside a handler or timer callback.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            pending = self.scheduler.pending()
        # outside the lock: a threaded scheduler joins its worker here
        self.scheduler.close(wait=wait)
        logger.debug(f"[session {self.id}] closed, {pending} pending timer(s) cancelled")

    def __repr__(self):
        return f"Session(id={self.id}, phase={self.phase.value}, closed={self._closed})"
