#!/usr/bin/env python3
"""
Session client for the placement mock server.

Provides a simple Python API for driving a placement session: one helper
per inbound message type, plus blocking receive with a timeout.
"""

import logging
from contextlib import ExitStack
from typing import Any, List, Optional

from websockets.exceptions import ConnectionClosed, WebSocketException
from websockets.sync.client import ClientConnection, connect

from placement_mock.core.messages import (
    Envelope,
    Event,
    MessageType,
    decode,
    encode,
    event_from_envelope,
)

logger = logging.getLogger(__name__)


class SessionClient:
    """
    WebSocket client for the placement mock server.

    Usage:
        client = SessionClient("localhost")
        client.connect()
        client.listen_to_start()
        print(client.receive(timeout=10))
        client.disconnect()

        # Context manager
        with SessionClient("localhost", port=8080) as client:
            client.work_init()
            for envelope in client.receive_all(timeout=1.0):
                print(envelope.type)
    """

    def __init__(self, host: str, port: int = 8080, timeout: float = 5.0):
        """
        Initialize session client.

        Args:
            host: Server IP address or hostname
            port: Server port (default: 8080)
            timeout: Connect timeout and default receive timeout in seconds
        """
        self.host = host
        self.port = port
        self.timeout = timeout
        self._connection: Optional[ClientConnection] = None
        self._stack: Optional[ExitStack] = None

    @property
    def uri(self) -> str:
        return f"ws://{self.host}:{self.port}"

    def connect(self) -> bool:
        """
        Connect to the server.

        Returns:
            True if connection successful
        """
        self._close_connection()

        stack = ExitStack()
        try:
            # the connection is entered as a context manager and left on disconnect
            self._connection = stack.enter_context(connect(self.uri, open_timeout=self.timeout))
            self._stack = stack
            logger.info(f"Connected to placement mock at {self.uri}")
            return True
        except (OSError, TimeoutError, WebSocketException) as e:
            logger.error(f"Failed to connect to placement mock: {e}")
            self._connection = None
            return False

    def _close_connection(self):
        stack, self._stack = self._stack, None
        self._connection = None
        if stack is not None:
            stack.close()

    def disconnect(self):
        """Disconnect from the server."""
        self._close_connection()
        logger.info("Disconnected from placement mock")

    @property
    def is_connected(self) -> bool:
        return self._connection is not None

    def send(self, msg_type: str, **message: Any) -> bool:
        """
        Send one envelope.

        Returns:
            True if the frame was written
        """
        if self._connection is None:
            logger.warning("Not connected to placement mock")
            return False

        envelope = Envelope(type=getattr(msg_type, "value", msg_type), message=message)
        try:
            self._connection.send(encode(envelope))
            return True
        except ConnectionClosed as e:
            logger.error(f"Send failed, connection closed: {e}")
            self._close_connection()
            return False

    def send_raw(self, frame: str) -> bool:
        """Send a frame as-is (for exercising the server's error handling)."""
        if self._connection is None:
            logger.warning("Not connected to placement mock")
            return False
        try:
            self._connection.send(frame)
            return True
        except ConnectionClosed as e:
            logger.error(f"Send failed, connection closed: {e}")
            self._close_connection()
            return False

    def receive(self, timeout: Optional[float] = None) -> Optional[Envelope]:
        """
        Wait for the next envelope.

        Args:
            timeout: Seconds to wait (defaults to the client timeout)

        Returns:
            The envelope, or None on timeout or closed connection
        """
        if self._connection is None:
            return None

        try:
            frame = self._connection.recv(timeout=self.timeout if timeout is None else timeout)
        except TimeoutError:
            return None
        except ConnectionClosed:
            logger.info("Server closed the connection")
            self._close_connection()
            return None
        return decode(frame)

    def receive_event(self, timeout: Optional[float] = None) -> Optional[Event]:
        """Like receive() but returns the typed outbound event."""
        envelope = self.receive(timeout)
        return event_from_envelope(envelope) if envelope is not None else None

    def receive_all(self, timeout: float = 1.0) -> List[Envelope]:
        """Collect envelopes until none arrives for ``timeout`` seconds."""
        received = []
        while True:
            envelope = self.receive(timeout)
            if envelope is None:
                return received
            received.append(envelope)

    def wait_for(self, msg_type: str, timeout: Optional[float] = None) -> Optional[Envelope]:
        """Skip envelopes until one of ``msg_type`` arrives."""
        wanted = getattr(msg_type, "value", msg_type)
        while True:
            envelope = self.receive(timeout)
            if envelope is None or envelope.type == wanted:
                return envelope

    # --- Configuration ---

    def configure_object_types(self, **message) -> bool:
        return self.send(MessageType.CONFIGURE_OBJECT_TYPES, **message)

    def configure_objects(self, **message) -> bool:
        return self.send(MessageType.CONFIGURE_OBJECTS, **message)

    def configure_sizing(self, **message) -> bool:
        return self.send(MessageType.CONFIGURE_SIZING, **message)

    # --- Calibration ---

    def listen_to_start(self) -> bool:
        """Ask for calibration; answered after the welcome delay."""
        return self.send(MessageType.CALIBRATION_LISTEN_TO_START)

    # --- Work ---

    def work_init(self) -> bool:
        return self.send(MessageType.WORK_INIT)

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()
        return False
