#!/usr/bin/env python3
"""
Placement Mock Server - scripted calibration and object placement sessions.

This server provides:
1. A WebSocket endpoint speaking the {type, message} JSON protocol
2. One isolated Session (state + timers) per connection
3. Deterministic, configurable delays for every scripted response
4. YAML configuration

Use it as a stand-in for the real placement device when developing or
testing a front end.
"""

import sys
import signal
import threading
import argparse
from pathlib import Path
from typing import Dict, Optional, Tuple

import yaml
from websockets.exceptions import ConnectionClosed, ConnectionClosedError
from websockets.frames import CloseCode
from websockets.sync.server import ServerConnection, serve

from placement_mock.core.config import ServerSettings, SessionConfig
from placement_mock.core.messages import Envelope, MalformedMessage, encode
from placement_mock.core.scheduler import ThreadedScheduler
from placement_mock.core.session import Session
from placement_mock.handlers import get_registry
from placement_mock.utils.logging import setup_logging, get_logger


# Default configuration
DEFAULT_SOCKET_PORT = 8080
DEFAULT_SOCKET_HOST = "0.0.0.0"


class SessionServer:
    """
    WebSocket gateway for placement sessions.

    Architecture:
        Server (single instance)
        ├── ServerSettings (host, port, shared SessionConfig)
        └── connections: Dict[session id, (Session, ServerConnection)]
              └── Session
                  └── ThreadedScheduler (one worker thread)
    """

    def __init__(self, config_path: Optional[str] = None,
                 settings: Optional[ServerSettings] = None):
        """
        Initialize the server.

        Args:
            config_path: Path to server configuration YAML
            settings: Settings to use instead of defaults (config file still wins)
        """
        self.config_path = config_path
        self.settings = settings if settings is not None else ServerSettings(
            host=DEFAULT_SOCKET_HOST, port=DEFAULT_SOCKET_PORT
        )

        self._running = threading.Event()
        self._stop_requested = threading.Event()
        self._server = None
        self._server_thread: Optional[threading.Thread] = None

        self._connections: Dict[int, Tuple[Session, ServerConnection]] = {}
        self._connections_lock = threading.Lock()

        self.logger = get_logger(__name__)

    @property
    def running(self) -> bool:
        """Check if server is running (thread-safe)."""
        return self._running.is_set()

    @property
    def session_config(self) -> SessionConfig:
        return self.settings.session

    @property
    def port(self) -> int:
        """Port actually bound (differs from settings when configured as 0)."""
        if self._server is not None:
            return self._server.socket.getsockname()[1]
        return self.settings.port

    def active_sessions(self) -> int:
        with self._connections_lock:
            return len(self._connections)

    def load_config(self) -> bool:
        """
        Load configuration from YAML file.

        Returns:
            True if successful
        """
        if not self.config_path:
            self.logger.info("No config file specified, using defaults")
            return True

        config_file = Path(self.config_path)
        if not config_file.exists():
            self.logger.error(f"Config file not found: {self.config_path}")
            return False

        try:
            with open(config_file, 'r') as f:
                data = yaml.safe_load(f) or {}
            self.settings = ServerSettings.from_dict(data)
        except (OSError, yaml.YAMLError, ValueError) as e:
            self.logger.error(f"Failed to load config: {e}")
            return False

        cfg = self.settings.session
        self.logger.info(f"Config loaded: socket={self.settings.host}:{self.settings.port}, "
                         f"markers={len(cfg.markers)}, skip_calibration={cfg.skip_calibration}")
        return True

    def start(self):
        """Bind the socket and serve connections in a background thread."""
        self._server = serve(self._handle_client, self.settings.host, self.settings.port)
        self._stop_requested.clear()
        self._running.set()
        self._server_thread = threading.Thread(
            target=self._server.serve_forever, name="ws-server", daemon=True
        )
        self._server_thread.start()
        self.logger.info(f"WebSocket server started on {self.settings.host}:{self.port}")

    def _handle_client(self, connection: ServerConnection):
        """Run one session for the lifetime of a connection."""
        addr = connection.remote_address
        session = Session(
            self.settings.session,
            emit=lambda envelope: self._send(session, connection, envelope),
            scheduler=ThreadedScheduler(name="session-timers"),
            registry=get_registry(),
        )
        with self._connections_lock:
            self._connections[session.id] = (session, connection)
        self.logger.info(f"Client connected from {addr} (session {session.id})")

        try:
            for frame in connection:
                try:
                    session.receive(frame)
                except MalformedMessage as e:
                    self.logger.warning(f"Closing session {session.id}: {e}")
                    connection.close(code=CloseCode.INVALID_DATA, reason="malformed message")
                    break
        except ConnectionClosedError as e:
            self.logger.info(f"Connection from {addr} lost: {e}")
        finally:
            session.close()
            with self._connections_lock:
                self._connections.pop(session.id, None)
            self.logger.info(f"Client disconnected from {addr} (session {session.id})")

    def _send(self, session: Session, connection: ServerConnection, envelope: Envelope):
        try:
            connection.send(encode(envelope))
        except ConnectionClosed:
            self.logger.debug(f"Dropping '{envelope.type}': connection closed")
            # runs under the session lock, so the timer thread is not joined here
            session.close(wait=False)

    def run(self):
        """Serve until shutdown() is called or a signal arrives."""
        signal.signal(signal.SIGTERM, self._signal_handler)
        signal.signal(signal.SIGINT, self._signal_handler)

        if self._server is None:
            self.start()
        try:
            while not self._stop_requested.wait(0.5):
                if self._server_thread is None or not self._server_thread.is_alive():
                    break
        finally:
            self.shutdown()

    def _signal_handler(self, signum, frame):
        signal_names = {signal.SIGTERM: "SIGTERM", signal.SIGINT: "SIGINT (Ctrl+C)"}
        signal_name = signal_names.get(signum, f"signal {signum}")
        self.logger.info(f"Shutdown initiated: Received {signal_name}")
        self._stop_requested.set()

    def shutdown(self):
        """Clean shutdown: stop accepting, end every session."""
        self.logger.info("Shutting down...")
        self._running.clear()
        self._stop_requested.set()

        with self._connections_lock:
            active = list(self._connections.values())
        for session, connection in active:
            session.close()
            connection.close(code=CloseCode.GOING_AWAY, reason="server shutdown")

        if self._server is not None:
            self._server.shutdown()
            self._server = None
        if self._server_thread is not None:
            self._server_thread.join(timeout=2.0)
            self._server_thread = None

        self.logger.info("Shutdown complete")

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.shutdown()
        return False


def main():
    """Entry point for the placement mock server."""
    parser = argparse.ArgumentParser(
        description="Placement Mock Server - scripted calibration and object placement sessions"
    )
    parser.add_argument(
        "-c", "--config",
        help="Path to server configuration YAML"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging"
    )
    parser.add_argument(
        "--port", "-p",
        type=int,
        help=f"WebSocket port (default: {DEFAULT_SOCKET_PORT})"
    )
    parser.add_argument(
        "--host",
        help=f"WebSocket host (default: {DEFAULT_SOCKET_HOST})"
    )
    parser.add_argument(
        "--skip-calibration",
        action="store_true",
        default=False,
        help="Answer calibration:listen_to_start with calibration:done only"
    )
    parser.add_argument(
        "--log-file",
        help="Log file path (default: /var/log/placement_mock.log, then /tmp)"
    )

    args = parser.parse_args()

    setup_logging(verbose=args.verbose, log_file=args.log_file)
    logger = get_logger(__name__)

    server = SessionServer(config_path=args.config)

    if not server.load_config():
        sys.exit(1)

    # Command line wins over the config file
    if args.port is not None:
        server.settings.port = args.port
    if args.host:
        server.settings.host = args.host
    if args.skip_calibration:
        server.settings.session = server.settings.session.replace(skip_calibration=True)

    try:
        server.start()
    except OSError as e:
        logger.error(f"Could not bind {server.settings.host}:{server.settings.port}: {e}")
        sys.exit(1)

    server.run()


if __name__ == "__main__":
    main()
