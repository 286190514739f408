"""
Pytest configuration for placement mock tests.

Provides sessions on a virtual clock (ManualScheduler) and a live server
bound to a free loopback port.
"""
import sys
import time
from pathlib import Path

import pytest

# Ensure placement_mock is importable without installing
sys.path.insert(0, str(Path(__file__).parent.parent))

from placement_mock.core.config import ServerSettings, SessionConfig
from placement_mock.core.scheduler import ManualScheduler
from placement_mock.core.session import Session
from placement_mock.server import SessionServer


class Recorder:
    """Collects (virtual time, envelope) pairs emitted by a session."""

    def __init__(self, scheduler):
        self.scheduler = scheduler
        self.emitted = []

    def __call__(self, envelope):
        self.emitted.append((self.scheduler.now(), envelope))

    @property
    def types(self):
        return [envelope.type for _, envelope in self.emitted]

    def of_type(self, msg_type):
        return [(t, e) for t, e in self.emitted if e.type == msg_type]

    def clear(self):
        self.emitted.clear()


@pytest.fixture
def config():
    """The reference timing: 2/5/2 seconds, six markers."""
    return SessionConfig(
        configure_delay=2,
        welcome_delay=5,
        marker_delay=2,
        move_delay=2,
        remove_delay=6,
        markers=("A", "B", "C", "D", "E", "F"),
        skip_calibration=False,
    )


@pytest.fixture
def make_session():
    """Factory: make_session(config) -> (session, scheduler, recorder)."""
    created = []

    def factory(cfg):
        scheduler = ManualScheduler()
        recorder = Recorder(scheduler)
        session = Session(cfg, emit=recorder, scheduler=scheduler)
        created.append(session)
        return session, scheduler, recorder

    yield factory

    for session in created:
        session.close()


@pytest.fixture
def fast_config():
    """Short real-time delays for tests against a live server."""
    return SessionConfig(
        configure_delay=0.2,
        welcome_delay=0.1,
        marker_delay=0.05,
        move_delay=0.2,
        remove_delay=0.4,
        markers=("A", "B", "C"),
    )


@pytest.fixture
def live_server(fast_config):
    """A running SessionServer on 127.0.0.1 with an ephemeral port."""
    server = SessionServer(settings=ServerSettings(host="127.0.0.1", port=0, session=fast_config))
    server.start()
    yield server
    server.shutdown()


def wait_until(predicate, timeout=2.0, interval=0.01):
    """Poll predicate until it is true or timeout expires."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


def collect_types(envelopes):
    """Types of a list of envelopes, in order."""
    return [e.type for e in envelopes]
