"""
SessionClient against a live server.

Deprecation warnings raised from the client module fail these tests, so the
client keeps to the connection contract of the installed websockets.
"""

import pytest

from placement_mock.client import SessionClient
from placement_mock.core.messages import ReconfiguredObjects

from conftest import wait_until


pytestmark = pytest.mark.filterwarnings("error::DeprecationWarning:placement_mock.client")


def test_round_trip_without_deprecations(live_server):
    client = SessionClient("127.0.0.1", port=live_server.port, timeout=2.0)
    assert client.connect()
    try:
        assert client.configure_objects()
        assert client.receive_event() == ReconfiguredObjects()
        assert client.send_raw('{"type": "configure:object_types"}')
        assert client.receive().type == "reconfigured:object_types"
    finally:
        client.disconnect()

    assert not client.is_connected
    assert wait_until(lambda: live_server.active_sessions() == 0)


def test_reconnect_replaces_connection(live_server):
    with SessionClient("127.0.0.1", port=live_server.port, timeout=2.0) as client:
        assert client.connect()
        assert wait_until(lambda: live_server.active_sessions() == 1)
        assert client.configure_objects()
        assert client.receive().type == "reconfigured:objects"


def test_connect_failure_returns_false(live_server):
    port = live_server.port
    live_server.shutdown()

    client = SessionClient("127.0.0.1", port=port, timeout=0.5)
    assert not client.connect()
    assert not client.is_connected
    assert client.receive() is None
    assert not client.send("work:init")


def test_server_close_is_reported_once(live_server):
    client = SessionClient("127.0.0.1", port=live_server.port, timeout=2.0)
    assert client.connect()
    assert client.send_raw("not json")

    assert client.receive() is None
    assert not client.is_connected
    client.disconnect()
