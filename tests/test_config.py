"""
Tests for SessionConfig / ServerSettings and YAML loading.
"""

import dataclasses

import pytest
import yaml

from placement_mock.core.config import (
    DEFAULT_MARKERS,
    ConfigError,
    DemoObject,
    ServerSettings,
    SessionConfig,
)
from placement_mock.server import SessionServer


class TestSessionConfig:

    def test_defaults(self):
        cfg = SessionConfig()
        assert cfg.configure_delay == 2
        assert cfg.welcome_delay == 5
        assert cfg.marker_delay == 2
        assert cfg.move_delay == 2
        assert cfg.remove_delay == 6
        assert cfg.skip_calibration is False
        assert cfg.markers == DEFAULT_MARKERS
        assert [o.name for o in cfg.demo_objects] == ["lion", "simba"]
        assert cfg.moved_object == DemoObject("simba", "small-photo", 400, 700)
        assert cfg.removed_object == "lion"

    def test_is_immutable(self):
        cfg = SessionConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            cfg.marker_delay = 1

    def test_markers_list_becomes_tuple(self):
        markers = ["A", "B"]
        cfg = SessionConfig(markers=markers)
        markers.append("C")
        assert cfg.markers == ("A", "B")

    def test_calibration_duration(self):
        assert SessionConfig(marker_delay=2, markers=("A", "B", "C")).calibration_duration == 4
        assert SessionConfig(marker_delay=2, markers=("A",)).calibration_duration == 0

    @pytest.mark.parametrize("kwargs", [
        {"marker_delay": -1},
        {"welcome_delay": "5"},
        {"remove_delay": True},
        {"markers": ()},
        {"markers": "top"},
    ])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ConfigError):
            SessionConfig(**kwargs)

    def test_replace_validates(self):
        cfg = SessionConfig()
        assert cfg.replace(skip_calibration=True).skip_calibration is True
        with pytest.raises(ConfigError):
            cfg.replace(configure_delay=-0.5)

    def test_from_dict_partial(self):
        cfg = SessionConfig.from_dict({"marker_delay": 0.5, "markers": ["x", "y"], "bogus": 1})
        assert cfg.marker_delay == 0.5
        assert cfg.markers == ("x", "y")
        assert cfg.welcome_delay == 5

    def test_from_dict_objects(self):
        cfg = SessionConfig.from_dict({
            "demo_objects": [{"name": "nala", "top": 1, "left": 2}],
            "moved_object": {"name": "nala", "top": 3, "left": 4},
            "removed_object": "nala",
        })
        assert cfg.demo_objects == (DemoObject("nala", "small-photo", 1, 2),)
        assert cfg.moved_object.top == 3
        assert cfg.removed_object == "nala"

    def test_from_dict_rejects_nameless_object(self):
        with pytest.raises(ConfigError):
            SessionConfig.from_dict({"demo_objects": [{"top": 1}]})

    def test_dict_round_trip(self):
        cfg = SessionConfig(markers=("A", "B"), skip_calibration=True)
        assert SessionConfig.from_dict(cfg.to_dict()) == cfg

    def test_from_none(self):
        assert SessionConfig.from_dict(None) == SessionConfig()

    @pytest.mark.parametrize("data", [
        {"skip_calibration": "false"},
        {"skip_calibration": 1},
        {"demo_objects": None},
        {"demo_objects": {"name": "lion"}},
        {"moved_object": None},
        {"demo_objects": [{"name": "lion", "top": "200"}]},
        {"markers": None},
    ])
    def test_from_dict_rejects_wrong_shapes(self, data):
        with pytest.raises(ConfigError):
            SessionConfig.from_dict(data)


class TestServerSettings:

    def test_defaults(self):
        settings = ServerSettings.from_dict({})
        assert settings.host == "0.0.0.0"
        assert settings.port == 8080
        assert settings.session == SessionConfig()

    def test_sections(self):
        settings = ServerSettings.from_dict({
            "server": {"host": "127.0.0.1", "port": "9000"},
            "session": {"skip_calibration": True},
        })
        assert settings.host == "127.0.0.1"
        assert settings.port == 9000
        assert settings.session.skip_calibration is True

    @pytest.mark.parametrize("data", [
        ["server", "session"],
        {"server": 5},
        {"server": {"port": None}},
        {"server": {"port": "http"}},
        {"server": {"port": True}},
        {"server": {"port": 70000}},
        {"server": {"host": 12}},
        {"session": 5},
    ])
    def test_rejects_wrong_shapes(self, data):
        with pytest.raises(ConfigError):
            ServerSettings.from_dict(data)


class TestLoadConfig:

    def test_no_file_uses_defaults(self):
        server = SessionServer()
        assert server.load_config()
        assert server.session_config == SessionConfig()

    def test_loads_yaml(self, tmp_path):
        path = tmp_path / "server.yaml"
        path.write_text(yaml.safe_dump({
            "server": {"port": 9100},
            "session": {"welcome_delay": 1, "markers": ["one", "two"]},
        }))

        server = SessionServer(config_path=str(path))
        assert server.load_config()
        assert server.settings.port == 9100
        assert server.session_config.welcome_delay == 1
        assert server.session_config.markers == ("one", "two")

    def test_missing_file(self, tmp_path):
        server = SessionServer(config_path=str(tmp_path / "missing.yaml"))
        assert not server.load_config()

    def test_invalid_values(self, tmp_path):
        path = tmp_path / "server.yaml"
        path.write_text("session:\n  markers: []\n")
        assert not SessionServer(config_path=str(path)).load_config()

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "server.yaml"
        path.write_text("session: [unclosed\n")
        assert not SessionServer(config_path=str(path)).load_config()

    @pytest.mark.parametrize("text", [
        "server:\n  port: null\n",
        "session:\n  demo_objects: null\n",
        "- server\n- session\n",
        "server: 5\n",
        "session:\n  skip_calibration: \"false\"\n",
    ])
    def test_wrong_shapes_fail_cleanly(self, tmp_path, text):
        path = tmp_path / "server.yaml"
        path.write_text(text)
        assert not SessionServer(config_path=str(path)).load_config()
