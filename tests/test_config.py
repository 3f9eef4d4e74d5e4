"""
Configuration and Descriptor Tests
==================================
"""

import json

import pytest

from space_status.config import Settings, load_config
from space_status.descriptor import initial_count, load_descriptor
from space_status.models.descriptor import SpaceDescriptor


ENV_VARS = (
    "SPACE_DESCRIPTOR_PATH",
    "SPACE_EVENTS_URL",
    "SPACE_FORUM_BASE_URL",
    "SPACE_REFRESH_INTERVAL",
    "SPACE_FETCH_TIMEOUT",
    "SPACE_FEED_URL",
    "SPACE_FEED_ENABLED",
    "SPACE_PORT",
    "SPACE_LOG_LEVEL",
    "PORT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestLoadConfig:

    def test_defaults(self, tmp_path):
        settings = load_config(str(tmp_path / "absent.yaml"))
        assert settings.events.refresh_interval_seconds == 300
        assert settings.events.fetch_timeout_seconds == 10
        assert settings.server.port == 1323
        assert settings.feed.enabled is False
        assert settings.server.timeout_keep_alive_seconds == 10
        assert settings.logging.access_log is True

    def test_yaml_values(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "events:\n"
            "  source_url: https://forum.example.org/c/events.json\n"
            "  refresh_interval_seconds: 60\n"
            "feed:\n"
            "  enabled: true\n"
        )
        settings = load_config(str(path))
        assert settings.events.source_url == "https://forum.example.org/c/events.json"
        assert settings.events.refresh_interval_seconds == 60
        assert settings.feed.enabled is True

    def test_env_overrides_yaml(self, tmp_path, monkeypatch):
        path = tmp_path / "config.yaml"
        path.write_text("server:\n  port: 9000\nevents:\n  fetch_timeout_seconds: 3\n")

        monkeypatch.setenv("SPACE_PORT", "8080")
        monkeypatch.setenv("SPACE_FETCH_TIMEOUT", "4.5")
        monkeypatch.setenv("SPACE_FEED_ENABLED", "yes")
        monkeypatch.setenv("SPACE_LOG_LEVEL", "DEBUG")

        settings = load_config(str(path))
        assert settings.server.port == 8080
        assert settings.events.fetch_timeout_seconds == 4.5
        assert settings.feed.enabled is True
        assert settings.logging.level == "DEBUG"

    def test_port_takes_precedence(self, tmp_path, monkeypatch):
        monkeypatch.setenv("PORT", "7000")
        monkeypatch.setenv("SPACE_PORT", "8080")
        settings = load_config(str(tmp_path / "absent.yaml"))
        assert settings.server.port == 7000

    def test_invalid_interval_rejected(self):
        with pytest.raises(ValueError):
            Settings.model_validate({"events": {"refresh_interval_seconds": 0}})


class TestDescriptor:

    def test_load(self, tmp_path, sample_descriptor):
        path = tmp_path / "space.json"
        path.write_text(json.dumps(sample_descriptor))

        descriptor = load_descriptor(path)

        assert descriptor.space == "TestSpace"
        assert descriptor.location.lat == 40.6
        assert initial_count(descriptor) == 2

    def test_missing_file_gives_default(self, tmp_path):
        descriptor = load_descriptor(tmp_path / "nope.json")
        assert descriptor == SpaceDescriptor()
        assert initial_count(descriptor) == 0

    def test_bad_json_gives_default(self, tmp_path):
        path = tmp_path / "space.json"
        path.write_text("{not json")
        assert load_descriptor(path) == SpaceDescriptor()

    def test_invalid_schema_gives_default(self, tmp_path, sample_descriptor):
        sample_descriptor["sensors"] = {"people_now_present": [{"value": -3}]}
        path = tmp_path / "space.json"
        path.write_text(json.dumps(sample_descriptor))
        assert load_descriptor(path) == SpaceDescriptor()

    def test_bundled_descriptor(self):
        from pathlib import Path

        path = Path(__file__).parent.parent / "data" / "LambdaSpaceAPI.json"
        descriptor = load_descriptor(path)
        assert descriptor.space == "LambdaSpace"
        assert descriptor.sensors.people_now_present[0].value == 0
