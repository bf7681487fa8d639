"""Tests for settings resolution."""

import tempfile
from pathlib import Path

import pytest
import yaml

from tokenmeta.config import DEFAULT_LISTEN, load_settings, parse_listen
from tokenmeta.logs import resolve_level
from tokenmeta.registry.errors import ConfigError


def test_mappings_required():
    with pytest.raises(ConfigError):
        load_settings(environ={})


def test_environment_values():
    settings = load_settings(
        environ={
            "MAPPINGS": "/data/mappings",
            "LISTEN": "0.0.0.0:9000",
            "LOG_LEVEL": "INFO",
            "RELOAD_TIMEOUT": "2.5",
        }
    )
    assert settings.mappings == Path("/data/mappings")
    assert settings.bind == ("0.0.0.0", 9000)
    assert settings.log_level == "info"
    assert settings.reload_timeout == 2.5


def test_defaults():
    settings = load_settings(environ={"MAPPINGS": "/m"})
    assert settings.listen == DEFAULT_LISTEN
    assert settings.log_level == "debug"


def test_file_then_env_then_overrides():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "tokenmeta.yaml"
        path.write_text(
            yaml.dump({"mappings": "/from/file", "listen": "localhost:7000", "log_level": "warning"})
        )

        settings = load_settings(path, environ={})
        assert settings.mappings == Path("/from/file")
        assert settings.listen == "localhost:7000"

        settings = load_settings(path, environ={"MAPPINGS": "/from/env"})
        assert settings.mappings == Path("/from/env")
        assert settings.log_level == "warning"

        settings = load_settings(path, environ={"MAPPINGS": "/from/env"}, mappings="/from/cli", listen=None)
        assert settings.mappings == Path("/from/cli")
        assert settings.listen == "localhost:7000"


def test_config_file_errors():
    with tempfile.TemporaryDirectory() as tmpdir:
        bad = Path(tmpdir) / "bad.yaml"
        bad.write_text("- just\n- a list\n")
        with pytest.raises(ConfigError):
            load_settings(bad, environ={})

        unknown = Path(tmpdir) / "unknown.yaml"
        unknown.write_text(yaml.dump({"mappings": "/m", "port": 1}))
        with pytest.raises(ConfigError):
            load_settings(unknown, environ={})

        with pytest.raises(ConfigError):
            load_settings(Path(tmpdir) / "absent.yaml", environ={})


def test_invalid_values():
    with pytest.raises(ConfigError):
        load_settings(environ={"MAPPINGS": "/m", "LISTEN": "nonsense"})
    with pytest.raises(ConfigError):
        load_settings(environ={"MAPPINGS": "/m", "RELOAD_TIMEOUT": "soon"})


def test_parse_listen():
    assert parse_listen("127.0.0.1:8080") == ("127.0.0.1", 8080)
    assert parse_listen("[::1]:8080") == ("::1", 8080)
    with pytest.raises(ConfigError):
        parse_listen("host:99999")
    with pytest.raises(ConfigError):
        parse_listen(":8080")


def test_resolve_level():
    assert resolve_level("DEBUG") == 10
    assert resolve_level("warn") == 30
    with pytest.raises(ConfigError):
        resolve_level("loud")
