"""Service configuration.

Precedence (last wins): defaults → optional YAML file → environment.

Environment variables:
- ``MAPPINGS``: directory of JSON subject documents (required)
- ``LISTEN``: ``host:port`` to bind the HTTP server to
- ``LOG_LEVEL``: logging level name
- ``RELOAD_TIMEOUT``: seconds a reload waits for a running one to finish
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from tokenmeta.registry.errors import ConfigError

DEFAULT_LISTEN = "127.0.0.1:8080"
DEFAULT_LOG_LEVEL = "debug"
DEFAULT_RELOAD_TIMEOUT = 30.0

ENV_KEYS = {
    "mappings": "MAPPINGS",
    "listen": "LISTEN",
    "log_level": "LOG_LEVEL",
    "reload_timeout": "RELOAD_TIMEOUT",
}


@dataclass
class Settings:
    mappings: Path
    listen: str = DEFAULT_LISTEN
    log_level: str = DEFAULT_LOG_LEVEL
    reload_timeout: float = DEFAULT_RELOAD_TIMEOUT

    @property
    def bind(self) -> tuple[str, int]:
        """Split ``listen`` into (host, port)."""
        return parse_listen(self.listen)


def parse_listen(value: str) -> tuple[str, int]:
    host, sep, port = value.rpartition(":")
    if not sep or not host or not port.isdigit():
        raise ConfigError(f"LISTEN must look like host:port, got {value!r}")
    port_num = int(port)
    if not 0 < port_num < 65536:
        raise ConfigError(f"LISTEN port out of range: {port_num}")
    return host.strip("[]"), port_num


def _load_yaml(path: Path) -> dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid config file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must hold a mapping")
    unknown = set(data) - set(ENV_KEYS)
    if unknown:
        raise ConfigError(f"Unknown config keys in {path}: {sorted(unknown)}")
    return data


def load_settings(
    config_file: str | Path | None = None,
    environ: Optional[Mapping[str, str]] = None,
    **overrides: Any,
) -> Settings:
    """Resolve Settings from file, environment and explicit overrides.

    Raises ConfigError when ``mappings`` ends up unset or a value is invalid.
    """
    env = os.environ if environ is None else environ
    raw: dict[str, Any] = {}

    if config_file is not None:
        raw.update(_load_yaml(Path(config_file)))

    for key, env_key in ENV_KEYS.items():
        value = env.get(env_key)
        if value:
            raw[key] = value

    raw.update({k: v for k, v in overrides.items() if v is not None})

    mappings = raw.get("mappings")
    if not mappings:
        raise ConfigError("You need to set MAPPINGS")

    try:
        reload_timeout = float(raw.get("reload_timeout", DEFAULT_RELOAD_TIMEOUT))
    except (TypeError, ValueError) as exc:
        raise ConfigError(
            f"RELOAD_TIMEOUT must be a number, got {raw['reload_timeout']!r}"
        ) from exc

    settings = Settings(
        mappings=Path(str(mappings)).expanduser(),
        listen=str(raw.get("listen", DEFAULT_LISTEN)),
        log_level=str(raw.get("log_level", DEFAULT_LOG_LEVEL)).lower(),
        reload_timeout=reload_timeout,
    )
    # Fail early on a bad listen address rather than at bind time
    parse_listen(settings.listen)
    return settings
