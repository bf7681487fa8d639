"""Logging setup shared by the CLI and the web app."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

from tokenmeta.registry.errors import ConfigError

LEVELS = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}


def resolve_level(name: str) -> int:
    try:
        return LEVELS[name.strip().lower()]
    except KeyError:
        raise ConfigError(f"Unknown log level {name!r}") from None


def configure_logging(level: str = "debug", console: Console | None = None) -> None:
    """Route the ``tokenmeta`` and ``web`` loggers to a rich handler on stderr."""
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    numeric = resolve_level(level)

    for name in ("tokenmeta", "web"):
        log = logging.getLogger(name)
        log.handlers[:] = [handler]
        log.setLevel(numeric)
        log.propagate = False
