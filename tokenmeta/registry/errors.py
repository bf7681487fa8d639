"""Error types raised by the registry and its collaborators."""

from __future__ import annotations

from pathlib import Path


class MetadataError(Exception):
    """Base class for every error tokenmeta raises on purpose."""


class ConfigError(MetadataError):
    """Required configuration is missing or malformed."""


class InvalidPathError(MetadataError):
    """The mappings root does not resolve to a readable directory."""

    def __init__(self, path: str | Path, reason: str = "not a directory") -> None:
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Invalid mappings path {self.path}: {reason}")


class RegistryUnavailableError(MetadataError):
    """The current snapshot could not be accessed safely."""


class ReloadInProgressError(MetadataError):
    """Another reload held the reload lock for longer than the caller waited."""


class NotFoundError(MetadataError):
    """A subject or a property of a subject is absent."""

    def __init__(self, subject: str, name: str | None = None) -> None:
        self.subject = subject
        self.name = name
        what = f"{subject}/{name}" if name is not None else subject
        super().__init__(f"Nothing found for {what}")
