"""Registry data models — snapshots, load reports, and queries."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Mapping, Optional

# Reasons recorded for files the loader could not use
SKIP_NOT_A_FILE = "not-a-file"
SKIP_NO_STEM = "no-stem"
SKIP_IO_ERROR = "io-error"
SKIP_PARSE_ERROR = "parse-error"


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class SkippedFile:
    """A directory entry the loader left out of the mapping."""

    path: str
    reason: str
    detail: str = ""


@dataclass
class LoadReport:
    """Outcome of scanning one mappings directory."""

    root: str
    documents: dict[str, Any] = field(default_factory=dict)
    skipped: list[SkippedFile] = field(default_factory=list)

    @property
    def loaded(self) -> int:
        return len(self.documents)


@dataclass(frozen=True)
class Snapshot:
    """The complete subject → document mapping in force at one point in time.

    Snapshots are never modified after construction; a reload publishes a
    new one in place of the old.
    """

    documents: Mapping[str, Any] = field(
        default_factory=lambda: MappingProxyType({})
    )
    generation: int = 0
    source: Optional[str] = None
    loaded_at: str = field(default_factory=_utcnow)

    @classmethod
    def build(
        cls,
        documents: Mapping[str, Any],
        generation: int,
        source: Optional[str] = None,
    ) -> Snapshot:
        # Copy first so later changes to the caller's dict cannot leak in
        return cls(
            documents=MappingProxyType(dict(documents)),
            generation=generation,
            source=source,
        )

    def __len__(self) -> int:
        return len(self.documents)

    def __contains__(self, subject: object) -> bool:
        return subject in self.documents


@dataclass
class QueryRequest:
    """Batch lookup: ordered subjects plus an optional property projection."""

    subjects: list[str] = field(default_factory=list)
    properties: Optional[list[str]] = None


@dataclass
class ReloadResult:
    """Summary of one reload, as reported to the caller of /reread."""

    generation: int
    loaded: int
    skipped: int = 0
    removed: int = 0
