"""In-memory metadata registry.

Holds the current Snapshot behind a single reference. Readers never lock:
they read the reference once and work from that snapshot. Publishing a new
snapshot is one reference swap under a short publish lock, so a reader sees
either the old mapping in full or the new one in full.

Reloads are serialized by a second lock. Loader I/O runs under the reload
lock only, never under the publish lock.
"""

from __future__ import annotations

import copy
import logging
import threading
from pathlib import Path
from typing import Any, Callable, Mapping, Optional

from tokenmeta.registry.errors import (
    InvalidPathError,
    RegistryUnavailableError,
    ReloadInProgressError,
)
from tokenmeta.registry.loader import load_documents
from tokenmeta.registry.models import LoadReport, ReloadResult, Snapshot

logger = logging.getLogger(__name__)

Loader = Callable[[Path], LoadReport]


class MetadataRegistry:
    """Thread-safe, reloadable subject → document store."""

    def __init__(
        self,
        root: str | Path | None = None,
        loader: Loader = load_documents,
        publish_timeout: float = 5.0,
    ) -> None:
        self.root = Path(root) if root is not None else None
        self._loader = loader
        self._publish_timeout = publish_timeout
        self._publish_lock = threading.Lock()
        self._reload_lock = threading.Lock()
        self._snapshot: Optional[Snapshot] = Snapshot()

    # -- reads ---------------------------------------------------------------

    def snapshot(self) -> Snapshot:
        """Return the snapshot currently in force."""
        snap = self._snapshot
        if snap is None:
            raise RegistryUnavailableError("Registry is closed")
        return snap

    def get(self, subject: str, default: Any = None) -> Any:
        """Return a private copy of the document for *subject*.

        Like dict.get, *default* comes back when the subject is absent; pass
        a sentinel to tell an absent subject from a stored JSON null.
        """
        documents = self.snapshot().documents
        if subject not in documents:
            return default
        return copy.deepcopy(documents[subject])

    def __len__(self) -> int:
        return len(self.snapshot())

    def __contains__(self, subject: object) -> bool:
        return subject in self.snapshot()

    @property
    def generation(self) -> int:
        return self.snapshot().generation

    # -- writes --------------------------------------------------------------

    def replace(
        self,
        documents: Mapping[str, Any],
        source: str | None = None,
    ) -> Snapshot:
        """Publish *documents* as the complete new mapping.

        Subjects missing from *documents* disappear; nothing is merged.
        """
        if not self._publish_lock.acquire(timeout=self._publish_timeout):
            raise RegistryUnavailableError(
                "Timed out waiting for the registry publish lock"
            )
        try:
            previous = self._snapshot
            generation = previous.generation + 1 if previous is not None else 1
            snap = Snapshot.build(documents, generation=generation, source=source)
            self._snapshot = snap
        finally:
            self._publish_lock.release()
        logger.debug("Published generation %d (%d subjects)", snap.generation, len(snap))
        return snap

    def reload(
        self,
        root: str | Path | None = None,
        timeout: float | None = None,
    ) -> ReloadResult:
        """Load *root* (default: the configured root) and publish it.

        Concurrent reloads run one after another; the last one published
        wins. If the reload lock is not obtained within *timeout* seconds,
        ReloadInProgressError is raised. An invalid root raises
        InvalidPathError and leaves the current snapshot in place.
        """
        target = Path(root) if root is not None else self.root
        if target is None:
            raise InvalidPathError("", "no mappings root configured")

        acquired = (
            self._reload_lock.acquire()
            if timeout is None
            else self._reload_lock.acquire(timeout=timeout)
        )
        if not acquired:
            raise ReloadInProgressError(
                f"Another reload is still running after {timeout}s"
            )
        try:
            before = self._snapshot
            try:
                report = self._loader(target)
            except InvalidPathError:
                logger.error("Reload from %s failed; keeping current snapshot", target)
                raise
            snap = self.replace(report.documents, source=report.root)
        finally:
            self._reload_lock.release()

        removed = 0
        if before is not None:
            removed = sum(1 for s in before.documents if s not in snap.documents)
        logger.info(
            "Reloaded generation %d: %d loaded, %d skipped, %d removed",
            snap.generation, report.loaded, len(report.skipped), removed,
        )
        return ReloadResult(
            generation=snap.generation,
            loaded=report.loaded,
            skipped=len(report.skipped),
            removed=removed,
        )

    def close(self) -> None:
        """Drop the current snapshot. Reads fail until the next replace()."""
        with self._publish_lock:
            self._snapshot = None
