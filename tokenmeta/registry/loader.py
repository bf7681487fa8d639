"""Directory loader — build a subject → document mapping from JSON files.

Every regular file directly under the mappings root is one subject, keyed by
its file stem. Files that cannot be read or parsed are skipped and reported;
they never fail the load as a whole.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from tokenmeta.registry.errors import InvalidPathError
from tokenmeta.registry.models import (
    SKIP_IO_ERROR,
    SKIP_NO_STEM,
    SKIP_NOT_A_FILE,
    SKIP_PARSE_ERROR,
    LoadReport,
    SkippedFile,
)

logger = logging.getLogger(__name__)

# Deepest container nesting a served document may have; copying and
# rendering documents recurse once per level
MAX_DEPTH = 256


def nesting_depth(document) -> int:
    """Return how many containers deep *document* goes (0 for scalars)."""
    deepest = 0
    stack = [(document, 1)]
    while stack:
        value, depth = stack.pop()
        if isinstance(value, dict):
            children = value.values()
        elif isinstance(value, list):
            children = value
        else:
            continue
        deepest = max(deepest, depth)
        stack.extend((child, depth + 1) for child in children)
    return deepest


def subject_for(path: Path) -> str:
    """Return the subject a file maps to (its name without the suffix)."""
    return path.stem


def _list_entries(root: Path) -> list[Path]:
    if not root.is_dir():
        raise InvalidPathError(root)
    try:
        # Sorted so that same-stem collisions resolve the same way every time
        return sorted(root.iterdir(), key=lambda p: p.name)
    except OSError as exc:
        raise InvalidPathError(root, str(exc)) from exc


def load_documents(root: str | Path) -> LoadReport:
    """Scan *root* (non-recursively) and parse each file as JSON.

    Raises InvalidPathError if *root* is not a readable directory. The
    returned report holds the full mapping; nothing shared is touched here.
    """
    root_path = Path(root).expanduser()
    entries = _list_entries(root_path)
    report = LoadReport(root=str(root_path))

    for path in entries:
        if not path.is_file():
            report.skipped.append(SkippedFile(str(path), SKIP_NOT_A_FILE))
            continue

        subject = subject_for(path)
        if not subject:
            report.skipped.append(SkippedFile(str(path), SKIP_NO_STEM))
            continue

        try:
            raw = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Could not read %s: %s", path, exc)
            report.skipped.append(SkippedFile(str(path), SKIP_IO_ERROR, str(exc)))
            continue

        try:
            document = json.loads(raw)
        except (ValueError, RecursionError) as exc:
            # Nesting deeper than the interpreter allows surfaces as RecursionError
            logger.warning("Could not parse %s: %s", path, exc)
            report.skipped.append(SkippedFile(str(path), SKIP_PARSE_ERROR, str(exc)))
            continue

        depth = nesting_depth(document)
        if depth > MAX_DEPTH:
            logger.warning("Skipping %s: nested %d levels deep", path, depth)
            report.skipped.append(
                SkippedFile(str(path), SKIP_PARSE_ERROR, f"nested {depth} levels deep")
            )
            continue

        if subject in report.documents:
            logger.debug("Subject %s redefined by %s", subject, path.name)
        report.documents[subject] = document

    logger.info("Read %d items from %s", report.loaded, root_path)
    if report.skipped:
        logger.info("Skipped %d entries in %s", len(report.skipped), root_path)
    return report
