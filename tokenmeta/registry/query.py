"""Query engine — point, property and batch lookups over one snapshot."""

from __future__ import annotations

import copy
import logging
from typing import Any, Iterable, Optional

from tokenmeta.registry.models import QueryRequest
from tokenmeta.registry.store import MetadataRegistry

logger = logging.getLogger(__name__)


def project(document: Any, properties: Iterable[str]) -> dict[str, Any]:
    """Keep only the requested properties that exist in *document*.

    Missing names are left out rather than set to null. A document that is
    not a JSON object has no properties, so it projects to {}.
    """
    if not isinstance(document, dict):
        return {}
    return {
        name: copy.deepcopy(document[name])
        for name in properties
        if name in document
    }


class QueryEngine:
    """Stateless lookups built on MetadataRegistry.

    Each call reads exactly one snapshot, so a batch never mixes documents
    from two reload generations.
    """

    def __init__(self, registry: MetadataRegistry) -> None:
        self.registry = registry

    def resolve_single(self, subject: str, default: Any = None) -> Any:
        return self.registry.get(subject, default)

    def resolve_properties(
        self, subject: str, name: str, default: Any = None
    ) -> Any:
        """Return the value of property *name* of *subject*, or *default*.

        A property stored as JSON null is returned as None, so callers that
        must tell it apart from an absent one pass their own *default*.
        """
        documents = self.registry.snapshot().documents
        if subject not in documents:
            logger.debug("Nothing found for %s", subject)
            return default
        document = documents[subject]
        if not isinstance(document, dict) or name not in document:
            logger.debug("Property %s not found for %s", name, subject)
            return default
        return copy.deepcopy(document[name])

    def batch(
        self,
        subjects: Iterable[str],
        properties: Optional[Iterable[str]] = None,
    ) -> list[Any]:
        """Resolve *subjects* in order, dropping the ones that are absent."""
        documents = self.registry.snapshot().documents
        wanted = list(properties) if properties is not None else None
        results: list[Any] = []

        for subject in subjects:
            if subject not in documents:
                logger.debug("Subject not found %s", subject)
                continue
            document = documents[subject]
            if wanted is None:
                results.append(copy.deepcopy(document))
            else:
                results.append(project(document, wanted))
        return results

    def run(self, request: QueryRequest) -> list[Any]:
        """Execute a QueryRequest (see batch)."""
        logger.debug(
            "Requested %d subjects%s",
            len(request.subjects),
            f" with {len(request.properties)} properties"
            if request.properties is not None
            else "",
        )
        return self.batch(request.subjects, request.properties)
