"""Metadata router -- subject lookups, property reads, batch query, reload."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from tokenmeta.config import Settings
from tokenmeta.registry.errors import (
    InvalidPathError,
    NotFoundError,
    ReloadInProgressError,
)
from tokenmeta.registry.models import QueryRequest
from tokenmeta.registry.query import QueryEngine
from tokenmeta.registry.store import MetadataRegistry

from web.backend.app.middleware.dependencies import (
    get_engine,
    get_registry,
    get_settings,
)
from web.backend.app.models.api import (
    PropertyResponse,
    QueryRequestBody,
    QueryResponse,
    ReloadResponse,
    StatsResponse,
)

router = APIRouter(tags=["metadata"])

# Stands in for "absent" so a stored JSON null is still served
_MISSING = object()


def _require_subject(engine: QueryEngine, subject: str) -> Any:
    document = engine.resolve_single(subject, _MISSING)
    if document is _MISSING:
        raise NotFoundError(subject)
    return document


@router.get("/metadata/{subject}", summary="Get a subject's document")
def single_subject(subject: str, engine: QueryEngine = Depends(get_engine)):
    """Return the whole document stored for *subject*."""
    return JSONResponse(content=_require_subject(engine, subject))


@router.get(
    "/metadata/{subject}/properties",
    summary="Get a subject's document (all properties)",
)
def all_properties(subject: str, engine: QueryEngine = Depends(get_engine)):
    """Return the whole document, not a list of property names.

    Consuming clients depend on this shape, so it matches /metadata/{subject}.
    """
    return JSONResponse(content=_require_subject(engine, subject))


@router.get(
    "/metadata/{subject}/properties/{name}",
    response_model=PropertyResponse,
    summary="Get one property of a subject",
)
def some_property(
    subject: str,
    name: str,
    engine: QueryEngine = Depends(get_engine),
):
    value = engine.resolve_properties(subject, name, _MISSING)
    if value is _MISSING:
        raise NotFoundError(subject, name)
    return PropertyResponse(subject=subject, name=value)


@router.post(
    "/metadata/query",
    response_model=QueryResponse,
    summary="Batch lookup of several subjects",
)
def query(body: QueryRequestBody, engine: QueryEngine = Depends(get_engine)):
    """Resolve many subjects at once.

    Unknown subjects are dropped from the result. When ``properties`` is
    given, each document is narrowed to those properties.
    """
    request = QueryRequest(subjects=body.subjects, properties=body.properties)
    return QueryResponse(subjects=engine.run(request))


@router.get("/reread", response_model=ReloadResponse, summary="Reload from disk")
def reread_mappings(
    registry: MetadataRegistry = Depends(get_registry),
    settings: Settings = Depends(get_settings),
):
    """Rebuild the registry from the mappings directory and publish it."""
    try:
        result = registry.reload(timeout=settings.reload_timeout)
    except InvalidPathError as exc:
        raise HTTPException(status_code=500, detail=str(exc))
    except ReloadInProgressError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    return ReloadResponse(
        generation=result.generation,
        loaded=result.loaded,
        skipped=result.skipped,
        removed=result.removed,
    )


@router.get("/stats", response_model=StatsResponse, summary="Registry stats")
def stats(registry: MetadataRegistry = Depends(get_registry)):
    snap = registry.snapshot()
    return StatsResponse(
        generation=snap.generation,
        subjects=len(snap),
        source=snap.source,
        loaded_at=snap.loaded_at,
    )
