"""FastAPI application for the tokenmeta metadata service.

Provides REST API endpoints over the in-memory MetadataRegistry for:
- Single subject lookups and property reads
- Batch queries with optional property projection
- Reloading the registry from the mappings directory
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from tokenmeta import __version__
from tokenmeta.config import Settings
from tokenmeta.registry.errors import (
    InvalidPathError,
    NotFoundError,
    RegistryUnavailableError,
)
from tokenmeta.registry.query import QueryEngine
from tokenmeta.registry.store import MetadataRegistry

from web.backend.app.models.api import HealthResponse
from web.backend.app.routers import metadata

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings,
    registry: Optional[MetadataRegistry] = None,
) -> FastAPI:
    """Build the app and populate the registry before it serves anything.

    A missing or unreadable mappings directory at startup is logged and the
    app serves an empty registry; a later /reread can still succeed.
    """
    if registry is None:
        registry = MetadataRegistry(settings.mappings)
        try:
            registry.reload()
        except InvalidPathError as exc:
            logger.error("Initial load failed: %s", exc)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        registry.close()

    app = FastAPI(
        title="tokenmeta API",
        description="Read-only lookups over a directory of JSON metadata documents.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.registry = registry
    app.state.engine = QueryEngine(registry)

    # -----------------------------------------------------------------------
    # Error mapping
    # -----------------------------------------------------------------------

    @app.exception_handler(NotFoundError)
    async def _not_found(request: Request, exc: NotFoundError):
        logger.debug("%s", exc)
        return Response(status_code=404, content=b"")

    @app.exception_handler(RegistryUnavailableError)
    async def _unavailable(request: Request, exc: RegistryUnavailableError):
        logger.warning("Registry unavailable for %s: %s", request.url.path, exc)
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    # -----------------------------------------------------------------------
    # Request logging
    # -----------------------------------------------------------------------

    @app.middleware("http")
    async def _log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        logger.debug(
            "%s %s -> %d (%.1fms)",
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - start) * 1000.0,
        )
        return response

    app.include_router(metadata.router)

    @app.get("/health", response_model=HealthResponse, tags=["meta"])
    def health():
        """Health check endpoint."""
        logger.info("health")
        return HealthResponse()

    return app
