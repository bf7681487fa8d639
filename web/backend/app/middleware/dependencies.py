"""FastAPI dependencies for reaching the shared registry.

The registry and query engine live on ``app.state``; handlers receive them
through these dependencies instead of module-level globals.
"""

from __future__ import annotations

from fastapi import Request

from tokenmeta.config import Settings
from tokenmeta.registry.query import QueryEngine
from tokenmeta.registry.store import MetadataRegistry


def get_registry(request: Request) -> MetadataRegistry:
    """Return the MetadataRegistry owned by the running app."""
    return request.app.state.registry


def get_engine(request: Request) -> QueryEngine:
    """Return the QueryEngine bound to the app's registry."""
    return request.app.state.engine


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
