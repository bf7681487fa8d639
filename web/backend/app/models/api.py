"""Pydantic models for API request/response serialization.

Document bodies are opaque JSON and are returned as-is; these models cover
the envelopes around them.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Metadata models
# ---------------------------------------------------------------------------


class QueryRequestBody(BaseModel):
    """Body of POST /metadata/query."""

    subjects: list[str]
    properties: Optional[list[str]] = None


class QueryResponse(BaseModel):
    """Found subjects, full or projected, in request order."""

    subjects: list[Any] = Field(default_factory=list)


class PropertyResponse(BaseModel):
    """A single property of a subject.

    The value is reported under the literal key ``name``, which is what
    existing clients read.
    """

    subject: str
    name: Any = None


# ---------------------------------------------------------------------------
# Operational models
# ---------------------------------------------------------------------------


class HealthResponse(BaseModel):
    status: str = "ok"


class ReloadResponse(BaseModel):
    """Mirrors tokenmeta.registry.models.ReloadResult."""

    status: str = "reloaded"
    generation: int
    loaded: int
    skipped: int = 0
    removed: int = 0


class StatsResponse(BaseModel):
    """Describes the snapshot currently being served."""

    generation: int
    subjects: int
    source: Optional[str] = None
    loaded_at: str = ""
