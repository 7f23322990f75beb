"""Request/response schemas for the castgraph HTTP API.

The universe response reuses :class:`~castgraph.models.universe.UniverseView`
directly; only request bodies and auxiliary responses live here.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from castgraph.models.collection import CollectionItem


class UniverseRequest(BaseModel):
    """Collection snapshot plus display options."""

    items: list[CollectionItem] = Field(default_factory=list, max_length=5000)
    # None = use the server default from settings.
    hide_voice_performers: bool | None = None
    include_recommendations: bool = True
    # Optional client-chosen id for polling the status endpoint.
    session_id: str | None = Field(default=None, max_length=64)


class SessionStatusResponse(BaseModel):
    """Phase and progress of a universe session."""

    session_id: str
    phase: str
    progress: float
    message: str | None = None


class HealthResponse(BaseModel):
    """Application health check response."""

    status: str
    version: str
    provider: str
    cached_collections: int


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: str | None = None
