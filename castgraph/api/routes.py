"""FastAPI routes for the performer universe.

Endpoint                          Method  Description
/api/v1/universe                  POST    Compute the universe for a collection
/api/v1/universe/{sid}/status     GET     Phase and cast-fetch progress of a session
/api/v1/health                    GET     Health check

Dependencies are read from ``app.state``, populated by the lifespan in
:mod:`castgraph.main`.  Each request gets its own
:class:`~castgraph.services.universe_service.UniverseSession` from the
session factory; sessions share only the cache and the tracker.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, Request

from castgraph import __version__
from castgraph.api.schemas import (
    ErrorResponse,
    HealthResponse,
    SessionStatusResponse,
    UniverseRequest,
)
from castgraph.interfaces.cache_provider import ICacheProvider
from castgraph.interfaces.cast_provider import ICastProvider
from castgraph.models.universe import UniverseView
from castgraph.pipeline.progress_tracker import ProgressTracker
from castgraph.services.universe_service import UniverseSession
from castgraph.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

router = APIRouter(prefix="/api/v1")

SessionFactory = Callable[[str | None], UniverseSession]


def _get_session_factory(request: Request) -> SessionFactory:
    return request.app.state.session_factory


def _get_cache(request: Request) -> ICacheProvider:
    return request.app.state.cache


def _get_provider(request: Request) -> ICastProvider | None:
    return request.app.state.provider


def _get_tracker(request: Request) -> ProgressTracker:
    return request.app.state.tracker


SessionFactoryDep = Annotated[SessionFactory, Depends(_get_session_factory)]
CacheDep = Annotated[ICacheProvider, Depends(_get_cache)]
ProviderDep = Annotated[ICastProvider | None, Depends(_get_provider)]
TrackerDep = Annotated[ProgressTracker, Depends(_get_tracker)]


@router.post(
    "/universe",
    response_model=UniverseView,
    responses={409: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
    summary="Compute the performer universe for a collection",
)
async def compute_universe(
    body: UniverseRequest,
    session_factory: SessionFactoryDep,
) -> UniverseView:
    """Fetch what is missing, then return graph, layout and recommendations.

    Pass ``session_id`` in the body to poll ``/universe/{sid}/status``
    while the request is in flight.
    """
    session = session_factory(body.session_id)
    _logger.info(
        "universe_request",
        session_id=session.session_id,
        items=len(body.items),
        include_recommendations=body.include_recommendations,
    )

    await session.load(body.items)
    if body.include_recommendations:
        await session.load_recommendations()
    return session.view(hide_voice_performers=body.hide_voice_performers)


@router.get(
    "/universe/{session_id}/status",
    response_model=SessionStatusResponse,
    summary="Get the phase and fetch progress of a session",
)
async def get_status(session_id: str, tracker: TrackerDep) -> SessionStatusResponse:
    status = tracker.get_status(session_id)
    return SessionStatusResponse(
        session_id=session_id,
        phase=status["phase"],
        progress=status["progress"],
        message=status["message"] or None,
    )


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health(provider: ProviderDep, cache: CacheDep) -> HealthResponse:
    """``degraded`` while no lookup provider is configured."""
    return HealthResponse(
        status="ok" if provider is not None else "degraded",
        version=__version__,
        provider=provider.get_provider_name() if provider is not None else "unconfigured",
        cached_collections=len(cache) if hasattr(cache, "__len__") else 0,
    )
