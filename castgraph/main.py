"""castgraph FastAPI application entry point and component factories.

Wires the TMDb provider, the snapshot cache, the progress tracker and the
per-request session factory together.  The ``build_*`` helpers are also
used by the CLI, so both entry points assemble components the same way.

Run with ``castgraph-api`` or ``uvicorn --factory castgraph.main:create_app``.
"""

from __future__ import annotations

import random
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
import structlog
import uvicorn
from fastapi import FastAPI

from castgraph import __version__
from castgraph.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from castgraph.api.routes import router as api_router
from castgraph.config.loader import load_config, settings_from_config
from castgraph.config.settings import Settings
from castgraph.interfaces.cache_provider import ICacheProvider
from castgraph.interfaces.cast_provider import ICastProvider
from castgraph.pipeline.progress_tracker import ProgressTracker
from castgraph.providers.cache.memory_cache import MemoryCacheProvider
from castgraph.providers.tmdb.tmdb_provider import TMDbCastProvider
from castgraph.services.cast_fetcher import CastFetcher
from castgraph.services.recommendation_service import RecommendationService
from castgraph.services.universe_service import UniverseSession
from castgraph.utils.errors import ConfigurationError
from castgraph.utils.logging import configure_logging, get_logger

_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


def load_settings(config_path: str = "config/config.yaml") -> Settings:
    """Settings from config.yaml with environment overrides applied."""
    return settings_from_config(load_config(config_path))


def build_cache(settings: Settings) -> MemoryCacheProvider:
    return MemoryCacheProvider(
        max_size=settings.cache_max_entries,
        ttl=settings.cache_ttl_seconds,
    )


def build_tracker(settings: Settings) -> ProgressTracker:
    return ProgressTracker(
        status_ttl=settings.status_ttl_seconds,
        max_sessions=settings.status_max_sessions,
    )


def build_provider(settings: Settings, http_client: httpx.AsyncClient) -> TMDbCastProvider:
    """TMDb provider; raises ConfigurationError without an API key."""
    return TMDbCastProvider(
        http_client=http_client,
        api_key=settings.tmdb_api_key,
        media_type=settings.tmdb_media_type,
        base_url=settings.tmdb_base_url,
    )


def build_session(
    settings: Settings,
    provider: ICastProvider,
    cache: ICacheProvider,
    tracker: ProgressTracker | None = None,
    session_id: str | None = None,
    rng: random.Random | None = None,
) -> UniverseSession:
    """Assemble a session with fetchers tuned from *settings*."""
    return UniverseSession(
        cache=cache,
        cast_fetcher=CastFetcher(
            provider,
            batch_size=settings.cast_batch_size,
            batch_delay=settings.cast_batch_delay,
            cast_limit=settings.cast_limit,
        ),
        recommendation_service=RecommendationService(
            provider,
            batch_size=settings.credits_batch_size,
            batch_delay=settings.credits_batch_delay,
        ),
        tracker=tracker,
        session_id=session_id,
        rng=rng,
        hide_voice_performers=settings.hide_voice_performers,
    )


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------


def create_app(
    settings: Settings | None = None,
    provider: ICastProvider | None = None,
    cache: ICacheProvider | None = None,
) -> FastAPI:
    """Build the FastAPI app.

    *provider* and *cache* may be injected (tests); otherwise the lifespan
    builds a TMDb provider over a fresh ``httpx.AsyncClient`` and an
    in-memory cache.  Without a TMDb API key the app still starts: health
    reports ``degraded`` and universe requests answer 503.
    """
    app_settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        http_client: httpx.AsyncClient | None = None
        app.state.settings = app_settings
        app.state.tracker = build_tracker(app_settings)
        app.state.cache = cache if cache is not None else build_cache(app_settings)
        app.state.provider = provider
        app.state.provider_error = None
        try:
            if provider is None:
                http_client = httpx.AsyncClient()
                try:
                    app.state.provider = build_provider(app_settings, http_client)
                except ConfigurationError as exc:
                    # Serve health and status; universe requests answer 503.
                    app.state.provider_error = exc
                    _logger.error("provider_unconfigured", error=str(exc))

            def session_factory(session_id: str | None) -> UniverseSession:
                if app.state.provider is None:
                    raise app.state.provider_error
                return build_session(
                    app.state.settings,
                    app.state.provider,
                    app.state.cache,
                    tracker=app.state.tracker,
                    session_id=session_id,
                )

            app.state.session_factory = session_factory
            _logger.info(
                "app_started",
                provider=(
                    app.state.provider.get_provider_name()
                    if app.state.provider is not None
                    else None
                ),
                media_type=app_settings.tmdb_media_type,
            )
            yield
        finally:
            if http_client is not None:
                await http_client.aclose()

    app = FastAPI(title="castgraph", version=__version__, lifespan=lifespan)
    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    configure_cors(app)
    app.include_router(api_router)
    return app


def main() -> None:
    """Run the API server with uvicorn."""
    settings = load_settings()
    configure_logging(
        log_level=settings.log_level,
        json_output=(settings.app_env == "production"),
    )
    uvicorn.run(create_app(settings), host=settings.app_host, port=settings.app_port)


if __name__ == "__main__":
    main()
