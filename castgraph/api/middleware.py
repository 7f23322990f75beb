"""API middleware -- CORS, request logging, and error handling.

Starlette runs middleware last-added-first, so main.py adds
ErrorHandlingMiddleware before RequestLoggingMiddleware.  Request logging is
then the outermost layer and sees the final status code, including the 4xx
or 5xx that ErrorHandling substituted for a ``CastGraphError``.
"""

from __future__ import annotations

import time

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from castgraph.api.schemas import ErrorResponse
from castgraph.utils.errors import (
    CastGraphError,
    ConfigurationError,
    SessionStateError,
)
from castgraph.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)


def configure_cors(app: FastAPI, *, allowed_origins: list[str] | None = None) -> None:
    """Add CORS middleware; all origins unless *allowed_origins* is given."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every HTTP request with method, path, status code, and duration."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        start = time.perf_counter()
        response: Response | None = None

        try:
            response = await call_next(request)
            return response
        finally:
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            _logger.info(
                "http_request",
                method=request.method,
                path=str(request.url.path),
                status=response.status_code if response else 500,
                duration_ms=duration_ms,
            )


def _status_for(exc: CastGraphError) -> int:
    if isinstance(exc, SessionStateError):
        return 409
    if isinstance(exc, ConfigurationError):
        return 503
    return 500


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Turn ``CastGraphError`` subclasses into JSON ``ErrorResponse`` bodies.

    Details are logged server-side; the client only sees the error class
    name and message.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        try:
            return await call_next(request)
        except CastGraphError as exc:
            _logger.error(
                "application_error",
                error_type=type(exc).__name__,
                message=exc.message,
                provider=exc.provider_name,
                path=str(request.url.path),
            )
            body = ErrorResponse(error=type(exc).__name__, detail=exc.message)
            return JSONResponse(status_code=_status_for(exc), content=body.model_dump())
