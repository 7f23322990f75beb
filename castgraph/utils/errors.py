"""Custom exception hierarchy for castgraph.

All application exceptions inherit from :class:`CastGraphError`, which
carries an optional ``provider_name`` so error handlers can identify which
external service (e.g. "tmdb") caused the failure.

The hierarchy is organized by where the failure happens:

    CastGraphError  (base -- catch-all for any castgraph error)
    +-- CastLookupError              (a single remote lookup failed)
    |   +-- ProviderUnavailableError (transport error / non-2xx status)
    |   +-- RateLimitError           (provider returned HTTP 429)
    |   +-- ResponseSchemaError      (response failed boundary validation)
    +-- SessionStateError            (session step called out of order)
    +-- ConfigurationError           (startup / missing config)

Every ``CastLookupError`` is a per-unit failure: the batch runner records it
against the failing collection item or performer and moves on, so a single
bad lookup never aborts a fetch pass.
"""


class CastGraphError(Exception):
    """Base exception for all castgraph errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which external service triggered the
    error.  ``__str__`` prefixes the provider name in brackets, e.g.
    ``[tmdb] Rate limit exceeded``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Remote lookup errors (recovered per item / per performer)
# ---------------------------------------------------------------------------

class CastLookupError(CastGraphError):
    """Raised when a cast or credits lookup fails for a single unit."""

    def __init__(
        self,
        message: str = "Cast lookup failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ProviderUnavailableError(CastLookupError):
    """Raised when the lookup service is unreachable or answers non-2xx."""

    def __init__(
        self,
        message: str = "External service is unavailable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class RateLimitError(CastLookupError):
    """Raised when the lookup service rejects a request with HTTP 429.

    The unit stays unfetched and is retried on the next cache-miss pass.
    """

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ResponseSchemaError(CastLookupError):
    """Raised when a lookup response does not match the expected schema."""

    def __init__(
        self,
        message: str = "Lookup response failed validation",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Orchestration / configuration errors
# ---------------------------------------------------------------------------

class SessionStateError(CastGraphError):
    """Raised when a session operation is called in the wrong phase."""

    def __init__(
        self,
        message: str = "Invalid session state transition",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ConfigurationError(CastGraphError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
