"""Utility modules for castgraph.

- **concurrency** -- sequential batches of concurrent lookups with a fixed
  inter-batch delay; the only rate limiting the lookup service sees.
- **errors** -- exception hierarchy rooted at CastGraphError.
- **fingerprint** -- order-independent SHA-256 of collection item ids.
- **logging** -- structlog setup: coloured console in development, JSON in
  production.
- **roles** -- voice-role detection on credited character text.
"""

# -- Batched fan-out -------------------------------------------------------
from castgraph.utils.concurrency import BatchOutcome, chunk, run_in_batches

# -- Domain exception hierarchy --------------------------------------------
from castgraph.utils.errors import (
    CastGraphError,
    CastLookupError,
    ConfigurationError,
    ProviderUnavailableError,
    RateLimitError,
    ResponseSchemaError,
    SessionStateError,
)

# -- Collection fingerprint ------------------------------------------------
from castgraph.utils.fingerprint import collection_fingerprint

# -- Structured logging setup ----------------------------------------------
from castgraph.utils.logging import configure_logging, get_logger

# -- Role helpers ----------------------------------------------------------
from castgraph.utils.roles import is_mostly_voice, is_voice_role

__all__ = [
    "BatchOutcome",
    "CastGraphError",
    "CastLookupError",
    "ConfigurationError",
    "ProviderUnavailableError",
    "RateLimitError",
    "ResponseSchemaError",
    "SessionStateError",
    "chunk",
    "collection_fingerprint",
    "configure_logging",
    "get_logger",
    "is_mostly_voice",
    "is_voice_role",
    "run_in_batches",
]
