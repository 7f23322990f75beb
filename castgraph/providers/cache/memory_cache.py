"""In-memory snapshot cache using cachetools.TTLCache.

Suitable for a single process.  One instance is owned by whoever owns the
sessions (the FastAPI app state, the CLI run, a test) rather than living in
a module global, so independent owners never share state by accident.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

import structlog
from cachetools import TTLCache

from castgraph.interfaces.cache_provider import ICacheProvider
from castgraph.models.cache import CacheSnapshot
from castgraph.utils.fingerprint import collection_fingerprint

logger = structlog.get_logger(logger_name=__name__)


class MemoryCacheProvider(ICacheProvider):
    """Fingerprint-keyed snapshot cache backed by ``cachetools.TTLCache``.

    Parameters
    ----------
    max_size:
        Maximum number of fingerprints kept before the least-recently-used
        entry is evicted.
    ttl:
        Seconds an entry stays valid after it was last written.
    fingerprint_fn:
        Function mapping collection item ids to a cache key.  Defaults to
        :func:`~castgraph.utils.fingerprint.collection_fingerprint`.
    """

    def __init__(
        self,
        max_size: int = 8,
        ttl: int = 6 * 3600,
        fingerprint_fn: Callable[[Iterable[int]], str] = collection_fingerprint,
    ) -> None:
        self._cache: TTLCache[str, CacheSnapshot] = TTLCache(maxsize=max_size, ttl=ttl)
        self._fingerprint_fn = fingerprint_fn

    # ------------------------------------------------------------------
    # ICacheProvider implementation
    # ------------------------------------------------------------------

    def fingerprint(self, item_ids: Iterable[int]) -> str:
        return self._fingerprint_fn(item_ids)

    def get(self, fingerprint: str) -> CacheSnapshot | None:
        """Return a deep copy of the cached snapshot, or ``None``."""
        snapshot = self._cache.get(fingerprint)
        if snapshot is None:
            logger.debug("cache_miss", fingerprint=fingerprint[:12])
            return None
        logger.debug(
            "cache_hit",
            fingerprint=fingerprint[:12],
            performers=len(snapshot.performers),
            fetched_items=len(snapshot.fetched_item_ids),
        )
        return snapshot.clone()

    def put(self, fingerprint: str, snapshot: CacheSnapshot) -> None:
        self._cache[fingerprint] = snapshot.clone()
        logger.debug(
            "cache_set",
            fingerprint=fingerprint[:12],
            performers=len(snapshot.performers),
            recommendations_loaded=snapshot.recommendations_loaded,
        )

    def __len__(self) -> int:
        return len(self._cache)
