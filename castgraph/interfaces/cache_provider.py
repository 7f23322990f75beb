"""Abstract base class for the universe cache.

The cache stores one :class:`~castgraph.models.cache.CacheSnapshot` per
collection fingerprint.  Implementations must copy on read and on write:
a session mutates the snapshot it got back, and that must never leak into
another session holding the same fingerprint.

Reads and writes are synchronous.  The only suspension points of a session
are its network calls and inter-batch delays; the cache is not one of them.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable

from castgraph.models.cache import CacheSnapshot


class ICacheProvider(ABC):
    """Contract for fingerprint-keyed snapshot caches."""

    @abstractmethod
    def fingerprint(self, item_ids: Iterable[int]) -> str:
        """Return the cache key for a collection with *item_ids*."""

    @abstractmethod
    def get(self, fingerprint: str) -> CacheSnapshot | None:
        """Return a private copy of the snapshot for *fingerprint*.

        Returns ``None`` when nothing is cached for that fingerprint, which
        callers treat as an empty cache.
        """

    @abstractmethod
    def put(self, fingerprint: str, snapshot: CacheSnapshot) -> None:
        """Store a copy of *snapshot* under *fingerprint* (last writer wins)."""
