"""Cache providers.

MemoryCacheProvider keeps performer snapshots in process memory so that a
second session over the same collection skips the cast fetch entirely.  For
multi-worker deployments, implement ICacheProvider over a shared store
without changing any service code.
"""

from castgraph.providers.cache.memory_cache import MemoryCacheProvider

__all__ = ["MemoryCacheProvider"]
