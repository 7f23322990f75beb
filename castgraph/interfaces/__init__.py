"""Provider contracts (adapter pattern) for castgraph's external collaborators."""

from castgraph.interfaces.cache_provider import ICacheProvider
from castgraph.interfaces.cast_provider import ICastProvider

__all__ = ["ICacheProvider", "ICastProvider"]
