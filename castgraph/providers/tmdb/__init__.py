"""Cast / credits lookup providers backed by TMDb."""

from castgraph.providers.tmdb.tmdb_provider import TMDbCastProvider

__all__ = ["TMDbCastProvider"]
