"""castgraph: performer co-occurrence universe for a media collection."""

__version__ = "0.1.0"
