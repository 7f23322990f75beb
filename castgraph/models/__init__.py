"""castgraph domain models -- re-exports all public model classes.

The models are organized by concern:
    - collection.py -- the user's collection (input)
    - lookup.py     -- validated cast / credits lookup responses
    - performer.py  -- performers, appearances, recommended titles
    - cache.py      -- snapshot stored under a collection fingerprint
    - pipeline.py   -- session phases and fetch reports
    - universe.py   -- derived graph, layout and recommendation views (output)
"""

from __future__ import annotations

from castgraph.models.cache import CacheSnapshot
from castgraph.models.collection import CollectionItem
from castgraph.models.lookup import CastMember, CastResponse, CreditEntry, CreditsResponse
from castgraph.models.performer import Appearance, Performer, RecommendedTitle
from castgraph.models.pipeline import BatchResult, FetchReport, UniversePhase
from castgraph.models.universe import (
    CandidateTitle,
    Connection,
    MostConnectedPair,
    PerformerNode,
    RecommendationCandidate,
    SharedItem,
    Supporter,
    UniverseStats,
    UniverseView,
)

__all__ = [
    # collection
    "CollectionItem",
    # lookup
    "CastMember",
    "CastResponse",
    "CreditEntry",
    "CreditsResponse",
    # performer
    "Appearance",
    "Performer",
    "RecommendedTitle",
    # cache
    "CacheSnapshot",
    # pipeline
    "BatchResult",
    "FetchReport",
    "UniversePhase",
    # universe
    "CandidateTitle",
    "Connection",
    "MostConnectedPair",
    "PerformerNode",
    "RecommendationCandidate",
    "SharedItem",
    "Supporter",
    "UniverseStats",
    "UniverseView",
]
