"""Universe session: the state machine tying cache, fetchers and views together.

One session serves one consumer (an API request, a CLI run, a test) over
one collection snapshot:

    IDLE ──load()──→ FETCHING_CAST ──→ READY_FOR_GRAPH
                         │                   │
                   (cache hit skips)   load_recommendations()
                                             ↓
                                   FETCHING_RECOMMENDATIONS ──→ FULLY_READY

``view()`` is callable from READY_FOR_GRAPH onwards, including while the
recommendation pass is still running.

Cache protocol:
  - read once in ``load()`` by fingerprint; a mismatch means an empty
    snapshot and a full fetch;
  - written after the cast pass, and again after the recommendation pass.
    ``recommendations_loaded`` is set only when every credits lookup
    succeeded, so a later session goes straight to FULLY_READY only then
    and otherwise retries the pass.

There is no cancellation.  Both passes run under ``asyncio.shield``: if the
consumer goes away mid-fetch (a cancelled task, a disconnected client) the
pass still finishes and lands in the cache for the next session to reuse.
"""

from __future__ import annotations

import asyncio
import random
import uuid
from collections.abc import Sequence

from castgraph.interfaces.cache_provider import ICacheProvider
from castgraph.models.cache import CacheSnapshot
from castgraph.models.collection import CollectionItem
from castgraph.models.pipeline import FetchReport, UniversePhase
from castgraph.models.universe import UniverseView
from castgraph.pipeline.progress_tracker import ProgressTracker
from castgraph.services.cast_fetcher import CastFetcher
from castgraph.services.graph_builder import build_graph
from castgraph.services.layout_engine import layout_performers, to_node
from castgraph.services.recommendation_service import (
    RecommendationService,
    aggregate_recommendations,
)
from castgraph.utils.errors import SessionStateError
from castgraph.utils.logging import get_logger

_GRAPH_READY_PHASES = frozenset({
    UniversePhase.READY_FOR_GRAPH,
    UniversePhase.FETCHING_RECOMMENDATIONS,
    UniversePhase.FULLY_READY,
})


class UniverseSession:
    """Computes the performer universe for one collection.

    Parameters
    ----------
    cache:
        Snapshot cache shared with other sessions of the same owner.
    cast_fetcher:
        Runs the batched cast pass.
    recommendation_service:
        Runs the batched credits pass.
    tracker:
        Optional progress tracker to broadcast phase and progress updates.
    session_id:
        Identifier used with the tracker; random when omitted.
    rng:
        Random source for layout jitter; seed it for reproducible layouts.
    hide_voice_performers:
        Default for :meth:`view` when no explicit flag is passed.
    """

    def __init__(
        self,
        cache: ICacheProvider,
        cast_fetcher: CastFetcher,
        recommendation_service: RecommendationService,
        tracker: ProgressTracker | None = None,
        session_id: str | None = None,
        rng: random.Random | None = None,
        hide_voice_performers: bool = False,
    ) -> None:
        self._cache = cache
        self._cast_fetcher = cast_fetcher
        self._recommendations = recommendation_service
        self._tracker = tracker
        self._session_id = session_id or str(uuid.uuid4())
        self._rng = rng or random.Random()
        self._hide_voice = hide_voice_performers
        self._logger = get_logger(__name__).bind(session_id=self._session_id)

        self._phase = UniversePhase.IDLE
        self._items: list[CollectionItem] = []
        self._fingerprint: str | None = None
        self._snapshot = CacheSnapshot()
        self._fetch_progress = 0.0

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def phase(self) -> UniversePhase:
        return self._phase

    @property
    def fingerprint(self) -> str | None:
        return self._fingerprint

    @property
    def fetch_progress(self) -> float:
        return self._fetch_progress

    @property
    def loading(self) -> bool:
        return self._phase in (UniversePhase.IDLE, UniversePhase.FETCHING_CAST)

    @property
    def loading_recommendations(self) -> bool:
        return self._phase == UniversePhase.FETCHING_RECOMMENDATIONS

    @property
    def snapshot(self) -> CacheSnapshot:
        return self._snapshot

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def load(self, items: Sequence[CollectionItem]) -> FetchReport:
        """Resolve the performer map for *items*, fetching only what is missing."""
        if self._phase in (UniversePhase.FETCHING_CAST, UniversePhase.FETCHING_RECOMMENDATIONS):
            raise SessionStateError(f"Cannot load while {self._phase.value}")

        self._items = list(items)
        self._fingerprint = self._cache.fingerprint(item.id for item in self._items)
        cached = self._cache.get(self._fingerprint)
        self._snapshot = cached if cached is not None else CacheSnapshot()
        self._fetch_progress = 0.0

        pending = CastFetcher.pending_items(self._items, self._snapshot.fetched_item_ids)
        if cached is not None and not pending:
            self._fetch_progress = 100.0
            phase = (
                UniversePhase.FULLY_READY
                if self._snapshot.recommendations_loaded
                else UniversePhase.READY_FOR_GRAPH
            )
            self._logger.info(
                "universe_cache_hit",
                performers=len(self._snapshot.performers),
                phase=phase.value,
            )
            await self._set_phase(phase, "Loaded from cache")
            return FetchReport()

        await self._set_phase(UniversePhase.FETCHING_CAST, f"Fetching cast for {len(pending)} items")
        return await asyncio.shield(self._cast_pass())

    async def load_recommendations(self, force: bool = False) -> FetchReport:
        """Run the credits pass for the current performer map.

        Skipped when the snapshot already carries recommendations, unless
        *force* is set.
        """
        if self._phase not in _GRAPH_READY_PHASES:
            raise SessionStateError(
                f"Recommendations need a loaded performer map, session is {self._phase.value}"
            )
        if self._phase == UniversePhase.FETCHING_RECOMMENDATIONS:
            raise SessionStateError("Recommendation pass already running")
        if self._phase == UniversePhase.FULLY_READY and not force:
            return FetchReport()

        await self._set_phase(UniversePhase.FETCHING_RECOMMENDATIONS, "Fetching recommendations")
        return await asyncio.shield(self._recommendation_pass())

    async def run(
        self,
        items: Sequence[CollectionItem],
        include_recommendations: bool = True,
    ) -> UniverseView:
        """Load, optionally fetch recommendations, and return the view."""
        await self.load(items)
        if include_recommendations:
            await self.load_recommendations()
        return self.view()

    # ------------------------------------------------------------------
    # Derived view
    # ------------------------------------------------------------------

    def view(self, hide_voice_performers: bool | None = None) -> UniverseView:
        """Build the exposed output from the current performer map.

        Before the cast pass has finished only the loading flags are
        populated.
        """
        if self._phase not in _GRAPH_READY_PHASES:
            return UniverseView(
                phase=self._phase,
                loading=self.loading,
                fetch_progress=self._fetch_progress,
            )

        hide = self._hide_voice if hide_voice_performers is None else hide_voice_performers
        performers = self._snapshot.performers
        graph = build_graph(performers, hide_voice_performers=hide)
        nodes = layout_performers(graph.displayed, rng=self._rng)
        by_id = {node.id: node for node in nodes}

        return UniverseView(
            phase=self._phase,
            performers=nodes,
            connections=graph.connections,
            top_performers=[by_id.get(p.id) or to_node(p) for p in graph.top],
            recommendations=aggregate_recommendations(performers.values()),
            stats=graph.stats,
            loading=self.loading,
            fetch_progress=self._fetch_progress,
            loading_recommendations=self.loading_recommendations,
        )

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _cast_pass(self) -> FetchReport:
        fetched_before = set(self._snapshot.fetched_item_ids)
        try:
            report = await self._cast_fetcher.fetch(
                self._items,
                self._snapshot,
                on_progress=self._on_cast_progress,
            )
        finally:
            if self._snapshot.fetched_item_ids != fetched_before:
                # New appearances can change who is in recommendation scope.
                self._snapshot.recommendations_loaded = False
            self._cache.put(self._fingerprint, self._snapshot)

        self._fetch_progress = 100.0
        await self._set_phase(UniversePhase.READY_FOR_GRAPH, "Cast loaded")
        return report

    async def _recommendation_pass(self) -> FetchReport:
        owned_ids = {item.id for item in self._items}
        complete = False
        try:
            report = await self._recommendations.fetch_recommendations(
                self._snapshot.performers,
                owned_ids,
                on_progress=self._on_recommendation_progress,
            )
            complete = report.complete
        finally:
            # Failed lookups leave the flag unset so the next session retries the pass.
            self._snapshot.recommendations_loaded = complete
            if self._fingerprint is not None:
                self._cache.put(self._fingerprint, self._snapshot)

        if not complete:
            self._logger.warning(
                "recommendation_pass_incomplete",
                failed_performers=len(report.failed_ids),
            )
        await self._set_phase(UniversePhase.FULLY_READY, "Recommendations loaded")
        return report

    async def _on_cast_progress(self, progress: float) -> None:
        self._fetch_progress = max(self._fetch_progress, min(progress, 100.0))
        if self._tracker is not None:
            await self._tracker.update(
                self._session_id,
                UniversePhase.FETCHING_CAST,
                self._fetch_progress,
                "Fetching cast",
            )

    async def _on_recommendation_progress(self, progress: float) -> None:
        if self._tracker is not None:
            await self._tracker.update(
                self._session_id,
                UniversePhase.FETCHING_RECOMMENDATIONS,
                progress,
                "Fetching recommendations",
            )

    async def _set_phase(self, phase: UniversePhase, message: str) -> None:
        self._phase = phase
        self._logger.debug("universe_phase", phase=phase.value, message=message)
        if self._tracker is not None:
            fetching = phase in (UniversePhase.FETCHING_CAST, UniversePhase.FETCHING_RECOMMENDATIONS)
            progress = 0.0 if fetching else 100.0
            await self._tracker.update(self._session_id, phase, progress, message)
