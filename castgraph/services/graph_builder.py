"""Performer co-occurrence graph builder.

Pure functions from a performer map to the graph views: the significant
set, the displayed subset, the top performers, weighted connections and the
summary stats.  Nothing here is cached; call :func:`build_graph` again
whenever the performer map or the voice filter changes.

Steps:
    1. Keep performers with two or more appearances.
    2. Optionally drop mostly-voice performers.
    3. Sort by appearance count, descending (stable).
    4. Top 10 → top performers; top 300 → displayed subset.
    5. Intersect the item sets of every displayed pair; non-empty
       intersections become connections.
    6. Track the heaviest connection; ties go to the lexicographically
       smallest (smaller id, larger id) pair.

Step 5 is O(k²) in the displayed subset (k ≤ 300), so each performer's item
set is computed once up front.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

import structlog

from castgraph.models.performer import Performer
from castgraph.models.universe import (
    Connection,
    MostConnectedPair,
    SharedItem,
    UniverseStats,
)

logger = structlog.get_logger(logger_name=__name__)

TOP_PERFORMER_COUNT = 10
DISPLAY_CAP = 300


@dataclass(frozen=True)
class UniverseGraph:
    """Result of one graph build.  All performer lists share rank order."""

    significant: list[Performer] = field(default_factory=list)
    displayed: list[Performer] = field(default_factory=list)
    top: list[Performer] = field(default_factory=list)
    connections: list[Connection] = field(default_factory=list)
    stats: UniverseStats = field(default_factory=UniverseStats)


def select_significant(
    performers: Iterable[Performer],
    hide_voice_performers: bool = False,
) -> list[Performer]:
    """Return significant performers sorted by appearance count, descending.

    Ties keep the input order, so the result is deterministic for a given
    map.
    """
    selected = [p for p in performers if p.is_significant]
    if hide_voice_performers:
        selected = [p for p in selected if not p.is_voice_performer]
    return sorted(selected, key=lambda p: p.appearance_count, reverse=True)


def build_connections(
    displayed: list[Performer],
) -> tuple[list[Connection], MostConnectedPair | None]:
    """Build one connection per displayed pair that shares an item.

    Returns the connections in pair-iteration order and the most connected
    pair, or ``None`` when no pair shares anything.
    """
    item_sets = [p.item_ids for p in displayed]
    titles = [{a.item_id: a.title for a in p.appearances} for p in displayed]

    connections: list[Connection] = []
    best: Connection | None = None

    for i in range(len(displayed)):
        items_i = item_sets[i]
        for j in range(i + 1, len(displayed)):
            shared = items_i & item_sets[j]
            if not shared:
                continue

            first, second = displayed[i], displayed[j]
            low, high = sorted((first.id, second.id))
            connection = Connection(
                performer_a_id=low,
                performer_b_id=high,
                shared_items=[
                    SharedItem(item_id=item_id, title=titles[i].get(item_id, "Unknown"))
                    for item_id in sorted(shared)
                ],
                weight=len(shared),
            )
            connections.append(connection)

            if (
                best is None
                or connection.weight > best.weight
                or (connection.weight == best.weight and connection.pair < best.pair)
            ):
                best = connection

    if best is None:
        return connections, None

    names = {p.id: p.name for p in displayed}
    most_connected = MostConnectedPair(
        performer_a_id=best.performer_a_id,
        performer_a_name=names[best.performer_a_id],
        performer_b_id=best.performer_b_id,
        performer_b_name=names[best.performer_b_id],
        count=best.weight,
    )
    return connections, most_connected


def build_graph(
    performers: Mapping[int, Performer],
    hide_voice_performers: bool = False,
    *,
    top_count: int = TOP_PERFORMER_COUNT,
    display_cap: int = DISPLAY_CAP,
) -> UniverseGraph:
    """Build the full graph view from a performer map."""
    significant = select_significant(performers.values(), hide_voice_performers)
    top = significant[:top_count]
    displayed = significant[:display_cap]

    connections, most_connected = build_connections(displayed)

    stats = UniverseStats(
        total_performers=len(performers),
        performers_in_multiple_items=len(significant),
        most_connected_pair=most_connected,
    )

    logger.debug(
        "graph_built",
        total_performers=len(performers),
        significant=len(significant),
        displayed=len(displayed),
        connections=len(connections),
        hide_voice_performers=hide_voice_performers,
    )

    return UniverseGraph(
        significant=significant,
        displayed=displayed,
        top=top,
        connections=connections,
        stats=stats,
    )
