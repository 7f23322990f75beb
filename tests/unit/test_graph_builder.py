"""Unit tests for the co-occurrence graph builder."""

from __future__ import annotations

from castgraph.services.graph_builder import (
    DISPLAY_CAP,
    build_connections,
    build_graph,
    select_significant,
)
from tests.conftest import make_performer


def _as_map(*performers):
    return {p.id: p for p in performers}


# ======================================================================
# Significant set
# ======================================================================


class TestSelectSignificant:
    def test_single_appearance_excluded(self) -> None:
        result = select_significant([make_performer(1, [10]), make_performer(2, [10, 11])])
        assert [p.id for p in result] == [2]

    def test_sorted_by_appearance_count_descending(self) -> None:
        result = select_significant([
            make_performer(1, [10, 11]),
            make_performer(2, [10, 11, 12, 13]),
            make_performer(3, [10, 11, 12]),
        ])
        assert [p.id for p in result] == [2, 3, 1]

    def test_ties_keep_input_order(self) -> None:
        result = select_significant([
            make_performer(5, [10, 11]),
            make_performer(2, [10, 11]),
        ])
        assert [p.id for p in result] == [5, 2]

    def test_hide_voice_drops_mostly_voice(self) -> None:
        voice = make_performer(1, [10, 11, 12], roles=["Voice of Y", "Y (voice)", "Lead"])
        half = make_performer(2, [10, 11], roles=["Y (voice)", "Lead"])

        assert [p.id for p in select_significant([voice, half], True)] == [2]
        assert [p.id for p in select_significant([voice, half], False)] == [1, 2]


# ======================================================================
# Connections
# ======================================================================


class TestBuildConnections:
    def test_weight_is_shared_item_count(self) -> None:
        a = make_performer(1, [10, 11, 12])
        b = make_performer(2, [11, 12, 13])
        connections, best = build_connections([a, b])

        assert len(connections) == 1
        conn = connections[0]
        assert conn.weight == 2
        assert conn.shared_item_ids == [11, 12]
        assert best.count == 2

    def test_no_connection_without_shared_items(self) -> None:
        connections, best = build_connections([
            make_performer(1, [10, 11]),
            make_performer(2, [12, 13]),
        ])
        assert connections == []
        assert best is None

    def test_symmetric_regardless_of_rank_order(self) -> None:
        a = make_performer(7, [10, 11])
        b = make_performer(3, [10, 11])
        forward, _ = build_connections([a, b])
        backward, _ = build_connections([b, a])

        assert forward[0].pair == backward[0].pair == (3, 7)
        assert forward[0].weight == backward[0].weight

    def test_tie_break_picks_smallest_pair(self) -> None:
        performers = [
            make_performer(9, [10, 11]),
            make_performer(8, [10, 11]),
            make_performer(2, [20, 21]),
            make_performer(4, [20, 21]),
        ]
        _, best = build_connections(performers)

        assert (best.performer_a_id, best.performer_b_id) == (2, 4)
        assert best.count == 2

    def test_heaviest_pair_wins(self) -> None:
        performers = [
            make_performer(1, [10, 11]),
            make_performer(2, [10, 11, 12]),
            make_performer(3, [10, 11, 12]),
        ]
        _, best = build_connections(performers)
        assert (best.performer_a_id, best.performer_b_id, best.count) == (2, 3, 3)
        assert best.performer_a_name == "Performer 2"

    def test_shared_item_titles_carried(self) -> None:
        connections, _ = build_connections([
            make_performer(1, [10, 11]),
            make_performer(2, [10, 11]),
        ])
        assert [s.title for s in connections[0].shared_items] == ["Show 10", "Show 11"]


# ======================================================================
# Full build
# ======================================================================


class TestBuildGraph:
    def test_stats_count_every_performer(self) -> None:
        graph = build_graph(_as_map(
            make_performer(1, [10, 11]),
            make_performer(2, [10, 11]),
            make_performer(3, [10]),
        ))

        assert graph.stats.total_performers == 3
        assert graph.stats.performers_in_multiple_items == 2
        assert len(graph.connections) == 1

    def test_idempotent(self) -> None:
        performers = _as_map(
            make_performer(1, [10, 11, 12]),
            make_performer(2, [10, 11]),
            make_performer(3, [11, 12]),
        )
        first = build_graph(performers)
        second = build_graph(performers)

        assert first.connections == second.connections
        assert first.stats == second.stats
        assert [p.id for p in first.displayed] == [p.id for p in second.displayed]

    def test_voice_performer_hidden_from_all_views(self) -> None:
        performers = _as_map(
            make_performer(1, [10, 11, 12], roles=["Voice of Y", "Voice of Y", "Lead"]),
            make_performer(2, [10, 11]),
        )
        graph = build_graph(performers, hide_voice_performers=True)

        assert [p.id for p in graph.displayed] == [2]
        assert [p.id for p in graph.top] == [2]
        assert graph.connections == []
        assert graph.stats.total_performers == 2

    def test_top_and_display_caps(self) -> None:
        performers = _as_map(*[make_performer(i, [1, 2]) for i in range(1, DISPLAY_CAP + 21)])
        graph = build_graph(performers, top_count=10)

        assert len(graph.significant) == DISPLAY_CAP + 20
        assert len(graph.displayed) == DISPLAY_CAP
        assert len(graph.top) == 10
        assert graph.stats.performers_in_multiple_items == DISPLAY_CAP + 20

    def test_empty_map(self) -> None:
        graph = build_graph({})
        assert graph.displayed == []
        assert graph.stats.most_connected_pair is None
