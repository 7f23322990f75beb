"""Unit tests for castgraph domain models and role helpers."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from castgraph.models.cache import CacheSnapshot
from castgraph.models.collection import CollectionItem
from castgraph.models.performer import Appearance, Performer
from castgraph.models.pipeline import BatchResult, FetchReport
from castgraph.models.universe import Connection, SharedItem
from castgraph.utils.errors import CastGraphError, RateLimitError
from castgraph.utils.roles import is_mostly_voice, is_voice_role
from tests.conftest import make_performer


class TestRoles:
    @pytest.mark.parametrize("role", ["Voice of Max", "Bart (voice)", "VOICE"])
    def test_voice_roles(self, role: str) -> None:
        assert is_voice_role(role)

    @pytest.mark.parametrize("role", ["Walter White", "", None])
    def test_non_voice_roles(self, role) -> None:
        assert not is_voice_role(role)

    def test_mostly_voice_needs_strict_majority(self) -> None:
        assert is_mostly_voice(["Voice of A", "Voice of B", "Lead"])
        assert not is_mostly_voice(["Voice of A", "Lead"])
        assert not is_mostly_voice([])


class TestPerformer:
    def test_add_appearance_dedupes_by_item(self) -> None:
        performer = Performer(id=1, name="A")
        first = Appearance(performer_id=1, item_id=10)
        assert performer.add_appearance(first) is True
        assert performer.add_appearance(Appearance(performer_id=1, item_id=10, role="Other")) is False
        assert performer.appearance_count == 1

    def test_add_appearance_rejects_other_performer(self) -> None:
        with pytest.raises(ValueError):
            Performer(id=1, name="A").add_appearance(Appearance(performer_id=2, item_id=10))

    def test_significance_threshold(self) -> None:
        assert not make_performer(1, [10]).is_significant
        assert make_performer(1, [10, 11]).is_significant

    def test_item_ids(self) -> None:
        assert make_performer(1, [10, 11]).item_ids == frozenset({10, 11})


class TestCacheSnapshot:
    def test_clone_is_deep(self) -> None:
        snapshot = CacheSnapshot(performers={1: make_performer(1, [10])}, fetched_item_ids={10})
        copy = snapshot.clone()
        copy.performers[1].appearances.clear()
        copy.fetched_item_ids.add(11)

        assert snapshot.performers[1].appearance_count == 1
        assert snapshot.fetched_item_ids == {10}


class TestViews:
    def test_collection_item_defaults_and_extra_fields(self) -> None:
        item = CollectionItem.model_validate({"id": 5, "rating": 9})
        assert item.title == "Unknown"
        assert item.poster is None

    def test_connection_weight_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            Connection(performer_a_id=1, performer_b_id=2, weight=0)

    def test_connection_helpers(self) -> None:
        conn = Connection(
            performer_a_id=1, performer_b_id=2,
            shared_items=[SharedItem(item_id=10)], weight=1,
        )
        assert conn.pair == (1, 2)
        assert conn.shared_item_ids == [10]

    def test_fetch_report_rollup(self) -> None:
        report = FetchReport(batches=[
            BatchResult(batch_index=0, succeeded_ids=[1, 2], failed_ids=[3]),
            BatchResult(batch_index=1, succeeded_ids=[4]),
        ])
        assert report.succeeded_ids == [1, 2, 4]
        assert report.failed_ids == [3]
        assert not report.complete
        assert FetchReport().complete


class TestErrors:
    def test_provider_prefix(self) -> None:
        assert str(RateLimitError(provider_name="tmdb")) == "[tmdb] Rate limit exceeded"

    def test_plain_message(self) -> None:
        err = CastGraphError("boom")
        assert str(err) == "boom"
        assert err.provider_name is None
