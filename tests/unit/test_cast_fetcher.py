"""Unit tests for the batched cast fetcher and cast merging."""

from __future__ import annotations

import pytest

from castgraph.models.cache import CacheSnapshot
from castgraph.models.collection import CollectionItem
from castgraph.services.cast_fetcher import CastFetcher, merge_cast
from tests.conftest import FakeCastProvider, RecordingSleep, make_item, make_member


class TestMergeCast:
    def test_creates_performer_on_first_sighting(self) -> None:
        performers = {}
        added = merge_cast(performers, make_item(1, "Alpha"), [make_member(100, "A", "Hero")])

        assert added == 1
        performer = performers[100]
        assert performer.name == "A"
        assert performer.appearances[0].title == "Alpha"
        assert performer.appearances[0].role == "Hero"
        assert performer.appearances[0].image == "/p1.jpg"

    def test_same_item_twice_is_not_duplicated(self) -> None:
        performers = {}
        item = make_item(1)
        merge_cast(performers, item, [make_member(100)])
        added = merge_cast(performers, item, [make_member(100)])

        assert added == 0
        assert performers[100].appearance_count == 1

    def test_only_first_entries_up_to_limit(self) -> None:
        performers = {}
        cast = [make_member(i) for i in range(1, 31)]
        merge_cast(performers, make_item(1), cast, limit=25)

        assert len(performers) == 25
        assert 26 not in performers

    def test_missing_fields_fall_back(self) -> None:
        from castgraph.models.lookup import CastMember

        performers = {}
        member = CastMember(id=5, name="X", character=None, known_for_department=None)
        merge_cast(performers, CollectionItem(id=2), [member])

        assert performers[5].known_for == "Acting"
        assert performers[5].appearances[0].role == "Unknown"
        assert performers[5].appearances[0].title == "Unknown"


class TestCastFetcher:
    @pytest.mark.asyncio
    async def test_shared_performer_across_two_items(self) -> None:
        provider = FakeCastProvider(cast={
            1: [make_member(100, "A")],
            2: [make_member(100, "A")],
        })
        fetcher = CastFetcher(provider, sleep=RecordingSleep())
        snapshot = CacheSnapshot()

        report = await fetcher.fetch([CollectionItem(id=1), CollectionItem(id=2)], snapshot)

        assert report.complete
        assert snapshot.performers[100].appearance_count == 2
        assert snapshot.performers[100].is_significant
        assert snapshot.fetched_item_ids == {1, 2}

    @pytest.mark.asyncio
    async def test_failed_item_left_unfetched(self) -> None:
        provider = FakeCastProvider(
            cast={1: [make_member(100)], 3: [make_member(101)]},
            failing_items={2},
        )
        fetcher = CastFetcher(provider, sleep=RecordingSleep())
        snapshot = CacheSnapshot()

        report = await fetcher.fetch([make_item(1), make_item(2), make_item(3)], snapshot)

        assert report.failed_ids == [2]
        assert sorted(report.succeeded_ids) == [1, 3]
        assert snapshot.fetched_item_ids == {1, 3}
        assert not report.complete

    @pytest.mark.asyncio
    async def test_skips_already_fetched_items(self) -> None:
        provider = FakeCastProvider(cast={1: [make_member(100)], 2: [make_member(100)]})
        fetcher = CastFetcher(provider, sleep=RecordingSleep())
        snapshot = CacheSnapshot(fetched_item_ids={1})

        await fetcher.fetch([make_item(1), make_item(2)], snapshot)

        assert provider.cast_calls == [2]

    @pytest.mark.asyncio
    async def test_nothing_pending_makes_no_calls(self) -> None:
        provider = FakeCastProvider()
        fetcher = CastFetcher(provider, sleep=RecordingSleep())

        report = await fetcher.fetch([make_item(1)], CacheSnapshot(fetched_item_ids={1}))

        assert provider.cast_calls == []
        assert report.batches == []

    @pytest.mark.asyncio
    async def test_seven_items_two_batches_one_delay(self) -> None:
        sleep = RecordingSleep()
        provider = FakeCastProvider()
        fetcher = CastFetcher(provider, batch_size=5, batch_delay=0.1, sleep=sleep)

        report = await fetcher.fetch([make_item(i) for i in range(1, 8)], CacheSnapshot())

        assert [len(b.succeeded_ids) for b in report.batches] == [5, 2]
        assert sleep.calls == [0.1]

    @pytest.mark.asyncio
    async def test_progress_is_monotonic_and_ends_at_100(self) -> None:
        progress: list[float] = []
        fetcher = CastFetcher(FakeCastProvider(), batch_size=2, sleep=RecordingSleep())

        await fetcher.fetch(
            [make_item(i) for i in range(1, 6)],
            CacheSnapshot(),
            on_progress=progress.append,
        )

        assert progress == sorted(progress)
        assert len(progress) == 3
        assert progress[-1] == 100.0

    def test_pending_items_dedupes_and_keeps_order(self) -> None:
        items = [make_item(3), make_item(1), make_item(3), make_item(2)]
        pending = CastFetcher.pending_items(items, {2})
        assert [i.id for i in pending] == [3, 1]
