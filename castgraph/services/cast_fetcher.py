"""Batched cast fetcher.

Fetches cast data for every collection item that is not yet in the
snapshot's fetched set and merges the results into the snapshot's
performer map.

Batching: 5 items per batch run concurrently, 100 ms between batches.  A
lookup that fails leaves its item out of the fetched set so a later
cache-miss pass retries it; it never aborts the batch.  Progress is the
percentage of batches completed and reaches 100 only after the last one.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from castgraph.interfaces.cast_provider import ICastProvider
from castgraph.models.cache import CacheSnapshot
from castgraph.models.collection import CollectionItem
from castgraph.models.lookup import CastMember
from castgraph.models.performer import Appearance, Performer
from castgraph.models.pipeline import BatchResult, FetchReport
from castgraph.utils.concurrency import BatchOutcome, run_in_batches
from castgraph.utils.logging import get_logger

DEFAULT_BATCH_SIZE = 5
DEFAULT_BATCH_DELAY = 0.1  # seconds
DEFAULT_CAST_LIMIT = 25


def merge_cast(
    performers: dict[int, Performer],
    item: CollectionItem,
    cast: Sequence[CastMember],
    limit: int = DEFAULT_CAST_LIMIT,
) -> int:
    """Merge the first *limit* cast entries of *item* into *performers*.

    Unknown performers are created on first sighting.  A performer already
    holding an appearance for this item is left untouched.

    Returns the number of appearances added.
    """
    added = 0
    for member in cast[:limit]:
        performer = performers.get(member.id)
        if performer is None:
            performer = Performer(
                id=member.id,
                name=member.name,
                profile_path=member.profile_path,
                popularity=member.popularity,
                known_for=member.known_for_department or "Acting",
            )
            performers[member.id] = performer

        appearance = Appearance(
            performer_id=member.id,
            item_id=item.id,
            title=item.title or "Unknown",
            role=member.character or "Unknown",
            image=item.poster,
        )
        if performer.add_appearance(appearance):
            added += 1
    return added


class CastFetcher:
    """Incrementally fills a snapshot's performer map from the cast lookup.

    Parameters
    ----------
    provider:
        The cast lookup.
    batch_size:
        Concurrent lookups per batch.
    batch_delay:
        Seconds between batches.
    cast_limit:
        Billing-order cast entries kept per item.
    sleep:
        Awaitable sleep used between batches; injectable for tests.
    """

    def __init__(
        self,
        provider: ICastProvider,
        batch_size: int = DEFAULT_BATCH_SIZE,
        batch_delay: float = DEFAULT_BATCH_DELAY,
        cast_limit: int = DEFAULT_CAST_LIMIT,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._provider = provider
        self._batch_size = batch_size
        self._batch_delay = batch_delay
        self._cast_limit = cast_limit
        self._sleep = sleep
        self._logger = get_logger(__name__)

    @staticmethod
    def pending_items(
        items: Sequence[CollectionItem],
        fetched_ids: set[int],
    ) -> list[CollectionItem]:
        """Items not fetched yet, in collection order, each id once."""
        seen: set[int] = set()
        pending: list[CollectionItem] = []
        for item in items:
            if item.id in fetched_ids or item.id in seen:
                continue
            seen.add(item.id)
            pending.append(item)
        return pending

    async def fetch(
        self,
        items: Sequence[CollectionItem],
        snapshot: CacheSnapshot,
        on_progress: Callable[[float], Any] | None = None,
    ) -> FetchReport:
        """Fetch and merge cast for every unfetched item of *items*.

        *snapshot* is mutated in place: performers are added or extended and
        successfully fetched item ids join ``fetched_item_ids``.

        Parameters
        ----------
        items:
            The full current collection.
        snapshot:
            The session's working snapshot.
        on_progress:
            Optional sync or async callback receiving the percentage of
            batches completed after each batch.

        Returns
        -------
        FetchReport
            Succeeded and failed item ids per batch.
        """
        pending = self.pending_items(items, snapshot.fetched_item_ids)
        if not pending:
            self._logger.debug("cast_fetch_skipped", collection_size=len(items))
            return FetchReport()

        self._logger.info(
            "cast_fetch_start",
            pending=len(pending),
            already_fetched=len(snapshot.fetched_item_ids),
            batch_size=self._batch_size,
        )

        results: list[BatchResult] = []

        async def _lookup(item: CollectionItem) -> list[CastMember]:
            return await self._provider.get_cast(item.id)

        async def _merge(outcome: BatchOutcome[CollectionItem, list[CastMember]]) -> None:
            for item, cast in outcome.succeeded:
                merge_cast(snapshot.performers, item, cast, self._cast_limit)
                snapshot.fetched_item_ids.add(item.id)

            results.append(BatchResult(
                batch_index=outcome.batch_index,
                succeeded_ids=[item.id for item, _ in outcome.succeeded],
                failed_ids=[item.id for item, _ in outcome.failed],
            ))
            self._logger.debug(
                "cast_batch_complete",
                batch=outcome.batch_index + 1,
                total_batches=outcome.total_batches,
                succeeded=len(outcome.succeeded),
                failed=len(outcome.failed),
            )

            if on_progress is not None:
                ret = on_progress(outcome.progress)
                if inspect.isawaitable(ret):
                    await ret

        await run_in_batches(
            pending,
            _lookup,
            batch_size=self._batch_size,
            delay=self._batch_delay,
            on_batch_complete=_merge,
            sleep=self._sleep,
            logger=self._logger,
            error_msg="cast_lookup_failed",
        )

        report = FetchReport(batches=results)
        self._logger.info(
            "cast_fetch_complete",
            fetched=len(report.succeeded_ids),
            failed=len(report.failed_ids),
            performers=len(snapshot.performers),
        )
        return report
