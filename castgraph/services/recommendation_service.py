"""Recommendation engine: titles the user's performers appear in elsewhere.

Three stages:

  SCOPE      The 20 significant performers with the most appearances.
             The voice-hide display option does not apply here.

  FETCH      Credits lookup per performer, 3 per batch, 150 ms apart.
             Credits are kept if the title is not in the collection, has a
             rating of at least 6.5 from at least 50 votes, and the role is
             not a voice role.  The 5 best-rated survivors are attached to
             the performer.  Failures are recorded and skipped exactly like
             the cast pass.

  AGGREGATE  Across every performer carrying recommendations (including
             ones attached by an earlier session), group by title, collect
             the supporting performers, rank by supporter count then
             rating, and return the top 15.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable, Iterable, Mapping, Sequence
from typing import Any

from castgraph.interfaces.cast_provider import ICastProvider
from castgraph.models.lookup import CreditEntry
from castgraph.models.performer import Performer, RecommendedTitle
from castgraph.models.pipeline import BatchResult, FetchReport
from castgraph.models.universe import CandidateTitle, RecommendationCandidate, Supporter
from castgraph.services.graph_builder import select_significant
from castgraph.utils.concurrency import BatchOutcome, run_in_batches
from castgraph.utils.logging import get_logger
from castgraph.utils.roles import is_voice_role

SCOPE_SIZE = 20
MIN_RATING = 6.5
MIN_VOTE_COUNT = 50
PER_PERFORMER_LIMIT = 5
MAX_RECOMMENDATIONS = 15

DEFAULT_BATCH_SIZE = 3
DEFAULT_BATCH_DELAY = 0.15  # seconds


def select_scope(performers: Iterable[Performer], size: int = SCOPE_SIZE) -> list[Performer]:
    """Top *size* significant performers by appearance count."""
    return select_significant(performers, hide_voice_performers=False)[:size]


def filter_credits(
    credits: Sequence[CreditEntry],
    owned_ids: set[int],
    limit: int = PER_PERFORMER_LIMIT,
) -> list[RecommendedTitle]:
    """Keep the best-rated credits worth recommending.

    A title listed several times (one entry per character) is kept once,
    with its first surviving entry after sorting by rating.
    """
    eligible = [
        c for c in credits
        if c.id not in owned_ids
        and c.vote_average >= MIN_RATING
        and c.vote_count >= MIN_VOTE_COUNT
        and not is_voice_role(c.character)
    ]
    eligible.sort(key=lambda c: c.vote_average, reverse=True)

    picked: list[RecommendedTitle] = []
    seen: set[int] = set()
    for credit in eligible:
        if credit.id in seen:
            continue
        seen.add(credit.id)
        picked.append(RecommendedTitle(
            id=credit.id,
            title=credit.display_title,
            poster=credit.poster_path,
            role=credit.character or "Unknown",
            rating=credit.vote_average,
            vote_count=credit.vote_count,
        ))
        if len(picked) >= limit:
            break
    return picked


def aggregate_recommendations(
    performers: Iterable[Performer],
    limit: int = MAX_RECOMMENDATIONS,
) -> list[RecommendationCandidate]:
    """Group attached recommendations by title and rank them.

    Ranking: more supporting performers first, then higher rating.  Equal
    keys keep first-seen order.
    """
    titles: dict[int, CandidateTitle] = {}
    supporters: dict[int, list[Supporter]] = {}

    for performer in performers:
        for rec in performer.recommendations:
            if rec.id not in titles:
                titles[rec.id] = CandidateTitle(
                    id=rec.id,
                    title=rec.title,
                    poster=rec.poster,
                    rating=rec.rating,
                )
                supporters[rec.id] = []
            supporters[rec.id].append(Supporter(
                performer_id=performer.id,
                name=performer.name,
                role=rec.role,
            ))

    ranked = sorted(
        titles,
        key=lambda tid: (len(supporters[tid]), titles[tid].rating),
        reverse=True,
    )
    return [
        RecommendationCandidate(title=titles[tid], supporters=supporters[tid])
        for tid in ranked[:limit]
    ]


class RecommendationService:
    """Runs the credits pass and attaches recommendations to performers.

    Parameters
    ----------
    provider:
        The credits lookup.
    batch_size:
        Concurrent lookups per batch.
    batch_delay:
        Seconds between batches.
    sleep:
        Awaitable sleep used between batches; injectable for tests.
    """

    def __init__(
        self,
        provider: ICastProvider,
        batch_size: int = DEFAULT_BATCH_SIZE,
        batch_delay: float = DEFAULT_BATCH_DELAY,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._provider = provider
        self._batch_size = batch_size
        self._batch_delay = batch_delay
        self._sleep = sleep
        self._logger = get_logger(__name__)

    async def fetch_recommendations(
        self,
        performers: Mapping[int, Performer],
        owned_ids: set[int],
        on_progress: Callable[[float], Any] | None = None,
    ) -> FetchReport:
        """Fetch credits for the scoped performers and attach recommendations.

        Performers in *performers* are mutated in place.  A performer whose
        lookup fails keeps whatever recommendations it already had.
        """
        scope = select_scope(performers.values())
        if not scope:
            self._logger.debug("recommendation_fetch_skipped", performers=len(performers))
            return FetchReport()

        self._logger.info(
            "recommendation_fetch_start",
            scope=len(scope),
            owned=len(owned_ids),
        )

        results: list[BatchResult] = []

        async def _lookup(performer: Performer) -> list[CreditEntry]:
            return await self._provider.get_credits(performer.id)

        async def _attach(outcome: BatchOutcome[Performer, list[CreditEntry]]) -> None:
            for performer, credits in outcome.succeeded:
                performer.recommendations = filter_credits(credits, owned_ids)

            results.append(BatchResult(
                batch_index=outcome.batch_index,
                succeeded_ids=[p.id for p, _ in outcome.succeeded],
                failed_ids=[p.id for p, _ in outcome.failed],
            ))

            if on_progress is not None:
                ret = on_progress(outcome.progress)
                if inspect.isawaitable(ret):
                    await ret

        await run_in_batches(
            scope,
            _lookup,
            batch_size=self._batch_size,
            delay=self._batch_delay,
            on_batch_complete=_attach,
            sleep=self._sleep,
            logger=self._logger,
            error_msg="credits_lookup_failed",
        )

        report = FetchReport(batches=results)
        self._logger.info(
            "recommendation_fetch_complete",
            succeeded=len(report.succeeded_ids),
            failed=len(report.failed_ids),
        )
        return report
