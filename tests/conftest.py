"""Shared pytest fixtures for the castgraph test suite."""

from __future__ import annotations

import random
from typing import Any

import pytest

from castgraph.interfaces.cast_provider import ICastProvider
from castgraph.models.collection import CollectionItem
from castgraph.models.lookup import CastMember, CreditEntry
from castgraph.models.performer import Appearance, Performer
from castgraph.providers.cache.memory_cache import MemoryCacheProvider
from castgraph.services.cast_fetcher import CastFetcher
from castgraph.services.recommendation_service import RecommendationService
from castgraph.services.universe_service import UniverseSession
from castgraph.utils.errors import ProviderUnavailableError

# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def make_item(item_id: int, title: str | None = None) -> CollectionItem:
    return CollectionItem(id=item_id, title=title or f"Show {item_id}", poster=f"/p{item_id}.jpg")


def make_member(performer_id: int, name: str | None = None, character: str = "Lead") -> CastMember:
    return CastMember(
        id=performer_id,
        name=name or f"Performer {performer_id}",
        profile_path=f"/pr{performer_id}.jpg",
        popularity=float(performer_id % 10),
        known_for_department="Acting",
        character=character,
    )


def make_credit(
    title_id: int,
    rating: float = 8.0,
    votes: int = 500,
    character: str = "Guest",
    name: str | None = None,
) -> CreditEntry:
    return CreditEntry(
        id=title_id,
        name=name or f"Title {title_id}",
        poster_path=f"/t{title_id}.jpg",
        character=character,
        vote_average=rating,
        vote_count=votes,
    )


def make_performer(
    performer_id: int,
    item_ids: list[int],
    name: str | None = None,
    roles: list[str] | None = None,
) -> Performer:
    """Performer with one appearance per item id, in order."""
    performer = Performer(id=performer_id, name=name or f"Performer {performer_id}")
    for index, item_id in enumerate(item_ids):
        role = roles[index] if roles else "Lead"
        performer.add_appearance(Appearance(
            performer_id=performer_id,
            item_id=item_id,
            title=f"Show {item_id}",
            role=role,
        ))
    return performer


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeCastProvider(ICastProvider):
    """In-memory ICastProvider with per-id failure injection and a call log."""

    def __init__(
        self,
        cast: dict[int, list[CastMember]] | None = None,
        credits: dict[int, list[CreditEntry]] | None = None,
        failing_items: set[int] | None = None,
        failing_performers: set[int] | None = None,
    ) -> None:
        self.cast = cast or {}
        self.credits = credits or {}
        self.failing_items = failing_items or set()
        self.failing_performers = failing_performers or set()
        self.cast_calls: list[int] = []
        self.credit_calls: list[int] = []

    async def get_cast(self, item_id: int) -> list[CastMember]:
        self.cast_calls.append(item_id)
        if item_id in self.failing_items:
            raise ProviderUnavailableError(f"item {item_id} down", provider_name="fake")
        return list(self.cast.get(item_id, []))

    async def get_credits(self, performer_id: int) -> list[CreditEntry]:
        self.credit_calls.append(performer_id)
        if performer_id in self.failing_performers:
            raise ProviderUnavailableError(f"person {performer_id} down", provider_name="fake")
        return list(self.credits.get(performer_id, []))

    def get_provider_name(self) -> str:
        return "fake"


class RecordingSleep:
    """Awaitable sleep stand-in that records every requested delay."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.calls.append(delay)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def small_universe() -> dict[str, Any]:
    """Three items; performers 1 and 2 share items 10 and 11, 3 is in one item.

    Performer 4 is a voice performer across 10 and 12.
    """
    cast = {
        10: [make_member(1), make_member(2), make_member(4, character="Narrator (voice)")],
        11: [make_member(1), make_member(2), make_member(3)],
        12: [make_member(1), make_member(4, character="Voice of Max")],
    }
    credits = {
        1: [make_credit(900, rating=8.5), make_credit(901, rating=7.0)],
        2: [make_credit(900, rating=8.5), make_credit(902, rating=9.0)],
        4: [make_credit(903, rating=9.5)],
    }
    return {
        "items": [make_item(10), make_item(11), make_item(12)],
        "provider": FakeCastProvider(cast=cast, credits=credits),
    }


@pytest.fixture
def session_builder(recording_sleep: RecordingSleep):
    """Factory for sessions sharing one cache, with no real sleeping."""
    cache = MemoryCacheProvider()

    def _build(provider: ICastProvider, **kwargs: Any) -> UniverseSession:
        return UniverseSession(
            cache=kwargs.pop("cache", cache),
            cast_fetcher=CastFetcher(provider, sleep=recording_sleep),
            recommendation_service=RecommendationService(provider, sleep=recording_sleep),
            rng=kwargs.pop("rng", random.Random(7)),
            **kwargs,
        )

    _build.cache = cache  # type: ignore[attr-defined]
    return _build
