"""Performer records accumulated by the cast fetch pass.

Appearances and recommended titles are frozen Pydantic models.  The
Performer itself is a plain dataclass because it is mutable intermediate
state: appearances are appended as new collection items are fetched, and
the recommendation pass replaces its recommendation list.  It is never
exposed directly by the API; :mod:`castgraph.models.universe` holds the
read-only views.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict

from castgraph.utils.roles import is_mostly_voice

SIGNIFICANT_MIN_APPEARANCES = 2


# ---------------------------------------------------------------------------
# Appearance -- one performer credited on one collection item.
# ---------------------------------------------------------------------------
class Appearance(BaseModel):
    """Immutable link between a performer and a collection item."""

    model_config = ConfigDict(frozen=True)

    performer_id: int
    item_id: int
    title: str = "Unknown"
    # Character / role text as credited, e.g. "Walter White" or "Homer (voice)".
    role: str = "Unknown"
    # Poster of the collection item, carried for display.
    image: str | None = None


# ---------------------------------------------------------------------------
# RecommendedTitle -- a filtered credit outside the user's collection.
# ---------------------------------------------------------------------------
class RecommendedTitle(BaseModel):
    """A title a performer appears in that the user does not own yet."""

    model_config = ConfigDict(frozen=True)

    id: int
    title: str
    poster: str | None = None
    role: str = "Unknown"
    rating: float
    vote_count: int = 0


@dataclass
class Performer:
    """A person credited on one or more collection items.

    Invariant: no two appearances share an ``item_id``.  Use
    :meth:`add_appearance` rather than appending to ``appearances``.
    """

    id: int
    name: str
    profile_path: str | None = None
    popularity: float = 0.0
    known_for: str = "Acting"
    appearances: list[Appearance] = field(default_factory=list)
    recommendations: list[RecommendedTitle] = field(default_factory=list)

    @property
    def appearance_count(self) -> int:
        return len(self.appearances)

    @property
    def item_ids(self) -> frozenset[int]:
        return frozenset(a.item_id for a in self.appearances)

    @property
    def is_significant(self) -> bool:
        """True once the performer is credited on two or more items."""
        return self.appearance_count >= SIGNIFICANT_MIN_APPEARANCES

    @property
    def is_voice_performer(self) -> bool:
        return is_mostly_voice([a.role for a in self.appearances])

    def has_appearance(self, item_id: int) -> bool:
        return any(a.item_id == item_id for a in self.appearances)

    def add_appearance(self, appearance: Appearance) -> bool:
        """Append *appearance* unless its item is already recorded.

        Returns True if the appearance was added.
        """
        if appearance.performer_id != self.id:
            raise ValueError(
                f"Appearance for performer {appearance.performer_id} "
                f"cannot be added to performer {self.id}"
            )
        if self.has_appearance(appearance.item_id):
            return False
        self.appearances.append(appearance)
        return True
