"""Read-only views of the performer universe.

Everything here is derived from the performer map and recomputed whenever
the map or the display options change.  Nothing in this module is cached
or persisted.

The structure is a weighted graph:
    - PerformerNode  = a displayed performer with layout attributes
    - Connection     = an edge between two performers sharing collection items
    - RecommendationCandidate = a title outside the collection plus the
      performers who support it
    - UniverseView   = the complete output handed to API and CLI consumers
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from castgraph.models.performer import Appearance, RecommendedTitle
from castgraph.models.pipeline import UniversePhase


# ---------------------------------------------------------------------------
# Graph
# ---------------------------------------------------------------------------
class SharedItem(BaseModel):
    """A collection item both ends of a connection appear in."""

    model_config = ConfigDict(frozen=True)

    item_id: int
    title: str = "Unknown"


class Connection(BaseModel):
    """Undirected weighted edge between two performers.

    ``performer_a_id`` is always the smaller id, so the pair (A, B) and the
    pair (B, A) produce the same Connection.
    """

    model_config = ConfigDict(frozen=True)

    performer_a_id: int
    performer_b_id: int
    shared_items: list[SharedItem] = Field(default_factory=list)
    # Number of shared collection items (always >= 1).
    weight: int = Field(ge=1)

    @property
    def pair(self) -> tuple[int, int]:
        return (self.performer_a_id, self.performer_b_id)

    @property
    def shared_item_ids(self) -> list[int]:
        return [s.item_id for s in self.shared_items]


class PerformerNode(BaseModel):
    """A performer as displayed in the universe, with layout attributes.

    ``x`` and ``y`` are normalized canvas coordinates (0.5 is the centre),
    ``z`` is a render-order depth, ``size`` a point radius and ``color`` a
    CSS ``hsl()`` string.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    profile_path: str | None = None
    popularity: float = 0.0
    known_for: str = "Acting"
    appearance_count: int
    appearances: list[Appearance] = Field(default_factory=list)
    recommendations: list[RecommendedTitle] = Field(default_factory=list)
    x: float | None = None
    y: float | None = None
    z: float | None = None
    size: float | None = None
    color: str | None = None


# ---------------------------------------------------------------------------
# Recommendations
# ---------------------------------------------------------------------------
class Supporter(BaseModel):
    """A performer from the collection who also appears in a recommended title."""

    model_config = ConfigDict(frozen=True)

    performer_id: int
    name: str
    role: str = "Unknown"


class CandidateTitle(BaseModel):
    """The recommended title itself."""

    model_config = ConfigDict(frozen=True)

    id: int
    title: str
    poster: str | None = None
    rating: float = 0.0


class RecommendationCandidate(BaseModel):
    """A title outside the collection, ranked by how many performers lead to it."""

    model_config = ConfigDict(frozen=True)

    title: CandidateTitle
    supporters: list[Supporter] = Field(default_factory=list)

    @property
    def supporter_count(self) -> int:
        return len(self.supporters)


# ---------------------------------------------------------------------------
# Stats + full view
# ---------------------------------------------------------------------------
class MostConnectedPair(BaseModel):
    """The heaviest connection in the displayed graph."""

    model_config = ConfigDict(frozen=True)

    performer_a_id: int
    performer_a_name: str
    performer_b_id: int
    performer_b_name: str
    count: int


class UniverseStats(BaseModel):
    """Summary counts for the stats header."""

    model_config = ConfigDict(frozen=True)

    # Every performer seen in the collection, significant or not.
    total_performers: int = 0
    # Performers in two or more items, after the voice filter.
    performers_in_multiple_items: int = 0
    most_connected_pair: MostConnectedPair | None = None


class UniverseView(BaseModel):
    """The complete output of a universe session."""

    model_config = ConfigDict(frozen=True)

    phase: UniversePhase = UniversePhase.IDLE
    performers: list[PerformerNode] = Field(default_factory=list)
    connections: list[Connection] = Field(default_factory=list)
    top_performers: list[PerformerNode] = Field(default_factory=list)
    recommendations: list[RecommendationCandidate] = Field(default_factory=list)
    stats: UniverseStats = Field(default_factory=UniverseStats)
    loading: bool = False
    fetch_progress: float = Field(default=0.0, ge=0.0, le=100.0)
    loading_recommendations: bool = False
