"""Session lifecycle and fetch-report models.

A universe session moves through these phases:

    IDLE → FETCHING_CAST → READY_FOR_GRAPH → FETCHING_RECOMMENDATIONS → FULLY_READY

A cache hit jumps straight to READY_FOR_GRAPH, or to FULLY_READY when the
cached snapshot already carries recommendations.  The graph views are
computable from READY_FOR_GRAPH onwards; the recommendation pass never
blocks them.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class UniversePhase(str, Enum):  # noqa: UP042
    """Phases of a universe session."""

    IDLE = "IDLE"
    FETCHING_CAST = "FETCHING_CAST"
    READY_FOR_GRAPH = "READY_FOR_GRAPH"
    FETCHING_RECOMMENDATIONS = "FETCHING_RECOMMENDATIONS"
    FULLY_READY = "FULLY_READY"


class BatchResult(BaseModel):
    """Outcome of one fetch batch: which units succeeded and which failed.

    Units are collection-item ids for the cast pass and performer ids for
    the credits pass.  Failed units stay unmarked and are retried on the
    next cache-miss pass.
    """

    model_config = ConfigDict(frozen=True)

    batch_index: int
    succeeded_ids: list[int] = Field(default_factory=list)
    failed_ids: list[int] = Field(default_factory=list)


class FetchReport(BaseModel):
    """All batch results of a single fetch pass."""

    model_config = ConfigDict(frozen=True)

    batches: list[BatchResult] = Field(default_factory=list)

    @property
    def succeeded_ids(self) -> list[int]:
        return [uid for b in self.batches for uid in b.succeeded_ids]

    @property
    def failed_ids(self) -> list[int]:
        return [uid for b in self.batches for uid in b.failed_ids]

    @property
    def complete(self) -> bool:
        """True when no unit of the pass failed."""
        return not self.failed_ids
