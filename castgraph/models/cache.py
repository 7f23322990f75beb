"""Cache snapshot stored under a collection fingerprint."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field

from castgraph.models.performer import Performer


@dataclass
class CacheSnapshot:
    """Everything a session needs to resume without refetching.

    ``performers`` is keyed by performer id.  ``fetched_item_ids`` lists the
    collection items whose cast has been merged successfully.
    ``recommendations_loaded`` is set once the credits pass has run for this
    performer map.
    """

    performers: dict[int, Performer] = field(default_factory=dict)
    fetched_item_ids: set[int] = field(default_factory=set)
    recommendations_loaded: bool = False

    def clone(self) -> CacheSnapshot:
        """Deep copy, so the caller can mutate freely without aliasing."""
        return copy.deepcopy(self)
