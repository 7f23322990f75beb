"""Content fingerprint of a collection, used as the cache key."""

from __future__ import annotations

import hashlib
from collections.abc import Iterable


def collection_fingerprint(item_ids: Iterable[int | str]) -> str:
    """Return a stable SHA-256 hex digest of the sorted collection item ids.

    Ids are compared in their string form so that the digest does not depend
    on input order or on whether a caller passed ``7`` or ``"7"``.
    Duplicate ids are kept: a collection listing the same item twice is a
    different input from one listing it once.
    """
    joined = ",".join(sorted(str(item_id) for item_id in item_ids))
    return hashlib.sha256(joined.encode("utf-8")).hexdigest()
