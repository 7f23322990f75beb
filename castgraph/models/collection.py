"""Collection input model.

A collection is the user's own list of titles, handed in read-only at every
recomputation.  Only the fields the universe needs are modelled; anything
else a caller sends is ignored.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class CollectionItem(BaseModel):
    """One title in the user's collection."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    # TMDb id of the title; also the key used by the cast lookup.
    id: int
    title: str = Field(default="Unknown")
    # Poster image reference (TMDb path fragment), if known.
    poster: str | None = None
