"""Response schemas for the cast and credits lookups.

These models are the validation boundary for everything the lookup service
returns.  Unknown fields are ignored, nullable fields are coerced to safe
defaults, and anything that still fails validation is turned into a
:class:`~castgraph.utils.errors.ResponseSchemaError` by the provider, which
the batch runner treats as an ordinary per-unit failure.

Field names follow the TMDb v3 JSON so that ``model_validate`` can consume
the payload directly.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CastMember(BaseModel):
    """One entry of an item's cast list, in billing order."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    name: str
    profile_path: str | None = None
    popularity: float = 0.0
    known_for_department: str | None = None
    character: str | None = None

    @field_validator("popularity", mode="before")
    @classmethod
    def _null_popularity(cls, value: object) -> object:
        return 0.0 if value is None else value


class CastResponse(BaseModel):
    """Body of ``/{media}/{id}/credits``."""

    model_config = ConfigDict(extra="ignore")

    cast: list[CastMember] = Field(default_factory=list)

    @field_validator("cast", mode="before")
    @classmethod
    def _null_cast(cls, value: object) -> object:
        return [] if value is None else value


class CreditEntry(BaseModel):
    """One title from a performer's credit list.

    TV credits carry ``name`` / ``original_name``; movie credits carry
    ``title`` / ``original_title``.  :attr:`display_title` picks whichever
    is present.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    name: str | None = None
    original_name: str | None = None
    title: str | None = None
    original_title: str | None = None
    poster_path: str | None = None
    character: str | None = None
    vote_average: float = 0.0
    vote_count: int = 0

    @field_validator("vote_average", "vote_count", mode="before")
    @classmethod
    def _null_votes(cls, value: object) -> object:
        return 0 if value is None else value

    @property
    def display_title(self) -> str:
        return (
            self.name
            or self.title
            or self.original_name
            or self.original_title
            or "Unknown"
        )


class CreditsResponse(BaseModel):
    """Body of ``/person/{id}/{media}_credits``."""

    model_config = ConfigDict(extra="ignore")

    cast: list[CreditEntry] = Field(default_factory=list)

    @field_validator("cast", mode="before")
    @classmethod
    def _null_cast(cls, value: object) -> object:
        return [] if value is None else value
