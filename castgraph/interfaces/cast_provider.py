"""Abstract base class for cast / credits lookup providers.

Defines the contract for the two remote lookups the universe consumes: the
per-item cast lookup and the per-performer credits lookup.  TMDb is the
shipped implementation; any service that can answer both questions can be
swapped in without touching the fetch or graph logic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from castgraph.models.lookup import CastMember, CreditEntry


class ICastProvider(ABC):
    """Contract for cast and credits lookup services.

    Both lookups are async request/response calls.  Implementations raise a
    :class:`~castgraph.utils.errors.CastLookupError` subclass on any
    failure, including a response that fails schema validation, and never
    return partially validated data.
    """

    @abstractmethod
    async def get_cast(self, item_id: int) -> list[CastMember]:
        """Return the cast of collection item *item_id* in billing order.

        Raises
        ------
        castgraph.utils.errors.CastLookupError
            If the lookup fails or the response is malformed.
        """

    @abstractmethod
    async def get_credits(self, performer_id: int) -> list[CreditEntry]:
        """Return the other titles performer *performer_id* is credited on.

        Raises
        ------
        castgraph.utils.errors.CastLookupError
            If the lookup fails or the response is malformed.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier for the provider, e.g. ``"tmdb"``."""
