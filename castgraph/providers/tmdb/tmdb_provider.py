"""TMDb (The Movie Database) v3 REST provider.

Implements ICastProvider over an injected ``httpx.AsyncClient``:

    cast lookup     GET /{media}/{item_id}/credits
    credits lookup  GET /person/{performer_id}/{media}_credits

``media`` is ``tv`` or ``movie``.  Every response is validated with the
schemas in :mod:`castgraph.models.lookup`; a body that does not fit is a
``ResponseSchemaError`` for that single lookup.  There are no retries here:
a failed unit stays unfetched and the next cache-miss pass tries again.
Rate limiting is the batch runner's job, not the provider's.
"""

from __future__ import annotations

from typing import Any, Literal

import httpx
from pydantic import BaseModel, ValidationError

from castgraph.interfaces.cast_provider import ICastProvider
from castgraph.models.lookup import CastMember, CastResponse, CreditEntry, CreditsResponse
from castgraph.utils.errors import (
    ConfigurationError,
    ProviderUnavailableError,
    RateLimitError,
    ResponseSchemaError,
)
from castgraph.utils.logging import get_logger

_DEFAULT_BASE_URL = "https://api.themoviedb.org/3"


class TMDbCastProvider(ICastProvider):
    """Cast and credits lookups against the TMDb v3 API.

    Parameters
    ----------
    http_client:
        Injected ``httpx.AsyncClient`` for testability and connection pooling.
    api_key:
        TMDb v3 API key, sent as the ``api_key`` query parameter.
    media_type:
        ``"tv"`` for series collections, ``"movie"`` for film collections.
    base_url:
        API root, without a trailing slash.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_key: str,
        media_type: Literal["tv", "movie"] = "tv",
        base_url: str = _DEFAULT_BASE_URL,
    ) -> None:
        if not api_key:
            raise ConfigurationError(
                message="TMDB_API_KEY is not set",
                provider_name="tmdb",
            )
        if media_type not in ("tv", "movie"):
            raise ConfigurationError(
                message=f"Unsupported media type: {media_type!r}",
                provider_name="tmdb",
            )
        self._http = http_client
        self._api_key = api_key
        self._media_type = media_type
        self._base_url = base_url.rstrip("/")
        self._logger = get_logger(__name__)

    # ------------------------------------------------------------------
    # ICastProvider implementation
    # ------------------------------------------------------------------

    async def get_cast(self, item_id: int) -> list[CastMember]:
        url = f"{self._base_url}/{self._media_type}/{item_id}/credits"
        body = await self._get_json(url, unit=f"item:{item_id}")
        parsed = self._validate(CastResponse, body, unit=f"item:{item_id}")
        return list(parsed.cast)

    async def get_credits(self, performer_id: int) -> list[CreditEntry]:
        url = f"{self._base_url}/person/{performer_id}/{self._media_type}_credits"
        body = await self._get_json(url, unit=f"person:{performer_id}")
        parsed = self._validate(CreditsResponse, body, unit=f"person:{performer_id}")
        return list(parsed.cast)

    def get_provider_name(self) -> str:
        return "tmdb"

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _get_json(self, url: str, unit: str) -> Any:
        """GET *url* and return the decoded JSON body.

        Raises ``RateLimitError`` on 429, ``ProviderUnavailableError`` on any
        other non-2xx status or transport error, and ``ResponseSchemaError``
        if the body is not JSON.
        """
        try:
            response = await self._http.get(url, params={"api_key": self._api_key})
        except httpx.HTTPError as exc:
            self._logger.debug("tmdb_request_failed", unit=unit, error=str(exc))
            raise ProviderUnavailableError(
                message=f"TMDb request for {unit} failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        if response.status_code == 429:
            raise RateLimitError(
                message=f"TMDb rate limit hit for {unit}",
                provider_name=self.get_provider_name(),
            )
        if not response.is_success:
            raise ProviderUnavailableError(
                message=f"TMDb returned HTTP {response.status_code} for {unit}",
                provider_name=self.get_provider_name(),
            )

        try:
            return response.json()
        except ValueError as exc:
            raise ResponseSchemaError(
                message=f"TMDb returned a non-JSON body for {unit}",
                provider_name=self.get_provider_name(),
            ) from exc

    def _validate(self, schema: type[BaseModel], body: Any, unit: str) -> Any:
        try:
            return schema.model_validate(body)
        except ValidationError as exc:
            raise ResponseSchemaError(
                message=f"TMDb response for {unit} failed validation: {exc.error_count()} error(s)",
                provider_name=self.get_provider_name(),
            ) from exc
