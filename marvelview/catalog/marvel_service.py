"""
Marvel API integration for the catalogue. It exposes one client class,
``MarvelClient``, with the two read operations the views need:

* ``list_characters()`` — list characters, optionally narrowed by a name
  prefix, with ``limit``/``offset`` paging and an ``orderBy`` field
  (``-`` prefixed for descending order).

* ``get_character_by_id()`` — retrieve a single character by its
  numeric identifier.

Each call is a single signed GET: a fresh ``ts``/``apikey``/``hash``
triple from ``auth.generate_auth_params`` is merged with the caller's
parameters. There is no retry and no cache. Transport errors, non-2xx
answers and undecodable bodies all surface as ``CatalogFetchError``; a
lookup by id that yields nothing raises ``CharacterNotFound``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx
from typing_extensions import Protocol
from pydantic import ValidationError

from ..config import Settings, get_settings
from .auth import generate_auth_params
from .schemas import Character, CharacterDataContainer, CharacterDataWrapper


logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 50
MAX_LIMIT = 100


class CatalogError(Exception):
    """Base class for failures talking to the catalogue."""


class CatalogFetchError(CatalogError):
    """Transport failure, non-2xx status or malformed response."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class CharacterNotFound(CatalogError):
    """A lookup by id returned no character."""

    def __init__(self, character_id: int) -> None:
        super().__init__(f"Character {character_id} not found")
        self.character_id = character_id


class CatalogSource(Protocol):
    """The read operations the view sessions need; ``MarvelClient`` provides them."""

    async def list_characters(
        self,
        name_starts_with: Optional[str] = None,
        limit: int = DEFAULT_LIMIT,
        offset: int = 0,
        order_by: str = "name",
    ) -> CharacterDataContainer: ...

    async def get_character_by_id(self, character_id: int) -> Character: ...


def _clamp_limit(limit: Optional[int]) -> int:
    if not limit:
        return DEFAULT_LIMIT
    return max(1, min(MAX_LIMIT, int(limit)))


class MarvelClient:
    """Async client for the two ``/characters`` endpoints.

    An ``httpx.AsyncClient`` may be injected (tests pass one backed by
    ``httpx.MockTransport``); an injected client is left open on
    ``aclose()`` since its owner is responsible for it.
    """

    def __init__(
        self,
        http_client: Optional[httpx.AsyncClient] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=self._settings.timeout_seconds)
        self._base_url = self._settings.base_url.rstrip("/")

    async def __aenter__(self) -> "MarvelClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> CharacterDataWrapper:
        """Perform one signed GET and decode the response envelope."""
        url = f"{self._base_url}{path}"
        query: Dict[str, Any] = dict(generate_auth_params(self._settings))
        query.update(params or {})
        try:
            response = await self._http.get(url, params=query)
        except httpx.HTTPError as exc:
            logger.error("Error fetching %s: %s", url, exc)
            raise CatalogFetchError(f"Request to {path} failed: {exc}") from exc
        if response.status_code == 404:
            # The API answers 404 for unknown ids; callers decide what that means
            logger.warning("Marvel API request to %s returned status 404", url)
            raise CatalogFetchError(f"{path} returned 404", status_code=404)
        if not response.is_success:
            logger.warning("Marvel API request to %s returned status %s", url, response.status_code)
            raise CatalogFetchError(
                f"{path} returned status {response.status_code}",
                status_code=response.status_code,
            )
        try:
            return CharacterDataWrapper.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            logger.error("Malformed response from %s: %s", url, exc)
            raise CatalogFetchError(f"Malformed response from {path}") from exc

    async def list_characters(
        self,
        name_starts_with: Optional[str] = None,
        limit: int = DEFAULT_LIMIT,
        offset: int = 0,
        order_by: str = "name",
    ) -> CharacterDataContainer:
        """Fetch one page of characters.

        ``name_starts_with`` is only sent when non-empty. ``limit`` is
        clamped to the API ceiling of 100.
        """
        params: Dict[str, Any] = {
            "limit": _clamp_limit(limit),
            "offset": max(0, int(offset or 0)),
            "orderBy": order_by or "name",
        }
        if name_starts_with:
            params["nameStartsWith"] = name_starts_with
        wrapper = await self._get("/characters", params)
        logger.debug(
            "Fetched %d of %d characters (prefix=%r, order=%s)",
            wrapper.data.count,
            wrapper.data.total,
            name_starts_with,
            params["orderBy"],
        )
        return wrapper.data

    async def get_character_by_id(self, character_id: int) -> Character:
        """Fetch a single character; raise ``CharacterNotFound`` when absent."""
        try:
            wrapper = await self._get(f"/characters/{int(character_id)}")
        except CatalogFetchError as exc:
            if exc.status_code == 404:
                raise CharacterNotFound(character_id) from exc
            raise
        if not wrapper.data.results:
            raise CharacterNotFound(character_id)
        return wrapper.data.results[0]
