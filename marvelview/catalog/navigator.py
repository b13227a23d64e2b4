"""
Detail view navigation.

``DetailNavigator.load`` fetches one character and, concurrently, a
listing of up to 100 characters that defines the prev/next order. The
character's position in that listing is found by linear scan.

Two policies apply:

* A character missing from the listing is placed at index 0 and
  ``located`` is set to ``False`` so callers can tell the fallback apart
  from a real first position.
* If the character loads but the listing does not, the character is
  still shown; the listing is left empty and navigation is disabled.
"""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Sequence

from .marvel_service import CatalogError, CatalogSource, CharacterNotFound
from .schemas import Character

logger = logging.getLogger(__name__)

LISTING_SIZE = 100
NOT_FOUND_ERROR = "Character not found"
FETCH_ERROR = "Failed to fetch character details"


def locate(characters: Sequence[Character], character_id: int) -> Optional[int]:
    """Index of ``character_id`` in ``characters``, or ``None``."""
    for index, character in enumerate(characters):
        if character.id == character_id:
            return index
    return None


def cyclic_index(index: int, length: int, step: int) -> int:
    """Move ``step`` positions from ``index``, wrapping at both ends."""
    if length <= 0:
        raise ValueError("cannot navigate an empty listing")
    return (index + step) % length


class DetailNavigator:
    """State of one detail view: the character, the listing and its index.

    ``error`` carries the user-visible message when the character itself
    cannot be shown; a listing failure only disables navigation. Only the
    most recently issued ``load`` may update the state.
    """

    def __init__(self, client: CatalogSource, listing_size: int = LISTING_SIZE) -> None:
        self.client = client
        self.listing_size = listing_size
        self.character: Optional[Character] = None
        self.listing: List[Character] = []
        self.index = 0
        self.located = False
        self.loading = False
        self.error: Optional[str] = None
        self._issued = 0

    @property
    def has_navigation(self) -> bool:
        return self.character is not None and bool(self.listing)

    @property
    def position(self) -> Optional[str]:
        if not self.has_navigation:
            return None
        return f"{self.index + 1} of {len(self.listing)}"

    def previous_id(self) -> Optional[int]:
        return self._neighbour_id(-1)

    def next_id(self) -> Optional[int]:
        return self._neighbour_id(1)

    async def go_previous(self) -> None:
        target = self.previous_id()
        if target is not None:
            await self.load(target)

    async def go_next(self) -> None:
        target = self.next_id()
        if target is not None:
            await self.load(target)

    async def load(self, character_id: int) -> None:
        self._issued += 1
        seq = self._issued
        self.loading = True
        self.error = None

        entity, listing = await asyncio.gather(
            self.client.get_character_by_id(character_id),
            self.client.list_characters(limit=self.listing_size),
            return_exceptions=True,
        )
        if seq != self._issued:
            logger.debug("Dropping stale detail load %d for id %s", seq, character_id)
            return

        self.loading = False
        if isinstance(entity, BaseException):
            self.character = None
            self.listing = []
            self.index = 0
            self.located = False
            if isinstance(entity, CharacterNotFound):
                self.error = NOT_FOUND_ERROR
            elif isinstance(entity, CatalogError):
                logger.error("Detail fetch for %s failed: %s", character_id, entity)
                self.error = FETCH_ERROR
            else:
                raise entity
            return

        self.character = entity
        if isinstance(listing, CatalogError):
            logger.warning("Listing fetch failed, navigation disabled: %s", listing)
            self.listing = []
        elif isinstance(listing, BaseException):
            raise listing
        else:
            self.listing = list(listing.results)

        found = locate(self.listing, entity.id)
        self.located = found is not None
        self.index = found if found is not None else 0

    def _neighbour_id(self, step: int) -> Optional[int]:
        if not self.has_navigation:
            return None
        return self.listing[cyclic_index(self.index, len(self.listing), step)].id
