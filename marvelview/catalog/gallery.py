"""Gallery view: one large unfiltered fetch, then client-side predicates."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from .marvel_service import CatalogError, CatalogSource
from .pipeline import FETCH_ERROR
from .schemas import Character, GalleryFilters

logger = logging.getLogger(__name__)

GALLERY_PAGE_SIZE = 100

GALLERY_PREDICATES = {
    "has_comics": lambda c: c.comics.available > 0,
    "has_series": lambda c: c.series.available > 0,
    "has_events": lambda c: c.events.available > 0,
}


def apply_gallery_filters(characters: Iterable[Character], filters: GalleryFilters) -> List[Character]:
    """Keep the characters satisfying every enabled predicate.

    With no predicate enabled the full set comes back, in order, as a new
    list.
    """
    enabled = [pred for name, pred in GALLERY_PREDICATES.items() if getattr(filters, name)]
    return [c for c in characters if all(pred(c) for pred in enabled)]


class GallerySession:
    """State of one gallery view: the fetched set and the active predicates."""

    def __init__(self, client: CatalogSource, page_size: int = GALLERY_PAGE_SIZE) -> None:
        self.client = client
        self.page_size = page_size
        self.filters = GalleryFilters()
        self.characters: List[Character] = []
        self.loading = False
        self.error: Optional[str] = None

    @property
    def view(self) -> List[Character]:
        return apply_gallery_filters(self.characters, self.filters)

    async def mount(self) -> None:
        self.loading = True
        self.error = None
        try:
            page = await self.client.list_characters(limit=self.page_size)
        except CatalogError as exc:
            logger.error("Gallery fetch failed: %s", exc)
            self.error = FETCH_ERROR
        else:
            self.characters = list(page.results)
        finally:
            self.loading = False

    def toggle(self, name: str) -> None:
        """Flip one predicate; no network round trip."""
        if name not in GALLERY_PREDICATES:
            raise ValueError(f"Unknown gallery filter: {name!r}")
        self.filters = self.filters.model_copy(update={name: not getattr(self.filters, name)})
