"""
Search and sort pipeline behind the list view.

The derived view is always recomputed from scratch: ``filter_and_sort``
takes the base set (the last fetched page) and the current
``SearchFilters`` and returns a new list. Nothing is cached, so the same
inputs always yield the same ordering.

``ListSession`` holds the per-view state. Text edits update the live
query right away (client-side filtering) and restart a debounce timer;
only a query that survives the timer goes to the server as a
``nameStartsWith`` prefix. Fetches are numbered as they are issued and a
response is applied only if no later request has been issued since, so
out-of-order completions cannot resurrect stale results.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Iterable, List, Optional, Set

from .marvel_service import CatalogError, CatalogSource
from .schemas import Character, SearchFilters, SortKey

logger = logging.getLogger(__name__)

DEBOUNCE_SECONDS = 0.5
DEFAULT_PAGE_SIZE = 50
FETCH_ERROR = "Failed to fetch characters"

SORT_KEYS = ("name", "modified")


def _name_key(character: Character) -> str:
    return character.name.lower()


def _modified_key(character: Character):
    return character.modified


def filter_and_sort(characters: Iterable[Character], filters: SearchFilters) -> List[Character]:
    """Return the characters whose name contains ``filters.query``, sorted.

    Matching is a case-insensitive substring test. Names sort
    lexicographically after lower-casing, ``modified`` chronologically.
    The input is never mutated.
    """
    needle = filters.query.lower()
    if needle:
        result = [c for c in characters if needle in c.name.lower()]
    else:
        result = list(characters)
    key = _name_key if filters.sort_by == "name" else _modified_key
    result.sort(key=key, reverse=filters.sort_order == "desc")
    return result


def toggle_sort(filters: SearchFilters, key: SortKey) -> SearchFilters:
    """Clicking the active key flips direction; another key resets to ascending."""
    if key not in SORT_KEYS:
        raise ValueError(f"Unknown sort key: {key!r}")
    if filters.sort_by == key:
        order = "desc" if filters.sort_order == "asc" else "asc"
    else:
        order = "asc"
    return filters.model_copy(update={"sort_by": key, "sort_order": order})


def order_by_param(filters: SearchFilters) -> str:
    """Upstream ``orderBy`` value for the current sort state."""
    return f"-{filters.sort_by}" if filters.sort_order == "desc" else filters.sort_by


class Debouncer:
    """Single-shot timer that delivers only the last value it was given.

    Each ``trigger`` cancels the pending fire (if any) and schedules a new
    one ``delay`` seconds later. The callback runs synchronously on the
    event loop once the timer elapses.
    """

    def __init__(self, delay: float, callback: Callable[[Any], None]) -> None:
        self.delay = delay
        self._callback = callback
        self._task: Optional[asyncio.Task] = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def trigger(self, value: Any) -> None:
        self.cancel()
        self._task = asyncio.get_running_loop().create_task(self._fire(value))

    def cancel(self) -> None:
        if self.pending:
            self._task.cancel()

    async def wait(self) -> None:
        """Wait until no fire is pending (a re-trigger extends the wait)."""
        while self.pending:
            await asyncio.wait({self._task})

    async def _fire(self, value: Any) -> None:
        await asyncio.sleep(self.delay)
        self._callback(value)


class ListSession:
    """State of one list view: base set, filters, loading and error flags."""

    def __init__(
        self,
        client: CatalogSource,
        page_size: int = DEFAULT_PAGE_SIZE,
        debounce_seconds: float = DEBOUNCE_SECONDS,
    ) -> None:
        self.client = client
        self.page_size = page_size
        self.filters = SearchFilters()
        self.debounced_query = ""
        self.characters: List[Character] = []
        self.total = 0
        self.loading = False
        self.error: Optional[str] = None
        self._issued = 0
        self._inflight: Set[asyncio.Task] = set()
        self._debouncer = Debouncer(debounce_seconds, self._on_query_settled)

    @property
    def view(self) -> List[Character]:
        return filter_and_sort(self.characters, self.filters)

    async def mount(self) -> None:
        """Initial load: first page ordered by name."""
        await self._fetch(order_by="name")

    def set_query(self, text: str) -> None:
        self.filters = self.filters.model_copy(update={"query": text})
        self._debouncer.trigger(text)

    def toggle_sort(self, key: SortKey) -> None:
        self.filters = toggle_sort(self.filters, key)
        if self.debounced_query:
            self._spawn(self.search(self.debounced_query))

    async def search(self, query: str) -> None:
        """Replace the base set with characters whose name starts with ``query``."""
        await self._fetch(name_starts_with=query, order_by=order_by_param(self.filters))

    async def wait_idle(self) -> None:
        """Wait for the debounce timer and every in-flight fetch to settle."""
        await self._debouncer.wait()
        while self._inflight:
            await asyncio.gather(*list(self._inflight))

    def close(self) -> None:
        self._debouncer.cancel()

    def _on_query_settled(self, query: str) -> None:
        self.debounced_query = query
        if query:
            self._spawn(self.search(query))

    def _spawn(self, coro: Awaitable[None]) -> None:
        task = asyncio.ensure_future(coro)
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def _fetch(self, **params: Any) -> None:
        self._issued += 1
        seq = self._issued
        self.loading = True
        self.error = None
        try:
            page = await self.client.list_characters(limit=self.page_size, **params)
        except CatalogError as exc:
            if seq != self._issued:
                logger.debug("Ignoring failure of superseded request %d: %s", seq, exc)
                return
            logger.error("Character list fetch failed: %s", exc)
            self.error = FETCH_ERROR
            self.loading = False
            return
        if seq != self._issued:
            logger.debug("Dropping stale response %d (latest is %d)", seq, self._issued)
            return
        self.characters = list(page.results)
        self.total = page.total
        self.loading = False
