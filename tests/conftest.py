"""Shared fixtures: character factory, in-memory catalogue double, settings."""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional, Set

import pytest

from marvelview.catalog.marvel_service import CatalogFetchError, CharacterNotFound
from marvelview.catalog.schemas import Character, CharacterDataContainer
from marvelview.config import Settings


def make_character(
    character_id: int,
    name: str,
    *,
    modified: str = "2014-04-29T14:18:17-0400",
    comics: int = 0,
    series: int = 0,
    events: int = 0,
    **extra: Any,
) -> Character:
    payload: Dict[str, Any] = {
        "id": character_id,
        "name": name,
        "modified": modified,
        "thumbnail": {"path": f"http://i.annihil.us/{character_id}", "extension": "jpg"},
        "comics": {"available": comics, "items": []},
        "series": {"available": series, "items": []},
        "events": {"available": events, "items": []},
    }
    payload.update(extra)
    return Character.model_validate(payload)


def page_of(characters: List[Character], total: Optional[int] = None) -> CharacterDataContainer:
    return CharacterDataContainer(
        offset=0,
        limit=len(characters),
        total=len(characters) if total is None else total,
        count=len(characters),
        results=characters,
    )


class FakeCatalog:
    """Stands in for ``MarvelClient`` in session tests.

    ``pages`` maps a name prefix (``None`` for unscoped listings) to the
    characters returned; ``gates`` lets a test hold a listing call open
    until it sets the matching event.
    """

    def __init__(self, characters: Optional[List[Character]] = None) -> None:
        self.characters = list(characters or [])
        self.pages: Dict[Optional[str], List[Character]] = {}
        self.gates: Dict[Optional[str], asyncio.Event] = {}
        self.list_calls: List[Dict[str, Any]] = []
        self.get_calls: List[int] = []
        self.fail_listing = False
        self.fail_lookup = False
        self.failing_prefixes: Set[Optional[str]] = set()
        self.lookup_gates: Dict[int, asyncio.Event] = {}
        self.failing_ids: Set[int] = set()

    async def list_characters(
        self,
        name_starts_with: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
        order_by: str = "name",
    ) -> CharacterDataContainer:
        self.list_calls.append(
            {"name_starts_with": name_starts_with, "limit": limit, "offset": offset, "order_by": order_by}
        )
        gate = self.gates.get(name_starts_with)
        if gate is not None:
            await gate.wait()
        if self.fail_listing or name_starts_with in self.failing_prefixes:
            raise CatalogFetchError("listing unavailable", status_code=500)
        if name_starts_with in self.pages:
            results = self.pages[name_starts_with]
        elif name_starts_with:
            prefix = name_starts_with.lower()
            results = [c for c in self.characters if c.name.lower().startswith(prefix)]
        else:
            results = self.characters
        return page_of(results[:limit])

    async def get_character_by_id(self, character_id: int) -> Character:
        self.get_calls.append(character_id)
        gate = self.lookup_gates.get(character_id)
        if gate is not None:
            await gate.wait()
        if self.fail_lookup or character_id in self.failing_ids:
            raise CatalogFetchError("lookup unavailable", status_code=503)
        for character in self.characters:
            if character.id == character_id:
                return character
        raise CharacterNotFound(character_id)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        public_key="public-key",
        private_key="private-key",
        base_url="https://marvel.test/v1/public",
    )


@pytest.fixture
def heroes() -> List[Character]:
    return [
        make_character(1009610, "Spider-Man", modified="2016-05-10T13:00:00-0400", comics=4000, series=900, events=30),
        make_character(1009368, "Iron Man", modified="2013-01-01T00:00:00-0500", comics=2500, series=600),
        make_character(1009351, "Hulk", modified="2020-02-02T10:00:00-0500", comics=1700, events=25),
    ]


@pytest.fixture
def catalog(heroes: List[Character]) -> FakeCatalog:
    return FakeCatalog(heroes)
