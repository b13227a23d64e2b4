"""
Route definitions for the character browser.

Endpoints under /api/catalog:
- GET  /characters                 : list view (prefix search + client-side filter/sort)
- GET  /gallery                    : gallery view (boolean filters over 100 characters)
- GET  /characters/{character_id}  : detail view with cyclic prev/next ids

Every request builds a fresh session object around the shared
``MarvelClient``; nothing is kept between requests.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from typing_extensions import Literal

from .gallery import GallerySession
from .marvel_service import MarvelClient
from .navigator import NOT_FOUND_ERROR, DetailNavigator
from .pipeline import ListSession
from .schemas import (
    CharacterDetailView,
    CharacterListView,
    CharacterSummary,
    CollectionPreview,
    ExternalLink,
    GalleryView,
    SearchFilters,
    placeholder_image_url,
)

router = APIRouter(prefix="/api/catalog", tags=["catalog"])

LIST_PLACEHOLDER_SIZE = "120x120"


def get_client(request: Request) -> MarvelClient:
    """The application-wide client created in the lifespan handler."""
    return request.app.state.marvel_client


def _link_label(link_type: str) -> str:
    return "Marvel.com" if link_type == "detail" else link_type


@router.get("/characters", response_model=CharacterListView)
async def list_characters(
    query: str = Query(default="", description="Name search (prefix upstream, substring locally)"),
    sort_by: Literal["name", "modified"] = Query(default="name", description="Sort key"),
    sort_order: Literal["asc", "desc"] = Query(default="asc", description="Sort direction"),
    client: MarvelClient = Depends(get_client),
) -> CharacterListView:
    session = ListSession(client)
    session.filters = SearchFilters(query=query, sort_by=sort_by, sort_order=sort_order)
    if query:
        await session.search(query)
    else:
        await session.mount()
    if session.error:
        raise HTTPException(status_code=502, detail=session.error)
    items = [CharacterSummary.from_character(c, LIST_PLACEHOLDER_SIZE) for c in session.view]
    return CharacterListView(
        filters=session.filters,
        total=len(items),
        available=session.total,
        items=items,
    )


@router.get("/gallery", response_model=GalleryView)
async def gallery(
    has_comics: bool = Query(default=False),
    has_series: bool = Query(default=False),
    has_events: bool = Query(default=False),
    client: MarvelClient = Depends(get_client),
) -> GalleryView:
    session = GallerySession(client)
    await session.mount()
    if session.error:
        raise HTTPException(status_code=502, detail=session.error)
    for name, enabled in (("has_comics", has_comics), ("has_series", has_series), ("has_events", has_events)):
        if enabled:
            session.toggle(name)
    items = [CharacterSummary.from_character(c) for c in session.view]
    return GalleryView(filters=session.filters, total=len(items), items=items)


@router.get("/characters/{character_id}", response_model=CharacterDetailView)
async def character_detail(
    character_id: int,
    client: MarvelClient = Depends(get_client),
) -> CharacterDetailView:
    navigator = DetailNavigator(client)
    await navigator.load(character_id)
    if navigator.error or navigator.character is None:
        detail = navigator.error or NOT_FOUND_ERROR
        status = 404 if detail == NOT_FOUND_ERROR else 502
        raise HTTPException(status_code=status, detail=detail)

    character = navigator.character
    return CharacterDetailView(
        id=character.id,
        name=character.name,
        description=character.description or "No description available.",
        image_url=character.image_url,
        placeholder_url=placeholder_image_url(character.name),
        modified=character.modified,
        comics=CollectionPreview.from_resource_list(character.comics),
        series=CollectionPreview.from_resource_list(character.series),
        stories=CollectionPreview.from_resource_list(character.stories),
        events=CollectionPreview.from_resource_list(character.events),
        links=[ExternalLink(label=_link_label(u.type), url=u.url) for u in character.urls],
        position=navigator.position,
        previous_id=navigator.previous_id(),
        next_id=navigator.next_id(),
    )
