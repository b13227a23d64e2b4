"""
Pydantic schema definitions for the catalog module.

The upstream Marvel API answers every request with the same envelope:
a ``CharacterDataWrapper`` whose ``data`` member is a
``CharacterDataContainer`` (the result page) holding ``Character``
entries. Field names on the wire are camelCase; the models expose
snake_case attributes and accept either spelling on input.

``SearchFilters`` and ``GalleryFilters`` capture the client-side view
state of the list and gallery views. The remaining models at the bottom
of the module are the view payloads returned by the router.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing_extensions import Literal

SortKey = Literal["name", "modified"]
SortOrder = Literal["asc", "desc"]

# Earliest representable aware timestamp. The API reports characters that
# were never edited with a negative year, which is mapped onto this value.
MIN_MODIFIED = datetime.min.replace(tzinfo=timezone.utc)

PLACEHOLDER_BASE_URL = "https://via.placeholder.com"


def _parse_modified(value: object) -> datetime:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if not isinstance(value, str) or not value.strip():
        return MIN_MODIFIED
    text = value.strip()
    for fmt in ("%Y-%m-%dT%H:%M:%S%z", "%Y-%m-%dT%H:%M:%S.%f%z", "%Y-%m-%dT%H:%M:%S"):
        try:
            parsed = datetime.strptime(text, fmt)
        except ValueError:
            continue
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return MIN_MODIFIED


def placeholder_image_url(name: str, size: str = "400x400") -> str:
    """Placeholder image encoding ``name``, used when a thumbnail fails to load."""
    return f"{PLACEHOLDER_BASE_URL}/{size}/667eea/ffffff?text={quote(name, safe='')}"


class _ApiModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class Thumbnail(_ApiModel):
    """Image reference; the full URL is ``{path}.{extension}``."""

    path: str = ""
    extension: str = ""

    @property
    def url(self) -> str:
        return f"{self.path}.{self.extension}"


class ResourceItem(_ApiModel):
    resource_uri: str = Field(default="", alias="resourceURI")
    name: str = ""
    # Only story items carry a type ("cover", "interiorStory", ...)
    type: Optional[str] = None


class ResourceList(_ApiModel):
    """Summary of a related collection (comics, series, stories, events).

    ``available`` is the total number of related resources upstream;
    ``items`` holds at most ``returned`` of them (the API caps it at 20).
    """

    available: int = 0
    collection_uri: str = Field(default="", alias="collectionURI")
    items: List[ResourceItem] = Field(default_factory=list)
    returned: int = 0


class ExternalUrl(_ApiModel):
    type: str = ""
    url: str = ""


class Character(_ApiModel):
    """A single character record as returned by ``/characters``."""

    id: int
    name: str
    description: str = ""
    modified: datetime = MIN_MODIFIED
    thumbnail: Thumbnail = Field(default_factory=Thumbnail)
    resource_uri: str = Field(default="", alias="resourceURI")
    comics: ResourceList = Field(default_factory=ResourceList)
    series: ResourceList = Field(default_factory=ResourceList)
    stories: ResourceList = Field(default_factory=ResourceList)
    events: ResourceList = Field(default_factory=ResourceList)
    urls: List[ExternalUrl] = Field(default_factory=list)

    @field_validator("modified", mode="before")
    @classmethod
    def _coerce_modified(cls, value: object) -> datetime:
        return _parse_modified(value)

    @field_validator("description", mode="before")
    @classmethod
    def _coerce_description(cls, value: object) -> str:
        return value or ""

    @property
    def image_url(self) -> str:
        return self.thumbnail.url


class CharacterDataContainer(_ApiModel):
    """One page of results plus the server-side total."""

    offset: int = 0
    limit: int = 0
    total: int = 0
    count: int = 0
    results: List[Character] = Field(default_factory=list)


class CharacterDataWrapper(_ApiModel):
    code: int = 200
    status: str = ""
    copyright: str = ""
    attribution_text: str = Field(default="", alias="attributionText")
    etag: str = ""
    data: CharacterDataContainer = Field(default_factory=CharacterDataContainer)


class SearchFilters(BaseModel):
    """State of the list view: live text query plus sort key and direction."""

    model_config = ConfigDict(frozen=True)

    query: str = ""
    sort_by: SortKey = "name"
    sort_order: SortOrder = "asc"


class GalleryFilters(BaseModel):
    """Three independent predicates, AND-combined when enabled."""

    model_config = ConfigDict(frozen=True)

    has_comics: bool = False
    has_series: bool = False
    has_events: bool = False


# ---------------------------------------------------------------------------
# View payloads


class CharacterSummary(BaseModel):
    """Card shown in the list and gallery views."""

    id: int
    name: str
    description: str = ""
    image_url: str
    placeholder_url: str
    comics: int = 0
    series: int = 0
    events: int = 0

    @classmethod
    def from_character(cls, character: Character, placeholder_size: str = "400x400") -> "CharacterSummary":
        return cls(
            id=character.id,
            name=character.name,
            description=character.description,
            image_url=character.image_url,
            placeholder_url=placeholder_image_url(character.name, placeholder_size),
            comics=character.comics.available,
            series=character.series.available,
            events=character.events.available,
        )


class CharacterListView(BaseModel):
    """List payload.

    ``total`` is the number of ``items`` after client-side filtering, as in
    ``GalleryView``. ``available`` is the upstream count of characters
    matching the server-side query, of which at most one page was fetched.
    """

    filters: SearchFilters
    total: int
    available: int = 0
    items: List[CharacterSummary]


class GalleryView(BaseModel):
    """Gallery payload; ``total`` is the number of ``items`` shown."""

    filters: GalleryFilters
    total: int
    items: List[CharacterSummary]


class CollectionPreview(BaseModel):
    """First few names of a related collection and how many were left out."""

    available: int
    names: List[str] = Field(default_factory=list)
    more: int = 0

    @classmethod
    def from_resource_list(cls, resources: ResourceList, limit: int = 3) -> "CollectionPreview":
        names = [item.name for item in resources.items]
        return cls(
            available=resources.available,
            names=names[:limit],
            more=max(0, len(names) - limit),
        )


class ExternalLink(BaseModel):
    label: str
    url: str


class CharacterDetailView(BaseModel):
    id: int
    name: str
    description: str
    image_url: str
    placeholder_url: str
    modified: datetime
    comics: CollectionPreview
    series: CollectionPreview
    stories: CollectionPreview
    events: CollectionPreview
    links: List[ExternalLink] = Field(default_factory=list)
    position: Optional[str] = None
    previous_id: Optional[int] = None
    next_id: Optional[int] = None
