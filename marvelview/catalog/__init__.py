"""
Catalog package for the character browser.

It contains the signed Marvel API client, the client-side pipelines
behind the three views (searchable list, filterable gallery, detail
page with prev/next navigation) and the routes that expose them. All
state is scoped to a single view; nothing is persisted.
"""

from .router import router as catalog_router  # noqa: F401
