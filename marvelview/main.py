# marvelview/main.py
import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from .catalog import catalog_router
from .catalog.marvel_service import MarvelClient
from .config import get_settings


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    async with httpx.AsyncClient(timeout=settings.timeout_seconds) as http_client:
        app.state.marvel_client = MarvelClient(http_client=http_client, settings=settings)
        yield


app = FastAPI(
    title=get_settings().app_name,
    description=(
        "Browse the Marvel character catalog: searchable list, "
        "filterable gallery and per-character detail pages."
    ),
    version="1.0.0",
    lifespan=lifespan,
)
app.include_router(catalog_router)


@app.get("/")
def health_check():
    return {"status": "ok"}
