from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from src.read_api.catalog import get_catalog, search
from src.utils.logging import get_logger, setup_logging


logger = get_logger(component="read_api")

RESPONSE_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET",
}


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    setup_logging()
    # Fail at startup, not on the first request, when the artifact is missing.
    catalog = get_catalog()
    logger.info("read_api_started", records=len(catalog))
    yield


app = FastAPI(
    title="tz-catalog-read-api",
    version="v1",
    lifespan=lifespan,
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
)


@app.get("/{path:path}")
async def search_timezones(path: str, q: str | None = None) -> JSONResponse:
    """Single handler for every path: `q` filters the catalog, no `q` returns all of it."""
    results = search(get_catalog(), q)
    logger.debug("timezone_search", path=f"/{path}", q=q, results=len(results))
    return JSONResponse(
        content=[r.model_dump(mode="json") for r in results],
        headers=RESPONSE_HEADERS,
    )
