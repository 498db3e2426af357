"""
FastAPI server for shift-market product search.

Usage:
    python -m shift_market.api.server
    # or
    uvicorn shift_market.api.server:app --reload --port 8000
"""
import math
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware

from dotenv import load_dotenv
load_dotenv()

from shift_market import __version__
from shift_market.api.models import (
    CategoriesResponse,
    HealthResponse,
    SearchRequest,
    SearchResponse,
)
from shift_market.core.config import get_config
from shift_market.data.catalog_store import CatalogDataSource, create_data_source
from shift_market.search.filter_state import FilterState, unique_values, normalize_price_range
from shift_market.search.session import SearchSession
from shift_market.search.url_codec import encode_query_string
from shift_market.utils.logger import get_logger, set_level

logger = get_logger("api.server")

_data_source: Optional[CatalogDataSource] = None


def get_data_source() -> CatalogDataSource:
    """Lazily build the configured catalog store."""
    global _data_source
    if _data_source is None:
        _data_source = create_data_source(get_config())
    return _data_source


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Apply the configured log level; close the catalog store's HTTP client on shutdown."""
    set_level(get_config().log_level)
    logger.info("shift-market search API starting")
    yield
    global _data_source
    if _data_source is not None:
        await _data_source.aclose()
        _data_source = None
    logger.info("shift-market search API stopped")


# Initialize FastAPI app
app = FastAPI(
    title="shift-market search API",
    description="Product search and filtering for the shift-market marketplace",
    version=__version__,
    lifespan=lifespan,
)

# Enable CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=os.environ.get("ALLOWED_ORIGINS", "*").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _body_price(value: Optional[float], default: int) -> float:
    """A usable price bound from a POST body, or the default."""
    if value is None or not math.isfinite(value) or value < 0:
        return default
    return value


async def _run_search(data_source: CatalogDataSource, query_string: str, page: int) -> SearchResponse:
    session = SearchSession(data_source, get_config(), query_string=query_string, page=page)
    view = await session.settle()
    return SearchResponse(**view.to_dict())


@app.get("/health", response_model=HealthResponse)
async def health():
    config = get_config()
    return HealthResponse(
        status="healthy",
        service="shift-market-search",
        version=__version__,
        config={
            "page_size": config.page_size,
            "price_ceiling": config.price_ceiling,
            "debounce_ms": config.debounce_ms,
            "data_source": config.data_source,
        },
    )


@app.get("/categories", response_model=CategoriesResponse)
async def categories():
    return CategoriesResponse(categories=get_config().categories)


@app.get("/search", response_model=SearchResponse)
async def search(
    request: Request,
    page: int = Query(default=1, ge=1),
    data_source: CatalogDataSource = Depends(get_data_source),
):
    """
    Search with the shareable URL parameters (q, categories, minPrice,
    maxPrice, location). Unparseable values fall back to their defaults.
    """
    return await _run_search(data_source, request.url.query, page)


@app.post("/api/search", response_model=SearchResponse)
async def search_post(
    body: SearchRequest,
    data_source: CatalogDataSource = Depends(get_data_source),
):
    config = get_config()
    filters = body.filters
    lo = _body_price(filters.minPrice, 0)
    hi = _body_price(filters.maxPrice, config.price_ceiling)
    state = FilterState(
        query_text=body.query,
        categories=unique_values(filters.categories),
        price_range=normalize_price_range(lo, hi, config.price_ceiling),
        location=filters.location,
    )
    return await _run_search(data_source, encode_query_string(state, config.price_ceiling), body.page)


if __name__ == "__main__":
    import uvicorn
    port = int(os.environ.get("PORT", "8000"))
    logger.info(f"Starting shift-market search API on port {port}")
    uvicorn.run(app, host="0.0.0.0", port=port)
