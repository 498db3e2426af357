"""
Catalog data sources for product search.

Both stores answer a compiled QueryRequest with either a QueryResult (one
page of raw rows plus the total matching count) or a DataSourceError.
Errors are returned, not raised, so callers handle them in one place.

SupabaseCatalogStore talks to the PostgREST API over httpx.
InMemoryCatalogStore evaluates the same request over local rows, for local
development and tests.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import httpx

from shift_market.core.config import SearchConfig, get_config
from shift_market.search.normalizer import first_record, seller_location
from shift_market.search.query_compiler import QueryRequest, to_postgrest_params
from shift_market.utils.logger import get_logger
from shift_market.utils.supabase_client import SupabaseClient

logger = get_logger("data.catalog_store")


@dataclass
class QueryResult:
    rows: List[Dict[str, Any]] = field(default_factory=list)
    total_count: int = 0


@dataclass
class DataSourceError:
    message: str
    status_code: Optional[int] = None


FetchOutcome = Union[QueryResult, DataSourceError]


class CatalogStoreError(RuntimeError):
    """Raised when a catalog store cannot be constructed."""


class CatalogDataSource:
    """Interface every catalog store implements."""

    async def query(self, request: QueryRequest) -> FetchOutcome:
        raise NotImplementedError

    async def aclose(self) -> None:
        return None


# ---------------------------------------------------------------------------
# Supabase
# ---------------------------------------------------------------------------

class SupabaseCatalogStore(CatalogDataSource):
    """
    Search the Supabase `products` table via its REST API.
    Embeds the first ad and the owning shop for each product.
    """

    def __init__(self, client: SupabaseClient, table: str = "products") -> None:
        self.client = client
        self.table = table

    async def query(self, request: QueryRequest) -> FetchOutcome:
        params = to_postgrest_params(request)
        logger.debug(f"Querying {self.table} with {params}")
        try:
            rows, total = await self.client.select(
                self.table, params, count="exact" if request.count_exact else None
            )
        except httpx.HTTPStatusError as e:
            logger.error(f"Supabase search failed with HTTP {e.response.status_code}: {e.response.text[:200]}")
            return DataSourceError(f"Backend returned HTTP {e.response.status_code}", e.response.status_code)
        except httpx.HTTPError as e:
            logger.error(f"Supabase search failed: {e!r}")
            return DataSourceError(f"Could not reach the catalog: {e.__class__.__name__}")
        except ValueError as e:
            logger.error(f"Supabase returned a malformed payload: {e}")
            return DataSourceError("Backend returned a malformed response")

        if not isinstance(rows, list):
            logger.error(f"Supabase returned {type(rows).__name__} instead of a row list")
            return DataSourceError("Backend returned a malformed response")

        return QueryResult(rows=rows, total_count=total if total is not None else len(rows))

    async def aclose(self) -> None:
        await self.client.aclose()


# ---------------------------------------------------------------------------
# In-memory
# ---------------------------------------------------------------------------

def _contains(haystack: Any, needle: str) -> bool:
    return needle.lower() in str(haystack or "").lower()


def _price(row: Dict[str, Any]) -> Optional[float]:
    try:
        return float(row.get("price"))
    except (TypeError, ValueError):
        return None


def matches(request: QueryRequest, row: Dict[str, Any]) -> bool:
    """Evaluate a request against one raw row the way PostgREST would."""
    if request.text_filter:
        if not (_contains(row.get("name"), request.text_filter)
                or _contains(row.get("description"), request.text_filter)):
            return False

    if request.category_filter:
        other = row.get("other") if isinstance(row.get("other"), dict) else {}
        if other.get("category") not in request.category_filter:
            return False

    price = _price(row)
    if price is None or price < request.price_min or price > request.price_max:
        return False

    if request.location_filter:
        shop = first_record(row.get("shops"))
        if not _contains(seller_location(shop), request.location_filter):
            return False

    return True


def _sort_key(order_by: str):
    def key(row: Dict[str, Any]):
        value = row.get(order_by)
        # Nulls sort last in descending order, like Postgres
        if value is None:
            return (False, (0, 0))
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return (True, (0, value))
        return (True, (1, str(value)))
    return key


class InMemoryCatalogStore(CatalogDataSource):
    """Catalog held in memory as raw PostgREST-shaped rows."""

    def __init__(self, rows: Optional[List[Dict[str, Any]]] = None) -> None:
        self.rows: List[Dict[str, Any]] = list(rows or [])

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "InMemoryCatalogStore":
        path = Path(path)
        if not path.exists():
            raise CatalogStoreError(f"Seed file not found: {path}")
        with open(path, "r") as f:
            data = json.load(f)
        if isinstance(data, dict):
            data = data.get("products", [])
        logger.info(f"Loaded {len(data)} products from {path}")
        return cls(data)

    async def query(self, request: QueryRequest) -> FetchOutcome:
        matched = [r for r in self.rows if isinstance(r, dict) and matches(request, r)]
        matched.sort(key=_sort_key(request.order_by), reverse=request.descending)
        page = matched[request.range_start:request.range_end + 1]
        return QueryResult(rows=page, total_count=len(matched))


def create_data_source(config: Optional[SearchConfig] = None) -> CatalogDataSource:
    """Build the configured catalog store."""
    config = config or get_config()
    if config.data_source == "memory":
        if config.seed_path:
            return InMemoryCatalogStore.from_json(config.seed_path)
        logger.info("Using empty in-memory catalog")
        return InMemoryCatalogStore()

    if not config.supabase_url or not config.supabase_key:
        logger.error("No catalog available: set SUPABASE_URL and SUPABASE_KEY or use the memory data source")
    client = SupabaseClient(config.supabase_url, config.supabase_key, timeout=config.request_timeout)
    return SupabaseCatalogStore(client, table=config.products_table)
