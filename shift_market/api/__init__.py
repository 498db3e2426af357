"""
API module for shift-market search.

Provides REST endpoints for the storefront search page.
"""
from shift_market.api.models import (
    SearchFilters,
    SearchRequest,
    SearchResponse,
    ProductResult,
    FilterChipModel,
    CategoriesResponse,
    HealthResponse,
)

__all__ = [
    "SearchFilters",
    "SearchRequest",
    "SearchResponse",
    "ProductResult",
    "FilterChipModel",
    "CategoriesResponse",
    "HealthResponse",
]
