"""
Pydantic models for shift-market search API requests and responses.
"""
from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, List


class SearchFilters(BaseModel):
    """Facets sent in a POST search body."""
    categories: List[str] = Field(default_factory=list, description="Category ids, OR-combined")
    minPrice: Optional[float] = Field(default=None, description="Inclusive lower price bound")
    maxPrice: Optional[float] = Field(default=None, description="Inclusive upper price bound")
    location: str = Field(default="", description="Substring of the seller location")


class SearchRequest(BaseModel):
    """Request model for POST /api/search."""
    query: str = Field(default="", description="Free-text search term")
    filters: SearchFilters = Field(default_factory=SearchFilters)
    page: int = Field(default=1, ge=1, description="1-based page cursor")


class AdSummaryModel(BaseModel):
    id: str = ""
    is_promoted: bool = False
    views: int = 0


class SellerSummaryModel(BaseModel):
    name: str = ""
    location: str = ""


class ProductResult(BaseModel):
    """One product card in the result grid."""
    id: str
    name: str
    description: str
    price: float
    price_currency: str
    rating: float
    images: List[str]
    category: str
    shop_id: str
    ads: AdSummaryModel
    shop: SellerSummaryModel


class FilterChipModel(BaseModel):
    kind: str = Field(description="'category', 'price' or 'location'")
    value: str
    label: str


class SearchResponse(BaseModel):
    """Response model for the search endpoints."""
    status: str = Field(description="'idle' or 'error'")
    loading: bool = False
    error: Optional[str] = Field(default=None, description="User-facing error message")
    results: List[ProductResult] = Field(default_factory=list)
    total_count: int = 0
    page: int = 1
    page_size: int
    has_more: bool = False
    chips: List[FilterChipModel] = Field(default_factory=list, description="Active filter chips")
    filter_count: int = 0
    query_string: str = Field(default="", description="Canonical shareable query string")
    url: str = ""


class CategoriesResponse(BaseModel):
    categories: List[str]


class HealthResponse(BaseModel):
    """Response model for health check."""
    status: str
    service: str
    version: str
    config: Dict[str, Any]
