"""
Compile a FilterState into a paginated catalog query.

compile_query() is pure: it never touches the network and never rejects a
state. to_postgrest_params() renders the compiled request for the Supabase
REST API (PostgREST filter syntax).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from shift_market.search.filter_state import FilterState

PRODUCT_ID_COLUMN = "product_id"
TEXT_FIELDS = ("name", "description")
CATEGORY_FIELD = "other->>category"
LOCATION_FIELD = "shops.other->>location"

ADS_EMBED = "ads!left(advert_id,ispromoted,views)"
SHOPS_EMBED = "shops!{join}(name,other)"


@dataclass(frozen=True)
class QueryRequest:
    """Everything the data source needs to fetch one page of products."""
    text_filter: Optional[str]
    category_filter: Tuple[str, ...]
    price_min: int
    price_max: int
    location_filter: Optional[str]
    range_start: int
    range_end: int                    # inclusive
    order_by: str = PRODUCT_ID_COLUMN
    descending: bool = True
    count_exact: bool = True

    @property
    def limit(self) -> int:
        return self.range_end - self.range_start + 1

    @property
    def is_unconstrained(self) -> bool:
        """No text, category or location constraint (price is always present)."""
        return not self.text_filter and not self.category_filter and not self.location_filter


def page_range(page: int, page_size: int) -> Tuple[int, int]:
    """Inclusive row range for a 1-based page."""
    page = max(1, page)
    return ((page - 1) * page_size, page * page_size - 1)


def has_more(total_count: int, page: int, page_size: int) -> bool:
    return total_count > page * page_size


def compile_query(state: FilterState, page_size: int = 12) -> QueryRequest:
    """Translate the shopper's facets into a QueryRequest."""
    text = state.query_text.strip()
    location = state.location.strip()
    start, end = page_range(state.page, page_size)
    return QueryRequest(
        text_filter=text or None,
        category_filter=tuple(state.categories),
        price_min=state.price_min,
        price_max=state.price_max,
        location_filter=location or None,
        range_start=start,
        range_end=end,
    )


# ----------------------------------------------------------------------
# PostgREST rendering
# ----------------------------------------------------------------------

def _quote(value: str) -> str:
    """Double-quote a value so PostgREST treats , ( ) and . literally."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _ilike_pattern(value: str) -> str:
    return f"*{value}*"


def select_clause(request: QueryRequest) -> str:
    # An inner join is needed for the location filter to drop non-matching products
    join = "inner" if request.location_filter else "left"
    return f"*,{ADS_EMBED},{SHOPS_EMBED.format(join=join)}"


def to_postgrest_params(request: QueryRequest) -> List[Tuple[str, str]]:
    """Render a QueryRequest as PostgREST query parameters."""
    params: List[Tuple[str, str]] = [("select", select_clause(request))]

    if request.text_filter:
        pattern = _quote(_ilike_pattern(request.text_filter))
        clauses = ",".join(f"{field}.ilike.{pattern}" for field in TEXT_FIELDS)
        params.append(("or", f"({clauses})"))

    if request.category_filter:
        members = ",".join(_quote(c) for c in request.category_filter)
        params.append((CATEGORY_FIELD, f"in.({members})"))

    params.append(("price", f"gte.{request.price_min}"))
    params.append(("price", f"lte.{request.price_max}"))

    if request.location_filter:
        params.append((LOCATION_FIELD, f"ilike.{_ilike_pattern(request.location_filter)}"))

    direction = "desc" if request.descending else "asc"
    params.append(("order", f"{request.order_by}.{direction}"))
    params.append(("offset", str(request.range_start)))
    params.append(("limit", str(request.limit)))
    return params
