"""
Flat query-string codec for shareable search links.

    q           free text              omitted when empty
    categories  comma-joined ids       omitted when empty
    minPrice    integer                both omitted only when the range
    maxPrice    integer                equals the platform default
    location    free text              omitted when empty

Values that do not parse are dropped in favour of the default; a bad link
never raises. The page cursor is not part of the URL.
"""
import math
from typing import Dict, List, Optional, Tuple
from urllib.parse import parse_qsl, quote, urlencode

from shift_market.search.filter_state import (
    DEFAULT_PRICE_CEILING,
    FilterState,
    unique_values,
    normalize_price_range,
)
from shift_market.utils.logger import get_logger

logger = get_logger("search.url_codec")

PARAM_QUERY = "q"
PARAM_CATEGORIES = "categories"
PARAM_MIN_PRICE = "minPrice"
PARAM_MAX_PRICE = "maxPrice"
PARAM_LOCATION = "location"


def encode_params(state: FilterState, ceiling: int = DEFAULT_PRICE_CEILING) -> List[Tuple[str, str]]:
    """Return the ordered (name, value) pairs for a state, defaults omitted."""
    params: List[Tuple[str, str]] = []
    if state.query_text:
        params.append((PARAM_QUERY, state.query_text))
    if state.categories:
        params.append((PARAM_CATEGORIES, ",".join(state.categories)))
    if not state.is_default_price(ceiling):
        params.append((PARAM_MIN_PRICE, str(state.price_min)))
        params.append((PARAM_MAX_PRICE, str(state.price_max)))
    if state.location:
        params.append((PARAM_LOCATION, state.location))
    return params


def encode_query_string(state: FilterState, ceiling: int = DEFAULT_PRICE_CEILING) -> str:
    """Serialize a state without the leading '?'. Commas stay readable."""
    return urlencode(encode_params(state, ceiling), safe=",", quote_via=quote)


def _parse_price(raw: Optional[str]) -> Optional[int]:
    if raw is None or not raw.strip():
        return None
    try:
        value = float(raw.strip())
    except ValueError:
        logger.debug(f"Ignoring non-numeric price in URL: {raw!r}")
        return None
    if not math.isfinite(value) or value < 0:
        logger.debug(f"Ignoring out-of-range price in URL: {raw!r}")
        return None
    return int(value)


def _first_values(query_string: str) -> Dict[str, str]:
    values: Dict[str, str] = {}
    for key, value in parse_qsl((query_string or "").lstrip("?")):
        values.setdefault(key, value)
    return values


def decode_query_string(query_string: str, ceiling: int = DEFAULT_PRICE_CEILING) -> FilterState:
    """Parse a query string into a FilterState on page 1."""
    values = _first_values(query_string)

    categories = unique_values(values.get(PARAM_CATEGORIES, "").split(","))

    lo = _parse_price(values.get(PARAM_MIN_PRICE))
    hi = _parse_price(values.get(PARAM_MAX_PRICE))
    price_range = normalize_price_range(
        lo if lo is not None else 0,
        hi if hi is not None else ceiling,
        ceiling,
    )

    return FilterState(
        query_text=values.get(PARAM_QUERY, ""),
        categories=categories,
        price_range=price_range,
        location=values.get(PARAM_LOCATION, ""),
        page=1,
    )


def build_url(path: str, state: FilterState, ceiling: int = DEFAULT_PRICE_CEILING) -> str:
    """Path plus query string, or the bare path when everything is at default."""
    query_string = encode_query_string(state, ceiling)
    return f"{path}?{query_string}" if query_string else path
