"""
Active-filter chips and the filter count badge shown next to the search bar.
"""
from dataclasses import dataclass
from typing import List

from shift_market.search.filter_state import DEFAULT_PRICE_CEILING, FilterState

CHIP_CATEGORY = "category"
CHIP_PRICE = "price"
CHIP_LOCATION = "location"


@dataclass(frozen=True)
class FilterChip:
    kind: str       # category | price | location
    value: str
    label: str


def format_price(amount: float, currency: str = "UGX") -> str:
    """Whole-unit currency string, e.g. 'UGX 1,500,000'."""
    return f"{currency} {int(round(amount)):,}"


def active_chips(state: FilterState, ceiling: int = DEFAULT_PRICE_CEILING,
                 currency: str = "UGX") -> List[FilterChip]:
    chips = [FilterChip(CHIP_CATEGORY, c, c) for c in state.categories]
    if not state.is_default_price(ceiling):
        label = f"{format_price(state.price_min, currency)} - {format_price(state.price_max, currency)}"
        chips.append(FilterChip(CHIP_PRICE, f"{state.price_min}-{state.price_max}", label))
    if state.location:
        chips.append(FilterChip(CHIP_LOCATION, state.location, state.location))
    return chips


def filter_count(state: FilterState, ceiling: int = DEFAULT_PRICE_CEILING) -> int:
    """Number shown on the Filters button: each category, plus location, plus a non-default price."""
    count = len(state.categories)
    if state.location:
        count += 1
    if not state.is_default_price(ceiling):
        count += 1
    return count
