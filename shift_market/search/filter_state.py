"""
Filter state for the product search page.

FilterState is an immutable snapshot of what the shopper is asking for.
FilterStateModel owns the current snapshot, applies the facet rules
(page reset, price clamping, category toggling) and round-trips through
the flat URL query string.
"""
from dataclasses import dataclass, replace
from typing import Any, Callable, Iterable, Optional, Tuple

from shift_market.store import Store
from shift_market.utils.logger import get_logger

logger = get_logger("search.filter_state")

DEFAULT_PRICE_CEILING = 10_000_000   # UGX
DEFAULT_PRICE_STEP = 1000

PriceRange = Tuple[int, int]


def unique_values(values: Iterable[str]) -> Tuple[str, ...]:
    """Drop empty and duplicate entries, keeping first-seen order."""
    seen = set()
    out = []
    for v in values:
        v = (v or "").strip()
        if v and v not in seen:
            seen.add(v)
            out.append(v)
    return tuple(out)


@dataclass(frozen=True)
class FilterState:
    """What the shopper is currently searching for."""
    query_text: str = ""
    categories: Tuple[str, ...] = ()
    price_range: PriceRange = (0, DEFAULT_PRICE_CEILING)
    location: str = ""
    page: int = 1

    @property
    def price_min(self) -> int:
        return self.price_range[0]

    @property
    def price_max(self) -> int:
        return self.price_range[1]

    @property
    def has_text(self) -> bool:
        return bool(self.query_text.strip())

    @property
    def has_constraints(self) -> bool:
        """True when text, categories or location narrow the search."""
        return self.has_text or bool(self.categories) or bool(self.location.strip())

    def is_default_price(self, ceiling: int = DEFAULT_PRICE_CEILING) -> bool:
        return self.price_range == (0, ceiling)


def default_state(ceiling: int = DEFAULT_PRICE_CEILING) -> FilterState:
    return FilterState(price_range=(0, ceiling))


def normalize_price_range(lo: Any, hi: Any, ceiling: int = DEFAULT_PRICE_CEILING) -> PriceRange:
    """Coerce a (min, max) pair into [0, ceiling] with min <= max, swapping inverted bounds."""
    lo = int(lo)
    hi = int(hi)
    if lo > hi:
        lo, hi = hi, lo
    lo = min(max(0, lo), ceiling)
    hi = min(max(0, hi), ceiling)
    return (lo, hi)


def clamp_price_min(value: int, current: PriceRange, step: int = DEFAULT_PRICE_STEP) -> PriceRange:
    """Raise or lower the minimum without letting it pass max - step."""
    lo, hi = current
    new_lo = max(0, min(int(value), hi - step))
    return (min(new_lo, hi), hi)


def clamp_price_max(value: int, current: PriceRange, ceiling: int = DEFAULT_PRICE_CEILING,
                    step: int = DEFAULT_PRICE_STEP) -> PriceRange:
    """Raise or lower the maximum without letting it drop below min + step."""
    lo, hi = current
    new_hi = min(ceiling, max(int(value), lo + step))
    return (lo, max(new_hi, lo))


class FilterStateModel:
    """
    Mutable owner of the current FilterState.

    Every change other than a page change sends the shopper back to page 1.
    Listeners registered with subscribe() receive (new_state, old_state).
    """

    def __init__(
        self,
        initial: Optional[FilterState] = None,
        price_ceiling: int = DEFAULT_PRICE_CEILING,
        price_step: int = DEFAULT_PRICE_STEP,
    ):
        self.price_ceiling = price_ceiling
        self.price_step = price_step
        self._store: Store[FilterState] = Store(initial or default_state(price_ceiling))

    # ------------------------------------------------------------------
    # Store interface
    # ------------------------------------------------------------------

    def get(self) -> FilterState:
        return self._store.get()

    def subscribe(self, listener: Callable[[FilterState, FilterState], None]) -> Callable[[], None]:
        return self._store.subscribe(listener)

    def set(self, **changes: Any) -> FilterState:
        """
        Shallow-merge changes into the current state.

        Recognised keys: query_text, categories, price_range, location, page.
        A change consisting only of `page` keeps the page; anything else
        resets page to 1.
        """
        unknown = set(changes) - {"query_text", "categories", "price_range", "location", "page"}
        if unknown:
            raise TypeError(f"Unknown filter fields: {sorted(unknown)}")

        current = self.get()
        page_only = set(changes) == {"page"}
        merged = {}

        if "query_text" in changes:
            merged["query_text"] = changes["query_text"] or ""
        if "categories" in changes:
            merged["categories"] = unique_values(changes["categories"] or ())
        if "location" in changes:
            merged["location"] = changes["location"] or ""
        if "price_range" in changes:
            merged["price_range"] = self._clamp_range(current.price_range, changes["price_range"])

        if page_only:
            merged["page"] = max(1, int(changes["page"]))
        else:
            merged["page"] = 1

        new_state = replace(current, **merged)
        if self._store.set(new_state):
            logger.debug(f"Filter state changed: {new_state}")
        return new_state

    # ------------------------------------------------------------------
    # Facet helpers
    # ------------------------------------------------------------------

    def set_query_text(self, text: str) -> FilterState:
        return self.set(query_text=text)

    def toggle_category(self, category: str) -> FilterState:
        current = self.get().categories
        if category in current:
            return self.set(categories=[c for c in current if c != category])
        return self.set(categories=list(current) + [category])

    def remove_category(self, category: str) -> FilterState:
        return self.set(categories=[c for c in self.get().categories if c != category])

    def set_price_min(self, value: int) -> FilterState:
        new_range = clamp_price_min(value, self.get().price_range, self.price_step)
        return self._set_price_exact(new_range)

    def set_price_max(self, value: int) -> FilterState:
        new_range = clamp_price_max(value, self.get().price_range, self.price_ceiling, self.price_step)
        return self._set_price_exact(new_range)

    def reset_price(self) -> FilterState:
        return self._set_price_exact((0, self.price_ceiling))

    def set_location(self, location: str) -> FilterState:
        return self.set(location=location)

    def set_page(self, page: int) -> FilterState:
        return self.set(page=page)

    def next_page(self) -> FilterState:
        return self.set(page=self.get().page + 1)

    def previous_page(self) -> FilterState:
        return self.set(page=max(1, self.get().page - 1))

    def clear(self) -> FilterState:
        """Drop every facet back to its default."""
        new_state = default_state(self.price_ceiling)
        self._store.set(new_state)
        return new_state

    # ------------------------------------------------------------------
    # URL interop
    # ------------------------------------------------------------------

    def to_query_string(self) -> str:
        from shift_market.search.url_codec import encode_query_string
        return encode_query_string(self.get(), self.price_ceiling)

    def from_query_string(self, query_string: str) -> FilterState:
        """Replace the whole state with the one described by a URL query string."""
        from shift_market.search.url_codec import decode_query_string
        new_state = decode_query_string(query_string, self.price_ceiling)
        self._store.set(new_state)
        return new_state

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _set_price_exact(self, price_range: PriceRange) -> FilterState:
        new_state = replace(self.get(), price_range=price_range, page=1)
        self._store.set(new_state)
        return new_state

    def _clamp_range(self, current: PriceRange, requested: Any) -> PriceRange:
        """
        Apply a full (min, max) request. Inverted bounds are swapped and the
        bounds are kept at least one step apart: when only the minimum moved
        it gives way, otherwise the maximum is pushed up (capped at the ceiling).
        """
        lo, hi = normalize_price_range(requested[0], requested[1], self.price_ceiling)
        step = self.price_step
        if step and hi - lo < step:
            if lo != current[0] and hi == current[1]:
                lo = max(0, hi - step)
            else:
                hi = min(self.price_ceiling, lo + step)
                lo = max(0, min(lo, hi - step))
        return (lo, hi)
