"""
Search session: one shopper's search page.

Wires the filter state to the catalog and the address bar:

    user event -> FilterStateModel -> fetch (debounced for text)
               -> compile_query -> data source -> normalize -> view
               -> URL rewritten from the committed state

Runs on a single asyncio loop. Every fetch carries a token from a
monotonically increasing counter and a response is only applied when its
token is still the latest, so a slow early request can never overwrite the
results of a later one.
"""
from __future__ import annotations

import asyncio
import itertools
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, List, Optional, Set, Tuple

from shift_market.core.config import SearchConfig, get_config
from shift_market.data.catalog_store import CatalogDataSource, DataSourceError, QueryResult
from shift_market.search.chips import (
    CHIP_CATEGORY,
    CHIP_LOCATION,
    CHIP_PRICE,
    FilterChip,
    active_chips,
    filter_count,
)
from shift_market.search.debounce import Debouncer
from shift_market.search.filter_state import FilterState, FilterStateModel
from shift_market.search.normalizer import SearchResultItem, normalize
from shift_market.search.query_compiler import compile_query, has_more
from shift_market.search.url_codec import build_url, decode_query_string
from shift_market.utils.logger import get_logger

logger = get_logger("search.session")

SEARCH_ERROR_MESSAGE = "Failed to load search results. Please try again."


class SearchStatus(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    ERROR = "error"


def should_fetch(state: FilterState, search_active: bool) -> bool:
    """Only hit the catalog when something narrows the search or a search is already showing."""
    return state.has_constraints or search_active


class UrlHistory:
    """Address bar collaborator. Neither method reloads the page."""

    @property
    def current(self) -> str:
        raise NotImplementedError

    def push(self, url: str) -> None:
        raise NotImplementedError

    def replace(self, url: str) -> None:
        raise NotImplementedError


class InMemoryHistory(UrlHistory):
    """Records history entries; used by the HTTP service and tests."""

    def __init__(self, initial: str = "/search"):
        self.entries: List[str] = [initial]

    @property
    def current(self) -> str:
        return self.entries[-1]

    def push(self, url: str) -> None:
        self.entries.append(url)

    def replace(self, url: str) -> None:
        self.entries[-1] = url


@dataclass
class SearchView:
    """Everything the search page renders."""
    status: SearchStatus
    loading: bool
    error: Optional[str]
    results: List[SearchResultItem]
    total_count: int
    page: int
    page_size: int
    has_more: bool
    chips: List[FilterChip]
    filter_count: int
    query_string: str
    url: str
    filters: FilterState

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "loading": self.loading,
            "error": self.error,
            "results": [r.to_dict() for r in self.results],
            "total_count": self.total_count,
            "page": self.page,
            "page_size": self.page_size,
            "has_more": self.has_more,
            "chips": [{"kind": c.kind, "value": c.value, "label": c.label} for c in self.chips],
            "filter_count": self.filter_count,
            "query_string": self.query_string,
            "url": self.url,
        }


class SearchSession:
    """
    State machine for one search page: IDLE -> FETCHING -> IDLE | ERROR.

    Any committed filter change schedules a fetch on the running loop (text
    input after the debounce window). Without a running loop, call refresh()
    directly.
    """

    def __init__(
        self,
        data_source: CatalogDataSource,
        config: Optional[SearchConfig] = None,
        query_string: str = "",
        path: str = "/search",
        history: Optional[UrlHistory] = None,
        page: int = 1,
    ):
        self.config = config or get_config()
        self.data_source = data_source
        self.path = path
        self.history = history or InMemoryHistory(path)

        initial = decode_query_string(query_string, self.config.price_ceiling)
        if page > 1:
            initial = replace(initial, page=page)
        self.filters = FilterStateModel(
            initial,
            price_ceiling=self.config.price_ceiling,
            price_step=self.config.price_step,
        )

        self.status = SearchStatus.IDLE
        self.error: Optional[str] = None
        self.results: List[SearchResultItem] = []
        self.total_count = 0
        self.has_more = False
        self.search_active = False

        self._tokens = itertools.count(1)
        self._latest_token = 0
        self._tasks: Set[asyncio.Task] = set()
        self._from_url = False
        self._text_input = Debouncer(self.filters.set_query_text, self.config.debounce_seconds)

        self.history.replace(self.url)
        self.filters.subscribe(self._on_filters_changed)
        self._schedule_refresh()

    # ------------------------------------------------------------------
    # Derived output
    # ------------------------------------------------------------------

    @property
    def state(self) -> FilterState:
        return self.filters.get()

    @property
    def loading(self) -> bool:
        return self.status == SearchStatus.FETCHING

    @property
    def query_string(self) -> str:
        return self.filters.to_query_string()

    @property
    def url(self) -> str:
        return build_url(self.path, self.state, self.config.price_ceiling)

    def view(self) -> SearchView:
        state = self.state
        return SearchView(
            status=self.status,
            loading=self.loading,
            error=self.error,
            results=list(self.results),
            total_count=self.total_count,
            page=state.page,
            page_size=self.config.page_size,
            has_more=self.has_more,
            chips=active_chips(state, self.config.price_ceiling, self.config.currency),
            filter_count=filter_count(state, self.config.price_ceiling),
            query_string=self.query_string,
            url=self.url,
            filters=state,
        )

    # ------------------------------------------------------------------
    # UI events
    # ------------------------------------------------------------------

    def input_text(self, text: str) -> None:
        """Keystroke in the search bar; applied after the debounce window."""
        self._text_input.call(text)

    def submit_text(self, text: Optional[str] = None) -> FilterState:
        """Enter pressed: apply the text now, skipping the debounce window."""
        if text is not None:
            self._text_input.cancel()
            return self.filters.set_query_text(text)
        self._text_input.flush()
        return self.state

    def toggle_category(self, category: str) -> FilterState:
        return self.filters.toggle_category(category)

    def commit_price(self, price_min: Optional[int] = None, price_max: Optional[int] = None) -> FilterState:
        current = self.state.price_range
        lo = current[0] if price_min is None else price_min
        hi = current[1] if price_max is None else price_max
        return self.filters.set(price_range=(lo, hi))

    def commit_location(self, location: str) -> FilterState:
        return self.filters.set_location(location)

    def apply_filters(self, categories: List[str], price_range, location: str) -> FilterState:
        """Apply the filter popover in one change."""
        return self.filters.set(categories=categories, price_range=tuple(price_range), location=location)

    def next_page(self) -> FilterState:
        if not self.has_more:
            return self.state
        return self.filters.next_page()

    def previous_page(self) -> FilterState:
        return self.filters.previous_page()

    def clear_filters(self) -> FilterState:
        """Back to an empty search page: no facets, no results."""
        self._text_input.cancel()
        self.search_active = False
        before = self.state
        after = self.filters.clear()
        if before == after:
            # No state change, so no listener fired; still drop the results
            self._on_filters_changed(after, before)
        return after

    def remove_chip(self, chip: FilterChip) -> FilterState:
        if chip.kind == CHIP_CATEGORY:
            return self.filters.remove_category(chip.value)
        if chip.kind == CHIP_PRICE:
            return self.filters.reset_price()
        if chip.kind == CHIP_LOCATION:
            return self.filters.set_location("")
        logger.warning(f"Unknown chip kind: {chip.kind}")
        return self.state

    def navigate(self, query_string: str) -> FilterState:
        """Back/forward navigation: adopt the state in the URL without pushing a new entry."""
        self._text_input.cancel()
        self._from_url = True
        try:
            return self.filters.from_query_string(query_string)
        finally:
            self._from_url = False

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    async def refresh(self) -> SearchView:
        """Run the search for the current state and apply it if still the latest."""
        token, state = self._claim_token()
        return await self._fetch(token, state)

    async def settle(self) -> SearchView:
        """Wait for pending input and in-flight fetches to finish."""
        if self._text_input.pending:
            self._text_input.flush()
        while self._tasks:
            await asyncio.gather(*list(self._tasks))
        return self.view()

    def _claim_token(self) -> Tuple[int, FilterState]:
        token = next(self._tokens)
        self._latest_token = token
        return token, self.state

    def _schedule_refresh(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        token, state = self._claim_token()
        task = loop.create_task(self._fetch(token, state))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _fetch(self, token: int, state: FilterState) -> SearchView:
        if token != self._latest_token:
            # A later change was scheduled before this one started
            return self.view()

        if not should_fetch(state, self.search_active):
            self._apply_empty()
            return self.view()

        self.status = SearchStatus.FETCHING
        self.error = None
        request = compile_query(state, self.config.page_size)
        logger.debug(f"Fetch #{token}: {request}")

        try:
            outcome = await self.data_source.query(request)
        except Exception as e:
            logger.error(f"Fetch #{token} raised: {e!r}")
            outcome = DataSourceError(str(e) or e.__class__.__name__)

        if token != self._latest_token:
            logger.debug(f"Discarding stale response for fetch #{token} (latest #{self._latest_token})")
            return self.view()

        if isinstance(outcome, QueryResult):
            self._apply_result(outcome, state)
        else:
            self._apply_error(outcome)
        return self.view()

    def _on_filters_changed(self, new: FilterState, old: FilterState) -> None:
        url = self.url
        if not self._from_url and url != self.history.current:
            self.history.push(url)
        elif self._from_url:
            self.history.replace(url)
        self._schedule_refresh()

    def _apply_result(self, result: QueryResult, state: FilterState) -> None:
        self.results = normalize(result.rows)
        self.total_count = result.total_count
        self.has_more = has_more(result.total_count, state.page, self.config.page_size)
        self.status = SearchStatus.IDLE
        self.error = None
        self.search_active = True
        logger.info(f"Search returned {len(self.results)} of {self.total_count} products (page {state.page})")

    def _apply_error(self, error: DataSourceError) -> None:
        logger.error(f"Error searching products: {error.message}")
        self.results = []
        self.total_count = 0
        self.has_more = False
        self.status = SearchStatus.ERROR
        self.error = SEARCH_ERROR_MESSAGE

    def _apply_empty(self) -> None:
        self.results = []
        self.total_count = 0
        self.has_more = False
        self.status = SearchStatus.IDLE
        self.error = None
