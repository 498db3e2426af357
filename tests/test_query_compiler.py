"""
Tests for compile_query and its PostgREST rendering.
"""

from shift_market.search.filter_state import DEFAULT_PRICE_CEILING, FilterState
from shift_market.search.query_compiler import (
    compile_query,
    has_more,
    page_range,
    select_clause,
    to_postgrest_params,
)


def _params(request):
    """Group rendered params by name (a name may repeat)."""
    grouped = {}
    for name, value in to_postgrest_params(request):
        grouped.setdefault(name, []).append(value)
    return grouped


class TestCompile:
    def test_text_only_search(self):
        state = FilterState(query_text="shoe", categories=(), price_range=(0, DEFAULT_PRICE_CEILING), location="")
        request = compile_query(state)
        assert request.text_filter == "shoe"
        assert request.category_filter == ()
        assert request.location_filter is None
        assert (request.price_min, request.price_max) == (0, DEFAULT_PRICE_CEILING)

        params = _params(request)
        assert params["or"] == ['(name.ilike."*shoe*",description.ilike."*shoe*")']
        assert params["price"] == ["gte.0", f"lte.{DEFAULT_PRICE_CEILING}"]
        assert "other->>category" not in params
        assert "shops.other->>location" not in params

    def test_text_is_trimmed(self):
        assert compile_query(FilterState(query_text="  tv ")).text_filter == "tv"
        assert compile_query(FilterState(query_text="   ")).text_filter is None

    def test_categories_are_a_membership_test(self):
        request = compile_query(FilterState(categories=("Electronics", "Fashion")))
        assert _params(request)["other->>category"] == ['in.("Electronics","Fashion")']

    def test_location_is_case_insensitive_substring(self):
        request = compile_query(FilterState(location="kampala"))
        params = _params(request)
        assert params["shops.other->>location"] == ["ilike.*kampala*"]
        assert "shops!inner(name,other)" in params["select"][0]

    def test_left_join_without_location(self):
        assert "shops!left(name,other)" in select_clause(compile_query(FilterState(query_text="x")))

    def test_price_filters_always_present(self):
        params = _params(compile_query(FilterState()))
        assert params["price"] == ["gte.0", f"lte.{DEFAULT_PRICE_CEILING}"]

    def test_ordering_is_stable_descending(self):
        params = _params(compile_query(FilterState(query_text="x")))
        assert params["order"] == ["product_id.desc"]

    def test_reserved_characters_are_quoted(self):
        params = _params(compile_query(FilterState(query_text='a,b (c) "d"')))
        assert params["or"] == ['(name.ilike."*a,b (c) \\"d\\"*",description.ilike."*a,b (c) \\"d\\"*")']

    def test_unconstrained_state_still_compiles(self):
        request = compile_query(FilterState())
        assert request.is_unconstrained
        assert request.range_start == 0

    def test_compile_is_pure(self):
        state = FilterState(query_text="tv", page=2)
        assert compile_query(state) == compile_query(state)
        assert state == FilterState(query_text="tv", page=2)


class TestPagination:
    def test_page_ranges(self):
        assert page_range(1, 12) == (0, 11)
        assert page_range(2, 12) == (12, 23)
        assert page_range(3, 12) == (24, 35)

    def test_offset_and_limit(self):
        params = _params(compile_query(FilterState(query_text="x", page=3), page_size=12))
        assert params["offset"] == ["24"]
        assert params["limit"] == ["12"]

    def test_has_more_for_25_items(self):
        assert has_more(25, 1, 12) is True
        assert has_more(25, 2, 12) is True
        assert has_more(25, 3, 12) is False

    def test_has_more_exact_boundary(self):
        assert has_more(24, 2, 12) is False
        assert has_more(0, 1, 12) is False
