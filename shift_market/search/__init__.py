"""
Product search: filter state, query compilation, result normalization and
URL synchronization. The session that ties them to a catalog lives in
shift_market.search.session.
"""
from shift_market.search.filter_state import FilterState, FilterStateModel
from shift_market.search.query_compiler import QueryRequest, compile_query, has_more, to_postgrest_params
from shift_market.search.normalizer import SearchResultItem, normalize
from shift_market.search.url_codec import decode_query_string, encode_query_string

__all__ = [
    "FilterState",
    "FilterStateModel",
    "QueryRequest",
    "compile_query",
    "has_more",
    "to_postgrest_params",
    "SearchResultItem",
    "normalize",
    "decode_query_string",
    "encode_query_string",
]
