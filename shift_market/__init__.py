"""
shift-market search

Product search for the shift-market marketplace:
- Filter state with URL round-tripping
- Query compilation for the Supabase catalog
- Debounced, last-write-wins search sessions
"""

__version__ = '0.1.0'

from shift_market.core.config import SearchConfig, get_config, set_config
from shift_market.search.filter_state import FilterState, FilterStateModel

__all__ = [
    'SearchConfig',
    'get_config',
    'set_config',
    'FilterState',
    'FilterStateModel',
]
