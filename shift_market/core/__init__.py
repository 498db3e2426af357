"""Core configuration for shift-market search."""
from shift_market.core.config import SearchConfig, ConfigError, get_config, set_config

__all__ = [
    "SearchConfig",
    "ConfigError",
    "get_config",
    "set_config",
]
