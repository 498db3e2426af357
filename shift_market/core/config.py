"""
Configuration management for shift-market search.

Loads settings from YAML config file and provides typed access.
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional
import os
import yaml

# Load environment variables from .env file
from dotenv import load_dotenv
load_dotenv()


def _project_root() -> Path:
    """Return project root (parent of shift_market package)."""
    return Path(__file__).resolve().parent.parent.parent


DEFAULT_CONFIG_PATH = _project_root() / "config" / "default.yaml"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

DEFAULT_CATEGORIES = [
    "Electronics",
    "Fashion",
    "Home & Garden",
    "Sports",
    "Toys",
    "Books",
    "Health & Beauty",
    "Automotive",
    "Other",
]


class ConfigError(ValueError):
    """Raised when the configuration cannot be used."""


@dataclass
class SearchConfig:
    """Configuration for the marketplace search."""

    # Pagination
    page_size: int = 12

    # Price facet (UGX, whole shillings)
    price_ceiling: int = 10_000_000
    price_step: int = 1000
    currency: str = "UGX"

    # Debounce window for free-text input
    debounce_ms: int = 300

    # Data source
    data_source: str = "supabase"       # "supabase" or "memory"
    products_table: str = "products"
    request_timeout: float = 30.0
    seed_path: Optional[str] = None     # JSON rows for the memory data source

    categories: List[str] = field(default_factory=lambda: list(DEFAULT_CATEGORIES))

    # Level for the shift_market loggers
    log_level: str = field(default_factory=lambda: os.environ.get("LOG_LEVEL", "INFO").upper())

    # Credentials come from the environment, never from YAML
    supabase_url: str = field(default_factory=lambda: os.environ.get("SUPABASE_URL", ""))
    supabase_key: str = field(default_factory=lambda: os.environ.get("SUPABASE_KEY", ""))

    def __post_init__(self) -> None:
        if self.page_size < 1:
            raise ConfigError(f"page_size must be >= 1, got {self.page_size}")
        if self.price_ceiling <= 0:
            raise ConfigError(f"price_ceiling must be positive, got {self.price_ceiling}")
        if self.price_step < 0 or self.price_step >= self.price_ceiling:
            raise ConfigError(f"price_step must be in [0, price_ceiling), got {self.price_step}")
        if self.data_source not in ("supabase", "memory"):
            raise ConfigError(f"Unknown data_source: {self.data_source}")
        if self.log_level not in LOG_LEVELS:
            raise ConfigError(f"Unknown log_level: {self.log_level}")

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000.0

    @classmethod
    def from_yaml(cls, config_path: Optional[Path] = None) -> "SearchConfig":
        """Load configuration from YAML file."""
        path = config_path or DEFAULT_CONFIG_PATH
        if not path.exists():
            return cls()

        with open(path, 'r') as f:
            data = yaml.safe_load(f) or {}

        search_config = data.get('search', {})
        price_config = data.get('price', {})
        data_config = data.get('data', {})
        logging_config = data.get('logging', {})

        return cls(
            page_size=search_config.get('page_size', 12),
            debounce_ms=search_config.get('debounce_ms', 300),
            categories=search_config.get('categories', list(DEFAULT_CATEGORIES)),
            price_ceiling=price_config.get('ceiling', 10_000_000),
            price_step=price_config.get('step', 1000),
            currency=price_config.get('currency', 'UGX'),
            data_source=os.environ.get("SHIFT_MARKET_DATA_SOURCE", data_config.get('source', 'supabase')),
            products_table=data_config.get('products_table', 'products'),
            request_timeout=data_config.get('request_timeout', 30.0),
            seed_path=os.environ.get("SHIFT_MARKET_SEED_PATH", data_config.get('seed_path')),
            log_level=os.environ.get("LOG_LEVEL", logging_config.get('level', 'INFO')).upper(),
        )


# Global config instance
_config: Optional[SearchConfig] = None


def get_config() -> SearchConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = SearchConfig.from_yaml()
    return _config


def set_config(config: SearchConfig) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config
