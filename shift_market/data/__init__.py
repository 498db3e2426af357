"""
Catalog data access for product search.
"""
from shift_market.data.catalog_store import (
    CatalogDataSource,
    CatalogStoreError,
    DataSourceError,
    InMemoryCatalogStore,
    QueryResult,
    SupabaseCatalogStore,
    create_data_source,
)

__all__ = [
    "CatalogDataSource",
    "CatalogStoreError",
    "DataSourceError",
    "InMemoryCatalogStore",
    "QueryResult",
    "SupabaseCatalogStore",
    "create_data_source",
]
