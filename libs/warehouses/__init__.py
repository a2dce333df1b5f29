"""
Warehouse Client Library

Provides one uniform client over the SQL warehouses analytics queries run
against: Snowflake, BigQuery, Redshift, PostgreSQL, Databricks and DuckDB.

Features:
- A single async client contract (test, run_query, get_catalog)
- Native column types normalized to a small set of dimension types
- One scoped connection per call, released on every exit path
- Sessions pinned to UTC with a configurable start of week
- Catalog introspection for a requested set of tables
"""

from .catalog import CatalogSelector
from .clients import (
    WarehouseClient,
    WarehouseClientFactory,
    WarehouseCredentials,
    parse_credentials,
    warehouse_client_from_credentials,
)
from .errors import (
    ParseError,
    UnsupportedWarehouseError,
    WarehouseConnectionError,
    WarehouseError,
    WarehouseQueryError,
)
from .types import (
    DimensionType,
    FieldInfo,
    QueryResult,
    WarehouseCatalog,
    WarehouseType,
    WeekDay,
)

__all__ = [
    "WarehouseClient",
    "WarehouseClientFactory",
    "warehouse_client_from_credentials",
    "WarehouseCredentials",
    "parse_credentials",
    "CatalogSelector",
    "DimensionType",
    "FieldInfo",
    "QueryResult",
    "WarehouseCatalog",
    "WarehouseType",
    "WeekDay",
    "WarehouseError",
    "WarehouseConnectionError",
    "WarehouseQueryError",
    "ParseError",
    "UnsupportedWarehouseError",
]
