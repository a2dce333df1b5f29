"""Warehouse client implementations."""

from .base import WarehouseClient
from .bigquery import BigqueryWarehouseClient
from .credentials import (
    BigqueryCredentials,
    DatabricksCredentials,
    DuckdbCredentials,
    PostgresCredentials,
    RedshiftCredentials,
    SnowflakeCredentials,
    WarehouseCredentials,
    parse_credentials,
)
from .databricks import DatabricksWarehouseClient
from .duckdb import DuckdbWarehouseClient
from .factory import WarehouseClientFactory, warehouse_client_from_credentials
from .postgres import PostgresWarehouseClient
from .redshift import RedshiftWarehouseClient
from .snowflake import SnowflakeWarehouseClient

__all__ = [
    "WarehouseClient",
    "WarehouseClientFactory",
    "warehouse_client_from_credentials",
    "WarehouseCredentials",
    "parse_credentials",
    "SnowflakeCredentials",
    "BigqueryCredentials",
    "PostgresCredentials",
    "RedshiftCredentials",
    "DatabricksCredentials",
    "DuckdbCredentials",
    "SnowflakeWarehouseClient",
    "BigqueryWarehouseClient",
    "PostgresWarehouseClient",
    "RedshiftWarehouseClient",
    "DatabricksWarehouseClient",
    "DuckdbWarehouseClient",
]
