"""
PostgreSQL warehouse client implementation.

This module provides a client for PostgreSQL using psycopg 3. Result
columns are described by type OID, resolved through ``PG_TYPE_NAMES``; the
same table serves Redshift, which speaks the Postgres wire protocol.
"""

from typing import Any

from ..catalog import CatalogColumn, CatalogSelector
from ..connection import run_sync
from ..results import build_query_result, empty_result
from ..type_mapping import FieldTypeMapper, build_type_table
from ..types import DimensionType, QueryResult, WarehouseType
from .base import WarehouseClient
from .credentials import PostgresCredentials

POSTGRES_FIELD_TYPES = FieldTypeMapper(
    "Postgres",
    build_type_table(
        {
            DimensionType.NUMBER: [
                "SMALLINT",
                "INTEGER",
                "INT",
                "INT2",
                "INT4",
                "INT8",
                "BIGINT",
                "SERIAL",
                "SMALLSERIAL",
                "BIGSERIAL",
                "SERIAL2",
                "SERIAL4",
                "SERIAL8",
                "DECIMAL",
                "NUMERIC",
                "REAL",
                "FLOAT",
                "FLOAT4",
                "FLOAT8",
                "DOUBLE",
                "MONEY",
                "OID",
            ],
            DimensionType.DATE: ["DATE"],
            DimensionType.TIMESTAMP: ["TIMESTAMP", "TIMESTAMPTZ", "TIME", "TIMETZ"],
            DimensionType.BOOLEAN: ["BOOLEAN", "BOOL"],
        }
    ),
)

# Built-in type OIDs, see pg_type
PG_TYPE_NAMES: dict[int, str] = {
    16: "bool",
    18: "char",
    19: "name",
    20: "int8",
    21: "int2",
    23: "int4",
    25: "text",
    26: "oid",
    114: "json",
    700: "float4",
    701: "float8",
    790: "money",
    1042: "bpchar",
    1043: "varchar",
    1082: "date",
    1083: "time",
    1114: "timestamp",
    1184: "timestamptz",
    1186: "interval",
    1266: "timetz",
    1700: "numeric",
    2950: "uuid",
    3802: "jsonb",
}

UTC_TIMEZONE_STATEMENT = "SET timezone TO 'UTC'"


def map_field_type(native_type: str) -> DimensionType:
    """Map a Postgres type name to a ``DimensionType``."""
    return POSTGRES_FIELD_TYPES.map_field_type(native_type)


def pg_type_name(type_oid: int) -> str:
    """Resolve a type OID; unknown OIDs read as text."""
    return PG_TYPE_NAMES.get(type_oid, "text")


def describe_columns(description: Any) -> list[tuple[str, str]]:
    """Turn a DB-API cursor description into ``(name, type name)`` pairs."""
    return [(desc[0], pg_type_name(desc[1])) for desc in description]


class PostgresWarehouseClient(WarehouseClient):
    """PostgreSQL warehouse client."""

    warehouse_name = "Postgres"
    field_types = POSTGRES_FIELD_TYPES

    COLUMNS_QUERY = """
        SELECT table_catalog, table_schema, table_name, column_name, data_type
        FROM information_schema.columns
        WHERE table_schema NOT IN ('information_schema', 'pg_catalog')
          AND table_schema NOT LIKE 'pg_%'
        ORDER BY table_catalog, table_schema, table_name, ordinal_position
    """

    def __init__(self, credentials: PostgresCredentials):
        """Initialize Postgres client with credentials."""
        super().__init__(credentials)
        self.config = credentials
        self.logger = self.logger.bind(host=credentials.host, dbname=credentials.dbname)

    def _get_warehouse_type(self) -> WarehouseType:
        """Return Postgres warehouse type."""
        return WarehouseType.POSTGRES

    def get_connection_params(self) -> dict[str, Any]:
        """Get connection parameters for psycopg."""
        params: dict[str, Any] = {
            "host": self.config.host,
            "port": self.config.port,
            "user": self.config.user,
            "password": self.config.password.get_secret_value(),
            "dbname": self.config.dbname,
            "sslmode": self.config.sslmode.value,
            "connect_timeout": self.config.connect_timeout,
            "autocommit": True,
        }
        if self.config.keepalives_idle is not None:
            params["keepalives_idle"] = self.config.keepalives_idle
        search_path = self.config.search_path or self.config.warehouse_schema
        params["options"] = f"-c search_path={search_path}"
        return params

    def _create_sync_connection(self) -> Any:
        import psycopg

        return psycopg.connect(**self.get_connection_params())

    def _execute_sync(
        self, connection: Any, sql: str
    ) -> tuple[list[tuple[str, str]], list[Any]]:
        with connection.cursor() as cursor:
            cursor.execute(sql)
            if not cursor.description:
                return [], []
            return describe_columns(cursor.description), cursor.fetchall()

    async def _connect(self) -> Any:
        return await run_sync(self._create_sync_connection)

    async def _disconnect(self, connection: Any) -> None:
        await run_sync(connection.close)

    def _timezone_statement(self) -> str | None:
        return UTC_TIMEZONE_STATEMENT

    async def _execute(self, connection: Any, sql: str) -> QueryResult:
        columns, rows = await run_sync(self._execute_sync, connection, sql)
        if not columns:
            return empty_result()
        return build_query_result(columns, rows, self.map_field_type)

    async def _list_columns(
        self, connection: Any, selectors: list[CatalogSelector]
    ) -> list[CatalogColumn]:
        _, rows = await run_sync(self._execute_sync, connection, self.COLUMNS_QUERY)
        return [CatalogColumn(*row) for row in rows]
