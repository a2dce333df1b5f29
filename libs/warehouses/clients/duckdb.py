"""
DuckDB warehouse client implementation.

This module provides a client for an embedded DuckDB database, either a
database file or an in-memory instance. Each call opens its own
connection, so in-memory databases do not outlive the call.
"""

from typing import Any

from ..catalog import CatalogColumn, CatalogSelector
from ..connection import run_sync
from ..results import build_query_result, empty_result
from ..type_mapping import FieldTypeMapper, build_type_table
from ..types import DimensionType, QueryResult, WarehouseType
from .base import WarehouseClient
from .credentials import DuckdbCredentials

DUCKDB_FIELD_TYPES = FieldTypeMapper(
    "DuckDB",
    build_type_table(
        {
            DimensionType.NUMBER: [
                "TINYINT",
                "SMALLINT",
                "INTEGER",
                "INT",
                "BIGINT",
                "HUGEINT",
                "UTINYINT",
                "USMALLINT",
                "UINTEGER",
                "UBIGINT",
                "UHUGEINT",
                "DECIMAL",
                "NUMERIC",
                "REAL",
                "FLOAT",
                "DOUBLE",
            ],
            DimensionType.DATE: ["DATE"],
            DimensionType.TIMESTAMP: ["TIMESTAMP", "TIMESTAMPTZ", "DATETIME", "TIME"],
            DimensionType.BOOLEAN: ["BOOLEAN", "BOOL"],
        }
    ),
)


NESTED_TYPE_IDS = frozenset({"list", "array", "struct", "map", "union"})


def nested_type_name(type_name: str) -> str:
    """
    Collapse a list or array type name to its kind.

    DuckDB spells list types as their element type followed by brackets
    (``INTEGER[]``, ``VARCHAR[3]``), so the leading token alone would name
    the element type.
    """
    if type_name.rstrip().endswith("]"):
        return "LIST"
    return type_name


def duckdb_type_name(native_type: Any) -> str:
    """Return the type name to map for a relation column type."""
    type_id = getattr(native_type, "id", None)
    if type_id in NESTED_TYPE_IDS:
        return type_id.upper()
    return nested_type_name(str(native_type))


def map_field_type(native_type: str) -> DimensionType:
    """Map a DuckDB type name to a ``DimensionType``."""
    return DUCKDB_FIELD_TYPES.map_field_type(nested_type_name(native_type))


class DuckdbWarehouseClient(WarehouseClient):
    """DuckDB warehouse client."""

    warehouse_name = "DuckDB"
    field_types = DUCKDB_FIELD_TYPES

    COLUMNS_QUERY = """
        SELECT table_catalog, table_schema, table_name, column_name, data_type
        FROM information_schema.columns
        ORDER BY table_catalog, table_schema, table_name, ordinal_position
    """

    def __init__(self, credentials: DuckdbCredentials):
        """Initialize DuckDB client with credentials."""
        super().__init__(credentials)
        self.config = credentials
        self.logger = self.logger.bind(path=credentials.path)

    def _get_warehouse_type(self) -> WarehouseType:
        """Return DuckDB warehouse type."""
        return WarehouseType.DUCKDB

    def _use_statement(self) -> str | None:
        if self.config.database and self.config.warehouse_schema:
            return f"USE {self.config.database}.{self.config.warehouse_schema}"
        if self.config.database:
            return f"USE {self.config.database}"
        if self.config.warehouse_schema:
            return f"USE {self.config.warehouse_schema}"
        return None

    def _create_sync_connection(self) -> Any:
        import duckdb

        config: dict[str, Any] = {}
        if self.config.threads:
            config["threads"] = self.config.threads

        connection = duckdb.connect(
            database=self.config.path,
            read_only=self.config.read_only,
            config=config,
        )
        use_statement = self._use_statement()
        if use_statement:
            try:
                connection.execute(use_statement)
            except Exception:
                connection.close()
                raise
        return connection

    def _execute_sync(
        self, connection: Any, sql: str
    ) -> tuple[list[tuple[str, str]], list[Any]]:
        relation = connection.sql(sql)
        # Statements without a result set return no relation
        if relation is None:
            return [], []
        columns = [
            (name, duckdb_type_name(native_type))
            for name, native_type in zip(relation.columns, relation.types)
        ]
        return columns, relation.fetchall()

    async def _connect(self) -> Any:
        return await run_sync(self._create_sync_connection)

    async def _disconnect(self, connection: Any) -> None:
        await run_sync(connection.close)

    def _timezone_statement(self) -> str | None:
        return "SET TimeZone = 'UTC'"

    async def _execute(self, connection: Any, sql: str) -> QueryResult:
        columns, rows = await run_sync(self._execute_sync, connection, sql)
        if not columns:
            return empty_result()
        return build_query_result(columns, rows, self.map_field_type)

    async def _list_columns(
        self, connection: Any, selectors: list[CatalogSelector]
    ) -> list[CatalogColumn]:
        _, rows = await run_sync(self._execute_sync, connection, self.COLUMNS_QUERY)
        return [
            CatalogColumn(database, schema, table, column, nested_type_name(data_type))
            for database, schema, table, column, data_type in rows
        ]
