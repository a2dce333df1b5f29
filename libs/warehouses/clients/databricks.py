"""
Databricks warehouse client implementation.

This module provides a client for Databricks SQL warehouses and clusters
using databricks-sql-connector.
"""

from typing import Any

from ..catalog import CatalogColumn, CatalogSelector
from ..connection import run_sync
from ..results import build_query_result, empty_result
from ..type_mapping import FieldTypeMapper, build_type_table
from ..types import DimensionType, QueryResult, WarehouseType
from .base import WarehouseClient
from .credentials import DatabricksCredentials

DATABRICKS_FIELD_TYPES = FieldTypeMapper(
    "Databricks",
    build_type_table(
        {
            DimensionType.NUMBER: [
                "TINYINT",
                "BYTE",
                "SMALLINT",
                "SHORT",
                "INT",
                "INTEGER",
                "LONG",
                "BIGINT",
                "FLOAT",
                "REAL",
                "DOUBLE",
                "DECIMAL",
                "DEC",
                "NUMERIC",
            ],
            DimensionType.DATE: ["DATE"],
            DimensionType.TIMESTAMP: ["TIMESTAMP"],
            DimensionType.BOOLEAN: ["BOOLEAN"],
        }
    ),
)


def map_field_type(native_type: str) -> DimensionType:
    """Map a Databricks type name to a ``DimensionType``."""
    return DATABRICKS_FIELD_TYPES.map_field_type(native_type)


class DatabricksWarehouseClient(WarehouseClient):
    """Databricks warehouse client."""

    warehouse_name = "Databricks"
    field_types = DATABRICKS_FIELD_TYPES

    def __init__(self, credentials: DatabricksCredentials):
        """Initialize Databricks client with credentials."""
        super().__init__(credentials)
        self.config = credentials
        self.logger = self.logger.bind(
            server_host_name=credentials.server_host_name,
            http_path=credentials.http_path,
        )

    def _get_warehouse_type(self) -> WarehouseType:
        """Return Databricks warehouse type."""
        return WarehouseType.DATABRICKS

    def get_connection_params(self) -> dict[str, Any]:
        """Get connection parameters for databricks-sql-connector."""
        params: dict[str, Any] = {
            "server_hostname": self.config.server_host_name,
            "http_path": self.config.http_path,
            "access_token": self.config.personal_access_token.get_secret_value(),
            "schema": self.config.database,
        }
        if self.config.catalog:
            params["catalog"] = self.config.catalog
        return params

    def _create_sync_connection(self) -> Any:
        from databricks import sql

        return sql.connect(**self.get_connection_params())

    def _execute_sync(
        self, connection: Any, sql: str
    ) -> tuple[list[tuple[str, str]], list[Any]]:
        cursor = connection.cursor()
        try:
            cursor.execute(sql)
            if not cursor.description:
                return [], []
            columns = [(desc[0], str(desc[1])) for desc in cursor.description]
            return columns, cursor.fetchall()
        finally:
            cursor.close()

    def _get_table_columns_sync(
        self, connection: Any, selector: CatalogSelector
    ) -> list[CatalogColumn]:
        cursor = connection.cursor()
        try:
            cursor.columns(
                catalog_name=selector.database,
                schema_name=selector.schema,
                table_name=selector.table,
            )
            return [
                CatalogColumn(
                    database=row.TABLE_CAT,
                    schema=row.TABLE_SCHEM,
                    table=row.TABLE_NAME,
                    column=row.COLUMN_NAME,
                    type_name=row.TYPE_NAME,
                )
                for row in cursor.fetchall()
            ]
        finally:
            cursor.close()

    async def _connect(self) -> Any:
        return await run_sync(self._create_sync_connection)

    async def _disconnect(self, connection: Any) -> None:
        await run_sync(connection.close)

    def _timezone_statement(self) -> str | None:
        return "SET TIME ZONE 'UTC'"

    async def _execute(self, connection: Any, sql: str) -> QueryResult:
        columns, rows = await run_sync(self._execute_sync, connection, sql)
        if not columns:
            return empty_result()
        return build_query_result(columns, rows, self.map_field_type)

    async def _list_columns(
        self, connection: Any, selectors: list[CatalogSelector]
    ) -> list[CatalogColumn]:
        columns: list[CatalogColumn] = []
        seen: set[tuple[str, str, str]] = set()
        for selector in selectors:
            if selector.key() in seen:
                continue
            seen.add(selector.key())
            columns.extend(
                await run_sync(self._get_table_columns_sync, connection, selector)
            )
        return columns
