"""
Amazon Redshift warehouse client implementation.

This module provides a client for Redshift using the redshift_connector
library. Redshift reports result types by Postgres OID and shares the
Postgres type vocabulary.
"""

from typing import Any

from ..catalog import CatalogColumn, CatalogSelector
from ..connection import run_sync
from ..results import build_query_result, empty_result
from ..type_mapping import FieldTypeMapper
from ..types import QueryResult, WarehouseType
from .base import WarehouseClient
from .credentials import RedshiftCredentials, SSLMode
from .postgres import POSTGRES_FIELD_TYPES, UTC_TIMEZONE_STATEMENT, describe_columns

REDSHIFT_FIELD_TYPES = FieldTypeMapper("Redshift", POSTGRES_FIELD_TYPES.table)


class RedshiftWarehouseClient(WarehouseClient):
    """Amazon Redshift warehouse client."""

    warehouse_name = "Redshift"
    field_types = REDSHIFT_FIELD_TYPES

    # svv_columns also covers late-binding views and external tables
    COLUMNS_QUERY = """
        SELECT table_catalog, table_schema, table_name, column_name, data_type
        FROM svv_columns
        WHERE table_schema NOT IN ('information_schema', 'pg_catalog', 'pg_internal')
        ORDER BY table_catalog, table_schema, table_name, ordinal_position
    """

    # RA3 clusters can query across databases
    ALL_DATABASES_COLUMNS_QUERY = """
        SELECT database_name, schema_name, table_name, column_name, data_type
        FROM svv_all_columns
        WHERE schema_name NOT IN ('information_schema', 'pg_catalog', 'pg_internal')
        ORDER BY database_name, schema_name, table_name, ordinal_position
    """

    def __init__(self, credentials: RedshiftCredentials):
        """Initialize Redshift client with credentials."""
        super().__init__(credentials)
        self.config = credentials
        self.logger = self.logger.bind(host=credentials.host, dbname=credentials.dbname)

    def _get_warehouse_type(self) -> WarehouseType:
        """Return Redshift warehouse type."""
        return WarehouseType.REDSHIFT

    def get_connection_params(self) -> dict[str, Any]:
        """Get connection parameters for redshift_connector."""
        params: dict[str, Any] = {
            "host": self.config.host,
            "port": self.config.port,
            "database": self.config.dbname,
            "user": self.config.user,
            "password": self.config.password.get_secret_value(),
            "timeout": self.config.connect_timeout,
            "application_name": "warehouses",
        }

        # redshift_connector only knows the two verifying modes
        if self.config.sslmode == SSLMode.DISABLE:
            params["ssl"] = False
        elif self.config.sslmode == SSLMode.VERIFY_FULL:
            params["ssl"] = True
            params["sslmode"] = SSLMode.VERIFY_FULL.value
        else:
            params["ssl"] = True
            params["sslmode"] = SSLMode.VERIFY_CA.value
            if self.config.sslmode != SSLMode.VERIFY_CA:
                self.logger.warning(
                    "sslmode_upgraded",
                    requested=self.config.sslmode.value,
                    sslmode=SSLMode.VERIFY_CA.value,
                )

        return params

    def _create_sync_connection(self) -> Any:
        import redshift_connector

        connection = redshift_connector.connect(**self.get_connection_params())
        try:
            connection.autocommit = True
            cursor = connection.cursor()
            try:
                cursor.execute(f"SET search_path TO {self.config.warehouse_schema}")
            finally:
                cursor.close()
        except Exception:
            connection.close()
            raise
        return connection

    def _execute_sync(
        self, connection: Any, sql: str
    ) -> tuple[list[tuple[str, str]], list[Any]]:
        cursor = connection.cursor()
        try:
            cursor.execute(sql)
            if not cursor.description:
                return [], []
            return describe_columns(cursor.description), cursor.fetchall()
        finally:
            cursor.close()

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
        query = (
            self.ALL_DATABASES_COLUMNS_QUERY
            if self.config.ra3_node
            else self.COLUMNS_QUERY
        )
        _, rows = await run_sync(self._execute_sync, connection, query)
        return [CatalogColumn(*row) for row in rows]
