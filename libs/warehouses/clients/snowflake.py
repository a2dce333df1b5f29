"""
Snowflake warehouse client implementation.

This module provides a client for Snowflake using the official
snowflake-connector-python library. Driver calls are blocking and run in
the default executor.
"""

import json
from typing import Any
from urllib.parse import urlparse

from cryptography.hazmat.primitives import serialization

from ..catalog import CatalogColumn, CatalogSelector
from ..connection import run_sync
from ..errors import ParseError
from ..results import build_query_result, empty_result
from ..type_mapping import FieldTypeMapper, build_type_table
from ..types import DimensionType, QueryResult, WarehouseType, WeekDay
from .base import WarehouseClient
from .credentials import SnowflakeCredentials

SNOWFLAKE_FIELD_TYPES = FieldTypeMapper(
    "Snowflake",
    build_type_table(
        {
            DimensionType.NUMBER: [
                "NUMBER",
                "DECIMAL",
                "NUMERIC",
                "INTEGER",
                "INT",
                "BIGINT",
                "SMALLINT",
                "TINYINT",
                "BYTEINT",
                "FLOAT",
                "FLOAT4",
                "FLOAT8",
                "DOUBLE",
                "REAL",
                "FIXED",
            ],
            DimensionType.DATE: ["DATE"],
            # TIMESTAMP_LTZ, TIMESTAMP_NTZ and TIMESTAMP_TZ reduce to TIMESTAMP
            DimensionType.TIMESTAMP: ["DATETIME", "TIME", "TIMESTAMP"],
            DimensionType.BOOLEAN: ["BOOLEAN"],
        }
    ),
)


def map_field_type(native_type: str) -> DimensionType:
    """Map a Snowflake type string to a ``DimensionType``."""
    return SNOWFLAKE_FIELD_TYPES.map_field_type(native_type)


def field_type_name(type_code: int) -> str:
    """Resolve a result metadata type code to its Snowflake type name."""
    from snowflake.connector.constants import FIELD_ID_TO_NAME

    return FIELD_ID_TO_NAME.get(type_code, "UNKNOWN")


def parse_column_data_type(data_type: str) -> str:
    """
    Read the type name out of a ``SHOW COLUMNS`` data_type descriptor.

    The descriptor is JSON, e.g. ``{"type":"FIXED","precision":38,"scale":0}``.
    """
    try:
        return json.loads(data_type)["type"]
    except (TypeError, ValueError, KeyError) as e:
        raise ParseError(
            f"Cannot understand column data_type from Snowflake: {data_type!r}"
        ) from e


def load_private_key(private_key: str, passphrase: str | None = None) -> bytes:
    """Decrypt a PEM private key into the DER bytes the connector expects."""
    key = serialization.load_pem_private_key(
        private_key.encode(),
        password=passphrase.encode() if passphrase else None,
    )
    return key.private_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


class SnowflakeWarehouseClient(WarehouseClient):
    """Snowflake warehouse client."""

    warehouse_name = "Snowflake"
    field_types = SNOWFLAKE_FIELD_TYPES

    def __init__(self, credentials: SnowflakeCredentials):
        """Initialize Snowflake client with credentials."""
        super().__init__(credentials)
        self.config = credentials
        self.logger = self.logger.bind(
            account=credentials.account, user=credentials.user
        )

    def _get_warehouse_type(self) -> WarehouseType:
        """Return Snowflake warehouse type."""
        return WarehouseType.SNOWFLAKE

    def get_connection_params(self) -> dict[str, Any]:
        """Get connection parameters for snowflake-connector-python."""
        params: dict[str, Any] = {
            "account": self.config.account,
            "user": self.config.user,
            "database": self.config.database,
            "schema": self.config.warehouse_schema,
            "warehouse": self.config.warehouse,
            "client_session_keep_alive": self.config.client_session_keep_alive,
        }

        # Add authentication
        if self.config.private_key:
            passphrase = self.config.private_key_passphrase
            params["private_key"] = load_private_key(
                self.config.private_key.get_secret_value(),
                passphrase.get_secret_value() if passphrase else None,
            )
            params["authenticator"] = "SNOWFLAKE_JWT"
        elif self.config.password:
            params["password"] = self.config.password.get_secret_value()

        # Add optional parameters
        if self.config.role:
            params["role"] = self.config.role
        if self.config.query_tag:
            params["session_parameters"] = {"QUERY_TAG": self.config.query_tag}
        if self.config.access_url:
            url = urlparse(self.config.access_url)
            params["host"] = url.hostname
            if url.port:
                params["port"] = url.port
            if url.scheme:
                params["protocol"] = url.scheme

        return params

    def _create_sync_connection(self) -> Any:
        import snowflake.connector

        return snowflake.connector.connect(**self.get_connection_params())

    def _execute_sync(
        self, connection: Any, sql: str
    ) -> tuple[list[tuple[str, str]], list[Any]]:
        cursor = connection.cursor()
        try:
            cursor.execute(sql)
            if not cursor.description:
                return [], []
            columns = [
                (desc[0], field_type_name(desc[1])) for desc in cursor.description
            ]
            return columns, cursor.fetchall()
        finally:
            cursor.close()

    async def _connect(self) -> Any:
        return await run_sync(self._create_sync_connection)

    async def _disconnect(self, connection: Any) -> None:
        await run_sync(connection.close)

    def _timezone_statement(self) -> str | None:
        return "ALTER SESSION SET TIMEZONE = 'UTC'"

    def _week_start_statement(self, start_of_week: WeekDay) -> str | None:
        # Snowflake numbers weeks 1 (Monday) to 7 (Sunday)
        return f"ALTER SESSION SET WEEK_START = {int(start_of_week) + 1}"

    async def _execute(self, connection: Any, sql: str) -> QueryResult:
        columns, rows = await run_sync(self._execute_sync, connection, sql)
        if not columns:
            return empty_result()
        return build_query_result(columns, rows, self.map_field_type)

    async def _list_columns(
        self, connection: Any, selectors: list[CatalogSelector]
    ) -> list[CatalogColumn]:
        result = await self._execute(connection, "SHOW COLUMNS IN ACCOUNT")
        return [
            CatalogColumn(
                database=row["database_name"],
                schema=row["schema_name"],
                table=row["table_name"],
                column=row["column_name"],
                type_name=parse_column_data_type(row["data_type"]),
            )
            for row in result.rows
            if row.get("kind") == "COLUMN"
        ]
