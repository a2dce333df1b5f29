"""
Google BigQuery warehouse client implementation.

This module provides a client for BigQuery using the official
google-cloud-bigquery library. The API client is blocking and runs in the
default executor.
"""

from typing import Any

from ..catalog import CatalogColumn, CatalogSelector
from ..connection import run_sync
from ..results import build_query_result, empty_result
from ..type_mapping import FieldTypeMapper, build_type_table
from ..types import DimensionType, QueryResult, WarehouseType
from .base import WarehouseClient
from .credentials import BigqueryCredentials, BigqueryPriority

BIGQUERY_FIELD_TYPES = FieldTypeMapper(
    "BigQuery",
    build_type_table(
        {
            DimensionType.NUMBER: [
                "INTEGER",
                "INT64",
                "FLOAT",
                "FLOAT64",
                "NUMERIC",
                "BIGNUMERIC",
                "DECIMAL",
                "BIGDECIMAL",
            ],
            DimensionType.DATE: ["DATE"],
            DimensionType.TIMESTAMP: ["DATETIME", "TIMESTAMP", "TIME"],
            DimensionType.BOOLEAN: ["BOOLEAN", "BOOL"],
        }
    ),
)


def map_field_type(native_type: str) -> DimensionType:
    """Map a BigQuery field type to a ``DimensionType``."""
    return BIGQUERY_FIELD_TYPES.map_field_type(native_type)


class BigqueryWarehouseClient(WarehouseClient):
    """
    Google BigQuery warehouse client.

    BigQuery sessions already run in UTC and have no session-level week
    start, so no session statements are issued.
    """

    warehouse_name = "BigQuery"
    field_types = BIGQUERY_FIELD_TYPES

    def __init__(self, credentials: BigqueryCredentials):
        """Initialize BigQuery client with credentials."""
        super().__init__(credentials)
        self.config = credentials
        self.logger = self.logger.bind(project=credentials.project)

    def _get_warehouse_type(self) -> WarehouseType:
        """Return BigQuery warehouse type."""
        return WarehouseType.BIGQUERY

    def _create_sync_client(self) -> Any:
        from google.cloud import bigquery
        from google.oauth2 import service_account

        credentials = None
        if self.config.keyfile_contents:
            credentials = service_account.Credentials.from_service_account_info(
                self.config.keyfile_contents
            )

        return bigquery.Client(
            project=self.config.project,
            credentials=credentials,
            location=self.config.location,
        )

    def _job_config(self) -> Any:
        from google.cloud import bigquery

        job_config = bigquery.QueryJobConfig()
        job_config.use_legacy_sql = False
        job_config.priority = (
            bigquery.QueryPriority.BATCH
            if self.config.priority == BigqueryPriority.BATCH
            else bigquery.QueryPriority.INTERACTIVE
        )
        job_config.job_timeout_ms = self.config.timeout_seconds * 1000
        if self.config.maximum_bytes_billed:
            job_config.maximum_bytes_billed = self.config.maximum_bytes_billed
        return job_config

    def _execute_sync(
        self, client: Any, sql: str
    ) -> tuple[list[tuple[str, str]], list[Any]]:
        query_job = client.query(sql, job_config=self._job_config())
        result = query_job.result(timeout=self.config.timeout_seconds)
        columns = [(field.name, field.field_type) for field in result.schema or []]
        return columns, [list(row.values()) for row in result]

    def _get_table_columns_sync(
        self, client: Any, selector: CatalogSelector
    ) -> list[CatalogColumn]:
        from google.api_core.exceptions import NotFound

        try:
            table = client.get_table(
                f"{selector.database}.{selector.schema}.{selector.table}"
            )
        except NotFound:
            return []

        return [
            CatalogColumn(
                database=table.project,
                schema=table.dataset_id,
                table=table.table_id,
                column=field.name,
                type_name=field.field_type,
            )
            for field in table.schema
        ]

    async def _connect(self) -> Any:
        return await run_sync(self._create_sync_client)

    async def _disconnect(self, connection: Any) -> None:
        await run_sync(connection.close)

    async def _execute(self, connection: Any, sql: str) -> QueryResult:
        columns, rows = await run_sync(self._execute_sync, connection, sql)
        if not columns:
            return empty_result()
        return build_query_result(columns, rows, self.map_field_type)

    async def _list_columns(
        self, connection: Any, selectors: list[CatalogSelector]
    ) -> list[CatalogColumn]:
        # No instance-wide column listing exists; fetch each requested table
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
