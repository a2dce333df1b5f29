"""Tests for the Databricks client against a fake driver."""

from collections import namedtuple
from datetime import datetime, timezone

import pytest

from libs.warehouses.catalog import CatalogSelector
from libs.warehouses.clients import warehouse_client_from_credentials
from libs.warehouses.errors import WarehouseQueryError
from libs.warehouses.types import DimensionType

DATABRICKS = {
    "type": "databricks",
    "server_host_name": "dbc-123.cloud.databricks.com",
    "http_path": "/sql/1.0/warehouses/abc",
    "personal_access_token": "dapi123",
    "database": "default",
}

ColumnRow = namedtuple(
    "ColumnRow", ["TABLE_CAT", "TABLE_SCHEM", "TABLE_NAME", "COLUMN_NAME", "TYPE_NAME"]
)


class TestDatabricksClient:
    """Test the Databricks client."""

    def test_connection_params(self):
        client = warehouse_client_from_credentials({**DATABRICKS, "catalog": "main"})

        params = client.get_connection_params()

        assert params == {
            "server_hostname": "dbc-123.cloud.databricks.com",
            "http_path": "/sql/1.0/warehouses/abc",
            "access_token": "dapi123",
            "schema": "default",
            "catalog": "main",
        }

    def test_catalog_is_optional(self):
        client = warehouse_client_from_credentials(DATABRICKS)

        assert "catalog" not in client.get_connection_params()

    @pytest.mark.asyncio
    async def test_run_query(self, fake_connection, attach_connection):
        client = warehouse_client_from_credentials({**DATABRICKS, "start_of_week": 0})
        connection = attach_connection(
            client,
            fake_connection(
                responses={
                    "FROM events": (
                        [("id", "bigint"), ("at", "timestamp"), ("ok", "boolean")],
                        [(7, datetime(2024, 3, 3, 3, 3, tzinfo=timezone.utc), True)],
                    )
                }
            ),
        )

        result = await client.run_query("SELECT * FROM events")

        assert connection.executed == ["SET TIME ZONE 'UTC'", "SELECT * FROM events"]
        assert result.fields["id"].type == DimensionType.NUMBER
        assert result.fields["at"].type == DimensionType.TIMESTAMP
        assert result.fields["ok"].type == DimensionType.BOOLEAN
        assert result.rows == [
            {"id": 7, "at": datetime(2024, 3, 3, 3, 3, tzinfo=timezone.utc), "ok": True}
        ]
        assert connection.close_calls == 1

    @pytest.mark.asyncio
    async def test_query_failure(self, fake_connection, attach_connection):
        client = warehouse_client_from_credentials(DATABRICKS)
        attach_connection(
            client,
            fake_connection(errors={"SELECT x": RuntimeError("TABLE_OR_VIEW_NOT_FOUND")}),
        )

        with pytest.raises(WarehouseQueryError, match="^Databricks error: TABLE"):
            await client.run_query("SELECT x FROM y")

    @pytest.mark.asyncio
    async def test_get_catalog(self, fake_connection, attach_connection):
        client = warehouse_client_from_credentials(DATABRICKS)
        connection = fake_connection()
        connection.table_columns[("main", "sales", "orders")] = [
            ColumnRow("main", "sales", "orders", "order_id", "BIGINT"),
            ColumnRow("main", "sales", "orders", "amount", "DECIMAL(10,2)"),
            ColumnRow("main", "sales", "orders", "ordered_on", "DATE"),
        ]
        attach_connection(client, connection)

        catalog = await client.get_catalog(
            [
                CatalogSelector("main", "sales", "orders"),
                CatalogSelector("MAIN", "SALES", "ORDERS"),
                CatalogSelector("main", "sales", "returns"),
            ]
        )

        assert catalog == {
            "main": {
                "sales": {
                    "orders": {
                        "order_id": DimensionType.NUMBER,
                        "amount": DimensionType.NUMBER,
                        "ordered_on": DimensionType.DATE,
                    }
                }
            }
        }
        assert connection.executed == [
            "SET TIME ZONE 'UTC'",
            ("columns", "main", "sales", "orders"),
            ("columns", "main", "sales", "returns"),
        ]
        assert connection.close_calls == 1
