"""
Tests for the shared client contract.

A recording backend stands in for a real driver so that the connection
lifecycle, session setup and error wrapping can be observed directly.
"""

import asyncio

import pytest

from libs.warehouses.catalog import CatalogColumn, CatalogSelector
from libs.warehouses.clients.base import WarehouseClient
from libs.warehouses.clients.credentials import DuckdbCredentials
from libs.warehouses.errors import (
    ParseError,
    WarehouseConnectionError,
    WarehouseQueryError,
)
from libs.warehouses.results import build_query_result
from libs.warehouses.type_mapping import FieldTypeMapper, build_type_table
from libs.warehouses.types import DimensionType, WarehouseType, WeekDay


class RecordingClient(WarehouseClient):
    """Backend that records every lifecycle step."""

    warehouse_name = "Recording"
    field_types = FieldTypeMapper(
        "Recording", build_type_table({DimensionType.NUMBER: ["INT"]})
    )

    def __init__(self, credentials, connect_error=None, failing_sql=None):
        super().__init__(credentials)
        self.events = []
        self.connect_error = connect_error
        self.failing_sql = failing_sql or {}
        self.columns = []
        self.opened = 0

    def _get_warehouse_type(self):
        return WarehouseType.DUCKDB

    async def _connect(self):
        if self.connect_error:
            raise self.connect_error
        self.opened += 1
        connection = f"conn-{self.opened}"
        self.events.append(("connect", connection))
        return connection

    async def _disconnect(self, connection):
        self.events.append(("disconnect", connection))

    def _timezone_statement(self):
        return "SET TZ UTC"

    def _week_start_statement(self, start_of_week):
        return f"SET WEEK {int(start_of_week)}"

    async def _execute(self, connection, sql):
        await asyncio.sleep(0)
        self.events.append(("execute", connection, sql))
        if sql in self.failing_sql:
            raise self.failing_sql[sql]
        return build_query_result([("x", "INT")], [(1,)], self.map_field_type)

    async def _list_columns(self, connection, selectors):
        self.events.append(("list_columns", connection))
        return self.columns


def make_client(start_of_week=None, **kwargs):
    return RecordingClient(DuckdbCredentials(start_of_week=start_of_week), **kwargs)


class TestRunQuery:
    """Test query execution through the shared contract."""

    @pytest.mark.asyncio
    async def test_session_then_query_then_release(self):
        client = make_client(start_of_week=WeekDay.WEDNESDAY)

        result = await client.run_query("SELECT x")

        assert result.fields["x"].type == DimensionType.NUMBER
        assert result.rows == [{"x": 1}]
        assert client.events == [
            ("connect", "conn-1"),
            ("execute", "conn-1", "SET TZ UTC"),
            ("execute", "conn-1", "SET WEEK 2"),
            ("execute", "conn-1", "SELECT x"),
            ("disconnect", "conn-1"),
        ]

    @pytest.mark.asyncio
    async def test_no_week_statement_without_start_of_week(self):
        client = make_client()

        await client.run_query("SELECT x")

        executed = [event[2] for event in client.events if event[0] == "execute"]
        assert executed == ["SET TZ UTC", "SELECT x"]

    @pytest.mark.asyncio
    async def test_test_runs_select_one(self):
        client = make_client()

        assert await client.test() is None
        assert ("execute", "conn-1", "SELECT 1") in client.events

    @pytest.mark.asyncio
    async def test_connect_failure(self):
        client = make_client(connect_error=OSError("connection refused"))

        with pytest.raises(WarehouseConnectionError) as exc:
            await client.run_query("SELECT x")

        assert exc.value.message == "Recording error: connection refused"
        assert exc.value.warehouse_type == WarehouseType.DUCKDB
        assert client.events == []

    @pytest.mark.asyncio
    async def test_connect_failure_hides_credentials(self):
        client = make_client(connect_error=OSError("auth failed password=secret"))

        with pytest.raises(WarehouseConnectionError) as exc:
            await client.test()

        assert "secret" not in str(exc.value)

    @pytest.mark.asyncio
    async def test_query_failure_is_wrapped_and_connection_released(self):
        client = make_client(
            failing_sql={"SELECT broken": RuntimeError("syntax error at 'broken'")}
        )

        with pytest.raises(WarehouseQueryError) as exc:
            await client.run_query("SELECT broken")

        assert exc.value.message == "Recording error: syntax error at 'broken'"
        assert exc.value.query == "SELECT broken"
        assert client.events[-1] == ("disconnect", "conn-1")
        assert sum(1 for event in client.events if event[0] == "disconnect") == 1

    @pytest.mark.asyncio
    async def test_session_failure_is_a_connection_error(self):
        client = make_client(failing_sql={"SET TZ UTC": RuntimeError("denied")})

        with pytest.raises(WarehouseConnectionError, match="configure session"):
            await client.run_query("SELECT x")

        executed = [event[2] for event in client.events if event[0] == "execute"]
        assert executed == ["SET TZ UTC"]
        assert client.events[-1] == ("disconnect", "conn-1")

    @pytest.mark.asyncio
    async def test_parse_error_passes_through(self):
        client = make_client()

        async def bad_execute(connection, sql):
            if sql == "SELECT x":
                return build_query_result([("x", "(1)")], [], client.map_field_type)
            return build_query_result([], [], client.map_field_type)

        client._execute = bad_execute

        with pytest.raises(ParseError):
            await client.run_query("SELECT x")

    @pytest.mark.asyncio
    async def test_concurrent_calls_use_separate_connections(self):
        client = make_client()

        await asyncio.gather(*(client.run_query("SELECT x") for _ in range(3)))

        connects = [event[1] for event in client.events if event[0] == "connect"]
        disconnects = [event[1] for event in client.events if event[0] == "disconnect"]
        assert len(set(connects)) == 3
        assert sorted(connects) == sorted(disconnects)

    @pytest.mark.asyncio
    async def test_query_logging(self, captured_logs):
        client = make_client()

        await client.run_query("SELECT x")

        events = [log["event"] for log in captured_logs]
        assert "executing_query" in events
        assert "query_completed" in events
        completed = next(
            log for log in captured_logs if log["event"] == "query_completed"
        )
        assert completed["row_count"] == 1
        assert completed["warehouse_type"] == "duckdb"


class TestGetCatalog:
    """Test catalog introspection through the shared contract."""

    @pytest.mark.asyncio
    async def test_empty_selectors_do_not_connect(self):
        client = make_client()

        assert await client.get_catalog([]) == {}
        assert client.events == []

    @pytest.mark.asyncio
    async def test_catalog_from_listing(self):
        client = make_client()
        client.columns = [
            CatalogColumn("DB", "PUBLIC", "T", "ID", "INT"),
            CatalogColumn("DB", "PUBLIC", "T", "NAME", "TEXT"),
            CatalogColumn("DB", "PUBLIC", "OTHER", "ID", "INT"),
        ]

        catalog = await client.get_catalog(
            [
                {"database": "db", "schema": "public", "table": "t"},
                CatalogSelector("db", "public", "missing"),
            ]
        )

        assert catalog == {
            "db": {
                "public": {
                    "t": {"ID": DimensionType.NUMBER, "NAME": DimensionType.STRING}
                }
            }
        }
        assert client.events[0] == ("connect", "conn-1")
        assert ("list_columns", "conn-1") in client.events
        assert client.events[-1] == ("disconnect", "conn-1")

    @pytest.mark.asyncio
    async def test_listing_failure_is_a_query_error(self):
        client = make_client()

        async def failing_list(connection, selectors):
            raise RuntimeError("permission denied")

        client._list_columns = failing_list

        with pytest.raises(WarehouseQueryError, match="Recording error"):
            await client.get_catalog([CatalogSelector("db", "s", "t")])

        assert client.events[-1] == ("disconnect", "conn-1")


class TestStartOfWeek:
    """Test start of week reporting."""

    def test_reports_configured_day(self):
        assert make_client(WeekDay.SUNDAY).get_start_of_week() == WeekDay.SUNDAY

    def test_absent_by_default(self):
        assert make_client().get_start_of_week() is None
