"""Pytest configuration and shared fixtures."""

import pytest
from structlog.testing import capture_logs

from libs.warehouses.settings import configure_settings


class FakeCursor:
    """DB-API cursor answering from its connection's canned responses."""

    def __init__(self, connection):
        self.connection = connection
        self.description = None
        self._rows = []
        self.closed = False

    def execute(self, sql, params=None):
        self.connection.executed.append(sql)
        self.description, self._rows = self.connection.respond(sql)

    def columns(self, catalog_name=None, schema_name=None, table_name=None):
        self.connection.executed.append(
            ("columns", catalog_name, schema_name, table_name)
        )
        self._rows = self.connection.table_columns.get(
            (catalog_name, schema_name, table_name), []
        )

    def fetchall(self):
        return list(self._rows)

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()


class FakeConnection:
    """
    DB-API connection with canned responses.

    ``responses`` and ``errors`` are keyed by a SQL fragment; the first
    fragment contained in an executed statement decides the outcome.
    """

    def __init__(self, responses=None, errors=None, close_error=None):
        self.responses = responses or {}
        self.errors = errors or {}
        self.table_columns = {}
        self.close_error = close_error
        self.executed = []
        self.close_calls = 0
        self.autocommit = False

    def cursor(self):
        return FakeCursor(self)

    def respond(self, sql):
        for fragment, error in self.errors.items():
            if fragment in sql:
                raise error
        for fragment, response in self.responses.items():
            if fragment in sql:
                return response
        return None, []

    def close(self):
        self.close_calls += 1
        if self.close_error:
            raise self.close_error


@pytest.fixture
def fake_connection():
    """Build fake DB-API connections."""

    def make(responses=None, errors=None, close_error=None):
        return FakeConnection(responses, errors, close_error)

    return make


@pytest.fixture
def attach_connection(monkeypatch):
    """Make a client's driver connect return the given connection."""

    def attach(client, connection):
        monkeypatch.setattr(client, "_create_sync_connection", lambda: connection)
        return connection

    return attach


@pytest.fixture(autouse=True)
def warehouse_settings_env(monkeypatch):
    """Isolate warehouse settings from the host environment."""
    monkeypatch.delenv("WAREHOUSES_SQL_LOG_MAX_CHARS", raising=False)
    configure_settings(None)
    yield
    configure_settings(None)


@pytest.fixture
def captured_logs():
    """Capture structlog events emitted during a test."""
    with capture_logs() as logs:
        yield logs
