"""
Base warehouse client interface.

This module defines the abstract base class every backend client inherits
from. The public operations (``test``, ``run_query``, ``get_catalog`` and
``get_start_of_week``) are implemented here once; backends only provide
the connection, execution and metadata hooks.
"""

import time
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Iterable
from typing import Any, ClassVar, TypeVar

import structlog

from ..catalog import CatalogColumn, CatalogSelector, as_selectors, build_catalog
from ..connection import run_in_connection
from ..errors import (
    WarehouseConnectionError,
    WarehouseError,
    WarehouseQueryError,
    sanitize_error_message,
)
from ..logging import sql_preview
from ..type_mapping import FieldTypeMapper
from ..types import DimensionType, QueryResult, WarehouseCatalog, WarehouseType, WeekDay
from .credentials import BaseWarehouseCredentials

T = TypeVar("T")


class WarehouseClient(ABC):
    """
    Abstract base class for warehouse clients.

    A client holds configuration only. Every call opens its own connection,
    configures the session, does its work and closes the connection before
    returning, so one client can serve concurrent calls.
    """

    # Display name used in error messages, e.g. "Snowflake error: ..."
    warehouse_name: ClassVar[str]
    field_types: ClassVar[FieldTypeMapper]

    def __init__(self, credentials: BaseWarehouseCredentials):
        """Initialize the client from validated credentials."""
        self.credentials = credentials
        self.start_of_week: WeekDay | None = credentials.start_of_week
        self.logger = structlog.get_logger(__name__).bind(
            warehouse_type=self.warehouse_type.value,
            client_id=id(self),
        )

    @property
    def warehouse_type(self) -> WarehouseType:
        """Get the warehouse type for this client."""
        return self._get_warehouse_type()

    @abstractmethod
    def _get_warehouse_type(self) -> WarehouseType:
        """Return the warehouse type for this client."""
        pass

    def get_start_of_week(self) -> WeekDay | None:
        """Return the configured first day of the week, if any."""
        return self.start_of_week

    def map_field_type(self, native_type: str) -> DimensionType:
        """Map a native column type string to a ``DimensionType``."""
        return self.field_types.map_field_type(native_type)

    # Backend hooks

    @abstractmethod
    async def _connect(self) -> Any:
        """
        Open a new native connection.

        Any exception raised here is reported as a connection error.
        """
        pass

    @abstractmethod
    async def _disconnect(self, connection: Any) -> None:
        """Close a native connection."""
        pass

    @abstractmethod
    async def _execute(self, connection: Any, sql: str) -> QueryResult:
        """
        Execute one statement and return its normalized result.

        Any exception other than a ``WarehouseError`` is reported as a query
        error.
        """
        pass

    @abstractmethod
    async def _list_columns(
        self, connection: Any, selectors: list[CatalogSelector]
    ) -> list[CatalogColumn]:
        """List visible columns; filtering happens in ``build_catalog``."""
        pass

    def _timezone_statement(self) -> str | None:
        """Statement forcing the session timezone to UTC."""
        return None

    def _week_start_statement(self, start_of_week: WeekDay) -> str | None:
        """Statement setting the session week start, None if unsupported."""
        return None

    # Public contract

    async def test(self) -> None:
        """Check that the credentials can connect and run a query."""
        await self.run_query("SELECT 1")

    async def run_query(self, sql: str) -> QueryResult:
        """
        Execute SQL text and return its rows and field types.

        Raises:
            WarehouseConnectionError: If connecting or session setup fails
            WarehouseQueryError: If the backend rejects the query
            ParseError: If a result column type cannot be understood
        """

        async def work(connection: Any) -> QueryResult:
            await self._configure_session(connection)
            return await self._run_sql(connection, sql)

        return await self._with_connection(work)

    async def get_catalog(
        self, selectors: Iterable[CatalogSelector | dict[str, str]]
    ) -> WarehouseCatalog:
        """
        Describe the columns of the requested tables.

        Tables that cannot be found are absent from the result.
        """
        requested = as_selectors(selectors)
        if not requested:
            return {}

        async def work(connection: Any) -> list[CatalogColumn]:
            await self._configure_session(connection)
            try:
                return await self._list_columns(connection, requested)
            except WarehouseError:
                raise
            except Exception as e:
                message = sanitize_error_message(str(e))
                self.logger.error("catalog_query_failed", error=message)
                raise WarehouseQueryError(
                    f"{self.warehouse_name} error: {message}"
                ) from e

        columns = await self._with_connection(work)
        catalog = build_catalog(columns, requested, self.map_field_type)
        self.logger.info(
            "catalog_built",
            requested_tables=len(requested),
            listed_columns=len(columns),
            found_tables=sum(
                len(tables)
                for schemas in catalog.values()
                for tables in schemas.values()
            ),
        )
        return catalog

    # Connection lifecycle

    async def _open(self) -> Any:
        self.logger.info("connecting", status="connecting")
        try:
            connection = await self._connect()
        except Exception as e:
            message = sanitize_error_message(str(e))
            self.logger.error("connection_failed", status="error", error=message)
            raise WarehouseConnectionError(
                f"{self.warehouse_name} error: {message}", self.warehouse_type
            ) from e
        self.logger.debug("connection_successful", status="connected")
        return connection

    async def _close(self, connection: Any) -> None:
        await self._disconnect(connection)
        self.logger.debug("disconnected_successfully", status="disconnected")

    async def _with_connection(self, work: Callable[[Any], Awaitable[T]]) -> T:
        return await run_in_connection(
            self._open,
            self._close,
            work,
            warehouse_type=self.warehouse_type,
            logger=self.logger,
        )

    async def _configure_session(self, connection: Any) -> None:
        statements = []
        timezone_statement = self._timezone_statement()
        if timezone_statement:
            statements.append(timezone_statement)
        if self.start_of_week is not None:
            week_start_statement = self._week_start_statement(self.start_of_week)
            if week_start_statement:
                statements.append(week_start_statement)

        for statement in statements:
            try:
                await self._execute(connection, statement)
            except Exception as e:
                message = sanitize_error_message(str(e))
                self.logger.error(
                    "session_configuration_failed", statement=statement, error=message
                )
                raise WarehouseConnectionError(
                    f"{self.warehouse_name} error: failed to configure session: "
                    f"{message}",
                    self.warehouse_type,
                ) from e

        if statements:
            self.logger.debug("session_configured", statements=len(statements))

    async def _run_sql(self, connection: Any, sql: str) -> QueryResult:
        self.logger.info("executing_query", sql=sql_preview(sql))
        start_time = time.time()
        try:
            result = await self._execute(connection, sql)
        except WarehouseError:
            raise
        except Exception as e:
            execution_time = int((time.time() - start_time) * 1000)
            message = sanitize_error_message(str(e))
            self.logger.error(
                "query_failed", execution_time_ms=execution_time, error=message
            )
            raise WarehouseQueryError(
                f"{self.warehouse_name} error: {message}", sql
            ) from e

        execution_time = int((time.time() - start_time) * 1000)
        self.logger.info(
            "query_completed",
            execution_time_ms=execution_time,
            row_count=len(result.rows),
        )
        return result
