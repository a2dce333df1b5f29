"""
Scoped connection handling.

A connection lives for exactly one client call. ``run_in_connection`` opens
it, runs the given work and closes it on every exit path, keeping the error
that triggered cleanup ahead of any error raised by the cleanup itself.
"""

import asyncio
import functools
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import structlog

from .errors import WarehouseConnectionError, sanitize_error_message
from .types import WarehouseType

T = TypeVar("T")
C = TypeVar("C")


async def run_sync(func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Run a blocking driver call in the default executor."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, functools.partial(func, *args, **kwargs))


async def run_in_connection(
    open_connection: Callable[[], Awaitable[C]],
    close_connection: Callable[[C], Awaitable[None]],
    work: Callable[[C], Awaitable[T]],
    warehouse_type: WarehouseType | None = None,
    logger: Any = None,
) -> T:
    """
    Open a connection, run ``work`` with it and always close it.

    Args:
        open_connection: Coroutine function returning a live connection
        close_connection: Coroutine function releasing that connection
        work: Coroutine function using the connection
        warehouse_type: Backend reported on teardown errors
        logger: Bound logger, defaults to this module's logger

    Returns:
        Whatever ``work`` returns

    Raises:
        WarehouseConnectionError: If teardown fails after ``work`` succeeded
    """
    logger = logger or structlog.get_logger(__name__)
    connection = await open_connection()
    try:
        result = await work(connection)
    except BaseException:
        try:
            await close_connection(connection)
        except Exception as teardown_error:
            logger.warning(
                "connection_teardown_failed",
                error=sanitize_error_message(str(teardown_error)),
                masked_by_earlier_error=True,
            )
        raise

    try:
        await close_connection(connection)
    except Exception as teardown_error:
        message = sanitize_error_message(str(teardown_error))
        logger.error("connection_teardown_failed", error=message)
        raise WarehouseConnectionError(
            f"Failed to close connection: {message}", warehouse_type
        ) from teardown_error

    return result
