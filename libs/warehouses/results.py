"""Conversion of raw driver output into ``QueryResult``."""

from collections.abc import Callable, Iterable, Mapping, Sequence
from datetime import datetime, timezone
from typing import Any

from .types import DimensionType, FieldInfo, QueryResult


def normalize_cell(value: Any) -> Any:
    """
    Normalize one raw cell value.

    Datetimes become timezone-aware UTC datetimes; naive ones are read as
    UTC since every session runs in UTC. Anything else passes through.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    return value


def build_query_result(
    columns: Sequence[tuple[str, str]],
    rows: Iterable[Sequence[Any] | Mapping[str, Any]],
    map_field_type: Callable[[str], DimensionType],
    parse_cell: Callable[[Any], Any] = normalize_cell,
) -> QueryResult:
    """
    Build a ``QueryResult`` from column descriptions and raw rows.

    Args:
        columns: ``(name, native_type)`` pairs in result order
        rows: Positional rows, or mappings keyed by column name
        map_field_type: The backend's type normalizer
        parse_cell: Cell normalizer

    Returns:
        QueryResult whose fields and rows share the same column names
    """
    fields = {name: FieldInfo(type=map_field_type(native)) for name, native in columns}
    names = [name for name, _ in columns]

    parsed_rows = []
    for row in rows:
        if isinstance(row, Mapping):
            values = [row[name] for name in names]
        else:
            values = list(row)
        parsed_rows.append(
            {name: parse_cell(value) for name, value in zip(names, values)}
        )

    return QueryResult(fields=fields, rows=parsed_rows)


def empty_result() -> QueryResult:
    """Result of a statement that returns no result set."""
    return QueryResult(fields={}, rows=[])
