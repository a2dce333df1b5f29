"""
Catalog folding.

Backends list columns through their own metadata queries; this module
matches those listings against the requested tables and folds them into
the nested ``database -> schema -> table -> column -> type`` mapping.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import NamedTuple

from .types import DimensionType, WarehouseCatalog


@dataclass(frozen=True)
class CatalogSelector:
    """A table the caller wants described."""

    database: str
    schema: str
    table: str

    def key(self) -> tuple[str, str, str]:
        return (self.database.lower(), self.schema.lower(), self.table.lower())


class CatalogColumn(NamedTuple):
    """One column as listed by a backend metadata query."""

    database: str
    schema: str
    table: str
    column: str
    type_name: str


def as_selectors(
    selectors: Iterable[CatalogSelector | dict[str, str]],
) -> list[CatalogSelector]:
    """Accept selectors as ``CatalogSelector`` objects or plain dicts."""
    return [
        s if isinstance(s, CatalogSelector) else CatalogSelector(**s)
        for s in selectors
    ]


def build_catalog(
    columns: Iterable[CatalogColumn],
    selectors: Iterable[CatalogSelector],
    map_field_type: Callable[[str], DimensionType],
) -> WarehouseCatalog:
    """
    Fold listed columns into a catalog restricted to the selectors.

    Database, schema and table names match case-insensitively and the
    catalog is keyed by the selector's own spelling. Column names are kept
    as the backend reported them. Selectors without any listed column are
    simply absent from the result.
    """
    by_key: dict[tuple[str, str, str], CatalogSelector] = {}
    for selector in selectors:
        by_key.setdefault(selector.key(), selector)

    catalog: WarehouseCatalog = {}
    for column in columns:
        match = by_key.get(
            (column.database.lower(), column.schema.lower(), column.table.lower())
        )
        if match is None:
            continue
        tables = catalog.setdefault(match.database, {}).setdefault(match.schema, {})
        tables.setdefault(match.table, {})[column.column] = map_field_type(
            column.type_name
        )

    return catalog
