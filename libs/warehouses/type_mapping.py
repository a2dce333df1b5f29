"""
Native column type normalization.

Every backend reports column types in its own vocabulary. A
``FieldTypeMapper`` holds one backend's lookup table and applies the shared
algorithm: uppercase, keep the leading alphabetic token (dropping precision,
length and other parameters), look it up, fall back to STRING.
"""

import re
from collections.abc import Iterable, Mapping

from .errors import ParseError
from .types import DimensionType

_LEADING_TOKEN = re.compile(r"^[A-Z]+")


def normalise_type_name(native_type: str, warehouse_name: str) -> str:
    """
    Extract the leading alphabetic token of a native type string.

    ``DECIMAL(10,2)`` becomes ``DECIMAL`` and ``timestamp with time zone``
    becomes ``TIMESTAMP``.

    Raises:
        ParseError: If the string does not start with a letter
    """
    match = _LEADING_TOKEN.match(native_type.upper())
    if match is None:
        raise ParseError(
            f"Cannot understand type from {warehouse_name}: {native_type!r}"
        )
    return match.group(0)


def build_type_table(
    groups: Mapping[DimensionType, Iterable[str]],
) -> dict[str, DimensionType]:
    """Flatten ``{dimension_type: [tokens]}`` into a token lookup table."""
    table: dict[str, DimensionType] = {}
    for dimension_type, tokens in groups.items():
        for token in tokens:
            table[token.upper()] = dimension_type
    return table


class FieldTypeMapper:
    """Maps one backend's native type strings to ``DimensionType``."""

    def __init__(self, warehouse_name: str, table: Mapping[str, DimensionType]):
        self.warehouse_name = warehouse_name
        self.table = dict(table)

    def map_field_type(self, native_type: str) -> DimensionType:
        token = normalise_type_name(native_type, self.warehouse_name)
        return self.table.get(token, DimensionType.STRING)

    def __call__(self, native_type: str) -> DimensionType:
        return self.map_field_type(native_type)
