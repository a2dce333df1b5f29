"""
Shared data structures for warehouse clients.

This module defines the canonical vocabulary every backend is normalized to:
the dimension type enum, the week-start convention, the query result shape
and the nested catalog mapping.
"""

from enum import Enum, IntEnum
from typing import Any

from pydantic import BaseModel


class WarehouseType(str, Enum):
    """Supported warehouse backends."""

    SNOWFLAKE = "snowflake"
    BIGQUERY = "bigquery"
    REDSHIFT = "redshift"
    POSTGRES = "postgres"
    DATABRICKS = "databricks"
    DUCKDB = "duckdb"


class DimensionType(str, Enum):
    """Canonical column types exposed above the warehouse layer."""

    STRING = "string"
    NUMBER = "number"
    DATE = "date"
    TIMESTAMP = "timestamp"
    BOOLEAN = "boolean"


class WeekDay(IntEnum):
    """Day of week, Monday=0 through Sunday=6."""

    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6


class FieldInfo(BaseModel):
    """Type information about a result column."""

    type: DimensionType


class QueryResult(BaseModel):
    """Result of a warehouse query execution."""

    fields: dict[str, FieldInfo]
    rows: list[dict[str, Any]]

    def to_dict(self) -> dict[str, Any]:
        """Convert result to dictionary format."""
        return {
            "fields": {
                name: {"type": field.type} for name, field in self.fields.items()
            },
            "rows": self.rows,
        }


# database -> schema -> table -> column -> type
WarehouseCatalog = dict[str, dict[str, dict[str, dict[str, DimensionType]]]]
