"""Tests for folding column listings into a catalog."""

import pytest

from libs.warehouses.catalog import (
    CatalogColumn,
    CatalogSelector,
    as_selectors,
    build_catalog,
)
from libs.warehouses.clients.postgres import map_field_type
from libs.warehouses.types import DimensionType

LISTED_COLUMNS = [
    CatalogColumn("ANALYTICS", "PUBLIC", "ORDERS", "ID", "integer"),
    CatalogColumn("ANALYTICS", "PUBLIC", "ORDERS", "Placed_At", "timestamptz"),
    CatalogColumn("ANALYTICS", "PUBLIC", "CUSTOMERS", "NAME", "text"),
    CatalogColumn("ANALYTICS", "STAGING", "ORDERS", "ID", "integer"),
]


class TestBuildCatalog:
    """Test the catalog fold."""

    def test_keys_use_selector_spelling(self):
        """Test case-insensitive matching keyed by the caller's spelling."""
        catalog = build_catalog(
            LISTED_COLUMNS,
            [CatalogSelector("analytics", "public", "orders")],
            map_field_type,
        )

        assert catalog == {
            "analytics": {
                "public": {
                    "orders": {
                        "ID": DimensionType.NUMBER,
                        "Placed_At": DimensionType.TIMESTAMP,
                    }
                }
            }
        }

    def test_column_names_are_not_case_folded(self):
        """Test that column names stay exactly as the backend reported."""
        catalog = build_catalog(
            LISTED_COLUMNS,
            [CatalogSelector("ANALYTICS", "PUBLIC", "ORDERS")],
            map_field_type,
        )

        assert "Placed_At" in catalog["ANALYTICS"]["PUBLIC"]["ORDERS"]
        assert "placed_at" not in catalog["ANALYTICS"]["PUBLIC"]["ORDERS"]

    def test_unrequested_tables_are_discarded(self):
        """Test that only requested triples appear."""
        catalog = build_catalog(
            LISTED_COLUMNS,
            [CatalogSelector("analytics", "staging", "orders")],
            map_field_type,
        )

        assert list(catalog) == ["analytics"]
        assert list(catalog["analytics"]) == ["staging"]
        assert catalog["analytics"]["staging"] == {
            "orders": {"ID": DimensionType.NUMBER}
        }

    def test_missing_tables_are_absent(self):
        """Test that selectors matching nothing produce no entry."""
        catalog = build_catalog(
            LISTED_COLUMNS,
            [CatalogSelector("analytics", "public", "refunds")],
            map_field_type,
        )

        assert catalog == {}

    def test_first_matching_selector_wins(self):
        """Test duplicate selectors differing only in case."""
        catalog = build_catalog(
            LISTED_COLUMNS,
            [
                CatalogSelector("Analytics", "Public", "Customers"),
                CatalogSelector("ANALYTICS", "PUBLIC", "CUSTOMERS"),
            ],
            map_field_type,
        )

        assert catalog == {
            "Analytics": {"Public": {"Customers": {"NAME": DimensionType.STRING}}}
        }

    def test_no_selectors_gives_empty_catalog(self):
        assert build_catalog(LISTED_COLUMNS, [], map_field_type) == {}


class TestSelectors:
    """Test selector handling."""

    def test_as_selectors_accepts_dicts(self):
        selectors = as_selectors(
            [
                {"database": "db", "schema": "s", "table": "t"},
                CatalogSelector("db", "s", "u"),
            ]
        )

        assert selectors == [
            CatalogSelector("db", "s", "t"),
            CatalogSelector("db", "s", "u"),
        ]

    def test_selector_key_is_case_insensitive(self):
        assert CatalogSelector("DB", "S", "T").key() == ("db", "s", "t")

    def test_selectors_are_immutable(self):
        selector = CatalogSelector("db", "s", "t")
        with pytest.raises(AttributeError):
            selector.table = "other"
