"""Tests for the column registry and descriptors."""

import polars as pl
import pytest

from order_grid.core.columns import (
    DATE,
    ENUM,
    NUMBER,
    STATUS_ORDER,
    STRING,
    ColumnDescriptor,
    ColumnRegistry,
    order_columns,
)
from order_grid.core.errors import UnknownColumnError


class TestColumnDescriptor:
    """Tests for descriptor defaults and validation."""

    def test_label_defaults_to_title_case(self):
        column = ColumnDescriptor(key="order_date", kind=DATE)
        assert column.label == "Order Date"

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValueError, match="Unknown column kind"):
            ColumnDescriptor(key="price", kind="money")

    def test_enum_requires_values(self):
        with pytest.raises(ValueError, match="requires enum_values"):
            ColumnDescriptor(key="status", kind=ENUM)

    def test_custom_accessor(self):
        """Accessor expressions can derive values from other fields."""
        data = pl.DataFrame({"price": [10.0, 20.0], "quantity": [2, 3]})
        column = ColumnDescriptor(
            key="total", kind=NUMBER, accessor=pl.col("price") * pl.col("quantity")
        )
        result = data.select(column.value_expr().alias("total"))
        assert result["total"].to_list() == [20.0, 60.0]


class TestColumnMatching:
    """Tests for per-kind filter matchers."""

    def test_string_match_is_case_insensitive_substring(self):
        data = pl.DataFrame({"product": ["Apple iPad Pro", "MacBook Air", None]})
        column = ColumnDescriptor(key="product")
        result = data.filter(column.match_expr("IPAD"))
        assert result["product"].to_list() == ["Apple iPad Pro"]

    def test_string_match_is_literal(self):
        """Regex metacharacters in the filter value are matched literally."""
        data = pl.DataFrame({"product": ["a.b", "axb"]})
        column = ColumnDescriptor(key="product")
        assert data.filter(column.match_expr("a.b"))["product"].to_list() == ["a.b"]

    def test_enum_match_is_exact(self):
        data = pl.DataFrame({"status": ["pending", "processing"]})
        column = ColumnDescriptor(key="status", kind=ENUM, enum_values=STATUS_ORDER)
        assert data.filter(column.match_expr("pending")).height == 1
        assert data.filter(column.match_expr("pend")).height == 0


class TestColumnSortExpr:
    """Tests for the comparator expressions."""

    def test_enum_sorts_by_declared_order(self):
        data = pl.DataFrame(
            {"status": ["failed", "pending", "delivered", "shipped", "processing"]}
        )
        column = ColumnDescriptor(key="status", kind=ENUM, enum_values=STATUS_ORDER)
        result = data.sort(column.sort_expr())
        assert result["status"].to_list() == list(STATUS_ORDER)

    def test_undeclared_enum_value_sorts_last(self):
        data = pl.DataFrame({"status": ["on-hold", "failed", "pending"]})
        column = ColumnDescriptor(key="status", kind=ENUM, enum_values=STATUS_ORDER)
        result = data.sort(column.sort_expr())
        assert result["status"].to_list() == ["pending", "failed", "on-hold"]

    def test_enum_null_stays_null(self):
        data = pl.DataFrame({"status": [None, "on-hold", "pending"]})
        column = ColumnDescriptor(key="status", kind=ENUM, enum_values=STATUS_ORDER)
        ranks = data.select(column.sort_expr()).to_series().to_list()
        assert ranks == [None, len(STATUS_ORDER), 0]


class TestColumnRegistry:
    """Tests for registration and lookup."""

    def test_preserves_registration_order(self):
        registry = ColumnRegistry(
            [ColumnDescriptor(key="b"), ColumnDescriptor(key="a")]
        )
        assert registry.keys() == ["b", "a"]
        assert [column.key for column in registry] == ["b", "a"]
        assert len(registry) == 2

    def test_duplicate_key_rejected(self):
        registry = ColumnRegistry([ColumnDescriptor(key="price", kind=NUMBER)])
        with pytest.raises(ValueError, match="already registered"):
            registry.register(ColumnDescriptor(key="price", kind=NUMBER))

    def test_unknown_key_lists_available(self):
        registry = ColumnRegistry([ColumnDescriptor(key="price", kind=NUMBER)])
        with pytest.raises(UnknownColumnError, match="Available columns"):
            registry.get("cost")

    def test_unknown_column_error_is_key_error(self):
        assert issubclass(UnknownColumnError, KeyError)

    def test_searchable(self):
        registry = order_columns()
        assert [column.key for column in registry.searchable()] == ["product"]

    def test_empty_frame_schema(self):
        registry = ColumnRegistry(
            [
                ColumnDescriptor(key="product"),
                ColumnDescriptor(key="price", kind=NUMBER),
                ColumnDescriptor(key="order_date", kind=DATE),
                ColumnDescriptor(key="status", kind=ENUM, enum_values=STATUS_ORDER),
                ColumnDescriptor(
                    key="total",
                    kind=NUMBER,
                    accessor=pl.col("price") * pl.col("quantity"),
                ),
            ]
        )
        frame = registry.empty_frame("id")
        assert frame.height == 0
        assert frame.schema == pl.Schema(
            {
                "id": pl.Utf8,
                "product": pl.Utf8,
                "price": pl.Float64,
                "order_date": pl.Date,
                "status": pl.Enum(list(STATUS_ORDER)),
            }
        )


class TestRegistryFromSchema:
    """Tests for auto-generated descriptors."""

    def test_kinds_from_dtypes(self, sample_orders):
        registry = ColumnRegistry.from_schema(sample_orders.schema, exclude=["id"])

        assert "id" not in registry
        assert registry.get("price").kind == NUMBER
        assert registry.get("quantity").kind == NUMBER
        assert registry.get("order_date").kind == DATE
        assert registry.get("product").kind == STRING
        status = registry.get("status")
        assert status.kind == ENUM
        assert status.enum_values == STATUS_ORDER

    def test_string_columns_are_searchable(self, sample_orders):
        registry = ColumnRegistry.from_schema(sample_orders.schema, exclude=["id"])
        assert registry.get("product").searchable
        assert not registry.get("price").searchable
        assert not registry.get("price").filterable


class TestOrderColumns:
    """Tests for the order table registry."""

    def test_status_uses_declared_order(self):
        status = order_columns().get("status")
        assert status.kind == ENUM
        assert status.enum_values == (
            "pending",
            "processing",
            "shipped",
            "delivered",
            "failed",
        )

    def test_display_only_image_column(self):
        image = order_columns().get("image_url")
        assert not image.sortable
        assert not image.filterable
        assert image.hideable
