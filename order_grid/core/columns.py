"""Column registry: how each field is read, compared and matched."""

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

import polars as pl

from .errors import UnknownColumnError

# Semantic value kinds. The kind decides both the comparator used by the
# sort stage and the matcher used by the filter stage.
STRING = "string"
NUMBER = "number"
DATE = "date"
ENUM = "enum"
COLUMN_KINDS = (STRING, NUMBER, DATE, ENUM)

# Declared business order for order status, used when sorting by status
STATUS_ORDER = ("pending", "processing", "shipped", "delivered", "failed")

_NUMERIC_DTYPES = (
    pl.Int8,
    pl.Int16,
    pl.Int32,
    pl.Int64,
    pl.UInt8,
    pl.UInt16,
    pl.UInt32,
    pl.UInt64,
    pl.Float32,
    pl.Float64,
)
_TEMPORAL_DTYPES = (pl.Date, pl.Datetime, pl.Time)


@dataclass(frozen=True, eq=False)
class ColumnDescriptor:
    """
    Data-only description of one table column.

    Descriptors never carry rendering logic; display formatting is owned by
    the table's formatter map.

    Attributes:
        key: Field key, unique within a registry
        label: Display title (defaults to the key in title case)
        kind: One of 'string', 'number', 'date', 'enum'
        accessor: Polars expression producing the value (defaults to
            ``pl.col(key)``). Must be defined for every row.
        sortable: Whether the sort stage accepts this column
        filterable: Whether the filter stage accepts this column
        hideable: Whether the column may be hidden
        searchable: Whether the global search looks at this column
        enum_values: Declared order of allowed values (enum columns only)
    """

    key: str
    label: Optional[str] = None
    kind: str = STRING
    accessor: Optional[pl.Expr] = None
    sortable: bool = True
    filterable: bool = True
    hideable: bool = True
    searchable: bool = False
    enum_values: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.kind not in COLUMN_KINDS:
            raise ValueError(
                f"Unknown column kind '{self.kind}' for column '{self.key}'. "
                f"Expected one of: {list(COLUMN_KINDS)}"
            )
        if self.kind == ENUM and not self.enum_values:
            raise ValueError(f"Enum column '{self.key}' requires enum_values")
        if self.label is None:
            object.__setattr__(self, "label", self.key.replace("_", " ").title())
        object.__setattr__(self, "enum_values", tuple(self.enum_values))

    def value_expr(self) -> pl.Expr:
        """Expression yielding this column's value for each record."""
        if self.accessor is not None:
            return self.accessor
        return pl.col(self.key)

    def sort_expr(self) -> pl.Expr:
        """
        Expression whose natural order is this column's comparator.

        Strings, numbers and dates sort natively. Enum values are replaced
        by their position in ``enum_values``; values outside the declared
        list rank after all declared ones. Nulls stay null.
        """
        if self.kind == ENUM:
            ranks = {value: rank for rank, value in enumerate(self.enum_values)}
            value = self.value_expr()
            ranked = value.cast(pl.Utf8).replace_strict(
                ranks, default=len(self.enum_values), return_dtype=pl.UInt32
            )
            return (
                pl.when(value.is_null())
                .then(pl.lit(None, dtype=pl.UInt32))
                .otherwise(ranked)
                .alias(self.key)
            )
        return self.value_expr()

    def empty_dtype(self) -> pl.DataType:
        """Dtype used for this column when a table starts with no records."""
        if self.kind == NUMBER:
            return pl.Float64
        if self.kind == DATE:
            return pl.Date
        if self.kind == ENUM:
            return pl.Enum(list(self.enum_values))
        return pl.Utf8

    def match_expr(self, value: str) -> pl.Expr:
        """
        Boolean expression for rows matching a filter value.

        Enum columns match the token exactly. Every other kind matches a
        case-insensitive substring of the value's text form.
        """
        text = self.value_expr().cast(pl.Utf8)
        if self.kind == ENUM:
            matched = text == value
        else:
            matched = text.str.to_lowercase().str.contains(value.lower(), literal=True)
        return matched.fill_null(False)

    def __repr__(self) -> str:
        return f"ColumnDescriptor(key='{self.key}', kind='{self.kind}')"


class ColumnRegistry:
    """
    Ordered collection of column descriptors.

    Iteration yields descriptors in registration (display) order.
    """

    def __init__(self, columns: Sequence[ColumnDescriptor] = ()):
        self._columns: Dict[str, ColumnDescriptor] = {}
        for column in columns:
            self.register(column)

    def register(self, column: ColumnDescriptor) -> ColumnDescriptor:
        """
        Add a descriptor to the registry.

        Raises:
            ValueError: If a descriptor with the same key exists
        """
        if column.key in self._columns:
            raise ValueError(f"Column '{column.key}' is already registered")
        self._columns[column.key] = column
        return column

    def get(self, key: str) -> ColumnDescriptor:
        """
        Get a descriptor by key.

        Raises:
            UnknownColumnError: If no column is registered with that key
        """
        if key not in self._columns:
            available = list(self._columns.keys())
            raise UnknownColumnError(
                f"No column registered with key '{key}'. "
                f"Available columns: {available}"
            )
        return self._columns[key]

    def keys(self) -> List[str]:
        return list(self._columns.keys())

    def empty_frame(self, index_field: str) -> pl.DataFrame:
        """
        Zero-row frame with the index field and every plain column.

        Columns read through an accessor are derived from other fields and
        get no field of their own.
        """
        schema = {index_field: pl.Utf8}
        for column in self._columns.values():
            if column.accessor is None and column.key != index_field:
                schema[column.key] = column.empty_dtype()
        return pl.DataFrame(schema=schema)

    def searchable(self) -> List[ColumnDescriptor]:
        """Descriptors consulted by the global search."""
        return [column for column in self._columns.values() if column.searchable]

    def __contains__(self, key: object) -> bool:
        return key in self._columns

    def __iter__(self) -> Iterator[ColumnDescriptor]:
        return iter(self._columns.values())

    def __len__(self) -> int:
        return len(self._columns)

    @classmethod
    def from_schema(
        cls, schema: pl.Schema, exclude: Sequence[str] = ()
    ) -> "ColumnRegistry":
        """
        Auto-generate descriptors from a polars schema.

        Numeric dtypes become number columns, temporal dtypes date columns,
        ``pl.Enum`` dtypes enum columns in category order, and everything
        else string columns. String columns take part in global search.

        Args:
            schema: Schema of the record frame
            exclude: Field names to leave out (e.g. the index field)

        Returns:
            A new registry
        """
        registry = cls()
        for name, dtype in zip(schema.names(), schema.dtypes()):
            if name in exclude:
                continue
            if isinstance(dtype, pl.Enum):
                column = ColumnDescriptor(
                    key=name, kind=ENUM, enum_values=tuple(dtype.categories.to_list())
                )
            elif dtype in _NUMERIC_DTYPES:
                column = ColumnDescriptor(key=name, kind=NUMBER, filterable=False)
            elif dtype in _TEMPORAL_DTYPES:
                column = ColumnDescriptor(key=name, kind=DATE, filterable=False)
            else:
                column = ColumnDescriptor(key=name, kind=STRING, searchable=True)
            registry.register(column)
        return registry


def order_columns() -> ColumnRegistry:
    """Column registry for the order table."""
    return ColumnRegistry(
        [
            ColumnDescriptor(key="product", searchable=True),
            ColumnDescriptor(key="category"),
            ColumnDescriptor(key="quantity", kind=NUMBER, filterable=False),
            ColumnDescriptor(key="customer", sortable=False),
            ColumnDescriptor(key="company", sortable=False),
            ColumnDescriptor(key="status", kind=ENUM, enum_values=STATUS_ORDER),
            ColumnDescriptor(key="price", kind=NUMBER, filterable=False),
            ColumnDescriptor(
                key="order_date", label="Order Date", kind=DATE, filterable=False
            ),
            ColumnDescriptor(
                key="image_url",
                label="Image",
                sortable=False,
                filterable=False,
            ),
        ]
    )
