# ========================
# src/pipeline/table.py
# ========================

"""
Table Module

The in-memory table every pipeline step reads and returns. A Table is an
ordered sequence of records sharing one fixed column list. Tables are never
modified after construction: each operation builds a new Table.
"""

import re
import logging
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence

from .exceptions import ColumnNotFoundError, DuplicateColumnError, ShapeMismatchError

logger = logging.getLogger(__name__)

INTEGER_PATTERN = re.compile(r"^[+-]?\d+$")
FLOAT_PATTERN = re.compile(r"^[+-]?(\d+\.\d*|\.\d+|\d+)([eE][+-]?\d+)?$")

MONTH_NAMES = r"(jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)[a-z]*\.?"
DATE_PATTERNS = [
    re.compile(r"^\d{4}-\d{1,2}(-\d{1,2})?$"),
    re.compile(r"^\d{4}/\d{1,2}/\d{1,2}$"),
    re.compile(r"^\d{1,2}/\d{1,2}/\d{4}$"),
    re.compile(r"^" + MONTH_NAMES + r"[ -]\d{4}$", re.IGNORECASE),
    re.compile(r"^\d{1,2}[ -]" + MONTH_NAMES + r"[ -]\d{4}$", re.IGNORECASE),
]


def parse_scalar(text: str) -> Any:
    """Convert a single text value to int or float when it looks numeric."""
    if INTEGER_PATTERN.match(text):
        return int(text)
    if FLOAT_PATTERN.match(text):
        return float(text)
    return text


def coerce_values(values: Sequence[Any]) -> List[Any]:
    """
    Give a column of raw values one uniform scalar type.

    Text values are converted only when every non-missing value in the
    column is numeric; a column mixing numbers and words stays text.

    Args:
        values (list): Raw column values (strings or None)

    Returns:
        list: Values converted to int, float or left as str
    """
    present = [v for v in values if isinstance(v, str)]
    if not present:
        return list(values)

    if all(INTEGER_PATTERN.match(v) for v in present):
        return [int(v) if isinstance(v, str) else v for v in values]
    if all(FLOAT_PATTERN.match(v) for v in present):
        return [float(v) if isinstance(v, str) else v for v in values]
    return list(values)


def is_date_like(value: str) -> bool:
    return any(pattern.match(value.strip()) for pattern in DATE_PATTERNS)


def infer_column_type(values: Iterable[Any]) -> str:
    """
    Infer the scalar type category of a column.

    Returns:
        str: One of 'integer', 'float', 'text', 'date' or 'missing'
    """
    present = [v for v in values if v is not None]
    if not present:
        return "missing"
    if all(isinstance(v, int) and not isinstance(v, bool) for v in present):
        return "integer"
    if all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in present):
        return "float"
    if all(isinstance(v, str) for v in present) and all(is_date_like(v) for v in present):
        return "date"
    return "text"


class Table:
    """
    An immutable, rectangular collection of records.

    Every record holds a value (or None for missing) for every column.
    Accessors return copies so callers cannot change a table after the fact.
    """

    def __init__(self, columns: Sequence[str], records: Iterable[Mapping[str, Any]] = ()):
        """
        Build a table, validating and copying the records.

        Args:
            columns (list): Column names in display order
            records (iterable): Mappings with exactly those column names

        Raises:
            DuplicateColumnError: If a column name appears twice
            ShapeMismatchError: If a record does not match the column set
        """
        self._columns = _check_unique(columns)
        column_set = set(self._columns)

        rows = []
        for index, record in enumerate(records):
            if set(record.keys()) != column_set:
                raise ShapeMismatchError(
                    f"Record {index} has columns {sorted(record.keys())}, "
                    f"expected {list(self._columns)}",
                    row_index=index,
                )
            rows.append({name: record[name] for name in self._columns})
        self._rows = tuple(rows)

    @classmethod
    def _trusted(cls, columns: Sequence[str], rows: Iterable[Dict[str, Any]]) -> "Table":
        """Wrap rows that operations in this package have freshly built."""
        table = cls.__new__(cls)
        table._columns = tuple(columns)
        table._rows = tuple(rows)
        return table

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]],
                     columns: Optional[Sequence[str]] = None) -> "Table":
        """
        Build a table from a list of dictionaries.

        When ``columns`` is omitted the column order is taken from the
        first record.
        """
        records = list(records)
        if columns is None:
            columns = list(records[0].keys()) if records else []
        return cls(columns, records)

    @classmethod
    def from_columns(cls, data: Mapping[str, Sequence[Any]]) -> "Table":
        """Build a table from a mapping of column name to equal-length value lists."""
        columns = list(data.keys())
        lengths = {name: len(values) for name, values in data.items()}
        if len(set(lengths.values())) > 1:
            raise ShapeMismatchError(f"Columns have different lengths: {lengths}")

        num_rows = next(iter(lengths.values()), 0)
        rows = [{name: data[name][i] for name in columns} for i in range(num_rows)]
        return cls._trusted(_check_unique(columns), rows)

    @classmethod
    def empty(cls, columns: Sequence[str] = ()) -> "Table":
        return cls(columns, [])

    # Shape and schema

    @property
    def columns(self) -> List[str]:
        return list(self._columns)

    @property
    def num_rows(self) -> int:
        return len(self._rows)

    @property
    def num_columns(self) -> int:
        return len(self._columns)

    @property
    def shape(self):
        return (len(self._rows), len(self._columns))

    def __len__(self) -> int:
        return len(self._rows)

    def has_column(self, name: str) -> bool:
        return name in self._columns

    def require_columns(self, names: Iterable[str]) -> None:
        """Raise ColumnNotFoundError for the first name the table lacks."""
        for name in names:
            if name not in self._columns:
                raise ColumnNotFoundError(name, self._columns)

    def column(self, name: str) -> List[Any]:
        """Return the values of one column, in row order."""
        self.require_columns([name])
        return [row[name] for row in self._rows]

    def schema(self) -> Dict[str, str]:
        """Map each column name to its inferred type category."""
        return {name: infer_column_type(row[name] for row in self._rows) for name in self._columns}

    # Row access

    def records(self) -> List[Dict[str, Any]]:
        """Return copies of all records."""
        return [dict(row) for row in self._rows]

    def row(self, index: int) -> Dict[str, Any]:
        return dict(self._rows[index])

    def __iter__(self) -> Iterator[Dict[str, Any]]:
        for row in self._rows:
            yield dict(row)

    def _views(self) -> Iterator[Mapping[str, Any]]:
        """Read-only views of the stored rows, for row-wise evaluation."""
        for row in self._rows:
            yield MappingProxyType(row)

    def __eq__(self, other):
        if not isinstance(other, Table):
            return NotImplemented
        return self._columns == other._columns and self._rows == other._rows

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Table({self.num_rows} rows x {self.num_columns} columns: {list(self._columns)})"

    def __str__(self) -> str:
        from .display import format_table
        return format_table(self)

    # Chaining

    def pipe(self, func, *args, **kwargs):
        """Call ``func(self, *args, **kwargs)``, passing this table down a chain."""
        return func(self, *args, **kwargs)

    def reshape_long(self, id_columns, value_columns=None, names_to="key",
                     values_to="value", drop_missing=False) -> "Table":
        from .reshape import reshape_long
        return reshape_long(self, id_columns, value_columns, names_to=names_to,
                            values_to=values_to, drop_missing=drop_missing)

    def split_column(self, column, into, sep, extra="merge", fill="error",
                     remove=True, convert=False) -> "Table":
        from .reshape import split_column
        return split_column(self, column, into, sep, extra=extra, fill=fill,
                            remove=remove, convert=convert)

    def sort(self, by, descending=None) -> "Table":
        from .transformation import sort
        return sort(self, by, descending)

    def rename(self, mapping=None, **renames) -> "Table":
        from .transformation import rename
        return rename(self, mapping, **renames)

    def select(self, *columns, **renames) -> "Table":
        from .transformation import select
        return select(self, *columns, **renames)

    def distinct(self, columns=None, keep_all=False) -> "Table":
        from .transformation import distinct
        return distinct(self, columns, keep_all=keep_all)

    def derive(self, column, expression) -> "Table":
        from .transformation import derive
        return derive(self, column, expression)

    def derive_many(self, **expressions) -> "Table":
        from .transformation import derive_many
        return derive_many(self, **expressions)

    def filter(self, *predicates) -> "Table":
        from .transformation import filter_rows
        return filter_rows(self, *predicates)

    def limit(self, n: int) -> "Table":
        from .transformation import limit
        return limit(self, n)

    def show(self, n: int = 10) -> str:
        from .display import format_table
        return format_table(self, n)

    def to_csv(self, file_path, na_rep: str = "", na_values=None) -> str:
        from .storage import write_csv
        return write_csv(self, file_path, na_rep=na_rep, na_values=na_values)


def _check_unique(columns: Sequence[str]) -> tuple:
    seen = set()
    for name in columns:
        if name in seen:
            raise DuplicateColumnError(name)
        seen.add(name)
    return tuple(columns)
