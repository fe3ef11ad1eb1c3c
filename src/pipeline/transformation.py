# ========================
# src/pipeline/transformation.py
# ========================

"""
Data Transformation Module

Row and column operations over a Table: sort, rename, select, distinct,
derive, filter and limit. Every function takes a Table and returns a new
Table; the input is never modified.
"""

import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from .exceptions import ColumnNotFoundError, DuplicateColumnError
from .expressions import Expr
from .table import Table

logger = logging.getLogger(__name__)


class Descending:
    """Marks a sort column as descending, e.g. ``sort(t, ["city", desc("year")])``."""

    def __init__(self, name: str):
        self.name = name

    def __repr__(self):
        return f"desc({self.name!r})"


def desc(name: str) -> Descending:
    return Descending(name)


def _sort_spec(by, descending) -> List[Tuple[str, bool]]:
    """Normalise the ``by``/``descending`` arguments into (column, descending) pairs."""
    if isinstance(by, (str, Descending)):
        by = [by]
    by = list(by)

    if descending is None:
        flags = [False] * len(by)
    elif isinstance(descending, bool):
        flags = [descending] * len(by)
    else:
        flags = list(descending)
        if len(flags) != len(by):
            raise ValueError(
                f"Got {len(flags)} sort directions for {len(by)} sort columns"
            )

    spec = []
    for key, flag in zip(by, flags):
        if isinstance(key, Descending):
            spec.append((key.name, True))
        else:
            spec.append((key, flag))
    return spec


def sort(table: Table, by, descending=None) -> Table:
    """
    Stable sort on one or more columns.

    Later columns break ties among rows equal on earlier columns. Missing
    values always sort after present ones, whichever the direction.

    Args:
        table (Table): Input table
        by (str or list): Column name(s), optionally wrapped in ``desc()``
        descending (bool or list[bool]): Direction for all or each column

    Returns:
        Table: Rows in the new order
    """
    spec = _sort_spec(by, descending)
    table.require_columns(name for name, _ in spec)

    rows = list(table._rows)
    # Sorting on the least significant key first lets stability carry ties.
    for name, is_descending in reversed(spec):
        if is_descending:
            rows.sort(key=lambda r: (0, 0) if r[name] is None else (1, r[name]), reverse=True)
        else:
            rows.sort(key=lambda r: (1, 0) if r[name] is None else (0, r[name]))

    logger.debug(f"Sorted {len(rows)} rows by {spec}")
    return Table._trusted(table._columns, rows)


def _rename_pairs(mapping: Optional[Mapping[str, str]], renames: Dict[str, str]) -> List[Tuple[str, str]]:
    pairs = list((mapping or {}).items())
    pairs.extend(renames.items())
    return pairs


def rename(table: Table, mapping: Optional[Mapping[str, str]] = None, **renames: str) -> Table:
    """
    Rename columns, keeping their position and values.

    Renames are given as ``new_name=old_name``, either in ``mapping`` or as
    keyword arguments.

    Raises:
        ColumnNotFoundError: If an old name is not a column
        DuplicateColumnError: If the result would repeat a column name
    """
    old_to_new = {}
    for new_name, old_name in _rename_pairs(mapping, renames):
        table.require_columns([old_name])
        if old_name in old_to_new:
            raise ValueError(f"Column '{old_name}' is renamed more than once")
        old_to_new[old_name] = new_name

    columns = [old_to_new.get(name, name) for name in table._columns]
    if len(set(columns)) != len(columns):
        seen = set()
        for name in columns:
            if name in seen:
                raise DuplicateColumnError(name)
            seen.add(name)

    rows = [
        {old_to_new.get(name, name): value for name, value in row.items()}
        for row in table._rows
    ]
    logger.debug(f"Renamed columns: {old_to_new}")
    return Table._trusted(columns, rows)


ColumnSpec = Union[str, Tuple[str, str], Mapping[str, str]]


def select(table: Table, *columns: ColumnSpec, **renames: str) -> Table:
    """
    Project the table onto a list of columns, in the given order.

    Each positional entry is a column name, a ``(new_name, old_name)`` pair
    or a mapping of ``new_name: old_name``; keyword arguments are extra
    ``new_name=old_name`` renames placed after the positional entries.
    Columns not listed are dropped.

    Example:
        select(table, "city", "year", national_index="National.US")
    """
    pairs = []  # (output name, source name)
    for entry in columns:
        if isinstance(entry, str):
            pairs.append((entry, entry))
        elif isinstance(entry, tuple):
            new_name, old_name = entry
            pairs.append((new_name, old_name))
        elif isinstance(entry, Mapping):
            pairs.extend(entry.items())
        else:
            raise TypeError(f"Unsupported column specification: {entry!r}")
    pairs.extend(renames.items())

    table.require_columns(old for _, old in pairs)
    seen = set()
    for new_name, _ in pairs:
        if new_name in seen:
            raise DuplicateColumnError(new_name)
        seen.add(new_name)

    rows = [{new: row[old] for new, old in pairs} for row in table._rows]
    logger.debug(f"Selected columns: {[new for new, _ in pairs]}")
    return Table._trusted([new for new, _ in pairs], rows)


def distinct(table: Table, columns: Optional[Iterable[str]] = None, keep_all: bool = False) -> Table:
    """
    Keep the first row for each unique combination of ``columns``.

    Args:
        table (Table): Input table
        columns (list): Columns that define uniqueness (all columns if omitted)
        keep_all (bool): Keep every column of the first matching row instead of
            only the ``columns``

    Returns:
        Table: Unique rows in first-occurrence order
    """
    if isinstance(columns, str):
        columns = [columns]
    key_columns = list(columns) if columns is not None else list(table._columns)
    table.require_columns(key_columns)

    seen = set()
    rows = []
    for row in table._rows:
        key = tuple(row[name] for name in key_columns)
        if key in seen:
            continue
        seen.add(key)
        rows.append(dict(row) if keep_all else {name: row[name] for name in key_columns})

    out_columns = table._columns if keep_all else key_columns
    logger.debug(f"Distinct on {key_columns}: {len(table)} -> {len(rows)} rows")
    return Table._trusted(out_columns, rows)


def _row_function(table: Table, expression) -> Callable[[Mapping[str, Any]], Any]:
    """Turn an expression, callable or constant into a per-row function."""
    if isinstance(expression, Expr):
        table.require_columns(expression.columns())
        return expression.evaluate

    if callable(expression):
        def call(row):
            try:
                return expression(row)
            except KeyError as exc:
                name = exc.args[0] if exc.args else ""
                if name in table._columns:
                    raise
                raise ColumnNotFoundError(name, table._columns) from exc
        return call

    return lambda row: expression


def derive(table: Table, column: str, expression) -> Table:
    """
    Compute a column from other values in the same row.

    An existing column is overwritten in place; a new one is appended.
    Row count and every other column are left unchanged.

    Args:
        table (Table): Input table
        column (str): Name of the column to create or overwrite
        expression: A column expression, a callable taking the row mapping,
            or a constant

    Returns:
        Table: Table with the derived column
    """
    compute = _row_function(table, expression)

    rows = []
    for row, view in zip(table._rows, table._views()):
        new_row = dict(row)
        new_row[column] = compute(view)
        rows.append(new_row)

    columns = list(table._columns)
    if column not in columns:
        columns.append(column)
    logger.debug(f"Derived column '{column}' for {len(rows)} rows")
    return Table._trusted(columns, rows)


def derive_many(table: Table, **expressions) -> Table:
    """Apply several derivations in order; later ones see earlier results."""
    for column, expression in expressions.items():
        table = derive(table, column, expression)
    return table


def filter_rows(table: Table, *predicates) -> Table:
    """
    Keep the rows for which every predicate is true.

    Predicates are column expressions or callables taking the row mapping.
    A predicate that evaluates to missing counts as not true, so the row is
    dropped. Use ``|`` inside one predicate for OR.
    """
    checks = [_row_function(table, predicate) for predicate in predicates]

    rows = []
    for row, view in zip(table._rows, table._views()):
        if all(_is_true(check(view)) for check in checks):
            rows.append(row)

    logger.debug(f"Filter kept {len(rows)}/{len(table)} rows")
    return Table._trusted(table._columns, rows)


def _is_true(value: Any) -> bool:
    return value is not None and bool(value)


def limit(table: Table, n: int) -> Table:
    """Return the first ``n`` rows in the current order."""
    if isinstance(n, bool) or not isinstance(n, int) or n < 0:
        raise ValueError(f"limit expects a non-negative integer, got {n!r}")
    return Table._trusted(table._columns, table._rows[:n])
