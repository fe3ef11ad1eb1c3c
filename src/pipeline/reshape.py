# ========================
# src/pipeline/reshape.py
# ========================

"""
Reshaping Module

Structural operations that change the shape of a table: pivoting value
columns from wide to long form, and splitting one text column into several.
"""

import re
import logging
from typing import Any, List, Optional, Sequence, Tuple, Union

from .exceptions import DuplicateColumnError, ShapeMismatchError
from .table import Table, coerce_values

logger = logging.getLogger(__name__)

EXTRA_POLICIES = ("merge", "drop", "error")
FILL_POLICIES = ("error", "right", "left")


def reshape_long(table: Table,
                 id_columns: Sequence[str],
                 value_columns: Optional[Sequence[str]] = None,
                 names_to: str = "key",
                 values_to: str = "value",
                 drop_missing: bool = False) -> Table:
    """
    Pivot value columns into key/value pairs (wide to long).

    Each input row becomes one output row per value column, in the order the
    value columns are given. Every column that is not reshaped is repeated
    on each of those rows.

    Args:
        table (Table): Wide input table
        id_columns (list): Columns identifying a row; when ``value_columns``
            is omitted, all other columns are reshaped
        value_columns (list): Columns to pivot into ``names_to``/``values_to``
        names_to (str): Name of the new column holding the original column names
        values_to (str): Name of the new column holding the cell values
        drop_missing (bool): Skip output rows whose value is missing

    Returns:
        Table: Long table with columns ``[kept columns..., names_to, values_to]``
    """
    if isinstance(id_columns, str):
        id_columns = [id_columns]
    table.require_columns(id_columns)

    if value_columns is None:
        value_columns = [name for name in table.columns if name not in id_columns]
    elif isinstance(value_columns, str):
        value_columns = [value_columns]
    table.require_columns(value_columns)

    overlap = [name for name in value_columns if name in id_columns]
    if overlap:
        raise ValueError(f"Columns cannot be both id and value columns: {overlap}")

    kept = [name for name in table.columns if name not in value_columns]
    for name in (names_to, values_to):
        if name in kept:
            raise DuplicateColumnError(name)
    if names_to == values_to:
        raise DuplicateColumnError(names_to)

    rows = []
    for row in table._rows:
        base = {name: row[name] for name in kept}
        for name in value_columns:
            value = row[name]
            if drop_missing and value is None:
                continue
            new_row = dict(base)
            new_row[names_to] = name
            new_row[values_to] = value
            rows.append(new_row)

    logger.debug(
        f"Reshaped {len(value_columns)} columns to long form: "
        f"{len(table)} -> {len(rows)} rows"
    )
    return Table._trusted(kept + [names_to, values_to], rows)


def _compile_separator(sep: Union[str, "re.Pattern"]) -> "re.Pattern":
    if isinstance(sep, re.Pattern):
        return sep
    if not isinstance(sep, str) or not sep:
        raise ValueError(f"Separator must be a non-empty string or compiled pattern, got {sep!r}")
    return re.compile(re.escape(sep))


def _split_text(text: str, pattern: "re.Pattern") -> Tuple[List[str], List[int]]:
    """Split text on a pattern, returning the fragments and where each starts."""
    fragments = []
    starts = []
    position = 0
    for match in pattern.finditer(text):
        if match.start() == match.end():
            continue
        fragments.append(text[position:match.start()])
        starts.append(position)
        position = match.end()
    fragments.append(text[position:])
    starts.append(position)
    return fragments, starts


def split_column(table: Table,
                 column: str,
                 into: Sequence[str],
                 sep: Union[str, "re.Pattern"],
                 extra: str = "merge",
                 fill: str = "error",
                 remove: bool = True,
                 convert: bool = False) -> Table:
    """
    Split one text column into several columns.

    When a value has more fragments than target columns, ``extra`` decides:
    ``merge`` keeps everything from the last target's fragment onwards
    (separators included) in the last target, ``drop`` discards the
    surplus, ``error`` raises. When it has fewer, ``fill`` decides: ``right``
    pads with missing values at the end, ``left`` at the start, ``error``
    raises. Missing source values give missing values in every target.

    Args:
        table (Table): Input table
        column (str): Column to split
        into (list): Names of the new columns
        sep (str or re.Pattern): Literal separator or compiled regular expression
        extra (str): Policy for surplus fragments
        fill (str): Policy for missing fragments
        remove (bool): Drop the source column
        convert (bool): Convert numeric-looking parts to int/float

    Returns:
        Table: Table with the new columns where the source column was

    Raises:
        ShapeMismatchError: If a row breaks the ``error`` policy
    """
    if extra not in EXTRA_POLICIES:
        raise ValueError(f"extra must be one of {EXTRA_POLICIES}, got {extra!r}")
    if fill not in FILL_POLICIES:
        raise ValueError(f"fill must be one of {FILL_POLICIES}, got {fill!r}")
    if isinstance(into, str):
        into = [into]
    into = list(into)
    if not into:
        raise ValueError("split_column needs at least one target column")

    table.require_columns([column])
    pattern = _compile_separator(sep)

    replaced = list(into) if remove else list(into) + [column]
    position = table.columns.index(column)
    columns = table.columns[:position] + replaced + table.columns[position + 1:]
    seen = set()
    for name in columns:
        if name in seen:
            raise DuplicateColumnError(name)
        seen.add(name)

    target_count = len(into)
    parts_by_row = []
    for index, row in enumerate(table._rows):
        value = row[column]
        if value is None:
            parts_by_row.append([None] * target_count)
            continue

        text = value if isinstance(value, str) else str(value)
        fragments, starts = _split_text(text, pattern)

        if len(fragments) > target_count:
            if extra == "error":
                raise ShapeMismatchError(
                    f"Row {index}: '{text}' splits into {len(fragments)} parts, "
                    f"expected {target_count} for {into}",
                    row_index=index,
                )
            if extra == "merge":
                fragments = fragments[:target_count - 1] + [text[starts[target_count - 1]:]]
            else:
                fragments = fragments[:target_count]
        elif len(fragments) < target_count:
            if fill == "error":
                raise ShapeMismatchError(
                    f"Row {index}: '{text}' splits into {len(fragments)} parts, "
                    f"expected {target_count} for {into}",
                    row_index=index,
                )
            padding = [None] * (target_count - len(fragments))
            fragments = fragments + padding if fill == "right" else padding + fragments

        parts_by_row.append(fragments)

    new_values = {name: [parts[i] for parts in parts_by_row] for i, name in enumerate(into)}
    if convert:
        new_values = {name: coerce_values(values) for name, values in new_values.items()}

    rows = []
    for index, row in enumerate(table._rows):
        new_row = {}
        for name in columns:
            if name in new_values:
                new_row[name] = new_values[name][index]
            else:
                new_row[name] = row[name]
        rows.append(new_row)

    logger.debug(f"Split column '{column}' into {into} for {len(rows)} rows")
    return Table._trusted(columns, rows)
