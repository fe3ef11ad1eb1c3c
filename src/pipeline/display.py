# ========================
# src/pipeline/display.py
# ========================

"""
Console preview of a Table.
"""

from typing import Any

from .table import Table

TYPE_ABBREVIATIONS = {
    "integer": "<int>",
    "float": "<dbl>",
    "text": "<chr>",
    "date": "<date>",
    "missing": "<na>",
}


def _format_value(value: Any) -> str:
    if value is None:
        return "NA"
    if isinstance(value, float):
        return f"{value:.6g}"
    return str(value)


def format_table(table: Table, n: int = 10) -> str:
    """
    Render the first ``n`` rows of a table as aligned text.

    The first line gives the table's size, the header is followed by a line
    of column types, and a footer counts the rows not shown.
    """
    schema = table.schema()
    shown = table._rows[:max(n, 0)]

    lines = [f"# Table: {table.num_rows} rows x {table.num_columns} columns"]
    if not table.columns:
        return lines[0]

    cells = {
        name: [_format_value(row[name]) for row in shown]
        for name in table.columns
    }
    types = {name: TYPE_ABBREVIATIONS[schema[name]] for name in table.columns}
    widths = {
        name: max([len(name), len(types[name])] + [len(cell) for cell in cells[name]])
        for name in table.columns
    }
    numeric = {name: schema[name] in ("integer", "float") for name in table.columns}

    def align(name, text):
        return text.rjust(widths[name]) if numeric[name] else text.ljust(widths[name])

    lines.append("  ".join(align(name, name) for name in table.columns).rstrip())
    lines.append("  ".join(align(name, types[name]) for name in table.columns).rstrip())
    for i in range(len(shown)):
        lines.append("  ".join(align(name, cells[name][i]) for name in table.columns).rstrip())

    remaining = table.num_rows - len(shown)
    if remaining > 0:
        lines.append(f"# ... with {remaining} more rows")
    return "\n".join(lines)
