# ========================
# src/pipeline/storage.py
# ========================

"""
Data Storage Module

Writes Tables out as flat CSV snapshots.
"""

import csv
import logging
from pathlib import Path
from typing import Dict, Mapping

from .ingestion import DEFAULT_NA_VALUES
from .table import Table

logger = logging.getLogger(__name__)


def write_csv(table: Table, file_path, na_rep: str = "", na_values=None) -> str:
    """
    Write a table to a CSV file.

    The header is the table's columns; fields containing the delimiter,
    quotes or line breaks are quoted. Missing values are written as
    ``na_rep``.

    Quoting does not protect text that equals ``na_rep`` or one of the NA
    tokens: such values read back as missing. They are written unchanged
    and reported with a warning.

    Args:
        table (Table): Table to write
        file_path (str or Path): Destination file
        na_rep (str): Text written for missing values
        na_values (iterable): NA tokens the file will be read back with
            (defaults to DEFAULT_NA_VALUES)

    Returns:
        str: The path written
    """
    file_path = Path(file_path)
    ambiguous = set(DEFAULT_NA_VALUES if na_values is None else na_values)
    ambiguous.add(na_rep.strip())
    collisions = {}
    try:
        with open(file_path, 'w', newline='', encoding='utf-8') as f:
            writer = csv.writer(f)
            writer.writerow(table.columns)
            for row in table._rows:
                fields = []
                for name in table._columns:
                    value = row[name]
                    if value is None:
                        value = na_rep
                    elif isinstance(value, str) and value.strip() in ambiguous:
                        collisions[name] = collisions.get(name, 0) + 1
                    fields.append(value)
                writer.writerow(fields)

        logger.info(f"Saved {table.num_rows} records to {file_path}")
        if collisions:
            logger.warning(
                f"{file_path}: text values that read back as missing, by column: {collisions}"
            )
        return str(file_path)

    except OSError as e:
        logger.error(f"Error writing CSV file {file_path}: {e}")
        raise


class DataSaver:
    """
    Saves pipeline result tables into an output directory.
    """

    def __init__(self, output_dir: str = "data/processed", na_rep: str = "", na_values=None):
        """
        Initialize the data saver.

        Args:
            output_dir (str): Directory to save output files
            na_rep (str): Text written for missing values
            na_values (iterable): NA tokens used when the files are read back
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.na_rep = na_rep
        self.na_values = na_values
        logger.info(f"DataSaver initialized with output directory: {self.output_dir}")

    def save_table(self, table: Table, file_name: str) -> str:
        """Save one table as ``output_dir/file_name``."""
        return write_csv(table, self.output_dir / file_name, na_rep=self.na_rep, na_values=self.na_values)

    def save_all(self, tables: Mapping[str, Table]) -> Dict[str, str]:
        """
        Save every table as ``<name>.csv``.

        Args:
            tables (dict): Mapping of result name to Table

        Returns:
            dict: Mapping of result name to saved file path
        """
        saved_files = {}
        for name, table in tables.items():
            saved_files[name] = self.save_table(table, f"{name}.csv")

        logger.info(f"All data saved successfully to {len(saved_files)} files")
        return saved_files
