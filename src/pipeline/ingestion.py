# ========================
# src/pipeline/ingestion.py
# ========================

"""
Data Ingestion Module

Reads CSV sources (local files or http(s) URLs) into Tables, and fetches a
static source file once so later runs can work from the local copy.
"""

import csv
import io
import logging
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional

import requests

from .exceptions import TableLoadError
from .table import Table, coerce_values

logger = logging.getLogger(__name__)

DEFAULT_NA_VALUES = ("NA", "N/A", "null", "NaN")


def is_url(source) -> bool:
    return isinstance(source, str) and source.lower().startswith(("http://", "https://"))


class CSVReader:
    """
    Reads a rectangular CSV file with a header row.

    Values are trimmed of surrounding whitespace; empty strings and the
    configured NA tokens become None. Rows whose field count differs from
    the header are rejected.
    """

    def __init__(self, source, na_values: Optional[Iterable[str]] = None, timeout: float = 30):
        """
        Initialize the CSV reader.

        Args:
            source (str or Path): Local path or http(s) URL of the CSV file
            na_values (iterable): Tokens read as missing values
            timeout (float): Seconds to wait for a URL source
        """
        self.source = source
        self.na_values = set(DEFAULT_NA_VALUES if na_values is None else na_values)
        self.timeout = timeout
        self.header = []
        logger.info(f"Initialized CSVReader for source: {source}")

    def _open(self):
        if is_url(self.source):
            try:
                response = requests.get(self.source, timeout=self.timeout)
                response.raise_for_status()
            except requests.RequestException as e:
                logger.error(f"Could not fetch CSV from {self.source}: {e}")
                raise TableLoadError(f"Could not fetch CSV from {self.source}: {e}") from e
            return io.StringIO(response.text, newline="")
        return open(self.source, "r", newline="", encoding="utf-8-sig")

    def _clean(self, value: str) -> Optional[str]:
        value = value.strip()
        if value == "" or value in self.na_values:
            return None
        return value

    def read_in_chunks(self, chunk_size: int) -> Iterator[List[Dict[str, Optional[str]]]]:
        """
        A generator that yields a list of dictionaries for each chunk of rows.

        Args:
            chunk_size (int): The number of rows to yield per chunk.

        Yields:
            list[dict]: Raw records with trimmed string values or None.

        Raises:
            TableLoadError: If a row does not match the header
        """
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")

        try:
            with self._open() as f:
                reader = csv.reader(f)
                self.header = []
                for fields in reader:
                    if any(field.strip() for field in fields):
                        self.header = [field.strip() for field in fields]
                        break

                if not self.header:
                    logger.warning(f"No header row found in {self.source}")
                    return
                logger.info(f"CSV header: {self.header}")

                chunk = []
                row_count = 0
                for fields in reader:
                    if not fields:
                        continue
                    if len(fields) != len(self.header):
                        raise TableLoadError(
                            f"Malformed CSV {self.source}: line {reader.line_num} has "
                            f"{len(fields)} fields, header has {len(self.header)}"
                        )

                    chunk.append({name: self._clean(value) for name, value in zip(self.header, fields)})
                    row_count += 1

                    if len(chunk) == chunk_size:
                        logger.debug(f"Yielding chunk with {len(chunk)} rows")
                        yield chunk
                        chunk = []

                if chunk:
                    logger.debug(f"Yielding final chunk with {len(chunk)} rows")
                    yield chunk

                logger.info(f"Total rows read: {row_count}")

        except FileNotFoundError:
            logger.error(f"File '{self.source}' was not found")
            raise
        except csv.Error as e:
            logger.error(f"Error parsing CSV file: {e}")
            raise TableLoadError(f"Malformed CSV {self.source}: {e}") from e

    def read_table(self, chunk_size: int = 10000) -> Table:
        """
        Read the whole source into a Table with typed columns.

        Each column is converted to int or float when all of its values are
        numeric; other columns stay text.

        Returns:
            Table: The loaded table

        Raises:
            TableLoadError: If the source has no header or is malformed
        """
        records = []
        for chunk in self.read_in_chunks(chunk_size):
            records.extend(chunk)

        if not self.header:
            raise TableLoadError(f"CSV source {self.source} has no header row")

        if len(set(self.header)) != len(self.header):
            duplicates = sorted({name for name in self.header if self.header.count(name) > 1})
            raise TableLoadError(f"CSV source {self.source} has duplicate columns: {duplicates}")

        data = {name: coerce_values([record[name] for record in records]) for name in self.header}
        table = Table.from_columns(data)
        logger.info(f"Loaded table with {table.num_rows} rows and {table.num_columns} columns")
        return table


def load_table(source, na_values: Optional[Iterable[str]] = None, timeout: float = 30) -> Table:
    """Load a CSV file or URL into a Table."""
    return CSVReader(source, na_values=na_values, timeout=timeout).read_table()


def download_file(url: str, dest, timeout: float = 30, force: bool = False) -> Path:
    """
    Download a static file once.

    If ``dest`` already exists it is reused without touching the network,
    unless ``force`` is set.

    Args:
        url (str): http(s) URL to fetch
        dest (str or Path): Local file to write
        timeout (float): Seconds to wait for the server
        force (bool): Download even if ``dest`` exists

    Returns:
        Path: The local file path

    Raises:
        TableLoadError: If the download fails
    """
    dest = Path(dest)
    if dest.exists() and not force:
        logger.info(f"Using cached copy of {url} at {dest}")
        return dest

    dest.parent.mkdir(parents=True, exist_ok=True)
    logger.info(f"Downloading {url} to {dest}")
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        logger.error(f"Download of {url} failed: {e}")
        raise TableLoadError(f"Download of {url} failed: {e}") from e

    with open(dest, "wb") as f:
        f.write(response.content)

    logger.info(f"Downloaded {len(response.content):,} bytes to {dest}")
    return dest
