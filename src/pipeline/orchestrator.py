# ========================
# src/pipeline/orchestrator.py
# ========================

"""
Pipeline Orchestrator Module

TablePipeline applies an ordered list of table operations, each step
receiving the previous step's output. DataPipeline wraps a TablePipeline
with loading a CSV source and writing the result.
"""

import time
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from .exceptions import PipelineStepError
from .ingestion import CSVReader, download_file, is_url
from .reshape import reshape_long, split_column
from .storage import write_csv
from .table import Table
from .transformation import derive, derive_many, distinct, filter_rows, limit, rename, select, sort
from ..utils.config import Config
from ..utils.performance_monitor import monitor_performance

logger = logging.getLogger(__name__)


class PipelineStep:
    """One named Table -> Table call with its bound arguments."""

    def __init__(self, name: str, func: Callable[..., Table], args: Tuple = (), kwargs: Optional[Dict[str, Any]] = None):
        self.name = name
        self.func = func
        self.args = tuple(args)
        self.kwargs = dict(kwargs or {})

    def apply(self, table: Table) -> Table:
        return self.func(table, *self.args, **self.kwargs)

    def __repr__(self):
        params = [repr(a) for a in self.args] + [f"{k}={v!r}" for k, v in self.kwargs.items()]
        return f"{self.name}({', '.join(params)})"


class TablePipeline:
    """
    An immutable, ordered sequence of table operations.

    Builder methods return a new pipeline with one more step, so a pipeline
    can be extended without affecting the one it was built from:

        tidy = (TablePipeline()
                .reshape_long(["Date", "National.US"], names_to="location", values_to="local_index")
                .split_column("location", ["state", "city"], sep="_"))
        result = tidy.run(wide_table)
    """

    def __init__(self, steps=(), name: str = "TablePipeline"):
        self._steps = tuple(steps)
        self.name = name

    @property
    def steps(self) -> List[PipelineStep]:
        return list(self._steps)

    def __len__(self) -> int:
        return len(self._steps)

    def __repr__(self):
        return f"TablePipeline({self.name!r}, steps={list(self._steps)})"

    def add_step(self, name: str, func: Callable[..., Table], *args, **kwargs) -> "TablePipeline":
        """Return a new pipeline with ``func(table, *args, **kwargs)`` appended."""
        return TablePipeline(self._steps + (PipelineStep(name, func, args, kwargs),), name=self.name)

    def then(self, other: "TablePipeline") -> "TablePipeline":
        """Return a new pipeline running this one's steps, then ``other``'s."""
        return TablePipeline(self._steps + other._steps, name=self.name)

    def pipe(self, func: Callable[..., Table], *args, **kwargs) -> "TablePipeline":
        return self.add_step(getattr(func, "__name__", "pipe"), func, *args, **kwargs)

    def reshape_long(self, id_columns, value_columns=None, **kwargs) -> "TablePipeline":
        return self.add_step("reshape_long", reshape_long, id_columns, value_columns, **kwargs)

    def split_column(self, column, into, sep, **kwargs) -> "TablePipeline":
        return self.add_step("split_column", split_column, column, into, sep, **kwargs)

    def sort(self, by, descending=None) -> "TablePipeline":
        return self.add_step("sort", sort, by, descending)

    def rename(self, mapping=None, **renames) -> "TablePipeline":
        return self.add_step("rename", rename, mapping, **renames)

    def select(self, *columns, **renames) -> "TablePipeline":
        return self.add_step("select", select, *columns, **renames)

    def distinct(self, columns=None, keep_all=False) -> "TablePipeline":
        return self.add_step("distinct", distinct, columns, keep_all=keep_all)

    def derive(self, column, expression) -> "TablePipeline":
        return self.add_step("derive", derive, column, expression)

    def derive_many(self, **expressions) -> "TablePipeline":
        return self.add_step("derive_many", derive_many, **expressions)

    def filter(self, *predicates) -> "TablePipeline":
        return self.add_step("filter", filter_rows, *predicates)

    def limit(self, n: int) -> "TablePipeline":
        return self.add_step("limit", limit, n)

    def run(self, table: Table) -> Table:
        """
        Apply every step in order and return the final table.

        Args:
            table (Table): Source table

        Returns:
            Table: Output of the last step (the input itself if there are no steps)

        Raises:
            PipelineStepError: If a step fails; the original error is chained
        """
        total = len(self._steps)
        logger.info(f"{self.name}: running {total} steps on {table.num_rows} rows")

        current = table
        with monitor_performance(self.name) as monitor:
            for index, step in enumerate(self._steps, start=1):
                started = time.perf_counter()
                try:
                    result = step.apply(current)
                    if not isinstance(result, Table):
                        raise TypeError(f"Step returned {type(result).__name__}, expected Table")
                except Exception as e:
                    logger.error(f"{self.name}: step {index}/{total} {step!r} failed: {e}")
                    raise PipelineStepError(index, step.name, e) from e

                elapsed = time.perf_counter() - started
                monitor.record_step(step.name, current.num_rows, result.num_rows, elapsed)
                logger.info(
                    f"Step {index}/{total} {step.name}: {current.num_rows} -> {result.num_rows} rows, "
                    f"{result.num_columns} columns"
                )
                current = result

        return current

    __call__ = run


class DataPipeline:
    """
    Orchestrates a load -> transform -> write run.
    """

    def __init__(self,
                 source: str,
                 output_file: str,
                 pipeline: TablePipeline,
                 config: Optional[Config] = None):
        """
        Initialize the data pipeline.

        Args:
            source (str): Local CSV path or http(s) URL
            output_file (str): CSV file for the transformed table
            pipeline (TablePipeline): Steps to apply to the loaded table
            config (Config): Configuration object
        """
        self.source = source
        self.output_file = output_file
        self.pipeline = pipeline
        self.config = config or Config()

        logger.info("DataPipeline initialized:")
        logger.info(f"  Source: {self.source}")
        logger.info(f"  Output: {self.output_file}")
        logger.info(f"  Steps: {len(self.pipeline)}")

    def fetch_source(self) -> str:
        """Download a URL source once into RAW_DATA_FILE; local paths are used as-is."""
        if is_url(self.source):
            local = download_file(self.source, self.config.RAW_DATA_FILE,
                                  timeout=self.config.DOWNLOAD_TIMEOUT)
            return str(local)
        return self.source

    def validate_input(self) -> bool:
        """
        Validate the local input file exists and is readable.

        Returns:
            bool: True if input is valid
        """
        input_path = Path(self.fetch_source())
        if not input_path.is_file():
            logger.error(f"Input file does not exist: {input_path}")
            return False

        try:
            with open(input_path, 'r', encoding='utf-8-sig') as f:
                f.readline()
        except OSError as e:
            logger.error(f"Cannot read input file: {e}")
            return False

        logger.info(f"Input validation passed: {input_path}")
        return True

    def run(self) -> dict:
        """
        Execute the complete pipeline from start to finish.

        Returns:
            dict: Summary of the run and the resulting table
        """
        local_source = self.fetch_source()
        logger.info(f"Starting data pipeline for '{local_source}'...")

        reader = CSVReader(local_source, na_values=self.config.NA_VALUES,
                           timeout=self.config.DOWNLOAD_TIMEOUT)
        source_table = reader.read_table()
        result = self.pipeline.run(source_table)

        Path(self.output_file).parent.mkdir(parents=True, exist_ok=True)
        saved = write_csv(result, self.output_file, na_rep=self.config.OUTPUT_NA,
                          na_values=self.config.NA_VALUES)

        results = {
            'pipeline_status': 'completed',
            'source': self.source,
            'output_file': saved,
            'input_shape': source_table.shape,
            'output_shape': result.shape,
            'table': result,
        }
        logger.info(
            f"Pipeline finished: {source_table.num_rows} rows in, "
            f"{result.num_rows} rows out -> {saved}"
        )
        return results
