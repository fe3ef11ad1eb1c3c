# ========================
# src/pipeline/__init__.py
# ========================

"""
Table Pipeline Package

Core components for wrangling tabular data:
- table: the immutable Table value and type inference
- expressions: column expressions for derive/filter
- transformation: sort, rename, select, distinct, derive, filter, limit
- reshape: wide-to-long reshaping and column splitting
- ingestion: CSV loading and one-time downloads
- storage: CSV snapshots
- display: console previews
- orchestrator: pipeline execution
- housing: the housing index workflow
"""

from .exceptions import (
    PipelineError,
    ColumnNotFoundError,
    DuplicateColumnError,
    ShapeMismatchError,
    TableLoadError,
    PipelineStepError,
)
from .table import Table
from .expressions import col, lit
from .transformation import sort, rename, select, distinct, derive, derive_many, filter_rows, limit, desc
from .reshape import reshape_long, split_column
from .ingestion import CSVReader, load_table, download_file
from .storage import DataSaver, write_csv
from .display import format_table
from .orchestrator import TablePipeline, DataPipeline
from .housing import HousingWorkflow

__all__ = [
    'PipelineError',
    'ColumnNotFoundError',
    'DuplicateColumnError',
    'ShapeMismatchError',
    'TableLoadError',
    'PipelineStepError',
    'Table',
    'col',
    'lit',
    'sort',
    'rename',
    'select',
    'distinct',
    'derive',
    'derive_many',
    'filter_rows',
    'limit',
    'desc',
    'reshape_long',
    'split_column',
    'CSVReader',
    'load_table',
    'download_file',
    'DataSaver',
    'write_csv',
    'format_table',
    'TablePipeline',
    'DataPipeline',
    'HousingWorkflow',
]

__version__ = "1.0.0"
