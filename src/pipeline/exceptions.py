# ========================
# src/pipeline/exceptions.py
# ========================

"""
Pipeline Exceptions

Error types raised by table loading and transformation steps.
"""

from typing import Iterable, Optional


class PipelineError(Exception):
    """Base class for all errors raised by the wrangling pipeline."""


class ColumnNotFoundError(PipelineError, KeyError):
    """Raised when an operation references a column the table does not have."""

    def __init__(self, column: str, available: Iterable[str] = ()):
        self.column = column
        self.available = list(available)
        super().__init__(column)

    def __str__(self) -> str:
        return f"Column '{self.column}' not found. Available columns: {self.available}"


class DuplicateColumnError(PipelineError, ValueError):
    """Raised when an operation would produce two columns with the same name."""

    def __init__(self, column: str):
        self.column = column
        super().__init__(f"Duplicate column name: '{column}'")


class ShapeMismatchError(PipelineError, ValueError):
    """Raised when a split produces a different number of parts than requested."""

    def __init__(self, message: str, row_index: Optional[int] = None):
        self.row_index = row_index
        super().__init__(message)


class TableLoadError(PipelineError):
    """Raised when a CSV source is malformed or cannot be fetched."""


class PipelineStepError(PipelineError):
    """Raised by TablePipeline.run when one of its steps fails."""

    def __init__(self, step_index: int, step_name: str, error: Exception):
        self.step_index = step_index
        self.step_name = step_name
        self.error = error
        super().__init__(f"Step {step_index} ({step_name}) failed: {error}")
