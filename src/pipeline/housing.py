# ========================
# src/pipeline/housing.py
# ========================

"""
Housing Index Workflow

The end-to-end wrangling of a wide housing price index file:

1. reshape the per-location columns into ``location`` / ``local_index``
2. split ``location`` into ``state`` and ``city``, and ``Date`` into
   ``month`` and ``year``
3. rename ``National.US`` to ``national_index`` and derive
   ``rel_index = local_index / national_index``
4. sort, select, deduplicate and filter the tidy table into the result
   tables the walkthrough looks at
"""

import logging
from typing import Dict, Optional

from .expressions import col
from .ingestion import CSVReader
from .orchestrator import TablePipeline
from .storage import DataSaver
from .table import Table
from .transformation import desc
from ..utils.config import Config

logger = logging.getLogger(__name__)

DATE_COLUMN = "Date"
NATIONAL_COLUMN = "National.US"
TIDY_COLUMNS = ["state", "city", "year", "month", "local_index", "national_index", "rel_index"]


class HousingWorkflow:
    """
    Builds and runs the housing index pipelines.
    """

    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()

    def tidy_pipeline(self) -> TablePipeline:
        """Pipeline turning the wide source table into one row per location and month."""
        return (
            TablePipeline(name="housing_tidy")
            .reshape_long([DATE_COLUMN, NATIONAL_COLUMN], names_to="location", values_to="local_index")
            .split_column("location", ["state", "city"], sep=self.config.LOCATION_SEPARATOR, extra="merge")
            .split_column(DATE_COLUMN, ["month", "year"], sep=self.config.DATE_SEPARATOR, convert=True)
            .rename(national_index=NATIONAL_COLUMN)
            .derive("rel_index", col("local_index") / col("national_index"))
            # Months stay in calendar order within a year because the sort is stable.
            .sort(["state", "city", "year"])
            .select(*TIDY_COLUMNS)
        )

    def locations_pipeline(self) -> TablePipeline:
        return TablePipeline(name="locations").distinct(["state", "city"])

    def city_month_pipeline(self, city: str, month: str) -> TablePipeline:
        return TablePipeline(name=f"{city}_{month}").filter(col("city") == city, col("month") == month)

    def missing_index_pipeline(self) -> TablePipeline:
        return (
            TablePipeline(name="missing_index")
            .filter(col("local_index").is_missing())
            .select("state", "city", "year", "month")
        )

    def summer_peaks_pipeline(self, n: int = 10) -> TablePipeline:
        """Highest relative index readings in June or July."""
        return (
            TablePipeline(name="summer_peaks")
            .filter((col("month") == "Jun") | (col("month") == "Jul"), col("rel_index").not_missing())
            .sort([desc("rel_index"), "city"])
            .limit(n)
        )

    def run(self, wide: Table) -> Dict[str, Table]:
        """
        Run every workflow pipeline on a wide source table.

        Returns:
            dict: Result name -> Table (``tidy``, ``locations``,
            ``boston_january``, ``missing_index``, ``summer_peaks``)
        """
        tidy = self.tidy_pipeline().run(wide)
        results = {
            'tidy': tidy,
            'locations': self.locations_pipeline().run(tidy),
            'boston_january': self.city_month_pipeline("Boston", "Jan").run(tidy),
            'missing_index': self.missing_index_pipeline().run(tidy),
            'summer_peaks': self.summer_peaks_pipeline().run(tidy),
        }
        for name, table in results.items():
            logger.info(f"Result '{name}': {table.num_rows} rows x {table.num_columns} columns")
        return results

    def run_file(self, source: str) -> Dict[str, Table]:
        """Load a wide CSV file (or URL) and run the workflow on it."""
        reader = CSVReader(source, na_values=self.config.NA_VALUES,
                           timeout=self.config.DOWNLOAD_TIMEOUT)
        return self.run(reader.read_table())

    def save(self, results: Dict[str, Table]) -> Dict[str, str]:
        """
        Write the results as CSV snapshots in OUTPUT_DIR.

        The tidy table is written as OUTPUT_FILE, the others as ``<name>.csv``.
        """
        saver = DataSaver(self.config.OUTPUT_DIR, na_rep=self.config.OUTPUT_NA,
                          na_values=self.config.NA_VALUES)
        saved = {'tidy': saver.save_table(results['tidy'], self.config.OUTPUT_FILE)}
        saved.update(saver.save_all({k: v for k, v in results.items() if k != 'tidy'}))
        return saved
