# ========================
# src/utils/data_generator.py
# ========================

"""
Data Generation Utilities

Generates wide housing price index CSV files shaped like the published
city index series: one row per month, a national column, and one column per
``<STATE>_<City>`` location.
"""

import csv
import random
import logging
from datetime import date
from typing import Any, Dict, List, Optional
from pathlib import Path

logger = logging.getLogger(__name__)

MONTH_ABBREVIATIONS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
                       "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


class DataGenerator:
    """
    Generator for wide housing index datasets.
    """

    def __init__(self, seed: Optional[int] = None):
        """
        Initialize data generator.

        Args:
            seed (int): Random seed for reproducible data generation
        """
        self.random = random.Random(seed)
        self._initialize_data_patterns()
        logger.info(f"DataGenerator initialized with seed: {seed}")

    def _initialize_data_patterns(self) -> None:
        """Initialize locations and market patterns."""
        # Relative price level and yearly drift per location; late starters
        # have no index values before their first month.
        self.locations = [
            {"name": "MA_Boston", "level": 1.15, "drift": 0.045, "first_month": 0},
            {"name": "CA_San Francisco", "level": 1.40, "drift": 0.060, "first_month": 0},
            {"name": "NY_New York", "level": 1.25, "drift": 0.040, "first_month": 0},
            {"name": "IL_Chicago", "level": 0.95, "drift": 0.025, "first_month": 0},
            {"name": "WA_Seattle", "level": 1.10, "drift": 0.055, "first_month": 0},
            {"name": "CO_Denver", "level": 1.00, "drift": 0.050, "first_month": 0},
            {"name": "FL_Miami", "level": 1.05, "drift": 0.050, "first_month": 6},
            {"name": "TX_Dallas", "level": 0.90, "drift": 0.030, "first_month": 12},
        ]

        # Month -> seasonal price multiplier
        self.seasonal_patterns = {
            1: 0.990, 2: 0.992, 3: 0.997, 4: 1.003, 5: 1.008, 6: 1.012,
            7: 1.012, 8: 1.008, 9: 1.003, 10: 0.999, 11: 0.995, 12: 0.992,
        }

    @staticmethod
    def format_month(year: int, month: int) -> str:
        """Format a month the way the source files do, e.g. ``Jan 2000``."""
        return f"{MONTH_ABBREVIATIONS[month - 1]} {year}"

    def generate_dataset(self,
                         file_path: str,
                         num_months: int,
                         start: date = date(2000, 1, 1),
                         missing_rate: float = 0.0,
                         locations: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
        """
        Generate a wide monthly index file.

        Args:
            file_path (str): Output CSV file path
            num_months (int): Number of monthly rows to generate
            start (date): First month of the series
            missing_rate (float): Fraction of location cells written as ``NA``
            locations (list): Location patterns to use instead of the defaults

        Returns:
            dict: Generation statistics
        """
        locations = locations or self.locations
        logger.info(f"Generating {num_months:,} months for {len(locations)} locations...")

        stats = {
            'total_rows': num_months,
            'locations': len(locations),
            'missing_cells': 0,
            'start': self.format_month(start.year, start.month),
        }

        Path(file_path).parent.mkdir(parents=True, exist_ok=True)

        national = 100.0
        levels = {loc["name"]: 100.0 * loc["level"] for loc in locations}

        with open(file_path, 'w', newline='', encoding='utf-8') as f:
            writer = csv.writer(f)
            writer.writerow(["Date", "National.US"] + [loc["name"] for loc in locations])

            for i in range(num_months):
                year = start.year + (start.month - 1 + i) // 12
                month = (start.month - 1 + i) % 12 + 1
                season = self.seasonal_patterns[month]

                national *= 1 + 0.04 / 12 + self.random.gauss(0, 0.002)
                row = [self.format_month(year, month), round(national * season, 2)]

                for loc in locations:
                    levels[loc["name"]] *= 1 + loc["drift"] / 12 + self.random.gauss(0, 0.004)
                    if i < loc["first_month"] or self.random.random() < missing_rate:
                        row.append("NA")
                        stats['missing_cells'] += 1
                    else:
                        row.append(round(levels[loc["name"]] * season, 2))

                writer.writerow(row)

        stats['end'] = row[0] if num_months else None
        logger.info(f"Dataset generated: {file_path}")
        logger.info(f"Missing cells: {stats['missing_cells']:,}")
        return stats

    def generate_large_dataset(self,
                               file_path: str,
                               num_months: int,
                               num_locations: int) -> Dict[str, Any]:
        """
        Generate a wide file with many synthetic locations for load testing.

        Args:
            file_path (str): Output file path
            num_months (int): Number of monthly rows
            num_locations (int): Number of location columns

        Returns:
            dict: Generation statistics
        """
        states = ["AZ", "CA", "CO", "FL", "GA", "IL", "MA", "NY", "OR", "TX", "WA"]
        locations = [
            {
                "name": f"{states[i % len(states)]}_City {i:04d}",
                "level": self.random.uniform(0.7, 1.5),
                "drift": self.random.uniform(0.01, 0.07),
                "first_month": self.random.choice([0, 0, 0, 12, 24]),
            }
            for i in range(num_locations)
        ]
        return self.generate_dataset(file_path, num_months, missing_rate=0.01, locations=locations)
