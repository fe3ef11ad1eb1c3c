# ========================
# src/utils/config.py
# ========================

"""
Configuration Management

Centralized configuration for the housing pipeline with environment support.
"""

import os
from pathlib import Path
from typing import Dict, Any, Optional


def _split_list(value: str):
    return [item.strip() for item in value.split(',') if item.strip()]


class Config:
    """
    Configuration class for the housing pipeline.
    Supports environment variables and default values.
    """

    def __init__(self, config_dict: Optional[Dict[str, Any]] = None):
        """
        Initialize configuration.

        Args:
            config_dict (dict): Optional configuration overrides
        """
        # Source data
        self.SOURCE_URL = os.getenv('HOUSING_SOURCE_URL', '')
        self.RAW_DATA_FILE = os.getenv('HOUSING_RAW_FILE', 'data/raw/housing_index.csv')
        self.DOWNLOAD_TIMEOUT = float(os.getenv('DOWNLOAD_TIMEOUT', '30'))
        self.NA_VALUES = _split_list(os.getenv('NA_VALUES', 'NA,N/A,null,NaN'))

        # Output
        self.OUTPUT_DIR = os.getenv('PIPELINE_OUTPUT_DIR', 'data/processed')
        self.OUTPUT_FILE = os.getenv('PIPELINE_OUTPUT_FILE', 'housing_tidy.csv')
        self.OUTPUT_NA = os.getenv('OUTPUT_NA', '')

        # Column splitting
        self.LOCATION_SEPARATOR = os.getenv('LOCATION_SEPARATOR', '_')
        self.DATE_SEPARATOR = os.getenv('DATE_SEPARATOR', ' ')

        # Sample data and display
        self.SAMPLE_MONTHS = int(os.getenv('SAMPLE_MONTHS', '24'))
        self.PREVIEW_ROWS = int(os.getenv('PREVIEW_ROWS', '10'))

        # Logging Configuration
        self.LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
        self.LOG_DIR = os.getenv('LOG_DIR', 'logs')

        # Override with provided config
        if config_dict:
            self._update_from_dict(config_dict)

    def _update_from_dict(self, config_dict: Dict[str, Any]) -> None:
        """Update configuration from dictionary."""
        for key, value in config_dict.items():
            if hasattr(self, key.upper()):
                setattr(self, key.upper(), value)

    def get_data_paths(self) -> Dict[str, Path]:
        """Get all configured data paths as Path objects."""
        return {
            'raw_data_file': Path(self.RAW_DATA_FILE),
            'output_file': Path(self.OUTPUT_DIR) / self.OUTPUT_FILE,
            'raw_data_dir': Path(self.RAW_DATA_FILE).parent,
            'output_dir': Path(self.OUTPUT_DIR),
            'logs_dir': Path(self.LOG_DIR)
        }

    def ensure_directories(self) -> None:
        """Create necessary directories if they don't exist."""
        for path_name, path in self.get_data_paths().items():
            if path_name.endswith('_dir'):
                path.mkdir(parents=True, exist_ok=True)

    def validate_config(self) -> Dict[str, bool]:
        """
        Validate configuration values.

        Returns:
            dict: Validation results for each setting
        """
        validations = {}

        validations['download_timeout'] = self.DOWNLOAD_TIMEOUT > 0
        validations['sample_months'] = self.SAMPLE_MONTHS > 0
        validations['preview_rows'] = self.PREVIEW_ROWS >= 0
        validations['location_separator'] = bool(self.LOCATION_SEPARATOR)
        validations['date_separator'] = bool(self.DATE_SEPARATOR)
        validations['source_url'] = (
            not self.SOURCE_URL or self.SOURCE_URL.lower().startswith(('http://', 'https://'))
        )

        valid_log_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        validations['log_level'] = self.LOG_LEVEL.upper() in valid_log_levels

        return validations

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            attr: getattr(self, attr)
            for attr in dir(self)
            if not attr.startswith('_') and not callable(getattr(self, attr))
        }

    def save_to_file(self, file_path: str) -> None:
        """Save configuration to JSON file."""
        import json
        with open(file_path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2, default=str)

    @classmethod
    def load_from_file(cls, file_path: str) -> 'Config':
        """Load configuration from JSON file."""
        import json
        with open(file_path, 'r') as f:
            config_dict = json.load(f)
        return cls(config_dict)

    def __str__(self) -> str:
        """String representation of configuration."""
        lines = ["Configuration Settings:"]
        for key, value in sorted(self.to_dict().items()):
            lines.append(f"  {key}: {value}")
        return "\n".join(lines)
