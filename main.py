#!/usr/bin/env python3
# ========================
# main.py
# ========================

"""
Main Entry Point for the Housing Index Wrangling Pipeline

Obtains a wide housing index CSV (downloaded once from HOUSING_SOURCE_URL,
or generated locally), tidies it, writes the CSV snapshots and prints a
preview of each result.
"""

import sys
import logging
from pathlib import Path

from src.pipeline import HousingWorkflow, download_file
from src.pipeline.exceptions import PipelineError
from src.utils import Config, setup_logging, DataGenerator


def main():
    """Main execution function."""
    config = Config()

    setup_logging(
        log_level=config.LOG_LEVEL,
        log_file="pipeline.log",
        log_dir=config.LOG_DIR
    )

    logger = logging.getLogger(__name__)
    logger.info("=" * 60)
    logger.info("HOUSING INDEX WRANGLING PIPELINE - MAIN EXECUTION")
    logger.info("=" * 60)

    try:
        config.ensure_directories()

        # Step 1: Obtain the source file
        raw_file = config.RAW_DATA_FILE
        if config.SOURCE_URL:
            logger.info(f"Step 1: Fetching source data from {config.SOURCE_URL}...")
            download_file(config.SOURCE_URL, raw_file, timeout=config.DOWNLOAD_TIMEOUT)
        elif not Path(raw_file).exists():
            logger.info("Step 1: Generating sample data...")
            generator = DataGenerator(seed=42)
            generation_stats = generator.generate_dataset(
                file_path=raw_file,
                num_months=config.SAMPLE_MONTHS,
                missing_rate=0.02
            )
            logger.info(f"Sample data generated: {generation_stats}")
        else:
            logger.info(f"Step 1: Using existing source file {raw_file}")

        # Step 2: Run the workflow
        logger.info("Step 2: Running housing workflow...")
        workflow = HousingWorkflow(config)
        results = workflow.run_file(raw_file)

        # Step 3: Write snapshots
        logger.info("Step 3: Writing CSV snapshots...")
        saved_files = workflow.save(results)

        # Step 4: Print summary
        _print_execution_summary(results, saved_files, config.PREVIEW_ROWS)

        logger.info("Pipeline execution completed successfully!")
        return 0

    except (PipelineError, OSError) as e:
        logger.error(f"Pipeline execution failed: {e}", exc_info=True)
        return 1


def _print_execution_summary(results: dict, saved_files: dict, preview_rows: int) -> None:
    """Print a preview of every result table and where it was written."""
    print("\n" + "=" * 70)
    print("PIPELINE EXECUTION SUMMARY")
    print("=" * 70)

    for name, table in results.items():
        print(f"\n{name} -> {saved_files.get(name, '(not saved)')}")
        print(table.show(preview_rows))

    print("=" * 70)


if __name__ == '__main__':
    exit_code = main()
    sys.exit(exit_code)
