# ========================
# src/utils/performance_monitor.py
# ========================

"""
Performance Monitoring Utilities

Tracks elapsed time, row counts and memory use of pipeline runs.
"""

import os
import time
import logging
from contextlib import contextmanager
from typing import Any, Dict, Optional

import psutil

logger = logging.getLogger(__name__)


class PerformanceMonitor:
    """
    Performance monitoring utility for table pipelines.
    Tracks per-step timing, row counts and peak memory usage.
    """

    def __init__(self, name: str = "Pipeline"):
        """
        Initialize performance monitor.

        Args:
            name (str): Name for this monitoring session
        """
        self.name = name
        self.start_time = None
        self.end_time = None
        self.peak_memory_mb = 0.0
        self.rows_processed = 0
        self.steps_completed = 0
        self.checkpoints = []

        logger.debug(f"PerformanceMonitor initialized: {name}")

    def start_monitoring(self) -> None:
        """Start performance monitoring."""
        self.start_time = time.time()
        self.peak_memory_mb = self._get_memory_usage_mb()

        logger.info(f"{self.name} - Performance monitoring started")
        logger.debug(f"Initial memory usage: {self.peak_memory_mb:.2f} MB")

    def record_step(self, step_name: str, rows_in: int, rows_out: int, seconds: float) -> None:
        """
        Record one finished pipeline step.

        Args:
            step_name (str): Verb the step applied
            rows_in (int): Rows the step received
            rows_out (int): Rows the step returned
            seconds (float): Wall time the step took
        """
        self.rows_processed += rows_in
        self.steps_completed += 1
        self.add_checkpoint(step_name, {
            'rows_in': rows_in,
            'rows_out': rows_out,
            'seconds': seconds,
        })

    def add_checkpoint(self, name: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        """
        Add a performance checkpoint.

        Args:
            name (str): Checkpoint name
            metadata (dict): Optional metadata to store
        """
        memory_mb = self._get_memory_usage_mb()
        self.peak_memory_mb = max(self.peak_memory_mb, memory_mb)
        checkpoint = {
            'name': name,
            'timestamp': time.time(),
            'memory_mb': memory_mb,
            'rows_processed': self.rows_processed,
            'steps_completed': self.steps_completed,
            'metadata': metadata or {}
        }
        self.checkpoints.append(checkpoint)
        logger.debug(f"Checkpoint '{name}': {checkpoint}")

    def stop_monitoring(self) -> Dict[str, Any]:
        """
        Stop monitoring and return performance summary.

        Returns:
            dict: Performance statistics
        """
        self.end_time = time.time()
        total_time = self.end_time - self.start_time if self.start_time else 0
        self.peak_memory_mb = max(self.peak_memory_mb, self._get_memory_usage_mb())

        summary = {
            'name': self.name,
            'total_processing_time_seconds': total_time,
            'rows_processed': self.rows_processed,
            'steps_completed': self.steps_completed,
            'average_throughput_rows_per_second': self.rows_processed / total_time if total_time > 0 else 0,
            'peak_memory_usage_mb': self.peak_memory_mb,
            'checkpoints': self.checkpoints
        }

        self._log_summary(summary)
        return summary

    def _log_summary(self, summary: Dict[str, Any]) -> None:
        logger.info(
            f"{summary['name']} - {summary['steps_completed']} steps, "
            f"{summary['rows_processed']:,} rows in "
            f"{summary['total_processing_time_seconds']:.3f}s, "
            f"peak memory {summary['peak_memory_usage_mb']:.2f} MB"
        )

    def _get_memory_usage_mb(self) -> float:
        """Get current resident memory of this process in MB."""
        try:
            process = psutil.Process(os.getpid())
            return process.memory_info().rss / (1024 * 1024)
        except psutil.Error as e:
            logger.debug(f"Could not get memory usage: {e}")
            return 0.0


@contextmanager
def monitor_performance(name: str = "Pipeline"):
    """
    Context manager for easy performance monitoring.

    Args:
        name (str): Name for this monitoring session

    Yields:
        PerformanceMonitor: Monitor instance
    """
    monitor = PerformanceMonitor(name)
    monitor.start_monitoring()
    try:
        yield monitor
    finally:
        monitor.stop_monitoring()
