"""
Logging configuration for the geographic drill-down engine.

This module provides the logging infrastructure with configurable levels,
file output and helpers for the structured events emitted by drill
transitions and preview payload synchronization.
"""

import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional


class DrillDownLogger:
    """Custom logger for drill-down operations."""

    def __init__(self, name: str = "geo_drilldown", level: str = "INFO",
                 log_file: Optional[str] = None):
        """
        Initialize the drill-down logger.

        Args:
            name: Logger name
            level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_file: Optional file path for log output
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))

        # Clear any existing handlers
        self.logger.handlers.clear()

        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(formatter)
        self.logger.addHandler(console_handler)

        if log_file:
            self._setup_file_handler(log_file, formatter)

    def _setup_file_handler(self, log_file: str, formatter: logging.Formatter):
        """Set up file logging handler."""
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
        file_handler.setFormatter(formatter)
        self.logger.addHandler(file_handler)

    def info(self, message: str):
        """Log info message."""
        self.logger.info(message)

    def debug(self, message: str):
        """Log debug message."""
        self.logger.debug(message)

    def warning(self, message: str):
        """Log warning message."""
        self.logger.warning(message)

    def error(self, message: str):
        """Log error message."""
        self.logger.error(message)

    def log_drill_transition(self, action: str, status: str, depth_before: int,
                             depth_after: int, region_name: Optional[str] = None):
        """Log a drill transition with its outcome."""
        target = f" '{region_name}'" if region_name else ""
        self.logger.info(
            f"{action}{target}: {status} (depth {depth_before} -> {depth_after})",
            extra={
                'event': 'drill_transition',
                'action': action,
                'status': status,
                'depth_before': depth_before,
                'depth_after': depth_after,
                'region_name': region_name
            }
        )

    def log_payload_sync(self, status: str, dependency_key: Optional[str] = None):
        """Log a preview payload synchronization outcome."""
        self.logger.debug(
            f"Preview payload {status}",
            extra={'event': 'payload_sync', 'status': status,
                   'dependency_key': dependency_key}
        )

    def log_data_quality_warning(self, message: str, context: Optional[Dict[str, Any]] = None):
        """Log data quality warnings."""
        self.logger.warning(f"DATA QUALITY: {message}",
                            extra={'event': 'data_quality', 'context': context or {}})


def setup_logging(config) -> DrillDownLogger:
    """
    Set up logging based on configuration.

    Args:
        config: DrillDownConfig instance

    Returns:
        Configured DrillDownLogger instance
    """
    return DrillDownLogger(
        name="geo_drilldown",
        level=config.log_level,
        log_file=config.log_file
    )
