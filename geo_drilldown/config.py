"""
Configuration management for the geographic drill-down engine.

This module provides the dataclass holding engine-wide settings such as the
default country, region matching behaviour, aggregation defaults, the legacy
drill-down field names and logging options.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .exceptions import ConfigurationError


LEGACY_DRILL_FIELDS: Tuple[str, ...] = ('district_column', 'ward_column', 'subward_column')

AGGREGATE_FUNCTIONS: List[str] = ['sum', 'avg', 'mean', 'count', 'min', 'max']


@dataclass
class DrillDownConfig:
    """Configuration class for drill-down resolution parameters."""

    # Country whose region catalog backs the hierarchy
    country_code: str = "IND"

    # Region resolution (None disables the fuzzy fallback)
    region_fuzzy_threshold: Optional[int] = None

    # Data overlay defaults
    default_aggregate_function: str = "sum"
    allowed_aggregate_functions: List[str] = field(
        default_factory=lambda: list(AGGREGATE_FUNCTIONS)
    )

    # Legacy fixed-field drill-down columns, shallowest first
    legacy_fields: Tuple[str, ...] = LEGACY_DRILL_FIELDS

    # Boundary upload join key
    boundary_join_key: str = "name"

    # Data source retry behaviour
    retry_attempts: int = 3
    retry_base_delay: float = 0.5

    # Show progress bars for feature lists at least this long
    progress_threshold: int = 1000

    # Logging configuration
    log_level: str = "INFO"
    log_file: Optional[str] = None

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_country()
        self._validate_threshold()
        self._validate_aggregation()
        self._validate_retry()
        self._validate_log_level()

    def _validate_country(self):
        """Validate the country code."""
        if not self.country_code or not str(self.country_code).strip():
            raise ConfigurationError(
                "Country code must be a non-empty string",
                config_key='country_code',
                config_value=self.country_code
            )
        self.country_code = str(self.country_code).strip().upper()

    def _validate_threshold(self):
        """Validate the fuzzy region matching threshold."""
        if self.region_fuzzy_threshold is None:
            return
        if not 0 <= self.region_fuzzy_threshold <= 100:
            raise ConfigurationError(
                f"Region fuzzy threshold must be between 0 and 100: {self.region_fuzzy_threshold}",
                config_key='region_fuzzy_threshold',
                config_value=self.region_fuzzy_threshold
            )

    def _validate_aggregation(self):
        """Validate the default aggregate function."""
        if self.default_aggregate_function not in self.allowed_aggregate_functions:
            raise ConfigurationError(
                f"Unsupported aggregate function: {self.default_aggregate_function}",
                config_key='default_aggregate_function',
                config_value=self.default_aggregate_function,
                valid_values=self.allowed_aggregate_functions
            )

    def _validate_retry(self):
        """Validate data source retry settings."""
        if self.retry_attempts < 1:
            raise ConfigurationError(
                f"Retry attempts must be at least 1: {self.retry_attempts}",
                config_key='retry_attempts',
                config_value=self.retry_attempts
            )
        if self.retry_base_delay < 0:
            raise ConfigurationError(
                f"Retry base delay cannot be negative: {self.retry_base_delay}",
                config_key='retry_base_delay',
                config_value=self.retry_base_delay
            )

    def _validate_log_level(self):
        """Validate the logging level name."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if self.log_level.upper() not in valid_levels:
            raise ConfigurationError(
                f"Invalid log level: {self.log_level}",
                config_key='log_level',
                config_value=self.log_level,
                valid_values=valid_levels
            )
        self.log_level = self.log_level.upper()

    @classmethod
    def from_dict(cls, config_dict: Dict) -> 'DrillDownConfig':
        """Create configuration from dictionary."""
        values = dict(config_dict)
        if 'legacy_fields' in values:
            values['legacy_fields'] = tuple(values['legacy_fields'])
        return cls(**values)

    def to_dict(self) -> Dict:
        """Convert configuration to dictionary."""
        return {
            'country_code': self.country_code,
            'region_fuzzy_threshold': self.region_fuzzy_threshold,
            'default_aggregate_function': self.default_aggregate_function,
            'allowed_aggregate_functions': list(self.allowed_aggregate_functions),
            'legacy_fields': list(self.legacy_fields),
            'boundary_join_key': self.boundary_join_key,
            'retry_attempts': self.retry_attempts,
            'retry_base_delay': self.retry_base_delay,
            'progress_threshold': self.progress_threshold,
            'log_level': self.log_level,
            'log_file': self.log_file
        }
