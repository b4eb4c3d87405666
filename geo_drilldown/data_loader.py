"""
Data loading module.

This module provides the DataLoader class for loading region catalogs,
boundary listings, chart configurations and GeoJSON uploads from disk with
validation and error handling.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from .models import MapChartConfig
from .exceptions import DataLoadError
from .utils.data_utils import safe_bool_conversion
from .utils.error_handler import create_error_context, log_error_details


REGION_REQUIRED_COLUMNS = ['id', 'name', 'type']
BOUNDARY_REQUIRED_COLUMNS = ['id', 'region_id']


class DataLoader:
    """
    Handles loading of the files the drill-down CLI works with.

    Tabular files are read as CSV, or as JSON records when the file name
    ends in ``.json``.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize the DataLoader.

        Args:
            logger: Optional logger instance for logging operations
        """
        self.logger = logger or logging.getLogger(__name__)
        self._loading_stats: Dict[str, int] = {}

    def _check_file(self, file_path: str) -> Path:
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")
        if not path.is_file():
            raise DataLoadError(f"Path is not a file: {file_path}", file_path=file_path)
        return path

    def _read_table(self, file_path: str, data_type: str) -> pd.DataFrame:
        path = self._check_file(file_path)
        try:
            if path.suffix.lower() == '.json':
                df = pd.read_json(path, orient='records', dtype=False)
            else:
                df = pd.read_csv(path)
        except pd.errors.EmptyDataError as e:
            raise DataLoadError(
                f"{data_type.capitalize()} file is empty or contains no valid data",
                file_path=file_path,
                original_error=e
            )
        except pd.errors.ParserError as e:
            raise DataLoadError(
                f"Error parsing {data_type} file: {str(e)}",
                file_path=file_path,
                original_error=e
            )
        except ValueError as e:
            raise DataLoadError(
                f"Error reading {data_type} JSON file: {str(e)}",
                file_path=file_path,
                original_error=e
            )

        if df.empty:
            raise DataLoadError(f"{data_type.capitalize()} file contains no data",
                                file_path=file_path)

        self._loading_stats[data_type] = len(df)
        self.logger.info(f"Loaded {len(df)} {data_type} records from {file_path}")
        return df

    def _validate_columns(self, df: pd.DataFrame, required_columns: List[str],
                          data_type: str, file_path: str):
        """
        Validate that required columns are present in DataFrame.

        Raises:
            DataLoadError: If required columns are missing
        """
        missing_columns = sorted(set(required_columns) - set(df.columns))
        if missing_columns:
            raise DataLoadError(
                f"Missing required columns in {data_type} file: {missing_columns}. "
                f"Available columns: {sorted(df.columns)}",
                file_path=file_path,
                missing_columns=missing_columns
            )

    def load_regions(self, file_path: str) -> pd.DataFrame:
        """
        Load the region catalog.

        Args:
            file_path: CSV or JSON file with ``id``, ``name``, ``type`` and
                optionally ``display_name``, ``parent_id``, ``country_code``

        Returns:
            DataFrame of region records

        Raises:
            FileNotFoundError: If the file does not exist
            DataLoadError: If the file cannot be parsed or lacks columns
        """
        df = self._read_table(file_path, 'region')
        self._validate_columns(df, REGION_REQUIRED_COLUMNS, 'region', file_path)

        duplicate_ids = int(df['id'].duplicated().sum())
        if duplicate_ids:
            self.logger.warning(
                f"Region file has {duplicate_ids} duplicate id(s); first occurrence wins",
                extra={'file_path': file_path, 'duplicate_count': duplicate_ids}
            )
            df = df.drop_duplicates(subset=['id'], keep='first')
        return df

    def load_boundaries(self, file_path: str) -> pd.DataFrame:
        """
        Load the boundary listing.

        Args:
            file_path: CSV or JSON file with ``id``, ``region_id`` and
                optionally ``name`` and ``is_default``

        Returns:
            DataFrame of boundary records with boolean ``is_default``
        """
        df = self._read_table(file_path, 'boundary')
        self._validate_columns(df, BOUNDARY_REQUIRED_COLUMNS, 'boundary', file_path)

        if 'name' not in df.columns:
            df['name'] = ''
        if 'is_default' not in df.columns:
            df['is_default'] = False
        df['is_default'] = df['is_default'].map(safe_bool_conversion).astype(bool)

        defaults_per_region = df[df['is_default']].groupby('region_id').size()
        conflicting = defaults_per_region[defaults_per_region > 1]
        if not conflicting.empty:
            raise DataLoadError(
                f"Regions with more than one default boundary: "
                f"{sorted(conflicting.index.tolist())}",
                file_path=file_path
            )
        return df

    def _load_json(self, file_path: str, data_type: str) -> Any:
        self._check_file(file_path)
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise DataLoadError(
                f"Invalid JSON in {data_type} file: {e}",
                file_path=file_path,
                original_error=e
            )
        except UnicodeDecodeError as e:
            context = create_error_context(
                operation=f"load_{data_type}",
                file_path=file_path,
                error_type=type(e).__name__
            )
            log_error_details(self.logger, e, context)
            raise DataLoadError(
                f"Could not decode {data_type} file as UTF-8",
                file_path=file_path,
                original_error=e
            )

    def load_chart_config(self, file_path: str) -> MapChartConfig:
        """
        Load a persisted map chart configuration.

        Raises:
            FileNotFoundError: If the file does not exist
            DataLoadError: If the file is not a JSON object
        """
        data = self._load_json(file_path, 'chart config')
        if not isinstance(data, dict):
            raise DataLoadError(
                "Chart config must be a JSON object",
                file_path=file_path
            )
        config = MapChartConfig.from_dict(data)
        self.logger.info(
            f"Loaded chart config: base column '{config.geographic_column}', "
            f"{len(config.layers)} layer(s), {len(config.filters)} filter(s)"
        )
        return config

    def load_geojson(self, file_path: str) -> Any:
        """Load an uploaded GeoJSON document without validating its shape."""
        return self._load_json(file_path, 'geojson')

    def load_column_values(self, file_path: str, column: str) -> List[Any]:
        """
        Load the distinct non-null values of one data column.

        Raises:
            DataLoadError: If the column is absent
        """
        df = self._read_table(file_path, 'data')
        self._validate_columns(df, [column], 'data', file_path)
        return df[column].dropna().unique().tolist()

    def get_loading_statistics(self) -> Dict[str, int]:
        """Record counts per loaded data type."""
        return dict(self._loading_stats)
