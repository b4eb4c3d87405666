"""
Data source boundary for the drill-down engine.

Region, boundary and overlay lookups are the only suspending operations in
the engine. This module defines the asynchronous DataSource interface and a
pandas-backed implementation over in-memory DataFrames.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import pandas as pd

from ..models import Boundary, DataFetchDescriptor, Region
from ..hierarchy.hierarchy_catalog import HierarchyCatalog
from ..navigation.filter_compiler import FilterCompiler
from ..utils.data_utils import safe_int_conversion


AGGREGATE_ALIASES = {'avg': 'mean'}


class DataSource(ABC):
    """Asynchronous lookups backing drill-down navigation and previews."""

    @abstractmethod
    async def get_regions_by_country(self, country_code: str,
                                     region_type: Optional[str] = None) -> List[Region]:
        """Regions of a country, optionally of one type."""

    @abstractmethod
    async def get_child_regions(self, parent_id: int) -> List[Region]:
        """Direct children of a region."""

    @abstractmethod
    async def get_boundaries(self, region_id: int) -> List[Boundary]:
        """Boundaries uploaded for a region."""

    @abstractmethod
    async def get_boundary_geometry(self, boundary_id: int) -> Dict[str, Any]:
        """GeoJSON FeatureCollection of a boundary."""

    @abstractmethod
    async def fetch_aggregated_overlay(self, descriptor: DataFetchDescriptor) -> Dict[str, float]:
        """Aggregated value per region label."""


class DataFrameDataSource(DataSource):
    """
    DataSource over pandas DataFrames.

    Tables are registered under ``schema.table``. Overlay aggregation applies
    drill equality filters and chart filters, groups by the geographic column
    and aggregates the value column.
    """

    def __init__(self, catalog: HierarchyCatalog,
                 boundaries_df: Optional[pd.DataFrame] = None,
                 geometries: Optional[Dict[int, Dict[str, Any]]] = None,
                 tables: Optional[Dict[str, pd.DataFrame]] = None,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the data source.

        Args:
            catalog: Region catalog
            boundaries_df: DataFrame with ``id``, ``region_id``, ``name``, ``is_default``
            geometries: Mapping of boundary id to FeatureCollection
            tables: Mapping of ``schema.table`` to data
            logger: Optional logger instance
        """
        self.catalog = catalog
        self.boundaries_df = boundaries_df if boundaries_df is not None else pd.DataFrame(
            columns=['id', 'region_id', 'name', 'is_default']
        )
        self.geometries = dict(geometries or {})
        self.tables = dict(tables or {})
        self.logger = logger or logging.getLogger(__name__)
        self.filter_compiler = FilterCompiler(logger=self.logger)

    def register_table(self, schema_name: str, table_name: str, frame: pd.DataFrame):
        """Register a table for overlay aggregation."""
        self.tables[f"{schema_name}.{table_name}"] = frame

    async def get_regions_by_country(self, country_code: str,
                                     region_type: Optional[str] = None) -> List[Region]:
        return self.catalog.get_regions(country_code, region_type)

    async def get_child_regions(self, parent_id: int) -> List[Region]:
        return self.catalog.get_children(parent_id)

    async def get_boundaries(self, region_id: int) -> List[Boundary]:
        frame = self.boundaries_df
        if frame.empty:
            return []
        region_ids = pd.to_numeric(frame['region_id'], errors='coerce')
        records = frame[region_ids == region_id].to_dict('records')
        return [Boundary.from_dict(record) for record in records]

    async def get_boundary_geometry(self, boundary_id: int) -> Dict[str, Any]:
        geometry = self.geometries.get(safe_int_conversion(boundary_id))
        if geometry is None:
            raise ValueError(f"No geometry stored for boundary {boundary_id}")
        return geometry

    async def fetch_aggregated_overlay(self, descriptor: DataFetchDescriptor) -> Dict[str, float]:
        """
        Aggregate overlay values per region.

        Raises:
            ValueError: If the table or a required column is unknown
        """
        key = f"{descriptor.schema_name}.{descriptor.table_name}"
        if key not in self.tables:
            raise ValueError(f"Unknown table: {key}")

        frame = self.tables[key]
        column = descriptor.geographic_column
        if column not in frame.columns:
            raise ValueError(f"Geographic column '{column}' not in {key}")

        filters = self.filter_compiler.merge(descriptor.filters, descriptor.chart_filters)
        frame = self.filter_compiler.apply(frame, filters)

        function = AGGREGATE_ALIASES.get(descriptor.aggregate_function,
                                         descriptor.aggregate_function)
        value_column = descriptor.value_column
        if function == 'count':
            if value_column and value_column in frame.columns:
                grouped = frame.groupby(column)[value_column].count()
            else:
                grouped = frame.groupby(column).size()
        else:
            if value_column not in frame.columns:
                raise ValueError(f"Value column '{value_column}' not in {key}")
            values = pd.to_numeric(frame[value_column], errors='coerce')
            grouped = values.groupby(frame[column]).agg(function)

        result = grouped.dropna().reset_index(name='value')
        result = self._apply_sort(result, descriptor, column)
        result = self._apply_pagination(result, descriptor.pagination)

        self.logger.debug(
            f"Aggregated {len(result)} region value(s) from {key}",
            extra={'table': key, 'geographic_column': column, 'aggregate_function': function}
        )
        return {str(label): float(value) for label, value in zip(result[column], result['value'])}

    @staticmethod
    def _apply_sort(result: pd.DataFrame, descriptor: DataFetchDescriptor,
                    column: str) -> pd.DataFrame:
        by, ascending = [], []
        for entry in descriptor.sort:
            sort_column = entry.get('column')
            if sort_column == column:
                by.append(column)
            elif sort_column == descriptor.value_column:
                by.append('value')
            else:
                continue
            ascending.append(entry.get('direction', 'asc') != 'desc')
        if by:
            result = result.sort_values(by=by, ascending=ascending, kind='mergesort')
        return result

    @staticmethod
    def _apply_pagination(result: pd.DataFrame,
                          pagination: Optional[Dict[str, Any]]) -> pd.DataFrame:
        if not pagination or not pagination.get('enabled'):
            return result
        page_size = safe_int_conversion(pagination.get('page_size'))
        if page_size and page_size > 0:
            return result.head(page_size)
        return result
