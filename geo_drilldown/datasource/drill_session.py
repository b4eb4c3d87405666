"""
Drill session wiring navigation to an asynchronous data source.

A DrillSession owns the drill path of one chart view. Each transition takes
a new request token; a lookup that completes after its token was superseded
is discarded, so the last request always wins.
"""

import logging
from dataclasses import replace
from typing import Any, Awaitable, Callable, Dict, List, Optional

from ..config import DrillDownConfig
from ..models import BoundarySet, DrillLevel, GeographicHierarchy, MapChartConfig, Region
from ..logging_config import DrillDownLogger
from ..hierarchy.hierarchy_catalog import HierarchyCatalog
from ..hierarchy.legacy_adapter import LegacyFieldAdapter
from ..matching.region_resolver import RegionResolver
from ..navigation.drill_navigator import DrillDownNavigator, DrillResult, DrillStatus
from ..navigation.filter_compiler import FilterCompiler
from ..navigation.layer_resolver import LayerResolver
from ..preview.payload_synchronizer import PreviewPayloadSynchronizer, PreviewRequest, SyncResult
from ..utils.error_handler import RetryConfig, retry_async
from .data_source import DataSource


class DrillSession:
    """Stateful drill-down session for one map chart view."""

    def __init__(self, data_source: DataSource, chart_config: MapChartConfig,
                 hierarchy: Optional[GeographicHierarchy] = None,
                 chain: Optional[List[str]] = None,
                 config: Optional[DrillDownConfig] = None,
                 logger: Optional[logging.Logger] = None,
                 drill_logger: Optional[DrillDownLogger] = None):
        """
        Initialize the session.

        Args:
            data_source: Asynchronous region, boundary and overlay lookups
            chart_config: Persisted chart configuration
            hierarchy: Canonical hierarchy; read from ``chart_config`` when omitted
            chain: Region-type chain used when reading legacy fields
            config: Engine configuration
            logger: Optional logger instance
            drill_logger: Optional structured logger for transitions and syncs
        """
        self.data_source = data_source
        self.chart_config = chart_config
        self.config = config or DrillDownConfig()
        self.logger = logger or logging.getLogger(__name__)
        self.drill_logger = drill_logger

        self.adapter = LegacyFieldAdapter(self.config.legacy_fields, logger=self.logger)
        self.hierarchy = hierarchy or self.adapter.normalize(chart_config, chain)

        self.layer_resolver = LayerResolver(self.config.legacy_fields, logger=self.logger)
        self.filter_compiler = FilterCompiler(logger=self.logger)
        self.navigator = DrillDownNavigator(
            resolver=RegionResolver(self.config.region_fuzzy_threshold, logger=self.logger),
            layer_resolver=self.layer_resolver,
            filter_compiler=self.filter_compiler,
            logger=self.logger
        )
        self.synchronizer = PreviewPayloadSynchronizer(logger=self.logger)
        self.retry_config = RetryConfig(
            max_attempts=self.config.retry_attempts,
            base_delay=self.config.retry_base_delay
        )

        self.path: List[DrillLevel] = []
        self.boundary_set: Optional[BoundarySet] = None
        self._token = 0

    @property
    def country_code(self) -> str:
        if self.hierarchy is not None and self.hierarchy.country_code:
            return self.hierarchy.country_code
        return self.chart_config.country_code or self.config.country_code

    @property
    def depth(self) -> int:
        return len(self.path)

    @property
    def active_geographic_column(self) -> Optional[str]:
        source = self.hierarchy if self.hierarchy is not None else self.chart_config
        column = self.layer_resolver.active_geographic_column(source, self.path)
        if column is None and self.hierarchy is not None:
            column = self.layer_resolver.active_geographic_column(self.chart_config, self.path)
        return column

    @property
    def filters(self) -> Dict[str, str]:
        return self.filter_compiler.compile(self.path)

    def _next_token(self) -> int:
        self._token += 1
        return self._token

    def _is_current(self, token: int) -> bool:
        return token == self._token

    async def _call(self, operation_name: str,
                    operation: Callable[[], Awaitable[Any]]) -> Any:
        return await retry_async(operation, operation_name, self.retry_config, self.logger)

    def _set_path(self, action: str, status: str, path: List[DrillLevel],
                  region_name: Optional[str] = None):
        depth_before = len(self.path)
        if path != self.path:
            # Lookups started against the old path must not land on the new one
            self._next_token()
            self.boundary_set = None
        self.path = path
        if self.drill_logger is not None:
            self.drill_logger.log_drill_transition(
                action, status, depth_before, len(path), region_name
            )

    async def _candidate_regions(self, path: List[DrillLevel]) -> List[Region]:
        next_level = self.hierarchy.get_level(len(path) + 1)
        expected_type = next_level.region_type if next_level else None

        if path and path[-1].region_id is not None:
            parent_id = path[-1].region_id
            regions = await self._call(
                'get_child_regions', lambda: self.data_source.get_child_regions(parent_id)
            )
            if regions:
                return regions

        return await self._call(
            'get_regions_by_country',
            lambda: self.data_source.get_regions_by_country(
                self.country_code, expected_type or None
            )
        )

    async def drill_into(self, region_name: str) -> DrillResult:
        """
        Drill into a clicked region.

        Returns:
            DrillResult; SUPERSEDED when another transition was issued while
            the region lookup was in flight

        Raises:
            DataSourceError: If the region lookup fails after all retries
        """
        token = self._next_token()
        path = list(self.path)

        regions: List[Region] = []
        if self.hierarchy is not None and self.hierarchy.has_drill_down():
            regions = await self._candidate_regions(path)

        if not self._is_current(token):
            self.logger.debug(
                f"Discarding superseded drill into '{region_name}'",
                extra={'event': 'drill_superseded', 'token': token}
            )
            return DrillResult(
                status=DrillStatus.SUPERSEDED,
                path=list(self.path),
                message=f"Drill into {region_name} superseded by a newer request"
            )

        result = self.navigator.drill_into(
            path, self.hierarchy, region_name, regions,
            layers=self.chart_config.layers,
            chart_filters=self.chart_config.filters
        )
        if result.drilled:
            self._set_path('drill_into', result.status.value, result.path, region_name)
        elif self.drill_logger is not None:
            self.drill_logger.log_drill_transition(
                'drill_into', result.status.value, len(path), len(path), region_name
            )
        return result

    def drill_up(self, target_level: int) -> List[DrillLevel]:
        """Truncate the path to ``target_level + 1`` entries; supersedes pending lookups."""
        self._next_token()
        self._set_path('drill_up', 'ok', self.navigator.drill_up(self.path, target_level))
        return self.path

    def drill_home(self) -> List[DrillLevel]:
        """Return home; supersedes pending lookups."""
        self._next_token()
        self._set_path('drill_home', 'ok', self.navigator.drill_home(self.path))
        return self.path

    def update_hierarchy(self, hierarchy: Optional[GeographicHierarchy]) -> List[DrillLevel]:
        """
        Replace the hierarchy after an edit and keep the longest valid path prefix.

        Supersedes pending lookups.
        """
        self._next_token()
        self.hierarchy = hierarchy
        reconciled = self.navigator.reconcile_path(
            self.path, hierarchy, self.chart_config.layers
        )
        self._set_path('update_hierarchy', 'ok', reconciled)
        return self.path

    async def load_boundary_set(self) -> Optional[BoundarySet]:
        """
        Fetch the boundaries for the active region.

        Returns:
            BoundarySet, or None when the active region is unknown or the
            path changed while the lookup was in flight
        """
        token = self._token
        path = list(self.path)

        catalog = None
        if not path:
            regions = await self._call(
                'get_regions_by_country',
                lambda: self.data_source.get_regions_by_country(self.country_code)
            )
            catalog = HierarchyCatalog.from_regions(regions, logger=self.logger)

        region_id = self.layer_resolver.active_boundary_set(path, catalog, self.country_code)
        if region_id is None:
            return None

        boundaries = await self._call(
            'get_boundaries', lambda: self.data_source.get_boundaries(region_id)
        )
        if not self._is_current(token):
            self.logger.debug("Discarding boundaries fetched for a superseded path")
            return None

        self.boundary_set = BoundarySet(region_id=region_id, boundaries=boundaries)
        return self.boundary_set

    def active_boundary_id(self) -> Optional[int]:
        return self.layer_resolver.active_boundary_id(
            self.chart_config, self.path, self.boundary_set
        )

    def preview(self) -> SyncResult:
        """Recompute the preview payload for the current path."""
        request = PreviewRequest.from_chart(
            self.chart_config,
            geographic_column=self.active_geographic_column,
            drill_filters=self.filters,
            default_aggregate_function=self.config.default_aggregate_function
        )
        request = replace(request, boundary_id=self.active_boundary_id())
        result = self.synchronizer.recompute(request)
        if self.drill_logger is not None:
            self.drill_logger.log_payload_sync(result.status.value, result.dependency_key)
        return result

    async def fetch_overlay(self, result: SyncResult) -> Optional[Dict[str, float]]:
        """
        Fetch overlay values for an emitted preview payload.

        Returns:
            Values per region label, or None when nothing was emitted or the
            path changed while the fetch was in flight
        """
        if not result.emitted:
            return None
        token = self._token
        descriptor = result.payload.data_fetch
        values = await self._call(
            'fetch_aggregated_overlay',
            lambda: self.data_source.fetch_aggregated_overlay(descriptor)
        )
        if not self._is_current(token):
            return None
        return values

    async def fetch_boundary_geometry(self, boundary_id: int) -> Dict[str, Any]:
        """Fetch the GeoJSON of a boundary."""
        return await self._call(
            'get_boundary_geometry',
            lambda: self.data_source.get_boundary_geometry(boundary_id)
        )
