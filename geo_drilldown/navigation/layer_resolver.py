"""
Active column and boundary resolution for a drill path.

This module answers two questions for the current drill depth: which data
column holds the region names shown on the map, and which boundary
(GeoJSON) draws them.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Union

from ..config import LEGACY_DRILL_FIELDS
from ..models import (
    Boundary, BoundarySet, DrillLevel, GeographicHierarchy, LayerDescriptor, MapChartConfig
)
from ..exceptions import BoundaryUnresolvedError
from ..utils.data_utils import is_null_or_empty


class BoundarySelectionStatus(Enum):
    """Outcome of default boundary selection."""
    RESOLVED = "resolved"
    UNRESOLVED = "unresolved"


@dataclass
class BoundarySelection:
    """Result of picking the default boundary of a BoundarySet."""

    status: BoundarySelectionStatus
    region_id: Optional[int] = None
    boundary: Optional[Boundary] = None

    @property
    def is_resolved(self) -> bool:
        return self.status == BoundarySelectionStatus.RESOLVED

    @property
    def boundary_id(self) -> Optional[int]:
        return self.boundary.id if self.boundary else None


class LayerResolver:
    """Resolves the active geographic column and boundary for a drill path."""

    def __init__(self, legacy_fields: Sequence[str] = LEGACY_DRILL_FIELDS,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the resolver.

        Args:
            legacy_fields: Legacy fixed field names, shallowest first
            logger: Optional logger instance
        """
        self.legacy_fields = tuple(legacy_fields)
        self.logger = logger or logging.getLogger(__name__)

    def active_geographic_column(self, source: Union[GeographicHierarchy, MapChartConfig, None],
                                 path: Sequence[DrillLevel]) -> Optional[str]:
        """
        Column holding region names at the current drill depth.

        Depth 0 gives the base column. Deeper levels prefer the dynamic
        hierarchy, then the legacy field for that depth, then the column
        stored on the drilled level.

        Args:
            source: Hierarchy or persisted chart configuration
            path: Current drill path

        Returns:
            Column name, or None when there is not enough data to decide
        """
        depth = len(path)

        if isinstance(source, MapChartConfig):
            column = self._column_from_config(source, depth)
        elif isinstance(source, GeographicHierarchy):
            column = source.column_for_depth(depth)
        else:
            column = None

        if column:
            return column
        if path and not is_null_or_empty(path[-1].geographic_column):
            return path[-1].geographic_column
        return None

    def _column_from_config(self, config: MapChartConfig, depth: int) -> Optional[str]:
        hierarchy = config.geographic_hierarchy
        if depth == 0:
            if config.geographic_column:
                return config.geographic_column
            if hierarchy is not None and hierarchy.base_level.column:
                return hierarchy.base_level.column
            if config.layers and config.layers[0].geographic_column:
                return config.layers[0].geographic_column
            return None

        if hierarchy is not None:
            column = hierarchy.column_for_depth(depth)
            if column:
                return column

        if depth <= len(self.legacy_fields):
            column = getattr(config, self.legacy_fields[depth - 1], None)
            if not is_null_or_empty(column):
                return column
        return None

    def active_boundary_set(self, path: Sequence[DrillLevel], catalog,
                            country_code: str) -> Optional[int]:
        """
        Region id whose boundaries are shown at the current depth.

        Depth 0 uses the country root region; deeper levels use the last
        drilled region, since finer boundaries are uploaded per region.

        Args:
            path: Current drill path
            catalog: HierarchyCatalog used to find the country root region
            country_code: Country of the chart

        Returns:
            Region id, or None when the root region is unknown
        """
        if path:
            return path[-1].region_id

        root = catalog.get_root_region(country_code) if catalog is not None else None
        if root is None:
            self.logger.debug(f"No root region found for country {country_code}")
            return None
        return root.id

    def default_boundary_selection(self, boundary_set: BoundarySet) -> BoundarySelection:
        """
        Pick the flagged default boundary; never guesses.

        Returns:
            BoundarySelection, UNRESOLVED when no boundary is flagged default
        """
        for boundary in boundary_set.boundaries:
            if boundary.is_default:
                return BoundarySelection(
                    status=BoundarySelectionStatus.RESOLVED,
                    region_id=boundary_set.region_id,
                    boundary=boundary
                )

        self.logger.info(
            f"No default boundary flagged for region {boundary_set.region_id} "
            f"({len(boundary_set.boundaries)} available)",
            extra={'region_id': boundary_set.region_id,
                   'boundary_count': len(boundary_set.boundaries)}
        )
        return BoundarySelection(
            status=BoundarySelectionStatus.UNRESOLVED,
            region_id=boundary_set.region_id
        )

    def require_default_boundary(self, boundary_set: BoundarySet) -> Boundary:
        """
        Return the default boundary or raise.

        Raises:
            BoundaryUnresolvedError: If no boundary is flagged default
        """
        selection = self.default_boundary_selection(boundary_set)
        if not selection.is_resolved:
            raise BoundaryUnresolvedError(
                f"Region {boundary_set.region_id} has no default boundary; "
                f"choose one of {len(boundary_set.boundaries)} explicitly",
                region_id=boundary_set.region_id,
                boundary_count=len(boundary_set.boundaries)
            )
        return selection.boundary

    def active_boundary_id(self, config: Optional[MapChartConfig], path: Sequence[DrillLevel],
                           boundary_set: Optional[BoundarySet] = None) -> Optional[int]:
        """
        Boundary to draw at the current depth.

        A boundary pinned on the drilled level wins; at depth 0 an explicit
        ``selected_geojson_id`` wins; otherwise the default of the boundary set.
        """
        if path and path[-1].boundary_id:
            return path[-1].boundary_id

        if not path and config is not None:
            if config.selected_geojson_id:
                return config.selected_geojson_id
            if config.layers and config.layers[0].boundary_id:
                return config.layers[0].boundary_id

        if boundary_set is not None:
            return self.default_boundary_selection(boundary_set).boundary_id
        return None

    @staticmethod
    def boundary_for_region(layer: LayerDescriptor, region_name: str) -> Optional[int]:
        """
        Boundary configured for a region in a design-time layer.

        When the layer lists selected regions, only a listed region with its
        own boundary is configured; otherwise the layer-wide boundary applies.
        """
        if layer.selected_regions:
            for selected in layer.selected_regions:
                if selected.region_name == region_name:
                    return selected.boundary_id
            return None
        return layer.boundary_id
