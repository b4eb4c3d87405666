"""
Drill-down navigation over a map chart.

This module provides the DrillDownNavigator state machine. The drill path is
an ordered list of DrillLevel entries; an empty path is the home view. All
transitions return a new path and leave the input path untouched.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from ..models import (
    ChartFilter, DrillLevel, GeographicHierarchy, LayerDescriptor, ParentSelection, Region
)
from ..exceptions import GeoDrillError, NoFurtherDrillDownError, create_region_not_found_error
from ..matching.region_resolver import RegionResolver
from ..utils.data_utils import is_null_or_empty
from .filter_compiler import FilterCompiler
from .layer_resolver import LayerResolver


class DrillStatus(Enum):
    """Outcome of a drill transition."""
    DRILLED = "drilled"
    REGION_NOT_FOUND = "region_not_found"
    NO_FURTHER_DRILL_DOWN = "no_further_drill_down"
    INSUFFICIENT_DATA = "insufficient_data"
    REGION_NOT_CONFIGURED = "region_not_configured"
    REGION_EXCLUDED_BY_FILTER = "region_excluded_by_filter"
    SUPERSEDED = "superseded"


@dataclass
class DrillResult:
    """
    Result of a drill transition.

    Attributes:
        status: Outcome of the transition
        path: Drill path after the transition (the input path unless DRILLED)
        region: Region drilled into, when resolved
        error: Error describing a refused transition
        message: Human-readable summary
    """
    status: DrillStatus
    path: List[DrillLevel] = field(default_factory=list)
    region: Optional[Region] = None
    error: Optional[GeoDrillError] = None
    message: str = ""

    @property
    def drilled(self) -> bool:
        return self.status == DrillStatus.DRILLED

    @property
    def depth(self) -> int:
        return len(self.path)


class DrillDownNavigator:
    """
    Drill-down state machine.

    States are Home (empty path) and AtLevel(n). Drilling prefers the
    dynamic hierarchy; design-time layers are used only when the hierarchy
    has no drill-down levels.
    """

    def __init__(self, resolver: Optional[RegionResolver] = None,
                 layer_resolver: Optional[LayerResolver] = None,
                 filter_compiler: Optional[FilterCompiler] = None,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the navigator.

        Args:
            resolver: Region resolver used to resolve clicked labels
            layer_resolver: Resolver for active columns and layer boundaries
            filter_compiler: Compiler used for filter exclusion checks
            logger: Optional logger instance
        """
        self.logger = logger or logging.getLogger(__name__)
        self.resolver = resolver or RegionResolver(logger=self.logger)
        self.layer_resolver = layer_resolver or LayerResolver(logger=self.logger)
        self.filter_compiler = filter_compiler or FilterCompiler(logger=self.logger)

    def _current_column(self, path: Sequence[DrillLevel],
                        hierarchy: Optional[GeographicHierarchy],
                        layers: Sequence[LayerDescriptor]) -> str:
        column = self.layer_resolver.active_geographic_column(hierarchy, path)
        if not column and not path and layers:
            column = layers[0].geographic_column
        return column or ""

    @staticmethod
    def _parent_selections(path: Sequence[DrillLevel], column: str,
                           region_name: str) -> List[ParentSelection]:
        # Each entry already carries its ancestors, so extend the last one only
        selections = [
            ParentSelection(column=s.column, value=s.value)
            for s in (path[-1].parent_selections if path else [])
        ]
        selections.append(ParentSelection(column=column, value=region_name))
        return selections

    def drill_into(self, path: Sequence[DrillLevel], hierarchy: Optional[GeographicHierarchy],
                   region_name: str, regions: Sequence[Region],
                   layers: Optional[Sequence[LayerDescriptor]] = None,
                   chart_filters: Optional[Sequence[ChartFilter]] = None) -> DrillResult:
        """
        Drill into a clicked region.

        Args:
            path: Current drill path
            hierarchy: Canonical hierarchy, or None when not yet available
            region_name: Clicked region label
            regions: Candidate regions for resolution
            layers: Optional design-time layers
            chart_filters: Chart filters, used to explain refused layer drills

        Returns:
            DrillResult carrying the new path, or the unchanged path and a
            refusal status
        """
        current = list(path)
        layers = list(layers or [])

        if hierarchy is None and not layers:
            return DrillResult(
                status=DrillStatus.INSUFFICIENT_DATA,
                path=current,
                message="Geographic hierarchy not available"
            )

        if hierarchy is not None and hierarchy.has_drill_down():
            return self._drill_dynamic(current, hierarchy, region_name, regions)

        if layers:
            return self._drill_layer(current, hierarchy, region_name, layers, chart_filters)

        return self._no_further(current, hierarchy.depth if hierarchy else 0)

    def _drill_dynamic(self, path: List[DrillLevel], hierarchy: GeographicHierarchy,
                       region_name: str, regions: Sequence[Region]) -> DrillResult:
        depth = len(path)
        next_level = hierarchy.get_level(depth + 1)
        if next_level is None or next_level.is_placeholder:
            return self._no_further(path, hierarchy.depth)

        parent_id = path[-1].region_id if path else None
        expected_type = next_level.region_type or None
        region = self.resolver.resolve(regions, region_name, expected_type, parent_id)
        if region is None:
            error = create_region_not_found_error(
                region_name,
                expected_type=expected_type,
                parent_id=parent_id,
                candidate_count=len(regions)
            )
            self.logger.info(
                error.message,
                extra={'event': 'drill_refused', 'status': DrillStatus.REGION_NOT_FOUND.value,
                       'depth': depth}
            )
            return DrillResult(
                status=DrillStatus.REGION_NOT_FOUND,
                path=path,
                error=error,
                message=error.message
            )

        active_column = self._current_column(path, hierarchy, [])
        new_level = DrillLevel(
            level=depth + 1,
            selected_region_name=region_name,
            region_id=region.id,
            geographic_column=next_level.column,
            parent_selections=self._parent_selections(path, active_column, region_name)
        )
        label = (next_level.label or next_level.column).lower()
        return DrillResult(
            status=DrillStatus.DRILLED,
            path=path + [new_level],
            region=region,
            message=f"Drilling down to {label} in {region_name}"
        )

    def _drill_layer(self, path: List[DrillLevel], hierarchy: Optional[GeographicHierarchy],
                     region_name: str, layers: List[LayerDescriptor],
                     chart_filters: Optional[Sequence[ChartFilter]]) -> DrillResult:
        depth = len(path)
        if depth + 1 >= len(layers):
            return self._no_further(path, max(len(layers) - 1, 0))

        next_layer = layers[depth + 1]
        boundary_id = self.layer_resolver.boundary_for_region(next_layer, region_name)
        if not boundary_id:
            if self.filter_compiler.is_region_excluded(region_name, chart_filters):
                status = DrillStatus.REGION_EXCLUDED_BY_FILTER
                message = f"{region_name} excluded by filter"
            else:
                status = DrillStatus.REGION_NOT_CONFIGURED
                message = f"{region_name} not configured for drill-down"
            self.logger.info(
                message,
                extra={'event': 'drill_refused', 'status': status.value, 'depth': depth}
            )
            return DrillResult(status=status, path=path, message=message)

        region_id = next_layer.region_id
        for selected in next_layer.selected_regions:
            if selected.region_name == region_name:
                region_id = selected.region_id
                break

        active_column = self._current_column(path, hierarchy, layers)
        new_level = DrillLevel(
            level=depth + 1,
            selected_region_name=region_name,
            region_id=region_id,
            geographic_column=next_layer.geographic_column or "",
            parent_selections=self._parent_selections(path, active_column, region_name),
            boundary_id=boundary_id
        )
        return DrillResult(
            status=DrillStatus.DRILLED,
            path=path + [new_level],
            message=f"Drilling down to layer {depth + 1} in {region_name}"
        )

    def _no_further(self, path: List[DrillLevel], max_depth: int) -> DrillResult:
        error = NoFurtherDrillDownError(
            "No further drill-down levels configured",
            current_depth=len(path),
            max_depth=max_depth
        )
        return DrillResult(
            status=DrillStatus.NO_FURTHER_DRILL_DOWN,
            path=path,
            error=error,
            message=error.message
        )

    def drill_up(self, path: Sequence[DrillLevel], target_level: int) -> List[DrillLevel]:
        """
        Truncate the path so ``target_level + 1`` entries remain.

        A negative target returns home. Targets beyond the path are clamped.
        """
        if target_level < 0:
            return []
        return list(path[:target_level + 1])

    def drill_home(self, path: Sequence[DrillLevel]) -> List[DrillLevel]:
        """Return to the home view."""
        return self.drill_up(path, -1)

    def validate_path(self, path: Sequence[DrillLevel],
                      hierarchy: Optional[GeographicHierarchy],
                      layers: Optional[Sequence[LayerDescriptor]] = None
                      ) -> Tuple[bool, List[str]]:
        """
        Validate a drill path against a hierarchy.

        Args:
            path: Drill path to validate
            hierarchy: Hierarchy the path was built for
            layers: Design-time layers, used when the hierarchy has no drill levels

        Returns:
            Tuple of (is_valid, list_of_issues)
        """
        issues = []
        for position in range(len(path)):
            issue = self._entry_issue(path, position, hierarchy, list(layers or []))
            if issue:
                issues.append(issue)
        return len(issues) == 0, issues

    def reconcile_path(self, path: Sequence[DrillLevel],
                       hierarchy: Optional[GeographicHierarchy],
                       layers: Optional[Sequence[LayerDescriptor]] = None) -> List[DrillLevel]:
        """Longest prefix of ``path`` that is still valid for the hierarchy."""
        layers = list(layers or [])
        for position in range(len(path)):
            issue = self._entry_issue(path, position, hierarchy, layers)
            if issue:
                self.logger.info(
                    f"Drill path truncated to depth {position}: {issue}",
                    extra={'event': 'path_reconciled', 'depth_before': len(path),
                           'depth_after': position}
                )
                return list(path[:position])
        return list(path)

    def _entry_issue(self, path: Sequence[DrillLevel], position: int,
                     hierarchy: Optional[GeographicHierarchy],
                     layers: List[LayerDescriptor]) -> Optional[str]:
        level = path[position]
        if level.level != position + 1:
            return f"Path entry {position} is numbered {level.level}, expected {position + 1}"

        if hierarchy is not None and hierarchy.has_drill_down():
            expected_column = hierarchy.column_for_depth(position + 1)
            if expected_column is None:
                return f"Hierarchy has no drill-down level {position + 1}"
            if level.geographic_column != expected_column:
                return (f"Level {position + 1} shows '{level.geographic_column}', "
                        f"hierarchy expects '{expected_column}'")
            clicked_column = self.layer_resolver.active_geographic_column(
                hierarchy, path[:position]
            )
        elif layers:
            if position + 1 >= len(layers):
                return f"No design-time layer for level {position + 1}"
            clicked_column = None
        else:
            return f"Nothing configured for drill-down level {position + 1}"

        if clicked_column and level.parent_selections:
            selected_column = level.parent_selections[-1].column
            if not is_null_or_empty(selected_column) and selected_column != clicked_column:
                return (f"Level {position + 1} was selected on '{selected_column}', "
                        f"which is no longer shown at depth {position}")
        return None
