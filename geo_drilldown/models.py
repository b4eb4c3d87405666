"""
Data models for the geographic drill-down engine.

This module defines the value types exchanged between the hierarchy catalog,
the drill-down navigator, the layer and filter resolvers and the persisted
map chart configuration.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .exceptions import ValidationError
from .utils.data_utils import (
    safe_bool_conversion, safe_int_conversion, safe_string_conversion, is_null_or_empty
)


@dataclass
class Region:
    """A read-only administrative region sourced from the region catalog."""

    id: int
    name: str
    display_name: str = ""
    type: str = ""
    parent_id: Optional[int] = None
    code: Optional[str] = None
    country_code: Optional[str] = None

    def __post_init__(self):
        """Clean and validate data after initialization."""
        region_id = safe_int_conversion(self.id)
        if region_id is None:
            raise ValidationError(
                f"Region id must be an integer: {self.id!r}",
                field_name='id',
                invalid_value=self.id,
                validation_rules=['integer_id']
            )
        self.id = region_id
        self.name = safe_string_conversion(self.name)
        self.display_name = safe_string_conversion(self.display_name)
        self.type = safe_string_conversion(self.type)
        self.parent_id = safe_int_conversion(self.parent_id)
        if self.code is not None:
            self.code = safe_string_conversion(self.code) or None
        if self.country_code is not None:
            self.country_code = safe_string_conversion(self.country_code) or None

    @property
    def label(self) -> str:
        """Label shown on the map: display name when set, else name."""
        return self.display_name or self.name

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Region':
        """Create a region from a catalog record."""
        return cls(
            id=data.get('id'),
            name=data.get('name', ''),
            display_name=data.get('display_name', ''),
            type=data.get('type', ''),
            parent_id=data.get('parent_id'),
            code=data.get('code', data.get('region_code')),
            country_code=data.get('country_code')
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert region to dictionary."""
        return {
            'id': self.id,
            'name': self.name,
            'display_name': self.display_name,
            'type': self.type,
            'parent_id': self.parent_id,
            'code': self.code,
            'country_code': self.country_code
        }


@dataclass
class GeographicLevel:
    """
    One level of a geographic hierarchy.

    Attributes:
        level: Depth of the level (0 for the base level)
        column: Data column holding region names at this depth
        region_type: Catalog region type of the region drilled into at this depth
        label: Display label for the level
    """
    level: int
    column: str
    region_type: str = ""
    label: str = ""

    @property
    def is_placeholder(self) -> bool:
        """A placeholder level keeps numbering contiguous but has no column."""
        return is_null_or_empty(self.column)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GeographicLevel':
        return cls(
            level=safe_int_conversion(data.get('level')) or 0,
            column=safe_string_conversion(data.get('column')),
            region_type=safe_string_conversion(data.get('region_type')),
            label=safe_string_conversion(data.get('label'))
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'level': self.level,
            'column': self.column,
            'region_type': self.region_type,
            'label': self.label
        }


@dataclass
class GeographicHierarchy:
    """
    Canonical dynamic drill-down descriptor for a map chart.

    Attributes:
        country_code: Country whose region catalog backs the hierarchy
        base_level: Level 0, the column shown before any drill-down
        drill_down_levels: Ordered levels 1..n
    """
    country_code: str
    base_level: GeographicLevel
    drill_down_levels: List[GeographicLevel] = field(default_factory=list)

    @property
    def depth(self) -> int:
        """Number of drill-down levels below the base level."""
        return len(self.drill_down_levels)

    def get_level(self, depth: int) -> Optional[GeographicLevel]:
        """
        Get the level at a given depth.

        Args:
            depth: 0 for the base level, n >= 1 for drill-down level n

        Returns:
            GeographicLevel if present, None otherwise
        """
        if depth == 0:
            return self.base_level
        if 1 <= depth <= len(self.drill_down_levels):
            return self.drill_down_levels[depth - 1]
        return None

    def column_for_depth(self, depth: int) -> Optional[str]:
        """Column configured at a depth, or None when missing or a placeholder."""
        level = self.get_level(depth)
        if level is None or level.is_placeholder:
            return None
        return level.column

    def columns(self) -> List[str]:
        """All non-empty columns, base level first."""
        return [
            level.column for level in [self.base_level] + self.drill_down_levels
            if not level.is_placeholder
        ]

    def is_complete(self) -> bool:
        """Check that no drill-down level is a placeholder."""
        return not any(level.is_placeholder for level in self.drill_down_levels)

    def has_drill_down(self) -> bool:
        """Check if at least one drill-down level carries a column."""
        return any(not level.is_placeholder for level in self.drill_down_levels)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional['GeographicHierarchy']:
        """Create a hierarchy from its persisted form; None when absent."""
        if not data or not isinstance(data, dict):
            return None
        base = data.get('base_level') or {}
        return cls(
            country_code=safe_string_conversion(data.get('country_code')),
            base_level=GeographicLevel.from_dict(base),
            drill_down_levels=[
                GeographicLevel.from_dict(level)
                for level in data.get('drill_down_levels') or []
            ]
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'country_code': self.country_code,
            'base_level': self.base_level.to_dict(),
            'drill_down_levels': [level.to_dict() for level in self.drill_down_levels]
        }


@dataclass
class ParentSelection:
    """An ancestor selection ``column = value`` carried by a drill level."""

    column: str
    value: str

    def to_dict(self) -> Dict[str, str]:
        return {'column': self.column, 'value': self.value}


@dataclass
class DrillLevel:
    """
    One entry of a drill path.

    Attributes:
        level: Depth reached by this entry (1-based)
        selected_region_name: Label the user clicked
        region_id: Resolved region id
        geographic_column: Column shown at this depth
        parent_selections: Flattened ancestor selections including this one
        boundary_id: Boundary pinned by a design-time layer, if any
    """
    level: int
    selected_region_name: str
    region_id: Optional[int]
    geographic_column: str
    parent_selections: List[ParentSelection] = field(default_factory=list)
    boundary_id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'level': self.level,
            'selected_region_name': self.selected_region_name,
            'region_id': self.region_id,
            'geographic_column': self.geographic_column,
            'parent_selections': [s.to_dict() for s in self.parent_selections],
            'boundary_id': self.boundary_id
        }


@dataclass
class Boundary:
    """An uploaded boundary (GeoJSON) for a region."""

    id: int
    name: str = ""
    is_default: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Boundary':
        return cls(
            id=safe_int_conversion(data.get('id')),
            name=safe_string_conversion(data.get('name')),
            is_default=safe_bool_conversion(data.get('is_default', False))
        )

    def to_dict(self) -> Dict[str, Any]:
        return {'id': self.id, 'name': self.name, 'is_default': self.is_default}


@dataclass
class BoundarySet:
    """Boundaries available for one region; at most one is the default."""

    region_id: int
    boundaries: List[Boundary] = field(default_factory=list)

    def __post_init__(self):
        """Validate the single-default invariant."""
        defaults = [b.id for b in self.boundaries if b.is_default]
        if len(defaults) > 1:
            raise ValidationError(
                f"Region {self.region_id} has {len(defaults)} default boundaries: {defaults}",
                field_name='boundaries',
                invalid_value=defaults,
                validation_rules=['at_most_one_default']
            )

    def get_boundary(self, boundary_id: int) -> Optional[Boundary]:
        for boundary in self.boundaries:
            if boundary.id == boundary_id:
                return boundary
        return None


@dataclass
class SelectedRegion:
    """A region picked in a design-time layer, with its own boundary choice."""

    region_id: int
    region_name: str
    boundary_id: Optional[int] = None
    boundary_name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SelectedRegion':
        boundary_id = data.get('boundary_id', data.get('geojson_id'))
        boundary_name = data.get('boundary_name', data.get('geojson_name'))
        return cls(
            region_id=safe_int_conversion(data.get('region_id')),
            region_name=safe_string_conversion(data.get('region_name')),
            boundary_id=safe_int_conversion(boundary_id),
            boundary_name=boundary_name
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'region_id': self.region_id,
            'region_name': self.region_name,
            'geojson_id': self.boundary_id,
            'geojson_name': self.boundary_name
        }


@dataclass
class LayerDescriptor:
    """
    Design-time layer of the legacy multi-region map configuration.

    Level 0 is a single region; levels >= 1 hold several regions, each with
    its own boundary choice.
    """
    id: str
    level: int
    geographic_column: Optional[str] = None
    boundary_id: Optional[int] = None
    selected_regions: List[SelectedRegion] = field(default_factory=list)
    region_id: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LayerDescriptor':
        return cls(
            id=safe_string_conversion(data.get('id')),
            level=safe_int_conversion(data.get('level')) or 0,
            geographic_column=data.get('geographic_column') or None,
            boundary_id=safe_int_conversion(data.get('boundary_id', data.get('geojson_id'))),
            selected_regions=[
                SelectedRegion.from_dict(r) for r in data.get('selected_regions') or []
            ],
            region_id=safe_int_conversion(data.get('region_id'))
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'level': self.level,
            'geographic_column': self.geographic_column,
            'geojson_id': self.boundary_id,
            'selected_regions': [r.to_dict() for r in self.selected_regions],
            'region_id': self.region_id
        }


@dataclass
class ChartFilter:
    """A user-authored chart predicate; any operator."""

    column: str
    operator: str
    value: Any = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ChartFilter':
        return cls(
            column=safe_string_conversion(data.get('column')),
            operator=safe_string_conversion(data.get('operator')) or 'equals',
            value=data.get('value')
        )

    def to_dict(self) -> Dict[str, Any]:
        return {'column': self.column, 'operator': self.operator, 'value': self.value}


@dataclass
class MapChartConfig:
    """
    Persisted map chart configuration.

    Both the dynamic ``geographic_hierarchy`` and the legacy fixed fields may
    be present; the dynamic hierarchy wins on read.
    """
    geographic_column: Optional[str] = None
    selected_geojson_id: Optional[int] = None
    country_code: str = "IND"
    geographic_hierarchy: Optional[GeographicHierarchy] = None
    district_column: Optional[str] = None
    ward_column: Optional[str] = None
    subward_column: Optional[str] = None
    drill_down_enabled: bool = False
    layers: List[LayerDescriptor] = field(default_factory=list)
    schema_name: Optional[str] = None
    table_name: Optional[str] = None
    value_column: Optional[str] = None
    aggregate_column: Optional[str] = None
    aggregate_function: Optional[str] = None
    filters: List[ChartFilter] = field(default_factory=list)
    pagination: Optional[Dict[str, Any]] = None
    sort: List[Dict[str, Any]] = field(default_factory=list)

    def fixed_fields(self) -> Dict[str, str]:
        """Legacy drill-down fields that carry a column, shallowest first."""
        fields = {}
        for name in ('district_column', 'ward_column', 'subward_column'):
            value = getattr(self, name)
            if not is_null_or_empty(value):
                fields[name] = value
        return fields

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MapChartConfig':
        """Create a configuration from its persisted dictionary."""
        extra = data.get('extra_config') or {}
        merged = {**extra, **{k: v for k, v in data.items() if k != 'extra_config'}}
        return cls(
            geographic_column=merged.get('geographic_column') or None,
            selected_geojson_id=safe_int_conversion(merged.get('selected_geojson_id')),
            country_code=merged.get('country_code') or "IND",
            geographic_hierarchy=GeographicHierarchy.from_dict(merged.get('geographic_hierarchy')),
            district_column=merged.get('district_column') or None,
            ward_column=merged.get('ward_column') or None,
            subward_column=merged.get('subward_column') or None,
            drill_down_enabled=safe_bool_conversion(merged.get('drill_down_enabled', False)),
            layers=[LayerDescriptor.from_dict(layer) for layer in merged.get('layers') or []],
            schema_name=merged.get('schema_name'),
            table_name=merged.get('table_name'),
            value_column=merged.get('value_column'),
            aggregate_column=merged.get('aggregate_column'),
            aggregate_function=merged.get('aggregate_function'),
            filters=[ChartFilter.from_dict(f) for f in merged.get('filters') or []],
            pagination=merged.get('pagination'),
            sort=list(merged.get('sort') or [])
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to its persisted dictionary."""
        return {
            'geographic_column': self.geographic_column,
            'selected_geojson_id': self.selected_geojson_id,
            'country_code': self.country_code,
            'geographic_hierarchy': (
                self.geographic_hierarchy.to_dict() if self.geographic_hierarchy else None
            ),
            'district_column': self.district_column,
            'ward_column': self.ward_column,
            'subward_column': self.subward_column,
            'drill_down_enabled': self.drill_down_enabled,
            'layers': [layer.to_dict() for layer in self.layers],
            'schema_name': self.schema_name,
            'table_name': self.table_name,
            'value_column': self.value_column,
            'aggregate_column': self.aggregate_column,
            'aggregate_function': self.aggregate_function,
            'filters': [f.to_dict() for f in self.filters],
            'pagination': self.pagination,
            'sort': list(self.sort)
        }


@dataclass
class BoundaryFetchDescriptor:
    """Which boundary geometry to fetch."""

    boundary_id: int

    def to_dict(self) -> Dict[str, Any]:
        return {'geojsonId': self.boundary_id}


@dataclass
class DataFetchDescriptor:
    """Request for per-region aggregated overlay values."""

    schema_name: str
    table_name: str
    geographic_column: str
    value_column: Optional[str]
    aggregate_function: str
    selected_geojson_id: int
    filters: Dict[str, str] = field(default_factory=dict)
    chart_filters: List[ChartFilter] = field(default_factory=list)
    pagination: Optional[Dict[str, Any]] = None
    sort: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        chart_filters = [f.to_dict() for f in self.chart_filters]
        return {
            'schema_name': self.schema_name,
            'table_name': self.table_name,
            'geographic_column': self.geographic_column,
            'value_column': self.value_column,
            'aggregate_function': self.aggregate_function,
            'selected_geojson_id': self.selected_geojson_id,
            'filters': dict(self.filters),
            'chart_filters': chart_filters,
            'extra_config': {
                'filters': chart_filters,
                'pagination': self.pagination,
                'sort': list(self.sort)
            }
        }


@dataclass
class PreviewPayload:
    """Derived fetch descriptors for a map preview; never authoritative."""

    boundary_fetch: BoundaryFetchDescriptor
    data_fetch: DataFetchDescriptor

    def to_dict(self) -> Dict[str, Any]:
        return {
            'geojsonPreviewPayload': self.boundary_fetch.to_dict(),
            'dataOverlayPayload': self.data_fetch.to_dict()
        }
