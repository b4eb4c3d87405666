"""
Shared sample data for the drill-down tests.

The catalog models India with three states and a handful of districts.
Two districts share the name Aurangabad under different states, and a few
regions carry a display name differing from their name.
"""

import pandas as pd

from geo_drilldown.hierarchy.hierarchy_catalog import HierarchyCatalog
from geo_drilldown.hierarchy.hierarchy_config import HierarchyConfigBuilder
from geo_drilldown.models import (
    ChartFilter, GeographicHierarchy, LayerDescriptor, MapChartConfig, SelectedRegion
)


CHAIN = ['country', 'state', 'district']
CHAIN_WITH_WARDS = ['country', 'state', 'district', 'ward']

REGION_RECORDS = [
    {'id': 1, 'name': 'India', 'display_name': '', 'type': 'country', 'parent_id': None},
    {'id': 5, 'name': 'Maharashtra', 'display_name': '', 'type': 'state', 'parent_id': 1},
    {'id': 6, 'name': 'Karnataka', 'display_name': '', 'type': 'state', 'parent_id': 1},
    {'id': 8, 'name': 'Bihar', 'display_name': '', 'type': 'state', 'parent_id': 1},
    {'id': 51, 'name': 'Pune', 'display_name': '', 'type': 'district', 'parent_id': 5},
    {'id': 52, 'name': 'Mumbai Suburban', 'display_name': 'Mumbai', 'type': 'district',
     'parent_id': 5},
    {'id': 53, 'name': 'Nagpur', 'display_name': '', 'type': 'district', 'parent_id': 5},
    {'id': 54, 'name': 'Aurangabad', 'display_name': '', 'type': 'district', 'parent_id': 5},
    {'id': 61, 'name': 'Bengaluru Urban', 'display_name': '', 'type': 'district', 'parent_id': 6},
    {'id': 62, 'name': 'Mysuru', 'display_name': 'Mysore', 'type': 'district', 'parent_id': 6},
    {'id': 81, 'name': 'Aurangabad', 'display_name': '', 'type': 'district', 'parent_id': 8},
]

WARD_RECORDS = [
    {'id': 511, 'name': 'Kothrud', 'display_name': '', 'type': 'ward', 'parent_id': 51},
    {'id': 512, 'name': 'Hadapsar', 'display_name': '', 'type': 'ward', 'parent_id': 51},
    {'id': 531, 'name': 'Dharampeth', 'display_name': '', 'type': 'ward', 'parent_id': 53},
]

BOUNDARY_RECORDS = [
    {'id': 100, 'region_id': 1, 'name': 'India States', 'is_default': True},
    {'id': 101, 'region_id': 1, 'name': 'India States (old)', 'is_default': False},
    {'id': 200, 'region_id': 5, 'name': 'Maharashtra Districts', 'is_default': True},
    {'id': 300, 'region_id': 6, 'name': 'Karnataka 2011', 'is_default': False},
    {'id': 301, 'region_id': 6, 'name': 'Karnataka 2021', 'is_default': False},
]

POPULATION_RECORDS = [
    {'state_name': 'Maharashtra', 'district_name': 'Pune', 'ward_name': 'Kothrud',
     'population': 100},
    {'state_name': 'Maharashtra', 'district_name': 'Pune', 'ward_name': 'Hadapsar',
     'population': 50},
    {'state_name': 'Maharashtra', 'district_name': 'Nagpur', 'ward_name': 'Dharampeth',
     'population': 80},
    {'state_name': 'Karnataka', 'district_name': 'Mysuru', 'ward_name': None,
     'population': 70},
]


def region_records(include_wards=False):
    records = [dict(record, country_code='IND') for record in REGION_RECORDS]
    if include_wards:
        records.extend(dict(record, country_code='IND') for record in WARD_RECORDS)
    return records


def regions_frame(include_wards=False):
    return pd.DataFrame(region_records(include_wards))


def sample_catalog(include_wards=False):
    return HierarchyCatalog.from_dataframe(regions_frame(include_wards))


def boundaries_frame():
    return pd.DataFrame(BOUNDARY_RECORDS)


def population_frame():
    return pd.DataFrame(POPULATION_RECORDS)


def sample_hierarchy(with_wards=False) -> GeographicHierarchy:
    """state_name at the base, district_name at level 1, ward_name at level 2 if asked."""
    builder = HierarchyConfigBuilder(CHAIN_WITH_WARDS if with_wards else CHAIN, "IND")
    hierarchy = builder.set_base_column(None, 'state_name')
    hierarchy = builder.set_level_column(hierarchy, 0, 'district_name')
    if with_wards:
        hierarchy = builder.set_level_column(hierarchy, 1, 'ward_name')
    return hierarchy


def sample_chart_config(**overrides) -> MapChartConfig:
    values = dict(
        geographic_column='state_name',
        selected_geojson_id=100,
        country_code='IND',
        geographic_hierarchy=sample_hierarchy(),
        schema_name='public',
        table_name='population',
        value_column='population',
        aggregate_function='sum'
    )
    values.update(overrides)
    return MapChartConfig(**values)


def sample_layers():
    """A root layer for India and a district layer configured for Maharashtra only."""
    return [
        LayerDescriptor(id='layer-0', level=0, geographic_column='state_name',
                        boundary_id=100, region_id=1),
        LayerDescriptor(
            id='layer-1', level=1, geographic_column='district_name',
            selected_regions=[
                SelectedRegion(region_id=5, region_name='Maharashtra', boundary_id=200,
                               boundary_name='Maharashtra Districts')
            ]
        ),
    ]


def exclude_filter(value, column='state_name'):
    return ChartFilter(column=column, operator='not_equals', value=value)
