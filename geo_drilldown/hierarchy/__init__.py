"""
Geographic hierarchy module for the drill-down engine.

This module provides components for deriving region-type chains from the
region catalog, editing geographic hierarchies and translating the legacy
fixed drill-down fields.
"""

from geo_drilldown.hierarchy.hierarchy_catalog import HierarchyCatalog
from geo_drilldown.hierarchy.hierarchy_config import HierarchyConfigBuilder
from geo_drilldown.hierarchy.legacy_adapter import LegacyFieldAdapter

__all__ = [
    'HierarchyCatalog',
    'HierarchyConfigBuilder',
    'LegacyFieldAdapter'
]
