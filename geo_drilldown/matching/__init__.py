"""
Region matching for drill-down clicks.
"""

from .region_resolver import RegionResolver

__all__ = ['RegionResolver']
