"""
Asynchronous data source boundary and drill sessions.
"""

from .data_source import DataSource, DataFrameDataSource
from .drill_session import DrillSession

__all__ = ['DataSource', 'DataFrameDataSource', 'DrillSession']
