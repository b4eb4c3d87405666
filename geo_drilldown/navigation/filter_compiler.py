"""
Drill-path filter compilation.

This module turns the selections accumulated along a drill path into query
filters and combines them with user-authored chart filters.
"""

import logging
from typing import Dict, List, Optional, Sequence

import pandas as pd

from ..models import ChartFilter, DrillLevel
from ..utils.filter_ops import build_filter_mask, is_negative_equality


class FilterCompiler:
    """Compiles drill paths into equality filters and merges chart filters."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def compile(self, path: Sequence[DrillLevel]) -> Dict[str, str]:
        """
        Flatten the parent selections of every drill level.

        Later levels override earlier ones for the same column.

        Args:
            path: Current drill path

        Returns:
            Dictionary of column to selected value
        """
        filters: Dict[str, str] = {}
        for level in path:
            for selection in level.parent_selections:
                filters[selection.column] = selection.value
        return filters

    def merge(self, drill_filters: Dict[str, str],
              chart_filters: Optional[Sequence[ChartFilter]] = None) -> List[ChartFilter]:
        """
        Combine drill filters and chart filters with AND semantics.

        Drill filters come first as ``equals`` constraints; chart filters
        keep their operators. Both may reference the same column.
        """
        merged = [
            ChartFilter(column=column, operator='equals', value=value)
            for column, value in drill_filters.items()
        ]
        merged.extend(chart_filters or [])
        return merged

    def apply(self, frame: pd.DataFrame, filters: Sequence[ChartFilter]) -> pd.DataFrame:
        """
        Apply merged filters to a DataFrame.

        Filters on columns absent from the frame are skipped with a warning.
        """
        if frame.empty or not filters:
            return frame

        mask = pd.Series(True, index=frame.index)
        for chart_filter in filters:
            if chart_filter.column not in frame.columns:
                self.logger.warning(
                    f"Filter column '{chart_filter.column}' not in data; filter skipped",
                    extra={'filter': chart_filter.to_dict()}
                )
                continue
            mask &= build_filter_mask(
                frame[chart_filter.column], chart_filter.operator, chart_filter.value
            )
        return frame[mask]

    @staticmethod
    def is_region_excluded(region_name: str,
                           chart_filters: Optional[Sequence[ChartFilter]]) -> bool:
        """Check whether a negative-equality chart filter names the region."""
        for chart_filter in chart_filters or []:
            if is_negative_equality(chart_filter.operator) and \
                    str(chart_filter.value) == region_name:
                return True
        return False
