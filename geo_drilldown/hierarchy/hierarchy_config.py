"""
Geographic hierarchy editing for map chart configuration.

This module provides pure value transforms over GeographicHierarchy: setting
the base column, assigning or clearing drill-down level columns, and
validating the hierarchy invariants against the catalog region-type chain.
"""

import logging
from dataclasses import replace
from typing import List, Optional, Tuple

from ..models import GeographicHierarchy, GeographicLevel
from ..exceptions import create_hierarchy_config_error
from ..utils.data_utils import is_null_or_empty, title_label


DEFAULT_BASE_LABEL = "Region"


class HierarchyConfigBuilder:
    """
    Builds and edits geographic hierarchies against a region-type chain.

    Every method returns a new hierarchy and leaves its input untouched.
    Rejected edits return the input unchanged. With an empty chain all
    level edits are no-ops.
    """

    def __init__(self, chain: Optional[List[str]] = None, country_code: str = "IND",
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the builder.

        Args:
            chain: Ordered region types from the catalog, root first
            country_code: Country code written into new hierarchies
            logger: Optional logger instance
        """
        self.chain = list(chain or [])
        self.country_code = country_code
        self.logger = logger or logging.getLogger(__name__)

    def _base_level(self, column: str) -> GeographicLevel:
        region_type = self.chain[0] if self.chain else ""
        return GeographicLevel(
            level=0,
            column=column,
            region_type=region_type,
            label=title_label(region_type) or DEFAULT_BASE_LABEL
        )

    def _drill_level(self, index: int, column: str) -> GeographicLevel:
        region_type = self.chain[index + 1] if index + 1 < len(self.chain) else ""
        return GeographicLevel(
            level=index + 1,
            column=column,
            region_type=region_type,
            label=title_label(region_type)
        )

    def _copy(self, hierarchy: Optional[GeographicHierarchy]) -> GeographicHierarchy:
        if hierarchy is None:
            return GeographicHierarchy(
                country_code=self.country_code,
                base_level=self._base_level(""),
                drill_down_levels=[]
            )
        return GeographicHierarchy(
            country_code=hierarchy.country_code or self.country_code,
            base_level=replace(hierarchy.base_level),
            drill_down_levels=[replace(level) for level in hierarchy.drill_down_levels]
        )

    def set_base_column(self, hierarchy: Optional[GeographicHierarchy],
                        column: str) -> GeographicHierarchy:
        """
        Set the base column, clearing every drill-down level.

        Args:
            hierarchy: Current hierarchy, or None
            column: Column shown at the top level

        Returns:
            New hierarchy; the input when the column is unchanged
        """
        if hierarchy is not None and hierarchy.base_level.column == column:
            return hierarchy

        if hierarchy is not None and hierarchy.drill_down_levels:
            self.logger.info(
                f"Base column changed to '{column}', clearing "
                f"{len(hierarchy.drill_down_levels)} drill-down level(s)"
            )

        return GeographicHierarchy(
            country_code=(hierarchy.country_code if hierarchy else None) or self.country_code,
            base_level=self._base_level(column),
            drill_down_levels=[]
        )

    def set_level_column(self, hierarchy: Optional[GeographicHierarchy], index: int,
                         column: str) -> GeographicHierarchy:
        """
        Assign a column to drill-down level ``index + 1``.

        Missing intermediate levels are padded with placeholders and empty
        trailing levels are trimmed afterwards.

        Args:
            hierarchy: Current hierarchy
            index: Zero-based drill-down level index
            column: Column for the level; empty clears it and every deeper level

        Returns:
            New hierarchy, or the input when the edit is rejected
        """
        if index < 0 or index + 1 >= len(self.chain):
            self.logger.debug(
                f"No region type for drill-down level {index + 1}; edit ignored",
                extra={'chain': list(self.chain)}
            )
            return hierarchy

        if is_null_or_empty(column):
            return self.clear_level_column(hierarchy, index)

        if hierarchy is not None and self._column_in_use(hierarchy, index, column):
            self.logger.warning(
                f"Column '{column}' is already used in the hierarchy; "
                f"drill-down level {index + 1} not changed"
            )
            return hierarchy

        updated = self._copy(hierarchy)
        levels = updated.drill_down_levels
        while len(levels) <= index:
            levels.append(self._drill_level(len(levels), ""))

        levels[index] = self._drill_level(index, column)

        while levels and levels[-1].is_placeholder:
            levels.pop()

        return updated

    def clear_level_column(self, hierarchy: Optional[GeographicHierarchy],
                           index: int) -> Optional[GeographicHierarchy]:
        """Drop drill-down level ``index + 1`` and every deeper level."""
        if hierarchy is None:
            return hierarchy
        updated = self._copy(hierarchy)
        updated.drill_down_levels = updated.drill_down_levels[:max(index, 0)]
        return updated

    @staticmethod
    def _column_in_use(hierarchy: GeographicHierarchy, index: int, column: str) -> bool:
        if hierarchy.base_level.column == column:
            return True
        return any(
            level.column == column
            for position, level in enumerate(hierarchy.drill_down_levels)
            if position != index
        )

    def validate(self, hierarchy: GeographicHierarchy) -> Tuple[bool, List[str]]:
        """
        Validate hierarchy invariants.

        Args:
            hierarchy: Hierarchy to validate

        Returns:
            Tuple of (is_valid, list_of_issues)
        """
        issues = []

        if hierarchy.base_level.level != 0:
            issues.append(f"Base level must be level 0, got {hierarchy.base_level.level}")

        if is_null_or_empty(hierarchy.base_level.column):
            issues.append("Base level has no column")

        for position, level in enumerate(hierarchy.drill_down_levels):
            if level.level != position + 1:
                issues.append(
                    f"Drill-down level at position {position} is numbered {level.level}, "
                    f"expected {position + 1}"
                )
            if level.is_placeholder:
                issues.append(f"Drill-down level {position + 1} has no column")

        if self.chain:
            all_levels = [hierarchy.base_level] + hierarchy.drill_down_levels
            for depth, level in enumerate(all_levels):
                if depth >= len(self.chain):
                    issues.append(
                        f"Level {depth} is deeper than the region type chain "
                        f"({len(self.chain)} types)"
                    )
                elif level.region_type and level.region_type != self.chain[depth]:
                    issues.append(
                        f"Level {depth} has region type '{level.region_type}', "
                        f"expected '{self.chain[depth]}'"
                    )

        seen = set()
        for column in hierarchy.columns():
            if column in seen:
                issues.append(f"Column '{column}' is used by more than one level")
            seen.add(column)

        return len(issues) == 0, issues

    def require_valid(self, hierarchy: GeographicHierarchy) -> GeographicHierarchy:
        """
        Validate a hierarchy and raise on any issue.

        Raises:
            HierarchyConfigError: If the hierarchy breaks an invariant
        """
        is_valid, issues = self.validate(hierarchy)
        if not is_valid:
            raise create_hierarchy_config_error(issues, country_code=hierarchy.country_code)
        return hierarchy
