"""
Adapter between the legacy fixed drill-down fields and GeographicHierarchy.

Older map charts store drill-down as flat ``district_column``,
``ward_column`` and ``subward_column`` fields. Internally everything works
on the canonical GeographicHierarchy; this module translates in both
directions and only at the persistence boundary.
"""

import logging
from dataclasses import replace
from typing import Dict, List, Optional, Sequence

from ..config import LEGACY_DRILL_FIELDS
from ..models import GeographicHierarchy, GeographicLevel, MapChartConfig
from ..utils.data_utils import is_null_or_empty, title_label


class LegacyFieldAdapter:
    """Translates legacy fixed fields to and from a GeographicHierarchy."""

    def __init__(self, legacy_fields: Sequence[str] = LEGACY_DRILL_FIELDS,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the adapter.

        Args:
            legacy_fields: Fixed field names, shallowest first
            logger: Optional logger instance
        """
        self.legacy_fields = tuple(legacy_fields)
        self.logger = logger or logging.getLogger(__name__)

    @staticmethod
    def _field_label(field_name: str) -> str:
        # district_column -> District
        return title_label(field_name.replace('_column', ''))

    def to_hierarchy(self, fixed_fields: Dict[str, Optional[str]], base_column: str,
                     chain: Optional[List[str]] = None,
                     country_code: str = "IND") -> GeographicHierarchy:
        """
        Build a hierarchy from legacy fixed fields.

        Fields map to levels in order and the walk stops at the first missing
        field, so ``{ward_column: 'w'}`` without a district yields no levels.

        Args:
            fixed_fields: Mapping of legacy field name to column
            base_column: Column shown at the top level
            chain: Optional region-type chain used to type the levels
            country_code: Country code of the hierarchy

        Returns:
            GeographicHierarchy with contiguous drill-down levels
        """
        chain = list(chain or [])
        base_type = chain[0] if chain else ""
        base_level = GeographicLevel(
            level=0,
            column=base_column or "",
            region_type=base_type,
            label=title_label(base_type) or "Region"
        )

        levels = []
        for depth, field_name in enumerate(self.legacy_fields, start=1):
            column = fixed_fields.get(field_name)
            if is_null_or_empty(column):
                break
            region_type = chain[depth] if depth < len(chain) else ""
            levels.append(GeographicLevel(
                level=depth,
                column=column,
                region_type=region_type,
                label=title_label(region_type) or self._field_label(field_name)
            ))

        skipped = [
            name for name in self.legacy_fields[len(levels) + 1:]
            if not is_null_or_empty(fixed_fields.get(name))
        ]
        if skipped:
            self.logger.warning(
                f"Ignoring legacy drill-down field(s) {skipped} after a missing shallower field",
                extra={'skipped_fields': skipped}
            )

        return GeographicHierarchy(
            country_code=country_code,
            base_level=base_level,
            drill_down_levels=levels
        )

    def to_fixed_fields(self, hierarchy: Optional[GeographicHierarchy]) -> Dict[str, str]:
        """
        Convert a hierarchy back to legacy fixed fields.

        Only present keys are emitted and the walk stops at the first empty
        column or once the legacy fields run out.
        """
        fields = {}
        if hierarchy is None:
            return fields

        for field_name, level in zip(self.legacy_fields, hierarchy.drill_down_levels):
            if level.is_placeholder:
                break
            fields[field_name] = level.column
        return fields

    def normalize(self, config: MapChartConfig,
                  chain: Optional[List[str]] = None) -> Optional[GeographicHierarchy]:
        """
        Read the canonical hierarchy from a persisted chart configuration.

        The dynamic hierarchy wins when it has drill-down levels, then the
        legacy fields, then a base-only hierarchy.

        Args:
            config: Persisted chart configuration
            chain: Optional region-type chain

        Returns:
            GeographicHierarchy, or None when no base column is configured
        """
        dynamic = config.geographic_hierarchy
        if dynamic is not None and dynamic.drill_down_levels:
            if not dynamic.base_level.column and config.geographic_column:
                return replace(
                    dynamic,
                    base_level=replace(dynamic.base_level, column=config.geographic_column)
                )
            return dynamic

        base_column = config.geographic_column
        if not base_column and dynamic is not None:
            base_column = dynamic.base_level.column
        if is_null_or_empty(base_column):
            return None

        fixed_fields = {name: getattr(config, name, None) for name in self.legacy_fields}
        return self.to_hierarchy(fixed_fields, base_column, chain, config.country_code)

    def apply_to_config(self, config: MapChartConfig,
                        hierarchy: GeographicHierarchy) -> MapChartConfig:
        """
        Write a hierarchy into a chart configuration.

        Both the dynamic hierarchy and the legacy fields are written; legacy
        fields deeper than the hierarchy are cleared.
        """
        fixed_fields = self.to_fixed_fields(hierarchy)
        legacy_updates = {
            name: fixed_fields.get(name) for name in self.legacy_fields if hasattr(config, name)
        }
        return replace(
            config,
            geographic_column=hierarchy.base_level.column or config.geographic_column,
            geographic_hierarchy=hierarchy,
            **legacy_updates
        )
