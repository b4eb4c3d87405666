"""
Cascading selection validation for multi-layer maps.

Chart filters authored on a map cascade to every layer below the root. When
they change, regions picked at design time may no longer be available; this
module finds and evicts those selections.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Iterable, List, Optional, Sequence

import pandas as pd

from ..models import ChartFilter, LayerDescriptor, Region, SelectedRegion
from ..utils.filter_ops import build_filter_mask


@dataclass
class SelectionValidation:
    """Selected regions split into those still available and those to evict."""

    valid: List[SelectedRegion] = field(default_factory=list)
    invalid: List[SelectedRegion] = field(default_factory=list)

    @property
    def has_invalid(self) -> bool:
        return len(self.invalid) > 0

    @property
    def invalid_ids(self) -> List[int]:
        return [region.region_id for region in self.invalid]


class CascadingSelectionValidator:
    """Validates layer selections against upstream filters and parent selections."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    @staticmethod
    def upstream_filters(layers: Sequence[LayerDescriptor], index: int,
                         chart_filters: Optional[Sequence[ChartFilter]]) -> List[ChartFilter]:
        """Chart filters that apply to the layer at ``index``; none for the root layer."""
        if index <= 0 or index >= len(layers):
            return []
        return list(chart_filters or [])

    def filter_candidates(self, regions: Sequence[Region],
                          filters: Optional[Sequence[ChartFilter]]) -> List[Region]:
        """
        Keep the regions whose label passes every filter.

        Filters are evaluated against the region label rather than their
        original column, so ``state_name != Maharashtra`` removes the
        Maharashtra region from child layers.

        Args:
            regions: Candidate regions
            filters: Filters to apply

        Returns:
            Regions passing all filters, in input order
        """
        regions = list(regions)
        if not regions or not filters:
            return regions

        labels = pd.Series([region.label for region in regions], dtype=object)
        mask = pd.Series(True, index=labels.index)
        for chart_filter in filters:
            mask &= build_filter_mask(labels, chart_filter.operator, chart_filter.value)

        kept = [region for region, keep in zip(regions, mask.tolist()) if keep]
        self.logger.debug(
            f"Filtered candidate regions from {len(regions)} to {len(kept)}",
            extra={'filter_count': len(filters)}
        )
        return kept

    def validate(self, layer: LayerDescriptor, candidate_regions: Sequence[Region],
                 filters: Optional[Sequence[ChartFilter]] = None,
                 parent_layer: Optional[LayerDescriptor] = None) -> SelectionValidation:
        """
        Split a layer's selected regions into valid and invalid.

        A selection stays valid when its region passes the filters and, if
        the parent layer has selections, belongs to a selected parent.

        Args:
            layer: Layer whose selections are checked
            candidate_regions: Regions available for the layer
            filters: Upstream filters for the layer
            parent_layer: Shallower layer, used for parent containment

        Returns:
            SelectionValidation
        """
        candidates = list(candidate_regions)
        if layer.geographic_column:
            candidates = self.filter_candidates(candidates, filters)

        if parent_layer is not None and parent_layer.selected_regions:
            parent_ids = {region.region_id for region in parent_layer.selected_regions}
            candidates = [region for region in candidates if region.parent_id in parent_ids]

        return self.validate_ids(layer.selected_regions, (region.id for region in candidates))

    def validate_ids(self, selected: Sequence[SelectedRegion],
                     candidate_ids: Iterable[int]) -> SelectionValidation:
        """Split selections by membership in an explicit candidate id set."""
        valid_ids = set(candidate_ids)
        validation = SelectionValidation()
        for region in selected:
            if region.region_id in valid_ids:
                validation.valid.append(region)
            else:
                validation.invalid.append(region)

        if validation.has_invalid:
            self.logger.info(
                f"{len(validation.invalid)} selected region(s) no longer available: "
                f"{[region.region_name for region in validation.invalid]}",
                extra={'invalid_region_ids': validation.invalid_ids}
            )
        return validation

    @staticmethod
    def apply(layer: LayerDescriptor, validation: SelectionValidation) -> LayerDescriptor:
        """Evict invalid selections from a layer."""
        if not validation.has_invalid:
            return layer
        invalid_ids = set(validation.invalid_ids)
        return replace(
            layer,
            selected_regions=[
                region for region in layer.selected_regions
                if region.region_id not in invalid_ids
            ]
        )
