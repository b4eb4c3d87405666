"""
Region resolution for drill-down clicks.

This module provides the RegionResolver class that maps a clicked region
label to a catalog Region, narrowing by expected region type and an optional
parent scope before matching on name and display name.
"""

import logging
from typing import Dict, List, Optional, Sequence

from rapidfuzz import fuzz, process

from ..models import Region
from ..exceptions import create_region_not_found_error
from ..utils.data_utils import (
    extract_alternative_names, normalize_region_name, safe_string_conversion
)


class RegionResolver:
    """
    Resolves region labels to Region records.

    Matching order is exact name, then exact display name, then (only when a
    fuzzy threshold is configured) a rapidfuzz match on normalized names.
    Ties go to the first candidate in catalog order.
    """

    def __init__(self, fuzzy_threshold: Optional[int] = None,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the RegionResolver.

        Args:
            fuzzy_threshold: Minimum similarity (0-100) for the fuzzy fallback;
                None disables it
            logger: Optional logger instance for logging operations
        """
        if fuzzy_threshold is not None and not 0 <= fuzzy_threshold <= 100:
            raise ValueError("Fuzzy threshold must be between 0 and 100")

        self.fuzzy_threshold = fuzzy_threshold
        self.logger = logger or logging.getLogger(__name__)
        self._resolution_stats = {
            'total_processed': 0,
            'name_matches': 0,
            'display_name_matches': 0,
            'fuzzy_matches': 0,
            'ambiguous': 0,
            'unresolved': 0
        }

    def _candidates(self, regions: Sequence[Region], expected_type: Optional[str],
                    parent_id: Optional[int]) -> List[Region]:
        candidates = list(regions)
        if expected_type:
            candidates = [r for r in candidates if r.type == expected_type]

        if parent_id is not None:
            scoped = [r for r in candidates if r.parent_id == parent_id]
            if scoped:
                return scoped
            self.logger.debug(
                f"No {expected_type or 'region'} candidates under parent {parent_id}; "
                f"searching all {len(candidates)} candidates"
            )
        return candidates

    def _first_match(self, matches: List[Region], label: str, field: str) -> Region:
        if len(matches) > 1:
            self._resolution_stats['ambiguous'] += 1
            self.logger.warning(
                f"Region label '{label}' matches {len(matches)} regions by {field}; "
                f"using id {matches[0].id}",
                extra={'region_name': label, 'matched_ids': [r.id for r in matches]}
            )
        return matches[0]

    def resolve(self, regions: Sequence[Region], name_or_display_name: str,
                expected_type: Optional[str] = None,
                parent_id: Optional[int] = None) -> Optional[Region]:
        """
        Resolve a clicked label to a region.

        Args:
            regions: Candidate regions
            name_or_display_name: Label from the map click
            expected_type: Region type the label must resolve to
            parent_id: Optional parent scope used to disambiguate same-named regions

        Returns:
            Matching Region, or None when nothing matches
        """
        self._resolution_stats['total_processed'] += 1
        label = safe_string_conversion(name_or_display_name)
        if not label:
            self._resolution_stats['unresolved'] += 1
            return None

        candidates = self._candidates(regions, expected_type, parent_id)

        by_name = [r for r in candidates if r.name == label]
        if by_name:
            self._resolution_stats['name_matches'] += 1
            return self._first_match(by_name, label, 'name')

        by_display_name = [r for r in candidates if r.display_name and r.display_name == label]
        if by_display_name:
            self._resolution_stats['display_name_matches'] += 1
            return self._first_match(by_display_name, label, 'display name')

        if self.fuzzy_threshold is not None and candidates:
            match = self._fuzzy_match(candidates, label)
            if match is not None:
                self._resolution_stats['fuzzy_matches'] += 1
                return match

        self._resolution_stats['unresolved'] += 1
        self.logger.debug(
            f"Region '{label}' not resolved among {len(candidates)} candidates",
            extra={'region_name': label, 'expected_type': expected_type,
                   'parent_id': parent_id}
        )
        return None

    def _fuzzy_match(self, candidates: List[Region], label: str) -> Optional[Region]:
        """
        Best normalized-name match at or above the configured threshold.

        A label equal to a parenthetical alternative of a candidate name
        (for example "Kendujhar" for "Keonjhar (Kendujhar)") wins outright.
        """
        normalized_label = normalize_region_name(label)
        for region in candidates:
            if normalized_label in extract_alternative_names(region.label):
                self.logger.info(
                    f"Matched '{label}' to alternative name of '{region.label}'",
                    extra={'region_name': label, 'region_id': region.id}
                )
                return region

        choices: Dict[int, str] = {}
        for position, region in enumerate(candidates):
            choices[position] = normalize_region_name(region.label)

        best_match = process.extractOne(
            normalized_label,
            choices,
            scorer=fuzz.WRatio,
            score_cutoff=self.fuzzy_threshold
        )
        if best_match is None:
            return None

        _, score, position = best_match
        region = candidates[position]
        self.logger.info(
            f"Fuzzy matched '{label}' to '{region.label}' (score {score:.1f})",
            extra={'region_name': label, 'region_id': region.id, 'score': score}
        )
        return region

    def resolve_or_raise(self, regions: Sequence[Region], name_or_display_name: str,
                         expected_type: Optional[str] = None,
                         parent_id: Optional[int] = None) -> Region:
        """
        Resolve a clicked label, raising when nothing matches.

        Raises:
            RegionNotFoundError: If no candidate matches the label
        """
        region = self.resolve(regions, name_or_display_name, expected_type, parent_id)
        if region is None:
            raise create_region_not_found_error(
                safe_string_conversion(name_or_display_name),
                expected_type=expected_type,
                parent_id=parent_id,
                candidate_count=len(regions)
            )
        return region

    def get_resolution_statistics(self) -> Dict[str, int]:
        """Get counters for the resolutions performed so far."""
        return dict(self._resolution_stats)
