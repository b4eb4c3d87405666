"""
Region catalog for the geographic drill-down engine.

This module holds the externally sourced region records for one or more
countries and derives the ordered region-type chain (for example
country -> state -> district -> ward) from their parent links.
"""

import logging
from typing import Dict, Iterable, List, Optional, Tuple

import pandas as pd

from ..models import Region


REGION_COLUMNS = ['id', 'name', 'display_name', 'type', 'parent_id', 'code', 'country_code']


class HierarchyCatalog:
    """
    Read-only view over region records.

    The catalog never mutates regions. Chain derivation follows the first
    child type at every step, so a country whose types branch (for example
    state -> district and state -> city) yields a single linear chain;
    ``has_branching`` reports the dropped alternatives.
    """

    def __init__(self, regions_df: Optional[pd.DataFrame] = None,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the catalog.

        Args:
            regions_df: DataFrame with at least ``id``, ``name`` and ``type`` columns
            logger: Optional logger instance
        """
        self.logger = logger or logging.getLogger(__name__)
        self.regions_df = self._prepare_frame(regions_df)

    @classmethod
    def from_regions(cls, regions: Iterable[Region],
                     logger: Optional[logging.Logger] = None) -> 'HierarchyCatalog':
        """Build a catalog from Region objects."""
        frame = pd.DataFrame([region.to_dict() for region in regions], columns=REGION_COLUMNS)
        return cls(frame, logger=logger)

    @classmethod
    def from_dataframe(cls, regions_df: pd.DataFrame,
                       logger: Optional[logging.Logger] = None) -> 'HierarchyCatalog':
        """Build a catalog from a DataFrame of region records."""
        return cls(regions_df, logger=logger)

    def _prepare_frame(self, regions_df: Optional[pd.DataFrame]) -> pd.DataFrame:
        """Normalize column types; rows without a usable id are dropped."""
        if regions_df is None or regions_df.empty:
            return pd.DataFrame(columns=REGION_COLUMNS)

        frame = regions_df.copy()
        for column in REGION_COLUMNS:
            if column not in frame.columns:
                frame[column] = None

        frame['id'] = pd.to_numeric(frame['id'], errors='coerce')
        frame['parent_id'] = pd.to_numeric(frame['parent_id'], errors='coerce')

        invalid_ids = int(frame['id'].isna().sum())
        if invalid_ids:
            self.logger.warning(
                f"Dropping {invalid_ids} region record(s) without a numeric id",
                extra={'invalid_id_count': invalid_ids}
            )
            frame = frame.dropna(subset=['id'])

        frame['id'] = frame['id'].astype('int64')
        for column in ('name', 'display_name', 'type'):
            frame[column] = frame[column].fillna('').astype(str).str.strip()

        return frame.reset_index(drop=True)

    def _country_frame(self, country_code: Optional[str]) -> pd.DataFrame:
        """Regions of one country; unfiltered when no record carries a country code."""
        frame = self.regions_df
        if not country_code or frame.empty:
            return frame

        codes = frame['country_code'].fillna('').astype(str).str.strip().str.upper()
        if not (codes != '').any():
            return frame
        return frame[codes == country_code.strip().upper()]

    def _type_adjacency(self, frame: pd.DataFrame) -> Tuple[Dict[str, List[str]], List[str]]:
        """
        Build the parent-type to child-types map and the root types.

        Returns:
            Tuple of (adjacency ordered by first appearance, root types)
        """
        types_by_id = dict(zip(frame['id'], frame['type']))
        parent_types = frame['parent_id'].map(types_by_id)

        adjacency: Dict[str, List[str]] = {}
        child_types = set()
        for parent_type, child_type in zip(parent_types, frame['type']):
            if pd.isna(parent_type) or not parent_type or not child_type:
                continue
            if parent_type == child_type:
                continue
            children = adjacency.setdefault(parent_type, [])
            if child_type not in children:
                children.append(child_type)
            child_types.add(child_type)

        all_types = [t for t in pd.unique(frame['type']) if t]
        roots = [t for t in all_types if t not in child_types]
        return adjacency, roots

    def get_region_type_chain(self, country_code: Optional[str] = None) -> List[str]:
        """
        Derive the ordered region-type chain for a country.

        Args:
            country_code: Country to restrict to

        Returns:
            Region types from the root downwards; empty when unavailable
        """
        try:
            frame = self._country_frame(country_code)
            if frame.empty:
                return []
            adjacency, roots = self._type_adjacency(frame)
        except (KeyError, TypeError, ValueError) as e:
            self.logger.warning(f"Could not derive region type chain for {country_code}: {e}")
            return []

        if not roots:
            self.logger.warning(
                f"No root region type found for {country_code}; region types form a cycle"
            )
            return []

        chain = [roots[0]]
        while adjacency.get(chain[-1]):
            child_type = adjacency[chain[-1]][0]
            if child_type in chain:
                self.logger.warning(
                    f"Region type cycle at '{child_type}' for {country_code}",
                    extra={'chain': list(chain)}
                )
                break
            chain.append(child_type)

        self.logger.debug(f"Region type chain for {country_code}: {' -> '.join(chain)}")
        return chain

    def get_child_type(self, region_type: str,
                       country_code: Optional[str] = None) -> Optional[str]:
        """Next type after ``region_type`` in the chain, if any."""
        chain = self.get_region_type_chain(country_code)
        if region_type in chain:
            index = chain.index(region_type)
            if index + 1 < len(chain):
                return chain[index + 1]
        return None

    def has_branching(self, country_code: Optional[str] = None) -> Dict[str, List[str]]:
        """
        Report region types with more than one child type.

        Args:
            country_code: Country to restrict to

        Returns:
            Dictionary of parent type to its child types, only where branching occurs
        """
        try:
            frame = self._country_frame(country_code)
            if frame.empty:
                return {}
            adjacency, _ = self._type_adjacency(frame)
        except (KeyError, TypeError, ValueError) as e:
            self.logger.warning(f"Could not inspect region types for {country_code}: {e}")
            return {}

        return {parent: children for parent, children in adjacency.items() if len(children) > 1}

    def get_regions(self, country_code: Optional[str] = None,
                    region_type: Optional[str] = None) -> List[Region]:
        """Regions of a country, optionally of one type."""
        frame = self._country_frame(country_code)
        if region_type:
            frame = frame[frame['type'] == region_type]
        return self._to_regions(frame)

    def get_root_region(self, country_code: Optional[str] = None) -> Optional[Region]:
        """The first region of the root type, usually the country itself."""
        chain = self.get_region_type_chain(country_code)
        if not chain:
            return None
        regions = self.get_regions(country_code, chain[0])
        return regions[0] if regions else None

    def get_children(self, parent_id: int) -> List[Region]:
        """Direct children of a region."""
        frame = self.regions_df
        return self._to_regions(frame[frame['parent_id'] == parent_id])

    def get_region(self, region_id: int) -> Optional[Region]:
        """Look up a single region by id."""
        frame = self.regions_df
        matches = self._to_regions(frame[frame['id'] == region_id])
        return matches[0] if matches else None

    @staticmethod
    def _to_regions(frame: pd.DataFrame) -> List[Region]:
        records = frame.astype(object).where(frame.notna(), None).to_dict('records')
        return [Region.from_dict(record) for record in records]

    def __len__(self) -> int:
        return len(self.regions_df)
