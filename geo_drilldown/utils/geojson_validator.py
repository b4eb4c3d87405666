"""
Boundary upload validation.

An uploaded boundary is a GeoJSON FeatureCollection whose features each
carry a join-key property. The key values must line up with the values of
the chart's geographic column for the data overlay to match.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from tqdm import tqdm

from ..exceptions import BoundaryUploadError
from .data_utils import is_null_or_empty, safe_string_conversion


@dataclass
class BoundaryUploadReport:
    """Outcome of a boundary upload validation."""

    join_key: str
    feature_count: int
    feature_keys: List[str] = field(default_factory=list)
    duplicate_keys: List[str] = field(default_factory=list)
    unmatched_feature_keys: List[str] = field(default_factory=list)
    unmatched_data_values: List[str] = field(default_factory=list)
    data_checked: bool = False

    @property
    def is_fully_matched(self) -> bool:
        """True when every feature key and every data value has a counterpart."""
        return not self.unmatched_feature_keys and not self.unmatched_data_values

    @property
    def match_rate(self) -> float:
        """Share of features whose key appears in the data, as a percentage."""
        if not self.data_checked or self.feature_count == 0:
            return 0.0
        matched = len(set(self.feature_keys)) - len(self.unmatched_feature_keys)
        return matched / len(set(self.feature_keys)) * 100

    def to_dict(self) -> Dict[str, Any]:
        return {
            'join_key': self.join_key,
            'feature_count': self.feature_count,
            'duplicate_keys': list(self.duplicate_keys),
            'unmatched_feature_keys': list(self.unmatched_feature_keys),
            'unmatched_data_values': list(self.unmatched_data_values),
            'data_checked': self.data_checked,
            'match_rate': round(self.match_rate, 2)
        }


class BoundaryUploadValidator:
    """Validates GeoJSON boundary uploads before they are stored."""

    def __init__(self, progress_threshold: int = 1000,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the validator.

        Args:
            progress_threshold: Show a progress bar for at least this many features
            logger: Optional logger instance
        """
        self.progress_threshold = progress_threshold
        self.logger = logger or logging.getLogger(__name__)

    def _parse(self, geojson: Any) -> Dict[str, Any]:
        if isinstance(geojson, (str, bytes)):
            try:
                geojson = json.loads(geojson)
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                raise BoundaryUploadError(f"Invalid JSON format: {e}")

        if not isinstance(geojson, dict) or geojson.get('type') != 'FeatureCollection':
            raise BoundaryUploadError("GeoJSON must be a FeatureCollection")

        features = geojson.get('features')
        if not isinstance(features, list) or not features:
            raise BoundaryUploadError("GeoJSON must contain at least one feature")
        return geojson

    def validate(self, geojson: Any, join_key: str,
                 data_values: Optional[Iterable[Any]] = None) -> BoundaryUploadReport:
        """
        Validate an uploaded boundary.

        Args:
            geojson: FeatureCollection as a dict or JSON text
            join_key: Feature property that joins features to data values
            data_values: Optional values of the chart's geographic column

        Returns:
            BoundaryUploadReport

        Raises:
            BoundaryUploadError: If the document is not a non-empty
                FeatureCollection or a feature lacks the join key
        """
        if is_null_or_empty(join_key):
            raise BoundaryUploadError("A properties key is required", join_key=join_key)

        features = self._parse(geojson)['features']

        keys: List[str] = []
        missing: List[int] = []
        feature_iter = tqdm(
            features,
            desc="Validating features",
            disable=len(features) < self.progress_threshold
        )
        for index, feature in enumerate(feature_iter):
            properties = feature.get('properties') if isinstance(feature, dict) else None
            value = properties.get(join_key) if isinstance(properties, dict) else None
            if is_null_or_empty(value):
                missing.append(index)
            else:
                keys.append(safe_string_conversion(value))

        if missing:
            raise BoundaryUploadError(
                f"{len(missing)} of {len(features)} feature(s) are missing the property: "
                f"{join_key}",
                join_key=join_key,
                missing_feature_indexes=missing
            )

        seen = set()
        duplicates = []
        for key in keys:
            if key in seen and key not in duplicates:
                duplicates.append(key)
            seen.add(key)
        if duplicates:
            self.logger.warning(
                f"{len(duplicates)} join key value(s) appear on more than one feature",
                extra={'join_key': join_key, 'duplicate_keys': duplicates[:20]}
            )

        report = BoundaryUploadReport(
            join_key=join_key,
            feature_count=len(features),
            feature_keys=keys,
            duplicate_keys=duplicates
        )

        if data_values is not None:
            values = [safe_string_conversion(v) for v in data_values if not is_null_or_empty(v)]
            value_set = set(values)
            report.data_checked = True
            report.unmatched_feature_keys = sorted(seen - value_set)
            report.unmatched_data_values = sorted(value_set - seen)
            if report.unmatched_data_values:
                self.logger.warning(
                    f"{len(report.unmatched_data_values)} data value(s) have no boundary feature",
                    extra={'join_key': join_key,
                           'unmatched_data_values': report.unmatched_data_values[:20]}
                )

        self.logger.info(
            f"Validated {len(features)} feature(s) on '{join_key}'",
            extra={'join_key': join_key, 'feature_count': len(features)}
        )
        return report
