"""
Utility functions and helpers.
"""

from .data_utils import (
    safe_int_conversion,
    safe_string_conversion,
    is_null_or_empty,
    normalize_region_name,
    extract_alternative_names,
    canonical_json,
    title_label,
    safe_bool_conversion
)
from .filter_ops import build_filter_mask, is_negative_equality

__all__ = [
    'safe_int_conversion',
    'safe_string_conversion',
    'is_null_or_empty',
    'normalize_region_name',
    'extract_alternative_names',
    'canonical_json',
    'title_label',
    'safe_bool_conversion',
    'build_filter_mask',
    'is_negative_equality'
]
