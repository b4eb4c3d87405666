"""
Data utility functions for type conversions and null handling.

This module provides utility functions for cleaning values read from region
records and chart configuration, normalizing region names for comparison and
serializing values in a canonical form.
"""

import json
import re
from typing import Any, List, Optional

import pandas as pd


_CONTAINER_TYPES = (list, tuple, set, dict)


def safe_int_conversion(value: Any) -> Optional[int]:
    """
    Safely convert a value to integer, handling nulls and invalid values.

    Args:
        value: Value to convert to integer

    Returns:
        Integer value or None if conversion fails
    """
    if value is None or isinstance(value, _CONTAINER_TYPES):
        return None
    if pd.isna(value) or value == '':
        return None

    try:
        # Handle string representations of floats (e.g., "123.0")
        if isinstance(value, str):
            value = value.strip()
            if '.' in value:
                value = float(value)

        return int(float(value))
    except (ValueError, TypeError):
        return None


def safe_string_conversion(value: Any) -> str:
    """
    Safely convert a value to string, handling nulls and cleaning whitespace.

    Args:
        value: Value to convert to string

    Returns:
        Cleaned string value or empty string if null
    """
    if value is None:
        return ""
    if not isinstance(value, _CONTAINER_TYPES) and pd.isna(value):
        return ""

    return str(value).strip()


def is_null_or_empty(value: Any) -> bool:
    """
    Check if a value is null, empty, or contains only whitespace.

    Args:
        value: Value to check

    Returns:
        True if value is null/empty, False otherwise
    """
    if value is None:
        return True
    if isinstance(value, _CONTAINER_TYPES):
        return len(value) == 0
    if pd.isna(value):
        return True

    if isinstance(value, str):
        return not value.strip()

    return False


def normalize_region_name(name: Any) -> str:
    """
    Normalize region name for comparison.

    Removes parenthetical text, collapses whitespace, converts to lowercase.

    Args:
        name: Original region name

    Returns:
        Normalized region name
    """
    if not isinstance(name, str):
        return ""

    # Remove text in parentheses (e.g., "Keonjhar (Kendujhar)" -> "Keonjhar")
    normalized = re.sub(r'\s*\([^)]*\)', '', name)

    return ' '.join(normalized.split()).lower()


def extract_alternative_names(name: Any) -> List[str]:
    """
    Extract alternative region names from parenthetical text.

    For names like "Keonjhar (Kendujhar)", returns both "keonjhar" and "kendujhar".

    Args:
        name: Original region name

    Returns:
        List of normalized alternative names
    """
    if not isinstance(name, str):
        return []

    alternatives = []

    main_name = normalize_region_name(name)
    if main_name:
        alternatives.append(main_name)

    for match in re.findall(r'\(([^)]+)\)', name):
        alt_name = ' '.join(match.split()).lower()
        if alt_name and alt_name not in alternatives:
            alternatives.append(alt_name)

    return alternatives


def canonical_json(value: Any) -> str:
    """
    Serialize a value to JSON with sorted keys and no insignificant whitespace.

    Args:
        value: JSON-compatible value

    Returns:
        Canonical JSON string
    """
    return json.dumps(value, sort_keys=True, separators=(',', ':'), default=str)


def title_label(region_type: str) -> str:
    """Upper-case the first letter of a region type for display."""
    if not region_type:
        return ""
    return region_type[:1].upper() + region_type[1:]


def safe_bool_conversion(value: Any) -> bool:
    """
    Convert flags read from CSV or JSON to bool.

    Strings such as "true", "1" and "yes" are truthy; nulls are False.
    """
    if is_null_or_empty(value):
        return False
    if isinstance(value, str):
        return value.strip().lower() in ('true', '1', 'yes', 'y', 't')
    return bool(value)
