"""
Chart filter evaluation over pandas Series.

Chart filters are user-authored predicates ``{column, operator, value}``. This
module turns one predicate into a boolean mask so the same operator semantics
apply when narrowing candidate regions and when aggregating overlay data.
"""

import logging
from typing import Any, List

import pandas as pd


NEGATIVE_EQUALITY_OPERATORS = ('not_equals', 'not equals', '!=')

SUPPORTED_OPERATORS = (
    'equals', '=', '==',
    'not_equals', 'not equals', '!=',
    'contains', 'like', 'like_case_insensitive', 'not_contains',
    'in', 'not_in',
    'greater_than', 'less_than', 'greater_than_equal', 'less_than_equal',
    'is_null', 'is_not_null',
)

logger = logging.getLogger(__name__)


def _as_list(value: Any) -> List[Any]:
    if isinstance(value, (list, tuple, set)):
        return list(value)
    return [value]


def build_filter_mask(series: pd.Series, operator: str, value: Any) -> pd.Series:
    """
    Build a boolean mask for a single filter predicate.

    Args:
        series: Values the predicate is evaluated against
        operator: Filter operator name
        value: Filter operand

    Returns:
        Boolean Series aligned with ``series``. Unknown operators keep every row.
    """
    op = (operator or '').strip().lower()
    text = series.astype('string').fillna('')

    if op in ('equals', '=', '=='):
        mask = text == str(value)
    elif op in NEGATIVE_EQUALITY_OPERATORS:
        mask = text != str(value)
    elif op in ('contains', 'like', 'like_case_insensitive'):
        mask = text.str.lower().str.contains(str(value).lower(), regex=False)
    elif op == 'not_contains':
        mask = ~text.str.lower().str.contains(str(value).lower(), regex=False)
    elif op == 'in':
        mask = text.isin([str(v) for v in _as_list(value)])
    elif op == 'not_in':
        mask = ~text.isin([str(v) for v in _as_list(value)])
    elif op in ('greater_than', 'less_than', 'greater_than_equal', 'less_than_equal'):
        numbers = pd.to_numeric(series, errors='coerce')
        operand = pd.to_numeric(pd.Series([value]), errors='coerce').iloc[0]
        if op == 'greater_than':
            mask = numbers > operand
        elif op == 'less_than':
            mask = numbers < operand
        elif op == 'greater_than_equal':
            mask = numbers >= operand
        else:
            mask = numbers <= operand
    elif op == 'is_null':
        mask = text.str.strip() == ''
    elif op == 'is_not_null':
        mask = text.str.strip() != ''
    else:
        logger.warning(f"Unknown filter operator: {operator}")
        mask = pd.Series(True, index=series.index)

    return mask.fillna(False).astype(bool)


def is_negative_equality(operator: str) -> bool:
    """Check whether an operator excludes a single value."""
    return (operator or '').strip().lower() in NEGATIVE_EQUALITY_OPERATORS
