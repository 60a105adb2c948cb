"""
Numeric and attribute helpers shared by the scoring, enrichment, and rule
evaluation services.
"""

import math
from collections.abc import Mapping
from typing import Any

from intent_unifier.models.enums import AttributeKind


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer with .5 going up.

    Python's built-in round() uses banker's rounding (46.5 -> 46); every score
    in this package rounds half up instead (46.5 -> 47).
    """
    return int(math.floor(value + 0.5))


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def attribute_kind(value: Any) -> AttributeKind:
    """
    Classify an attribute value into its variant.

    bool is tested before numbers because it subclasses int. Strings are
    tested before sequences because they are iterable.
    """
    if value is None:
        return AttributeKind.ABSENT
    if isinstance(value, bool):
        return AttributeKind.BOOLEAN
    if isinstance(value, (int, float)):
        return AttributeKind.NUMBER
    if isinstance(value, str):
        return AttributeKind.STRING
    if isinstance(value, Mapping):
        return AttributeKind.MAPPING
    if isinstance(value, (list, tuple)):
        return AttributeKind.SEQUENCE
    raise TypeError(f"Unsupported attribute value type: {type(value).__name__}")
