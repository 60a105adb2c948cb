"""
Enumeration definitions for the Intent Unifier.

All enums inherit from both `str` and `Enum` so that pydantic models
serialize them as plain strings in API responses and accept the raw string
values on input.

Groups:
- Provenance: SignalSource, EntityType
- Score classification: Trend
- Rule evaluation: CriterionOperator, IcpTier, AttributeKind
"""

from enum import Enum


class SignalSource(str, Enum):
    """
    Provider that emitted an intent signal or enrichment snapshot.

    Two independent providers feed the engine. Apollo is source A and
    ZoomInfo is source B; ZoomInfo is the default merge priority.
    """
    APOLLO = "apollo"
    ZOOMINFO = "zoominfo"

    @property
    def counterpart(self) -> "SignalSource":
        """The other provider."""
        if self is SignalSource.APOLLO:
            return SignalSource.ZOOMINFO
        return SignalSource.APOLLO


class EntityType(str, Enum):
    """Kind of business entity an enrichment snapshot describes."""
    COMPANY = "company"
    CONTACT = "contact"


class Trend(str, Enum):
    """
    Direction of an entity's overall score relative to the previously
    computed score.

    - increasing: new score is more than 5 points above the baseline
    - decreasing: new score is more than 5 points below the baseline
    - stable: anything else, including the first computation
    """
    INCREASING = "increasing"
    STABLE = "stable"
    DECREASING = "decreasing"


class CriterionOperator(str, Enum):
    """
    Match operator for a weighted rule criterion.

    - equals: exact value equality
    - contains: case-insensitive substring (string attributes only)
    - range: numeric containment in [minValue, maxValue]
    - in: case-insensitive membership in a value set
    """
    EQUALS = "equals"
    CONTAINS = "contains"
    RANGE = "range"
    IN = "in"


class IcpTier(str, Enum):
    """
    Ideal-Customer-Profile bucket derived from the ICP match score.

    A: score >= 80, B: >= 60, C: >= 40, D: everything below.
    """
    A = "A"
    B = "B"
    C = "C"
    D = "D"


class AttributeKind(str, Enum):
    """
    Closed set of value variants an enrichment attribute can hold.

    Criterion evaluation and snapshot diffing dispatch on the kind rather
    than on ad-hoc type checks. Booleans are their own kind and never count
    as numbers.
    """
    NUMBER = "number"
    STRING = "string"
    BOOLEAN = "boolean"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    ABSENT = "absent"
