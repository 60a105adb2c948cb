"""
Package initialization file for Intent Unifier models.

Re-exports the pydantic schemas and enumerations so other modules can write:

    from intent_unifier.models import Signal, UnifiedScore, SignalSource
"""

# =============================================================================
# Enums
# =============================================================================

from intent_unifier.models.enums import (
    AttributeKind,
    CriterionOperator,
    EntityType,
    IcpTier,
    SignalSource,
    Trend,
)

# =============================================================================
# Schemas
# =============================================================================

from intent_unifier.models.schemas import (
    # Intent scoring
    Signal,
    TopicScore,
    UnifiedScore,
    AwarenessSpike,
    # Enrichment
    EnrichmentSnapshot,
    FieldChange,
    EnrichmentDelta,
    # Rule evaluation
    Criterion,
    RuleProfile,
    CriterionResult,
    MatchResult,
    # Helpers
    AttributeMap,
    AttributeValue,
    utc_now,
)

__all__ = [
    "AttributeKind",
    "CriterionOperator",
    "EntityType",
    "IcpTier",
    "SignalSource",
    "Trend",
    "Signal",
    "TopicScore",
    "UnifiedScore",
    "AwarenessSpike",
    "EnrichmentSnapshot",
    "FieldChange",
    "EnrichmentDelta",
    "Criterion",
    "RuleProfile",
    "CriterionResult",
    "MatchResult",
    "AttributeMap",
    "AttributeValue",
    "utc_now",
]
