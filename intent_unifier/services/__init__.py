"""
Intent Unifier Services Module

This module contains the computation services of the Intent Unifier. The
pure functions are stateless; the stateful classes read and write the
in-memory stores handed to them by the engine context.

Services:
- stores: SignalLedger, ScoreBaselineCache, EnrichmentLedger
- scoring_engine: Decayed multi-source intent score calculator
- enrichment_sync: Enrichment delta tracker and multi-source merger
- rule_evaluator: Weighted ICP / persona rule evaluator

All services are consumed by intent_unifier.core.engine.IntentEngine.
"""

# =============================================================================
# Store Exports
# =============================================================================

from intent_unifier.services.stores import (
    SignalLedger,
    ScoreBaselineCache,
    EnrichmentLedger,
)

# =============================================================================
# Score Calculator Exports
# Linear decay, weighted source blend, top topics, trend and spike detection
# =============================================================================

from intent_unifier.services.scoring_engine import (
    ScoreCalculator,
    ScoringConfig,
    calculate_decay,
    calculate_source_score,
    calculate_top_topics,
    determine_trend,
    check_for_spike,
)

# =============================================================================
# Enrichment Tracker Exports
# Snapshot diffing over trackable fields and source-priority merge
# =============================================================================

from intent_unifier.services.enrichment_sync import (
    EnrichmentTracker,
    TRACKABLE_FIELDS,
    deep_equal,
    detect_changes,
    merge_snapshots,
)

# =============================================================================
# Rule Evaluator Exports
# Weighted criteria, ICP tiers, persona selection, profile loading
# =============================================================================

from intent_unifier.services.rule_evaluator import (
    DEFAULT_ICP_PROFILE,
    DEFAULT_PERSONA_PROFILES,
    ProfileConfigurationError,
    classify_company,
    classify_contact,
    determine_tier,
    evaluate_criterion,
    evaluate_single_profile,
    load_icp_profile,
    load_persona_profiles,
)


__all__ = [
    # Stores
    "SignalLedger",
    "ScoreBaselineCache",
    "EnrichmentLedger",
    # Score calculator
    "ScoreCalculator",
    "ScoringConfig",
    "calculate_decay",
    "calculate_source_score",
    "calculate_top_topics",
    "determine_trend",
    "check_for_spike",
    # Enrichment tracker
    "EnrichmentTracker",
    "TRACKABLE_FIELDS",
    "deep_equal",
    "detect_changes",
    "merge_snapshots",
    # Rule evaluator
    "DEFAULT_ICP_PROFILE",
    "DEFAULT_PERSONA_PROFILES",
    "ProfileConfigurationError",
    "classify_company",
    "classify_contact",
    "determine_tier",
    "evaluate_criterion",
    "evaluate_single_profile",
    "load_icp_profile",
    "load_persona_profiles",
]
