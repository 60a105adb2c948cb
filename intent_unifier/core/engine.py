"""
Engine context for the Intent Unifier.

IntentEngine owns the three in-memory stores and the services that read and
write them, and is the single object the HTTP layer talks to. Tests build
their own instance with a fixed clock; the service process uses the cached
instance returned by get_engine().

Usage:
    from intent_unifier.core.engine import IntentEngine

    engine = IntentEngine()
    engine.add_signal(Signal(source="apollo", entityId="c1", topic="Cloud", strength=80))
    score = engine.compute_score("c1")
"""

import logging
from datetime import datetime
from functools import lru_cache
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from intent_unifier.core.config import Settings, get_settings
from intent_unifier.models.enums import EntityType, SignalSource
from intent_unifier.models.schemas import (
    AwarenessSpike,
    EnrichmentDelta,
    EnrichmentSnapshot,
    MatchResult,
    RuleProfile,
    Signal,
    UnifiedScore,
    utc_now,
)
from intent_unifier.services.enrichment_sync import EnrichmentTracker
from intent_unifier.services.rule_evaluator import (
    DEFAULT_ICP_PROFILE,
    DEFAULT_PERSONA_PROFILES,
    classify_company,
    classify_contact,
    load_icp_profile,
    load_persona_profiles,
)
from intent_unifier.services.scoring_engine import ScoreCalculator, ScoringConfig
from intent_unifier.services.stores import (
    EnrichmentLedger,
    ScoreBaselineCache,
    SignalLedger,
)


logger = logging.getLogger(__name__)


class IntentEngine:
    """
    Owns the stores and exposes every ingest, query and admin operation.

    Args:
        scoring_config: Source weights, decay window and spike threshold.
        priority_source: Default source whose values win an enrichment merge.
        icp_profile: Profile used by classify_company.
        persona_profiles: Profiles used by classify_contact, in priority order.
        clock: Source of "now" for decay and timestamps.
    """

    def __init__(
        self,
        scoring_config: Optional[ScoringConfig] = None,
        priority_source: SignalSource = SignalSource.ZOOMINFO,
        icp_profile: Optional[RuleProfile] = None,
        persona_profiles: Optional[Sequence[RuleProfile]] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.clock = clock
        self.signals = SignalLedger()
        self.baseline = ScoreBaselineCache()
        self.enrichment = EnrichmentLedger()

        self.calculator = ScoreCalculator(
            self.signals, self.baseline, scoring_config or ScoringConfig(), clock
        )
        self.tracker = EnrichmentTracker(self.enrichment, priority_source)

        self.icp_profile = icp_profile or DEFAULT_ICP_PROFILE
        self.persona_profiles = list(
            persona_profiles if persona_profiles is not None else DEFAULT_PERSONA_PROFILES
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        clock: Callable[[], datetime] = utc_now,
    ) -> "IntentEngine":
        """
        Build an engine from application settings.

        Raises:
            ProfileConfigurationError: If a configured profile file cannot be
                read or validated.
        """
        icp_profile = None
        if settings.icp_profile_path:
            icp_profile = load_icp_profile(settings.icp_profile_path)

        persona_profiles = None
        if settings.persona_profiles_path:
            persona_profiles = load_persona_profiles(settings.persona_profiles_path)

        return cls(
            scoring_config=ScoringConfig.from_settings(settings),
            priority_source=settings.enrichment_priority_source,
            icp_profile=icp_profile,
            persona_profiles=persona_profiles,
            clock=clock,
        )

    # =========================================================================
    # Intent Signals
    # =========================================================================

    def add_signal(self, signal: Signal) -> None:
        self.signals.append(signal)

    def add_signals(self, signals: Iterable[Signal]) -> int:
        count = self.signals.extend(signals)
        logger.info(f"Recorded {count} signal(s)")
        return count

    def compute_score(self, entity_id: str) -> Optional[UnifiedScore]:
        return self.calculator.compute_score(entity_id)

    def all_scores(self) -> List[UnifiedScore]:
        return self.calculator.all_scores()

    def detect_spikes(self) -> List[AwarenessSpike]:
        return self.calculator.detect_spikes()

    # =========================================================================
    # Enrichment
    # =========================================================================

    def store_snapshot(self, snapshot: EnrichmentSnapshot) -> Optional[EnrichmentDelta]:
        return self.tracker.store_snapshot(snapshot)

    def process_batch(self, snapshots: Iterable[EnrichmentSnapshot]) -> List[EnrichmentDelta]:
        return self.tracker.process_batch(snapshots)

    def get_snapshot(
        self,
        entity_type: EntityType,
        entity_id: str,
        source: SignalSource,
    ) -> Optional[EnrichmentSnapshot]:
        return self.tracker.get_snapshot(entity_type, entity_id, source)

    def get_snapshots(self, entity_type: EntityType, entity_id: str) -> List[EnrichmentSnapshot]:
        return self.tracker.get_snapshots(entity_type, entity_id)

    def merge(
        self,
        entity_type: EntityType,
        entity_id: str,
        priority_source: Optional[SignalSource] = None,
    ) -> Dict[str, Any]:
        return self.tracker.merge(entity_type, entity_id, priority_source)

    # =========================================================================
    # Classification
    # =========================================================================

    def classify_company(self, attributes: Optional[Mapping[str, Any]]) -> MatchResult:
        return classify_company(attributes, self.icp_profile)

    def classify_contact(self, attributes: Optional[Mapping[str, Any]]) -> MatchResult:
        return classify_contact(attributes, self.persona_profiles)

    # =========================================================================
    # Admin
    # =========================================================================

    def reset(self) -> None:
        """Empty every store. Profiles and configuration are kept."""
        self.signals.reset()
        self.baseline.reset()
        self.enrichment.reset()
        logger.warning("Engine state reset: signals, baselines and snapshots cleared")


@lru_cache()
def get_engine() -> IntentEngine:
    """
    Get the process-wide engine built from get_settings().

    Note:
        To rebuild after changing settings in tests:
        >>> get_engine.cache_clear()
    """
    return IntentEngine.from_settings(get_settings())
