"""
Decayed Multi-Source Intent Score Calculator.

This module turns the signals recorded for an entity into a single
UnifiedScore. It applies linear time decay per signal, blends the two
providers by configured weights, ranks topics, and classifies the trend and
spike state against the previously computed score.

Algorithm Overview:
    1. Partition the entity's signals by source (apollo / zoominfo).
    2. decay = 1 for age <= 0 days, 0 for age >= decay window, otherwise
       1 - age / window.
    3. Per-source score = sum(strength * decay) / sum(decay), capped at 100.
       Fully decayed signals drop out of numerator and denominator alike.
    4. Overall = round(apollo * w_apollo + zoominfo * w_zoominfo).
    5. Topics: mean raw (undecayed) strength per topic, top 5, stable order.
    6. Trend / spike: compared with the baseline cached by the previous call,
       after which the baseline is replaced by the new score.

Baseline Semantics:
    The baseline is always the score computed by the previous call, not a
    fixed historical window. Two calls with no new signals in between always
    yield 'stable' and no spike on the second call. detect_spikes() is edge
    triggered for the same reason: detecting a spike consumes the baseline it
    was measured against, so a poller sees each jump exactly once.

Dependencies:
    - numpy: weighted and plain means over signal strengths

Usage:
    from intent_unifier.services.scoring_engine import ScoreCalculator

    calculator = ScoreCalculator(ledger, baseline, ScoringConfig())
    score = calculator.compute_score("company-1")
"""

import logging
import threading
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence

import numpy as np
from pydantic import BaseModel, Field

from intent_unifier.models.enums import SignalSource, Trend
from intent_unifier.models.schemas import (
    AwarenessSpike,
    Signal,
    TopicScore,
    UnifiedScore,
    ensure_aware,
    utc_now,
)
from intent_unifier.services.common import clamp, round_half_up
from intent_unifier.services.stores import ScoreBaselineCache, SignalLedger


logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

SECONDS_PER_DAY: float = 24 * 60 * 60

# Point difference from the baseline beyond which the trend is not 'stable'
TREND_THRESHOLD_POINTS: int = 5

TOP_TOPICS_LIMIT: int = 5

UNKNOWN_ENTITY_NAME: str = "Unknown"


class ScoringConfig(BaseModel):
    """
    Tunable parameters of the score calculator.

    Defaults: equal 0.5/0.5 source weights, a 30 day decay window, and a 25%
    spike threshold.
    """
    apolloWeight: float = Field(default=0.5, ge=0.0)
    zoomInfoWeight: float = Field(default=0.5, ge=0.0)
    decayDays: float = Field(default=30, gt=0)
    spikeThresholdPercent: float = Field(default=25, ge=0)

    @classmethod
    def from_settings(cls, settings) -> "ScoringConfig":
        return cls(
            apolloWeight=settings.scoring_apollo_weight,
            zoomInfoWeight=settings.scoring_zoominfo_weight,
            decayDays=settings.scoring_decay_days,
            spikeThresholdPercent=settings.scoring_spike_threshold,
        )

    def weight_for(self, source: SignalSource) -> float:
        if source == SignalSource.APOLLO:
            return self.apolloWeight
        return self.zoomInfoWeight


# =============================================================================
# Pure Scoring Functions
# =============================================================================


def calculate_decay(observed_at: datetime, now: datetime, decay_days: float) -> float:
    """
    Linear time-decay factor for a signal.

    Args:
        observed_at: When the signal was observed.
        now: Reference time for the age calculation.
        decay_days: Window after which the signal contributes nothing.

    Returns:
        1.0 for signals aged <= 0 days (including future timestamps), 0.0 for
        signals aged >= decay_days, otherwise 1 - age / decay_days.
    """
    age_days = (ensure_aware(now) - ensure_aware(observed_at)).total_seconds() / SECONDS_PER_DAY
    if age_days <= 0:
        return 1.0
    if age_days >= decay_days:
        return 0.0
    return clamp(1.0 - age_days / decay_days, 0.0, 1.0)


def calculate_source_score(
    signals: Sequence[Signal],
    now: datetime,
    decay_days: float,
) -> float:
    """
    Decay-weighted mean strength of one source's signals.

    The decay factors are the weights, so stale signals count less in both
    the numerator and the denominator. Returns 0.0 when there are no signals
    or every signal has fully decayed. The result is capped at 100 and left
    unrounded so the overall blend rounds only once.
    """
    if not signals:
        return 0.0

    strengths = np.array([signal.strength for signal in signals], dtype=np.float64)
    decays = np.array(
        [calculate_decay(signal.observedAt, now, decay_days) for signal in signals],
        dtype=np.float64,
    )

    total_weight = float(decays.sum())
    if total_weight == 0:
        return 0.0

    return min(100.0, float(np.dot(strengths, decays)) / total_weight)


def calculate_top_topics(
    signals: Sequence[Signal],
    limit: int = TOP_TOPICS_LIMIT,
) -> List[TopicScore]:
    """
    Rank topics across both sources by mean raw strength.

    Decay is not applied here. Each topic lists the distinct sources that
    reported it, in the order they were first seen. Ties keep the order in
    which topics were first encountered (sorted() is stable).
    """
    strengths_by_topic: Dict[str, List[float]] = {}
    sources_by_topic: Dict[str, List[SignalSource]] = {}

    for signal in signals:
        strengths_by_topic.setdefault(signal.topic, []).append(signal.strength)
        topic_sources = sources_by_topic.setdefault(signal.topic, [])
        if signal.source not in topic_sources:
            topic_sources.append(signal.source)

    topics = [
        TopicScore(
            topic=topic,
            score=min(100, round_half_up(float(np.mean(strengths)))),
            sources=sources_by_topic[topic],
        )
        for topic, strengths in strengths_by_topic.items()
    ]

    return sorted(topics, key=lambda topic_score: topic_score.score, reverse=True)[:limit]


def determine_trend(current_score: int, previous_score: Optional[int]) -> Trend:
    """Classify movement against the baseline; no baseline means stable."""
    if previous_score is None:
        return Trend.STABLE
    diff = current_score - previous_score
    if diff > TREND_THRESHOLD_POINTS:
        return Trend.INCREASING
    if diff < -TREND_THRESHOLD_POINTS:
        return Trend.DECREASING
    return Trend.STABLE


def percentage_increase(current_score: int, previous_score: int) -> float:
    """Percent change from previous to current; 0 when previous is 0."""
    if previous_score == 0:
        return 0.0
    return (current_score - previous_score) / previous_score * 100


def check_for_spike(
    current_score: int,
    previous_score: Optional[int],
    threshold_percent: float,
) -> bool:
    """A spike needs a positive baseline and an increase of at least threshold_percent."""
    if previous_score is None or previous_score <= 0:
        return False
    return percentage_increase(current_score, previous_score) >= threshold_percent


# =============================================================================
# Score Calculator
# =============================================================================


class ScoreCalculator:
    """
    Computes UnifiedScores from a SignalLedger and maintains the baseline cache.

    The calculator is the only writer of the ScoreBaselineCache. A re-entrant
    lock spans the read-previous / compute / write-baseline sequence so that
    two handlers scoring the same entity cannot interleave on the baseline.
    """

    def __init__(
        self,
        ledger: SignalLedger,
        baseline: ScoreBaselineCache,
        config: Optional[ScoringConfig] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.ledger = ledger
        self.baseline = baseline
        self.config = config or ScoringConfig()
        self.clock = clock
        self._lock = threading.RLock()

    def compute_score(self, entity_id: str) -> Optional[UnifiedScore]:
        """
        Compute and cache the UnifiedScore for one entity.

        Args:
            entity_id: Entity whose signals to score.

        Returns:
            The new UnifiedScore, or None if the entity has no signals.
        """
        with self._lock:
            signals = self.ledger.signals_for(entity_id)
            if not signals:
                return None

            now = self.clock()
            previous = self.baseline.get(entity_id)
            previous_overall = previous.overallScore if previous is not None else None

            source_scores = {
                source: calculate_source_score(
                    [signal for signal in signals if signal.source == source],
                    now,
                    self.config.decayDays,
                )
                for source in SignalSource
            }

            blended = sum(
                score * self.config.weight_for(source)
                for source, score in source_scores.items()
            )
            overall = int(clamp(round_half_up(blended), 0, 100))

            entity_name = signals[0].entityName or UNKNOWN_ENTITY_NAME
            domain = next((signal.domain for signal in signals if signal.domain), None)

            score = UnifiedScore(
                entityId=entity_id,
                entityName=entity_name,
                domain=domain,
                overallScore=overall,
                apolloScore=round_half_up(source_scores[SignalSource.APOLLO]),
                zoomInfoScore=round_half_up(source_scores[SignalSource.ZOOMINFO]),
                topTopics=calculate_top_topics(signals),
                signalCount=len(signals),
                computedAt=now,
                trend=determine_trend(overall, previous_overall),
                isSpike=check_for_spike(
                    overall, previous_overall, self.config.spikeThresholdPercent
                ),
            )

            self.baseline.put(score)

        logger.debug(
            f"Scored {entity_id}: overall={score.overallScore} "
            f"trend={score.trend.value} spike={score.isSpike}"
        )
        return score

    def all_scores(self) -> List[UnifiedScore]:
        """
        Recompute every entity with signals, highest overall score first.

        Recomputing refreshes each entity's baseline. Ties keep ledger order.
        """
        scores = []
        for entity_id in self.ledger.entity_ids():
            score = self.compute_score(entity_id)
            if score is not None:
                scores.append(score)
        return sorted(scores, key=lambda score: score.overallScore, reverse=True)

    def detect_spikes(self) -> List[AwarenessSpike]:
        """
        Recompute every entity and report those whose new score is a spike.

        Each spike is measured against the baseline cached before this call.
        Because recomputation replaces that baseline, a jump is reported once
        and a follow-up call with no new signals reports nothing for it.
        """
        spikes: List[AwarenessSpike] = []

        for entity_id in self.ledger.entity_ids():
            with self._lock:
                previous = self.baseline.get(entity_id)
                current = self.compute_score(entity_id)

            if current is None or previous is None or not current.isSpike:
                continue

            spikes.append(
                AwarenessSpike(
                    entityId=entity_id,
                    entityName=current.entityName,
                    previousScore=previous.overallScore,
                    currentScore=current.overallScore,
                    percentageIncrease=round_half_up(
                        percentage_increase(current.overallScore, previous.overallScore)
                    ),
                    triggeringTopics=[topic.topic for topic in current.topTopics],
                    detectedAt=current.computedAt,
                )
            )

        if spikes:
            logger.info(f"Detected {len(spikes)} awareness spike(s)")
        return spikes
