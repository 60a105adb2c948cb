"""
In-memory stores owned by the engine context.

- SignalLedger: append-only, per-entity ordered signals
- ScoreBaselineCache: latest computed UnifiedScore per entity
- EnrichmentLedger: latest EnrichmentSnapshot per (entityType, entityId, source)

The stores hold data only; every computation lives in the services that
read them. Each store guards its map with its own lock so that concurrent
request handlers never observe a half-applied write. Readers get copies, never
the live containers: mutable models are deep-copied on the way in and on the
way out, so nothing a caller does to its own objects reaches stored state.

Lifecycle is process (or test-session) scope. `reset()` empties a store and is
the only way a recorded signal is ever removed.
"""

import threading
from typing import Dict, Iterable, List, Optional, Tuple

from intent_unifier.models.enums import EntityType, SignalSource
from intent_unifier.models.schemas import EnrichmentSnapshot, Signal, UnifiedScore


SnapshotKey = Tuple[EntityType, str, SignalSource]


class SignalLedger:
    """Append-only per-entity signal collection, in arrival order."""

    def __init__(self) -> None:
        self._signals: Dict[str, List[Signal]] = {}
        self._lock = threading.Lock()

    def append(self, signal: Signal) -> None:
        with self._lock:
            self._signals.setdefault(signal.entityId, []).append(signal)

    def extend(self, signals: Iterable[Signal]) -> int:
        """
        Append signals one by one.

        Not transactional: if an element fails, the ones before it stay
        recorded. Returns the number appended.
        """
        count = 0
        for signal in signals:
            self.append(signal)
            count += 1
        return count

    def signals_for(self, entity_id: str) -> List[Signal]:
        # Signal is frozen with scalar fields only; a shallow list copy suffices.
        with self._lock:
            return list(self._signals.get(entity_id, ()))

    def entity_ids(self) -> List[str]:
        """Entities with at least one signal, in first-seen order."""
        with self._lock:
            return list(self._signals.keys())

    def __len__(self) -> int:
        with self._lock:
            return sum(len(signals) for signals in self._signals.values())

    def reset(self) -> None:
        with self._lock:
            self._signals.clear()


class ScoreBaselineCache:
    """Most recently computed score per entity; the 'previous' value for trend and spike."""

    def __init__(self) -> None:
        self._scores: Dict[str, UnifiedScore] = {}
        self._lock = threading.Lock()

    def get(self, entity_id: str) -> Optional[UnifiedScore]:
        with self._lock:
            score = self._scores.get(entity_id)
        return score.model_copy(deep=True) if score is not None else None

    def put(self, score: UnifiedScore) -> None:
        stored = score.model_copy(deep=True)
        with self._lock:
            self._scores[score.entityId] = stored

    def __len__(self) -> int:
        with self._lock:
            return len(self._scores)

    def reset(self) -> None:
        with self._lock:
            self._scores.clear()


class EnrichmentLedger:
    """Latest snapshot per (entityType, entityId, source) key."""

    def __init__(self) -> None:
        self._snapshots: Dict[SnapshotKey, EnrichmentSnapshot] = {}
        self._lock = threading.Lock()

    @staticmethod
    def key_for(
        entity_type: EntityType,
        entity_id: str,
        source: SignalSource,
    ) -> SnapshotKey:
        return (EntityType(entity_type), entity_id, SignalSource(source))

    def get(
        self,
        entity_type: EntityType,
        entity_id: str,
        source: SignalSource,
    ) -> Optional[EnrichmentSnapshot]:
        key = self.key_for(entity_type, entity_id, source)
        with self._lock:
            snapshot = self._snapshots.get(key)
        return snapshot.model_copy(deep=True) if snapshot is not None else None

    def swap(self, snapshot: EnrichmentSnapshot) -> Optional[EnrichmentSnapshot]:
        """
        Store a copy of a snapshot, returning the one it replaced (if any).

        The replacement is atomic. The returned snapshot is no longer stored,
        so it is handed back as is.
        """
        key = self.key_for(snapshot.entityType, snapshot.entityId, snapshot.source)
        stored = snapshot.model_copy(deep=True)
        with self._lock:
            previous = self._snapshots.get(key)
            self._snapshots[key] = stored
        return previous

    def for_entity(
        self,
        entity_type: EntityType,
        entity_id: str,
    ) -> List[EnrichmentSnapshot]:
        """All stored snapshots for an entity, apollo first then zoominfo."""
        snapshots = []
        for source in SignalSource:
            snapshot = self.get(entity_type, entity_id, source)
            if snapshot is not None:
                snapshots.append(snapshot)
        return snapshots

    def __len__(self) -> int:
        with self._lock:
            return len(self._snapshots)

    def reset(self) -> None:
        with self._lock:
            self._snapshots.clear()
