"""
Enrichment Delta Tracker and Multi-Source Merger.

Stores the latest enrichment snapshot per (entityType, entityId, source) and,
on every write after the first, diffs the previous snapshot against the new
one over a fixed list of trackable fields. It also folds the per-source
snapshots of an entity into a single attribute map under a source-priority
rule.

Delta Policy:
    - First snapshot for a key: stored, no delta (nothing to diff against).
    - Later snapshots: stored unconditionally; a delta is returned only when
      at least one trackable field changed.
    - Changes follow TRACKABLE_FIELDS declaration order.

Equality:
    Structural. Scalars compare by value within the same kind (a boolean is
    never equal to a number), sequences element-wise, mappings key-wise.
    Absent and None are equal to each other and to nothing else.

Merge Policy:
    Start from the secondary source's attributes, then overlay the priority
    source's attributes except those that are None or an empty string, so an
    empty priority value never blanks out a populated secondary value.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from intent_unifier.models.enums import AttributeKind, EntityType, SignalSource
from intent_unifier.models.schemas import (
    EnrichmentDelta,
    EnrichmentSnapshot,
    FieldChange,
)
from intent_unifier.services.common import attribute_kind
from intent_unifier.services.stores import EnrichmentLedger


logger = logging.getLogger(__name__)


# =============================================================================
# Trackable Fields
# Company firmographics first, then contact role fields. Only these fields
# produce FieldChange entries; anything else in a snapshot is stored and
# merged but never diffed.
# =============================================================================

TRACKABLE_FIELDS: List[str] = [
    'employeeCount',
    'annualRevenue',
    'industry',
    'description',
    'linkedinUrl',
    'website',
    'phone',
    'address',
    'city',
    'state',
    'country',
    'postalCode',
    'foundedYear',
    'technologies',
    'fundingTotal',
    'lastFundingDate',
    'title',
    'department',
    'seniority',
]


# =============================================================================
# Pure Diff / Merge Functions
# =============================================================================


def deep_equal(a: Any, b: Any) -> bool:
    """
    Structural equality over attribute values.

    Args:
        a: First value (None stands for absent).
        b: Second value.

    Returns:
        True if both values have the same kind and the same content.
    """
    kind_a = attribute_kind(a)
    kind_b = attribute_kind(b)

    if kind_a != kind_b:
        return False

    if kind_a == AttributeKind.ABSENT:
        return True

    if kind_a == AttributeKind.SEQUENCE:
        if len(a) != len(b):
            return False
        return all(deep_equal(item_a, item_b) for item_a, item_b in zip(a, b))

    if kind_a == AttributeKind.MAPPING:
        if len(a) != len(b):
            return False
        return all(deep_equal(value, b.get(key)) for key, value in a.items())

    return a == b


def detect_changes(
    old_attributes: Mapping[str, Any],
    new_attributes: Mapping[str, Any],
    fields: Iterable[str] = TRACKABLE_FIELDS,
) -> List[FieldChange]:
    """
    List trackable fields whose value differs between two attribute maps.

    A field that appears or disappears counts as a change; a field absent in
    both does not.
    """
    changes: List[FieldChange] = []
    for field in fields:
        old_value = old_attributes.get(field)
        new_value = new_attributes.get(field)
        if not deep_equal(old_value, new_value):
            changes.append(FieldChange(field=field, oldValue=old_value, newValue=new_value))
    return changes


def is_empty_value(value: Any) -> bool:
    """None and "" never override a populated value during a merge."""
    return value is None or value == ""


def merge_snapshots(
    snapshots: Iterable[EnrichmentSnapshot],
    priority_source: SignalSource = SignalSource.ZOOMINFO,
) -> Dict[str, Any]:
    """
    Fold per-source snapshots into one attribute map.

    Args:
        snapshots: Snapshots of a single entity (at most one per source).
        priority_source: Source whose non-empty values win.

    Returns:
        Union of both sources' keys; empty when there are no snapshots.
    """
    priority_source = SignalSource(priority_source)
    by_source = {snapshot.source: snapshot for snapshot in snapshots}
    if not by_source:
        return {}

    merged: Dict[str, Any] = {}

    secondary = by_source.get(priority_source.counterpart)
    if secondary is not None:
        merged.update(secondary.attributes)

    primary = by_source.get(priority_source)
    if primary is not None:
        for key, value in primary.attributes.items():
            if not is_empty_value(value):
                merged[key] = value

    return merged


# =============================================================================
# Enrichment Tracker
# =============================================================================


class EnrichmentTracker:
    """
    Delta-emitting front end to the EnrichmentLedger.

    All state lives in the ledger; the tracker adds the diff and merge
    policies on top of it.
    """

    def __init__(
        self,
        ledger: EnrichmentLedger,
        default_priority: SignalSource = SignalSource.ZOOMINFO,
    ):
        self.ledger = ledger
        self.default_priority = SignalSource(default_priority)

    def store_snapshot(self, snapshot: EnrichmentSnapshot) -> Optional[EnrichmentDelta]:
        """
        Store a snapshot and report what changed since the previous one.

        Returns:
            An EnrichmentDelta with at least one FieldChange, or None for the
            first snapshot of a key and for snapshots with no tracked change.
        """
        previous = self.ledger.swap(snapshot)
        if previous is None:
            return None

        changes = detect_changes(previous.attributes, snapshot.attributes)
        if not changes:
            return None

        logger.debug(
            f"{snapshot.source.value} {snapshot.entityType.value}:{snapshot.entityId} "
            f"changed fields {[change.field for change in changes]}"
        )
        return EnrichmentDelta(
            entityType=snapshot.entityType,
            entityId=snapshot.entityId,
            source=snapshot.source,
            changes=changes,
        )

    def process_batch(self, snapshots: Iterable[EnrichmentSnapshot]) -> List[EnrichmentDelta]:
        """
        Store snapshots in input order, keeping only the deltas that exist.

        Not transactional: snapshots before a failing element stay stored.
        """
        deltas: List[EnrichmentDelta] = []
        processed = 0
        for snapshot in snapshots:
            delta = self.store_snapshot(snapshot)
            processed += 1
            if delta is not None:
                deltas.append(delta)

        logger.info(f"Processed {processed} enrichment snapshot(s), {len(deltas)} delta(s)")
        return deltas

    def get_snapshot(
        self,
        entity_type: EntityType,
        entity_id: str,
        source: SignalSource,
    ) -> Optional[EnrichmentSnapshot]:
        return self.ledger.get(entity_type, entity_id, source)

    def get_snapshots(self, entity_type: EntityType, entity_id: str) -> List[EnrichmentSnapshot]:
        return self.ledger.for_entity(entity_type, entity_id)

    def merge(
        self,
        entity_type: EntityType,
        entity_id: str,
        priority_source: Optional[SignalSource] = None,
    ) -> Dict[str, Any]:
        """Merged attribute map for an entity; see merge_snapshots()."""
        return merge_snapshots(
            self.ledger.for_entity(entity_type, entity_id),
            priority_source or self.default_priority,
        )
