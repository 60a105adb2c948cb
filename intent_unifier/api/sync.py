"""
FastAPI router for provider sync: intent signals, enrichment snapshots,
unified scores and awareness spikes.

Endpoints:
- POST /sync/{source}/intent: record signals, rescore touched entities, report spikes
- POST /sync/{source}/enrichment: store snapshots, return field deltas
- GET  /sync/enrichment/merged/{entityType}/{entityId}: merged attribute map
- GET  /sync/enrichment/{entityType}/{entityId}: every stored snapshot
- GET  /sync/enrichment/{entityType}/{entityId}/{source}: one stored snapshot
- GET  /sync/scores: every unified score, highest first
- GET  /sync/scores/{entityId}: one unified score
- GET  /sync/spikes: awareness spikes since the previous computation

{source} is "apollo" or "zoominfo" and {entityType} is "company" or
"contact"; anything else is rejected with 400 by the validation handler in
main.py. Records without an observedAt are stamped with the engine's clock.
"""

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field

from intent_unifier.core.dependencies import EngineDep, SettingsDep
from intent_unifier.models.enums import EntityType, SignalSource
from intent_unifier.models.schemas import (
    AttributeMap,
    AwarenessSpike,
    EnrichmentDelta,
    EnrichmentSnapshot,
    Signal,
    UnifiedScore,
)


# Configure logging
logger = logging.getLogger(__name__)


# =============================================================================
# Local Pydantic Models for API Requests / Responses
# =============================================================================

class IntentSignalIn(BaseModel):
    """One signal as posted by a provider; the source comes from the path."""
    entityId: str = Field(..., min_length=1, description="Entity the signal is about")
    entityName: str = Field(default="", description="Display name of the entity")
    topic: str = Field(..., description="Intent topic")
    strength: float = Field(..., description="Signal strength, clamped to 0-100")
    observedAt: Optional[datetime] = Field(
        default=None,
        description="Observation time (defaults to now)"
    )
    domain: Optional[str] = Field(default=None, description="Web domain of the entity")


class IntentSyncRequest(BaseModel):
    """Request body for POST /sync/{source}/intent."""
    signals: List[IntentSignalIn] = Field(..., description="Signals to record")


class IntentSyncResponse(BaseModel):
    """Outcome of an intent sync."""
    success: bool = True
    source: SignalSource
    signalsProcessed: int = Field(..., ge=0)
    entitiesUpdated: int = Field(..., ge=0)
    spikesDetected: int = Field(..., ge=0)
    scores: List[UnifiedScore] = Field(default_factory=list)
    spikes: List[AwarenessSpike] = Field(default_factory=list)


class EnrichmentIn(BaseModel):
    """One enrichment record as posted by a provider; the source comes from the path."""
    entityType: EntityType
    entityId: str = Field(..., min_length=1)
    attributes: AttributeMap = Field(default_factory=dict)
    observedAt: Optional[datetime] = Field(
        default=None,
        description="Observation time (defaults to now)"
    )


class EnrichmentSyncRequest(BaseModel):
    """Request body for POST /sync/{source}/enrichment."""
    enrichments: List[EnrichmentIn] = Field(..., description="Snapshots to store")


class EnrichmentSyncResponse(BaseModel):
    """Outcome of an enrichment sync; only records that changed produce a delta."""
    success: bool = True
    source: SignalSource
    enrichmentsProcessed: int = Field(..., ge=0)
    deltasDetected: int = Field(..., ge=0)
    deltas: List[EnrichmentDelta] = Field(default_factory=list)


class MergedEnrichmentResponse(BaseModel):
    entityType: EntityType
    entityId: str
    prioritySource: SignalSource
    data: AttributeMap = Field(default_factory=dict)


class SnapshotListResponse(BaseModel):
    entityType: EntityType
    entityId: str
    count: int = Field(..., ge=0)
    snapshots: List[EnrichmentSnapshot] = Field(default_factory=list)


class ScoreListResponse(BaseModel):
    count: int = Field(..., ge=0)
    scores: List[UnifiedScore] = Field(default_factory=list)


class SpikeListResponse(BaseModel):
    count: int = Field(..., ge=0)
    spikes: List[AwarenessSpike] = Field(default_factory=list)


# =============================================================================
# Router Definition
# =============================================================================

router = APIRouter()


# =============================================================================
# Ingest Endpoints
# =============================================================================


@router.post("/{source}/intent", response_model=IntentSyncResponse)
def sync_intent(
    source: SignalSource,
    request: IntentSyncRequest,
    engine: EngineDep,
) -> IntentSyncResponse:
    """
    Record a provider's intent signals.

    Every entity touched by the batch is rescored, then a spike pass runs over
    all entities. Since rescoring replaces the baseline, a jump caused by this
    batch shows up as isSpike on the returned score rather than in `spikes`;
    `spikes` reports entities whose baseline predates this request.

    Args:
        source: Provider that emitted the signals.
        request: Signals to record.

    Returns:
        IntentSyncResponse with the refreshed scores and detected spikes.
    """
    try:
        now = engine.clock()
        signals = [
            Signal(
                source=source,
                entityId=item.entityId,
                entityName=item.entityName,
                topic=item.topic,
                strength=item.strength,
                observedAt=item.observedAt or now,
                domain=item.domain,
            )
            for item in request.signals
        ]
        engine.add_signals(signals)

        entity_ids = list(dict.fromkeys(signal.entityId for signal in signals))
        scores = [
            score for score in (engine.compute_score(entity_id) for entity_id in entity_ids)
            if score is not None
        ]
        spikes = engine.detect_spikes()

        logger.info(
            f"{source.value} intent sync: {len(signals)} signal(s), "
            f"{len(scores)} entit(ies) rescored, {len(spikes)} spike(s)"
        )
        return IntentSyncResponse(
            source=source,
            signalsProcessed=len(signals),
            entitiesUpdated=len(scores),
            spikesDetected=len(spikes),
            scores=scores,
            spikes=spikes,
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error processing {source.value} intent signals: {e}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail="Failed to process intent signals"
        )


@router.post("/{source}/enrichment", response_model=EnrichmentSyncResponse)
def sync_enrichment(
    source: SignalSource,
    request: EnrichmentSyncRequest,
    engine: EngineDep,
) -> EnrichmentSyncResponse:
    """
    Store a provider's enrichment snapshots and return the resulting deltas.

    Args:
        source: Provider that produced the snapshots.
        request: Snapshots to store, applied in order.

    Returns:
        EnrichmentSyncResponse with one delta per snapshot that changed a
        trackable field.
    """
    try:
        now = engine.clock()
        snapshots = [
            EnrichmentSnapshot(
                entityType=item.entityType,
                entityId=item.entityId,
                source=source,
                attributes=item.attributes,
                observedAt=item.observedAt or now,
            )
            for item in request.enrichments
        ]
        deltas = engine.process_batch(snapshots)

        return EnrichmentSyncResponse(
            source=source,
            enrichmentsProcessed=len(snapshots),
            deltasDetected=len(deltas),
            deltas=deltas,
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error processing {source.value} enrichment data: {e}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail="Failed to process enrichment data"
        )


# =============================================================================
# Enrichment Query Endpoints
# merged/ is registered before the {source} route so it is never read as an
# entity type.
# =============================================================================


@router.get(
    "/enrichment/merged/{entity_type}/{entity_id}",
    response_model=MergedEnrichmentResponse,
)
def get_merged_enrichment(
    entity_type: EntityType,
    entity_id: str,
    engine: EngineDep,
    settings: SettingsDep,
    priority: Optional[SignalSource] = Query(
        default=None,
        description="Source whose non-empty values win (defaults to the configured source)"
    ),
) -> MergedEnrichmentResponse:
    """Merged attribute map for an entity; empty when nothing is stored."""
    priority_source = priority or settings.enrichment_priority_source
    return MergedEnrichmentResponse(
        entityType=entity_type,
        entityId=entity_id,
        prioritySource=priority_source,
        data=engine.merge(entity_type, entity_id, priority_source),
    )


@router.get(
    "/enrichment/{entity_type}/{entity_id}",
    response_model=SnapshotListResponse,
)
def list_snapshots(
    entity_type: EntityType,
    entity_id: str,
    engine: EngineDep,
) -> SnapshotListResponse:
    snapshots = engine.get_snapshots(entity_type, entity_id)
    return SnapshotListResponse(
        entityType=entity_type,
        entityId=entity_id,
        count=len(snapshots),
        snapshots=snapshots,
    )


@router.get(
    "/enrichment/{entity_type}/{entity_id}/{source}",
    response_model=EnrichmentSnapshot,
)
def get_snapshot(
    entity_type: EntityType,
    entity_id: str,
    source: SignalSource,
    engine: EngineDep,
) -> EnrichmentSnapshot:
    snapshot = engine.get_snapshot(entity_type, entity_id, source)
    if snapshot is None:
        raise HTTPException(
            status_code=404,
            detail=f"No {source.value} snapshot for {entity_type.value} {entity_id}"
        )
    return snapshot


# =============================================================================
# Score Endpoints
# =============================================================================


@router.get("/scores", response_model=ScoreListResponse)
def list_scores(engine: EngineDep) -> ScoreListResponse:
    """Recompute and return every entity's score, highest first."""
    scores = engine.all_scores()
    return ScoreListResponse(count=len(scores), scores=scores)


@router.get("/scores/{entity_id}", response_model=UnifiedScore)
def get_score(entity_id: str, engine: EngineDep) -> UnifiedScore:
    score = engine.compute_score(entity_id)
    if score is None:
        raise HTTPException(
            status_code=404,
            detail=f"No intent data found for entity {entity_id}"
        )
    return score


@router.get("/spikes", response_model=SpikeListResponse)
def list_spikes(engine: EngineDep) -> SpikeListResponse:
    """
    Recompute every entity and report spikes.

    Each jump is reported by exactly one call; an immediate second call
    returns nothing for it.
    """
    spikes = engine.detect_spikes()
    return SpikeListResponse(count=len(spikes), spikes=spikes)
