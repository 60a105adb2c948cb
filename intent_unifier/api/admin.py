"""
FastAPI router for operational endpoints.

- POST /admin/reset: drop every recorded signal, baseline and snapshot
"""

import logging

from fastapi import APIRouter
from pydantic import BaseModel

from intent_unifier.core.dependencies import EngineDep


logger = logging.getLogger(__name__)


class ResetResponse(BaseModel):
    success: bool = True
    signalsCleared: int
    scoresCleared: int
    snapshotsCleared: int


router = APIRouter()


@router.post("/reset", response_model=ResetResponse)
def reset_engine(engine: EngineDep) -> ResetResponse:
    """Empty the in-memory stores; profiles and settings are unaffected."""
    response = ResetResponse(
        signalsCleared=len(engine.signals),
        scoresCleared=len(engine.baseline),
        snapshotsCleared=len(engine.enrichment),
    )
    engine.reset()
    return response
