"""
API package initialization.

This package contains FastAPI router modules for the Intent Unifier:
- sync: Provider intent/enrichment ingestion, scores and spikes
- scoring: ICP tier and persona classification
- admin: In-memory state reset
"""

from fastapi import APIRouter

# Import router modules
from intent_unifier.api.sync import router as sync_router
from intent_unifier.api.scoring import router as scoring_router
from intent_unifier.api.admin import router as admin_router

# Create main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(sync_router, prefix="/sync", tags=["sync"])
api_router.include_router(scoring_router, prefix="/scoring", tags=["scoring"])
api_router.include_router(admin_router, prefix="/admin", tags=["admin"])

# Export all routers for selective imports
__all__ = [
    "api_router",
    "sync_router",
    "scoring_router",
    "admin_router",
]
