"""
FastAPI application entry point for the Intent Unifier API.

This module configures logging and CORS, turns request validation failures
into 400 responses, registers the API routers, and starts the ASGI server
when run directly.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from intent_unifier import __version__
from intent_unifier.api import api_router
from intent_unifier.core.config import get_settings
from intent_unifier.core.engine import get_engine


settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Lifespan context manager for FastAPI application startup and shutdown events.

    On startup:
        - Build the engine so that an invalid profile file fails the start
        - Log the active scoring configuration

    On shutdown:
        - Log shutdown message
    """
    # Startup
    logger.info("Intent Unifier API starting")
    engine = get_engine()
    config = engine.calculator.config
    logger.info(
        f"Scoring: apollo={config.apolloWeight} zoominfo={config.zoomInfoWeight} "
        f"decay={config.decayDays}d spike>={config.spikeThresholdPercent}%"
    )
    logger.info(
        f"Profiles: ICP '{engine.icp_profile.name}', "
        f"{len(engine.persona_profiles)} persona(s)"
    )

    yield

    # Shutdown
    logger.info("Intent Unifier API shutting down")


# Create FastAPI application
app = FastAPI(
    title="Intent Unifier API",
    version=__version__,
    description=(
        "Unifies Apollo and ZoomInfo intent signals and enrichment snapshots "
        "into decayed intent scores, field-level deltas, merged records, and "
        "ICP / persona classifications."
    ),
    lifespan=lifespan,
)

# Configure CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _describe_validation_error(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        parts.append(f"{location}: {error.get('msg', 'invalid value')}")
    return "; ".join(parts) or "Request validation failed"


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Answer malformed bodies, paths and queries with 400 Invalid request."""
    message = _describe_validation_error(exc)
    logger.warning(f"Rejected {request.method} {request.url.path}: {message}")
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request", "message": message},
    )


# Register API routers
app.include_router(api_router)


@app.get("/health")
async def health_check():
    """
    Health check endpoint for monitoring and load balancer probes.

    Returns:
        Dict with status 'healthy'
    """
    return {"status": "healthy", "version": __version__}


@app.get("/")
async def root():
    """
    Root endpoint providing API information.

    Returns:
        Dict with API name, version and endpoint index
    """
    return {
        "name": "Intent Unifier API",
        "version": __version__,
        "docs": "/docs",
        "openapi": "/openapi.json",
        "endpoints": {
            "health": "GET /health",
            "sync": {
                "intent": "POST /sync/{source}/intent",
                "enrichment": "POST /sync/{source}/enrichment",
                "mergedEnrichment": "GET /sync/enrichment/merged/{entityType}/{entityId}",
                "snapshots": "GET /sync/enrichment/{entityType}/{entityId}",
                "snapshot": "GET /sync/enrichment/{entityType}/{entityId}/{source}",
                "scores": "GET /sync/scores",
                "entityScore": "GET /sync/scores/{entityId}",
                "spikes": "GET /sync/spikes",
            },
            "scoring": {
                "icp": "POST /scoring/icp",
                "icpBatch": "POST /scoring/icp/batch",
                "persona": "POST /scoring/persona",
                "personaBatch": "POST /scoring/persona/batch",
            },
            "admin": {
                "reset": "POST /admin/reset",
            },
        },
    }


# Run with uvicorn when executed directly
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "intent_unifier.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
