"""
FastAPI dependency injection module for the Intent Unifier.

Provides reusable dependencies so that route handlers never reach for module
globals directly, and tests can swap either dependency through
`app.dependency_overrides`.

Key Dependencies Provided:
- get_settings_dependency: Returns the cached Settings singleton
- get_engine_dependency: Returns the process-wide IntentEngine
- SettingsDep: Type alias for injecting Settings into endpoints
- EngineDep: Type alias for injecting the IntentEngine into endpoints

Usage Examples:
    @router.get("/scores/{entity_id}")
    def get_score(entity_id: str, engine: EngineDep) -> UnifiedScore:
        score = engine.compute_score(entity_id)
        if score is None:
            raise HTTPException(status_code=404, detail="Score not found")
        return score
"""

from typing import Annotated

from fastapi import Depends

from intent_unifier.core.config import Settings, get_settings
from intent_unifier.core.engine import IntentEngine, get_engine


# =============================================================================
# Settings Dependency
# =============================================================================

def get_settings_dependency() -> Settings:
    """
    Return the Settings singleton instance.

    Note:
        This is a thin wrapper around get_settings() so that tests can do:

        app.dependency_overrides[get_settings_dependency] = lambda: test_settings
    """
    return get_settings()


# =============================================================================
# Engine Dependency
# =============================================================================

def get_engine_dependency() -> IntentEngine:
    """
    Return the process-wide IntentEngine.

    The engine is built on first use from the current settings, so a bad
    profile file surfaces here if the lifespan hook has not already built it.

    Raises:
        ProfileConfigurationError: If a configured profile file is invalid.
    """
    return get_engine()


# =============================================================================
# Type Aliases for Dependency Injection
# =============================================================================

# Usage: def endpoint(settings: SettingsDep)
SettingsDep = Annotated[Settings, Depends(get_settings_dependency)]

# Usage: def endpoint(engine: EngineDep)
EngineDep = Annotated[IntentEngine, Depends(get_engine_dependency)]
