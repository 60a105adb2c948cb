"""
Core infrastructure package for the Intent Unifier.

Provides:
- Configuration management via pydantic-settings
- The IntentEngine context that owns the in-memory stores
- FastAPI dependency injection utilities

Re-exports allow simplified imports like:

    from intent_unifier.core import get_settings, EngineDep
"""

# =============================================================================
# Re-exports from intent_unifier.core.config
# =============================================================================
from intent_unifier.core.config import Settings, get_settings

# =============================================================================
# Re-exports from intent_unifier.core.engine
# =============================================================================
from intent_unifier.core.engine import IntentEngine, get_engine

# =============================================================================
# Re-exports from intent_unifier.core.dependencies
# =============================================================================
from intent_unifier.core.dependencies import (
    get_settings_dependency,
    get_engine_dependency,
    SettingsDep,
    EngineDep,
)

__all__ = [
    # Configuration management (from config.py)
    'Settings',
    'get_settings',
    # Engine context (from engine.py)
    'IntentEngine',
    'get_engine',
    # FastAPI dependency injection (from dependencies.py)
    'get_settings_dependency',
    'get_engine_dependency',
    'SettingsDep',
    'EngineDep',
]
