"""
Settings and environment management for the Intent Unifier.

Configuration is centralized in a pydantic-settings class that loads values
from environment variables and an optional .env file.

Key Features:
- Environment variable validation and type coercion
- Defaults that reproduce the documented scoring behaviour
- Singleton access via @lru_cache

Environment Variables:
- SCORING_APOLLO_WEIGHT: Weight of the Apollo source score (default 0.5)
- SCORING_ZOOMINFO_WEIGHT: Weight of the ZoomInfo source score (default 0.5)
- SCORING_DECAY_DAYS: Days over which a signal decays to zero (default 30)
- SCORING_SPIKE_THRESHOLD: Percent increase that counts as a spike (default 25)
- ENRICHMENT_PRIORITY_SOURCE: Source whose values win a merge (default zoominfo)
- ICP_PROFILE_PATH: Optional JSON file replacing the default ICP profile
- PERSONA_PROFILES_PATH: Optional JSON file replacing the default persona profiles
- LOG_LEVEL: Root log level for the HTTP service (default INFO)

Usage:
    from intent_unifier.core.config import get_settings

    settings = get_settings()
    decay_days = settings.scoring_decay_days
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from intent_unifier.models.enums import SignalSource


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        scoring_apollo_weight: Blend weight for the Apollo per-source score.
        scoring_zoominfo_weight: Blend weight for the ZoomInfo per-source score.
            The two weights are not required to sum to 1.
        scoring_decay_days: Linear decay window in days.
        scoring_spike_threshold: Minimum percentage increase over the previous
            score for a computation to be flagged as a spike.
        enrichment_priority_source: Default priority source for merges.
        icp_profile_path: Path to a JSON RuleProfile for ICP classification.
        persona_profiles_path: Path to a JSON list of persona RuleProfiles.
        log_level: Logging level name.
        cors_origins: Origins allowed by the CORS middleware.
    """

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore',
        case_sensitive=False,
    )

    # =========================================================================
    # Score Calculator
    # =========================================================================

    scoring_apollo_weight: float = Field(default=0.5, ge=0.0)
    scoring_zoominfo_weight: float = Field(default=0.5, ge=0.0)

    # Signals at or beyond this age contribute nothing
    scoring_decay_days: float = Field(default=30, gt=0)

    scoring_spike_threshold: float = Field(default=25, ge=0)

    # =========================================================================
    # Enrichment
    # =========================================================================

    enrichment_priority_source: SignalSource = SignalSource.ZOOMINFO

    # =========================================================================
    # Rule Profiles
    # Unset means the built-in defaults. A file that cannot be parsed stops
    # the engine from being built.
    # =========================================================================

    icp_profile_path: Optional[str] = None
    persona_profiles_path: Optional[str] = None

    # =========================================================================
    # HTTP Service
    # =========================================================================

    log_level: str = 'INFO'
    cors_origins: List[str] = Field(
        default_factory=lambda: [
            'http://localhost:3000',
            'http://127.0.0.1:3000',
        ]
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get the application settings singleton.

    Returns:
        Settings: The cached settings instance.

    Raises:
        pydantic.ValidationError: If an environment variable has an invalid
            value (e.g. a negative weight).

    Note:
        To refresh settings in tests, clear the cache:
        >>> get_settings.cache_clear()
    """
    return Settings()
