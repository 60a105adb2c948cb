"""
Pytest Configuration and Shared Fixtures for Intent Unifier Tests.

This module provides fixtures for all tests, supporting:
- A fixed clock so that signal ages (and therefore decay) are exact
- Fresh stores, calculator, tracker and engine per test
- Signal and snapshot factories
- Sample company / contact attribute maps
- A FastAPI TestClient wired to a per-test engine

Dependency References:
- intent_unifier/core/engine.py: IntentEngine context
- intent_unifier/core/dependencies.py: get_engine_dependency override point
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Generator, Optional

import pytest
from fastapi.testclient import TestClient

from intent_unifier.core.dependencies import get_engine_dependency
from intent_unifier.core.engine import IntentEngine
from intent_unifier.models import (
    EnrichmentSnapshot,
    EntityType,
    Signal,
    SignalSource,
)
from intent_unifier.services.enrichment_sync import EnrichmentTracker
from intent_unifier.services.scoring_engine import ScoreCalculator, ScoringConfig
from intent_unifier.services.stores import (
    EnrichmentLedger,
    ScoreBaselineCache,
    SignalLedger,
)


# ============================================================
# PYTEST HOOKS
# ============================================================

def pytest_configure(config) -> None:
    """
    Configure custom pytest markers for test organization.

    Custom markers defined:
    - api: Marks tests that go through the HTTP layer
    """
    config.addinivalue_line(
        'markers',
        'api: marks tests that exercise the FastAPI routes'
    )


# ============================================================
# CLOCK FIXTURES
# ============================================================

FIXED_NOW = datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def fixed_now() -> datetime:
    """Reference time used by every clock in the test suite."""
    return FIXED_NOW


@pytest.fixture
def clock(fixed_now: datetime) -> Callable[[], datetime]:
    """Clock callable that always returns fixed_now."""
    return lambda: fixed_now


# ============================================================
# STORE / SERVICE FIXTURES
# ============================================================

@pytest.fixture
def ledger() -> SignalLedger:
    return SignalLedger()


@pytest.fixture
def baseline() -> ScoreBaselineCache:
    return ScoreBaselineCache()


@pytest.fixture
def enrichment_ledger() -> EnrichmentLedger:
    return EnrichmentLedger()


@pytest.fixture
def calculator(
    ledger: SignalLedger,
    baseline: ScoreBaselineCache,
    clock: Callable[[], datetime],
) -> ScoreCalculator:
    """Score calculator with default weights (0.5/0.5), 30 day decay, 25% spikes."""
    return ScoreCalculator(ledger, baseline, ScoringConfig(), clock)


@pytest.fixture
def tracker(enrichment_ledger: EnrichmentLedger) -> EnrichmentTracker:
    return EnrichmentTracker(enrichment_ledger)


@pytest.fixture
def engine(clock: Callable[[], datetime]) -> IntentEngine:
    """Fresh engine with default configuration and the fixed clock."""
    return IntentEngine(clock=clock)


# ============================================================
# DATA FACTORIES
# ============================================================

@pytest.fixture
def make_signal(fixed_now: datetime) -> Callable[..., Signal]:
    """
    Factory for signals observed a number of days before fixed_now.

    Usage:
        signal = make_signal(SignalSource.APOLLO, "company-1", "Cloud", 80, days_ago=10)
    """
    def _make(
        source: SignalSource,
        entity_id: str,
        topic: str,
        strength: float,
        days_ago: float = 0,
        entity_name: str = "Acme Corp",
        domain: Optional[str] = None,
    ) -> Signal:
        return Signal(
            source=source,
            entityId=entity_id,
            entityName=entity_name,
            topic=topic,
            strength=strength,
            observedAt=fixed_now - timedelta(days=days_ago),
            domain=domain,
        )

    return _make


@pytest.fixture
def make_snapshot(fixed_now: datetime) -> Callable[..., EnrichmentSnapshot]:
    """Factory for enrichment snapshots observed at fixed_now."""
    def _make(
        source: SignalSource,
        attributes: Dict[str, Any],
        entity_id: str = "company-1",
        entity_type: EntityType = EntityType.COMPANY,
    ) -> EnrichmentSnapshot:
        return EnrichmentSnapshot(
            entityType=entity_type,
            entityId=entity_id,
            source=source,
            attributes=attributes,
            observedAt=fixed_now,
        )

    return _make


# ============================================================
# SAMPLE ATTRIBUTE MAPS
# ============================================================

@pytest.fixture
def ideal_company() -> Dict[str, Any]:
    """Company satisfying all five default ICP criteria."""
    return {
        "id": "company-1",
        "employeeCount": 500,
        "industry": "Technology",
        "annualRevenue": 5e7,
        "domain": "example.com",
        "country": "United States",
    }


@pytest.fixture
def decision_maker_contact() -> Dict[str, Any]:
    return {
        "id": "contact-1",
        "title": "VP of Sales",
        "department": "Sales",
        "seniority": "VP",
    }


@pytest.fixture
def engineer_contact() -> Dict[str, Any]:
    return {
        "id": "contact-2",
        "title": "Senior Software Engineer",
        "department": "Engineering",
        "seniority": "Senior",
    }


# ============================================================
# API FIXTURES
# ============================================================

@pytest.fixture
def client(engine: IntentEngine) -> Generator[TestClient, None, None]:
    """
    TestClient whose routes use the per-test engine.

    The lifespan hook is not run; the engine override makes it unnecessary.
    """
    from intent_unifier.main import app

    app.dependency_overrides[get_engine_dependency] = lambda: engine
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_engine_dependency, None)
