'''
Intent Unifier Test Suite

Test Modules:
-------------
- test_scoring_engine.py: Score calculator
  - Linear decay boundaries
  - Source blend and round-half-up
  - Topic ranking, trend, spike detection (edge triggered)

- test_enrichment_sync.py: Enrichment tracker
  - Structural equality across attribute kinds
  - First / unchanged / changed snapshot deltas
  - Source-priority merge

- test_rule_evaluator.py: Rule evaluator
  - Operator semantics per attribute kind
  - ICP tiers, persona selection and tie-break
  - JSON profile loading

- test_stores.py: Stores and engine context
- test_api.py: FastAPI routes through TestClient

Running Tests:
--------------
    pip install -e ".[test]"
    pytest -v

Configuration:
--------------
See conftest.py for shared fixtures and test configuration.
'''

__all__ = []
