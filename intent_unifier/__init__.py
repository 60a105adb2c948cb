"""
Intent Unifier Package.

Unifies intent signals and enrichment snapshots from two data providers
(Apollo and ZoomInfo) into decayed, trend-aware intent scores, field-level
change deltas, merged attribute records, and weighted ICP / persona
classifications.

Subpackages:
    - api: FastAPI route handlers
    - core: Configuration, engine context, and dependencies
    - models: Pydantic schemas and enums
    - services: Score calculator, enrichment tracker, rule evaluator, stores
"""

__version__ = "1.0.0"
