"""
Pydantic models for the Intent Unifier.

This module provides the data shapes that flow into and out of the three
computation engines, plus the rule configuration models:

- Intent scoring: Signal, TopicScore, UnifiedScore, AwarenessSpike
- Enrichment tracking: EnrichmentSnapshot, FieldChange, EnrichmentDelta
- Rule evaluation: Criterion, RuleProfile, CriterionResult, MatchResult

Field names are camelCase because they are serialized verbatim on the wire
by the HTTP boundary and consumed by external renderers.

All models use Pydantic v2 syntax.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    JsonValue,
    field_validator,
    model_validator,
)

from intent_unifier.models.enums import (
    CriterionOperator,
    EntityType,
    SignalSource,
    Trend,
)


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_aware(value: datetime) -> datetime:
    """Read naive datetimes as UTC so that age arithmetic never mixes kinds."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# Attribute values are JSON-shaped only: null, bool, int, float, str, and lists
# or string-keyed dicts of those. Anything else (dates, tuples, arbitrary
# objects) fails validation.
AttributeValue = JsonValue

AttributeMap = Dict[str, AttributeValue]


# =============================================================================
# Intent Scoring Models
# =============================================================================


class Signal(BaseModel):
    """
    A single timestamped interest signal about an entity.

    Signals are immutable once recorded. Strength is clamped to [0, 100] on
    construction rather than rejected, so a provider that overshoots the
    scale still contributes a maximal signal.
    """
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "source": "apollo",
                "entityId": "company-1",
                "entityName": "Acme Corp",
                "topic": "Cloud Computing",
                "strength": 75,
                "observedAt": "2026-01-15T12:00:00Z",
                "domain": "acme.com",
            }
        },
    )

    source: SignalSource = Field(..., description="Provider that emitted the signal")
    entityId: str = Field(..., min_length=1, description="Entity the signal is about")
    entityName: str = Field(default="", description="Display name of the entity")
    topic: str = Field(..., description="Intent topic")
    strength: float = Field(..., description="Signal strength on a 0-100 scale")
    observedAt: datetime = Field(
        default_factory=utc_now,
        description="When the provider observed the signal",
    )
    domain: Optional[str] = Field(default=None, description="Web domain of the entity")

    @field_validator("strength")
    @classmethod
    def clamp_strength(cls, value: float) -> float:
        return max(0.0, min(100.0, value))

    @field_validator("observedAt")
    @classmethod
    def aware_observed_at(cls, value: datetime) -> datetime:
        return ensure_aware(value)


class TopicScore(BaseModel):
    """Ranked topic: rounded mean raw strength and the sources that reported it."""
    topic: str
    score: int = Field(..., ge=0, le=100)
    sources: List[SignalSource] = Field(default_factory=list)


class UnifiedScore(BaseModel):
    """
    Decayed, source-blended intent score for one entity.

    Recomputed on every request; only the latest instance per entity is kept
    as the baseline for trend and spike classification.
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "entityId": "company-1",
                "entityName": "Acme Corp",
                "domain": "acme.com",
                "overallScore": 70,
                "apolloScore": 80,
                "zoomInfoScore": 60,
                "topTopics": [
                    {"topic": "Cloud", "score": 80, "sources": ["apollo"]},
                    {"topic": "AI", "score": 60, "sources": ["zoominfo"]},
                ],
                "signalCount": 2,
                "computedAt": "2026-01-15T12:00:00Z",
                "trend": "stable",
                "isSpike": False,
            }
        }
    )

    entityId: str
    entityName: str
    domain: Optional[str] = None
    overallScore: int = Field(..., ge=0, le=100)
    apolloScore: int = Field(..., ge=0, le=100)
    zoomInfoScore: int = Field(..., ge=0, le=100)
    topTopics: List[TopicScore] = Field(default_factory=list, max_length=5)
    signalCount: int = Field(..., ge=0)
    computedAt: datetime = Field(default_factory=utc_now)
    trend: Trend = Trend.STABLE
    isSpike: bool = False


class AwarenessSpike(BaseModel):
    """An entity whose score jumped past the spike threshold since the last computation."""
    entityId: str
    entityName: str
    previousScore: int
    currentScore: int
    percentageIncrease: int
    triggeringTopics: List[str] = Field(default_factory=list)
    detectedAt: datetime = Field(default_factory=utc_now)


# =============================================================================
# Enrichment Models
# =============================================================================


class EnrichmentSnapshot(BaseModel):
    """
    Provider snapshot of an entity's attributes.

    One snapshot is retained per (entityType, entityId, source); each new
    snapshot replaces the previous one for that key. Attribute values are
    heterogeneous but JSON-shaped; see AttributeValue.
    """
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "entityType": "company",
                "entityId": "company-1",
                "source": "zoominfo",
                "attributes": {
                    "employeeCount": 600,
                    "industry": "Technology",
                    "technologies": ["aws", "python"],
                },
                "observedAt": "2026-01-15T12:00:00Z",
            }
        },
    )

    entityType: EntityType
    entityId: str = Field(..., min_length=1)
    source: SignalSource
    attributes: AttributeMap = Field(default_factory=dict)
    observedAt: datetime = Field(default_factory=utc_now)

    @field_validator("observedAt")
    @classmethod
    def aware_observed_at(cls, value: datetime) -> datetime:
        return ensure_aware(value)


class FieldChange(BaseModel):
    """A trackable field whose value differs between two successive snapshots."""
    field: str
    oldValue: Any = None
    newValue: Any = None


class EnrichmentDelta(BaseModel):
    """Field-level differences between two successive snapshots of one key."""
    entityType: EntityType
    entityId: str
    source: SignalSource
    changes: List[FieldChange] = Field(default_factory=list)
    computedAt: datetime = Field(default_factory=utc_now)


# =============================================================================
# Rule Evaluation Models
# =============================================================================


class Criterion(BaseModel):
    """
    One weighted rule over a single attribute.

    Operator parameters:
    - equals / contains: `value`, or `values` for an any-of match
    - range: `minValue` and/or `maxValue` (a missing bound is unbounded)
    - in: `values` (a list supplied as `value` is accepted as the set)

    Weights need not sum to 1 across a profile; the evaluator normalizes.
    """
    name: str = Field(..., min_length=1)
    field: str = Field(..., min_length=1, description="Attribute read from the subject map")
    weight: float = Field(..., ge=0.0, le=1.0)
    operator: CriterionOperator
    value: Any = None
    values: Optional[List[Any]] = None
    minValue: Optional[float] = None
    maxValue: Optional[float] = None

    @model_validator(mode="before")
    @classmethod
    def list_value_as_set(cls, data: Any) -> Any:
        if (
            isinstance(data, dict)
            and data.get("values") is None
            and isinstance(data.get("value"), list)
        ):
            data = dict(data)
            data["values"] = data.pop("value")
        return data

    @model_validator(mode="after")
    def check_parameters(self) -> "Criterion":
        if self.operator == CriterionOperator.RANGE:
            if (
                self.minValue is not None
                and self.maxValue is not None
                and self.minValue > self.maxValue
            ):
                raise ValueError(
                    f"criterion '{self.name}': minValue {self.minValue} exceeds maxValue {self.maxValue}"
                )
        elif not self.candidates:
            raise ValueError(
                f"criterion '{self.name}': operator '{self.operator.value}' needs a value or values"
            )
        return self

    @property
    def candidates(self) -> List[Any]:
        """Acceptable values for equals/contains/in, in declaration order."""
        if self.values is not None:
            return list(self.values)
        if self.value is not None:
            return [self.value]
        return []

    @property
    def expected_display(self) -> Any:
        """What the criterion expects, shaped for display next to the actual value."""
        if self.operator == CriterionOperator.RANGE:
            return {"min": self.minValue, "max": self.maxValue}
        if self.values is not None:
            return list(self.values)
        return self.value


class RuleProfile(BaseModel):
    """Named, ordered set of weighted criteria (an ICP or a persona)."""
    name: str = Field(..., min_length=1)
    criteria: List[Criterion] = Field(default_factory=list)

    @property
    def total_weight(self) -> float:
        return sum(criterion.weight for criterion in self.criteria)


class CriterionResult(BaseModel):
    """Outcome of one criterion against one subject, annotated for display."""
    name: str
    field: str
    weight: float
    operator: CriterionOperator
    matched: bool
    actualValue: Any = None
    expectedValue: Any = None


class MatchResult(BaseModel):
    """
    Result of classifying a subject against rule profiles.

    For ICP classification `classification` is the tier (A-D). For persona
    classification it is the winning profile name, or None when no profiles
    are configured; `profileScores` then lists every evaluated profile.
    """
    subjectId: str
    score: int = Field(..., ge=0, le=100)
    matchedCriteria: List[CriterionResult] = Field(default_factory=list)
    unmatchedCriteria: List[CriterionResult] = Field(default_factory=list)
    classification: Optional[str] = None
    profileScores: Dict[str, int] = Field(default_factory=dict)
