"""
Weighted Rule Evaluator for ICP and Persona Classification.

A single generic matcher scores an attribute map against a RuleProfile: every
criterion is evaluated independently, and the score is the matched share of
the profile's total weight on a 0-100 scale. Two configurations use it:

- ICP (companies): one profile; the score maps to a tier.
- Personas (contacts): several profiles; the best-scoring one names the
  contact's persona.

Operator Semantics:
    - equals:   exact equality within the same attribute kind, any-of over
                the criterion's values
    - contains: case-insensitive substring; only string attributes match
    - range:    numeric min <= value <= max; a missing bound is unbounded and
                non-numeric attributes (booleans included) never match
    - in:       case-insensitive membership for strings, exact otherwise
    An absent or None attribute never matches any operator.

Tier Thresholds (ICP):
    A >= 80, B >= 60, C >= 40, otherwise D.

Persona Selection:
    Profiles are folded in declaration order and a later profile replaces the
    current best only with a strictly greater score, so the first declared
    profile wins ties (including the all-zero case).

Profiles can be loaded from JSON files; an unreadable or invalid file raises
ProfileConfigurationError.
"""

import logging
import math
from pathlib import Path
from typing import Any, List, Mapping, NamedTuple, Optional, Sequence, Union

from pydantic import TypeAdapter, ValidationError

from intent_unifier.models.enums import AttributeKind, CriterionOperator, IcpTier
from intent_unifier.models.schemas import (
    AttributeMap,
    Criterion,
    CriterionResult,
    MatchResult,
    RuleProfile,
)
from intent_unifier.services.common import attribute_kind, clamp, round_half_up


logger = logging.getLogger(__name__)


UNKNOWN_SUBJECT_ID: str = "unknown"


class ProfileConfigurationError(ValueError):
    """A rule profile definition could not be read or validated."""


# =============================================================================
# Default Profiles
# =============================================================================

DEFAULT_ICP_PROFILE = RuleProfile(
    name="Default B2B SaaS ICP",
    criteria=[
        Criterion(
            name="Employee Count",
            field="employeeCount",
            weight=0.25,
            operator=CriterionOperator.RANGE,
            minValue=50,
            maxValue=5000,
        ),
        Criterion(
            name="Industry",
            field="industry",
            weight=0.25,
            operator=CriterionOperator.IN,
            values=["Technology", "Software", "Financial Services", "Healthcare"],
        ),
        Criterion(
            name="Revenue",
            field="annualRevenue",
            weight=0.3,
            operator=CriterionOperator.RANGE,
            minValue=5_000_000,
            maxValue=500_000_000,
        ),
        Criterion(
            name="Has Website",
            field="domain",
            weight=0.1,
            operator=CriterionOperator.CONTAINS,
            value=".",
        ),
        Criterion(
            name="Country",
            field="country",
            weight=0.1,
            operator=CriterionOperator.IN,
            values=["United States", "Canada", "United Kingdom", "Australia"],
        ),
    ],
)


def _persona(
    name: str,
    titles: List[str],
    title_weight: float,
    departments: List[str],
    department_weight: float,
    seniorities: List[str],
    seniority_weight: float,
) -> RuleProfile:
    return RuleProfile(
        name=name,
        criteria=[
            Criterion(
                name="Title Level",
                field="title",
                weight=title_weight,
                operator=CriterionOperator.CONTAINS,
                values=titles,
            ),
            Criterion(
                name="Department",
                field="department",
                weight=department_weight,
                operator=CriterionOperator.IN,
                values=departments,
            ),
            Criterion(
                name="Seniority",
                field="seniority",
                weight=seniority_weight,
                operator=CriterionOperator.IN,
                values=seniorities,
            ),
        ],
    )


DEFAULT_PERSONA_PROFILES: List[RuleProfile] = [
    _persona(
        "Decision Maker",
        ["CEO", "CTO", "CFO", "VP", "Director", "Head of"], 0.5,
        ["Executive", "Sales", "Marketing", "Operations"], 0.3,
        ["C-Level", "VP", "Director"], 0.2,
    ),
    _persona(
        "Technical Evaluator",
        ["Engineer", "Developer", "Architect", "Technical"], 0.4,
        ["Engineering", "IT", "Technology", "Product"], 0.4,
        ["Senior", "Lead", "Principal", "Staff"], 0.2,
    ),
    _persona(
        "End User",
        ["Manager", "Specialist", "Analyst", "Coordinator"], 0.3,
        ["Sales", "Marketing", "Customer Success", "Support"], 0.5,
        ["Manager", "Individual Contributor"], 0.2,
    ),
]


# Checked top-down; the first threshold the score reaches wins
TIER_THRESHOLDS = [
    (80, IcpTier.A),
    (60, IcpTier.B),
    (40, IcpTier.C),
]


def determine_tier(score: int) -> IcpTier:
    for threshold, tier in TIER_THRESHOLDS:
        if score >= threshold:
            return tier
    return IcpTier.D


# =============================================================================
# Criterion Evaluation
# =============================================================================


def _same_value(actual: Any, expected: Any) -> bool:
    return attribute_kind(actual) == attribute_kind(expected) and actual == expected


def _matches_equals(actual: Any, criterion: Criterion) -> bool:
    return any(_same_value(actual, candidate) for candidate in criterion.candidates)


def _matches_contains(actual: Any, criterion: Criterion) -> bool:
    if attribute_kind(actual) != AttributeKind.STRING:
        return False
    haystack = actual.lower()
    return any(
        isinstance(candidate, str) and candidate.lower() in haystack
        for candidate in criterion.candidates
    )


def _matches_range(actual: Any, criterion: Criterion) -> bool:
    if attribute_kind(actual) != AttributeKind.NUMBER:
        return False
    lower = criterion.minValue if criterion.minValue is not None else -math.inf
    upper = criterion.maxValue if criterion.maxValue is not None else math.inf
    return lower <= actual <= upper


def _matches_in(actual: Any, criterion: Criterion) -> bool:
    if attribute_kind(actual) == AttributeKind.STRING:
        lowered = actual.lower()
        return any(
            isinstance(candidate, str) and candidate.lower() == lowered
            for candidate in criterion.candidates
        )
    return _matches_equals(actual, criterion)


_OPERATOR_MATCHERS = {
    CriterionOperator.EQUALS: _matches_equals,
    CriterionOperator.CONTAINS: _matches_contains,
    CriterionOperator.RANGE: _matches_range,
    CriterionOperator.IN: _matches_in,
}


def evaluate_criterion(actual: Any, criterion: Criterion) -> bool:
    """
    Test one attribute value against one criterion.

    Args:
        actual: The subject's value for criterion.field (None when absent).
        criterion: The criterion to apply.

    Returns:
        True if the value satisfies the criterion's operator.
    """
    if attribute_kind(actual) == AttributeKind.ABSENT:
        return False
    return _OPERATOR_MATCHERS[criterion.operator](actual, criterion)


# =============================================================================
# Profile Evaluation
# =============================================================================


_ATTRIBUTE_MAP_ADAPTER = TypeAdapter(AttributeMap)


def validate_attributes(attributes: Optional[Mapping[str, Any]]) -> AttributeMap:
    """Check a subject map against the supported attribute values; None reads as empty."""
    return _ATTRIBUTE_MAP_ADAPTER.validate_python(dict(attributes or {}))


class ProfileEvaluation(NamedTuple):
    score: int
    matched: List[CriterionResult]
    unmatched: List[CriterionResult]


def evaluate_single_profile(
    attributes: Optional[Mapping[str, Any]],
    profile: RuleProfile,
) -> ProfileEvaluation:
    """
    Score an attribute map against every criterion of a profile.

    score = round(100 * matchedWeight / totalWeight), or 0 when the profile's
    total weight is 0. Matched and unmatched results keep declaration order.

    Raises:
        ValidationError: If an attribute value is outside the supported set.
    """
    attributes = validate_attributes(attributes)
    matched: List[CriterionResult] = []
    unmatched: List[CriterionResult] = []
    matched_weight = 0.0

    for criterion in profile.criteria:
        actual = attributes.get(criterion.field)
        is_match = evaluate_criterion(actual, criterion)

        result = CriterionResult(
            name=criterion.name,
            field=criterion.field,
            weight=criterion.weight,
            operator=criterion.operator,
            matched=is_match,
            actualValue=actual,
            expectedValue=criterion.expected_display,
        )

        if is_match:
            matched_weight += criterion.weight
            matched.append(result)
        else:
            unmatched.append(result)

    total_weight = profile.total_weight
    if total_weight <= 0:
        score = 0
    else:
        score = int(clamp(round_half_up(matched_weight / total_weight * 100), 0, 100))

    return ProfileEvaluation(score=score, matched=matched, unmatched=unmatched)


def subject_id_for(attributes: Optional[Mapping[str, Any]]) -> str:
    subject_id = (attributes or {}).get("id")
    return str(subject_id) if subject_id else UNKNOWN_SUBJECT_ID


def classify_company(
    attributes: Optional[Mapping[str, Any]],
    profile: Optional[RuleProfile] = None,
) -> MatchResult:
    """
    Classify a company against the ICP profile.

    Args:
        attributes: Company attribute map; None or empty scores 0 / tier D.
        profile: ICP profile to apply (default: DEFAULT_ICP_PROFILE).

    Returns:
        MatchResult whose classification is the tier letter.
    """
    profile = profile or DEFAULT_ICP_PROFILE
    evaluation = evaluate_single_profile(attributes, profile)
    tier = determine_tier(evaluation.score)

    return MatchResult(
        subjectId=subject_id_for(attributes),
        score=evaluation.score,
        matchedCriteria=evaluation.matched,
        unmatchedCriteria=evaluation.unmatched,
        classification=tier.value,
        profileScores={profile.name: evaluation.score},
    )


def classify_contact(
    attributes: Optional[Mapping[str, Any]],
    profiles: Optional[Sequence[RuleProfile]] = None,
) -> MatchResult:
    """
    Pick the best-scoring persona profile for a contact.

    Args:
        attributes: Contact attribute map.
        profiles: Persona profiles in priority order (default:
            DEFAULT_PERSONA_PROFILES). An explicitly empty sequence yields
            classification None and score 0.

    Returns:
        MatchResult for the winning profile, with profileScores listing
        every evaluated profile.
    """
    if profiles is None:
        profiles = DEFAULT_PERSONA_PROFILES

    subject_id = subject_id_for(attributes)
    best_profile: Optional[RuleProfile] = None
    best: Optional[ProfileEvaluation] = None
    profile_scores = {}

    for profile in profiles:
        evaluation = evaluate_single_profile(attributes, profile)
        profile_scores[profile.name] = evaluation.score
        if best is None or evaluation.score > best.score:
            best_profile = profile
            best = evaluation

    if best is None:
        return MatchResult(subjectId=subject_id, score=0, classification=None)

    return MatchResult(
        subjectId=subject_id,
        score=best.score,
        matchedCriteria=best.matched,
        unmatchedCriteria=best.unmatched,
        classification=best_profile.name,
        profileScores=profile_scores,
    )


# =============================================================================
# Profile Loading
# =============================================================================

_PERSONA_LIST_ADAPTER = TypeAdapter(List[RuleProfile])


def _read_profile_file(path: Union[str, Path]) -> str:
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise ProfileConfigurationError(f"Cannot read profile file {path}: {e}") from e


def load_icp_profile(path: Union[str, Path]) -> RuleProfile:
    """Load a single RuleProfile from a JSON file."""
    raw = _read_profile_file(path)
    try:
        profile = RuleProfile.model_validate_json(raw)
    except ValidationError as e:
        raise ProfileConfigurationError(f"Invalid ICP profile in {path}: {e}") from e

    logger.info(f"Loaded ICP profile '{profile.name}' ({len(profile.criteria)} criteria) from {path}")
    return profile


def load_persona_profiles(path: Union[str, Path]) -> List[RuleProfile]:
    """Load a JSON list of persona RuleProfiles, keeping file order."""
    raw = _read_profile_file(path)
    try:
        profiles = _PERSONA_LIST_ADAPTER.validate_json(raw)
    except ValidationError as e:
        raise ProfileConfigurationError(f"Invalid persona profiles in {path}: {e}") from e

    logger.info(f"Loaded {len(profiles)} persona profile(s) from {path}")
    return profiles
