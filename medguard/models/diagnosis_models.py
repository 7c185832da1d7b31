"""
Pydantic models for the symptom-to-condition diagnosis engine.

This module defines the knowledge base entries (condition profiles and the
symptom catalog), the patient submission that drives a diagnosis run, and
the ranked assessments the engine returns.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ============================================================================
# Enumerations
# ============================================================================

class SeverityTier(str, Enum):
    """Clinical severity tier of a condition."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class SymptomCategory(str, Enum):
    """Body system a symptom belongs to."""
    GENERAL = "general"
    RESPIRATORY = "respiratory"
    GASTROINTESTINAL = "gastrointestinal"
    NEUROLOGICAL = "neurological"
    CARDIOVASCULAR = "cardiovascular"


class Gender(str, Enum):
    """Patient gender as reported on the intake form."""
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class DurationBucket(str, Enum):
    """How long the patient has had the symptoms."""
    LESS_THAN_24H = "less-than-24h"
    ONE_TO_THREE_DAYS = "1-3-days"
    FOUR_TO_SEVEN_DAYS = "4-7-days"
    ONE_TO_TWO_WEEKS = "1-2-weeks"
    MORE_THAN_TWO_WEEKS = "more-than-2-weeks"


class SeverityBucket(str, Enum):
    """Self-reported overall severity."""
    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"


HIGH_RISK_TIERS = frozenset({SeverityTier.HIGH, SeverityTier.CRITICAL})


# ============================================================================
# Knowledge Base Entries
# ============================================================================

class ConditionProfile(BaseModel):
    """
    Static catalog entry describing one diagnosable condition.

    Key symptoms are not required to appear in ``symptom_likelihoods``;
    the scorer applies a default weight to any that are missing.
    """
    model_config = ConfigDict(frozen=True)

    key: str = Field(..., min_length=1, description="Unique condition identifier")
    display_name: str = Field(..., description="Human-readable condition name")
    description: str = Field(default="", description="Short condition description")
    severity_tier: SeverityTier = Field(..., description="Severity tier")
    prior_probability: float = Field(
        ..., ge=0.0, le=1.0, description="Population base-rate weight (0-1)"
    )
    key_symptoms: tuple[str, ...] = Field(
        default=(), description="Diagnostically central symptom IDs"
    )
    symptom_likelihoods: dict[str, float] = Field(
        default_factory=dict, description="Symptom ID -> likelihood weight (0-1)"
    )
    recommended_actions: tuple[str, ...] = Field(
        default=(), description="Ordered advisory actions"
    )

    @field_validator("key_symptoms")
    @classmethod
    def validate_unique_key_symptoms(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Reject repeated key symptoms."""
        if len(set(v)) != len(v):
            raise ValueError("key_symptoms must not contain duplicates")
        return v

    @field_validator("symptom_likelihoods")
    @classmethod
    def validate_likelihood_range(cls, v: dict[str, float]) -> dict[str, float]:
        """Every likelihood must lie in [0, 1]."""
        for symptom_id, likelihood in v.items():
            if not 0.0 <= likelihood <= 1.0:
                raise ValueError(
                    f"likelihood for '{symptom_id}' must be in [0, 1], got {likelihood}"
                )
        return v

    @property
    def secondary_symptoms(self) -> tuple[str, ...]:
        """Likelihood-weighted symptoms that are not key symptoms."""
        key_set = set(self.key_symptoms)
        return tuple(s for s in self.symptom_likelihoods if s not in key_set)


class SymptomCatalogEntry(BaseModel):
    """A selectable symptom. ``associated_conditions`` is informational only."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Symptom identifier")
    display_name: str = Field(..., description="Human-readable symptom name")
    category: SymptomCategory = Field(..., description="Body system category")
    severity_weight: int = Field(..., ge=1, le=4, description="Severity weight (1-4)")
    associated_conditions: tuple[str, ...] = Field(
        default=(), description="Conditions commonly presenting with this symptom"
    )


# ============================================================================
# Patient Submission
# ============================================================================

class PatientSubmission(BaseModel):
    """
    Symptoms and demographic context for a single diagnosis request.

    Range checks (symptom count, age bounds) are reported by the input
    validator rather than enforced here, so that an out-of-range submission
    can still be constructed and explained to the caller.
    """
    model_config = ConfigDict(frozen=True)

    symptoms: frozenset[str] = Field(
        default_factory=frozenset, description="Reported symptom IDs"
    )
    age: int | None = Field(default=None, description="Patient age in years")
    gender: Gender | None = Field(default=None, description="Patient gender")
    duration: DurationBucket | None = Field(default=None, description="Symptom duration")
    severity: SeverityBucket | None = Field(default=None, description="Overall severity")


# ============================================================================
# Engine Output
# ============================================================================

class ConditionAssessment(BaseModel):
    """
    One ranked condition in a diagnosis result.

    ``confidence_interval`` is computed from the probability before any
    display renormalization, so after rescaling the probability may lie
    outside its own interval.
    """
    condition_key: str = Field(..., description="Condition identifier")
    display_name: str = Field(..., description="Condition name")
    probability: float = Field(..., ge=0.0, le=1.0, description="Scored probability (2 dp)")
    confidence_interval: tuple[float, float] = Field(
        ..., description="Heuristic (lower, upper) band (2 dp)"
    )
    description: str = Field(default="", description="Condition description")
    key_symptoms: list[str] = Field(default_factory=list, description="Key symptoms")
    recommended_actions: list[str] = Field(
        default_factory=list, description="Recommended actions"
    )
    severity_tier: SeverityTier = Field(..., description="Severity tier")

    @property
    def is_high_risk(self) -> bool:
        """True for high or critical severity conditions."""
        return self.severity_tier in HIGH_RISK_TIERS
