"""
Condition scorer.

Computes a weighted match probability for one condition profile given the
patient's reported symptoms. Deterministic: the same inputs always produce
the same score.
"""

from collections.abc import Collection
from decimal import ROUND_HALF_UP, Decimal

from medguard.models.diagnosis_models import ConditionProfile


# Importance weights per symptom group
KEY_SYMPTOM_WEIGHT = 2.0
SECONDARY_SYMPTOM_WEIGHT = 0.5

# Likelihoods used when a symptom has no entry in the profile's likelihood map
DEFAULT_KEY_LIKELIHOOD = 0.5
DEFAULT_SECONDARY_LIKELIHOOD = 0.3

# Blend of observed-symptom evidence and population base rate
EVIDENCE_WEIGHT = 0.7
PRIOR_WEIGHT = 0.3

_TWO_PLACES = Decimal("0.01")


def round_probability(value: float) -> float:
    """
    Round to two decimal places, half-up.

    Rounding operates on the shortest decimal representation of the float,
    so 0.125 becomes 0.13 and 0.124999... stays 0.12.
    """
    return float(Decimal(repr(value)).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP))


def total_weight(profile: ConditionProfile) -> float:
    """Total weighting mass of a profile, independent of any patient."""
    return (
        KEY_SYMPTOM_WEIGHT * len(profile.key_symptoms)
        + SECONDARY_SYMPTOM_WEIGHT * len(profile.secondary_symptoms)
    )


def match_ratio(symptoms: Collection[str], profile: ConditionProfile) -> float:
    """
    Fraction of the profile's weighting mass matched by the patient.

    Args:
        symptoms: Reported symptom IDs.
        profile: Condition profile to match against.

    Returns:
        Ratio in [0, 1]; 0 when the profile carries no weight.
    """
    weight = total_weight(profile)
    if weight == 0:
        return 0.0

    likelihoods = profile.symptom_likelihoods
    match_score = 0.0

    for symptom in profile.key_symptoms:
        if symptom in symptoms:
            match_score += KEY_SYMPTOM_WEIGHT * likelihoods.get(symptom, DEFAULT_KEY_LIKELIHOOD)

    for symptom in profile.secondary_symptoms:
        if symptom in symptoms:
            match_score += SECONDARY_SYMPTOM_WEIGHT * likelihoods.get(
                symptom, DEFAULT_SECONDARY_LIKELIHOOD
            )

    return match_score / weight


def score(symptoms: Collection[str], profile: ConditionProfile) -> float:
    """
    Score a condition against the patient's symptoms.

    Key symptoms count four times as heavily as secondary symptoms. The
    match ratio is blended with the condition's prior probability and the
    result capped at 1.0.

    Args:
        symptoms: Reported symptom IDs.
        profile: Condition profile to score.

    Returns:
        Unrounded probability in [0, 1].
    """
    probability = (
        EVIDENCE_WEIGHT * match_ratio(symptoms, profile)
        + PRIOR_WEIGHT * profile.prior_probability
    )
    return min(probability, 1.0)
