"""
Uncertainty estimation for scored conditions.

The band is widest (+/- 0.15) when none of a condition's key symptoms were
reported and narrows linearly to zero width at a full key-symptom match.
"""

from collections.abc import Collection

from medguard.services.scorer import round_probability


MAX_UNCERTAINTY = 0.15


def interval(
    probability: float,
    patient_symptoms: Collection[str],
    key_symptoms: Collection[str],
) -> tuple[float, float]:
    """
    Confidence interval around a scored probability.

    Args:
        probability: Unrounded probability from the scorer.
        patient_symptoms: Reported symptom IDs.
        key_symptoms: The condition's key symptom IDs.

    Returns:
        (lower, upper), clamped to [0, 1] and rounded to two decimals.
    """
    matched = sum(1 for symptom in key_symptoms if symptom in patient_symptoms)
    ratio = matched / max(1, len(key_symptoms))
    uncertainty = MAX_UNCERTAINTY * (1 - ratio)

    # Clamp first; rounding is monotone so the pair cannot invert
    lower = min(max(probability - uncertainty, 0.0), 1.0)
    upper = min(max(probability + uncertainty, 0.0), 1.0)

    return round_probability(lower), round_probability(upper)
