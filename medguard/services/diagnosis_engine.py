"""
Ranking pipeline for symptom-based diagnosis.

Scores every condition in the knowledge base, drops noise, attaches a
confidence interval, sorts, renormalizes for display and truncates.
NO randomness and NO hidden state: the same submission always produces the
same ranking.
"""

from collections.abc import Callable, Collection

from medguard.config.logging_config import get_logger
from medguard.models.diagnosis_models import (
    ConditionAssessment,
    ConditionProfile,
    PatientSubmission,
)
from medguard.services import scorer, uncertainty
from medguard.services.knowledge_base import KnowledgeBase, get_knowledge_base

logger = get_logger(__name__)


ScoreFunction = Callable[[Collection[str], ConditionProfile], float]


class DiagnosisEngine:
    """
    Deterministic symptom-to-condition ranking engine.

    Results are ranked by:
    - Weighted key/secondary symptom match blended with the prior
    - A strict noise threshold on the unrounded score
    - Display renormalization when the kept probabilities sum above 1

    Renormalization rewrites probabilities only. Confidence intervals stay
    computed from the pre-rescaled score, so a rescaled probability can fall
    outside its own interval.
    """

    # Conditions scoring at or below this are dropped
    PROBABILITY_THRESHOLD = 0.05

    MAX_RESULTS = 5

    def __init__(
        self,
        knowledge_base: KnowledgeBase | None = None,
        score_fn: ScoreFunction | None = None,
    ):
        """
        Initialize the engine.

        Args:
            knowledge_base: Condition catalog. If None, uses the shared default.
            score_fn: Scoring function override. If None, uses the weighted scorer.
        """
        self.knowledge_base = knowledge_base or get_knowledge_base()
        self._score = score_fn or scorer.score

    def diagnose(self, submission: PatientSubmission) -> list[ConditionAssessment]:
        """
        Rank conditions for a patient submission.

        The submission is not validated here; callers run the input
        validator first if they want to reject malformed submissions.

        Args:
            submission: Patient symptoms and context.

        Returns:
            At most MAX_RESULTS assessments, highest probability first.
        """
        symptoms = submission.symptoms
        results: list[ConditionAssessment] = []

        for profile in self.knowledge_base.profiles:
            probability = self._score(symptoms, profile)

            if probability <= self.PROBABILITY_THRESHOLD:
                logger.debug(
                    "Condition below threshold",
                    condition=profile.key,
                    probability=round(probability, 4),
                )
                continue

            results.append(self._build_assessment(profile, probability, symptoms))

        # list.sort is stable, so ties keep catalog order
        results.sort(key=lambda r: r.probability, reverse=True)

        total = sum(r.probability for r in results)
        if total > 1.0:
            for result in results:
                result.probability = scorer.round_probability(result.probability / total)

        top = results[: self.MAX_RESULTS]

        logger.info(
            "Diagnosis complete",
            symptom_count=len(symptoms),
            candidates=len(self.knowledge_base),
            kept=len(results),
            returned=len(top),
            renormalized=total > 1.0,
            top_condition=top[0].condition_key if top else None,
        )

        return top

    def _build_assessment(
        self,
        profile: ConditionProfile,
        probability: float,
        symptoms: Collection[str],
    ) -> ConditionAssessment:
        """Create the assessment record for a condition that cleared the threshold."""
        return ConditionAssessment(
            condition_key=profile.key,
            display_name=profile.display_name,
            probability=scorer.round_probability(probability),
            confidence_interval=uncertainty.interval(
                probability, symptoms, profile.key_symptoms
            ),
            description=profile.description,
            key_symptoms=list(profile.key_symptoms),
            recommended_actions=list(profile.recommended_actions),
            severity_tier=profile.severity_tier,
        )


def has_high_risk_results(results: list[ConditionAssessment]) -> bool:
    """True if any assessment is a high or critical severity condition."""
    return any(result.is_high_risk for result in results)


_engine_instance: DiagnosisEngine | None = None


def get_diagnosis_engine() -> DiagnosisEngine:
    """Get or create the diagnosis engine singleton."""
    global _engine_instance
    if _engine_instance is None:
        _engine_instance = DiagnosisEngine()
    return _engine_instance


def diagnose(submission: PatientSubmission) -> list[ConditionAssessment]:
    """Rank conditions for a submission using the default engine."""
    return get_diagnosis_engine().diagnose(submission)
