"""
Tests for the diagnosis ranking pipeline.
"""

import pytest

from medguard.models.diagnosis_models import PatientSubmission
from medguard.services.diagnosis_engine import (
    DiagnosisEngine,
    diagnose,
    has_high_risk_results,
)
from medguard.services.knowledge_base import KnowledgeBase
from medguard.services.scorer import round_probability, score
from medguard.services.uncertainty import MAX_UNCERTAINTY


def _submissions() -> list[PatientSubmission]:
    return [
        PatientSubmission(symptoms=[]),
        PatientSubmission(symptoms=["fever"]),
        PatientSubmission(symptoms=["cough", "runny_nose"]),
        PatientSubmission(symptoms=["nausea", "vomiting", "diarrhea", "abdominal_pain"]),
        PatientSubmission(symptoms=["cough", "fever", "chest_pain", "shortness_breath"]),
        PatientSubmission(symptoms=["seizures", "low_blood_pressure"]),
    ]


class TestResultShape:
    """Properties that hold for every submission."""

    def test_at_most_five_results(self, engine):
        for submission in _submissions():
            assert len(engine.diagnose(submission)) <= DiagnosisEngine.MAX_RESULTS

    def test_sorted_descending(self, engine):
        for submission in _submissions():
            probabilities = [r.probability for r in engine.diagnose(submission)]
            assert probabilities == sorted(probabilities, reverse=True)

    def test_interval_bounds(self, engine):
        """0 <= lower <= upper <= 1 and probability in [0, 1]."""
        for submission in _submissions():
            for result in engine.diagnose(submission):
                lower, upper = result.confidence_interval
                assert 0.0 <= lower <= upper <= 1.0
                assert 0.0 <= result.probability <= 1.0

    def test_threshold_applied_before_renormalization(self, engine, knowledge_base):
        """Every returned condition's raw score cleared the threshold."""
        for submission in _submissions():
            for result in engine.diagnose(submission):
                profile = knowledge_base.get_profile(result.condition_key)
                assert score(submission.symptoms, profile) > DiagnosisEngine.PROBABILITY_THRESHOLD

    def test_idempotent(self, engine):
        """Same submission, same output."""
        for submission in _submissions():
            assert engine.diagnose(submission) == engine.diagnose(submission)

    def test_profile_fields_copied(self, engine, knowledge_base, malaria_submission):
        result = engine.diagnose(malaria_submission)[0]
        profile = knowledge_base.get_profile(result.condition_key)
        assert result.display_name == profile.display_name
        assert result.description == profile.description
        assert result.key_symptoms == list(profile.key_symptoms)
        assert result.recommended_actions == list(profile.recommended_actions)
        assert result.severity_tier == profile.severity_tier


class TestScenarios:
    """End-to-end scenarios over the shipped catalog."""

    def test_malaria_ranked_first(self, engine, malaria_submission):
        results = engine.diagnose(malaria_submission)
        assert results[0].condition_key == "malaria"
        assert [r.condition_key for r in results] == [
            "malaria", "flu", "food_poisoning", "typhoid", "common_cold",
        ]

    def test_malaria_interval_has_zero_width(self, engine, malaria_submission):
        """A full key-symptom match leaves no uncertainty."""
        lower, upper = engine.diagnose(malaria_submission)[0].confidence_interval
        assert lower == upper == 0.54

    def test_renormalized_when_sum_exceeds_one(self, engine, malaria_submission):
        """Six survivors summing to 2.28 are rescaled for display."""
        probabilities = [r.probability for r in engine.diagnose(malaria_submission)]
        assert probabilities == [0.24, 0.19, 0.17, 0.14, 0.14]

    def test_renormalization_leaves_intervals_unscaled(self, engine, malaria_submission):
        """After rescaling the probability can fall outside its own interval."""
        top = engine.diagnose(malaria_submission)[0]
        lower, _ = top.confidence_interval
        assert top.probability < lower

    def test_empty_symptoms_prior_driven(self, engine):
        """With no symptoms only the prior counts and every band is maximal."""
        results = engine.diagnose(PatientSubmission(symptoms=[]))
        assert [r.condition_key for r in results] == ["common_cold", "flu", "food_poisoning"]
        for result in results:
            lower, upper = result.confidence_interval
            # All priors are small enough that the lower bound clamps to zero
            assert lower == 0.0
            assert upper == pytest.approx(result.probability + MAX_UNCERTAINTY, abs=0.011)

    def test_no_renormalization_when_sum_at_most_one(self, engine, knowledge_base):
        """Rounded scores are returned unchanged when they sum to 1 or less."""
        submission = PatientSubmission(symptoms=[])
        results = engine.diagnose(submission)
        assert sum(r.probability for r in results) <= 1.0
        for result in results:
            profile = knowledge_base.get_profile(result.condition_key)
            assert result.probability == round_probability(score(submission.symptoms, profile))

    def test_module_level_diagnose(self, malaria_submission):
        assert diagnose(malaria_submission)[0].condition_key == "malaria"


class TestFiltering:
    """Threshold and truncation behaviour."""

    def test_exact_threshold_excluded(self, knowledge_base):
        """A condition scoring exactly 0.05 is dropped."""
        engine = DiagnosisEngine(
            knowledge_base=knowledge_base,
            score_fn=lambda symptoms, profile: 0.05 if profile.key == "malaria" else 0.3,
        )
        keys = [r.condition_key for r in engine.diagnose(PatientSubmission(symptoms=["fever"]))]
        assert "malaria" not in keys
        assert len(keys) == 5

    def test_just_above_threshold_included(self, make_profile):
        kb = KnowledgeBase([make_profile(key="only", symptom_likelihoods={"a": 0.5})])
        engine = DiagnosisEngine(knowledge_base=kb, score_fn=lambda s, p: 0.0501)
        results = engine.diagnose(PatientSubmission(symptoms=["a"]))
        assert [r.condition_key for r in results] == ["only"]
        assert results[0].probability == 0.05

    def test_nothing_survives(self, knowledge_base):
        """Zero survivors is an empty list, not an error."""
        engine = DiagnosisEngine(knowledge_base=knowledge_base, score_fn=lambda s, p: 0.01)
        assert engine.diagnose(PatientSubmission(symptoms=["fever"])) == []

    def test_truncated_to_top_five(self, make_profile):
        profiles = [
            make_profile(key=f"c{i}", prior_probability=i / 10, symptom_likelihoods={"a": 0.5})
            for i in range(1, 8)
        ]
        engine = DiagnosisEngine(knowledge_base=KnowledgeBase(profiles))
        results = engine.diagnose(PatientSubmission(symptoms=[]))
        assert [r.condition_key for r in results] == ["c7", "c6", "c5", "c4", "c3"]

    def test_ties_keep_catalog_order(self, make_profile):
        """Equal probabilities stay in declaration order."""
        profiles = [
            make_profile(key=key, symptom_likelihoods={"a": 0.5}) for key in ("zeta", "alpha", "mid")
        ]
        engine = DiagnosisEngine(
            knowledge_base=KnowledgeBase(profiles), score_fn=lambda s, p: 0.2
        )
        results = engine.diagnose(PatientSubmission(symptoms=["a"]))
        assert [r.condition_key for r in results] == ["zeta", "alpha", "mid"]


class TestHighRisk:
    """Tests for the high-risk flag."""

    def test_high_risk_present(self, engine, malaria_submission):
        assert has_high_risk_results(engine.diagnose(malaria_submission))

    def test_low_risk_only(self, make_profile):
        kb = KnowledgeBase([
            make_profile(key="mild", severity_tier="low", symptom_likelihoods={"a": 0.5}),
        ])
        results = DiagnosisEngine(knowledge_base=kb).diagnose(PatientSubmission(symptoms=["a"]))
        assert results
        assert not has_high_risk_results(results)

    def test_empty_results(self):
        assert not has_high_risk_results([])
