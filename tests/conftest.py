"""
Shared pytest fixtures for the diagnosis engine test suite.
"""

from collections.abc import Callable, Generator

import pytest
from fastapi.testclient import TestClient

from medguard.config.config import Settings
from medguard.models.diagnosis_models import ConditionProfile, PatientSubmission
from medguard.services.diagnosis_engine import DiagnosisEngine
from medguard.services.knowledge_base import KnowledgeBase, get_knowledge_base


MALARIA_KEY_SYMPTOMS = [
    "fever", "chills", "headache", "muscle_aches", "fatigue", "nausea", "vomiting",
]


# =============================================================================
# Knowledge Base
# =============================================================================


@pytest.fixture
def knowledge_base() -> KnowledgeBase:
    """The default catalog shipped with the service."""
    return get_knowledge_base()


@pytest.fixture
def make_profile() -> Callable[..., ConditionProfile]:
    """Factory for small condition profiles."""

    def _make(
        key: str = "test_condition",
        key_symptoms: tuple[str, ...] = ("a", "b"),
        symptom_likelihoods: dict[str, float] | None = None,
        prior_probability: float = 0.1,
        severity_tier: str = "medium",
    ) -> ConditionProfile:
        return ConditionProfile(
            key=key,
            display_name=key.replace("_", " ").title(),
            description=f"{key} description",
            severity_tier=severity_tier,
            prior_probability=prior_probability,
            key_symptoms=key_symptoms,
            symptom_likelihoods=symptom_likelihoods if symptom_likelihoods is not None else {},
            recommended_actions=("Rest",),
        )

    return _make


# =============================================================================
# Engine
# =============================================================================


@pytest.fixture
def engine(knowledge_base: KnowledgeBase) -> DiagnosisEngine:
    """Engine over the default catalog."""
    return DiagnosisEngine(knowledge_base=knowledge_base)


@pytest.fixture
def malaria_submission() -> PatientSubmission:
    """Submission reporting every malaria key symptom."""
    return PatientSubmission(symptoms=MALARIA_KEY_SYMPTOMS)


# =============================================================================
# API
# =============================================================================


@pytest.fixture
def test_settings() -> Settings:
    """Settings for API tests (no artificial delay)."""
    return Settings(environment="development", debug=False, response_delay_ms=0)


@pytest.fixture
def client(test_settings: Settings) -> Generator[TestClient, None, None]:
    """Test client with lifespan events enabled."""
    from medguard.main import create_app

    app = create_app(test_settings)
    with TestClient(app) as test_client:
        yield test_client
