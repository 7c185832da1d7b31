"""
Static knowledge base of condition profiles and selectable symptoms.

The catalog is validated once when loaded and never mutated afterwards, so a
single instance is shared by every diagnosis request without locking.
"""

from collections.abc import Iterable, Mapping
from functools import lru_cache
from types import MappingProxyType
from typing import Any

from pydantic import ValidationError

from medguard.config.logging_config import get_logger
from medguard.models.diagnosis_models import (
    ConditionProfile,
    SymptomCatalogEntry,
    SymptomCategory,
)
from medguard.services.scorer import total_weight

logger = get_logger(__name__)


class KnowledgeBaseError(ValueError):
    """Raised when the static catalog violates an integrity invariant."""


# ============================================================================
# Condition Profiles
# ============================================================================

CONDITION_DATA: list[dict[str, Any]] = [
    {
        "key": "malaria",
        "display_name": "Malaria",
        "description": "A parasitic infection transmitted by infected mosquitoes",
        "severity_tier": "high",
        "prior_probability": 0.15,
        "key_symptoms": [
            "fever", "chills", "headache", "muscle_aches", "fatigue", "nausea", "vomiting",
        ],
        "symptom_likelihoods": {
            "fever": 0.95,
            "chills": 0.85,
            "headache": 0.80,
            "muscle_aches": 0.75,
            "fatigue": 0.85,
            "nausea": 0.70,
            "vomiting": 0.60,
            "sweating": 0.65,
            "confusion": 0.40,
            "rapid_heart": 0.45,
        },
        "recommended_actions": [
            "Seek immediate medical attention",
            "Blood test for malaria parasites",
            "Start antimalarial treatment if confirmed",
            "Monitor for complications",
        ],
    },
    {
        "key": "typhoid",
        "display_name": "Typhoid Fever",
        "description": "A bacterial infection caused by Salmonella typhi",
        "severity_tier": "high",
        "prior_probability": 0.12,
        "key_symptoms": [
            "fever", "headache", "abdominal_pain", "diarrhea", "loss_appetite", "fatigue",
        ],
        "symptom_likelihoods": {
            "fever": 0.90,
            "headache": 0.85,
            "abdominal_pain": 0.80,
            "diarrhea": 0.75,
            "loss_appetite": 0.85,
            "fatigue": 0.80,
            "nausea": 0.70,
            "vomiting": 0.55,
            "chills": 0.50,
            "weight_loss": 0.60,
        },
        "recommended_actions": [
            "Immediate medical consultation required",
            "Blood culture and Widal test",
            "Start appropriate antibiotic treatment",
            "Maintain hydration and rest",
        ],
    },
    {
        "key": "flu",
        "display_name": "Influenza (Flu)",
        "description": "A viral respiratory infection",
        "severity_tier": "medium",
        "prior_probability": 0.25,
        "key_symptoms": [
            "fever", "cough", "headache", "muscle_aches", "fatigue", "runny_nose",
        ],
        "symptom_likelihoods": {
            "fever": 0.85,
            "cough": 0.90,
            "headache": 0.80,
            "muscle_aches": 0.85,
            "fatigue": 0.90,
            "runny_nose": 0.70,
            "chills": 0.60,
            "nausea": 0.30,
            "chest_pain": 0.25,
            "shortness_breath": 0.15,
        },
        "recommended_actions": [
            "Rest and increase fluid intake",
            "Over-the-counter pain relievers",
            "Monitor symptoms for worsening",
            "Seek medical care if symptoms persist",
        ],
    },
    {
        "key": "pneumonia",
        "display_name": "Pneumonia",
        "description": "Infection that inflames air sacs in lungs",
        "severity_tier": "high",
        "prior_probability": 0.08,
        "key_symptoms": ["cough", "fever", "chest_pain", "shortness_breath", "fatigue"],
        "symptom_likelihoods": {
            "cough": 0.95,
            "fever": 0.85,
            "chest_pain": 0.80,
            "shortness_breath": 0.90,
            "fatigue": 0.75,
            "chills": 0.70,
            "headache": 0.45,
            "muscle_aches": 0.50,
            "nausea": 0.30,
        },
        "recommended_actions": [
            "Immediate medical attention required",
            "Chest X-ray and blood tests",
            "Antibiotic or antiviral treatment",
            "Hospitalization may be necessary",
        ],
    },
    {
        "key": "food_poisoning",
        "display_name": "Food Poisoning",
        "description": "Illness caused by consuming contaminated food",
        "severity_tier": "medium",
        "prior_probability": 0.18,
        "key_symptoms": ["nausea", "vomiting", "diarrhea", "abdominal_pain", "fever"],
        "symptom_likelihoods": {
            "nausea": 0.95,
            "vomiting": 0.90,
            "diarrhea": 0.85,
            "abdominal_pain": 0.90,
            "fever": 0.60,
            "fatigue": 0.70,
            "headache": 0.40,
            "chills": 0.35,
            "muscle_aches": 0.30,
        },
        "recommended_actions": [
            "Stay hydrated with clear fluids",
            "Rest and avoid solid foods initially",
            "Seek medical care if severe symptoms",
            "Monitor for signs of dehydration",
        ],
    },
    {
        "key": "common_cold",
        "display_name": "Common Cold",
        "description": "Viral infection of the upper respiratory tract",
        "severity_tier": "low",
        "prior_probability": 0.35,
        "key_symptoms": ["runny_nose", "cough", "headache", "fatigue"],
        "symptom_likelihoods": {
            "runny_nose": 0.95,
            "cough": 0.70,
            "headache": 0.60,
            "fatigue": 0.65,
            "muscle_aches": 0.40,
            "fever": 0.25,
            "chest_pain": 0.15,
            "nausea": 0.10,
        },
        "recommended_actions": [
            "Rest and stay hydrated",
            "Use saline nasal drops",
            "Over-the-counter symptom relief",
            "Usually resolves in 7-10 days",
        ],
    },
]


# ============================================================================
# Symptom Catalog
# ============================================================================

SYMPTOM_DATA: list[dict[str, Any]] = [
    # General
    {"id": "fever", "display_name": "Fever", "category": "general", "severity_weight": 3,
     "associated_conditions": ["malaria", "typhoid", "flu"]},
    {"id": "fatigue", "display_name": "Fatigue/Weakness", "category": "general", "severity_weight": 2,
     "associated_conditions": ["malaria", "typhoid", "flu", "anemia"]},
    {"id": "chills", "display_name": "Chills", "category": "general", "severity_weight": 3,
     "associated_conditions": ["malaria", "typhoid"]},
    {"id": "sweating", "display_name": "Excessive Sweating", "category": "general", "severity_weight": 2,
     "associated_conditions": ["malaria", "tuberculosis"]},
    {"id": "weight_loss", "display_name": "Unexplained Weight Loss", "category": "general",
     "severity_weight": 3, "associated_conditions": ["tuberculosis", "diabetes"]},

    # Respiratory
    {"id": "cough", "display_name": "Cough", "category": "respiratory", "severity_weight": 2,
     "associated_conditions": ["flu", "tuberculosis", "pneumonia"]},
    {"id": "shortness_breath", "display_name": "Shortness of Breath", "category": "respiratory",
     "severity_weight": 3, "associated_conditions": ["pneumonia", "asthma"]},
    {"id": "chest_pain", "display_name": "Chest Pain", "category": "respiratory", "severity_weight": 3,
     "associated_conditions": ["pneumonia", "heart_disease"]},
    {"id": "runny_nose", "display_name": "Runny/Stuffy Nose", "category": "respiratory",
     "severity_weight": 1, "associated_conditions": ["flu", "common_cold"]},

    # Gastrointestinal
    {"id": "nausea", "display_name": "Nausea", "category": "gastrointestinal", "severity_weight": 2,
     "associated_conditions": ["malaria", "typhoid", "food_poisoning"]},
    {"id": "vomiting", "display_name": "Vomiting", "category": "gastrointestinal", "severity_weight": 3,
     "associated_conditions": ["malaria", "typhoid", "food_poisoning"]},
    {"id": "diarrhea", "display_name": "Diarrhea", "category": "gastrointestinal", "severity_weight": 2,
     "associated_conditions": ["typhoid", "food_poisoning"]},
    {"id": "abdominal_pain", "display_name": "Abdominal Pain", "category": "gastrointestinal",
     "severity_weight": 2, "associated_conditions": ["typhoid", "appendicitis"]},
    {"id": "loss_appetite", "display_name": "Loss of Appetite", "category": "gastrointestinal",
     "severity_weight": 2, "associated_conditions": ["typhoid", "hepatitis"]},

    # Neurological
    {"id": "headache", "display_name": "Headache", "category": "neurological", "severity_weight": 2,
     "associated_conditions": ["malaria", "typhoid", "flu", "migraine"]},
    {"id": "confusion", "display_name": "Confusion/Disorientation", "category": "neurological",
     "severity_weight": 3, "associated_conditions": ["malaria", "meningitis"]},
    {"id": "seizures", "display_name": "Seizures", "category": "neurological", "severity_weight": 4,
     "associated_conditions": ["malaria", "epilepsy"]},
    {"id": "muscle_aches", "display_name": "Muscle Aches", "category": "neurological",
     "severity_weight": 2, "associated_conditions": ["flu", "dengue"]},

    # Cardiovascular
    {"id": "rapid_heart", "display_name": "Rapid Heart Rate", "category": "cardiovascular",
     "severity_weight": 3, "associated_conditions": ["malaria", "heart_disease"]},
    {"id": "low_blood_pressure", "display_name": "Low Blood Pressure", "category": "cardiovascular",
     "severity_weight": 3, "associated_conditions": ["sepsis", "dehydration"]},
]


# ============================================================================
# Knowledge Base
# ============================================================================

class KnowledgeBase:
    """
    Read-only catalog of condition profiles and symptoms.

    Integrity is checked at construction:
    - condition keys and symptom IDs are unique
    - every profile carries a non-zero total weight
    Range checks on priors and likelihoods are enforced by the profile model.
    """

    def __init__(
        self,
        profiles: Iterable[ConditionProfile],
        symptoms: Iterable[SymptomCatalogEntry] = (),
    ):
        self._profiles: tuple[ConditionProfile, ...] = tuple(profiles)
        self._symptoms: tuple[SymptomCatalogEntry, ...] = tuple(symptoms)

        self._check_integrity()

        self._profiles_by_key: Mapping[str, ConditionProfile] = MappingProxyType(
            {profile.key: profile for profile in self._profiles}
        )
        self._symptoms_by_id: Mapping[str, SymptomCatalogEntry] = MappingProxyType(
            {entry.id: entry for entry in self._symptoms}
        )

        logger.info(
            "Knowledge base loaded",
            condition_count=len(self._profiles),
            symptom_count=len(self._symptoms),
        )

    @classmethod
    def from_data(
        cls,
        condition_data: Iterable[Mapping[str, Any]],
        symptom_data: Iterable[Mapping[str, Any]] = (),
    ) -> "KnowledgeBase":
        """
        Build a knowledge base from raw dictionaries.

        Raises:
            KnowledgeBaseError: If any entry fails model validation or the
                catalog as a whole violates an integrity invariant.
        """
        try:
            profiles = [ConditionProfile.model_validate(item) for item in condition_data]
            symptoms = [SymptomCatalogEntry.model_validate(item) for item in symptom_data]
        except ValidationError as e:
            raise KnowledgeBaseError(f"Invalid knowledge base entry: {e}") from e
        return cls(profiles, symptoms)

    def _check_integrity(self) -> None:
        seen_keys: set[str] = set()
        for profile in self._profiles:
            if profile.key in seen_keys:
                raise KnowledgeBaseError(f"Duplicate condition key: '{profile.key}'")
            seen_keys.add(profile.key)

            if total_weight(profile) == 0:
                raise KnowledgeBaseError(
                    f"Condition '{profile.key}' declares no key or secondary symptoms"
                )

        seen_ids: set[str] = set()
        for entry in self._symptoms:
            if entry.id in seen_ids:
                raise KnowledgeBaseError(f"Duplicate symptom id: '{entry.id}'")
            seen_ids.add(entry.id)

    @property
    def profiles(self) -> tuple[ConditionProfile, ...]:
        """Condition profiles in catalog declaration order."""
        return self._profiles

    @property
    def symptoms(self) -> tuple[SymptomCatalogEntry, ...]:
        """Symptom catalog in declaration order."""
        return self._symptoms

    def get_profile(self, key: str) -> ConditionProfile | None:
        """Get a condition profile by key."""
        return self._profiles_by_key.get(key)

    def lookup_symptom(self, symptom_id: str) -> SymptomCatalogEntry | None:
        """
        Get symptom information by ID.

        Args:
            symptom_id: Symptom identifier.

        Returns:
            Catalog entry, or None if the symptom is unknown.
        """
        return self._symptoms_by_id.get(symptom_id)

    def symptoms_by_category(self) -> dict[SymptomCategory, list[SymptomCatalogEntry]]:
        """Group the symptom catalog by body system, preserving declaration order."""
        grouped: dict[SymptomCategory, list[SymptomCatalogEntry]] = {}
        for entry in self._symptoms:
            grouped.setdefault(entry.category, []).append(entry)
        return grouped

    def __len__(self) -> int:
        return len(self._profiles)


@lru_cache
def get_knowledge_base() -> KnowledgeBase:
    """
    Get the process-wide knowledge base.

    Loaded and validated on first use, then cached for the process lifetime.
    """
    return KnowledgeBase.from_data(CONDITION_DATA, SYMPTOM_DATA)


def lookup_symptom(symptom_id: str) -> SymptomCatalogEntry | None:
    """Look up a symptom in the default knowledge base."""
    return get_knowledge_base().lookup_symptom(symptom_id)
