"""
Tests for the HTTP API.
"""

from medguard.models.diagnosis_models import PatientSubmission
from medguard.services.diagnosis_engine import DiagnosisEngine, get_diagnosis_engine
from medguard.services.validator import NO_SYMPTOMS_MESSAGE

MALARIA_KEY_SYMPTOMS = [
    "fever", "chills", "headache", "muscle_aches", "fatigue", "nausea", "vomiting",
]


class TestServiceEndpoints:
    """Root and health endpoints."""

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "operational"

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["checks"] == {"api": True, "knowledge_base": True}

    def test_request_headers(self, client):
        """Every response carries tracing headers."""
        response = client.get("/health")
        assert response.headers["X-Request-ID"]
        assert int(response.headers["X-Processing-Time-Ms"]) >= 0


class TestCatalogEndpoints:
    """Symptom and condition catalog endpoints."""

    def test_list_symptoms(self, client):
        response = client.get("/api/v1/symptoms")
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 20
        assert data["categories"][0]["category"] == "general"
        assert data["categories"][0]["symptoms"][0]["id"] == "fever"

    def test_get_symptom(self, client):
        response = client.get("/api/v1/symptoms/seizures")
        assert response.status_code == 200
        data = response.json()
        assert data["display_name"] == "Seizures"
        assert data["category"] == "neurological"
        assert data["severity_weight"] == 4

    def test_get_unknown_symptom(self, client):
        response = client.get("/api/v1/symptoms/unknown")
        assert response.status_code == 404
        data = response.json()
        assert data["error"] == "HTTP_404"
        assert data["message"] == "Symptom not found"

    def test_list_conditions(self, client):
        response = client.get("/api/v1/conditions")
        assert response.status_code == 200
        keys = [condition["key"] for condition in response.json()]
        assert keys[0] == "malaria"
        assert len(keys) == 6


class TestValidateEndpoint:
    """Advisory validation endpoint."""

    def test_valid(self, client):
        response = client.post("/api/v1/validate", json={"symptoms": ["fever"], "age": 30})
        assert response.status_code == 200
        assert response.json() == {"valid": True, "errors": []}

    def test_invalid(self, client):
        response = client.post("/api/v1/validate", json={"symptoms": [], "age": 150})
        assert response.status_code == 200
        data = response.json()
        assert data["valid"] is False
        assert len(data["errors"]) == 2


class TestDiagnoseEndpoint:
    """Diagnosis endpoint."""

    def test_diagnose_malaria(self, client):
        response = client.post(
            "/api/v1/diagnose",
            json={"symptoms": MALARIA_KEY_SYMPTOMS, "age": 34, "gender": "female"},
        )
        assert response.status_code == 200
        data = response.json()
        assert len(data["results"]) == 5
        top = data["results"][0]
        assert top["condition_key"] == "malaria"
        assert top["confidence_interval"] == [0.54, 0.54]
        assert top["severity_tier"] == "high"
        assert data["has_high_risk"] is True
        assert data["processing_time_ms"] >= 0

    def test_diagnose_with_context(self, client):
        """Optional context fields are accepted."""
        response = client.post(
            "/api/v1/diagnose",
            json={
                "symptoms": ["runny_nose", "cough"],
                "duration": "1-3-days",
                "severity": "mild",
            },
        )
        assert response.status_code == 200
        assert response.json()["results"][0]["condition_key"] == "common_cold"

    def test_diagnose_rejects_invalid_submission(self, client):
        response = client.post("/api/v1/diagnose", json={"symptoms": []})
        assert response.status_code == 422
        data = response.json()
        assert data["error"] == "VALIDATION_ERROR"
        assert data["message"] == NO_SYMPTOMS_MESSAGE
        assert data["details"]["errors"] == [NO_SYMPTOMS_MESSAGE]

    def test_diagnose_rejects_malformed_body(self, client):
        """Unknown enum values fail request parsing."""
        response = client.post(
            "/api/v1/diagnose", json={"symptoms": ["fever"], "gender": "unknown"}
        )
        assert response.status_code == 422

    def test_diagnose_uses_injected_engine(self, client):
        """The engine is a dependency and can be replaced."""

        class EmptyEngine(DiagnosisEngine):
            def diagnose(self, submission: PatientSubmission):
                return []

        client.app.dependency_overrides[get_diagnosis_engine] = lambda: EmptyEngine()
        try:
            response = client.post("/api/v1/diagnose", json={"symptoms": ["fever"]})
        finally:
            client.app.dependency_overrides.pop(get_diagnosis_engine)

        assert response.status_code == 200
        assert response.json()["results"] == []
        assert response.json()["has_high_risk"] is False
