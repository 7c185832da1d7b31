"""
Pydantic models for API request/response validation.

Request bodies reuse the engine's PatientSubmission; these models wrap
engine output with the metadata the HTTP layer adds.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from medguard.models.diagnosis_models import (
    ConditionAssessment,
    SeverityTier,
    SymptomCatalogEntry,
    SymptomCategory,
)


class ValidationResponse(BaseModel):
    """
    Result of validating a patient submission.

    Attributes:
        valid: True when no errors were found.
        errors: Human-readable validation messages.
    """
    valid: bool = Field(..., description="Whether the submission is valid")
    errors: list[str] = Field(default_factory=list, description="Validation messages")


class DiagnosisResponse(BaseModel):
    """
    Ranked diagnosis for a patient submission.

    Attributes:
        results: Up to five ranked condition assessments.
        has_high_risk: True if any result is a high or critical condition.
        processing_time_ms: Time taken to produce the ranking.
    """
    results: list[ConditionAssessment] = Field(
        default_factory=list,
        max_length=5,
        description="Ranked condition assessments"
    )
    has_high_risk: bool = Field(default=False, description="High/critical condition present")
    processing_time_ms: int = Field(..., ge=0, description="Processing time in milliseconds")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Response timestamp")


class SymptomCategoryGroup(BaseModel):
    """Symptoms belonging to one body system."""
    category: SymptomCategory = Field(..., description="Body system")
    symptoms: list[SymptomCatalogEntry] = Field(default_factory=list, description="Symptoms")


class SymptomCatalogResponse(BaseModel):
    """Full symptom catalog grouped by category."""
    categories: list[SymptomCategoryGroup] = Field(..., description="Grouped symptoms")
    total: int = Field(..., ge=0, description="Total number of symptoms")


class ConditionSummary(BaseModel):
    """Public summary of a condition in the knowledge base."""
    key: str = Field(..., description="Condition identifier")
    display_name: str = Field(..., description="Condition name")
    description: str = Field(default="", description="Condition description")
    severity_tier: SeverityTier = Field(..., description="Severity tier")
    key_symptoms: list[str] = Field(default_factory=list, description="Key symptoms")


class HealthStatus(str, Enum):
    """System health status levels."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class HealthResponse(BaseModel):
    """
    Health check response for monitoring.

    Attributes:
        status: Overall system health status.
        version: Application version.
        environment: Deployment environment.
        checks: Individual component health checks.
    """
    status: HealthStatus = Field(..., description="Overall health status")
    version: str = Field(..., description="Application version")
    environment: str = Field(..., description="Deployment environment")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Check timestamp")
    checks: dict[str, bool] = Field(default_factory=dict, description="Component health checks")


class ErrorResponse(BaseModel):
    """
    Standardized error response.

    Attributes:
        error: Error type/code.
        message: Human-readable error message.
        details: Additional error details.
        request_id: Request ID for tracing.
    """
    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Error message")
    details: dict | None = Field(default=None, description="Additional details")
    request_id: str | None = Field(default=None, description="Request ID for tracing")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Error timestamp")
