"""
MedGuard Diagnosis API - Symptom-Based Condition Ranking

A decision support API that ranks possible conditions for a set of reported
symptoms using a deterministic, rule-weighted knowledge base.

This API provides:
- Symptom catalog and lookup
- Advisory validation of patient submissions
- Ranked conditions with heuristic confidence intervals
- Comprehensive logging and observability

Results are not a medical diagnosis.
"""

import asyncio
import time
from contextlib import asynccontextmanager
from uuid import uuid4

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from medguard.config.config import Settings, get_settings
from medguard.config.logging_config import configure_logging, get_logger, log_request_context
from medguard.models.diagnosis_models import PatientSubmission, SymptomCatalogEntry
from medguard.models.models import (
    ConditionSummary,
    DiagnosisResponse,
    ErrorResponse,
    HealthResponse,
    HealthStatus,
    SymptomCatalogResponse,
    SymptomCategoryGroup,
    ValidationResponse,
)
from medguard.services.diagnosis_engine import (
    DiagnosisEngine,
    get_diagnosis_engine,
    has_high_risk_results,
)
from medguard.services.knowledge_base import (
    KnowledgeBase,
    KnowledgeBaseError,
    get_knowledge_base,
)
from medguard.services.validator import validate

# Configure logging before anything else
configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Loads the knowledge base at startup so catalog integrity errors fail
    the process immediately instead of on the first request.
    """
    settings = get_settings()

    logger.info(
        "Application starting",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
        config=settings.get_safe_config_dict(),
    )

    knowledge_base = get_knowledge_base()
    logger.info("Knowledge base ready", condition_count=len(knowledge_base))

    yield

    logger.info("Application shutting down")


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Optional settings override for testing.

    Returns:
        Configured FastAPI application.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        description=__doc__,
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )
    app.dependency_overrides[get_settings] = lambda: settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log all requests with timing and context."""
        request_id = str(uuid4())
        request.state.request_id = request_id
        start_time = time.perf_counter()

        log_request_context(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        response = await call_next(request)

        processing_time = int((time.perf_counter() - start_time) * 1000)
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Processing-Time-Ms"] = str(processing_time)

        logger.info(
            "Request completed",
            status_code=response.status_code,
            processing_time_ms=processing_time,
        )

        return response

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        """Handle HTTP exceptions with structured response."""
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error=f"HTTP_{exc.status_code}",
                message=str(exc.detail),
                request_id=_request_id(request),
            ).model_dump(mode="json"),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions."""
        logger.exception("Unhandled exception", error=str(exc))
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error="INTERNAL_ERROR",
                message="An unexpected error occurred",
                request_id=_request_id(request),
            ).model_dump(mode="json"),
        )

    register_routes(app)

    return app


def register_routes(app: FastAPI) -> None:
    """Register all API routes."""

    @app.get("/", tags=["Root"])
    async def root(settings: Settings = Depends(get_settings)):
        """Root endpoint with API information."""
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "status": "operational",
            "docs": "/docs" if settings.debug else "disabled",
        }

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check(settings: Settings = Depends(get_settings)) -> HealthResponse:
        """
        Health check endpoint for monitoring.

        Returns system health status and component checks.
        """
        try:
            knowledge_base_ok = len(get_knowledge_base()) > 0
        except KnowledgeBaseError as e:
            logger.error("Knowledge base unavailable", error=str(e))
            knowledge_base_ok = False

        checks = {
            "api": True,
            "knowledge_base": knowledge_base_ok,
        }

        if all(checks.values()):
            status = HealthStatus.HEALTHY
        elif checks["api"]:
            status = HealthStatus.DEGRADED
        else:
            status = HealthStatus.UNHEALTHY

        return HealthResponse(
            status=status,
            version=settings.app_version,
            environment=settings.environment,
            checks=checks,
        )

    @app.get("/api/v1/symptoms", response_model=SymptomCatalogResponse, tags=["Symptoms"])
    async def list_symptoms(
        knowledge_base: KnowledgeBase = Depends(get_knowledge_base),
    ) -> SymptomCatalogResponse:
        """Get the selectable symptom catalog grouped by body system."""
        groups = [
            SymptomCategoryGroup(category=category, symptoms=entries)
            for category, entries in knowledge_base.symptoms_by_category().items()
        ]
        return SymptomCatalogResponse(categories=groups, total=len(knowledge_base.symptoms))

    @app.get(
        "/api/v1/symptoms/{symptom_id}",
        response_model=SymptomCatalogEntry,
        tags=["Symptoms"],
    )
    async def get_symptom(
        symptom_id: str,
        knowledge_base: KnowledgeBase = Depends(get_knowledge_base),
    ) -> SymptomCatalogEntry:
        """
        Get details for a single symptom.

        Args:
            symptom_id: Symptom identifier (e.g., "fever").
        """
        entry = knowledge_base.lookup_symptom(symptom_id)
        if entry is None:
            raise HTTPException(status_code=404, detail="Symptom not found")
        return entry

    @app.get("/api/v1/conditions", response_model=list[ConditionSummary], tags=["Conditions"])
    async def list_conditions(
        knowledge_base: KnowledgeBase = Depends(get_knowledge_base),
    ) -> list[ConditionSummary]:
        """Get the conditions the engine can rank, in catalog order."""
        return [
            ConditionSummary(
                key=profile.key,
                display_name=profile.display_name,
                description=profile.description,
                severity_tier=profile.severity_tier,
                key_symptoms=list(profile.key_symptoms),
            )
            for profile in knowledge_base.profiles
        ]

    @app.post("/api/v1/validate", response_model=ValidationResponse, tags=["Diagnosis"])
    async def validate_submission(submission: PatientSubmission) -> ValidationResponse:
        """Check a patient submission without running a diagnosis."""
        errors = validate(submission)
        return ValidationResponse(valid=not errors, errors=errors)

    @app.post("/api/v1/diagnose", response_model=DiagnosisResponse, tags=["Diagnosis"])
    async def diagnose_submission(
        submission: PatientSubmission,
        request: Request,
        engine: DiagnosisEngine = Depends(get_diagnosis_engine),
        settings: Settings = Depends(get_settings),
    ):
        """
        Rank possible conditions for the reported symptoms.

        The submission is validated first; invalid submissions are rejected
        with 422 and every validation message in `details.errors`.

        **Example body:**
        `{"symptoms": ["fever", "chills", "headache"], "age": 34}`
        """
        errors = validate(submission)
        if errors:
            logger.info("Diagnosis rejected", error_count=len(errors))
            return JSONResponse(
                status_code=422,
                content=ErrorResponse(
                    error="VALIDATION_ERROR",
                    message=errors[0],
                    details={"errors": errors},
                    request_id=_request_id(request),
                ).model_dump(mode="json"),
            )

        start_time = time.perf_counter()
        results = engine.diagnose(submission)
        processing_time = int((time.perf_counter() - start_time) * 1000)

        # Perceived latency for the UI spinner; not part of the engine
        if settings.response_delay_ms:
            await asyncio.sleep(settings.response_delay_ms / 1000)

        return DiagnosisResponse(
            results=results,
            has_high_risk=has_high_risk_results(results),
            processing_time_ms=processing_time,
        )


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "medguard.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
