"""
Compliance Portal Service - Main Application
============================================

FastAPI application serving the MetaWorks portal API.

Version: 0.1.0
"""

import uuid
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from services.portal.routes import (
    assessments,
    assistant,
    auth,
    company,
    engagement,
    frameworks,
    gamification,
    onboarding,
    policies,
    policy_management,
    reports,
    risk_prediction,
    risks,
    users,
)
from services.portal.services.did_agent import close_did_client
from shared.config import settings
from shared.database.postgres import PostgresClient
from shared.database.redis import RedisClient
from shared.logging import bind_context, clear_context, get_logger, setup_logging
from shared.models.common import HealthResponse


setup_logging(
    log_level=settings.log_level.value,
    json_logs=settings.is_production,
    service_name="metaworks-portal",
)

logger = get_logger(__name__)

SERVICE_NAME = "portal"
VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> Any:
    """Application lifespan manager."""
    logger.info(
        "portal_starting",
        environment=settings.environment.value,
        port=settings.port,
    )

    try:
        PostgresClient.get_engine()
        logger.info("postgres_connected")

        RedisClient.get_client()
        logger.info("redis_connected")

        settings.uploads.root.mkdir(parents=True, exist_ok=True)
    except Exception as e:
        logger.error("startup_failed", error=str(e))
        raise

    yield

    logger.info("portal_shutting_down")
    await close_did_client()
    await PostgresClient.close()
    await RedisClient.close()


app = FastAPI(
    title="MetaWorks Compliance Portal",
    description="Cybersecurity compliance assessments, risk register, policies and reporting",
    version=VERSION,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors.origins_list,
    allow_credentials=settings.cors.allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_context(request: Request, call_next: Any) -> Any:
    """Tag every log event of a request with its request id and path."""
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    clear_context()
    bind_context(request_id=request_id, path=request.url.path)

    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


# ============================================================================
# Health Check Endpoints
# ============================================================================


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check() -> HealthResponse:
    """
    Service health check.

    Returns health status of the service and its dependencies.
    """
    components: dict[str, dict[str, Any]] = {
        "postgres": await PostgresClient.health_check(),
        "redis": await RedisClient.health_check(),
    }
    all_healthy = all(c.get("status") == "healthy" for c in components.values())

    return HealthResponse(
        status="healthy" if all_healthy else "degraded",
        service=SERVICE_NAME,
        version=VERSION,
        components=components,
    )


@app.get("/", tags=["Health"])
async def root() -> dict[str, str]:
    return {
        "service": "MetaWorks Compliance Portal",
        "version": VERSION,
        "docs": "/docs",
    }


# ============================================================================
# Include Routers
# ============================================================================

app.include_router(auth.router, prefix="/api", tags=["Auth"])
app.include_router(users.router, prefix="/api/users", tags=["Users"])
app.include_router(company.router, prefix="/api", tags=["Company"])
app.include_router(frameworks.router, prefix="/api", tags=["Frameworks"])
app.include_router(assessments.router, prefix="/api", tags=["Assessments"])
app.include_router(reports.router, prefix="/api/reports", tags=["Reports"])
app.include_router(risks.router, prefix="/api", tags=["Risks"])
app.include_router(policies.router, prefix="/api/policies", tags=["Policies"])
app.include_router(policy_management.router, prefix="/api/policy-management", tags=["Policy Management"])
app.include_router(onboarding.router, prefix="/api", tags=["Onboarding"])
app.include_router(gamification.router, prefix="/api/gamification", tags=["Gamification"])
app.include_router(engagement.router, prefix="/api", tags=["Engagement"])
app.include_router(assistant.router, prefix="/api", tags=["Assistant"])
app.include_router(risk_prediction.router, prefix="/api/risk-prediction", tags=["Risk Prediction"])


# ============================================================================
# Error Handlers
# ============================================================================


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    logger.warning(
        "http_exception",
        status_code=exc.status_code,
        detail=exc.detail,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": exc.detail,
            "status_code": exc.status_code,
        },
        headers=exc.headers,
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.error(
        "unhandled_exception",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "error": "Internal server error",
            "status_code": 500,
        },
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "services.portal.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.value.lower(),
    )
