"""
FastAPI application entry point.

Main API server for TrainerHub.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy import text

from trainerhub import __version__
from trainerhub.api.routes import auth_router
from trainerhub.auth.errors import ServiceError
from trainerhub.config import settings
from trainerhub.db import close_db, get_session_factory, init_db
from trainerhub.logging import configure_logging

logger = structlog.get_logger()


# =============================================================================
# Lifespan Management
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    configure_logging(settings)
    logger.info(
        "Starting TrainerHub",
        version=__version__,
        environment=settings.environment,
    )

    # Migrations own the schema outside development
    if settings.is_development:
        await init_db()
        logger.info("Database initialized")

    yield

    logger.info("Shutting down TrainerHub")
    await close_db()


# =============================================================================
# Application Setup
# =============================================================================

app = FastAPI(
    title="TrainerHub",
    description="Personal-trainer management platform - authentication and sessions",
    version=__version__,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.is_development else settings.cors_origins,
    allow_credentials=not settings.is_development,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Render service errors as ``{success, message, error}`` without internals."""
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.message, "error": exc.error_code},
        headers=headers,
    )


# Include routers
app.include_router(auth_router, prefix="/api/v1")


# =============================================================================
# Health & Info Endpoints
# =============================================================================

class HealthResponse(BaseModel):
    status: str
    version: str
    environment: str
    timestamp: datetime
    database: str = "unknown"


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Health check endpoint with database connectivity."""
    db_status = "disconnected"
    try:
        async with get_session_factory()() as session:
            await session.execute(text("SELECT 1"))
            db_status = "connected"
    except Exception as e:
        logger.error("Database health check failed", error=str(e))
        db_status = f"error: {type(e).__name__}"

    return HealthResponse(
        status="healthy" if db_status == "connected" else "degraded",
        version=__version__,
        environment=settings.environment,
        timestamp=datetime.now(timezone.utc),
        database=db_status,
    )


@app.get("/healthz")
async def healthz() -> dict[str, str]:
    """Simple liveness probe - no DB check."""
    return {"status": "ok"}


def run() -> None:
    """Console entry point (``trainerhub-api``)."""
    import uvicorn

    uvicorn.run(
        "trainerhub.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.is_development,
    )


# =============================================================================
# Run with: uvicorn trainerhub.api.main:app --reload
# =============================================================================
