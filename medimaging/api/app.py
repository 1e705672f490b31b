"""
Main API application module for MedImaging.

This module creates and configures the FastAPI application with all routers,
middleware, and static files.
"""

import time
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import httpx
from fastapi import Depends, FastAPI, HTTPException, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse

from medimaging.api.dependencies import require_auth_if_configured
from medimaging.api.exception_handlers import setup_exception_handlers
from medimaging.api.routers import auth, dicom, patient, study
from medimaging.api.security import TokenManager
from medimaging.exceptions import PacsError
from medimaging.services.pacs import PacsClient
from medimaging.settings import Settings, get_settings
from medimaging.utils.bootstrap import build_study_repository, build_user_repository
from medimaging.utils.logger import logger, setup_logging_from_settings

API_VERSION = "1.0.0"

API_ENDPOINTS: dict[str, dict[str, str]] = {
    "system": {
        "health": "GET /health",
        "diagnostics": "GET /health?detailed=true",
    },
    "auth": {
        "login": "POST /api/auth/login",
        "me": "GET /api/auth/me",
    },
    "patients": {
        "list": "GET /api/patients",
        "get": "GET /api/patients/{id}",
    },
    "studies": {
        "list": "GET /api/studies",
        "get": "GET /api/studies/{id}",
        "create": "POST /api/studies",
        "updateStatus": "PATCH /api/studies/{id}/status",
        "delete": "DELETE /api/studies/{id}",
    },
    "dicom": {
        "list": "GET /api/dicom/studies",
        "get": "GET /api/dicom/studies/{studyId}",
        "delete": "DELETE /api/dicom/studies/{studyId}",
        "upload": "POST /api/dicom/upload",
        "system": "GET /api/dicom/system",
    },
}

CATCH_ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

AVAILABLE_ROUTES = [
    "GET /health",
    "GET /api",
    "POST /api/auth/login",
    "GET /api/patients",
    "GET /api/studies",
    "GET /api/dicom/studies",
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Applies the logging settings, logs startup and closes the PACS
    connection pool on shutdown.
    """
    settings: Settings = app.state.settings
    setup_logging_from_settings(settings)
    logger.info(f"MedImaging backend starting ({settings.environment})")
    logger.info(f"PACS proxy: {settings.pacs_url}, direct: {settings.pacs_direct_url}")
    logger.info(f"Upload directory: {settings.get_upload_dir()}")

    try:
        yield
    finally:
        await app.state.pacs.close()
        logger.info("Application shutdown")


def _find_static_dir(settings: Settings) -> Path | None:
    for dir_path in settings.static_directories:
        if dir_path.exists():
            logger.info(f"Using static files from {dir_path}")
            return dir_path
        logger.debug(f"Static directory {dir_path} does not exist")
    logger.warning("No static directories found, the frontend will not be served")
    return None


async def _diagnostics(app: FastAPI) -> dict[str, Any]:
    """Counts from the user table and study collection, and a PACS connectivity check.

    A PACS failure is reported, not raised.
    """
    pacs: PacsClient = app.state.pacs
    checks: dict[str, Any] = {
        "auth": {"users": await app.state.user_repo.count()},
        "studies": {
            "total": await app.state.study_repo.count(),
            "modalities": await app.state.study_repo.distinct_values("modality"),
        },
    }
    try:
        patient_ids = await pacs.list_patients()
    except PacsError as e:
        logger.warning(f"PACS diagnostics failed: {e}")
        checks["pacs"] = {"status": "Disconnected", "url": pacs.url, "error": str(e)}
    else:
        checks["pacs"] = {"status": "Connected", "url": pacs.url, "totalPatients": len(patient_ids)}
    return checks


def create_app(
    settings: Settings | None = None,
    pacs_transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Settings to use instead of the cached global ones
        pacs_transport: Transport for the PACS client, used to fake the PACS

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="MedImaging",
        description="Medical imaging portal backend in front of an Orthanc PACS",
        version=API_VERSION,
        debug=settings.debug,
        lifespan=lifespan,
        root_path="" if settings.root_url == "/" else settings.root_url,
    )

    app.state.settings = settings
    app.state.available_routes = AVAILABLE_ROUTES
    app.state.tokens = TokenManager(
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
        expire_hours=settings.token_expire_hours,
    )
    app.state.user_repo = build_user_repository(rounds=settings.bcrypt_rounds)
    app.state.study_repo = build_study_repository(
        seed=settings.seed_demo_studies, institution_name=settings.institution_name
    )
    app.state.pacs = PacsClient(
        settings.pacs_url,
        settings.pacs_direct_url,
        settings.pacs_username,
        settings.pacs_password,
        timeout=settings.pacs_timeout,
        transport=pacs_transport,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            f"{request.method} {request.url.path} {response.status_code} {elapsed_ms:.1f}ms"
        )
        return response

    # Setup exception handlers using decorators
    setup_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health(detailed: bool = False) -> dict[str, Any]:
        """Liveness check; ``detailed=true`` adds per-area diagnostics."""
        payload: dict[str, Any] = {
            "status": "OK",
            "message": "Medical Imaging Server is running",
            "timestamp": datetime.now(UTC).isoformat(),
            "environment": settings.environment,
            "services": {
                "pacs": settings.pacs_url,
                "pacsDirect": settings.pacs_direct_url,
            },
        }
        if detailed:
            payload["checks"] = await _diagnostics(app)
        return payload

    @app.get("/api", tags=["system"])
    async def api_index() -> dict[str, Any]:
        """List the available endpoints."""
        return {
            "message": "Medical Imaging Platform API",
            "version": API_VERSION,
            "endpoints": API_ENDPOINTS,
            "documentation": "Visit /health for system status",
        }

    # Include routers with /api prefix for backend endpoints
    guarded = [Depends(require_auth_if_configured)]
    app.include_router(auth.router, prefix="/api/auth")
    app.include_router(patient.router, prefix="/api/patients", tags=["Patients"], dependencies=guarded)
    app.include_router(study.router, prefix="/api/studies", tags=["Studies"], dependencies=guarded)
    app.include_router(dicom.router, prefix="/api/dicom", tags=["DICOM"], dependencies=guarded)

    # Serve frontend if enabled
    if settings.frontend_enabled:
        static_dir = _find_static_dir(settings)

        # Serve index.html for all non-API routes (SPA support); every other
        # method on an unknown path gets the same 404 as without a frontend
        @app.api_route("/{full_path:path}", methods=CATCH_ALL_METHODS, include_in_schema=False)
        async def serve_spa(request: Request, full_path: str) -> FileResponse:
            """Serve SPA for all non-API routes."""
            if request.method not in ("GET", "HEAD"):
                raise HTTPException(status_code=404)
            if full_path.startswith("api/") or static_dir is None:
                raise HTTPException(status_code=404)

            # Try to serve the requested file first
            requested_file = (static_dir / full_path).resolve()
            if requested_file.is_relative_to(static_dir.resolve()) and requested_file.is_file():
                return FileResponse(requested_file)

            # Serve index.html for all other routes (SPA routing)
            index_path = static_dir / "index.html"
            if index_path.exists():
                return FileResponse(index_path)

            raise HTTPException(status_code=404)

    return app


# Create default application instance
app = create_app()
