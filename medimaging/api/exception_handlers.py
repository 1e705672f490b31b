"""
Exception handlers for converting domain exceptions to HTTP responses.

This module maps domain exceptions to appropriate HTTP status codes
and response formats for the API layer using FastAPI decorators.
"""

from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from medimaging.exceptions import (
    AuthenticationError,
    AuthorizationError,
    EntityAlreadyExistsError,
    EntityNotFoundError,
    PacsError,
    PacsNotFoundError,
    UploadError,
    ValidationError,
)
from medimaging.utils.logger import logger


def _field_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    errors = []
    for error in exc.errors():
        location, *path = error.get("loc", ()) or ("body",)
        errors.append(
            {
                "field": ".".join(str(part) for part in path) or str(location),
                "message": error.get("msg", ""),
                "location": str(location),
            }
        )
    return errors


def setup_exception_handlers(app: FastAPI) -> None:
    """Setup exception handlers using decorators.

    This function registers exception handlers for domain exceptions,
    converting them to appropriate HTTP responses.

    Args:
        app: FastAPI application instance
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Convert request validation failures to 400 with a field list."""
        errors = _field_errors(exc)
        logger.info(f"Validation failed on {request.method} {request.url.path}: {errors}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": "Validation failed", "errors": errors},
        )

    @app.exception_handler(ValidationError)
    async def handle_validation_error(_: Request, exc: ValidationError) -> JSONResponse:
        """Convert ValidationError to 400 response."""
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "detail": str(exc) if str(exc) else "Validation failed",
                "errors": [e.to_dict() for e in exc.errors],
            },
        )

    @app.exception_handler(EntityNotFoundError)
    async def handle_entity_not_found(_: Request, exc: EntityNotFoundError) -> JSONResponse:
        """Convert EntityNotFoundError to 404 response."""
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"detail": str(exc) if str(exc) else "Resource not found"},
        )

    @app.exception_handler(EntityAlreadyExistsError)
    async def handle_entity_already_exists(_: Request, exc: EntityAlreadyExistsError) -> JSONResponse:
        """Convert EntityAlreadyExistsError to 409 response."""
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={"detail": str(exc) if str(exc) else "Resource already exists"},
        )

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(_: Request, exc: AuthenticationError) -> JSONResponse:
        """Convert AuthenticationError to 401 response."""
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"detail": str(exc) if str(exc) else "Authentication failed"},
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(AuthorizationError)
    async def handle_authorization_error(_: Request, exc: AuthorizationError) -> JSONResponse:
        """Convert AuthorizationError to 403 response."""
        return JSONResponse(
            status_code=status.HTTP_403_FORBIDDEN,
            content={"detail": str(exc) if str(exc) else "Insufficient permissions"},
        )

    @app.exception_handler(UploadError)
    async def handle_upload_error(_: Request, exc: UploadError) -> JSONResponse:
        """Convert UploadError to 400 response."""
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": str(exc), "error": exc.code},
        )

    @app.exception_handler(PacsNotFoundError)
    async def handle_pacs_not_found(request: Request, exc: PacsNotFoundError) -> JSONResponse:
        """Convert PacsNotFoundError to 404 response."""
        logger.warning(f"PACS resource missing for {request.url.path}: {exc}")
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"detail": str(exc) if str(exc) else "Not found in PACS"},
        )

    @app.exception_handler(PacsError)
    async def handle_pacs_error(request: Request, exc: PacsError) -> JSONResponse:
        """Convert PacsError to 500 response, keeping the diagnostic message."""
        logger.error(f"PACS call failed for {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "PACS request failed", "message": str(exc)},
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        """Unknown routes get a JSON 404 listing the available routes."""
        if exc.status_code != status.HTTP_404_NOT_FOUND or exc.detail != "Not Found":
            return JSONResponse(
                status_code=exc.status_code,
                content={"detail": exc.detail},
                headers=getattr(exc, "headers", None),
            )
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={
                "detail": "Route not found",
                "message": f"Cannot {request.method} {request.url.path}",
                "availableRoutes": getattr(request.app.state, "available_routes", []),
            },
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        """Last resort: 500, with the message only in development mode."""
        logger.opt(exception=exc).error(f"Unhandled error on {request.method} {request.url.path}")
        settings = getattr(request.app.state, "settings", None)
        development = settings is not None and settings.is_development
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": "Internal server error",
                "message": str(exc) if development else "Something went wrong",
            },
        )
