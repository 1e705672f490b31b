"""
Exceptions for the MedImaging application.

Domain exceptions are raised by repositories and services; the API layer
maps them to HTTP responses in ``medimaging.api.exception_handlers``.
"""

from .domain import (
    AuthenticationError,
    AuthorizationError,
    EntityAlreadyExistsError,
    EntityNotFoundError,
    FieldError,
    FileTooLargeError,
    InvalidCredentialsError,
    InvalidFileTypeError,
    InvalidTokenError,
    MedImagingError,
    MissingTokenError,
    NoFilesProvidedError,
    PacsError,
    PacsNotFoundError,
    PacsUnavailableError,
    StudyAlreadyExistsError,
    StudyNotFoundError,
    UploadError,
    UserNotFoundError,
    ValidationError,
)

__all__ = [
    "AuthenticationError",
    "AuthorizationError",
    "EntityAlreadyExistsError",
    "EntityNotFoundError",
    "FieldError",
    "FileTooLargeError",
    "InvalidCredentialsError",
    "InvalidFileTypeError",
    "InvalidTokenError",
    "MedImagingError",
    "MissingTokenError",
    "NoFilesProvidedError",
    "PacsError",
    "PacsNotFoundError",
    "PacsUnavailableError",
    "StudyAlreadyExistsError",
    "StudyNotFoundError",
    "UploadError",
    "UserNotFoundError",
    "ValidationError",
]
