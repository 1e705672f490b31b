"""
Domain exceptions for business logic layer.

These exceptions are used in repositories and services to represent
business logic errors without coupling to HTTP status codes.
"""

from dataclasses import asdict, dataclass
from typing import Any, Self


class MedImagingError(Exception):
    """Base exception for all MedImaging-specific errors."""

    def with_context(self, detail: str) -> Self:
        """Add context information to the exception.

        Args:
            detail: Additional details about the error

        Returns:
            Self with updated message
        """
        self.args = (detail,)
        return self


# Base domain exceptions
class EntityNotFoundError(MedImagingError):
    """Raised when an entity is not found."""

    pass


class EntityAlreadyExistsError(MedImagingError):
    """Raised when trying to create an entity that already exists."""

    pass


class AuthenticationError(MedImagingError):
    """Raised when authentication fails."""

    pass


class AuthorizationError(MedImagingError):
    """Raised when a presented credential is rejected."""

    pass


@dataclass
class FieldError:
    """A single failed field check."""

    field: str
    message: str
    location: str = "body"
    value: Any = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class ValidationError(MedImagingError):
    """Raised when data validation fails."""

    def __init__(self, message: str = "Validation failed", errors: list[FieldError] | None = None):
        super().__init__(message)
        self.errors = errors or []


# User-specific exceptions
class UserNotFoundError(EntityNotFoundError):
    """Raised when a user is not found."""

    def __init__(self, user_id: int | None = None):
        if user_id is not None:
            super().__init__(f"User with ID '{user_id}' not found")
        else:
            super().__init__("User not found")


class InvalidCredentialsError(AuthenticationError):
    """Raised when login credentials are invalid."""

    def __init__(self) -> None:
        super().__init__("Invalid credentials")


class MissingTokenError(AuthenticationError):
    """Raised when a protected route is called without a bearer token."""

    def __init__(self) -> None:
        super().__init__("Access token required")


class InvalidTokenError(AuthorizationError):
    """Raised when a bearer token has a bad signature, is malformed or expired."""

    def __init__(self) -> None:
        super().__init__("Invalid or expired token")


# Study-specific exceptions
class StudyNotFoundError(EntityNotFoundError):
    """Raised when a local study is not found."""

    def __init__(self, study_id: int):
        super().__init__(f"Study with ID '{study_id}' not found")


class StudyAlreadyExistsError(EntityAlreadyExistsError):
    """Raised when a study ID is already in use."""

    def __init__(self, study_id: str):
        super().__init__(f"Study ID '{study_id}' already exists")


# PACS exceptions
class PacsError(MedImagingError):
    """Error returned by, or while talking to, the PACS."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class PacsUnavailableError(PacsError):
    """Raised when the PACS cannot be reached or times out."""

    pass


class PacsNotFoundError(PacsError):
    """Raised when the PACS answers 404 for a resource."""

    def __init__(self, message: str):
        super().__init__(message, status_code=404)


# Upload exceptions
class UploadError(MedImagingError):
    """Base exception for upload errors."""

    code = "UploadError"


class InvalidFileTypeError(UploadError):
    """Raised when an uploaded file is not a DICOM file."""

    code = "InvalidFileType"

    def __init__(self, filename: str):
        super().__init__(f"Only DICOM files are allowed: '{filename}'")


class FileTooLargeError(UploadError):
    """Raised when an uploaded file exceeds the size limit."""

    code = "FileTooLarge"

    def __init__(self, filename: str, limit: int):
        super().__init__(f"File '{filename}' exceeds the {limit} byte limit")


class NoFilesProvidedError(UploadError):
    """Raised when an upload request carries no files."""

    code = "NoFilesProvided"

    def __init__(self) -> None:
        super().__init__("No DICOM files uploaded")
