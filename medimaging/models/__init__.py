"""
MedImaging data models.

This package contains the pydantic models that define the JSON contract
of the API and the records held by the repositories.
"""

# Base models
from .base import BaseModel, PacsUploadStatus, PageParams, Pagination, StudyStatus, UploadStatus

# PACS study and upload models
from .dicom import (
    DeleteStudyResponse,
    PacsPatientInfo,
    PacsStudyDetail,
    PacsStudyInfo,
    PacsStudyListResponse,
    PacsStudyPagination,
    PacsStudySummary,
    PacsSystemStatus,
    SeriesSummary,
    UploadRejection,
    UploadResponse,
    UploadResult,
    ViewerUrls,
)

# Patient models
from .patient import PatientListResponse, PatientPagination, PatientRead, PatientSummary

# Study models
from .study import (
    Study,
    StudyCreate,
    StudyFilterOptions,
    StudyFilters,
    StudyListResponse,
    StudyPagination,
    StudyResponse,
    StudyStatusUpdate,
)

# User models
from .user import LoginRequest, LoginResponse, TokenClaims, User, UserRead, UserSeed

__all__ = [
    # Base
    "BaseModel",
    "PacsUploadStatus",
    "PageParams",
    "Pagination",
    "StudyStatus",
    "UploadStatus",
    # PACS
    "DeleteStudyResponse",
    "PacsPatientInfo",
    "PacsStudyDetail",
    "PacsStudyInfo",
    "PacsStudyListResponse",
    "PacsStudyPagination",
    "PacsStudySummary",
    "PacsSystemStatus",
    "SeriesSummary",
    "UploadRejection",
    "UploadResponse",
    "UploadResult",
    "ViewerUrls",
    # Patient
    "PatientListResponse",
    "PatientPagination",
    "PatientRead",
    "PatientSummary",
    # Study
    "Study",
    "StudyCreate",
    "StudyFilterOptions",
    "StudyFilters",
    "StudyListResponse",
    "StudyPagination",
    "StudyResponse",
    "StudyStatusUpdate",
    # User
    "LoginRequest",
    "LoginResponse",
    "TokenClaims",
    "User",
    "UserRead",
    "UserSeed",
]
