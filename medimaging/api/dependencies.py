"""
Common dependencies for MedImaging API endpoints.

This module provides reusable dependency functions for FastAPI endpoints:
application state accessors, service factories and the authentication gate.
"""

from typing import Annotated

from fastapi import Depends, Query, Request
from fastapi.security import HTTPAuthorizationCredentials

from medimaging.api.security import TokenManager, bearer_scheme
from medimaging.exceptions import MissingTokenError
from medimaging.models import PageParams, TokenClaims
from medimaging.repositories import StudyRepository, UserRepository
from medimaging.services.imaging_service import ImagingService
from medimaging.services.pacs import PacsClient
from medimaging.services.patient_service import PatientService
from medimaging.services.study_service import StudyService
from medimaging.services.upload_service import UploadService
from medimaging.services.user_service import UserService
from medimaging.settings import Settings


# Application state
def get_app_settings(request: Request) -> Settings:
    settings: Settings = request.app.state.settings
    return settings


def get_pacs_client(request: Request) -> PacsClient:
    pacs: PacsClient = request.app.state.pacs
    return pacs


def get_token_manager(request: Request) -> TokenManager:
    tokens: TokenManager = request.app.state.tokens
    return tokens


def get_user_repository(request: Request) -> UserRepository:
    repo: UserRepository = request.app.state.user_repo
    return repo


def get_study_repository(request: Request) -> StudyRepository:
    repo: StudyRepository = request.app.state.study_repo
    return repo


SettingsDep = Annotated[Settings, Depends(get_app_settings)]
PacsClientDep = Annotated[PacsClient, Depends(get_pacs_client)]
TokenManagerDep = Annotated[TokenManager, Depends(get_token_manager)]
UserRepositoryDep = Annotated[UserRepository, Depends(get_user_repository)]
StudyRepositoryDep = Annotated[StudyRepository, Depends(get_study_repository)]


# Service factories
def get_user_service(repo: UserRepositoryDep, tokens: TokenManagerDep) -> UserService:
    return UserService(repo, tokens)


def get_study_service(repo: StudyRepositoryDep, settings: SettingsDep) -> StudyService:
    return StudyService(repo, institution_name=settings.institution_name)


def get_patient_service(pacs: PacsClientDep, settings: SettingsDep) -> PatientService:
    return PatientService(pacs, fanout_limit=settings.patient_fanout_limit)


def get_imaging_service(pacs: PacsClientDep, settings: SettingsDep) -> ImagingService:
    return ImagingService(pacs, fanout_limit=settings.study_fanout_limit)


def get_upload_service(pacs: PacsClientDep, settings: SettingsDep) -> UploadService:
    return UploadService(
        pacs,
        upload_dir=settings.get_upload_dir(),
        max_files=settings.max_upload_files,
        max_file_size=settings.max_upload_size,
        pacs_timeout=settings.pacs_upload_timeout,
        chunk_size=settings.upload_chunk_size,
    )


UserServiceDep = Annotated[UserService, Depends(get_user_service)]
StudyServiceDep = Annotated[StudyService, Depends(get_study_service)]
PatientServiceDep = Annotated[PatientService, Depends(get_patient_service)]
ImagingServiceDep = Annotated[ImagingService, Depends(get_imaging_service)]
UploadServiceDep = Annotated[UploadService, Depends(get_upload_service)]


# Authentication gate
async def get_current_claims(
    tokens: TokenManagerDep,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> TokenClaims:
    """
    Validate the bearer token of the request.

    Raises:
        MissingTokenError: If no bearer token was sent
        InvalidTokenError: If the token is malformed, forged or expired
    """
    if credentials is None or not credentials.credentials:
        raise MissingTokenError()
    return tokens.decode_token(credentials.credentials)


CurrentClaimsDep = Annotated[TokenClaims, Depends(get_current_claims)]


async def require_auth_if_configured(
    request: Request,
    settings: SettingsDep,
    tokens: TokenManagerDep,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> TokenClaims | None:
    """
    Guard data routes when ``auth_required`` is enabled; pass through otherwise.
    """
    if not settings.auth_required:
        return None
    claims = await get_current_claims(tokens, credentials)
    request.state.claims = claims
    return claims


# Query parameters
def page_parameters(
    page: int = Query(1, ge=1, description="Page number, starting at 1"),
    limit: int = Query(10, ge=1, le=100, description="Items per page"),
) -> PageParams:
    return PageParams(page=page, limit=limit)


def pacs_page_parameters(
    page: int = Query(1, ge=1, description="Page number, starting at 1"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
) -> PageParams:
    return PageParams(page=page, limit=limit)


PageDep = Annotated[PageParams, Depends(page_parameters)]
PacsPageDep = Annotated[PageParams, Depends(pacs_page_parameters)]
