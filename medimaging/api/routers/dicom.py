"""DICOM API router for PACS-backed studies and file upload."""

from fastapi import APIRouter, File, Query, UploadFile

from medimaging.api.dependencies import (
    ImagingServiceDep,
    PacsPageDep,
    SettingsDep,
    UploadServiceDep,
)
from medimaging.models import (
    DeleteStudyResponse,
    PacsStudyDetail,
    PacsStudyListResponse,
    PacsSystemStatus,
    UploadResponse,
)
from medimaging.utils.logger import logger

router = APIRouter()


@router.get("/studies", response_model=PacsStudyListResponse)
async def list_pacs_studies(
    service: ImagingServiceDep,
    page: PacsPageDep,
    search: str | None = Query(None, description="Matches UID, description, patient name or ID"),
    modality: str | None = Query(None),
) -> PacsStudyListResponse:
    """List studies stored in the PACS."""
    return await service.list_studies(search, modality, page)


@router.get("/studies/{study_id}", response_model=PacsStudyDetail)
async def get_pacs_study(
    study_id: str, service: ImagingServiceDep, settings: SettingsDep
) -> PacsStudyDetail:
    """Get a PACS study with its patient, series and viewer links."""
    return await service.get_study(study_id, settings.pacs_direct_url)


@router.delete("/studies/{study_id}", response_model=DeleteStudyResponse)
async def delete_pacs_study(study_id: str, service: ImagingServiceDep) -> DeleteStudyResponse:
    """Delete a study from the PACS."""
    await service.delete_study(study_id)
    return DeleteStudyResponse(message="Study deleted from PACS successfully", study_id=study_id)


@router.post("/upload", response_model=UploadResponse)
async def upload_dicom_files(
    service: UploadServiceDep,
    settings: SettingsDep,
    files: list[UploadFile] = File(default=[], alias="dicomFiles"),
) -> UploadResponse:
    """Store uploaded DICOM files and forward each one to the PACS.

    Per-file failures are reported in the response; the request itself
    succeeds as long as at least one file was sent.
    """
    logger.info(f"Received {len(files)} file(s) for upload")
    try:
        return await service.relay(files, explorer_url=settings.explorer_url)
    finally:
        for file in files:
            await file.close()


@router.get("/system", response_model=PacsSystemStatus)
async def pacs_system_status(service: ImagingServiceDep) -> PacsSystemStatus:
    """Report whether the PACS answers on both endpoints."""
    return await service.system_status()
