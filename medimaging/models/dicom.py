"""
Models for PACS-backed studies, series and DICOM uploads.
"""

from datetime import datetime

from pydantic import Field

from .base import BaseModel, PacsUploadStatus, Pagination, UploadStatus


class PacsStudySummary(BaseModel):
    """Study row in the PACS study listing."""

    id: str
    study_instance_uid: str = Field(alias="studyInstanceUID")
    patient_name: str = "Unknown"
    patient_id: str = "Unknown"
    study_date: str = ""
    study_time: str = ""
    study_description: str = "No Description"
    modality: str = "Unknown"
    series_count: int = 0
    instances_count: int = 0


class PacsStudyPagination(Pagination):
    total_studies: int


class PacsStudyListResponse(BaseModel):
    studies: list[PacsStudySummary]
    pagination: PacsStudyPagination
    total_studies: int
    truncated: bool = False
    message: str = "Studies fetched from Orthanc PACS"


class PacsPatientInfo(BaseModel):
    name: str | None = None
    id: str | None = None
    birth_date: str | None = None
    sex: str | None = None


class PacsStudyInfo(BaseModel):
    date: str | None = None
    time: str | None = None
    description: str | None = None
    accession_number: str | None = None


class SeriesSummary(BaseModel):
    """Series within a PACS study."""

    id: str
    modality: str | None = None
    description: str | None = None
    instance_count: int = 0
    series_number: str | None = None


class ViewerUrls(BaseModel):
    orthanc: str
    stone: str
    osimis: str


class PacsStudyDetail(BaseModel):
    """Full study detail with patient, series and viewer links."""

    id: str
    study_instance_uid: str | None = Field(default=None, alias="studyInstanceUID")
    patient: PacsPatientInfo
    study: PacsStudyInfo
    series: list[SeriesSummary]
    viewer_urls: ViewerUrls


class DeleteStudyResponse(BaseModel):
    message: str
    study_id: str


class PacsSystemStatus(BaseModel):
    """Connectivity report for the PACS endpoints."""

    pacs_status: str
    pacs_version: str | None = None
    proxy_url: str
    direct_url: str
    auth_configured: bool = True
    error: str | None = None


class UploadResult(BaseModel):
    """Outcome for one accepted upload file."""

    filename: str
    original_name: str
    size: int
    local_path: str
    upload_time: datetime
    status: UploadStatus = UploadStatus.uploaded_locally
    orthanc_status: PacsUploadStatus = PacsUploadStatus.pending
    orthanc_id: str | None = None
    orthanc_error: str | None = None


class UploadRejection(BaseModel):
    """A file refused before it was stored."""

    original_name: str
    error: str
    detail: str


class UploadResponse(BaseModel):
    message: str
    files: list[UploadResult]
    rejected: list[UploadRejection] = Field(default_factory=list)
    total_files: int
    pacs_uploaded: int
    orthanc_url: str
