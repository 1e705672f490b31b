"""
Patient-related models for the MedImaging application.

Patients are owned by the PACS; these models are the shape they are
reprojected into.
"""

from pydantic import Field

from .base import BaseModel, Pagination


class PatientBase(BaseModel):
    """Patient attributes extracted from PACS ``MainDicomTags``."""

    id: str
    patient_id: str = "Unknown"
    first_name: str = "Unknown"
    last_name: str = "Unknown"
    full_name: str = "Unknown Patient"
    date_of_birth: str = ""
    gender: str = "U"
    study_count: int = 0
    orthanc_id: str


class PatientSummary(PatientBase):
    """Patient row in the listing."""

    last_study_date: str = ""


class PatientRead(PatientBase):
    """Single patient detail."""

    last_update: str | None = None
    studies: list[str] = Field(default_factory=list)


class PatientPagination(Pagination):
    total_patients: int


class PatientListResponse(BaseModel):
    """Response of the patient listing endpoint."""

    patients: list[PatientSummary]
    pagination: PatientPagination
    source: str = "orthanc"
    total_in_pacs: int
    truncated: bool = False
