"""
Study models for the MedImaging application.

This module provides models for the locally managed study collection.
"""

from datetime import UTC, date, datetime

from pydantic import Field

from .base import BaseModel, Pagination, StudyStatus


class StudyBase(BaseModel):
    """Base model for study data."""

    study_id: str = Field(min_length=1)
    patient_id: int
    patient_name: str = ""
    modality: str = Field(min_length=1)
    description: str = Field(min_length=1)
    study_date: date
    study_time: str | None = None
    accession_number: str = ""
    referring_physician: str | None = None


class Study(StudyBase):
    """Model representing a study in the local collection."""

    id: int = 0
    study_instance_uid: str = Field(default="", alias="studyInstanceUID")
    institution_name: str = ""
    series_count: int = 0
    instance_count: int = 0
    status: StudyStatus = StudyStatus.in_progress
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime | None = None


class StudyCreate(StudyBase):
    """Pydantic model for creating a new study."""

    study_instance_uid: str | None = Field(default=None, alias="studyInstanceUID")
    institution_name: str | None = None
    series_count: int = Field(default=0, ge=0)
    instance_count: int = Field(default=0, ge=0)
    status: StudyStatus | None = None


class StudyStatusUpdate(BaseModel):
    """Body of the status update endpoint."""

    status: StudyStatus


class StudyFilters(BaseModel):
    """Optional filters for the study listing.

    All given filters must hold for a study to be listed.
    """

    patient_id: int | None = None
    modality: str | None = None
    status: StudyStatus | None = None
    date_from: date | None = None
    date_to: date | None = None
    search: str | None = None


class StudyPagination(Pagination):
    total_studies: int


class StudyFilterOptions(BaseModel):
    """Distinct values present in the collection, for filter dropdowns."""

    modalities: list[str]
    statuses: list[str]


class StudyListResponse(BaseModel):
    studies: list[Study]
    pagination: StudyPagination
    filters: StudyFilterOptions


class StudyResponse(BaseModel):
    message: str
    study: Study
