"""
Study router for the local study collection.

This module provides API endpoints for listing, creating, updating the
status of and deleting studies kept by this service.
"""

from datetime import date

from fastapi import APIRouter, Query, status

from medimaging.api.dependencies import PageDep, StudyServiceDep
from medimaging.models import (
    Study,
    StudyCreate,
    StudyFilters,
    StudyListResponse,
    StudyResponse,
    StudyStatus,
    StudyStatusUpdate,
)

router = APIRouter()


@router.get("", response_model=StudyListResponse)
async def list_studies(
    service: StudyServiceDep,
    page: PageDep,
    patient_id: int | None = Query(None, alias="patientId"),
    modality: str | None = Query(None),
    study_status: StudyStatus | None = Query(None, alias="status"),
    date_from: date | None = Query(None, alias="dateFrom"),
    date_to: date | None = Query(None, alias="dateTo"),
    search: str | None = Query(None),
) -> StudyListResponse:
    """List studies matching all given filters."""
    filters = StudyFilters(
        patient_id=patient_id,
        modality=modality,
        status=study_status,
        date_from=date_from,
        date_to=date_to,
        search=search,
    )
    return await service.list_studies(filters, page)


@router.get("/{study_id}", response_model=Study)
async def get_study(study_id: int, service: StudyServiceDep) -> Study:
    """Get study by ID."""
    return await service.get_study(study_id)


@router.post("", response_model=StudyResponse, status_code=status.HTTP_201_CREATED)
async def create_study(data: StudyCreate, service: StudyServiceDep) -> StudyResponse:
    """Create a new study."""
    study = await service.create_study(data)
    return StudyResponse(message="Study created successfully", study=study)


@router.patch("/{study_id}/status", response_model=StudyResponse)
async def update_study_status(
    study_id: int, update: StudyStatusUpdate, service: StudyServiceDep
) -> StudyResponse:
    """Change the status of a study."""
    study = await service.update_status(study_id, update.status)
    return StudyResponse(message="Study status updated successfully", study=study)


@router.delete("/{study_id}", response_model=StudyResponse)
async def delete_study(study_id: int, service: StudyServiceDep) -> StudyResponse:
    """Delete a study."""
    study = await service.delete_study(study_id)
    return StudyResponse(message="Study deleted successfully", study=study)
