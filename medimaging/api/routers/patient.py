"""
Patient router, backed by the PACS.
"""

from fastapi import APIRouter, Query

from medimaging.api.dependencies import PageDep, PatientServiceDep
from medimaging.models import PatientListResponse, PatientRead

router = APIRouter()


@router.get("", response_model=PatientListResponse)
async def list_patients(
    service: PatientServiceDep,
    page: PageDep,
    search: str | None = Query(None, description="Matches patient ID, name or PACS id"),
) -> PatientListResponse:
    """List patients known to the PACS."""
    return await service.list_patients(search, page)


@router.get("/{patient_id}", response_model=PatientRead)
async def get_patient(patient_id: str, service: PatientServiceDep) -> PatientRead:
    """Get patient details by PACS identifier."""
    return await service.get_patient(patient_id)
