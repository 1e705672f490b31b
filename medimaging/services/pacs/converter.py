"""Reshaping of Orthanc REST payloads into MedImaging records.

Orthanc returns ``{ID, MainDicomTags, ...}`` objects. Missing tags fall back
to fixed placeholders so the frontend never receives nulls for display fields.
"""

from medimaging.models import (
    PacsPatientInfo,
    PacsStudyDetail,
    PacsStudyInfo,
    PacsStudySummary,
    PatientRead,
    PatientSummary,
    SeriesSummary,
    ViewerUrls,
)
from medimaging.types import JSONDict

UNKNOWN_PATIENT = "Unknown Patient"


def main_tags(payload: JSONDict) -> JSONDict:
    """Return the ``MainDicomTags`` bag, or an empty dict."""
    return payload.get("MainDicomTags") or {}


def split_patient_name(patient_name: str) -> tuple[str, str]:
    """Split a DICOM person name (``Last^First^...``) into (first, last).

    A single component is used as both first and last name.
    """
    parts = patient_name.split("^")
    last_name = parts[0] or "Unknown"
    first_name = (parts[1] if len(parts) > 1 and parts[1] else parts[0]) or "Unknown"
    return first_name, last_name


def _patient_fields(orthanc_id: str, payload: JSONDict) -> JSONDict:
    tags = main_tags(payload)
    full_name = tags.get("PatientName") or UNKNOWN_PATIENT
    first_name, last_name = split_patient_name(full_name)
    return {
        "id": orthanc_id,
        "patient_id": tags.get("PatientID") or "Unknown",
        "first_name": first_name,
        "last_name": last_name,
        "full_name": full_name,
        "date_of_birth": tags.get("PatientBirthDate") or "",
        "gender": tags.get("PatientSex") or "U",
        "study_count": len(payload.get("Studies") or []),
        "orthanc_id": orthanc_id,
    }


def patient_summary(orthanc_id: str, payload: JSONDict) -> PatientSummary:
    """Convert an Orthanc patient into a listing row."""
    return PatientSummary(
        **_patient_fields(orthanc_id, payload),
        last_study_date=payload.get("LastUpdate") or "",
    )


def patient_detail(orthanc_id: str, payload: JSONDict) -> PatientRead:
    """Convert an Orthanc patient into the detail record."""
    return PatientRead(
        **_patient_fields(orthanc_id, payload),
        last_update=payload.get("LastUpdate"),
        studies=list(payload.get("Studies") or []),
    )


def study_summary(
    study_id: str, study: JSONDict, patient: JSONDict
) -> PacsStudySummary:
    """Convert an Orthanc study and its parent patient into a listing row."""
    study_tags = main_tags(study)
    patient_tags = main_tags(patient)
    return PacsStudySummary(
        id=study_id,
        study_instance_uid=study_tags.get("StudyInstanceUID") or study_id,
        patient_name=patient_tags.get("PatientName") or "Unknown",
        patient_id=patient_tags.get("PatientID") or "Unknown",
        study_date=study_tags.get("StudyDate") or "",
        study_time=study_tags.get("StudyTime") or "",
        study_description=study_tags.get("StudyDescription") or "No Description",
        modality=study_tags.get("Modality") or study_tags.get("ModalitiesInStudy") or "Unknown",
        series_count=len(study.get("Series") or []),
        instances_count=study.get("CountInstances") or 0,
    )


def series_summary(payload: JSONDict) -> SeriesSummary:
    """Convert an Orthanc series."""
    tags = main_tags(payload)
    instance_count = payload.get("CountInstances")
    if instance_count is None:
        instance_count = len(payload.get("Instances") or [])
    return SeriesSummary(
        id=payload["ID"],
        modality=tags.get("Modality"),
        description=tags.get("SeriesDescription"),
        instance_count=instance_count,
        series_number=tags.get("SeriesNumber"),
    )


def viewer_urls(direct_url: str, study_id: str) -> ViewerUrls:
    """Links to the viewers hosted by the archive for one study."""
    return ViewerUrls(
        orthanc=f"{direct_url}/app/explorer.html#study?uuid={study_id}",
        stone=f"{direct_url}/stone-webviewer/index.html?study={study_id}",
        osimis=f"{direct_url}/osimis-viewer/app/index.html?study={study_id}",
    )


def study_detail(
    study_id: str,
    study: JSONDict,
    patient: JSONDict,
    series: list[JSONDict],
    direct_url: str,
) -> PacsStudyDetail:
    """Assemble the full study record with patient, series and viewer links."""
    study_tags = main_tags(study)
    patient_tags = main_tags(patient)
    return PacsStudyDetail(
        id=study_id,
        study_instance_uid=study_tags.get("StudyInstanceUID"),
        patient=PacsPatientInfo(
            name=patient_tags.get("PatientName"),
            id=patient_tags.get("PatientID"),
            birth_date=patient_tags.get("PatientBirthDate"),
            sex=patient_tags.get("PatientSex"),
        ),
        study=PacsStudyInfo(
            date=study_tags.get("StudyDate"),
            time=study_tags.get("StudyTime"),
            description=study_tags.get("StudyDescription"),
            accession_number=study_tags.get("AccessionNumber"),
        ),
        series=[series_summary(s) for s in series],
        viewer_urls=viewer_urls(direct_url, study_id),
    )
