"""
Bootstrap utilities for MedImaging application initialization.

This module holds the built-in user table and the demo study collection and
builds the in-memory repositories from them at startup.
"""

from datetime import UTC, datetime

from medimaging.models import Study, StudyStatus, User, UserSeed
from medimaging.repositories import StudyRepository, UserRepository
from medimaging.utils.auth import get_password_hash
from medimaging.utils.logger import logger

DEFAULT_USERS: tuple[UserSeed, ...] = (
    UserSeed(
        id=1,
        username="admin",
        password="admin123",
        email="admin@hospital.com",
        role="admin",
        first_name="System",
        last_name="Administrator",
    ),
    UserSeed(
        id=2,
        username="doctor",
        password="doctor123",
        email="doctor@hospital.com",
        role="doctor",
        first_name="Dr. John",
        last_name="Smith",
    ),
)

DEMO_UID_ROOT = "1.2.840.113619.2.5.1762583153.215519.978957063"


def _demo_study(
    id: int,
    patient_id: int,
    patient_name: str,
    modality: str,
    description: str,
    when: datetime,
    physician: str,
    series_count: int,
    instance_count: int,
    status: StudyStatus,
    institution_name: str,
) -> Study:
    return Study(
        id=id,
        study_id=f"STU{id:03d}",
        patient_id=patient_id,
        patient_name=patient_name,
        modality=modality,
        description=description,
        study_date=when.date(),
        study_time=when.strftime("%H:%M:%S"),
        accession_number=f"ACC{id:03d}",
        referring_physician=physician,
        study_instance_uid=f"{DEMO_UID_ROOT}.{77 + id}",
        institution_name=institution_name,
        series_count=series_count,
        instance_count=instance_count,
        status=status,
        created_at=when,
    )


def demo_studies(institution_name: str = "Central Medical Center") -> list[Study]:
    """The demo collection the application starts with."""
    rows = [
        (1, "John Doe", "CT", "Chest CT with Contrast", (2024, 1, 15, 14, 30), "Dr. Smith", 3, 150),
        (2, "Jane Smith", "MRI", "Brain MRI without Contrast", (2024, 1, 16, 9, 15), "Dr. Johnson", 5, 200),
        (3, "Robert Johnson", "X-RAY", "Chest X-Ray PA and Lateral", (2024, 1, 17, 11, 45), "Dr. Williams", 2, 2),
        (1, "John Doe", "US", "Abdominal Ultrasound", (2024, 1, 18, 16, 20), "Dr. Brown", 4, 85),
    ]
    studies = []
    for index, (patient_id, name, modality, description, when, physician, series, instances) in enumerate(
        rows, start=1
    ):
        studies.append(
            _demo_study(
                id=index,
                patient_id=patient_id,
                patient_name=name,
                modality=modality,
                description=description,
                when=datetime(*when, tzinfo=UTC),
                physician=physician,
                series_count=series,
                instance_count=instances,
                status=StudyStatus.in_progress if modality == "US" else StudyStatus.completed,
                institution_name=institution_name,
            )
        )
    return studies


def build_user_repository(
    seeds: tuple[UserSeed, ...] = DEFAULT_USERS, rounds: int = 12
) -> UserRepository:
    """Hash seed passwords and load them into a user repository."""
    users = [
        User(
            **seed.model_dump(exclude={"password"}),
            hashed_password=get_password_hash(seed.password, rounds=rounds),
        )
        for seed in seeds
    ]
    logger.info(f"Loaded {len(users)} built-in users")
    return UserRepository(users)


def build_study_repository(seed: bool = True, institution_name: str = "Central Medical Center") -> StudyRepository:
    """Create the local study collection, optionally with the demo studies."""
    studies = demo_studies(institution_name) if seed else []
    logger.info(f"Loaded {len(studies)} demo studies")
    return StudyRepository(studies)

