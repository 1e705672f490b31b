"""Service layer for the local study collection."""

from datetime import UTC, datetime

from medimaging.models import (
    PageParams,
    Study,
    StudyCreate,
    StudyFilterOptions,
    StudyFilters,
    StudyListResponse,
    StudyPagination,
    StudyStatus,
)
from medimaging.repositories.study_repository import StudyRepository
from medimaging.services.listing import Predicate, apply_filters, matches_search, paginate
from medimaging.utils.logger import logger

STUDY_UID_ROOT = "1.2.840.113619.2.5.1762583153.215519"


def build_study_predicates(filters: StudyFilters) -> list[Predicate[Study]]:
    """Turn the optional listing filters into predicates.

    Modality compares case-insensitively; dates compare as ISO dates,
    inclusive on both ends.
    """
    predicates: list[Predicate[Study]] = []

    if filters.patient_id is not None:
        predicates.append(lambda s: s.patient_id == filters.patient_id)
    if filters.modality:
        modality = filters.modality.lower()
        predicates.append(lambda s: s.modality.lower() == modality)
    if filters.status:
        predicates.append(lambda s: s.status == filters.status)
    if filters.date_from:
        predicates.append(lambda s: s.study_date >= filters.date_from)
    if filters.date_to:
        predicates.append(lambda s: s.study_date <= filters.date_to)
    if filters.search:
        predicates.append(
            lambda s: matches_search(
                filters.search, s.study_id, s.description, s.patient_name, s.accession_number
            )
        )
    return predicates


class StudyService:
    """Service for local study business logic."""

    def __init__(self, study_repo: StudyRepository, institution_name: str = ""):
        """Initialize study service with its repository.

        Args:
            study_repo: Study repository instance
            institution_name: Default institution for new studies
        """
        self.study_repo = study_repo
        self.institution_name = institution_name

    async def list_studies(self, filters: StudyFilters, page: PageParams) -> StudyListResponse:
        """Filter, then paginate the collection.

        Args:
            filters: Conjunctive filters
            page: Page and page size

        Returns:
            Listing with pagination block and the available filter values
        """
        studies = await self.study_repo.list_all()
        filtered = apply_filters(studies, build_study_predicates(filters))
        result = paginate(filtered, page.page, page.limit)

        return StudyListResponse(
            studies=result.items,
            pagination=StudyPagination(
                current_page=result.page,
                total_pages=result.total_pages,
                total_studies=result.total,
                limit=result.limit,
            ),
            filters=StudyFilterOptions(
                modalities=await self.study_repo.distinct_values("modality"),
                statuses=await self.study_repo.distinct_values("status"),
            ),
        )

    async def get_study(self, study_id: int) -> Study:
        """Get study by ID.

        Raises:
            StudyNotFoundError: If study doesn't exist
        """
        return await self.study_repo.get(study_id)

    async def create_study(self, data: StudyCreate) -> Study:
        """Create new study.

        Args:
            data: Validated study payload

        Returns:
            Created study with its assigned id

        Raises:
            StudyAlreadyExistsError: If the study ID is taken
        """
        now = datetime.now(UTC)
        fields = data.model_dump(exclude_none=True)
        fields.setdefault("study_instance_uid", f"{STUDY_UID_ROOT}.{int(now.timestamp() * 1000)}")
        fields.setdefault("institution_name", self.institution_name)
        fields.setdefault("status", StudyStatus.in_progress.value)

        study = await self.study_repo.create(Study(**fields, created_at=now))
        logger.info(f"Created study {study.id} ({study.study_id})")
        return study

    async def update_status(self, study_id: int, status: StudyStatus) -> Study:
        """Set a study's status and stamp ``updated_at``.

        Raises:
            StudyNotFoundError: If study doesn't exist
        """
        study = await self.study_repo.update(
            study_id, {"status": StudyStatus(status).value, "updated_at": datetime.now(UTC)}
        )
        logger.info(f"Study {study_id} status set to {study.status}")
        return study

    async def delete_study(self, study_id: int) -> Study:
        """Remove a study and return it.

        Raises:
            StudyNotFoundError: If study doesn't exist
        """
        study = await self.study_repo.delete(study_id)
        logger.info(f"Deleted study {study_id} ({study.study_id})")
        return study
