"""Repository for Study-specific operations."""

from collections.abc import Iterable, Sequence
from typing import Any

from medimaging.exceptions import StudyAlreadyExistsError, StudyNotFoundError
from medimaging.models import Study
from medimaging.repositories.base import InMemoryRepository


class StudyRepository(InMemoryRepository[Study]):
    """Repository for the local study collection.

    Ids come from a monotonic counter and are never reused after a delete;
    ``study_id`` is unique among stored studies.
    """

    def __init__(self, studies: Iterable[Study] = ()):
        """Initialize study repository with optional seed studies."""
        super().__init__(Study, items=studies, unique_fields=("study_id",), auto_id=True)

    def _not_found(self, id: int) -> StudyNotFoundError:
        return StudyNotFoundError(id)

    def _conflict(self, field: str, value: Any) -> StudyAlreadyExistsError:
        return StudyAlreadyExistsError(value)

    async def find_by_patient(self, patient_id: int) -> Sequence[Study]:
        """Find all studies for a patient."""
        return await self.list_all(patient_id=patient_id)

    async def distinct_values(self, field: str) -> list[Any]:
        """Distinct values of a field, in first-seen order."""
        values: list[Any] = []
        for study in await self.list_all():
            value = getattr(study, field)
            if value not in values:
                values.append(value)
        return values
