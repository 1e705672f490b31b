"""Tests for the in-memory repositories."""

import asyncio
from datetime import date

import pytest

from medimaging.exceptions import StudyAlreadyExistsError, StudyNotFoundError, UserNotFoundError
from medimaging.models import Study, StudyStatus
from medimaging.repositories import StudyRepository, UserRepository


def _study(study_id: str, **overrides: object) -> Study:
    fields: dict[str, object] = {
        "study_id": study_id,
        "patient_id": 9,
        "modality": "CT",
        "description": "Test study",
        "study_date": date(2024, 2, 1),
    }
    fields.update(overrides)
    return Study(**fields)


class TestStudyRepository:
    @pytest.mark.asyncio
    async def test_seed_contains_demo_studies(self, study_repo: StudyRepository) -> None:
        studies = await study_repo.list_all()

        assert [s.study_id for s in studies] == ["STU001", "STU002", "STU003", "STU004"]
        assert [s.id for s in studies] == [1, 2, 3, 4]
        assert studies[3].status == StudyStatus.in_progress

    @pytest.mark.asyncio
    async def test_create_assigns_count_plus_one(self, study_repo: StudyRepository) -> None:
        created = await study_repo.create(_study("STU005"))

        assert created.id == 5
        assert await study_repo.count() == 5

    @pytest.mark.asyncio
    async def test_duplicate_business_key_conflicts(self, study_repo: StudyRepository) -> None:
        before = await study_repo.get(1)

        with pytest.raises(StudyAlreadyExistsError, match="STU001"):
            await study_repo.create(_study("STU001", description="Replacement"))

        assert await study_repo.get(1) == before
        assert await study_repo.count() == 4

    @pytest.mark.asyncio
    async def test_ids_are_not_reused_after_delete(self, study_repo: StudyRepository) -> None:
        await study_repo.delete(4)

        created = await study_repo.create(_study("STU010"))

        assert created.id == 5

    @pytest.mark.asyncio
    async def test_concurrent_creates_get_distinct_ids(self, study_repo: StudyRepository) -> None:
        created = await asyncio.gather(*(study_repo.create(_study(f"NEW{n}")) for n in range(10)))

        assert sorted(s.id for s in created) == list(range(5, 15))

    @pytest.mark.asyncio
    async def test_concurrent_duplicates_only_one_wins(self, study_repo: StudyRepository) -> None:
        results = await asyncio.gather(
            *(study_repo.create(_study("SAME")) for _ in range(5)), return_exceptions=True
        )

        assert sum(isinstance(r, Study) for r in results) == 1
        assert sum(isinstance(r, StudyAlreadyExistsError) for r in results) == 4

    @pytest.mark.asyncio
    async def test_update_unknown_id_leaves_collection_unchanged(
        self, study_repo: StudyRepository
    ) -> None:
        before = await study_repo.list_all()

        with pytest.raises(StudyNotFoundError):
            await study_repo.update(99, {"status": "completed"})

        assert await study_repo.list_all() == before

    @pytest.mark.asyncio
    async def test_update_ignores_unknown_fields_and_id(self, study_repo: StudyRepository) -> None:
        updated = await study_repo.update(1, {"status": "cancelled", "id": 77, "bogus": True})

        assert updated.id == 1
        assert updated.status == "cancelled"

    @pytest.mark.asyncio
    async def test_returned_entities_are_copies(self, study_repo: StudyRepository) -> None:
        study = await study_repo.get(1)
        study.description = "Changed outside the repository"

        assert (await study_repo.get(1)).description == "Chest CT with Contrast"

    @pytest.mark.asyncio
    async def test_distinct_values_keep_first_seen_order(self, study_repo: StudyRepository) -> None:
        assert await study_repo.distinct_values("modality") == ["CT", "MRI", "X-RAY", "US"]
        assert await study_repo.distinct_values("status") == ["completed", "in_progress"]

    @pytest.mark.asyncio
    async def test_find_by_patient(self, study_repo: StudyRepository) -> None:
        studies = await study_repo.find_by_patient(1)

        assert [s.study_id for s in studies] == ["STU001", "STU004"]


class TestUserRepository:
    @pytest.mark.asyncio
    async def test_find_by_username_is_exact(self, user_repo: UserRepository) -> None:
        assert (await user_repo.find_by_username("admin")) is not None
        assert await user_repo.find_by_username("Admin") is None

    @pytest.mark.asyncio
    async def test_passwords_are_stored_hashed(self, user_repo: UserRepository) -> None:
        for user in await user_repo.list_all():
            assert user.hashed_password.startswith("$2")

    @pytest.mark.asyncio
    async def test_unknown_id(self, user_repo: UserRepository) -> None:
        with pytest.raises(UserNotFoundError):
            await user_repo.get(42)
