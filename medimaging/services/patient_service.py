"""Service layer for PACS-backed patients."""

from medimaging.exceptions import PacsError, PacsNotFoundError
from medimaging.models import PageParams, PatientListResponse, PatientPagination, PatientRead, PatientSummary
from medimaging.services.listing import matches_search, paginate
from medimaging.services.pacs import PacsClient
from medimaging.services.pacs.converter import patient_detail, patient_summary
from medimaging.utils.logger import logger


class PatientService:
    """Lists and reads patients from the PACS.

    The listing fetches all patient identifiers, then looks up details one
    identifier at a time for the first ``fanout_limit`` of them. Search and
    pagination apply to that fetched window only.
    """

    def __init__(self, pacs: PacsClient, fanout_limit: int = 10):
        """Initialize patient service.

        Args:
            pacs: PACS client
            fanout_limit: Maximum number of patient detail lookups per listing
        """
        self.pacs = pacs
        self.fanout_limit = fanout_limit

    async def _fetch_window(self, patient_ids: list[str]) -> list[PatientSummary]:
        window = patient_ids[: self.fanout_limit]
        patients: list[PatientSummary] = []

        for index, patient_id in enumerate(window, start=1):
            logger.debug(f"Fetching details for patient {index}/{len(window)}: {patient_id}")
            try:
                payload = await self.pacs.get_patient(patient_id)
            except PacsError as e:
                logger.warning(f"Skipping patient {patient_id}: {e}")
                continue
            patients.append(patient_summary(patient_id, payload))

        return patients

    async def list_patients(self, search: str | None, page: PageParams) -> PatientListResponse:
        """List patients with search and pagination.

        Args:
            search: Case-insensitive text matched against patient ID, name and PACS id
            page: Page and page size

        Returns:
            Listing with pagination block and the total number of patients in the PACS

        Raises:
            PacsError: If the identifier list cannot be fetched
        """
        logger.info("Fetching patients from PACS")
        patient_ids = await self.pacs.list_patients()
        logger.info(f"Found {len(patient_ids)} patients in PACS")

        patients = await self._fetch_window(patient_ids)
        filtered = [
            p for p in patients if matches_search(search, p.patient_id, p.full_name, p.orthanc_id)
        ]
        result = paginate(filtered, page.page, page.limit)
        logger.info(f"Processed {len(patients)} patients, {result.total} match")

        return PatientListResponse(
            patients=result.items,
            pagination=PatientPagination(
                current_page=result.page,
                total_pages=result.total_pages,
                total_patients=result.total,
                limit=result.limit,
            ),
            total_in_pacs=len(patient_ids),
            truncated=len(patient_ids) > self.fanout_limit,
        )

    async def get_patient(self, patient_id: str) -> PatientRead:
        """Get a single patient.

        Raises:
            PacsNotFoundError: If the PACS does not know the patient
        """
        try:
            payload = await self.pacs.get_patient(patient_id)
        except PacsNotFoundError as e:
            raise e.with_context(f"Patient {patient_id} not found in PACS")
        return patient_detail(patient_id, payload)
