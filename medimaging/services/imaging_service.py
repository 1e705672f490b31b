"""Service layer for PACS-backed studies."""

import asyncio

from medimaging.exceptions import PacsError, PacsNotFoundError
from medimaging.models import (
    PacsStudyDetail,
    PacsStudyListResponse,
    PacsStudyPagination,
    PacsStudySummary,
    PacsSystemStatus,
    PageParams,
)
from medimaging.services.listing import matches_search, paginate
from medimaging.services.pacs import PacsClient
from medimaging.services.pacs.converter import study_detail, study_summary
from medimaging.utils.logger import logger


class ImagingService:
    """Studies as stored in the PACS.

    The listing looks up each study and its parent patient sequentially for
    the first ``fanout_limit`` identifiers. The detail view fetches all series
    of one study concurrently.
    """

    def __init__(self, pacs: PacsClient, fanout_limit: int = 20):
        """Initialize imaging service.

        Args:
            pacs: PACS client
            fanout_limit: Maximum number of studies looked up per listing
        """
        self.pacs = pacs
        self.fanout_limit = fanout_limit

    async def _study_row(self, study_id: str) -> PacsStudySummary:
        study = await self.pacs.get_study(study_id)
        patient = await self.pacs.get_patient(study["ParentPatient"])
        return study_summary(study_id, study, patient)

    async def list_studies(
        self,
        search: str | None,
        modality: str | None,
        page: PageParams,
    ) -> PacsStudyListResponse:
        """List PACS studies with search, modality filter and pagination.

        Studies whose lookup fails are logged and left out.

        Raises:
            PacsError: If the identifier list cannot be fetched
        """
        study_ids = await self.pacs.list_studies()
        rows: list[PacsStudySummary] = []

        for study_id in study_ids[: self.fanout_limit]:
            try:
                rows.append(await self._study_row(study_id))
            except (PacsError, KeyError) as e:
                logger.warning(f"Skipping study {study_id}: {e!r}")

        wanted_modality = modality.lower() if modality else None
        filtered = [
            row
            for row in rows
            if (wanted_modality is None or row.modality.lower() == wanted_modality)
            and matches_search(
                search, row.study_instance_uid, row.study_description, row.patient_name, row.patient_id
            )
        ]
        result = paginate(filtered, page.page, page.limit)

        return PacsStudyListResponse(
            studies=result.items,
            pagination=PacsStudyPagination(
                current_page=result.page,
                total_pages=result.total_pages,
                total_studies=result.total,
                limit=result.limit,
            ),
            total_studies=len(study_ids),
            truncated=len(study_ids) > self.fanout_limit,
        )

    async def get_study(self, study_id: str, direct_url: str) -> PacsStudyDetail:
        """Study detail with patient, all series and viewer URLs.

        Raises:
            PacsNotFoundError: If the study, its patient or one of its series is missing
        """
        try:
            study = await self.pacs.get_study(study_id)
        except PacsNotFoundError as e:
            raise e.with_context(f"Study {study_id} not found in PACS")
        patient = await self.pacs.get_patient(study["ParentPatient"])
        series = await asyncio.gather(*(self.pacs.get_series(s) for s in study.get("Series") or []))
        return study_detail(study_id, study, patient, list(series), direct_url)

    async def delete_study(self, study_id: str) -> None:
        """Delete a study from the PACS."""
        await self.pacs.delete_study(study_id)
        logger.info(f"Deleted study {study_id} from PACS")

    async def system_status(self) -> PacsSystemStatus:
        """Check both the proxy and the authenticated direct endpoint."""
        try:
            proxy = await self.pacs.system_info()
            await self.pacs.system_info(direct=True)
        except PacsError as e:
            logger.warning(f"PACS connection check failed: {e}")
            return PacsSystemStatus(
                pacs_status="Disconnected",
                proxy_url=self.pacs.url,
                direct_url=self.pacs.direct_url,
                error=str(e),
            )
        return PacsSystemStatus(
            pacs_status="Connected",
            pacs_version=proxy.get("Version"),
            proxy_url=self.pacs.url,
            direct_url=self.pacs.direct_url,
        )
