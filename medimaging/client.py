"""
MedImaging API Client.

This module provides a Python client for interacting with the MedImaging API,
supporting both low-level API calls and high-level convenience methods.
"""

import getpass
from datetime import date
from pathlib import Path
from typing import Any

import aiofiles
import httpx

from medimaging.models import (
    DeleteStudyResponse,
    LoginResponse,
    PacsStudyDetail,
    PacsStudyListResponse,
    PatientListResponse,
    PatientRead,
    Study,
    StudyCreate,
    StudyListResponse,
    StudyResponse,
    StudyStatus,
    UploadResponse,
    UserRead,
)
from medimaging.utils.logger import logger


class MedImagingAPIError(Exception):
    """Base exception for MedImaging API errors."""

    def __init__(self, message: str, status_code: int | None = None, detail: Any = None) -> None:
        self.message = message
        self.status_code = status_code
        self.detail = detail
        super().__init__(message)


class MedImagingAuthError(MedImagingAPIError):
    """Authentication-related errors."""

    pass


class MedImagingClient:
    """Client for interacting with the MedImaging API.

    This client logs in with username and password, keeps the bearer token
    it receives and sends it on every following request.

    Example:
        ```python
        async with MedImagingClient("http://localhost:5000", username="doctor") as client:
            studies = await client.get_studies(modality="CT")
            await client.update_study_status(studies.studies[0].id, StudyStatus.completed)
        ```
    """

    def __init__(
        self,
        base_url: str,
        username: str | None = None,
        password: str | None = None,
        log_requests: bool = False,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize MedImaging client.

        Args:
            base_url: Server URL (e.g., "http://localhost:5000"); ``/api`` is appended
            username: Username for authentication
            password: Password for authentication. If None and username is provided,
                     will prompt for password interactively
            log_requests: Enable request/response logging (default: False)
            transport: Custom httpx transport, e.g. to talk to an app in-process
        """
        self.base_url = base_url.rstrip("/")
        self.username = username
        self.password = password
        self.log_requests = log_requests
        self.token: str | None = None

        self.client = httpx.AsyncClient(
            base_url=f"{self.base_url}/api", follow_redirects=True, transport=transport
        )

    async def __aenter__(self) -> "MedImagingClient":
        """Async context manager entry."""
        if self.username and self.token is None:
            await self.login()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    def _log_request(self, method: str, endpoint: str) -> None:
        if self.log_requests:
            logger.debug(f"API Request: {method} {endpoint}")

    def _log_response(self, response: httpx.Response) -> None:
        if self.log_requests:
            logger.debug(f"API Response: {response.status_code} {response.text[:500]}")

    async def _request(self, method: str, endpoint: str, **kwargs: Any) -> httpx.Response:
        """Make HTTP request to API.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: API endpoint below ``/api`` (e.g., "/auth/login")
            **kwargs: Additional arguments passed to httpx request

        Returns:
            HTTP response

        Raises:
            MedImagingAPIError: On API errors
            MedImagingAuthError: On 401 and 403 answers
        """
        headers = kwargs.pop("headers", {})
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        self._log_request(method, endpoint)

        try:
            response = await self.client.request(method, endpoint, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"HTTP error during request: {e}")
            raise MedImagingAPIError(f"HTTP error: {e!s}") from e
        self._log_response(response)

        if response.status_code < 400:
            return response

        try:
            detail = response.json()
        except ValueError:
            detail = response.text

        if response.status_code in (401, 403):
            message = detail.get("detail") if isinstance(detail, dict) else None
            raise MedImagingAuthError(
                message or "Authentication failed",
                status_code=response.status_code,
                detail=detail,
            )
        raise MedImagingAPIError(
            f"API error: {response.status_code}",
            status_code=response.status_code,
            detail=detail,
        )

    # ==================== Authentication ====================

    async def login(self, username: str | None = None, password: str | None = None) -> UserRead:
        """Authenticate and keep the issued bearer token.

        Raises:
            MedImagingAuthError: On authentication failure
        """
        username = username or self.username
        password = password or self.password

        if not username:
            raise MedImagingAuthError("Username is required for login")
        if not password:
            password = getpass.getpass(f"Password for {username}: ")

        response = await self._request(
            "POST", "/auth/login", json={"username": username, "password": password}
        )
        login = LoginResponse.model_validate(response.json())
        self.token = login.token
        logger.info(f"Successfully authenticated as {username}")
        return login.user

    def logout(self) -> None:
        """Forget the bearer token; tokens are stateless on the server."""
        self.token = None

    async def get_me(self) -> UserRead:
        """Get current authenticated user information."""
        response = await self._request("GET", "/auth/me")
        return UserRead.model_validate(response.json())

    # ==================== Patients ====================

    async def get_patients(
        self, search: str | None = None, page: int = 1, limit: int = 10
    ) -> PatientListResponse:
        """List patients from the PACS."""
        params: dict[str, Any] = {"page": page, "limit": limit}
        if search:
            params["search"] = search
        response = await self._request("GET", "/patients", params=params)
        return PatientListResponse.model_validate(response.json())

    async def get_patient(self, patient_id: str) -> PatientRead:
        response = await self._request("GET", f"/patients/{patient_id}")
        return PatientRead.model_validate(response.json())

    # ==================== Local Studies ====================

    async def get_studies(
        self,
        patient_id: int | None = None,
        modality: str | None = None,
        status: StudyStatus | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        search: str | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> StudyListResponse:
        """List local studies; all given filters must match."""
        filters = {
            "patientId": patient_id,
            "modality": modality,
            "status": StudyStatus(status).value if status else None,
            "dateFrom": date_from.isoformat() if date_from else None,
            "dateTo": date_to.isoformat() if date_to else None,
            "search": search,
        }
        params: dict[str, Any] = {k: v for k, v in filters.items() if v is not None}
        params.update(page=page, limit=limit)
        response = await self._request("GET", "/studies", params=params)
        return StudyListResponse.model_validate(response.json())

    async def get_study(self, study_id: int) -> Study:
        response = await self._request("GET", f"/studies/{study_id}")
        return Study.model_validate(response.json())

    async def create_study(self, study: StudyCreate | dict[str, Any]) -> Study:
        """Create a local study.

        Raises:
            MedImagingAPIError: With status 409 if the study ID is taken
        """
        if isinstance(study, dict):
            study = StudyCreate.model_validate(study)
        payload = study.model_dump(mode="json", by_alias=True, exclude_none=True)
        response = await self._request("POST", "/studies", json=payload)
        return StudyResponse.model_validate(response.json()).study

    async def update_study_status(self, study_id: int, status: StudyStatus | str) -> Study:
        response = await self._request(
            "PATCH", f"/studies/{study_id}/status", json={"status": StudyStatus(status).value}
        )
        return StudyResponse.model_validate(response.json()).study

    async def delete_study(self, study_id: int) -> Study:
        response = await self._request("DELETE", f"/studies/{study_id}")
        return StudyResponse.model_validate(response.json()).study

    # ==================== PACS ====================

    async def get_pacs_studies(
        self,
        search: str | None = None,
        modality: str | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> PacsStudyListResponse:
        params: dict[str, Any] = {"page": page, "limit": limit}
        if search:
            params["search"] = search
        if modality:
            params["modality"] = modality
        response = await self._request("GET", "/dicom/studies", params=params)
        return PacsStudyListResponse.model_validate(response.json())

    async def get_pacs_study(self, study_id: str) -> PacsStudyDetail:
        response = await self._request("GET", f"/dicom/studies/{study_id}")
        return PacsStudyDetail.model_validate(response.json())

    async def delete_pacs_study(self, study_id: str) -> DeleteStudyResponse:
        response = await self._request("DELETE", f"/dicom/studies/{study_id}")
        return DeleteStudyResponse.model_validate(response.json())

    async def upload_files(self, paths: list[Path | str]) -> UploadResponse:
        """Upload DICOM files from disk in a single request."""
        files = []
        for path in map(Path, paths):
            async with aiofiles.open(path, "rb") as f:
                content = await f.read()
            files.append(("dicomFiles", (path.name, content, "application/octet-stream")))

        response = await self._request("POST", "/dicom/upload", files=files)
        return UploadResponse.model_validate(response.json())

    # ==================== High-Level Convenience Methods ====================

    async def create_studies_batch(self, studies_data: list[dict[str, Any] | StudyCreate]) -> list[Study]:
        """Create multiple studies, skipping the ones the server refuses."""
        created: list[Study] = []
        for study_data in studies_data:
            try:
                study = await self.create_study(study_data)
            except MedImagingAPIError as e:
                logger.error(f"Failed to create study {study_data}: {e} {e.detail}")
                continue
            created.append(study)
            logger.info(f"Created study: {study.study_id}")
        return created

    async def get_patient_studies(self, patient_id: int) -> list[Study]:
        """All local studies of a patient, across pages."""
        studies: list[Study] = []
        page = 1
        while True:
            listing = await self.get_studies(patient_id=patient_id, page=page, limit=100)
            studies.extend(listing.studies)
            if page >= listing.pagination.total_pages:
                return studies
            page += 1
