"""Async HTTP client for the Orthanc PACS REST API."""

from typing import Any, cast

import httpx

from medimaging.exceptions import PacsError, PacsNotFoundError, PacsUnavailableError
from medimaging.types import JSONDict, PacsIdList
from medimaging.utils.logger import logger


class PacsClient:
    """Async HTTP client for communicating with an Orthanc server.

    Read calls go through the read-only proxy URL without credentials.
    Writes (upload, delete) and direct status checks go to the archive's own
    port with HTTP basic auth. Nothing is retried: the first failure is raised
    with the underlying message attached.

    Args:
        url: Base URL of the read-only proxy (e.g. ``http://localhost:8080/pacs``).
        direct_url: Base URL of the archive itself (e.g. ``http://localhost:8042``).
        username: Basic auth user for the direct endpoint.
        password: Basic auth password for the direct endpoint.
        timeout: Default request timeout in seconds, None for no timeout.
        transport: Optional httpx transport, used to plug in a fake PACS.
    """

    def __init__(
        self,
        url: str,
        direct_url: str,
        username: str,
        password: str,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url.rstrip("/")
        self.direct_url = direct_url.rstrip("/")
        self._auth = httpx.BasicAuth(username, password)
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def _request(
        self,
        method: str,
        path: str,
        *,
        direct: bool = False,
        **kwargs: Any,
    ) -> httpx.Response:
        """Send a request and translate transport and status failures.

        Raises:
            PacsUnavailableError: If the connection fails or times out.
            PacsNotFoundError: If the PACS answers 404.
            PacsError: For any other non-2xx status.
        """
        base = self.direct_url if direct else self.url
        url = f"{base}{path}"
        if direct:
            kwargs["auth"] = self._auth

        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            raise PacsUnavailableError(f"Request to PACS timed out: {method} {url}") from e
        except httpx.TransportError as e:
            raise PacsUnavailableError(f"Cannot connect to PACS at {base}: {e}") from e

        if response.status_code == 404:
            raise PacsNotFoundError(f"PACS resource not found: {path}")
        if response.is_error:
            logger.error(f"PACS error: {method} {url} -> {response.status_code} {response.text}")
            raise PacsError(
                f"{response.status_code}: {response.reason_phrase}",
                status_code=response.status_code,
            )
        return response

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        """Decode a JSON body, raising PacsError for anything else."""
        try:
            return response.json()
        except ValueError as e:
            raise PacsError(
                f"Unexpected non-JSON answer from PACS: {response.request.method} "
                f"{response.request.url}",
                status_code=response.status_code,
            ) from e

    async def get_json(self, path: str, *, direct: bool = False) -> Any:
        """GET a path and return the decoded JSON body."""
        response = await self._request("GET", path, direct=direct)
        return self._decode(response)

    async def list_patients(self) -> PacsIdList:
        return cast("PacsIdList", await self.get_json("/patients"))

    async def get_patient(self, patient_id: str) -> JSONDict:
        return cast("JSONDict", await self.get_json(f"/patients/{patient_id}"))

    async def list_studies(self) -> PacsIdList:
        return cast("PacsIdList", await self.get_json("/studies"))

    async def get_study(self, study_id: str) -> JSONDict:
        return cast("JSONDict", await self.get_json(f"/studies/{study_id}"))

    async def list_series(self) -> PacsIdList:
        return cast("PacsIdList", await self.get_json("/series"))

    async def get_series(self, series_id: str) -> JSONDict:
        return cast("JSONDict", await self.get_json(f"/series/{series_id}"))

    async def get_instance(self, instance_id: str) -> JSONDict:
        return cast("JSONDict", await self.get_json(f"/instances/{instance_id}"))

    async def system_info(self, *, direct: bool = False) -> JSONDict:
        """Fetch ``/system`` (version, name) from the proxy or the direct port."""
        return cast("JSONDict", await self.get_json("/system", direct=direct))

    async def upload_instance(self, content: bytes, timeout: float | None = None) -> JSONDict:
        """POST one DICOM file to the ingestion endpoint.

        Args:
            content: Raw file bytes.
            timeout: Timeout for this call only.

        Returns:
            The PACS answer, including the new instance ``ID``.

        Raises:
            PacsError: If the answer is not a JSON object.
        """
        response = await self._request(
            "POST",
            "/instances",
            direct=True,
            content=content,
            headers={"Content-Type": "application/dicom"},
            timeout=timeout,
        )
        answer = self._decode(response)
        if not isinstance(answer, dict):
            raise PacsError(
                f"Unexpected answer to instance upload: {answer!r}",
                status_code=response.status_code,
            )
        return cast("JSONDict", answer)

    async def delete_study(self, study_id: str) -> None:
        """Delete a study and all its series and instances from the archive."""
        await self._request("DELETE", f"/studies/{study_id}", direct=True)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "PacsClient":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()
