"""Tests for the PACS study and upload endpoints."""

from pathlib import Path

import pytest
from httpx import AsyncClient

from medimaging.settings import Settings
from tests.utils import FakePacs


class TestPacsStudies:
    @pytest.mark.asyncio
    async def test_list(self, client: AsyncClient) -> None:
        response = await client.get("/api/dicom/studies")

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Studies fetched from Orthanc PACS"
        assert body["totalStudies"] == 3
        assert body["pagination"]["limit"] == 20
        first = body["studies"][0]
        assert first["studyInstanceUID"] == "1.2.3.1"
        assert first["patientName"] == "DOE^JOHN"
        assert first["seriesCount"] == 2
        assert first["instancesCount"] == 150

    @pytest.mark.asyncio
    async def test_search(self, client: AsyncClient) -> None:
        response = await client.get("/api/dicom/studies", params={"search": "smith"})

        assert [s["id"] for s in response.json()["studies"]] == ["s3"]

    @pytest.mark.asyncio
    async def test_detail(self, client: AsyncClient) -> None:
        response = await client.get("/api/dicom/studies/s1")

        assert response.status_code == 200
        body = response.json()
        assert body["studyInstanceUID"] == "1.2.3.1"
        assert body["patient"]["name"] == "DOE^JOHN"
        assert body["study"]["accessionNumber"] == "ACC001"
        assert [s["instanceCount"] for s in body["series"]] == [2, 1]
        assert body["viewerUrls"]["orthanc"] == (
            "http://orthanc.test:8042/app/explorer.html#study?uuid=s1"
        )

    @pytest.mark.asyncio
    async def test_detail_unknown_study(self, client: AsyncClient) -> None:
        response = await client.get("/api/dicom/studies/missing")

        assert response.status_code == 404
        assert response.json() == {"detail": "Study missing not found in PACS"}

    @pytest.mark.asyncio
    async def test_delete(self, client: AsyncClient, fake_pacs: FakePacs) -> None:
        response = await client.delete("/api/dicom/studies/s3")

        assert response.status_code == 200
        assert response.json() == {
            "message": "Study deleted from PACS successfully",
            "studyId": "s3",
        }
        assert "s3" not in fake_pacs.studies

    @pytest.mark.asyncio
    async def test_delete_unknown_study(self, client: AsyncClient) -> None:
        response = await client.delete("/api/dicom/studies/missing")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_system_status(self, client: AsyncClient) -> None:
        response = await client.get("/api/dicom/system")

        assert response.status_code == 200
        assert response.json()["pacsStatus"] == "Connected"


class TestUpload:
    @pytest.mark.asyncio
    async def test_mixed_batch(
        self, client: AsyncClient, fake_pacs: FakePacs, test_settings: Settings
    ) -> None:
        files = [
            ("dicomFiles", ("a.dcm", b"DICM-a", "application/dicom")),
            ("dicomFiles", ("readme.txt", b"text", "text/plain")),
            ("dicomFiles", ("IM0001", b"DICM-b", "application/octet-stream")),
        ]

        response = await client.post("/api/dicom/upload", files=files)

        assert response.status_code == 200
        body = response.json()
        assert body["totalFiles"] == 2
        assert body["pacsUploaded"] == 2
        assert body["message"] == "DICOM files processed: 2/2 uploaded to PACS"
        assert body["orthancUrl"] == "http://orthanc.test:8042/app/explorer.html"
        assert body["rejected"] == [
            {
                "originalName": "readme.txt",
                "error": "InvalidFileType",
                "detail": "Only DICOM files are allowed: 'readme.txt'",
            }
        ]
        assert [f["orthancStatus"] for f in body["files"]] == ["uploaded", "uploaded"]
        assert [f["status"] for f in body["files"]] == ["uploaded_to_pacs"] * 2
        assert fake_pacs.uploads == [b"DICM-a", b"DICM-b"]
        assert len(list(Path(test_settings.upload_dir).iterdir())) == 2

    @pytest.mark.asyncio
    async def test_pacs_failure_reported_per_file(
        self, client: AsyncClient, fake_pacs: FakePacs
    ) -> None:
        fake_pacs.reject_uploads = True
        files = [("dicomFiles", ("a.dcm", b"DICM-a", "application/dicom"))]

        response = await client.post("/api/dicom/upload", files=files)

        assert response.status_code == 200
        uploaded = response.json()["files"][0]
        assert uploaded["status"] == "uploaded_locally"
        assert uploaded["orthancStatus"] == "failed"
        assert uploaded["orthancError"]

    @pytest.mark.asyncio
    async def test_no_files(self, client: AsyncClient, fake_pacs: FakePacs) -> None:
        response = await client.post("/api/dicom/upload", data={"note": "nothing attached"})

        assert response.status_code == 400
        assert response.json()["detail"] == "No DICOM files uploaded"
        assert fake_pacs.requests == []
