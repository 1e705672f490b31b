"""Tests for the DICOM upload relay."""

from io import BytesIO
from pathlib import Path

import pytest
from starlette.datastructures import Headers, UploadFile

from medimaging.exceptions import InvalidFileTypeError, NoFilesProvidedError, ValidationError
from medimaging.models import PacsUploadStatus, UploadStatus
from medimaging.services.pacs import PacsClient
from medimaging.services.upload_service import UploadService, check_file_type
from tests.utils import FakePacs

EXPLORER = "http://orthanc.test:8042/app/explorer.html"


def make_file(name: str, content: bytes = b"DICM-data", content_type: str = "application/dicom") -> UploadFile:
    return UploadFile(
        file=BytesIO(content),
        filename=name,
        headers=Headers({"content-type": content_type}),
    )


@pytest.fixture
def upload_dir(tmp_path: Path) -> Path:
    return tmp_path / "uploads"


@pytest.fixture
def service(pacs_client: PacsClient, upload_dir: Path) -> UploadService:
    return UploadService(pacs_client, upload_dir, max_files=5, max_file_size=1024, chunk_size=64)


class TestCheckFileType:
    @pytest.mark.parametrize(
        ("filename", "content_type"),
        [
            ("scan.dcm", "application/dicom"),
            ("SCAN.DCM", None),
            ("scan.dicom", "application/dicom"),
            ("IM000001", None),
            ("image.png", "application/octet-stream"),
        ],
    )
    def test_accepted(self, filename: str, content_type: str | None) -> None:
        check_file_type(filename, content_type)

    @pytest.mark.parametrize(
        ("filename", "content_type"),
        [("notes.txt", "text/plain"), ("image.jpg", "image/jpeg"), ("archive.zip", None)],
    )
    def test_rejected(self, filename: str, content_type: str | None) -> None:
        with pytest.raises(InvalidFileTypeError):
            check_file_type(filename, content_type)


class TestRelay:
    @pytest.mark.asyncio
    async def test_bad_file_does_not_affect_the_others(
        self, service: UploadService, fake_pacs: FakePacs, upload_dir: Path
    ) -> None:
        files = [make_file("a.dcm"), make_file("notes.txt", b"hello", "text/plain"), make_file("b.dcm")]

        result = await service.relay(files, explorer_url=EXPLORER)

        assert [f.original_name for f in result.files] == ["a.dcm", "b.dcm"]
        assert [r.original_name for r in result.rejected] == ["notes.txt"]
        assert result.rejected[0].error == "InvalidFileType"
        assert result.total_files == 2
        assert result.pacs_uploaded == 2
        assert result.message == "DICOM files processed: 2/2 uploaded to PACS"
        assert result.orthanc_url == EXPLORER
        assert len(fake_pacs.uploads) == 2
        assert len(list(upload_dir.iterdir())) == 2

    @pytest.mark.asyncio
    async def test_stored_files_keep_original_name(
        self, service: UploadService, upload_dir: Path
    ) -> None:
        result = await service.relay([make_file("scan.dcm"), make_file("scan.dcm")], EXPLORER)

        names = [f.filename for f in result.files]
        assert len(set(names)) == 2
        for stored in result.files:
            assert stored.filename.endswith("_scan.dcm")
            assert stored.filename.split("_", 1)[0].isdigit()
            assert Path(stored.local_path).parent == upload_dir
            assert Path(stored.local_path).read_bytes() == b"DICM-data"

    @pytest.mark.asyncio
    async def test_successful_forward_is_recorded(self, service: UploadService) -> None:
        result = await service.relay([make_file("a.dcm")], EXPLORER)

        uploaded = result.files[0]
        assert uploaded.status == UploadStatus.uploaded_to_pacs
        assert uploaded.orthanc_status == PacsUploadStatus.uploaded
        assert uploaded.orthanc_id == "inst-1"
        assert uploaded.size == len(b"DICM-data")

    @pytest.mark.asyncio
    async def test_pacs_refusal_keeps_local_copy(
        self, service: UploadService, fake_pacs: FakePacs
    ) -> None:
        result = await service.relay([make_file("a.dcm", b"not dicom"), make_file("b.dcm")], EXPLORER)

        failed, ok = result.files
        assert failed.status == UploadStatus.uploaded_locally
        assert failed.orthanc_status == PacsUploadStatus.failed
        assert failed.orthanc_error and "400" in failed.orthanc_error
        assert Path(failed.local_path).exists()
        assert ok.orthanc_status == PacsUploadStatus.uploaded
        assert result.pacs_uploaded == 1
        assert result.message == "DICOM files processed: 1/2 uploaded to PACS"

    @pytest.mark.asyncio
    async def test_non_json_pacs_answer_fails_only_that_file(
        self, service: UploadService, fake_pacs: FakePacs
    ) -> None:
        fake_pacs.garbled_uploads = True

        result = await service.relay([make_file("a.dcm"), make_file("b.dcm")], EXPLORER)

        assert [f.orthanc_status for f in result.files] == [PacsUploadStatus.failed] * 2
        assert "non-JSON" in (result.files[0].orthanc_error or "")
        assert result.pacs_uploaded == 0

    @pytest.mark.asyncio
    async def test_unreachable_pacs_marks_every_file_failed(
        self, service: UploadService, fake_pacs: FakePacs
    ) -> None:
        fake_pacs.down = True

        result = await service.relay([make_file("a.dcm"), make_file("b.dcm")], EXPLORER)

        assert [f.orthanc_status for f in result.files] == [PacsUploadStatus.failed] * 2
        assert result.pacs_uploaded == 0

    @pytest.mark.asyncio
    async def test_oversized_file_is_rejected_and_removed(
        self, service: UploadService, upload_dir: Path
    ) -> None:
        result = await service.relay([make_file("big.dcm", b"DICM" + b"x" * 2000)], EXPLORER)

        assert result.files == []
        assert result.rejected[0].error == "FileTooLarge"
        assert list(upload_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_no_files(self, service: UploadService, fake_pacs: FakePacs) -> None:
        with pytest.raises(NoFilesProvidedError, match="No DICOM files uploaded"):
            await service.relay([], EXPLORER)

        assert fake_pacs.requests == []

    @pytest.mark.asyncio
    async def test_too_many_files(self, service: UploadService, fake_pacs: FakePacs) -> None:
        files = [make_file(f"{n}.dcm") for n in range(6)]

        with pytest.raises(ValidationError) as exc_info:
            await service.relay(files, EXPLORER)

        assert exc_info.value.errors[0].field == "dicomFiles"
        assert fake_pacs.requests == []
