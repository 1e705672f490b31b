"""
Upload relay for DICOM files.

Each uploaded file is checked, written to the upload directory and then
forwarded to the PACS ingestion endpoint. Files are handled one after the
other and independently: a rejected or failed file never affects the others.
"""

import time
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path
from typing import Protocol

import aiofiles
import aiofiles.os

from medimaging.exceptions import (
    FieldError,
    FileTooLargeError,
    InvalidFileTypeError,
    NoFilesProvidedError,
    PacsError,
    UploadError,
    ValidationError,
)
from medimaging.models import (
    PacsUploadStatus,
    UploadRejection,
    UploadResponse,
    UploadResult,
    UploadStatus,
)
from medimaging.services.pacs import PacsClient
from medimaging.utils.logger import logger

ALLOWED_EXTENSIONS = frozenset({".dcm", ".dicom", ""})
GENERIC_BINARY_TYPE = "application/octet-stream"


class IncomingFile(Protocol):
    """What the relay needs from an uploaded file (matches ``fastapi.UploadFile``)."""

    filename: str | None
    content_type: str | None

    async def read(self, size: int = -1) -> bytes: ...


def check_file_type(filename: str, content_type: str | None) -> None:
    """Accept DICOM-looking names or the generic binary media type.

    Raises:
        InvalidFileTypeError: If neither the extension nor the media type is acceptable
    """
    extension = Path(filename).suffix.lower()
    if extension in ALLOWED_EXTENSIONS or content_type == GENERIC_BINARY_TYPE:
        return
    raise InvalidFileTypeError(filename)


class UploadService:
    """Relays uploaded files to the PACS.

    Args:
        pacs: PACS client
        upload_dir: Directory where received files are kept
        max_files: Maximum number of files per request
        max_file_size: Maximum size of a single file in bytes
        pacs_timeout: Timeout of each forward to the PACS in seconds
        chunk_size: Read/write chunk size
    """

    def __init__(
        self,
        pacs: PacsClient,
        upload_dir: Path,
        max_files: int = 100,
        max_file_size: int = 100 * 1024 * 1024,
        pacs_timeout: float = 30.0,
        chunk_size: int = 1024 * 1024,
    ):
        self.pacs = pacs
        self.upload_dir = upload_dir
        self.max_files = max_files
        self.max_file_size = max_file_size
        self.pacs_timeout = pacs_timeout
        self.chunk_size = chunk_size

    def _local_path(self, original_name: str) -> Path:
        """``<epoch-ms>_<basename>``, bumped until the name is free."""
        name = Path(original_name).name or "upload"
        stamp = int(time.time() * 1000)
        path = self.upload_dir / f"{stamp}_{name}"
        while path.exists():
            stamp += 1
            path = self.upload_dir / f"{stamp}_{name}"
        return path

    async def _store(self, file: IncomingFile, original_name: str) -> tuple[Path, int]:
        """Stream a file to disk.

        Raises:
            FileTooLargeError: If the file exceeds ``max_file_size``; nothing is kept
        """
        path = self._local_path(original_name)
        size = 0
        async with aiofiles.open(path, "wb") as out:
            while chunk := await file.read(self.chunk_size):
                size += len(chunk)
                if size > self.max_file_size:
                    break
                await out.write(chunk)

        if size > self.max_file_size:
            await aiofiles.os.remove(path)
            raise FileTooLargeError(original_name, self.max_file_size)
        return path, size

    async def _forward(self, result: UploadResult) -> UploadResult:
        """Send a stored file to the PACS and record the outcome on ``result``."""
        async with aiofiles.open(result.local_path, "rb") as f:
            content = await f.read()

        logger.info(f"Uploading {result.original_name} to PACS")
        try:
            answer = await self.pacs.upload_instance(content, timeout=self.pacs_timeout)
        except PacsError as e:
            logger.error(f"Failed to upload {result.original_name} to PACS: {e}")
            result.orthanc_status = PacsUploadStatus.failed
            result.orthanc_error = str(e)
            return result

        result.orthanc_status = PacsUploadStatus.uploaded
        result.orthanc_id = answer.get("ID")
        result.status = UploadStatus.uploaded_to_pacs
        logger.info(f"DICOM uploaded to PACS: {result.original_name} -> {result.orthanc_id}")
        return result

    async def relay(self, files: Sequence[IncomingFile], explorer_url: str) -> UploadResponse:
        """Store and forward every file, one result per accepted file.

        Args:
            files: Uploaded files
            explorer_url: PACS explorer link returned to the client

        Returns:
            Per-file results, rejections and the success count

        Raises:
            NoFilesProvidedError: If ``files`` is empty
            ValidationError: If more than ``max_files`` files were sent
        """
        if not files:
            raise NoFilesProvidedError()
        if len(files) > self.max_files:
            raise ValidationError(
                "Too many files",
                errors=[
                    FieldError(
                        field="dicomFiles",
                        message=f"At most {self.max_files} files per upload",
                        value=len(files),
                    )
                ],
            )

        self.upload_dir.mkdir(parents=True, exist_ok=True)
        results: list[UploadResult] = []
        rejected: list[UploadRejection] = []

        for file in files:
            original_name = file.filename or ""
            try:
                check_file_type(original_name, file.content_type)
                path, size = await self._store(file, original_name)
            except UploadError as e:
                logger.warning(f"Rejected upload {original_name!r}: {e}")
                rejected.append(
                    UploadRejection(original_name=original_name, error=e.code, detail=str(e))
                )
                continue

            result = UploadResult(
                filename=path.name,
                original_name=original_name,
                size=size,
                local_path=str(path),
                upload_time=datetime.now(UTC),
            )
            results.append(await self._forward(result))

        uploaded = sum(1 for r in results if r.orthanc_status == PacsUploadStatus.uploaded)
        return UploadResponse(
            message=f"DICOM files processed: {uploaded}/{len(results)} uploaded to PACS",
            files=results,
            rejected=rejected,
            total_files=len(results),
            pacs_uploaded=uploaded,
            orthanc_url=explorer_url,
        )
