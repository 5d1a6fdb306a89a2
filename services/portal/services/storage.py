"""
Upload Storage
==============

Validates uploads and keeps their bytes on local disk under the configured
upload root, one sub-directory per file type.

Version: 0.1.0
"""

import uuid
from dataclasses import dataclass
from pathlib import Path

import aiofiles
from fastapi import UploadFile, status

from services.portal.models import StoredFileModel
from shared.config import settings
from shared.logging import get_logger
from shared.models.company import FileType


logger = get_logger(__name__)

CHUNK_SIZE = 1024 * 1024


class UploadRejected(Exception):
    """Upload failed validation."""

    def __init__(self, status_code: int, detail: str) -> None:
        super().__init__(detail)
        self.status_code = status_code
        self.detail = detail


@dataclass(frozen=True)
class UploadRule:
    """Accepted extensions and size ceiling for one kind of upload."""

    label: str
    extensions: frozenset[str]
    max_bytes: int
    mime_prefix: str | None = None


IMAGE_EXTENSIONS = frozenset({".png", ".jpg", ".jpeg", ".gif", ".svg", ".webp"})
DOCUMENT_EXTENSIONS = frozenset(
    {".pdf", ".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx", ".txt", ".csv", ".png", ".jpg", ".jpeg"}
)
TEMPLATE_EXTENSIONS = frozenset({".doc", ".docx", ".pdf"})


def logo_rule() -> UploadRule:
    return UploadRule("logo", IMAGE_EXTENSIONS, settings.uploads.max_logo_bytes, mime_prefix="image/")


def document_rule() -> UploadRule:
    return UploadRule("document", DOCUMENT_EXTENSIONS, settings.uploads.max_document_bytes)


def template_rule() -> UploadRule:
    return UploadRule("template", TEMPLATE_EXTENSIONS, settings.uploads.max_template_bytes)


def _extension(name: str) -> str:
    return Path(name).suffix.lower()


def check_file_type(filename: str, content_type: str | None, rule: UploadRule) -> None:
    """
    Raises:
        UploadRejected: 415 for a wrong extension or MIME type
    """
    if _extension(filename) not in rule.extensions:
        allowed = ", ".join(sorted(rule.extensions))
        raise UploadRejected(
            status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            f"Unsupported {rule.label} file type. Allowed: {allowed}",
        )
    if rule.mime_prefix and not (content_type or "").startswith(rule.mime_prefix):
        raise UploadRejected(
            status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            f"Only {rule.mime_prefix.rstrip('/')} files are allowed for {rule.label} uploads",
        )


def check_size(size: int, rule: UploadRule) -> None:
    """
    Raises:
        UploadRejected: 400 when empty, 413 when too large
    """
    if size == 0:
        raise UploadRejected(status.HTTP_400_BAD_REQUEST, "No file uploaded")
    if size > rule.max_bytes:
        limit_mb = rule.max_bytes // (1024 * 1024)
        raise UploadRejected(
            status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            f"File too large. Maximum {rule.label} size is {limit_mb}MB",
        )


class FileStorage:
    """Disk-backed file store; metadata rows are persisted by the caller."""

    def __init__(self, root: Path | None = None) -> None:
        self.root = Path(root or settings.uploads.root)

    def _directory(self, file_type: FileType) -> Path:
        directory = self.root / file_type.value
        directory.mkdir(parents=True, exist_ok=True)
        return directory

    def _new_path(self, original_name: str, file_type: FileType) -> Path:
        filename = f"{file_type.value}-{uuid.uuid4().hex}{_extension(original_name)}"
        return self._directory(file_type) / filename

    def _record(
        self,
        path: Path,
        original_name: str,
        mime_type: str,
        size: int,
        file_type: FileType,
        uploaded_by: int | None,
    ) -> StoredFileModel:
        logger.info(
            "file_stored",
            filename=path.name,
            file_type=file_type.value,
            size=size,
            uploaded_by=uploaded_by,
        )
        return StoredFileModel(
            filename=path.name,
            original_name=original_name,
            mime_type=mime_type,
            size=size,
            path=str(path),
            uploaded_by=uploaded_by,
            file_type=file_type,
        )

    async def save_bytes(
        self,
        data: bytes,
        original_name: str,
        mime_type: str,
        file_type: FileType,
        uploaded_by: int | None = None,
    ) -> StoredFileModel:
        path = self._new_path(original_name, file_type)
        async with aiofiles.open(path, "wb") as f:
            await f.write(data)
        return self._record(path, original_name, mime_type, len(data), file_type, uploaded_by)

    async def save_upload(
        self,
        upload: UploadFile,
        file_type: FileType,
        rule: UploadRule,
        uploaded_by: int | None = None,
    ) -> StoredFileModel:
        """
        Validate and store an uploaded file.

        The body is streamed to disk in chunks and rejected as soon as it
        passes the size ceiling; a rejected upload leaves no file behind.
        """
        original_name = upload.filename or "upload"
        check_file_type(original_name, upload.content_type, rule)

        chunk = await upload.read(CHUNK_SIZE)
        check_size(len(chunk), rule)

        path = self._new_path(original_name, file_type)
        size = 0
        try:
            async with aiofiles.open(path, "wb") as f:
                while chunk:
                    size += len(chunk)
                    check_size(size, rule)
                    await f.write(chunk)
                    chunk = await upload.read(CHUNK_SIZE)
        except UploadRejected:
            path.unlink(missing_ok=True)
            raise

        return self._record(
            path,
            original_name,
            upload.content_type or "application/octet-stream",
            size,
            file_type,
            uploaded_by,
        )

    def path_for(self, stored: StoredFileModel) -> Path:
        return Path(stored.path)

    async def read_bytes(self, stored: StoredFileModel) -> bytes:
        async with aiofiles.open(self.path_for(stored), "rb") as f:
            return await f.read()

    def delete(self, stored: StoredFileModel) -> None:
        path = self.path_for(stored)
        path.unlink(missing_ok=True)
        logger.info("file_deleted", filename=stored.filename)


def get_file_storage() -> FileStorage:
    """FastAPI dependency."""
    return FileStorage()
