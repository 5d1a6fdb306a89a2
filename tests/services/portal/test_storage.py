"""
Upload Storage Tests
====================

Tests for upload validation and the disk-backed file store.

Version: 0.1.0
"""

from io import BytesIO
from pathlib import Path

import pytest
from fastapi import UploadFile
from starlette.datastructures import Headers

from services.portal.services.storage import (
    CHUNK_SIZE,
    FileStorage,
    UploadRejected,
    UploadRule,
    check_file_type,
    check_size,
    document_rule,
    logo_rule,
    template_rule,
)
from shared.models.company import FileType


MB = 1024 * 1024


def type_rejected(*args) -> UploadRejected:
    with pytest.raises(UploadRejected) as exc_info:
        check_file_type(*args)
    return exc_info.value


def size_rejected(*args) -> UploadRejected:
    with pytest.raises(UploadRejected) as exc_info:
        check_size(*args)
    return exc_info.value


def upload(data: bytes, name: str = "logo.png", content_type: str = "image/png") -> UploadFile:
    return UploadFile(file=BytesIO(data), filename=name, headers=Headers({"content-type": content_type}))


class TestValidateUpload:
    def test_empty_upload(self) -> None:
        assert size_rejected(0, logo_rule()).status_code == 400

    def test_wrong_extension(self) -> None:
        error = type_rejected("logo.exe", "image/png", logo_rule())

        assert error.status_code == 415
        assert ".png" in error.detail

    def test_logo_requires_image_mime(self) -> None:
        error = type_rejected("logo.png", "application/pdf", logo_rule())

        assert error.status_code == 415
        assert error.detail == "Only image files are allowed for logo uploads"

    def test_too_large(self) -> None:
        error = size_rejected(10 * MB + 1, document_rule())

        assert error.status_code == 413
        assert error.detail == "File too large. Maximum document size is 10MB"

    def test_logo_limit_is_five_mb(self) -> None:
        check_size(5 * MB, logo_rule())

        assert size_rejected(5 * MB + 1, logo_rule()).status_code == 413

    def test_templates_are_word_or_pdf(self) -> None:
        check_file_type("Template.DOCX", None, template_rule())

        assert type_rejected("template.xlsx", None, template_rule()).status_code == 415

    def test_custom_rule(self) -> None:
        rule = UploadRule("sheet", frozenset({".csv"}), 10)

        check_file_type("risks.csv", "text/csv", rule)
        check_size(10, rule)


class TestFileStorage:
    async def test_save_and_read(self, tmp_path: Path) -> None:
        storage = FileStorage(root=tmp_path)

        stored = await storage.save_bytes(b"%PDF-1.4", "Policy.PDF", "application/pdf", FileType.POLICY, uploaded_by=3)

        assert stored.filename.startswith("policy-")
        assert stored.filename.endswith(".pdf")
        assert stored.original_name == "Policy.PDF"
        assert stored.size == 8
        assert stored.uploaded_by == 3
        assert Path(stored.path).parent == tmp_path / "policy"
        assert await storage.read_bytes(stored) == b"%PDF-1.4"

    async def test_unique_names(self, tmp_path: Path) -> None:
        storage = FileStorage(root=tmp_path)

        first = await storage.save_bytes(b"a", "a.txt", "text/plain", FileType.DOCUMENT)
        second = await storage.save_bytes(b"b", "a.txt", "text/plain", FileType.DOCUMENT)

        assert first.filename != second.filename

    async def test_delete_is_idempotent(self, tmp_path: Path) -> None:
        storage = FileStorage(root=tmp_path)
        stored = await storage.save_bytes(b"a", "a.txt", "text/plain", FileType.DOCUMENT)

        storage.delete(stored)
        storage.delete(stored)

        assert not Path(stored.path).exists()

    async def test_save_upload(self, tmp_path: Path) -> None:
        storage = FileStorage(root=tmp_path)

        stored = await storage.save_upload(upload(b"\x89PNG data"), FileType.LOGO, logo_rule(), uploaded_by=1)

        assert stored.file_type == FileType.LOGO
        assert stored.mime_type == "image/png"
        assert stored.size == 9
        assert await storage.read_bytes(stored) == b"\x89PNG data"

    async def test_multi_chunk_upload(self, tmp_path: Path) -> None:
        storage = FileStorage(root=tmp_path)
        data = b"x" * (CHUNK_SIZE * 2 + 10)

        stored = await storage.save_upload(upload(data, "notes.txt", "text/plain"), FileType.DOCUMENT, document_rule())

        assert stored.size == len(data)
        assert Path(stored.path).stat().st_size == len(data)

    async def test_empty_upload_rejected_before_writing(self, tmp_path: Path) -> None:
        storage = FileStorage(root=tmp_path)

        with pytest.raises(UploadRejected):
            await storage.save_upload(upload(b""), FileType.LOGO, logo_rule())

        assert not (tmp_path / "logo").exists()

    async def test_oversize_upload_stops_early(self, tmp_path: Path) -> None:
        storage = FileStorage(root=tmp_path)
        rule = UploadRule("document", frozenset({".txt"}), CHUNK_SIZE + 1)
        body = BytesIO(b"x" * (CHUNK_SIZE * 3))

        with pytest.raises(UploadRejected) as exc_info:
            await storage.save_upload(
                UploadFile(file=body, filename="big.txt", headers=Headers({"content-type": "text/plain"})),
                FileType.DOCUMENT,
                rule,
            )

        assert exc_info.value.status_code == 413
        assert body.tell() == CHUNK_SIZE * 2
        assert list((tmp_path / "document").iterdir()) == []
