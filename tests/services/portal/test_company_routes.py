"""
Tests for the company, policy and user-admin routes.

Version: 0.1.0
"""

from io import BytesIO
from pathlib import Path
from unittest.mock import AsyncMock

import pytest
from fastapi import HTTPException, UploadFile
from starlette.datastructures import Headers

from services.portal.models import CompanyModel, PolicyModel, UserModel
from services.portal.routes.company import (
    delete_document,
    replace_staff,
    upload_document,
    upload_logo,
    upsert_company,
)
from services.portal.routes.policies import delete_policy
from services.portal.routes.users import create_user, list_users
from services.portal.services.storage import FileStorage
from shared.models.company import CompanyUpsert, FileType, StaffUpdate
from shared.models.user import UserCreate, UserRole
from tests.helpers import make_user, scalar_result, scalars_result


def upload(name: str, content_type: str, data: bytes = b"content") -> UploadFile:
    return UploadFile(file=BytesIO(data), filename=name, headers=Headers({"content-type": content_type}))


def company(**overrides) -> CompanyModel:
    values = {"id": 1, "company_name": "Acme Security", "document_file_ids": [], "logo_file_id": None}
    values.update(overrides)
    return CompanyModel(**values)


class TestCompanyProfile:
    async def test_user_without_company_gets_new_one(self, mock_db_session: AsyncMock) -> None:
        account = UserModel(id=4, username="user4", company_id=None)
        mock_db_session.get.return_value = account

        result = await upsert_company(
            CompanyUpsert(company_name="Acme Security", city="Riyadh"),
            db=mock_db_session,
            current_user=make_user(user_id=4, company_id=None),
        )

        assert result.company_name == "Acme Security"
        assert account.company_id == result.id

    async def test_existing_company_is_updated(self, mock_db_session: AsyncMock, user) -> None:
        existing = company(city="Jeddah")
        mock_db_session.get.return_value = existing

        result = await upsert_company(
            CompanyUpsert(company_name="Acme Security", city="Riyadh"),
            db=mock_db_session,
            current_user=user,
        )

        assert result.city == "Riyadh"
        assert mock_db_session.added == []


class TestStaff:
    async def test_blank_names_dropped(self, mock_db_session: AsyncMock, user) -> None:
        mock_db_session.get.return_value = company()

        staff = await replace_staff(
            StaffUpdate(staff_names=["  Sara  ", "", "   ", "Omar"]),
            db=mock_db_session,
            current_user=user,
        )

        assert [s.staff_name for s in staff] == ["Sara", "Omar"]
        assert {s.company_id for s in staff} == {1}


class TestCompanyFiles:
    async def test_logo_replaces_previous(self, mock_db_session: AsyncMock, user, tmp_path: Path) -> None:
        storage = FileStorage(root=tmp_path)
        previous = await storage.save_bytes(b"old", "old.png", "image/png", FileType.LOGO)
        previous.id = 50
        owner = company(logo_file_id=50)
        mock_db_session.get.side_effect = [owner, previous]

        stored = await upload_logo(
            file=upload("logo.png", "image/png"),
            db=mock_db_session,
            storage=storage,
            current_user=user,
        )

        assert owner.logo_file_id == stored.id
        assert not Path(previous.path).exists()
        mock_db_session.delete.assert_awaited_once_with(previous)

    async def test_logo_must_be_image(self, mock_db_session: AsyncMock, user, tmp_path: Path) -> None:
        mock_db_session.get.return_value = company()

        with pytest.raises(HTTPException) as exc_info:
            await upload_logo(
                file=upload("logo.png", "application/pdf"),
                db=mock_db_session,
                storage=FileStorage(root=tmp_path),
                current_user=user,
            )

        assert exc_info.value.status_code == 415
        assert mock_db_session.added == []

    async def test_document_appended(self, mock_db_session: AsyncMock, user, tmp_path: Path) -> None:
        owner = company(document_file_ids=[7])
        mock_db_session.get.return_value = owner

        stored = await upload_document(
            file=upload("isms.pdf", "application/pdf"),
            db=mock_db_session,
            storage=FileStorage(root=tmp_path),
            current_user=user,
        )

        assert owner.document_file_ids == [7, stored.id]
        assert stored.file_type == FileType.DOCUMENT

    async def test_delete_unlisted_document_is_404(self, mock_db_session: AsyncMock, user, tmp_path: Path) -> None:
        mock_db_session.get.return_value = company(document_file_ids=[7])

        with pytest.raises(HTTPException) as exc_info:
            await delete_document(8, db=mock_db_session, storage=FileStorage(root=tmp_path), current_user=user)

        assert exc_info.value.status_code == 404
        assert exc_info.value.detail == "Document not found: 8"


class TestPolicies:
    async def test_delete_removes_attached_file(self, mock_db_session: AsyncMock, user, tmp_path: Path) -> None:
        storage = FileStorage(root=tmp_path)
        attached = await storage.save_bytes(b"%PDF", "policy.pdf", "application/pdf", FileType.POLICY)
        attached.id = 3
        policy = PolicyModel(id=2, title="Access Control", type="security", file_id=3)
        mock_db_session.get.side_effect = [policy, attached]

        response = await delete_policy(2, db=mock_db_session, storage=storage, current_user=user)

        assert response.message == "Policy deleted"
        assert not Path(attached.path).exists()
        assert mock_db_session.delete.await_count == 2

    async def test_missing_policy_is_404(self, mock_db_session: AsyncMock, user, tmp_path: Path) -> None:
        mock_db_session.get.return_value = None

        with pytest.raises(HTTPException) as exc_info:
            await delete_policy(9, db=mock_db_session, storage=FileStorage(root=tmp_path), current_user=user)

        assert exc_info.value.detail == "Policy not found: 9"


class TestUserAdmin:
    async def test_create_user(self, mock_db_session: AsyncMock, admin_user) -> None:
        mock_db_session.execute.return_value = scalar_result(None)

        account = await create_user(
            UserCreate(username="analyst", password="secret123", role=UserRole.ADMIN, access_level="full"),
            db=mock_db_session,
            current_user=admin_user,
        )

        assert account.role == UserRole.ADMIN
        assert account.access_level == "full"
        assert mock_db_session.added[0].password_hash != "secret123"

    async def test_duplicate_username(self, mock_db_session: AsyncMock, admin_user) -> None:
        mock_db_session.execute.return_value = scalar_result(UserModel(id=1, username="analyst"))

        with pytest.raises(HTTPException) as exc_info:
            await create_user(
                UserCreate(username="analyst", password="secret123"),
                db=mock_db_session,
                current_user=admin_user,
            )

        assert exc_info.value.status_code == 400
        assert exc_info.value.detail == "Username already exists"

    async def test_list_users_paginates(self, mock_db_session: AsyncMock, admin_user) -> None:
        rows = [UserModel(id=i, username=f"user{i}", role=UserRole.USER, access_level="trial", is_active=True) for i in (1, 2)]
        mock_db_session.execute.side_effect = [scalar_result(25), scalars_result(rows)]

        page = await list_users(page=2, page_size=10, db=mock_db_session, current_user=admin_user)

        assert page.total == 25
        assert page.pages == 3
        assert [u.username for u in page.items] == ["user1", "user2"]
