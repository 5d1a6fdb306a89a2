"""
Company Routes
==============

Company profile, cybersecurity staff, logo and supporting documents.

Version: 0.1.0
"""

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from fastapi.responses import FileResponse
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from services.portal.dependencies import get_account, get_or_404
from services.portal.models import CompanyModel, CybersecurityStaffModel, StoredFileModel, UserModel
from services.portal.services.storage import (
    FileStorage,
    UploadRejected,
    UploadRule,
    document_rule,
    get_file_storage,
    logo_rule,
)
from shared.auth import User
from shared.config import settings
from shared.database.postgres import get_postgres_session
from shared.logging import get_logger
from shared.models.common import MessageResponse
from shared.models.company import Company, CompanyUpsert, FileType, Staff, StaffUpdate, StoredFile


logger = get_logger(__name__)

router = APIRouter()


async def get_user_company(db: AsyncSession, current_user: User) -> CompanyModel:
    company_id = current_user.company_id or settings.default_company_id
    return await get_or_404(db, CompanyModel, company_id, "Company")


def file_response(stored: StoredFileModel, storage: FileStorage) -> FileResponse:
    path = storage.path_for(stored)
    if not path.exists():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"File not found on disk: {stored.id}",
        )
    return FileResponse(path, media_type=stored.mime_type, filename=stored.original_name)


async def store_upload(
    db: AsyncSession,
    storage: FileStorage,
    upload: UploadFile,
    file_type: FileType,
    rule: UploadRule,
    current_user: User,
) -> StoredFileModel:
    """Validate, write and register an upload; validation failures become HTTP errors."""
    try:
        stored = await storage.save_upload(upload, file_type, rule, uploaded_by=current_user.user_id)
    except UploadRejected as e:
        logger.warning("upload_rejected", file_type=file_type.value, detail=e.detail, user_id=current_user.id)
        raise HTTPException(status_code=e.status_code, detail=e.detail) from e
    db.add(stored)
    await db.flush()
    return stored


# =============================================================================
# Profile
# =============================================================================


@router.get("/company", response_model=Company)
async def get_company(
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> Company:
    company = await get_user_company(db, current_user)
    return Company.model_validate(company)


@router.post("/company", response_model=Company)
async def upsert_company(
    data: CompanyUpsert,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> Company:
    """
    Create or update the caller's company.

    A caller without a company gets a new one and is linked to it.
    """
    company = await db.get(CompanyModel, current_user.company_id) if current_user.company_id else None

    if company is None:
        company = CompanyModel(**data.model_dump())
        db.add(company)
        await db.flush()
        user = await db.get(UserModel, current_user.user_id)
        if user is not None:
            user.company_id = company.id
        logger.info("company_created", company_id=company.id, user_id=current_user.id)
    else:
        for key, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(company, key, value)
        await db.flush()
        logger.info("company_updated", company_id=company.id, user_id=current_user.id)

    return Company.model_validate(company)


@router.get("/company/staff", response_model=list[Staff])
async def list_staff(
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> list[Staff]:
    company_id = current_user.company_id or settings.default_company_id
    result = await db.execute(
        select(CybersecurityStaffModel)
        .where(CybersecurityStaffModel.company_id == company_id)
        .order_by(CybersecurityStaffModel.id)
    )
    return [Staff.model_validate(s) for s in result.scalars().all()]


@router.put("/company/staff", response_model=list[Staff])
async def replace_staff(
    data: StaffUpdate,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> list[Staff]:
    """Replace the whole staff list; blank names are dropped."""
    company = await get_user_company(db, current_user)

    await db.execute(delete(CybersecurityStaffModel).where(CybersecurityStaffModel.company_id == company.id))
    staff = [
        CybersecurityStaffModel(company_id=company.id, staff_name=name.strip())
        for name in data.staff_names
        if name.strip()
    ]
    db.add_all(staff)
    await db.flush()

    logger.info("company_staff_replaced", company_id=company.id, count=len(staff), user_id=current_user.id)
    return [Staff.model_validate(s) for s in staff]


# =============================================================================
# Files
# =============================================================================


@router.post("/company/logo", response_model=StoredFile, status_code=status.HTTP_201_CREATED)
async def upload_logo(
    file: UploadFile = File(...),
    db: AsyncSession = Depends(get_postgres_session),
    storage: FileStorage = Depends(get_file_storage),
    current_user: User = Depends(get_account),
) -> StoredFile:
    """Upload an image logo; the previous logo is removed."""
    company = await get_user_company(db, current_user)
    stored = await store_upload(db, storage, file, FileType.LOGO, logo_rule(), current_user)

    previous = await db.get(StoredFileModel, company.logo_file_id) if company.logo_file_id else None
    company.logo_file_id = stored.id
    if previous is not None:
        storage.delete(previous)
        await db.delete(previous)
    await db.flush()

    logger.info("company_logo_uploaded", company_id=company.id, file_id=stored.id, user_id=current_user.id)
    return StoredFile.model_validate(stored)


@router.post("/company/documents", response_model=StoredFile, status_code=status.HTTP_201_CREATED)
async def upload_document(
    file: UploadFile = File(...),
    db: AsyncSession = Depends(get_postgres_session),
    storage: FileStorage = Depends(get_file_storage),
    current_user: User = Depends(get_account),
) -> StoredFile:
    company = await get_user_company(db, current_user)
    stored = await store_upload(db, storage, file, FileType.DOCUMENT, document_rule(), current_user)

    company.document_file_ids = [*(company.document_file_ids or []), stored.id]
    await db.flush()

    logger.info("company_document_uploaded", company_id=company.id, file_id=stored.id, user_id=current_user.id)
    return StoredFile.model_validate(stored)


@router.get("/company/documents", response_model=list[StoredFile])
async def list_documents(
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> list[StoredFile]:
    company = await get_user_company(db, current_user)
    ids = company.document_file_ids or []
    if not ids:
        return []
    result = await db.execute(select(StoredFileModel).where(StoredFileModel.id.in_(ids)).order_by(StoredFileModel.id))
    return [StoredFile.model_validate(f) for f in result.scalars().all()]


async def get_company_document(db: AsyncSession, current_user: User, file_id: int) -> tuple[CompanyModel, StoredFileModel]:
    company = await get_user_company(db, current_user)
    if file_id not in (company.document_file_ids or []):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Document not found: {file_id}",
        )
    stored = await get_or_404(db, StoredFileModel, file_id, "Document")
    return company, stored


@router.get("/company/documents/{file_id}/download")
async def download_document(
    file_id: int,
    db: AsyncSession = Depends(get_postgres_session),
    storage: FileStorage = Depends(get_file_storage),
    current_user: User = Depends(get_account),
) -> FileResponse:
    _, stored = await get_company_document(db, current_user, file_id)
    return file_response(stored, storage)


@router.delete("/company/documents/{file_id}", response_model=MessageResponse)
async def delete_document(
    file_id: int,
    db: AsyncSession = Depends(get_postgres_session),
    storage: FileStorage = Depends(get_file_storage),
    current_user: User = Depends(get_account),
) -> MessageResponse:
    company, stored = await get_company_document(db, current_user, file_id)

    company.document_file_ids = [i for i in company.document_file_ids if i != file_id]
    storage.delete(stored)
    await db.delete(stored)
    await db.flush()

    logger.info("company_document_deleted", company_id=company.id, file_id=file_id, user_id=current_user.id)
    return MessageResponse(message="Document deleted")


@router.get("/files/{file_id}")
async def get_file(
    file_id: int,
    db: AsyncSession = Depends(get_postgres_session),
    storage: FileStorage = Depends(get_file_storage),
    current_user: User = Depends(get_account),
) -> FileResponse:
    stored = await get_or_404(db, StoredFileModel, file_id, "File")
    return file_response(stored, storage)
