"""
Policy Routes
=============

Company security policies and their attached documents.

Version: 0.1.0
"""

from fastapi import APIRouter, Depends, File, UploadFile, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from services.portal.dependencies import get_account, get_or_404
from services.portal.models import PolicyModel, StoredFileModel
from services.portal.routes.company import store_upload
from services.portal.services.storage import FileStorage, document_rule, get_file_storage
from shared.auth import User
from shared.database.postgres import get_postgres_session
from shared.logging import get_logger
from shared.models.common import MessageResponse
from shared.models.company import FileType
from shared.models.policy import Policy, PolicyCreate, PolicyUpdate


logger = get_logger(__name__)

router = APIRouter()


async def _remove_file(db: AsyncSession, storage: FileStorage, file_id: int | None) -> None:
    stored = await db.get(StoredFileModel, file_id) if file_id else None
    if stored is not None:
        storage.delete(stored)
        await db.delete(stored)


@router.get("", response_model=list[Policy])
async def list_policies(
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> list[Policy]:
    result = await db.execute(select(PolicyModel).order_by(PolicyModel.title))
    return [Policy.model_validate(p) for p in result.scalars().all()]


@router.post("", response_model=Policy, status_code=status.HTTP_201_CREATED)
async def create_policy(
    data: PolicyCreate,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> Policy:
    policy = PolicyModel(**data.model_dump())
    db.add(policy)
    await db.flush()

    logger.info("policy_created", policy_id=policy.id, user_id=current_user.id)
    return Policy.model_validate(policy)


@router.put("/{policy_id}", response_model=Policy)
async def update_policy(
    policy_id: int,
    data: PolicyUpdate,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> Policy:
    policy = await get_or_404(db, PolicyModel, policy_id, "Policy")
    for key, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(policy, key, value)
    await db.flush()

    logger.info("policy_updated", policy_id=policy_id, user_id=current_user.id)
    return Policy.model_validate(policy)


@router.delete("/{policy_id}", response_model=MessageResponse)
async def delete_policy(
    policy_id: int,
    db: AsyncSession = Depends(get_postgres_session),
    storage: FileStorage = Depends(get_file_storage),
    current_user: User = Depends(get_account),
) -> MessageResponse:
    """Delete a policy together with its attached document."""
    policy = await get_or_404(db, PolicyModel, policy_id, "Policy")
    file_id = policy.file_id
    await db.delete(policy)
    await db.flush()
    await _remove_file(db, storage, file_id)

    logger.info("policy_deleted", policy_id=policy_id, user_id=current_user.id)
    return MessageResponse(message="Policy deleted")


@router.post("/{policy_id}/attach-document", response_model=Policy)
async def attach_document(
    policy_id: int,
    file: UploadFile = File(...),
    db: AsyncSession = Depends(get_postgres_session),
    storage: FileStorage = Depends(get_file_storage),
    current_user: User = Depends(get_account),
) -> Policy:
    """Attach a document to a policy, replacing any previous one."""
    policy = await get_or_404(db, PolicyModel, policy_id, "Policy")
    stored = await store_upload(db, storage, file, FileType.POLICY, document_rule(), current_user)

    previous_id = policy.file_id
    policy.file_id = stored.id
    await db.flush()
    await _remove_file(db, storage, previous_id)

    logger.info("policy_document_attached", policy_id=policy_id, file_id=stored.id, user_id=current_user.id)
    return Policy.model_validate(policy)
