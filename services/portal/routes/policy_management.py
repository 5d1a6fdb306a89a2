"""
Policy Management Routes
========================

Policy categories, uploadable templates and policies generated from them.

Generation fills the template's placeholders with the company profile and
stores the result as a new file awaiting approval.

Version: 0.1.0
"""

from datetime import UTC, datetime
from pathlib import Path

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from fastapi.responses import FileResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from services.portal.dependencies import get_account, get_or_404, resolve_company_id
from services.portal.models import (
    CompanyModel,
    GeneratedPolicyModel,
    PolicyCategoryModel,
    PolicyTemplateModel,
    StoredFileModel,
)
from services.portal.routes.company import file_response, store_upload
from services.portal.services.policy_generator import (
    DOCX_MIME,
    fill_docx,
    is_docx,
    replacement_values,
)
from services.portal.services.storage import FileStorage, get_file_storage, template_rule
from shared.auth import User
from shared.database.postgres import get_postgres_session
from shared.logging import get_logger
from shared.models.company import FileType, StoredFile
from shared.models.policy import (
    DEFAULT_PLACEHOLDERS,
    ApprovalStatus,
    ApprovalUpdate,
    GeneratedPolicy,
    GeneratedPolicyDetail,
    GeneratePolicyRequest,
    PolicyCategory,
    PolicyCategoryCreate,
    PolicyTemplate,
    TemplateDetail,
    TemplateStatusUpdate,
    TemplateType,
)


logger = get_logger(__name__)

router = APIRouter()


# =============================================================================
# Categories
# =============================================================================


@router.get("/categories", response_model=list[PolicyCategory])
async def list_categories(
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> list[PolicyCategory]:
    result = await db.execute(select(PolicyCategoryModel).order_by(PolicyCategoryModel.name))
    return [PolicyCategory.model_validate(c) for c in result.scalars().all()]


@router.post("/categories", response_model=PolicyCategory, status_code=status.HTTP_201_CREATED)
async def create_category(
    data: PolicyCategoryCreate,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> PolicyCategory:
    existing = await db.execute(select(PolicyCategoryModel).where(PolicyCategoryModel.name == data.name))
    if existing.scalar_one_or_none() is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Policy category already exists: {data.name}",
        )

    category = PolicyCategoryModel(**data.model_dump())
    db.add(category)
    await db.flush()

    logger.info("policy_category_created", category_id=category.id, user_id=current_user.id)
    return PolicyCategory.model_validate(category)


@router.get("/categories/{category_id}", response_model=PolicyCategory)
async def get_category(
    category_id: int,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> PolicyCategory:
    category = await get_or_404(db, PolicyCategoryModel, category_id, "Policy category")
    return PolicyCategory.model_validate(category)


# =============================================================================
# Templates
# =============================================================================


@router.get("/templates", response_model=list[PolicyTemplate])
async def list_templates(
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> list[PolicyTemplate]:
    result = await db.execute(select(PolicyTemplateModel).order_by(PolicyTemplateModel.name))
    return [PolicyTemplate.model_validate(t) for t in result.scalars().all()]


@router.get("/templates/by-category/{category_id}", response_model=list[PolicyTemplate])
async def list_templates_by_category(
    category_id: int,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> list[PolicyTemplate]:
    result = await db.execute(
        select(PolicyTemplateModel)
        .where(PolicyTemplateModel.category_id == category_id)
        .order_by(PolicyTemplateModel.name)
    )
    return [PolicyTemplate.model_validate(t) for t in result.scalars().all()]


@router.post("/templates/upload", response_model=PolicyTemplate, status_code=status.HTTP_201_CREATED)
async def upload_template(
    file: UploadFile = File(...),
    name: str | None = Form(default=None),
    description: str | None = Form(default=None),
    category_id: int | None = Form(default=None),
    version: str = Form(default="1.0"),
    db: AsyncSession = Depends(get_postgres_session),
    storage: FileStorage = Depends(get_file_storage),
    current_user: User = Depends(get_account),
) -> PolicyTemplate:
    """
    Upload a Word or PDF policy template.

    Templates are registered with the standard placeholder set.
    """
    if category_id is not None:
        await get_or_404(db, PolicyCategoryModel, category_id, "Policy category")

    stored = await store_upload(db, storage, file, FileType.TEMPLATE, template_rule(), current_user)
    template_type = TemplateType.PDF if Path(stored.original_name).suffix.lower() == ".pdf" else TemplateType.WORD

    template = PolicyTemplateModel(
        name=name or stored.original_name,
        description=description,
        template_type=template_type,
        file_id=stored.id,
        category_id=category_id,
        uploaded_by=current_user.user_id,
        version=version,
        placeholders=list(DEFAULT_PLACEHOLDERS),
        is_active=True,
    )
    db.add(template)
    await db.flush()

    logger.info(
        "policy_template_uploaded",
        template_id=template.id,
        template_type=template_type.value,
        user_id=current_user.id,
    )
    return PolicyTemplate.model_validate(template)


@router.get("/templates/{template_id}", response_model=TemplateDetail)
async def get_template(
    template_id: int,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> TemplateDetail:
    template = await get_or_404(db, PolicyTemplateModel, template_id, "Template")
    stored = await get_or_404(db, StoredFileModel, template.file_id, "Template file")
    return TemplateDetail(
        template=PolicyTemplate.model_validate(template),
        file=StoredFile.model_validate(stored),
    )


@router.patch("/templates/{template_id}/status", response_model=PolicyTemplate)
async def update_template_status(
    template_id: int,
    data: TemplateStatusUpdate,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> PolicyTemplate:
    template = await get_or_404(db, PolicyTemplateModel, template_id, "Template")
    template.is_active = data.is_active
    await db.flush()

    logger.info("policy_template_status_updated", template_id=template_id, is_active=data.is_active)
    return PolicyTemplate.model_validate(template)


# =============================================================================
# Generated policies
# =============================================================================


@router.get("/generated/{company_id}", response_model=list[GeneratedPolicy])
async def list_generated_policies(
    company_id: int,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> list[GeneratedPolicy]:
    resolve_company_id(current_user, company_id)
    result = await db.execute(
        select(GeneratedPolicyModel)
        .where(GeneratedPolicyModel.company_id == company_id)
        .order_by(GeneratedPolicyModel.created_at.desc())
    )
    return [GeneratedPolicy.model_validate(p) for p in result.scalars().all()]


@router.post("/generated", response_model=GeneratedPolicy, status_code=status.HTTP_201_CREATED)
async def generate_policy(
    data: GeneratePolicyRequest,
    db: AsyncSession = Depends(get_postgres_session),
    storage: FileStorage = Depends(get_file_storage),
    current_user: User = Depends(get_account),
) -> GeneratedPolicy:
    """
    Generate a company policy from a template.

    Word templates get their placeholders replaced; other templates are
    copied as they are.
    """
    company_id = resolve_company_id(current_user, data.company_id)
    template = await get_or_404(db, PolicyTemplateModel, data.template_id, "Template")
    if not template.is_active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Template is not active: {template.id}",
        )

    template_file = await get_or_404(db, StoredFileModel, template.file_id, "Template file")
    company = await db.get(CompanyModel, company_id)
    logo = await db.get(StoredFileModel, company.logo_file_id) if company and company.logo_file_id else None

    source = await storage.read_bytes(template_file)
    values = replacement_values(company, data.replacement_data)

    if is_docx(template_file.original_name):
        content = fill_docx(source, values, logo_path=storage.path_for(logo) if logo else None)
        mime_type = DOCX_MIME
    else:
        content = source
        mime_type = template_file.mime_type

    suffix = Path(template_file.original_name).suffix
    stored = await storage.save_bytes(
        content,
        f"{template.name}{suffix}" if not template.name.endswith(suffix) else template.name,
        mime_type,
        FileType.GENERATED_POLICY,
        uploaded_by=current_user.user_id,
    )
    db.add(stored)
    await db.flush()

    policy = GeneratedPolicyModel(
        template_id=template.id,
        company_id=company_id,
        generated_file_id=stored.id,
        version=template.version,
        approval_status=ApprovalStatus.PENDING,
        replacement_data=values,
        notes=data.notes,
    )
    db.add(policy)
    await db.flush()

    logger.info(
        "policy_generated",
        generated_policy_id=policy.id,
        template_id=template.id,
        company_id=company_id,
        user_id=current_user.id,
    )
    return GeneratedPolicy.model_validate(policy)


@router.get("/generated/policy/{policy_id}", response_model=GeneratedPolicyDetail)
async def get_generated_policy(
    policy_id: int,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> GeneratedPolicyDetail:
    policy = await get_or_404(db, GeneratedPolicyModel, policy_id, "Generated policy")
    resolve_company_id(current_user, policy.company_id)
    stored = await get_or_404(db, StoredFileModel, policy.generated_file_id, "Policy file")
    template = await db.get(PolicyTemplateModel, policy.template_id)
    return GeneratedPolicyDetail(
        policy=GeneratedPolicy.model_validate(policy),
        file=StoredFile.model_validate(stored),
        template=PolicyTemplate.model_validate(template) if template else None,
    )


@router.patch("/generated/{policy_id}/approval", response_model=GeneratedPolicy)
async def update_approval(
    policy_id: int,
    data: ApprovalUpdate,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> GeneratedPolicy:
    """Approving or rejecting stamps the reviewer and date; pending clears them."""
    policy = await get_or_404(db, GeneratedPolicyModel, policy_id, "Generated policy")
    resolve_company_id(current_user, policy.company_id)

    policy.approval_status = data.approval_status
    if data.approval_status != ApprovalStatus.PENDING:
        policy.approved_by = current_user.user_id
        policy.approved_date = datetime.now(UTC)
    else:
        policy.approved_by = None
        policy.approved_date = None
    if data.notes is not None:
        policy.notes = data.notes
    await db.flush()

    logger.info(
        "generated_policy_approval_updated",
        generated_policy_id=policy_id,
        approval_status=data.approval_status.value,
        user_id=current_user.id,
    )
    return GeneratedPolicy.model_validate(policy)


@router.get("/download/{file_id}")
async def download_file(
    file_id: int,
    db: AsyncSession = Depends(get_postgres_session),
    storage: FileStorage = Depends(get_file_storage),
    current_user: User = Depends(get_account),
) -> FileResponse:
    stored = await get_or_404(db, StoredFileModel, file_id, "File")
    return file_response(stored, storage)
