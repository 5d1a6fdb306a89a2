"""
Assessments Routes
==================

API endpoints for compliance assessments, per-control results, the risk
heatmap and remediation tasks.

Version: 0.1.0
"""

from datetime import UTC, datetime

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from services.portal.dependencies import ensure_company_access, get_account, get_or_404, resolve_company_id
from services.portal.models import (
    AssessmentModel,
    AssessmentResultModel,
    ControlModel,
    FrameworkModel,
    RemediationTaskModel,
)
from services.portal.services.catalog import load_framework_controls
from services.portal.services.risk_prediction import RiskPredictionService, get_risk_prediction_service
from services.portal.services.scoring import (
    StatusTally,
    completion_score,
    control_code,
    domain_code,
    heatmap_compliance_percentage,
    heatmap_risk_label,
    heatmap_risk_score,
)
from shared.auth import User
from shared.database.postgres import get_postgres_session
from shared.logging import get_logger
from shared.models.assessment import (
    Assessment,
    AssessmentCreate,
    AssessmentResult,
    AssessmentResultUpdate,
    AssessmentResultUpsert,
    AssessmentStatus,
    AssessmentUpdate,
    HeatmapControl,
    HeatmapDomain,
    RemediationTask,
    RemediationTaskCreate,
    RemediationTaskStatusUpdate,
    ResultStatus,
)


logger = get_logger(__name__)

router = APIRouter()


async def load_assessment(db: AsyncSession, current_user: User, assessment_id: int) -> AssessmentModel:
    """Fetch an assessment the caller's company may see."""
    assessment = await get_or_404(db, AssessmentModel, assessment_id, "Assessment")
    ensure_company_access(current_user, assessment.company_id)
    return assessment


async def load_results(db: AsyncSession, assessment_id: int) -> list[AssessmentResultModel]:
    result = await db.execute(
        select(AssessmentResultModel)
        .where(AssessmentResultModel.assessment_id == assessment_id)
        .order_by(AssessmentResultModel.control_id)
    )
    return list(result.scalars().all())


# =============================================================================
# Assessments
# =============================================================================


@router.get("/assessments", response_model=list[Assessment])
async def list_assessments(
    company_id: int | None = Query(default=None, description="Defaults to the caller's company"),
    assessment_status: AssessmentStatus | None = Query(default=None, alias="status"),
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> list[Assessment]:
    company_id = resolve_company_id(current_user, company_id)
    query = select(AssessmentModel).where(AssessmentModel.company_id == company_id)
    if assessment_status is not None:
        query = query.where(AssessmentModel.status == assessment_status)

    result = await db.execute(query.order_by(AssessmentModel.start_date.desc()))
    return [Assessment.model_validate(a) for a in result.scalars().all()]


@router.post("/assessments", response_model=Assessment, status_code=status.HTTP_201_CREATED)
async def create_assessment(
    data: AssessmentCreate,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> Assessment:
    """
    Start an assessment.

    Every control of the framework gets a not_implemented result.
    """
    company_id = resolve_company_id(current_user, data.company_id)
    await get_or_404(db, FrameworkModel, data.framework_id, "Framework")

    assessment = AssessmentModel(
        company_id=company_id,
        framework_id=data.framework_id,
        name=data.name,
        status=AssessmentStatus.IN_PROGRESS,
        start_date=datetime.now(UTC),
        created_by=current_user.user_id,
    )
    db.add(assessment)
    await db.flush()

    tree = await load_framework_controls(db, data.framework_id)
    results = [
        AssessmentResultModel(
            assessment_id=assessment.id,
            control_id=control.id,
            status=ResultStatus.NOT_IMPLEMENTED,
            updated_by=current_user.user_id,
        )
        for entry in tree
        for control in entry.controls
    ]
    db.add_all(results)
    await db.flush()

    logger.info(
        "assessment_created",
        assessment_id=assessment.id,
        framework_id=data.framework_id,
        seeded_results=len(results),
        user_id=current_user.id,
    )
    return Assessment.model_validate(assessment)


@router.get("/assessments/{assessment_id}", response_model=Assessment)
async def get_assessment(
    assessment_id: int,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> Assessment:
    assessment = await load_assessment(db, current_user, assessment_id)
    return Assessment.model_validate(assessment)


@router.patch("/assessments/{assessment_id}", response_model=Assessment)
async def update_assessment(
    assessment_id: int,
    data: AssessmentUpdate,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> Assessment:
    assessment = await load_assessment(db, current_user, assessment_id)

    for key, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(assessment, key, value)
    if assessment.status == AssessmentStatus.COMPLETED and assessment.completion_date is None:
        assessment.completion_date = datetime.now(UTC)
    await db.flush()

    logger.info("assessment_updated", assessment_id=assessment_id, user_id=current_user.id)
    return Assessment.model_validate(assessment)


@router.post("/assessments/{assessment_id}/complete", response_model=Assessment)
async def complete_assessment(
    assessment_id: int,
    db: AsyncSession = Depends(get_postgres_session),
    risk_service: RiskPredictionService = Depends(get_risk_prediction_service),
    current_user: User = Depends(get_account),
) -> Assessment:
    """Mark an assessment completed and store its completion score."""
    assessment = await load_assessment(db, current_user, assessment_id)
    results = await load_results(db, assessment_id)
    tally = StatusTally.from_statuses(r.status for r in results)

    assessment.status = AssessmentStatus.COMPLETED
    assessment.score = completion_score(tally)
    assessment.completion_date = datetime.now(UTC)
    await db.flush()
    await risk_service.invalidate(assessment_id)

    logger.info(
        "assessment_completed",
        assessment_id=assessment_id,
        score=assessment.score,
        user_id=current_user.id,
    )
    return Assessment.model_validate(assessment)


@router.get("/assessments/{assessment_id}/heatmap", response_model=list[HeatmapDomain])
async def get_heatmap(
    assessment_id: int,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> list[HeatmapDomain]:
    """
    Risk heatmap with one cell per framework domain.

    Controls without a result are left out of the cell.
    """
    assessment = await load_assessment(db, current_user, assessment_id)
    tree = await load_framework_controls(db, assessment.framework_id)
    results = {r.control_id: r for r in await load_results(db, assessment_id)}

    cells = []
    for i, entry in enumerate(tree):
        assessed = [(c, results[c.id]) for c in entry.controls if c.id in results]
        tally = StatusTally.from_statuses(r.status for _, r in assessed)
        risk = heatmap_risk_score(tally)
        cells.append(
            HeatmapDomain(
                code=domain_code(i),
                domain_id=entry.domain.id,
                name=entry.domain.display_name or entry.domain.name,
                risk_score=risk,
                risk_label=heatmap_risk_label(risk),
                compliance_percentage=heatmap_compliance_percentage(tally),
                implemented=tally.implemented,
                partially_implemented=tally.partially_implemented,
                not_implemented=tally.not_implemented,
                controls=[
                    HeatmapControl(
                        code=control_code(j),
                        control_id=control.control_id,
                        name=control.name,
                        status=result.status,
                    )
                    for j, (control, result) in enumerate(assessed)
                ],
            )
        )
    return cells


# =============================================================================
# Results
# =============================================================================


@router.get("/assessment-results/{assessment_id}", response_model=list[AssessmentResult])
async def list_results(
    assessment_id: int,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> list[AssessmentResult]:
    await load_assessment(db, current_user, assessment_id)
    return [AssessmentResult.model_validate(r) for r in await load_results(db, assessment_id)]


@router.get("/assessment-results/detail/{result_id}", response_model=AssessmentResult)
async def get_result(
    result_id: int,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> AssessmentResult:
    result = await get_or_404(db, AssessmentResultModel, result_id, "Assessment result")
    await load_assessment(db, current_user, result.assessment_id)
    return AssessmentResult.model_validate(result)


@router.patch("/assessment-results/{result_id}", response_model=AssessmentResult)
async def update_result(
    result_id: int,
    data: AssessmentResultUpdate,
    db: AsyncSession = Depends(get_postgres_session),
    risk_service: RiskPredictionService = Depends(get_risk_prediction_service),
    current_user: User = Depends(get_account),
) -> AssessmentResult:
    result = await get_or_404(db, AssessmentResultModel, result_id, "Assessment result")
    await load_assessment(db, current_user, result.assessment_id)

    for key, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(result, key, value)
    result.updated_by = current_user.user_id
    await db.flush()
    await risk_service.invalidate(result.assessment_id)

    logger.info("assessment_result_updated", result_id=result_id, status=result.status.value, user_id=current_user.id)
    return AssessmentResult.model_validate(result)


@router.put("/assessment-results", response_model=AssessmentResult)
async def upsert_result(
    data: AssessmentResultUpsert,
    db: AsyncSession = Depends(get_postgres_session),
    risk_service: RiskPredictionService = Depends(get_risk_prediction_service),
    current_user: User = Depends(get_account),
) -> AssessmentResult:
    """Create or replace the result of one control in an assessment."""
    await load_assessment(db, current_user, data.assessment_id)
    await get_or_404(db, ControlModel, data.control_id, "Control")

    existing = await db.execute(
        select(AssessmentResultModel).where(
            AssessmentResultModel.assessment_id == data.assessment_id,
            AssessmentResultModel.control_id == data.control_id,
        )
    )
    result = existing.scalar_one_or_none()

    if result is None:
        result = AssessmentResultModel(**data.model_dump(), updated_by=current_user.user_id)
        db.add(result)
    else:
        for key, value in data.model_dump().items():
            setattr(result, key, value)
        result.updated_by = current_user.user_id
    await db.flush()
    await risk_service.invalidate(data.assessment_id)

    logger.info(
        "assessment_result_saved",
        assessment_id=data.assessment_id,
        control_id=data.control_id,
        status=data.status.value,
        user_id=current_user.id,
    )
    return AssessmentResult.model_validate(result)


# =============================================================================
# Remediation
# =============================================================================


@router.post("/remediation-tasks", response_model=RemediationTask, status_code=status.HTTP_201_CREATED)
async def create_remediation_task(
    data: RemediationTaskCreate,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> RemediationTask:
    await load_assessment(db, current_user, data.assessment_id)
    await get_or_404(db, ControlModel, data.control_id, "Control")

    task = RemediationTaskModel(**data.model_dump())
    db.add(task)
    await db.flush()

    logger.info(
        "remediation_task_created",
        task_id=task.id,
        assessment_id=data.assessment_id,
        priority=data.priority.value,
        user_id=current_user.id,
    )
    return RemediationTask.model_validate(task)


@router.get("/assessments/{assessment_id}/remediation-tasks", response_model=list[RemediationTask])
async def list_remediation_tasks(
    assessment_id: int,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> list[RemediationTask]:
    await load_assessment(db, current_user, assessment_id)
    result = await db.execute(
        select(RemediationTaskModel)
        .where(RemediationTaskModel.assessment_id == assessment_id)
        .order_by(RemediationTaskModel.created_at)
    )
    return [RemediationTask.model_validate(t) for t in result.scalars().all()]


@router.put("/remediation-tasks/{task_id}/status", response_model=RemediationTask)
async def update_remediation_status(
    task_id: int,
    data: RemediationTaskStatusUpdate,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> RemediationTask:
    task = await get_or_404(db, RemediationTaskModel, task_id, "Remediation task")
    await load_assessment(db, current_user, task.assessment_id)

    task.status = data.status
    await db.flush()

    logger.info("remediation_task_status_updated", task_id=task_id, status=data.status.value, user_id=current_user.id)
    return RemediationTask.model_validate(task)
