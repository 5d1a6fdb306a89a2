"""
Risk Register Routes
====================

Company risk register, bulk import and risk reviews within assessments.

Version: 0.1.0
"""

from datetime import UTC, datetime

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from services.portal.dependencies import ensure_company_access, get_account, get_or_404, resolve_company_id
from services.portal.models import AssessmentModel, AssessmentRiskModel, RiskModel
from services.portal.routes.assessments import load_assessment
from services.portal.services.risk_matrix import plan_import, resolve_levels
from shared.auth import User
from shared.database.postgres import get_postgres_session
from shared.logging import get_logger
from shared.models.common import MessageResponse
from shared.models.risk import (
    AssessmentRisk,
    AssessmentRiskAssign,
    AssessmentRiskCreate,
    AssessmentRiskStatus,
    AssessmentRiskStatusUpdate,
    AssignmentResult,
    Risk,
    RiskCreate,
    RiskImportRequest,
    RiskImportResult,
    RiskImportSummary,
)


logger = get_logger(__name__)

router = APIRouter()

ALREADY_ASSIGNED = "Risk already assigned to this assessment"


def build_risk(data: RiskCreate, company_id: int) -> RiskModel:
    inherent, residual = resolve_levels(data)
    fields = data.model_dump(exclude={"inherent_risk_level", "residual_risk_level"})
    return RiskModel(
        **fields,
        inherent_risk_level=inherent,
        residual_risk_level=residual,
        company_id=company_id,
    )


async def load_risk(db: AsyncSession, current_user: User, risk_id: int) -> RiskModel:
    risk = await get_or_404(db, RiskModel, risk_id, "Risk")
    if risk.company_id is not None:
        ensure_company_access(current_user, risk.company_id)
    return risk


async def load_assignable_risk(
    db: AsyncSession, current_user: User, assessment: AssessmentModel, risk_id: int
) -> RiskModel:
    """Fetch a risk that may be attached to the given assessment."""
    risk = await load_risk(db, current_user, risk_id)
    if risk.company_id is not None and risk.company_id != assessment.company_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Risk belongs to another company",
        )
    return risk


async def find_assignment(db: AsyncSession, assessment_id: int, risk_id: int) -> AssessmentRiskModel | None:
    result = await db.execute(
        select(AssessmentRiskModel).where(
            AssessmentRiskModel.assessment_id == assessment_id,
            AssessmentRiskModel.risk_id == risk_id,
        )
    )
    return result.scalar_one_or_none()


# =============================================================================
# Register
# =============================================================================


@router.get("/risks", response_model=list[Risk])
async def list_risks(
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> list[Risk]:
    """The company's risks together with the shared catalogue risks."""
    company_id = resolve_company_id(current_user)
    result = await db.execute(
        select(RiskModel)
        .where(or_(RiskModel.company_id == company_id, RiskModel.company_id.is_(None)))
        .order_by(RiskModel.created_at.desc())
    )
    return [Risk.model_validate(r) for r in result.scalars().all()]


@router.post("/risks", response_model=Risk, status_code=status.HTTP_201_CREATED)
async def create_risk(
    data: RiskCreate,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> Risk:
    """Create a risk; missing inherent and residual levels are derived from the matrix."""
    risk = build_risk(data, resolve_company_id(current_user))
    db.add(risk)
    await db.flush()

    logger.info(
        "risk_created",
        risk_id=risk.id,
        inherent_risk_level=risk.inherent_risk_level.value,
        user_id=current_user.id,
    )
    return Risk.model_validate(risk)


@router.post("/risks/import", response_model=RiskImportSummary)
async def import_risks(
    data: RiskImportRequest,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> RiskImportSummary:
    """Import risks in bulk; each entry succeeds or fails on its own."""
    company_id = resolve_company_id(current_user)
    plan = plan_import(data.risks)

    created = [(index, build_risk(entry, company_id)) for index, entry in plan.valid]
    db.add_all([risk for _, risk in created])
    await db.flush()

    plan.results.extend(
        RiskImportResult(index=index, success=True, risk_id=risk.id, title=risk.title)
        for index, risk in created
    )
    summary = plan.summary()

    logger.info(
        "risks_imported",
        total=summary.total_processed,
        success_count=summary.success_count,
        failure_count=summary.failure_count,
        user_id=current_user.id,
    )
    return summary


@router.get("/risks/{risk_id}", response_model=Risk)
async def get_risk(
    risk_id: int,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> Risk:
    return Risk.model_validate(await load_risk(db, current_user, risk_id))


@router.delete("/risks/{risk_id}", response_model=MessageResponse)
async def delete_risk(
    risk_id: int,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> MessageResponse:
    risk = await load_risk(db, current_user, risk_id)
    if risk.company_id is None and not current_user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")

    await db.delete(risk)
    await db.flush()

    logger.info("risk_deleted", risk_id=risk_id, user_id=current_user.id)
    return MessageResponse(message="Risk deleted")


# =============================================================================
# Assessment risks
# =============================================================================


@router.get("/assessment-risks/assessment/{assessment_id}", response_model=list[AssessmentRisk])
async def list_assessment_risks(
    assessment_id: int,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> list[AssessmentRisk]:
    await load_assessment(db, current_user, assessment_id)
    result = await db.execute(
        select(AssessmentRiskModel)
        .where(AssessmentRiskModel.assessment_id == assessment_id)
        .order_by(AssessmentRiskModel.id)
    )
    return [AssessmentRisk.model_validate(r) for r in result.scalars().all()]


@router.post("/assessment-risks/assign", response_model=list[AssignmentResult])
async def assign_risks(
    data: AssessmentRiskAssign,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> list[AssignmentResult]:
    """Assign register risks to an assessment, skipping ones already assigned."""
    assessment = await load_assessment(db, current_user, data.assessment_id)

    outcomes = []
    for risk_id in data.risk_ids:
        try:
            await load_assignable_risk(db, current_user, assessment, risk_id)
        except HTTPException as exc:
            outcomes.append(AssignmentResult(risk_id=risk_id, success=False, error=str(exc.detail)))
            continue
        if await find_assignment(db, data.assessment_id, risk_id) is not None:
            outcomes.append(AssignmentResult(risk_id=risk_id, success=False, error=ALREADY_ASSIGNED))
            continue

        assignment = AssessmentRiskModel(
            assessment_id=data.assessment_id,
            risk_id=risk_id,
            status=AssessmentRiskStatus.TO_ASSESS,
        )
        db.add(assignment)
        await db.flush()
        outcomes.append(AssignmentResult(risk_id=risk_id, success=True, assessment_risk_id=assignment.id))

    logger.info(
        "assessment_risks_assigned",
        assessment_id=data.assessment_id,
        assigned=sum(1 for o in outcomes if o.success),
        skipped=sum(1 for o in outcomes if not o.success),
        user_id=current_user.id,
    )
    return outcomes


@router.post("/assessment-risks", response_model=AssessmentRisk, status_code=status.HTTP_201_CREATED)
async def create_assessment_risk(
    data: AssessmentRiskCreate,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> AssessmentRisk:
    assessment = await load_assessment(db, current_user, data.assessment_id)
    await load_assignable_risk(db, current_user, assessment, data.risk_id)
    if await find_assignment(db, data.assessment_id, data.risk_id) is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=ALREADY_ASSIGNED)

    assignment = AssessmentRiskModel(**data.model_dump())
    db.add(assignment)
    await db.flush()

    logger.info("assessment_risk_created", assessment_risk_id=assignment.id, user_id=current_user.id)
    return AssessmentRisk.model_validate(assignment)


@router.get("/assessment-risks/{assessment_risk_id}", response_model=AssessmentRisk)
async def get_assessment_risk(
    assessment_risk_id: int,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> AssessmentRisk:
    assignment = await get_or_404(db, AssessmentRiskModel, assessment_risk_id, "Assessment risk")
    await load_assessment(db, current_user, assignment.assessment_id)
    return AssessmentRisk.model_validate(assignment)


@router.patch("/assessment-risks/{assessment_risk_id}/status", response_model=AssessmentRisk)
async def update_assessment_risk_status(
    assessment_risk_id: int,
    data: AssessmentRiskStatusUpdate,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> AssessmentRisk:
    """Update a review; completing it records the reviewer and time."""
    assignment = await get_or_404(db, AssessmentRiskModel, assessment_risk_id, "Assessment risk")
    await load_assessment(db, current_user, assignment.assessment_id)

    assignment.status = data.status
    if data.notes is not None:
        assignment.notes = data.notes
    if data.evidence is not None:
        assignment.evidence = data.evidence
    if data.status == AssessmentRiskStatus.COMPLETED:
        assignment.reviewed_by = current_user.user_id
        assignment.reviewed_at = datetime.now(UTC)
    await db.flush()

    logger.info(
        "assessment_risk_status_updated",
        assessment_risk_id=assessment_risk_id,
        status=data.status.value,
        user_id=current_user.id,
    )
    return AssessmentRisk.model_validate(assignment)


@router.delete("/assessment-risks/{assessment_risk_id}", response_model=MessageResponse)
async def delete_assessment_risk(
    assessment_risk_id: int,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> MessageResponse:
    assignment = await get_or_404(db, AssessmentRiskModel, assessment_risk_id, "Assessment risk")
    await load_assessment(db, current_user, assignment.assessment_id)

    await db.delete(assignment)
    await db.flush()

    logger.info("assessment_risk_deleted", assessment_risk_id=assessment_risk_id, user_id=current_user.id)
    return MessageResponse(message="Risk removed from assessment")
