"""
Risk Prediction Routes
======================

AI risk analysis of assessments, remediation plans, control gap analysis and
the risk dashboard.

Version: 0.1.0
"""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from services.portal.dependencies import get_account, get_or_404, resolve_company_id
from services.portal.models import (
    AssessmentModel,
    AssessmentResultModel,
    CompanyModel,
    ControlModel,
    FrameworkModel,
    RemediationTaskModel,
)
from services.portal.routes.assessments import load_assessment, load_results
from services.portal.services.catalog import load_framework_controls
from services.portal.services.reports import build_report_data
from services.portal.services.risk_prediction import (
    RiskPredictionError,
    RiskPredictionService,
    build_dashboard,
    get_risk_prediction_service,
)
from shared.auth import User
from shared.database.postgres import get_postgres_session
from shared.logging import get_logger
from shared.models.assessment import AssessmentStatus
from shared.models.assistant import RiskDashboard


logger = get_logger(__name__)

router = APIRouter()


async def assessment_context(
    db: AsyncSession,
    assessment: AssessmentModel,
) -> tuple[dict[str, Any], dict[str, Any] | None]:
    """Assessment data and company profile sent to the model."""
    framework = await db.get(FrameworkModel, assessment.framework_id)
    tree = await load_framework_controls(db, assessment.framework_id)
    results = await load_results(db, assessment.id)
    report_data = build_report_data(framework, tree, results)

    data = {
        "assessment": assessment.to_dict(),
        "framework": report_data["framework"],
        "summary": report_data["summary"],
        "domains": report_data["domain_risk_levels"],
        "results": report_data["detailed_results"],
    }
    company = await db.get(CompanyModel, assessment.company_id)
    return data, company.to_dict() if company else None


async def analyze(
    db: AsyncSession,
    service: RiskPredictionService,
    assessment: AssessmentModel,
) -> tuple[dict[str, Any], dict[str, Any] | None]:
    data, company = await assessment_context(db, assessment)
    try:
        analysis = await service.analyze_assessment(assessment.id, data, company)
    except RiskPredictionError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message) from e
    return analysis, company


@router.get("/assessment/{assessment_id}")
async def predict_assessment_risks(
    assessment_id: int,
    db: AsyncSession = Depends(get_postgres_session),
    service: RiskPredictionService = Depends(get_risk_prediction_service),
    current_user: User = Depends(get_account),
) -> dict[str, Any]:
    assessment = await load_assessment(db, current_user, assessment_id)
    analysis, _ = await analyze(db, service, assessment)
    return analysis


@router.get("/remediation/{assessment_id}")
async def remediation_plan(
    assessment_id: int,
    db: AsyncSession = Depends(get_postgres_session),
    service: RiskPredictionService = Depends(get_risk_prediction_service),
    current_user: User = Depends(get_account),
) -> dict[str, Any]:
    """Remediation plan for the domain risks found by the assessment's analysis."""
    assessment = await load_assessment(db, current_user, assessment_id)
    analysis, company = await analyze(db, service, assessment)
    try:
        return await service.remediation_plan(analysis.get("domain_risks") or [], company)
    except RiskPredictionError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message) from e


@router.get("/control-gaps/{control_id}")
async def control_gaps(
    control_id: int,
    db: AsyncSession = Depends(get_postgres_session),
    service: RiskPredictionService = Depends(get_risk_prediction_service),
    current_user: User = Depends(get_account),
) -> dict[str, Any]:
    """Gap analysis of one control from the company's results and remediation tasks."""
    control = await get_or_404(db, ControlModel, control_id, "Control")
    company_id = resolve_company_id(current_user)

    results = await db.execute(
        select(AssessmentResultModel)
        .join(AssessmentModel, AssessmentResultModel.assessment_id == AssessmentModel.id)
        .where(AssessmentResultModel.control_id == control_id, AssessmentModel.company_id == company_id)
        .order_by(AssessmentResultModel.updated_at.desc())
    )
    tasks = await db.execute(
        select(RemediationTaskModel)
        .join(AssessmentModel, RemediationTaskModel.assessment_id == AssessmentModel.id)
        .where(RemediationTaskModel.control_id == control_id, AssessmentModel.company_id == company_id)
        .order_by(RemediationTaskModel.created_at.desc())
    )
    implementation = {
        "results": [r.to_dict() for r in results.scalars().all()],
        "remediation_tasks": [t.to_dict() for t in tasks.scalars().all()],
    }

    try:
        return await service.control_gaps(control.to_dict(), implementation)
    except RiskPredictionError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message) from e


@router.get("/dashboard", response_model=RiskDashboard)
async def risk_dashboard(
    company_id: int | None = Query(default=None),
    db: AsyncSession = Depends(get_postgres_session),
    service: RiskPredictionService = Depends(get_risk_prediction_service),
    current_user: User = Depends(get_account),
) -> RiskDashboard:
    """Risk view of the company's latest completed assessment."""
    company_id = resolve_company_id(current_user, company_id)
    result = await db.execute(
        select(AssessmentModel)
        .where(AssessmentModel.company_id == company_id, AssessmentModel.status == AssessmentStatus.COMPLETED)
        .order_by(AssessmentModel.completion_date.desc().nulls_last())
    )
    completed = list(result.scalars().all())

    analysis = None
    if completed:
        analysis, _ = await analyze(db, service, completed[0])
    return build_dashboard(completed, analysis)
