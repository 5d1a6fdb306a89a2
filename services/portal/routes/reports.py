"""
Reports Routes
==============

Compliance reports generated from assessments, their export formats and
public share links.

Version: 0.1.0
"""

import re
from datetime import UTC, datetime

from fastapi import APIRouter, Depends, Query, Response, status
from fastapi.responses import HTMLResponse, JSONResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from services.portal.dependencies import ensure_company_access, get_account, get_or_404, resolve_company_id
from services.portal.models import (
    ComplianceReportModel,
    FrameworkModel,
    ReportShareLinkModel,
)
from services.portal.routes.assessments import load_assessment, load_results
from services.portal.services.catalog import load_framework_controls
from services.portal.services.reports import build_report_data, render_html, render_pdf
from services.portal.services.share_links import (
    ShareAccessDenied,
    check_share_access,
    generate_share_token,
    hash_share_password,
    record_view,
)
from shared.auth import User
from shared.database.postgres import get_postgres_session
from shared.logging import get_logger
from shared.models.assessment import AssessmentStatus
from shared.models.report import Report, ReportCreate, ReportFormat, ReportStatus, ShareLink, ShareLinkCreate


logger = get_logger(__name__)

router = APIRouter()


async def load_report(
    db: AsyncSession,
    current_user: User,
    report_id: int,
    allow_public: bool = True,
) -> ComplianceReportModel:
    report = await get_or_404(db, ComplianceReportModel, report_id, "Report")
    if not (allow_public and report.is_public):
        ensure_company_access(current_user, report.company_id)
    return report


def _filename(title: str, extension: str) -> str:
    slug = re.sub(r"[^A-Za-z0-9]+", "-", title).strip("-").lower() or "report"
    return f"{slug}.{extension}"


@router.post("", response_model=Report, status_code=status.HTTP_201_CREATED)
async def create_report(
    data: ReportCreate,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> Report:
    """
    Snapshot an assessment into a report.

    An assessment that is still in progress is completed with the report's
    compliance score.
    """
    assessment = await load_assessment(db, current_user, data.assessment_id)
    framework = await db.get(FrameworkModel, assessment.framework_id)
    tree = await load_framework_controls(db, assessment.framework_id)
    results = await load_results(db, assessment.id)

    report_data = build_report_data(framework, tree, results)
    summary = report_data["summary"]

    if assessment.status != AssessmentStatus.COMPLETED:
        assessment.status = AssessmentStatus.COMPLETED
        assessment.score = summary["compliance_score"]
        assessment.completion_date = datetime.now(UTC)

    report = ComplianceReportModel(
        assessment_id=assessment.id,
        company_id=assessment.company_id,
        created_by=current_user.user_id,
        title=data.title or f"{assessment.name} Compliance Report",
        summary=(
            f"Overall compliance score is {summary['compliance_score']}% "
            f"with {summary['risk_level'].lower()} risk across {summary['total_controls']} controls."
        ),
        report_data=report_data,
        format=data.format,
        status=ReportStatus.COMPLETED,
        is_public=data.is_public,
    )
    db.add(report)
    await db.flush()

    logger.info(
        "report_created",
        report_id=report.id,
        assessment_id=assessment.id,
        compliance_score=summary["compliance_score"],
        user_id=current_user.id,
    )
    return Report.model_validate(report)


@router.get("/company/{company_id}", response_model=list[Report])
async def list_company_reports(
    company_id: int,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> list[Report]:
    resolve_company_id(current_user, company_id)
    result = await db.execute(
        select(ComplianceReportModel)
        .where(ComplianceReportModel.company_id == company_id)
        .order_by(ComplianceReportModel.created_at.desc())
    )
    return [Report.model_validate(r) for r in result.scalars().all()]


@router.get("/assessment/{assessment_id}", response_model=list[Report])
async def list_assessment_reports(
    assessment_id: int,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> list[Report]:
    await load_assessment(db, current_user, assessment_id)
    result = await db.execute(
        select(ComplianceReportModel)
        .where(ComplianceReportModel.assessment_id == assessment_id)
        .order_by(ComplianceReportModel.created_at.desc())
    )
    return [Report.model_validate(r) for r in result.scalars().all()]


@router.get("/{report_id}", response_model=Report)
async def get_report(
    report_id: int,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> Report:
    report = await load_report(db, current_user, report_id)
    return Report.model_validate(report)


@router.get("/{report_id}/export")
async def export_report(
    report_id: int,
    export_format: ReportFormat | None = Query(default=None, alias="format"),
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> Response:
    """Download a report as JSON, HTML or PDF; defaults to the report's format."""
    report = await load_report(db, current_user, report_id)
    export_format = export_format or report.format

    logger.info("report_exported", report_id=report_id, format=export_format.value, user_id=current_user.id)

    if export_format == ReportFormat.JSON:
        return JSONResponse(
            content=Report.model_validate(report).model_dump(mode="json"),
            headers={"Content-Disposition": f'attachment; filename="{_filename(report.title, "json")}"'},
        )
    if export_format == ReportFormat.HTML:
        return HTMLResponse(content=render_html(report.title, report.report_data, report.summary))
    return Response(
        content=render_pdf(report.title, report.report_data, report.summary),
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{_filename(report.title, "pdf")}"'},
    )


# =============================================================================
# Share links
# =============================================================================


@router.post("/{report_id}/share", response_model=ShareLink, status_code=status.HTTP_201_CREATED)
async def create_share_link(
    report_id: int,
    data: ShareLinkCreate,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> ShareLink:
    await load_report(db, current_user, report_id, allow_public=False)

    link = ReportShareLinkModel(
        report_id=report_id,
        share_token=generate_share_token(),
        created_by=current_user.user_id,
        expires_at=data.expires_at,
        password=hash_share_password(data.password),
        view_count=0,
        max_views=data.max_views,
        is_active=True,
    )
    db.add(link)
    await db.flush()

    logger.info(
        "report_share_link_created",
        report_id=report_id,
        link_id=link.id,
        password_protected=link.has_password,
        user_id=current_user.id,
    )
    return ShareLink.model_validate(link)


@router.get("/{report_id}/share", response_model=list[ShareLink])
async def list_share_links(
    report_id: int,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> list[ShareLink]:
    await load_report(db, current_user, report_id, allow_public=False)
    result = await db.execute(
        select(ReportShareLinkModel)
        .where(ReportShareLinkModel.report_id == report_id)
        .order_by(ReportShareLinkModel.created_at.desc())
    )
    return [ShareLink.model_validate(link) for link in result.scalars().all()]


@router.get("/share/{token}", response_model=Report)
async def view_shared_report(
    token: str,
    password: str | None = Query(default=None),
    db: AsyncSession = Depends(get_postgres_session),
) -> Report:
    """Public view of a shared report; each successful view is counted."""
    result = await db.execute(select(ReportShareLinkModel).where(ReportShareLinkModel.share_token == token))
    try:
        link = check_share_access(result.scalar_one_or_none(), password)
    except ShareAccessDenied as e:
        raise e.to_http() from e

    report = await get_or_404(db, ComplianceReportModel, link.report_id, "Report")
    record_view(link)
    await db.flush()

    logger.info("shared_report_viewed", link_id=link.id, report_id=report.id, view_count=link.view_count)
    return Report.model_validate(report)


@router.post("/share/{link_id}/deactivate", response_model=ShareLink)
async def deactivate_share_link(
    link_id: int,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> ShareLink:
    link = await get_or_404(db, ReportShareLinkModel, link_id, "Share link")
    await load_report(db, current_user, link.report_id, allow_public=False)

    link.is_active = False
    await db.flush()

    logger.info("report_share_link_deactivated", link_id=link_id, user_id=current_user.id)
    return ShareLink.model_validate(link)
