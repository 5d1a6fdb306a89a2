"""
Report Route Tests
==================

Version: 0.1.0
"""

import pytest
from fastapi import HTTPException

from services.portal.models import (
    AssessmentModel,
    AssessmentResultModel,
    ComplianceReportModel,
    ControlModel,
    DomainModel,
    FrameworkModel,
    ReportShareLinkModel,
)
from services.portal.routes.reports import (
    _filename,
    create_report,
    create_share_link,
    export_report,
    get_report,
    view_shared_report,
)
from services.portal.services.share_links import hash_share_password
from shared.models.assessment import AssessmentStatus, ResultStatus
from shared.models.report import ReportCreate, ReportFormat, ReportStatus, ShareLinkCreate
from tests.helpers import make_user, scalar_result, scalars_result


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def assessment() -> AssessmentModel:
    return AssessmentModel(id=5, company_id=1, framework_id=1, name="Q1 Review", status=AssessmentStatus.IN_PROGRESS)


@pytest.fixture
def report() -> ComplianceReportModel:
    return ComplianceReportModel(
        id=3,
        assessment_id=5,
        company_id=1,
        title="Q1 Review Compliance Report",
        summary="Overall compliance score is 50.0%",
        report_data={"summary": {"compliance_score": 50.0, "risk_level": "Medium"}, "domain_risk_levels": []},
        format=ReportFormat.PDF,
        status=ReportStatus.COMPLETED,
        is_public=False,
    )


class TestCreateReport:
    async def test_completes_assessment(self, mock_db_session, user, assessment) -> None:
        domain = DomainModel(id=10, framework_id=1, name="ECC-1", display_name="Governance", order=1)
        control = ControlModel(id=1, subdomain_id=1, control_id="ECC-1.1.1", name="Policy", description="d", maturity_level=2)
        mock_db_session.get.side_effect = [
            assessment,
            FrameworkModel(id=1, name="NCA ECC", display_name="NCA ECC", version="1.0"),
        ]
        mock_db_session.execute.side_effect = [
            scalars_result([domain]),
            scalars_result([(control, 10)]),
            scalars_result(
                [AssessmentResultModel(id=1, assessment_id=5, control_id=1, status=ResultStatus.PARTIALLY_IMPLEMENTED)]
            ),
        ]

        created = await create_report(ReportCreate(assessment_id=5), db=mock_db_session, current_user=user)

        assert created.title == "Q1 Review Compliance Report"
        assert created.status == ReportStatus.COMPLETED
        assert created.report_data["summary"]["compliance_score"] == 50.0
        assert created.summary == "Overall compliance score is 50.0% with medium risk across 1 controls."
        assert assessment.status == AssessmentStatus.COMPLETED
        assert assessment.score == 50.0


class TestReportAccess:
    async def test_public_report_visible_to_other_company(self, mock_db_session, report) -> None:
        report.is_public = True
        mock_db_session.get.return_value = report

        found = await get_report(3, db=mock_db_session, current_user=make_user(user_id=2, company_id=8))

        assert found.id == 3

    async def test_private_report_hidden(self, mock_db_session, report) -> None:
        mock_db_session.get.return_value = report

        with pytest.raises(HTTPException) as exc_info:
            await get_report(3, db=mock_db_session, current_user=make_user(user_id=2, company_id=8))

        assert exc_info.value.status_code == 403

    async def test_public_report_cannot_be_shared_by_outsider(self, mock_db_session, report) -> None:
        report.is_public = True
        mock_db_session.get.return_value = report

        with pytest.raises(HTTPException):
            await create_share_link(
                3, ShareLinkCreate(), db=mock_db_session, current_user=make_user(user_id=2, company_id=8)
            )


class TestExport:
    async def test_json_attachment(self, mock_db_session, user, report) -> None:
        mock_db_session.get.return_value = report

        response = await export_report(3, export_format=ReportFormat.JSON, db=mock_db_session, current_user=user)

        assert response.media_type == "application/json"
        assert response.headers["content-disposition"] == 'attachment; filename="q1-review-compliance-report.json"'

    async def test_defaults_to_report_format(self, mock_db_session, user, report) -> None:
        mock_db_session.get.return_value = report

        response = await export_report(3, export_format=None, db=mock_db_session, current_user=user)

        assert response.media_type == "application/pdf"
        assert response.body.startswith(b"%PDF")

    async def test_html(self, mock_db_session, user, report) -> None:
        mock_db_session.get.return_value = report

        response = await export_report(3, export_format=ReportFormat.HTML, db=mock_db_session, current_user=user)

        assert b"Q1 Review Compliance Report" in response.body

    def test_filename_slug(self) -> None:
        assert _filename("  ", "pdf") == "report.pdf"
        assert _filename("NCA/ECC Report 2025", "pdf") == "nca-ecc-report-2025.pdf"


class TestShareLinks:
    async def test_create_hashes_password(self, mock_db_session, user, report) -> None:
        mock_db_session.get.return_value = report

        link = await create_share_link(
            3, ShareLinkCreate(password="pw", max_views=5), db=mock_db_session, current_user=user
        )

        stored = mock_db_session.added[0]
        assert stored.password == hash_share_password("pw")
        assert link.has_password is True
        assert link.max_views == 5
        assert len(link.share_token) == 32

    async def test_view_counts(self, mock_db_session, report) -> None:
        link = ReportShareLinkModel(id=1, report_id=3, share_token="t" * 32, is_active=True, view_count=2)
        mock_db_session.execute.return_value = scalar_result(link)
        mock_db_session.get.return_value = report

        shared = await view_shared_report("t" * 32, password=None, db=mock_db_session)

        assert shared.id == 3
        assert link.view_count == 3

    async def test_unknown_token(self, mock_db_session) -> None:
        mock_db_session.execute.return_value = scalar_result(None)

        with pytest.raises(HTTPException) as exc_info:
            await view_shared_report("missing", password=None, db=mock_db_session)

        assert exc_info.value.status_code == 404
