"""
Risk Register Route Tests
=========================

Version: 0.1.0
"""

import pytest
from fastapi import HTTPException

from services.portal.models import AssessmentModel, AssessmentRiskModel, RiskModel
from services.portal.routes.risks import (
    ALREADY_ASSIGNED,
    assign_risks,
    create_assessment_risk,
    create_risk,
    delete_risk,
    import_risks,
    update_assessment_risk_status,
)
from shared.models.assessment import AssessmentStatus
from shared.models.risk import (
    AssessmentRiskAssign,
    AssessmentRiskCreate,
    AssessmentRiskStatus,
    AssessmentRiskStatusUpdate,
    Impact,
    Likelihood,
    RiskCategory,
    RiskCreate,
    RiskImportRequest,
    RiskLevel,
)
from tests.helpers import scalar_result


@pytest.fixture
def assessment() -> AssessmentModel:
    return AssessmentModel(id=5, company_id=1, framework_id=1, name="Q1", status=AssessmentStatus.IN_PROGRESS)


def register_risk(risk_id: int, company_id: int | None = 1) -> RiskModel:
    return RiskModel(
        id=risk_id,
        title=f"Risk {risk_id}",
        description="d",
        category=RiskCategory.OPERATIONAL,
        likelihood=Likelihood.LIKELY,
        impact=Impact.MAJOR,
        inherent_risk_level=RiskLevel.HIGH,
        company_id=company_id,
    )


class TestCreateRisk:
    async def test_levels_derived(self, mock_db_session, user) -> None:
        data = RiskCreate(
            title="Ransomware",
            description="Encryption of file servers",
            category=RiskCategory.OPERATIONAL,
            likelihood=Likelihood.POSSIBLE,
            impact=Impact.CATASTROPHIC,
            control_effectiveness="Effective",
        )

        risk = await create_risk(data, db=mock_db_session, current_user=user)

        assert risk.inherent_risk_level == RiskLevel.HIGH
        assert risk.residual_risk_level == RiskLevel.MEDIUM
        assert risk.company_id == 1
        assert risk.is_accepted is False

    async def test_explicit_levels_kept(self, mock_db_session, user) -> None:
        data = RiskCreate(
            title="Insider",
            description="d",
            category=RiskCategory.STRATEGIC,
            likelihood=Likelihood.VERY_UNLIKELY,
            impact=Impact.MINOR,
            inherent_risk_level=RiskLevel.MEDIUM,
        )

        risk = await create_risk(data, db=mock_db_session, current_user=user)

        assert risk.inherent_risk_level == RiskLevel.MEDIUM
        assert risk.residual_risk_level is None


class TestImportRisks:
    async def test_partial_success(self, mock_db_session, user) -> None:
        request = RiskImportRequest(
            risks=[
                {
                    "title": "Phishing",
                    "description": "d",
                    "category": "Operational",
                    "likelihood": "Likely",
                    "impact": "Major",
                    "inherent_risk_level": "High",
                },
                {"title": "Incomplete"},
            ]
        )

        summary = await import_risks(request, db=mock_db_session, current_user=user)

        assert summary.total_processed == 2
        assert summary.success_count == 1
        assert summary.failure_count == 1
        assert summary.results[0].success is True
        assert summary.results[0].risk_id is not None
        assert summary.results[1].error == "Missing required fields"


class TestDeleteRisk:
    async def test_global_risk_needs_admin(self, mock_db_session, user) -> None:
        mock_db_session.get.return_value = register_risk(3, company_id=None)

        with pytest.raises(HTTPException) as exc_info:
            await delete_risk(3, db=mock_db_session, current_user=user)

        assert exc_info.value.status_code == 403
        mock_db_session.delete.assert_not_called()

    async def test_company_risk_deleted(self, mock_db_session, user) -> None:
        risk = register_risk(3)
        mock_db_session.get.return_value = risk

        response = await delete_risk(3, db=mock_db_session, current_user=user)

        assert response.message == "Risk deleted"
        mock_db_session.delete.assert_awaited_once_with(risk)


class TestAssignments:
    async def test_assign_reports_each_risk(self, mock_db_session, user, assessment) -> None:
        existing = AssessmentRiskModel(id=40, assessment_id=5, risk_id=2)
        mock_db_session.get.side_effect = [assessment, register_risk(1), register_risk(2), None]
        mock_db_session.execute.side_effect = [scalar_result(None), scalar_result(existing)]

        outcomes = await assign_risks(
            AssessmentRiskAssign(assessment_id=5, risk_ids=[1, 2, 3]),
            db=mock_db_session,
            current_user=user,
        )

        assert [o.success for o in outcomes] == [True, False, False]
        assert outcomes[0].assessment_risk_id is not None
        assert outcomes[1].error == ALREADY_ASSIGNED
        assert outcomes[2].error == "Risk not found: 3"

    async def test_assign_skips_other_company_risk(self, mock_db_session, user, assessment) -> None:
        mock_db_session.get.side_effect = [assessment, register_risk(7, company_id=2), register_risk(8, company_id=None)]
        mock_db_session.execute.return_value = scalar_result(None)

        outcomes = await assign_risks(
            AssessmentRiskAssign(assessment_id=5, risk_ids=[7, 8]),
            db=mock_db_session,
            current_user=user,
        )

        assert outcomes[0].success is False
        assert outcomes[0].error == "Access denied to this company's data"
        assert outcomes[1].success is True
        assert [a.risk_id for a in mock_db_session.added] == [8]

    async def test_other_company_risk_cannot_be_attached(self, mock_db_session, user, assessment) -> None:
        mock_db_session.get.side_effect = [assessment, register_risk(7, company_id=2)]

        with pytest.raises(HTTPException) as exc_info:
            await create_assessment_risk(
                AssessmentRiskCreate(assessment_id=5, risk_id=7),
                db=mock_db_session,
                current_user=user,
            )

        assert exc_info.value.status_code == 403
        assert mock_db_session.added == []

    async def test_admin_cannot_mix_companies(self, mock_db_session, admin_user, assessment) -> None:
        mock_db_session.get.side_effect = [assessment, register_risk(7, company_id=2)]

        with pytest.raises(HTTPException) as exc_info:
            await create_assessment_risk(
                AssessmentRiskCreate(assessment_id=5, risk_id=7),
                db=mock_db_session,
                current_user=admin_user,
            )

        assert exc_info.value.status_code == 403
        assert exc_info.value.detail == "Risk belongs to another company"

    async def test_duplicate_assignment_conflicts(self, mock_db_session, user, assessment) -> None:
        mock_db_session.get.side_effect = [assessment, register_risk(1)]
        mock_db_session.execute.return_value = scalar_result(AssessmentRiskModel(id=1, assessment_id=5, risk_id=1))

        with pytest.raises(HTTPException) as exc_info:
            await create_assessment_risk(
                AssessmentRiskCreate(assessment_id=5, risk_id=1),
                db=mock_db_session,
                current_user=user,
            )

        assert exc_info.value.status_code == 409

    async def test_completed_review_records_reviewer(self, mock_db_session, user, assessment) -> None:
        assignment = AssessmentRiskModel(id=7, assessment_id=5, risk_id=1, status=AssessmentRiskStatus.IN_PROGRESS)
        mock_db_session.get.side_effect = [assignment, assessment]

        updated = await update_assessment_risk_status(
            7,
            AssessmentRiskStatusUpdate(status=AssessmentRiskStatus.COMPLETED, notes="Mitigated"),
            db=mock_db_session,
            current_user=user,
        )

        assert updated.status == AssessmentRiskStatus.COMPLETED
        assert updated.notes == "Mitigated"
        assert updated.reviewed_by == 1
        assert updated.reviewed_at is not None
