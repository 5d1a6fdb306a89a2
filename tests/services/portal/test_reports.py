"""
Report Builder Tests
====================

Tests for report data snapshots and HTML/PDF rendering.

Version: 0.1.0
"""

import pytest

from services.portal.models import (
    AssessmentResultModel,
    ControlModel,
    DomainModel,
    FrameworkModel,
)
from services.portal.services.catalog import DomainControls, flatten_controls
from services.portal.services.reports import (
    build_report_data,
    recommendation_priority,
    recommendation_text,
    render_html,
    render_pdf,
)
from shared.models.assessment import ResultStatus


# =============================================================================
# Fixtures
# =============================================================================


def control(control_pk: int, code: str, maturity: int = 2) -> ControlModel:
    return ControlModel(
        id=control_pk,
        subdomain_id=1,
        control_id=code,
        name=f"Control {code}",
        description=f"requirement {code}",
        maturity_level=maturity,
    )


@pytest.fixture
def framework() -> FrameworkModel:
    return FrameworkModel(id=1, name="NCA ECC", display_name="NCA Essential Cybersecurity Controls", version="1.0")


@pytest.fixture
def tree() -> list[DomainControls]:
    governance = DomainModel(id=10, framework_id=1, name="ECC-1", display_name="Cybersecurity Governance", order=1)
    operations = DomainModel(id=11, framework_id=1, name="ECC-3", display_name="Cybersecurity Operations", order=2)
    return [
        DomainControls(domain=governance, controls=[control(1, "ECC-1.1.1", 3), control(2, "ECC-1.1.2", 1)]),
        DomainControls(domain=operations, controls=[control(3, "ECC-3.1.1")]),
    ]


@pytest.fixture
def results() -> list[AssessmentResultModel]:
    return [
        AssessmentResultModel(id=100, assessment_id=5, control_id=1, status=ResultStatus.NOT_IMPLEMENTED),
        AssessmentResultModel(id=101, assessment_id=5, control_id=2, status=ResultStatus.IMPLEMENTED),
        AssessmentResultModel(
            id=102,
            assessment_id=5,
            control_id=3,
            status=ResultStatus.PARTIALLY_IMPLEMENTED,
            evidence="SIEM deployed",
        ),
    ]


class TestRecommendations:
    @pytest.mark.parametrize(("maturity", "priority"), [(3, "high"), (4, "high"), (2, "medium"), (None, "medium"), (1, "low")])
    def test_priority_by_maturity(self, maturity: int | None, priority: str) -> None:
        assert recommendation_priority(maturity) == priority

    def test_text_by_status(self) -> None:
        c = control(1, "ECC-1.1.1")

        assert recommendation_text(ResultStatus.NOT_IMPLEMENTED, c) == (
            "Implement Control ECC-1.1.1 to address requirement ECC-1.1.1"
        )
        assert recommendation_text(ResultStatus.PARTIALLY_IMPLEMENTED, c).startswith("Complete the implementation of")


class TestBuildReportData:
    def test_summary(self, framework, tree, results) -> None:
        data = build_report_data(framework, tree, results)

        assert data["framework"]["name"] == "NCA ECC"
        assert data["summary"]["compliance_score"] == 50.0
        assert data["summary"]["risk_level"] == "Medium"
        assert data["summary"]["total_controls"] == 3
        assert data["summary"]["partially_implemented"] == 1

    def test_domain_levels(self, framework, tree, results) -> None:
        data = build_report_data(framework, tree, results)
        domains = {d["domain_name"]: d for d in data["domain_risk_levels"]}

        assert domains["ECC-1"]["compliance_score"] == 50.0
        assert domains["ECC-1"]["risk_level"] == "medium"
        assert domains["ECC-3"]["compliance_score"] == 50.0
        assert domains["ECC-3"]["total_controls"] == 1

    def test_detailed_results_and_recommendations(self, framework, tree, results) -> None:
        data = build_report_data(framework, tree, results)

        assert len(data["detailed_results"]) == 3
        assert data["detailed_results"][2]["evidence"] == "SIEM deployed"
        assert data["detailed_results"][2]["domain_name"] == "ECC-3"

        recommendations = data["recommendations"]
        assert [r["control_identifier"] for r in recommendations] == ["ECC-1.1.1", "ECC-3.1.1"]
        assert recommendations[0]["priority"] == "high"
        assert recommendations[1]["priority"] == "medium"

    def test_empty_assessment(self, tree) -> None:
        data = build_report_data(None, tree, [])

        assert data["framework"]["id"] is None
        assert data["summary"]["compliance_score"] == 0.0
        assert data["summary"]["risk_level"] == "High"
        assert data["recommendations"] == []

    def test_flatten_controls_keeps_order(self, tree) -> None:
        assert [c.control_id for c in flatten_controls(tree)] == ["ECC-1.1.1", "ECC-1.1.2", "ECC-3.1.1"]


class TestRendering:
    def test_html_escapes_and_lists_domains(self, framework, tree, results) -> None:
        data = build_report_data(framework, tree, results)

        html = render_html("Q3 <Review>", data, summary="Board summary")

        assert "Q3 &lt;Review&gt;" in html
        assert "Cybersecurity Operations" in html
        assert "Board summary" in html
        assert "50.0%" in html

    def test_pdf_is_pdf(self, framework, tree, results) -> None:
        data = build_report_data(framework, tree, results)

        pdf = render_pdf("Q3 Review", data, summary="Summary & notes")

        assert pdf.startswith(b"%PDF")
        assert len(pdf) > 1000
