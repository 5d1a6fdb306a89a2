"""
Compliance Report Builder
=========================

Builds the JSON snapshot stored on a compliance report and renders it as
HTML (jinja2) or PDF (reportlab).

Report data sections:
- framework: header of the assessed framework
- summary: compliance score, risk level and status counts
- domain_risk_levels: per-domain score and lower-case risk level
- detailed_results: one row per assessed control
- recommendations: one per control not fully implemented

Version: 0.1.0
"""

from collections.abc import Sequence
from io import BytesIO
from typing import Any
from xml.sax.saxutils import escape

from jinja2 import Template
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from services.portal.models import AssessmentResultModel, ControlModel, FrameworkModel
from services.portal.services.catalog import DomainControls
from services.portal.services.scoring import (
    StatusTally,
    compliance_score,
    domain_risk_level,
    risk_level_for_score,
)
from shared.logging import get_logger
from shared.models.assessment import ResultStatus


logger = get_logger(__name__)


# =============================================================================
# Recommendations
# =============================================================================


def recommendation_priority(maturity_level: int | None) -> str:
    """Higher maturity controls are more urgent to close."""
    if maturity_level is not None and maturity_level >= 3:
        return "high"
    if maturity_level == 1:
        return "low"
    return "medium"


def recommendation_text(status: ResultStatus, control: ControlModel | None) -> str:
    name = control.name if control else None
    description = control.description if control else None
    if status == ResultStatus.NOT_IMPLEMENTED:
        return f"Implement {name} to address {description}"
    return f"Complete the implementation of {name} to fully address {description}"


# =============================================================================
# Builder
# =============================================================================


def build_report_data(
    framework: FrameworkModel | None,
    tree: Sequence[DomainControls],
    results: Sequence[AssessmentResultModel],
) -> dict[str, Any]:
    """
    Snapshot an assessment's results.

    Args:
        framework: Assessed framework
        tree: Framework controls grouped by domain
        results: Every result of the assessment

    Returns:
        JSON-serializable report data
    """
    controls: dict[int, ControlModel] = {}
    domain_of: dict[int, DomainControls] = {}
    for entry in tree:
        for control in entry.controls:
            controls[control.id] = control
            domain_of[control.id] = entry

    tally = StatusTally.from_statuses(r.status for r in results)
    score = compliance_score(tally)

    domain_risk_levels = []
    for entry in tree:
        ids = {c.id for c in entry.controls}
        domain_tally = StatusTally.from_statuses(r.status for r in results if r.control_id in ids)
        domain_score = compliance_score(domain_tally)
        domain_risk_levels.append(
            {
                "domain_id": entry.domain.id,
                "domain_name": entry.domain.name,
                "display_name": entry.domain.display_name,
                "compliance_score": domain_score,
                "risk_level": domain_risk_level(domain_score),
                **domain_tally.as_dict(),
            }
        )

    detailed_results = []
    recommendations = []
    for result in results:
        control = controls.get(result.control_id)
        entry = domain_of.get(result.control_id)
        row = {
            "result_id": result.id,
            "control_id": result.control_id,
            "control_identifier": control.control_id if control else "",
            "control_name": control.name if control else "",
            "domain_id": entry.domain.id if entry else 0,
            "domain_name": entry.domain.name if entry else "",
            "status": ResultStatus(result.status).value,
        }
        detailed_results.append({**row, "evidence": result.evidence, "comments": result.comments})

        if result.status in (ResultStatus.NOT_IMPLEMENTED, ResultStatus.PARTIALLY_IMPLEMENTED):
            recommendations.append(
                {
                    **row,
                    "priority": recommendation_priority(control.maturity_level if control else None),
                    "recommendation": recommendation_text(ResultStatus(result.status), control),
                }
            )

    return {
        "framework": {
            "id": framework.id if framework else None,
            "name": framework.name if framework else None,
            "display_name": framework.display_name if framework else None,
            "version": framework.version if framework else None,
        },
        "summary": {
            "compliance_score": score,
            "risk_level": risk_level_for_score(score),
            **tally.as_dict(),
        },
        "domain_risk_levels": domain_risk_levels,
        "detailed_results": detailed_results,
        "recommendations": recommendations,
    }


# =============================================================================
# Rendering
# =============================================================================

HTML_TEMPLATE = Template(
    """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{{ title }}</title>
<style>
body { font-family: Helvetica, Arial, sans-serif; margin: 2em; color: #1f2937; }
table { border-collapse: collapse; width: 100%; margin-bottom: 1.5em; }
th, td { border: 1px solid #d1d5db; padding: 6px 8px; text-align: left; }
th { background: #1e3a8a; color: #fff; }
.risk-high { color: #b91c1c; } .risk-medium { color: #b45309; } .risk-low { color: #15803d; }
</style>
</head>
<body>
<h1>{{ title }}</h1>
{% if framework.display_name %}<p>{{ framework.display_name }}{% if framework.version %} (version {{ framework.version }}){% endif %}</p>{% endif %}
{% if summary_text %}<p>{{ summary_text }}</p>{% endif %}
<h2>Summary</h2>
<table>
<tr><th>Compliance score</th><td>{{ summary.compliance_score }}%</td></tr>
<tr><th>Risk level</th><td class="risk-{{ summary.risk_level | lower }}">{{ summary.risk_level }}</td></tr>
<tr><th>Implemented</th><td>{{ summary.implemented }}</td></tr>
<tr><th>Partially implemented</th><td>{{ summary.partially_implemented }}</td></tr>
<tr><th>Not implemented</th><td>{{ summary.not_implemented }}</td></tr>
<tr><th>Not applicable</th><td>{{ summary.not_applicable }}</td></tr>
</table>
<h2>Domains</h2>
<table>
<tr><th>Domain</th><th>Score</th><th>Risk</th></tr>
{% for d in domain_risk_levels %}<tr><td>{{ d.display_name }}</td><td>{{ d.compliance_score }}%</td><td class="risk-{{ d.risk_level }}">{{ d.risk_level }}</td></tr>
{% endfor %}</table>
{% if recommendations %}<h2>Recommendations</h2>
<table>
<tr><th>Control</th><th>Priority</th><th>Recommendation</th></tr>
{% for r in recommendations %}<tr><td>{{ r.control_identifier }}</td><td>{{ r.priority }}</td><td>{{ r.recommendation }}</td></tr>
{% endfor %}</table>{% endif %}
</body>
</html>
""",
    autoescape=True,
)


def render_html(title: str, report_data: dict[str, Any], summary: str | None = None) -> str:
    return HTML_TEMPLATE.render(
        title=title,
        summary_text=summary,
        framework=report_data.get("framework", {}),
        summary=report_data.get("summary", {}),
        domain_risk_levels=report_data.get("domain_risk_levels", []),
        recommendations=report_data.get("recommendations", []),
    )


_TABLE_STYLE = TableStyle(
    [
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#1e3a8a")),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 9),
        ("GRID", (0, 0), (-1, -1), 0.5, colors.HexColor("#d1d5db")),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
    ]
)


def render_pdf(title: str, report_data: dict[str, Any], summary: str | None = None) -> bytes:
    """Render the report as an A4 PDF document."""
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=1.5 * cm,
        leftMargin=1.5 * cm,
        topMargin=2 * cm,
        bottomMargin=2 * cm,
        title=title,
    )
    styles = getSampleStyleSheet()
    cell = styles["BodyText"]

    framework = report_data.get("framework", {})
    totals = report_data.get("summary", {})

    story: list[Any] = [Paragraph(escape(title), styles["Title"])]
    if framework.get("display_name"):
        story.append(Paragraph(escape(framework["display_name"]), styles["Heading3"]))
    if summary:
        story.append(Paragraph(escape(summary), styles["Normal"]))
    story.append(Spacer(1, 0.5 * cm))

    story.append(Paragraph("Summary", styles["Heading2"]))
    summary_rows = [
        ["Metric", "Value"],
        ["Compliance score", f"{totals.get('compliance_score', 0)}%"],
        ["Risk level", totals.get("risk_level", "")],
        ["Implemented", totals.get("implemented", 0)],
        ["Partially implemented", totals.get("partially_implemented", 0)],
        ["Not implemented", totals.get("not_implemented", 0)],
        ["Not applicable", totals.get("not_applicable", 0)],
    ]
    table = Table(summary_rows, colWidths=[8 * cm, 8 * cm])
    table.setStyle(_TABLE_STYLE)
    story.extend([table, Spacer(1, 0.5 * cm)])

    domains = report_data.get("domain_risk_levels", [])
    if domains:
        story.append(Paragraph("Domains", styles["Heading2"]))
        rows: list[list[Any]] = [["Domain", "Score", "Risk"]]
        rows.extend(
            [Paragraph(escape(d["display_name"] or ""), cell), f"{d['compliance_score']}%", d["risk_level"]]
            for d in domains
        )
        table = Table(rows, colWidths=[10 * cm, 3 * cm, 3 * cm], repeatRows=1)
        table.setStyle(_TABLE_STYLE)
        story.extend([table, Spacer(1, 0.5 * cm)])

    recommendations = report_data.get("recommendations", [])
    if recommendations:
        story.append(Paragraph("Recommendations", styles["Heading2"]))
        rows = [["Control", "Priority", "Recommendation"]]
        rows.extend(
            [r["control_identifier"], r["priority"], Paragraph(escape(r["recommendation"]), cell)]
            for r in recommendations
        )
        table = Table(rows, colWidths=[3 * cm, 2.5 * cm, 12.5 * cm], repeatRows=1)
        table.setStyle(_TABLE_STYLE)
        story.append(table)

    doc.build(story)
    pdf = buffer.getvalue()
    logger.debug("report_pdf_rendered", title=title, size=len(pdf))
    return pdf
