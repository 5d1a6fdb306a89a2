"""
Policy Generator
================

Fills [PLACEHOLDER] markers in Word policy templates with company details.

Only .docx templates are edited; other template files are copied unchanged.

Version: 0.1.0
"""

from collections.abc import Iterator
from datetime import date
from io import BytesIO
from pathlib import Path

from docx import Document
from docx.image.exceptions import UnrecognizedImageError
from docx.shared import Inches
from docx.text.paragraph import Paragraph

from services.portal.models import CompanyModel
from shared.logging import get_logger


logger = get_logger(__name__)

LOGO_PLACEHOLDER = "[COMPANY_LOGO]"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def replacement_values(
    company: CompanyModel | None,
    overrides: dict[str, str] | None = None,
    effective_date: date | None = None,
) -> dict[str, str]:
    """Default placeholder values from the company profile, then overrides."""
    values = {
        "[COMPANY_NAME]": (company.company_name if company else None) or "",
        "[CEO_NAME]": (company.ceo_name if company else None) or "",
        "[CIO_NAME]": (company.cio_name if company else None) or "",
        "[EFFECTIVE_DATE]": (effective_date or date.today()).isoformat(),
    }
    values.update(overrides or {})
    return values


def _iter_paragraphs(document) -> Iterator[Paragraph]:
    yield from document.paragraphs
    for table in document.tables:
        for row in table.rows:
            for cell in row.cells:
                yield from cell.paragraphs
    for section in document.sections:
        for part in (section.header, section.footer):
            yield from part.paragraphs


def _replace_in_paragraph(paragraph: Paragraph, values: dict[str, str]) -> bool:
    """
    Replace placeholders in a paragraph.

    Word often splits a marker across runs, so the text is joined, replaced
    and written back to the first run.
    """
    runs = paragraph.runs
    if not runs:
        return False
    text = "".join(run.text for run in runs)
    replaced = text
    for placeholder, value in values.items():
        replaced = replaced.replace(placeholder, value)
    if replaced == text:
        return False
    runs[0].text = replaced
    for run in runs[1:]:
        run.text = ""
    return True


def fill_docx(template: bytes, values: dict[str, str], logo_path: Path | None = None) -> bytes:
    """
    Return a copy of a .docx template with placeholders substituted.

    [COMPANY_LOGO] becomes the logo image when one is given, otherwise it is
    removed. Images python-docx cannot embed, such as SVG or WebP logos, are
    skipped.
    """
    document = Document(BytesIO(template))
    text_values = {k: v for k, v in values.items() if k != LOGO_PLACEHOLDER}
    replaced = 0

    for paragraph in _iter_paragraphs(document):
        if LOGO_PLACEHOLDER in paragraph.text:
            _replace_in_paragraph(paragraph, {LOGO_PLACEHOLDER: ""})
            if logo_path is not None and logo_path.exists():
                try:
                    paragraph.add_run().add_picture(str(logo_path), width=Inches(1.5))
                except UnrecognizedImageError:
                    logger.warning("policy_logo_skipped", logo=logo_path.name)
            replaced += 1
        if _replace_in_paragraph(paragraph, text_values):
            replaced += 1

    output = BytesIO()
    document.save(output)
    logger.debug("policy_template_filled", paragraphs_changed=replaced)
    return output.getvalue()


def is_docx(filename: str) -> bool:
    return Path(filename).suffix.lower() == ".docx"
