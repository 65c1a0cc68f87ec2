"""
app/services/report_service.py

Purpose: Fallback PDF for NUFI results without an embedded document

- Summarizes name, CURP, NSS and weeks figures
- Lists employment records up to MAX_EMPLOYMENT_RECORDS
- Tags the document as automatically generated
"""

import io
from dataclasses import dataclass
from datetime import date
from typing import Any, List
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import LETTER
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer

from app.core.logging import get_logger
from utils.constants import (
    REPORT_AUTOGENERATED_FOOTER,
    REPORT_NO_EMPLOYMENT,
    REPORT_OMITTED_EMPLOYMENT,
    REPORT_TITLE,
)
from utils.payload_utils import summarize_result

logger = get_logger(__name__)

MAX_EMPLOYMENT_RECORDS = 30


@dataclass
class ReportLine:
    text: str
    style: str = "body"  # title | heading | body | record | footer
    space_after: float = 0


def _na(value: Any) -> str:
    return "N/D" if value is None else str(value)


def build_report_lines(result_data: Any, max_records: int = MAX_EMPLOYMENT_RECORDS) -> List[ReportLine]:
    """
    Lays out the fallback report as styled lines.

    Args:
        result_data: "data"/"datos" section of the callback (or the whole body)
        max_records: Employment records listed before the omission notice

    Returns:
        Lines in reading order
    """
    summary = summarize_result(result_data)
    fecha = summary["fecha_emision"] or date.today().strftime("%d/%m/%Y")

    lines = [
        ReportLine(REPORT_TITLE, "title", 12),
        ReportLine(f"Nombre: {summary['nombre']}"),
        ReportLine(f"CURP: {summary['curp']}"),
        ReportLine(f"NSS: {summary['nss']}"),
        ReportLine(f"Fecha emisión: {fecha}", space_after=12),
        ReportLine(f"Semanas cotizadas: {summary['semanas_cotizadas']}"),
        ReportLine(f"Semanas descontadas: {summary['semanas_descontadas']}"),
        ReportLine(f"Semanas reintegradas: {summary['semanas_reintegradas']}", space_after=12),
        ReportLine("Empleos:", "heading", 6),
    ]

    empleos = summary["empleos"]
    if not empleos:
        lines.append(ReportLine(REPORT_NO_EMPLOYMENT))
    else:
        for empleo in empleos[:max_records]:
            empleo = empleo if isinstance(empleo, dict) else {}
            lines.extend([
                ReportLine(f"• Patrón: {_na(empleo.get('patron'))}", "record"),
                ReportLine(f"  Registro patronal: {_na(empleo.get('registro_patronal'))}", "record"),
                ReportLine(f"  Entidad: {_na(empleo.get('entidad_federativa'))}", "record"),
                ReportLine(
                    f"  Alta: {_na(empleo.get('fecha_alta'))}   Baja: {_na(empleo.get('fecha_baja'))}",
                    "record"
                ),
                ReportLine(f"  Salario base: {_na(empleo.get('salario_base'))}", "record", 6),
            ])
        if len(empleos) > max_records:
            lines.append(ReportLine(REPORT_OMITTED_EMPLOYMENT))

    lines.append(ReportLine(REPORT_AUTOGENERATED_FOOTER, "footer"))
    return lines


def render_pdf(lines: List[ReportLine]) -> bytes:
    """Renders report lines to a LETTER-sized PDF."""
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=LETTER,
        leftMargin=50,
        rightMargin=50,
        topMargin=50,
        bottomMargin=50,
        title=REPORT_TITLE,
    )

    ss = getSampleStyleSheet()
    body = ParagraphStyle("Body", parent=ss["Normal"], fontName="Helvetica", fontSize=12, leading=15)
    styles = {
        "title": ParagraphStyle("Title", parent=body, fontSize=18, leading=22, alignment=1),
        "heading": ParagraphStyle("Heading", parent=body, fontSize=14, leading=18),
        "body": body,
        "record": ParagraphStyle("Record", parent=body, leftIndent=8),
        "footer": ParagraphStyle("Footer", parent=body, fontSize=9, textColor=colors.grey, spaceBefore=12),
    }

    story = []
    for line in lines:
        text = escape(line.text).replace("  ", "&nbsp;&nbsp;")
        if line.style == "heading":
            text = f"<u>{text}</u>"
        story.append(Paragraph(text, styles[line.style]))
        if line.space_after:
            story.append(Spacer(0, line.space_after))

    doc.build(story)
    return buffer.getvalue()


def generate_fallback_pdf(result_data: Any) -> bytes:
    """Builds the fallback report for a NUFI result."""
    lines = build_report_lines(result_data)
    pdf = render_pdf(lines)
    logger.info(f"Fallback PDF generated ({len(pdf)} bytes, {len(lines)} lines)")
    return pdf
