# bhp_core/integrations/pdf.py
"""
PDF rendering for intake and ASAM downloads (reportlab).

A document is a title plus a list of sections; each section is a heading and
a list of (label, value) rows rendered as a two-column table.
"""
from __future__ import annotations

from io import BytesIO
from typing import Any, Iterable, Optional, Sequence, Tuple

from django.utils import timezone
from django.utils.html import escape
from reportlab.lib import colors
from reportlab.lib.pagesizes import LETTER
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

Row = Tuple[str, Any]
Section = Tuple[str, Sequence[Row]]

HEADER_COLOR = colors.HexColor("#1a3a5c")
EMPTY_VALUE = "-"


def _fmt(value: Any) -> str:
    if value is None or value == "":
        return EMPTY_VALUE
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, (list, tuple)):
        return ", ".join(_fmt(v) for v in value) or EMPTY_VALUE
    if isinstance(value, dict):
        return "; ".join(f"{k}: {_fmt(v)}" for k, v in value.items()) or EMPTY_VALUE
    return str(value)


def _table_style() -> TableStyle:
    return TableStyle([
        ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 9),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("ROWBACKGROUNDS", (0, 0), (-1, -1), [colors.white, colors.HexColor("#f0f4f8")]),
        ("GRID", (0, 0), (-1, -1), 0.5, colors.HexColor("#cccccc")),
        ("LEFTPADDING", (0, 0), (-1, -1), 6),
        ("RIGHTPADDING", (0, 0), (-1, -1), 6),
        ("TOPPADDING", (0, 0), (-1, -1), 4),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
    ])


def render_document(title: str, sections: Iterable[Section], subtitle: Optional[str] = None) -> bytes:
    buf = BytesIO()
    doc = SimpleDocTemplate(
        buf,
        pagesize=LETTER,
        title=title,
        leftMargin=inch,
        rightMargin=inch,
        topMargin=inch,
        bottomMargin=inch,
    )

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle("BHPTitle", parent=styles["Title"], fontSize=18, textColor=HEADER_COLOR)
    heading_style = ParagraphStyle(
        "BHPHeading",
        parent=styles["Heading2"],
        fontSize=12,
        textColor=HEADER_COLOR,
        spaceBefore=12,
        spaceAfter=4,
    )
    cell_style = ParagraphStyle("BHPCell", parent=styles["Normal"], fontSize=9)
    small = ParagraphStyle("BHPSmall", parent=styles["Normal"], fontSize=8, textColor=colors.grey)

    story = [Paragraph(escape(title), title_style)]
    if subtitle:
        story.append(Paragraph(escape(subtitle), styles["Normal"]))
    story.append(Paragraph(f"Generated: {timezone.localtime():%Y-%m-%d %H:%M %Z}", small))
    story.append(Spacer(1, 0.15 * inch))

    for heading, rows in sections:
        story.append(Paragraph(escape(heading), heading_style))
        data = [[Paragraph(escape(label), cell_style), Paragraph(escape(_fmt(value)), cell_style)] for label, value in rows]
        if not data:
            story.append(Paragraph(EMPTY_VALUE, cell_style))
            continue
        table = Table(data, colWidths=[2 * inch, 4.5 * inch])
        table.setStyle(_table_style())
        story.append(table)

    doc.build(story)
    return buf.getvalue()
