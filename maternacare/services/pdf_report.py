"""PDF rendering for appointment, person and dashboard reports (reportlab)."""

import io
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Sequence, Tuple
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.platypus import Image, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

logger = logging.getLogger(__name__)

HEADER_FILL = colors.Color(200 / 255, 220 / 255, 1)
SECTION_FILL = colors.Color(220 / 255, 235 / 255, 1)
LABEL_WIDTH = 50 * mm
VALUE_WIDTH = 120 * mm
PORTRAIT_SIZE = 40 * mm


@dataclass
class ReportSection:
    """One titled block of a report.

    Each group is (category, rows); the category labels the group in
    Category/Field/Value CSV output.
    """
    title: str
    groups: List[Tuple[str, List[Tuple[str, str]]]] = field(default_factory=list)
    empty_message: Optional[str] = None


def _field_table(rows: Sequence[Tuple[str, str]]) -> Table:
    table = Table(
        [[f"{label}:", value] for label, value in rows],
        colWidths=[LABEL_WIDTH, VALUE_WIDTH],
        hAlign="LEFT",
    )
    table.setStyle(TableStyle([
        ("FONTNAME", (0, 0), (-1, -1), "Helvetica"),
        ("FONTSIZE", (0, 0), (-1, -1), 11),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
    ]))
    return table


def _banner(text: str, style, fill) -> Table:
    banner = Table([[Paragraph(escape(text), style)]], colWidths=[LABEL_WIDTH + VALUE_WIDTH])
    banner.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, -1), fill),
        ("TOPPADDING", (0, 0), (-1, -1), 6),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
    ]))
    return banner


def _portrait(image: bytes) -> Optional[Image]:
    """Scale a picture into a square box; None when it cannot be decoded."""
    try:
        width, height = ImageReader(io.BytesIO(image)).getSize()
    except Exception as e:
        logger.warning(f"Skipping unreadable report picture: {e}")
        return None
    scale = PORTRAIT_SIZE / max(width, height)
    return Image(io.BytesIO(image), width=width * scale, height=height * scale, hAlign="CENTER")


def render_report(
    title: str,
    sections: Sequence[ReportSection],
    generated_on: Optional[date] = None,
    image: Optional[bytes] = None,
) -> bytes:
    """
    Render a report to PDF bytes.

    Args:
        title: Report title shown in the header banner
        sections: Sections in display order
        generated_on: Date printed under the title, defaults to today
        image: Optional picture (PNG/JPEG bytes) placed under the title

    Returns:
        PDF document as bytes
    """
    styles = getSampleStyleSheet()
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=20 * mm,
        rightMargin=20 * mm,
        topMargin=20 * mm,
        bottomMargin=20 * mm,
        title=title,
    )

    story = [
        _banner(title, styles["Title"], HEADER_FILL),
        Spacer(1, 4 * mm),
        Paragraph((generated_on or date.today()).isoformat(), styles["Normal"]),
        Spacer(1, 8 * mm),
    ]

    portrait = _portrait(image) if image else None
    if portrait is not None:
        story.extend([portrait, Spacer(1, 6 * mm)])

    for section in sections:
        story.append(_banner(section.title, styles["Heading2"], SECTION_FILL))
        story.append(Spacer(1, 3 * mm))
        if not section.groups and section.empty_message:
            story.append(Paragraph(escape(section.empty_message), styles["Normal"]))
        for _, rows in section.groups:
            story.append(_field_table(rows))
            story.append(Spacer(1, 3 * mm))
        story.append(Spacer(1, 6 * mm))

    doc.build(story)
    content = buffer.getvalue()
    logger.debug(f"Rendered '{title}' report: {len(content)} bytes")
    return content
