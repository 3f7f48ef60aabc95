#!/usr/bin/env python3
"""
Section renderers for the admissions PDF report.

Each ``render_*`` function draws one section into a ReportDocument at the
position of the LayoutCursor it is given and leaves the cursor where the
next section should start. Table contents are built by the pure
``*_rows`` helpers so they can be checked without drawing anything.

Contains: summary_rows, priority_rows, intersection_rows, ranked_rows,
render_title, render_chart, render_summary_table, render_priority_table,
render_intersections, render_ranked_lists.
"""

from datetime import datetime
from typing import Optional, Sequence
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_LEFT
from reportlab.lib.styles import ParagraphStyle
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, Table, TableStyle

from admission_aggregation import (
    SummaryTotals,
    passing_score_display,
    ranked_lists,
)
from admission_types import Candidate, IntersectionStats, ReportRequest, StatRow
from logging_config import get_logger
from report_assets import ChartBitmap
from report_layout import LayoutCursor, ReportDocument

logger = get_logger(__name__)

# Vertical rhythm (mm)
TITLE_LINE = 8.0
META_LINE = 6.0
TITLE_BLOCK_GAP = 9.0
HEADING_GAP = 5.0  # Heading baseline to the block below it
SECTION_GAP = 15.0
LIST_GAP = 10.0
MIN_TABLE_START = 12.0  # Heading plus header row; keeps headings off the page bottom

REPORT_TITLE = "Admission campaign progress report"
HEADER_COLOR = colors.HexColor("#2C3E50")


def _program_label(row: StatRow) -> str:
    if row.program_name and row.program_name != row.program_code:
        return f"{row.program_name} ({row.program_code})"
    return row.program_code


def summary_rows(statistics: Sequence[StatRow]) -> list[list[str]]:
    """Header plus one row per program: label, seats, filled, passing score."""
    rows = [["Program", "Seats", "Filled", "Passing score"]]
    for row in statistics:
        rows.append([
            _program_label(row),
            str(row.places_total),
            str(row.places_filled),
            passing_score_display(row),
        ])
    return rows


def priority_rows(statistics: Sequence[StatRow]) -> list[list[str]]:
    """Header plus one row per program with applied and enrolled counts for priorities 1-4."""
    header = ["Code"]
    header += [f"Applied P{k}" for k in range(1, 5)]
    header += [f"Enrolled P{k}" for k in range(1, 5)]
    rows = [header]
    for row in statistics:
        applied = list(row.count_priority) + [0] * (4 - len(row.count_priority))
        enrolled = list(row.enrolled_priority) + [0] * (4 - len(row.enrolled_priority))
        rows.append([row.program_code] + [str(n or 0) for n in applied[:4] + enrolled[:4]])
    return rows


def intersection_rows(intersections: IntersectionStats) -> list[list[str]]:
    """Pairs on the left, three- and four-way combinations on the right."""
    rows = [["Pair", "Candidates", "Combination", "Candidates"]]
    pairs = intersections.pairs()
    multi = intersections.multi()
    for i in range(max(len(pairs), len(multi))):
        left = [" + ".join(pairs[i][0]), str(pairs[i][1])] if i < len(pairs) else ["", ""]
        right = [" + ".join(multi[i][0]), str(multi[i][1])] if i < len(multi) else ["", ""]
        rows.append(left + right)
    return rows


def ranked_rows(candidates: Sequence[Candidate]) -> list[list[str]]:
    rows = [["ID", "Full name", "Total score"]]
    for candidate in candidates:
        rows.append([str(candidate.id), candidate.full_name, str(candidate.total_score)])
    return rows


def _cell_style(doc: ReportDocument, font_size: float) -> ParagraphStyle:
    return ParagraphStyle(
        "ReportCell",
        fontName=doc.font_name,
        fontSize=font_size,
        leading=font_size * 1.2,
        alignment=TA_LEFT,
    )


def _styled_table(
    doc: ReportDocument,
    data: list[list[str]],
    col_widths: Sequence[float],
    font_size: float = 10,
    left_columns: Sequence[int] = (0,),
) -> Table:
    """
    A table with the report's header style; the header row repeats on every page.

    Body cells of ``left_columns`` hold free text (program names, full names)
    and are wrapped to their column width.
    """
    cell_style = _cell_style(doc, font_size)
    body = [
        [Paragraph(escape(cell), cell_style) if col in left_columns else cell for col, cell in enumerate(row)]
        for row in data[1:]
    ]
    table = Table(data[:1] + body, colWidths=[w * mm for w in col_widths], repeatRows=1)
    style = [
        ('BACKGROUND', (0, 0), (-1, 0), HEADER_COLOR),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
        ('FONTNAME', (0, 0), (-1, 0), doc.bold_font_name),
        ('FONTNAME', (0, 1), (-1, -1), doc.font_name),
        ('FONTSIZE', (0, 0), (-1, -1), font_size),
        ('ALIGN', (0, 0), (-1, -1), 'CENTER'),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
        ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, colors.HexColor('#F5F5F5')]),
    ]
    table.setStyle(TableStyle(style))
    return table


def _heading(doc: ReportDocument, cursor: LayoutCursor, text: str, size: float = 14) -> None:
    doc.text(cursor, text, size, bold=True, kind="heading")
    cursor.advance(HEADING_GAP)


def render_title(
    doc: ReportDocument,
    cursor: LayoutCursor,
    as_of_date: str,
    totals: Optional[SummaryTotals] = None,
    generated_at: Optional[datetime] = None,
) -> None:
    """Title, generation timestamp, as-of date and the headline totals."""
    generated_at = generated_at or datetime.now()

    doc.text(cursor, REPORT_TITLE, 18, bold=True, kind="heading")
    cursor.advance(TITLE_LINE)
    doc.text(cursor, f"Generated: {generated_at.strftime('%d.%m.%Y, %H:%M:%S')}", 12)
    cursor.advance(META_LINE)
    doc.text(cursor, f"As of: {as_of_date}", 12)
    cursor.advance(META_LINE)
    if totals is not None:
        doc.text(
            cursor,
            f"Applications: {totals.applications}   Admitted: {totals.admitted}   "
            f"Seats filled: {totals.places_filled} of {totals.places_total}   "
            f"Programs short: {totals.shortage_programs}",
            10,
        )
    cursor.advance(TITLE_BLOCK_GAP)


def render_chart(doc: ReportDocument, cursor: LayoutCursor, bitmap: ChartBitmap) -> None:
    """Heading and chart image at the fixed print width, keeping the aspect ratio."""
    width = doc.geometry.content_width
    height = bitmap.height_for_width(width)
    # Never taller than one page
    room = doc.geometry.usable_height - HEADING_GAP
    if height > room:
        width, height = width * room / height, room

    cursor.ensure_space(HEADING_GAP + height)
    _heading(doc, cursor, "Passing score dynamics")
    doc.image(cursor, bitmap.png, width, height, label="chart")
    cursor.advance(height + SECTION_GAP)


def render_summary_table(doc: ReportDocument, cursor: LayoutCursor, statistics: Sequence[StatRow]) -> None:
    cursor.ensure_space(MIN_TABLE_START)
    _heading(doc, cursor, "Summary statistics")
    table = _styled_table(doc, summary_rows(statistics), [80, 30, 30, 40])
    cursor.sync(doc.table(cursor, table, label="summary"), SECTION_GAP)


def render_priority_table(doc: ReportDocument, cursor: LayoutCursor, statistics: Sequence[StatRow]) -> None:
    cursor.ensure_space(MIN_TABLE_START)
    _heading(doc, cursor, "Applications and enrollments by priority")
    table = _styled_table(doc, priority_rows(statistics), [24] + [19.5] * 8, font_size=8)
    cursor.sync(doc.table(cursor, table, label="priorities"), SECTION_GAP)


def render_intersections(doc: ReportDocument, cursor: LayoutCursor, intersections: IntersectionStats) -> None:
    cursor.ensure_space(MIN_TABLE_START)
    _heading(doc, cursor, "Intersections")
    table = _styled_table(doc, intersection_rows(intersections), [50, 30, 70, 30], left_columns=(0, 2))
    cursor.sync(doc.table(cursor, table, label="intersections"), SECTION_GAP)


def render_ranked_lists(
    doc: ReportDocument,
    cursor: LayoutCursor,
    request: ReportRequest,
    program_codes: Sequence[str],
) -> int:
    """
    Per-program lists of admitted candidates, best score first.

    Always starts on a new page. A program heading that would start below
    the heading limit moves to the next page.

    Returns:
        Number of program lists emitted
    """
    cursor.new_page()
    doc.text(cursor, "Candidates recommended for admission", 16, bold=True, kind="heading")
    cursor.advance(LIST_GAP)

    lists = ranked_lists(request, program_codes)
    heading_reserve = doc.geometry.page_limit - doc.geometry.heading_limit
    for code, row, ranked in lists:
        cursor.ensure_space(heading_reserve)
        _heading(doc, cursor, f"{_program_label(row)} ({len(ranked)} admitted)", size=12)
        table = _styled_table(doc, ranked_rows(ranked), [25, 115, 40], font_size=9, left_columns=(1,))
        cursor.sync(doc.table(cursor, table, label=f"ranked:{code}"), LIST_GAP)

    if not lists:
        logger.info("No admitted candidates in any listed program")
    return len(lists)
