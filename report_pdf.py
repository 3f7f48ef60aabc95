#!/usr/bin/env python3
"""
Admissions report compositor.

Runs the report sections in their fixed order against one layout cursor
and writes the finished PDF as ``report_<as_of_date>.pdf``.

Section order: title, chart (optional), summary statistics, priority
breakdown, intersections (optional), ranked candidate lists.

Usage:
    from report_pdf import generate_report

    path = generate_report(request, output_dir="reports")
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence, Union

from admission_aggregation import summary_totals
from admission_types import ReportRequest
from config import get_config
from logging_config import LogContext, get_logger
from report_assets import (
    AssetOutcome,
    Degraded,
    Loaded,
    load_font_async,
    rasterize_chart_async,
)
from report_layout import RenderedBlock, ReportDocument
from report_sections import (
    REPORT_TITLE,
    render_chart,
    render_intersections,
    render_priority_table,
    render_ranked_lists,
    render_summary_table,
    render_title,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class ComposedReport:
    """A finished report and how its optional assets fared."""
    pdf: bytes
    filename: str
    pages: int
    blocks: tuple[RenderedBlock, ...]
    font: AssetOutcome
    chart: Optional[AssetOutcome]  # None when no chart source was given

    @property
    def degraded(self) -> list[str]:
        """Reasons of every asset that fell back."""
        outcomes = [self.font, self.chart]
        return [o.reason for o in outcomes if isinstance(o, Degraded)]

    def headings(self) -> list[str]:
        return [block.label for block in self.blocks if block.kind == "heading"]


def report_filename(as_of_date: str) -> str:
    """Deterministic file name for a report date."""
    safe = as_of_date.strip().replace("/", "-").replace("\\", "-") or "undated"
    return f"report_{safe}.pdf"


def resolve_program_codes(
    request: ReportRequest,
    program_codes: Optional[Sequence[str]] = None,
) -> tuple[str, ...]:
    """Ranked list order: the explicit argument, else the request's, else PROGRAM_CODES. Empty is kept."""
    if program_codes is not None:
        return tuple(program_codes)
    if request.program_codes is not None:
        return tuple(request.program_codes)
    return tuple(get_config().program_codes)


async def compose_report(
    request: ReportRequest,
    font_source: Optional[str] = None,
    font_name: Optional[str] = None,
    program_codes: Optional[Sequence[str]] = None,
    generated_at: Optional[datetime] = None,
) -> ComposedReport:
    """
    Lay out the whole report in memory.

    The font load and the chart capture are the only awaits; a failure in
    either degrades that asset and composition continues. Any other error
    propagates and no PDF is produced.

    Args:
        request: Statistics, candidates and optional extras to report on
        font_source: Font path or URL (default: configured REPORT_FONT)
        font_name: Logical font name (default: configured REPORT_FONT_NAME)
        program_codes: Canonical program order for the ranked lists
            (default: the request's own order, then PROGRAM_CODES)
        generated_at: Timestamp printed in the title block (default: now)

    Returns:
        ComposedReport with the PDF bytes
    """
    cfg = get_config()
    codes = resolve_program_codes(request, program_codes)
    doc = ReportDocument(title=f"{REPORT_TITLE} ({request.as_of_date})")

    font = await load_font_async(
        font_source or cfg.font_path,
        font_name or cfg.font_name,
        cfg.font_timeout,
    )
    if isinstance(font, Loaded):
        doc.use_font(font.value.name, font.value.bold_name)
    else:
        logger.warning(f"Falling back to {doc.font_name}: {font.reason}")

    cursor = doc.cursor()
    render_title(
        doc,
        cursor,
        request.as_of_date,
        summary_totals(request.statistics, request.candidates),
        generated_at,
    )

    chart = None
    if request.chart_source is not None:
        chart = await rasterize_chart_async(request.chart_source)
        if isinstance(chart, Loaded):
            render_chart(doc, cursor, chart.value)
        else:
            logger.warning(f"Chart section skipped: {chart.reason}")

    render_summary_table(doc, cursor, request.statistics)
    render_priority_table(doc, cursor, request.statistics)

    if request.intersections is not None:
        render_intersections(doc, cursor, request.intersections)

    lists = render_ranked_lists(doc, cursor, request, codes)
    pdf = doc.finish()

    logger.info(
        f"Composed report for {request.as_of_date}: {doc.page_number} pages, "
        f"{len(request.statistics)} programs, {lists} ranked lists"
    )
    return ComposedReport(
        pdf=pdf,
        filename=report_filename(request.as_of_date),
        pages=doc.page_number,
        blocks=tuple(doc.blocks),
        font=font,
        chart=chart,
    )


def save_report(report: ComposedReport, output_dir: Union[str, Path]) -> Path:
    """
    Write a composed report into ``output_dir``.

    The file appears under its final name only once fully written.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / report.filename
    partial = path.with_name(path.name + ".part")
    partial.write_bytes(report.pdf)
    partial.replace(path)
    return path


def generate_report(
    request: ReportRequest,
    output_dir: Optional[Union[str, Path]] = None,
    **compose_kwargs,
) -> Path:
    """
    Compose a report and save it as ``report_<as_of_date>.pdf``.

    Args:
        request: What to report on
        output_dir: Target directory (default: configured REPORT_DIR)
        **compose_kwargs: Passed through to ``compose_report``

    Returns:
        Path of the written PDF

    Raises:
        Any error from composition; nothing is written in that case.
    """
    output_dir = output_dir or get_config().report_dir
    with LogContext(logger, f"Generating report for {request.as_of_date}"):
        report = asyncio.run(compose_report(request, **compose_kwargs))
        path = save_report(report, output_dir)
    logger.info(f"✓ PDF report saved to: {path}")
    return path
