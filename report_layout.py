#!/usr/bin/env python3
"""
Page geometry, layout cursor and the PDF document wrapper.

Positions are millimetres measured down from the top edge of the page, the
way the report is designed; ReportDocument converts them to reportlab's
bottom-up points when drawing.

Contains: PageGeometry, LayoutCursor, RenderedBlock, ReportDocument.
"""

from dataclasses import dataclass
from io import BytesIO
from typing import Callable, Optional

from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen.canvas import Canvas
from reportlab.platypus import Table

from logging_config import get_logger

logger = get_logger(__name__)

FALLBACK_FONT = "Helvetica"
FALLBACK_BOLD_FONT = "Helvetica-Bold"


@dataclass(frozen=True)
class PageGeometry:
    """A4 page with the report's fixed margins (all values in mm)."""
    width: float = 210.0
    height: float = 297.0
    left_margin: float = 14.0
    top_margin: float = 20.0
    page_limit: float = 280.0  # Lowest y any block may reach
    heading_limit: float = 260.0  # Lowest y a sub-heading may start at
    content_width: float = 180.0
    footer_y: float = 290.0

    @property
    def usable_height(self) -> float:
        return self.page_limit - self.top_margin


class LayoutCursor:
    """
    Running vertical write position on the current page.

    The cursor owns the page-break decision. Starting a new page calls
    ``on_page_break`` (the document finishing its current page) and resets
    ``y`` to the top margin. A cursor without a callback only counts pages,
    which lets a single section be laid out in isolation.
    """

    def __init__(
        self,
        geometry: Optional[PageGeometry] = None,
        y: Optional[float] = None,
        on_page_break: Optional[Callable[[], None]] = None,
    ):
        self.geometry = geometry or PageGeometry()
        self.y = self.geometry.top_margin if y is None else y
        self.page = 1
        self._on_page_break = on_page_break

    @property
    def remaining(self) -> float:
        """Space left above the page limit."""
        return max(self.geometry.page_limit - self.y, 0.0)

    def would_overflow(self, block_height: float) -> bool:
        return self.y + block_height > self.geometry.page_limit

    def ensure_space(self, block_height: float) -> bool:
        """Break the page if a block of ``block_height`` would not fit. Returns True on a break."""
        if self.would_overflow(block_height):
            self.new_page()
            return True
        return False

    def new_page(self) -> None:
        if self._on_page_break is not None:
            self._on_page_break()
        self.page += 1
        self.y = self.geometry.top_margin

    def advance(self, delta: float) -> None:
        self.y += delta

    def sync(self, final_y: float, gap: float = 0.0) -> None:
        """Move to the offset a self-paginating block reported, plus a gap."""
        self.y = final_y + gap

    def __repr__(self) -> str:
        return f"LayoutCursor(page={self.page}, y={self.y:.1f})"


@dataclass(frozen=True)
class RenderedBlock:
    """Trace entry for one drawn block (positions in mm)."""
    kind: str  # "heading", "text", "image" or "table"
    label: str
    page: int
    top: float
    bottom: float


class ReportDocument:
    """
    A reportlab canvas writing into memory, plus a trace of what was drawn.

    The PDF bytes only exist after ``finish``; nothing touches the disk here.
    """

    def __init__(self, geometry: Optional[PageGeometry] = None, title: str = ""):
        self.geometry = geometry or PageGeometry()
        self._buffer = BytesIO()
        self.canvas = Canvas(
            self._buffer,
            pagesize=(self.geometry.width * mm, self.geometry.height * mm),
        )
        if title:
            self.canvas.setTitle(title)
        self.font_name = FALLBACK_FONT
        self.bold_font_name = FALLBACK_BOLD_FONT
        self.page_number = 1
        self.blocks: list[RenderedBlock] = []
        self._finished = False

    def cursor(self, y: Optional[float] = None) -> LayoutCursor:
        """A cursor whose page breaks start new pages in this document."""
        return LayoutCursor(self.geometry, y=y, on_page_break=self.new_page)

    def use_font(self, normal: str, bold: str) -> None:
        self.font_name = normal
        self.bold_font_name = bold

    def headings(self) -> list[str]:
        return [block.label for block in self.blocks if block.kind == "heading"]

    def to_points(self, y: float) -> float:
        """Convert a top-down mm offset to a bottom-up canvas coordinate."""
        return (self.geometry.height - y) * mm

    def _record(self, kind: str, label: str, top: float, bottom: float) -> None:
        self.blocks.append(RenderedBlock(kind, label, self.page_number, top, bottom))

    def _draw_footer(self) -> None:
        self.canvas.setFont(self.font_name, 8)
        self.canvas.drawRightString(
            (self.geometry.left_margin + self.geometry.content_width) * mm,
            self.to_points(self.geometry.footer_y),
            f"Page {self.page_number}",
        )

    def new_page(self) -> None:
        self._draw_footer()
        self.canvas.showPage()
        self.page_number += 1
        logger.debug(f"Started page {self.page_number}")

    def text(self, cursor: LayoutCursor, text: str, size: float, bold: bool = False, kind: str = "text") -> None:
        """Draw one line with its baseline at the cursor. The caller advances the cursor."""
        self.canvas.setFont(self.bold_font_name if bold else self.font_name, size)
        self.canvas.drawString(self.geometry.left_margin * mm, self.to_points(cursor.y), text)
        self._record(kind, text, cursor.y, cursor.y)

    def image(self, cursor: LayoutCursor, png_bytes: bytes, width: float, height: float, label: str = "") -> None:
        """Draw a bitmap with its top edge at the cursor. The caller advances the cursor."""
        self.canvas.drawImage(
            ImageReader(BytesIO(png_bytes)),
            self.geometry.left_margin * mm,
            self.to_points(cursor.y + height),
            width=width * mm,
            height=height * mm,
        )
        self._record("image", label, cursor.y, cursor.y + height)

    def table(self, cursor: LayoutCursor, table: Table, label: str = "") -> float:
        """
        Draw a table starting at the cursor, splitting it across pages.

        Rows that do not fit above the page limit move to the next page
        (header rows repeat as configured on the table). The cursor is
        moved to a new page on every split but is not advanced past the
        table; the caller syncs it to the returned offset.

        Returns:
            The y offset (mm) of the table's bottom edge on its last page.
        """
        width = self.geometry.content_width * mm
        x = self.geometry.left_margin * mm
        first_page = self.page_number
        top = cursor.y
        pending = table

        while True:
            available = cursor.remaining * mm
            _, height = pending.wrapOn(self.canvas, width, available)
            if height <= available:
                pending.drawOn(self.canvas, x, self.to_points(cursor.y) - height)
                final_y = cursor.y + height / mm
                break

            parts = pending.split(width, available) if available > 0 else []
            if len(parts) < 2:
                if cursor.y <= self.geometry.top_margin:
                    # Taller than a whole page and unsplittable: draw it anyway
                    logger.warning(f"Table '{label}' does not fit on an empty page")
                    pending.drawOn(self.canvas, x, self.to_points(cursor.y) - height)
                    final_y = cursor.y + height / mm
                    break
                cursor.new_page()
                continue

            head, pending = parts[0], parts[1]
            _, head_height = head.wrapOn(self.canvas, width, available)
            head.drawOn(self.canvas, x, self.to_points(cursor.y) - head_height)
            cursor.new_page()

        if self.page_number != first_page:
            top = self.geometry.top_margin
        self._record("table", label, top, final_y)
        return final_y

    def finish(self) -> bytes:
        """Close the last page and return the PDF bytes."""
        if not self._finished:
            self._draw_footer()
            self.canvas.save()
            self._finished = True
        return self._buffer.getvalue()
