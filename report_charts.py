#!/usr/bin/env python3
"""
Passing-score history chart for the admissions report.

Builds a reportlab Drawing from the per-program history series; the
compositor rasterizes it like any other chart source.
"""

from typing import Mapping, Optional, Sequence

from reportlab.lib import colors
from reportlab.graphics.charts.legends import Legend
from reportlab.graphics.charts.linecharts import HorizontalLineChart
from reportlab.graphics.shapes import Drawing, String

from admission_types import HistoryPoint

SERIES_COLORS = [
    colors.HexColor('#1f4788'),
    colors.HexColor('#e74c3c'),
    colors.HexColor('#2ecc71'),
    colors.HexColor('#f39c12'),
    colors.HexColor('#9b59b6'),
    colors.HexColor('#1abc9c'),
]


def history_dates(history: Mapping[str, Sequence[HistoryPoint]]) -> list[str]:
    """All dates present in any series, in ascending order."""
    return sorted({point.date for points in history.values() for point in points})


def create_history_chart(
    history: Mapping[str, Sequence[HistoryPoint]],
    program_codes: Optional[Sequence[str]] = None,
    font_name: str = "Helvetica",
    width: float = 500,
    height: float = 250,
) -> Optional[Drawing]:
    """
    Line chart of passing scores per program over the import dates.

    Args:
        history: program code -> score points
        program_codes: Series order (default: sorted codes)
        font_name: Font for labels; program codes may need a Cyrillic font

    Returns:
        Drawing, or None when there is nothing to plot
    """
    codes = [c for c in (program_codes or sorted(history)) if history.get(c)]
    dates = history_dates({c: history[c] for c in codes})
    if not codes or not dates:
        return None

    data = []
    for code in codes:
        by_date = {point.date: point.score for point in history[code]}
        data.append([by_date.get(d) for d in dates])

    values = [v for series in data for v in series if v is not None]

    drawing = Drawing(width, height)

    chart = HorizontalLineChart()
    chart.x = 50
    chart.y = 50
    chart.width = width - 150
    chart.height = height - 90
    chart.data = data
    chart.joinedLines = 1
    chart.categoryAxis.categoryNames = dates
    chart.categoryAxis.labels.boxAnchor = 'ne'
    chart.categoryAxis.labels.angle = 30
    chart.categoryAxis.labels.fontSize = 7
    chart.categoryAxis.labels.fontName = font_name
    chart.valueAxis.valueMin = max(min(values) - 10, 0)
    chart.valueAxis.valueMax = max(values) + 10
    chart.valueAxis.labels.fontName = font_name
    for i in range(len(codes)):
        chart.lines[i].strokeColor = SERIES_COLORS[i % len(SERIES_COLORS)]
        chart.lines[i].strokeWidth = 1.5
    drawing.add(chart)

    legend = Legend()
    legend.x = width - 85
    legend.y = height - 50
    legend.fontName = font_name
    legend.fontSize = 8
    legend.colorNamePairs = [
        (SERIES_COLORS[i % len(SERIES_COLORS)], code) for i, code in enumerate(codes)
    ]
    drawing.add(legend)

    title = String(width / 2, height - 15, 'Passing score by import date', fontSize=11,
                   fontName=font_name, fillColor=colors.black, textAnchor='middle')
    drawing.add(title)

    return drawing
