#!/usr/bin/env python3
"""
Integration tests for the report compositor.

Run with: python -m pytest tests/test_report_pdf.py
"""

import asyncio
import os
import sys
import tempfile
import unittest
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from unittest.mock import MagicMock, patch

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import reportlab
import requests
from PIL import Image

from admission_types import HistoryPoint
from config import get_config
from report_assets import Degraded, Loaded
from report_charts import create_history_chart
from report_pdf import compose_report, generate_report, report_filename
from tests.helpers import full_intersections, sample_request

MISSING_FONT = "fonts/definitely-missing.ttf"
VERA_TTF = os.path.join(os.path.dirname(reportlab.__file__), "fonts", "Vera.ttf")
GENERATED_AT = datetime(2026, 8, 1, 12, 0, 0)


def compose(request, **kwargs):
    kwargs.setdefault("font_source", MISSING_FONT)
    return asyncio.run(compose_report(request, **kwargs))


class TestComposeReport(unittest.TestCase):
    """Tests for the section pipeline."""

    def test_produces_pdf(self):
        report = compose(sample_request())
        self.assertTrue(report.pdf.startswith(b"%PDF"))
        self.assertEqual(report.filename, "report_2026-08-01.pdf")
        self.assertGreaterEqual(report.pages, 2)

    def test_section_order(self):
        report = compose(sample_request(intersections=full_intersections(), chart_source=Image.new("RGB", (400, 200))))
        self.assertEqual(report.headings(), [
            "Admission campaign progress report",
            "Passing score dynamics",
            "Summary statistics",
            "Applications and enrollments by priority",
            "Intersections",
            "Candidates recommended for admission",
            "CS (2 admitted)",
            "EE (1 admitted)",
        ])

    def test_missing_font_does_not_abort(self):
        """A font that cannot be found degrades to the built-in font."""
        report = compose(sample_request())
        self.assertIsInstance(report.font, Degraded)
        self.assertEqual(len(report.degraded), 1)
        self.assertTrue(report.pdf.startswith(b"%PDF"))

    @patch("report_assets.requests.get")
    def test_font_404_does_not_abort(self, mock_get):
        response = MagicMock(status_code=404)
        response.raise_for_status.side_effect = requests.HTTPError("404 Not Found", response=response)
        mock_get.return_value = response

        report = compose(sample_request(), font_source="http://localhost:3000/fonts/Roboto-Regular.ttf")
        self.assertIsInstance(report.font, Degraded)
        self.assertTrue(report.pdf.startswith(b"%PDF"))

    @unittest.skipUnless(os.path.exists(VERA_TTF), "reportlab Vera font not installed")
    def test_loaded_font(self):
        report = compose(sample_request(), font_source=VERA_TTF, font_name="ReportVera")
        self.assertIsInstance(report.font, Loaded)
        self.assertEqual(report.degraded, [])

    def test_no_intersections_no_heading_no_space(self):
        """Without intersections the ranked lists follow the priority table directly."""
        report = compose(sample_request(intersections=None))
        self.assertNotIn("Intersections", report.headings())

        labels = [(b.kind, b.label) for b in report.blocks]
        after_priorities = labels[labels.index(("table", "priorities")) + 1]
        self.assertEqual(after_priorities, ("heading", "Candidates recommended for admission"))

    def test_empty_intersections_are_rendered(self):
        from admission_types import IntersectionStats

        report = compose(sample_request(intersections=IntersectionStats()))
        self.assertIn("Intersections", report.headings())

    def test_chart_failure_skips_section(self):
        class BrokenChart:
            def capture(self):
                raise RuntimeError("widget not mounted")

        report = compose(sample_request(chart_source=BrokenChart()))
        self.assertIsInstance(report.chart, Degraded)
        self.assertNotIn("Passing score dynamics", report.headings())
        self.assertEqual(report.headings()[1], "Summary statistics")

    def test_no_chart_source(self):
        report = compose(sample_request())
        self.assertIsNone(report.chart)
        self.assertNotIn("Passing score dynamics", report.headings())

    def test_stable_ranking_in_document(self):
        """Candidates 1 and 2 both score 300; 1 is listed first on every render."""
        first = compose(sample_request(), generated_at=GENERATED_AT)
        second = compose(sample_request(), generated_at=GENERATED_AT)
        self.assertEqual(first.headings(), second.headings())
        self.assertEqual(first.blocks, second.blocks)

    def test_nothing_admitted(self):
        request = sample_request(candidates=[])
        report = compose(request)
        self.assertEqual(report.headings()[-1], "Candidates recommended for admission")

    def test_empty_request(self):
        request = replace(sample_request(candidates=[]), statistics=())
        report = compose(request)
        self.assertTrue(report.pdf.startswith(b"%PDF"))

    def test_history_chart_section(self):
        drawing = create_history_chart({"CS": [HistoryPoint("2026-07-01", 205), HistoryPoint("2026-07-02", 210)]})
        report = compose(sample_request(chart_source=drawing))
        self.assertIsInstance(report.chart, Loaded)
        self.assertEqual(report.headings()[1], "Passing score dynamics")
        self.assertIn(("image", "chart"), [(b.kind, b.label) for b in report.blocks])

    def test_empty_program_codes_argument_is_respected(self):
        """An explicit empty code list means no ranked lists, not the defaults."""
        report = compose(sample_request(), program_codes=())
        self.assertEqual(report.headings()[-1], "Candidates recommended for admission")

    def test_empty_program_codes_on_request(self):
        with patch.object(get_config(), "program_codes", ("CS", "EE")):
            report = compose(replace(sample_request(), program_codes=()))
        self.assertEqual(report.headings()[-1], "Candidates recommended for admission")

    def test_program_codes_argument_overrides_request(self):
        report = compose(sample_request(), program_codes=("EE",))
        self.assertNotIn("CS (2 admitted)", report.headings())
        self.assertIn("EE (1 admitted)", report.headings())


class TestGenerateReport(unittest.TestCase):
    """Tests for writing the report file."""

    def test_writes_named_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = generate_report(sample_request(), output_dir=tmp, font_source=MISSING_FONT)
            self.assertEqual(path.name, "report_2026-08-01.pdf")
            self.assertTrue(path.read_bytes().startswith(b"%PDF"))
            self.assertEqual(os.listdir(tmp), ["report_2026-08-01.pdf"])

    def test_failure_writes_nothing(self):
        """A broken section aborts the report and leaves no file behind."""
        request = replace(sample_request(), statistics=(None,))
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(AttributeError):
                generate_report(request, output_dir=tmp, font_source=MISSING_FONT)
            self.assertEqual(os.listdir(tmp), [])

    def test_report_filename(self):
        self.assertEqual(report_filename("2026-08-01"), "report_2026-08-01.pdf")
        self.assertEqual(report_filename("01/08/2026"), "report_01-08-2026.pdf")
        self.assertEqual(report_filename(""), "report_undated.pdf")


if __name__ == "__main__":
    unittest.main(verbosity=2)
