#!/usr/bin/env python3
"""
Unit tests for admissions_api.py (HTTP calls are mocked).

Run with: python -m pytest tests/test_admissions_api.py
"""

import os
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import requests
from reportlab.graphics.shapes import Drawing

from admissions_api import AdmissionsAPI, AdmissionsAPIError, build_report_request


def fake_response(payload=None, status=200):
    response = MagicMock(status_code=status)
    response.json.return_value = payload
    if status >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status} Error", response=response)
    return response


def make_api(*responses):
    session = MagicMock()
    session.request.side_effect = list(responses)
    return AdmissionsAPI("http://api.test/", timeout=5, page_size=2, session=session), session


STAT = {
    "program_name": "Информационная безопасность", "program_code": "ИБ",
    "places_total": 20, "places_filled": 18, "passing_score": 230,
}


class TestStatistics(unittest.TestCase):
    """Tests for the statistics endpoint."""

    def test_bare_list(self):
        api, session = make_api(fake_response([STAT]))
        rows = api.get_statistics()
        self.assertEqual(rows[0].program_code, "ИБ")
        session.request.assert_called_once_with("GET", "http://api.test/api/statistics", timeout=5)

    def test_wrapped_payloads(self):
        api, _ = make_api(fake_response({"data": [STAT]}), fake_response({"rows": [STAT]}), fake_response({}))
        self.assertEqual(len(api.get_statistics()), 1)
        self.assertEqual(len(api.get_statistics()), 1)
        self.assertEqual(api.get_statistics(), [])

    def test_invalid_json(self):
        response = fake_response()
        response.json.side_effect = ValueError("no json")
        api, _ = make_api(response)
        with self.assertRaises(AdmissionsAPIError):
            api.get_statistics()

    def test_client_error_is_not_retried(self):
        api, session = make_api(fake_response(status=400))
        with self.assertRaises(AdmissionsAPIError):
            api.get_statistics()
        self.assertEqual(session.request.call_count, 1)

    @patch("time.sleep")
    def test_server_error_is_retried(self, _):
        api, session = make_api(fake_response(status=503), fake_response([STAT]))
        self.assertEqual(len(api.get_statistics()), 1)
        self.assertEqual(session.request.call_count, 2)

    @patch("time.sleep")
    def test_connection_error_gives_up_after_three_attempts(self, _):
        error = requests.ConnectionError("refused")
        api, session = make_api(error, error, error)
        with self.assertRaises(AdmissionsAPIError):
            api.get_statistics()
        self.assertEqual(session.request.call_count, 3)


class TestCandidates(unittest.TestCase):
    """Tests for the paginated candidate list."""

    def test_query_parameters(self):
        payload = {"data": [], "meta": {"total_items": 0, "current_page": 3, "total_pages": 0}}
        api, session = make_api(fake_response(payload))
        _, meta = api.get_candidates(page=3, search="Иван", program="ПМ", agreed=True, min_score=200)
        self.assertEqual(meta.current_page, 3)
        params = session.request.call_args.kwargs["params"]
        self.assertEqual(params, {
            "page": 3, "limit": 2, "search": "Иван", "program": "ПМ",
            "agreed": "true", "min_score": 200,
        })

    def test_walks_all_pages(self):
        page1 = {"data": [{"id": 1}, {"id": 2}], "meta": {"total_items": 3, "current_page": 1, "total_pages": 2}}
        page2 = {"data": [{"id": 3}], "meta": {"total_items": 3, "current_page": 2, "total_pages": 2}}
        api, session = make_api(fake_response(page1), fake_response(page2))
        self.assertEqual([c.id for c in api.get_all_candidates()], [1, 2, 3])
        self.assertEqual(session.request.call_count, 2)

    def test_stops_on_empty_page(self):
        page = {"data": [], "meta": {"total_items": 10, "current_page": 1, "total_pages": 5}}
        api, session = make_api(fake_response(page))
        self.assertEqual(api.get_all_candidates(), [])
        self.assertEqual(session.request.call_count, 1)

    def test_non_object_payload(self):
        api, _ = make_api(fake_response([1, 2]))
        with self.assertRaises(AdmissionsAPIError):
            api.get_candidates()


class TestOptionalEndpoints(unittest.TestCase):
    """Tests for intersections and history."""

    def test_intersections(self):
        api, _ = make_api(fake_response({"pm_ivt": 4, "all_four": 1}))
        stats = api.get_intersections()
        self.assertEqual(stats.pm_ivt, 4)
        self.assertEqual(stats.ivt_ib, 0)

    def test_intersections_not_found(self):
        api, _ = make_api(fake_response(status=404))
        self.assertIsNone(api.get_intersections())

    def test_history_normalisation(self):
        payload = {"data": {
            "ПМ": [{"date": "2026-07-01", "score": 240}],
            "ИВТ": {"data": [{"date": "2026-07-01", "score": 230}]},
            "ИБ": "oops",
        }}
        api, _ = make_api(fake_response(payload))
        history = api.get_history()
        self.assertEqual(history["ПМ"][0].score, 240)
        self.assertEqual(history["ИВТ"][0].score, 230)
        self.assertEqual(history["ИБ"], [])

    def test_import_list(self):
        api, session = make_api(fake_response({
            "status": "ok", "message": "Imported", "stats": {"processed": 12},
            "warning": "List shrank by more than 10%",
        }))
        with tempfile.NamedTemporaryFile(suffix=".csv", delete=False) as f:
            f.write(b"id,name\n1,A\n")
        try:
            result = api.import_list(f.name, "2026-08-01")
        finally:
            os.unlink(f.name)
        self.assertEqual(result.processed, 12)
        self.assertEqual(result.warning, "List shrank by more than 10%")
        self.assertEqual(session.request.call_args.kwargs["data"], {"date": "2026-08-01"})


class TestBuildReportRequest(unittest.TestCase):
    """Tests for assembling a report request from the API."""

    def _api(self, intersections, history):
        api = MagicMock(spec=AdmissionsAPI)
        api.get_statistics.return_value = []
        api.get_all_candidates.return_value = []
        if isinstance(intersections, Exception):
            api.get_intersections.side_effect = intersections
        else:
            api.get_intersections.return_value = intersections
        if isinstance(history, Exception):
            api.get_history.side_effect = history
        else:
            api.get_history.return_value = history
        return api

    def test_optional_failures_degrade(self):
        api = self._api(AdmissionsAPIError("down"), AdmissionsAPIError("down"))
        request = build_report_request(api, "2026-08-01", program_codes=("ПМ",))
        self.assertIsNone(request.intersections)
        self.assertIsNone(request.chart_source)
        self.assertEqual(request.program_codes, ("ПМ",))

    def test_chart_from_history(self):
        from admission_types import HistoryPoint

        api = self._api(None, {"ПМ": [HistoryPoint("2026-07-01", 240), HistoryPoint("2026-07-02", 244)]})
        request = build_report_request(api, "2026-08-01", program_codes=("ПМ",))
        self.assertIsInstance(request.chart_source, Drawing)

    def test_empty_program_codes_are_kept(self):
        api = self._api(None, {})
        request = build_report_request(api, "2026-08-01", with_chart=False, program_codes=())
        self.assertEqual(request.program_codes, ())

    def test_without_chart(self):
        api = self._api(None, {})
        request = build_report_request(api, "2026-08-01", with_chart=False)
        api.get_history.assert_not_called()
        self.assertIsNone(request.chart_source)


if __name__ == "__main__":
    unittest.main(verbosity=2)
