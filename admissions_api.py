#!/usr/bin/env python3
"""
Client for the admissions dashboard data API.

Provides the statistics, candidate list, intersection counts and score
history the report is built from, plus the list import endpoint.

Usage:
    from admissions_api import AdmissionsAPI, build_report_request

    api = AdmissionsAPI("http://localhost:3000")
    request = build_report_request(api, "2026-08-01")
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, Optional, Sequence

import requests
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from admission_types import (
    Candidate,
    HistoryPoint,
    IntersectionStats,
    PageMeta,
    ReportRequest,
    StatRow,
)
from config import get_config
from logging_config import get_logger
from report_charts import create_history_chart

logger = get_logger(__name__)

# Endpoint paths relative to the API base URL
ENDPOINTS = {
    "import": "/api/import",
    "applicants": "/api/applicants",
    "statistics": "/api/statistics",
    "history": "/api/history",
    "intersections": "/api/intersections",
}


class AdmissionsAPIError(Exception):
    """The API could not be reached or returned an unusable payload."""


def _is_retryable(exc: BaseException) -> bool:
    """Connection problems and server errors are retried; client errors are not."""
    if isinstance(exc, (requests.ConnectionError, requests.Timeout)):
        return True
    if isinstance(exc, requests.HTTPError) and exc.response is not None:
        return exc.response.status_code >= 500
    return False


def _unwrap_rows(payload: Any) -> list:
    """Accept a bare list or a {"data": [...]} / {"rows": [...]} wrapper."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in ("data", "rows"):
            if isinstance(payload.get(key), list):
                return payload[key]
    return []


@dataclass(frozen=True)
class ImportResult:
    """Outcome of a list import."""
    status: str
    message: str
    processed: int = 0
    warning: Optional[str] = None

    @classmethod
    def from_dict(cls, d: dict) -> "ImportResult":
        return cls(
            status=str(d.get("status", "")),
            message=str(d.get("message", "")),
            processed=int((d.get("stats") or {}).get("processed", 0)),
            warning=d.get("warning"),
        )


class AdmissionsAPI:
    """
    Thin wrapper over the dashboard REST endpoints.

    Transient failures (connection errors, timeouts, 5xx) are retried with
    exponential backoff; anything left over is raised as AdmissionsAPIError.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        page_size: Optional[int] = None,
        session: Optional[requests.Session] = None,
    ):
        cfg = get_config()
        self.base_url = (base_url or cfg.api_url).rstrip("/")
        self.timeout = timeout or cfg.api_timeout
        self.page_size = page_size or cfg.api_page_size
        self.session = session or requests.Session()

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=8),
        retry=retry_if_exception(_is_retryable),
        reraise=True,
    )
    def _request(self, method: str, endpoint: str, **kwargs) -> requests.Response:
        url = f"{self.base_url}{ENDPOINTS[endpoint]}"
        logger.debug(f"{method} {url}")
        response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        response.raise_for_status()
        return response

    def _json(self, method: str, endpoint: str, **kwargs) -> Any:
        try:
            response = self._request(method, endpoint, **kwargs)
        except requests.RequestException as e:
            raise AdmissionsAPIError(f"{method} {ENDPOINTS[endpoint]} failed: {e}") from e
        try:
            return response.json()
        except ValueError as e:
            raise AdmissionsAPIError(f"{ENDPOINTS[endpoint]} returned invalid JSON") from e

    def get_statistics(self) -> list[StatRow]:
        """Per-program statistics rows."""
        return [StatRow.from_dict(row) for row in _unwrap_rows(self._json("GET", "statistics"))]

    def get_candidates(
        self,
        page: int = 1,
        limit: Optional[int] = None,
        search: Optional[str] = None,
        program: Optional[str] = None,
        agreed: Optional[bool] = None,
        min_score: Optional[int] = None,
    ) -> tuple[list[Candidate], PageMeta]:
        """
        One page of the candidate list.

        Args:
            page: 1-based page number
            limit: Page size (default: configured API_PAGE_SIZE)
            search: Name or ID search term
            program: Only candidates assigned to this program code
            agreed: Filter by consent flag
            min_score: Minimum total score

        Returns:
            (candidates, pagination metadata)
        """
        params = {"page": page, "limit": limit or self.page_size}
        if search:
            params["search"] = search
        if program:
            params["program"] = program
        if agreed is not None:
            params["agreed"] = "true" if agreed else "false"
        if min_score is not None:
            params["min_score"] = min_score

        payload = self._json("GET", "applicants", params=params)
        if not isinstance(payload, dict):
            raise AdmissionsAPIError("candidate list payload is not an object")
        candidates = [Candidate.from_dict(c) for c in payload.get("data") or []]
        return candidates, PageMeta.from_dict(payload.get("meta"))

    def iter_all_candidates(self, limit: Optional[int] = None) -> Iterator[Candidate]:
        """Walk every page of the candidate list in server order."""
        page = 1
        while True:
            candidates, meta = self.get_candidates(page=page, limit=limit)
            yield from candidates
            if not candidates or page >= meta.total_pages:
                break
            page += 1

    def get_all_candidates(self, limit: Optional[int] = None) -> list[Candidate]:
        return list(self.iter_all_candidates(limit))

    def get_intersections(self) -> Optional[IntersectionStats]:
        """Priority intersection counts, or None if the server does not provide them."""
        try:
            response = self._request("GET", "intersections")
        except requests.HTTPError as e:
            if e.response is not None and e.response.status_code == 404:
                return None
            raise AdmissionsAPIError(f"GET {ENDPOINTS['intersections']} failed: {e}") from e
        except requests.RequestException as e:
            raise AdmissionsAPIError(f"GET {ENDPOINTS['intersections']} failed: {e}") from e

        try:
            payload = response.json()
        except ValueError as e:
            raise AdmissionsAPIError(f"{ENDPOINTS['intersections']} returned invalid JSON") from e
        if not isinstance(payload, dict):
            return None
        return IntersectionStats.from_dict(payload)

    def get_history(self) -> dict[str, list[HistoryPoint]]:
        """
        Passing score history per program code.

        Accepts the series either at the top level or under "data"; series
        that are not lists (or {"data": [...]} wrappers) become empty.
        """
        payload = self._json("GET", "history")
        if not isinstance(payload, dict):
            return {}
        series = payload["data"] if isinstance(payload.get("data"), dict) else payload

        history = {}
        for code, value in series.items():
            points = _unwrap_rows(value)
            history[code] = [HistoryPoint.from_dict(p) for p in points if isinstance(p, dict)]
        return history

    def import_list(self, file_path: str, date: str) -> ImportResult:
        """Upload a candidate list file for the given date."""
        path = Path(file_path)
        with open(path, "rb") as f:
            payload = self._json(
                "POST",
                "import",
                files={"file": (path.name, f)},
                data={"date": date},
            )
        result = ImportResult.from_dict(payload if isinstance(payload, dict) else {})
        if result.warning:
            logger.warning(f"Import warning: {result.warning}")
        return result


def build_report_request(
    api: AdmissionsAPI,
    as_of_date: str,
    with_chart: bool = True,
    program_codes: Optional[Sequence[str]] = None,
    chart_font: str = "Helvetica",
) -> ReportRequest:
    """
    Fetch everything a report needs.

    Statistics and candidates are required and their errors propagate.
    Intersections and history are optional: failures are logged and the
    corresponding section is left out.
    """
    codes = tuple(program_codes) if program_codes is not None else tuple(get_config().program_codes)
    statistics = api.get_statistics()
    candidates = api.get_all_candidates()
    logger.info(f"Fetched {len(statistics)} programs and {len(candidates)} candidates")

    try:
        intersections = api.get_intersections()
    except AdmissionsAPIError as e:
        logger.warning(f"Intersections unavailable: {e}")
        intersections = None

    chart = None
    if with_chart:
        try:
            chart = create_history_chart(api.get_history(), codes, font_name=chart_font)
        except AdmissionsAPIError as e:
            logger.warning(f"Score history unavailable: {e}")

    return ReportRequest(
        statistics=tuple(statistics),
        candidates=tuple(candidates),
        as_of_date=as_of_date,
        intersections=intersections,
        chart_source=chart,
        program_codes=codes,
    )
