#!/usr/bin/env python3
"""
Data types for the admissions report.

Contains: StatRow, Scores, Candidate, IntersectionStats, HistoryPoint,
PageMeta and ReportRequest dataclasses, plus the canonical intersection
combinations used by the report.

All records are frozen snapshots: they are built once per report request
(usually from API JSON via ``from_dict``) and never mutated afterwards.
"""

from dataclasses import dataclass, field
from typing import Any, Optional


PRIORITY_RANKS = (1, 2, 3, 4)


def _as_int(value: Any, default: int = 0) -> int:
    """Coerce an API value to int, treating None and blanks as ``default``."""
    if value is None or value == "":
        return default
    return int(value)


@dataclass(frozen=True)
class StatRow:
    """Per-program admission statistics."""
    program_name: str
    program_code: str
    places_total: int = 0
    places_filled: int = 0
    passing_score: int = 0
    # Applications per priority rank (index 0 = first choice)
    count_priority: tuple[int, int, int, int] = (0, 0, 0, 0)
    # Enrollments per priority rank
    enrolled_priority: tuple[int, int, int, int] = (0, 0, 0, 0)

    @classmethod
    def from_dict(cls, d: dict) -> "StatRow":
        """
        Build a StatRow from an API statistics row.

        Missing ``count_priority_k`` / ``enrolled_priority_k`` fields become 0.
        The upstream ``is_shortage`` flag is ignored; shortage is derived from
        the seat counts.
        """
        code = str(d.get("program_code") or "")
        return cls(
            program_name=str(d.get("program_name") or code),
            program_code=code,
            places_total=_as_int(d.get("places_total")),
            places_filled=_as_int(d.get("places_filled")),
            passing_score=_as_int(d.get("passing_score")),
            count_priority=tuple(_as_int(d.get(f"count_priority_{k}")) for k in PRIORITY_RANKS),
            enrolled_priority=tuple(_as_int(d.get(f"enrolled_priority_{k}")) for k in PRIORITY_RANKS),
        )


@dataclass(frozen=True)
class Scores:
    """Per-subject score breakdown."""
    math: int = 0
    rus: int = 0
    phys: int = 0
    achievements: int = 0

    @classmethod
    def from_dict(cls, d: Optional[dict]) -> "Scores":
        d = d or {}
        return cls(
            math=_as_int(d.get("math")),
            rus=_as_int(d.get("rus")),
            phys=_as_int(d.get("phys")),
            achievements=_as_int(d.get("achievements")),
        )


@dataclass(frozen=True)
class Candidate:
    """A single applicant as returned by the candidate list endpoint."""
    id: int
    full_name: str
    total_score: int = 0
    agreed: bool = False  # Consent to enrollment
    priorities: tuple[str, ...] = ()  # Program codes, first choice first
    scores: Scores = field(default_factory=Scores)
    current_program: Optional[str] = None  # None = not admitted

    @property
    def is_admitted(self) -> bool:
        return self.current_program is not None

    @classmethod
    def from_dict(cls, d: dict) -> "Candidate":
        """Build a Candidate from an API record. Empty program codes mean not admitted."""
        program = d.get("current_program")
        return cls(
            id=_as_int(d.get("id")),
            full_name=str(d.get("full_name") or ""),
            total_score=_as_int(d.get("total_score")),
            agreed=bool(d.get("agreed", False)),
            priorities=tuple(str(p) for p in d.get("priorities") or ()),
            scores=Scores.from_dict(d.get("scores")),
            current_program=str(program) if program else None,
        )


# Intersection field -> program codes it combines, in display order
PAIR_COMBINATIONS = {
    "pm_ivt": ("ПМ", "ИВТ"),
    "pm_itss": ("ПМ", "ИТСС"),
    "pm_ib": ("ПМ", "ИБ"),
    "ivt_itss": ("ИВТ", "ИТСС"),
    "ivt_ib": ("ИВТ", "ИБ"),
    "itss_ib": ("ИТСС", "ИБ"),
}
MULTI_COMBINATIONS = {
    "pm_ivt_itss": ("ПМ", "ИВТ", "ИТСС"),
    "pm_ivt_ib": ("ПМ", "ИВТ", "ИБ"),
    "ivt_itss_ib": ("ИВТ", "ИТСС", "ИБ"),
    "pm_itss_ib": ("ПМ", "ИТСС", "ИБ"),
    "all_four": ("ПМ", "ИВТ", "ИТСС", "ИБ"),
}


@dataclass(frozen=True)
class IntersectionStats:
    """Counts of candidates whose priorities include a given program combination."""
    pm_ivt: int = 0
    pm_itss: int = 0
    pm_ib: int = 0
    ivt_itss: int = 0
    ivt_ib: int = 0
    itss_ib: int = 0

    pm_ivt_itss: int = 0
    pm_ivt_ib: int = 0
    ivt_itss_ib: int = 0
    pm_itss_ib: int = 0
    all_four: int = 0

    @classmethod
    def from_dict(cls, d: dict) -> "IntersectionStats":
        names = list(PAIR_COMBINATIONS) + list(MULTI_COMBINATIONS)
        return cls(**{name: _as_int(d.get(name)) for name in names})

    def pairs(self) -> list[tuple[tuple[str, ...], int]]:
        """Pairwise counts as ``(codes, count)`` in canonical order."""
        return [(codes, getattr(self, name)) for name, codes in PAIR_COMBINATIONS.items()]

    def multi(self) -> list[tuple[tuple[str, ...], int]]:
        """Three-way and four-way counts as ``(codes, count)`` in canonical order."""
        return [(codes, getattr(self, name)) for name, codes in MULTI_COMBINATIONS.items()]


@dataclass(frozen=True)
class HistoryPoint:
    """One point of a program's passing score series."""
    date: str
    score: int

    @classmethod
    def from_dict(cls, d: dict) -> "HistoryPoint":
        return cls(date=str(d.get("date", "")), score=_as_int(d.get("score")))


@dataclass(frozen=True)
class PageMeta:
    """Pagination metadata of the candidate list endpoint."""
    total_items: int = 0
    current_page: int = 1
    total_pages: int = 0

    @classmethod
    def from_dict(cls, d: Optional[dict]) -> "PageMeta":
        d = d or {}
        return cls(
            total_items=_as_int(d.get("total_items")),
            current_page=_as_int(d.get("current_page"), 1),
            total_pages=_as_int(d.get("total_pages")),
        )


@dataclass(frozen=True)
class ReportRequest:
    """
    Everything the report compositor needs, assembled by the caller.

    ``intersections`` and ``chart_source`` are optional: None means the
    section is omitted. ``program_codes`` is the canonical order of the
    ranked candidate lists; None means the configured default.
    """
    statistics: tuple[StatRow, ...]
    candidates: tuple[Candidate, ...]
    as_of_date: str
    intersections: Optional[IntersectionStats] = None
    chart_source: Any = None
    program_codes: Optional[tuple[str, ...]] = None

    @classmethod
    def from_dict(cls, d: dict, chart_source: Any = None) -> "ReportRequest":
        """Build a request from a JSON dump (``statistics``, ``candidates``, ...)."""
        intersections = d.get("intersections")
        codes = d.get("program_codes")
        return cls(
            statistics=tuple(StatRow.from_dict(row) for row in d.get("statistics") or ()),
            candidates=tuple(Candidate.from_dict(c) for c in d.get("candidates") or ()),
            as_of_date=str(d.get("as_of_date") or d.get("date") or ""),
            intersections=IntersectionStats.from_dict(intersections) if intersections is not None else None,
            chart_source=chart_source,
            program_codes=tuple(codes) if codes is not None else None,
        )
