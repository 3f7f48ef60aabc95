#!/usr/bin/env python3
"""
Report-level figures derived from admission statistics and candidates.

Contains: total_applications, stats_by_code, get_stat, is_shortage,
passing_score_display, admitted, ranked_by_program, ranked_lists,
summary_totals.

Every function here is pure: inputs are read-only snapshots and the same
input always yields the same output.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from admission_types import Candidate, ReportRequest, StatRow

# Shown instead of the passing score for programs with unfilled seats
SHORTAGE_MARKER = "SHORTAGE"


def total_applications(candidates: Sequence[Candidate]) -> int:
    """Number of applications in the imported list."""
    return len(candidates)


def stats_by_code(statistics: Iterable[StatRow]) -> dict[str, StatRow]:
    """
    Index statistics rows by program code.

    If a code appears twice the first row wins, matching the order the
    summary table displays them in.
    """
    index: dict[str, StatRow] = {}
    for row in statistics:
        index.setdefault(row.program_code, row)
    return index


def get_stat(statistics: Iterable[StatRow], code: str) -> Optional[StatRow]:
    """Look up the statistics row for a program code, or None."""
    return stats_by_code(statistics).get(code)


def is_shortage(row: StatRow) -> bool:
    """A program is short when fewer seats are filled than offered."""
    return row.places_filled < row.places_total


def passing_score_display(row: StatRow) -> str:
    """Passing score as printed in every table: the shortage marker masks it."""
    if is_shortage(row):
        return SHORTAGE_MARKER
    return str(row.passing_score)


def admitted(candidates: Iterable[Candidate]) -> list[Candidate]:
    """Candidates with an assigned program, in input order."""
    return [c for c in candidates if c.current_program is not None]


def ranked_by_program(admitted_candidates: Iterable[Candidate], code: str) -> list[Candidate]:
    """
    Candidates admitted to ``code``, best total score first.

    ``sorted`` is stable, so equal scores keep their input order.
    """
    matching = [c for c in admitted_candidates if c.current_program == code]
    return sorted(matching, key=lambda c: c.total_score, reverse=True)


def ranked_lists(request: ReportRequest, program_codes: Sequence[str]) -> list[tuple[str, StatRow, list[Candidate]]]:
    """
    Ranked candidate lists in canonical program order.

    Args:
        request: The report request
        program_codes: Canonical program order

    Returns:
        List of (code, stat_row, ranked_candidates). Programs missing from
        the statistics or without admitted candidates are left out, as are
        candidates assigned to a program outside ``program_codes``.
    """
    index = stats_by_code(request.statistics)
    pool = admitted(request.candidates)

    lists = []
    for code in program_codes:
        row = index.get(code)
        if row is None:
            continue
        ranked = ranked_by_program(pool, code)
        if not ranked:
            continue
        lists.append((code, row, ranked))
    return lists


@dataclass(frozen=True)
class SummaryTotals:
    """Headline numbers printed under the report title."""
    applications: int
    admitted: int
    places_total: int
    places_filled: int
    shortage_programs: int


def summary_totals(statistics: Sequence[StatRow], candidates: Sequence[Candidate]) -> SummaryTotals:
    """Aggregate seat and application counts across all programs."""
    return SummaryTotals(
        applications=total_applications(candidates),
        admitted=len(admitted(candidates)),
        places_total=sum(row.places_total for row in statistics),
        places_filled=sum(row.places_filled for row in statistics),
        shortage_programs=sum(1 for row in statistics if is_shortage(row)),
    )
