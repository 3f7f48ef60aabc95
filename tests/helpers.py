"""Shared fixtures for the report tests."""

from admission_types import Candidate, IntersectionStats, ReportRequest, StatRow


def stat(code, total, filled, passing, name=None, applied=(0, 0, 0, 0), enrolled=(0, 0, 0, 0)):
    return StatRow(
        program_name=name or code,
        program_code=code,
        places_total=total,
        places_filled=filled,
        passing_score=passing,
        count_priority=tuple(applied),
        enrolled_priority=tuple(enrolled),
    )


def candidate(id, score, program=None, name=None, priorities=()):
    return Candidate(
        id=id,
        full_name=name or f"Candidate {id}",
        total_score=score,
        agreed=program is not None,
        priorities=tuple(priorities or ((program,) if program else ())),
        current_program=program,
    )


def sample_request(intersections=None, chart_source=None, candidates=None):
    statistics = (
        stat("CS", 50, 45, 210, applied=(30, 20, 10, 5), enrolled=(25, 15, 5, 0)),
        stat("EE", 30, 30, 180, applied=(40, 12, 3, 1), enrolled=(28, 2, 0, 0)),
    )
    if candidates is None:
        candidates = (
            candidate(1, 300, "CS"),
            candidate(2, 300, "CS"),
            candidate(3, 250, "EE"),
            candidate(4, 240, None),
        )
    return ReportRequest(
        statistics=statistics,
        candidates=tuple(candidates),
        as_of_date="2026-08-01",
        intersections=intersections,
        chart_source=chart_source,
        program_codes=("CS", "EE"),
    )


def full_intersections():
    return IntersectionStats(
        pm_ivt=12, pm_itss=7, pm_ib=5, ivt_itss=9, ivt_ib=4, itss_ib=3,
        pm_ivt_itss=2, pm_ivt_ib=1, ivt_itss_ib=1, pm_itss_ib=0, all_four=1,
    )
