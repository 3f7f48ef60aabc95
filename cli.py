#!/usr/bin/env python3
"""
Command-line interface for the admissions report tool.

Usage:
    python cli.py --help
    python cli.py report --date 2026-08-01 [options]
    python cli.py stats
    python cli.py --version
"""

import argparse
import json
import sys
from pathlib import Path

from version import __version__


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        prog="admissions-report",
        description="""
Admissions Report - PDF reports on the admission campaign.

Fetches program statistics and candidate lists from the dashboard API and
lays them out as a paginated PDF: summary tables, priority breakdown,
intersections and ranked lists of admitted candidates.

Examples:
  %(prog)s report --date 2026-08-01                      # Report from the API
  %(prog)s report --date 2026-08-01 --from-json dump.json  # Report from a JSON dump
  %(prog)s stats --api-url http://localhost:3000         # Print statistics
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version", "-V",
        action="version",
        version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="count",
        default=0,
        help="Increase verbosity (-v, -vv)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    report_parser = subparsers.add_parser(
        "report",
        help="Generate the PDF report",
        description="Compose the admissions report and save it as report_<date>.pdf."
    )
    report_parser.add_argument(
        "--date", "-d",
        required=True,
        help="As-of date printed on the report and used in the file name"
    )
    report_parser.add_argument(
        "--api-url",
        help="Data API base URL (default: API_URL or http://localhost:3000)"
    )
    report_parser.add_argument(
        "--from-json",
        metavar="FILE",
        help="Read statistics/candidates/intersections from a JSON dump instead of the API"
    )
    report_parser.add_argument(
        "--output-dir", "-o",
        help="Directory to save the report (default: REPORT_DIR or reports)"
    )
    report_parser.add_argument(
        "--font",
        help="TrueType font path or URL with Cyrillic glyphs (default: REPORT_FONT)"
    )
    report_parser.add_argument(
        "--no-chart",
        action="store_true",
        help="Leave out the passing score chart"
    )

    stats_parser = subparsers.add_parser(
        "stats",
        help="Print program statistics",
        description="Print the summary statistics table as the report shows it."
    )
    stats_parser.add_argument(
        "--api-url",
        help="Data API base URL (default: API_URL or http://localhost:3000)"
    )

    return parser


def _load_request(args):
    from admission_types import ReportRequest
    from admissions_api import AdmissionsAPI, build_report_request

    if args.from_json:
        data = json.loads(Path(args.from_json).read_text(encoding="utf-8"))
        data["as_of_date"] = args.date
        return ReportRequest.from_dict(data)

    api = AdmissionsAPI(base_url=args.api_url)
    return build_report_request(api, args.date, with_chart=not args.no_chart)


def run_report(args) -> int:
    from logging_config import get_logger
    from report_pdf import generate_report

    try:
        request = _load_request(args)
        path = generate_report(request, output_dir=args.output_dir, font_source=args.font)
    except Exception as e:
        # Any failure aborts the whole report; no file is written
        get_logger(__name__).debug("Report generation failed", exc_info=True)
        print(f"✗ Report generation failed: {e}", file=sys.stderr)
        return 1

    print(f"✓ Report saved to: {path}")
    return 0


def run_stats(args) -> int:
    from admissions_api import AdmissionsAPI, AdmissionsAPIError
    from report_sections import summary_rows

    try:
        statistics = AdmissionsAPI(base_url=args.api_url).get_statistics()
    except AdmissionsAPIError as e:
        print(f"✗ {e}", file=sys.stderr)
        return 1

    rows = summary_rows(statistics)
    widths = [max(len(row[i]) for row in rows) for i in range(len(rows[0]))]
    for row in rows:
        print("  ".join(cell.ljust(w) for cell, w in zip(row, widths)).rstrip())
    return 0


def main(argv=None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    from logging_config import setup_logging
    setup_logging(level=["WARNING", "INFO", "DEBUG"][min(args.verbose, 2)])

    if args.command == "report":
        return run_report(args)
    if args.command == "stats":
        return run_stats(args)
    return 1


if __name__ == "__main__":
    sys.exit(main())
