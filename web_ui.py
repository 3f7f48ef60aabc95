"""
Gradio Web UI for the admissions report tool.

A small panel over the dashboard data API: import a candidate list, look
at the program statistics and candidates, and export the PDF report.

Usage:
    python web_ui.py

Then open http://localhost:7860 in your browser.
"""

import tempfile
from typing import Optional

import gradio as gr

from admission_aggregation import is_shortage
from admissions_api import AdmissionsAPI, AdmissionsAPIError, build_report_request
from config import get_config
from logging_config import get_logger, setup_logging
from report_pdf import generate_report
from report_sections import summary_rows

logger = get_logger(__name__)

# Candidates shown per page in the search table
PAGE_SIZE = 50
CANDIDATE_HEADERS = ["ID", "Full name", "Total score", "Consent", "Priorities", "Program"]


def _api(api_url: Optional[str]) -> AdmissionsAPI:
    return AdmissionsAPI(base_url=api_url or None)


def _short_error(e: Exception) -> str:
    message = str(e)
    if len(message) > 200:
        message = message[:200] + "..."
    return message


def import_list(file_path: Optional[str], date: str, api_url: str) -> str:
    """Upload handler: forward the list file to the API."""
    if not file_path:
        return "Choose a file to import"
    if not date:
        return "Enter the list date"
    try:
        result = _api(api_url).import_list(file_path, date)
    except (AdmissionsAPIError, OSError) as e:
        logger.error(f"Import failed: {e}")
        return f"Import failed: {_short_error(e)}"

    status = f"{result.message} ({result.processed} records processed)"
    if result.warning:
        status += f"\nWarning: {result.warning}"
    return status


def load_statistics(api_url: str) -> tuple[list[list], str]:
    """Statistics handler: summary rows as the report prints them."""
    try:
        statistics = _api(api_url).get_statistics()
    except AdmissionsAPIError as e:
        logger.error(f"Statistics unavailable: {e}")
        return [], f"Statistics unavailable: {_short_error(e)}"

    short = sum(1 for row in statistics if is_shortage(row))
    return summary_rows(statistics)[1:], f"{len(statistics)} programs, {short} with unfilled seats"


def search_candidates(
    api_url: str,
    search: str,
    program: str,
    agreed_only: bool,
    min_score: Optional[float],
    page: float,
) -> tuple[list[list], str]:
    """
    Candidate search handler.

    An unticked consent box and an empty or zero minimum score mean no filter.
    """
    try:
        candidates, meta = _api(api_url).get_candidates(
            page=max(int(page or 1), 1),
            limit=PAGE_SIZE,
            search=search or None,
            program=program or None,
            agreed=True if agreed_only else None,
            min_score=int(min_score) if min_score else None,
        )
    except AdmissionsAPIError as e:
        logger.error(f"Candidate search failed: {e}")
        return [], f"Candidate search failed: {_short_error(e)}"

    rows = [
        [c.id, c.full_name, c.total_score, "yes" if c.agreed else "no",
         ", ".join(c.priorities), c.current_program or "-"]
        for c in candidates
    ]
    return rows, f"Page {meta.current_page} of {meta.total_pages} ({meta.total_items} candidates)"


def export_report(api_url: str, date: str, include_chart: bool) -> tuple[Optional[str], str]:
    """
    Download handler for the PDF report.

    Returns:
        (path of the PDF or None, status message)
    """
    if not date:
        return None, "Enter the as-of date"
    try:
        request = build_report_request(_api(api_url), date, with_chart=include_chart)
        path = generate_report(request, output_dir=tempfile.mkdtemp(prefix="admissions_report_"))
    except Exception as e:
        logger.exception(f"Error generating report: {e}")
        return None, f"Report generation failed: {_short_error(e)}"
    return str(path), f"Report ready: {path.name}"


with gr.Blocks(title="Admissions Report") as demo:
    gr.Markdown("# Admission campaign dashboard")

    api_url_input = gr.Textbox(label="API URL", value=get_config().api_url)

    with gr.Tab("Import"):
        with gr.Row():
            list_file = gr.File(label="Candidate list (CSV)", type="filepath")
            list_date = gr.Textbox(label="List date", placeholder="2026-08-01")
        import_btn = gr.Button("Import", variant="primary")
        import_status = gr.Textbox(label="Status", lines=2)

    with gr.Tab("Statistics"):
        stats_btn = gr.Button("Refresh", variant="secondary")
        stats_table = gr.Dataframe(headers=summary_rows([])[0], interactive=False)
        stats_status = gr.Textbox(label="Status")

    with gr.Tab("Candidates"):
        with gr.Row():
            search_input = gr.Textbox(label="Search (name or ID)")
            program_input = gr.Dropdown(
                label="Program", choices=[""] + list(get_config().program_codes), value=""
            )
            page_input = gr.Number(label="Page", value=1, precision=0)
        with gr.Row():
            agreed_input = gr.Checkbox(label="Consent given only", value=False)
            min_score_input = gr.Number(label="Minimum total score", value=0, precision=0)
        search_btn = gr.Button("Search", variant="secondary")
        candidates_table = gr.Dataframe(headers=CANDIDATE_HEADERS, interactive=False)
        candidates_status = gr.Textbox(label="Status")

    with gr.Tab("Report"):
        with gr.Row():
            report_date = gr.Textbox(label="As-of date", placeholder="2026-08-01")
            include_chart = gr.Checkbox(label="Include passing score chart", value=True)
        report_btn = gr.Button("Export PDF report", variant="primary")
        report_file = gr.File(label="Report")
        report_status = gr.Textbox(label="Status")

    import_btn.click(
        fn=import_list,
        inputs=[list_file, list_date, api_url_input],
        outputs=[import_status]
    )

    stats_btn.click(
        fn=load_statistics,
        inputs=[api_url_input],
        outputs=[stats_table, stats_status]
    )

    search_btn.click(
        fn=search_candidates,
        inputs=[api_url_input, search_input, program_input, agreed_input, min_score_input, page_input],
        outputs=[candidates_table, candidates_status]
    )

    report_btn.click(
        fn=export_report,
        inputs=[api_url_input, report_date, include_chart],
        outputs=[report_file, report_status]
    )


if __name__ == "__main__":
    setup_logging()
    cfg = get_config()

    if cfg.web_ui_host == "0.0.0.0":
        logger.warning("Web UI binding to all network interfaces. This may expose the application.")
        logger.warning("Set WEB_UI_HOST=127.0.0.1 for local-only access.")

    logger.info(f"Starting web UI on http://{cfg.web_ui_host}:{cfg.web_ui_port}")
    demo.launch(server_name=cfg.web_ui_host, server_port=cfg.web_ui_port)
