"""
Weekly report pipeline: LangGraph orchestration and CLI.

Graph: START → extract_data → generate_analysis → deliver_report → END

Single attempt, no recovery: an exception in any node stops the run and
propagates to the caller.

Usage:
    python -m src.agents.pipelines.report_pipeline             # extract, analyze, email
    python -m src.agents.pipelines.report_pipeline --dry-run   # save locally instead
    python -m src.agents.pipelines.report_pipeline --dry-run --mock --pdf
"""

import argparse
import logging
import sys
import time
from datetime import datetime
from typing import Any

from langgraph.graph import END, StateGraph

from src.app.config import AppConfig, get_app_config
from src.clients.graph_mail import send_email
from src.clients.powerbi import extract_powerbi_data
from src.rendering.storage import save_report

from ..analysis.analyzer import generate_analysis
from ..config import AgentConfig
from ..state import ReportState, create_initial_state
from ..utils import format_currency, format_number, truncate_for_context

logger = logging.getLogger("weekly_report.pipeline")

RULE = "=" * 60


# =============================================================================
# Nodes
# =============================================================================


def extract_data_node(state: dict) -> dict:
    """Pull KPIs from Power BI (or the mock fixture)."""
    config: AppConfig = state["app_config"]
    agent_config: AgentConfig = state.get("agent_config") or AgentConfig()

    logger.info("[1/3] Extracting Power BI data...")
    data = extract_powerbi_data(
        config,
        use_mock=state.get("use_mock", False),
        anomaly_threshold=agent_config.anomaly_threshold,
        top_products_limit=agent_config.top_products_count,
    )

    logger.info("Extracted Metrics:")
    logger.info(f"  Revenue YTD: {format_currency(data.ytd_revenue)}")
    logger.info(f"  Total Orders: {format_number(data.orders)}")
    logger.info(f"  Total Customers: {format_number(data.customers)}")
    logger.info(f"  Return Rate: {format_number(data.return_rate)}%")
    logger.info(f"  Week-over-Week Revenue: {data.revenue_change}%")
    logger.info(f"  Week-over-Week Orders: {data.order_change}%")

    return {"data": data}


def generate_analysis_node(state: dict) -> dict:
    """Ask the language model for the executive narrative."""
    agent_config: AgentConfig = state.get("agent_config") or AgentConfig()

    logger.info("[2/3] Generating AI analysis...")
    analysis = generate_analysis(state["data"], state["app_config"], agent_config)

    logger.debug(
        "Analysis preview:\n"
        + truncate_for_context(analysis, agent_config.analysis_preview_chars)
    )
    return {"analysis": analysis}


def deliver_report_node(state: dict) -> dict:
    """Save the report files and/or email the report."""
    config: AppConfig = state["app_config"]
    data, analysis = state["data"], state["analysis"]
    saved = None
    email = None

    if state.get("save_local", True):
        logger.info("[3/3] Saving report...")
        saved = save_report(
            config.reports_dir, data, analysis,
            include_pdf=state.get("include_pdf", False),
        )

    if state.get("send_email", False):
        logger.info("[3/3] Sending email...")
        email = send_email(data, analysis, config)
        logger.info(f"Email sent to: {email.recipient}")
        logger.info(f"Subject: {email.subject}")

    return {"saved": saved, "email": email}


# =============================================================================
# Graph Factory
# =============================================================================


def create_report_pipeline() -> Any:
    """Create the report pipeline LangGraph.

    Returns:
        Compiled StateGraph.
    """
    graph = StateGraph(ReportState)

    graph.add_node("extract_data", extract_data_node)
    graph.add_node("generate_analysis", generate_analysis_node)
    graph.add_node("deliver_report", deliver_report_node)

    graph.set_entry_point("extract_data")
    graph.add_edge("extract_data", "generate_analysis")
    graph.add_edge("generate_analysis", "deliver_report")
    graph.add_edge("deliver_report", END)

    return graph.compile()


# =============================================================================
# Convenience Function
# =============================================================================


def run_report_pipeline(
    config: AppConfig | None = None,
    agent_config: AgentConfig | None = None,
    send_email: bool = False,
    save_local: bool = True,
    include_pdf: bool = False,
    use_mock: bool = False,
) -> dict[str, Any]:
    """Run the report pipeline end-to-end.

    Args:
        config: Application config. Loaded from the environment if None.
        agent_config: LLM and KPI settings.
        send_email: Email the report via Microsoft Graph.
        save_local: Write HTML/JSON (and optionally PDF) to the reports dir.
        include_pdf: Also write the weekly PDF when saving.
        use_mock: Use demo KPIs instead of Power BI.

    Returns:
        Final pipeline state (data, analysis, saved, email, metadata).
    """
    config = config or get_app_config()
    start_time = time.time()
    started_at = datetime.now().isoformat()

    logger.info(RULE)
    logger.info("Weekly Report Automation - Starting")
    logger.info(RULE)

    graph = create_report_pipeline()
    initial_state = create_initial_state(
        config,
        agent_config,
        use_mock=use_mock,
        save_local=save_local,
        send_email=send_email,
        include_pdf=include_pdf,
    )

    final_state = graph.invoke(initial_state)

    duration = round(time.time() - start_time, 1)
    final_state["metadata"] = {
        **(final_state.get("metadata") or {}),
        "started_at": started_at,
        "duration_seconds": duration,
    }

    logger.info(RULE)
    logger.info(f"Completed successfully in {duration}s")
    logger.info(RULE)

    return final_state


# =============================================================================
# CLI
# =============================================================================


def _print_results(state: dict) -> None:
    """Print the run summary using rich formatting."""
    from rich.console import Console
    from rich.panel import Panel

    console = Console()
    console.print(Panel("[bold green]Weekly Report Complete[/bold green]"))

    analysis = state.get("analysis") or ""
    console.print("\n[bold cyan]Analysis Preview:[/bold cyan]")
    console.print(truncate_for_context(analysis, 500))

    saved = state.get("saved")
    if saved:
        console.print(f"\n[bold cyan]Report:[/bold cyan] {saved.html_path}")
        console.print(f"[bold cyan]Data:[/bold cyan] {saved.data_path}")
        if saved.pdf_path:
            console.print(f"[bold cyan]PDF:[/bold cyan] {saved.pdf_path}")

    email = state.get("email")
    if email:
        console.print(f"\n[bold cyan]Email sent to:[/bold cyan] {email.recipient}")


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for the weekly report pipeline."""
    parser = argparse.ArgumentParser(
        description=(
            "Automates the weekly report: extracts KPI data from Power BI, "
            "generates an AI analysis, and emails the formatted HTML report "
            "via Microsoft Graph."
        ),
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Extract data and generate analysis without sending email; save locally",
    )
    parser.add_argument(
        "--mock",
        action="store_true",
        help="Use demo KPIs instead of querying Power BI",
    )
    parser.add_argument(
        "--pdf",
        action="store_true",
        help="Also save a PDF copy of the report",
    )
    parser.add_argument("--verbose", "-v", action="store_true")

    args = parser.parse_args(argv)

    from rich.console import Console
    from rich.logging import RichHandler

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
    )

    try:
        state = run_report_pipeline(
            send_email=not args.dry_run,
            save_local=args.dry_run or args.pdf,
            include_pdf=args.pdf,
            use_mock=args.mock,
        )
    except Exception as e:
        logger.error(RULE)
        logger.error(f"ERROR: {e}", exc_info=True)
        logger.error(RULE)
        return 1

    _print_results(state)
    return 0


if __name__ == "__main__":
    sys.exit(main())
