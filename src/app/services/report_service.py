"""
Report service: runs the pipeline for the API and reads stored reports.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from src.agents.config import AgentConfig
from src.agents.pipelines.report_pipeline import run_report_pipeline
from src.rendering.storage import list_reports, resolve_report

from ..config import AppConfig

logger = logging.getLogger(__name__)


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def generate_report(
    config: AppConfig,
    agent_config: AgentConfig | None = None,
    send_email_flag: bool = False,
    include_pdf: bool = False,
) -> dict[str, Any]:
    """Run extract → analyze → save (→ email) and summarize the result."""
    logger.info(f"API Request: Generate Report (send email: {send_email_flag})")

    state = run_report_pipeline(
        config,
        agent_config,
        send_email=send_email_flag,
        save_local=True,
        include_pdf=include_pdf,
    )

    data = state["data"]
    saved = state["saved"]
    email = state.get("email")
    duration = state["metadata"]["duration_seconds"]

    return {
        "success": True,
        "message": "Report generated successfully",
        "duration": f"{duration}s",
        "report_file": saved.report_file,
        "data_file": saved.data_file,
        "pdf_file": saved.pdf_file,
        "metrics": {
            "ytd_revenue": data.ytd_revenue,
            "orders": data.orders,
            "customers": data.customers,
            "return_rate": data.return_rate,
            "revenue_change": f"{data.revenue_change}%",
            "order_change": f"{data.order_change}%",
        },
        "email": (
            {"sent": True, "recipient": email.recipient, "subject": email.subject}
            if email
            else {"sent": False}
        ),
        "timestamp": utc_timestamp(),
    }


def get_report_list(reports_dir: Path) -> dict[str, Any]:
    reports = list_reports(reports_dir)
    return {"success": True, "reports": reports, "count": len(reports)}


def load_report(reports_dir: Path, filename: str) -> tuple[Any, str]:
    """Return (content, media_type) for a stored report.

    JSON reports are decoded, PDFs are returned as bytes, everything else
    as text.
    """
    path, media_type = resolve_report(reports_dir, filename)

    if media_type == "application/json":
        return json.loads(path.read_text(encoding="utf-8")), media_type
    if media_type == "application/pdf":
        return path.read_bytes(), media_type
    return path.read_text(encoding="utf-8"), media_type
