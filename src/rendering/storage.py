"""
Flat-file report storage.

Reports are written to a single directory as
``weekly-report-<date>.html``, ``weekly-report-<date>-data.json``, and
optionally ``weekly-report-<date>.pdf``. Re-running on the same day
overwrites that day's files.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from src.agents.utils import serialize_results

from .html_report import build_email_html
from .pdf_report import build_weekly_pdf

if TYPE_CHECKING:
    from src.agents.analysis.metrics import WeeklyKPIs

logger = logging.getLogger("weekly_report.rendering.storage")

MEDIA_TYPES = {
    ".html": "text/html",
    ".json": "application/json",
    ".pdf": "application/pdf",
}


class InvalidReportName(ValueError):
    """Raised for report names that could escape the reports directory."""


@dataclass
class SavedReport:
    """Paths of the files written for one report."""

    html_path: Path
    data_path: Path
    pdf_path: Path | None = None

    @property
    def report_file(self) -> str:
        return self.html_path.name

    @property
    def data_file(self) -> str:
        return self.data_path.name

    @property
    def pdf_file(self) -> str | None:
        return self.pdf_path.name if self.pdf_path else None


def report_filenames(report_date: str) -> dict[str, str]:
    stem = f"weekly-report-{report_date}"
    return {
        "html": f"{stem}.html",
        "data": f"{stem}-data.json",
        "pdf": f"{stem}.pdf",
    }


def save_report(
    reports_dir: Path,
    data: "WeeklyKPIs",
    analysis: str,
    include_pdf: bool = False,
) -> SavedReport:
    """Write the HTML report, the raw data JSON, and optionally a PDF.

    Args:
        reports_dir: Output directory (created if missing).
        data: Compiled KPIs.
        analysis: Markdown narrative.
        include_pdf: Also render the weekly PDF.

    Returns:
        SavedReport with the written paths.
    """
    reports_dir = Path(reports_dir)
    reports_dir.mkdir(parents=True, exist_ok=True)
    names = report_filenames(data.report_date)

    html_path = reports_dir / names["html"]
    html_path.write_text(build_email_html(data, analysis), encoding="utf-8")
    logger.info(f"Report saved to: {html_path}")

    data_path = reports_dir / names["data"]
    data_path.write_text(
        serialize_results({"data": data.to_dict(), "analysis": analysis}),
        encoding="utf-8",
    )
    logger.info(f"Data saved to: {data_path}")

    pdf_path = None
    if include_pdf:
        pdf_path = reports_dir / names["pdf"]
        pdf_path.write_bytes(build_weekly_pdf(data, analysis))
        logger.info(f"PDF saved to: {pdf_path}")

    return SavedReport(html_path=html_path, data_path=data_path, pdf_path=pdf_path)


def list_reports(reports_dir: Path) -> list[str]:
    """HTML report names, newest first. Empty if the directory is missing."""
    reports_dir = Path(reports_dir)
    if not reports_dir.is_dir():
        return []
    return sorted(
        (p.name for p in reports_dir.iterdir() if p.suffix == ".html"),
        reverse=True,
    )


def resolve_report(reports_dir: Path, filename: str) -> tuple[Path, str]:
    """Locate a stored report and its media type.

    Raises:
        InvalidReportName: If the name contains ".." or a path separator.
        FileNotFoundError: If no such report exists.
    """
    if not filename or ".." in filename or "/" in filename or "\\" in filename:
        raise InvalidReportName(filename)

    path = Path(reports_dir) / filename
    if not path.is_file():
        raise FileNotFoundError(filename)

    return path, MEDIA_TYPES.get(path.suffix, "text/plain")
