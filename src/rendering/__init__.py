"""
Report assembly: markdown conversion, HTML email body, PDF layouts, and
flat-file storage.
"""

from .html_report import build_email_html, build_subject
from .markdown import markdown_to_html, split_sections
from .pdf_report import build_compliance_pdf, build_weekly_pdf, compliance_pdf_filename
from .storage import (
    InvalidReportName,
    SavedReport,
    list_reports,
    report_filenames,
    resolve_report,
    save_report,
)

__all__ = [
    "build_email_html",
    "build_subject",
    "markdown_to_html",
    "split_sections",
    "build_compliance_pdf",
    "build_weekly_pdf",
    "compliance_pdf_filename",
    "InvalidReportName",
    "SavedReport",
    "list_reports",
    "report_filenames",
    "resolve_report",
    "save_report",
]
