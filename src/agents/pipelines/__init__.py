"""Weekly report pipeline (extract → analyze → deliver)."""

from .report_pipeline import create_report_pipeline, run_report_pipeline

__all__ = [
    "create_report_pipeline",
    "run_report_pipeline",
]
