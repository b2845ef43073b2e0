"""
KPI compilation and narrative analysis for the weekly report.

Deterministic week-over-week deltas and anomaly flags, plus the LLM call
that turns them into an executive narrative.
"""

from .analyzer import create_chat_model, generate_analysis
from .metrics import (
    DEFAULT_ANOMALY_THRESHOLD,
    WeeklyKPIs,
    compute_change,
    detect_anomalies,
    format_categories,
    format_report_dates,
    format_top_products,
    get_mock_data,
)

__all__ = [
    "DEFAULT_ANOMALY_THRESHOLD",
    "WeeklyKPIs",
    "compute_change",
    "detect_anomalies",
    "format_categories",
    "format_report_dates",
    "format_top_products",
    "get_mock_data",
    "create_chat_model",
    "generate_analysis",
]
