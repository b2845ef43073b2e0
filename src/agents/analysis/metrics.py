"""
Weekly KPI model, week-over-week deltas, and anomaly flags.

All functions in this module are deterministic, with no HTTP or LLM calls.
"""

import logging
from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any

import pandas as pd

from ..utils import format_currency, format_number

logger = logging.getLogger("weekly_report.analysis")

# Absolute week-over-week change (in percent) above which a metric is flagged
DEFAULT_ANOMALY_THRESHOLD = 10.0


@dataclass
class WeeklyKPIs:
    """Everything the narrative and the report templates need."""

    # Current metrics
    revenue: float
    ytd_revenue: float
    orders: float
    customers: float
    return_rate: float
    total_cost: float
    total_profit: float
    revenue_per_customer: float

    # Week-over-week changes, in percent
    revenue_change: float
    order_change: float

    # Pre-formatted lists
    top_products: str
    categories: str
    anomalies: list[str] = field(default_factory=list)

    # Metadata
    report_date: str = ""           # YYYY-MM-DD
    week_ending: str = ""           # e.g. "Monday 19 October 2026"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def compute_change(current: float | None, previous: float | None) -> float:
    """Percentage change from previous to current, rounded to one decimal.

    Returns 0.0 when there is no usable previous value.
    """
    if current is None or previous is None or pd.isna(previous) or previous <= 0:
        return 0.0
    if pd.isna(current):
        return 0.0
    return round((float(current) - float(previous)) / float(previous) * 100, 1)


def detect_anomalies(
    changes: dict[str, float],
    threshold: float = DEFAULT_ANOMALY_THRESHOLD,
) -> list[str]:
    """Describe every change whose magnitude exceeds the threshold.

    Args:
        changes: Metric label -> percent change, e.g. {"Revenue": 12.5}.
        threshold: Strict lower bound on abs(change).

    Returns:
        Messages like "Revenue increased by 12.5%".
    """
    anomalies = []
    for label, change in changes.items():
        if abs(change) > threshold:
            direction = "increased" if change > 0 else "decreased"
            anomalies.append(f"{label} {direction} by {format_number(abs(change))}%")
    if anomalies:
        logger.info(f"Detected {len(anomalies)} anomalies")
    return anomalies


def format_top_products(df: pd.DataFrame, limit: int = 5) -> str:
    """Numbered "1. Name - $1,234" lines for the best-selling products."""
    if df.empty:
        return "No product data available"

    lines = []
    for i, (_, row) in enumerate(df.head(limit).iterrows(), start=1):
        lines.append(
            f"{i}. {row.get('ProductName', 'Unknown')} - "
            f"{format_currency(row.get('Revenue'))}"
        )
    return "\n".join(lines)


def format_categories(df: pd.DataFrame) -> str:
    """Bulleted "- Bikes: 13,929 orders, $22,342,809" lines."""
    if df.empty:
        return "No category data available"

    return "\n".join(
        f"- {row['CategoryName']}: {format_number(row['Orders'])} orders, "
        f"{format_currency(row['Revenue'])}"
        for _, row in df.iterrows()
    )


def format_report_dates(today: date | None = None) -> tuple[str, str]:
    """Return (ISO report date, long week-ending label)."""
    today = today or date.today()
    week_ending = f"{today:%A} {today.day} {today:%B} {today.year}"
    return today.isoformat(), week_ending


def get_mock_data(today: date | None = None) -> WeeklyKPIs:
    """Fixed demo figures used when Power BI is unavailable."""
    logger.info("Using MOCK DATA for testing...")
    report_date, week_ending = format_report_dates(today)
    return WeeklyKPIs(
        revenue=24_900_000,
        ytd_revenue=24_900_000,
        orders=25_200,
        customers=17_400,
        return_rate=2.17,
        total_cost=10_500_000,
        total_profit=14_400_000,
        revenue_per_customer=1431,
        revenue_change=5.2,
        order_change=3.8,
        top_products=(
            "1. Mountain-200 Black - $1,373,454\n"
            "2. Mountain-200 Silver - $1,339,394\n"
            "3. Road-250 Red - $1,152,628\n"
            "4. Road-350-W Yellow - $1,082,627\n"
            "5. Touring-1000 Blue - $932,453"
        ),
        categories=(
            "- Bikes: 13,929 orders, $22,342,809\n"
            "- Accessories: 9,137 orders, $1,272,058\n"
            "- Clothing: 2,134 orders, $1,285,133"
        ),
        anomalies=[],
        report_date=report_date,
        week_ending=week_ending,
    )
