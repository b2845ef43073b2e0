"""
HTML rendering for the weekly performance report.

Builds the full email body: header, four KPI cards with week-over-week
arrows, the converted narrative, and a footer with a report ID.
"""

import html
import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from src.agents.utils import format_millions, format_number

from .markdown import markdown_to_html

if TYPE_CHECKING:
    from src.agents.analysis.metrics import WeeklyKPIs

logger = logging.getLogger("weekly_report.rendering")

REPORT_TITLE = "Weekly Performance Report"

_STYLES = """
    body {
      font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Oxygen, Ubuntu, sans-serif;
      max-width: 800px;
      margin: 0 auto;
      padding: 20px;
      background: #f5f5f5;
      color: #333;
    }
    .container { background: white; border-radius: 8px; box-shadow: 0 2px 4px rgba(0,0,0,0.1); overflow: hidden; }
    .header { background: linear-gradient(135deg, #2c3e50 0%, #3498db 100%); color: white; padding: 30px; text-align: center; }
    .header h1 { margin: 0 0 10px 0; font-size: 28px; }
    .header p { margin: 0; opacity: 0.9; }
    .kpi-grid { display: grid; grid-template-columns: repeat(4, 1fr); gap: 15px; padding: 20px; background: #f8f9fa; }
    .kpi-card { background: white; padding: 15px; border-radius: 8px; text-align: center; box-shadow: 0 1px 3px rgba(0,0,0,0.1); }
    .kpi-value { font-size: 24px; font-weight: bold; color: #2c3e50; margin-bottom: 5px; }
    .kpi-label { font-size: 11px; color: #7f8c8d; text-transform: uppercase; letter-spacing: 0.5px; }
    .kpi-change { font-size: 12px; margin-top: 5px; font-weight: 500; }
    .positive { color: #27ae60; }
    .negative { color: #e74c3c; }
    .neutral { color: #7f8c8d; }
    .content { padding: 30px; }
    .section { margin-bottom: 25px; }
    .section h2 { color: #2c3e50; border-bottom: 2px solid #3498db; padding-bottom: 10px; margin-top: 0; font-size: 18px; }
    .section h3 { color: #34495e; font-size: 15px; }
    .section p, .section ul, .section ol { line-height: 1.6; color: #555; }
    .section ul, .section ol { padding-left: 20px; }
    .section li { margin-bottom: 8px; }
    .footer { text-align: center; padding: 20px; background: #f8f9fa; color: #95a5a6; font-size: 12px; border-top: 1px solid #eee; }
    @media (max-width: 600px) {
      .kpi-grid { grid-template-columns: repeat(2, 1fr); }
    }
"""


def build_subject(data: "WeeklyKPIs") -> str:
    return f"{REPORT_TITLE} - {data.week_ending}"


def _change_badge(change: float) -> str:
    """WoW change line: green up-arrow for >= 0, red down-arrow otherwise."""
    positive = float(change) >= 0
    css = "positive" if positive else "negative"
    arrow = "&#8593;" if positive else "&#8595;"
    return (
        f'<div class="kpi-change {css}">'
        f"{arrow} {format_number(abs(float(change)))}% WoW</div>"
    )


def _kpi_card(value: str, label: str, change_html: str) -> str:
    return (
        '<div class="kpi-card">'
        f'<div class="kpi-value">{value}</div>'
        f'<div class="kpi-label">{label}</div>'
        f"{change_html}"
        "</div>"
    )


def build_email_html(
    data: "WeeklyKPIs",
    analysis: str,
    generated_at: datetime | None = None,
) -> str:
    """Render the weekly report as a standalone HTML document.

    Args:
        data: Compiled KPIs.
        analysis: Markdown narrative from the analyst.
        generated_at: Timestamp for the footer (defaults to now, UTC).

    Returns:
        HTML string suitable for an email body or a saved report.
    """
    generated_at = generated_at or datetime.now(timezone.utc)
    report_id = int(generated_at.timestamp() * 1000)
    neutral = '<div class="kpi-change neutral">&#8212;</div>'

    cards = "\n      ".join([
        _kpi_card(format_millions(data.ytd_revenue), "Revenue YTD",
                  _change_badge(data.revenue_change)),
        _kpi_card(format_number(data.orders), "Total Orders",
                  _change_badge(data.order_change)),
        _kpi_card(format_number(data.customers), "Customers", neutral),
        _kpi_card(f"{format_number(data.return_rate)}%", "Return Rate", neutral),
    ])

    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{REPORT_TITLE} - {html.escape(data.week_ending)}</title>
  <style>{_STYLES}  </style>
</head>
<body>
  <div class="container">
    <div class="header">
      <h1>{REPORT_TITLE}</h1>
      <p>{html.escape(data.week_ending)}</p>
    </div>

    <div class="kpi-grid">
      {cards}
    </div>

    <div class="content">
{markdown_to_html(analysis)}
    </div>

    <div class="footer">
      <p>Generated automatically by Weekly Report Automation System</p>
      <p>Report ID: {report_id} | {generated_at.isoformat()}</p>
    </div>
  </div>
</body>
</html>
"""
