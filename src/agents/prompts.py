"""
Prompts for the weekly executive report analyst.

The system prompt is a module-level constant; the user prompt is built
from a WeeklyKPIs record so the numbers quoted to the model are exactly
the ones shown on the report's KPI cards.
"""

from typing import TYPE_CHECKING

from .utils import format_currency, format_number

if TYPE_CHECKING:
    from .analysis.metrics import WeeklyKPIs


ANALYST_SYSTEM_PROMPT: str = """You are a senior business analyst and strategic advisor \
generating comprehensive executive weekly reports for retail operations. Your reports \
are thorough, data-driven, and provide deep insights that drive strategic decisions.

Key principles:
- Provide comprehensive analysis with specific numbers and percentages
- Include trend analysis and historical context where relevant
- Offer multiple levels of recommendations (immediate, short-term, strategic)
- Identify root causes, not just symptoms
- Quantify business impact in dollar terms where possible
- Include competitive and market context
- Flag risks with severity levels and mitigation strategies
- Highlight opportunities for growth and optimization"""


REPORT_SECTIONS_INSTRUCTIONS: str = """Please provide a DETAILED and COMPREHENSIVE report \
with the following sections:

## Executive Summary
Provide a thorough 5-6 sentence overview of overall business performance, highlighting \
the most critical insights and their strategic implications.

## Financial Performance Analysis
- Detailed breakdown of revenue performance with trend analysis
- Profit margin analysis and cost efficiency metrics
- Revenue per customer trends and customer lifetime value insights
- Compare current performance against targets/benchmarks

## Key Wins & Positive Trends
- 4-5 detailed bullet points with specific metrics
- Explain WHY these are wins and their business impact
- Identify what's driving these successes

## Areas of Concern & Risk Assessment
- 4-5 detailed bullet points with severity indicators (High/Medium/Low)
- Root cause analysis for each concern
- Potential business impact if not addressed
- Include the return rate issues and product-specific problems

## Product Performance Deep Dive
- Analysis of top performers and why they're succeeding
- Underperforming products and categories
- Return rate analysis by product with recommendations
- Inventory and demand insights

## Customer Insights
- Customer acquisition and retention trends
- Revenue per customer analysis
- Customer segment performance
- Opportunities to increase customer value

## Recommended Actions
Organize into three tiers:
### Immediate Actions (This Week)
- 3-4 specific, tactical actions with expected outcomes

### Short-Term Initiatives (Next 30 Days)
- 3-4 strategic initiatives with resource requirements

### Strategic Recommendations (Next Quarter)
- 2-3 longer-term strategic moves with projected ROI

## Risk Mitigation Plan
- Prioritized list of risks with mitigation strategies
- Timeline and ownership recommendations

Format using markdown headers (##) and subheaders (###). Use bullet points, bold text \
for emphasis, and include specific numbers throughout."""


def build_user_prompt(data: "WeeklyKPIs") -> str:
    """Build the analysis request for one week of KPIs."""
    anomalies = (
        "\n".join(data.anomalies)
        if data.anomalies
        else "No significant anomalies detected"
    )
    ranked = sum(1 for line in data.top_products.splitlines() if line[:1].isdigit())
    products_heading = (
        f"Top {ranked} Products by Revenue" if ranked else "Top Products by Revenue"
    )

    return f"""Generate a comprehensive weekly executive report based on this performance data:

## Current Week Metrics
- Revenue YTD: {format_currency(data.ytd_revenue)}
- Total Orders: {format_number(data.orders)}
- Total Customers: {format_number(data.customers)}
- Return Rate: {format_number(data.return_rate)}%
- Revenue per Customer: ${float(data.revenue_per_customer):.2f}
- Total Profit: {format_currency(data.total_profit)}
- Total Cost: {format_currency(data.total_cost)}

## Week-over-Week Changes
- Revenue Change: {data.revenue_change}%
- Order Change: {data.order_change}%

## {products_heading}
{data.top_products}

## Category Breakdown
{data.categories}

## Anomalies Detected
{anomalies}

---

{REPORT_SECTIONS_INSTRUCTIONS}"""
