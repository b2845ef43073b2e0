"""
Power BI KPI extraction.

Authenticates with Azure AD, runs four DAX queries against the configured
dataset, and compiles them into a WeeklyKPIs record with week-over-week
changes and anomaly flags.
"""

import logging
import re
from datetime import date

import pandas as pd
import requests

from src.agents.analysis.metrics import (
    DEFAULT_ANOMALY_THRESHOLD,
    WeeklyKPIs,
    compute_change,
    detect_anomalies,
    format_categories,
    format_report_dates,
    format_top_products,
    get_mock_data,
)
from src.app.config import AppConfig
from src.exceptions import ExternalServiceError

from .azure_auth import POWERBI_SCOPE, get_access_token
from .http import bearer, request_json

logger = logging.getLogger("weekly_report.clients.powerbi")

API_BASE = "https://api.powerbi.com/v1.0/myorg/groups/{workspace_id}"

# =============================================================================
# DAX queries
# =============================================================================

KPI_QUERY = """
EVALUATE
ROW(
  "Total Revenue", [Total Revenue],
  "YTD Revenue", [YTD Revenue],
  "Total Orders", [Total Orders],
  "Total Customers", [Total Customers],
  "Return Rate", [Return Rate],
  "Total Cost", [Total Cost],
  "Total Profit", [Total Profit],
  "Revenue Per Customer", [Revenue Per Customer]
)
"""

TOP_PRODUCTS_QUERY = """
EVALUATE
TOPN(
  10,
  SUMMARIZE(
    'Product Lookup',
    'Product Lookup'[ProductName],
    "Revenue", [Total Revenue]
  ),
  [Revenue], DESC
)
"""

PREVIOUS_PERIOD_QUERY = """
EVALUATE
ROW(
  "Prev Revenue", CALCULATE([Total Revenue], DATEADD('Calendar Lookup'[Date], -7, DAY)),
  "Prev Orders", CALCULATE([Total Orders], DATEADD('Calendar Lookup'[Date], -7, DAY))
)
"""

CATEGORY_QUERY = """
EVALUATE
SUMMARIZE(
  'Product Categories Lookup',
  'Product Categories Lookup'[CategoryName],
  "Orders", [Total Orders],
  "Revenue", [Total Revenue]
)
"""

_COLUMN_RE = re.compile(r"\[([^\]]+)\]$")


# =============================================================================
# REST calls
# =============================================================================


def _dataset_url(config: AppConfig, suffix: str = "") -> str:
    base = API_BASE.format(workspace_id=config.powerbi_workspace_id)
    return f"{base}/datasets{suffix}"


def execute_query(config: AppConfig, token: str, query: str) -> list[dict]:
    """Execute a DAX query and return the rows of the first result table."""
    data = request_json(
        "POST",
        _dataset_url(config, f"/{config.powerbi_dataset_id}/executeQueries"),
        "Power BI query failed",
        service="powerbi",
        headers=bearer(token),
        json_body={
            "queries": [{"query": query}],
            "serializerSettings": {"includeNulls": True},
        },
        timeout=config.request_timeout,
    )
    return data["results"][0]["tables"][0]["rows"]


def list_datasets(config: AppConfig, token: str) -> list[dict]:
    """List datasets in the workspace (debugging aid)."""
    data = request_json(
        "GET",
        _dataset_url(config),
        "Failed to list datasets",
        service="powerbi",
        headers=bearer(token),
        timeout=config.request_timeout,
    )
    return data.get("value", [])


def rows_to_frame(rows: list[dict]) -> pd.DataFrame:
    """Convert executeQueries rows to a DataFrame with bare column names.

    Power BI keys columns as "[Measure]" or "'Table'[Column]"; only the
    bracketed name is kept.
    """
    df = pd.DataFrame(rows)
    if df.empty:
        return df

    def _bare(name: str) -> str:
        match = _COLUMN_RE.search(name)
        return match.group(1) if match else name

    return df.rename(columns=_bare)


# =============================================================================
# Extraction
# =============================================================================


def extract_powerbi_data(
    config: AppConfig,
    use_mock: bool = False,
    today: date | None = None,
    anomaly_threshold: float = DEFAULT_ANOMALY_THRESHOLD,
    top_products_limit: int = 5,
) -> WeeklyKPIs:
    """Extract all KPI data from Power BI.

    Args:
        config: Application config.
        use_mock: Return fixed demo data instead of calling Power BI.
        today: Report date override.
        anomaly_threshold: Percent change above which a metric is flagged.
        top_products_limit: How many products to list in the report.

    Returns:
        Compiled WeeklyKPIs.
    """
    if use_mock or config.use_mock_data:
        return get_mock_data(today)

    config.require("azure", "powerbi")

    logger.info("Authenticating with Azure AD for Power BI...")
    token = get_access_token(config, POWERBI_SCOPE)
    logger.info("Authentication successful")

    datasets = list_datasets(config, token)
    for ds in datasets:
        logger.debug(f"Available dataset: {ds.get('name')} (ID: {ds.get('id')})")
    logger.debug(f"Looking for dataset ID: {config.powerbi_dataset_id}")

    logger.info("Extracting KPI measures...")
    kpis = rows_to_frame(execute_query(config, token, KPI_QUERY))
    if kpis.empty:
        raise ExternalServiceError(
            "Power BI query failed", 200, "KPI query returned no rows", "powerbi"
        )
    current = kpis.iloc[0]

    logger.info("Extracting top products...")
    top_products = rows_to_frame(execute_query(config, token, TOP_PRODUCTS_QUERY))

    logger.info("Extracting previous period data...")
    try:
        previous_frame = rows_to_frame(
            execute_query(config, token, PREVIOUS_PERIOD_QUERY)
        )
        previous = previous_frame.iloc[0] if not previous_frame.empty else None
    except (ExternalServiceError, requests.RequestException, KeyError, IndexError) as e:
        logger.warning(f"Could not get previous period data, using zeros: {e}")
        previous = None

    prev_revenue = previous.get("Prev Revenue") if previous is not None else 0
    prev_orders = previous.get("Prev Orders") if previous is not None else 0

    logger.info("Extracting category breakdown...")
    categories = rows_to_frame(execute_query(config, token, CATEGORY_QUERY))

    revenue_change = compute_change(current.get("Total Revenue"), prev_revenue)
    order_change = compute_change(current.get("Total Orders"), prev_orders)
    anomalies = detect_anomalies(
        {"Revenue": revenue_change, "Orders": order_change},
        threshold=anomaly_threshold,
    )

    if not top_products.empty and "Revenue" in top_products.columns:
        top_products = top_products.sort_values("Revenue", ascending=False)

    report_date, week_ending = format_report_dates(today)

    logger.info("Data extraction complete")

    return WeeklyKPIs(
        revenue=_num(current.get("Total Revenue")),
        ytd_revenue=_num(current.get("YTD Revenue")),
        orders=_num(current.get("Total Orders")),
        customers=_num(current.get("Total Customers")),
        return_rate=_num(current.get("Return Rate")),
        total_cost=_num(current.get("Total Cost")),
        total_profit=_num(current.get("Total Profit")),
        revenue_per_customer=_num(current.get("Revenue Per Customer")),
        revenue_change=revenue_change,
        order_change=order_change,
        top_products=format_top_products(top_products, limit=top_products_limit),
        categories=format_categories(categories),
        anomalies=anomalies,
        report_date=report_date,
        week_ending=week_ending,
    )


def _num(value) -> float:
    """Coerce a possibly-null Power BI cell to a float."""
    if value is None or pd.isna(value):
        return 0.0
    return float(value)
