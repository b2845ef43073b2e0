"""
Shared test fixtures for the weekly report test suite.

Provides application configs pointing at temporary directories, sample
KPI records and Power BI rows, and mock LLM / HTTP fixtures. No test
talks to a real external service.
"""

from datetime import date
from unittest.mock import MagicMock

import pytest

from src.agents.analysis.metrics import WeeklyKPIs, get_mock_data
from src.app.config import AppConfig


# =============================================================================
# Config Fixtures
# =============================================================================


@pytest.fixture
def app_config(tmp_path) -> AppConfig:
    """Fully populated config with a temporary reports directory."""
    return AppConfig(
        azure_tenant_id="tenant-123",
        azure_client_id="client-456",
        azure_client_secret="secret-789",
        powerbi_workspace_id="ws-001",
        powerbi_dataset_id="ds-002",
        openai_api_key="sk-test",
        openai_model="gpt-4o",
        email_recipient="exec@example.com",
        email_from="reports@example.com",
        reports_dir=tmp_path / "reports",
    )


@pytest.fixture
def mock_config(tmp_path) -> AppConfig:
    """Config with no credentials, mock data on."""
    return AppConfig(use_mock_data=True, reports_dir=tmp_path / "reports")


# =============================================================================
# Sample Data Fixtures
# =============================================================================


@pytest.fixture
def sample_kpis() -> WeeklyKPIs:
    """Demo KPIs stamped with a fixed date."""
    return get_mock_data(today=date(2026, 10, 19))


@pytest.fixture
def anomalous_kpis(sample_kpis) -> WeeklyKPIs:
    """KPIs with a revenue drop and an order spike."""
    sample_kpis.revenue_change = -12.5
    sample_kpis.order_change = 15.0
    sample_kpis.anomalies = [
        "Revenue decreased by 12.5%",
        "Orders increased by 15%",
    ]
    return sample_kpis


@pytest.fixture
def sample_analysis() -> str:
    """Narrative in the markdown dialect the analyst is asked for."""
    return (
        "## Executive Summary\n"
        "Revenue grew **5.2%** week over week.\n"
        "\n"
        "## Key Wins & Positive Trends\n"
        "- Bikes drove **90%** of revenue\n"
        "- Orders up 3.8%\n"
        "\n"
        "## Recommended Actions\n"
        "### Immediate Actions (This Week)\n"
        "- Review return rate on Road-250\n"
    )


@pytest.fixture
def powerbi_rows() -> dict[str, list[dict]]:
    """executeQueries rows for the four DAX queries, keyed by purpose."""
    return {
        "kpis": [{
            "[Total Revenue]": 1_100_000,
            "[YTD Revenue]": 24_900_000,
            "[Total Orders]": 1_200,
            "[Total Customers]": 900,
            "[Return Rate]": 2.5,
            "[Total Cost]": 450_000,
            "[Total Profit]": 650_000,
            "[Revenue Per Customer]": 1222.22,
        }],
        "products": [
            {"'Product Lookup'[ProductName]": "Road-250 Red", "[Revenue]": 1_152_628},
            {"'Product Lookup'[ProductName]": "Mountain-200 Black", "[Revenue]": 1_373_454},
        ],
        "previous": [{"[Prev Revenue]": 1_000_000, "[Prev Orders]": 1_000}],
        "categories": [
            {"'Product Categories Lookup'[CategoryName]": "Bikes",
             "[Orders]": 13_929, "[Revenue]": 22_342_809},
            {"'Product Categories Lookup'[CategoryName]": "Clothing",
             "[Orders]": 2_134, "[Revenue]": 1_285_133},
        ],
    }


# =============================================================================
# Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_llm():
    """Mock chat model returning a fixed narrative.

    Mimics the LangChain chat model interface (``invoke`` returning a
    message with ``content`` and ``usage_metadata``).
    """
    llm = MagicMock()
    response = MagicMock()
    response.content = "## Executive Summary\nSolid week."
    response.usage_metadata = {"input_tokens": 900, "output_tokens": 100, "total_tokens": 1000}
    llm.invoke.return_value = response
    return llm


@pytest.fixture
def make_http_response():
    """Factory for requests.Response stand-ins."""

    def _create(status_code: int = 200, payload=None, text: str = ""):
        response = MagicMock()
        response.status_code = status_code
        response.ok = 200 <= status_code < 300
        response.json.return_value = payload
        response.text = text
        return response

    return _create


# =============================================================================
# Pytest Configuration
# =============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "llm: marks tests as requiring an LLM API key")
