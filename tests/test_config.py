"""
Tests for environment-driven configuration and the error hierarchy.

Run with: pytest tests/test_config.py -v
"""

from pathlib import Path

import pytest

from src.agents.utils import (
    format_currency,
    format_millions,
    format_number,
    safe_json_serialize,
    truncate_for_context,
)
from src.app.config import AppConfig, get_app_config
from src.exceptions import ConfigurationError, ExternalServiceError, ReportError


class TestAppConfig:
    """Tests for AppConfig loading and credential checks."""

    def test_reads_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("AZURE_TENANT_ID", "t")
        monkeypatch.setenv("EMAIL_RECIPIENT", "exec@example.com")
        monkeypatch.delenv("EMAIL_FROM", raising=False)
        monkeypatch.setenv("USE_MOCK_DATA", "TRUE")
        monkeypatch.setenv("LLM_PROVIDER", "Anthropic")
        monkeypatch.setenv("REPORTS_DIR", str(tmp_path))
        monkeypatch.setenv("PORT", "8080")
        monkeypatch.setenv("CORS_ORIGINS", "http://a.test,http://b.test")

        config = get_app_config()

        assert config.azure_tenant_id == "t"
        assert config.email_from == "exec@example.com"
        assert config.use_mock_data is True
        assert config.llm_provider == "anthropic"
        assert config.reports_dir == Path(tmp_path)
        assert config.port == 8080
        assert config.cors_origins == ["http://a.test", "http://b.test"]

    def test_defaults(self):
        config = AppConfig()
        assert config.openai_model == "gpt-4o"
        assert config.port == 3001
        assert config.api_prefix == "/api"
        assert config.use_mock_data is False

    def test_missing_lists_unset_variables(self):
        config = AppConfig(azure_tenant_id="t")
        assert config.missing("azure") == ["AZURE_CLIENT_ID", "AZURE_CLIENT_SECRET"]

    def test_missing_ignores_unknown_groups(self):
        assert AppConfig().missing("palm") == []

    def test_require_raises_with_instructions(self):
        with pytest.raises(ConfigurationError) as exc_info:
            AppConfig().require("email")
        assert exc_info.value.missing == ["EMAIL_RECIPIENT"]
        assert ".env.example" in str(exc_info.value)

    def test_require_passes_when_set(self, app_config):
        app_config.require("azure", "powerbi", "openai", "email")


class TestExceptions:
    """Tests for the error hierarchy."""

    def test_hierarchy(self):
        assert issubclass(ConfigurationError, ReportError)
        assert issubclass(ExternalServiceError, ReportError)

    def test_external_service_message(self):
        err = ExternalServiceError("Power BI query failed", 400, "bad DAX", "powerbi")
        assert str(err) == "Power BI query failed: 400 - bad DAX"
        assert err.service == "powerbi"


class TestFormatting:
    """Tests for number formatting shared by prompts and templates."""

    @pytest.mark.parametrize("value, expected", [
        (25200, "25,200"),
        (1431.5, "1,431.5"),
        (2.17, "2.17"),
        (0.12345, "0.123"),
        (None, "0"),
        (float("nan"), "0"),
        ("n/a", "n/a"),
    ])
    def test_format_number(self, value, expected):
        assert format_number(value) == expected

    def test_format_currency(self):
        assert format_currency(1_373_454) == "$1,373,454"

    def test_format_millions(self):
        assert format_millions(24_900_000) == "$24.9M"
        assert format_millions(None) == "$0.0M"

    def test_truncate(self):
        assert truncate_for_context("abcdef", 3) == "abc..."
        assert truncate_for_context("abc", 3) == "abc"

    def test_safe_json_serialize(self, sample_kpis):
        import numpy as np

        payload = safe_json_serialize({
            "kpis": sample_kpis,
            "count": np.int64(3),
            "path": Path("/tmp/x"),
        })
        assert payload["count"] == 3
        assert payload["path"] == "/tmp/x"
        assert payload["kpis"]["orders"] == 25_200
