"""
Tests for the weekly report LangGraph pipeline and its CLI.

The LLM and Graph mail calls are patched; KPIs come from the demo fixture.

Run with: pytest tests/test_report_pipeline.py -v
"""

from unittest.mock import patch

import pytest

from src.agents.config import AgentConfig
from src.agents.pipelines.report_pipeline import (
    create_report_pipeline,
    deliver_report_node,
    extract_data_node,
    generate_analysis_node,
    main,
    run_report_pipeline,
)
from src.agents.state import create_initial_state
from src.clients.graph_mail import EmailResult
from src.exceptions import ConfigurationError, ExternalServiceError

PIPELINE = "src.agents.pipelines.report_pipeline"


@pytest.fixture
def patched_analysis(sample_analysis):
    with patch(f"{PIPELINE}.generate_analysis", return_value=sample_analysis) as mock:
        yield mock


# =============================================================================
# TestState
# =============================================================================


class TestState:
    """Tests for the initial pipeline state."""

    def test_defaults(self, mock_config):
        state = create_initial_state(mock_config)
        assert state["save_local"] is True
        assert state["send_email"] is False
        assert state["include_pdf"] is False
        assert isinstance(state["agent_config"], AgentConfig)
        assert state["data"] is None
        assert state["metadata"] == {}


# =============================================================================
# TestNodes
# =============================================================================


class TestNodes:
    """Tests for individual graph nodes."""

    def test_extract_node_uses_mock_data(self, mock_config):
        state = create_initial_state(mock_config, use_mock=True)
        result = extract_data_node(state)
        assert result["data"].ytd_revenue == 24_900_000

    def test_extract_node_passes_agent_settings(self, mock_config, sample_kpis):
        state = create_initial_state(
            mock_config, AgentConfig(anomaly_threshold=5.0, top_products_count=3)
        )
        with patch(
            f"{PIPELINE}.extract_powerbi_data", return_value=sample_kpis
        ) as mock_extract:
            extract_data_node(state)

        kwargs = mock_extract.call_args.kwargs
        assert kwargs["anomaly_threshold"] == 5.0
        assert kwargs["top_products_limit"] == 3

    def test_analysis_node(self, mock_config, sample_kpis, patched_analysis):
        state = create_initial_state(mock_config)
        state["data"] = sample_kpis
        result = generate_analysis_node(state)
        assert result["analysis"].startswith("## Executive Summary")
        patched_analysis.assert_called_once()

    def test_deliver_node_saves_without_email(
        self, mock_config, sample_kpis, sample_analysis
    ):
        state = create_initial_state(mock_config)
        state.update(data=sample_kpis, analysis=sample_analysis)
        with patch(f"{PIPELINE}.send_email") as mock_send:
            result = deliver_report_node(state)

        mock_send.assert_not_called()
        assert result["email"] is None
        assert result["saved"].html_path.exists()

    def test_deliver_node_emails_without_saving(
        self, app_config, sample_kpis, sample_analysis
    ):
        state = create_initial_state(app_config, save_local=False, send_email=True)
        state.update(data=sample_kpis, analysis=sample_analysis)
        email = EmailResult(True, "exec@example.com", "Weekly Performance Report - x")
        with patch(f"{PIPELINE}.send_email", return_value=email):
            result = deliver_report_node(state)

        assert result["saved"] is None
        assert result["email"] is email
        assert not app_config.reports_dir.exists()


# =============================================================================
# TestPipeline
# =============================================================================


class TestPipeline:
    """Tests for the compiled graph and the convenience runner."""

    def test_graph_compiles(self):
        graph = create_report_pipeline()
        assert graph is not None

    def test_run_end_to_end_dry(self, mock_config, patched_analysis):
        state = run_report_pipeline(mock_config, save_local=True, use_mock=True)

        assert state["data"].orders == 25_200
        assert state["analysis"].startswith("## Executive Summary")
        assert state["saved"].report_file.startswith("weekly-report-")
        assert state.get("email") is None
        assert state["metadata"]["duration_seconds"] >= 0

    def test_run_with_pdf(self, mock_config, patched_analysis):
        state = run_report_pipeline(mock_config, include_pdf=True, use_mock=True)
        assert state["saved"].pdf_path.read_bytes().startswith(b"%PDF")

    def test_analysis_failure_stops_before_delivery(self, mock_config):
        with patch(
            f"{PIPELINE}.generate_analysis",
            side_effect=ExternalServiceError("OpenAI API failed", 500, "boom"),
        ), patch(f"{PIPELINE}.save_report") as mock_save:
            with pytest.raises(ExternalServiceError):
                run_report_pipeline(mock_config, use_mock=True)

        mock_save.assert_not_called()

    def test_missing_credentials_without_mock(self, tmp_path):
        from src.app.config import AppConfig

        with pytest.raises(ConfigurationError, match="AZURE_TENANT_ID"):
            run_report_pipeline(AppConfig(reports_dir=tmp_path))


# =============================================================================
# TestCli
# =============================================================================


class TestCli:
    """Tests for the command-line entry point."""

    def test_dry_run_saves_and_skips_email(self, sample_kpis, sample_analysis):
        final = {"data": sample_kpis, "analysis": sample_analysis,
                 "saved": None, "email": None}
        with patch(f"{PIPELINE}.run_report_pipeline", return_value=final) as mock_run:
            assert main(["--dry-run", "--mock"]) == 0

        kwargs = mock_run.call_args.kwargs
        assert kwargs["send_email"] is False
        assert kwargs["save_local"] is True
        assert kwargs["use_mock"] is True

    def test_default_run_emails_without_saving(self, sample_kpis, sample_analysis):
        final = {"data": sample_kpis, "analysis": sample_analysis,
                 "saved": None, "email": None}
        with patch(f"{PIPELINE}.run_report_pipeline", return_value=final) as mock_run:
            assert main([]) == 0

        kwargs = mock_run.call_args.kwargs
        assert kwargs["send_email"] is True
        assert kwargs["save_local"] is False

    def test_pdf_flag_saves_locally(self, sample_kpis, sample_analysis):
        final = {"data": sample_kpis, "analysis": sample_analysis,
                 "saved": None, "email": None}
        with patch(f"{PIPELINE}.run_report_pipeline", return_value=final) as mock_run:
            main(["--pdf"])

        kwargs = mock_run.call_args.kwargs
        assert kwargs["save_local"] is True
        assert kwargs["include_pdf"] is True

    def test_failure_returns_exit_code_one(self):
        with patch(
            f"{PIPELINE}.run_report_pipeline",
            side_effect=ConfigurationError(["OPENAI_API_KEY"]),
        ):
            assert main(["--dry-run"]) == 1

    def test_failure_logs_traceback(self, caplog):
        with patch(
            f"{PIPELINE}.run_report_pipeline",
            side_effect=ExternalServiceError("Power BI query failed", 401, "Unauthorized"),
        ):
            assert main(["--dry-run"]) == 1

        errors = [r for r in caplog.records if r.levelname == "ERROR" and r.exc_info]
        assert len(errors) == 1
        assert errors[0].exc_info[0] is ExternalServiceError
        assert "Power BI query failed" in errors[0].getMessage()
