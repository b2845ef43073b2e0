"""Tests for /api/generate-report and /api/reports endpoints."""

from unittest.mock import patch

import pytest

from src.clients.graph_mail import EmailResult
from src.exceptions import ExternalServiceError

ANALYSIS = "## Executive Summary\nRevenue grew **5.2%**.\n- Orders up 3.8%"


@pytest.fixture
def patched_analysis():
    with patch(
        "src.agents.pipelines.report_pipeline.generate_analysis",
        return_value=ANALYSIS,
    ) as mock_analysis:
        yield mock_analysis


class TestGenerateReport:
    """POST /api/generate-report against mock KPIs and a stubbed LLM."""

    def test_generate_report_returns_200(self, client, api_config, patched_analysis):
        r = client.post("/api/generate-report", json={})
        assert r.status_code == 200

    def test_generate_report_without_body(self, client, api_config, patched_analysis):
        r = client.post("/api/generate-report")
        assert r.status_code == 200
        assert r.json()["email"] == {"sent": False}

    def test_generate_report_response_schema(
        self, client, api_config, patched_analysis
    ):
        data = client.post("/api/generate-report", json={}).json()
        assert data["success"] is True
        assert data["message"] == "Report generated successfully"
        assert data["duration"].endswith("s")
        assert data["reportFile"].startswith("weekly-report-")
        assert data["reportFile"].endswith(".html")
        assert data["dataFile"].endswith("-data.json")
        assert data["metrics"]["ytdRevenue"] == 24_900_000
        assert data["metrics"]["revenueChange"] == "5.2%"
        assert data["metrics"]["orderChange"] == "3.8%"
        assert data["email"] == {"sent": False}

    def test_generate_report_writes_files(self, client, api_config, patched_analysis):
        data = client.post("/api/generate-report", json={}).json()
        assert (api_config.reports_dir / data["reportFile"]).exists()
        assert (api_config.reports_dir / data["dataFile"]).exists()

    def test_generate_report_with_pdf(self, client, api_config, patched_analysis):
        data = client.post("/api/generate-report", json={"includePdf": True}).json()
        assert data["pdfFile"].endswith(".pdf")
        pdf = (api_config.reports_dir / data["pdfFile"]).read_bytes()
        assert pdf.startswith(b"%PDF")

    def test_generate_report_sends_email(self, client, api_config, patched_analysis):
        result = EmailResult(
            success=True,
            recipient="exec@example.com",
            subject="Weekly Performance Report - Monday 19 October 2026",
        )
        with patch(
            "src.agents.pipelines.report_pipeline.send_email", return_value=result
        ) as mock_send:
            data = client.post(
                "/api/generate-report", json={"sendEmailFlag": True}
            ).json()

        mock_send.assert_called_once()
        assert data["email"]["sent"] is True
        assert data["email"]["recipient"] == "exec@example.com"
        assert data["email"]["subject"].startswith("Weekly Performance Report")

    def test_generate_report_failure_returns_500(self, client, api_config):
        with patch(
            "src.agents.pipelines.report_pipeline.generate_analysis",
            side_effect=ExternalServiceError("OpenAI API failed", 429, "rate limited"),
        ):
            r = client.post("/api/generate-report", json={})

        assert r.status_code == 500
        data = r.json()
        assert data["success"] is False
        assert "429" in data["error"]
        assert "timestamp" in data


class TestListReports:
    """GET /api/reports."""

    def test_empty_when_directory_missing(self, client, api_config):
        api_config.reports_dir = api_config.reports_dir / "missing"
        data = client.get("/api/reports").json()
        assert data == {"success": True, "reports": [], "count": 0}

    def test_lists_html_newest_first(self, client, api_config):
        for name in [
            "weekly-report-2026-10-05.html",
            "weekly-report-2026-10-12.html",
            "weekly-report-2026-10-12-data.json",
        ]:
            (api_config.reports_dir / name).write_text("x")

        data = client.get("/api/reports").json()
        assert data["reports"] == [
            "weekly-report-2026-10-12.html",
            "weekly-report-2026-10-05.html",
        ]
        assert data["count"] == 2


class TestGetReport:
    """GET /api/reports/{filename}."""

    def test_get_html_report(self, client, api_config):
        (api_config.reports_dir / "weekly-report-2026-10-19.html").write_text(
            "<html>ok</html>"
        )
        r = client.get("/api/reports/weekly-report-2026-10-19.html")
        assert r.status_code == 200
        assert r.headers["content-type"].startswith("text/html")
        assert r.text == "<html>ok</html>"

    def test_get_json_report(self, client, api_config):
        (api_config.reports_dir / "weekly-report-2026-10-19-data.json").write_text(
            '{"data": {"orders": 1}, "analysis": "hi"}'
        )
        r = client.get("/api/reports/weekly-report-2026-10-19-data.json")
        assert r.status_code == 200
        assert r.json() == {"data": {"orders": 1}, "analysis": "hi"}

    def test_get_missing_report_404(self, client, api_config):
        r = client.get("/api/reports/weekly-report-1999-01-01.html")
        assert r.status_code == 404
        assert r.json() == {"success": False, "error": "Report not found"}

    def test_traversal_rejected_400(self, client, api_config):
        r = client.get("/api/reports/..secret.html")
        assert r.status_code == 400
        assert r.json() == {"success": False, "error": "Invalid filename"}
