"""Tests for API request/response models."""

import pytest
from pydantic import ValidationError

from src.app.schemas import (
    ComplianceReportData,
    ErrorResponse,
    GeneratePdfRequest,
    GenerateReportRequest,
    GenerateReportResponse,
)


class TestRequestModels:
    """Camel-case request payloads."""

    def test_generate_report_defaults(self):
        request = GenerateReportRequest()
        assert request.send_email_flag is False
        assert request.include_pdf is False

    def test_generate_report_accepts_camel_case(self):
        request = GenerateReportRequest.model_validate(
            {"sendEmailFlag": True, "includePdf": True}
        )
        assert request.send_email_flag is True
        assert request.include_pdf is True

    def test_generate_report_rejects_non_boolean(self):
        with pytest.raises(ValidationError):
            GenerateReportRequest.model_validate({"sendEmailFlag": "maybe"})

    def test_pdf_request_keeps_snake_case_payload(self):
        request = GeneratePdfRequest.model_validate({
            "reportData": {
                "report_date": "2026-10-19",
                "areas": [{"area": "North", "stores": [{"store_name": "Leeds"}]}],
                "all_stores": [{"store_name": "Leeds", "overall_status": "RED"}],
                "workflow_run": "abc",
            }
        })
        data = request.report_data
        assert isinstance(data, ComplianceReportData)
        assert data.areas[0].stores[0].store_name == "Leeds"
        assert data.model_dump()["workflow_run"] == "abc"

    def test_pdf_request_missing_report_data(self):
        assert GeneratePdfRequest.model_validate({}).report_data is None


class TestResponseModels:
    """Camel-case serialization."""

    def test_generate_report_response_aliases(self):
        response = GenerateReportResponse(
            duration="1.2s",
            report_file="weekly-report-2026-10-19.html",
            data_file="weekly-report-2026-10-19-data.json",
            metrics={
                "ytd_revenue": 1.0,
                "orders": 2,
                "customers": 3,
                "return_rate": 2.17,
                "revenue_change": "5.2%",
                "order_change": "3.8%",
            },
            email={"sent": False},
            timestamp="2026-10-19T00:00:00+00:00",
        )
        dumped = response.model_dump(by_alias=True)
        assert dumped["reportFile"] == "weekly-report-2026-10-19.html"
        assert dumped["metrics"]["ytdRevenue"] == 1.0
        assert dumped["success"] is True

    def test_error_response_drops_empty_fields(self):
        content = ErrorResponse(error="Invalid filename").as_content()
        assert content == {"success": False, "error": "Invalid filename"}
