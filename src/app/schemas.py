"""
Pydantic request and response models for the weekly report API.

Field names are snake_case in Python and camelCase on the wire, so the
browser client and workflow webhooks keep their existing payloads.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Report generation
# =============================================================================


class GenerateReportRequest(CamelModel):
    send_email_flag: bool = False
    include_pdf: bool = False


class MetricsSummary(CamelModel):
    ytd_revenue: float
    orders: float
    customers: float
    return_rate: float
    revenue_change: str
    order_change: str


class EmailStatus(CamelModel):
    sent: bool
    recipient: str | None = None
    subject: str | None = None


class GenerateReportResponse(CamelModel):
    success: bool = True
    message: str = "Report generated successfully"
    duration: str
    report_file: str
    data_file: str
    pdf_file: str | None = None
    metrics: MetricsSummary
    email: EmailStatus
    timestamp: str


# =============================================================================
# Compliance PDF
# =============================================================================


class StoreRecord(BaseModel):
    model_config = ConfigDict(extra="allow")

    store_name: str | None = None
    budget_hours: float | None = None
    worked_hours: float | None = None
    payroll_variance_pct: float | None = None
    manual_clock_pct: float | None = None
    overall_status: str | None = None


class AreaSummary(BaseModel):
    model_config = ConfigDict(extra="allow")

    area_id: int | str | None = None
    area: str | None = None
    stores: list[StoreRecord] = Field(default_factory=list)
    area_payroll_variance: float | None = None
    area_payroll_variance_pct: float | None = None
    area_manual_clock_pct: float | None = None
    red_flags: int | None = None
    yellow_flags: int | None = None
    green_flags: int | None = None


class ComplianceReportData(BaseModel):
    model_config = ConfigDict(extra="allow")

    report_date: str | None = None
    executive_summary: str | None = None
    areas: list[AreaSummary] = Field(default_factory=list)
    all_stores: list[StoreRecord] = Field(default_factory=list)


class GeneratePdfRequest(CamelModel):
    report_data: ComplianceReportData | None = None


# =============================================================================
# Stored reports
# =============================================================================


class ReportListResponse(CamelModel):
    success: bool = True
    reports: list[str]
    count: int


# =============================================================================
# System
# =============================================================================


class HealthResponse(CamelModel):
    status: str
    timestamp: str
    service: str


class ConfigResponse(CamelModel):
    email_recipient: str
    use_mock_data: bool


class ErrorResponse(CamelModel):
    success: bool = False
    error: str
    message: str | None = None
    timestamp: str | None = None

    def as_content(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
