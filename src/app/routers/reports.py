"""Report API endpoints: generate, list, and fetch weekly reports."""

import logging
from pathlib import Path

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse, JSONResponse, Response

from src.rendering.storage import InvalidReportName

from ..config import AppConfig
from ..dependencies import get_agent_config, get_config, get_reports_dir
from ..schemas import (
    ErrorResponse,
    GenerateReportRequest,
    GenerateReportResponse,
    ReportListResponse,
)
from ..services import report_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Reports"])


@router.post(
    "/generate-report",
    response_model=GenerateReportResponse,
    responses={500: {"model": ErrorResponse}},
)
def generate_report(
    request: GenerateReportRequest | None = None,
    config: AppConfig = Depends(get_config),
    agent_config=Depends(get_agent_config),
):
    """Extract KPIs, generate the analysis, save the report, optionally email it."""
    request = request or GenerateReportRequest()
    try:
        data = report_service.generate_report(
            config,
            agent_config,
            send_email_flag=request.send_email_flag,
            include_pdf=request.include_pdf,
        )
    except Exception as e:
        logger.error(f"Error generating report: {e}")
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error=str(e), timestamp=report_service.utc_timestamp()
            ).as_content(),
        )
    return GenerateReportResponse(**data)


@router.get("/reports", response_model=ReportListResponse)
async def get_reports(
    reports_dir: Path = Depends(get_reports_dir),
) -> ReportListResponse:
    """List saved HTML reports, newest first."""
    return ReportListResponse(**report_service.get_report_list(reports_dir))


@router.get("/reports/{filename}")
async def get_report(
    filename: str,
    reports_dir: Path = Depends(get_reports_dir),
) -> Response:
    """Return one saved report (HTML, JSON data, or PDF)."""
    try:
        content, media_type = report_service.load_report(reports_dir, filename)
    except InvalidReportName:
        return JSONResponse(
            status_code=400,
            content=ErrorResponse(error="Invalid filename").as_content(),
        )
    except (FileNotFoundError, ValueError):
        return JSONResponse(
            status_code=404,
            content=ErrorResponse(error="Report not found").as_content(),
        )

    if media_type == "text/html":
        return HTMLResponse(content)
    if media_type == "application/json":
        return JSONResponse(content)
    return Response(content=content, media_type=media_type)
