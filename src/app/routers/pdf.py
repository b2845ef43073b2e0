"""PDF endpoint: renders the compliance workflow payload as a download."""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse, Response

from src.rendering.pdf_report import build_compliance_pdf, compliance_pdf_filename

from ..schemas import ErrorResponse, GeneratePdfRequest

logger = logging.getLogger(__name__)

router = APIRouter(tags=["PDF"])


@router.post(
    "/generate-pdf",
    response_class=Response,
    responses={
        200: {"content": {"application/pdf": {}}},
        400: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
def generate_pdf(request: GeneratePdfRequest | None = None) -> Response:
    """Render the weekly compliance report PDF from workflow data."""
    if request is None or request.report_data is None:
        return JSONResponse(
            status_code=400,
            content=ErrorResponse(error="Missing reportData in request body").as_content(),
        )

    report = request.report_data.model_dump()
    try:
        pdf_bytes = build_compliance_pdf(report)
        filename = compliance_pdf_filename(report.get("report_date"))
    except Exception as e:
        logger.error(f"PDF generation error: {e}")
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error="PDF generation failed", message=str(e)
            ).as_content(),
        )

    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
