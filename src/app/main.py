"""
FastAPI application factory for the weekly report API.

Creates the app with lifespan, CORS, routers, and error handlers. Used
for webhook-triggered report runs and by the browser front-end.

Usage:
    uvicorn src.app.main:app --reload --host 0.0.0.0 --port 3001
    USE_MOCK_DATA=true python -m src.app.main
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import AppConfig, get_app_config
from .dependencies import get_config
from .routers import pdf, reports
from .schemas import ConfigResponse, ErrorResponse, HealthResponse
from .services.report_service import utc_timestamp

logger = logging.getLogger(__name__)

SERVICE_NAME = "Weekly Report Automation API"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Log the effective configuration on startup."""
    config = get_config()

    if config.use_mock_data:
        logger.info("Running with mock data, Power BI will not be queried")

    missing = config.missing("azure", "powerbi", config.llm_provider, "email")
    if missing:
        logger.warning(f"Missing environment variables: {', '.join(missing)}")

    logger.info(f"Reports directory: {config.reports_dir}")

    yield

    logger.info(f"{SERVICE_NAME} shutting down")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    config = get_app_config()

    app = FastAPI(
        title=SERVICE_NAME,
        description="Power BI KPIs + AI analysis, delivered as HTML, PDF, or email",
        version="1.0.0",
        lifespan=lifespan,
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials="*" not in config.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    prefix = config.api_prefix
    app.include_router(reports.router, prefix=prefix)
    app.include_router(pdf.router, prefix=prefix)

    # Health check
    @app.get(f"{prefix}/health", response_model=HealthResponse, tags=["System"])
    async def health_check() -> HealthResponse:
        return HealthResponse(
            status="healthy",
            timestamp=utc_timestamp(),
            service=SERVICE_NAME,
        )

    # Non-sensitive configuration for the front-end
    @app.get(f"{prefix}/config", response_model=ConfigResponse, tags=["System"])
    async def get_public_config(
        app_config: AppConfig = Depends(get_config),
    ) -> ConfigResponse:
        return ConfigResponse(
            email_recipient=app_config.email_recipient,
            use_mock_data=app_config.use_mock_data,
        )

    # Exception handlers
    @app.exception_handler(404)
    async def not_found_handler(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(
            status_code=404,
            content=ErrorResponse(error="Not Found", message=str(exc)).as_content(),
        )

    @app.exception_handler(500)
    async def server_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(f"Internal server error: {exc}")
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error="Internal Server Error",
                message=str(exc) if config.debug else None,
                timestamp=utc_timestamp(),
            ).as_content(),
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    from rich.logging import RichHandler

    logging.basicConfig(
        level=logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True)],
    )

    settings = get_app_config()
    logger.info(f"{SERVICE_NAME} on http://localhost:{settings.port}{settings.api_prefix}")
    uvicorn.run(app, host=settings.host, port=settings.port)
