"""Azure AD client-credentials authentication for Power BI and Graph."""

import logging

from src.app.config import AppConfig

from .http import request_json

logger = logging.getLogger("weekly_report.clients")

TOKEN_URL = "https://login.microsoftonline.com/{tenant_id}/oauth2/v2.0/token"
POWERBI_SCOPE = "https://analysis.windows.net/powerbi/api/.default"
GRAPH_SCOPE = "https://graph.microsoft.com/.default"


def get_access_token(config: AppConfig, scope: str) -> str:
    """Get an app-only access token using the client credentials flow.

    Args:
        config: Application config holding the Azure AD app registration.
        scope: Resource scope, e.g. POWERBI_SCOPE.

    Returns:
        Bearer access token.
    """
    config.require("azure")

    data = request_json(
        "POST",
        TOKEN_URL.format(tenant_id=config.azure_tenant_id),
        "Failed to get access token",
        service="azure_ad",
        form={
            "grant_type": "client_credentials",
            "client_id": config.azure_client_id,
            "client_secret": config.azure_client_secret,
            "scope": scope,
        },
        timeout=config.request_timeout,
    )
    return data["access_token"]


def get_graph_token(config: AppConfig) -> str:
    """Access token for Microsoft Graph (email)."""
    return get_access_token(config, GRAPH_SCOPE)
