"""Shared HTTP helpers for the Azure AD, Power BI, and Graph clients.

Requests are single-attempt: a non-2xx response is turned into an
ExternalServiceError carrying the status code and response body.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from src.exceptions import ExternalServiceError

logger = logging.getLogger("weekly_report.clients")

DEFAULT_TIMEOUT = 60.0


def request_json(
    method: str,
    url: str,
    action: str,
    service: str = "",
    *,
    headers: dict[str, str] | None = None,
    json_body: Any = None,
    form: dict[str, str] | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    expect_json: bool = True,
) -> Any:
    """Send one HTTP request and return the decoded JSON body.

    Args:
        method: HTTP method.
        url: Absolute URL.
        action: Human-readable failure prefix, e.g. "Power BI query failed".
        service: Service name recorded on the raised error.
        headers: Extra request headers.
        json_body: Body sent as JSON.
        form: Body sent as application/x-www-form-urlencoded.
        timeout: Seconds before giving up.
        expect_json: If False, the body is not decoded and None is returned.

    Raises:
        ExternalServiceError: On any non-2xx status.
    """
    logger.debug("%s %s", method, url)
    response = requests.request(
        method,
        url,
        headers=headers,
        json=json_body,
        data=form,
        timeout=timeout,
    )

    if not response.ok:
        raise ExternalServiceError(
            action, response.status_code, response.text, service=service
        )

    if not expect_json:
        return None
    return response.json()


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
