"""
Email delivery through Microsoft Graph ``sendMail``.

Uses app-only auth, so the message is sent from
``/users/{EMAIL_FROM}/sendMail`` rather than ``/me/sendMail``.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from src.app.config import AppConfig
from src.rendering.html_report import build_email_html, build_subject

from .azure_auth import get_graph_token
from .http import bearer, request_json

if TYPE_CHECKING:
    from src.agents.analysis.metrics import WeeklyKPIs

logger = logging.getLogger("weekly_report.clients.graph")

SEND_MAIL_URL = "https://graph.microsoft.com/v1.0/users/{sender}/sendMail"


@dataclass
class EmailResult:
    success: bool
    recipient: str
    subject: str


def build_mail_payload(subject: str, html: str, recipient: str) -> dict:
    """Graph sendMail body with one HTML message and one recipient."""
    return {
        "message": {
            "subject": subject,
            "body": {"contentType": "HTML", "content": html},
            "toRecipients": [{"emailAddress": {"address": recipient}}],
        },
        "saveToSentItems": True,
    }


def send_email(data: "WeeklyKPIs", analysis: str, config: AppConfig) -> EmailResult:
    """Render the report and send it to the configured recipient.

    Args:
        data: Compiled KPIs.
        analysis: Markdown narrative.
        config: Application config (Azure app + email addresses).

    Returns:
        EmailResult describing what was sent.
    """
    config.require("azure", "email")

    logger.info("Preparing email...")
    html = build_email_html(data, analysis)
    subject = build_subject(data)

    logger.info("Authenticating with Microsoft Graph...")
    token = get_graph_token(config)

    logger.info(f"Sending email to {config.email_recipient}...")
    request_json(
        "POST",
        SEND_MAIL_URL.format(sender=config.sender),
        "Failed to send email",
        service="graph",
        headers=bearer(token),
        json_body=build_mail_payload(subject, html, config.email_recipient),
        timeout=config.request_timeout,
        expect_json=False,
    )

    logger.info("Email sent successfully!")
    return EmailResult(success=True, recipient=config.email_recipient, subject=subject)
