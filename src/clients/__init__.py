"""
Outbound API clients: Azure AD tokens, Power BI queries, Graph mail.
"""

from .azure_auth import GRAPH_SCOPE, POWERBI_SCOPE, get_access_token, get_graph_token
from .graph_mail import EmailResult, build_mail_payload, send_email
from .powerbi import execute_query, extract_powerbi_data, list_datasets, rows_to_frame

__all__ = [
    "GRAPH_SCOPE",
    "POWERBI_SCOPE",
    "get_access_token",
    "get_graph_token",
    "EmailResult",
    "build_mail_payload",
    "send_email",
    "execute_query",
    "extract_powerbi_data",
    "list_datasets",
    "rows_to_frame",
]
