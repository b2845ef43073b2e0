"""
Application configuration for the weekly report system.

Reads settings from environment variables via python-dotenv. Credentials
are validated per stage (see ``AppConfig.require``) so that a mock-data
dry run works without any of them.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from src.exceptions import ConfigurationError

load_dotenv()

PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Credential groups -> (env var, field) pairs
REQUIRED_GROUPS: dict[str, list[tuple[str, str]]] = {
    "azure": [
        ("AZURE_TENANT_ID", "azure_tenant_id"),
        ("AZURE_CLIENT_ID", "azure_client_id"),
        ("AZURE_CLIENT_SECRET", "azure_client_secret"),
    ],
    "powerbi": [
        ("POWERBI_WORKSPACE_ID", "powerbi_workspace_id"),
        ("POWERBI_DATASET_ID", "powerbi_dataset_id"),
    ],
    "openai": [
        ("OPENAI_API_KEY", "openai_api_key"),
    ],
    "anthropic": [
        ("ANTHROPIC_API_KEY", "anthropic_api_key"),
    ],
    "email": [
        ("EMAIL_RECIPIENT", "email_recipient"),
    ],
}


@dataclass
class AppConfig:
    """Configuration for the report pipeline and its HTTP API."""

    # Azure AD
    azure_tenant_id: str = ""
    azure_client_id: str = ""
    azure_client_secret: str = ""

    # Power BI
    powerbi_workspace_id: str = ""
    powerbi_dataset_id: str = ""

    # Language model
    llm_provider: str = "openai"
    openai_api_key: str = ""
    openai_model: str = "gpt-4o"
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-20250514"

    # Email
    email_recipient: str = ""
    email_from: str = ""

    # Runtime
    use_mock_data: bool = False
    reports_dir: Path = field(default_factory=lambda: PROJECT_ROOT / "reports")
    request_timeout: float = 60.0

    # API
    api_prefix: str = "/api"
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 3001

    @property
    def sender(self) -> str:
        """Mailbox used for app-only sendMail; defaults to the recipient."""
        return self.email_from or self.email_recipient

    def missing(self, *groups: str) -> list[str]:
        """Return env var names that are unset for the given groups."""
        names = []
        for group in groups:
            for env_name, attr in REQUIRED_GROUPS.get(group, []):
                if not getattr(self, attr):
                    names.append(env_name)
        return names

    def require(self, *groups: str) -> None:
        """Raise ConfigurationError if any variable in the groups is unset."""
        missing = self.missing(*groups)
        if missing:
            raise ConfigurationError(missing)


def get_app_config() -> AppConfig:
    """Load application config from environment variables."""
    recipient = os.getenv("EMAIL_RECIPIENT", "")
    return AppConfig(
        azure_tenant_id=os.getenv("AZURE_TENANT_ID", ""),
        azure_client_id=os.getenv("AZURE_CLIENT_ID", ""),
        azure_client_secret=os.getenv("AZURE_CLIENT_SECRET", ""),
        powerbi_workspace_id=os.getenv("POWERBI_WORKSPACE_ID", ""),
        powerbi_dataset_id=os.getenv("POWERBI_DATASET_ID", ""),
        llm_provider=os.getenv("LLM_PROVIDER", "openai").lower(),
        openai_api_key=os.getenv("OPENAI_API_KEY", ""),
        openai_model=os.getenv("OPENAI_MODEL", "gpt-4o"),
        anthropic_api_key=os.getenv("ANTHROPIC_API_KEY", ""),
        anthropic_model=os.getenv("ANTHROPIC_MODEL", "claude-sonnet-4-20250514"),
        email_recipient=recipient,
        email_from=os.getenv("EMAIL_FROM", recipient),
        use_mock_data=os.getenv("USE_MOCK_DATA", "false").lower() == "true",
        reports_dir=Path(os.getenv("REPORTS_DIR", str(PROJECT_ROOT / "reports"))),
        request_timeout=float(os.getenv("REQUEST_TIMEOUT", "60")),
        api_prefix=os.getenv("API_PREFIX", "/api"),
        cors_origins=os.getenv("CORS_ORIGINS", "*").split(","),
        debug=os.getenv("DEBUG", "false").lower() == "true",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "3001")),
    )
