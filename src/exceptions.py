"""
Exception hierarchy for the weekly report system.

Nothing is retried: every error propagates to the CLI or HTTP route,
which reports it and stops.
"""


class ReportError(Exception):
    """Base class for report pipeline failures."""


class ConfigurationError(ReportError):
    """Raised when required environment variables are missing."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(
            f"Missing required environment variables: {', '.join(missing)}. "
            "Copy .env.example to .env and fill in your credentials."
        )


class ExternalServiceError(ReportError):
    """Raised when an external API answers with a non-2xx status."""

    def __init__(
        self, action: str, status_code: int, detail: str = "", service: str = ""
    ) -> None:
        self.action = action
        self.status_code = status_code
        self.detail = detail
        self.service = service
        super().__init__(f"{action}: {status_code} - {detail}")


class AnalysisError(ReportError):
    """Raised when the language model returns no usable narrative."""
