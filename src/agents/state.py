"""
LangGraph state schema for the report pipeline.

The pipeline is linear (extract → analyze → deliver); each node fills one
slot. Errors are not accumulated here: any node failure propagates.
"""

from typing import Any

from src.app.config import AppConfig

from .config import AgentConfig


class ReportState:
    """
    LangGraph state schema for the weekly report pipeline.

    TypedDict-compatible class used as the state schema for StateGraph.
    """

    __annotations__ = {
        # Configuration
        "app_config": AppConfig,
        "agent_config": AgentConfig,
        # Run options
        "use_mock": bool,
        "save_local": bool,
        "send_email": bool,
        "include_pdf": bool,
        # Node output slots
        "data": Any,            # WeeklyKPIs
        "analysis": str | None,
        "saved": Any,           # SavedReport | None
        "email": Any,           # EmailResult | None
        # Timing and run details
        "metadata": dict[str, Any],
    }


def create_initial_state(
    app_config: AppConfig,
    agent_config: AgentConfig | None = None,
    use_mock: bool = False,
    save_local: bool = True,
    send_email: bool = False,
    include_pdf: bool = False,
) -> dict[str, Any]:
    """Create the initial state dict for one report run."""
    return {
        "app_config": app_config,
        "agent_config": agent_config or AgentConfig(),
        "use_mock": use_mock,
        "save_local": save_local,
        "send_email": send_email,
        "include_pdf": include_pdf,
        "data": None,
        "analysis": None,
        "saved": None,
        "email": None,
        "metadata": {},
    }
