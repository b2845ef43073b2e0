"""
Agent system for the weekly performance report.

Compiles Power BI KPIs, asks a language model for an executive narrative,
and hands both to the renderers.

For CLI usage:
    python -m src.agents.pipelines.report_pipeline --dry-run --mock
    python -m src.agents.analysis.analyzer --mock
"""

# Configuration
from .config import AgentConfig

# Prompts
from .prompts import ANALYST_SYSTEM_PROMPT, build_user_prompt

# Utils
from .utils import (
    format_currency,
    format_millions,
    format_number,
    safe_json_serialize,
    serialize_results,
    truncate_for_context,
)

__all__ = [
    # Config
    "AgentConfig",
    # Prompts
    "ANALYST_SYSTEM_PROMPT",
    "build_user_prompt",
    # Utils
    "format_currency",
    "format_millions",
    "format_number",
    "safe_json_serialize",
    "serialize_results",
    "truncate_for_context",
]
