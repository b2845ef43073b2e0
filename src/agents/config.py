"""
Configuration for the narrative-analysis agent.

Centralizes LLM parameters and the deterministic thresholds used when
compiling KPIs. Credentials and model names live in AppConfig.
"""

from dataclasses import dataclass


@dataclass
class AgentConfig:
    """Configuration for the report analysis agent."""

    # LLM
    temperature: float = 0.7
    max_tokens: int = 3000
    model_name: str | None = None   # overrides the provider default from AppConfig

    # KPI compilation
    anomaly_threshold: float = 10.0
    top_products_count: int = 5

    # Logging
    analysis_preview_chars: int = 500
