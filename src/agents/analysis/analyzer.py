"""
Narrative analysis: sends compiled KPIs to a hosted language model.

One system prompt, one user prompt, one completion. No tools, no retries:
provider errors propagate to the caller.

Run with:
    python -m src.agents.analysis.analyzer --mock
"""

import argparse
import logging
from typing import Any

from langchain_core.messages import HumanMessage, SystemMessage

from src.app.config import AppConfig, get_app_config
from src.exceptions import AnalysisError

from ..config import AgentConfig
from ..prompts import ANALYST_SYSTEM_PROMPT, build_user_prompt
from .metrics import WeeklyKPIs, get_mock_data

logger = logging.getLogger("weekly_report.analysis")

SUPPORTED_PROVIDERS = ("openai", "anthropic")


def create_chat_model(
    config: AppConfig,
    agent_config: AgentConfig | None = None,
) -> Any:
    """Create the LangChain chat model for the configured provider.

    Args:
        config: Application config (provider, model names, API keys).
        agent_config: Sampling parameters. Uses defaults if None.

    Returns:
        A LangChain chat model exposing ``invoke(messages)``.

    Raises:
        ValueError: If the provider is not supported.
        ConfigurationError: If the provider's API key is missing.
    """
    agent_config = agent_config or AgentConfig()
    provider = config.llm_provider

    if provider not in SUPPORTED_PROVIDERS:
        raise ValueError(
            f"Invalid LLM provider '{provider}'. "
            f"Must be one of: {SUPPORTED_PROVIDERS}"
        )

    config.require(provider)

    if provider == "anthropic":
        from langchain_anthropic import ChatAnthropic

        return ChatAnthropic(
            model=agent_config.model_name or config.anthropic_model,
            api_key=config.anthropic_api_key,
            temperature=agent_config.temperature,
            max_tokens=agent_config.max_tokens,
        )

    from langchain_openai import ChatOpenAI

    return ChatOpenAI(
        model=agent_config.model_name or config.openai_model,
        api_key=config.openai_api_key,
        temperature=agent_config.temperature,
        max_tokens=agent_config.max_tokens,
    )


def generate_analysis(
    data: WeeklyKPIs,
    config: AppConfig,
    agent_config: AgentConfig | None = None,
    llm: Any = None,
) -> str:
    """Generate the executive narrative for one week of KPIs.

    Args:
        data: Compiled KPIs.
        config: Application config.
        agent_config: LLM sampling parameters.
        llm: Pre-built chat model (tests inject a mock here).

    Returns:
        Markdown narrative.

    Raises:
        AnalysisError: If the model returns empty content.
    """
    llm = llm or create_chat_model(config, agent_config)
    logger.info(f"Generating AI analysis with {_model_label(config, agent_config)}...")

    messages = [
        SystemMessage(content=ANALYST_SYSTEM_PROMPT),
        HumanMessage(content=build_user_prompt(data)),
    ]
    response = llm.invoke(messages)

    analysis = _content_as_text(getattr(response, "content", ""))
    if not analysis.strip():
        raise AnalysisError("Language model returned an empty analysis")

    logger.info("AI analysis generated successfully")
    usage = getattr(response, "usage_metadata", None)
    if isinstance(usage, dict) and "total_tokens" in usage:
        logger.info(f"Tokens used: {usage['total_tokens']}")

    return analysis


def _content_as_text(content: Any) -> str:
    """Flatten LangChain message content (str or list of content blocks)."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and block.get("type") == "text":
                parts.append(block.get("text", ""))
        return "".join(parts)
    return ""


def _model_label(config: AppConfig, agent_config: AgentConfig | None) -> str:
    if agent_config and agent_config.model_name:
        return agent_config.model_name
    if config.llm_provider == "anthropic":
        return config.anthropic_model
    return config.openai_model


# =============================================================================
# CLI
# =============================================================================

if __name__ == "__main__":
    parser = argparse.ArgumentParser(
        description="Generate the weekly narrative from demo KPIs"
    )
    parser.add_argument(
        "--mock", action="store_true",
        help="Use fixed demo KPIs instead of Power BI",
    )
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    app_config = get_app_config()
    if args.mock:
        kpis = get_mock_data()
    else:
        from src.clients.powerbi import extract_powerbi_data

        kpis = extract_powerbi_data(app_config)

    print(generate_analysis(kpis, app_config))
