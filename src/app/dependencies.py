"""
FastAPI dependency injection for the weekly report API.

Provides application and agent config as injectable dependencies.
"""

import logging
from functools import lru_cache
from pathlib import Path

from fastapi import Depends

from .config import AppConfig, get_app_config

logger = logging.getLogger(__name__)


@lru_cache
def get_config() -> AppConfig:
    """Return cached application config."""
    return get_app_config()


def get_reports_dir(config: AppConfig = Depends(get_config)) -> Path:
    """Return the directory holding saved reports."""
    return config.reports_dir


@lru_cache
def get_agent_config():
    """Return cached AgentConfig for dependency injection."""
    from src.agents.config import AgentConfig

    return AgentConfig()
