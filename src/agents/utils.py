"""
Shared utilities for the report agent system.

Formatting, serialization, and context-trimming helpers used by the
prompts, the renderers, and the pipeline.
"""

import json
import logging
from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

logger = logging.getLogger("weekly_report.agents.utils")


def format_number(value: Any) -> str:
    """Group thousands the way a US locale does, keeping up to 3 decimals.

    Args:
        value: Number (or numeric string) to format. None/NaN format as "0".

    Returns:
        e.g. "25,200" or "1,431.5".
    """
    if value is None:
        return "0"
    try:
        number = float(value)
    except (TypeError, ValueError):
        return str(value)
    if pd.isna(number):
        return "0"
    if number.is_integer():
        return f"{int(number):,}"
    return f"{number:,.3f}".rstrip("0").rstrip(".")


def format_currency(value: Any) -> str:
    """Dollar amount with thousands separators, e.g. "$1,373,454"."""
    return f"${format_number(value)}"


def format_millions(value: Any) -> str:
    """Compact dollar amount in millions, e.g. "$24.9M"."""
    try:
        number = float(value or 0)
    except (TypeError, ValueError):
        number = 0.0
    return f"${number / 1_000_000:.1f}M"


def safe_json_serialize(obj: Any) -> Any:
    """Recursively convert objects to JSON-serializable types.

    Handles numpy scalars (pandas cells), datetimes, paths, dataclasses,
    and pandas containers.

    Args:
        obj: Object to serialize.

    Returns:
        JSON-serializable version of the object.
    """
    if isinstance(obj, (np.integer,)):
        return int(obj)
    if isinstance(obj, (np.floating,)):
        return float(obj)
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, pd.Timestamp):
        return obj.isoformat()
    if isinstance(obj, Path):
        return str(obj)
    if isinstance(obj, pd.DataFrame):
        return obj.to_dict(orient="records")
    if isinstance(obj, pd.Series):
        return obj.to_dict()
    if is_dataclass(obj) and not isinstance(obj, type):
        return safe_json_serialize(asdict(obj))
    if isinstance(obj, dict):
        return {k: safe_json_serialize(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [safe_json_serialize(item) for item in obj]
    if isinstance(obj, set):
        return list(obj)
    return obj


def truncate_for_context(text: str, max_chars: int = 500) -> str:
    """Truncate long text for log previews.

    Args:
        text: Text to truncate.
        max_chars: Maximum character count.

    Returns:
        Truncated text with "..." appended if truncation occurred.
    """
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + "..."


def serialize_results(results: dict) -> str:
    """Serialize a results dict to an indented JSON string."""
    return json.dumps(safe_json_serialize(results), indent=2)
