"""
secondbrain/shared.py
Shared configuration helpers for the capture workflow and digest runners.
Exports: _required_env, _required_llm_api_key, build_llm, build_tools, CrewRunResult,
    confidence_threshold, outbound_timeout_seconds, dedup_window_size, category_list_ids
"""

import os
from dataclasses import dataclass
from typing import Any

DEFAULT_MODEL = "anthropic/claude-sonnet-4-20250514"
DEFAULT_TOOL_LIMIT = 50
DEFAULT_CONFIDENCE_THRESHOLD = 0.6
DEFAULT_OUTBOUND_TIMEOUT_SECONDS = 20.0
DEFAULT_DEDUP_WINDOW_SIZE = 100

CATEGORY_LIST_ENV = {
    "PEOPLE": "CLICKUP_LIST_PEOPLE",
    "PROJECTS": "CLICKUP_LIST_PROJECTS",
    "IDEAS": "CLICKUP_LIST_IDEAS",
    "ADMIN": "CLICKUP_LIST_ADMIN",
}
INBOX_LOG_LIST_ENV = "CLICKUP_LIST_INBOX_LOG"


@dataclass
class CrewRunResult:
    """Return type for crew-backed text generation."""

    raw: str
    model: str


def _required_env(name: str) -> str:
    """Read a required environment variable or raise RuntimeError."""
    value = os.getenv(name, "").strip()
    if not value:
        raise RuntimeError(f"Missing required env var: {name}")
    return value


def _required_llm_api_key() -> str:
    """Return ANTHROPIC_API_KEY for the configured model provider."""
    return _required_env("ANTHROPIC_API_KEY")


def _positive_float_env(name: str, default: float) -> float:
    raw_value = os.getenv(name, "").strip()
    if not raw_value:
        return default
    try:
        value = float(raw_value)
    except ValueError as exc:
        raise RuntimeError(f"Invalid {name}: expected a positive number.") from exc
    if value <= 0:
        raise RuntimeError(f"Invalid {name}: expected a positive number.")
    return value


def build_llm() -> str:
    """Return configured model name in CrewAI `provider/model` form."""
    return os.getenv("SECONDBRAIN_MODEL", DEFAULT_MODEL)


def composio_user_id() -> str:
    """Return configured Composio user id with default fallback."""
    return os.getenv("COMPOSIO_USER_ID", "default")


def confidence_threshold() -> float:
    """Return the confidence gate below which captures go to human review."""
    value = _positive_float_env("SECONDBRAIN_CONFIDENCE_THRESHOLD", DEFAULT_CONFIDENCE_THRESHOLD)
    if value > 1:
        raise RuntimeError("Invalid SECONDBRAIN_CONFIDENCE_THRESHOLD: expected a value in (0, 1].")
    return value


def outbound_timeout_seconds() -> float:
    """Return the per-call bound applied to model, task-store and chat calls."""
    return _positive_float_env(
        "SECONDBRAIN_OUTBOUND_TIMEOUT_SECONDS", DEFAULT_OUTBOUND_TIMEOUT_SECONDS
    )


def dedup_window_size() -> int:
    """Return how many recent correlation ids the dedup window remembers."""
    raw_value = os.getenv("SECONDBRAIN_DEDUP_WINDOW_SIZE", str(DEFAULT_DEDUP_WINDOW_SIZE)).strip()
    try:
        size = int(raw_value)
    except ValueError as exc:
        raise RuntimeError(
            "Invalid SECONDBRAIN_DEDUP_WINDOW_SIZE: expected a positive integer."
        ) from exc
    if size <= 0:
        raise RuntimeError("Invalid SECONDBRAIN_DEDUP_WINDOW_SIZE: expected a positive integer.")
    return size


def category_list_ids() -> dict[str, str]:
    """Return the category -> ClickUp list id table, failing on any missing list."""
    return {category: _required_env(env_name) for category, env_name in CATEGORY_LIST_ENV.items()}


def inbox_log_list_id() -> str:
    """Return the ClickUp list id that holds the inbox ledger."""
    return _required_env(INBOX_LOG_LIST_ENV)


def build_tools(
    user_id: str,
    toolkits: list[str] | None = None,
    *,
    tools: list[str] | None = None,
    limit: int = DEFAULT_TOOL_LIMIT,
) -> list[Any]:
    """Build Composio tool list (CrewAI provider) for deterministic tool runs."""
    _required_env("COMPOSIO_API_KEY")
    os.environ.setdefault("COMPOSIO_CACHE_DIR", ".composio-cache")
    from composio import Composio
    from composio_crewai import CrewAIProvider

    composio = Composio(provider=CrewAIProvider())
    kwargs: dict[str, Any] = {"user_id": user_id, "limit": limit}
    if toolkits:
        kwargs["toolkits"] = toolkits
    if tools:
        kwargs["tools"] = tools
    return composio.tools.get(**kwargs)
