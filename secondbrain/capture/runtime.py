"""Runtime dependencies for the capture and correction workflows."""

from dataclasses import dataclass, field
from typing import Any, Callable

from secondbrain.capture.classifier import classify_forced, classify_message
from secondbrain.capture.models import Classification
from secondbrain.shared import (
    DEFAULT_CONFIDENCE_THRESHOLD,
    _required_env,
    build_tools,
    category_list_ids,
    composio_user_id,
    confidence_threshold,
    inbox_log_list_id,
    outbound_timeout_seconds,
)
from secondbrain.tools.tool_registry import CAPTURE_SLACK_TOOLS, CLICKUP_TOOLS


@dataclass
class CaptureRuntime:
    """Collaborators injected into the capture/correction flows for test isolation."""

    clickup_tools: list[Any]
    slack_tools: list[Any]
    list_ids: dict[str, str]
    ledger_list_id: str
    confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD
    timeout: float | None = None
    classify: Callable[..., Classification] = field(default=classify_message)
    classify_forced: Callable[[str, str], Classification] = field(default=classify_forced)


def inbox_channel_id() -> str:
    """Return the Slack channel whose top-level messages are captures."""
    return _required_env("SLACK_INBOX_CHANNEL_ID")


def build_capture_runtime() -> CaptureRuntime:
    """
    Build the runtime from environment configuration.

    Raises:
        RuntimeError: Any required env var is missing.
    """
    list_ids = category_list_ids()
    ledger_list_id = inbox_log_list_id()
    threshold = confidence_threshold()
    timeout = outbound_timeout_seconds()
    user_id = composio_user_id()
    return CaptureRuntime(
        clickup_tools=build_tools(user_id=user_id, tools=CLICKUP_TOOLS),
        slack_tools=build_tools(user_id=user_id, tools=CAPTURE_SLACK_TOOLS),
        list_ids=list_ids,
        ledger_list_id=ledger_list_id,
        confidence_threshold=threshold,
        timeout=timeout,
    )
