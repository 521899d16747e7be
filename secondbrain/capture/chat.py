"""
secondbrain/capture/chat.py
Slack transport operations run through Composio tools.
Exports: post_message, fetch_thread_messages, open_direct_conversation
"""

from typing import Any

from secondbrain.common.payload import find_list, find_value
from secondbrain.common.tool_helpers import require_tool, run_required_tool
from secondbrain.tools.tool_registry import SLACK_FETCH_THREAD, SLACK_OPEN_DM, SLACK_SEND_MESSAGE


def post_message(
    tools: list[Any],
    channel: str,
    text: str,
    *,
    thread_ts: str | None = None,
    timeout: float | None = None,
) -> None:
    """Post a message to a channel, threaded when `thread_ts` is given."""
    tool = require_tool(tools, SLACK_SEND_MESSAGE)
    kwargs: dict[str, Any] = {"channel": channel, "text": text}
    if thread_ts:
        kwargs["thread_ts"] = thread_ts
    run_required_tool(tool, SLACK_SEND_MESSAGE, timeout=timeout, **kwargs)


def fetch_thread_messages(
    tools: list[Any],
    channel: str,
    thread_ts: str,
    *,
    timeout: float | None = None,
) -> list[dict[str, Any]]:
    """Return every message of a thread, parent first."""
    tool = require_tool(tools, SLACK_FETCH_THREAD)
    response = run_required_tool(tool, SLACK_FETCH_THREAD, timeout=timeout, channel=channel, ts=thread_ts)
    return find_list(response, "messages")


def open_direct_conversation(
    tools: list[Any],
    user_id: str,
    *,
    timeout: float | None = None,
) -> str:
    """
    Open (or reuse) a DM with a user and return its channel id.

    Raises:
        RuntimeError: When Slack returns no channel id.
    """
    tool = require_tool(tools, SLACK_OPEN_DM)
    response = run_required_tool(tool, SLACK_OPEN_DM, timeout=timeout, users=user_id)
    channel = find_value(response, "channel")
    channel_id = channel.get("id") if isinstance(channel, dict) else channel
    if not channel_id or not isinstance(channel_id, str):
        raise RuntimeError("Failed to open DM channel")
    return channel_id
