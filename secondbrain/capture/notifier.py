"""
secondbrain/capture/notifier.py
Slack replies for filed captures, review requests, corrections, and digests.
Exports: confidence_glyph, post_confirmation, post_needs_review, post_thread_reply, post_error_reply,
    send_direct_message
"""

import logging
from typing import Any

from secondbrain.capture.chat import open_direct_conversation, post_message

logger = logging.getLogger(__name__)

HIGH_CONFIDENCE = 0.8
MEDIUM_CONFIDENCE = 0.6


def confidence_glyph(confidence: float) -> str:
    """Return the leading glyph for a confidence tier."""
    if confidence >= HIGH_CONFIDENCE:
        return "✅"
    if confidence >= MEDIUM_CONFIDENCE:
        return "🟡"
    return "⚠️"


def build_confirmation_text(
    *,
    category: str,
    name: str,
    url: str,
    confidence: float,
    is_subtask: bool = False,
    parent_name: str | None = None,
) -> str:
    filed_as = f"*{category}*"
    if is_subtask and parent_name:
        filed_as = f"*{category}* (subtask of _{parent_name}_)"
    link = f"<{url}|{name}>" if url else name
    return (
        f"{confidence_glyph(confidence)} Filed as {filed_as}: {link}\n"
        f"Confidence: {confidence * 100:.0f}%\n\n"
        "_Reply `fix: [category]` if I got it wrong._"
    )


def build_needs_review_text(original_text: str) -> str:
    quoted = "\n".join(f"> {line}" for line in original_text.splitlines() or [""])
    return (
        "⚠️ I'm not confident about how to classify this:\n\n"
        f"{quoted}\n\n"
        "Reply with a hint like `fix: people` or `fix: project` to help me learn."
    )


def post_confirmation(
    slack_tools: list[Any],
    channel: str,
    thread_ts: str,
    *,
    category: str,
    name: str,
    url: str,
    confidence: float,
    is_subtask: bool = False,
    parent_name: str | None = None,
    timeout: float | None = None,
) -> None:
    """Reply in the capture thread with where the record was filed."""
    text = build_confirmation_text(
        category=category,
        name=name,
        url=url,
        confidence=confidence,
        is_subtask=is_subtask,
        parent_name=parent_name,
    )
    post_message(slack_tools, channel, text, thread_ts=thread_ts, timeout=timeout)


def post_needs_review(
    slack_tools: list[Any],
    channel: str,
    thread_ts: str,
    original_text: str,
    *,
    timeout: float | None = None,
) -> None:
    """Reply in the capture thread asking the user for a fix command."""
    post_message(
        slack_tools, channel, build_needs_review_text(original_text), thread_ts=thread_ts, timeout=timeout
    )


def post_thread_reply(
    slack_tools: list[Any],
    channel: str,
    thread_ts: str,
    text: str,
    *,
    timeout: float | None = None,
) -> None:
    post_message(slack_tools, channel, text, thread_ts=thread_ts, timeout=timeout)


def post_error_reply(
    slack_tools: list[Any],
    channel: str,
    thread_ts: str,
    text: str,
    *,
    timeout: float | None = None,
) -> bool:
    """Best-effort threaded error reply; a failure here is logged and swallowed."""
    try:
        post_message(slack_tools, channel, text, thread_ts=thread_ts, timeout=timeout)
    except Exception:
        logger.exception("Could not post error reply to thread %s.", thread_ts)
        return False
    return True


def send_direct_message(
    slack_tools: list[Any],
    user_id: str,
    text: str,
    *,
    timeout: float | None = None,
) -> None:
    """
    DM a user. There is no fallback channel.

    Raises:
        RuntimeError: The DM could not be opened or the post failed.
    """
    channel_id = open_direct_conversation(slack_tools, user_id, timeout=timeout)
    post_message(slack_tools, channel_id, text, timeout=timeout)
