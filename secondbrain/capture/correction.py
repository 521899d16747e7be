"""
secondbrain/capture/correction.py
Re-file a capture under a category forced by a threaded `fix: <category>` reply.
Exports: parse_fix_command, resolve_fix_category, run_correction, CorrectionError
"""

import logging
import re

from secondbrain.capture.chat import fetch_thread_messages
from secondbrain.capture.filer import file_record
from secondbrain.capture.ledger import amend_ledger_entry
from secondbrain.capture.models import ADMIN, IDEAS, PEOPLE, PROJECTS, STATUS_FIXED, SlackMessage
from secondbrain.capture.notifier import post_error_reply, post_thread_reply
from secondbrain.capture.runtime import CaptureRuntime

logger = logging.getLogger(__name__)

FIX_COMMAND_RE = re.compile(r"^fix:\s*(\w+)", flags=re.IGNORECASE)

_CATEGORY_WORDS = {
    "people": PEOPLE,
    "person": PEOPLE,
    "projects": PROJECTS,
    "project": PROJECTS,
    "ideas": IDEAS,
    "idea": IDEAS,
    "admin": ADMIN,
}

UNKNOWN_CATEGORY_TEXT = "Unknown category: {word}. Use: people, projects, ideas, or admin."
MISSING_ORIGINAL_TEXT = "Couldn't find the original message to re-file."


class CorrectionError(RuntimeError):
    """Raised when a correction fails after the user has been told why."""


def parse_fix_command(text: str) -> str | None:
    """
    Return the lowercased category word of a `fix:` command, or None.

    The command must start the message: "please fix: admin" does not match.
    """
    match = FIX_COMMAND_RE.match(text or "")
    return match.group(1).lower() if match else None


def resolve_fix_category(word: str) -> str | None:
    """Map a fix-command word (singular or plural, any case) to a category."""
    return _CATEGORY_WORDS.get((word or "").lower())


def _original_capture_text(runtime: CaptureRuntime, channel: str, thread_ts: str) -> str:
    messages = fetch_thread_messages(runtime.slack_tools, channel, thread_ts, timeout=runtime.timeout)
    if not messages:
        return ""
    return str(messages[0].get("text") or "").strip()


def run_correction(message: SlackMessage, runtime: CaptureRuntime) -> str:
    """
    Run one correction transaction for a threaded reply.

    Args:
        message: Threaded Slack reply.
        runtime: Injected tools, list ids and classifier.
    Returns:
        'ignored', 'rejected:unknown-category', 'rejected:missing-original', or 'fixed'.
    Raises:
        CorrectionError: Recovering, re-classifying, filing or amending failed.
            An error reply has been attempted in the thread.
    """
    word = parse_fix_command(message.text)
    if word is None:
        return "ignored"
    thread_ts = message.thread_ts or message.ts
    category = resolve_fix_category(word)
    if category is None:
        post_thread_reply(
            runtime.slack_tools,
            message.channel,
            thread_ts,
            UNKNOWN_CATEGORY_TEXT.format(word=word),
            timeout=runtime.timeout,
        )
        return "rejected:unknown-category"

    try:
        original_text = _original_capture_text(runtime, message.channel, thread_ts)
        if not original_text:
            post_thread_reply(
                runtime.slack_tools, message.channel, thread_ts, MISSING_ORIGINAL_TEXT, timeout=runtime.timeout
            )
            return "rejected:missing-original"

        classification = runtime.classify_forced(original_text, category)
        record = file_record(
            classification,
            clickup_tools=runtime.clickup_tools,
            list_ids=runtime.list_ids,
            timeout=runtime.timeout,
        )
        amended = amend_ledger_entry(
            thread_ts,
            filed_to=category,
            destination_name=record.name,
            destination_url=record.url,
            status=STATUS_FIXED,
            clickup_tools=runtime.clickup_tools,
            list_id=runtime.ledger_list_id,
            timeout=runtime.timeout,
        )
        if not amended:
            logger.warning("No ledger entry for thread %s; correction filed without amendment.", thread_ts)
    except Exception as exc:
        logger.exception("Correction failed for thread %s.", thread_ts)
        post_error_reply(
            runtime.slack_tools,
            message.channel,
            thread_ts,
            f"❌ Couldn't re-file this: {exc}",
            timeout=runtime.timeout,
        )
        raise CorrectionError(str(exc)) from exc

    link = f"<{record.url}|{record.name}>" if record.url else record.name
    post_thread_reply(
        runtime.slack_tools,
        message.channel,
        thread_ts,
        f"✅ Re-filed as *{category}*: {link}",
        timeout=runtime.timeout,
    )
    return "fixed"
