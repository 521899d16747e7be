"""
secondbrain/capture/runner.py
Route Slack message events to new-capture filing or to the correction flow.
Exports: handle_message_event(envelope, ...), process_capture(capture, runtime), CaptureError
"""

import logging
from typing import Any, Callable

from secondbrain.capture.correction import parse_fix_command, run_correction
from secondbrain.capture.dedup import DedupWindow
from secondbrain.capture.filer import file_record
from secondbrain.capture.ledger import append_ledger_entry
from secondbrain.capture.models import NEEDS_REVIEW, STATUS_PENDING, Capture, LedgerEntry, SlackMessage
from secondbrain.capture.notifier import post_confirmation, post_error_reply, post_needs_review
from secondbrain.capture.runtime import CaptureRuntime

logger = logging.getLogger(__name__)


class CaptureError(RuntimeError):
    """Raised when a new capture could not be processed."""


def _append_ledger_best_effort(runtime: CaptureRuntime, entry: LedgerEntry) -> None:
    try:
        append_ledger_entry(
            entry,
            clickup_tools=runtime.clickup_tools,
            list_id=runtime.ledger_list_id,
            timeout=runtime.timeout,
        )
    except Exception:
        logger.exception("Ledger append failed for capture %s.", entry.correlation_id)


def process_capture(capture: Capture, runtime: CaptureRuntime) -> str:
    """
    Classify, file, log and confirm one new capture.

    Args:
        capture: Top-level inbox message.
        runtime: Injected tools, list ids, gate and classifier.
    Returns:
        'needs_review' or 'filed'.
    Raises:
        CaptureError: Classification, filing or the Slack reply failed. An error
            reply has been attempted in the thread.
    """
    record = None
    try:
        classification = runtime.classify(capture.text)
        if classification.confidence < runtime.confidence_threshold:
            post_needs_review(
                runtime.slack_tools, capture.channel, capture.correlation_id, capture.text, timeout=runtime.timeout
            )
            _append_ledger_best_effort(
                runtime,
                LedgerEntry(
                    original_text=capture.text,
                    filed_to=NEEDS_REVIEW,
                    destination_name=STATUS_PENDING,
                    destination_url="",
                    confidence=classification.confidence,
                    correlation_id=capture.correlation_id,
                ),
            )
            logger.info(
                "Capture %s held for review (confidence %.2f).", capture.correlation_id, classification.confidence
            )
            return "needs_review"

        record = file_record(
            classification,
            clickup_tools=runtime.clickup_tools,
            list_ids=runtime.list_ids,
            timeout=runtime.timeout,
        )
        _append_ledger_best_effort(
            runtime,
            LedgerEntry(
                original_text=capture.text,
                filed_to=classification.category,
                destination_name=record.name,
                destination_url=record.url,
                confidence=classification.confidence,
                correlation_id=capture.correlation_id,
                record_id=record.id,
            ),
        )
        post_confirmation(
            runtime.slack_tools,
            capture.channel,
            capture.correlation_id,
            category=classification.category,
            name=record.name,
            url=record.url,
            confidence=classification.confidence,
            timeout=runtime.timeout,
        )
        return "filed"
    except Exception as exc:
        logger.exception("Capture %s failed.", capture.correlation_id)
        if record is None:
            reply = f"❌ Couldn't file this: {exc}"
        else:
            link = f"<{record.url}|{record.name}>" if record.url else record.name
            reply = f"⚠️ Filed as *{classification.category}*: {link}, but couldn't confirm it: {exc}"
        post_error_reply(
            runtime.slack_tools,
            capture.channel,
            capture.correlation_id,
            reply,
            timeout=runtime.timeout,
        )
        raise CaptureError(str(exc)) from exc


def handle_message_event(
    envelope: dict[str, Any],
    *,
    inbox_channel_id: str,
    dedup: DedupWindow,
    runtime_factory: Callable[[], CaptureRuntime],
) -> str:
    """
    Filter one Slack `event_callback` envelope and dispatch it.

    Args:
        envelope: Parsed Events API body (signature already verified).
        inbox_channel_id: Only messages from this channel are handled.
        dedup: Window of recently processed correlation ids.
        runtime_factory: Builds the runtime once the event is accepted.
    Returns:
        'ignored:<reason>' for discarded events, else the outcome of the
        capture or correction flow.
    Raises:
        CaptureError / CorrectionError: Processing failed.
    """
    event = envelope.get("event")
    if envelope.get("type") != "event_callback" or not isinstance(event, dict):
        return "ignored:event-type"
    if event.get("type") != "message":
        return "ignored:event-type"

    message = SlackMessage.from_event(event)
    if message.bot_id:
        return "ignored:bot"
    if message.subtype:
        return "ignored:subtype"
    if message.channel != inbox_channel_id:
        return "ignored:channel"
    if not message.text.strip():
        return "ignored:empty"
    if message.is_threaded_reply and parse_fix_command(message.text) is None:
        return "ignored:thread-reply"
    if not dedup.check_and_add(message.ts):
        logger.info("Dropping duplicate delivery of %s.", message.ts)
        return "ignored:duplicate"

    runtime = runtime_factory()
    if message.is_threaded_reply:
        return run_correction(message, runtime)
    capture = Capture(
        text=message.text.strip(),
        correlation_id=message.ts,
        channel=message.channel,
        user=message.user,
    )
    return process_capture(capture, runtime)
