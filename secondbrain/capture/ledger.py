"""
secondbrain/capture/ledger.py
Inbox ledger: one ClickUp task per capture in the inbox-log list.
Exports: build_ledger_description, append_ledger_entry, find_by_correlation_id,
    rewrite_ledger_description, amend_ledger_entry, list_ledger_entries_since, parse_ledger_field
"""

import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Any

from secondbrain.capture.models import LedgerEntry, LedgerMatch
from secondbrain.capture.store import create_task, get_all_tasks, update_task

logger = logging.getLogger(__name__)

LOG_NAME_CHARS = 50
FILED_TO_LABEL = "Filed to"
DESTINATION_LABEL = "Destination"
STATUS_LABEL = "Status"
CORRELATION_LABEL = "Correlation"


def _label_line(label: str, value: str) -> str:
    return f"**{label}:** {value}".rstrip()


def _metadata_line(label: str, value: str) -> str:
    # Metadata values stay on one line so they never open a second block.
    return _label_line(label, " ".join(str(value).splitlines()))


def _label_re(label: str) -> re.Pattern[str]:
    # ClickUp's plain `description` drops the bold markers, so they are optional.
    return re.compile(
        rf"^(?:\*\*)?{re.escape(label)}:(?:\*\*)?[ \t]*(?P<value>.*)$", flags=re.MULTILINE
    )


def format_destination(name: str, url: str) -> str:
    """Return `[name](url)`, or the bare name when there is no URL."""
    return f"[{name}]({url})" if url else name


def build_ledger_description(entry: LedgerEntry) -> str:
    """Render a ledger entry as labeled markdown lines."""
    lines = [
        _label_line("Original", entry.original_text),
        "",
        _metadata_line(FILED_TO_LABEL, entry.filed_to),
        _metadata_line(DESTINATION_LABEL, format_destination(entry.destination_name, entry.destination_url)),
        _metadata_line("Confidence", f"{entry.confidence * 100:.0f}%"),
        _metadata_line(CORRELATION_LABEL, entry.correlation_id),
        _metadata_line("Record ID", entry.record_id),
        _metadata_line(STATUS_LABEL, entry.status),
    ]
    return "\n".join(lines)


def _split_metadata(description: str) -> tuple[str, str]:
    # Labeled metadata follows the last blank line; the Original text above it is never parsed.
    head, separator, metadata = description.rpartition("\n\n")
    return head + separator, metadata


def _last_label_match(label: str, metadata: str) -> re.Match[str] | None:
    matches = list(_label_re(label).finditer(metadata))
    return matches[-1] if matches else None


def parse_ledger_field(description: str, label: str) -> str | None:
    """Return the value of a labeled metadata line, or None when the line is absent."""
    _, metadata = _split_metadata(description or "")
    match = _last_label_match(label, metadata)
    return match.group("value").strip() if match else None


def task_description(task: dict[str, Any]) -> str:
    """Prefer the markdown description so labels keep their bold markers."""
    return str(task.get("markdown_description") or task.get("description") or "")


def append_ledger_entry(
    entry: LedgerEntry,
    *,
    clickup_tools: list[Any],
    list_id: str,
    timeout: float | None = None,
) -> str:
    """
    Create the ledger task for one capture.

    Returns:
        Ledger task id.
    Raises:
        RuntimeError: The store call failed; the caller decides whether that is fatal.
    """
    description = build_ledger_description(entry)
    task = create_task(
        clickup_tools,
        list_id,
        {
            "name": f"Log: {entry.original_text[:LOG_NAME_CHARS]}...",
            "description": description,
            "markdown_content": description,
        },
        timeout=timeout,
    )
    return task["id"]


def find_by_correlation_id(
    correlation_id: str,
    *,
    clickup_tools: list[Any],
    list_id: str,
    timeout: float | None = None,
) -> LedgerMatch | None:
    """
    Scan every ledger task for an exact `**Correlation:** <id>` line.

    Linear in the size of the ledger. Entries written without the marker are
    never found; callers treat None as a normal outcome.
    """
    if not correlation_id:
        return None
    for task in get_all_tasks(clickup_tools, list_id, include_markdown=True, timeout=timeout):
        description = task_description(task)
        if parse_ledger_field(description, CORRELATION_LABEL) == correlation_id:
            return LedgerMatch(task_id=str(task.get("id", "")), description=description)
    return None


def rewrite_ledger_description(
    description: str,
    *,
    filed_to: str,
    destination_name: str,
    destination_url: str,
    status: str,
) -> str:
    """
    Replace the filed-to, destination and status lines, keeping everything else.

    A missing filed-to or destination line is left missing; a missing status
    line is appended.
    """
    replacements = {
        FILED_TO_LABEL: filed_to,
        DESTINATION_LABEL: format_destination(destination_name, destination_url),
        STATUS_LABEL: status,
    }
    original, metadata = _split_metadata(description)
    for label, value in replacements.items():
        line = _metadata_line(label, value)
        match = _last_label_match(label, metadata)
        if match is not None:
            metadata = metadata[: match.start()] + line + metadata[match.end() :]
        elif label == STATUS_LABEL:
            metadata = f"{metadata.rstrip()}\n{line}"
    return original + metadata


def amend_ledger_entry(
    correlation_id: str,
    *,
    filed_to: str,
    destination_name: str,
    destination_url: str,
    status: str,
    clickup_tools: list[Any],
    list_id: str,
    timeout: float | None = None,
) -> bool:
    """
    Rewrite the ledger entry for a correlation id in place.

    Returns:
        True when an entry was found and updated, False when none matched.
    """
    match = find_by_correlation_id(
        correlation_id, clickup_tools=clickup_tools, list_id=list_id, timeout=timeout
    )
    if match is None:
        return False
    description = rewrite_ledger_description(
        match.description,
        filed_to=filed_to,
        destination_name=destination_name,
        destination_url=destination_url,
        status=status,
    )
    update_task(
        clickup_tools,
        match.task_id,
        {"description": description, "markdown_content": description},
        timeout=timeout,
    )
    return True


def list_ledger_entries_since(
    days: int,
    *,
    clickup_tools: list[Any],
    list_id: str,
    now: datetime | None = None,
    timeout: float | None = None,
) -> list[dict[str, Any]]:
    """Return ledger tasks created within the last `days` days."""
    current = now or datetime.now(timezone.utc)
    since_ms = int((current - timedelta(days=days)).timestamp() * 1000)
    return get_all_tasks(
        clickup_tools,
        list_id,
        created_after_ms=since_ms,
        include_markdown=True,
        timeout=timeout,
    )
