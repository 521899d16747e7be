"""
secondbrain/capture/filer.py
Map a Classification onto a ClickUp task in its category list.
Exports: file_record, build_task_payload, due_date_to_epoch_ms, RecordFilingError
"""

import logging
from datetime import datetime, timezone
from typing import Any

from secondbrain.capture.models import ADMIN, IDEAS, PEOPLE, PROJECTS, Classification, Record
from secondbrain.capture.store import create_task

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "N/A"
NONE_SPECIFIED = "None specified"


class RecordFilingError(RuntimeError):
    """Raised when the task store rejects a record; carries the upstream error text."""

    def __init__(self, category: str, upstream: str) -> None:
        super().__init__(f"Could not file {category} record: {upstream}")
        self.category = category
        self.upstream = upstream


def _text(fields: dict[str, Any], key: str) -> str:
    value = fields.get(key)
    if value is None:
        return ""
    return str(value).strip()


def _follow_up_lines(value: Any) -> str:
    if isinstance(value, str):
        value = [value] if value.strip() else []
    if not isinstance(value, list):
        value = []
    items = [str(item).strip() for item in value if str(item).strip()]
    if not items:
        return f"- {NONE_SPECIFIED}"
    return "\n".join(f"- {item}" for item in items)


def due_date_to_epoch_ms(value: Any) -> int | None:
    """
    Convert an ISO date/datetime to ClickUp's epoch-milliseconds due date.

    Bare dates resolve to UTC midnight and naive datetimes are read as UTC.
    Anything unparseable returns None so the record is still filed.
    """
    if value is None:
        return None
    text = str(value).strip()
    if not text or text.lower() in {"null", "none"}:
        return None
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        logger.warning("Ignoring malformed due date: %r", text)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return int(parsed.timestamp() * 1000)


def build_task_payload(classification: Classification) -> dict[str, Any]:
    """
    Build name, description and optional due date for a classification.

    Every section is always present; missing values get a placeholder.
    """
    fields = classification.fields
    category = classification.category
    if category == PEOPLE:
        name = _text(fields, "name") or "Unknown Person"
        description = (
            f"**Context:** {_text(fields, 'context') or NOT_AVAILABLE}\n\n"
            f"**Follow-ups:**\n{_follow_up_lines(fields.get('follow_ups'))}"
        )
    elif category == PROJECTS:
        name = _text(fields, "title") or "Untitled Project"
        description = (
            f"**Next Action:** {_text(fields, 'next_action') or 'Define next step'}\n\n"
            f"**Notes:** {_text(fields, 'notes') or NOT_AVAILABLE}"
        )
    elif category == IDEAS:
        name = _text(fields, "title") or "Untitled Idea"
        description = (
            f"**One-liner:** {_text(fields, 'one_liner') or NOT_AVAILABLE}\n\n"
            f"**Notes:** {_text(fields, 'notes') or NOT_AVAILABLE}"
        )
    elif category == ADMIN:
        name = _text(fields, "title") or "Untitled Task"
        description = (
            f"**Due:** {_text(fields, 'due_date') or NONE_SPECIFIED}\n\n"
            f"**Notes:** {_text(fields, 'notes') or NOT_AVAILABLE}"
        )
    else:
        raise ValueError(f"Unknown category: {category}")

    payload: dict[str, Any] = {
        "name": name,
        "description": description,
        "markdown_content": description,
    }
    if category == ADMIN:
        due_ms = due_date_to_epoch_ms(fields.get("due_date"))
        if due_ms is not None:
            payload["due_date"] = due_ms
    return payload


def file_record(
    classification: Classification,
    *,
    clickup_tools: list[Any],
    list_ids: dict[str, str],
    timeout: float | None = None,
) -> Record:
    """
    Create the category record for a classification.

    Args:
        classification: Result to file.
        clickup_tools: Composio ClickUp tool list.
        list_ids: Category -> ClickUp list id.
        timeout: Per-call bound in seconds.
    Returns:
        Created Record.
    Raises:
        RecordFilingError: The store call failed.
    """
    list_id = list_ids.get(classification.category)
    if not list_id:
        raise RecordFilingError(classification.category, "no list configured for category")
    payload = build_task_payload(classification)
    try:
        task = create_task(clickup_tools, list_id, payload, timeout=timeout)
    except RuntimeError as exc:
        raise RecordFilingError(classification.category, str(exc)) from exc
    record = Record(id=task["id"], name=task["name"] or payload["name"], url=task["url"])
    logger.info("Filed %s record %s (%s).", classification.category, record.id, record.name)
    return record
