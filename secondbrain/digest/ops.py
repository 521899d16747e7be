"""
secondbrain/digest/ops.py
Read-only gathering and context building for the daily digest and weekly review.
Exports: gather_concurrently, get_projects_by_status, get_people_with_follow_ups, get_admin_tasks_due,
    build_daily_context, build_weekly_context, count_captures_by_filed_to
"""

import re
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, time, timedelta, timezone
from typing import Any, Callable

from secondbrain.capture.ledger import (
    DESTINATION_LABEL,
    FILED_TO_LABEL,
    parse_ledger_field,
    task_description,
)
from secondbrain.capture.models import ADMIN, CATEGORIES, NEEDS_REVIEW, PEOPLE, PROJECTS
from secondbrain.capture.store import get_all_tasks

DAILY_PROJECT_STATUSES = ["active", "to do", "in progress"]
WEEKLY_PROJECT_STATUSES = ["active", "waiting", "blocked", "to do", "in progress"]

_NEXT_ACTION_RE = re.compile(r"\*\*Next Action:\*\*[ \t]*(.+?)(?:\n|$)", flags=re.IGNORECASE)
_FOLLOW_UPS_RE = re.compile(r"\*\*Follow-ups:\*\*\s*([\s\S]*?)(?:\n\n|$)", flags=re.IGNORECASE)
_DESTINATION_NAME_RE = re.compile(r"^\[([^\]]+)\]")


def gather_concurrently(calls: dict[str, Callable[[], Any]]) -> dict[str, Any]:
    """
    Run independent read-only calls in parallel and return results by key.

    The first exception raised by any call propagates.
    """
    if not calls:
        return {}
    with ThreadPoolExecutor(max_workers=len(calls)) as executor:
        futures = {key: executor.submit(call) for key, call in calls.items()}
        return {key: future.result() for key, future in futures.items()}


def extract_next_action(description: str | None) -> str:
    if not description:
        return "None specified"
    match = _NEXT_ACTION_RE.search(description)
    return match.group(1).strip() if match else "None specified"


def extract_follow_ups(description: str | None) -> str:
    """Return follow-ups as a comma-joined string, or 'None'."""
    if not description:
        return "None"
    match = _FOLLOW_UPS_RE.search(description)
    if not match:
        return "None"
    items = []
    for line in match.group(1).splitlines():
        item = re.sub(r"^-\s*", "", line).strip()
        if item and item != "None specified":
            items.append(item)
    return ", ".join(items) or "None"


def _task_status(task: dict[str, Any]) -> str:
    status = task.get("status")
    if isinstance(status, dict):
        return str(status.get("status") or "Unknown")
    return str(status or "Unknown")


def _format_due_date(value: Any) -> str:
    try:
        millis = int(value)
    except (TypeError, ValueError):
        return "No date"
    return datetime.fromtimestamp(millis / 1000, tz=timezone.utc).date().isoformat()


def get_projects_by_status(
    clickup_tools: list[Any],
    list_ids: dict[str, str],
    statuses: list[str],
    *,
    timeout: float | None = None,
) -> list[dict[str, Any]]:
    return get_all_tasks(
        clickup_tools, list_ids[PROJECTS], statuses=statuses, include_markdown=True, timeout=timeout
    )


def get_people_with_follow_ups(
    clickup_tools: list[Any],
    list_ids: dict[str, str],
    *,
    timeout: float | None = None,
) -> list[dict[str, Any]]:
    """Open PEOPLE tasks whose description lists at least one follow-up."""
    people = get_all_tasks(clickup_tools, list_ids[PEOPLE], include_markdown=True, timeout=timeout)
    return [task for task in people if extract_follow_ups(task_description(task)) != "None"]


def get_admin_tasks_due(
    clickup_tools: list[Any],
    list_ids: dict[str, str],
    *,
    now: datetime | None = None,
    timeout: float | None = None,
) -> list[dict[str, Any]]:
    """Open ADMIN tasks that are overdue or due by the end of tomorrow (UTC)."""
    current = now or datetime.now(timezone.utc)
    cutoff = datetime.combine(current.date() + timedelta(days=2), time.min, tzinfo=timezone.utc)
    return get_all_tasks(
        clickup_tools,
        list_ids[ADMIN],
        due_before_ms=int(cutoff.timestamp() * 1000),
        timeout=timeout,
    )


def build_daily_context(
    projects: list[dict[str, Any]],
    people: list[dict[str, Any]],
    admin: list[dict[str, Any]],
) -> str:
    """Return the digest context; empty string when there is nothing to report."""
    sections: list[str] = []
    if projects:
        rows = [
            f"{index}. {task.get('name', '')}\n"
            f"   Status: {_task_status(task)}\n"
            f"   Next Action: {extract_next_action(task_description(task))}"
            for index, task in enumerate(projects, start=1)
        ]
        sections.append("ACTIVE PROJECTS:\n" + "\n\n".join(rows))
    if people:
        rows = [
            f"{index}. {task.get('name', '')}\n"
            f"   Follow-up: {extract_follow_ups(task_description(task))}"
            for index, task in enumerate(people, start=1)
        ]
        sections.append("PEOPLE TO FOLLOW UP WITH:\n" + "\n\n".join(rows))
    if admin:
        rows = [
            f"{index}. {task.get('name', '')}\n   Due: {_format_due_date(task.get('due_date'))}"
            for index, task in enumerate(admin, start=1)
        ]
        sections.append("TASKS DUE:\n" + "\n\n".join(rows))
    return "\n\n".join(sections)


def _filed_to(entry: dict[str, Any]) -> str:
    return parse_ledger_field(task_description(entry), FILED_TO_LABEL) or "Unknown"


def count_captures_by_filed_to(ledger_entries: list[dict[str, Any]]) -> dict[str, int]:
    """Count ledger entries per category plus needs_review, zero counts included."""
    counts = {category: 0 for category in (*CATEGORIES, NEEDS_REVIEW)}
    for entry in ledger_entries:
        filed_to = _filed_to(entry)
        if filed_to in counts:
            counts[filed_to] += 1
    return counts


def build_weekly_context(ledger_entries: list[dict[str, Any]], projects: list[dict[str, Any]]) -> str:
    lines = ["=== ITEMS CAPTURED THIS WEEK ===", ""]
    if ledger_entries:
        for index, entry in enumerate(ledger_entries, start=1):
            filed_to = _filed_to(entry)
            destination = parse_ledger_field(task_description(entry), DESTINATION_LABEL) or ""
            name_match = _DESTINATION_NAME_RE.match(destination)
            name = name_match.group(1) if name_match else destination
            if not name or filed_to == NEEDS_REVIEW:
                name = str(entry.get("name", "")).removeprefix("Log: ")
            lines.append(f"{index}. [{filed_to}] {name}")
            if filed_to == NEEDS_REVIEW:
                lines.append("   ⚠️ NEEDS REVIEW")
    else:
        lines.append("No captures this week.")

    lines.extend(["", "=== ACTIVE PROJECTS STATUS ===", ""])
    if projects:
        for index, project in enumerate(projects, start=1):
            lines.append(f"{index}. {project.get('name', '')}")
            lines.append(f"   Status: {_task_status(project)}")
            lines.append(f"   Next: {extract_next_action(task_description(project))}")
    else:
        lines.append("No active projects.")

    lines.extend(["", "=== CAPTURE SUMMARY ==="])
    lines.append(f"Total: {len(ledger_entries)}")
    for filed_to, count in count_captures_by_filed_to(ledger_entries).items():
        if count:
            lines.append(f"{filed_to}: {count}")
    return "\n".join(lines)
