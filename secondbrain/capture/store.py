"""
secondbrain/capture/store.py
ClickUp task-store operations run through Composio tools.
Exports: create_task, get_tasks, get_all_tasks, update_task
"""

import logging
from typing import Any

from secondbrain.common.payload import find_list, find_value
from secondbrain.common.tool_helpers import require_tool, run_required_tool
from secondbrain.tools.tool_registry import (
    CLICKUP_CREATE_TASK,
    CLICKUP_GET_TASKS,
    CLICKUP_UPDATE_TASK,
)

logger = logging.getLogger(__name__)

PAGE_SIZE = 100
MAX_PAGES = 50


def create_task(
    tools: list[Any],
    list_id: str,
    fields: dict[str, Any],
    *,
    timeout: float | None = None,
) -> dict[str, Any]:
    """
    Create a task in a list.

    Args:
        tools: Composio ClickUp tool list.
        list_id: Target list id.
        fields: Task body (name, description, due_date, ...).
        timeout: Per-call bound in seconds.
    Returns:
        Created task dict (at least `id`; `name` and `url` when returned).
    Raises:
        RuntimeError: Tool missing, call failed, or no task id came back.
    """
    tool = require_tool(tools, CLICKUP_CREATE_TASK)
    response = run_required_tool(tool, CLICKUP_CREATE_TASK, timeout=timeout, list_id=list_id, **fields)
    task_id = find_value(response, "id")
    if not task_id:
        raise RuntimeError(f"{CLICKUP_CREATE_TASK} failed: response carried no task id")
    return {
        "id": str(task_id),
        "name": str(find_value(response, "name") or fields.get("name", "")),
        "url": str(find_value(response, "url") or ""),
    }


def get_tasks(
    tools: list[Any],
    list_id: str,
    *,
    statuses: list[str] | None = None,
    due_before_ms: int | None = None,
    created_after_ms: int | None = None,
    include_markdown: bool = False,
    page: int | None = None,
    timeout: float | None = None,
) -> tuple[list[dict[str, Any]], bool]:
    """
    Fetch one page of tasks from a list.

    Returns:
        Tuple of (tasks, is_last_page).
    """
    tool = require_tool(tools, CLICKUP_GET_TASKS)
    kwargs: dict[str, Any] = {"list_id": list_id}
    if include_markdown:
        kwargs["include_markdown_description"] = True
    if statuses:
        kwargs["statuses"] = list(statuses)
    if due_before_ms is not None:
        kwargs["due_date_lt"] = due_before_ms
    if created_after_ms is not None:
        kwargs["date_created_gt"] = created_after_ms
    if page is not None:
        kwargs["page"] = page
    response = run_required_tool(tool, CLICKUP_GET_TASKS, timeout=timeout, **kwargs)
    tasks = find_list(response, "tasks")
    last_page = find_value(response, "last_page")
    is_last = bool(last_page) if last_page is not None else len(tasks) < PAGE_SIZE
    return tasks, is_last


def get_all_tasks(
    tools: list[Any],
    list_id: str,
    *,
    timeout: float | None = None,
    **filters: Any,
) -> list[dict[str, Any]]:
    """Fetch every page of tasks matching `filters` (see get_tasks)."""
    collected: list[dict[str, Any]] = []
    for page in range(MAX_PAGES):
        tasks, is_last = get_tasks(tools, list_id, page=page, timeout=timeout, **filters)
        collected.extend(tasks)
        if is_last or not tasks:
            return collected
    logger.warning("Stopped paging list %s after %d pages.", list_id, MAX_PAGES)
    return collected


def update_task(
    tools: list[Any],
    task_id: str,
    patch: dict[str, Any],
    *,
    timeout: float | None = None,
) -> None:
    """Apply a field patch to one task."""
    tool = require_tool(tools, CLICKUP_UPDATE_TASK)
    run_required_tool(tool, CLICKUP_UPDATE_TASK, timeout=timeout, task_id=task_id, **patch)
