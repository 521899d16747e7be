"""
secondbrain/digest/runner.py
Scheduled daily digest and weekly review, delivered as a Slack direct message.
Exports: run_daily_digest(runtime), run_weekly_review(runtime), build_digest_runtime()
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable

from secondbrain.capture.ledger import list_ledger_entries_since
from secondbrain.capture.notifier import send_direct_message
from secondbrain.digest.ops import (
    DAILY_PROJECT_STATUSES,
    WEEKLY_PROJECT_STATUSES,
    build_daily_context,
    build_weekly_context,
    gather_concurrently,
    get_admin_tasks_due,
    get_people_with_follow_ups,
    get_projects_by_status,
)
from secondbrain.digest.writer import generate_digest_text
from secondbrain.prompts import DAILY_DIGEST_PROMPT, WEEKLY_REVIEW_PROMPT
from secondbrain.shared import (
    CrewRunResult,
    _required_env,
    build_tools,
    category_list_ids,
    composio_user_id,
    inbox_log_list_id,
    outbound_timeout_seconds,
)
from secondbrain.tools.tool_registry import CLICKUP_TOOLS, DIGEST_SLACK_TOOLS

logger = logging.getLogger(__name__)

REVIEW_WINDOW_DAYS = 7
EMPTY_DAILY_MESSAGE = "☀️ *Daily Digest*\n\nNo active items to report today. Enjoy the clear day!"


@dataclass
class DigestRuntime:
    """Runtime dependencies injected by the HTTP layer or tests."""

    clickup_tools: list[Any]
    slack_tools: list[Any]
    list_ids: dict[str, str]
    ledger_list_id: str
    user_id: str
    timeout: float | None = None
    generate: Callable[..., CrewRunResult] = field(default=generate_digest_text)
    now: Callable[[], datetime] | None = None


def build_digest_runtime() -> DigestRuntime:
    """Build the runtime from environment configuration."""
    list_ids = category_list_ids()
    ledger_list_id = inbox_log_list_id()
    user_id = _required_env("SLACK_USER_ID")
    composio_user = composio_user_id()
    return DigestRuntime(
        clickup_tools=build_tools(user_id=composio_user, tools=CLICKUP_TOOLS),
        slack_tools=build_tools(user_id=composio_user, tools=DIGEST_SLACK_TOOLS),
        list_ids=list_ids,
        ledger_list_id=ledger_list_id,
        user_id=user_id,
        timeout=outbound_timeout_seconds(),
    )


def _now(runtime: DigestRuntime) -> datetime | None:
    return runtime.now() if runtime.now else None


def run_daily_digest(runtime: DigestRuntime) -> dict[str, Any]:
    """
    Gather open items, write the digest, and DM it.

    Returns:
        `{"ok": True}`, or `{"ok": True, "empty": True}` when nothing is open.
    Raises:
        Exception: Any store, model or Slack failure propagates.
    """
    gathered = gather_concurrently(
        {
            "projects": lambda: get_projects_by_status(
                runtime.clickup_tools, runtime.list_ids, DAILY_PROJECT_STATUSES, timeout=runtime.timeout
            ),
            "people": lambda: get_people_with_follow_ups(
                runtime.clickup_tools, runtime.list_ids, timeout=runtime.timeout
            ),
            "admin": lambda: get_admin_tasks_due(
                runtime.clickup_tools, runtime.list_ids, now=_now(runtime), timeout=runtime.timeout
            ),
        }
    )
    context = build_daily_context(gathered["projects"], gathered["people"], gathered["admin"])
    if not context:
        logger.info("Daily digest: nothing open, sending empty notice.")
        send_direct_message(runtime.slack_tools, runtime.user_id, EMPTY_DAILY_MESSAGE, timeout=runtime.timeout)
        return {"ok": True, "empty": True}

    digest = runtime.generate(
        prompt=DAILY_DIGEST_PROMPT,
        context=f"Active items:\n{context}",
        label="DailyDigest",
    )
    send_direct_message(runtime.slack_tools, runtime.user_id, digest.raw, timeout=runtime.timeout)
    logger.info(
        "Daily digest sent (projects=%d people=%d admin=%d model=%s).",
        len(gathered["projects"]),
        len(gathered["people"]),
        len(gathered["admin"]),
        digest.model,
    )
    return {"ok": True}


def run_weekly_review(runtime: DigestRuntime) -> dict[str, Any]:
    """
    Gather the last week of ledger entries and open projects, write the review, and DM it.

    Returns:
        `{"ok": True}`.
    Raises:
        Exception: Any store, model or Slack failure propagates.
    """
    gathered = gather_concurrently(
        {
            "ledger": lambda: list_ledger_entries_since(
                REVIEW_WINDOW_DAYS,
                clickup_tools=runtime.clickup_tools,
                list_id=runtime.ledger_list_id,
                now=_now(runtime),
                timeout=runtime.timeout,
            ),
            "projects": lambda: get_projects_by_status(
                runtime.clickup_tools, runtime.list_ids, WEEKLY_PROJECT_STATUSES, timeout=runtime.timeout
            ),
        }
    )
    context = build_weekly_context(gathered["ledger"], gathered["projects"])
    review = runtime.generate(
        prompt=WEEKLY_REVIEW_PROMPT,
        context=f"This week's data:\n{context}",
        label="WeeklyReview",
    )
    send_direct_message(runtime.slack_tools, runtime.user_id, review.raw, timeout=runtime.timeout)
    logger.info(
        "Weekly review sent (captures=%d projects=%d model=%s).",
        len(gathered["ledger"]),
        len(gathered["projects"]),
        review.model,
    )
    return {"ok": True}
