"""Unit tests for the `fix: <category>` correction flow."""

from unittest.mock import MagicMock

import pytest

from secondbrain.capture.correction import (
    CorrectionError,
    parse_fix_command,
    resolve_fix_category,
    run_correction,
)
from secondbrain.capture.ledger import build_ledger_description
from secondbrain.capture.models import Classification, LedgerEntry, SlackMessage
from secondbrain.capture.runtime import CaptureRuntime

THREAD_TS = "1700000000.000100"
LIST_IDS = {"PEOPLE": "L_PEOPLE", "PROJECTS": "L_PROJECTS", "IDEAS": "L_IDEAS", "ADMIN": "L_ADMIN"}


def _tool(name: str, response: object | None = None) -> MagicMock:
    """Build a named tool mock with configurable run response."""
    tool = MagicMock()
    tool.name = name
    tool.run.return_value = {"successful": True} if response is None else response
    return tool


def _ledger_task():
    description = build_ledger_description(
        LedgerEntry(
            original_text="Q3 offsite planning",
            filed_to="needs_review",
            destination_name="Pending",
            destination_url="",
            confidence=0.42,
            correlation_id=THREAD_TS,
        )
    )
    return {"id": "log1", "markdown_description": description}


def _runtime(thread_messages=None, ledger_tasks=None, create_response=None):
    if thread_messages is None:
        thread_messages = [{"ts": THREAD_TS, "text": "Q3 offsite planning"}, {"ts": "2", "text": "fix: projects"}]
    tools = {
        "create": _tool(
            "CLICKUP_CREATE_TASK",
            create_response
            or {"successful": True, "data": {"id": "p9", "name": "Q3 offsite", "url": "https://app.clickup.com/t/p9"}},
        ),
        "get": _tool(
            "CLICKUP_GET_TASKS",
            {"successful": True, "data": {"tasks": [_ledger_task()] if ledger_tasks is None else ledger_tasks}},
        ),
        "update": _tool("CLICKUP_UPDATE_TASK"),
        "send": _tool("SLACK_SEND_MESSAGE"),
        "fetch": _tool(
            "SLACK_FETCH_MESSAGE_THREAD_FROM_A_CONVERSATION",
            {"successful": True, "data": {"messages": thread_messages}},
        ),
    }
    classify_forced = MagicMock(
        side_effect=lambda text, category: Classification(
            category=category, confidence=1.0, fields={"title": "Q3 offsite", "next_action": "Book venue"}
        )
    )
    runtime = CaptureRuntime(
        clickup_tools=[tools["create"], tools["get"], tools["update"]],
        slack_tools=[tools["send"], tools["fetch"]],
        list_ids=LIST_IDS,
        ledger_list_id="L_LOG",
        classify=MagicMock(),
        classify_forced=classify_forced,
    )
    return runtime, tools


def _reply(text: str) -> SlackMessage:
    return SlackMessage(channel="C_INBOX", text=text, ts="1700000050.000200", user="U1", thread_ts=THREAD_TS)


@pytest.mark.parametrize(
    "text, word",
    [
        ("fix: people", "people"),
        ("FIX:admin", "admin"),
        ("fix:   Projects please", "projects"),
        ("please fix: admin", None),
        ("fix people", None),
        ("fixing: people", None),
        ("", None),
    ],
)
def test_parse_fix_command(text, word):
    assert parse_fix_command(text) == word


@pytest.mark.parametrize(
    "word, category",
    [("people", "PEOPLE"), ("Project", "PROJECTS"), ("ideas", "IDEAS"), ("idea", "IDEAS"), ("admin", "ADMIN")],
)
def test_resolve_fix_category_accepts_singular_and_plural(word, category):
    assert resolve_fix_category(word) == category


def test_resolve_fix_category_rejects_unknown():
    assert resolve_fix_category("finance") is None


def test_unknown_category_replies_and_touches_nothing():
    runtime, tools = _runtime()

    outcome = run_correction(_reply("fix: finance"), runtime)

    assert outcome == "rejected:unknown-category"
    tools["create"].run.assert_not_called()
    tools["update"].run.assert_not_called()
    tools["fetch"].run.assert_not_called()
    runtime.classify_forced.assert_not_called()
    kwargs = tools["send"].run.call_args.kwargs
    assert kwargs["text"] == "Unknown category: finance. Use: people, projects, ideas, or admin."
    assert kwargs["thread_ts"] == THREAD_TS


def test_missing_original_replies_without_filing():
    runtime, tools = _runtime(thread_messages=[])

    outcome = run_correction(_reply("fix: people"), runtime)

    assert outcome == "rejected:missing-original"
    tools["create"].run.assert_not_called()
    assert tools["send"].run.call_args.kwargs["text"] == "Couldn't find the original message to re-file."


def test_successful_correction_files_new_record_and_amends_ledger():
    runtime, tools = _runtime()

    outcome = run_correction(_reply("fix: projects"), runtime)

    assert outcome == "fixed"
    runtime.classify_forced.assert_called_once_with("Q3 offsite planning", "PROJECTS")
    assert tools["fetch"].run.call_args.kwargs == {"channel": "C_INBOX", "ts": THREAD_TS}
    assert tools["create"].run.call_args.kwargs["list_id"] == "L_PROJECTS"

    update_kwargs = tools["update"].run.call_args.kwargs
    assert update_kwargs["task_id"] == "log1"
    assert "**Filed to:** PROJECTS" in update_kwargs["description"]
    assert "**Destination:** [Q3 offsite](https://app.clickup.com/t/p9)" in update_kwargs["description"]
    assert "**Status:** Fixed" in update_kwargs["description"]

    reply = tools["send"].run.call_args.kwargs
    assert reply["text"] == "✅ Re-filed as *PROJECTS*: <https://app.clickup.com/t/p9|Q3 offsite>"
    assert reply["thread_ts"] == THREAD_TS


def test_missing_ledger_entry_still_confirms_correction():
    runtime, tools = _runtime(ledger_tasks=[])

    outcome = run_correction(_reply("fix: projects"), runtime)

    assert outcome == "fixed"
    tools["update"].run.assert_not_called()
    assert tools["send"].run.call_args.kwargs["text"].startswith("✅ Re-filed as *PROJECTS*")


def test_filing_failure_posts_error_reply_and_raises():
    runtime, tools = _runtime(create_response={"successful": False, "error": "List archived"})

    with pytest.raises(CorrectionError, match="List archived"):
        run_correction(_reply("fix: projects"), runtime)

    text = tools["send"].run.call_args.kwargs["text"]
    assert text.startswith("❌ Couldn't re-file this:")
    assert "List archived" in text
    tools["update"].run.assert_not_called()


def test_non_fix_reply_is_ignored():
    runtime, tools = _runtime()
    assert run_correction(_reply("thanks!"), runtime) == "ignored"
    tools["send"].run.assert_not_called()
