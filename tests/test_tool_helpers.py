"""Unit tests for tool lookup, execution, and response helpers."""

import threading
from unittest.mock import MagicMock

import pytest

from secondbrain.common.crew_output import extract_json_object, extract_task_output, strip_code_fence
from secondbrain.common.payload import find_list, find_value
from secondbrain.common.tool_helpers import find_tool_by_name, require_tool, run_required_tool
from secondbrain.common.tool_response import response_indicates_failure, summarize_tool_response


def _tool(name: str, response: object | None = None) -> MagicMock:
    """Build a named tool mock with configurable run response."""
    tool = MagicMock()
    tool.name = name
    tool.run.return_value = {"successful": True} if response is None else response
    return tool


def test_find_tool_by_name_is_case_insensitive():
    tool = _tool("clickup_create_task")
    assert find_tool_by_name([_tool("OTHER"), tool], "CLICKUP_CREATE_TASK") is tool
    assert find_tool_by_name([], "CLICKUP_CREATE_TASK") is None


def test_require_tool_raises_when_missing():
    with pytest.raises(RuntimeError, match="SLACK_OPEN_DM tool unavailable"):
        require_tool([_tool("SLACK_SEND_MESSAGE")], "SLACK_OPEN_DM")


def test_run_required_tool_returns_response_and_forwards_kwargs():
    tool = _tool("CLICKUP_UPDATE_TASK", {"successful": True, "data": {"id": "t1"}})
    response = run_required_tool(tool, "CLICKUP_UPDATE_TASK", timeout=5, task_id="t1")
    assert response["data"]["id"] == "t1"
    tool.run.assert_called_once_with(task_id="t1")


def test_run_required_tool_raises_on_failure_payload():
    tool = _tool("CLICKUP_UPDATE_TASK", {"successful": False, "error": "Task not found"})
    with pytest.raises(RuntimeError, match="CLICKUP_UPDATE_TASK failed: Task not found"):
        run_required_tool(tool, "CLICKUP_UPDATE_TASK")


def test_run_required_tool_times_out():
    release = threading.Event()
    tool = _tool("CLICKUP_GET_TASKS")
    tool.run.side_effect = lambda **kwargs: release.wait(5)
    try:
        with pytest.raises(RuntimeError, match="CLICKUP_GET_TASKS timed out after 0.05s"):
            run_required_tool(tool, "CLICKUP_GET_TASKS", timeout=0.05)
    finally:
        release.set()


def test_description_mentioning_error_is_not_a_failure():
    response = {"successful": True, "data": {"description": "Fix the error in billing"}}
    assert response_indicates_failure(response) is False


@pytest.mark.parametrize(
    "response",
    [None, {"ok": False}, {"status": "failed"}, {"errors": ["bad"]}, "Error: unauthorized"],
)
def test_failure_envelopes_are_detected(response):
    assert response_indicates_failure(response) is True


def test_summarize_tool_response_prefers_error_text_and_truncates():
    assert summarize_tool_response({"successful": False, "error": "rate limited"}) == "rate limited"
    summary = summarize_tool_response("x" * 400, max_chars=20)
    assert len(summary) == 20
    assert summary.endswith("...")


def test_find_value_returns_shallowest_match():
    payload = {"data": {"id": "task-1", "list": {"id": "list-9"}}}
    assert find_value(payload, "id") == "task-1"
    assert find_value(payload, "missing") is None


def test_find_list_keeps_only_dicts():
    assert find_list({"data": {"tasks": [{"id": 1}, "junk"]}}, "tasks") == [{"id": 1}]
    assert find_list({"data": {"tasks": "nope"}}, "tasks") == []


def test_strip_code_fence_and_extract_json_object():
    assert strip_code_fence('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert extract_json_object('prefix {"a": 1} suffix') == {"a": 1}
    with pytest.raises(ValueError):
        extract_json_object("no braces")


def test_extract_task_output_falls_back_to_kickoff_result():
    task = MagicMock(output=None)
    assert extract_task_output(task, fallback=MagicMock(raw=" from crew ")) == "from crew"
    assert extract_task_output(MagicMock(output="direct")) == "direct"
