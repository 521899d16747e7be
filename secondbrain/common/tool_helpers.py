"""Tool lookup and bounded, failure-checked tool execution."""

from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any

from secondbrain.common.tool_response import response_indicates_failure, summarize_tool_response


def find_tool_by_name(tools: list[Any], name: str) -> Any | None:
    """
    Return first tool with exact uppercased `name`.

    Args:
        tools: Tool list.
        name: Expected tool name.
    Returns:
        Matching tool or None.
    """
    expected = name.upper()
    for tool in tools:
        if getattr(tool, "name", "").upper() == expected:
            return tool
    return None


def require_tool(tools: list[Any], name: str) -> Any:
    """Return the named tool or raise RuntimeError when it is not available."""
    tool = find_tool_by_name(tools, name)
    if tool is None:
        raise RuntimeError(f"{name} tool unavailable.")
    return tool


def run_required_tool(tool: Any, action: str, *, timeout: float | None = None, **kwargs: Any) -> Any:
    """
    Run a tool and raise RuntimeError when it fails, times out, or reports failure.

    Args:
        tool: Composio/CrewAI tool exposing `run(**kwargs)`.
        action: Label used in error messages (usually the tool name).
        timeout: Seconds to wait for the call; None waits indefinitely.
        **kwargs: Tool arguments.
    Returns:
        Raw tool response.
    """
    if timeout is None:
        response = tool.run(**kwargs)
    else:
        executor = ThreadPoolExecutor(max_workers=1)
        future = executor.submit(tool.run, **kwargs)
        try:
            response = future.result(timeout=timeout)
        except FutureTimeoutError as exc:
            raise RuntimeError(f"{action} timed out after {timeout:g}s") from exc
        finally:
            # A hung call keeps its worker thread; we only stop waiting on it.
            executor.shutdown(wait=False)
    if response_indicates_failure(response):
        details = summarize_tool_response(response)
        raise RuntimeError(f"{action} failed: {details}")
    return response
