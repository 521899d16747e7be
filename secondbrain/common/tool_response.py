"""Shared helpers for evaluating Composio tool call responses."""

from typing import Any

from secondbrain.common.payload import extract_text

_FAILURE_STATUS = {"error", "failed", "failure"}
_FAILURE_TOKENS = ("error", "failed", "forbidden", "unauthorized", "not found", "exception")


def response_indicates_failure(response: Any) -> bool:
    """
    Return whether a tool response payload represents failure.

    Structured responses are judged by their envelope only (`successful`,
    `status`, `error`) so task descriptions that mention "error" are not
    mistaken for failures. Bare string responses fall back to token matching.
    """
    if response is None:
        return True
    if isinstance(response, dict):
        if response.get("successful") is False or response.get("success") is False:
            return True
        if response.get("ok") is False:
            return True
        status = str(response.get("status", "")).strip().lower()
        if status in _FAILURE_STATUS:
            return True
        return bool(response.get("error") or response.get("errors"))
    if isinstance(response, str):
        text = response.strip().lower()
        if not text or "no error" in text:
            return False
        return any(token in text for token in _FAILURE_TOKENS)
    return False


def summarize_tool_response(response: Any, max_chars: int = 280) -> str:
    """Return a compact, readable summary for logs and error messages."""
    text = ""
    if isinstance(response, dict):
        text = extract_text(response.get("error") or response.get("errors"), joiner=" ").strip()
    if not text:
        text = extract_text(response, joiner=" ").strip()
    if not text:
        text = str(response)
    return text if len(text) <= max_chars else f"{text[: max_chars - 3]}..."
