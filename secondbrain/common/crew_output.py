"""Helpers for reading text and JSON out of CrewAI task results."""

import json
import re
from typing import Any

_FENCE_RE = re.compile(r"^```(?:json)?\s*\n?(?P<body>.*?)\n?```$", flags=re.DOTALL | re.IGNORECASE)


def extract_task_output(task: Any, fallback: Any = None) -> str:
    """
    Read normalized text output from a CrewAI task.

    Args:
        task: CrewAI task-like object.
        fallback: Kickoff result used when the task carries no text output.
    Returns:
        Output text when present, else empty string.
    """
    output = getattr(task, "output", None)
    if isinstance(output, str):
        return output.strip()
    raw = getattr(output, "raw", None)
    if isinstance(raw, str) and raw.strip():
        return raw.strip()
    if fallback is None:
        return ""
    fallback_raw = getattr(fallback, "raw", None)
    if isinstance(fallback_raw, str):
        return fallback_raw.strip()
    return str(fallback).strip()


def strip_code_fence(text: str) -> str:
    """Remove a surrounding ``` or ```json fence when present."""
    stripped = (text or "").strip()
    match = _FENCE_RE.match(stripped)
    return match.group("body").strip() if match else stripped


def extract_json_object(text: str) -> dict[str, Any]:
    """
    Parse one JSON object from model output.

    Args:
        text: Raw model reply, optionally fenced or surrounded by prose.
    Returns:
        Parsed dict.
    Raises:
        ValueError: When no JSON object can be parsed.
    """
    candidate = strip_code_fence(text)
    if not candidate:
        raise ValueError("Empty model output.")
    try:
        payload = json.loads(candidate)
    except json.JSONDecodeError:
        start = candidate.find("{")
        end = candidate.rfind("}")
        if start < 0 or end <= start:
            raise ValueError("Model output did not include a JSON object.") from None
        try:
            payload = json.loads(candidate[start : end + 1])
        except json.JSONDecodeError as exc:
            raise ValueError(f"Model output is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise ValueError("Model output JSON is not an object.")
    return payload
