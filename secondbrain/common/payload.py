"""Best-effort extraction from nested Composio response payloads."""

from typing import Any


def extract_text(value: Any, *, joiner: str = " ") -> str:
    """
    Extract plain text from string/list/dict trees.

    Args:
        value: Arbitrary nested payload object.
        joiner: Joiner used for list/dict flattened text.
    Returns:
        Extracted text string.
    """
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, list):
        parts = [extract_text(item, joiner=joiner) for item in value]
        return joiner.join(part for part in parts if part)
    if isinstance(value, dict):
        for key in ("message", "error", "text", "detail"):
            candidate = value.get(key)
            if isinstance(candidate, str) and candidate.strip():
                return candidate.strip()
        nested = [extract_text(item, joiner=joiner) for item in value.values()]
        return joiner.join(part for part in nested if part)
    return ""


def find_value(value: Any, key: str) -> Any | None:
    """
    Return the first value stored under `key` anywhere in a nested payload.

    Composio wraps provider responses (`{"data": {...}, "successful": ...}`)
    and the nesting depth differs between tools, so lookups walk the tree
    breadth-first and stop at the shallowest match.
    """
    queue: list[Any] = [value]
    while queue:
        current = queue.pop(0)
        if isinstance(current, dict):
            if key in current and current[key] is not None:
                return current[key]
            queue.extend(current.values())
        elif isinstance(current, list):
            queue.extend(current)
    return None


def find_list(value: Any, key: str) -> list[dict[str, Any]]:
    """Return the first list of dicts stored under `key`, or an empty list."""
    found = find_value(value, key)
    if not isinstance(found, list):
        return []
    return [item for item in found if isinstance(item, dict)]
