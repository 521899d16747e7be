"""
secondbrain/tools/tool_registry.py
Central registry of explicit Composio tool names.

Each integration declares exactly the tools it runs, keeping tool
selection deterministic and the fetched tool list small.
"""

# ---------------------------------------------------------------------------
# CLICKUP tools (task store: category lists and the inbox ledger)
# ---------------------------------------------------------------------------
CLICKUP_CREATE_TASK = "CLICKUP_CREATE_TASK"
CLICKUP_GET_TASKS = "CLICKUP_GET_TASKS"
CLICKUP_UPDATE_TASK = "CLICKUP_UPDATE_TASK"

CLICKUP_TOOLS: list[str] = [
    CLICKUP_CREATE_TASK,
    CLICKUP_GET_TASKS,
    CLICKUP_UPDATE_TASK,
]

# ---------------------------------------------------------------------------
# SLACK tools (thread replies, thread history, direct messages)
# ---------------------------------------------------------------------------
SLACK_SEND_MESSAGE = "SLACK_SEND_MESSAGE"
SLACK_FETCH_THREAD = "SLACK_FETCH_MESSAGE_THREAD_FROM_A_CONVERSATION"
SLACK_OPEN_DM = "SLACK_OPEN_DM"

CAPTURE_SLACK_TOOLS: list[str] = [
    SLACK_SEND_MESSAGE,
    SLACK_FETCH_THREAD,
]

DIGEST_SLACK_TOOLS: list[str] = [
    SLACK_SEND_MESSAGE,
    SLACK_OPEN_DM,
]
