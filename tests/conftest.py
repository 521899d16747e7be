"""Shared pytest fixtures for the Second Brain test suite."""

import pytest


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    """Pin configuration so tests never depend on the developer's shell."""
    monkeypatch.setenv("SLACK_SIGNING_SECRET", "test-signing-secret")
    monkeypatch.setenv("SLACK_INBOX_CHANNEL_ID", "C_INBOX")
    monkeypatch.setenv("SLACK_USER_ID", "U_OWNER")
    monkeypatch.setenv("CRON_SECRET", "cron-secret")
    monkeypatch.setenv("CLICKUP_LIST_PEOPLE", "L_PEOPLE")
    monkeypatch.setenv("CLICKUP_LIST_PROJECTS", "L_PROJECTS")
    monkeypatch.setenv("CLICKUP_LIST_IDEAS", "L_IDEAS")
    monkeypatch.setenv("CLICKUP_LIST_ADMIN", "L_ADMIN")
    monkeypatch.setenv("CLICKUP_LIST_INBOX_LOG", "L_LOG")
    for name in (
        "SECONDBRAIN_MODEL",
        "SECONDBRAIN_CONFIDENCE_THRESHOLD",
        "SECONDBRAIN_OUTBOUND_TIMEOUT_SECONDS",
        "SECONDBRAIN_DEDUP_WINDOW_SIZE",
    ):
        monkeypatch.delenv(name, raising=False)
