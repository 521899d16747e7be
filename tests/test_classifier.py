"""Unit tests for classification parsing and the classifier crew."""

import math
from datetime import date
from unittest.mock import MagicMock, patch

import pytest

from secondbrain.capture.classifier import (
    classify_forced,
    classify_message,
    degraded_classification,
    parse_classification,
)
from secondbrain.capture.models import Classification
from secondbrain.prompts import build_classification_prompt, build_forced_prompt


def test_unparseable_reply_degrades_to_ideas():
    result = parse_classification("not json at all", "buy milk")
    assert result == Classification(
        category="IDEAS",
        confidence=0.3,
        fields={"title": "buy milk", "one_liner": "buy milk", "notes": ""},
        degraded=True,
    )


def test_degraded_title_is_truncated_to_50_chars():
    text = "x" * 80
    result = degraded_classification(text)
    assert result.fields["title"] == "x" * 50
    assert result.fields["one_liner"] == text


def test_fenced_json_is_parsed():
    raw = '```json\n{"category": "PROJECTS", "confidence": 0.91, "fields": {"title": "Ship spec"}}\n```'
    result = parse_classification(raw, "ship the spec")
    assert result.category == "PROJECTS"
    assert math.isclose(result.confidence, 0.91)
    assert result.fields == {"title": "Ship spec"}
    assert not result.degraded


def test_json_surrounded_by_prose_is_parsed():
    raw = 'Sure! {"category": "admin", "confidence": 0.8, "fields": {}} Hope that helps.'
    result = parse_classification(raw, "renew passport")
    assert result.category == "ADMIN"
    assert not result.degraded


@pytest.mark.parametrize(
    "raw",
    [
        '{"category": "FINANCE", "confidence": 0.9, "fields": {}}',
        '{"category": "PEOPLE", "confidence": "high", "fields": {}}',
        '{"category": "PEOPLE", "confidence": true, "fields": {}}',
        '{"category": "PEOPLE", "confidence": 0.9, "fields": ["a"]}',
        "[1, 2, 3]",
        "",
    ],
)
def test_invalid_replies_degrade(raw):
    result = parse_classification(raw, "hello")
    assert result.degraded
    assert result.category == "IDEAS"
    assert result.confidence == 0.3


def test_confidence_is_clamped_to_unit_interval():
    result = parse_classification('{"category": "IDEAS", "confidence": 4, "fields": {}}', "x")
    assert result.confidence == 1.0


def test_classification_prompt_ends_with_quoted_text_and_carries_date():
    prompt = build_classification_prompt("call mom", today=date(2026, 3, 1))
    assert prompt.endswith('Classify this:\n"call mom"')
    assert "Today's date is 2026-03-01" in prompt
    assert "PEOPLE" in prompt and "ADMIN" in prompt


def test_classification_prompt_includes_hint():
    prompt = build_classification_prompt("call mom", hint="people", today=date(2026, 3, 1))
    assert "PEOPLE" in prompt
    assert "strong signal" in prompt


def test_forced_prompt_names_category_and_its_fields():
    prompt = build_forced_prompt("renew passport", "ADMIN", today=date(2026, 3, 1))
    assert '"category": "ADMIN"' in prompt
    assert "due_date" in prompt


def _patch_crew(reply: str):
    """Patch CrewAI classes so the classifier task reports `reply` as its output."""
    task = MagicMock(output=MagicMock(raw=reply))
    return (
        patch("secondbrain.capture.classifier.Agent", side_effect=lambda **kwargs: MagicMock(llm=kwargs.get("llm"))),
        patch("secondbrain.capture.classifier.Task", return_value=task),
        patch("secondbrain.capture.classifier.Crew", return_value=MagicMock()),
        patch(
            "secondbrain.capture.classifier.kickoff_with_model_fallback",
            return_value=(MagicMock(raw=reply), "anthropic/claude-sonnet-4-20250514"),
        ),
    )


def test_classify_message_runs_crew_and_parses(monkeypatch):
    monkeypatch.setenv("ANTHROPIC_API_KEY", "key")
    reply = '{"category": "PEOPLE", "confidence": 0.85, "fields": {"name": "Sarah"}}'
    agent_patch, task_patch, crew_patch, kickoff_patch = _patch_crew(reply)
    with agent_patch as mock_agent, task_patch as mock_task, crew_patch, kickoff_patch as mock_kickoff:
        result = classify_message("Sarah wants to talk about the offsite")

    assert result.category == "PEOPLE"
    assert result.fields["name"] == "Sarah"
    assert mock_agent.call_args.kwargs["max_execution_time"] == 20
    assert mock_task.call_args.kwargs["description"].endswith('"Sarah wants to talk about the offsite"')
    assert mock_kickoff.call_args.kwargs["label"] == "Classifier"


def test_classify_message_requires_api_key(monkeypatch):
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    with pytest.raises(RuntimeError, match="ANTHROPIC_API_KEY"):
        classify_message("anything")


def test_classify_forced_pins_category_and_full_confidence(monkeypatch):
    monkeypatch.setenv("ANTHROPIC_API_KEY", "key")
    reply = '{"category": "IDEAS", "confidence": 0.4, "fields": {"title": "Renew passport"}}'
    agent_patch, task_patch, crew_patch, kickoff_patch = _patch_crew(reply)
    with agent_patch, task_patch, crew_patch, kickoff_patch:
        result = classify_forced("renew passport", "admin")

    assert result.category == "ADMIN"
    assert result.confidence == 1.0
    assert result.fields == {"title": "Renew passport"}
    assert not result.degraded


def test_classify_forced_keeps_fallback_fields_when_reply_unusable(monkeypatch):
    monkeypatch.setenv("ANTHROPIC_API_KEY", "key")
    agent_patch, task_patch, crew_patch, kickoff_patch = _patch_crew("no idea")
    with agent_patch, task_patch, crew_patch, kickoff_patch:
        result = classify_forced("renew passport", "ADMIN")

    assert result.category == "ADMIN"
    assert result.confidence == 1.0
    assert result.degraded
    assert result.fields["title"] == "renew passport"


def test_classify_forced_rejects_unknown_category():
    with pytest.raises(ValueError, match="FINANCE"):
        classify_forced("x", "finance")
