"""
secondbrain/capture/classifier.py
Classify captured text into PEOPLE / PROJECTS / IDEAS / ADMIN with a single-agent crew.
Exports: classify_message(text, hint), classify_forced(text, category), parse_classification(raw, text)
"""

import logging
import math
from typing import Any

from crewai import Agent, Crew, Process, Task

from secondbrain.capture.models import (
    CATEGORIES,
    DEGRADED_CONFIDENCE,
    FORCED_CONFIDENCE,
    IDEAS,
    Classification,
)
from secondbrain.common.crew_output import extract_json_object, extract_task_output
from secondbrain.common.model_retry import kickoff_with_model_fallback
from secondbrain.prompts import build_classification_prompt, build_forced_prompt
from secondbrain.shared import _required_llm_api_key, build_llm, outbound_timeout_seconds

logger = logging.getLogger(__name__)

FALLBACK_TITLE_CHARS = 50


def degraded_classification(text: str) -> Classification:
    """Return the safe default used when the model reply cannot be parsed."""
    return Classification(
        category=IDEAS,
        confidence=DEGRADED_CONFIDENCE,
        fields={"title": text[:FALLBACK_TITLE_CHARS], "one_liner": text, "notes": ""},
        degraded=True,
    )


def _coerce_confidence(value: Any) -> float:
    if isinstance(value, bool):
        raise ValueError("confidence must be a number")
    confidence = float(value)
    if math.isnan(confidence):
        raise ValueError("confidence must be a number")
    return min(1.0, max(0.0, confidence))


def parse_classification(raw: str, text: str) -> Classification:
    """
    Turn a model reply into a Classification without raising.

    Args:
        raw: Model reply, optionally wrapped in a ``` code fence.
        text: Original captured text (used for the degraded fallback).
    Returns:
        Parsed classification, or the degraded IDEAS fallback when the reply is
        not a JSON object with a known category and numeric confidence.
    """
    try:
        data = extract_json_object(raw)
        category = str(data.get("category", "")).strip().upper()
        if category not in CATEGORIES:
            raise ValueError(f"unknown category {category!r}")
        confidence = _coerce_confidence(data.get("confidence"))
        fields = data.get("fields") or {}
        if not isinstance(fields, dict):
            raise ValueError("fields must be an object")
    except (TypeError, ValueError) as exc:
        logger.warning("Classifier output unusable (%s); using degraded default. Raw: %s", exc, raw[:500])
        return degraded_classification(text)
    return Classification(category=category, confidence=confidence, fields=dict(fields))


def _run_classifier_crew(prompt: str, label: str) -> str:
    """Run one classification task and return the raw text reply."""
    model = build_llm()
    _required_llm_api_key()
    classifier = Agent(
        role="Second Brain Classifier",
        goal="Sort captured thoughts into exactly one life-management category with structured fields.",
        backstory="You file notes quickly and decisively, and you always answer with strict JSON.",
        verbose=False,
        llm=model,
        max_execution_time=math.ceil(outbound_timeout_seconds()),
    )
    task = Task(
        description=prompt,
        expected_output="Strict JSON object with category, confidence and fields.",
        agent=classifier,
    )
    crew = Crew(
        agents=[classifier],
        tasks=[task],
        process=Process.sequential,
        verbose=False,
    )
    result, used_model = kickoff_with_model_fallback(
        crew=crew,
        model=model,
        agents=[classifier],
        logger=logger,
        label=label,
    )
    output = extract_task_output(task, fallback=result)
    logger.info("%s raw output (model=%s): %s", label, used_model, output[:500])
    return output


def classify_message(text: str, hint: str | None = None) -> Classification:
    """
    Classify one capture.

    Args:
        text: Captured message text.
        hint: Optional category the user suggested; passed to the model as a signal.
    Returns:
        Classification (possibly the degraded fallback).
    Raises:
        RuntimeError: Missing model credentials.
        Exception: Model transport failures propagate to the caller.
    """
    raw = _run_classifier_crew(build_classification_prompt(text, hint=hint), label="Classifier")
    classification = parse_classification(raw, text)
    if classification.degraded:
        logger.warning("Degraded classification for capture: %s", text[:80])
    return classification


def classify_forced(text: str, category: str) -> Classification:
    """
    Re-classify text under a category chosen by the user.

    Always returns `category` with confidence 1.0, so the confidence gate never
    applies. When the reply cannot be parsed the fallback fields are kept.
    """
    category = category.upper()
    if category not in CATEGORIES:
        raise ValueError(f"Unknown category: {category}")
    raw = _run_classifier_crew(build_forced_prompt(text, category), label="ForcedClassifier")
    parsed = parse_classification(raw, text)
    return Classification(
        category=category,
        confidence=FORCED_CONFIDENCE,
        fields=parsed.fields,
        degraded=parsed.degraded,
    )
