"""Unit tests for secondbrain/common/model_retry.py."""

from unittest.mock import MagicMock

import pytest

MODEL = "anthropic/claude-sonnet-4-20250514"


def test_kickoff_with_model_fallback_returns_on_first_success():
    from secondbrain.common.model_retry import kickoff_with_model_fallback

    crew = MagicMock()
    crew.kickoff.return_value = "ok"
    logger = MagicMock()

    result, used_model = kickoff_with_model_fallback(
        crew=crew,
        model=MODEL,
        agents=[MagicMock(llm=MODEL)],
        logger=logger,
        label="Classifier",
    )

    assert result == "ok"
    assert used_model == MODEL
    assert crew.kickoff.call_count == 1


@pytest.mark.parametrize(
    "message",
    [
        "Invalid response from LLM call - None or empty.",
        'litellm.InternalServerError: {"type":"error","error":{"type":"overloaded_error","message":"Overloaded"}}',
    ],
)
def test_kickoff_with_model_fallback_retries_once_on_transient_failure(message):
    from secondbrain.common.model_retry import kickoff_with_model_fallback

    crew = MagicMock()
    crew.kickoff.side_effect = [Exception(message), "ok-after-retry"]

    result, used_model = kickoff_with_model_fallback(
        crew=crew,
        model=MODEL,
        agents=[MagicMock(llm=MODEL)],
        logger=MagicMock(),
        label="DailyDigest",
    )

    assert result == "ok-after-retry"
    assert used_model == MODEL
    assert crew.kickoff.call_count == 2


def test_kickoff_with_model_fallback_uses_latest_not_found_fallback():
    from secondbrain.common.model_retry import kickoff_with_model_fallback

    crew = MagicMock()
    crew.kickoff.side_effect = [Exception("not_found_error: model"), "ok-with-fallback"]
    agent = MagicMock(llm="anthropic/claude-3-5-haiku-latest")

    result, used_model = kickoff_with_model_fallback(
        crew=crew,
        model="anthropic/claude-3-5-haiku-latest",
        agents=[agent],
        logger=MagicMock(),
        label="Classifier",
    )

    assert result == "ok-with-fallback"
    assert used_model == "anthropic/claude-3-5-haiku"
    assert agent.llm == "anthropic/claude-3-5-haiku"


def test_kickoff_with_model_fallback_raises_when_unhandled_failure():
    from secondbrain.common.model_retry import kickoff_with_model_fallback

    crew = MagicMock()
    crew.kickoff.side_effect = Exception("some unhandled failure")

    with pytest.raises(Exception, match="some unhandled failure"):
        kickoff_with_model_fallback(
            crew=crew,
            model=MODEL,
            agents=[MagicMock(llm=MODEL)],
            logger=MagicMock(),
            label="WeeklyReview",
        )
    assert crew.kickoff.call_count == 1


def test_kickoff_with_model_fallback_raises_after_second_transient_failure():
    from secondbrain.common.model_retry import kickoff_with_model_fallback

    crew = MagicMock()
    crew.kickoff.side_effect = [Exception("Overloaded"), Exception("Overloaded again")]

    with pytest.raises(Exception, match="Overloaded again"):
        kickoff_with_model_fallback(
            crew=crew,
            model=MODEL,
            agents=[MagicMock(llm=MODEL)],
            logger=MagicMock(),
            label="Classifier",
        )
