"""CrewAI writer that turns gathered digest context into a direct message."""

import logging
import math

from crewai import Agent, Crew, Process, Task

from secondbrain.common.crew_output import extract_task_output
from secondbrain.common.model_retry import kickoff_with_model_fallback
from secondbrain.shared import CrewRunResult, _required_llm_api_key, build_llm, outbound_timeout_seconds

logger = logging.getLogger(__name__)


def generate_digest_text(*, prompt: str, context: str, label: str) -> CrewRunResult:
    """
    Write digest prose from a prompt and its gathered context.

    Args:
        prompt: Format instructions (daily digest or weekly review).
        context: Plain-text sections built from task-store data.
        label: Workflow label for logs.
    Returns:
        CrewRunResult with the message text and the model used.
    Raises:
        RuntimeError: Missing credentials or empty writer output.
    """
    model = build_llm()
    _required_llm_api_key()
    writer = Agent(
        role="Second Brain Digest Writer",
        goal="Turn open loops and recent captures into a short, actionable summary.",
        backstory="You write direct, skimmable personal briefings with no filler.",
        verbose=False,
        llm=model,
        max_execution_time=math.ceil(outbound_timeout_seconds()),
    )
    task = Task(
        description=f"{prompt}\n\n{context}",
        expected_output="Plain Slack-markdown message ready to send as a direct message.",
        agent=writer,
    )
    crew = Crew(agents=[writer], tasks=[task], process=Process.sequential, verbose=False)
    result, used_model = kickoff_with_model_fallback(
        crew=crew,
        model=model,
        agents=[writer],
        logger=logger,
        label=label,
    )
    text = extract_task_output(task, fallback=result)
    if not text:
        raise RuntimeError(f"{label} writer returned empty output.")
    return CrewRunResult(raw=text, model=used_model)
