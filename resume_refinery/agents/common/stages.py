"""
Stage runner helpers.

A stage feeds one role agent a prompt built from the workflow state, awaits
the reply and hands back trimmed text or a structured payload. Provider
errors are not caught here; they propagate to the workflow caller.
"""

import json
import re
from typing import Any, Optional, Sequence

from pydantic import BaseModel
from pydantic_ai import Agent, Tool
from pydantic_ai.exceptions import UnexpectedModelBehavior
from pydantic_ai.models import Model

from .models import ProgressCallback, ProgressEvent


def build_agent(
    model: Model,
    name: str,
    system_prompt: str,
    tools: Sequence[Tool] = (),
    output_type: Any = str,
) -> Agent:
    return Agent(
        model,
        name=name,
        system_prompt=system_prompt,
        tools=list(tools),
        output_type=output_type,
    )


def report_progress(on_progress: Optional[ProgressCallback], content: str, done: bool = False) -> None:
    print(f"[WORKFLOW] {content}")
    if on_progress is not None:
        on_progress(ProgressEvent(content=content, done=done))


async def run_stage(agent: Agent, prompt: str) -> str:
    """Run a text-producing agent and return its trimmed reply."""
    print(f"[AGENT] Agent Invocation Started: {agent.name}")
    result = await agent.run(prompt)
    print(f"[AGENT] Agent Invocation Completed: {agent.name} (messages: {len(result.all_messages())})")
    return str(result.output).strip()


async def run_structured_stage(agent: Agent, prompt: str, fallback: BaseModel) -> BaseModel:
    """
    Run an agent whose output type is a finalize tool and return the validated model.

    When the model never produces a valid tool call the fallback is returned.
    Transport errors still propagate.
    """
    print(f"[AGENT] Agent Invocation Started: {agent.name}")
    try:
        result = await agent.run(prompt)
    except UnexpectedModelBehavior as e:
        print(f"[AGENT] {agent.name} did not return structured output ({e}), using fallback")
        return fallback
    print(f"[AGENT] Agent Invocation Completed: {agent.name} (messages: {len(result.all_messages())})")
    return result.output


def clean_json_string(s: str) -> str:
    """Remove markdown fences, description text, and whitespace from a string."""
    s = s.strip()

    fence = re.search(r"```(?:json)?\s*\n([\s\S]*?)```", s)
    if fence:
        return fence.group(1).strip()

    # Fall back to the outermost object or array, whichever opens first
    spans = []
    for open_char, close_char in (("{", "}"), ("[", "]")):
        start = s.find(open_char)
        end = s.rfind(close_char)
        if start != -1 and end > start:
            spans.append((start, end))
    if spans:
        start, end = min(spans)
        return s[start:end + 1].strip()

    return s


def safe_parse_json(text: str, fallback: Any = None) -> Any:
    """Parse JSON from model output, tolerating fences and preamble. Returns fallback on failure."""
    for candidate in (text.strip(), clean_json_string(text)):
        try:
            return json.loads(candidate)
        except (json.JSONDecodeError, TypeError):
            continue
    print(f"[WORKFLOW] Could not parse JSON from model output: {text[:80]!r}")
    return fallback


def strip_markdown(text: str) -> str:
    """Drop paired emphasis markers and wrapping quotes from a short answer."""
    cleaned = text
    for pattern in (r"\*\*(.+?)\*\*", r"\*(.+?)\*", r"_(.+?)_", r"~~(.+?)~~", r"`(.+?)`"):
        cleaned = re.sub(pattern, r"\1", cleaned)
    return cleaned.strip().strip("\"'").strip()
