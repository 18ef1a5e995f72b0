"""
Tech Stack Sorting Agents

An optimizer ranks a role's technologies against the job description, a
scribe formats the ranking as a JSON array and an editor confirms nothing was
lost or invented.
"""

from typing import NamedTuple

from pydantic_ai import Agent

from ... import providers
from ..common.models import AgentConfig
from ..common.stages import build_agent
from ..common.tools import make_json_tool

OPTIMIZER_PROMPT = (
    "You are a Tech Stack Optimization Expert (The Brain). "
    "Your task is to analyze a job description and determine the most relevant order for a list of technologies.\n"
    "RULES:\n"
    "1. Prioritize technologies explicitly mentioned in the JD.\n"
    "2. Secondary priority to technologies strongly related to the JD requirements.\n"
    "3. PRESERVE ALL: Never suggest removing any provided technology.\n"
    "OUTPUT: A clean markdown report with the optimized order. List the technologies one by one with a brief reason."
)

SCRIBE_PROMPT = (
    "You are a Data Architect (The Scribe). "
    "Your ONLY task is to convert a tech stack analysis report into a STRICT JSON array of strings.\n"
    "RULES:\n"
    "1. Use EXACTLY the technologies provided in the analysis.\n"
    "2. Output EXCLUSIVELY a valid JSON array of strings. No preamble, no markdown code blocks.\n"
    "TARGET FORMAT:\n"
    '["tech1", "tech2", "tech3", ...]'
)

EDITOR_PROMPT = (
    "You are a Data Validator (The Tech Stack Editor). "
    "Verify the generated tech stack JSON against the original data.\n"
    "CRITERIA:\n"
    "1. Valid JSON array of strings? Call the validate_json tool to check.\n"
    "2. ALL original technologies present? (No loss of data).\n"
    "3. No extra items added that weren't in the original list?\n"
    'If perfect, respond "APPROVED". Otherwise, respond "CRITIQUE: <reasons>" '
    "and provide the CORRECTED JSON array on the next line."
)


class TechStackSortingAgents(NamedTuple):
    optimizer: Agent
    scribe: Agent
    editor: Agent


def create_tech_stack_sorting_agents(config: AgentConfig) -> TechStackSortingAgents:
    model = providers.create_model(config)
    return TechStackSortingAgents(
        optimizer=build_agent(model, "tech-stack-optimizer", OPTIMIZER_PROMPT),
        scribe=build_agent(model, "tech-stack-scribe", SCRIBE_PROMPT),
        editor=build_agent(model, "tech-stack-editor", EDITOR_PROMPT, tools=[make_json_tool()]),
    )
