"""
Skills Sorting Agents

The Brain decides group and skill order in prose, the Scribe turns that
analysis into strict JSON and the Editor checks it against the original
groups with the validate_skills_json tool.
"""

from typing import NamedTuple

from pydantic_ai import Agent

from ... import providers
from ..common.models import AgentConfig
from ..common.stages import build_agent
from ..common.tools import make_skills_json_tool

BRAIN_PROMPT = (
    "You are a Skill Sorting Expert (The Brain). "
    "Your task is to analyze a job description and determine the most relevant order for resume skills.\n"
    "RULES:\n"
    "1. Determine the best order for skill groups based on JD relevance.\n"
    "2. Determine the best order for skills within each group.\n"
    "3. IDENTIFY MISSING TECH: Find technologies in the JD that are not in the current list.\n"
    "4. PRESERVE ALL: Never suggest removing an existing skill.\n"
    "OUTPUT: A clean markdown report with the optimized structure. No JSON yet."
)

SCRIBE_PROMPT = (
    "You are a Data Architect (The Scribe). "
    "Your ONLY task is to convert a skill analysis report and original data into a STRICT JSON format.\n"
    "RULES:\n"
    "1. Use the optimized order and new skills provided in the analysis.\n"
    "2. Ensure ALL original groups and skills are included.\n"
    "3. Output EXCLUSIVELY valid JSON. No preamble, no markdown code blocks.\n"
    "TARGET FORMAT:\n"
    "{\n"
    '  "groupOrder": ["Group 1", "Group 2", ...],\n'
    '  "skillOrder": {\n'
    '    "Group 1": ["skillA", "skillB", ...],\n'
    '    "Group 2": ["skillC", "skillD", ...]\n'
    "  }\n"
    "}"
)


def editor_prompt(group_count: int) -> str:
    return (
        "You are a Data Validator (The Editor). "
        "Verify the generated skill JSON against the original data.\n"
        "CRITERIA:\n"
        "1. Valid JSON syntax? Call the validate_skills_json tool to check.\n"
        f"2. ALL {group_count} original groups present?\n"
        "3. NO original skills lost?\n"
        "4. Proper standard tech naming?\n"
        'If perfect, respond "APPROVED". Otherwise, respond "CRITIQUE: <reasons>" '
        "and provide the CORRECTED JSON on the next line."
    )


class SkillsSortingAgents(NamedTuple):
    brain: Agent
    scribe: Agent
    editor: Agent


def create_skills_sorting_agents(config: AgentConfig, group_count: int) -> SkillsSortingAgents:
    model = providers.create_model(config)
    return SkillsSortingAgents(
        brain=build_agent(model, "skills-brain", BRAIN_PROMPT),
        scribe=build_agent(model, "skills-scribe", SCRIBE_PROMPT),
        editor=build_agent(
            model,
            "skills-editor",
            editor_prompt(group_count),
            tools=[make_skills_json_tool(group_count)],
        ),
    )
