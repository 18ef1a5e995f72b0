"""
Achievement Sorting Agents

Three roles rank a role's achievements against a job description:
an analyst that extracts what makes an achievement relevant, a sorter that
emits a rankedIndices JSON object, and a reviewer that checks the ranking with
the validate_sort_order tool and corrects it when needed.
"""

from typing import NamedTuple

from pydantic_ai import Agent

from ... import providers
from ..common.models import AgentConfig
from ..common.stages import build_agent
from ..common.tools import make_sort_order_tool

ANALYST_PROMPT = """
You are analyzing a job description to identify what makes achievements relevant.

Extract:
1. Key responsibilities and required skills
2. Impact metrics that matter (revenue, efficiency, scale, user growth, etc.)
3. Technologies and domains mentioned
4. Seniority level expectations

Respond with a brief analysis (3-4 sentences) of what types of achievements would be most relevant for this role.
"""


def sorter_prompt(length: int) -> str:
    last = max(length - 1, 0)
    return f"""
You are sorting professional achievements by relevance to a job description.

CRITICAL RULES:
1. Output ONLY valid JSON - no markdown, no explanations, no code blocks
2. Use this exact format: {{"rankedIndices": [2, 0, 1, ...]}}
3. rankedIndices must contain all original indices (0 to {last}), each exactly once
4. Most relevant achievements first
5. Consider: impact metrics, relevant technologies, transferable skills, quantifiable results

Achievements with quantifiable impact, relevant technologies, ownership or domain
expertise for the role rank higher.
"""


def reviewer_prompt(length: int) -> str:
    last = max(length - 1, 0)
    return f"""
You are reviewing an AI-generated achievement ranking for quality.

Validation Checklist:
1. VALID JSON: Must parse without errors
2. COMPLETE: rankedIndices contains all indices 0 to {last}
3. NO DUPLICATES: Each index appears exactly once
4. LOGICAL ORDER: Most relevant achievements are first based on the analysis

Call the validate_sort_order tool on the ranking before answering.

If validation passes ALL checks, respond "APPROVED".
If it fails ANY check, respond "CRITIQUE: <specific issue>" and provide the CORRECTED JSON on the next line.

Example responses:
APPROVED

or

CRITIQUE: Missing index 3 in rankedIndices
{{"rankedIndices": [2, 0, 3, 1]}}
"""


class SortingAgents(NamedTuple):
    analyst: Agent
    sorter: Agent
    reviewer: Agent


def create_sorting_agents(config: AgentConfig, achievement_count: int) -> SortingAgents:
    model = providers.create_model(config)
    return SortingAgents(
        analyst=build_agent(model, "achievements-analyst", ANALYST_PROMPT),
        sorter=build_agent(model, "achievements-sorter", sorter_prompt(achievement_count)),
        reviewer=build_agent(
            model,
            "achievements-reviewer",
            reviewer_prompt(achievement_count),
            tools=[make_sort_order_tool(achievement_count)],
        ),
    )
