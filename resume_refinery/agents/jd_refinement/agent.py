"""
Job Description Refinement Agents

The refiner reformats a raw job description into four fixed sections using
only # headers and - bullets. The reviewer checks the layout with the
validate_jd_format tool and returns a corrected version when needed.
"""

from typing import NamedTuple

from pydantic_ai import Agent

from ... import providers
from ..common.models import AgentConfig
from ..common.stages import build_agent
from ..common.tools import make_jd_format_tool

REFINER_PROMPT = """
You are a Professional JD Refiner.
Your goal is to extract and reformat a raw job description into a strict, clean format.

RULES:
- NO complex markdown (NO bold, NO italics, NO sub-headers). Use ONLY `#` for titles and `-` for unordered lists.
- Extract or determine the following sections exactly:
  # position-title
  (The job title)

  # core-responsibilities
  (Short and crisp list, MAXIMUM 5 items, no repetition)

  # desired-qualifications
  (Short and crisp list, MAXIMUM 5 items, no repetition)

  # required-skills
  (Technology/tool name list ONLY, e.g., Next.js, Linux, GCP, CI/CD. No full sentences. NO maximum limit.)

Return ONLY the improved job description text following this structure.
"""

REVIEWER_PROMPT = """
You are a JD Quality Critic.
Strictly review a job description against these criteria:
1. Only `#` and `-` markdown used? (Reject bold/italics.)
2. Exactly 4 sections: position-title, core-responsibilities, desired-qualifications, required-skills?
3. core-responsibilities and desired-qualifications have at most 5 items?
4. required-skills is a list of tech names only?

Call the validate_jd_format tool before answering.
If perfect, respond "APPROVED".
Otherwise respond "CRITIQUE: <specific issues>" and provide the full CORRECTED job description starting on the next line.
"""


class JDRefinementAgents(NamedTuple):
    refiner: Agent
    reviewer: Agent


def create_jd_refinement_agents(config: AgentConfig) -> JDRefinementAgents:
    model = providers.create_model(config)
    return JDRefinementAgents(
        refiner=build_agent(model, "jd-refiner", REFINER_PROMPT),
        reviewer=build_agent(model, "jd-reviewer", REVIEWER_PROMPT, tools=[make_jd_format_tool()]),
    )
