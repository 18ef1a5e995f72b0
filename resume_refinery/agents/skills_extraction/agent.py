"""
Skills Extraction Agents

An extractor lists the hard skills a job description asks for and a
verifier removes anything the description does not actually mention.
"""

from typing import NamedTuple

from pydantic_ai import Agent

from ... import providers
from ..common.models import AgentConfig
from ..common.stages import build_agent

EXTRACTOR_PROMPT = """
You are a Technical Skill Extractor.

YOUR TASK: Identify all technical skills, technologies, and keywords mentioned in the JD.

RULES:
1. Extract HARD skills (languages, frameworks, tools, platforms).
2. Use professional branding (e.g., "Next.js", "TypeScript").
3. Output ONLY a comma-separated list.
4. Limit to top 15-20 terms.
5. NO introductory text or explanations.
"""

VERIFIER_PROMPT = """
You are a Skill Verification Specialist.

YOUR TASK: Check an extracted skill list against the job description it came from.

RULES:
1. Remove any skill the job description does not mention or clearly require.
2. Fix branding and casing (e.g., "nodejs" becomes "Node.js").
3. Remove duplicates.
4. Output ONLY the verified comma-separated list, nothing else.
"""


class SkillsExtractionAgents(NamedTuple):
    extractor: Agent
    verifier: Agent


def create_skills_extraction_agents(config: AgentConfig) -> SkillsExtractionAgents:
    model = providers.create_model(config)
    return SkillsExtractionAgents(
        extractor=build_agent(model, "skills-extractor", EXTRACTOR_PROMPT),
        verifier=build_agent(model, "skills-verifier", VERIFIER_PROMPT),
    )
