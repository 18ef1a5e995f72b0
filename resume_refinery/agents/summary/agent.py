"""
Professional Summary Agents

Builds the analyst, writer and reviewer used to produce a four sentence
"Semantic Pillar" summary. The reviewer is bound to a skill whitelist tool
so it can reject summaries that mention technologies the candidate never
listed.
"""

from typing import NamedTuple, Sequence

from pydantic_ai import Agent

from ... import providers
from ..common.models import AgentConfig
from ..common.stages import build_agent
from ..common.tools import make_skill_whitelist_tool

ANALYST_PROMPT = (
    "You are a Resume Strategy Analyst. Your task is to extract high-level semantic pillars and specific "
    "technology clusters from a candidate's work history.\n\n"
    "RULES:\n"
    '1. IDENTIFY PILLARS: Group the candidate\'s achievements into 3 distinct "Semantic Pillars" '
    "(e.g., Cloud-Native Infrastructure, Security & IAM, AI/ML Workflows).\n"
    "2. POWER CLUSTERS: For each pillar, identify the highly specific technology sets from the ALLOWED SKILLS list.\n"
    "3. JD OFFSET: Bias the selection of these pillars towards what is most relevant in the provided Job Description.\n"
    "OUTPUT: A structured brief including: Target Role, Pillars (with achievements), and Power Clusters."
)

WRITER_PROMPT = (
    "You are a Master Professional Resume Writer. Your task is to synthesize a candidate's profile into a "
    "sophisticated 4-sentence summary.\n\n"
    "BENCHMARK FORMAT (Follow this structure strictly):\n"
    "Sentence 1: [Seniority/Role] with [Years] of [Core Domain Summary].\n"
    'Sentence 2: "Specializing in [Pillar 1], [Pillar 2], and [Pillar 3]."\n'
    'Sentence 3: "Proven track record in [Methodology/Depth 1], [Depth 2], and [Depth 3]."\n'
    'Sentence 4: "Expert-level implementation of [Tech Cluster 1] and [Tech Cluster 2], with a focus on '
    '[Linking Tech to Business Impact]."\n\n'
    "STRICT RULES:\n"
    "1. EXACTLY 4 sentences.\n"
    "2. Third-person voice only.\n"
    "3. MUST use the specific Pillars and Power Clusters provided by the Analyst.\n"
    "4. FABRICATION: ONLY use skills from the provided allowed list.\n"
    "OUTPUT: The summary text only."
)

REVIEWER_PROMPT = (
    "You are a Resume Quality Auditor. Verify the generated summary against the 4-sentence Semantic Pillar structure.\n\n"
    "CRITERIA:\n"
    "1. COUNT: Exactly 4 sentences?\n"
    "2. SENTENCE 1: Role/Seniority + Years + Domain?\n"
    "3. SENTENCE 2: Specializing in pillars?\n"
    "4. SENTENCE 3: Proven track record in depth/methodologies?\n"
    "5. SENTENCE 4: Tech clusters + Focus on business impact?\n"
    "6. SKILLS: Use validate_summary_skills to ensure no invented technologies.\n"
    'If perfect, respond "APPROVED". Otherwise, respond "CRITIQUE: <specific issues>" '
    "and provide the CORRECTED summary on the next line."
)


class SummaryAgents(NamedTuple):
    analyst: Agent
    writer: Agent
    reviewer: Agent


def create_summary_agents(config: AgentConfig, allowed_skills: Sequence[str]) -> SummaryAgents:
    model = providers.create_model(config)
    return SummaryAgents(
        analyst=build_agent(model, "summary-analyst", ANALYST_PROMPT),
        writer=build_agent(model, "summary-writer", WRITER_PROMPT),
        reviewer=build_agent(
            model,
            "summary-reviewer",
            REVIEWER_PROMPT,
            tools=[make_skill_whitelist_tool(allowed_skills)],
        ),
    )
