"""
Job Title Agents

An analyst reads the job description and recent roles, a writer proposes a
concise Title Case job title and a reviewer checks its format.
"""

from typing import NamedTuple

from pydantic_ai import Agent

from ... import providers
from ..common.models import AgentConfig
from ..common.stages import build_agent

ANALYST_PROMPT = """
You are analyzing a job description to extract the core role title.

Extract:
1. The primary role/title mentioned in the JD
2. Seniority level (e.g., Senior, Lead, Staff, Principal)
3. Key domain/specialty (e.g., AI, Platform, Backend, Frontend)

Respond with a brief analysis (2-3 sentences) of what the ideal job title should convey.
"""

WRITER_PROMPT = """
You are a professional resume writer creating a job title.

CRITICAL RULES:
1. Output ONLY the job title - nothing else
2. NO markdown formatting (no **, *, _, etc.)
3. NO explanations or additional text
4. Keep it concise (2-5 words typically)
5. Use proper capitalization (Title Case)
6. Match the seniority and domain from the analysis

Examples of GOOD output:
Senior AI Platform Engineer
Lead Backend Developer
Staff Software Engineer

Examples of BAD output:
**Senior AI Platform Engineer** (has markdown)
Senior AI Platform Engineer - A role focused on... (has explanation)
senior ai platform engineer (wrong capitalization)
"""

REVIEWER_PROMPT = """
You are reviewing a generated job title for quality and format.

Validation Checklist:
1. NO MARKDOWN: Must not contain **, *, _, ~~, or backticks
2. CONCISE: Should be 2-5 words
3. PROPER CASE: Title Case (e.g., "Senior AI Engineer" not "senior ai engineer")
4. NO EXTRAS: No explanations, punctuation, or additional text
5. PROFESSIONAL: Sounds like a real job title

If the title passes ALL checks, respond "APPROVED".
If it fails ANY check, respond "CRITIQUE: <specific issue>" and provide the CORRECTED title on the next line.

Example responses:
APPROVED

or

CRITIQUE: Contains markdown formatting
Senior AI Platform Engineer
"""


class JobTitleAgents(NamedTuple):
    analyst: Agent
    writer: Agent
    reviewer: Agent


def create_job_title_agents(config: AgentConfig) -> JobTitleAgents:
    model = providers.create_model(config)
    return JobTitleAgents(
        analyst=build_agent(model, "job-title-analyst", ANALYST_PROMPT),
        writer=build_agent(model, "job-title-writer", WRITER_PROMPT),
        reviewer=build_agent(model, "job-title-reviewer", REVIEWER_PROMPT),
    )
