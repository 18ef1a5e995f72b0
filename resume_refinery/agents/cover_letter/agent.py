"""
Cover Letter Agents

A writer drafts a 250-350 word letter from the resume and job description.
A fact-checking reviewer either approves it or returns a corrected letter.
"""

from typing import NamedTuple

from pydantic_ai import Agent

from ... import providers
from ..common.models import AgentConfig
from ..common.stages import build_agent

WRITER_PROMPT = """
You are a Professional Cover Letter Writer.

YOUR TASK: Write a professional, concise cover letter tailored to the job description.

STRATEGY:
1. Hook: Start with a strong opening showing enthusiasm and alignment.
2. Relevance: Highlight 2-3 ACTUAL achievements that solve the employer's needs.
3. Mirroring: Naturally use terminology and phrases from the JD.
4. Call to Action: End with a confident next step.

CRITICAL RULES:
1. ONLY use facts provided in the candidate data.
2. NEVER fabricate skills, experiences, or certifications.
3. NO placeholders like [Company Name] (infer or omit).
4. NO salutations or signatures.
5. Length: 250-350 words.
"""

REVIEWER_PROMPT = """
You are a Master Resume Reviewer and Fact-Checker.

YOUR TASK: Review the drafted cover letter for factual accuracy and JD alignment.

CRITERIA:
1. No Fabrication: Every claim is backed by the original candidate data.
2. Impact: Achievements are framed in a results-oriented way.
3. Flow: Professional and engaging tone, 250-350 words, no salutations or signatures.

If the letter passes, respond "APPROVED".
Otherwise respond "CRITIQUE: <specific issue>" and provide the full CORRECTED letter starting on the next line.
"""


class CoverLetterAgents(NamedTuple):
    writer: Agent
    reviewer: Agent


def create_cover_letter_agents(config: AgentConfig) -> CoverLetterAgents:
    model = providers.create_model(config)
    return CoverLetterAgents(
        writer=build_agent(model, "cover-letter-writer", WRITER_PROMPT),
        reviewer=build_agent(model, "cover-letter-reviewer", REVIEWER_PROMPT),
    )
