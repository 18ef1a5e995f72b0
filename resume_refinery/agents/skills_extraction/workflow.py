from typing import List, Optional, TypedDict

from langgraph.graph import END, StateGraph

from ..common.models import AgentConfig, ProgressCallback
from ..common.stages import report_progress, run_stage, strip_markdown
from .agent import SkillsExtractionAgents, create_skills_extraction_agents


class SkillsExtractionState(TypedDict):
    job_description: str
    extracted: str
    verified: str


def split_skill_list(text: str) -> List[str]:
    """Split a comma or newline separated list, dropping bullets and duplicates."""
    skills = []
    for raw in text.replace("\n", ",").split(","):
        skill = strip_markdown(raw.strip().lstrip("-•").strip())
        if skill and skill.lower() not in {s.lower() for s in skills}:
            skills.append(skill)
    return skills


def create_skills_extraction_workflow(agents: SkillsExtractionAgents, on_progress: Optional[ProgressCallback] = None):
    async def extract_node(state: SkillsExtractionState):
        report_progress(on_progress, "Extracting key skills from JD...")
        extracted = await run_stage(agents.extractor, f"Extract skills from this JD: {state['job_description']}")
        return {"extracted": extracted}

    async def verify_node(state: SkillsExtractionState):
        report_progress(on_progress, "Verifying skill accuracy...")
        verified = await run_stage(
            agents.verifier,
            f"Job Description: {state['job_description']}\n\n"
            f"Extracted Skills: {state['extracted']}\n\nProvide the verified list:",
        )
        return {"verified": verified}

    workflow = StateGraph(SkillsExtractionState)
    workflow.add_node("extract", extract_node)
    workflow.add_node("verify", verify_node)

    workflow.set_entry_point("extract")
    workflow.add_edge("extract", "verify")
    workflow.add_edge("verify", END)

    return workflow.compile()


async def extract_skills(
    job_description: str,
    config: AgentConfig,
    on_progress: Optional[ProgressCallback] = None,
) -> str:
    """Return the verified, comma separated hard skills a job description asks for."""
    agents = create_skills_extraction_agents(config)
    app = create_skills_extraction_workflow(agents, on_progress)
    final_state = await app.ainvoke(SkillsExtractionState(job_description=job_description, extracted="", verified=""))

    report_progress(on_progress, "Skills extracted and verified!", done=True)
    skills = split_skill_list(final_state["verified"]) or split_skill_list(final_state["extracted"])
    return ", ".join(skills)
