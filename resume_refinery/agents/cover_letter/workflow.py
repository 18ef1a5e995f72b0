from typing import Optional, TypedDict

from langgraph.graph import END, StateGraph

from ..common.critique_loop import run_critique_loop
from ..common.models import AgentConfig, ProgressCallback, ResumeSnapshot
from ..common.stages import report_progress, run_stage
from .agent import CoverLetterAgents, create_cover_letter_agents

MAX_REVIEW_ROUNDS = 2


class CoverLetterState(TypedDict):
    context: str
    draft: str
    letter: str


def candidate_context(resume: ResumeSnapshot, job_description: str) -> str:
    experience = "\n\n".join(
        f"{exp.position} at {exp.organization}: {'; '.join(exp.key_achievements)}"
        for exp in resume.work_experience
    )
    return (
        f"CANDIDATE: {resume.name}\n"
        f"SUMMARY: {resume.summary}\n"
        f"EXPERIENCE: {experience}\n"
        f"SKILLS: {', '.join(resume.all_skills())}\n\n"
        f"JD: {job_description}"
    )


def create_cover_letter_workflow(agents: CoverLetterAgents, on_progress: Optional[ProgressCallback] = None):
    async def write_node(state: CoverLetterState):
        report_progress(on_progress, "Drafting tailored cover letter...")
        draft = await run_stage(agents.writer, f"Create a cover letter based on this data: {state['context']}")
        return {"draft": draft}

    async def review_node(state: CoverLetterState):
        outcome = await run_critique_loop(
            agents.reviewer,
            state["draft"],
            lambda candidate: f"Original Data: {state['context']}\n\nDraft Letter: {candidate}",
            MAX_REVIEW_ROUNDS,
            on_progress=on_progress,
            progress_message="Reviewing cover letter draft...",
        )
        return {"letter": outcome.candidate}

    workflow = StateGraph(CoverLetterState)
    workflow.add_node("write", write_node)
    workflow.add_node("review", review_node)

    workflow.set_entry_point("write")
    workflow.add_edge("write", "review")
    workflow.add_edge("review", END)

    return workflow.compile()


async def generate_cover_letter(
    resume: ResumeSnapshot,
    job_description: str,
    config: AgentConfig,
    on_progress: Optional[ProgressCallback] = None,
) -> str:
    """Draft and fact-check a cover letter body for the target job."""
    agents = create_cover_letter_agents(config)
    app = create_cover_letter_workflow(agents, on_progress)
    final_state = await app.ainvoke(
        CoverLetterState(context=candidate_context(resume, job_description), draft="", letter="")
    )

    report_progress(on_progress, "Cover letter ready!", done=True)
    return (final_state["letter"] or final_state["draft"]).strip()
