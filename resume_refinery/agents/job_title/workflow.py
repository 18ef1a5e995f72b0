from typing import Optional, TypedDict

from langgraph.graph import END, StateGraph

from ..common.critique_loop import run_critique_loop
from ..common.models import AgentConfig, ProgressCallback, ResumeSnapshot
from ..common.stages import report_progress, run_stage, strip_markdown
from .agent import JobTitleAgents, create_job_title_agents

MAX_REVIEW_ROUNDS = 3


class JobTitleState(TypedDict):
    job_description: str
    summary: str
    recent_roles: str
    analysis: str
    title: str


def _first_line(text: str) -> str:
    return next((line for line in text.splitlines() if line.strip()), "").strip()


def create_job_title_workflow(agents: JobTitleAgents, on_progress: Optional[ProgressCallback] = None):
    async def analyze_node(state: JobTitleState):
        report_progress(on_progress, "Analyzing job requirements...")
        analysis = await run_stage(
            agents.analyst,
            f"Job Description:\n{state['job_description']}\n\n"
            f"Resume Summary:\n{state['summary']}\n\n"
            f"Recent Experience:\n{state['recent_roles']}",
        )
        return {"analysis": analysis}

    async def write_node(state: JobTitleState):
        report_progress(on_progress, "Crafting job title...")
        title = await run_stage(agents.writer, f"Analysis:\n{state['analysis']}\n\nGenerate the job title now:")
        return {"title": title}

    async def review_node(state: JobTitleState):
        outcome = await run_critique_loop(
            agents.reviewer,
            state["title"],
            lambda candidate: f'Generated Job Title:\n"{candidate}"',
            MAX_REVIEW_ROUNDS,
            normalize=_first_line,
            on_progress=on_progress,
            progress_message="Validating job title...",
        )
        return {"title": outcome.candidate}

    workflow = StateGraph(JobTitleState)
    workflow.add_node("analyze", analyze_node)
    workflow.add_node("write", write_node)
    workflow.add_node("review", review_node)

    workflow.set_entry_point("analyze")
    workflow.add_edge("analyze", "write")
    workflow.add_edge("write", "review")
    workflow.add_edge("review", END)

    return workflow.compile()


async def generate_job_title(
    resume: ResumeSnapshot,
    job_description: str,
    config: AgentConfig,
    on_progress: Optional[ProgressCallback] = None,
) -> str:
    """Generate a clean, professional job title for the resume headline."""
    recent_roles = "\n".join(
        f"{exp.position} at {exp.organization}" for exp in resume.work_experience[:2]
    ) or "Not provided"

    agents = create_job_title_agents(config)
    app = create_job_title_workflow(agents, on_progress)
    final_state = await app.ainvoke(
        JobTitleState(
            job_description=job_description,
            summary=resume.summary or "Not provided",
            recent_roles=recent_roles,
            analysis="",
            title="",
        )
    )

    report_progress(on_progress, "Job title generated!", done=True)
    return strip_markdown(final_state["title"])
