from typing import Optional, TypedDict

from langgraph.graph import END, StateGraph

from ..common.critique_loop import run_critique_loop
from ..common.models import AgentConfig, ProgressCallback
from ..common.stages import report_progress, run_stage
from ..common.tools import validate_jd_format
from .agent import JDRefinementAgents, create_jd_refinement_agents

MAX_REVIEW_ROUNDS = 3


class JDRefinementState(TypedDict):
    job_description: str
    draft: str
    refined: str


def create_jd_refinement_workflow(agents: JDRefinementAgents, on_progress: Optional[ProgressCallback] = None):
    async def refine_node(state: JDRefinementState):
        report_progress(on_progress, "Refining job description...")
        draft = await run_stage(agents.refiner, f"Original Job Description:\n\n{state['job_description']}")
        return {"draft": draft}

    async def review_node(state: JDRefinementState):
        outcome = await run_critique_loop(
            agents.reviewer,
            state["draft"],
            lambda candidate: f"Review this Job Description:\n\n{candidate}",
            MAX_REVIEW_ROUNDS,
            on_progress=on_progress,
            progress_message="Validating format...",
        )
        return {"refined": outcome.candidate}

    def finalize_node(state: JDRefinementState):
        refined = state["refined"] or state["draft"] or state["job_description"]
        check = validate_jd_format(refined)
        if not check.valid:
            print(f"[WORKFLOW] Refined job description has format issues: {'; '.join(check.issues)}")
        return {"refined": refined.strip()}

    workflow = StateGraph(JDRefinementState)
    workflow.add_node("refine", refine_node)
    workflow.add_node("review", review_node)
    workflow.add_node("finalize", finalize_node)

    workflow.set_entry_point("refine")
    workflow.add_edge("refine", "review")
    workflow.add_edge("review", "finalize")
    workflow.add_edge("finalize", END)

    return workflow.compile()


async def refine_job_description(
    job_description: str,
    config: AgentConfig,
    on_progress: Optional[ProgressCallback] = None,
) -> str:
    """Reformat a raw job description into the four section layout."""
    report_progress(on_progress, "Analyzing job description...")
    agents = create_jd_refinement_agents(config)
    app = create_jd_refinement_workflow(agents, on_progress)
    final_state = await app.ainvoke(JDRefinementState(job_description=job_description, draft="", refined=""))

    report_progress(on_progress, "Job description refined!", done=True)
    return final_state["refined"]
