import json
from datetime import date
from typing import List, Optional, TypedDict

from langgraph.graph import END, StateGraph

from ..common.critique_loop import run_critique_loop
from ..common.models import AgentConfig, ProgressCallback, ResumeSnapshot
from ..common.stages import report_progress, run_stage
from ..common.tools import validate_skills_in_summary
from .agent import SummaryAgents, create_summary_agents

MAX_REVIEW_ROUNDS = 3


class SummaryState(TypedDict):
    job_description: str
    work_history: str
    allowed_skills: List[str]
    experience: str
    analysis: str
    draft: str
    summary: str


def experience_phrase(resume: ResumeSnapshot, today: Optional[date] = None) -> str:
    """'<N>+ years' counted from the earliest known start year, else 'extensive experience'."""
    start_years = [exp.start_year for exp in resume.work_experience if exp.start_year]
    if not start_years:
        return "extensive experience"
    years = (today or date.today()).year - min(start_years)
    return f"{years}+ years" if years > 0 else "extensive experience"


def _unquote(text: str) -> str:
    return text.strip().strip("\"'").strip()


def create_summary_workflow(agents: SummaryAgents, on_progress: Optional[ProgressCallback] = None):
    async def analyze_node(state: SummaryState):
        report_progress(on_progress, "Identifying job-relevant metrics and skills...")
        analysis = await run_stage(
            agents.analyst,
            f"JOB DESCRIPTION:\n{state['job_description']}\n\n"
            f"CANDIDATE WORK HISTORY:\n{state['work_history']}\n\n"
            f"ALLOWED SKILLS:\n{', '.join(state['allowed_skills'])}",
        )
        return {"analysis": analysis}

    async def write_node(state: SummaryState):
        report_progress(on_progress, "Drafting your professional summary...")
        draft = await run_stage(
            agents.writer,
            f"Analysis Brief:\n{state['analysis']}\n\n"
            f"Allowed Skills:\n{', '.join(state['allowed_skills'])}\n\n"
            f"Candidate Experience: {state['experience']}",
        )
        return {"draft": _unquote(draft)}

    async def review_node(state: SummaryState):
        outcome = await run_critique_loop(
            agents.reviewer,
            state["draft"],
            lambda candidate: (
                f"Summary to review:\n{candidate}\n\n"
                "Verify against the 4-sentence structure using the validate_summary_skills tool."
            ),
            MAX_REVIEW_ROUNDS,
            normalize=_unquote,
            on_progress=on_progress,
            progress_message="Auditing summary for structure and alignment...",
        )
        return {"summary": outcome.candidate}

    def finalize_node(state: SummaryState):
        summary = state["summary"] or state["draft"]
        check = validate_skills_in_summary(summary, state["allowed_skills"])
        if not check.valid:
            print(f"[WORKFLOW] Summary mentions unlisted skills: {'; '.join(check.issues)}")
        return {"summary": summary}

    workflow = StateGraph(SummaryState)
    workflow.add_node("analyze", analyze_node)
    workflow.add_node("write", write_node)
    workflow.add_node("review", review_node)
    workflow.add_node("finalize", finalize_node)

    workflow.set_entry_point("analyze")
    workflow.add_edge("analyze", "write")
    workflow.add_edge("write", "review")
    workflow.add_edge("review", "finalize")
    workflow.add_edge("finalize", END)

    return workflow.compile()


async def generate_summary(
    resume: ResumeSnapshot,
    job_description: str,
    config: AgentConfig,
    on_progress: Optional[ProgressCallback] = None,
) -> str:
    """Write a four sentence professional summary grounded in the resume's own skills."""
    allowed_skills = resume.all_skills()
    work_history = json.dumps([exp.model_dump(by_alias=True) for exp in resume.work_experience])

    agents = create_summary_agents(config, allowed_skills)
    app = create_summary_workflow(agents, on_progress)
    final_state = await app.ainvoke(
        SummaryState(
            job_description=job_description,
            work_history=work_history,
            allowed_skills=allowed_skills,
            experience=experience_phrase(resume),
            analysis="",
            draft="",
            summary="",
        )
    )

    report_progress(on_progress, "Expert summary generated and verified.", done=True)
    return final_state["summary"] or resume.summary
