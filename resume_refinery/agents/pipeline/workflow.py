"""
Full AI generation pipeline.

Runs the tasks one after another so a single provider is never hit with
parallel requests: refine the job description, write the summary against the
refined description, then tailor every work experience entry. Each task
reports its own fine-grained progress to the console only; callers get one
PipelineProgress event per step.
"""

from typing import List, Optional, TypedDict

from langgraph.graph import END, StateGraph

from ..common.models import AgentConfig, ResumeSnapshot, WorkExperience
from ..experience_tailoring.workflow import tailor_experience
from ..jd_refinement.workflow import refine_job_description
from ..summary.workflow import generate_summary
from .models import PipelineProgress, PipelineProgressCallback, PipelineResult


class PipelineState(TypedDict):
    resume: dict
    job_description: str
    refined_jd: str
    summary: str
    next_index: int
    work_experiences: List[dict]


def create_generation_pipeline(config: AgentConfig, on_progress: Optional[PipelineProgressCallback] = None):
    def emit(current_step: int, total_steps: int, message: str, done: bool = False):
        print(f"[PIPELINE] Step {current_step}/{total_steps}: {message}")
        if on_progress is not None:
            on_progress(PipelineProgress(current_step=current_step, total_steps=total_steps, message=message, done=done))

    def total_steps(state: PipelineState) -> int:
        return 2 + len(state["resume"]["work_experience"])

    async def refine_jd_node(state: PipelineState):
        emit(1, total_steps(state), "Refining job description...")
        refined = await refine_job_description(state["job_description"], config)
        return {"refined_jd": refined or state["job_description"]}

    async def summary_node(state: PipelineState):
        emit(2, total_steps(state), "Generating professional summary...")
        resume = ResumeSnapshot(**state["resume"])
        summary = await generate_summary(resume, state["refined_jd"], config)
        return {"summary": summary}

    async def tailor_node(state: PipelineState):
        experiences = state["resume"]["work_experience"]
        index = state["next_index"]
        experience = WorkExperience(**experiences[index])
        emit(
            3 + index,
            total_steps(state),
            f"Tailoring experience {index + 1} of {len(experiences)}: {experience.position}...",
        )
        result = await tailor_experience(experience, state["refined_jd"], config)
        tailored = experience.model_copy(
            update={
                "description": result.description,
                "key_achievements": result.achievements,
                "tech_stack": result.tech_stack if result.tech_stack is not None else experience.tech_stack,
            }
        )
        return {
            "next_index": index + 1,
            "work_experiences": state["work_experiences"] + [tailored.model_dump()],
        }

    def has_more_experiences(state: PipelineState):
        return "tailor" if state["next_index"] < len(state["resume"]["work_experience"]) else "done"

    workflow = StateGraph(PipelineState)
    workflow.add_node("refine_jd", refine_jd_node)
    workflow.add_node("write_summary", summary_node)
    workflow.add_node("tailor", tailor_node)

    workflow.set_entry_point("refine_jd")
    workflow.add_edge("refine_jd", "write_summary")
    workflow.add_conditional_edges("write_summary", has_more_experiences, {"tailor": "tailor", "done": END})
    workflow.add_conditional_edges("tailor", has_more_experiences, {"tailor": "tailor", "done": END})

    return workflow.compile(), emit


async def run_generation_pipeline(
    resume: ResumeSnapshot,
    job_description: str,
    config: AgentConfig,
    on_progress: Optional[PipelineProgressCallback] = None,
) -> PipelineResult:
    """Refine the JD, write the summary and tailor every experience, sequentially."""
    app, emit = create_generation_pipeline(config, on_progress)
    total = 2 + len(resume.work_experience)
    final_state = await app.ainvoke(
        PipelineState(
            resume=resume.model_dump(),
            job_description=job_description,
            refined_jd="",
            summary="",
            next_index=0,
            work_experiences=[],
        ),
        config={"recursion_limit": total + 10},
    )

    emit(total, total, "AI optimization complete!", done=True)
    return PipelineResult(
        refined_jd=final_state["refined_jd"],
        summary=final_state["summary"],
        work_experiences=[WorkExperience(**exp) for exp in final_state["work_experiences"]],
    )
