from typing import Any, Awaitable, Callable, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from .agents.achievements_sorting.workflow import sort_achievements
from .agents.common.models import AgentConfig, ResumeSnapshot, SkillGroup, WorkExperience
from .agents.cover_letter.workflow import generate_cover_letter
from .agents.experience_tailoring.workflow import tailor_experience
from .agents.jd_refinement.workflow import refine_job_description
from .agents.job_title.workflow import generate_job_title
from .agents.pipeline.workflow import run_generation_pipeline
from .agents.skills_extraction.workflow import extract_skills
from .agents.skills_sorting.workflow import sort_skills
from .agents.summary.workflow import generate_summary
from .agents.tech_stack_sorting.workflow import sort_tech_stack
from .providers import list_models

app = FastAPI(
    title="Resume Refinery API",
    description="API to tailor resume content to a job description using multi-agent LLM pipelines.",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


class TaskRequest(BaseModel):
    job_description: str
    config: Optional[AgentConfig] = None


class ResumeTaskRequest(TaskRequest):
    resume: ResumeSnapshot


class AchievementsSortRequest(TaskRequest):
    achievements: List[str]
    position: str = ""
    organization: str = ""


class SkillsSortRequest(TaskRequest):
    groups: List[SkillGroup]


class TechStackSortRequest(TaskRequest):
    technologies: List[str]


class ExperienceTailorRequest(TaskRequest):
    experience: WorkExperience


class ModelListRequest(BaseModel):
    config: AgentConfig


class TaskResponse(BaseModel):
    success: bool = True
    result: Any
    progress: List[dict] = Field(default_factory=list)


def _resolve_config(config: Optional[AgentConfig]) -> AgentConfig:
    return config or AgentConfig.from_env()


async def _run_task(name: str, run: Callable[[Callable], Awaitable]) -> TaskResponse:
    """Run one task, collecting its progress events. Provider failures become 502s."""
    events: List[dict] = []

    def on_progress(event):
        events.append(event.model_dump(by_alias=True))

    print(f"[API] Running {name}")
    try:
        result = await run(on_progress)
    except HTTPException:
        raise
    except Exception as e:
        print(f"[API] {name} failed: {e}")
        raise HTTPException(status_code=502, detail=f"{name} failed: {str(e)}")

    if isinstance(result, BaseModel):
        result = result.model_dump(by_alias=True)
    print(f"[API] {name} finished with {len(events)} progress events")
    return TaskResponse(result=result, progress=events)


@app.get("/")
def root():
    return {"status": "ok", "service": "resume-refinery"}


@app.post("/models")
async def get_models(data: ModelListRequest):
    models = await list_models(data.config)
    return {"models": models}


@app.post("/job-title")
async def job_title(data: ResumeTaskRequest):
    config = _resolve_config(data.config)
    return await _run_task(
        "job title generation",
        lambda on_progress: generate_job_title(data.resume, data.job_description, config, on_progress),
    )


@app.post("/summary")
async def summary(data: ResumeTaskRequest):
    config = _resolve_config(data.config)
    return await _run_task(
        "summary generation",
        lambda on_progress: generate_summary(data.resume, data.job_description, config, on_progress),
    )


@app.post("/achievements/sort")
async def achievements_sort(data: AchievementsSortRequest):
    config = _resolve_config(data.config)
    return await _run_task(
        "achievement sorting",
        lambda on_progress: sort_achievements(
            data.achievements, data.position, data.organization, data.job_description, config, on_progress
        ),
    )


@app.post("/skills/sort")
async def skills_sort(data: SkillsSortRequest):
    config = _resolve_config(data.config)
    return await _run_task(
        "skills sorting",
        lambda on_progress: sort_skills(data.groups, data.job_description, config, on_progress),
    )


@app.post("/tech-stack/sort")
async def tech_stack_sort(data: TechStackSortRequest):
    config = _resolve_config(data.config)
    return await _run_task(
        "tech stack sorting",
        lambda on_progress: sort_tech_stack(data.technologies, data.job_description, config, on_progress),
    )


@app.post("/experience/tailor")
async def experience_tailor(data: ExperienceTailorRequest):
    config = _resolve_config(data.config)
    return await _run_task(
        "experience tailoring",
        lambda on_progress: tailor_experience(data.experience, data.job_description, config, on_progress),
    )


@app.post("/cover-letter")
async def cover_letter(data: ResumeTaskRequest):
    config = _resolve_config(data.config)
    return await _run_task(
        "cover letter generation",
        lambda on_progress: generate_cover_letter(data.resume, data.job_description, config, on_progress),
    )


@app.post("/job-description/refine")
async def job_description_refine(data: TaskRequest):
    config = _resolve_config(data.config)
    return await _run_task(
        "job description refinement",
        lambda on_progress: refine_job_description(data.job_description, config, on_progress),
    )


@app.post("/skills/extract")
async def skills_extract(data: TaskRequest):
    config = _resolve_config(data.config)
    return await _run_task(
        "skills extraction",
        lambda on_progress: extract_skills(data.job_description, config, on_progress),
    )


@app.post("/pipeline")
async def pipeline(data: ResumeTaskRequest):
    config = _resolve_config(data.config)
    return await _run_task(
        "generation pipeline",
        lambda on_progress: run_generation_pipeline(data.resume, data.job_description, config, on_progress),
    )
