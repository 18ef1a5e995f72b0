"""Integration tests for the sequential generation pipeline."""

import pytest

from resume_refinery.agents.pipeline.workflow import run_generation_pipeline

REFINED_JD = """# position-title
- Senior Backend Engineer

# core-responsibilities
- Design Python microservices

# desired-qualifications
- Mentoring experience

# required-skills
- Python
- FastAPI"""

SUMMARY = (
    "Backend Engineer with 10+ years building Python services. Specializing in APIs, caching, and data. "
    "Proven track record in migrations, performance, and automation. "
    "Expert-level implementation of FastAPI and Redis, with a focus on reliability."
)


def _pipeline_script():
    return {
        "Professional JD Refiner": [REFINED_JD],
        "JD Quality Critic": ["APPROVED"],
        "Resume Strategy Analyst": ["Pillars: APIs, caching, data."],
        "Master Professional Resume Writer": [SUMMARY],
        "Resume Quality Auditor": ["APPROVED"],
        "Job-Experience Alignment Analyst": ["Good alignment."],
        "specializing in truthful optimization": ["Rewritten role description that stays truthful to the original."],
        "JD Keyword Extraction Specialist": [{"missingKeywords": [], "criticalKeywords": [], "niceToHaveKeywords": []}],
        "Resume Achievement Optimizer": ["Achievement [0]: Automated weekly reporting with Python scripts"],
        "Achievement Integrity Auditor": ["APPROVED"],
        "Tech Stack ATS Alignment Specialist": [{"techStack": [], "rationale": "No changes."}],
        "Tech Stack Alignment Auditor": ["APPROVED"],
        "Resume Fact-Checking Auditor": ["APPROVED"],
        "JD-Resume Alignment Evaluator": ["APPROVED"],
    }


@pytest.mark.integration
async def test_pipeline_runs_every_task_in_order(scripted_llm, config, resume, job_description):
    """Test step numbering, the refined JD hand-off and per-experience results."""
    llm = scripted_llm(_pipeline_script())
    events = []

    result = await run_generation_pipeline(resume, job_description, config, events.append)

    assert [(e.current_step, e.total_steps, e.message, e.done) for e in events] == [
        (1, 4, "Refining job description...", False),
        (2, 4, "Generating professional summary...", False),
        (3, 4, "Tailoring experience 1 of 2: Software Engineer...", False),
        (4, 4, "Tailoring experience 2 of 2: Junior Developer...", False),
        (4, 4, "AI optimization complete!", True),
    ]
    assert result.refined_jd == REFINED_JD
    assert result.summary == SUMMARY
    assert REFINED_JD in llm.prompts("Resume Strategy Analyst")[0]
    assert REFINED_JD in llm.prompts("Job-Experience Alignment Analyst")[0]

    first, second = result.work_experiences
    # One rewritten line for two originals falls back to the originals
    assert first.key_achievements == resume.work_experience[0].key_achievements
    assert first.tech_stack == ["Python", "Flask", "Redis"]
    assert second.key_achievements == ["Automated weekly reporting with Python scripts"]
    assert second.description == "Rewritten role description that stays truthful to the original."
    assert second.position == "Junior Developer"
    assert second.start_year == 2016


@pytest.mark.integration
async def test_pipeline_without_experiences(scripted_llm, config, resume, job_description):
    """Test that a resume with no work history stops after the summary."""
    scripted_llm(_pipeline_script())
    events = []
    empty = resume.model_copy(update={"work_experience": []})

    result = await run_generation_pipeline(empty, job_description, config, events.append)

    assert result.work_experiences == []
    assert [e.current_step for e in events] == [1, 2, 2]
    assert events[-1].done is True


@pytest.mark.integration
async def test_pipeline_result_serializes_with_aliases(scripted_llm, config, resume, job_description):
    """Test the camelCase payload returned to clients."""
    scripted_llm(_pipeline_script())

    result = await run_generation_pipeline(resume, job_description, config)
    payload = result.model_dump(by_alias=True)

    assert set(payload) == {"refinedJD", "summary", "workExperiences"}
    assert payload["workExperiences"][0]["keyAchievements"] == resume.work_experience[0].key_achievements
