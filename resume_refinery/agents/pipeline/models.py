"""
Models for the full AI generation pipeline.
"""

from typing import Callable, List

from pydantic import BaseModel, ConfigDict, Field

from ..common.models import WorkExperience


class PipelineProgress(BaseModel):
    """
    Coarse progress for a pipeline run, one event per task.

    Attributes:
        current_step (int): 1-based index of the task being run.
        total_steps (int): JD refinement + summary + one step per work experience.
        message (str): Human readable status.
        done (bool): True only on the final event.
    """
    model_config = ConfigDict(populate_by_name=True)

    current_step: int = Field(alias="currentStep")
    total_steps: int = Field(alias="totalSteps")
    message: str
    done: bool = False


PipelineProgressCallback = Callable[[PipelineProgress], None]


class PipelineResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    refined_jd: str = Field(alias="refinedJD")
    summary: str
    work_experiences: List[WorkExperience] = Field(default_factory=list, alias="workExperiences")
