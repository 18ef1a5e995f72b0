"""
Shared models for the refinement agents

Defines the provider configuration handed to every task, the progress events
reported back to callers, validator results, reviewer verdicts and the
resume fragments the tasks consume.
"""

import os
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

load_dotenv()


class ProviderType(str, Enum):
    """Model provider families. Anything that is not Gemini speaks the OpenAI chat API."""
    OPENAI_COMPATIBLE = "openai-compatible"
    GEMINI = "gemini"

    @classmethod
    def parse(cls, value: Optional[Union[str, "ProviderType"]]) -> "ProviderType":
        if isinstance(value, ProviderType):
            return value
        normalized = (value or "").strip().lower()
        if normalized == cls.GEMINI.value:
            return cls.GEMINI
        if normalized and normalized != cls.OPENAI_COMPATIBLE.value:
            print(f"[PROVIDER] Unknown provider type '{value}', using {cls.OPENAI_COMPATIBLE.value}")
        return cls.OPENAI_COMPATIBLE


class AgentConfig(BaseModel):
    """
    Provider settings for one pipeline run.

    Attributes:
        provider_type (ProviderType): Which client family to construct.
        api_key (str): Provider key. May be empty for local endpoints.
        api_url (str): Base URL of the provider API. Empty means the provider default.
        model (str): Model identifier sent with every request.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    provider_type: ProviderType = Field(default=ProviderType.OPENAI_COMPATIBLE, alias="providerType")
    api_key: str = Field(default="", alias="apiKey")
    api_url: str = Field(default="", alias="apiUrl")
    model: str

    @field_validator("provider_type", mode="before")
    @classmethod
    def _parse_provider(cls, value):
        return ProviderType.parse(value)

    @classmethod
    def from_env(cls) -> "AgentConfig":
        """Build a config from REFINERY_* environment variables."""
        return cls(
            provider_type=os.getenv("REFINERY_PROVIDER", ProviderType.OPENAI_COMPATIBLE.value),
            api_key=os.getenv("REFINERY_API_KEY", ""),
            api_url=os.getenv("REFINERY_API_URL", ""),
            model=os.getenv("REFINERY_MODEL", "gpt-4o-mini"),
        )


class ProgressEvent(BaseModel):
    content: str
    done: bool = False


ProgressCallback = Callable[[ProgressEvent], None]


class ValidationResult(BaseModel):
    valid: bool
    issues: List[str] = Field(default_factory=list)


class JsonCheckResult(BaseModel):
    valid: bool
    parsed: Optional[Any] = None
    error: Optional[str] = None


class Approved(BaseModel):
    """Reviewer accepted the candidate. `implicit` marks review text that could not be parsed."""
    implicit: bool = False
    note: str = ""


class Critique(BaseModel):
    """Reviewer rejected the candidate and supplied a replacement."""
    reason: str
    corrected: str


ReviewVerdict = Union[Approved, Critique]


class CritiqueOutcome(BaseModel):
    candidate: str
    approved: bool
    rounds: int
    critiques: List[str] = Field(default_factory=list)


class WorkExperience(BaseModel):
    """
    A single work experience entry as the tailoring tasks see it.

    Attributes:
        position (str): Job title held.
        organization (str): Employer name.
        description (str): Free-text role description.
        key_achievements (List[str]): Achievement bullets in display order.
        tech_stack (List[str]): Technologies used in the role.
        start_year (Optional[int]): Year the role started, if known.
    """
    model_config = ConfigDict(populate_by_name=True)

    position: str = ""
    organization: str = ""
    description: str = ""
    key_achievements: List[str] = Field(default_factory=list, alias="keyAchievements")
    tech_stack: List[str] = Field(default_factory=list, alias="techStack")
    start_year: Optional[int] = Field(default=None, alias="startYear")


class SkillGroup(BaseModel):
    title: str
    skills: List[str] = Field(default_factory=list)


class ResumeSnapshot(BaseModel):
    """The resume fragments the text generation tasks read."""
    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    summary: str = ""
    work_experience: List[WorkExperience] = Field(default_factory=list, alias="workExperience")
    skills: List[SkillGroup] = Field(default_factory=list)

    def all_skills(self) -> List[str]:
        return [skill for group in self.skills for skill in group.skills]

    def all_technologies(self) -> List[str]:
        return [tech for exp in self.work_experience for tech in exp.tech_stack]

    def skill_categories(self) -> Dict[str, List[str]]:
        return {group.title: list(group.skills) for group in self.skills}
