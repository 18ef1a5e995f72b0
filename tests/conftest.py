"""Shared fixtures: a scripted fake provider for driving workflows without network calls."""

import pytest
from pydantic_ai.messages import (
    ModelRequest,
    ModelResponse,
    SystemPromptPart,
    TextPart,
    ToolCallPart,
    UserPromptPart,
)
from pydantic_ai.models.function import AgentInfo, FunctionModel

from resume_refinery import providers
from resume_refinery.agents.common.models import AgentConfig, ResumeSnapshot


class ScriptedLLM:
    """
    Answers every agent call from a script keyed by a substring of the agent's system prompt.

    Each script value is a list of replies consumed in order; the last reply repeats
    once the list runs out. A str reply becomes plain text, a dict reply becomes a
    call to the agent's output tool, and an Exception reply is raised.
    """

    def __init__(self, script):
        self.script = {key: list(replies) for key, replies in script.items()}
        self.calls = []

    def __call__(self, messages, info: AgentInfo) -> ModelResponse:
        system = _system_prompt(messages)
        for key, replies in self.script.items():
            if key in system:
                self.calls.append((key, _last_user_prompt(messages)))
                reply = replies.pop(0) if len(replies) > 1 else replies[0]
                if isinstance(reply, Exception):
                    raise reply
                if isinstance(reply, dict):
                    return ModelResponse(parts=[ToolCallPart(info.output_tools[0].name, reply)])
                return ModelResponse(parts=[TextPart(reply)])
        raise AssertionError(f"No scripted reply for system prompt: {system[:80]!r}")

    def count(self, key: str) -> int:
        return sum(1 for called, _ in self.calls if called == key)

    def prompts(self, key: str):
        return [prompt for called, prompt in self.calls if called == key]


def _system_prompt(messages) -> str:
    for message in messages:
        if isinstance(message, ModelRequest):
            for part in message.parts:
                if isinstance(part, SystemPromptPart):
                    return part.content
    return ""


def _last_user_prompt(messages) -> str:
    for message in reversed(messages):
        if isinstance(message, ModelRequest):
            for part in message.parts:
                if isinstance(part, UserPromptPart) and isinstance(part.content, str):
                    return part.content
    return ""


@pytest.fixture
def config():
    return AgentConfig(model="test-model")


@pytest.fixture
def scripted_llm(monkeypatch):
    """Install a ScriptedLLM as the model behind every agent created during the test."""

    def install(script):
        llm = ScriptedLLM(script)
        monkeypatch.setattr(providers, "create_model", lambda config: FunctionModel(llm))
        return llm

    return install


@pytest.fixture
def progress():
    """A list that doubles as a progress callback through its append method."""
    return []


@pytest.fixture
def resume():
    return ResumeSnapshot(
        name="Jordan Lee",
        summary="Backend engineer focused on APIs.",
        work_experience=[
            {
                "position": "Software Engineer",
                "organization": "Acme Corp",
                "description": "Built and maintained internal services for order processing and billing.",
                "keyAchievements": [
                    "Reduced API latency by 40% by adding Redis caching",
                    "Migrated the billing service from Flask to FastAPI",
                ],
                "techStack": ["Python", "Flask", "Redis"],
                "startYear": 2019,
            },
            {
                "position": "Junior Developer",
                "organization": "Beta Labs",
                "description": "Wrote data import scripts and reporting dashboards.",
                "keyAchievements": ["Automated weekly reports with Python scripts"],
                "techStack": ["Python", "PostgreSQL"],
                "startYear": 2016,
            },
        ],
        skills=[
            {"title": "Languages", "skills": ["Python", "SQL"]},
            {"title": "Frameworks", "skills": ["Flask", "FastAPI"]},
            {"title": "Data", "skills": ["Redis", "PostgreSQL"]},
        ],
    )


JOB_DESCRIPTION = (
    "Senior Backend Engineer. Design Python microservices with FastAPI, "
    "operate Redis and PostgreSQL, and mentor engineers. Kubernetes is a plus."
)


@pytest.fixture
def job_description():
    return JOB_DESCRIPTION
