"""
Model provider adapter.

create_model maps an AgentConfig onto a pydantic-ai model: Gemini configs get
a GoogleModel, everything else an OpenAI-compatible chat model. Construction
never touches the network, so bad credentials only surface on the first
agent call. list_models backs the model picker by querying the provider's
/models endpoint.
"""

import asyncio
from typing import List, Optional

import requests
from google.genai import Client as GenAIClient
from google.genai.types import HttpOptions
from pydantic import BaseModel, Field
from pydantic_ai.models import Model
from pydantic_ai.models.google import GoogleModel
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.providers.google import GoogleProvider
from pydantic_ai.providers.openai import OpenAIProvider

from .agents.common.models import AgentConfig, ProviderType

GEMINI_PUBLIC_HOST = "generativelanguage.googleapis.com"
OPENROUTER_HOST = "openrouter.ai"
PLACEHOLDER_API_KEY = "not-needed"
MODEL_LIST_TIMEOUT = 10


class ProviderPreset(BaseModel):
    name: str
    base_url: str
    description: str
    requires_auth: bool = True
    common_models: List[str] = Field(default_factory=list)


PROVIDER_PRESETS = [
    ProviderPreset(
        name="OpenAI",
        base_url="https://api.openai.com/v1",
        description="Official OpenAI API",
        common_models=["gpt-4o", "gpt-4o-mini", "gpt-4-turbo", "gpt-4", "gpt-3.5-turbo"],
    ),
    ProviderPreset(
        name="OpenRouter",
        base_url="https://openrouter.ai/api/v1",
        description="Gateway to models from many vendors",
        common_models=[
            "google/gemini-2.0-flash-exp",
            "anthropic/claude-3.5-sonnet",
            "openai/gpt-4o-mini",
            "deepseek/deepseek-r1",
        ],
    ),
    ProviderPreset(
        name="xAI (Grok)",
        base_url="https://api.x.ai/v1",
        description="xAI Grok models",
        common_models=["grok-beta", "grok-vision-beta"],
    ),
    ProviderPreset(
        name="Local (LM Studio)",
        base_url="http://localhost:1234/v1",
        description="Local OpenAI-compatible server (LM Studio, Ollama, etc.)",
        requires_auth=False,
        common_models=["llama-3.1-8b-instruct", "llama-3.3-70b-instruct", "qwen2.5-7b-instruct"],
    ),
]


def get_provider_by_url(base_url: str) -> Optional[ProviderPreset]:
    for preset in PROVIDER_PRESETS:
        if preset.base_url.lower() == (base_url or "").lower():
            return preset
    return None


def _uses_custom_gemini_endpoint(api_url: str) -> bool:
    return bool(api_url) and GEMINI_PUBLIC_HOST not in api_url


def create_model(config: AgentConfig) -> Model:
    """Build the pydantic-ai model for `config`. Unknown provider types were already folded to OpenAI-compatible."""
    api_key = config.api_key or PLACEHOLDER_API_KEY

    if config.provider_type is ProviderType.GEMINI:
        http_options = HttpOptions(base_url=config.api_url) if _uses_custom_gemini_endpoint(config.api_url) else None
        client = GenAIClient(api_key=api_key, http_options=http_options)
        print(f"[PROVIDER] Gemini model {config.model}")
        return GoogleModel(config.model, provider=GoogleProvider(client=client))

    print(f"[PROVIDER] OpenAI-compatible model {config.model} at {config.api_url or 'default endpoint'}")
    provider = OpenAIProvider(base_url=config.api_url or None, api_key=api_key)
    return OpenAIChatModel(config.model, provider=provider)


def _fetch_models(config: AgentConfig) -> List[str]:
    base_url = config.api_url.rstrip("/")
    is_gemini = GEMINI_PUBLIC_HOST in base_url
    headers = {"Content-Type": "application/json"}
    params = {}

    if is_gemini:
        if not config.api_key:
            return []
        params["key"] = config.api_key
    else:
        if config.api_key:
            headers["Authorization"] = f"Bearer {config.api_key}"
        if OPENROUTER_HOST in base_url:
            headers["HTTP-Referer"] = "https://github.com/resume-refinery/resume-refinery"
            headers["X-Title"] = "Resume Refinery"

    response = requests.get(f"{base_url}/models", headers=headers, params=params, timeout=MODEL_LIST_TIMEOUT)
    response.raise_for_status()
    data = response.json()

    if is_gemini and isinstance(data, dict) and isinstance(data.get("models"), list):
        return sorted(model["name"].replace("models/", "", 1) for model in data["models"])
    if isinstance(data, dict) and isinstance(data.get("data"), list):
        return sorted(model["id"] for model in data["data"])
    if isinstance(data, list):
        return sorted(model["id"] for model in data)
    return []


async def list_models(config: AgentConfig) -> List[str]:
    """List model ids offered by the configured endpoint. Returns [] on any failure."""
    if not config.api_url:
        return []
    try:
        models = await asyncio.to_thread(_fetch_models, config)
    except (requests.RequestException, ValueError, KeyError, TypeError) as e:
        print(f"[PROVIDER] Model list fetch failed for {config.api_url}: {e}")
        return []
    print(f"[PROVIDER] {len(models)} models available at {config.api_url}")
    return models
