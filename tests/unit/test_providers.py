"""Unit tests for the model provider adapter."""

import pytest
import requests
from pydantic_ai.models.google import GoogleModel
from pydantic_ai.models.openai import OpenAIChatModel

from resume_refinery import providers
from resume_refinery.agents.common.models import AgentConfig


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self.payload


@pytest.fixture
def fake_get(monkeypatch):
    """Replace requests.get and record every call."""
    calls = []

    def install(response):
        def get(url, headers=None, params=None, timeout=None):
            calls.append({"url": url, "headers": headers, "params": params, "timeout": timeout})
            if isinstance(response, Exception):
                raise response
            return response

        monkeypatch.setattr(providers.requests, "get", get)
        return calls

    return install


@pytest.mark.unit
def test_create_model_openai_compatible():
    """Test that a local endpoint gets an OpenAI-compatible chat model."""
    model = providers.create_model(AgentConfig(model="llama-3.1-8b-instruct", api_url="http://localhost:1234/v1"))

    assert isinstance(model, OpenAIChatModel)
    assert model.model_name == "llama-3.1-8b-instruct"


@pytest.mark.unit
def test_create_model_unknown_provider_uses_openai_client():
    """Test that unknown provider strings still build a model."""
    config = AgentConfig(provider_type="mystery-cloud", api_key="k", model="gpt-4o-mini")

    assert isinstance(providers.create_model(config), OpenAIChatModel)


@pytest.mark.unit
def test_create_model_gemini():
    """Test that Gemini configs get a Google model."""
    config = AgentConfig(provider_type="gemini", api_key="k", model="gemini-2.0-flash")

    model = providers.create_model(config)

    assert isinstance(model, GoogleModel)
    assert model.model_name == "gemini-2.0-flash"


@pytest.mark.unit
def test_get_provider_by_url():
    """Test preset lookup by base URL."""
    assert providers.get_provider_by_url("https://OpenRouter.ai/api/v1").name == "OpenRouter"
    assert providers.get_provider_by_url("http://localhost:1234/v1").requires_auth is False
    assert providers.get_provider_by_url("https://example.com/v1") is None


@pytest.mark.unit
async def test_list_models_without_url_skips_network(fake_get):
    """Test that no endpoint means no request and no models."""
    calls = fake_get(FakeResponse({"data": []}))

    assert await providers.list_models(AgentConfig(model="m")) == []
    assert calls == []


@pytest.mark.unit
async def test_list_models_openrouter(fake_get):
    """Test OpenAI-style listing with OpenRouter headers."""
    calls = fake_get(FakeResponse({"data": [{"id": "openai/gpt-4o-mini"}, {"id": "anthropic/claude-3.5-sonnet"}]}))
    config = AgentConfig(model="m", api_key="secret", api_url="https://openrouter.ai/api/v1/")

    models = await providers.list_models(config)

    assert models == ["anthropic/claude-3.5-sonnet", "openai/gpt-4o-mini"]
    assert calls[0]["url"] == "https://openrouter.ai/api/v1/models"
    assert calls[0]["headers"]["Authorization"] == "Bearer secret"
    assert "HTTP-Referer" in calls[0]["headers"]
    assert calls[0]["timeout"] == providers.MODEL_LIST_TIMEOUT


@pytest.mark.unit
async def test_list_models_gemini(fake_get):
    """Test Gemini listing with the key as a query parameter."""
    calls = fake_get(FakeResponse({"models": [{"name": "models/gemini-2.0-flash"}, {"name": "models/gemini-1.5-pro"}]}))
    config = AgentConfig(
        provider_type="gemini",
        model="m",
        api_key="g-key",
        api_url="https://generativelanguage.googleapis.com/v1beta",
    )

    models = await providers.list_models(config)

    assert models == ["gemini-1.5-pro", "gemini-2.0-flash"]
    assert calls[0]["params"] == {"key": "g-key"}
    assert "Authorization" not in calls[0]["headers"]


@pytest.mark.unit
async def test_list_models_gemini_without_key(fake_get):
    """Test that Gemini listing needs a key."""
    calls = fake_get(FakeResponse({"models": []}))
    config = AgentConfig(model="m", api_url="https://generativelanguage.googleapis.com/v1beta")

    assert await providers.list_models(config) == []
    assert calls == []


@pytest.mark.unit
async def test_list_models_failures_return_empty(fake_get):
    """Test that connection and HTTP errors yield an empty list."""
    config = AgentConfig(model="m", api_url="http://localhost:1234/v1")

    fake_get(requests.ConnectionError("refused"))
    assert await providers.list_models(config) == []

    fake_get(FakeResponse({}, status_code=401))
    assert await providers.list_models(config) == []
