"""Integration tests for the bounded critique/revise loop."""

import pytest

from resume_refinery import providers
from resume_refinery.agents.common.critique_loop import run_critique_loop
from resume_refinery.agents.common.stages import build_agent

REVIEWER = "You are a test reviewer."


def _reviewer(config):
    return build_agent(providers.create_model(config), "test-reviewer", REVIEWER)


def _prompt(candidate):
    return f"Review this:\n{candidate}"


@pytest.mark.integration
async def test_approved_on_first_round(scripted_llm, config):
    """Test that APPROVED ends the loop with the current draft."""
    llm = scripted_llm({REVIEWER: ["APPROVED"]})

    outcome = await run_critique_loop(_reviewer(config), "Senior Backend Engineer", _prompt, 3)

    assert outcome.candidate == "Senior Backend Engineer"
    assert outcome.approved is True
    assert outcome.rounds == 1
    assert llm.count(REVIEWER) == 1


@pytest.mark.integration
async def test_critique_replaces_candidate_and_loops(scripted_llm, config):
    """Test that a correction becomes the next candidate under review."""
    llm = scripted_llm({
        REVIEWER: ['CRITIQUE: Missing index 3\n{"rankedIndices":[2,0,3,1]}', "APPROVED"],
    })

    outcome = await run_critique_loop(_reviewer(config), '{"rankedIndices":[2,0,1]}', _prompt, 3)

    assert outcome.candidate == '{"rankedIndices":[2,0,3,1]}'
    assert outcome.approved is True
    assert outcome.rounds == 2
    assert outcome.critiques == ["Missing index 3"]
    assert llm.prompts(REVIEWER)[1] == 'Review this:\n{"rankedIndices":[2,0,3,1]}'


@pytest.mark.integration
async def test_budget_exhaustion_returns_last_correction(scripted_llm, config):
    """Test that the loop stops after the reviewer budget."""
    llm = scripted_llm({
        REVIEWER: ["CRITIQUE: a\nv1", "CRITIQUE: b\nv2", "CRITIQUE: c\nv3", "CRITIQUE: d\nv4"],
    })

    outcome = await run_critique_loop(_reviewer(config), "v0", _prompt, 3)

    assert outcome.candidate == "v3"
    assert outcome.approved is False
    assert outcome.rounds == 3
    assert outcome.critiques == ["a", "b", "c"]
    assert llm.count(REVIEWER) == 3


@pytest.mark.integration
async def test_unchanged_correction_ends_review(scripted_llm, config):
    """Test that a correction equal to the candidate counts as approval."""
    llm = scripted_llm({REVIEWER: ["CRITIQUE: nitpick\nsame text"]})

    outcome = await run_critique_loop(_reviewer(config), "same text", _prompt, 3)

    assert outcome.approved is True
    assert outcome.candidate == "same text"
    assert llm.count(REVIEWER) == 1


@pytest.mark.integration
async def test_malformed_review_is_implicit_approval(scripted_llm, config):
    """Test the fail-open path for unparseable reviewer output."""
    scripted_llm({REVIEWER: ["Sure, this looks great overall!"]})

    outcome = await run_critique_loop(_reviewer(config), "draft", _prompt, 3)

    assert outcome.approved is True
    assert outcome.candidate == "draft"


@pytest.mark.integration
async def test_normalize_applies_to_corrections(scripted_llm, config):
    """Test that corrections pass through the normalizer before comparison."""
    scripted_llm({REVIEWER: ["CRITIQUE: too long\n  Lead Engineer  \nextra", "APPROVED"]})

    outcome = await run_critique_loop(
        _reviewer(config),
        "Lead Engineer of Everything",
        _prompt,
        3,
        normalize=lambda text: text.splitlines()[0].strip(),
    )

    assert outcome.candidate == "Lead Engineer"


@pytest.mark.integration
async def test_zero_budget_skips_review(scripted_llm, config):
    """Test that a zero budget makes no reviewer calls."""
    llm = scripted_llm({REVIEWER: ["APPROVED"]})

    outcome = await run_critique_loop(_reviewer(config), "draft", _prompt, 0)

    assert outcome.approved is False
    assert outcome.rounds == 0
    assert llm.calls == []


@pytest.mark.integration
async def test_progress_reported_each_round(scripted_llm, config, progress):
    """Test one progress event per reviewer round."""
    scripted_llm({REVIEWER: ["CRITIQUE: fix\nv1", "APPROVED"]})

    await run_critique_loop(
        _reviewer(config), "v0", _prompt, 3, on_progress=progress.append, progress_message="Checking..."
    )

    assert [event.content for event in progress] == ["Checking...", "Checking..."]


@pytest.mark.integration
async def test_provider_errors_propagate(scripted_llm, config):
    """Test that a transport failure escapes the loop."""
    scripted_llm({REVIEWER: [ConnectionError("connection refused")]})

    with pytest.raises(ConnectionError, match="connection refused"):
        await run_critique_loop(_reviewer(config), "draft", _prompt, 3)
