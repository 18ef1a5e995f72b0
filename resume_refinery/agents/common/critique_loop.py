"""
Bounded critique/revise loop shared by every task.

The reviewer sees the current candidate and answers APPROVED or a critique
carrying a corrected artifact. A correction replaces the candidate and goes
straight back to review. The loop ends on approval, on a correction that
changes nothing, or when the reviewer budget is spent; in the last case the
latest candidate is returned and a warning is logged.
"""

from typing import Callable, List, Optional, TypedDict

from langgraph.graph import END, StateGraph
from pydantic_ai import Agent

from .models import Approved, CritiqueOutcome, ProgressCallback
from .review import parse_review
from .stages import report_progress, run_stage


class CritiqueState(TypedDict):
    candidate: str
    rounds: int
    approved: bool
    finished: bool
    critiques: List[str]


def create_critique_workflow(
    reviewer: Agent,
    build_prompt: Callable[[str], str],
    max_rounds: int,
    normalize: Optional[Callable[[str], str]] = None,
    on_progress: Optional[ProgressCallback] = None,
    progress_message: str = "Reviewing draft...",
):
    async def review_node(state: CritiqueState):
        report_progress(on_progress, progress_message)
        candidate = state["candidate"]
        rounds = state["rounds"] + 1
        verdict = parse_review(await run_stage(reviewer, build_prompt(candidate)))

        if isinstance(verdict, Approved):
            return {"rounds": rounds, "approved": True, "finished": True}

        corrected = normalize(verdict.corrected) if normalize else verdict.corrected
        critiques = state["critiques"] + [verdict.reason]
        print(f"[REVIEW] Round {rounds}/{max_rounds} critique: {verdict.reason}")

        if not corrected.strip() or corrected.strip() == candidate.strip():
            print("[REVIEW] Correction did not change the candidate, ending review")
            return {"rounds": rounds, "approved": True, "finished": True, "critiques": critiques}

        exhausted = rounds >= max_rounds
        if exhausted:
            print(f"[REVIEW] Review budget of {max_rounds} rounds exhausted, keeping last correction")
        return {
            "candidate": corrected,
            "rounds": rounds,
            "approved": False,
            "finished": exhausted,
            "critiques": critiques,
        }

    def should_continue(state: CritiqueState):
        return "done" if state["finished"] else "review"

    workflow = StateGraph(CritiqueState)
    workflow.add_node("review", review_node)
    workflow.set_entry_point("review")
    workflow.add_conditional_edges(
        "review",
        should_continue,
        {
            "review": "review",
            "done": END,
        },
    )
    return workflow.compile()


async def run_critique_loop(
    reviewer: Agent,
    candidate: str,
    build_prompt: Callable[[str], str],
    max_rounds: int,
    normalize: Optional[Callable[[str], str]] = None,
    on_progress: Optional[ProgressCallback] = None,
    progress_message: str = "Reviewing draft...",
) -> CritiqueOutcome:
    """Review `candidate` until approved or `max_rounds` reviewer calls have been made."""
    if max_rounds < 1:
        return CritiqueOutcome(candidate=candidate, approved=False, rounds=0)

    app = create_critique_workflow(reviewer, build_prompt, max_rounds, normalize, on_progress, progress_message)
    final_state = await app.ainvoke(
        CritiqueState(candidate=candidate, rounds=0, approved=False, finished=False, critiques=[]),
        config={"recursion_limit": max_rounds * 2 + 5},
    )
    return CritiqueOutcome(
        candidate=final_state["candidate"],
        approved=final_state["approved"],
        rounds=final_state["rounds"],
        critiques=final_state["critiques"],
    )
