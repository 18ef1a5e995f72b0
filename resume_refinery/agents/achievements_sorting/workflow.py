from typing import List, Optional, TypedDict

from langgraph.graph import END, StateGraph

from ..common.critique_loop import run_critique_loop
from ..common.models import AgentConfig, ProgressCallback
from ..common.review import strip_code_fences
from ..common.stages import report_progress, run_stage, safe_parse_json
from ..common.tools import extract_ranked_indices, validate_ranked_indices
from .agent import SortingAgents, create_sorting_agents
from .models import AchievementsSortResult

MAX_REVIEW_ROUNDS = 3


class AchievementsSortingState(TypedDict):
    achievements: List[str]
    position: str
    organization: str
    job_description: str
    analysis: str
    ranking_json: str
    ranked_indices: List[int]


def _numbered(achievements: List[str]) -> str:
    return "\n".join(f"[{i}] {achievement}" for i, achievement in enumerate(achievements))


def finalize_ranking(ranking_json: str, count: int) -> List[int]:
    """Parse the final ranking, falling back to the original order when it is not a permutation."""
    parsed = safe_parse_json(strip_code_fences(ranking_json))
    indices = extract_ranked_indices(parsed)
    check = validate_ranked_indices(indices, count)
    if not check.valid:
        print(f"[WORKFLOW] Invalid achievement ranking ({'; '.join(check.issues)}), keeping original order")
        return list(range(count))
    return indices


def create_achievements_sorting_workflow(agents: SortingAgents, on_progress: Optional[ProgressCallback] = None):
    async def analyze_node(state: AchievementsSortingState):
        report_progress(on_progress, "Analyzing job requirements...")
        analysis = await run_stage(
            agents.analyst,
            f"Job Description:\n{state['job_description']}\n\n"
            f"Target Role: {state['position']} at {state['organization']}\n\n"
            "Analyze what makes achievements relevant for this role.",
        )
        return {"analysis": analysis}

    async def sort_node(state: AchievementsSortingState):
        report_progress(on_progress, "Sorting achievements by relevance...")
        ranking_json = await run_stage(
            agents.sorter,
            f"Analysis from previous agent:\n{state['analysis']}\n\n"
            f"Current achievements for {state['position']} at {state['organization']}:\n"
            f"{_numbered(state['achievements'])}\n\n"
            f"Job description:\n{state['job_description']}\n\n"
            "Generate the ranking JSON now:",
        )
        return {"ranking_json": ranking_json}

    async def review_node(state: AchievementsSortingState):
        def build_prompt(candidate: str) -> str:
            return (
                f"Generated Ranking JSON:\n{candidate}\n\n"
                f"Original Analysis:\n{state['analysis']}\n\n"
                f"Achievements:\n{_numbered(state['achievements'])}"
            )

        outcome = await run_critique_loop(
            agents.reviewer,
            state["ranking_json"],
            build_prompt,
            MAX_REVIEW_ROUNDS,
            on_progress=on_progress,
            progress_message="Validating sort results...",
        )
        return {"ranking_json": outcome.candidate}

    def finalize_node(state: AchievementsSortingState):
        return {"ranked_indices": finalize_ranking(state["ranking_json"], len(state["achievements"]))}

    workflow = StateGraph(AchievementsSortingState)
    workflow.add_node("analyze", analyze_node)
    workflow.add_node("sort", sort_node)
    workflow.add_node("review", review_node)
    workflow.add_node("finalize", finalize_node)

    workflow.set_entry_point("analyze")
    workflow.add_edge("analyze", "sort")
    workflow.add_edge("sort", "review")
    workflow.add_edge("review", "finalize")
    workflow.add_edge("finalize", END)

    return workflow.compile()


async def sort_achievements(
    achievements: List[str],
    position: str,
    organization: str,
    job_description: str,
    config: AgentConfig,
    on_progress: Optional[ProgressCallback] = None,
) -> AchievementsSortResult:
    """Rank `achievements` by relevance to the job description."""
    if len(achievements) < 2:
        report_progress(on_progress, "Achievements sorted!", done=True)
        return AchievementsSortResult(ranked_indices=list(range(len(achievements))))

    agents = create_sorting_agents(config, len(achievements))
    app = create_achievements_sorting_workflow(agents, on_progress)
    final_state = await app.ainvoke(
        AchievementsSortingState(
            achievements=list(achievements),
            position=position,
            organization=organization,
            job_description=job_description,
            analysis="",
            ranking_json="",
            ranked_indices=[],
        )
    )

    report_progress(on_progress, "Achievements sorted!", done=True)
    return AchievementsSortResult(ranked_indices=final_state["ranked_indices"])
